import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="pngme",
    version="0.0.1",
    description="Hide messages inside PNG files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        'bitstring<5',
    ],
    extras_require={
        'test': [
            'pytest',
            'pillow',
        ],
    },
    entry_points={
        'console_scripts': [
            'pngme=pngme.cli:main',
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GPLv2 License",
        "Operating System :: OS Independent",
    ],
)
