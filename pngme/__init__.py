"""
# pngme

Hide messages inside PNG files.

A PNG file is a signature followed by a sequence of chunks, each one made of
a length, a 4 letters type, the data and a CRC: a message can live into a chunk
with a type nobody else uses, decoders skip the ancillary chunks they don't know.

The formats are described with a small declarative layer (see core.py):

 1. unpack(): reading the binary data and build a high-level representation of that.
 2. pack(): encode the high-level representation into binary data.
"""
