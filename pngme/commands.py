'''
The use cases: hide a message into a PNG file as a chunk, read it back, remove it
and list what a file contains.

Each one loads the whole file in memory, works on its own copy and writes it back
in one go.
'''
import logging

from .png import PNGFile, PNGChunk
from .png.tag import ChunkTag


logger = logging.getLogger(__name__)


DEFAULT_OUTPUT_PATH = 'encoded.png'


def load(path) -> PNGFile:
    logger.debug(f'loading PNG from \'{path}\'')
    return PNGFile(path)


def save(png: PNGFile, path):
    data = png.pack()
    with open(path, 'wb') as f:
        f.write(data)

    logger.debug(f'written {len(data)} bytes to \'{path}\'')


def embed(source_path, tag: str, message: str, dest_path=None):
    '''Append a chunk with the message as data and save the result, by default
    into DEFAULT_OUTPUT_PATH. Returns the path written.'''
    png = load(source_path)

    chunk = PNGChunk.build(ChunkTag.from_text(tag), message.encode('utf-8'))
    png.append_chunk(chunk)

    dest_path = dest_path if dest_path is not None else DEFAULT_OUTPUT_PATH
    save(png, dest_path)

    logger.info(f'message hidden into chunk \'{tag}\' of \'{dest_path}\'')

    return dest_path


def extract(source_path, tag: str):
    '''Return the data of the first chunk with the given type as text, None if there is no such chunk.'''
    png = load(source_path)

    chunk = png.chunk_by_type(ChunkTag.from_text(tag))
    if chunk is None:
        logger.debug(f'no chunk \'{tag}\' in \'{source_path}\'')
        return None

    return chunk.data_as_text()


def delete(path, tag: str) -> PNGChunk:
    '''Remove the first chunk with the given type, overwriting the file.'''
    png = load(path)

    chunk = png.remove_chunk(ChunkTag.from_text(tag))
    save(png, path)

    logger.info(f'chunk \'{tag}\' removed from \'{path}\'')

    return chunk


def render(path) -> str:
    png = load(path)

    lines = []
    for idx, chunk in enumerate(png.chunks):
        lines.append(f'[{idx:02d}] {chunk.tag} length={len(chunk.payload)} crc=0x{chunk.checksum:08x}')

    return '\n'.join(lines)
