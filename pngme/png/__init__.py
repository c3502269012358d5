'''
# Portable Network Graphics

Format created to replace patent-emcumbered GIF files.

The specification is at <http://www.libpng.org/pub/png/spec/1.2/PNG-Contents.html>.

A file is a fixed signature followed by a sequence of chunks; here the data of
the chunks is kept opaque, we are only interested in the container so that
chunks can be looked up, added and removed while keeping the file coherent.
'''
import logging

from ..core import Structure
from .. import fields
from ..meta import Endianess
from ..properties import Dependency
from ..common import crc
from ..exceptions import (
    ChecksumException,
    EncodingException,
    FormatException,
    NotFoundException,
)
from .tag import ChunkTag, TagField


logger = logging.getLogger(__name__)


PNG_MAGIC = b'\x89\x50\x4e\x47\x0d\x0a\x1a\x0a'
MAX_CHUNK_LENGTH = 2**32 - 1


class PNGHeader(Structure):
    magic = fields.StringField(8, default=PNG_MAGIC, is_magic=True)


class PNGChunk(Structure):
    '''This is the main data structure of the format: the 4 fields represent
    a chunk into the file. Each field is intended big-endian.

    A chunk is defined as critical or ancillary depending on the case of the
    starting letter of the type field.

    The crc field is network-byte-order CRC-32 computed over the chunk type and chunk data, but not the length.

    # Critical chunks

     1. IHDR: contains image's width, height, bit depth, color type, compression method, filter method and interlace method
     2. PLTE: contains the palette data
     3. IDAT: contains the actual image data (compressed)
     4. IEND: is the terminator chunk
    '''
    length = fields.StructField('I', endianess=Endianess.BIG_ENDIAN)
    type   = TagField()
    data   = fields.StringField(Dependency('.length'))
    crc    = crc.CRCField(['type', 'data'], endianess=Endianess.NETWORK)

    _frozen = False

    @classmethod
    def build(cls, tag, data: bytes) -> 'PNGChunk':
        '''Create a new chunk with the given type and data, the length and the CRC
        are computed here.'''
        data = bytes(data)
        if len(data) > MAX_CHUNK_LENGTH:
            raise FormatException(f'chunk data can be at most {MAX_CHUNK_LENGTH} bytes, {len(data)} passed')

        chunk = cls()
        chunk.type = ChunkTag.coerce(tag)
        chunk.data = data
        chunk.crc.value = chunk.crc.calculate()
        chunk._frozen = True

        return chunk

    def __setattr__(self, name, value):
        # the CRC is computed once, a different type or data means a different chunk
        if self._frozen and name in self._meta.fields:
            raise AttributeError(f'chunk \'{self.tag}\' can\'t be modified, build a new one')

        super().__setattr__(name, value)

    def unpack(self, stream):
        try:
            super().unpack(stream)
        except ChecksumException as e:
            e.message = f'chunk \'{self.tag}\' is corrupted: {e.message}'
            raise

        self._frozen = True

    @property
    def tag(self) -> ChunkTag:
        return self.type.value

    @property
    def payload(self) -> bytes:
        return self.data.value

    @property
    def checksum(self) -> int:
        return self.crc.value

    def data_as_text(self) -> str:
        try:
            return self.payload.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncodingException(
                f'data of chunk \'{self.tag}\' is not valid UTF-8 text: {e.reason} at position {e.start}',
                offset=self.data.offset,
            ) from e

    def __str__(self):
        return (
            'Chunk {\n'
            f'    Length: {self.length.value}\n'
            f'    Type: {self.tag}\n'
            f'    Data: {len(self.payload)} bytes\n'
            f'    CRC: {self.checksum}\n'
            '}'
        )


class PNGFile(Structure):
    '''The container: the signature followed by all the chunks, in the order they
    appear. The IEND chunk is not enforced, the chunks are read until the data ends.

    Types don't need to be unique, lookup and removal act on the first match.'''
    header = PNGHeader()
    chunks = fields.ArrayField(PNGChunk())

    @classmethod
    def from_chunks(cls, chunks) -> 'PNGFile':
        png = cls()
        for chunk in chunks:
            png.append_chunk(chunk)

        return png

    def append_chunk(self, chunk: PNGChunk):
        logger.debug('appending chunk \'%s\' (%d bytes)' % (chunk.tag, len(chunk.payload)))
        self.chunks.append(chunk)

    def _index_of(self, tag):
        # ChunkTag compares to text and bytes too
        for idx, chunk in enumerate(self.chunks):
            if chunk.tag == tag:
                return idx

        return None

    def chunk_by_type(self, tag):
        '''Return the first chunk with the given type (text or ChunkTag), None otherwise.'''
        idx = self._index_of(tag)

        return self.chunks[idx] if idx is not None else None

    def remove_chunk(self, tag) -> PNGChunk:
        '''Remove and return the first chunk with the given type.'''
        idx = self._index_of(tag)

        if idx is None:
            raise NotFoundException(f'no chunk with type \'{tag}\'')

        logger.debug('removing chunk \'%s\' at index %d' % (tag, idx))

        return self.chunks.pop(idx)

    def __str__(self):
        return '\n'.join(str(chunk) for chunk in self.chunks)
