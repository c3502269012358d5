import struct

import pytest

import pngme.png
from pngme.common.crc import checksum
from pngme.exceptions import (
    ChecksumException,
    EncodingException,
    FormatException,
    MagicException,
    NotFoundException,
    TruncatedInputException,
)
from pngme.png import PNGChunk, PNGFile, PNGHeader, PNG_MAGIC
from pngme.png.tag import ChunkTag


MESSAGE = b'This is where your secret message will be!'
MESSAGE_CRC = 2882656334


def raw_chunk(tag, data, crc=None):
    crc = checksum(tag + data) if crc is None else crc
    return struct.pack('>I', len(data)) + tag + data + struct.pack('>I', crc)


def test_checksum():
    # the check value of CRC-32/ISO-HDLC
    assert checksum(b'123456789') == 0xcbf43926


def test_header():
    """Check header is right"""
    png_header = PNGHeader()

    assert png_header.magic.value == b'\x89PNG\x0d\x0a\x1a\x0a'


def test_new_chunk():
    chunk = PNGChunk.build(ChunkTag.from_text('RuSt'), MESSAGE)

    assert chunk.length.value == 42
    assert chunk.tag == 'RuSt'
    assert chunk.payload == MESSAGE
    assert chunk.checksum == MESSAGE_CRC
    assert chunk.size == 12 + 42


def test_chunk_from_bytes():
    data = raw_chunk(b'RuSt', MESSAGE, MESSAGE_CRC)

    chunk = PNGChunk(data)

    assert chunk.length.value == 42
    assert str(chunk.tag) == 'RuSt'
    assert chunk.data_as_text() == 'This is where your secret message will be!'
    assert chunk.checksum == MESSAGE_CRC
    assert chunk.pack() == data
    assert chunk == PNGChunk.build('RuSt', MESSAGE)


def test_chunk_is_immutable():
    """Changing type or data would leave a stale CRC: a new chunk must be built instead."""
    chunk = PNGChunk.build('RuSt', b'hello')

    with pytest.raises(AttributeError):
        chunk.data = b'other'

    with pytest.raises(AttributeError):
        chunk.type = 'ruSt'

    assert chunk.payload == b'hello'
    assert chunk.tag == 'RuSt'
    assert chunk.checksum == checksum(b'RuSthello')
    assert chunk.raw == chunk.pack()


def test_unpacked_chunk_is_immutable():
    chunk = PNGChunk(raw_chunk(b'RuSt', MESSAGE))

    with pytest.raises(AttributeError):
        chunk.data = b'other'

    assert chunk.raw == chunk.pack() == raw_chunk(b'RuSt', MESSAGE)


def test_chunk_invalid_crc():
    data = raw_chunk(b'RuSt', MESSAGE, MESSAGE_CRC - 1)

    with pytest.raises(ChecksumException) as excinfo:
        PNGChunk(data)

    assert excinfo.value.chain == ['crc']
    assert excinfo.value.offset == 8 + 42
    assert 'RuSt' in str(excinfo.value)


def test_chunk_single_bit_corruption():
    """Flipping any bit of type or data, holding the CRC, is always detected."""
    data = raw_chunk(b'ruSt', b'abc')

    for position in range(4, len(data) - 4):
        for bit in range(8):
            corrupted = bytearray(data)
            corrupted[position] ^= 1 << bit

            with pytest.raises(ChecksumException):
                PNGChunk(bytes(corrupted))


def test_chunk_truncated():
    data = raw_chunk(b'RuSt', MESSAGE)

    with pytest.raises(TruncatedInputException) as excinfo:
        PNGChunk(data[:-5])

    assert excinfo.value.chain == ['data']

    with pytest.raises(TruncatedInputException):
        PNGChunk(data[:-2])

    with pytest.raises(TruncatedInputException):
        PNGChunk(b'\x00\x00')


def test_chunk_empty_data():
    chunk = PNGChunk.build('IEND', b'')

    assert chunk.pack() == b'\x00\x00\x00\x00IEND\xae\x42\x60\x82'
    assert PNGChunk(chunk.pack()) == chunk


def test_chunk_too_big(monkeypatch):
    monkeypatch.setattr(pngme.png, 'MAX_CHUNK_LENGTH', 3)

    with pytest.raises(FormatException):
        PNGChunk.build('RuSt', b'1234')


def test_chunk_invalid_type_text():
    with pytest.raises(FormatException):
        PNGChunk.build('Ru5t', b'')


def test_chunk_data_not_text():
    chunk = PNGChunk.build('RuSt', b'\xff\xfe\x00')

    with pytest.raises(EncodingException) as excinfo:
        chunk.data_as_text()

    assert isinstance(excinfo.value, UnicodeError)
    assert 'RuSt' in str(excinfo.value)


def test_chunk_string():
    chunk = PNGChunk.build('RuSt', MESSAGE)

    assert str(chunk) == (
        'Chunk {\n'
        '    Length: 42\n'
        '    Type: RuSt\n'
        '    Data: 42 bytes\n'
        f'    CRC: {MESSAGE_CRC}\n'
        '}'
    )


def test_empty_png():
    png = PNGFile()

    assert len(png.chunks) == 0
    assert png.pack() == PNG_MAGIC
    assert len(PNGFile(PNG_MAGIC).chunks) == 0


def test_png_file(png_bytes):
    """Check unpacking a PNG file made by Pillow."""
    png = PNGFile(png_bytes)

    assert png.chunks[0].tag == 'IHDR'
    assert png.chunks[0].tag.is_critical
    assert png.chunks[-1].tag == 'IEND'
    assert all(chunk.crc.is_valid() for chunk in png.chunks)

    assert png.pack() == png_bytes
    assert PNGFile(png.pack()) == png


def test_png_from_path(png_path, png_bytes):
    assert PNGFile(png_path).pack() == png_bytes


def test_append_lookup_remove():
    png = PNGFile()
    chunk = PNGChunk.build('TEST', bytes([1, 2, 3]))

    png.append_chunk(chunk)

    assert png.chunk_by_type('TEST') is chunk
    assert png.chunk_by_type(ChunkTag.from_text('TEST')) is chunk
    assert png.chunk_by_type('test') is None

    assert png.remove_chunk('TEST') is chunk
    assert png.chunk_by_type('TEST') is None
    assert len(png.chunks) == 0


def test_remove_missing():
    with pytest.raises(NotFoundException) as excinfo:
        PNGFile().remove_chunk('TEST')

    assert isinstance(excinfo.value, KeyError)
    assert 'TEST' in str(excinfo.value)


def test_first_match(png_bytes):
    png = PNGFile(png_bytes)
    first = PNGChunk.build('ruSt', b'first')
    second = PNGChunk.build('ruSt', b'second')
    png.append_chunk(first)
    png.append_chunk(second)

    n_chunks = len(png.chunks)

    assert png.chunk_by_type('ruSt') is first
    assert png.remove_chunk('ruSt') is first
    assert png.chunk_by_type('ruSt') is second
    assert len(png.chunks) == n_chunks - 1
    assert png.chunks[-1] is second


def test_remove_keeps_order():
    png = PNGFile.from_chunks([
        PNGChunk.build(tag, b'')
        for tag in ('IHDR', 'ruSt', 'IDAT', 'IEND')
    ])

    png.remove_chunk('ruSt')

    assert [str(_.tag) for _ in png.chunks] == ['IHDR', 'IDAT', 'IEND']


def test_round_trip():
    png = PNGFile.from_chunks([
        PNGChunk.build('IHDR', b'\x00' * 13),
        PNGChunk.build('ruSt', b'hello'),
        PNGChunk.build('IEND', b''),
    ])

    data = png.pack()
    reparsed = PNGFile(data)

    assert reparsed == png
    assert [chunk.tag for chunk in reparsed.chunks] == ['IHDR', 'ruSt', 'IEND']
    assert reparsed.chunk_by_type('ruSt').data_as_text() == 'hello'
    assert reparsed.pack() == data


def test_no_iend_required():
    data = PNG_MAGIC + raw_chunk(b'ruSt', b'hello')

    png = PNGFile(data)

    assert len(png.chunks) == 1


def test_wrong_signature(png_bytes):
    with pytest.raises(MagicException) as excinfo:
        PNGFile(b'\x89PNX' + png_bytes[4:])

    assert excinfo.value.chain == ['magic', 'header']


def test_short_signature():
    with pytest.raises(TruncatedInputException):
        PNGFile(PNG_MAGIC[:5])


def test_truncated_chunk_header():
    with pytest.raises(TruncatedInputException) as excinfo:
        PNGFile(PNG_MAGIC + b'\x00\x00\x00')

    assert excinfo.value.path == 'chunks.0.length'
    assert excinfo.value.offset == 8


def test_residual_partial_chunk(png_bytes):
    with pytest.raises(TruncatedInputException) as excinfo:
        PNGFile(png_bytes + raw_chunk(b'ruSt', b'hello')[:10])

    assert excinfo.value.offset >= len(png_bytes)


def test_corrupted_chunk_in_file(png_bytes):
    png = PNGFile(png_bytes)
    idat = png.chunks[1]
    assert idat.tag == 'IDAT'

    corrupted = bytearray(png_bytes)
    corrupted[idat.data.offset] ^= 0xff

    with pytest.raises(ChecksumException) as excinfo:
        PNGFile(bytes(corrupted))

    assert excinfo.value.path == 'chunks.1.crc'
    assert 'IDAT' in str(excinfo.value)


def test_png_string():
    png = PNGFile.from_chunks([PNGChunk.build('ruSt', b'hello'), PNGChunk.build('IEND', b'')])

    assert str(png).count('Chunk {') == 2
