'''
# Chunk type

Four bytes restricted to the ASCII letters A-Z and a-z: each letter carries one property
bit encoded in its case, that is, the bit 5 (value 32) of each byte

    byte 0: ancillary bit  - uppercase = critical, lowercase = ancillary
    byte 1: private bit    - uppercase = public, lowercase = private
    byte 2: reserved bit   - must be uppercase in this version of PNG
    byte 3: safe-to-copy   - uppercase = unsafe to copy, lowercase = safe to copy

See <http://www.libpng.org/pub/png/spec/1.2/PNG-Structure.html#Chunk-naming-conventions>.
'''
from functools import total_ordering

from bitstring import Bits

from ..fields import Field
from ..exceptions import FormatException


# MSB-first position of the case bit inside a byte
_CASE_BIT = 2


@total_ordering
class ChunkTag(object):
    '''Immutable value representing the type of a chunk.

    Building it from raw bytes (i.e. from data already in a file) doesn't validate
    the content, building it from text does.'''

    __slots__ = ('_raw',)

    def __init__(self, raw: bytes):
        raw = bytes(raw)
        if len(raw) != 4:
            raise FormatException(f'a chunk type is 4 bytes long, {len(raw)} passed ({raw!r})')

        object.__setattr__(self, '_raw', raw)

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'ChunkTag':
        return cls(raw)

    @classmethod
    def from_text(cls, text: str) -> 'ChunkTag':
        raw = text.encode('utf-8')

        if len(raw) != 4 or not (raw.isascii() and raw.isalpha()):
            raise FormatException(f'\'{text}\' is not a valid chunk type: it must be 4 ASCII letters')

        return cls(raw)

    @classmethod
    def coerce(cls, value) -> 'ChunkTag':
        '''Accept what a user would reasonably pass as a chunk type.'''
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.from_text(value)

        return cls.from_bytes(value)

    def __setattr__(self, name, value):
        raise AttributeError(f'{self.__class__.__name__} is immutable')

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (self.__class__, (self._raw,))

    @property
    def raw(self) -> bytes:
        return self._raw

    def __bytes__(self):
        return self._raw

    def __str__(self):
        return self._raw.decode('latin1')

    def __repr__(self):
        return f'<{self.__class__.__name__}({str(self)!r})>'

    def __eq__(self, other):
        if isinstance(other, ChunkTag):
            return self._raw == other._raw
        if isinstance(other, str):
            return str(self) == other
        if isinstance(other, (bytes, bytearray)):
            return self._raw == bytes(other)

        return NotImplemented

    def __lt__(self, other):
        if not isinstance(other, ChunkTag):
            return NotImplemented

        return self._raw < other._raw

    def __hash__(self):
        return hash(self._raw)

    def _is_uppercase(self, position):
        return not Bits(bytes=self._raw)[position * 8 + _CASE_BIT]

    @property
    def is_critical(self) -> bool:
        return self._is_uppercase(0)

    @property
    def is_public(self) -> bool:
        return self._is_uppercase(1)

    @property
    def is_reserved_bit_valid(self) -> bool:
        return self._is_uppercase(2)

    @property
    def is_safe_to_copy(self) -> bool:
        # here the uppercase letter has the opposite meaning
        return not self._is_uppercase(3)

    def is_valid(self) -> bool:
        return self._raw.isascii() and self._raw.isalpha() and self.is_reserved_bit_valid


class TagField(Field):
    '''Field containing a ChunkTag, it is always 4 bytes long.'''

    def __init__(self, **kw):
        kw.setdefault('default', ChunkTag(b'\x00' * 4))
        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.value)

    def _set_value(self, value) -> None:
        self._value = ChunkTag.coerce(value)

    def _get_size(self):
        return 4

    def _get_raw(self):
        return bytes(self.value)

    def unpack(self, stream):
        self.offset = stream.tell()
        self._value = ChunkTag.from_bytes(stream.read_exactly(4))
