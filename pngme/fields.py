"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable without need for relayouting.
"""
import logging
import struct

from .meta import FieldBase, Endianess
from .properties import Dependency
from .streams import Stream
from .exceptions import (
    PngmeException,
    FormatException,
    MagicException,
)


logger = logging.getLogger(__name__)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.LITTLE_ENDIAN, is_magic=False):
        super().__init__()
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.endianess = endianess
        self.is_magic = is_magic

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    def _get_size(self) -> int:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    def _set_raw(self, value: bytes) -> None:
        self.unpack(Stream(value))

    raw = property(
        fget=lambda self: self._get_raw(),
        fset=lambda self, value: self._set_raw(value),
    )

    def check_magic(self, value):
        if self.is_magic and value != self.default:
            raise MagicException(
                f'magic for field \'{self.name}\' doesn\'t correspond: found {value!r}, expected {self.default!r}',
                offset=self.offset,
            )

    def relayout(self, offset=0):
        self.offset = offset

        return self.size

    def _update_value(self):
        '''This is used to update the binary value before packing'''
        pass

    def pack(self, stream=None, relayout=True):
        '''Encode the field, writing it into the stream if one is passed.'''
        if relayout:
            self.relayout()

        self._update_value()
        raw = self.raw

        if stream is not None:
            stream.write(raw)

        return raw

    def unpack(self, stream):
        raise NotImplementedError(f"method {self.__class__.__name__}.unpack() not implemented")


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(0x%x)>' % (self.__class__.__name__, self.value)

    def get_format(self):
        return '%s%s' % (self.endianess.prefix, self.format)

    def _set_value(self, value) -> None:
        try:
            struct.pack(self.get_format(), value)
        except struct.error as e:
            raise FormatException(
                f'value {value!r} doesn\'t fit into field \'{self.name}\' ({self.get_format()}): {e}') from e

        self._value = value

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _get_raw(self) -> bytes:
        return struct.pack(self.get_format(), self.value)

    def unpack(self, stream):
        self.offset = stream.tell()
        raw = stream.read_exactly(self.size)

        value = struct.unpack(self.get_format(), raw)[0]
        self.check_magic(value)

        self._value = value


class StringField(Field):
    """Represent a contiguous chunk of bytes.

    The length can be fixed or a Dependency on another field: in the latter
    case setting the value writes back the new length."""

    def __init__(self, n=None, **kw):
        if n is None and kw.get('default') is None:
            raise ValueError("StringField must have 'n' or 'default' indicated!")

        self._length = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.length

    @property
    def length(self):
        if not isinstance(self._length, Dependency):
            return self._length

        # the prototypes are not attached to anything
        if self.father is None:
            return len(self._value) if hasattr(self, '_value') else 0

        return self._length.resolve(self)

    def value_from_default(self):
        return b'\x00' * self.length if self.default is None else self.default

    def _get_size(self):
        return len(self.value)

    def _set_value(self, value) -> None:
        value = bytes(value)
        length = len(value)

        if isinstance(self._length, Dependency):
            if self.father is not None:
                self._length.resolve_and_set(self, length)
        elif length != self._length:
            raise FormatException(
                f'you are trying to set a value with the wrong size (that is {self._length} bytes)')

        self._value = value

    def _get_raw(self):
        return self.value

    def unpack(self, stream):
        self.offset = stream.tell()
        value = stream.read_exactly(self.length)
        self.check_magic(value)

        self._value = value


class ArrayField(Field):
    '''Un/Pack an array of Structures.

    The elements are unpacked until the stream is exhausted.

    This class behaves like a list in python, at least for reading.
    '''

    def __init__(self, field_cls, **kw):
        self.field_cls = field_cls

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __iter__(self):
        return iter(self.value)

    def __len__(self):
        return len(self.value)

    def value_from_default(self):
        return []

    def _set_value(self, value):
        elements = list(value)
        for element in elements:
            element.father = self

        self._value = elements

    def _get_raw(self):
        return b''.join(element.raw for element in self.value)

    def _get_size(self):
        return sum(element.size for element in self.value)

    def relayout(self, offset=0):
        self.offset = offset
        size = 0
        for element in self.value:
            size += element.relayout(offset=offset + size)

        return size

    def pack(self, stream=None, relayout=True):
        if relayout:
            self.relayout()

        stream = Stream(b'') if stream is None else stream

        for element in self.value:
            element.pack(stream=stream, relayout=False)

        return self.raw

    def instance_element(self):
        return self.field_cls.create(father=self)  # pass the father so that we don't lose the hierarchy

    def unpack(self, stream):
        self.offset = stream.tell()
        self._value = []

        while not stream.is_exhausted():
            element = self.instance_element()
            offset = stream.tell()

            logger.debug('unpacking %s[%d] at offset 0x%x' % (self.name, len(self._value), offset))

            try:
                element.unpack(stream)
            except PngmeException as e:
                e.chain.append(len(self._value))
                if e.offset is None:
                    e.offset = offset
                raise

            self._value.append(element)

    def append(self, element):
        element.father = self
        self.value.append(element)

    def pop(self, index=-1):
        element = self.value.pop(index)
        element.father = None

        return element
