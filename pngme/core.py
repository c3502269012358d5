"""
Core module for the abstraction of a file format

A format is described declaring a subclass of Structure whose attributes are
the fields (or other structures) in the order they appear in the binary data

    class Simple(Structure):
        length = fields.StructField('I')
        data   = fields.StringField(Dependency('.length'))

Two basic operations are defined for it and its subcomponents:

 1. unpack(): reading the binary data and build a high-level representation of that.
 2. pack(): encode the high-level representation into binary data.

to these we add one more, relayout(), that sets offset and size of the subcomponents
so that they are coherent before packing.
"""
import logging
from typing import Tuple, List, Dict

from .fields import Field
from .meta import MetaStructure
from .streams import Stream
from .exceptions import PngmeException


logger = logging.getLogger(__name__)


class Structure(Field, metaclass=MetaStructure):
    """
    Together with Field is the main class that defines a format: its main attributes
    are offset and size that identify a Structure.

    A Structure can contain sub-structures; when created with a source (bytes,
    a path or a Stream) it unpacks itself from it.
    """

    def __init__(self, source=None, **kwargs):
        super().__init__(**kwargs)

        if source is not None:
            stream = source if isinstance(source, Stream) else Stream(source)
            logger.debug('unpacking \'%s\' from %r' % (self.__class__.__name__, stream))
            self.unpack(stream)
        else:
            self.relayout()

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented

        return self.raw == other.raw

    __hash__ = None

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_value(self) -> Dict[str, object]:
        return {name: field.value for name, field in self.get_fields()}

    def _get_size(self):
        '''the size MUST be derived from the subcomponents'''
        return sum(field.size for _, field in self.get_fields())

    def _get_raw(self):
        return b''.join(field.raw for _, field in self.get_fields())

    def relayout(self, offset=0):
        '''This method triggers the children to reset the offsets.

        In practice it's like packing() but it's only interested in the sizes.'''
        self.offset = offset

        size = 0
        for field_name, field_instance in self.get_fields():
            size += field_instance.relayout(offset=offset + size)

        return size

    def pack(self, stream=None, relayout=True):
        '''Encode the structure: each subcomponent is packed in order, updating
        the values depending on other fields (like checksums) along the way.'''
        if relayout:
            self.relayout()

        stream = Stream(b'') if stream is None else stream
        start = stream.tell()

        for field_name, field_instance in self.get_fields():
            logger.debug('packing %s.%s' % (self.__class__.__name__, field_name))
            field_instance.pack(stream=stream, relayout=False)

        return stream.getvalue()[start:]

    def unpack(self, stream):
        '''Take the binary data from the stream and build the representation
        given by the class this method is implemented.

        An exception raised by a field is propagated as it is, with the name of the field
        appended to its chain, so that the caller knows where the data is wrong.
        '''
        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            logger.debug('unpacking %s.%s at offset 0x%x' % (self.__class__.__name__, field_name, stream.tell()))

            try:
                field.unpack(stream)
            except PngmeException as e:
                e.chain.append(field_name)
                raise
