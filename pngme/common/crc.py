'''
We are implementing fields to handle CRC calculation.
'''
from zlib import crc32

from .. import fields
from ..exceptions import ChecksumException


def checksum(data: bytes) -> int:
    '''CRC-32 as used by PNG (and ISO-HDLC, zlib, ethernet): reflected polynomial 0xedb88320,
    register initialized to all 1's and inverted at the end.'''
    return crc32(data) & 0xffffffff


class CRCField(fields.StructField):
    """standard CRC methods with pre and post conditioning, as defined by ISO 3309 [ISO-3309]
    or ITU-T V.42 [ITU-V42]. The CRC polynomial employed is

      x^32+x^26+x^23+x^22+x^16+x^12+x^11+x^10+x^8+x^7+x^5+x^4+x^2+x+1

    The 32-bit CRC register is initialized to all 1's, and then the data from each byte is processed
    from the least significant bit (1) to the most significant bit (128). After all the data bytes are processed,
    the CRC register is inverted (its ones complement is taken). This value is transmitted (stored in the file)
    MSB first.

    See <https://www.w3.org/TR/PNG-Structure.html#CRC-algorithm>.

    The value is computed over the raw data of the sibling fields whose names are passed;
    when unpacking the stored value is checked against the computed one and a mismatch
    is never accepted.
    """

    def __init__(self, field_names, *args, **kwargs):
        super().__init__('I', *args, **kwargs)
        self.field_names = field_names

    def __repr__(self):
        return '<%s(0x%08x)>' % (self.__class__.__name__, self.value)

    def calculate(self):
        value = b''.join(getattr(self.father, field_name).raw for field_name in self.field_names)

        return checksum(value)

    def is_valid(self):
        return self.value == self.calculate()

    def _update_value(self):
        self.value = self.calculate()

    def unpack(self, stream):
        super().unpack(stream)

        expected = self.calculate()
        if self.value != expected:
            raise ChecksumException(
                f'stored CRC 0x{self.value:08x} doesn\'t match computed CRC 0x{expected:08x}',
                offset=self.offset,
            )
