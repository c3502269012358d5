class PngmeException(Exception):
    '''Base class to extend in order to throw exception in pngme.

    It carries the chain of the layers that caused the exception (the innermost
    first) and, when known, the offset into the stream where the failing field starts.
    '''

    def __init__(self, message='', chain=None, offset=None):
        self.message = message
        self.chain = chain if chain is not None else []
        self.offset = offset
        super().__init__(message)

    @property
    def path(self):
        return '.'.join(str(_) for _ in reversed(self.chain))

    def __str__(self):
        msg = self.message
        where = []
        if self.chain:
            where.append(self.path)
        if self.offset is not None:
            where.append(f'at offset 0x{self.offset:x}')

        if where:
            msg = f'{msg} ({" ".join(where)})' if msg else ' '.join(where)

        return msg


class UnpackException(PngmeException):
    pass


class TruncatedInputException(UnpackException):
    '''The stream ended before a field declared as long as this could be read.'''
    pass


class MagicException(UnpackException):
    pass


class ChecksumException(UnpackException):
    pass


class FormatException(PngmeException, ValueError):
    '''A value can't be represented by the format (wrong chunk type text, oversized data).'''
    pass


class EncodingException(PngmeException, UnicodeError):
    pass


class NotFoundException(PngmeException, KeyError):

    def __str__(self):
        # KeyError would quote the message
        return PngmeException.__str__(self)
