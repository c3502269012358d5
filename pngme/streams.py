import io
import os
import logging

from .exceptions import TruncatedInputException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file path to
    uniform its properties: the content is always kept in memory
    so that the structures can seek back and forth.

    A path is opened, read fully and closed straight away.'''
    def __init__(self, obj):
        self._type = type(obj)

        if isinstance(obj, (bytes, bytearray, memoryview)):
            self.obj = io.BytesIO(bytes(obj))
        elif isinstance(obj, (str, os.PathLike)):
            self.obj = io.BytesIO(self.read_path(obj))
        else:
            raise ValueError('\'%s\' is the wrong kind of object to use as stream' % obj.__class__.__name__)

    def __getattr__(self, name):
        if name == 'obj':
            raise AttributeError(name)
        return getattr(self.obj, name)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self._type.__name__}, offset=0x{self.tell():x}, size=0x{len(self):x})>'

    def __len__(self):
        with self.obj.getbuffer() as view:
            return view.nbytes

    @staticmethod
    def read_path(path):
        logger.debug('opening path \'%s\'' % path)
        with open(path, 'rb') as f:
            return f.read()

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

    def read_exactly(self, n):
        '''Read n bytes or fail: a short read means the data declared more
        than what is available.'''
        offset = self.tell()
        data = self.obj.read(n)

        if len(data) != n:
            raise TruncatedInputException(
                f'expected {n} bytes but only {len(data)} remain',
                offset=offset,
            )

        return data

    def read_all(self):
        return self.obj.read()

    def remaining(self):
        return len(self) - self.tell()

    def is_exhausted(self):
        return self.remaining() <= 0

    def write(self, data):
        return self.obj.write(data)
