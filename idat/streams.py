import io
import logging
import os
import threading

from .exceptions import IdatIOError


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around path/bytes/file objects to
    uniform their properties: mainly we need a seek() that is always absolute
    and a read that fails loudly when the data is not all there.

    The lock serializes the seek-then-read sequences of who shares the stream.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj
        self.owned = False  # we close only what we opened
        self.lock = threading.RLock()

        init_method_name = 'init_%s' % self._type.__name__

        init_method = getattr(self, init_method_name, self.init_file)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.name)

    @property
    def name(self):
        return getattr(self.obj, 'name', self._type.__name__)

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'', self.obj)
        try:
            self.obj = open(self.obj, 'rb')
        except OSError as e:
            raise IdatIOError(f'cannot open \'{self.obj}\': {e}', cause=e) from e
        self.owned = True

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)
        self.owned = True

    init_bytearray = init_bytes
    init_memoryview = init_bytes

    def init_file(self):
        '''Any other object is a path-like or an already open binary file'''
        if isinstance(self.obj, os.PathLike):
            self.obj = os.fspath(self.obj)
            self.init_str()
            return

        for method in ('read', 'seek', 'tell'):
            if not hasattr(self.obj, method):
                raise TypeError(f'\'{self._type.__name__}\' is not a seekable binary source')

    def close(self):
        if self.owned and not self.obj.closed:
            logger.debug('closing %r', self)
            self.obj.close()

    def tell(self) -> int:
        try:
            return self.obj.tell()
        except (OSError, ValueError) as e:
            raise IdatIOError(f'cannot get the position of {self!r}: {e}', cause=e) from e

    def seek(self, offset: int) -> "Stream":
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        try:
            self.obj.seek(offset, io.SEEK_SET)
        except (OSError, ValueError) as e:
            raise IdatIOError(f'cannot seek to offset {offset} of {self!r}: {e}', cause=e) from e

        return self

    def read_exact(self, size: int) -> bytes:
        '''Read exactly "size" bytes from the actual position or fail.'''
        offset = self.tell()
        try:
            data = self.obj.read(size)
        except (OSError, ValueError) as e:
            raise IdatIOError(f'cannot read {size} bytes at offset {offset}: {e}', cause=e) from e

        if len(data) != size:
            raise IdatIOError(f'short read at offset {offset}: wanted {size} bytes, got {len(data)}')

        return data
