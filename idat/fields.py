"""
A Field here is the decoder of one wire format: it knows how many bytes
to take from the actual position of a stream and how to turn them into
a python value.

Fixed width numbers are little-endian struct formats; everything else is
built on top of them:

 - VARIABLE_STRING: 7-bit encoded length (as written by .NET BinaryWriter)
   followed by that many UTF-8 bytes
 - BYTE_BLOB: same framing, the bytes are returned as they are
 - RUN_INFO_BLOCK: int32 count followed by count entries of five strings
 - MID_BLOCK_BLOCK: int32 count followed by count int32
"""
import logging
import struct
from typing import Any, Dict, NamedTuple, Tuple

from .enum import WireFormat
from .exceptions import DecodeError, IdatException, UnsupportedWireFormat
from .registry import FieldDefinition
from .streams import Stream


logger = logging.getLogger(__name__)


class Field(object):
    """Base class to subclass from"""

    def __init__(self, name=None):
        self.name = name or self.__class__.__name__
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return '<%s>' % self.__class__.__name__

    def unpack(self, stream: Stream) -> Any:
        raise NotImplementedError(f'method {self.__class__.__name__}.unpack() not implemented')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module unpacking
    integers from bytes. The endianess is always little.
    """

    def __init__(self, format, **kw):
        self.format = format
        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.format)

    def get_format(self):
        return '<%s' % self.format

    @property
    def size(self) -> int:
        return struct.calcsize(self.get_format())

    def unpack(self, stream):
        raw = stream.read_exact(self.size)
        return struct.unpack(self.get_format(), raw)[0]


class VarIntField(Field):
    '''Unsigned integer in groups of 7 bits, least significant first: the high
    bit of each byte tells if another one follows.'''

    MAX_BYTES = 5  # enough for a 32 bit length

    def unpack(self, stream):
        result = 0
        for shift in range(0, 7 * self.MAX_BYTES, 7):
            byte = stream.read_exact(1)[0]
            result |= (byte & 0x7f) << shift
            if not byte & 0x80:
                return result

        raise DecodeError(f'variable length integer longer than {self.MAX_BYTES} bytes', chain=[self.name])


class BlobField(Field):
    """Represent a contiguous chunk of bytes prefixed by its length."""

    def __init__(self, **kw):
        super().__init__(**kw)
        self.length = VarIntField(name='length')

    def unpack(self, stream):
        return stream.read_exact(self.length.unpack(stream))


class StringField(BlobField):

    def __init__(self, encoding='utf-8', **kw):
        super().__init__(**kw)
        self.encoding = encoding

    def unpack(self, stream):
        raw = super().unpack(stream)
        try:
            return raw.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise DecodeError(f'string is not valid {self.encoding}: {raw!r}', chain=[self.name]) from e


class ArrayField(Field):
    '''Un/Pack an array of elements whose number is stored just before them.'''

    def __init__(self, element, n=None, **kw):
        super().__init__(**kw)
        self.element = element
        self.n = n if n is not None else StructField('i', name='count')

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.element!r})>'

    def unpack_count(self, stream) -> int:
        count = self.n.unpack(stream)
        if count < 0:
            raise DecodeError(f'negative element count {count}', chain=[self.name])

        return count

    def unpack_element(self, stream):
        return self.element.unpack(stream)

    def unpack(self, stream) -> Tuple[Any, ...]:
        count = self.unpack_count(stream)
        self.logger.debug('unpacking %d elements of %r', count, self.element)

        values = []
        for idx in range(count):
            try:
                values.append(self.unpack_element(stream))
            except IdatException as e:
                e.chain.append(f'{self.name}[{idx}]')
                raise

        return tuple(values)


class RunInfoEntry(NamedTuple):
    timestamp: str
    block_type: str
    block_pars: str
    block_code: str
    code_version: str


class RunInfoElementField(Field):

    def __init__(self, **kw):
        super().__init__(**kw)
        self.string = StringField()

    def unpack(self, stream):
        return RunInfoEntry(*[self.string.unpack(stream) for _ in RunInfoEntry._fields])


class RunInfoField(ArrayField):

    def __init__(self, **kw):
        super().__init__(RunInfoElementField(), **kw)


class MidBlockField(ArrayField):

    def __init__(self, **kw):
        super().__init__(StructField('i'), **kw)


FIELDS: Dict[WireFormat, Field] = {
    WireFormat.INT32:           StructField('i', name='int32'),
    WireFormat.INT16:           StructField('H', name='int16'),
    WireFormat.INT64:           StructField('q', name='int64'),
    WireFormat.VARIABLE_STRING: StringField(name='string'),
    WireFormat.BYTE_BLOB:       BlobField(name='blob'),
    WireFormat.RUN_INFO_BLOCK:  RunInfoField(name='run_info'),
    WireFormat.MID_BLOCK_BLOCK: MidBlockField(name='mid_block'),
}


def field_for(definition: FieldDefinition) -> Field:
    '''Returns the decoder for the field described by the definition.'''
    fmt = definition.wire_format
    if fmt is None:
        raise UnsupportedWireFormat(definition.kind, code=definition.code)

    return FIELDS[fmt]


def decode_at(stream: Stream, definition: FieldDefinition) -> Any:
    '''Decode one value of the field starting at its offset.

    The stream is repositioned only if it's not already there, afterwards
    it's left right after the bytes consumed.'''
    field = field_for(definition)

    if stream.tell() != definition.offset:
        logger.debug('seeking to 0x%x for %r', definition.offset, definition)
        stream.seek(definition.offset)

    try:
        return field.unpack(stream)
    except IdatException as e:
        e.chain.append(definition.kind.name)
        raise
