"""
Core module for the decoding of an IDAT file

The file starts with a header followed by a directory of the fields and
then by the data of each of them at the offset indicated by the directory

    .------------------------------------.
    | "IDAT"                  4 bytes    |
    | version                 u64        |
    | n                       u32        |
    | code[0]   offset[0]     u16  u64   |
    |  ...                               |
    | code[n-1] offset[n-1]   u16  u64   |
    '------------------------------------'
    [data of the fields]

The per-probe fields (ILLUMINA_ID, SD, MEAN, BEAD_COUNTS) are arrays with
as many elements as indicated by the SNP_COUNT field.
"""
import logging
import os
import struct
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from .enum import Compliant, FieldKind, IteratorPhase
from .exceptions import (
    DuplicateField,
    FieldNotIterable,
    IdatException,
    InvalidHeader,
    MissingField,
    UnknownFieldCode,
)
from .fields import StructField, decode_at, field_for
from .registry import FieldDefinition, is_iterable
from .streams import Stream


logger = logging.getLogger(__name__)

MAGIC = b'IDAT'


@dataclass(frozen=True)
class Header:
    version: int
    fields: Tuple[FieldDefinition, ...]


class DirectoryEntryField(StructField):
    '''u16 code followed by the u64 offset of its data'''

    def __init__(self, **kw):
        super().__init__('HQ', **kw)

    def unpack(self, stream):
        raw = stream.read_exact(self.size)
        code, offset = struct.unpack(self.get_format(), raw)
        return FieldDefinition.from_code(code, offset)


_VERSION = StructField('Q', name='version')
_COUNT = StructField('I', name='count')
_ENTRY = DirectoryEntryField(name='entry')
_ARRAY_LENGTH = StructField('I', name='array_length')


def check_magic(stream: Stream) -> None:
    raw = stream.read_exact(len(MAGIC))
    if raw == MAGIC:
        return

    try:
        actual = raw.decode('utf-8')
    except UnicodeDecodeError:
        actual = repr(raw)

    raise InvalidHeader(actual, raw=raw, chain=['magic'])


def parse_header(stream: Stream, compliant: Compliant = Compliant.NONE) -> Header:
    '''Validate the magic and read the directory.

    The stream must be positioned at the start of the file.'''
    check_magic(stream)

    version = _VERSION.unpack(stream)
    count = _COUNT.unpack(stream)
    logger.debug('version %d with %d fields', version, count)

    fields = []
    seen = set()
    for idx in range(count):
        try:
            definition = _ENTRY.unpack(stream)
        except IdatException as e:
            e.chain.append(f'directory[{idx}]')
            raise
        logger.debug('field %r', definition)

        if definition.kind is FieldKind.UNKNOWN:
            if compliant & Compliant.UNKNOWN:
                raise UnknownFieldCode(definition.code, chain=[f'directory[{idx}]'])
        elif definition.kind in seen:
            if compliant & Compliant.DUPLICATES:
                raise DuplicateField(definition.kind, chain=[f'directory[{idx}]'])
            logger.warning('field %s is repeated in the directory, the last one wins', definition.kind.name)

        seen.add(definition.kind)
        fields.append(definition)

    return Header(version=version, fields=tuple(fields))


class Reader(object):
    """
    An open IDAT file: it owns the stream, the directory and the number of
    elements of the per-probe fields.

    The source can be an open binary file object, raw bytes or a path; in the
    last two cases the reader closes what it opened when close() is called.
    """

    def __init__(self, source, compliant: Compliant = Compliant.NONE):
        self.stream = source if isinstance(source, Stream) else Stream(source)
        self.compliant = compliant
        self.logger = logging.getLogger(__name__)

        try:
            with self.stream.lock:
                self.logger.debug('unpacking header from %r', self.stream)
                self.stream.seek(0)
                self.header = parse_header(self.stream, compliant=compliant)
                self._lookup: Dict[FieldKind, FieldDefinition] = {
                    _.kind: _ for _ in self.header.fields if _.kind is not FieldKind.UNKNOWN
                }
                self.array_length = self._read_array_length()
        except Exception:
            self.stream.close()
            raise

    def __repr__(self):
        return '<%s(%s, version=%d, fields=%d, array_length=%d)>' % (
            self.__class__.__name__,
            self.stream.name,
            self.version,
            len(self.fields),
            self.array_length,
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self.stream.close()

    def _read_array_length(self) -> int:
        definition = self.field_definition(FieldKind.SNP_COUNT)

        with self.stream.lock:
            self.stream.seek(definition.offset)
            try:
                value = _ARRAY_LENGTH.unpack(self.stream)
            except IdatException as e:
                e.chain.append(FieldKind.SNP_COUNT.name)
                raise

        self.logger.debug('%d probes', value)

        return value

    @property
    def version(self) -> int:
        return self.header.version

    @property
    def fields(self) -> Tuple[FieldDefinition, ...]:
        '''The directory, in the order of the file (UNKNOWN entries included).'''
        return self.header.fields

    def __contains__(self, kind: FieldKind) -> bool:
        return kind in self._lookup

    def field_definition(self, kind: FieldKind) -> FieldDefinition:
        try:
            return self._lookup[kind]
        except KeyError:
            raise MissingField(kind) from None

    def _iterable_definition(self, kind: FieldKind) -> FieldDefinition:
        if not is_iterable(kind):
            raise FieldNotIterable(kind)

        return self.field_definition(kind)

    def scalar_value(self, kind: FieldKind) -> Any:
        '''Decode once the field indicated; for per-probe fields it's the first element.'''
        definition = self.field_definition(kind)

        with self.stream.lock:
            return decode_at(self.stream, definition)

    def field_values(self, kind: FieldKind) -> "FieldIterator":
        '''Returns a lazy iterator over the per-probe values of the field.'''
        return FieldIterator(self, self._iterable_definition(kind))

    def field_array(self, kind: FieldKind) -> np.ndarray:
        '''Read in one go all the per-probe values of the field.'''
        definition = self._iterable_definition(kind)
        dtype = np.dtype(field_for(definition).get_format())

        with self.stream.lock:
            self.stream.seek(definition.offset)
            try:
                raw = self.stream.read_exact(dtype.itemsize * self.array_length)
            except IdatException as e:
                e.chain.append(kind.name)
                raise

        return np.frombuffer(raw, dtype=dtype)

    def metadata(self) -> Dict[FieldKind, Any]:
        '''All the fields that are not per-probe, decoded.'''
        kinds = dict.fromkeys(_.kind for _ in self.fields if _.kind in self._lookup)

        return {kind: self.scalar_value(kind) for kind in kinds if not is_iterable(kind)}


class FieldIterator(object):
    '''Yields the per-probe values of a field, one at the time, in file order.

    It's not restartable: ask the reader for another one to read again. Since
    it repositions the stream when somebody else moved it, more iterators
    over the same reader can be consumed at the same time.'''

    def __init__(self, reader: Reader, definition: FieldDefinition):
        self.reader = reader
        self.definition = definition
        self.field = field_for(definition)
        self.offset = definition.offset
        self.returned = 0
        self._phase = IteratorPhase.CONSTRUCTED

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.definition.kind.name}, {self.returned}/{self.reader.array_length})>'

    def __iter__(self):
        return self

    def __len__(self):
        return max(self.reader.array_length - self.returned, 0)

    @property
    def phase(self) -> IteratorPhase:
        return self._phase

    def __next__(self):
        stream = self.reader.stream
        with stream.lock:
            if self._phase is IteratorPhase.EXHAUSTED:
                raise StopIteration

            if self.returned >= self.reader.array_length:
                self._phase = IteratorPhase.EXHAUSTED
                raise StopIteration

            if stream.tell() != self.offset:
                stream.seek(self.offset)

            try:
                value = self.field.unpack(stream)
            except IdatException as e:
                e.chain.append(f'{self.definition.kind.name}[{self.returned}]')
                raise

            self.offset = stream.tell()
            self.returned += 1
            self._phase = IteratorPhase.ACTIVE

        return value


def open(source, compliant: Compliant = Compliant.NONE) -> Reader:
    return Reader(source, compliant=compliant)


def open_path(path, compliant: Compliant = Compliant.NONE) -> Reader:
    '''Like open() but refuses anything that is not a path.'''
    if not isinstance(path, (str, os.PathLike)):
        raise TypeError(f'expected a path, got \'{path.__class__.__name__}\'')

    return Reader(Stream(path), compliant=compliant)
