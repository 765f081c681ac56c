"""
# IDAT decoding

IDAT is the binary container where the scanners of microarrays store the
intensities of each bead type: after a small header there is a directory
telling at which offset the data of each field starts, so that it's possible
to jump directly to the field of interest without reading the whole file.

Two kinds of fields are present

 1. per-probe fields (ILLUMINA_ID, SD, MEAN, BEAD_COUNTS): arrays of fixed
    width numbers with one element for each probe, their number is stored
    in the field SNP_COUNT
 2. everything else: scalars, strings and blocks describing the run

The entry point is open(), that returns a Reader

    with idat.open('sample_Red.idat') as reader:
        for mean in reader.field_values(idat.FieldKind.MEAN):
            ...

Only decoding is supported.
"""
from .core import FieldIterator, Header, Reader, open, open_path, parse_header
from .enum import Compliant, FieldKind, IteratorPhase, WireFormat
from .exceptions import (
    DecodeError,
    DuplicateField,
    FieldNotIterable,
    IdatException,
    IdatIOError,
    InvalidHeader,
    MissingField,
    UnknownFieldCode,
    UnsupportedWireFormat,
)
from .fields import RunInfoEntry, decode_at
from .registry import ITERABLE_KINDS, FieldDefinition, classify, wire_format
from .streams import Stream
