"""
Static mapping between the field codes of the directory and the way
their data is encoded on disk.

    code -> FieldKind -> WireFormat

Nothing here touches a stream.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from .enum import FieldKind, WireFormat


_WIRE_FORMATS: Dict[FieldKind, WireFormat] = {
    FieldKind.SNP_COUNT:   WireFormat.INT32,
    FieldKind.ILLUMINA_ID: WireFormat.INT32,
    FieldKind.RED_GREEN:   WireFormat.INT32,
    FieldKind.SD:          WireFormat.INT16,
    FieldKind.MEAN:        WireFormat.INT16,
    FieldKind.BEAD_COUNTS: WireFormat.INT16,
    FieldKind.MANIFEST:    WireFormat.VARIABLE_STRING,
    FieldKind.BARCODE:     WireFormat.VARIABLE_STRING,
    FieldKind.FORMAT:      WireFormat.VARIABLE_STRING,
    FieldKind.LABEL:       WireFormat.VARIABLE_STRING,
    FieldKind.OPA:         WireFormat.VARIABLE_STRING,
    FieldKind.SAMPLE_ID:   WireFormat.VARIABLE_STRING,
    FieldKind.DESCR:       WireFormat.VARIABLE_STRING,
    FieldKind.PLATE:       WireFormat.VARIABLE_STRING,
    FieldKind.WELL:        WireFormat.VARIABLE_STRING,
    FieldKind.UNLABELED:   WireFormat.VARIABLE_STRING,
    FieldKind.RUN_INFO:    WireFormat.RUN_INFO_BLOCK,
    FieldKind.MID_BLOCK:   WireFormat.MID_BLOCK_BLOCK,
}

# one element per probe, laid out contiguously from the field's offset
ITERABLE_KINDS: FrozenSet[FieldKind] = frozenset({
    FieldKind.ILLUMINA_ID,
    FieldKind.SD,
    FieldKind.MEAN,
    FieldKind.BEAD_COUNTS,
})


def classify(code: int) -> FieldKind:
    '''Returns the kind for a directory code, FieldKind.UNKNOWN if the code has no name.'''
    try:
        return FieldKind(code)
    except ValueError:
        return FieldKind.UNKNOWN


def wire_format(kind: FieldKind) -> Optional[WireFormat]:
    return _WIRE_FORMATS.get(kind)


def is_iterable(kind: FieldKind) -> bool:
    return kind in ITERABLE_KINDS


@dataclass(frozen=True)
class FieldDefinition:
    """One entry of the directory.

    The raw code is kept alongside the kind so that entries classified as
    UNKNOWN still say what they were."""
    kind: FieldKind
    offset: int
    code: int

    @classmethod
    def from_code(cls, code: int, offset: int) -> "FieldDefinition":
        return cls(kind=classify(code), offset=offset, code=code)

    @property
    def wire_format(self) -> Optional[WireFormat]:
        return wire_format(self.kind)

    def __repr__(self):
        if self.kind is FieldKind.UNKNOWN:
            return f'<{self.__class__.__name__}(UNKNOWN[{self.code}] @ 0x{self.offset:x})>'

        return f'<{self.__class__.__name__}({self.kind.name} @ 0x{self.offset:x})>'

