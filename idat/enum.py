from enum import Enum, Flag, IntEnum, auto


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format'''
    NONE       = 0
    DUPLICATES = 1 << 0
    UNKNOWN    = 1 << 1
    STRICT     = DUPLICATES | UNKNOWN


class FieldKind(IntEnum):
    '''Field codes as found in the directory of an IDAT file.

    UNKNOWN is not a code present in the files: it's what every code
    without a name here is classified as.'''
    UNKNOWN     = 0
    ILLUMINA_ID = 102
    SD          = 103
    MEAN        = 104
    BEAD_COUNTS = 107
    MID_BLOCK   = 200
    RUN_INFO    = 300
    RED_GREEN   = 400
    MANIFEST    = 401
    BARCODE     = 402
    FORMAT      = 403
    LABEL       = 404
    OPA         = 405
    SAMPLE_ID   = 406
    DESCR       = 407
    PLATE       = 408
    WELL        = 409
    UNLABELED   = 410
    SNP_COUNT   = 1000


class WireFormat(Enum):
    INT32           = auto()
    INT16           = auto()
    INT64           = auto()
    VARIABLE_STRING = auto()
    BYTE_BLOB       = auto()
    RUN_INFO_BLOCK  = auto()
    MID_BLOCK_BLOCK = auto()


class IteratorPhase(Enum):
    '''Enum to state the actual phase of a field iterator'''
    CONSTRUCTED = 0
    ACTIVE      = auto()
    EXHAUSTED   = auto()
