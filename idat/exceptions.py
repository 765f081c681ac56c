class IdatException(Exception):
    '''Base class to extend in order to throw exception in idat.

    Other than the message it takes a keyword argument "chain" that
    represents the decoding steps that were active when the exception was
    raised, the innermost first.
    '''

    def __init__(self, *args, chain=None):
        self.chain = list(chain) if chain else []
        super().__init__(*args)


class InvalidHeader(IdatException):
    '''The first four bytes are not b"IDAT".

    "actual" is the text of the bytes found, or their repr() if they
    are not valid UTF-8; "raw" are the bytes themselves.'''

    def __init__(self, actual, raw=None, **kwargs):
        self.actual = actual
        self.raw = raw
        super().__init__(f"Expected file to start with 'IDAT' but it started with {actual}", **kwargs)


class MissingField(IdatException):

    def __init__(self, kind, **kwargs):
        self.kind = kind
        super().__init__(f'field {kind.name} is not present in the directory', **kwargs)


class FieldNotIterable(IdatException):

    def __init__(self, kind, **kwargs):
        self.kind = kind
        super().__init__(f'field {kind.name} has no per-probe values to iterate over', **kwargs)


class UnsupportedWireFormat(IdatException):
    '''The field has no known encoding and so it cannot be decoded.'''

    def __init__(self, kind, code=None, **kwargs):
        self.kind = kind
        self.code = code
        what = kind.name if code is None else f'{kind.name}[{code}]'
        super().__init__(f'field {what} has no wire format to decode it with', **kwargs)


class DecodeError(IdatException):
    '''The bytes are all there but they don't make sense for the wire format.'''
    pass


class DuplicateField(IdatException):
    '''The directory lists the same field more than once (only raised with Compliant.DUPLICATES).'''

    def __init__(self, kind, **kwargs):
        self.kind = kind
        super().__init__(f'field {kind.name} appears more than once in the directory', **kwargs)


class UnknownFieldCode(IdatException):
    '''The directory has a code without a name (only raised with Compliant.UNKNOWN).'''

    def __init__(self, code, **kwargs):
        self.code = code
        super().__init__(f'unknown field code {code}', **kwargs)


class IdatIOError(IdatException, OSError):
    '''Short read or failure of the underlying source; the original error,
    if any, is in "cause" and chained as __cause__.'''

    def __init__(self, message, cause=None, **kwargs):
        self.cause = cause
        super().__init__(message, **kwargs)
