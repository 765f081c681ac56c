import struct

import pytest


def encode_string(text):
    '''7-bit length prefix followed by the UTF-8 bytes'''
    data = text.encode('utf-8') if isinstance(text, str) else text
    length = len(data)
    prefix = []
    while length > 0x7f:
        prefix.append((length & 0x7f) | 0x80)
        length >>= 7
    prefix.append(length)

    return bytes(prefix) + data


def build_idat(entries, magic=b'IDAT', version=3):
    '''Lay out header, directory and the payloads one after the other.

    entries is a list of couples (code, payload).'''
    header_size = 16 + 10 * len(entries)
    directory = b''
    data = b''
    for code, payload in entries:
        directory += struct.pack('<HQ', code, header_size + len(data))
        data += payload

    return magic + struct.pack('<QI', version, len(entries)) + directory + data


RUN_INFO = [
    ('1/12/2013 3:01:55 PM', 'Decoding', 'DecoderOptions', 'Decode', '1.0.3'),
    ('1/13/2013 9:30:12 AM', 'Scan', 'ScanSettings', 'iScan', '3.3.28'),
]


def sample_entries():
    return [
        (1000, struct.pack('<i', 3)),
        (102, struct.pack('<3i', 10, 20, 30)),
        (103, struct.pack('<3H', 1, 2, 3)),
        (104, struct.pack('<3H', 100, 200, 0xffff)),
        (107, struct.pack('<3H', 5, 6, 7)),
        (402, encode_string('200144450018')),
        (300, struct.pack('<i', len(RUN_INFO)) + b''.join(encode_string(_) for entry in RUN_INFO for _ in entry)),
        (200, struct.pack('<3i', 2, 7, -8)),
        (400, struct.pack('<i', 1)),
        (999, b'\x01\x02'),
    ]


@pytest.fixture
def builder():
    return build_idat


@pytest.fixture
def string_encoder():
    return encode_string


@pytest.fixture
def sample_idat():
    return build_idat(sample_entries())


@pytest.fixture
def sample_path(tmp_path, sample_idat):
    path = tmp_path / 'sample_Red.idat'
    path.write_bytes(sample_idat)

    return path
