import struct
from unittest import mock

import pytest

from idat.enum import FieldKind
from idat.exceptions import DecodeError, IdatIOError, UnsupportedWireFormat
from idat.fields import (
    ArrayField,
    BlobField,
    RunInfoEntry,
    StringField,
    StructField,
    VarIntField,
    decode_at,
)
from idat.registry import FieldDefinition
from idat.streams import Stream


def definition(kind, offset=0):
    return FieldDefinition(kind=kind, offset=offset, code=kind.value)


@pytest.mark.parametrize('raw,value', [
    (b'\x01\x00\x00\x00', 1),
    (b'\xff\xff\xff\xff', -1),
    (b'\x00\x00\x00\x80', -0x80000000),
])
def test_int32(raw, value):
    assert decode_at(Stream(raw), definition(FieldKind.RED_GREEN)) == value


def test_int16_is_unsigned():
    assert decode_at(Stream(b'\xff\xff'), definition(FieldKind.MEAN)) == 0xffff
    assert decode_at(Stream(b'\x34\x12'), definition(FieldKind.SD)) == 0x1234


def test_int64():
    field = StructField('q')

    assert field.size == 8
    assert field.unpack(Stream(struct.pack('<q', -2))) == -2


def test_decode_at_seeks_to_the_offset():
    stream = Stream(b'\xaa\xbb' + struct.pack('<ii', 7, 8))

    assert decode_at(stream, definition(FieldKind.RED_GREEN, offset=6)) == 8
    assert stream.tell() == 10

    # back to an earlier offset
    assert decode_at(stream, definition(FieldKind.RED_GREEN, offset=2)) == 7
    assert stream.tell() == 6


def test_decode_at_does_not_seek_if_already_there():
    stream = Stream(b'\xaa\xbb' + struct.pack('<i', 7))
    stream.seek(2)

    with mock.patch.object(stream, 'seek', wraps=stream.seek) as seek:
        assert decode_at(stream, definition(FieldKind.RED_GREEN, offset=2)) == 7

    seek.assert_not_called()


def test_varint():
    field = VarIntField()

    assert field.unpack(Stream(b'\x00')) == 0
    assert field.unpack(Stream(b'\x7f')) == 127
    assert field.unpack(Stream(b'\xac\x02')) == 300

    with pytest.raises(DecodeError):
        field.unpack(Stream(b'\xff' * 6))

    with pytest.raises(IdatIOError):
        field.unpack(Stream(b'\x80'))


def test_string(string_encoder):
    text = 'ß' * 200  # two bytes each, so the length needs two bytes
    stream = Stream(string_encoder(text) + b'tail')

    assert StringField().unpack(stream) == text
    assert stream.read_exact(4) == b'tail'


def test_string_empty(string_encoder):
    assert decode_at(Stream(string_encoder('')), definition(FieldKind.BARCODE)) == ''


def test_string_not_utf8():
    with pytest.raises(DecodeError) as excinfo:
        decode_at(Stream(b'\x02\xff\xfe'), definition(FieldKind.BARCODE))

    assert excinfo.value.chain == ['string', 'BARCODE']


def test_string_truncated():
    with pytest.raises(IdatIOError):
        decode_at(Stream(b'\x05abc'), definition(FieldKind.WELL))


def test_blob():
    assert BlobField().unpack(Stream(b'\x03\x00\x01\x02\x03')) == b'\x00\x01\x02'


def test_run_info(string_encoder):
    entry = ('1/12/2013 3:01:55 PM', 'Decoding', 'DecoderOptions', 'Decode', '1.0.3')
    raw = struct.pack('<i', 2) + b''.join(string_encoder(_) for _ in entry * 2)

    value = decode_at(Stream(raw), definition(FieldKind.RUN_INFO))

    assert value == (RunInfoEntry(*entry), RunInfoEntry(*entry))
    assert value[0].block_type == 'Decoding'
    assert value[1].code_version == '1.0.3'


def test_run_info_truncated_entry(string_encoder):
    raw = struct.pack('<i', 2) + b''.join(string_encoder(_) for _ in 'abcde') + string_encoder('f')

    with pytest.raises(IdatIOError) as excinfo:
        decode_at(Stream(raw), definition(FieldKind.RUN_INFO))

    assert excinfo.value.chain == ['run_info[1]', 'RUN_INFO']


def test_mid_block():
    raw = struct.pack('<4i', 3, 1, -2, 3)

    assert decode_at(Stream(raw), definition(FieldKind.MID_BLOCK)) == (1, -2, 3)


def test_array_negative_count():
    with pytest.raises(DecodeError):
        decode_at(Stream(struct.pack('<i', -1)), definition(FieldKind.MID_BLOCK))


def test_array_custom_count():
    array = ArrayField(StructField('H'), n=StructField('B'))

    assert array.unpack(Stream(b'\x02\x01\x00\x02\x00')) == (1, 2)


def test_unknown_has_no_wire_format():
    unknown = FieldDefinition.from_code(999, 0)

    with pytest.raises(UnsupportedWireFormat) as excinfo:
        decode_at(Stream(b'\x00' * 8), unknown)

    assert excinfo.value.code == 999


def test_short_read_is_io_error():
    with pytest.raises(IdatIOError) as excinfo:
        decode_at(Stream(b'\x01\x00'), definition(FieldKind.ILLUMINA_ID))

    assert excinfo.value.chain == ['ILLUMINA_ID']
