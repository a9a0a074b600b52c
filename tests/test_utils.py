import binascii
from typing import Any
from typing import Mapping
from typing import Type

import pytest

from hexvhx.base import AlignmentError
from hexvhx.utils import checksum
from hexvhx.utils import chop
from hexvhx.utils import chop_exact
from hexvhx.utils import hexlify
from hexvhx.utils import parse_int
from hexvhx.utils import swap_words
from hexvhx.utils import unhexlify

PARSE_INT_PASS: Mapping[Any, int] = {
    None: None,

    '0': 0,
    '123': 123,
    ' 123 ': 123,
    '\t123\t': 123,
    '010': 10,

    '0x0': 0,
    '0xDEADBEEF': 0xDEADBEEF,
    '0XDEADBEEF': 0xDEADBEEF,
    '0xff': 0xFF,

    123: 123,
    135.7: 135,
}

PARSE_INT_FAIL: Mapping[Any, Type[BaseException]] = {
    Ellipsis: TypeError,
    'x': ValueError,
    '0x': ValueError,
    '-1': ValueError,
    'abc': ValueError,
    'DEADBEEFh': ValueError,
    '0b101': ValueError,
    '1k': ValueError,
}


def test_checksum():
    assert checksum(b'\x02\x00\x00\x04\x12\x34') == 0xB4
    assert checksum(b'\x00\x00\x00\x01') == 0xFF
    assert checksum(b'\x03\x00\x30\x00\x02\x33\x7A') == 0x1E
    assert checksum(b'') == 0x00
    assert checksum(b'\x00') == 0x00
    assert checksum(b'\x01') == 0xFF
    assert checksum(b'\xFF') == 0x01


def test_checksum_sum_zero():
    for size in range(0, 300, 7):
        data = bytes((i * 37 + 11) & 0xFF for i in range(size))
        assert (sum(data) + checksum(data)) & 0xFF == 0


def test_chop():
    assert list(chop(b'ABCDEFG', 2)) == [b'AB', b'CD', b'EF', b'G']
    assert list(chop(b'ABCDEFGH', 4)) == [b'ABCD', b'EFGH']
    assert list(chop(b'', 4)) == []
    assert list(chop([1, 2, 3], 2)) == [[1, 2], [3]]


def test_chop_exact():
    assert list(chop_exact(b'ABCDEFG', 2)) == [b'AB', b'CD', b'EF']
    assert list(chop_exact(b'ABC', 4)) == []
    assert list(chop_exact(['a', 'b', 'c', 'd', 'e'], 2)) == [['a', 'b'], ['c', 'd']]


def test_chop_doctest():
    assert b':'.join(chop(b'ABCDEFG', 2)) == b'AB:CD:EF:G'


def test_chop_raises():
    with pytest.raises(ValueError, match='non-positive window'):
        list(chop(b'ABC', 0))

    with pytest.raises(ValueError, match='non-positive window'):
        list(chop_exact(b'ABC', -1))


def test_hexlify():
    assert hexlify(b'\xAA\xBB\xCC') == b'AABBCC'
    assert hexlify(b'\xAA\xBB\xCC', upper=False) == b'aabbcc'
    assert hexlify(b'') == b''


def test_parse_int_pass():
    for value_in, value_out in PARSE_INT_PASS.items():
        assert parse_int(value_in) == value_out


def test_parse_int_fail():
    for value_in, raised_exception in PARSE_INT_FAIL.items():
        with pytest.raises(raised_exception):
            parse_int(value_in)


def test_swap_words():
    assert swap_words(b'') == b''
    assert swap_words(b'\x01\x02\x03\x04') == b'\x04\x03\x02\x01'
    assert swap_words(bytearray(b'ABCDEFGH')) == b'DCBAHGFE'


def test_swap_words_twice():
    data = bytes(range(64))
    assert swap_words(swap_words(data)) == data


def test_swap_words_raises():
    for size in (1, 2, 3, 5, 7):
        with pytest.raises(AlignmentError, match='not word aligned'):
            swap_words(bytes(size))


def test_unhexlify():
    assert unhexlify(b'AABBCC') == b'\xAA\xBB\xCC'
    assert unhexlify(b'aabbcc') == b'\xAA\xBB\xCC'
    assert unhexlify(b'AA/BB/CC', delete=b'/') == b'\xAA\xBB\xCC'
    assert unhexlify(b'AA BB\r\nCC', delete=...) == b'\xAA\xBB\xCC'
    assert unhexlify(b' aa:bb-cc_xyz\n', delete=...) == b'\xAA\xBB\xCC'


def test_unhexlify_raises():
    with pytest.raises(binascii.Error):
        unhexlify(b'ABC')

    with pytest.raises(binascii.Error):
        unhexlify(b'AB CD')

    with pytest.raises(binascii.Error):
        unhexlify(b'A B C', delete=...)
