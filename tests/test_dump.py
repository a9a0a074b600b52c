import io

from hexvhx.base import Image
from hexvhx.dump import WORDS_PER_LINE
from hexvhx.dump import dump
from hexvhx.dump import dump_lines


def test_words_per_line():
    assert WORDS_PER_LINE == 4


def test_dump_lines():
    image = Image(0x1000, bytes(range(20)))
    assert list(dump_lines(image)) == [
        '00001000: 00010203 04050607 08090a0b 0c0d0e0f',
        '00001010: 10111213',
    ]


def test_dump_lines_empty():
    assert list(dump_lines(Image())) == []
    assert list(dump_lines(Image(0, b'abc'))) == []


def test_dump_lines_partial_word():
    image = Image(0, b'\xAA\xBB\xCC\xDD\xEE')
    assert list(dump_lines(image)) == ['00000000: aabbccdd']


def test_dump_lines_wrap():
    image = Image(0xFFFFFFF0, bytes(32))
    assert list(dump_lines(image)) == [
        'fffffff0: 00000000 00000000 00000000 00000000',
        '00000000: 00000000 00000000 00000000 00000000',
    ]


def test_dump_stream():
    image = Image(0x08000000, bytes(range(36)))
    stream = io.StringIO()
    dump(image, stream=stream)
    assert stream.getvalue() == (
        '08000000: 00010203 04050607 08090a0b 0c0d0e0f\n'
        '08000010: 10111213 14151617 18191a1b 1c1d1e1f\n'
        '08000020: 20212223\n'
    )


def test_dump_stdout(capsys):
    dump(Image(0x10, b'\x01\x02\x03\x04'))
    captured = capsys.readouterr()
    assert captured.out == '00000010: 01020304\n'
