import io
import os
from pathlib import Path

import pytest
from bytesparse import Memory

from hexvhx.base import ADDRESS_MAX
from hexvhx.base import AlignmentError
from hexvhx.base import BaseFile
from hexvhx.base import ChecksumError
from hexvhx.base import DecodeError
from hexvhx.base import FileFormat
from hexvhx.base import Image
from hexvhx.base import LayoutError
from hexvhx.base import RecordLengthError
from hexvhx.base import RecordSyntaxError
from hexvhx.base import stream_name
from hexvhx.formats.ihex import IhexFile
from hexvhx.formats.vhx import VhxFile


@pytest.fixture
def tmppath(tmpdir):
    return Path(str(tmpdir))


class TestDecodeError:

    def test___init__(self):
        exc = DecodeError('bad thing')
        assert exc.message == 'bad thing'
        assert exc.path is None
        assert exc.line is None
        assert str(exc) == 'bad thing'

    def test___init___located(self):
        exc = DecodeError('bad thing', path='in.hex', line=7)
        assert exc.path == 'in.hex'
        assert exc.line == 7
        assert str(exc) == "bad thing for file 'in.hex' at line 7"

    def test___init___path_only(self):
        exc = DecodeError('bad thing', path='in.vhx')
        assert str(exc) == "bad thing for file 'in.vhx'"

    def test_at(self):
        exc = ChecksumError('checksum mismatch')
        located = exc.at('in.hex', 0)
        assert type(located) is ChecksumError
        assert located is not exc
        assert located.message == 'checksum mismatch'
        assert str(located) == "checksum mismatch for file 'in.hex' at line 0"

    def test_hierarchy(self):
        for error_type in (RecordSyntaxError, RecordLengthError, ChecksumError, LayoutError):
            assert issubclass(error_type, DecodeError)
        assert issubclass(DecodeError, ValueError)
        assert issubclass(AlignmentError, ValueError)
        assert not issubclass(AlignmentError, DecodeError)


class TestFileFormat:

    def test_from_path(self):
        assert FileFormat.from_path('firmware.hex') is FileFormat.IHEX
        assert FileFormat.from_path('firmware.vhx') is FileFormat.VHX
        assert FileFormat.from_path('firmware.vhx128') is FileFormat.VHX
        assert FileFormat.from_path(os.path.join('dir.vhx', 'a.hex')) is FileFormat.IHEX
        assert FileFormat.from_path(Path('a') / 'b.vhx') is FileFormat.VHX
        assert FileFormat.from_path(b'firmware.hex') is FileFormat.IHEX

    def test_from_path_raises(self):
        with pytest.raises(ValueError, match='no file extension specified'):
            FileFormat.from_path('firmware')

        with pytest.raises(ValueError, match="unsupported file type: 'bin'"):
            FileFormat.from_path('firmware.bin')

        with pytest.raises(ValueError, match="unsupported file type: 'HEX'"):
            FileFormat.from_path('firmware.HEX')

    def test_extensions(self):
        assert list(FileFormat.IHEX.extensions) == ['.hex']
        assert list(FileFormat.VHX.extensions) == ['.vhx', '.vhx128']

    def test_values(self):
        assert FileFormat('ihex') is FileFormat.IHEX
        assert FileFormat('vhx') is FileFormat.VHX


class TestImage:

    def test___init__(self):
        image = Image()
        assert image.start_address == 0
        assert image.data == b''
        assert len(image) == 0

        image = Image(0x1000, bytearray(b'abcd'))
        assert image.start_address == 0x1000
        assert image.data == b'abcd'
        assert type(image.data) is bytes
        assert len(image) == 4

        image = Image(ADDRESS_MAX, b'')
        assert image.start_address == ADDRESS_MAX

    def test___init___raises(self):
        with pytest.raises(ValueError, match='start address overflow'):
            Image(-1)

        with pytest.raises(ValueError, match='start address overflow'):
            Image(ADDRESS_MAX + 1)

    def test___bytes__(self):
        assert bytes(Image(0x10, b'abcd')) == b'abcd'

    def test___eq__(self):
        assert Image(0x10, b'abcd') == Image(0x10, b'abcd')
        assert Image(0x10, b'abcd') != Image(0x11, b'abcd')
        assert Image(0x10, b'abcd') != Image(0x10, b'abce')
        assert Image(0x10, b'abcd') != b'abcd'

    def test___hash__(self):
        assert hash(Image(0x10, b'abcd')) == hash(Image(0x10, b'abcd'))
        assert len({Image(), Image(), Image(1)}) == 2

    def test___repr__(self):
        assert repr(Image(0x1000, b'abcd')) == 'Image(start_address=0x00001000, size=4)'

    def test_endex(self):
        assert Image().endex == 0
        assert Image(0x1000, b'abcd').endex == 0x1004

    def test_immutable(self):
        image = Image(0x1000, b'abcd')
        with pytest.raises(AttributeError):
            image.data = b''  # type: ignore
        with pytest.raises(AttributeError):
            image.start_address = 0  # type: ignore

    def test_from_memory(self):
        memory = Memory.from_blocks([[0, b'\xAA'], [3, b'\xBB']])
        image = Image.from_memory(memory, fill=0x00)
        assert image.start_address == 0
        assert image.data == b'\xAA\x00\x00\xBB'

    def test_from_memory_offset(self):
        memory = Memory.from_blocks([[0x10, b'ab'], [0x14, b'c']])
        image = Image.from_memory(memory)
        assert image.start_address == 0x10
        assert image.data == b'ab\xFF\xFFc'

    def test_from_memory_contiguous(self):
        memory = Memory.from_blocks([[0x1234, b'abcdef']])
        image = Image.from_memory(memory, fill=0x00)
        assert image == Image(0x1234, b'abcdef')

    def test_from_memory_empty(self):
        assert Image.from_memory(Memory()) == Image()

    def test_words(self):
        assert list(Image().words()) == []
        assert list(Image(0, b'abc').words()) == []
        assert list(Image(0, b'abcd').words()) == [b'abcd']
        assert list(Image(0, b'abcdefghij').words()) == [b'abcd', b'efgh']


class TestBaseFile:

    def test_abstract(self):
        with pytest.raises(TypeError):
            BaseFile()  # type: ignore

    def test___eq__(self):
        image = Image(0x10, b'abcd')
        assert IhexFile(image) == IhexFile(image)
        assert IhexFile(image) != IhexFile(image, little_endian=False)
        assert IhexFile(image) != IhexFile(Image())
        assert IhexFile(image) != VhxFile(image)
        assert IhexFile(image) != image

    def test___init__(self):
        file = IhexFile()
        assert file.image == Image()

    def test___repr__(self):
        file = VhxFile(Image(0x10, b'abcd'), chunk_size=64)
        assert repr(file) == 'VhxFile(Image(start_address=0x00000010, size=4), chunk_size=64)'

    def test_convert(self):
        image = Image(0x10, b'abcdefgh')
        source = IhexFile(image, little_endian=False)
        target = VhxFile.convert(source, chunk_size=64)
        assert isinstance(target, VhxFile)
        assert target.image is image
        assert target.chunk_size == 64

    def test_from_image(self):
        image = Image(0x10, b'abcd')
        file = IhexFile.from_image(image, little_endian=False)
        assert file.image is image
        assert file.little_endian is False

    def test_get_meta(self):
        assert IhexFile().get_meta() == {'little_endian': True}
        assert VhxFile().get_meta() == {'chunk_size': 128}

    def test_load_save_path(self, tmppath):
        path = tmppath / 'data.vhx'
        image = Image(0, bytes(range(16)))
        VhxFile(image, chunk_size=64).save(path)
        assert path.read_bytes() == b'0405060700010203\n0c0d0e0f08090a0b\n'

        file = VhxFile.load(str(path), chunk_size=64)
        assert file.image == image

    def test_load_save_stream(self):
        image = Image(0, bytes(range(16)))
        stream = io.BytesIO()
        returned = VhxFile(image).save(stream)
        assert isinstance(returned, VhxFile)
        assert stream.getvalue() == b'0c0d0e0f08090a0b0405060700010203\n'

        stream.seek(0)
        file = VhxFile.load(stream)
        assert file.image == image


def test_stream_name():
    assert stream_name(io.BytesIO()) is None
    assert stream_name(object()) is None

    class Named:
        name = 'x.hex'

    assert stream_name(Named()) == 'x.hex'

    class Descriptor:
        name = 3

    assert stream_name(Descriptor()) is None
