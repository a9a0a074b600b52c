# Copyright (c) 2013-2025, Andrea Zoppi
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright
#    notice, this list of conditions and the following disclaimer in the
#    documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

r"""Intel HEX format.

Only the record types needed to place data within a 32-bit address space are
supported: *Data*, *End Of File*, *Extended Segment Address*, and
*Extended Linear Address*.
Any other record type is parsed, checked, and then ignored.

See Also:
    `<https://en.wikipedia.org/wiki/Intel_HEX>`_
"""

import binascii
import enum
import io
from typing import IO
from typing import Any
from typing import Optional
from typing import Type
from typing import TypeVar
from typing import Union

from bytesparse import Memory

from ..base import DEFAULT_FILL
from ..base import WORD_SIZE
from ..base import AnyBytes
from ..base import BaseFile
from ..base import ChecksumError
from ..base import DecodeError
from ..base import FileFormat
from ..base import Image
from ..base import RecordLengthError
from ..base import RecordSyntaxError
from ..base import TypeAlias
from ..base import stream_name
from ..utils import checksum as _checksum
from ..utils import chop
from ..utils import hexlify
from ..utils import swap_words

try:
    from typing import Self
except ImportError:  # pragma: no cover
    Self: TypeAlias = Any  # Python < 3.11
__TYPING_HAS_SELF = Self is not Any

WORDS_PER_RECORD: int = 4
r"""Words carried by each serialized data record."""


class IhexTag(enum.IntEnum):
    r"""Intel HEX tag."""

    DATA = 0
    r"""Binary data."""

    END_OF_FILE = 1
    r"""End Of File."""

    EXTENDED_SEGMENT_ADDRESS = 2
    r"""Extended Segment Address."""

    EXTENDED_LINEAR_ADDRESS = 4
    r"""Extended Linear Address."""

    def is_data(self) -> bool:

        return self == self.DATA

    def is_eof(self) -> bool:
        r"""Tells whether this is an End Of File record tag.

        Returns:
            bool: This is an End Of File record tag.

        Examples:
            >>> from hexvhx.formats.ihex import IhexTag
            >>> IhexTag.END_OF_FILE.is_eof()
            True
            >>> IhexTag.DATA.is_eof()
            False
        """

        return self == self.END_OF_FILE

    def is_extension(self) -> bool:
        r"""Tells whether this is an Extended Address record tag.

        Returns:
            bool: This is an Extended Address record tag.

        Examples:
            >>> from hexvhx.formats.ihex import IhexTag
            >>> IhexTag.EXTENDED_LINEAR_ADDRESS.is_extension()
            True
            >>> IhexTag.EXTENDED_SEGMENT_ADDRESS.is_extension()
            True
            >>> IhexTag.DATA.is_extension()
            False
        """

        return ((self == self.EXTENDED_SEGMENT_ADDRESS) or
                (self == self.EXTENDED_LINEAR_ADDRESS))


if not __TYPING_HAS_SELF:  # pragma: no cover
    del Self
    Self = TypeVar('Self', bound='IhexRecord')


class IhexRecord:
    r"""Intel HEX record object.

    Args:
        tag (int):
            Record type; values outside :class:`IhexTag` are allowed.

        address (int):
            16-bit address field.

        data (bytes):
            Record payload.

        count (int):
            Count field; computed from `data` if ``None``.

        checksum (int):
            Checksum field; computed if ``None``.
    """

    Tag: Type[IhexTag] = IhexTag

    def __eq__(self, other: Any) -> bool:

        if isinstance(other, IhexRecord):
            return (self.tag == other.tag and
                    self.address == other.address and
                    self.data == other.data and
                    self.count == other.count and
                    self.checksum == other.checksum)
        else:
            return NotImplemented

    def __init__(
        self,
        tag: Union[IhexTag, int],
        address: int = 0,
        data: AnyBytes = b'',
        count: Optional[int] = None,
        checksum: Optional[int] = None,
    ):

        self.tag: Union[IhexTag, int] = tag
        self.address: int = address.__index__()
        self.data: bytes = bytes(data)
        self.count: int = self.compute_count() if count is None else count
        self.checksum: int = self.compute_checksum() if checksum is None else checksum

    def __repr__(self) -> str:

        return (f'{type(self).__name__}('
                f'tag={self.tag!r}, '
                f'address=0x{self.address:04X}, '
                f'data={self.data!r}, '
                f'count={self.count}, '
                f'checksum=0x{self.checksum:02X})')

    def __str__(self) -> str:

        return self.to_bytestr().decode()

    def compute_checksum(self) -> int:
        r"""Computes the checksum field value.

        Returns:
            int: Two's complement of the sum of count, address, tag, and data
            bytes.
        """

        return _checksum(self.to_bytes_nochecksum())

    def compute_count(self) -> int:

        return len(self.data)

    @classmethod
    def create_data(
        cls,
        address: int,
        data: AnyBytes,
    ) -> Self:

        address = address.__index__()
        if not 0 <= address <= 0xFFFF:
            raise ValueError('address overflow')

        size = len(data)
        if size > 0xFF:
            raise ValueError('data size overflow')

        record = cls(cls.Tag.DATA, address=address, data=data)
        return record

    @classmethod
    def create_end_of_file(cls) -> Self:
        r"""Creates an End Of File record.

        Returns:
            :class:`IhexRecord`: End Of File record object.

        Examples:
            >>> from hexvhx.formats.ihex import IhexRecord
            >>> str(IhexRecord.create_end_of_file())
            ':00000001FF\n'
        """

        record = cls(cls.Tag.END_OF_FILE)
        return record

    @classmethod
    def create_extended_linear_address(cls, extension: int) -> Self:
        r"""Creates an Extended Linear Address record.

        Args:
            extension (int):
                Upper 16 bits of the address.

        Returns:
            :class:`IhexRecord`: Extended Linear Address record object.

        Examples:
            >>> from hexvhx.formats.ihex import IhexRecord
            >>> str(IhexRecord.create_extended_linear_address(0x1234))
            ':020000041234B4\n'
        """

        extension = extension.__index__()
        if not 0 <= extension <= 0xFFFF:
            raise ValueError('extension overflow')

        data = extension.to_bytes(2, byteorder='big')
        record = cls(cls.Tag.EXTENDED_LINEAR_ADDRESS, data=data)
        return record

    @classmethod
    def create_extended_segment_address(cls, extension: int) -> Self:
        r"""Creates an Extended Segment Address record.

        Args:
            extension (int):
                Segment value, multiplied by 16 when applied.

        Returns:
            :class:`IhexRecord`: Extended Segment Address record object.

        Examples:
            >>> from hexvhx.formats.ihex import IhexRecord
            >>> str(IhexRecord.create_extended_segment_address(0x1234))
            ':020000021234B6\n'
        """

        extension = extension.__index__()
        if not 0 <= extension <= 0xFFFF:
            raise ValueError('extension overflow')

        data = extension.to_bytes(2, byteorder='big')
        record = cls(cls.Tag.EXTENDED_SEGMENT_ADDRESS, data=data)
        return record

    def data_to_int(self) -> int:
        r"""Converts the payload into a big-endian unsigned integer."""

        return int.from_bytes(self.data, byteorder='big', signed=False)

    @classmethod
    def parse(
        cls,
        line: AnyBytes,
    ) -> Self:
        r"""Parses a record line.

        The line starts with the ``:`` marker, followed by the hexadecimal
        representation of count, address, tag, data, and checksum.
        Surrounding whitespace is ignored.

        Args:
            line (bytes):
                Record line.

        Returns:
            :class:`IhexRecord`: Parsed record object.

        Raises:
            RecordSyntaxError: Missing marker or invalid hexadecimal digits.
            RecordLengthError: Record too short, or count mismatch.
            ChecksumError: Stored checksum mismatch.

        Examples:
            >>> from hexvhx.formats.ihex import IhexRecord
            >>> IhexRecord.parse(b':0300300002337A1E\r\n')
            IhexRecord(tag=<IhexTag.DATA: 0>, address=0x0030, data=b'\x023z', count=3, checksum=0x1E)
        """

        line = bytes(line).strip()
        if not line.startswith(b':'):
            raise RecordSyntaxError('missing record mark')

        try:
            raw = binascii.unhexlify(line[1:])
        except binascii.Error as exc:
            raise RecordSyntaxError(f'hex decode error: {exc}') from None

        size = len(raw)
        if size < 5:
            raise RecordLengthError('record too short')

        count = raw[0]
        if count != size - 5:
            raise RecordLengthError('record count mismatch')

        computed = _checksum(raw[:-1])
        stored = raw[-1]
        if computed != stored:
            raise ChecksumError(f'checksum mismatch; {computed:#04x} vs {stored:#04x}')

        address = (raw[1] << 8) | raw[2]
        tag = raw[3]
        try:
            tag = cls.Tag(tag)
        except ValueError:
            pass  # unsupported, kept as a plain integer

        record = cls(tag,
                     address=address,
                     data=raw[4:-1],
                     count=count,
                     checksum=stored)
        return record

    def to_bytes_nochecksum(self) -> bytes:
        r"""Raw record bytes, without checksum."""

        return bytes([
            self.count & 0xFF,
            (self.address >> 8) & 0xFF,
            self.address & 0xFF,
            self.tag & 0xFF,
        ]) + self.data

    def to_bytestr(self, end: AnyBytes = b'\n') -> bytes:
        r"""Converts into a byte string.

        Args:
            end (bytes):
                Line termination.

        Returns:
            bytes: Uppercase record line.
        """

        raw = self.to_bytes_nochecksum() + bytes([self.checksum & 0xFF])
        return b':' + hexlify(raw) + bytes(end)

    def update_checksum(self) -> Self:

        self.checksum = self.compute_checksum()
        return self

    def update_count(self) -> Self:

        self.count = self.compute_count()
        return self

    def validate(self) -> Self:
        r"""Validates consistency of the record fields.

        Returns:
            :class:`IhexRecord`: *self*.

        Raises:
            ValueError: Invalid field.
        """

        if not 0 <= self.count <= 0xFF:
            raise ValueError('count overflow')

        if self.count != self.compute_count():
            raise ValueError('count mismatch')

        if not 0 <= self.address <= 0xFFFF:
            raise ValueError('address overflow')

        if not 0 <= self.checksum <= 0xFF:
            raise ValueError('checksum overflow')

        if self.checksum != self.compute_checksum():
            raise ValueError('checksum mismatch')

        if self.tag == IhexTag.END_OF_FILE:
            if self.data:
                raise ValueError('unexpected data')

        elif self.tag in (IhexTag.EXTENDED_SEGMENT_ADDRESS,
                          IhexTag.EXTENDED_LINEAR_ADDRESS):
            if len(self.data) != 2:
                raise ValueError('extension data size overflow')

        return self


if not __TYPING_HAS_SELF:  # pragma: no cover
    del Self
    Self = TypeVar('Self', bound='IhexFile')


class IhexFile(BaseFile):
    r"""Intel HEX file object.

    Args:
        image (:class:`Image`):
            Memory image.

        little_endian (bool):
            Memory words are stored with reversed byte order within records.
    """

    FILE_FORMAT: FileFormat = FileFormat.IHEX

    META_KEYS = [
        'little_endian',
    ]

    Record: Type[IhexRecord] = IhexRecord

    def __init__(
        self,
        image: Optional[Image] = None,
        little_endian: bool = True,
    ):

        super().__init__(image)
        self.little_endian: bool = bool(little_endian)

    @classmethod
    def parse(
        cls,
        stream: Union[AnyBytes, IO],
        little_endian: bool = True,
        fill: int = DEFAULT_FILL,
    ) -> Self:
        r"""Parses records from a byte stream.

        Each data byte is placed at its absolute address, as extended by the
        most recent *Extended Segment Address* and *Extended Linear Address*
        records.
        Parsing stops at the *End Of File* record, ignoring what follows.
        The resulting sparse memory is then made dense, from the lowest to the
        highest address, filling gaps with `fill`.

        The last write to an address wins, in case of overlapping records.

        Args:
            stream (bytes IO or buffer):
                Stream or byte buffer to parse records from.

            little_endian (bool):
                Reverse the byte order of each word.

            fill (int):
                Byte value to fill address gaps with.

        Returns:
            :class:`IhexFile`: Parsed file object.

        Raises:
            DecodeError: Invalid record, located by file name and 0-based
                line number.
            AlignmentError: Little endian data not word aligned.

        Examples:
            >>> from hexvhx.formats.ihex import IhexFile
            >>> buffer = b'''
            ... :020000040000FA
            ... :0400100001020304E2
            ... :00000001FF
            ... '''
            >>> file = IhexFile.parse(buffer, little_endian=False)
            >>> file.image.start_address
            16
            >>> file.image.data
            b'\x01\x02\x03\x04'
        """

        if isinstance(stream, (bytes, bytearray, memoryview)):
            stream = io.BytesIO(stream)

        fill = fill.__index__()
        if not 0 <= fill <= 0xFF:
            raise ValueError('fill byte overflow')

        path = stream_name(stream)
        Record = cls.Record
        memory = Memory()
        extended_segment_address = 0
        extended_linear_address = 0

        for row, line in enumerate(stream):
            if not line.strip():
                continue

            try:
                record = Record.parse(line)
            except DecodeError as exc:
                raise exc.at(path, row) from None

            tag = record.tag

            if tag == IhexTag.DATA:
                base = 16 * extended_segment_address + record.address
                for offset, value in enumerate(record.data):
                    address = (extended_linear_address << 16) | (base + offset)
                    memory.poke(address, value)

            elif tag == IhexTag.END_OF_FILE:
                break

            elif tag == IhexTag.EXTENDED_SEGMENT_ADDRESS:
                if len(record.data) != 2:
                    raise RecordLengthError('incorrect extended segment address length', path, row)
                extended_segment_address = record.data_to_int()

            elif tag == IhexTag.EXTENDED_LINEAR_ADDRESS:
                if len(record.data) != 2:
                    raise RecordLengthError('incorrect extended linear address length', path, row)
                extended_linear_address = record.data_to_int()

        image = Image.from_memory(memory, fill=fill)

        if little_endian:
            image = Image(image.start_address, swap_words(image.data))

        file = cls(image, little_endian=little_endian)
        return file

    def serialize(self, stream: IO, end: AnyBytes = b'\n') -> Self:
        r"""Serializes the image as records onto a byte stream.

        The first record is an *Extended Linear Address* holding the upper
        16 bits of the image start address.
        Data records follow, each carrying up to 16 bytes, with the lower 16
        bits of their start address.
        No further *Extended Linear Address* records are emitted, so the
        address field wraps around for images crossing a 64 KiB boundary.
        The *End Of File* record terminates the sequence.

        Args:
            stream (bytes IO):
                Stream to write records onto.

            end (bytes):
                Line termination.

        Returns:
            :class:`IhexFile`: *self*.

        Raises:
            AlignmentError: Little endian data not word aligned.

        Examples:
            >>> import sys
            >>> from hexvhx.base import Image
            >>> from hexvhx.formats.ihex import IhexFile
            >>> file = IhexFile(Image(0x12340010, b'\x04\x03\x02\x01'))
            >>> _ = file.serialize(sys.stdout.buffer)
            :020000041234B4
            :0400100001020304E2
            :00000001FF
        """

        Record = self.Record
        image = self.image
        data = image.data
        if self.little_endian:
            data = swap_words(data)

        start_address = image.start_address
        record = Record.create_extended_linear_address(start_address >> 16)
        stream.write(record.to_bytestr(end=end))

        stride = WORDS_PER_RECORD * WORD_SIZE
        for index, chunk in enumerate(chop(data, stride)):
            address = (start_address + index * stride) & 0xFFFF
            record = Record.create_data(address, chunk)
            stream.write(record.to_bytestr(end=end))

        record = Record.create_end_of_file()
        stream.write(record.to_bytestr(end=end))
        return self
