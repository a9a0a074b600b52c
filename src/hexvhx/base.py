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

r""" Base types and classes."""

import abc
import enum
import io
import os
import sys
from typing import IO
from typing import Any
from typing import Iterator
from typing import Mapping
from typing import Optional
from typing import Sequence
from typing import Type
from typing import TypeVar
from typing import Union

from bytesparse.base import ImmutableMemory

try:
    from typing import TypeAlias
except ImportError:  # pragma: no cover
    TypeAlias = Any  # Python < 3.10

try:
    from typing import Self
except ImportError:  # pragma: no cover
    Self: TypeAlias = Any  # Python < 3.11
__TYPING_HAS_SELF = Self is not Any

AnyBytes: TypeAlias = Union[bytes, bytearray, memoryview]
AnyPath: TypeAlias = Union[bytes, bytearray, str, os.PathLike]
EllipsisType: TypeAlias = Type['Ellipsis']

ADDRESS_MAX: int = 0xFFFFFFFF
r"""Highest 32-bit address."""

WORD_SIZE: int = 4
r"""Bytes within a memory word."""

WORD_BITS: int = WORD_SIZE * 8
r"""Bits within a memory word."""

DEFAULT_FILL: int = 0xFF
r"""Default byte value to fill address gaps with."""

CHUNK_SIZES: Sequence[int] = (64, 128)
r"""Supported VHX chunk sizes, in bits."""

DEFAULT_CHUNK_SIZE: int = 128
r"""Default VHX chunk size, in bits."""


# ============================================================================

class DecodeError(ValueError):
    r"""Record file decoding error.

    It optionally carries the name of the file being decoded and the 0-based
    line number where the error was detected, both appended to the message
    when available.

    Args:
        message (str):
            Error description.

        path (str):
            Name of the decoded file, if known.

        line (int):
            0-based line number, if applicable.

    Examples:
        >>> from hexvhx.base import DecodeError
        >>> str(DecodeError('checksum mismatch'))
        'checksum mismatch'
        >>> str(DecodeError('checksum mismatch', path='data.hex', line=3))
        "checksum mismatch for file 'data.hex' at line 3"
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line: Optional[int] = None,
    ):

        self.message: str = message
        self.path: Optional[str] = path
        self.line: Optional[int] = line

        text = message
        if path is not None:
            text += f' for file {path!r}'
        if line is not None:
            text += f' at line {line}'
        super().__init__(text)

    def at(
        self,
        path: Optional[str] = None,
        line: Optional[int] = None,
    ) -> 'DecodeError':
        r"""Locates the error.

        Returns:
            :class:`DecodeError`: Same error type and message, with the
            provided `path` and `line`.
        """

        return type(self)(self.message, path=path, line=line)


class RecordSyntaxError(DecodeError):
    r"""Record line is not made of valid hexadecimal digits."""


class RecordLengthError(DecodeError):
    r"""Record size disagrees with its count or its type."""


class ChecksumError(DecodeError):
    r"""Stored record checksum disagrees with the computed one."""


class LayoutError(DecodeError):
    r"""Data does not fill a whole number of chunks."""


class AlignmentError(ValueError):
    r"""Data size is not a multiple of the word size."""


# ============================================================================

class FileFormat(enum.Enum):
    r"""Supported record file formats."""

    IHEX = 'ihex'
    r"""Intel HEX records."""

    VHX = 'vhx'
    r"""Flat hexadecimal words, chunked."""

    @property
    def extensions(self) -> Sequence[str]:
        r"""list of str: File extensions of the format."""

        return _FILE_EXT[self]

    @classmethod
    def from_path(cls, file_path: AnyPath) -> 'FileFormat':
        r"""Guesses the file format by its extension.

        Args:
            file_path (str):
                File path to analyze.

        Returns:
            :class:`FileFormat`: Matching file format.

        Raises:
            ValueError: Missing or unsupported file extension.

        Examples:
            >>> from hexvhx.base import FileFormat
            >>> FileFormat.from_path('firmware.hex')
            <FileFormat.IHEX: 'ihex'>
            >>> FileFormat.from_path('firmware.vhx128')
            <FileFormat.VHX: 'vhx'>
        """

        file_ext = os.path.splitext(os.fsdecode(file_path))[1]
        if not file_ext:
            raise ValueError('no file extension specified')

        for file_format, extensions in _FILE_EXT.items():
            if file_ext in extensions:
                return file_format

        raise ValueError(f'unsupported file type: {file_ext[1:]!r}')


_FILE_EXT = {
    FileFormat.IHEX: ('.hex',),
    FileFormat.VHX: ('.vhx', '.vhx128'),
}


# ============================================================================

class Image:
    r"""Dense memory image.

    A contiguous byte string placed at a start address.
    It is the shared representation between decoders and encoders, and it
    never changes after construction.

    Args:
        start_address (int):
            Address of the first byte, within 32 bits.

        data (bytes):
            Memory contents.

    Examples:
        >>> from hexvhx.base import Image
        >>> image = Image(0x1000, b'\x00\x01\x02\x03')
        >>> image
        Image(start_address=0x00001000, size=4)
        >>> image.endex
        4100
        >>> list(image.words())
        [b'\x00\x01\x02\x03']
    """

    def __init__(
        self,
        start_address: int = 0,
        data: AnyBytes = b'',
    ):

        start_address = start_address.__index__()
        if not 0 <= start_address <= ADDRESS_MAX:
            raise ValueError('start address overflow')

        self._start_address: int = start_address
        self._data: bytes = bytes(data)

    def __bytes__(self) -> bytes:

        return self._data

    def __eq__(self, other: Any) -> bool:

        if isinstance(other, Image):
            return (self._start_address == other._start_address and
                    self._data == other._data)
        else:
            return NotImplemented

    def __hash__(self) -> int:

        return hash((self._start_address, self._data))

    def __len__(self) -> int:

        return len(self._data)

    def __repr__(self) -> str:

        return (f'{type(self).__name__}('
                f'start_address=0x{self._start_address:08X}, '
                f'size={len(self._data)})')

    @property
    def data(self) -> bytes:
        r"""bytes: Memory contents."""

        return self._data

    @property
    def endex(self) -> int:
        r"""int: Exclusive end address."""

        return self._start_address + len(self._data)

    @classmethod
    def from_memory(
        cls,
        memory: ImmutableMemory,
        fill: int = DEFAULT_FILL,
    ) -> 'Image':
        r"""Creates an image from sparse memory.

        Any holes between the first and the last stored bytes of `memory`
        are filled with `fill`.

        Args:
            memory (:class:`bytesparse.base.ImmutableMemory`):
                Sparse memory.

            fill (int):
                Byte value for holes.

        Returns:
            :class:`Image`: Dense image, starting at the lowest address.

        Examples:
            >>> from bytesparse import Memory
            >>> from hexvhx.base import Image
            >>> memory = Memory.from_blocks([[0, b"\xAA"], [3, b"\xBB"]])
            >>> Image.from_memory(memory, fill=0x00).data
            b'\xaa\x00\x00\xbb'
        """

        if not memory:
            return cls()

        dense = memory.extract(pattern=fill)
        return cls(memory.start, dense.to_bytes())

    @property
    def start_address(self) -> int:
        r"""int: Address of the first byte."""

        return self._start_address

    def words(self) -> Iterator[bytes]:
        r"""Iterates over whole words.

        A trailing partial word is not yielded.

        Yields:
            bytes: 4-byte word, in memory order.
        """

        data = self._data
        for offset in range(0, len(data) - WORD_SIZE + 1, WORD_SIZE):
            yield data[offset:(offset + WORD_SIZE)]


# ============================================================================

if not __TYPING_HAS_SELF:  # pragma: no cover
    del Self
    Self = TypeVar('Self', bound='BaseFile')


class BaseFile(abc.ABC):
    r"""Abstract record file object.

    It binds an :class:`Image` to the *meta* options of a specific record
    file format, which drive how the image is parsed and serialized.
    """

    FILE_FORMAT: FileFormat = NotImplemented
    r"""File format handled by this class."""

    META_KEYS: Sequence[str] = []
    r"""Names of the format options, stored as attributes."""

    def __eq__(self, other: Any) -> bool:

        if isinstance(other, BaseFile):
            return (type(self) is type(other) and
                    self._image == other._image and
                    self.get_meta() == other.get_meta())
        else:
            return NotImplemented

    def __init__(self, image: Optional[Image] = None):

        if image is None:
            image = Image()
        self._image: Image = image

    def __repr__(self) -> str:

        meta = ', '.join(f'{key}={value!r}' for key, value in self.get_meta().items())
        return f'{type(self).__name__}({self._image!r}, {meta})'

    @classmethod
    def convert(cls, source: 'BaseFile', **meta) -> Self:
        r"""Converts a file object into this format.

        Args:
            source (:class:`BaseFile`):
                File object to convert.

            meta:
                Format options of the new file object.

        Returns:
            :class:`BaseFile`: New file object sharing the `source` image.
        """

        return cls.from_image(source.image, **meta)

    @classmethod
    def from_image(cls, image: Image, **meta) -> Self:
        r"""Creates a file object from an image.

        Args:
            image (:class:`Image`):
                Memory image.

            meta:
                Format options, as per :attr:`META_KEYS`.

        Returns:
            :class:`BaseFile`: New file object.
        """

        file = cls(image, **meta)
        return file

    def get_meta(self) -> Mapping[str, Any]:
        r"""Gets meta information.

        Returns:
            dict: Attribute values listed by :attr:`META_KEYS`.
        """

        return {key: getattr(self, key) for key in self.META_KEYS}

    @property
    def image(self) -> Image:
        r""":class:`Image`: Memory image."""

        return self._image

    @classmethod
    def load(
        cls,
        in_path_or_stream: Optional[Union[AnyPath, IO]],
        *args,
        **kwargs,
    ) -> Self:
        r"""Loads a file object from the filesystem.

        Args:
            in_path_or_stream (str or bytes IO):
                Path of the file within the filesystem, or byte input stream.
                If ``None``, ``sys.stdin.buffer`` is used.

            args:
                Forwarded to :meth:`parse`.

            kwargs:
                Forwarded to :meth:`parse`.

        Returns:
            :class:`BaseFile`: Loaded file object.
        """

        if in_path_or_stream is None:
            in_path_or_stream = sys.stdin.buffer

        if isinstance(in_path_or_stream, io.IOBase):
            stream = in_path_or_stream
            return cls.parse(stream, *args, **kwargs)
        else:
            path = os.fsdecode(in_path_or_stream)
            with open(path, 'rb') as stream:
                return cls.parse(stream, *args, **kwargs)

    @classmethod
    @abc.abstractmethod
    def parse(cls, stream: Union[AnyBytes, IO], *args, **kwargs) -> Self:
        r"""Parses a byte stream.

        Args:
            stream (bytes IO or buffer):
                Stream or byte buffer to parse.

        Returns:
            :class:`BaseFile`: New file object.
        """
        ...

    def save(
        self,
        out_path_or_stream: Optional[Union[AnyPath, IO]],
    ) -> Self:
        r"""Saves a file object into the filesystem.

        Args:
            out_path_or_stream (str or bytes IO):
                Path of the file within the filesystem, or output byte stream.
                If ``None``, ``sys.stdout.buffer`` is used.

        Returns:
            :class:`BaseFile`: *self*.
        """

        if out_path_or_stream is None:
            out_path_or_stream = sys.stdout.buffer

        if isinstance(out_path_or_stream, io.IOBase):
            stream = out_path_or_stream
            return self.serialize(stream)
        else:
            path = os.fsdecode(out_path_or_stream)
            with open(path, 'wb') as stream:
                return self.serialize(stream)

    @abc.abstractmethod
    def serialize(self, stream: IO) -> Self:
        r"""Serializes the image onto a byte stream.

        Args:
            stream (bytes IO):
                Stream to write onto.

        Returns:
            :class:`BaseFile`: *self*.
        """
        ...


def stream_name(stream: Any) -> Optional[str]:
    r"""Name of a stream, for diagnostics.

    Args:
        stream:
            Any object, usually a file object.

    Returns:
        str: The ``name`` attribute as a string, ``None`` if missing.
    """

    name = getattr(stream, 'name', None)
    if name is None or isinstance(name, int):
        return None
    return os.fsdecode(name)
