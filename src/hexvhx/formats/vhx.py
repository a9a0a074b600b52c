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

r"""Flat hexadecimal words format.

A VHX file is a stream of hexadecimal digits, split into lines of a fixed
*chunk size* (64 or 128 bits).
Each line holds the 32-bit words of a chunk, most significant word first,
i.e. in reverse order with respect to their memory addresses.
Characters other than hexadecimal digits are ignored when reading.

Examples:
    >>> import sys
    >>> from hexvhx.base import Image
    >>> from hexvhx.formats.vhx import VhxFile
    >>> image = Image(0, bytes(range(16)))
    >>> _ = VhxFile(image, chunk_size=64).serialize(sys.stdout.buffer)
    0405060700010203
    0c0d0e0f08090a0b
"""

import binascii
import io
from typing import IO
from typing import Any
from typing import Optional
from typing import TypeVar
from typing import Union

from ..base import CHUNK_SIZES
from ..base import DEFAULT_CHUNK_SIZE
from ..base import WORD_BITS
from ..base import WORD_SIZE
from ..base import AnyBytes
from ..base import AnyPath
from ..base import BaseFile
from ..base import DecodeError
from ..base import FileFormat
from ..base import Image
from ..base import LayoutError
from ..base import TypeAlias
from ..base import stream_name
from ..utils import chop
from ..utils import chop_exact
from ..utils import hexlify
from ..utils import unhexlify

try:
    from typing import Self
except ImportError:  # pragma: no cover
    Self: TypeAlias = Any  # Python < 3.11
__TYPING_HAS_SELF = Self is not Any


def check_chunk_size(chunk_size: int) -> int:
    r"""Validates a chunk size.

    Args:
        chunk_size (int):
            Chunk size, in bits.

    Returns:
        int: `chunk_size` itself.

    Raises:
        ValueError: Unsupported chunk size.

    Examples:
        >>> from hexvhx.formats.vhx import check_chunk_size
        >>> check_chunk_size(64)
        64
        >>> check_chunk_size(32)
        Traceback (most recent call last):
            ...
        ValueError: chunk size must be either 64 or 128
    """

    chunk_size = chunk_size.__index__()
    if chunk_size not in CHUNK_SIZES:
        raise ValueError('chunk size must be either 64 or 128')
    return chunk_size


if not __TYPING_HAS_SELF:  # pragma: no cover
    del Self
    Self = TypeVar('Self', bound='VhxFile')


class VhxFile(BaseFile):
    r"""VHX file object.

    Args:
        image (:class:`Image`):
            Memory image.

        chunk_size (int):
            Bits per line; either 64 or 128.
    """

    FILE_FORMAT: FileFormat = FileFormat.VHX

    META_KEYS = [
        'chunk_size',
    ]

    def __init__(
        self,
        image: Optional[Image] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):

        super().__init__(image)
        self.chunk_size: int = check_chunk_size(chunk_size)

    @property
    def chunk_words(self) -> int:
        r"""int: Words per chunk."""

        return self.chunk_size // WORD_BITS

    @classmethod
    def load(
        cls,
        in_path_or_stream: Optional[Union[AnyPath, IO]],
        start_address: int = 0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> Self:

        chunk_size = check_chunk_size(chunk_size)
        return super().load(in_path_or_stream,
                            start_address=start_address,
                            chunk_size=chunk_size)

    @classmethod
    def parse(
        cls,
        stream: Union[AnyBytes, IO],
        start_address: int = 0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> Self:
        r"""Parses a byte stream.

        Args:
            stream (bytes IO or buffer):
                Stream or byte buffer to parse.

            start_address (int):
                Address of the first byte; the format does not carry any.

            chunk_size (int):
                Bits per line; either 64 or 128.

        Returns:
            :class:`VhxFile`: Parsed file object.

        Raises:
            ValueError: Unsupported chunk size.
            DecodeError: Odd number of hexadecimal digits.
            LayoutError: Data does not fill a whole number of chunks.

        Examples:
            >>> from hexvhx.formats.vhx import VhxFile
            >>> file = VhxFile.parse(b'0405060700010203\n', chunk_size=64)
            >>> file.image.data
            b'\x00\x01\x02\x03\x04\x05\x06\x07'
        """

        chunk_size = check_chunk_size(chunk_size)

        if isinstance(stream, (bytes, bytearray, memoryview)):
            stream = io.BytesIO(stream)

        path = stream_name(stream)
        try:
            raw = unhexlify(stream.read(), delete=...)
        except binascii.Error as exc:
            raise DecodeError(f'hex decode error: {exc}', path) from None

        chunk_length = (chunk_size // WORD_BITS) * WORD_SIZE
        if len(raw) % chunk_length:
            raise LayoutError('incomplete vhx memory layout', path)

        data = bytearray()
        for chunk in chop(raw, chunk_length):
            words = list(chop(chunk, WORD_SIZE))
            for word in reversed(words):
                data += word

        image = Image(start_address, data)
        file = cls(image, chunk_size=chunk_size)
        return file

    def serialize(self, stream: IO, end: AnyBytes = b'\n') -> Self:
        r"""Serializes the image onto a byte stream.

        Only whole words and whole chunks are written; any trailing partial
        chunk is dropped.

        Args:
            stream (bytes IO):
                Stream to write onto.

            end (bytes):
                Line termination.

        Returns:
            :class:`VhxFile`: *self*.
        """

        words = [hexlify(word, upper=False) for word in self.image.words()]

        for chunk in chop_exact(words, self.chunk_words):
            stream.write(b''.join(reversed(chunk)) + bytes(end))
        return self
