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

r"""Generic utility functions."""

import binascii
import re
from typing import Any
from typing import Iterator
from typing import Optional
from typing import Union

from .base import WORD_SIZE
from .base import AlignmentError
from .base import AnyBytes
from .base import EllipsisType

INT_REGEX = re.compile(r'^\s*(?P<prefix>(0x)?)'
                       r'(?P<value>[a-f0-9]+)\s*$')

NON_HEX_REGEX = re.compile(b'[^0-9A-Fa-f]+')


def checksum(data: AnyBytes) -> int:
    r"""Computes the Intel HEX checksum.

    It is the two's complement of the 8-bit sum of all the bytes.

    Args:
        data (bytes):
            Record bytes, without the checksum itself.

    Returns:
        int: Checksum byte value.

    Examples:
        >>> from hexvhx.utils import checksum
        >>> hex(checksum(b'\x02\x00\x00\x04\x12\x34'))
        '0xb4'
        >>> checksum(b'\x00\x00\x00\x01')
        255
        >>> checksum(b'')
        0
    """

    return (((sum(data) & 0xFF) ^ 0xFF) + 1) & 0xFF


def chop(
    vector: AnyBytes,
    window: int,
) -> Iterator[AnyBytes]:
    r"""Chops a vector.

    Iterates through the vector grouping its items into windows.

    Args:
        vector (items):
            Vector to chop.

        window (int):
            Window length.

    Yields:
        list or items: `vector` slices of up to `window` elements.

    Examples:
        >>> list(chop(b'ABCDEFG', 2))
        [b'AB', b'CD', b'EF', b'G']

        >>> b':'.join(chop(b'ABCDEFG', 2))
        b'AB:CD:EF:G'
    """
    window = int(window)
    if window <= 0:
        raise ValueError('non-positive window')

    for i in range(0, len(vector), window):
        yield vector[i:(i + window)]


def chop_exact(
    vector: AnyBytes,
    window: int,
) -> Iterator[AnyBytes]:
    r"""Chops a vector into whole windows only.

    Like :func:`chop`, but a trailing partial window is not yielded.

    Examples:
        >>> list(chop_exact(b'ABCDEFG', 2))
        [b'AB', b'CD', b'EF']
    """
    window = int(window)
    if window <= 0:
        raise ValueError('non-positive window')

    for i in range(0, len(vector) - window + 1, window):
        yield vector[i:(i + window)]


def hexlify(
    bytestr: AnyBytes,
    upper: bool = True,
) -> bytes:
    r"""Converts raw bytes into a hexadecimal byte string.

    Args:
        bytestr (bytes):
            Source byte string.

        upper (bool):
            Uppercase hexadecimal string.

    Returns:
        bytes: Hexadecimal byte string.

    Examples:
        >>> from hexvhx.utils import hexlify
        >>> hexlify(b'\xAA\xBB\xCC')
        b'AABBCC'
        >>> hexlify(b'\xAA\xBB\xCC', upper=False)
        b'aabbcc'
    """

    hexstr = binascii.hexlify(bytestr)

    if upper:
        hexstr = hexstr.upper()

    return hexstr


def parse_int(
    value: Union[str, Any],
) -> Optional[int]:
    r"""Parses an integer.

    Args:
        value:
            A generic object to convert to integer.
            In case `value` is a :obj:`str` (case-insensitive), it is either
            decimal, or hexadecimal when prefixed with ``0x``.
            A ``None`` value evaluates as ``None``.
            Any other object class will call the standard :func:`int`.

    Returns:
        int: None if `value` is ``None``, its integer conversion otherwise.

    Examples:
        >>> parse_int('0xFF')
        255

        >>> parse_int('128')
        128

        >>> parse_int(None) is None
        True
    """
    if value is None:
        return None

    elif isinstance(value, str):
        value = value.lower()
        m = INT_REGEX.match(value)
        if not m:
            raise ValueError(f'invalid syntax: {value!r}')
        g = m.groupdict()

        if g['prefix'] == '0x':
            return int(g['value'], 16)
        else:
            return int(g['value'], 10)

    else:
        return int(value)


def swap_words(data: AnyBytes) -> bytes:
    r"""Reverses the byte order of each word.

    Args:
        data (bytes):
            Word aligned byte string.

    Returns:
        bytes: `data` with each 4-byte word reversed.

    Raises:
        AlignmentError: `data` size is not a multiple of the word size.

    Examples:
        >>> from hexvhx.utils import swap_words
        >>> swap_words(b'\x01\x02\x03\x04\x05\x06\x07\x08')
        b'\x04\x03\x02\x01\x08\x07\x06\x05'
    """

    size = len(data)
    if size % WORD_SIZE:
        raise AlignmentError(f'data size not word aligned: {size}')

    return b''.join(word[::-1] for word in chop(bytes(data), WORD_SIZE))


def unhexlify(
    hexstr: AnyBytes,
    delete: Optional[Union[AnyBytes, EllipsisType]] = None,
) -> bytes:
    r"""Converts a hexadecimal byte string into raw bytes.

    If `delete`, its byte values are deleted from `hexstr` before evaluation.
    Useful to remove whitespace and separators.

    Args:
        hexstr (bytes):
            Source hexadecimal byte string.

        delete (bytes):
            If empty or ``None``, no deletion occurs.
            If ``Ellipsis``, anything but hexadecimal digits is deleted.

    Returns:
        bytes: Raw byte string.

    Raises:
        binascii.Error: Odd digit count or invalid digits.

    Examples:
        >>> from hexvhx.utils import unhexlify
        >>> unhexlify(b'AABBCC')
        b'\xaa\xbb\xcc'
        >>> unhexlify(b'AA BB\nCC', delete=...)
        b'\xaa\xbb\xcc'
        >>> unhexlify(b'AA/BB/CC', delete=b'/')
        b'\xaa\xbb\xcc'
    """

    if delete:
        if delete is Ellipsis:
            hexstr = NON_HEX_REGEX.sub(b'', bytes(hexstr))
        else:
            hexstr = bytes(hexstr).translate(None, delete)

    bytestr = binascii.unhexlify(hexstr)
    return bytestr
