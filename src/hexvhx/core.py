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

r"""Conversion helpers.

These functions select the record file object type by :class:`FileFormat`,
usually guessed from the file extension.
"""

import io
from typing import IO
from typing import Optional
from typing import Union

from .base import DEFAULT_CHUNK_SIZE
from .base import DEFAULT_FILL
from .base import AnyPath
from .base import BaseFile
from .base import FileFormat
from .base import Image
from .formats.ihex import IhexFile
from .formats.vhx import VhxFile
from .formats.vhx import check_chunk_size


def guess_format(
    path: Optional[AnyPath],
    file_format: Optional[FileFormat] = None,
) -> FileFormat:
    r"""Guesses the file format.

    Args:
        path (str):
            File path; its extension is analyzed if `file_format` is ``None``.

        file_format (:class:`FileFormat`):
            Forced file format.

    Returns:
        :class:`FileFormat`: File format.

    Raises:
        ValueError: Cannot guess the file format.

    Examples:
        >>> from hexvhx.core import guess_format
        >>> guess_format('firmware.vhx')
        <FileFormat.VHX: 'vhx'>
    """

    if file_format is not None:
        return FileFormat(file_format)
    if path is None:
        raise ValueError('standard streams require a file format')
    return FileFormat.from_path(path)


def load(
    in_path_or_stream: Optional[Union[AnyPath, IO]],
    file_format: Optional[FileFormat] = None,
    little_endian: bool = True,
    fill: int = DEFAULT_FILL,
    start_address: int = 0,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Image:
    r"""Loads an image.

    Args:
        in_path_or_stream (str or bytes IO):
            Input file path or byte stream.

        file_format (:class:`FileFormat`):
            Input file format; guessed by the path extension if ``None``.

        little_endian (bool):
            Intel HEX words are little endian.

        fill (int):
            Intel HEX address gap filler byte.

        start_address (int):
            VHX start address.

        chunk_size (int):
            VHX chunk size, in bits.

    Returns:
        :class:`Image`: Loaded image.

    Examples:
        >>> from hexvhx import load
        >>> image = load('firmware.hex', little_endian=False)
    """

    path = None if isinstance(in_path_or_stream, io.IOBase) else in_path_or_stream
    file_format = guess_format(path, file_format)

    if file_format is FileFormat.IHEX:
        file = IhexFile.load(in_path_or_stream, little_endian=little_endian, fill=fill)
    else:
        file = VhxFile.load(in_path_or_stream, start_address=start_address, chunk_size=chunk_size)
    return file.image


def save(
    image: Image,
    out_path_or_stream: Optional[Union[AnyPath, IO]],
    file_format: Optional[FileFormat] = None,
    little_endian: bool = True,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> BaseFile:
    r"""Saves an image.

    Args:
        image (:class:`Image`):
            Image to save.

        out_path_or_stream (str or bytes IO):
            Output file path or byte stream.

        file_format (:class:`FileFormat`):
            Output file format; guessed by the path extension if ``None``.

        little_endian (bool):
            Intel HEX words are little endian.

        chunk_size (int):
            VHX chunk size, in bits.

    Returns:
        :class:`BaseFile`: File object used internally.
    """

    path = None if isinstance(out_path_or_stream, io.IOBase) else out_path_or_stream
    file_format = guess_format(path, file_format)

    if file_format is FileFormat.IHEX:
        file = IhexFile(image, little_endian=little_endian)
    else:
        file = VhxFile(image, chunk_size=chunk_size)
    return file.save(out_path_or_stream)


def convert(
    in_path: AnyPath,
    out_path: AnyPath,
    little_endian: bool = True,
    fill: int = DEFAULT_FILL,
    start_address: int = 0,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Image:
    r"""Converts a file into another format.

    Formats are guessed by the file extensions.

    Args:
        in_path (str):
            Input file path.

        out_path (str):
            Output file path.

        little_endian (bool):
            Intel HEX words are little endian, for both input and output.

        fill (int):
            Intel HEX address gap filler byte.

        start_address (int):
            VHX input start address.

        chunk_size (int):
            VHX chunk size, in bits, for both input and output.

    Returns:
        :class:`Image`: Image being converted.

    Examples:
        >>> from hexvhx import convert
        >>> _ = convert('firmware.hex', 'firmware.vhx', chunk_size=64)
    """

    chunk_size = check_chunk_size(chunk_size)
    out_format = guess_format(out_path)
    image = load(in_path,
                 little_endian=little_endian,
                 fill=fill,
                 start_address=start_address,
                 chunk_size=chunk_size)
    save(image, out_path,
         file_format=out_format,
         little_endian=little_endian,
         chunk_size=chunk_size)
    return image
