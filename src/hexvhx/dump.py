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

r"""Address-annotated word dump."""

from typing import IO
from typing import Iterator
from typing import Optional

import click

from .base import ADDRESS_MAX
from .base import WORD_SIZE
from .base import Image
from .utils import chop
from .utils import hexlify

WORDS_PER_LINE: int = 4
r"""Words displayed on each line."""


def dump_lines(image: Image) -> Iterator[str]:
    r"""Formats an image as dump lines.

    Each line shows the 32-bit address of its first word, followed by up to
    four words, each as lowercase hexadecimal digits in memory order.
    A trailing partial word is not shown.

    Args:
        image (:class:`Image`):
            Image to display.

    Yields:
        str: Dump line, without termination.

    Examples:
        >>> from hexvhx.base import Image
        >>> from hexvhx.dump import dump_lines
        >>> image = Image(0x1000, bytes(range(20)))
        >>> for line in dump_lines(image):
        ...     print(line)
        00001000: 00010203 04050607 08090a0b 0c0d0e0f
        00001010: 10111213
    """

    words = [hexlify(word, upper=False).decode() for word in image.words()]
    stride = WORDS_PER_LINE * WORD_SIZE
    address = image.start_address

    for group in chop(words, WORDS_PER_LINE):
        yield f'{address:08x}: {" ".join(group)}'
        address = (address + stride) & ADDRESS_MAX


def dump(
    image: Image,
    stream: Optional[IO] = None,
) -> None:
    r"""Prints an image dump.

    Args:
        image (:class:`Image`):
            Image to display.

        stream (text IO):
            Stream to print onto.
            If ``None``, *stdout* is used.
    """

    for line in dump_lines(image):
        click.echo(line, file=stream)
