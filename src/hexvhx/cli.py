"""
Module that contains the command line app.

Why does this file exist, and why not put this in __main__?

  You might be tempted to import things from __main__ later, but that will cause
  problems: the code will get executed twice:

  - When you run `python -m hexvhx` python will execute
    ``__main__.py`` as a script. That means there won't be any
    ``hexvhx.__main__`` in ``sys.modules``.
  - When you import __main__ it will get executed again (as a module) because
    there's no ``hexvhx.__main__`` in ``sys.modules``.

  Also see (1) from https://click.palletsprojects.com/en/stable/setuptools/#setuptools-integration
"""

from typing import Optional

import click

from . import __version__
from .base import ADDRESS_MAX
from .base import CHUNK_SIZES
from .base import DEFAULT_CHUNK_SIZE
from .base import DEFAULT_FILL
from .base import FileFormat
from .base import Image
from .core import load
from .core import save
from .dump import dump
from .utils import parse_int


class AddressIntParamType(click.ParamType):
    name = 'address'

    def convert(self, value, param, ctx):
        try:
            a = parse_int(value)
            if not 0 <= a <= ADDRESS_MAX:
                raise ValueError()
            return a
        except ValueError:
            self.fail(f'invalid address: {value!r}', param, ctx)


class ByteIntParamType(click.ParamType):
    name = 'byte'

    def convert(self, value, param, ctx):
        try:
            b = parse_int(value)
            if not 0 <= b <= 255:
                raise ValueError()
            return b
        except ValueError:
            self.fail(f'invalid byte: {value!r}', param, ctx)


class ChunkSizeParamType(click.ParamType):
    name = 'bits'

    def convert(self, value, param, ctx):
        try:
            size = int(value)
        except ValueError:
            self.fail(f'{value!r} is not a valid chunk size', param, ctx)
        if size not in CHUNK_SIZES:
            self.fail('chunk size must be either 64 or 128', param, ctx)
        return size


class RecordPathParamType(click.Path):

    def convert(self, value, param, ctx):
        path = super().convert(value, param, ctx)
        try:
            FileFormat.from_path(path)
        except ValueError as exc:
            self.fail(str(exc), param, ctx)
        return path


ADDRESS_INT = AddressIntParamType()
BYTE_INT = ByteIntParamType()
CHUNK_SIZE = ChunkSizeParamType()

FILE_PATH_IN = RecordPathParamType(dir_okay=False, readable=True, exists=True)
FILE_PATH_OUT = RecordPathParamType(dir_okay=False, writable=True)

ENDIANNESS_CHOICE = click.Choice(['little', 'big'])


# ----------------------------------------------------------------------------

def print_version(ctx, _, value):

    if not value or ctx.resilient_parsing:
        return

    click.echo(str(__version__))
    ctx.exit()


# ----------------------------------------------------------------------------

class ConversionCtxMgr:

    def __init__(
        self,
        input_path: str,
        output_path: Optional[str],
        endianness: str = 'little',
        fill: int = DEFAULT_FILL,
        start_address: int = 0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        verbose: bool = False,
    ):

        self.input_path: str = input_path
        self.input_format: FileFormat = FileFormat.from_path(input_path)

        self.output_path: Optional[str] = output_path or None
        self.output_format: Optional[FileFormat] = None
        if self.output_path:
            self.output_format = FileFormat.from_path(self.output_path)

        self.little_endian: bool = (endianness == 'little')
        self.fill: int = fill
        self.start_address: int = start_address
        self.chunk_size: int = chunk_size
        self.verbose: bool = verbose
        self.image: Optional[Image] = None

    def __enter__(self) -> 'ConversionCtxMgr':

        try:
            self.image = load(self.input_path,
                              file_format=self.input_format,
                              little_endian=self.little_endian,
                              fill=self.fill,
                              start_address=self.start_address,
                              chunk_size=self.chunk_size)
        except OSError as exc:
            raise click.ClickException(f'could not read {self.input_path!r}: {exc.strerror}')
        except ValueError as exc:
            raise click.ClickException(str(exc))

        if self.verbose:
            image = self.image
            click.echo(f'loaded {self.input_format.value} {self.input_path!r}: '
                       f'{len(image)} bytes at 0x{image.start_address:08x}', err=True)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:

        if exc_type is not None:
            return

        if self.output_path is None:
            dump(self.image)
            return

        try:
            save(self.image, self.output_path,
                 file_format=self.output_format,
                 little_endian=self.little_endian,
                 chunk_size=self.chunk_size)
        except OSError as exc:
            raise click.ClickException(f'could not create {self.output_path!r}: {exc.strerror}')
        except ValueError as exc:
            raise click.ClickException(str(exc))

        if self.verbose:
            click.echo(f'saved {self.output_format.value} {self.output_path!r}', err=True)


# ============================================================================

@click.group()
@click.option('-V', '--version', is_flag=True, is_eager=True,
              expose_value=False, callback=print_version, help="""
    Prints the package version number.
""")
def main() -> None:
    """
    Wrestles .hex files into .vhx files, or vice versa.

    Being built with `Click <https://click.palletsprojects.com/en/stable/>`_, all the
    commands follow POSIX-like syntax rules.
    """


# ----------------------------------------------------------------------------

@main.command()
@click.option('-c', '--chunk-size', type=CHUNK_SIZE, default=DEFAULT_CHUNK_SIZE, show_default=True, help="""
    Chunk size to use for .vhx files, in bits (64 or 128).
""")
@click.option('-e', '--endianness', type=ENDIANNESS_CHOICE, default='little', show_default=True, help="""
    Endianness of the words within .hex files.
""")
@click.option('-s', '--start-address', type=ADDRESS_INT, default=0, show_default=True, help="""
    Start address of .vhx files, only relevant when converting .vhx to .hex.
""")
@click.option('-f', '--fill', type=BYTE_INT, default=DEFAULT_FILL, show_default=True, help="""
    Byte value to fill holes in the memory layout with.
""")
@click.option('-v', '--verbose', is_flag=True, help="""
    Prints a summary of the processed files to standard error.
""")
@click.option('-V', '--version', is_flag=True, is_eager=True,
              expose_value=False, callback=print_version, help="""
    Prints the package version number.
""")
@click.argument('infile', type=FILE_PATH_IN)
@click.argument('outfile', type=FILE_PATH_OUT, required=False)
def convert(
    chunk_size: int,
    endianness: str,
    start_address: int,
    fill: int,
    verbose: bool,
    infile: str,
    outfile: Optional[str],
) -> None:
    r"""Converts a file to another format.

    ``INFILE`` is the path of the input file.

    ``OUTFILE`` is the path of the output file.
    Leave empty to only inspect the memory layout.

    Supported file extensions are ``.hex``, ``.vhx``, and ``.vhx128``.
    """

    with ConversionCtxMgr(infile, outfile,
                          endianness=endianness,
                          fill=fill,
                          start_address=start_address,
                          chunk_size=chunk_size,
                          verbose=verbose):
        pass


# ----------------------------------------------------------------------------

@main.command('dump')
@click.option('-c', '--chunk-size', type=CHUNK_SIZE, default=DEFAULT_CHUNK_SIZE, show_default=True, help="""
    Chunk size to use for .vhx files, in bits (64 or 128).
""")
@click.option('-e', '--endianness', type=ENDIANNESS_CHOICE, default='little', show_default=True, help="""
    Endianness of the words within .hex files.
""")
@click.option('-s', '--start-address', type=ADDRESS_INT, default=0, show_default=True, help="""
    Start address of .vhx files.
""")
@click.option('-f', '--fill', type=BYTE_INT, default=DEFAULT_FILL, show_default=True, help="""
    Byte value to fill holes in the memory layout with.
""")
@click.option('-V', '--version', is_flag=True, is_eager=True,
              expose_value=False, callback=print_version, help="""
    Prints the package version number.
""")
@click.argument('infile', type=FILE_PATH_IN)
def dump_command(
    chunk_size: int,
    endianness: str,
    start_address: int,
    fill: int,
    infile: str,
) -> None:
    r"""Prints the memory layout of a file.

    ``INFILE`` is the path of the input file.

    Each line shows an address and the following four 32-bit words.
    """

    with ConversionCtxMgr(infile, None,
                          endianness=endianness,
                          fill=fill,
                          start_address=start_address,
                          chunk_size=chunk_size):
        pass
