# -*- coding: utf-8 -*-
from click.testing import CliRunner

import hexvhx
from hexvhx.cli import main


def test_main():
    runner = CliRunner()
    result = runner.invoke(main, [])

    assert 'convert' in result.output
    assert 'dump' in result.output


def test_exports():
    for name in ('Image', 'IhexFile', 'VhxFile', 'FileFormat', 'load', 'save',
                 'convert', 'dump', 'checksum', 'DecodeError'):
        assert hasattr(hexvhx, name)
