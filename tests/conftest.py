"""Shared fixtures for the generator tests."""

import pytest

from spectest_gen import Command, Module, WastTestGenerator

ADD_WAT = """(module
  (func (export "add") (param i32 i32) (result i32)
    local.get 0
    local.get 1
    i32.add))
"""


def decode_wat(binary: bytes) -> str:
    """Stand-in for wasm2wat: test modules carry their WAT text as the payload."""
    return binary.decode('utf-8')


def module(wat: str = ADD_WAT) -> Module:
    return Module(binary=wat.encode('utf-8'))


def numbered(kinds):
    """Wrap command kinds as Commands on lines 1, 2, 3, ..."""
    return [Command(line=i + 1, kind=kind) for i, kind in enumerate(kinds)]


def generate(kinds) -> WastTestGenerator:
    generator = WastTestGenerator(numbered(kinds), decode_wat)
    generator.consume()
    return generator


@pytest.fixture
def disassemble():
    return decode_wat
