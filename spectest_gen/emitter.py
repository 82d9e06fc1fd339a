"""
Bundle emitter: assembles generated scripts into one pytest module.

The artifact starts with a shared preamble (the Value helpers and the
spectest import environment), followed by one test class per script.
Fat scripts are left out to keep the generated module small enough to
import and run in reasonable time.
"""

import inspect
import logging
import os
import re
import textwrap
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Set, TextIO

from . import values, wabt
from .commands import Command
from .errors import SpecTestGenError
from .fragments import INDENT
from .generator import Disassembler, WastTestGenerator

LOGGER = logging.getLogger(__name__)

OUTPUT_NAME = 'spectests.py'

BANNER = """\
# Python test file autogenerated by spectest_gen (scripts/generate_spectests.py).
# Please do NOT modify it by hand, as it will be reset on next build.
"""

ENVIRONMENT = '''
import math

import pytest
from wasmtime import Engine, Instance, Linker, Module, Store, Trap, Val, WasmtimeError, wat2wasm

IMPORT_MODULE = """
(module
  (type $t0 (func (param i32)))
  (type $t1 (func (param i32 f32)))
  (type $t2 (func))
  (func $print_i32 (export "print_i32") (type $t0) (param $lhs i32))
  (func $print_i32_f32 (export "print_i32_f32") (type $t1) (param $lhs i32) (param $rhs f32))
  (func $print (export "print") (type $t2))
  (table $table (export "table") 10 20 funcref)
  (memory $memory (export "memory") 1 2)
  (global $global_i32 (export "global_i32") i32 (i32.const 666)))
"""

RUNTIME_FAILURES = (Trap, WasmtimeError)

_TO_VAL = {I32: Val.i32, I64: Val.i64, F32: Val.f32, F64: Val.f64}


def generate_imports(engine, store):
    """Instantiate the spectest module and register it for linking."""
    module = Module(engine, wat2wasm(IMPORT_MODULE))
    linker = Linker(engine)
    linker.define_instance(store, "spectest", Instance(store, module, []))
    return linker


class SpecInstance:
    """A module instance together with the store it lives in."""

    def __init__(self, store, instance):
        self.store = store
        self.instance = instance

    def call(self, field, args):
        """Invoke an export and return its results as a list of Value."""
        func = self.instance.exports(self.store)[field]
        result_types = [str(ty) for ty in func.type(self.store).results]
        raw = func(self.store, *[_TO_VAL[arg.kind](arg.to_python()) for arg in args])
        if not result_types:
            raw = []
        elif len(result_types) == 1:
            raw = [raw]
        return [
            Value.from_python(kind, r.value if isinstance(r, Val) else r)
            for kind, r in zip(result_types, raw)
        ]


def instantiate_module(module_str):
    engine = Engine()
    store = Store(engine)
    module = Module(engine, wat2wasm(module_str))
    return SpecInstance(store, generate_imports(engine, store).instantiate(store, module))


def compile_module(wasm_binary):
    return Module(Engine(), wasm_binary)
'''

PREAMBLE = BANNER + '\n' + inspect.getsource(values) + ENVIRONMENT


def script_name_for(path: Path) -> str:
    """Script base name without extensions: 'spectests/f32_.wast' -> 'f32_'."""
    return Path(path).name.split('.')[0]


def class_name_for(test_name: str) -> str:
    name = re.sub(r'\W', '_', test_name, flags=re.ASCII)
    return f'Test_{name}'


class BundleEmitter:
    """Writes the preamble once, then whole script blocks one at a time."""

    def __init__(self, out: TextIO):
        self._out = out
        self._lock = threading.Lock()
        self._class_names: Set[str] = set()
        out.write(PREAMBLE)

    def _reserve_class_name(self, test_name: str) -> str:
        base = class_name_for(test_name)
        name = base
        suffix = 2
        while name in self._class_names:
            name = f'{base}_{suffix}'
            suffix += 1
        self._class_names.add(name)
        return name

    def emit(self, test_name: str, generator: WastTestGenerator) -> bool:
        """Append the script's test class. Returns False if the script is fat and was left out."""
        if generator.is_fat_test():
            LOGGER.warning("Skipping fat test %s (%d commands)", test_name, generator.command_no)
            return False

        body = generator.finalize()
        if not generator.has_members:
            body += 'pass\n'

        with self._lock:
            name = self._reserve_class_name(test_name)
            self._out.write(f'\n\nclass {name}:\n')
            self._out.write(textwrap.indent(body, INDENT))
        return True


def generate_spectest(
    emitter: BundleEmitter,
    test_name: str,
    commands: Iterable[Command],
    disassemble: Disassembler = wabt.wasm2wat,
) -> bool:
    generator = WastTestGenerator(commands, disassemble)
    generator.consume()
    return emitter.emit(test_name, generator)


@dataclass
class BuildReport:
    output: Path
    included: List[str] = field(default_factory=list)
    fat: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def build(
    script_paths: Iterable[Path],
    out_dir: Path,
    jobs: int = 1,
    keep_going: bool = False,
    parse: Callable[[Path], List[Command]] = wabt.parse_script,
    disassemble: Disassembler = wabt.wasm2wat,
) -> BuildReport:
    """
    Generate the test module for every script into out_dir/spectests.py.

    Scripts are generated on a thread pool of `jobs` workers and appended in
    input order. A script that fails to generate aborts the build, unless
    keep_going is set, in which case it is logged and left out.
    """
    out_path = Path(out_dir) / OUTPUT_NAME
    out_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = out_path.with_name(OUTPUT_NAME + '.tmp')
    report = BuildReport(output=out_path)

    def run(path: Path) -> WastTestGenerator:
        generator = WastTestGenerator(parse(path), disassemble)
        generator.consume()
        return generator

    try:
        with open(tmp_path, 'w') as out, ThreadPoolExecutor(max_workers=max(1, jobs)) as pool:
            emitter = BundleEmitter(out)
            futures = [(Path(path), pool.submit(run, Path(path))) for path in script_paths]
            for path, future in futures:
                name = script_name_for(path)
                try:
                    generator = future.result()
                except SpecTestGenError as e:
                    if not keep_going:
                        raise
                    LOGGER.error("Skipping %s: %s", path, e)
                    report.failed.append(name)
                    continue

                if emitter.emit(name, generator):
                    report.included.append(name)
                else:
                    report.fat.append(name)
        os.replace(tmp_path, out_path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()

    return report
