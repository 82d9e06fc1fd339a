"""
Adapters around the WebAssembly Binary Toolkit command line tools.

`wast2json` turns a .wast script into a JSON command list plus one .wasm file
per module; `wasm2wat` turns a module binary back into text. Tool locations
can be overridden with the WAST2JSON and WASM2WAT environment variables.
"""

import json
import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from .commands import (
    Action, Command, Get, Invoke,
    Module, AssertReturn, AssertReturnCanonicalNan, AssertReturnArithmeticNan,
    AssertTrap, AssertInvalid, AssertMalformed, AssertUninstantiable,
    AssertExhaustion, AssertUnlinkable, Register, PerformAction, Unsupported,
)
from .errors import DisassemblyError, ScriptParseError, UnsupportedCommand
from .values import Value, WIDTHS

LOGGER = logging.getLogger(__name__)

WAST2JSON = os.environ.get('WAST2JSON', 'wast2json')
WASM2WAT = os.environ.get('WASM2WAT', 'wasm2wat')

NAN_CANONICAL = 'nan:canonical'
NAN_ARITHMETIC = 'nan:arithmetic'


def parse_value(obj: Dict[str, Any]) -> Value:
    """Parse a value like {"type": "f32", "value": "2143289344"} (value is the raw bit pattern)."""
    vtype = obj.get('type')
    if vtype not in WIDTHS:
        raise UnsupportedCommand(f"Unsupported value type: {vtype}")
    raw = obj.get('value')
    if not isinstance(raw, str) or raw.startswith('nan:'):
        raise UnsupportedCommand(f"Unsupported {vtype} value: {raw!r}")
    try:
        bits = int(raw)
    except ValueError:
        raise ScriptParseError(f"Bad {vtype} value: {raw!r}") from None
    return Value(vtype, bits & ((1 << WIDTHS[vtype]) - 1))


def parse_action(obj: Dict[str, Any]) -> Action:
    atype = obj.get('type')
    module = obj.get('module')
    if atype == 'invoke':
        args = tuple(parse_value(arg) for arg in obj.get('args', []))
        return Invoke(field=obj['field'], args=args, module=module)
    if atype == 'get':
        return Get(field=obj['field'], module=module)
    raise ScriptParseError(f"Unknown action type: {atype!r}")


def _nan_expectation(expected: List[Dict[str, Any]]) -> Optional[str]:
    """Return 'canonical'/'arithmetic' if the expected list is a single NaN pattern."""
    markers = [e.get('value') for e in expected if str(e.get('value', '')).startswith('nan:')]
    if not markers:
        return None
    if len(expected) != 1:
        raise UnsupportedCommand("NaN patterns in multi-value results are not supported")
    if markers[0] == NAN_CANONICAL:
        return 'canonical'
    if markers[0] == NAN_ARITHMETIC:
        return 'arithmetic'
    raise ScriptParseError(f"Unknown NaN pattern: {markers[0]!r}")


def _read_module(obj: Dict[str, Any], base_dir: Path) -> bytes:
    filename = obj.get('filename')
    if not filename:
        raise ScriptParseError(f"Line {obj.get('line')}: command has no module file")
    try:
        return (base_dir / filename).read_bytes()
    except OSError as e:
        raise ScriptParseError(f"Line {obj.get('line')}: can't read module {filename}: {e}") from e


def command_from_json(obj: Dict[str, Any], base_dir: Path) -> Command:
    """Map one wast2json command object to a Command."""
    try:
        return _command_from_json(obj, base_dir)
    except KeyError as e:
        raise ScriptParseError(
            f"Line {obj.get('line')}: {obj.get('type')} command is missing {e}"
        ) from None


def _command_from_json(obj: Dict[str, Any], base_dir: Path) -> Command:
    ctype = obj.get('type')
    line = int(obj.get('line', 0))
    message = obj.get('text', '')

    if ctype == 'module':
        kind = Module(binary=_read_module(obj, base_dir), name=obj.get('name'))
    elif ctype == 'assert_return':
        action = parse_action(obj['action'])
        expected = obj.get('expected', [])
        nan = _nan_expectation(expected)
        if nan == 'canonical':
            kind = AssertReturnCanonicalNan(action=action)
        elif nan == 'arithmetic':
            kind = AssertReturnArithmeticNan(action=action)
        else:
            kind = AssertReturn(action=action, expected=tuple(parse_value(e) for e in expected))
    elif ctype == 'assert_return_canonical_nan':
        kind = AssertReturnCanonicalNan(action=parse_action(obj['action']))
    elif ctype == 'assert_return_arithmetic_nan':
        kind = AssertReturnArithmeticNan(action=parse_action(obj['action']))
    elif ctype == 'assert_trap':
        kind = AssertTrap(action=parse_action(obj['action']), message=message)
    elif ctype in ('assert_invalid', 'assert_malformed'):
        if obj.get('module_type', 'binary') != 'binary':
            # Text-form modules test the text parser, not the runtime
            raise UnsupportedCommand(f"Text module in {ctype}")
        binary = _read_module(obj, base_dir)
        if ctype == 'assert_invalid':
            kind = AssertInvalid(binary=binary, message=message)
        else:
            kind = AssertMalformed(binary=binary, message=message)
    elif ctype == 'assert_uninstantiable':
        kind = AssertUninstantiable(message=message)
    elif ctype == 'assert_unlinkable':
        kind = AssertUnlinkable(message=message)
    elif ctype == 'assert_exhaustion':
        kind = AssertExhaustion(message=message)
    elif ctype == 'register':
        kind = Register(as_name=obj.get('as', ''), name=obj.get('name'))
    elif ctype == 'action':
        kind = PerformAction(action=parse_action(obj['action']))
    else:
        raise ScriptParseError(f"Line {line}: unknown command type {ctype!r}")

    return Command(line=line, kind=kind)


def commands_from_json(data: Dict[str, Any], base_dir: Path) -> List[Command]:
    """
    Map a wast2json document to commands, one per entry.

    Commands without a test form become Unsupported placeholders so the
    command count and unit names still follow the script.
    """
    commands = []
    unsupported = 0
    for obj in data.get('commands', []):
        try:
            commands.append(command_from_json(obj, base_dir))
        except UnsupportedCommand as e:
            unsupported += 1
            commands.append(Command(
                line=int(obj.get('line', 0)),
                kind=Unsupported(command_type=str(obj.get('type')), reason=str(e)),
            ))
    if unsupported:
        LOGGER.info("%s: %d commands have no test form",
                    data.get('source_filename', '<script>'), unsupported)
    return commands


def parse_script(wast_path: Path) -> List[Command]:
    """Convert a .wast file with wast2json and return its commands."""
    wast_path = Path(wast_path)
    with tempfile.TemporaryDirectory() as tmp:
        json_path = Path(tmp) / f'{wast_path.stem}.json'
        try:
            result = subprocess.run(
                [WAST2JSON, str(wast_path), '-o', str(json_path)],
                capture_output=True, text=True
            )
        except OSError as e:
            raise ScriptParseError(f"Can't run {WAST2JSON}: {e}") from e
        if result.returncode != 0:
            raise ScriptParseError(f"{wast_path.name}: {result.stderr.strip()}")

        try:
            data = json.loads(json_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ScriptParseError(f"{wast_path.name}: unreadable wast2json output: {e}") from e
        return commands_from_json(data, json_path.parent)


def wasm2wat(wasm_binary: bytes) -> str:
    """Convert a WASM binary back to WAT text using wasm2wat."""
    with tempfile.NamedTemporaryFile(mode='wb', suffix='.wasm', delete=False) as f:
        f.write(wasm_binary)
        wasm_path = f.name

    try:
        result = subprocess.run(
            [WASM2WAT, wasm_path],
            capture_output=True, text=True
        )
    except OSError as e:
        raise DisassemblyError(f"Can't run {WASM2WAT}: {e}") from e
    finally:
        os.unlink(wasm_path)

    if result.returncode != 0:
        raise DisassemblyError(f"Can't convert back to wat: {result.stderr.strip()}")
    return result.stdout
