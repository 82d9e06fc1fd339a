"""
Structured pieces of generated test code.

Every fragment renders to source text for one member of the per-script test
class (or a line comment). Rendering is unindented; the bundle emitter
indents the whole block into the class body.
"""

from dataclasses import dataclass
from typing import List, Tuple

INDENT = '    '


def _method(name: str, params: str, body: List[str]) -> str:
    lines = [f'def {name}({params}):']
    lines.extend(INDENT + line for line in body)
    return '\n'.join(lines) + '\n'


def _escape_triple_quoted(text: str) -> str:
    return text.replace('\\', '\\\\').replace('"', '\\"')


def _call(field: str, args: str) -> str:
    return f'instance.call({field!r}, {args})'


@dataclass(frozen=True)
class LineComment:
    line: int

    def render(self) -> str:
        return f'\n# Line {self.line}\n'


@dataclass(frozen=True)
class ModuleFactory:
    """Compiles the module text and instantiates it against the spectest imports."""
    index: int
    wat: str

    @property
    def name(self) -> str:
        return f'create_module_{self.index}'

    def render(self) -> str:
        # Indent the module text so it lines up with the method body
        module_str = _escape_triple_quoted(self.wat.rstrip('\n')).replace('\n', '\n' + INDENT)
        return _method(self.name, 'self', [
            f'module_str = """{module_str}"""',
            'print(module_str)',
            'return instantiate_module(module_str)',
        ])


@dataclass(frozen=True)
class StartHook:
    index: int

    @property
    def name(self) -> str:
        return f'start_module_{self.index}'

    def render(self) -> str:
        return _method(self.name, 'self, instance', [
            '# The start function already ran during instantiation',
            'pass',
        ])


@dataclass(frozen=True)
class ActionUnit:
    """Invokes one export and, when given, checks the results."""
    name: str
    field: str
    args: str
    assertion: Tuple[str, ...] = ()

    def render(self) -> str:
        body = [f'print({"Executing function " + self.name!r})']
        if self.assertion:
            body.append(f'result = {_call(self.field, self.args)}')
            body.extend(self.assertion)
        else:
            body.append(_call(self.field, self.args))
        return _method(self.name, 'self, instance', body)


@dataclass(frozen=True)
class NanUnit:
    """Invokes one export and checks that the first result is a quiet NaN."""
    name: str
    field: str
    args: str

    def render(self) -> str:
        return _method(self.name, 'self, instance', [
            f'print({"Executing function " + self.name!r})',
            f'result = {_call(self.field, self.args)}',
            f'assert result, {"Missing result in " + self.name!r}',
            "assert is_quiet_nan(result[0]), 'Expected a quiet NaN, got %r' % (result[0],)",
        ])


@dataclass(frozen=True)
class TrapTest:
    """Runs one action unit against a fresh instance and expects it to fail."""
    name: str
    module_index: int
    action_name: str

    def render(self) -> str:
        return _method(f'test_{self.name}', 'self', [
            f'instance = self.create_module_{self.module_index}()',
            'with pytest.raises(RUNTIME_FAILURES):',
            f'{INDENT}self.{self.action_name}(instance)',
        ])


@dataclass(frozen=True)
class RejectTest:
    """Expects a raw module binary to fail compilation."""
    name: str
    binary: bytes
    reason: str

    def render(self) -> str:
        return _method(f'test_{self.name}', 'self', [
            f'# WASM should not compile as it is {self.reason}',
            f'wasm_binary = {self.binary!r}',
            'with pytest.raises(WasmtimeError):',
            f'{INDENT}compile_module(wasm_binary)',
        ])


@dataclass(frozen=True)
class BatchedTest:
    """Instantiates a module once and runs its pending units in order."""
    module_index: int
    calls: Tuple[str, ...]

    @property
    def name(self) -> str:
        return f'test_module_{self.module_index}'

    def render(self) -> str:
        body = [
            f'instance = self.create_module_{self.module_index}()',
            '# We group the calls together',
        ]
        body.extend(f'self.{call}(instance)' for call in self.calls)
        return '\n' + _method(self.name, 'self', body)
