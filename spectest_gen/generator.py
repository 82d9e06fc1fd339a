"""
Command-to-test-code translation.

WastTestGenerator walks one script's command stream once, turning each
command into fragments (module factories, action units, standalone tests)
and batching the units of each module into a single test that shares one
instance.
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .aggregator import ModuleCallAggregator
from .codec import bare_literal, is_nan, literal, literal_list, type_tag
from .commands import (
    Action, Command, CommandKind, Get, Invoke,
    Module, AssertReturn, AssertReturnCanonicalNan, AssertReturnArithmeticNan,
    AssertTrap, AssertInvalid, AssertMalformed, AssertUninstantiable,
    AssertExhaustion, AssertUnlinkable, Register, PerformAction, Unsupported,
)
from .errors import MalformedScriptError
from .fragments import (
    ActionUnit, LineComment, ModuleFactory, NanUnit, RejectTest, StartHook, TrapTest,
)
from .values import Value

LOGGER = logging.getLogger(__name__)

# Scripts with more commands than this are left out of the bundle
FAT_TEST_THRESHOLD = 200

Disassembler = Callable[[bytes], str]


def return_assertion(expected: Sequence[Value]) -> Tuple[str, ...]:
    """
    Assertion lines comparing `result` against the expected values.

    Without NaNs the whole result list must equal the expected list bit for
    bit. An expected NaN only checks the float type, NaN-ness and sign bit of
    its slot: runtimes are not required to propagate NaN payloads.
    """
    if not any(is_nan(value) for value in expected):
        return (f'assert result == {literal_list(expected)}',)

    lines = [f"assert len(result) == {len(expected)}, 'Unexpected results %r' % (result,)"]
    for i, value in enumerate(expected):
        if not is_nan(value):
            lines.append(f'assert result[{i}] == {literal(value)}')
            continue
        lines.extend([
            f'expected = {bare_literal(value)}',
            f"assert result[{i}].kind == {type_tag(value)!r}, 'Unexpected result type %r' % (result,)",
            f'assert result[{i}].is_nan()',
            f'assert result[{i}].is_sign_negative() == (math.copysign(1.0, expected) < 0)',
        ])
    return tuple(lines)


class WastTestGenerator:
    """Generator state for one script: counters, pending calls and output fragments."""

    def __init__(self, commands: Iterable[Command], disassemble: Disassembler):
        self.last_module = 0
        self.last_line = 0
        self.command_no = 0
        self.module_calls = ModuleCallAggregator()
        self.fragments: List = []
        self._commands = commands
        self._disassemble = disassemble
        self._consumed = False

    def is_fat_test(self, threshold: int = FAT_TEST_THRESHOLD) -> bool:
        return self.command_no > threshold

    def consume(self) -> None:
        """Visit every command, then flush every module's pending calls in order."""
        if self._consumed:
            raise RuntimeError("A generator consumes its command stream only once")
        self._consumed = True

        for command in self._commands:
            self.last_line = command.line
            self.command_no += 1
            self.fragments.append(LineComment(command.line))
            self.visit_command(command.kind)

        for n in range(1, self.last_module + 1):
            self.flush_module_calls(n)

    @property
    def has_members(self) -> bool:
        """False when the output holds nothing but line comments."""
        return any(not isinstance(fragment, LineComment) for fragment in self.fragments)

    def finalize(self) -> str:
        return ''.join(fragment.render() for fragment in self.fragments)

    def command_name(self) -> str:
        return f'c{self.command_no}_l{self.last_line}'

    def flush_module_calls(self, module: int) -> None:
        batch = self.module_calls.flush(module)
        if batch is not None:
            self.fragments.append(batch)

    # =========================================================================
    # Command visitor
    # =========================================================================

    def visit_command(self, cmd: CommandKind) -> None:
        match cmd:
            case Module(binary=binary, name=name):
                self.visit_module(binary, name)
            case AssertReturn(action=action, expected=expected):
                self.visit_assert_return(action, expected)
            case AssertReturnCanonicalNan(action=action):
                self.visit_assert_return_nan(action, 'canonical')
            case AssertReturnArithmeticNan(action=action):
                self.visit_assert_return_nan(action, 'arithmetic')
            case AssertTrap(action=action):
                self.visit_assert_trap(action)
            case AssertInvalid(binary=binary):
                self.visit_assert_rejected(binary, 'invalid')
            case AssertMalformed(binary=binary):
                self.visit_assert_rejected(binary, 'malformed')
            case AssertUninstantiable() | AssertExhaustion() | AssertUnlinkable() | Register():
                # Accepted and skipped, these have no generated test yet
                pass
            case PerformAction(action=action):
                self.visit_perform_action(action)
            case Unsupported(command_type=command_type, reason=reason):
                # Counted like any other command, nothing to emit
                LOGGER.debug("Skipping %s at line %d: %s", command_type, self.last_line, reason)
            case _:
                raise TypeError(f"Unknown command kind: {cmd!r}")

    def visit_module(self, binary: bytes, name: Optional[str]) -> None:
        wat = self._disassemble(binary)
        self.flush_module_calls(self.last_module)
        self.last_module += 1
        LOGGER.debug("Module %d%s at line %d", self.last_module,
                     f" ({name})" if name else "", self.last_line)

        self.fragments.append(ModuleFactory(index=self.last_module, wat=wat))
        start = StartHook(index=self.last_module)
        self.fragments.append(start)
        self.module_calls.register(self.last_module, start.name)

    def visit_action(self, action: Action, expected: Optional[Sequence[Value]]) -> Optional[str]:
        """Emit an action unit and return its name, or None for actions without a test form."""
        match action:
            case Invoke(field=field, args=args):
                self._require_module(field)
                assertion = return_assertion(expected) if expected is not None else ()
                name = f'{self.command_name()}_action_invoke'
                self.fragments.append(ActionUnit(
                    name=name, field=field, args=literal_list(args), assertion=assertion,
                ))
                return name
            case Get(field=field):
                LOGGER.debug("Skipping get %r at line %d", field, self.last_line)
                return None
            case _:
                raise TypeError(f"Unknown action: {action!r}")

    def visit_assert_return(self, action: Action, expected: Sequence[Value]) -> None:
        name = self.visit_action(action, expected)
        if name is not None:
            self.module_calls.register(self.last_module, name)

    def visit_perform_action(self, action: Action) -> None:
        name = self.visit_action(action, None)
        if name is not None:
            self.module_calls.register(self.last_module, name)

    def visit_assert_return_nan(self, action: Action, category: str) -> None:
        if not isinstance(action, Invoke):
            return
        self._require_module(action.field)
        name = f'{self.command_name()}_assert_return_{category}_nan'
        self.fragments.append(NanUnit(name=name, field=action.field, args=literal_list(action.args)))
        self.module_calls.register(self.last_module, name)

    def visit_assert_trap(self, action: Action) -> None:
        action_name = self.visit_action(action, None)
        if action_name is None:
            return
        # Not batched: a trap may leave memory or globals in a state later calls can't rely on
        self.fragments.append(TrapTest(
            name=f'{self.command_name()}_assert_trap',
            module_index=self.last_module,
            action_name=action_name,
        ))

    def visit_assert_rejected(self, binary: bytes, reason: str) -> None:
        self.fragments.append(RejectTest(
            name=f'{self.command_name()}_assert_{reason}', binary=binary, reason=reason,
        ))

    def _require_module(self, field: str) -> None:
        if self.last_module == 0:
            raise MalformedScriptError(
                f"Line {self.last_line}: action on {field!r} before any module was defined"
            )
