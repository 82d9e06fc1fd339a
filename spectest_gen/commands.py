"""
Script commands consumed by the generator.

One dataclass per command kind. `CommandKind` is the closed union the
generator matches over; a new kind must get its own arm there.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .values import Value


# =============================================================================
# Actions
# =============================================================================

@dataclass(frozen=True)
class Invoke:
    """Call an exported function. A missing module means the latest module."""
    field: str
    args: Tuple[Value, ...] = ()
    module: Optional[str] = None


@dataclass(frozen=True)
class Get:
    """Read an exported global."""
    field: str
    module: Optional[str] = None


Action = Union[Invoke, Get]


# =============================================================================
# Command kinds
# =============================================================================

@dataclass(frozen=True)
class Module:
    binary: bytes
    name: Optional[str] = None


@dataclass(frozen=True)
class AssertReturn:
    action: Action
    expected: Tuple[Value, ...] = ()


@dataclass(frozen=True)
class AssertReturnCanonicalNan:
    action: Action


@dataclass(frozen=True)
class AssertReturnArithmeticNan:
    action: Action


@dataclass(frozen=True)
class AssertTrap:
    action: Action
    message: str = ''


@dataclass(frozen=True)
class AssertInvalid:
    binary: bytes
    message: str = ''


@dataclass(frozen=True)
class AssertMalformed:
    binary: bytes
    message: str = ''


@dataclass(frozen=True)
class AssertUninstantiable:
    binary: bytes = b''
    message: str = ''


@dataclass(frozen=True)
class AssertExhaustion:
    action: Optional[Action] = None
    message: str = ''


@dataclass(frozen=True)
class AssertUnlinkable:
    binary: bytes = b''
    message: str = ''


@dataclass(frozen=True)
class Register:
    as_name: str
    name: Optional[str] = None


@dataclass(frozen=True)
class PerformAction:
    action: Action


@dataclass(frozen=True)
class Unsupported:
    """A well-formed command with no test form. Counted, but emits nothing."""
    command_type: str
    reason: str = ''


CommandKind = Union[
    Module,
    AssertReturn,
    AssertReturnCanonicalNan,
    AssertReturnArithmeticNan,
    AssertTrap,
    AssertInvalid,
    AssertMalformed,
    AssertUninstantiable,
    AssertExhaustion,
    AssertUnlinkable,
    Register,
    PerformAction,
    Unsupported,
]


@dataclass(frozen=True)
class Command:
    """One script entry. `line` is only used for naming and diagnostics."""
    line: int
    kind: CommandKind
