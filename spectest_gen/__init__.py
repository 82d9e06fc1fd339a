"""spectest_gen: turns WebAssembly spec scripts into pytest modules."""

from .values import (
    # Value model
    Value, I32, I64, F32, F64,
    # NaN classification
    is_quiet_nan, is_canonical_nan,
    f32_from_bits, f64_from_bits,
)

from .codec import type_tag, literal, bare_literal, is_nan

from .commands import (
    Command, CommandKind, Action, Invoke, Get,
    Module, AssertReturn, AssertReturnCanonicalNan, AssertReturnArithmeticNan,
    AssertTrap, AssertInvalid, AssertMalformed, AssertUninstantiable,
    AssertExhaustion, AssertUnlinkable, Register, PerformAction, Unsupported,
)

from .errors import (
    SpecTestGenError, ScriptParseError, UnsupportedCommand,
    DisassemblyError, MalformedScriptError,
)

from .aggregator import ModuleCallAggregator
from .generator import WastTestGenerator, FAT_TEST_THRESHOLD
from .emitter import BundleEmitter, BuildReport, build, generate_spectest, PREAMBLE

__version__ = "0.1.0"
