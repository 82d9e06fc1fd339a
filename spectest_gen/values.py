"""
Typed WebAssembly scalars, stored by bit pattern.

Floats are kept as their raw bits rather than as Python floats, so NaN
payloads, the sign of NaN and signed zeros survive untouched.

Bit pattern of an f32 value:
    1-bit sign + 8-bit exponent + 23-bit mantissa = 32 bits

Bit pattern of an f64 value:
    1-bit sign + 11-bit exponent + 52-bit mantissa = 64 bits

A NaN is quiet when the most significant mantissa bit is set. A NaN is
canonical when that bit is the only mantissa bit set.
"""

import struct
from dataclasses import dataclass

I32 = 'i32'
I64 = 'i64'
F32 = 'f32'
F64 = 'f64'

WIDTHS = {I32: 32, I64: 64, F32: 32, F64: 64}

# f32 layout
F32_SIGN_BIT = 1 << 31
F32_EXPONENT_MASK = 0x7F800000
F32_MANTISSA_MASK = 0x007FFFFF
F32_QUIET_BIT = 1 << 22
F32_CANONICAL_MASK = 0b1_00000000_01111111111111111111111
F32_CANONICAL_TARGETS = (0xFFFFFFFF, 0x7FFFFFFF)

# f64 layout
F64_SIGN_BIT = 1 << 63
F64_EXPONENT_MASK = 0x7FF0000000000000
F64_MANTISSA_MASK = 0x000FFFFFFFFFFFFF
F64_QUIET_BIT = 1 << 51
F64_CANONICAL_MASK = 0x8007FFFFFFFFFFFF
F64_CANONICAL_TARGETS = (0xFFFFFFFFFFFFFFFF, 0x7FFFFFFFFFFFFFFF)


def f32_from_bits(bits: int) -> float:
    """Reinterpret 32 raw bits as a float (widened to a Python float)."""
    return struct.unpack('<f', struct.pack('<I', bits & 0xFFFFFFFF))[0]


def f64_from_bits(bits: int) -> float:
    return struct.unpack('<d', struct.pack('<Q', bits & 0xFFFFFFFFFFFFFFFF))[0]


def f32_to_bits(value: float) -> int:
    return struct.unpack('<I', struct.pack('<f', value))[0]


def f64_to_bits(value: float) -> int:
    return struct.unpack('<Q', struct.pack('<d', value))[0]


@dataclass(frozen=True)
class Value:
    """A typed scalar: one of i32, i64, f32, f64 plus its unsigned bit pattern."""
    kind: str
    bits: int

    def __post_init__(self):
        if self.kind not in WIDTHS:
            raise ValueError(f"Unknown value type: {self.kind!r}")
        if not (0 <= self.bits < (1 << WIDTHS[self.kind])):
            raise ValueError(f"{self.kind} bit pattern out of range: {self.bits:#x}")

    @classmethod
    def i32(cls, value: int) -> 'Value':
        return cls(I32, value & 0xFFFFFFFF)

    @classmethod
    def i64(cls, value: int) -> 'Value':
        return cls(I64, value & 0xFFFFFFFFFFFFFFFF)

    @classmethod
    def f32(cls, value: float) -> 'Value':
        return cls(F32, f32_to_bits(value))

    @classmethod
    def f64(cls, value: float) -> 'Value':
        return cls(F64, f64_to_bits(value))

    @classmethod
    def f32_bits(cls, bits: int) -> 'Value':
        return cls(F32, bits)

    @classmethod
    def f64_bits(cls, bits: int) -> 'Value':
        return cls(F64, bits)

    @classmethod
    def from_python(cls, kind: str, value) -> 'Value':
        """Build a Value from a plain int/float returned by a runtime."""
        if kind == I32:
            return cls.i32(value)
        if kind == I64:
            return cls.i64(value)
        if kind == F32:
            return cls.f32(value)
        if kind == F64:
            return cls.f64(value)
        raise ValueError(f"Unknown value type: {kind!r}")

    @property
    def is_float(self) -> bool:
        return self.kind in (F32, F64)

    def to_python(self):
        """Signed int for integer kinds, float for float kinds."""
        width = WIDTHS[self.kind]
        if self.kind == F32:
            return f32_from_bits(self.bits)
        if self.kind == F64:
            return f64_from_bits(self.bits)
        if self.bits >= 1 << (width - 1):
            return self.bits - (1 << width)
        return self.bits

    def is_nan(self) -> bool:
        if self.kind == F32:
            return (self.bits & F32_EXPONENT_MASK) == F32_EXPONENT_MASK and bool(self.bits & F32_MANTISSA_MASK)
        if self.kind == F64:
            return (self.bits & F64_EXPONENT_MASK) == F64_EXPONENT_MASK and bool(self.bits & F64_MANTISSA_MASK)
        return False

    def is_infinite(self) -> bool:
        if self.kind == F32:
            return (self.bits & ~F32_SIGN_BIT) == F32_EXPONENT_MASK
        if self.kind == F64:
            return (self.bits & ~F64_SIGN_BIT) == F64_EXPONENT_MASK
        return False

    def is_sign_negative(self) -> bool:
        return bool(self.bits >> (WIDTHS[self.kind] - 1))


def is_quiet_nan(value: Value) -> bool:
    """The MSB of the mantissa must be set for a NaN to be a quiet NaN."""
    if value.kind == F32:
        return value.is_nan() and (value.bits & F32_QUIET_BIT) == F32_QUIET_BIT
    if value.kind == F64:
        return value.is_nan() and (value.bits & F64_QUIET_BIT) == F64_QUIET_BIT
    raise TypeError(f"Expected a float result, got {value!r}")


def is_canonical_nan(value: Value) -> bool:
    """For a NaN to be canonical, only the MSB of its mantissa may be set."""
    if value.kind == F32:
        return (value.bits ^ F32_CANONICAL_MASK) in F32_CANONICAL_TARGETS
    if value.kind == F64:
        return (value.bits ^ F64_CANONICAL_MASK) in F64_CANONICAL_TARGETS
    raise TypeError(f"Expected a float result, got {value!r}")

