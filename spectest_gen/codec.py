"""
Value codec: type tags and bit-exact source literals for generated tests.

Literals evaluate against the names defined in `values` (embedded in the
generated preamble) plus `math`.
"""

from .values import Value, F32


def type_tag(value: Value) -> str:
    """Short type identifier: i32, i64, f32 or f64."""
    return value.kind


def is_nan(value: Value) -> bool:
    """True for any f32/f64 NaN, false for every other value."""
    return value.is_float and value.is_nan()


def _float_literal(value: Value) -> str:
    if value.is_infinite():
        return '-math.inf' if value.is_sign_negative() else 'math.inf'
    # repr() of the widened double round-trips, and every f32 is exact as a double
    return repr(value.to_python())


def _bits_literal(value: Value) -> str:
    digits = 8 if value.kind == F32 else 16
    return f'0x{value.bits:0{digits}X}'


def literal(value: Value) -> str:
    """Source expression that rebuilds exactly this Value."""
    if is_nan(value):
        # A NaN float literal would lose the payload, so rebuild from raw bits
        return f'Value.{value.kind}_bits({_bits_literal(value)})'
    if value.is_float:
        return f'Value.{value.kind}({_float_literal(value)})'
    return f'Value.{value.kind}({value.to_python()})'


def bare_literal(value: Value) -> str:
    """Source expression for the plain Python scalar, without the Value wrapper."""
    if is_nan(value):
        return f'{value.kind}_from_bits({_bits_literal(value)})'
    if value.is_float:
        return _float_literal(value)
    return str(value.to_python())


def literal_list(values) -> str:
    return '[' + ', '.join(literal(v) for v in values) + ']'
