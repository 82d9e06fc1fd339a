"""Tests for the Value model and the NaN classification helpers."""

import math

import pytest

from spectest_gen.values import (
    Value, I32, F32, F64,
    F32_QUIET_BIT, F64_QUIET_BIT,
    is_quiet_nan, is_canonical_nan, f32_from_bits,
)


def test_integer_width_cast():
    assert Value.i32(-1).bits == 0xFFFFFFFF
    assert Value.i32(-1).to_python() == -1
    assert Value.i32(0x80000000).to_python() == -0x80000000
    assert Value.i64(-2).bits == 0xFFFFFFFFFFFFFFFE
    assert Value.i64(-2).to_python() == -2


def test_construction_is_validated():
    with pytest.raises(ValueError):
        Value(I32, 1 << 32)
    with pytest.raises(ValueError):
        Value(F32, -1)
    with pytest.raises(ValueError):
        Value('v128', 0)


def test_float_constructors_keep_bits():
    assert Value.f32(1.5).bits == 0x3FC00000
    assert Value.f64(-0.0).bits == 0x8000000000000000
    assert Value.f32(math.inf).is_infinite()
    assert Value.f64(-math.inf).is_sign_negative()
    assert Value.f32_bits(0x7FA00001).bits == 0x7FA00001


def test_signed_zero_is_not_equal_to_zero():
    assert Value.f64(0.0) != Value.f64(-0.0)
    assert Value.f32(0.0) != Value.f32(-0.0)


def test_nan_detection():
    assert Value.f32_bits(0x7FC00000).is_nan()
    assert Value.f32_bits(0xFF800001).is_nan()
    assert not Value.f32_bits(0x7F800000).is_nan()
    assert Value.f64_bits(0x7FF0000000000001).is_nan()
    assert not Value(I32, 0x7FC00000).is_nan()


@pytest.mark.parametrize('bits, quiet', [
    (0x7FC00000, True),
    (0xFFC00000, True),
    (0x7FC00001, True),
    (0x7FFFFFFF, True),
    (0x7FA00000, False),
    (0x7F800001, False),
    (0xFFBFFFFF, False),
])
def test_f32_quiet_nan(bits, quiet):
    assert is_quiet_nan(Value.f32_bits(bits)) is quiet
    assert bool(bits & F32_QUIET_BIT) is quiet


@pytest.mark.parametrize('bits, quiet', [
    (0x7FF8000000000000, True),
    (0xFFF8000000000000, True),
    (0x7FFC000000000001, True),
    (0x7FF4000000000000, False),
    (0x7FF0000000000001, False),
])
def test_f64_quiet_nan(bits, quiet):
    assert is_quiet_nan(Value.f64_bits(bits)) is quiet
    assert bool(bits & F64_QUIET_BIT) is quiet


def test_quiet_bit_on_a_number_is_not_a_quiet_nan():
    # 1.5 has bit 22 set but is not a NaN
    assert not is_quiet_nan(Value.f32(1.5))
    assert not is_quiet_nan(Value.f64(1.5))


@pytest.mark.parametrize('value, canonical', [
    (Value.f32_bits(0x7FC00000), True),
    (Value.f32_bits(0xFFC00000), True),
    (Value.f32_bits(0x7FC00001), False),
    (Value.f32_bits(0x7FE00000), False),
    (Value.f32_bits(0x7FA00000), False),
    (Value.f32(1.0), False),
    (Value.f64_bits(0x7FF8000000000000), True),
    (Value.f64_bits(0xFFF8000000000000), True),
    (Value.f64_bits(0x7FF8000000000001), False),
    (Value.f64_bits(0x7FF4000000000000), False),
    (Value.f64(1.0), False),
])
def test_canonical_nan(value, canonical):
    assert is_canonical_nan(value) is canonical


def test_nan_predicates_reject_integers():
    with pytest.raises(TypeError):
        is_quiet_nan(Value.i32(1))
    with pytest.raises(TypeError):
        is_canonical_nan(Value.i64(1))


def test_from_python_round_trips_runtime_results():
    assert Value.from_python(I32, -7) == Value.i32(-7)
    assert Value.from_python(F64, 0.1) == Value.f64(0.1)
    assert Value.from_python(F32, f32_from_bits(0x3DCCCCCD)).bits == 0x3DCCCCCD
    with pytest.raises(ValueError):
        Value.from_python('externref', None)
