from __future__ import annotations

import math

import pytest

from tests.support.harness import ZpyBuiltinError, run_runtime_case
from zpy.utils import format_float, wrap_i64

MATH_SCENARIOS = [
    pytest.param("result = math_sqrt(16)", ("float", 4.0), None, id="sqrt-int-arg"),
    pytest.param("result = math_sqrt(-1)", ("float", math.nan), None, id="sqrt-domain-nan"),
    pytest.param("result = math_cbrt(-27)", ("float", -3.0), None, id="cbrt"),
    pytest.param("result = math_exp(0)", ("float", 1.0), None, id="exp"),
    pytest.param("result = math_exp(1000)", ("float", math.inf), None, id="exp-overflow-inf"),
    pytest.param("result = math_log(1)", ("float", 0.0), None, id="log"),
    pytest.param("result = math_log(0)", ("float", -math.inf), None, id="log-pole"),
    pytest.param("result = math_log(-1)", ("float", math.nan), None, id="log-domain"),
    pytest.param("result = math_log2(8)", ("float", 3.0), None, id="log2"),
    pytest.param("result = math_log10(1000)", ("float", 3.0), None, id="log10"),
    pytest.param("result = math_log1p(-1)", ("float", -math.inf), None, id="log1p-pole"),
    pytest.param("result = math_atanh(1)", ("float", math.inf), None, id="atanh-pole"),
    pytest.param("result = math_atanh(-1)", ("float", -math.inf), None, id="atanh-negative-pole"),
    pytest.param("result = math_sinh(1000)", ("float", math.inf), None, id="sinh-overflow"),
    pytest.param("result = math_sinh(-1000)", ("float", -math.inf), None, id="sinh-negative-overflow"),
    pytest.param("result = math_acos(2)", ("float", math.nan), None, id="acos-domain"),
    pytest.param("result = math_sin(0)", ("float", 0.0), None, id="sin"),
    pytest.param("result = math_cos(math_pi())", ("float", -1.0), None, id="cos-pi"),
    pytest.param("result = math_floor(-2.5)", ("float", -3.0), None, id="floor"),
    pytest.param("result = math_ceil(2.1)", ("float", 3.0), None, id="ceil"),
    pytest.param("result = math_trunc(-2.7)", ("float", -2.0), None, id="trunc"),
    pytest.param("result = math_round(2.5)", ("float", 3.0), None, id="round-half-away"),
    pytest.param("result = math_round(-2.5)", ("float", -3.0), None, id="round-half-away-negative"),
    pytest.param("result = math_round(2.4)", ("float", 2.0), None, id="round-down"),
    pytest.param("result = math_floor(math_inf())", ("float", math.inf), None, id="floor-inf"),
    pytest.param("result = math_fabs(-3)", ("float", 3.0), None, id="fabs"),
    pytest.param("result = math_atan2(1, 1)", ("float", math.pi / 4), None, id="atan2"),
    pytest.param("result = math_fmod(-7, 3)", ("float", 2.0), None, id="fmod-floored"),
    pytest.param("math_fmod(1, 0)", None, ZpyBuiltinError, id="fmod-zero"),
    pytest.param("result = math_copysign(3, -0.0)", ("float", -3.0), None, id="copysign"),
    pytest.param("result = math_hypot(3, 4)", ("float", 5.0), None, id="hypot"),
    pytest.param("result = math_modf(3.25)", ("list", [0.25, 3.0]), None, id="modf"),
    pytest.param("result = math_e()", ("float", math.e), None, id="e"),
    pytest.param("result = math_tau()", ("float", math.tau), None, id="tau"),
    pytest.param("result = math_nan()", ("float", math.nan), None, id="nan"),
    pytest.param('math_sqrt("4")', None, ZpyBuiltinError, id="non-number-arg"),
    pytest.param("math_sqrt(1, 2)", None, ZpyBuiltinError, id="arity"),
    pytest.param("math_pi(1)", None, ZpyBuiltinError, id="constant-arity"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", MATH_SCENARIOS)
def test_math_builtins(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


FORMAT_CASES = [
    (3.0, "3"),
    (-0.5, "-0.5"),
    (0.1 + 0.2, "0.30000000000000004"),
    (1e21, "1000000000000000000000"),
    (1.5e-7, "0.00000015"),
    (math.inf, "inf"),
    (-math.inf, "-inf"),
    (math.nan, "nan"),
]


@pytest.mark.parametrize("value, expected", FORMAT_CASES)
def test_format_float(value: float, expected: str) -> None:
    assert format_float(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0),
        (2**63, -(2**63)),
        (2**64 + 5, 5),
        (-(2**63) - 1, 2**63 - 1),
    ],
)
def test_wrap_i64(value: int, expected: int) -> None:
    assert wrap_i64(value) == expected


STR_SCENARIOS = [
    pytest.param("result = str(2.0)", ("string", "2"), None, id="integral-float"),
    pytest.param("result = str(10.0 ** 21)", ("string", "1000000000000000000000"), None, id="no-exponent"),
    pytest.param("result = str(1 / 3.0)", ("string", "0.3333333333333333"), None, id="shortest-repr"),
    pytest.param("result = str(-1.25)", ("string", "-1.25"), None, id="negative"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", STR_SCENARIOS)
def test_float_to_string(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
