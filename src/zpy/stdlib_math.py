"""
math_* builtins.

Arguments may be int or float; results are always float. A domain error
gives nan, and a pole (log(0), atanh(1), ...) gives a signed infinity, so
these never fail on a bad value, only on a bad type or argument count.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional

from .eval.helpers import type_name
from .runtime import (
    register_builtin,
    ZpyBuiltinError,
    ZpyFloat,
    ZpyInt,
    ZpyList,
    ZpyTypeError,
    ZpyValue,
)

def _num(fn: str, value: ZpyValue) -> float:
    if isinstance(value, (ZpyInt, ZpyFloat)):
        return float(value.value)
    raise ZpyTypeError(f"{fn}() expects int or float, got {type_name(value)}")

def _pole(x: float, at: float, sign: float) -> Optional[float]:
    return math.copysign(math.inf, sign) if x == at else None

# Where the host function raises at a pole, the IEEE result is an infinity.
_POLES: Dict[str, Callable[[float], Optional[float]]] = {
    "log": lambda x: _pole(x, 0.0, -1.0),
    "log2": lambda x: _pole(x, 0.0, -1.0),
    "log10": lambda x: _pole(x, 0.0, -1.0),
    "log1p": lambda x: _pole(x, -1.0, -1.0),
    "atanh": lambda x: _pole(abs(x), 1.0, x),
}

def _round_half_away(x: float) -> float:
    if not math.isfinite(x):
        return x
    t = float(math.trunc(x))
    if abs(x - t) >= 0.5:
        t += math.copysign(1.0, x)
    return t

def _integral(op: Callable[[float], int]) -> Callable[[float], float]:
    def run(x: float) -> float:
        return x if not math.isfinite(x) else float(op(x))
    return run

_UNARY: Dict[str, Callable[[float], float]] = {
    "sqrt": math.sqrt,
    "cbrt": math.cbrt,
    "exp": math.exp,
    "expm1": math.expm1,
    "log": math.log,
    "log2": math.log2,
    "log10": math.log10,
    "log1p": math.log1p,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "asinh": math.asinh,
    "acosh": math.acosh,
    "atanh": math.atanh,
    "floor": _integral(math.floor),
    "ceil": _integral(math.ceil),
    "round": _round_half_away,
    "trunc": _integral(math.trunc),
    "fabs": math.fabs,
}

def _apply_unary(name: str, op: Callable[[float], float], x: float) -> float:
    try:
        return op(x)
    except OverflowError:
        # exp/expm1/cosh/sinh past the float range
        return math.copysign(math.inf, x) if name == "sinh" else math.inf
    except ValueError:
        pole = _POLES.get(name)
        hit = pole(x) if pole is not None else None
        return math.nan if hit is None else hit

def _make_unary(name: str, op: Callable[[float], float]):
    fn_name = f"math_{name}"

    def builtin(_env, args: List[ZpyValue]) -> ZpyFloat:
        return ZpyFloat(_apply_unary(name, op, _num(fn_name, args[0])))

    builtin.__name__ = f"std_{fn_name}"
    register_builtin(fn_name, arity=1)(builtin)
    return builtin

for _name, _op in _UNARY.items():
    _make_unary(_name, _op)

# ---------- two arguments ----------

@register_builtin("math_atan2", arity=2)
def std_math_atan2(_env, args: List[ZpyValue]) -> ZpyFloat:
    y = _num("math_atan2", args[0])
    x = _num("math_atan2", args[1])
    return ZpyFloat(math.atan2(y, x))

@register_builtin("math_fmod", arity=2)
def std_math_fmod(_env, args: List[ZpyValue]) -> ZpyFloat:
    """Floored remainder: the result takes the sign of the divisor."""
    x = _num("math_fmod", args[0])
    y = _num("math_fmod", args[1])
    if y == 0.0:
        raise ZpyBuiltinError("math_fmod() divisor must not be zero")
    return ZpyFloat(x % y)

@register_builtin("math_copysign", arity=2)
def std_math_copysign(_env, args: List[ZpyValue]) -> ZpyFloat:
    return ZpyFloat(math.copysign(_num("math_copysign", args[0]), _num("math_copysign", args[1])))

@register_builtin("math_hypot", arity=2)
def std_math_hypot(_env, args: List[ZpyValue]) -> ZpyFloat:
    return ZpyFloat(math.hypot(_num("math_hypot", args[0]), _num("math_hypot", args[1])))

@register_builtin("math_modf", arity=1)
def std_math_modf(_env, args: List[ZpyValue]) -> ZpyList:
    x = _num("math_modf", args[0])
    frac, whole = math.modf(x)
    return ZpyList([ZpyFloat(frac), ZpyFloat(whole)])

# ---------- constants ----------

_CONSTANTS = {
    "math_pi": math.pi,
    "math_e": math.e,
    "math_tau": math.tau,
    "math_inf": math.inf,
    "math_nan": math.nan,
}

def _make_constant(name: str, value: float):
    def builtin(_env, args: List[ZpyValue]) -> ZpyFloat:
        return ZpyFloat(value)

    builtin.__name__ = f"std_{name}"
    register_builtin(name, arity=0)(builtin)
    return builtin

for _name, _value in _CONSTANTS.items():
    _make_constant(_name, _value)
