"""Core builtin functions (print, len, range, ...) registered via zpy.runtime."""

from __future__ import annotations

import math
import re
import sys
from typing import List

from .eval.common import display, expect_int, expect_list, stringify, write_bytes
from .eval.helpers import dict_remove, is_truthy, type_name
from .runtime import (
    register_builtin,
    expect_arity,
    ZpyBool,
    ZpyBuiltinError,
    ZpyDict,
    ZpyFloat,
    ZpyInt,
    ZpyList,
    ZpyNone,
    ZpyString,
    ZpyTypeError,
    ZpyValue,
)
from .methods import clamp_insert_index
from .utils import I64_MAX, I64_MIN, wrap_i64

_WHITESPACE = b" \t\r\n"
_INT_RE = re.compile(rb"[+-]?[0-9]+")

def _bad_type(fn: str, value: ZpyValue) -> ZpyTypeError:
    return ZpyTypeError(f"{fn}() does not accept {type_name(value)}")

def _index_in_range(fn: str, index: int, length: int) -> int:
    resolved = index + length if index < 0 else index
    if resolved < 0 or resolved >= length:
        raise ZpyBuiltinError(f"{fn}() index {index} out of range")
    return resolved

def _less_than(a: ZpyValue, b: ZpyValue) -> bool:
    """Numeric ordering for min/max; anything else never compares less."""
    if isinstance(a, (ZpyInt, ZpyFloat)) and isinstance(b, (ZpyInt, ZpyFloat)):
        if isinstance(a, ZpyInt) and isinstance(b, ZpyInt):
            return a.value < b.value
        return float(a.value) < float(b.value)
    return False

# ---------- I/O ----------

@register_builtin("print")
def std_print(_env, args: List[ZpyValue]) -> ZpyNone:
    write_bytes(b" ".join(stringify(arg) for arg in args) + b"\n")
    return ZpyNone()

@register_builtin("input")
def std_input(_env, args: List[ZpyValue]) -> ZpyString:
    expect_arity("input()", args, 0, 1)

    if args:
        if not isinstance(args[0], ZpyString):
            raise _bad_type("input", args[0])
        write_bytes(args[0].value)

    line = sys.stdin.readline()
    return ZpyString.of(line.rstrip("\r\n"))

# ---------- conversion ----------

@register_builtin("len", arity=1)
def std_len(_env, args: List[ZpyValue]) -> ZpyInt:
    match args[0]:
        case ZpyString(value=s):
            return ZpyInt(len(s))
        case ZpyList(items=items):
            return ZpyInt(len(items))
        case ZpyDict(keys=keys):
            return ZpyInt(len(keys))
    raise _bad_type("len", args[0])

@register_builtin("int", arity=1)
def std_int(_env, args: List[ZpyValue]) -> ZpyInt:
    match args[0]:
        case ZpyInt():
            return args[0]
        case ZpyFloat(value=f):
            if not math.isfinite(f) or not (I64_MIN <= math.trunc(f) <= I64_MAX):
                raise ZpyBuiltinError(f"int() cannot convert {display(args[0])}")
            return ZpyInt(math.trunc(f))
        case ZpyString(value=s):
            text = s.strip(_WHITESPACE)
            if not _INT_RE.fullmatch(text):
                raise ZpyBuiltinError(f"int() invalid literal: {s!r}")
            value = int(text)
            if not (I64_MIN <= value <= I64_MAX):
                raise ZpyBuiltinError(f"int() literal out of range: {s!r}")
            return ZpyInt(value)
        case ZpyBool(value=b):
            return ZpyInt(1 if b else 0)
    raise _bad_type("int", args[0])

@register_builtin("float", arity=1)
def std_float(_env, args: List[ZpyValue]) -> ZpyFloat:
    match args[0]:
        case ZpyInt(value=n):
            return ZpyFloat(float(n))
        case ZpyFloat():
            return args[0]
        case ZpyString(value=s):
            text = s.strip(_WHITESPACE)
            try:
                return ZpyFloat(float(text))
            except ValueError:
                raise ZpyBuiltinError(f"float() invalid literal: {s!r}") from None
    raise _bad_type("float", args[0])

@register_builtin("str", arity=1)
def std_str(_env, args: List[ZpyValue]) -> ZpyString:
    return ZpyString(stringify(args[0]))

@register_builtin("bool", arity=1)
def std_bool(_env, args: List[ZpyValue]) -> ZpyBool:
    return ZpyBool(is_truthy(args[0]))

@register_builtin("type", arity=1)
def std_type(_env, args: List[ZpyValue]) -> ZpyString:
    return ZpyString.of(type_name(args[0]))

@register_builtin("chr", arity=1)
def std_chr(_env, args: List[ZpyValue]) -> ZpyString:
    code = expect_int(args[0], "chr() argument")
    if not 0 <= code <= 127:
        raise ZpyBuiltinError(f"chr() argument {code} not in range 0..127")
    return ZpyString(bytes([code]))

@register_builtin("ord", arity=1)
def std_ord(_env, args: List[ZpyValue]) -> ZpyInt:
    if not isinstance(args[0], ZpyString):
        raise _bad_type("ord", args[0])
    if not args[0].value:
        raise ZpyBuiltinError("ord() of empty string")
    return ZpyInt(args[0].value[0])

@register_builtin("hex", arity=1)
def std_hex(_env, args: List[ZpyValue]) -> ZpyString:
    # The sign follows the prefix: hex(-255) == "0x-ff"
    return ZpyString.of(f"0x{expect_int(args[0], 'hex() argument'):x}")

# ---------- numbers ----------

@register_builtin("abs", arity=1)
def std_abs(_env, args: List[ZpyValue]) -> ZpyValue:
    match args[0]:
        case ZpyInt(value=n):
            return ZpyInt(wrap_i64(abs(n)))
        case ZpyFloat(value=f):
            return ZpyFloat(abs(f))
    raise _bad_type("abs", args[0])

def _min_max(fn: str, args: List[ZpyValue], pick_right) -> ZpyValue:
    if len(args) == 1:
        items = expect_list(args[0], f"{fn}() argument")
        if not items:
            raise ZpyBuiltinError(f"{fn}() of empty list")
        result = items[0]
        for item in items[1:]:
            if pick_right(result, item):
                result = item
        return result

    if len(args) == 2:
        return args[1] if pick_right(args[0], args[1]) else args[0]

    raise ZpyBuiltinError(f"{fn}() expects 1 or 2 arguments; got {len(args)}")

@register_builtin("min")
def std_min(_env, args: List[ZpyValue]) -> ZpyValue:
    return _min_max("min", args, lambda cur, cand: _less_than(cand, cur))

@register_builtin("max")
def std_max(_env, args: List[ZpyValue]) -> ZpyValue:
    return _min_max("max", args, lambda cur, cand: _less_than(cur, cand))

@register_builtin("sum", arity=1)
def std_sum(_env, args: List[ZpyValue]) -> ZpyValue:
    int_total = 0
    float_total = 0.0
    has_float = False

    for item in expect_list(args[0], "sum() argument"):
        match item:
            case ZpyInt(value=n):
                int_total += n
                float_total += float(n)
            case ZpyFloat(value=f):
                has_float = True
                float_total += f
            case _:
                raise ZpyBuiltinError(f"sum() cannot add {type_name(item)}")

    if has_float:
        return ZpyFloat(float_total)
    return ZpyInt(wrap_i64(int_total))

@register_builtin("range")
def std_range(_env, args: List[ZpyValue]) -> ZpyList:
    expect_arity("range()", args, 1, 3)
    bounds = [expect_int(arg, "range() argument") for arg in args]

    if len(bounds) == 1:
        start, end, step = 0, bounds[0], 1
    elif len(bounds) == 2:
        start, end, step = bounds[0], bounds[1], 1
    else:
        start, end, step = bounds

    if step == 0:
        raise ZpyBuiltinError("range() step must not be zero")

    return ZpyList([ZpyInt(i) for i in range(start, end, step)])

# ---------- lists and dicts ----------

@register_builtin("append", arity=2)
def std_append(_env, args: List[ZpyValue]) -> ZpyNone:
    expect_list(args[0], "append() first argument").append(args[1])
    return ZpyNone()

@register_builtin("keys", arity=1)
def std_keys(_env, args: List[ZpyValue]) -> ZpyList:
    if not isinstance(args[0], ZpyDict):
        raise _bad_type("keys", args[0])
    return ZpyList(list(args[0].keys))

@register_builtin("values", arity=1)
def std_values(_env, args: List[ZpyValue]) -> ZpyList:
    if not isinstance(args[0], ZpyDict):
        raise _bad_type("values", args[0])
    return ZpyList(list(args[0].values))

@register_builtin("pop")
def std_pop(_env, args: List[ZpyValue]) -> ZpyValue:
    expect_arity("pop()", args, 1, 2)
    items = expect_list(args[0], "pop() first argument")
    if not items:
        raise ZpyBuiltinError("pop() from empty list")

    if len(args) == 1:
        return items.pop()

    index = expect_int(args[1], "pop() index")
    return items.pop(_index_in_range("pop", index, len(items)))

@register_builtin("insert", arity=3)
def std_insert(_env, args: List[ZpyValue]) -> ZpyNone:
    items = expect_list(args[0], "insert() first argument")
    index = expect_int(args[1], "insert() index")
    items.insert(clamp_insert_index(index, len(items)), args[2])
    return ZpyNone()

@register_builtin("delete", arity=2)
def std_delete(_env, args: List[ZpyValue]) -> ZpyNone:
    target = args[0]
    match target:
        case ZpyList(items=items):
            index = expect_int(args[1], "delete() index")
            del items[_index_in_range("delete", index, len(items))]
            return ZpyNone()
        case ZpyDict():
            if dict_remove(target, args[1]) is None:
                raise ZpyBuiltinError(f"delete() key not found: {display(args[1])}")
            return ZpyNone()
    raise _bad_type("delete", target)

@register_builtin("sorted", arity=1)
def std_sorted(_env, args: List[ZpyValue]) -> ZpyList:
    items = expect_list(args[0], "sorted() argument")
    for item in items:
        if not isinstance(item, ZpyInt):
            raise ZpyBuiltinError(f"sorted() supports int lists only, found {type_name(item)}")
    return ZpyList(sorted(items, key=lambda item: item.value))

@register_builtin("reversed", arity=1)
def std_reversed(_env, args: List[ZpyValue]) -> ZpyList:
    return ZpyList(list(reversed(expect_list(args[0], "reversed() argument"))))

@register_builtin("enumerate", arity=1)
def std_enumerate(_env, args: List[ZpyValue]) -> ZpyList:
    items = expect_list(args[0], "enumerate() argument")
    return ZpyList([ZpyList([ZpyInt(i), item]) for i, item in enumerate(items)])

@register_builtin("zip", arity=2)
def std_zip(_env, args: List[ZpyValue]) -> ZpyList:
    left = expect_list(args[0], "zip() first argument")
    right = expect_list(args[1], "zip() second argument")
    return ZpyList([ZpyList([a, b]) for a, b in zip(left, right)])

@register_builtin("slice", arity=3)
def std_slice(_env, args: List[ZpyValue]) -> ZpyValue:
    """slice(seq, start, end): negative bounds count from the end, both clamped."""
    seq = args[0]
    start = expect_int(args[1], "slice() start")
    end = expect_int(args[2], "slice() end")

    match seq:
        case ZpyString(value=s):
            lo, hi = _clamp_bounds(start, end, len(s))
            return ZpyString(s[lo:hi])
        case ZpyList(items=items):
            lo, hi = _clamp_bounds(start, end, len(items))
            return ZpyList(items[lo:hi])
    raise _bad_type("slice", seq)

def _clamp_bounds(start: int, end: int, length: int):
    if start < 0:
        start += length
    if end < 0:
        end += length
    start = max(0, min(start, length))
    end = max(0, min(end, length))
    if start >= end:
        return 0, 0
    return start, end
