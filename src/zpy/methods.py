"""
Builtin methods for strings, lists and dicts, reached through `value.name(...)`.

Wrong argument counts raise BuiltinError. Wrong argument types raise
TypeError. Missing items keep their own kinds (KeyNotFound,
IndexOutOfBounds).
"""

from __future__ import annotations

from typing import List

from .eval.common import expect_list, expect_string, normalize_index
from .eval.helpers import dict_get, dict_remove, dict_set, list_index, values_equal
from .runtime import (
    ZpyBool,
    ZpyBuiltinError,
    ZpyDict,
    ZpyIndexError,
    ZpyInt,
    ZpyKeyError,
    ZpyList,
    ZpyNone,
    ZpyString,
    ZpyTypeError,
    ZpyValue,
    expect_arity,
    register_dict,
    register_list,
    register_string,
)

_WHITESPACE = b" \t\r\n"

# ---------- string ----------

def _string_arg(method: str, args: List[ZpyValue], idx: int = 0) -> bytes:
    return expect_string(args[idx], f"string.{method}() argument")

@register_string("upper")
def _string_upper(recv: ZpyString, args: List[ZpyValue]) -> ZpyString:
    expect_arity("string.upper()", args, 0)
    return ZpyString(recv.value.upper())

@register_string("lower")
def _string_lower(recv: ZpyString, args: List[ZpyValue]) -> ZpyString:
    expect_arity("string.lower()", args, 0)
    return ZpyString(recv.value.lower())

@register_string("strip")
def _string_strip(recv: ZpyString, args: List[ZpyValue]) -> ZpyString:
    expect_arity("string.strip()", args, 0)
    return ZpyString(recv.value.strip(_WHITESPACE))

@register_string("lstrip")
def _string_lstrip(recv: ZpyString, args: List[ZpyValue]) -> ZpyString:
    expect_arity("string.lstrip()", args, 0)
    return ZpyString(recv.value.lstrip(_WHITESPACE))

@register_string("rstrip")
def _string_rstrip(recv: ZpyString, args: List[ZpyValue]) -> ZpyString:
    expect_arity("string.rstrip()", args, 0)
    return ZpyString(recv.value.rstrip(_WHITESPACE))

@register_string("split")
def _string_split(recv: ZpyString, args: List[ZpyValue]) -> ZpyList:
    """Split on a separator; with none given, split on spaces and drop empty parts."""
    expect_arity("string.split()", args, 0, 1)

    if not args:
        parts = [p for p in recv.value.split(b" ") if p]
    else:
        sep = _string_arg("split", args)
        if not sep:
            raise ZpyBuiltinError("string.split() separator must not be empty")
        parts = recv.value.split(sep)

    return ZpyList([ZpyString(p) for p in parts])

@register_string("join")
def _string_join(recv: ZpyString, args: List[ZpyValue]) -> ZpyString:
    expect_arity("string.join()", args, 1)
    items = expect_list(args[0], "string.join() argument")

    pieces = []
    for item in items:
        pieces.append(expect_string(item, "string.join() item"))

    return ZpyString(recv.value.join(pieces))

@register_string("find")
def _string_find(recv: ZpyString, args: List[ZpyValue]) -> ZpyInt:
    expect_arity("string.find()", args, 1)
    return ZpyInt(recv.value.find(_string_arg("find", args)))

@register_string("replace")
def _string_replace(recv: ZpyString, args: List[ZpyValue]) -> ZpyString:
    expect_arity("string.replace()", args, 2)
    old = _string_arg("replace", args, 0)
    new = _string_arg("replace", args, 1)

    if not old:
        return recv
    return ZpyString(recv.value.replace(old, new))

@register_string("startswith")
def _string_startswith(recv: ZpyString, args: List[ZpyValue]) -> ZpyBool:
    expect_arity("string.startswith()", args, 1)
    return ZpyBool(recv.value.startswith(_string_arg("startswith", args)))

@register_string("endswith")
def _string_endswith(recv: ZpyString, args: List[ZpyValue]) -> ZpyBool:
    expect_arity("string.endswith()", args, 1)
    return ZpyBool(recv.value.endswith(_string_arg("endswith", args)))

@register_string("count")
def _string_count(recv: ZpyString, args: List[ZpyValue]) -> ZpyInt:
    # Non-overlapping; an empty needle counts len + 1 positions.
    expect_arity("string.count()", args, 1)
    return ZpyInt(recv.value.count(_string_arg("count", args)))

@register_string("contains")
def _string_contains(recv: ZpyString, args: List[ZpyValue]) -> ZpyBool:
    expect_arity("string.contains()", args, 1)
    return ZpyBool(_string_arg("contains", args) in recv.value)

# ---------- list ----------

@register_list("append")
def _list_append(recv: ZpyList, args: List[ZpyValue]) -> ZpyNone:
    expect_arity("list.append()", args, 1)
    recv.items.append(args[0])
    return ZpyNone()

@register_list("pop")
def _list_pop(recv: ZpyList, args: List[ZpyValue]) -> ZpyValue:
    expect_arity("list.pop()", args, 0, 1)

    if not recv.items:
        raise ZpyIndexError("pop from empty list")

    if not args:
        return recv.items.pop()

    if not isinstance(args[0], ZpyInt):
        raise ZpyBuiltinError("list.pop() index must be int")

    return recv.items.pop(normalize_index(args[0].value, len(recv.items)))

@register_list("insert")
def _list_insert(recv: ZpyList, args: List[ZpyValue]) -> ZpyNone:
    expect_arity("list.insert()", args, 2)

    if not isinstance(args[0], ZpyInt):
        raise ZpyBuiltinError("list.insert() index must be int")

    recv.items.insert(clamp_insert_index(args[0].value, len(recv.items)), args[1])
    return ZpyNone()

def clamp_insert_index(index: int, length: int) -> int:
    if index < 0:
        index += length
    return max(0, min(index, length))

@register_list("remove")
def _list_remove(recv: ZpyList, args: List[ZpyValue]) -> ZpyNone:
    expect_arity("list.remove()", args, 1)

    idx = list_index(recv.items, args[0])
    if idx < 0:
        raise ZpyKeyError("list.remove(x): x not in list")

    del recv.items[idx]
    return ZpyNone()

@register_list("reverse")
def _list_reverse(recv: ZpyList, args: List[ZpyValue]) -> ZpyNone:
    expect_arity("list.reverse()", args, 0)
    recv.items.reverse()
    return ZpyNone()

@register_list("clear")
def _list_clear(recv: ZpyList, args: List[ZpyValue]) -> ZpyNone:
    expect_arity("list.clear()", args, 0)
    recv.items.clear()
    return ZpyNone()

@register_list("index")
def _list_index(recv: ZpyList, args: List[ZpyValue]) -> ZpyInt:
    expect_arity("list.index()", args, 1)
    return ZpyInt(list_index(recv.items, args[0]))

@register_list("count")
def _list_count(recv: ZpyList, args: List[ZpyValue]) -> ZpyInt:
    expect_arity("list.count()", args, 1)
    return ZpyInt(sum(1 for item in recv.items if values_equal(item, args[0])))

@register_list("copy")
def _list_copy(recv: ZpyList, args: List[ZpyValue]) -> ZpyList:
    expect_arity("list.copy()", args, 0)
    return ZpyList(list(recv.items))

@register_list("extend")
def _list_extend(recv: ZpyList, args: List[ZpyValue]) -> ZpyNone:
    expect_arity("list.extend()", args, 1)
    recv.items.extend(list(expect_list(args[0], "list.extend() argument")))
    return ZpyNone()

# ---------- dict ----------

@register_dict("get")
def _dict_get(recv: ZpyDict, args: List[ZpyValue]) -> ZpyValue:
    expect_arity("dict.get()", args, 1, 2)

    found = dict_get(recv, args[0])
    if found is not None:
        return found
    return args[1] if len(args) == 2 else ZpyNone()

@register_dict("keys")
def _dict_keys(recv: ZpyDict, args: List[ZpyValue]) -> ZpyList:
    expect_arity("dict.keys()", args, 0)
    return ZpyList(list(recv.keys))

@register_dict("values")
def _dict_values(recv: ZpyDict, args: List[ZpyValue]) -> ZpyList:
    expect_arity("dict.values()", args, 0)
    return ZpyList(list(recv.values))

@register_dict("items")
def _dict_items(recv: ZpyDict, args: List[ZpyValue]) -> ZpyList:
    expect_arity("dict.items()", args, 0)
    return ZpyList([ZpyList([k, v]) for k, v in zip(recv.keys, recv.values)])

@register_dict("clear")
def _dict_clear(recv: ZpyDict, args: List[ZpyValue]) -> ZpyNone:
    expect_arity("dict.clear()", args, 0)
    recv.keys.clear()
    recv.values.clear()
    return ZpyNone()

@register_dict("update")
def _dict_update(recv: ZpyDict, args: List[ZpyValue]) -> ZpyNone:
    expect_arity("dict.update()", args, 1)

    other = args[0]
    if not isinstance(other, ZpyDict):
        raise ZpyTypeError("dict.update() argument must be dict")

    for key, value in list(zip(other.keys, other.values)):
        dict_set(recv, key, value)
    return ZpyNone()

@register_dict("pop")
def _dict_pop(recv: ZpyDict, args: List[ZpyValue]) -> ZpyValue:
    expect_arity("dict.pop()", args, 1, 2)

    removed = dict_remove(recv, args[0])
    if removed is not None:
        return removed
    if len(args) == 2:
        return args[1]
    raise ZpyKeyError("dict.pop(key): key not found")
