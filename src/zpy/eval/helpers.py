from __future__ import annotations

from typing import List, Optional

from ..types import (
    ZpyBool,
    ZpyDict,
    ZpyFloat,
    ZpyFunction,
    ZpyInt,
    ZpyList,
    ZpyNone,
    ZpyString,
    ZpyValue,
)

def is_truthy(val: ZpyValue) -> bool:
    match val:
        case ZpyBool(value=b):
            return b
        case ZpyNone():
            return False
        case ZpyInt(value=num) | ZpyFloat(value=num):
            return num != 0
        case ZpyString(value=s):
            return len(s) > 0
        case ZpyList(items=items):
            return len(items) > 0
        case ZpyDict(keys=keys):
            return len(keys) > 0
        case _:
            return True

def values_equal(lhs: ZpyValue, rhs: ZpyValue) -> bool:
    """ZPy `==`: same variant required; containers and functions by identity."""
    if type(lhs) is not type(rhs):
        return False

    match lhs:
        case ZpyList() | ZpyDict() | ZpyFunction():
            return lhs is rhs
        case ZpyNone():
            return True
        case ZpyInt() | ZpyFloat() | ZpyString() | ZpyBool():
            return lhs.value == rhs.value  # type: ignore[union-attr]
    return False

def type_name(val: ZpyValue) -> str:
    match val:
        case ZpyInt():
            return "int"
        case ZpyFloat():
            return "float"
        case ZpyString():
            return "string"
        case ZpyBool():
            return "bool"
        case ZpyNone():
            return "none"
        case ZpyList():
            return "list"
        case ZpyDict():
            return "dict"
        case ZpyFunction():
            return "function"
    return type(val).__name__

def list_index(seq: List[ZpyValue], value: ZpyValue) -> int:
    for i, existing in enumerate(seq):
        if values_equal(existing, value):
            return i
    return -1

def dict_index(d: ZpyDict, key: ZpyValue) -> int:
    return list_index(d.keys, key)

def dict_get(d: ZpyDict, key: ZpyValue) -> Optional[ZpyValue]:
    idx = dict_index(d, key)
    if idx < 0:
        return None
    return d.values[idx]

def dict_set(d: ZpyDict, key: ZpyValue, value: ZpyValue) -> None:
    """Overwrite in place when the key exists, else append."""
    idx = dict_index(d, key)
    if idx >= 0:
        d.values[idx] = value
        return
    d.keys.append(key)
    d.values.append(value)

def dict_remove(d: ZpyDict, key: ZpyValue) -> Optional[ZpyValue]:
    idx = dict_index(d, key)
    if idx < 0:
        return None
    del d.keys[idx]
    return d.values.pop(idx)
