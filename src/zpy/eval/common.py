from __future__ import annotations

import sys
from typing import List, Optional, Set, TextIO

from ..types import (
    ZpyBool,
    ZpyDict,
    ZpyFloat,
    ZpyFunction,
    ZpyIndexError,
    ZpyInt,
    ZpyList,
    ZpyNone,
    ZpyString,
    ZpyTypeError,
    ZpyValue,
)
from ..utils import format_float
from .helpers import type_name

def stringify(value: ZpyValue, _seen: Optional[Set[int]] = None) -> bytes:
    """Render a value the way `str()` and `print` show it.

    Strings are raw at every depth; a container that contains itself
    renders as `[...]` / `{...}`.
    """
    match value:
        case ZpyString(value=s):
            return s
        case ZpyInt(value=n):
            return str(n).encode()
        case ZpyFloat(value=f):
            return format_float(f).encode()
        case ZpyBool(value=b):
            return b"true" if b else b"false"
        case ZpyNone():
            return b"none"
        case ZpyFunction(name=name):
            return f"<function {name}>".encode("utf-8", "surrogateescape")

    seen = set() if _seen is None else _seen
    if id(value) in seen:
        return b"[...]" if isinstance(value, ZpyList) else b"{...}"
    seen.add(id(value))

    try:
        match value:
            case ZpyList(items=items):
                return b"[" + b", ".join(stringify(x, seen) for x in items) + b"]"
            case ZpyDict(keys=keys, values=vals):
                pairs = [
                    stringify(k, seen) + b": " + stringify(v, seen)
                    for k, v in zip(keys, vals)
                ]
                return b"{" + b", ".join(pairs) + b"}"
    finally:
        seen.discard(id(value))

    raise ZpyTypeError(f"cannot convert {type(value).__name__} to string")

def display(value: ZpyValue) -> str:
    """Text form of `stringify` for host output."""
    return stringify(value).decode("utf-8", "replace")

def write_bytes(data: bytes, out: Optional[TextIO] = None) -> None:
    """Write ZPy bytes to a text stream unchanged, via its binary buffer.

    Pending text is flushed first so output stays in order. Streams with no
    buffer (io.StringIO) get the UTF-8 decoding instead.
    """
    out = sys.stdout if out is None else out
    out.flush()

    buffer = getattr(out, "buffer", None)
    if buffer is None:
        out.write(data.decode("utf-8", "replace"))
        return

    buffer.write(data)
    buffer.flush()

def normalize_index(index: int, length: int) -> int:
    """Resolve a possibly negative index; raise outside [-length, length)."""
    resolved = index + length if index < 0 else index
    if resolved < 0 or resolved >= length:
        raise ZpyIndexError(f"index {index} out of range for length {length}")
    return resolved

def expect_int(value: ZpyValue, what: str) -> int:
    if not isinstance(value, ZpyInt):
        raise ZpyTypeError(f"{what} must be int, not {type_name(value)}")
    return value.value

def expect_string(value: ZpyValue, what: str) -> bytes:
    if not isinstance(value, ZpyString):
        raise ZpyTypeError(f"{what} must be string, not {type_name(value)}")
    return value.value

def expect_list(value: ZpyValue, what: str) -> List[ZpyValue]:
    if not isinstance(value, ZpyList):
        raise ZpyTypeError(f"{what} must be list, not {type_name(value)}")
    return value.items
