from __future__ import annotations

import math
import os
import sys
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator

I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1

_TRUE_FLAGS = ("1", "true", "yes", "on")

# A ZPy call costs about ten Python frames; this allows a few thousand calls.
RECURSION_LIMIT = 50_000


def wrap_i64(value: int) -> int:
    """Wrap an arbitrary Python int into the signed 64-bit range."""
    value &= (1 << 64) - 1
    if value > I64_MAX:
        value -= 1 << 64
    return value


def format_float(value: float) -> str:
    """Shortest round-trip decimal form, never exponent notation.

    Integral values drop the fractional part: 3.0 -> "3", 1e21 -> "1000...0".
    """
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"

    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _env_flag(name: str) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return False
    return raw.strip().lower() in _TRUE_FLAGS


def debug_py_trace_enabled() -> bool:
    """Python tracebacks for ZPy runtime errors are shown when ZPY_DEBUG_PY_TRACE is set."""
    return _env_flag("ZPY_DEBUG_PY_TRACE")


def color_enabled() -> bool:
    # https://no-color.org: any non-empty NO_COLOR disables color
    if os.getenv("NO_COLOR"):
        return False
    return not _env_flag("ZPY_NO_COLOR")


@contextmanager
def recursion_budget(limit: int = RECURSION_LIMIT) -> Iterator[None]:
    """Raise the interpreter recursion limit for the duration of the block."""
    prev = sys.getrecursionlimit()
    if prev < limit:
        sys.setrecursionlimit(limit)

    try:
        yield
    finally:
        sys.setrecursionlimit(prev)
