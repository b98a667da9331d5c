from __future__ import annotations

import math
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from zpy.lexer_rd import Lexer, tokenize
from zpy.parser_rd import ParseError, Parser
from zpy.runner import parse_program, run_program
from zpy.runtime import (
    Environment,
    ZpyBool,
    ZpyBuiltinError,
    ZpyDict,
    ZpyDivisionByZero,
    ZpyFloat,
    ZpyFunction,
    ZpyIndexError,
    ZpyInt,
    ZpyKeyError,
    ZpyList,
    ZpyMethodNotFound,
    ZpyNone,
    ZpyOutOfMemory,
    ZpyRuntimeError,
    ZpyString,
    ZpyTypeError,
    ZpyUndefinedVariable,
    ZpyUnsupportedOperation,
    ZpyValue,
)
from zpy.tree import Stmt

RuntimeExpectation = Optional[Tuple[str, object]]

# Programs store what they want checked in this variable.
RESULT_NAME = "result"

__all__ = [
    "Environment",
    "Lexer",
    "ParseError",
    "Parser",
    "ZpyBuiltinError",
    "ZpyDivisionByZero",
    "ZpyIndexError",
    "ZpyKeyError",
    "ZpyMethodNotFound",
    "ZpyOutOfMemory",
    "ZpyRuntimeError",
    "ZpyTypeError",
    "ZpyUndefinedVariable",
    "ZpyUnsupportedOperation",
    "parse_errors",
    "parse_ok",
    "result_of",
    "run_program",
    "run_runtime_case",
    "to_py",
    "tokenize",
    "verify_result",
]


def parse_ok(code: str) -> List[Stmt]:
    """Parse code and fail the test on any recovered parse error."""
    statements, errors = parse_program(code)
    assert not errors, f"unexpected parse errors: {[str(e) for e in errors]}"
    return statements


def parse_errors(code: str) -> List[ParseError]:
    _statements, errors = parse_program(code)
    return errors


def to_py(value: ZpyValue) -> object:
    """Convert a ZPy value to plain Python data for comparisons."""
    match value:
        case ZpyNone():
            return None
        case ZpyBool(value=b):
            return b
        case ZpyInt(value=n) | ZpyFloat(value=n):
            return n
        case ZpyString(value=s):
            return s.decode("utf-8", "surrogateescape")
        case ZpyList(items=items):
            return [to_py(item) for item in items]
        case ZpyDict(keys=keys, values=values):
            return [(to_py(k), to_py(v)) for k, v in zip(keys, values)]
        case ZpyFunction(name=name):
            return name
    raise AssertionError(f"not a ZPy value: {value!r}")


def result_of(source: str) -> ZpyValue:
    env = run_program(source)
    value = env.lookup(RESULT_NAME)
    assert value is not None, f"program did not bind {RESULT_NAME!r}"
    return value


def verify_result(value: ZpyValue, kind: str, expected: object) -> None:
    """Assert runtime result variant and value."""
    match kind:
        case "int":
            assert isinstance(value, ZpyInt), f"expected ZpyInt, got {type(value).__name__}"
            assert value.value == expected, f"expected {expected!r}, got {value.value!r}"
            return
        case "float":
            assert isinstance(value, ZpyFloat), f"expected ZpyFloat, got {type(value).__name__}"
            if isinstance(expected, float) and math.isnan(expected):
                assert math.isnan(value.value), f"expected nan, got {value.value!r}"
                return
            assert (
                value.value == expected or abs(value.value - float(expected)) <= 1e-9
            ), f"expected {expected}, got {value.value}"
            return
        case "string":
            assert isinstance(value, ZpyString), f"expected ZpyString, got {type(value).__name__}"
            actual = to_py(value)
            assert actual == expected, f"expected {expected!r}, got {actual!r}"
            return
        case "bool":
            assert isinstance(value, ZpyBool), f"expected ZpyBool, got {type(value).__name__}"
            assert value.value == bool(expected), f"expected {expected}, got {value.value}"
            return
        case "none":
            assert isinstance(value, ZpyNone), f"expected ZpyNone, got {type(value).__name__}"
            return
        case "list":
            assert isinstance(value, ZpyList), f"expected ZpyList, got {type(value).__name__}"
            actual = to_py(value)
            assert actual == expected, f"expected {expected!r}, got {actual!r}"
            return
        case "dict":
            assert isinstance(value, ZpyDict), f"expected ZpyDict, got {type(value).__name__}"
            actual = to_py(value)
            assert actual == expected, f"expected {expected!r}, got {actual!r}"
            return
        case "function":
            assert isinstance(value, ZpyFunction), f"expected ZpyFunction, got {type(value).__name__}"
            assert value.name == expected, f"expected {expected!r}, got {value.name!r}"
            return
        case _:
            raise AssertionError(f"unknown expectation kind {kind}")


def run_runtime_case(
    source: str,
    expectation: RuntimeExpectation,
    expected_exc: Optional[type],
) -> None:
    """Execute one runtime scenario with optional expected exception."""
    parse_ok(source)

    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_program(source)
        return

    value = result_of(source)
    if expectation is not None:
        verify_result(value, expectation[0], expectation[1])
