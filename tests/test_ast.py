from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import parse_ok
from zpy.tree import (
    Binary,
    FloatLit,
    Identifier,
    IntLit,
    Membership,
    StringLit,
    Unary,
    format_expr,
    pretty,
)

FORMAT_CASES = [
    pytest.param(Binary("+", IntLit(1), IntLit(2)), "(1 + 2)", id="binary"),
    pytest.param(Unary("-", Identifier("x")), "(- x)", id="unary-minus"),
    pytest.param(Unary("not", Identifier("x")), "(not x)", id="unary-not"),
    pytest.param(FloatLit(2.0), "2", id="integral-float"),
    pytest.param(FloatLit(0.1), "0.1", id="float"),
    pytest.param(StringLit(b"hi"), '"hi"', id="string"),
    pytest.param(Membership(IntLit(1), Identifier("xs"), negated=True), "1 not in xs", id="not-in"),
]


@pytest.mark.parametrize("node, expected", FORMAT_CASES)
def test_format_expr(node, expected: str) -> None:
    assert format_expr(node) == expected


AST_CASES = [
    ("assign", "x = 1 + 2", "[0] Assign: x = (1 + 2)"),
    ("aug-assign", "x -= 3", "[0] AugAssign: x -= 3"),
    ("index-assign", "d['k'] = [1, 2]", '[0] IndexAssign: d["k"] = [1, 2]'),
    ("del", "del xs[0]", "[0] Del: xs[0]"),
    ("method-call", "s.split(',')", '[0] ExprStmt: s.split(",")'),
    ("dict", "{1: 'a'}", '[0] ExprStmt: {1: "a"}'),
    ("pass", "pass", "[0] Pass"),
    (
        "numbered",
        "a = 1\nprint(a)\n",
        "[0] Assign: a = 1\n[1] ExprStmt: print(a)",
    ),
    (
        "if-elif-else",
        dedent(
            """\
            if x:
                pass
            elif y:
                break
            else:
                continue
            """
        ),
        dedent(
            """\
            [0] If: x
              Block:
                Pass
            Elif: y
              Block:
                Break
            Else:
              Block:
                Continue"""
        ),
    ),
    (
        "def",
        "def add(a, b):\n    return a + b\n",
        "[0] FuncDef: add(a, b)\n  Block:\n    Return: (a + b)",
    ),
    (
        "for-while",
        "for i in range(3):\n    while i: i -= 1\n",
        dedent(
            """\
            [0] For: i in range(3)
              Block:
                While: i
                  AugAssign: i -= 1"""
        ),
    ),
    ("bare-return", "def f(): return", "[0] FuncDef: f()\n  Return: none"),
]


@pytest.mark.parametrize(
    "source, expected",
    [pytest.param(source, expected, id=name) for name, source, expected in AST_CASES],
)
def test_pretty(source: str, expected: str) -> None:
    assert pretty(parse_ok(source)) == expected


def test_pretty_custom_indent() -> None:
    out = pretty(parse_ok("while x:\n    pass\n"), indent="    ")
    assert out == "[0] While: x\n    Block:\n        Pass"


def test_pretty_empty_program() -> None:
    assert pretty([]) == ""
