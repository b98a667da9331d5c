from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import ZpyUndefinedVariable, result_of, run_runtime_case, to_py

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            x = 5
            if x > 3:
                result = "big"
            else:
                result = "small"
            """
        ),
        ("string", "big"),
        None,
        id="if-else-then",
    ),
    pytest.param(
        dedent(
            """\
            x = 2
            if x == 1:
                result = "one"
            elif x == 2:
                result = "two"
            elif x == 2:
                result = "second-two"
            else:
                result = "other"
            """
        ),
        ("string", "two"),
        None,
        id="first-matching-elif-wins",
    ),
    pytest.param(
        dedent(
            """\
            result = "unset"
            if false:
                result = "then"
            elif 0:
                result = "elif"
            """
        ),
        ("string", "unset"),
        None,
        id="no-branch-taken",
    ),
    pytest.param('if "": result = 1\nelse: result = 2', ("int", 2), None, id="empty-string-falsy"),
    pytest.param("if []: result = 1\nelse: result = 2", ("int", 2), None, id="empty-list-falsy"),
    pytest.param("if {}: result = 1\nelse: result = 2", ("int", 2), None, id="empty-dict-falsy"),
    pytest.param("if 0.0: result = 1\nelse: result = 2", ("int", 2), None, id="zero-float-falsy"),
    pytest.param("if none: result = 1\nelse: result = 2", ("int", 2), None, id="none-falsy"),
    pytest.param('if " ": result = 1\nelse: result = 2', ("int", 1), None, id="space-truthy"),
    pytest.param("if [0]: result = 1\nelse: result = 2", ("int", 1), None, id="nonempty-list-truthy"),
    pytest.param(
        "def f(): pass\nif f: result = 1\nelse: result = 2",
        ("int", 1),
        None,
        id="function-truthy",
    ),
    pytest.param(
        "if true: pass\nresult = 1",
        ("int", 1),
        None,
        id="pass-body",
    ),
    pytest.param(
        "result = 1\nreturn\nresult = 2",
        ("int", 1),
        None,
        id="top-level-return-halts",
    ),
    pytest.param(
        "result = 1\nbreak\nresult = 2",
        ("int", 1),
        None,
        id="top-level-break-halts",
    ),
    pytest.param(
        "result = 1\nif true:\n    continue\nresult = 2",
        ("int", 1),
        None,
        id="top-level-continue-halts",
    ),
    pytest.param(
        dedent(
            """\
            def f():
                break
                return 5
            result = f()
            """
        ),
        ("none", None),
        None,
        id="break-outside-loop-in-function-returns-none",
    ),
    pytest.param(
        dedent(
            """\
            def sign(n):
                if n < 0:
                    return -1
                elif n == 0:
                    return 0
                return 1
            result = [sign(-5), sign(0), sign(9)]
            """
        ),
        ("list", [-1, 0, 1]),
        None,
        id="return-from-branches",
    ),
    pytest.param(
        "if true:\n    y = 1\nresult = y",
        ("int", 1),
        None,
        id="blocks-do-not-scope",
    ),
    pytest.param(
        "if false:\n    y = 1\nresult = y",
        None,
        ZpyUndefinedVariable,
        id="untaken-branch-binds-nothing",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_control_flow(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_semicolons_separate_statements() -> None:
    source = "x = 3; if x: a = 1; b = 2\nresult = [a, b]"
    assert to_py(result_of(source)) == [1, 2]
