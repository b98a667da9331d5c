from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    ZpyBuiltinError,
    ZpyIndexError,
    ZpyKeyError,
    ZpyMethodNotFound,
    ZpyTypeError,
    ZpyUnsupportedOperation,
    result_of,
    run_runtime_case,
)
from zpy.eval.common import display

LIST_SCENARIOS = [
    pytest.param("xs = [10, 20, 30]\nresult = xs[1]", ("int", 20), None, id="index"),
    pytest.param("xs = [10, 20, 30]\nresult = xs[-1]", ("int", 30), None, id="negative-index"),
    pytest.param("xs = [10, 20, 30]\nresult = xs[-3]", ("int", 10), None, id="negative-index-first"),
    pytest.param("xs = [1]\nresult = xs[1]", None, ZpyIndexError, id="index-past-end"),
    pytest.param("xs = [1]\nresult = xs[-2]", None, ZpyIndexError, id="negative-index-past-start"),
    pytest.param('xs = [1]\nresult = xs["0"]', None, ZpyTypeError, id="index-not-int"),
    pytest.param("result = [[1, 2], [3, 4]][1][0]", ("int", 3), None, id="nested-index"),
    pytest.param("xs = [1, 2]\nxs[0] = 9\nresult = xs", ("list", [9, 2]), None, id="index-assign"),
    pytest.param("xs = [1, 2]\nxs[-1] = 9\nresult = xs", ("list", [1, 9]), None, id="index-assign-negative"),
    pytest.param("xs = [1]\nxs[3] = 9", None, ZpyIndexError, id="index-assign-out-of-range"),
    pytest.param("xs = [1, 2, 3]\ndel xs[0]\nresult = xs", ("list", [2, 3]), None, id="del-list"),
    pytest.param("xs = [1, 2, 3, 4, 5]\ndel xs[2]\nresult = xs", ("list", [1, 2, 4, 5]), None, id="del-middle"),
    pytest.param("xs = [1]\ndel xs[5]", None, ZpyIndexError, id="del-list-out-of-range"),
    pytest.param("a = [1]\nb = a\nb.append(2)\nresult = a", ("list", [1, 2]), None, id="aliasing"),
    pytest.param("xs = [1, 2]\nxs.append(3)\nresult = xs", ("list", [1, 2, 3]), None, id="append"),
    pytest.param("xs = [1, 2]\nresult = xs.append(3)", ("none", None), None, id="append-returns-none"),
    pytest.param("xs = [1, 2, 3]\nresult = [xs.pop(), xs]", ("list", [3, [1, 2]]), None, id="pop"),
    pytest.param("xs = [1, 2, 3]\nresult = [xs.pop(0), xs]", ("list", [1, [2, 3]]), None, id="pop-index"),
    pytest.param("xs = [1, 2, 3]\nresult = xs.pop(-2)", ("int", 2), None, id="pop-negative-index"),
    pytest.param("xs = []\nxs.pop()", None, ZpyIndexError, id="pop-empty"),
    pytest.param("xs = [1]\nxs.pop(4)", None, ZpyIndexError, id="pop-out-of-range"),
    pytest.param('xs = [1]\nxs.pop("a")', None, ZpyBuiltinError, id="pop-index-not-int"),
    pytest.param("xs = [1, 3]\nxs.insert(1, 2)\nresult = xs", ("list", [1, 2, 3]), None, id="insert"),
    pytest.param("xs = [1]\nxs.insert(99, 2)\nresult = xs", ("list", [1, 2]), None, id="insert-clamps-high"),
    pytest.param("xs = [1]\nxs.insert(-99, 0)\nresult = xs", ("list", [0, 1]), None, id="insert-clamps-low"),
    pytest.param("xs = [1, 2]\nxs.insert(-1, 9)\nresult = xs", ("list", [1, 9, 2]), None, id="insert-negative"),
    pytest.param("xs = [1, 2, 1]\nxs.remove(1)\nresult = xs", ("list", [2, 1]), None, id="remove-first-match"),
    pytest.param("xs = [1]\nxs.remove(5)", None, ZpyKeyError, id="remove-missing"),
    pytest.param("xs = [1, 2, 3]\nxs.reverse()\nresult = xs", ("list", [3, 2, 1]), None, id="reverse"),
    pytest.param("xs = [1, 2]\nxs.clear()\nresult = xs", ("list", []), None, id="clear"),
    pytest.param("result = [5, 6, 7].index(7)", ("int", 2), None, id="index-method"),
    pytest.param("result = [5, 6].index(9)", ("int", -1), None, id="index-method-missing"),
    pytest.param("result = [1, 2, 1, 1].count(1)", ("int", 3), None, id="count"),
    pytest.param(
        "a = [1, [2]]\nb = a.copy()\nb.append(3)\nb[1].append(4)\nresult = a",
        ("list", [1, [2, 4]]),
        None,
        id="copy-is-shallow",
    ),
    pytest.param("xs = [1]\nxs.extend([2, 3])\nresult = xs", ("list", [1, 2, 3]), None, id="extend"),
    pytest.param("xs = [1]\nxs.extend(xs)\nresult = xs", ("list", [1, 1]), None, id="extend-self"),
    pytest.param("xs = [1]\nxs.extend(2)", None, ZpyTypeError, id="extend-non-list"),
    pytest.param("[1].append()", None, ZpyBuiltinError, id="method-arity"),
    pytest.param("[1].push(2)", None, ZpyMethodNotFound, id="unknown-method"),
    pytest.param("x = 5\nx.foo()", None, ZpyUnsupportedOperation, id="int-has-no-methods"),
]

DICT_SCENARIOS = [
    pytest.param('d = {"a": 1}\nresult = d["a"]', ("int", 1), None, id="lookup"),
    pytest.param('d = {"a": 1}\nresult = d["b"]', None, ZpyKeyError, id="lookup-missing"),
    pytest.param('d = {}\nd["a"] = 1\nd["b"] = 2\nd["a"] = 3\nresult = d', ("dict", [("a", 3), ("b", 2)]), None, id="assign-keeps-order"),
    pytest.param('result = {"a": 1, "a": 2}', ("dict", [("a", 2)]), None, id="literal-duplicate-key"),
    pytest.param("result = {1: 'int', 1.0: 'float'}", ("dict", [(1, "int"), (1.0, "float")]), None, id="keys-strictly-typed"),
    pytest.param("k = [1]\nd = {k: 'list'}\nresult = d[k]", ("string", "list"), None, id="list-key-by-identity"),
    pytest.param("d = {[1]: 'list'}\nresult = d[[1]]", None, ZpyKeyError, id="list-key-other-identity"),
    pytest.param('d = {"a": 1, "b": 2}\ndel d["a"]\nresult = d', ("dict", [("b", 2)]), None, id="del"),
    pytest.param('d = {}\ndel d["a"]', None, ZpyKeyError, id="del-missing"),
    pytest.param('d = {"a": 1}\nresult = [d.get("a"), d.get("z"), d.get("z", 0)]', ("list", [1, None, 0]), None, id="get"),
    pytest.param('result = {"a": 1, "b": 2}.keys()', ("list", ["a", "b"]), None, id="keys"),
    pytest.param('result = {"a": 1, "b": 2}.values()', ("list", [1, 2]), None, id="values"),
    pytest.param('result = {"a": 1}.items()', ("list", [["a", 1]]), None, id="items"),
    pytest.param('d = {"a": 1}\nd.clear()\nresult = len(d)', ("int", 0), None, id="clear"),
    pytest.param(
        'd = {"a": 1, "b": 2}\nd.update({"b": 9, "c": 3})\nresult = d',
        ("dict", [("a", 1), ("b", 9), ("c", 3)]),
        None,
        id="update",
    ),
    pytest.param('d = {}\nd.update([1])', None, ZpyTypeError, id="update-non-dict"),
    pytest.param('d = {"a": 1}\nresult = [d.pop("a"), len(d)]', ("list", [1, 0]), None, id="pop"),
    pytest.param('d = {}\nresult = d.pop("a", 5)', ("int", 5), None, id="pop-default"),
    pytest.param('d = {}\nd.pop("a")', None, ZpyKeyError, id="pop-missing"),
    pytest.param('{}.setdefault("a", 1)', None, ZpyMethodNotFound, id="unknown-method"),
]

STRING_INDEX_SCENARIOS = [
    pytest.param('result = "abc"[1]', ("string", "b"), None, id="string-index"),
    pytest.param('result = "abc"[-1]', ("string", "c"), None, id="string-negative-index"),
    pytest.param('result = "abc"[3]', None, ZpyIndexError, id="string-index-past-end"),
    pytest.param('s = "abc"\ns[0] = "x"', None, ZpyTypeError, id="string-immutable"),
    pytest.param("x = 5\nresult = x[0]", None, ZpyTypeError, id="int-not-indexable"),
    pytest.param("x = none\ndel x[0]", None, ZpyTypeError, id="none-no-delete"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", LIST_SCENARIOS)
def test_lists(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


@pytest.mark.parametrize("source, expectation, expected_exc", DICT_SCENARIOS)
def test_dicts(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


@pytest.mark.parametrize("source, expectation, expected_exc", STRING_INDEX_SCENARIOS)
def test_string_indexing(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_self_containing_list_renders_ellipsis() -> None:
    source = dedent(
        """\
        xs = [1]
        xs.append(xs)
        result = xs
        """
    )
    assert display(result_of(source)) == "[1, [...]]"


def test_self_containing_dict_renders_ellipsis() -> None:
    source = 'd = {}\nd["self"] = d\nresult = d'
    assert display(result_of(source)) == "{self: {...}}"


def test_nested_strings_render_raw() -> None:
    assert display(result_of('result = ["a", {"k": "v"}]')) == "[a, {k: v}]"
