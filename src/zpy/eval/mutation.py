from __future__ import annotations

from typing import TYPE_CHECKING

from ..tree import DelStmt, Index, IndexAssign
from ..types import (
    NORMAL,
    Environment,
    Flow,
    ZpyDict,
    ZpyKeyError,
    ZpyList,
    ZpyString,
    ZpyTypeError,
    ZpyValue,
)
from .common import display, expect_int, normalize_index
from .helpers import dict_get, dict_remove, dict_set, type_name

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def _key_error(key: ZpyValue) -> ZpyKeyError:
    return ZpyKeyError(repr(key) if isinstance(key, ZpyString) else display(key))

def index_value(obj: ZpyValue, idx: ZpyValue) -> ZpyValue:
    match obj:
        case ZpyList(items=items):
            return items[normalize_index(expect_int(idx, "list index"), len(items))]
        case ZpyString(value=s):
            pos = normalize_index(expect_int(idx, "string index"), len(s))
            return ZpyString(s[pos:pos + 1])
        case ZpyDict():
            found = dict_get(obj, idx)
            if found is None:
                raise _key_error(idx)
            return found

    raise ZpyTypeError(f"{type_name(obj)} is not indexable")

def set_index_value(obj: ZpyValue, idx: ZpyValue, value: ZpyValue) -> None:
    match obj:
        case ZpyList(items=items):
            items[normalize_index(expect_int(idx, "list index"), len(items))] = value
            return
        case ZpyDict():
            dict_set(obj, idx, value)
            return

    raise ZpyTypeError(f"{type_name(obj)} does not support item assignment")

def delete_index(obj: ZpyValue, idx: ZpyValue) -> None:
    match obj:
        case ZpyList(items=items):
            del items[normalize_index(expect_int(idx, "list index"), len(items))]
            return
        case ZpyDict():
            if dict_remove(obj, idx) is None:
                raise _key_error(idx)
            return

    raise ZpyTypeError(f"{type_name(obj)} does not support item deletion")

def eval_index(node: Index, env: Environment, interp: 'Interpreter') -> ZpyValue:
    obj = interp.eval_expr(node.obj, env)
    idx = interp.eval_expr(node.index, env)
    return index_value(obj, idx)

def eval_index_assign(node: IndexAssign, env: Environment, interp: 'Interpreter') -> Flow:
    obj = interp.eval_expr(node.obj, env)
    idx = interp.eval_expr(node.index, env)
    value = interp.eval_expr(node.value, env)
    set_index_value(obj, idx, value)
    return NORMAL

def eval_del_stmt(node: DelStmt, env: Environment, interp: 'Interpreter') -> Flow:
    obj = interp.eval_expr(node.obj, env)
    idx = interp.eval_expr(node.index, env)
    delete_index(obj, idx)
    return NORMAL
