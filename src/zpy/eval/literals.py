from __future__ import annotations

from typing import TYPE_CHECKING

from ..tree import DictLit, ListLit
from ..types import Environment, ZpyDict, ZpyList
from .helpers import dict_set

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def eval_list_literal(node: ListLit, env: Environment, interp: 'Interpreter') -> ZpyList:
    return ZpyList([interp.eval_expr(el, env) for el in node.elements])

def eval_dict_literal(node: DictLit, env: Environment, interp: 'Interpreter') -> ZpyDict:
    # Key then value per pair; a repeated key overwrites the earlier entry.
    result = ZpyDict()
    for key_node, value_node in zip(node.keys, node.values):
        key = interp.eval_expr(key_node, env)
        dict_set(result, key, interp.eval_expr(value_node, env))
    return result
