from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..tree import ForStmt, IfStmt, WhileStmt
from ..types import (
    NORMAL,
    Environment,
    Flow,
    FlowBreak,
    FlowReturn,
    ZpyDict,
    ZpyList,
    ZpyString,
    ZpyTypeError,
    ZpyValue,
)
from .helpers import is_truthy, type_name

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def _iterable_values(value: ZpyValue) -> List[ZpyValue]:
    """Snapshot of what a for loop visits: list items, string bytes, dict keys."""
    match value:
        case ZpyList(items=items):
            return list(items)
        case ZpyString(value=s):
            return [ZpyString(s[i:i + 1]) for i in range(len(s))]
        case ZpyDict(keys=keys):
            return list(keys)

    raise ZpyTypeError(f"{type_name(value)} is not iterable")

def eval_if_stmt(node: IfStmt, env: Environment, interp: 'Interpreter') -> Flow:
    if is_truthy(interp.eval_expr(node.condition, env)):
        return interp.exec_stmt(node.then_branch, env)

    for branch in node.elif_branches:
        if is_truthy(interp.eval_expr(branch.condition, env)):
            return interp.exec_stmt(branch.body, env)

    if node.else_branch is not None:
        return interp.exec_stmt(node.else_branch, env)

    return NORMAL

def eval_while_stmt(node: WhileStmt, env: Environment, interp: 'Interpreter') -> Flow:
    while is_truthy(interp.eval_expr(node.condition, env)):
        flow = interp.exec_stmt(node.body, env)

        if isinstance(flow, FlowBreak):
            break
        if isinstance(flow, FlowReturn):
            return flow

    return NORMAL

def eval_for_stmt(node: ForStmt, env: Environment, interp: 'Interpreter') -> Flow:
    iterable = interp.eval_expr(node.iterable, env)

    for item in _iterable_values(iterable):
        env.assign(node.variable, item)
        flow = interp.exec_stmt(node.body, env)

        if isinstance(flow, FlowBreak):
            break
        if isinstance(flow, FlowReturn):
            return flow

    return NORMAL
