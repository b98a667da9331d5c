from __future__ import annotations

from typing import TYPE_CHECKING

from ..runtime import call_builtin, call_builtin_method, call_function
from ..tree import Call, FuncDef, MethodCall, ReturnStmt
from ..types import (
    NORMAL,
    Environment,
    Flow,
    FlowReturn,
    ZpyFunction,
    ZpyNone,
    ZpyTypeError,
    ZpyValue,
)
from .helpers import type_name

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def eval_func_def(node: FuncDef, env: Environment, interp: 'Interpreter') -> Flow:
    env.assign(node.name, ZpyFunction(node.name, node.params, node.body))
    return NORMAL

def eval_return_stmt(node: ReturnStmt, env: Environment, interp: 'Interpreter') -> Flow:
    if node.value is None:
        return FlowReturn(ZpyNone())
    return FlowReturn(interp.eval_expr(node.value, env))

def eval_call(node: Call, env: Environment, interp: 'Interpreter') -> ZpyValue:
    # Builtins win over user bindings of the same name.
    builtin = interp.builtins.get(node.callee)
    if builtin is not None:
        args = [interp.eval_expr(arg, env) for arg in node.args]
        return call_builtin(node.callee, builtin, args, env)

    fn = env.get(node.callee)
    if not isinstance(fn, ZpyFunction):
        raise ZpyTypeError(f"'{node.callee}' is a {type_name(fn)}, not a function")

    args = [interp.eval_expr(arg, env) for arg in node.args]
    return call_function(fn, args, env, interp)

def eval_method_call(node: MethodCall, env: Environment, interp: 'Interpreter') -> ZpyValue:
    recv = interp.eval_expr(node.obj, env)
    args = [interp.eval_expr(arg, env) for arg in node.args]
    return call_builtin_method(recv, node.method, args)
