from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .types import (
    ZpyNone, ZpyInt, ZpyFloat, ZpyString, ZpyBool, ZpyList, ZpyDict, ZpyFunction,
    ZpyValue, Environment, Flow, FlowNormal, FlowBreak, FlowContinue, FlowReturn,
    NORMAL, BREAK, CONTINUE,
    ZpyRuntimeError, ZpyUndefinedVariable, ZpyTypeError, ZpyDivisionByZero,
    ZpyIndexError, ZpyKeyError, ZpyUnsupportedOperation, ZpyMethodNotFound,
    ZpyOutOfMemory, ZpyBuiltinError,
    BuiltinFn, BuiltinFunction, Method, MethodRegistry, Builtins,
    is_zpy_value,
)
from .eval.helpers import type_name

if TYPE_CHECKING:
    from .evaluator import Interpreter

_STDLIB_INITIALIZED = False

_STDLIB_MODULES = ("zpy.stdlib", "zpy.stdlib_math", "zpy.methods")

def init_stdlib() -> None:
    """Load builtin modules (idempotent) so the register_* hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    for module_name in _STDLIB_MODULES:
        importlib.import_module(module_name)

    _STDLIB_INITIALIZED = True

def register_method(registry: MethodRegistry, name: str):
    def dec(fn: Callable[..., ZpyValue]):
        registry[name] = fn
        return fn

    return dec

def register_string(name: str):
    return register_method(Builtins.string_methods, name)

def register_list(name: str):
    return register_method(Builtins.list_methods, name)

def register_dict(name: str):
    return register_method(Builtins.dict_methods, name)

def register_builtin(name: str, *, arity: Optional[int] = None):
    def dec(fn: BuiltinFn):
        Builtins.functions[name] = BuiltinFunction(fn=fn, arity=arity)
        return fn

    return dec

def expect_arity(what: str, args: List[ZpyValue], low: int, high: Optional[int] = None) -> None:
    """Raise BuiltinError unless low <= len(args) <= high (high defaults to low)."""
    high = low if high is None else high
    if low <= len(args) <= high:
        return

    expected = str(low) if low == high else f"{low} to {high}"
    raise ZpyBuiltinError(f"{what} expects {expected} argument(s); got {len(args)}")

def call_builtin(name: str, builtin: BuiltinFunction, args: List[ZpyValue], env: Environment) -> ZpyValue:
    """Run a builtin function; every failure inside surfaces as BuiltinError."""
    if builtin.arity is not None:
        expect_arity(f"{name}()", args, builtin.arity)

    try:
        result = builtin.fn(env, args)
    except ZpyBuiltinError:
        raise
    except ZpyRuntimeError as exc:
        raise ZpyBuiltinError(f"{name}(): {exc.detail or exc.message}") from exc
    except (ArithmeticError, ValueError) as exc:
        raise ZpyBuiltinError(f"{name}(): {exc}") from exc

    if not is_zpy_value(result):
        raise ZpyBuiltinError(f"{name}() returned {type(result).__name__}")

    return result

def call_builtin_method(recv: ZpyValue, name: str, args: List[ZpyValue]) -> ZpyValue:
    registry_by_type: Dict[type, MethodRegistry] = {
        ZpyString: Builtins.string_methods,
        ZpyList: Builtins.list_methods,
        ZpyDict: Builtins.dict_methods,
    }

    registry = registry_by_type.get(type(recv))
    if registry is None:
        raise ZpyUnsupportedOperation(f"{type_name(recv)} has no methods")

    handler = registry.get(name)
    if handler is None:
        raise ZpyMethodNotFound(type_name(recv), name)

    return handler(recv, args)

def call_function(fn: ZpyFunction, args: List[ZpyValue], caller_env: Environment, interp: 'Interpreter') -> ZpyValue:
    """
    Call a user function.

    The new scope's parent is the caller's active scope, not the scope the
    function was defined in. Missing arguments bind none; extras are dropped.
    """
    callee_env = Environment(parent=caller_env)

    for i, param in enumerate(fn.params):
        callee_env.define(param, args[i] if i < len(args) else ZpyNone())

    flow = interp.exec_stmt(fn.body, callee_env)
    if isinstance(flow, FlowReturn):
        return flow.value

    return ZpyNone()
