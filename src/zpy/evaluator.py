from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from .runtime import (
    BREAK,
    CONTINUE,
    NORMAL,
    BuiltinFunction,
    Builtins,
    Environment,
    Flow,
    FlowNormal,
    ZpyBool,
    ZpyFloat,
    ZpyInt,
    ZpyNone,
    ZpyOutOfMemory,
    ZpyRuntimeError,
    ZpyString,
    ZpyValue,
    init_stdlib,
)
from .tree import (
    Assignment,
    AugAssign,
    Binary,
    Block,
    BoolLit,
    BreakStmt,
    Call,
    ContinueStmt,
    DelStmt,
    DictLit,
    Expr,
    ExprStmt,
    FloatLit,
    ForStmt,
    FuncDef,
    Identifier,
    IfStmt,
    Index,
    IndexAssign,
    IntLit,
    ListLit,
    Membership,
    MethodCall,
    NoneLit,
    PassStmt,
    ReturnStmt,
    Stmt,
    StringLit,
    Unary,
    WhileStmt,
)
from .eval.expr import apply_binary_operator, eval_binary, eval_membership, eval_unary
from .eval.fn import eval_call, eval_func_def, eval_method_call, eval_return_stmt
from .eval.literals import eval_dict_literal, eval_list_literal
from .eval.loops import eval_for_stmt, eval_if_stmt, eval_while_stmt
from .eval.mutation import eval_del_stmt, eval_index, eval_index_assign
from .utils import recursion_budget

def _maybe_attach_location(exc: ZpyRuntimeError, stmt: Stmt) -> None:
    # Innermost statement wins; outer frames leave it alone.
    if exc.line is not None:
        return

    line = getattr(stmt, "line", 0)
    if line:
        exc.line = line

class Interpreter:
    """
    Tree-walking interpreter.

    Statements return a Flow (normal, break, continue, or return with a
    value); expressions return a ZpyValue. Runtime failures raise
    ZpyRuntimeError subclasses and abort the current execute().
    """

    def __init__(self, env: Optional[Environment]=None, builtins: Optional[Dict[str, BuiltinFunction]]=None):
        init_stdlib()
        self.env = env if env is not None else Environment()
        self.builtins = Builtins.functions if builtins is None else builtins

    # ---------------- Public API ----------------

    def execute(self, statements: Sequence[Stmt]) -> Flow:
        """Run statements in order against the global environment."""
        try:
            with recursion_budget():
                return self.exec_block(statements, self.env)
        except MemoryError as exc:
            raise ZpyOutOfMemory() from exc
        except RecursionError as exc:
            raise ZpyOutOfMemory("call stack exhausted") from exc

    def evaluate(self, expr: Expr) -> ZpyValue:
        try:
            with recursion_budget():
                return self.eval_expr(expr, self.env)
        except MemoryError as exc:
            raise ZpyOutOfMemory() from exc
        except RecursionError as exc:
            raise ZpyOutOfMemory("call stack exhausted") from exc

    # ---------------- Core evaluator ----------------

    def exec_block(self, statements: Sequence[Stmt], env: Environment) -> Flow:
        for stmt in statements:
            flow = self.exec_stmt(stmt, env)
            if not isinstance(flow, FlowNormal):
                return flow
        return NORMAL

    def exec_stmt(self, stmt: Stmt, env: Environment) -> Flow:
        handler = _STMT_DISPATCH.get(type(stmt))
        if handler is None:
            raise ZpyRuntimeError(f"unknown statement {type(stmt).__name__}")

        try:
            return handler(stmt, env, self)
        except ZpyRuntimeError as e:
            _maybe_attach_location(e, stmt)
            raise

    def eval_expr(self, expr: Expr, env: Environment) -> ZpyValue:
        handler = _EXPR_DISPATCH.get(type(expr))
        if handler is None:
            raise ZpyRuntimeError(f"unknown expression {type(expr).__name__}")

        return handler(expr, env, self)

# ---------------- Statements ----------------

def _exec_expr_stmt(n: ExprStmt, env: Environment, interp: Interpreter) -> Flow:
    interp.eval_expr(n.expr, env)
    return NORMAL

def _exec_assignment(n: Assignment, env: Environment, interp: Interpreter) -> Flow:
    env.assign(n.name, interp.eval_expr(n.value, env))
    return NORMAL

def _exec_aug_assign(n: AugAssign, env: Environment, interp: Interpreter) -> Flow:
    current = env.get(n.name)
    rhs = interp.eval_expr(n.value, env)
    env.assign(n.name, apply_binary_operator(n.op, current, rhs))
    return NORMAL

_STMT_DISPATCH: Dict[type, Callable[..., Flow]] = {
    ExprStmt: _exec_expr_stmt,
    Assignment: _exec_assignment,
    IndexAssign: eval_index_assign,
    AugAssign: _exec_aug_assign,
    DelStmt: eval_del_stmt,
    IfStmt: eval_if_stmt,
    WhileStmt: eval_while_stmt,
    ForStmt: eval_for_stmt,
    BreakStmt: lambda n, env, interp: BREAK,
    ContinueStmt: lambda n, env, interp: CONTINUE,
    ReturnStmt: eval_return_stmt,
    FuncDef: eval_func_def,
    Block: lambda n, env, interp: interp.exec_block(n.statements, env),
    PassStmt: lambda n, env, interp: NORMAL,
}

# ---------------- Expressions ----------------

_EXPR_DISPATCH: Dict[type, Callable[..., ZpyValue]] = {
    IntLit: lambda n, env, interp: ZpyInt(n.value),
    FloatLit: lambda n, env, interp: ZpyFloat(n.value),
    StringLit: lambda n, env, interp: ZpyString(n.value),
    BoolLit: lambda n, env, interp: ZpyBool(n.value),
    NoneLit: lambda n, env, interp: ZpyNone(),
    Identifier: lambda n, env, interp: env.get(n.name),
    Binary: eval_binary,
    Unary: eval_unary,
    Call: eval_call,
    Index: eval_index,
    ListLit: eval_list_literal,
    DictLit: eval_dict_literal,
    MethodCall: eval_method_call,
    Membership: eval_membership,
}
