"""AST node classes produced by the parser and walked by the evaluator.

Expression and statement nodes are frozen dataclasses grouped into the closed
``Expr`` and ``Stmt`` unions. ``pretty`` renders a statement list the way the
``--ast`` flag shows it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from typing_extensions import TypeAlias

from .utils import format_float

# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class IntLit:
    value: int


@dataclass(frozen=True)
class FloatLit:
    value: float


@dataclass(frozen=True)
class StringLit:
    value: bytes  # escapes already decoded


@dataclass(frozen=True)
class BoolLit:
    value: bool


@dataclass(frozen=True)
class NoneLit:
    pass


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Binary:
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Unary:
    op: str
    operand: Expr


@dataclass(frozen=True)
class Call:
    callee: str
    args: Tuple[Expr, ...]


@dataclass(frozen=True)
class Index:
    obj: Expr
    index: Expr


@dataclass(frozen=True)
class ListLit:
    elements: Tuple[Expr, ...]


@dataclass(frozen=True)
class DictLit:
    keys: Tuple[Expr, ...]
    values: Tuple[Expr, ...]


@dataclass(frozen=True)
class MethodCall:
    obj: Expr
    method: str
    args: Tuple[Expr, ...]


@dataclass(frozen=True)
class Membership:
    value: Expr
    collection: Expr
    negated: bool = False


Expr: TypeAlias = Union[
    IntLit, FloatLit, StringLit, BoolLit, NoneLit, Identifier, Binary, Unary,
    Call, Index, ListLit, DictLit, MethodCall, Membership,
]

# ============================================================================
# Statements
# ============================================================================

@dataclass(frozen=True)
class ExprStmt:
    expr: Expr
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Assignment:
    name: str
    value: Expr
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class IndexAssign:
    obj: Expr
    index: Expr
    value: Expr
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class AugAssign:
    name: str
    op: str  # the binary operator: '+', '-', '*', '/', '%'
    value: Expr
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class DelStmt:
    obj: Expr
    index: Expr
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class ElifBranch:
    condition: Expr
    body: Stmt


@dataclass(frozen=True)
class IfStmt:
    condition: Expr
    then_branch: Stmt
    elif_branches: Tuple[ElifBranch, ...] = ()
    else_branch: Optional[Stmt] = None
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class WhileStmt:
    condition: Expr
    body: Stmt
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class ForStmt:
    variable: str
    iterable: Expr
    body: Stmt
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class BreakStmt:
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class ContinueStmt:
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class ReturnStmt:
    value: Optional[Expr] = None
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class FuncDef:
    name: str
    params: Tuple[str, ...]
    body: Stmt
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Block:
    statements: Tuple[Stmt, ...]
    line: int = field(default=0, compare=False)


@dataclass(frozen=True)
class PassStmt:
    line: int = field(default=0, compare=False)


Stmt: TypeAlias = Union[
    ExprStmt, Assignment, IndexAssign, AugAssign, DelStmt, IfStmt, WhileStmt,
    ForStmt, BreakStmt, ContinueStmt, ReturnStmt, FuncDef, Block, PassStmt,
]

# ============================================================================
# Pretty printing
# ============================================================================

def _quote_bytes(value: bytes) -> str:
    return '"' + value.decode('utf-8', 'replace') + '"'


def _args(args: Sequence[Expr]) -> str:
    return ", ".join(format_expr(a) for a in args)


def format_expr(expr: Expr) -> str:
    """Render an expression on one line."""
    match expr:
        case IntLit(value=v):
            return str(v)
        case FloatLit(value=v):
            return format_float(v)
        case StringLit(value=v):
            return _quote_bytes(v)
        case BoolLit(value=v):
            return "true" if v else "false"
        case NoneLit():
            return "none"
        case Identifier(name=name):
            return name
        case Binary(op=op, left=left, right=right):
            return f"({format_expr(left)} {op} {format_expr(right)})"
        case Unary(op=op, operand=operand):
            return f"({op} {format_expr(operand)})"
        case Call(callee=callee, args=args):
            return f"{callee}({_args(args)})"
        case Index(obj=obj, index=index):
            return f"{format_expr(obj)}[{format_expr(index)}]"
        case ListLit(elements=elements):
            return f"[{_args(elements)}]"
        case DictLit(keys=keys, values=values):
            pairs = ", ".join(
                f"{format_expr(k)}: {format_expr(v)}" for k, v in zip(keys, values)
            )
            return "{" + pairs + "}"
        case MethodCall(obj=obj, method=method, args=args):
            return f"{format_expr(obj)}.{method}({_args(args)})"
        case Membership(value=value, collection=collection, negated=negated):
            op = "not in" if negated else "in"
            return f"{format_expr(value)} {op} {format_expr(collection)}"
    raise TypeError(f"not an expression node: {expr!r}")


def format_stmt(stmt: Stmt, level: int = 0, indent: str = '  ') -> List[str]:
    """Render a statement as one or more indented lines."""
    pad = indent * level
    match stmt:
        case ExprStmt(expr=expr):
            return [f"{pad}ExprStmt: {format_expr(expr)}"]
        case Assignment(name=name, value=value):
            return [f"{pad}Assign: {name} = {format_expr(value)}"]
        case IndexAssign(obj=obj, index=index, value=value):
            return [f"{pad}IndexAssign: {format_expr(obj)}[{format_expr(index)}] = {format_expr(value)}"]
        case AugAssign(name=name, op=op, value=value):
            return [f"{pad}AugAssign: {name} {op}= {format_expr(value)}"]
        case DelStmt(obj=obj, index=index):
            return [f"{pad}Del: {format_expr(obj)}[{format_expr(index)}]"]
        case IfStmt(condition=cond, then_branch=then, elif_branches=elifs, else_branch=other):
            lines = [f"{pad}If: {format_expr(cond)}"]
            lines += format_stmt(then, level + 1, indent)
            for branch in elifs:
                lines.append(f"{pad}Elif: {format_expr(branch.condition)}")
                lines += format_stmt(branch.body, level + 1, indent)
            if other is not None:
                lines.append(f"{pad}Else:")
                lines += format_stmt(other, level + 1, indent)
            return lines
        case WhileStmt(condition=cond, body=body):
            return [f"{pad}While: {format_expr(cond)}"] + format_stmt(body, level + 1, indent)
        case ForStmt(variable=var, iterable=iterable, body=body):
            return [f"{pad}For: {var} in {format_expr(iterable)}"] + format_stmt(body, level + 1, indent)
        case BreakStmt():
            return [f"{pad}Break"]
        case ContinueStmt():
            return [f"{pad}Continue"]
        case ReturnStmt(value=value):
            rendered = "none" if value is None else format_expr(value)
            return [f"{pad}Return: {rendered}"]
        case FuncDef(name=name, params=params, body=body):
            return [f"{pad}FuncDef: {name}({', '.join(params)})"] + format_stmt(body, level + 1, indent)
        case Block(statements=statements):
            lines = [f"{pad}Block:"]
            for child in statements:
                lines += format_stmt(child, level + 1, indent)
            return lines
        case PassStmt():
            return [f"{pad}Pass"]
    raise TypeError(f"not a statement node: {stmt!r}")


def pretty(statements: Sequence[Stmt], indent: str = '  ') -> str:
    """Return the numbered AST dump of a program."""
    out = []
    for i, stmt in enumerate(statements):
        lines = format_stmt(stmt, 0, indent)
        out.append(f"[{i}] {lines[0]}")
        out.extend(lines[1:])
    return "\n".join(out)
