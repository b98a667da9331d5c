from __future__ import annotations

import math
from typing import TYPE_CHECKING, Tuple

from ..tree import Binary, Membership, Unary
from ..types import (
    Environment,
    ZpyBool,
    ZpyDict,
    ZpyDivisionByZero,
    ZpyFloat,
    ZpyInt,
    ZpyList,
    ZpyString,
    ZpyTypeError,
    ZpyUnsupportedOperation,
    ZpyValue,
)
from ..utils import wrap_i64
from .helpers import is_truthy, list_index, type_name, values_equal

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def eval_binary(node: Binary, env: Environment, interp: 'Interpreter') -> ZpyValue:
    # Both sides are always evaluated: `and` / `or` do not short-circuit.
    lhs = interp.eval_expr(node.left, env)
    rhs = interp.eval_expr(node.right, env)
    return apply_binary_operator(node.op, lhs, rhs)

def eval_unary(node: Unary, env: Environment, interp: 'Interpreter') -> ZpyValue:
    operand = interp.eval_expr(node.operand, env)

    match node.op:
        case '-':
            match operand:
                case ZpyInt(value=n):
                    return ZpyInt(wrap_i64(-n))
                case ZpyFloat(value=f):
                    return ZpyFloat(-f)
            raise ZpyTypeError(f"bad operand for unary -: {type_name(operand)}")
        case 'not':
            return ZpyBool(not is_truthy(operand))

    raise ZpyUnsupportedOperation(f"unknown unary operator {node.op}")

def eval_membership(node: Membership, env: Environment, interp: 'Interpreter') -> ZpyValue:
    value = interp.eval_expr(node.value, env)
    collection = interp.eval_expr(node.collection, env)
    found = contains(collection, value)
    return ZpyBool(not found if node.negated else found)

def contains(container: ZpyValue, item: ZpyValue) -> bool:
    match container:
        case ZpyList(items=items):
            return list_index(items, item) >= 0
        case ZpyDict(keys=keys):
            return list_index(keys, item) >= 0
        case ZpyString(value=haystack):
            if not isinstance(item, ZpyString):
                raise ZpyTypeError(
                    f"'in <string>' requires string as left operand, not {type_name(item)}"
                )
            return item.value in haystack

    raise ZpyTypeError(f"argument of type {type_name(container)} is not a container")

def apply_binary_operator(op: str, lhs: ZpyValue, rhs: ZpyValue) -> ZpyValue:
    match op:
        case '+':
            return add(lhs, rhs)
        case '-':
            return subtract(lhs, rhs)
        case '*':
            return multiply(lhs, rhs)
        case '/':
            return divide(lhs, rhs)
        case '%':
            return modulo(lhs, rhs)
        case '**':
            return power(lhs, rhs)
        case '==':
            return ZpyBool(values_equal(lhs, rhs))
        case '!=':
            return ZpyBool(not values_equal(lhs, rhs))
        case '<' | '>' | '<=' | '>=':
            return ZpyBool(compare(op, lhs, rhs))
        case 'and':
            return ZpyBool(is_truthy(lhs) and is_truthy(rhs))
        case 'or':
            return ZpyBool(is_truthy(lhs) or is_truthy(rhs))

    raise ZpyUnsupportedOperation(f"unknown operator {op}")

# ---------- arithmetic ----------

def _operand_error(op: str, lhs: ZpyValue, rhs: ZpyValue) -> ZpyTypeError:
    return ZpyTypeError(
        f"unsupported operand types for {op}: {type_name(lhs)} and {type_name(rhs)}"
    )

def _float_pair(op: str, lhs: ZpyValue, rhs: ZpyValue) -> Tuple[float, float] | None:
    """Both operands as floats when either one is a float, else None."""
    if not isinstance(lhs, ZpyFloat) and not isinstance(rhs, ZpyFloat):
        return None

    if not isinstance(lhs, (ZpyInt, ZpyFloat)) or not isinstance(rhs, (ZpyInt, ZpyFloat)):
        raise _operand_error(op, lhs, rhs)

    return float(lhs.value), float(rhs.value)

def _repeat(text: bytes, count: int) -> ZpyString:
    return ZpyString(text * count if count > 0 else b"")

def add(lhs: ZpyValue, rhs: ZpyValue) -> ZpyValue:
    match (lhs, rhs):
        case (ZpyInt(value=a), ZpyInt(value=b)):
            return ZpyInt(wrap_i64(a + b))
        case (ZpyString(value=a), ZpyString(value=b)):
            return ZpyString(a + b)

    pair = _float_pair('+', lhs, rhs)
    if pair is None:
        raise _operand_error('+', lhs, rhs)
    return ZpyFloat(pair[0] + pair[1])

def subtract(lhs: ZpyValue, rhs: ZpyValue) -> ZpyValue:
    if isinstance(lhs, ZpyInt) and isinstance(rhs, ZpyInt):
        return ZpyInt(wrap_i64(lhs.value - rhs.value))

    pair = _float_pair('-', lhs, rhs)
    if pair is None:
        raise _operand_error('-', lhs, rhs)
    return ZpyFloat(pair[0] - pair[1])

def multiply(lhs: ZpyValue, rhs: ZpyValue) -> ZpyValue:
    match (lhs, rhs):
        case (ZpyInt(value=a), ZpyInt(value=b)):
            return ZpyInt(wrap_i64(a * b))
        case (ZpyString(value=s), ZpyInt(value=n)) | (ZpyInt(value=n), ZpyString(value=s)):
            return _repeat(s, n)

    pair = _float_pair('*', lhs, rhs)
    if pair is None:
        raise _operand_error('*', lhs, rhs)
    return ZpyFloat(pair[0] * pair[1])

def divide(lhs: ZpyValue, rhs: ZpyValue) -> ZpyValue:
    if isinstance(lhs, ZpyInt) and isinstance(rhs, ZpyInt):
        a, b = lhs.value, rhs.value
        if b == 0:
            raise ZpyDivisionByZero()
        # Truncate toward zero
        q = abs(a) // abs(b)
        if (a < 0) != (b < 0):
            q = -q
        return ZpyInt(wrap_i64(q))

    pair = _float_pair('/', lhs, rhs)
    if pair is None:
        raise _operand_error('/', lhs, rhs)
    if pair[1] == 0.0:
        raise ZpyDivisionByZero()
    return ZpyFloat(pair[0] / pair[1])

def modulo(lhs: ZpyValue, rhs: ZpyValue) -> ZpyValue:
    """Floored modulo: the result takes the sign of the divisor."""
    if isinstance(lhs, ZpyInt) and isinstance(rhs, ZpyInt):
        if rhs.value == 0:
            raise ZpyDivisionByZero()
        return ZpyInt(lhs.value % rhs.value)

    pair = _float_pair('%', lhs, rhs)
    if pair is None:
        raise _operand_error('%', lhs, rhs)
    if pair[1] == 0.0:
        raise ZpyDivisionByZero()
    return ZpyFloat(pair[0] % pair[1])

def float_pow(base: float, exp: float) -> float:
    """pow() that answers nan / inf instead of raising."""
    try:
        return math.pow(base, exp)
    except OverflowError:
        return math.inf
    except ValueError:
        if base == 0.0 and exp < 0:
            return math.inf
        return math.nan

def power(lhs: ZpyValue, rhs: ZpyValue) -> ZpyValue:
    if isinstance(lhs, ZpyInt) and isinstance(rhs, ZpyInt):
        base, exp = lhs.value, rhs.value
        if exp < 0:
            return ZpyFloat(float_pow(float(base), float(exp)))
        return ZpyInt(wrap_i64(pow(base, exp, 1 << 64)))

    pair = _float_pair('**', lhs, rhs)
    if pair is None:
        raise _operand_error('**', lhs, rhs)
    return ZpyFloat(float_pow(pair[0], pair[1]))

def compare(op: str, lhs: ZpyValue, rhs: ZpyValue) -> bool:
    match (lhs, rhs):
        case (ZpyInt(value=a), ZpyInt(value=b)) | (ZpyString(value=a), ZpyString(value=b)):
            pass
        case _:
            pair = _float_pair(op, lhs, rhs)
            if pair is None:
                raise _operand_error(op, lhs, rhs)
            a, b = pair

    match op:
        case '<':
            return a < b
        case '>':
            return a > b
        case '<=':
            return a <= b
        case '>=':
            return a >= b

    raise ZpyUnsupportedOperation(f"unknown comparison {op}")
