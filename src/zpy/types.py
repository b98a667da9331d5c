from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar
from typing_extensions import Protocol, TypeAlias, TypeGuard

from .tree import Stmt
from .utils import format_float

# ---------- Value Model ----------

@dataclass(frozen=True)
class ZpyNone:
    def __repr__(self) -> str:
        return "none"

@dataclass(frozen=True)
class ZpyInt:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass(frozen=True)
class ZpyFloat:
    value: float
    def __repr__(self) -> str:
        return format_float(self.value)

@dataclass(frozen=True)
class ZpyString:
    value: bytes

    @classmethod
    def of(cls, text: str) -> ZpyString:
        return cls(text.encode("utf-8", "surrogateescape"))

    def text(self) -> str:
        return self.value.decode("utf-8", "replace")

    def __repr__(self) -> str:
        return f'"{self.text()}"'

@dataclass(frozen=True)
class ZpyBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

# Containers compare by identity: `[1] == [1]` is false in ZPy.
@dataclass(eq=False)
class ZpyList:
    items: List['ZpyValue'] = field(default_factory=list)
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(eq=False)
class ZpyDict:
    """Insertion-ordered mapping with parallel key/value lists.

    Lookup is a linear scan by ZPy equality (see eval.helpers.dict_index),
    so any value, including lists, can be a key.
    """
    keys: List['ZpyValue'] = field(default_factory=list)
    values: List['ZpyValue'] = field(default_factory=list)

    def __repr__(self) -> str:
        pairs = [f"{k!r}: {v!r}" for k, v in zip(self.keys, self.values)]
        return "{" + ", ".join(pairs) + "}"

@dataclass(eq=False)
class ZpyFunction:
    name: str
    params: Tuple[str, ...]
    body: Stmt
    def __repr__(self) -> str:
        return f"<function {self.name}>"

ZpyValue: TypeAlias = (
    ZpyNone
    | ZpyInt
    | ZpyFloat
    | ZpyString
    | ZpyBool
    | ZpyList
    | ZpyDict
    | ZpyFunction
)

_ZPY_VALUE_TYPES: Tuple[type, ...] = (
    ZpyNone,
    ZpyInt,
    ZpyFloat,
    ZpyString,
    ZpyBool,
    ZpyList,
    ZpyDict,
    ZpyFunction,
)

def is_zpy_value(value: object) -> TypeGuard[ZpyValue]:
    return isinstance(value, _ZPY_VALUE_TYPES)

# ---------- Control flow ----------

@dataclass(frozen=True)
class FlowNormal:
    pass

@dataclass(frozen=True)
class FlowBreak:
    pass

@dataclass(frozen=True)
class FlowContinue:
    pass

@dataclass(frozen=True)
class FlowReturn:
    value: ZpyValue

Flow: TypeAlias = FlowNormal | FlowBreak | FlowContinue | FlowReturn

NORMAL = FlowNormal()
BREAK = FlowBreak()
CONTINUE = FlowContinue()

# ---------- Environment ----------

class Environment:
    """One scope of name bindings, chained to its parent."""

    def __init__(self, parent: Optional['Environment']=None):
        self.parent = parent
        self.vars: Dict[str, ZpyValue] = {}

    def define(self, name: str, val: ZpyValue) -> None:
        self.vars[name] = val

    def lookup(self, name: str) -> Optional[ZpyValue]:
        scope: Optional[Environment] = self
        while scope is not None:
            if name in scope.vars:
                return scope.vars[name]
            scope = scope.parent
        return None

    def get(self, name: str) -> ZpyValue:
        val = self.lookup(name)
        if val is None:
            raise ZpyUndefinedVariable(name)
        return val

    def assign(self, name: str, val: ZpyValue) -> None:
        """Rebind in the nearest scope that owns *name*, else define here."""
        scope: Optional[Environment] = self
        while scope is not None:
            if name in scope.vars:
                scope.vars[name] = val
                return
            scope = scope.parent

        self.vars[name] = val

# ---------- Exceptions ----------

class ZpyRuntimeError(Exception):
    """Base of every error a ZPy program can raise at run time."""

    kind = "RuntimeError"
    default_message = "Runtime error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        self.line: Optional[int] = None
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.detail:
            return f"{self.default_message}: {self.detail}"
        return self.default_message

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line})"

class ZpyUndefinedVariable(ZpyRuntimeError):
    kind = "UndefinedVariable"
    default_message = "Undefined variable"

    def __init__(self, name: str):
        super().__init__(f"'{name}'")
        self.name = name

class ZpyTypeError(ZpyRuntimeError):
    kind = "TypeError"
    default_message = "Type error - incompatible types for operation"

class ZpyDivisionByZero(ZpyRuntimeError):
    kind = "DivisionByZero"
    default_message = "Division by zero"

class ZpyIndexError(ZpyRuntimeError):
    kind = "IndexOutOfBounds"
    default_message = "Index out of bounds"

class ZpyKeyError(ZpyRuntimeError):
    kind = "KeyNotFound"
    default_message = "Key not found in dictionary"

class ZpyUnsupportedOperation(ZpyRuntimeError):
    kind = "UnsupportedOperation"
    default_message = "Unsupported operation"

class ZpyMethodNotFound(ZpyUnsupportedOperation):
    def __init__(self, type_name: str, name: str):
        super().__init__(f"{type_name} has no method '{name}'")
        self.type_name = type_name
        self.name = name

class ZpyOutOfMemory(ZpyRuntimeError):
    kind = "OutOfMemory"
    default_message = "Out of memory"

class ZpyBuiltinError(ZpyRuntimeError):
    kind = "BuiltinError"
    default_message = "Error in built-in function"

# ---------- Builtin registries ----------

BuiltinFn = Callable[['Environment', List['ZpyValue']], 'ZpyValue']

@dataclass(frozen=True)
class BuiltinFunction:
    fn: BuiltinFn
    arity: Optional[int] = None

R_contra = TypeVar("R_contra", bound="ZpyValue", contravariant=True)

class Method(Protocol[R_contra]):
    def __call__(self, recv: R_contra, args: List['ZpyValue']) -> 'ZpyValue': ...

MethodRegistry = Dict[str, Method[Any]]

class Builtins:
    functions: Dict[str, BuiltinFunction] = {}
    string_methods: MethodRegistry = {}
    list_methods: MethodRegistry = {}
    dict_methods: MethodRegistry = {}
