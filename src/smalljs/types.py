from __future__ import annotations

from reprlib import recursive_repr
from typing import Dict, Optional, Sequence, Union
from typing_extensions import Protocol, TypeAlias

# ---------- Value Model ----------

class Undefined:
    """The value of unbound names, missing fields and statement results."""
    _instance: Optional['Undefined'] = None

    def __new__(cls) -> 'Undefined':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

UNDEFINED = Undefined()

JSValue: TypeAlias = Union[int, str, 'JSObject', Undefined]

class Invoker(Protocol):
    def __call__(self, function: 'JSObject', receiver: JSValue, args: Sequence[JSValue]) -> JSValue: ...

_ENV = "env"
_OBJECT = "object"
_FUNCTION = "function"

class JSObject:
    """Keyed mutable storage with an optional parent.

    The same class backs lexical environments, plain objects and function
    values; functions additionally carry an invoker.
    """
    __slots__ = ('name', 'parent', 'invoker', 'kind', 'slots')

    def __init__(self, name: str, parent: Optional['JSObject'], invoker: Optional[Invoker], kind: str):
        self.name = name
        self.parent = parent
        self.invoker = invoker
        self.kind = kind
        self.slots: Dict[str, JSValue] = {}

    @classmethod
    def new_env(cls, parent: Optional['JSObject']) -> 'JSObject':
        return cls("env", parent, None, _ENV)

    @classmethod
    def new_object(cls) -> 'JSObject':
        return cls("object", None, None, _OBJECT)

    @classmethod
    def new_function(cls, name: str, invoker: Invoker) -> 'JSObject':
        return cls(name, None, invoker, _FUNCTION)

    def lookup(self, name: str) -> JSValue:
        cur: Optional[JSObject] = self

        while cur is not None:
            if name in cur.slots:
                return cur.slots[name]

            cur = cur.parent

        return UNDEFINED

    def register(self, name: str, value: JSValue) -> None:
        self.slots[name] = value

    def invoke(self, receiver: JSValue, args: Sequence[JSValue]) -> JSValue:
        if self.invoker is None:
            raise JSTypeError(f"{display(self)} is not a function")

        return self.invoker(self, receiver, args)

    def is_function(self) -> bool:
        return self.invoker is not None

    @recursive_repr(fillvalue="{...}")
    def __repr__(self) -> str:
        if self.is_function():
            return f"function {self.name}"

        if self.kind == _ENV:
            return "<env>"

        pairs = []

        for k, v in self.slots.items():
            pairs.append(f"{k}: {display(v)}")

        return "{" + ", ".join(pairs) + "}"

def display(value: JSValue) -> str:
    if isinstance(value, str):
        return value

    return str(value)

# ---------- Exceptions ----------

class SmallJSError(Exception):
    """Root of every failure that aborts a run."""
    line: Optional[int]

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        return f"{self.message} (line {self.line})"

class JSTypeError(SmallJSError):
    pass

class RedeclarationError(SmallJSError):
    def __init__(self, name: str, line: Optional[int] = None):
        super().__init__(f"{name} is already declared", line)
        self.name = name

class ArityError(SmallJSError):
    def __init__(self, name: str, expected: int, actual: int, line: Optional[int] = None):
        super().__init__(f"{name} expects {expected} argument(s); got {actual}", line)
        self.name = name
        self.expected = expected
        self.actual = actual

class FieldError(SmallJSError):
    def __init__(self, name: str, line: Optional[int] = None):
        super().__init__(f"field {name} is not declared", line)
        self.name = name

class JSArithmeticError(SmallJSError):
    pass

class StackDepthError(SmallJSError):
    pass

class ReturnOutsideFunctionError(SmallJSError):
    def __init__(self, line: Optional[int] = None):
        super().__init__("return outside of a function", line)

class ParseError(SmallJSError):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message, line)
        self.column = column

    def __str__(self) -> str:
        if self.line is None or self.column is None:
            return super().__str__()

        return f"{self.message} (line {self.line}, col {self.column})"

class ReturnSignal(Exception):
    """Internal control-flow exception used to implement `return`."""
    def __init__(self, value: JSValue):
        self.value = value
