"""Built-in global functions (print and the operators) installed by interpret."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, Dict, Sequence, TextIO

from .types import (
    UNDEFINED,
    ArityError,
    JSArithmeticError,
    JSObject,
    JSTypeError,
    JSValue,
    display,
)

@dataclass
class GlobalContext:
    """Per-run settings visible to builtins."""
    out: TextIO
    trace: bool = False

GlobalFn = Callable[[GlobalContext, Sequence[JSValue]], JSValue]

_GLOBALS: Dict[str, GlobalFn] = {}

def register_global(name: str):
    def dec(fn: GlobalFn) -> GlobalFn:
        _GLOBALS[name] = fn
        return fn

    return dec

def install_globals(env: JSObject, ctx: GlobalContext) -> None:
    for name, fn in _GLOBALS.items():
        env.register(name, JSObject.new_function(name, _bind(fn, ctx)))

def _bind(fn: GlobalFn, ctx: GlobalContext):
    def invoker(_function: JSObject, _receiver: JSValue, args: Sequence[JSValue]) -> JSValue:
        return fn(ctx, args)

    return invoker

@register_global("print")
def std_print(ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    if ctx.trace:
        sys.stderr.write(f"print called with [{', '.join(display(a) for a in args)}]\n")

    ctx.out.write(" ".join(display(a) for a in args) + "\n")
    return UNDEFINED

# ---------------- Operators ----------------

def _is_int(value: JSValue) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

def _expect_pair(op: str, args: Sequence[JSValue]) -> None:
    if len(args) != 2:
        raise ArityError(op, 2, len(args))

def _int_operands(op: str, args: Sequence[JSValue]) -> tuple[int, int]:
    _expect_pair(op, args)
    left, right = args

    if not _is_int(left) or not _is_int(right):
        raise JSTypeError(f"{op} expects integer operands; got {display(left)} and {display(right)}")

    return left, right  # type: ignore[return-value]

def _ordered_operands(op: str, args: Sequence[JSValue]) -> tuple[JSValue, JSValue]:
    _expect_pair(op, args)
    left, right = args

    if _is_int(left) and _is_int(right):
        return left, right

    if isinstance(left, str) and isinstance(right, str):
        return left, right

    raise JSTypeError(f"{op} cannot compare {display(left)} with {display(right)}")

def _truncated_div(a: int, b: int) -> int:
    if b == 0:
        raise JSArithmeticError("division by zero")

    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q

@register_global("+")
def op_add(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    a, b = _int_operands("+", args)
    return a + b

@register_global("-")
def op_sub(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    a, b = _int_operands("-", args)
    return a - b

@register_global("*")
def op_mul(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    a, b = _int_operands("*", args)
    return a * b

@register_global("/")
def op_div(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    a, b = _int_operands("/", args)
    return _truncated_div(a, b)

@register_global("%")
def op_mod(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    # remainder keeps the sign of the dividend
    a, b = _int_operands("%", args)
    return a - b * _truncated_div(a, b)

@register_global("==")
def op_eq(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    _expect_pair("==", args)
    return 1 if _same_value(args[0], args[1]) else 0

@register_global("!=")
def op_ne(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    _expect_pair("!=", args)
    return 0 if _same_value(args[0], args[1]) else 1

def _same_value(left: JSValue, right: JSValue) -> bool:
    if type(left) is not type(right):
        return False

    return left == right

@register_global("<")
def op_lt(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    a, b = _ordered_operands("<", args)
    return 1 if a < b else 0  # type: ignore[operator]

@register_global("<=")
def op_le(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    a, b = _ordered_operands("<=", args)
    return 1 if a <= b else 0  # type: ignore[operator]

@register_global(">")
def op_gt(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    a, b = _ordered_operands(">", args)
    return 1 if a > b else 0  # type: ignore[operator]

@register_global(">=")
def op_ge(_ctx: GlobalContext, args: Sequence[JSValue]) -> JSValue:
    a, b = _ordered_operands(">=", args)
    return 1 if a >= b else 0  # type: ignore[operator]
