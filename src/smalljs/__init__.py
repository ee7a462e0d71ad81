"""AST interpreter for smalljs, a small JavaScript-like teaching language."""

from .evaluator import interpret, visit
from .nodes import Script
from .parser import parse_source
from .runner import run
from .types import (
    UNDEFINED,
    ArityError,
    FieldError,
    JSArithmeticError,
    JSObject,
    JSTypeError,
    ParseError,
    RedeclarationError,
    ReturnOutsideFunctionError,
    StackDepthError,
    SmallJSError,
)

__all__ = [
    "UNDEFINED",
    "ArityError",
    "FieldError",
    "JSArithmeticError",
    "JSObject",
    "JSTypeError",
    "ParseError",
    "RedeclarationError",
    "ReturnOutsideFunctionError",
    "StackDepthError",
    "Script",
    "SmallJSError",
    "interpret",
    "parse_source",
    "run",
    "visit",
]
