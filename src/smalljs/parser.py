from __future__ import annotations

import ast
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional

from lark import Lark, Token, Transformer, UnexpectedInput
from lark.exceptions import UnexpectedEOF, VisitError
from lark.visitors import v_args

from .nodes import (
    Block,
    Expr,
    FieldAccess,
    FieldAssignment,
    Fun,
    FunCall,
    If,
    Literal,
    LocalVarAccess,
    LocalVarAssignment,
    MethodCall,
    New,
    Return,
    Script,
)
from .types import UNDEFINED, ParseError

GRAMMAR_PATH = Path(__file__).resolve().parent / "grammar.lark"

@lru_cache(maxsize=None)
def make_parser(grammar_path: Optional[str] = None) -> Lark:
    path = Path(grammar_path) if grammar_path else GRAMMAR_PATH
    grammar_text = path.read_text(encoding="utf-8")

    return Lark(
        grammar_text,
        parser="lalr",
        start="start",
        maybe_placeholders=False,
        propagate_positions=True,
    )

def _line(meta: Any, default: int = 1) -> int:
    return getattr(meta, "line", default)

def _operator(op: str):
    def build(self: 'ToAst', meta: Any, children: List[Expr]) -> FunCall:
        left, right = children
        line = _line(meta)
        return FunCall(LocalVarAccess(op, line), (left, right), line)

    return build

@v_args(meta=True)
class ToAst(Transformer):
    """Turn the lark parse tree into `nodes` values."""

    def start(self, meta, children):
        return Script(Block(tuple(children), _line(meta)))

    def block(self, meta, children):
        return Block(tuple(children), _line(meta))

    def params(self, meta, children):
        return tuple(str(tok) for tok in children)

    def args(self, meta, children):
        return tuple(children)

    # ---- statements ----

    def expr_stmt(self, meta, children):
        return children[0]

    def let_stmt(self, meta, children):
        name, value = children
        return LocalVarAssignment(str(name), value, True, _line(meta))

    def return_stmt(self, meta, children):
        line = _line(meta)
        value = children[0] if children else Literal(UNDEFINED, line)
        return Return(value, line)

    def if_stmt(self, meta, children):
        line = _line(meta)
        condition, true_block, *rest = children

        if not rest:
            false_block = Block((), line)
        elif isinstance(rest[0], Block):
            false_block = rest[0]
        else:
            # else-if chain
            false_block = Block((rest[0],), rest[0].line)

        return If(condition, true_block, false_block, line)

    def fun_decl(self, meta, children):
        name, params, body = children
        return Fun(str(name), params, body, _line(meta))

    # ---- expressions ----

    def var_assign(self, meta, children):
        name, value = children
        return LocalVarAssignment(str(name), value, False, _line(meta))

    def field_assign(self, meta, children):
        receiver, name, value = children
        return FieldAssignment(receiver, str(name), value, _line(meta))

    eq = _operator("==")
    ne = _operator("!=")
    lt = _operator("<")
    le = _operator("<=")
    gt = _operator(">")
    ge = _operator(">=")
    add = _operator("+")
    sub = _operator("-")
    mul = _operator("*")
    div = _operator("/")
    mod = _operator("%")

    def neg(self, meta, children):
        operand = children[0]
        line = _line(meta)

        if isinstance(operand, Literal) and type(operand.value) is int:
            return Literal(-operand.value, line)

        return FunCall(LocalVarAccess("-", line), (Literal(0, line), operand), line)

    def fun_call(self, meta, children):
        qualifier, args = children
        return FunCall(qualifier, args, _line(meta))

    def method_call(self, meta, children):
        receiver, name, args = children
        return MethodCall(receiver, str(name), args, _line(meta))

    def field_access(self, meta, children):
        receiver, name = children
        return FieldAccess(receiver, str(name), _line(meta))

    def number(self, meta, children):
        return Literal(int(children[0]), _line(meta))

    def string(self, meta, children):
        return Literal(ast.literal_eval(str(children[0])), _line(meta))

    def var(self, meta, children):
        return LocalVarAccess(str(children[0]), _line(meta))

    def fun_expr(self, meta, children):
        params, body = children
        return Fun(None, params, body, _line(meta))

    def new_object(self, meta, children):
        init_map = {}

        for name, value in children:
            init_map[name] = value

        return New(init_map, _line(meta))

    def field_init(self, meta, children):
        name, value = children
        return (str(name), value)

def parse_source(source: str, grammar_path: Optional[str] = None) -> Script:
    parser = make_parser(grammar_path)

    try:
        tree = parser.parse(source)
    except UnexpectedEOF as exc:
        raise ParseError("unexpected end of input", _eof_line(source)) from exc
    except UnexpectedInput as exc:
        raise ParseError(_describe(exc), _position(exc.line), _position(exc.column)) from exc

    try:
        return ToAst().transform(tree)
    except VisitError as exc:
        raise ParseError(str(exc.orig_exc), _line(getattr(exc.obj, "meta", None))) from exc

def _describe(exc: UnexpectedInput) -> str:
    token = getattr(exc, "token", None)

    if isinstance(token, Token):
        if token.type == "$END":
            return "unexpected end of input"

        return f"unexpected {token.value!r}"

    char = getattr(exc, "char", None)
    if char is not None:
        return f"unexpected character {char!r}"

    return "syntax error"

def _position(value: Any) -> Optional[int]:
    if isinstance(value, int) and value > 0:
        return value

    return None

def _eof_line(source: str) -> int:
    return source.count("\n") + 1
