"""AST node classes produced by the parser and consumed by the evaluator.

Every node is an immutable dataclass carrying the source line it came from;
the line is only used for diagnostics.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional, Tuple, Union
from typing_extensions import TypeAlias

from .types import ReturnOutsideFunctionError


@dataclass(frozen=True)
class Block:
    instrs: Tuple['Expr', ...]
    line: int


@dataclass(frozen=True)
class Literal:
    value: Any
    line: int


@dataclass(frozen=True)
class FunCall:
    qualifier: 'Expr'
    args: Tuple['Expr', ...]
    line: int


@dataclass(frozen=True)
class LocalVarAccess:
    name: str
    line: int


@dataclass(frozen=True)
class LocalVarAssignment:
    name: str
    expr: 'Expr'
    declaration: bool
    line: int


@dataclass(frozen=True)
class Fun:
    name: Optional[str]
    parameters: Tuple[str, ...]
    body: Block
    line: int


@dataclass(frozen=True)
class Return:
    expr: 'Expr'
    line: int


@dataclass(frozen=True)
class If:
    condition: 'Expr'
    true_block: Block
    false_block: Block
    line: int


@dataclass(frozen=True)
class New:
    init_map: Mapping[str, 'Expr']  # insertion order is evaluation order
    line: int


@dataclass(frozen=True)
class FieldAccess:
    receiver: 'Expr'
    name: str
    line: int


@dataclass(frozen=True)
class FieldAssignment:
    receiver: 'Expr'
    name: str
    expr: 'Expr'
    line: int


@dataclass(frozen=True)
class MethodCall:
    receiver: 'Expr'
    name: str
    args: Tuple['Expr', ...]
    line: int


Expr: TypeAlias = Union[
    Block,
    Literal,
    FunCall,
    LocalVarAccess,
    LocalVarAssignment,
    Fun,
    Return,
    If,
    New,
    FieldAccess,
    FieldAssignment,
    MethodCall,
]


@dataclass(frozen=True)
class Script:
    body: Block


def child_nodes(node: Expr) -> Iterator[Expr]:
    match node:
        case Block(instrs=instrs):
            yield from instrs
        case FunCall(qualifier=qualifier, args=args):
            yield qualifier
            yield from args
        case LocalVarAssignment(expr=expr) | Return(expr=expr):
            yield expr
        case Fun(body=body):
            yield body
        case If(condition=condition, true_block=true_block, false_block=false_block):
            yield condition
            yield true_block
            yield false_block
        case New(init_map=init_map):
            yield from init_map.values()
        case FieldAccess(receiver=receiver):
            yield receiver
        case FieldAssignment(receiver=receiver, expr=expr):
            yield receiver
            yield expr
        case MethodCall(receiver=receiver, args=args):
            yield receiver
            yield from args
        case _:
            return


def check_returns(script: Script) -> None:
    """Reject `return` that is not nested inside a function body."""

    def visit(node: Expr, in_function: bool) -> None:
        if isinstance(node, Return) and not in_function:
            raise ReturnOutsideFunctionError(node.line)

        nested = in_function or isinstance(node, Fun)

        for child in child_nodes(node):
            visit(child, nested)

    visit(script.body, False)
