from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import UNDEFINED, ParseError, parse_source
from smalljs.nodes import (
    Block,
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


def _single(source: str):
    script = parse_source(source)
    assert isinstance(script, Script)
    assert len(script.body.instrs) == 1
    return script.body.instrs[0]


def test_let_declaration() -> None:
    assert _single("let x = 1;") == LocalVarAssignment("x", Literal(1, 1), True, 1)


def test_plain_assignment() -> None:
    assert _single("x = 'a';") == LocalVarAssignment("x", Literal("a", 1), False, 1)


def test_binary_operator_becomes_call() -> None:
    assert _single("1 + 2;") == FunCall(
        LocalVarAccess("+", 1), (Literal(1, 1), Literal(2, 1)), 1
    )


def test_operator_precedence() -> None:
    node = _single("a < b + c * d;")

    assert isinstance(node, FunCall)
    assert node.qualifier == LocalVarAccess("<", 1)
    rhs = node.args[1]
    assert isinstance(rhs, FunCall) and rhs.qualifier.name == "+"
    assert isinstance(rhs.args[1], FunCall) and rhs.args[1].qualifier.name == "*"


def test_line_numbers_follow_source() -> None:
    script = parse_source("\n\nfoo();\n\nbar;\n")

    first, second = script.body.instrs
    assert isinstance(first, FunCall) and first.line == 3
    assert isinstance(second, LocalVarAccess) and second.line == 5


def test_named_fun_declaration() -> None:
    node = _single("fun add(a, b) { return a + b; }")

    assert isinstance(node, Fun)
    assert node.name == "add"
    assert node.parameters == ("a", "b")
    assert isinstance(node.body, Block)
    assert isinstance(node.body.instrs[0], Return)


def test_anonymous_fun_expression() -> None:
    node = _single("let f = fun() {};")

    assert isinstance(node, LocalVarAssignment)
    assert node.expr == Fun(None, (), Block((), 1), 1)


def test_bare_return_carries_undefined() -> None:
    node = _single("fun f() { return; }")

    assert node.body.instrs[0] == Return(Literal(UNDEFINED, 1), 1)


def test_if_without_else_has_empty_false_block() -> None:
    node = _single("if (x) { y; }")

    assert isinstance(node, If)
    assert node.true_block.instrs == (LocalVarAccess("y", 1),)
    assert node.false_block.instrs == ()


def test_else_if_nests_in_false_block() -> None:
    node = _single(
        dedent(
            """\
            if (a) { 1; }
            else if (b) { 2; }
            else { 3; }
        """
        )
    )

    assert isinstance(node, If)
    (nested,) = node.false_block.instrs
    assert isinstance(nested, If)
    assert nested.line == 2
    assert nested.false_block.instrs == (Literal(3, 3),)


def test_new_keeps_initializer_order() -> None:
    node = _single("new { b: 1, a: 2, c: 3 };")

    assert isinstance(node, New)
    assert list(node.init_map) == ["b", "a", "c"]


def test_field_and_method_chains() -> None:
    node = _single("o.a.m(1).b = 2;")

    assert isinstance(node, FieldAssignment)
    assert node.name == "b"
    call = node.receiver
    assert isinstance(call, MethodCall)
    assert call.name == "m"
    assert call.args == (Literal(1, 1),)
    assert call.receiver == FieldAccess(LocalVarAccess("o", 1), "a", 1)


def test_negative_literal_folds() -> None:
    assert _single("-4;") == Literal(-4, 1)


def test_negated_expression_subtracts_from_zero() -> None:
    assert _single("-x;") == FunCall(
        LocalVarAccess("-", 1), (Literal(0, 1), LocalVarAccess("x", 1)), 1
    )


def test_string_escapes() -> None:
    assert _single(r'"a\"b\n";') == Literal('a"b\n', 1)


def test_comments_are_ignored() -> None:
    script = parse_source("// leading\nlet x = 1; // trailing\n")

    assert len(script.body.instrs) == 1


def test_keyword_prefixed_identifiers() -> None:
    script = parse_source("let letter = 1; let funny = newer; returned;")

    names = [getattr(node, "name", None) for node in script.body.instrs]
    assert names == ["letter", "funny", "returned"]


def test_empty_program() -> None:
    assert parse_source("") == Script(Block((), 1))


@pytest.mark.parametrize(
    "source, line",
    [
        pytest.param("let = 3;", 1, id="missing-name"),
        pytest.param("let x = 1;\nlet y = ;", 2, id="missing-value"),
        pytest.param("x = 1", 1, id="missing-semicolon"),
        pytest.param("print(1", 1, id="unclosed-call"),
        pytest.param("let x = 1 # 2;", 1, id="bad-character"),
        pytest.param("1 + 2 = 3;", 1, id="assign-to-expression"),
    ],
)
def test_syntax_errors(source: str, line: int) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source(source)

    assert exc_info.value.line == line
