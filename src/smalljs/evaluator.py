from __future__ import annotations

import sys
from typing import List, Optional, Sequence, TextIO
from typing_extensions import assert_never

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
    check_returns,
)
from .stdlib import GlobalContext, install_globals
from .types import (
    UNDEFINED,
    ArityError,
    FieldError,
    JSObject,
    JSTypeError,
    JSValue,
    RedeclarationError,
    ReturnSignal,
    SmallJSError,
    StackDepthError,
    display,
)

# Each language-level call costs several Python frames.
RECURSION_LIMIT = 10000

def as_js_object(value: JSValue, line: int) -> JSObject:
    if not isinstance(value, JSObject):
        raise JSTypeError(f"type error {display(value)} is not an object", line)

    return value

def is_false(value: JSValue) -> bool:
    """Only the integer 0 is false."""
    return type(value) is int and value == 0

# ---------------- Public API ----------------

def interpret(script: Script, out: Optional[TextIO] = None, *, trace: bool = False) -> JSValue:
    check_returns(script)

    global_env = JSObject.new_env(None)
    global_env.register("global", global_env)
    install_globals(global_env, GlobalContext(out=out if out is not None else sys.stdout, trace=trace))

    previous_limit = sys.getrecursionlimit()
    sys.setrecursionlimit(max(previous_limit, RECURSION_LIMIT))
    try:
        return visit(script.body, global_env)
    finally:
        sys.setrecursionlimit(previous_limit)

# ---------------- Core evaluator ----------------

def visit(expression: Expr, env: JSObject) -> JSValue:
    try:
        return _visit_inner(expression, env)
    except SmallJSError as e:
        if e.line is None:
            e.line = expression.line
        raise
    except RecursionError:
        raise StackDepthError("call stack too deep", expression.line) from None

def _visit_inner(expression: Expr, env: JSObject) -> JSValue:
    match expression:
        case Block(instrs=instrs):
            for instr in instrs:
                visit(instr, env)
            return UNDEFINED
        case Literal(value=value):
            return value
        case FunCall(qualifier=qualifier, args=args, line=line):
            function = as_js_object(visit(qualifier, env), line)
            return function.invoke(UNDEFINED, _visit_args(args, env))
        case LocalVarAccess(name=name):
            return env.lookup(name)
        case LocalVarAssignment(name=name, expr=expr, declaration=declaration, line=line):
            if declaration and env.lookup(name) is not UNDEFINED:
                raise RedeclarationError(name, line)
            value = visit(expr, env)
            env.register(name, value)
            return value
        case Fun():
            return _eval_fun(expression, env)
        case Return(expr=expr):
            raise ReturnSignal(visit(expr, env))
        case If(condition=condition, true_block=true_block, false_block=false_block):
            if is_false(visit(condition, env)):
                return visit(false_block, env)
            return visit(true_block, env)
        case New(init_map=init_map):
            obj = JSObject.new_object()
            for name, init in init_map.items():
                obj.register(name, visit(init, env))
            return obj
        case FieldAccess(receiver=receiver, name=name, line=line):
            obj = as_js_object(visit(receiver, env), line)
            return obj.lookup(name)
        case FieldAssignment(receiver=receiver, name=name, expr=expr, line=line):
            obj = as_js_object(visit(receiver, env), line)
            if obj.lookup(name) is UNDEFINED:
                raise FieldError(name, line)
            value = visit(expr, env)
            obj.register(name, value)
            return value
        case MethodCall(receiver=receiver, name=name, args=args, line=line):
            obj = as_js_object(visit(receiver, env), line)
            method = as_js_object(obj.lookup(name), line)
            return method.invoke(obj, _visit_args(args, env))
        case _:
            assert_never(expression)

def _visit_args(args: Sequence[Expr], env: JSObject) -> List[JSValue]:
    return [visit(arg, env) for arg in args]

def _eval_fun(fun: Fun, env: JSObject) -> JSObject:
    """Build a closure over the defining env and register it there."""
    function_name = fun.name if fun.name is not None else "lambda"
    parameters = fun.parameters

    def invoker(_function: JSObject, receiver: JSValue, args: Sequence[JSValue]) -> JSValue:
        if len(args) != len(parameters):
            raise ArityError(function_name, len(parameters), len(args), fun.line)

        call_env = JSObject.new_env(env)
        call_env.register("this", receiver)

        for name, value in zip(parameters, args):
            call_env.register(name, value)

        try:
            return visit(fun.body, call_env)
        except ReturnSignal as signal:
            return signal.value

    function = JSObject.new_function(function_name, invoker)
    env.register(function_name, function)

    return function
