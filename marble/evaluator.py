"""
Tree-walking evaluator.

Runtime errors are values, never exceptions. Every site that evaluates a
child node checks the child's result and hands an `Error` (or a `Return`
travelling towards the enclosing function call) back to its own caller
unchanged, so the first error raised always reaches the top level.

The only host exception turned into a runtime error here is
`RecursionError`, which a function call reports as running out of call
depth.
"""

from typing import Optional, Union
import logging
import operator

from .ast import (
    AstBlock,
    AstExpressionArray,
    AstExpressionBoolean,
    AstExpressionCall,
    AstExpressionFloat,
    AstExpressionFunction,
    AstExpressionIdentifier,
    AstExpressionIf,
    AstExpressionIndex,
    AstExpressionInfix,
    AstExpressionInteger,
    AstExpressionPrefix,
    AstExpressionString,
    AstNode,
    AstProgram,
    AstStatementExpression,
    AstStatementReturn,
    AstStatementVar,
)
from .builtins import BUILTINS
from .environment import Environment
from .lexer import Lexer
from .objects import (
    FALSE,
    NULL,
    Array,
    Builtin,
    Error,
    Float,
    Function,
    Integer,
    Return,
    String,
    Value,
    int64,
    native_boolean,
)
from .parser import ParseFailure, Parser
from .tokens import Token, TokenKind

logger = logging.getLogger(__name__)

Result = Optional[Union[Value, Return, Error]]

COMPARISONS = {
    # fmt: off
    TokenKind.LT: operator.lt,
    TokenKind.GT: operator.gt,
    TokenKind.LE: operator.le,
    TokenKind.GE: operator.ge,
    TokenKind.EQ: operator.eq,
    TokenKind.NE: operator.ne,
    # fmt: on
}


def is_truthy(value: Value) -> bool:
    return value is not FALSE and value is not NULL


def evaluate(node: AstNode, env: Environment) -> Result:
    match node:
        case AstProgram():
            return evaluate_program(node, env)
        case AstBlock():
            return evaluate_block(node, env)
        case AstStatementVar(name=name, value=value):
            result = evaluate(value, env)
            if isinstance(result, (Return, Error)):
                return result
            env.let(name.name, result)
            return None
        case AstStatementReturn(value=value):
            result = evaluate(value, env)
            if isinstance(result, (Return, Error)):
                return result
            return Return(result)
        case AstStatementExpression(value=value):
            return evaluate(value, env)
        case AstExpressionIdentifier():
            return evaluate_identifier(node, env)
        case AstExpressionInteger(value=value):
            return Integer(value)
        case AstExpressionFloat(value=value):
            return Float(value)
        case AstExpressionBoolean(value=value):
            return native_boolean(value)
        case AstExpressionString():
            return String(node.value)
        case AstExpressionArray(elements=elements):
            values = evaluate_expressions(elements, env)
            if isinstance(values, (Return, Error)):
                return values
            return Array(tuple(values))
        case AstExpressionPrefix(token=token, right=right):
            operand = evaluate(right, env)
            if isinstance(operand, (Return, Error)):
                return operand
            return evaluate_prefix(token, operand)
        case AstExpressionInfix(token=token, left=left, right=right):
            lhs = evaluate(left, env)
            if isinstance(lhs, (Return, Error)):
                return lhs
            rhs = evaluate(right, env)
            if isinstance(rhs, (Return, Error)):
                return rhs
            return evaluate_infix(token, lhs, rhs)
        case AstExpressionIf():
            return evaluate_if(node, env)
        case AstExpressionFunction(parameters=parameters, body=body):
            logger.debug(
                "closure created: params=(%s) env_id=%s",
                ", ".join([x.name for x in parameters]),
                id(env),
            )
            return Function(parameters, body, env)
        case AstExpressionCall(token=token, function=function, arguments=arguments):
            callee = evaluate(function, env)
            if isinstance(callee, (Return, Error)):
                return callee
            values = evaluate_expressions(arguments, env)
            if isinstance(values, (Return, Error)):
                return values
            return apply_function(token, callee, values)
        case AstExpressionIndex(token=token, left=left, index=index):
            collection = evaluate(left, env)
            if isinstance(collection, (Return, Error)):
                return collection
            key = evaluate(index, env)
            if isinstance(key, (Return, Error)):
                return key
            return evaluate_index(token, collection, key)
    raise TypeError(f"cannot evaluate {type(node).__name__}")


def evaluate_program(program: AstProgram, env: Environment) -> Optional[Union[Value, Error]]:
    result: Result = None
    for statement in program.statements:
        result = evaluate(statement, env)
        if isinstance(result, Return):
            return result.value
        if isinstance(result, Error):
            return result
    return result


def evaluate_block(block: AstBlock, env: Environment) -> Result:
    # Return values are left wrapped so that the enclosing function call can
    # tell an early return apart from the value of the last statement.
    result: Result = None
    for statement in block.statements:
        result = evaluate(statement, env)
        if isinstance(result, (Return, Error)):
            return result
    return result


def evaluate_expressions(
    expressions, env: Environment
) -> Union[list[Value], Return, Error]:
    values: list[Value] = list()
    for expression in expressions:
        result = evaluate(expression, env)
        if isinstance(result, (Return, Error)):
            return result
        values.append(result)
    return values


def evaluate_identifier(
    node: AstExpressionIdentifier, env: Environment
) -> Union[Value, Error]:
    value = env.get(node.name)
    if value is not None:
        return value
    builtin = BUILTINS.get(node.name)
    if builtin is not None:
        return builtin
    return Error(node.token.location, f"identifier '{node.name}' not found")


def evaluate_prefix(token: Token, operand: Value) -> Union[Value, Error]:
    if token.kind == TokenKind.NOT:
        return native_boolean(not is_truthy(operand))
    if token.kind == TokenKind.SUB:
        if isinstance(operand, Integer):
            return Integer(int64(-operand.data))
        if isinstance(operand, Float):
            return Float(-operand.data)
    return Error(
        token.location,
        f"unknown operator: {token.literal}{operand.typename()}",
    )


def evaluate_infix(token: Token, lhs: Value, rhs: Value) -> Union[Value, Error]:
    if isinstance(lhs, Integer) and isinstance(rhs, Integer):
        return evaluate_integer_infix(token, lhs, rhs)
    if isinstance(lhs, (Integer, Float)) and isinstance(rhs, (Integer, Float)):
        return evaluate_float_infix(token, lhs, rhs)
    if isinstance(lhs, String) and isinstance(rhs, String):
        return evaluate_string_infix(token, lhs, rhs)
    # Values of any other type are only equal to themselves.
    if token.kind == TokenKind.EQ:
        return native_boolean(lhs is rhs)
    if token.kind == TokenKind.NE:
        return native_boolean(lhs is not rhs)
    return unknown_infix_operator(token, lhs, rhs)


def unknown_infix_operator(token: Token, lhs: Value, rhs: Value) -> Error:
    return Error(
        token.location,
        f"unknown operator: {lhs.typename()} {token.literal} {rhs.typename()}",
    )


def evaluate_integer_infix(
    token: Token, lhs: Integer, rhs: Integer
) -> Union[Value, Error]:
    a, b = lhs.data, rhs.data
    match token.kind:
        case TokenKind.ADD:
            return Integer(int64(a + b))
        case TokenKind.SUB:
            return Integer(int64(a - b))
        case TokenKind.MUL:
            return Integer(int64(a * b))
        case TokenKind.DIV:
            if b == 0:
                return Error(token.location, "invalid division by zero")
            # Integer division truncates towards zero.
            quotient = abs(a) // abs(b)
            return Integer(int64(quotient if (a < 0) == (b < 0) else -quotient))
    if token.kind in COMPARISONS:
        return native_boolean(COMPARISONS[token.kind](a, b))
    return unknown_infix_operator(token, lhs, rhs)


def evaluate_float_infix(
    token: Token, lhs: Union[Integer, Float], rhs: Union[Integer, Float]
) -> Union[Value, Error]:
    a, b = float(lhs.data), float(rhs.data)
    match token.kind:
        case TokenKind.ADD:
            return Float(a + b)
        case TokenKind.SUB:
            return Float(a - b)
        case TokenKind.MUL:
            return Float(a * b)
        case TokenKind.DIV:
            if b == 0.0:
                return Error(token.location, "invalid division by zero")
            return Float(a / b)
    if token.kind in COMPARISONS:
        return native_boolean(COMPARISONS[token.kind](a, b))
    return unknown_infix_operator(token, lhs, rhs)


def evaluate_string_infix(
    token: Token, lhs: String, rhs: String
) -> Union[Value, Error]:
    match token.kind:
        case TokenKind.ADD:
            return String(lhs.bytes + rhs.bytes)
        case TokenKind.EQ:
            return native_boolean(lhs.bytes == rhs.bytes)
        case TokenKind.NE:
            return native_boolean(lhs.bytes != rhs.bytes)
    return unknown_infix_operator(token, lhs, rhs)


def evaluate_if(node: AstExpressionIf, env: Environment) -> Result:
    condition = evaluate(node.condition, env)
    if isinstance(condition, (Return, Error)):
        return condition
    if is_truthy(condition):
        result = evaluate(node.consequence, env)
    elif node.alternative is not None:
        result = evaluate(node.alternative, env)
    else:
        return NULL
    return NULL if result is None else result


def apply_function(
    token: Token, function: Value, arguments: list[Value]
) -> Union[Value, Error]:
    if isinstance(function, Function):
        if len(arguments) != len(function.parameters):
            return Error(token.location, "wrong number of arguments")
        logger.debug(
            "applying %s with %d argument(s) at %s",
            function.typename(),
            len(arguments),
            token.location,
        )
        env = Environment(function.env)
        for parameter, argument in zip(function.parameters, arguments):
            env.let(parameter.name, argument)
        try:
            result = evaluate(function.body, env)
        except RecursionError:
            # Raised by the deepest call still able to build an error value.
            return Error(token.location, "maximum recursion depth exceeded")
        if isinstance(result, Return):
            return result.value
        if result is None:
            return NULL
        return result
    if isinstance(function, Builtin):
        return function.call(token, arguments)
    return Error(token.location, f"'{function.typename()}' is not a function")


def evaluate_index(token: Token, collection: Value, key: Value) -> Union[Value, Error]:
    if not (isinstance(collection, Array) and isinstance(key, Integer)):
        return Error(
            token.location,
            f"unsupported index operation: {collection.typename()}",
        )
    count = len(collection.elements)
    index = key.data
    if index < 0:
        index += count
    if index < 0 or index >= count:
        return Error(token.location, f"index '{index}' is out of bounds")
    return collection.elements[index]


def evaluate_source(
    source: Union[bytes, str], env: Optional[Environment] = None
) -> Optional[Union[Value, Error]]:
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    errors = parser.errors()
    if len(errors) != 0:
        raise ParseFailure(errors)
    return evaluate_program(program, env if env is not None else Environment())
