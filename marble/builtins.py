from types import MappingProxyType
from typing import Callable, Mapping

from .objects import NULL, Array, Builtin, Integer, String, Value
from .tokens import Token

_BUILTINS: dict[str, Builtin] = dict()

# Read-only view of every builtin, keyed by the name used to call it. Entries
# are created once at import time and shared by every program run.
BUILTINS: Mapping[str, Builtin] = MappingProxyType(_BUILTINS)


# @builtin("len")
# def builtin_len(token: Token, arguments: list[Value]) -> Value: ...
def builtin(nameof: str):
    def decorator(
        func: Callable[[Token, list[Value]], Value]
    ) -> Callable[[Token, list[Value]], Value]:
        _BUILTINS[nameof] = Builtin(nameof, func)
        return func

    return decorator


@builtin("len")
def builtin_len(token: Token, arguments: list[Value]) -> Value:
    Builtin.expect_argument_count(arguments, 1)
    value = Builtin.typed_argument(arguments, 0, (Array, String))
    if isinstance(value, String):
        return Integer(len(value.bytes))
    return Integer(len(value.elements))


@builtin("push")
def builtin_push(token: Token, arguments: list[Value]) -> Value:
    Builtin.expect_minimum_argument_count(arguments, 2)
    array = Builtin.typed_argument(arguments, 0, Array)
    return Array(array.elements + tuple(arguments[1:]))


@builtin("print")
def builtin_print(token: Token, arguments: list[Value]) -> Value:
    for argument in arguments:
        print(str(argument))
    return NULL
