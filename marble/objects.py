from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Type, TypeVar, Union, final
import math

from .ast import AstBlock, AstIdentifier
from .tokens import SourceLocation, Token

if TYPE_CHECKING:
    from .environment import Environment

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def int64(value: int) -> int:
    """Wrap an arbitrary precision integer into the signed 64-bit range."""
    return (value - INT64_MIN) % 2**64 + INT64_MIN


def format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if value == +math.inf:
        return "+Inf"
    if value == -math.inf:
        return "-Inf"
    # Shortest round-trip digits, written positionally unless the decimal
    # exponent is below -4 or at least 21.
    string = repr(value)
    _, _, exponent = string.partition("e")
    if exponent and -4 <= int(exponent) < 21:
        return format(Decimal(string), "f")
    if string.endswith(".0"):
        return string[:-2]  # Remove trailing fraction of integral values.
    return string


class Value(ABC):
    @staticmethod
    @abstractmethod
    def typename() -> str:
        raise NotImplementedError()

    @abstractmethod
    def __str__(self):
        raise NotImplementedError()


ValueType = TypeVar("ValueType", bound=Value)


@final
@dataclass(frozen=True)
class Integer(Value):
    data: int

    @staticmethod
    def typename() -> str:
        return "INTEGER"

    def __str__(self):
        return str(self.data)


@final
@dataclass(frozen=True)
class Float(Value):
    data: float

    @staticmethod
    def typename() -> str:
        return "FLOAT"

    def __str__(self):
        return format_float(self.data)


@final
@dataclass(frozen=True)
class Boolean(Value):
    data: bool

    @staticmethod
    def typename() -> str:
        return "BOOLEAN"

    def __str__(self):
        return "true" if self.data else "false"


@final
@dataclass(frozen=True)
class String(Value):
    data: bytes

    @staticmethod
    def typename() -> str:
        return "STRING"

    def __str__(self):
        return self.runes

    @property
    def bytes(self) -> bytes:
        return self.data

    @property
    def runes(self) -> str:
        return self.bytes.decode("utf-8", errors="replace")


@final
@dataclass(frozen=True, eq=False)
class Array(Value):
    # Arrays never change after construction. Operations that grow an array
    # build a new one with a new tuple of elements.
    elements: tuple[Value, ...] = ()

    @staticmethod
    def typename() -> str:
        return "ARRAY"

    def __str__(self):
        elements = ", ".join([str(x) for x in self.elements])
        return f"[{elements}]"


@final
@dataclass(frozen=True)
class Null(Value):
    @staticmethod
    def typename() -> str:
        return "NULL"

    def __str__(self):
        return "null"


@final
@dataclass(frozen=True, eq=False)
class Function(Value):
    parameters: tuple[AstIdentifier, ...]
    body: AstBlock
    env: "Environment"

    @staticmethod
    def typename() -> str:
        return "FUNCTION"

    def __str__(self):
        parameters = ", ".join([str(x) for x in self.parameters])
        return f"func({parameters}){self.body}"


class BuiltinError(Exception):
    """
    Raised by builtin implementations for invalid arguments. The message is
    turned into a runtime error positioned at the call site.
    """


@final
@dataclass(frozen=True, eq=False)
class Builtin(Value):
    name: str
    function: Callable[[Token, list[Value]], Value]

    @staticmethod
    def typename() -> str:
        return "BUILTIN"

    def __str__(self):
        return "built-in function"

    def call(self, token: Token, arguments: list[Value]) -> Union[Value, "Error"]:
        try:
            return self.function(token, arguments)
        except BuiltinError as e:
            return Error(token.location, str(e))

    @staticmethod
    def expect_argument_count(arguments: list[Value], count: int) -> None:
        if len(arguments) != count:
            raise BuiltinError("wrong number of arguments")

    @staticmethod
    def expect_minimum_argument_count(arguments: list[Value], count: int) -> None:
        if len(arguments) < count:
            raise BuiltinError("wrong number of arguments")

    @staticmethod
    def typed_argument(
        arguments: list[Value],
        index: int,
        ty: Union[Type[ValueType], tuple[Type[Value], ...]],
    ) -> ValueType:
        argument = arguments[index]
        if not isinstance(argument, ty):
            raise BuiltinError(f"invalid argument type: {argument.typename()}")
        return argument  # type: ignore


@final
@dataclass(frozen=True)
class Return:
    value: Value

    def __str__(self):
        return str(self.value)


@final
@dataclass(frozen=True)
class Error:
    location: SourceLocation
    message: str

    def __str__(self):
        return f"line {self.location.line} col {self.location.column}: {self.message}"


NULL = Null()
TRUE = Boolean(True)
FALSE = Boolean(False)


def native_boolean(value: bool) -> Boolean:
    return TRUE if value else FALSE
