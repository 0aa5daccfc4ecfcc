"""
Abstract syntax tree for marble programs.

Every node keeps the token that introduced it so that runtime errors can be
reported at a source position, and every node renders back to canonical
source text with `str`. The canonical form fully parenthesizes prefix, infix,
and index expressions, which makes operator precedence visible in tests.
"""

from dataclasses import dataclass
from typing import Optional, Union, final

from .tokens import Token


def _join(nodes) -> str:
    return ", ".join([str(x) for x in nodes])


@final
@dataclass(frozen=True)
class AstIdentifier:
    """
    Identifier with no additional behavior attached, used for the name of a
    var statement and for function parameters.
    """

    token: Token

    @property
    def name(self) -> str:
        return self.token.literal

    def __str__(self):
        return self.name


@final
@dataclass(frozen=True)
class AstExpressionIdentifier:
    token: Token

    @property
    def name(self) -> str:
        return self.token.literal

    def __str__(self):
        return self.name


@final
@dataclass(frozen=True)
class AstExpressionInteger:
    token: Token
    value: int

    def __str__(self):
        return self.token.literal


@final
@dataclass(frozen=True)
class AstExpressionFloat:
    token: Token
    value: float

    def __str__(self):
        return self.token.literal


@final
@dataclass(frozen=True)
class AstExpressionBoolean:
    token: Token
    value: bool

    def __str__(self):
        return self.token.literal


@final
@dataclass(frozen=True)
class AstExpressionString:
    token: Token

    @property
    def value(self) -> bytes:
        return self.token.literal.encode("utf-8", errors="surrogateescape")

    def __str__(self):
        return f'"{self.token.literal}"'


@final
@dataclass(frozen=True)
class AstExpressionArray:
    token: Token
    elements: tuple["AstExpression", ...]

    def __str__(self):
        return f"[{_join(self.elements)}]"


@final
@dataclass(frozen=True)
class AstExpressionPrefix:
    token: Token  # operator token
    right: "AstExpression"

    @property
    def operator(self) -> str:
        return self.token.literal

    def __str__(self):
        return f"({self.operator}{self.right})"


@final
@dataclass(frozen=True)
class AstExpressionInfix:
    token: Token  # operator token
    left: "AstExpression"
    right: "AstExpression"

    @property
    def operator(self) -> str:
        return self.token.literal

    def __str__(self):
        return f"({self.left} {self.operator} {self.right})"


@final
@dataclass(frozen=True)
class AstExpressionIf:
    token: Token
    condition: "AstExpression"
    consequence: "AstBlock"
    alternative: Optional["AstBlock"] = None

    def __str__(self):
        text = f"{self.token.literal} ({self.condition}) {self.consequence}"
        if self.alternative is not None:
            text += f" else {self.alternative}"
        return text


@final
@dataclass(frozen=True)
class AstExpressionFunction:
    token: Token
    parameters: tuple[AstIdentifier, ...]
    body: "AstBlock"

    def __str__(self):
        return f"{self.token.literal}({_join(self.parameters)}){self.body}"


@final
@dataclass(frozen=True)
class AstExpressionCall:
    token: Token  # `(` token
    function: "AstExpression"
    arguments: tuple["AstExpression", ...]

    def __str__(self):
        return f"{self.function}({_join(self.arguments)})"


@final
@dataclass(frozen=True)
class AstExpressionIndex:
    token: Token  # `[` token
    left: "AstExpression"
    index: "AstExpression"

    def __str__(self):
        return f"({self.left}[{self.index}])"


@final
@dataclass(frozen=True)
class AstStatementVar:
    token: Token
    name: AstIdentifier
    value: "AstExpression"

    def __str__(self):
        return f"{self.token.literal} {self.name} = {self.value};"


@final
@dataclass(frozen=True)
class AstStatementReturn:
    token: Token
    value: "AstExpression"

    def __str__(self):
        return f"{self.token.literal} {self.value};"


@final
@dataclass(frozen=True)
class AstStatementExpression:
    token: Token  # first token of the expression
    value: "AstExpression"

    def __str__(self):
        return f"{self.value};"


@final
@dataclass(frozen=True)
class AstBlock:
    """
    Sequence of statements between braces. A block does not open a new
    scope; function calls are the only construct that creates one.
    """

    token: Token
    statements: tuple["AstStatement", ...]

    def __str__(self):
        return "{" + "".join([str(x) for x in self.statements]) + "}"


@final
@dataclass(frozen=True)
class AstProgram:
    statements: tuple["AstStatement", ...]

    def __str__(self):
        return "".join([str(x) for x in self.statements])


AstExpression = Union[
    AstExpressionIdentifier,
    AstExpressionInteger,
    AstExpressionFloat,
    AstExpressionBoolean,
    AstExpressionString,
    AstExpressionArray,
    AstExpressionPrefix,
    AstExpressionInfix,
    AstExpressionIf,
    AstExpressionFunction,
    AstExpressionCall,
    AstExpressionIndex,
]

AstStatement = Union[
    AstStatementVar,
    AstStatementReturn,
    AstStatementExpression,
    AstBlock,
]

AstNode = Union[AstProgram, AstStatement, AstExpression]
