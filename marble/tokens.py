from dataclasses import dataclass
import enum


@dataclass(frozen=True)
class SourceLocation:
    line: int
    column: int

    def __str__(self):
        return f"line {self.line} column {self.column}"


class TokenKind(enum.Enum):
    # Meta
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"
    # Identifiers and Literals
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    FLOAT = "FLOAT"
    INTEGER = "INTEGER"
    # Operators
    ASSIGN = "="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    NOT = "!"
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    EQ = "=="
    NE = "!="
    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    # Keywords
    FUNCTION = "func"
    VAR = "var"
    TRUE = "true"
    FALSE = "false"
    IF = "if"
    ELSE = "else"
    RETURN = "return"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Token:
    KEYWORDS = {
        # fmt: off
        str(TokenKind.FUNCTION): TokenKind.FUNCTION,
        str(TokenKind.VAR):      TokenKind.VAR,
        str(TokenKind.TRUE):     TokenKind.TRUE,
        str(TokenKind.FALSE):    TokenKind.FALSE,
        str(TokenKind.IF):       TokenKind.IF,
        str(TokenKind.ELSE):     TokenKind.ELSE,
        str(TokenKind.RETURN):   TokenKind.RETURN,
        # fmt: on
    }

    kind: TokenKind
    literal: str
    line: int = 1
    column: int = 0

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.line, self.column)

    @staticmethod
    def lookup_identifier(identifier: str) -> TokenKind:
        return Token.KEYWORDS.get(identifier, TokenKind.IDENTIFIER)
