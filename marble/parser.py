from dataclasses import dataclass
from typing import Callable, Optional
import enum
import math

from .ast import (
    AstBlock,
    AstExpression,
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
    AstIdentifier,
    AstProgram,
    AstStatement,
    AstStatementExpression,
    AstStatementReturn,
    AstStatementVar,
)
from .lexer import Lexer
from .objects import INT64_MAX, INT64_MIN
from .tokens import SourceLocation, Token, TokenKind


@dataclass(frozen=True)
class ParseError:
    location: SourceLocation
    why: str

    def __str__(self):
        return f"{self.location}: {self.why}"


class ParseFailure(Exception):
    """
    Raised by helpers that parse and evaluate in one step when the parser
    reported diagnostics. The program is never evaluated in that case.
    """

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class Precedence(enum.IntEnum):
    # fmt: off
    LOWEST  = enum.auto()
    EQUALS  = enum.auto()  # == !=
    COMPARE = enum.auto()  # < > <= >=
    ADD_SUB = enum.auto()  # + -
    MUL_DIV = enum.auto()  # * /
    PREFIX  = enum.auto()  # -x !x
    CALL    = enum.auto()  # foo(bar, 123)
    INDEX   = enum.auto()  # foo[42]
    # fmt: on


class Parser:
    """
    Pratt parser over a two token window. Every parse function starts with
    the first token of its construct as the current token and finishes with
    the last token of that construct as the current token.

    Problems are recorded as diagnostics instead of being raised. A parse
    function that cannot complete its construct records a diagnostic and
    returns None, and the caller drops the missing node.
    """

    ParseNud = Callable[["Parser"], Optional[AstExpression]]
    ParseLed = Callable[["Parser", AstExpression], Optional[AstExpression]]

    PRECEDENCES: dict[TokenKind, Precedence] = {
        # fmt: off
        TokenKind.EQ:       Precedence.EQUALS,
        TokenKind.NE:       Precedence.EQUALS,
        TokenKind.LT:       Precedence.COMPARE,
        TokenKind.GT:       Precedence.COMPARE,
        TokenKind.LE:       Precedence.COMPARE,
        TokenKind.GE:       Precedence.COMPARE,
        TokenKind.ADD:      Precedence.ADD_SUB,
        TokenKind.SUB:      Precedence.ADD_SUB,
        TokenKind.MUL:      Precedence.MUL_DIV,
        TokenKind.DIV:      Precedence.MUL_DIV,
        TokenKind.LPAREN:   Precedence.CALL,
        TokenKind.LBRACKET: Precedence.INDEX,
        # fmt: on
    }

    def __init__(self, lexer: Lexer):
        self.lexer: Lexer = lexer
        self.diagnostics: list[ParseError] = list()
        self.current_token: Token = Token(TokenKind.ILLEGAL, "DEFAULT CURRENT TOKEN")
        self.peek_token: Token = Token(TokenKind.ILLEGAL, "DEFAULT PEEK TOKEN")

        self._advance_token()
        self._advance_token()

        self.parse_nud_functions: dict[TokenKind, Parser.ParseNud] = dict()
        self.parse_led_functions: dict[TokenKind, Parser.ParseLed] = dict()

        self._register_nud(TokenKind.IDENTIFIER, Parser.parse_expression_identifier)
        self._register_nud(TokenKind.INTEGER, Parser.parse_expression_integer)
        self._register_nud(TokenKind.FLOAT, Parser.parse_expression_float)
        self._register_nud(TokenKind.TRUE, Parser.parse_expression_boolean)
        self._register_nud(TokenKind.FALSE, Parser.parse_expression_boolean)
        self._register_nud(TokenKind.STRING, Parser.parse_expression_string)
        self._register_nud(TokenKind.LBRACKET, Parser.parse_expression_array)
        self._register_nud(TokenKind.SUB, Parser.parse_expression_prefix)
        self._register_nud(TokenKind.NOT, Parser.parse_expression_prefix)
        self._register_nud(TokenKind.LPAREN, Parser.parse_expression_grouped)
        self._register_nud(TokenKind.IF, Parser.parse_expression_if)
        self._register_nud(TokenKind.FUNCTION, Parser.parse_expression_function)

        for kind in (
            TokenKind.ADD,
            TokenKind.SUB,
            TokenKind.MUL,
            TokenKind.DIV,
            TokenKind.EQ,
            TokenKind.NE,
            TokenKind.LT,
            TokenKind.GT,
            TokenKind.LE,
            TokenKind.GE,
        ):
            self._register_led(kind, Parser.parse_expression_infix)
        self._register_led(TokenKind.LPAREN, Parser.parse_expression_call)
        self._register_led(TokenKind.LBRACKET, Parser.parse_expression_index)

    def _register_nud(self, kind: TokenKind, parse: "Parser.ParseNud") -> None:
        self.parse_nud_functions[kind] = parse

    def _register_led(self, kind: TokenKind, parse: "Parser.ParseLed") -> None:
        self.parse_led_functions[kind] = parse

    def errors(self) -> list[str]:
        return [str(x) for x in self.diagnostics]

    def _error(self, token: Token, why: str) -> None:
        self.diagnostics.append(ParseError(token.location, why))

    def _advance_token(self) -> Token:
        current_token = self.current_token
        self.current_token = self.peek_token
        self.peek_token = self.lexer.next_token()
        return current_token

    def _check_current(self, kind: TokenKind) -> bool:
        return self.current_token.kind == kind

    def _check_peek(self, kind: TokenKind) -> bool:
        return self.peek_token.kind == kind

    def _expect_peek(self, kind: TokenKind) -> bool:
        if self._check_peek(kind):
            self._advance_token()
            return True
        self._error(
            self.peek_token,
            f"expected next token to be {kind}, got {self.peek_token.kind} instead",
        )
        return False

    def _skip_optional_semicolon(self) -> None:
        if self._check_peek(TokenKind.SEMICOLON):
            self._advance_token()

    def _current_precedence(self) -> Precedence:
        return Parser.PRECEDENCES.get(self.current_token.kind, Precedence.LOWEST)

    def _peek_precedence(self) -> Precedence:
        return Parser.PRECEDENCES.get(self.peek_token.kind, Precedence.LOWEST)

    def parse_program(self) -> AstProgram:
        statements: list[AstStatement] = list()
        while not self._check_current(TokenKind.EOF):
            statement = self.parse_statement()
            if statement is not None:
                statements.append(statement)
            self._advance_token()
        return AstProgram(tuple(statements))

    def parse_statement(self) -> Optional[AstStatement]:
        if self._check_current(TokenKind.VAR):
            return self.parse_statement_var()
        if self._check_current(TokenKind.RETURN):
            return self.parse_statement_return()
        return self.parse_statement_expression()

    def parse_statement_var(self) -> Optional[AstStatementVar]:
        token = self.current_token
        if not self._expect_peek(TokenKind.IDENTIFIER):
            return None
        name = AstIdentifier(self.current_token)
        if not self._expect_peek(TokenKind.ASSIGN):
            return None
        self._advance_token()
        value = self.parse_expression()
        self._skip_optional_semicolon()
        if value is None:
            return None
        return AstStatementVar(token, name, value)

    def parse_statement_return(self) -> Optional[AstStatementReturn]:
        token = self._advance_token()
        value = self.parse_expression()
        self._skip_optional_semicolon()
        if value is None:
            return None
        return AstStatementReturn(token, value)

    def parse_statement_expression(self) -> Optional[AstStatementExpression]:
        token = self.current_token
        value = self.parse_expression()
        self._skip_optional_semicolon()
        if value is None:
            return None
        return AstStatementExpression(token, value)

    def parse_block(self) -> Optional[AstBlock]:
        token = self._advance_token()
        statements: list[AstStatement] = list()
        while not self._check_current(TokenKind.RBRACE):
            if self._check_current(TokenKind.EOF):
                self._error(
                    self.current_token,
                    f"expected next token to be {TokenKind.RBRACE}, got {TokenKind.EOF} instead",
                )
                return None
            statement = self.parse_statement()
            if statement is not None:
                statements.append(statement)
            self._advance_token()
        return AstBlock(token, tuple(statements))

    def parse_expression(
        self, precedence: Precedence = Precedence.LOWEST
    ) -> Optional[AstExpression]:
        parse_nud = self.parse_nud_functions.get(self.current_token.kind)
        if parse_nud is None:
            self._error(
                self.current_token,
                f"missing prefix parse function for {self.current_token.kind}",
            )
            return None
        expression = parse_nud(self)
        while (
            expression is not None
            and not self._check_peek(TokenKind.SEMICOLON)
            and precedence < self._peek_precedence()
        ):
            parse_led = self.parse_led_functions.get(self.peek_token.kind)
            if parse_led is None:
                return expression
            self._advance_token()
            expression = parse_led(self, expression)
        return expression

    def parse_expression_list(self, end: TokenKind) -> Optional[list[AstExpression]]:
        expressions: list[Optional[AstExpression]] = list()
        if self._check_peek(end):
            self._advance_token()
            return list()
        self._advance_token()
        expressions.append(self.parse_expression())
        while self._check_peek(TokenKind.COMMA):
            self._advance_token()
            self._advance_token()
            expressions.append(self.parse_expression())
        if not self._expect_peek(end):
            return None
        if any(x is None for x in expressions):
            return None
        return expressions  # type: ignore

    def parse_expression_identifier(self) -> AstExpressionIdentifier:
        return AstExpressionIdentifier(self.current_token)

    def parse_expression_integer(self) -> Optional[AstExpressionInteger]:
        token = self.current_token
        try:
            value = int(token.literal, 10)
        except ValueError:
            value = None
        if value is None or not INT64_MIN <= value <= INT64_MAX:
            self._error(token, f"could not parse {token.literal} as integer")
            return None
        return AstExpressionInteger(token, value)

    def parse_expression_float(self) -> Optional[AstExpressionFloat]:
        token = self.current_token
        value = float(token.literal)
        if math.isinf(value):
            self._error(token, f"could not parse {token.literal} as float")
            return None
        return AstExpressionFloat(token, value)

    def parse_expression_boolean(self) -> AstExpressionBoolean:
        token = self.current_token
        return AstExpressionBoolean(token, token.kind == TokenKind.TRUE)

    def parse_expression_string(self) -> AstExpressionString:
        return AstExpressionString(self.current_token)

    def parse_expression_array(self) -> Optional[AstExpressionArray]:
        token = self.current_token
        elements = self.parse_expression_list(TokenKind.RBRACKET)
        if elements is None:
            return None
        return AstExpressionArray(token, tuple(elements))

    def parse_expression_prefix(self) -> Optional[AstExpressionPrefix]:
        token = self._advance_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return AstExpressionPrefix(token, right)

    def parse_expression_infix(
        self, left: AstExpression
    ) -> Optional[AstExpressionInfix]:
        precedence = self._current_precedence()
        token = self._advance_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return AstExpressionInfix(token, left, right)

    def parse_expression_grouped(self) -> Optional[AstExpression]:
        self._advance_token()
        expression = self.parse_expression()
        if not self._expect_peek(TokenKind.RPAREN):
            return None
        return expression

    def parse_expression_if(self) -> Optional[AstExpressionIf]:
        token = self.current_token
        if not self._expect_peek(TokenKind.LPAREN):
            return None
        self._advance_token()
        condition = self.parse_expression()
        if not self._expect_peek(TokenKind.RPAREN):
            return None
        if not self._expect_peek(TokenKind.LBRACE):
            return None
        consequence = self.parse_block()
        if consequence is None:
            return None
        alternative: Optional[AstBlock] = None
        if self._check_peek(TokenKind.ELSE):
            self._advance_token()
            if not self._expect_peek(TokenKind.LBRACE):
                return None
            alternative = self.parse_block()
            if alternative is None:
                return None
        if condition is None:
            return None
        return AstExpressionIf(token, condition, consequence, alternative)

    def parse_expression_function(self) -> Optional[AstExpressionFunction]:
        token = self.current_token
        if not self._expect_peek(TokenKind.LPAREN):
            return None
        parameters = self.parse_function_parameters()
        if parameters is None:
            return None
        if not self._expect_peek(TokenKind.LBRACE):
            return None
        body = self.parse_block()
        if body is None:
            return None
        return AstExpressionFunction(token, tuple(parameters), body)

    def parse_function_parameters(self) -> Optional[list[AstIdentifier]]:
        parameters: list[AstIdentifier] = list()
        if self._check_peek(TokenKind.RPAREN):
            self._advance_token()
            return parameters
        if not self._expect_peek(TokenKind.IDENTIFIER):
            return None
        parameters.append(AstIdentifier(self.current_token))
        while self._check_peek(TokenKind.COMMA):
            self._advance_token()
            if not self._expect_peek(TokenKind.IDENTIFIER):
                return None
            parameters.append(AstIdentifier(self.current_token))
        if not self._expect_peek(TokenKind.RPAREN):
            return None
        return parameters

    def parse_expression_call(
        self, function: AstExpression
    ) -> Optional[AstExpressionCall]:
        token = self.current_token
        arguments = self.parse_expression_list(TokenKind.RPAREN)
        if arguments is None:
            return None
        return AstExpressionCall(token, function, tuple(arguments))

    def parse_expression_index(
        self, left: AstExpression
    ) -> Optional[AstExpressionIndex]:
        token = self._advance_token()
        index = self.parse_expression()
        if not self._expect_peek(TokenKind.RBRACKET):
            return None
        if index is None:
            return None
        return AstExpressionIndex(token, left, index)
