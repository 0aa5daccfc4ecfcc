from typing import Iterator, Union

import re2

from .tokens import Token, TokenKind


class Lexer:
    EOF_LITERAL = b""
    RE_IDENTIFIER = re2.compile(rb"[A-Za-z_]+")
    RE_NUMBER = re2.compile(rb"[0-9]+(\.[0-9]+)?")
    WHITESPACE = (b" ", b"\t", b"\n", b"\r")
    DIGITS = b"0123456789"

    SINGLE_BYTE_TOKENS = {
        # fmt: off
        b"+": TokenKind.ADD,
        b"-": TokenKind.SUB,
        b"*": TokenKind.MUL,
        b"/": TokenKind.DIV,
        b",": TokenKind.COMMA,
        b";": TokenKind.SEMICOLON,
        b"(": TokenKind.LPAREN,
        b")": TokenKind.RPAREN,
        b"{": TokenKind.LBRACE,
        b"}": TokenKind.RBRACE,
        b"[": TokenKind.LBRACKET,
        b"]": TokenKind.RBRACKET,
        # fmt: on
    }

    # Operators that become a two byte operator when followed by `=`.
    EQUALS_SUFFIXED_TOKENS = {
        # fmt: off
        b"=": (TokenKind.ASSIGN, TokenKind.EQ),
        b"!": (TokenKind.NOT,    TokenKind.NE),
        b"<": (TokenKind.LT,     TokenKind.LE),
        b">": (TokenKind.GT,     TokenKind.GE),
        # fmt: on
    }

    def __init__(self, source: Union[bytes, str]):
        self.source: bytes = (
            source.encode("utf-8") if isinstance(source, str) else bytes(source)
        )
        self.position: int = 0
        self.line: int = 1
        # Column of the current byte. The counter restarts at zero on every
        # newline byte, so the first byte following a newline is column 1.
        self.column: int = 0
        self._enter_byte()

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            if token.kind == TokenKind.EOF:
                return
            yield token

    @staticmethod
    def _decode(data: bytes) -> str:
        return data.decode("utf-8", errors="surrogateescape")

    def _is_eof(self) -> bool:
        return self.position >= len(self.source)

    def _current_byte(self) -> bytes:
        return self.source[self.position : self.position + 1]

    def _peek_byte(self) -> bytes:
        return self.source[self.position + 1 : self.position + 2]

    def _enter_byte(self) -> None:
        self.column += 1
        if self._current_byte() == b"\n":
            self.line += 1
            self.column = 0

    def _advance_byte(self) -> None:
        if self._is_eof():
            return
        self.position += 1
        self._enter_byte()

    def _skip_whitespace_and_comments(self) -> None:
        while True:
            skipped = False
            while not self._is_eof() and self._current_byte() in Lexer.WHITESPACE:
                skipped = True
                self._advance_byte()
            if self.source.startswith(b"//", self.position):
                skipped = True
                while not self._is_eof() and self._current_byte() != b"\n":
                    self._advance_byte()
            if not skipped:
                return

    def _new_token(self, kind: TokenKind, literal: str) -> Token:
        return Token(kind, literal, self.line, self.column)

    def _lex_match(self, pattern) -> tuple[str, int, int]:
        # The leading byte has already been checked, so the match is never
        # empty.
        text = pattern.match(self.source, self.position).group(0)
        line, column = self.line, self.column
        for _ in range(len(text)):
            self._advance_byte()
        return (Lexer._decode(text), line, column)

    def _lex_keyword_or_identifier(self) -> Token:
        text, line, column = self._lex_match(Lexer.RE_IDENTIFIER)
        return Token(Token.lookup_identifier(text), text, line, column)

    def _lex_number(self) -> Token:
        text, line, column = self._lex_match(Lexer.RE_NUMBER)
        kind = TokenKind.FLOAT if "." in text else TokenKind.INTEGER
        return Token(kind, text, line, column)

    def _lex_string(self) -> Token:
        # Escape sequences are not interpreted. The string runs verbatim up
        # to the next double quote or to the end of input.
        line, column = self.line, self.column
        self._advance_byte()
        start = self.position
        while not self._is_eof() and self._current_byte() != b'"':
            self._advance_byte()
        literal = self.source[start : self.position]
        self._advance_byte()
        return Token(TokenKind.STRING, Lexer._decode(literal), line, column)

    def _lex_operator(self, single: TokenKind, combined: TokenKind) -> Token:
        if self._peek_byte() == b"=":
            token = self._new_token(combined, str(combined))
            self._advance_byte()
            self._advance_byte()
            return token
        token = self._new_token(single, str(single))
        self._advance_byte()
        return token

    def next_token(self) -> Token:
        self._skip_whitespace_and_comments()

        if self._is_eof():
            return self._new_token(TokenKind.EOF, Lexer._decode(Lexer.EOF_LITERAL))

        current = self._current_byte()
        if current == b'"':
            return self._lex_string()
        if current.isalpha() or current == b"_":
            return self._lex_keyword_or_identifier()
        if current in Lexer.DIGITS:
            return self._lex_number()
        if current in Lexer.EQUALS_SUFFIXED_TOKENS:
            return self._lex_operator(*Lexer.EQUALS_SUFFIXED_TOKENS[current])
        if current in Lexer.SINGLE_BYTE_TOKENS:
            kind = Lexer.SINGLE_BYTE_TOKENS[current]
            token = self._new_token(kind, str(kind))
            self._advance_byte()
            return token

        token = self._new_token(TokenKind.ILLEGAL, Lexer._decode(current))
        self._advance_byte()
        return token
