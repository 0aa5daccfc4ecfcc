from .environment import Environment
from .evaluator import evaluate, evaluate_source
from .lexer import Lexer
from .objects import Error, Value
from .parser import ParseFailure, Parser
from .tokens import Token, TokenKind

__all__ = [
    "Environment",
    "Error",
    "Lexer",
    "ParseFailure",
    "Parser",
    "Token",
    "TokenKind",
    "Value",
    "evaluate",
    "evaluate_source",
]
