"""
Token Types for the Groovy lambda parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    NUMBER = auto()
    STRING = auto()
    IDENT = auto()

    # Keywords
    DEF = auto()
    RETURN = auto()
    TRUE = auto()
    FALSE = auto()
    NULL = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    MOD = auto()

    # Comparison
    EQ = auto()
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    # Logical
    AND = auto()
    OR = auto()
    NEG = auto()  # !

    # Assignment
    ASSIGN = auto()

    # Lambda
    ARROW = auto()  # ->

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    LBRACE = auto()
    RBRACE = auto()
    DOT = auto()
    COMMA = auto()
    SEMI = auto()

    # Trivia
    WS = auto()
    NEWLINE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()

    # Special
    EOF = auto()


TRIVIA = frozenset({TT.WS, TT.NEWLINE, TT.LINE_COMMENT, TT.BLOCK_COMMENT})


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    start_pos: int = 0
    end_pos: int = 0

    @property
    def is_trivia(self) -> bool:
        return self.type in TRIVIA

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
