"""Token types and Token dataclass for the l4 lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Every distinct token the l4 lexer can produce."""

    # Literals
    NUMBER = auto()
    IDENTIFIER = auto()

    # Predeclared identifiers
    TRUE = auto()
    FALSE = auto()
    BOOL = auto()
    INT = auto()
    UINT = auto()
    INT8 = auto()
    INT16 = auto()
    INT32 = auto()
    INT64 = auto()
    UINT8 = auto()
    UINT16 = auto()
    UINT32 = auto()
    UINT64 = auto()
    FLOAT32 = auto()
    FLOAT64 = auto()

    # Keywords — control flow
    RETURN = auto()
    IF = auto()
    ELSE = auto()
    FOR = auto()
    BREAK = auto()
    CONTINUE = auto()
    FALLTHROUGH = auto()
    GOTO = auto()
    SWITCH = auto()
    CASE = auto()
    DEFAULT = auto()

    # Keywords — declarations
    TYPE = auto()
    CONST = auto()
    VAR = auto()
    FUNC = auto()
    STRUCT = auto()

    # Direction modifiers
    IN = auto()
    OUT = auto()

    # Punctuation
    COMMA = auto()
    SEMICOLON = auto()
    ASSIGN = auto()         # =
    EQ = auto()             # ==
    NEQ = auto()            # !=
    INC = auto()            # ++
    DEC = auto()            # --
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()

    # Sentinels
    WHITESPACE = auto()     # never leaves the lexer
    EOF = auto()


# Map keyword strings to token types
KEYWORDS: dict[str, TokenType] = {
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "bool": TokenType.BOOL,
    "int": TokenType.INT,
    "uint": TokenType.UINT,
    "int8": TokenType.INT8,
    "int16": TokenType.INT16,
    "int32": TokenType.INT32,
    "int64": TokenType.INT64,
    "uint8": TokenType.UINT8,
    "uint16": TokenType.UINT16,
    "uint32": TokenType.UINT32,
    "uint64": TokenType.UINT64,
    "float32": TokenType.FLOAT32,
    "float64": TokenType.FLOAT64,
    "return": TokenType.RETURN,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "for": TokenType.FOR,
    "break": TokenType.BREAK,
    "continue": TokenType.CONTINUE,
    "fallthrough": TokenType.FALLTHROUGH,
    "goto": TokenType.GOTO,
    "switch": TokenType.SWITCH,
    "case": TokenType.CASE,
    "default": TokenType.DEFAULT,
    "type": TokenType.TYPE,
    "const": TokenType.CONST,
    "var": TokenType.VAR,
    "func": TokenType.FUNC,
    "struct": TokenType.STRUCT,
    "in": TokenType.IN,
    "out": TokenType.OUT,
}

# Two-character punctuation is tried before the single-character table.
PUNCTUATION_2: dict[str, TokenType] = {
    "==": TokenType.EQ,
    "!=": TokenType.NEQ,
    "++": TokenType.INC,
    "--": TokenType.DEC,
}

PUNCTUATION_1: dict[str, TokenType] = {
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "=": TokenType.ASSIGN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
}

PUNCTUATION: frozenset[TokenType] = frozenset(PUNCTUATION_2.values()) | frozenset(
    PUNCTUATION_1.values()
)

# Primitive type names; `is_type_kind` is the fast "is this a type" check.
TYPE_KINDS: frozenset[TokenType] = frozenset({
    TokenType.BOOL, TokenType.INT, TokenType.UINT,
    TokenType.INT8, TokenType.INT16, TokenType.INT32, TokenType.INT64,
    TokenType.UINT8, TokenType.UINT16, TokenType.UINT32, TokenType.UINT64,
    TokenType.FLOAT32, TokenType.FLOAT64,
})

PREDECLARED: frozenset[TokenType] = TYPE_KINDS | {TokenType.TRUE, TokenType.FALSE}

CONTROL_KEYWORDS: frozenset[TokenType] = frozenset({
    TokenType.RETURN, TokenType.IF, TokenType.ELSE, TokenType.FOR,
    TokenType.BREAK, TokenType.CONTINUE, TokenType.FALLTHROUGH,
    TokenType.GOTO, TokenType.SWITCH, TokenType.CASE, TokenType.DEFAULT,
})

DECLARATION_KEYWORDS: frozenset[TokenType] = frozenset({
    TokenType.TYPE, TokenType.CONST, TokenType.VAR, TokenType.FUNC, TokenType.STRUCT,
})

MODIFIERS: frozenset[TokenType] = frozenset({TokenType.IN, TokenType.OUT})

# A line break after one of these becomes a SEMICOLON.
TERMINATOR_TRIGGERS: frozenset[TokenType] = PREDECLARED | {
    TokenType.IDENTIFIER, TokenType.NUMBER,
    TokenType.RETURN, TokenType.BREAK, TokenType.CONTINUE, TokenType.FALLTHROUGH,
    TokenType.INC, TokenType.DEC,
    TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE,
}


def is_type_kind(token_type: TokenType) -> bool:
    return token_type in TYPE_KINDS


def is_predeclared(token_type: TokenType) -> bool:
    return token_type in PREDECLARED


@dataclass(frozen=True, slots=True)
class Token:
    """A single token produced by the lexer.

    `value` is the exact source slice; `offset` is its character offset in
    the source, so ``source[offset:offset + length] == value``.
    """

    type: TokenType
    value: str
    line: int
    column: int
    offset: int = 0
    file: str = "<unknown>"

    @property
    def length(self) -> int:
        return len(self.value)

    def __repr__(self) -> str:
        if self.type is TokenType.EOF:
            return f"Token({self.type.name}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
