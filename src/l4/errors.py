"""Diagnostics raised by the l4 lexer and parser.

Every error carries the source location of the offending input and renders
as ``file:line:column: message``. Parsing stops at the first error; callers
that host the parser (batch compilers, editors, REPLs) catch `L4Error` and
keep running.

    L4Error
    ├── LexerError              unrecognized character sequence
    └── ParseError              syntactically invalid token
        ├── UnexpectedTokenError
        ├── ExpectedTokenError
        └── RecursionLimitError
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from l4.lexer.tokens import Token, TokenType


class L4Error(Exception):
    """Base class for all l4 diagnostics."""

    def __init__(self, message: str, line: int, column: int, file: str = "<unknown>"):
        self.message = message
        self.line = line
        self.column = column
        self.file = file
        super().__init__(f"{file}:{line}:{column}: {message}")


class LexerError(L4Error):
    """Raised on lexical errors with source location."""


class ParseError(L4Error):
    """Raised when the parser cannot continue at `token`."""

    def __init__(self, message: str, token: Token):
        self.token = token
        super().__init__(message, token.line, token.column, token.file)


class UnexpectedTokenError(ParseError):
    """The token is not valid at this position in the grammar."""


class ExpectedTokenError(ParseError):
    """A specific token kind was required but something else was found."""

    def __init__(self, message: str, token: Token, expected: TokenType):
        self.expected = expected
        super().__init__(message, token)


class RecursionLimitError(ParseError):
    """Nesting went deeper than the parser allows."""
