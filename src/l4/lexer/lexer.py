"""l4 lexer — hand-written, pull-based tokenizer.

Design decisions:
- Explicit state machine (`_State`) driven by a single loop in `next_token`.
- Tokens are produced one at a time on demand; past end of input every
  call returns another EOF token.
- Comments and whitespace are discarded, except that a line break following
  a token in `TERMINATOR_TRIGGERS` is emitted as a SEMICOLON.
- Numbers are not validated: `.` and `0x` lex as NUMBER tokens.
"""

from __future__ import annotations

import logging
import string
from enum import Enum, auto

from l4.errors import LexerError
from l4.lexer.tokens import (
    KEYWORDS,
    PUNCTUATION_1,
    PUNCTUATION_2,
    TERMINATOR_TRIGGERS,
    Token,
    TokenType,
)

logger = logging.getLogger(__name__)

_WHITESPACE = frozenset(" \t\n\r")
_DEC_DIGITS = frozenset(string.digits)
_HEX_DIGITS = frozenset(string.hexdigits)
_NUMBER_START = _DEC_DIGITS | {"."}
_IDENT_START = frozenset(string.ascii_letters + "_")
_IDENT_CHARS = _IDENT_START | _DEC_DIGITS


class _State(Enum):
    MAIN = auto()
    NUMBER = auto()
    IDENTIFIER = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    EOF = auto()


class Lexer:
    """Tokenizes l4 source code into a stream of `Token` objects.

    Usage::

        lexer = Lexer(source_text, filename="example.l4")
        tok = lexer.next_token()      # one token at a time
        tokens = lexer.tokenize()     # or the rest of the stream at once
    """

    def __init__(self, source: str | bytes, filename: str = "<unknown>") -> None:
        if isinstance(source, bytes):
            source = source.decode("utf-8")
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self._state = _State.MAIN
        self._last_type: TokenType | None = None
        self._start = 0
        self._start_line = 1
        self._start_column = 1

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def next_token(self) -> Token:
        """Return the next significant token."""
        while True:
            state = self._state
            if state is _State.MAIN:
                token = self._lex_main()
            elif state is _State.NUMBER:
                token = self._lex_number()
            elif state is _State.IDENTIFIER:
                token = self._lex_identifier()
            elif state is _State.LINE_COMMENT:
                token = self._lex_line_comment()
            elif state is _State.BLOCK_COMMENT:
                token = self._lex_block_comment()
            else:
                token = self._lex_eof()

            if token is None:
                continue
            if token.type is TokenType.WHITESPACE:
                token = self._terminate_line(token)
                if token is None:
                    continue
            self._last_type = token.type
            return token

    def tokenize(self) -> list[Token]:
        """Drain the stream, returning every token up to and including EOF."""
        tokens: list[Token] = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.type is TokenType.EOF:
                return tokens

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _lex_main(self) -> Token | None:
        self._mark()
        if self._at_end():
            self._state = _State.EOF
            return None

        ch = self._peek()

        if ch in _WHITESPACE:
            self._accept_run(_WHITESPACE)
            return self._emit(TokenType.WHITESPACE)

        if ch == "/" and self._peek_ahead(1) == "/":
            self._advance()
            self._advance()
            self._state = _State.LINE_COMMENT
            return None

        if ch == "/" and self._peek_ahead(1) == "*":
            self._advance()
            self._advance()
            self._state = _State.BLOCK_COMMENT
            return None

        pair = self.source[self.pos:self.pos + 2]
        if pair in PUNCTUATION_2:
            self._advance()
            self._advance()
            return self._emit(PUNCTUATION_2[pair])

        if ch in PUNCTUATION_1:
            self._advance()
            return self._emit(PUNCTUATION_1[ch])

        if ch in _NUMBER_START:
            self._state = _State.NUMBER
            return None

        if ch in _IDENT_START:
            self._state = _State.IDENTIFIER
            return None

        raise LexerError(
            f"Unexpected character: {ch!r}",
            self.line, self.column, self.filename,
        )

    def _lex_number(self) -> Token:
        """Scan sign, optional 0x prefix, digits, fraction and exponent."""
        self._accept("+-")
        digits = _DEC_DIGITS
        if self._accept("0") and self._accept("xX"):
            digits = _HEX_DIGITS
        self._accept_run(digits)
        if self._accept("."):
            self._accept_run(digits)
        if self._accept("eE"):
            self._accept("+-")
            self._accept_run(_DEC_DIGITS)
        self._state = _State.MAIN
        return self._emit(TokenType.NUMBER)

    def _lex_identifier(self) -> Token:
        self._accept_run(_IDENT_CHARS)
        self._state = _State.MAIN
        word = self.source[self._start:self.pos]
        return self._emit(KEYWORDS.get(word, TokenType.IDENTIFIER))

    def _lex_line_comment(self) -> None:
        # The newline is left for MAIN so it can still end a statement.
        while not self._at_end() and self._peek() != "\n":
            self._advance()
        self._state = _State.MAIN

    def _lex_block_comment(self) -> None:
        while not self._at_end():
            if self._advance() == "*" and self._accept("/"):
                self._state = _State.MAIN
                return
        self._state = _State.EOF

    def _lex_eof(self) -> Token:
        self._mark()
        return self._emit(TokenType.EOF)

    def _terminate_line(self, whitespace: Token) -> Token | None:
        """Turn a line-crossing whitespace run into a SEMICOLON, or drop it."""
        if "\n" not in whitespace.value or self._last_type not in TERMINATOR_TRIGGERS:
            return None
        logger.debug(
            "%s:%d:%d: inserted statement terminator after %s",
            self.filename, whitespace.line, whitespace.column, self._last_type.name,
        )
        return Token(
            TokenType.SEMICOLON, whitespace.value, whitespace.line,
            whitespace.column, whitespace.offset, self.filename,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _peek(self) -> str:
        """Return the current character without consuming it."""
        return self.source[self.pos]

    def _peek_ahead(self, offset: int) -> str | None:
        """Return a character at an offset ahead, or None if past end."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return None
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return the current character."""
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _accept(self, valid) -> bool:
        """Consume the current character if it is one of `valid`."""
        if not self._at_end() and self._peek() in valid:
            self._advance()
            return True
        return False

    def _accept_run(self, valid) -> int:
        count = 0
        while self._accept(valid):
            count += 1
        return count

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _mark(self) -> None:
        """Start a new token at the current position."""
        self._start = self.pos
        self._start_line = self.line
        self._start_column = self.column

    def _emit(self, token_type: TokenType) -> Token:
        return Token(
            token_type,
            self.source[self._start:self.pos],
            self._start_line,
            self._start_column,
            self._start,
            self.filename,
        )
