"""l4 lexer — pull-based tokenizer with statement-terminator insertion."""

from l4.lexer.tokens import Token, TokenType
from l4.lexer.lexer import Lexer

__all__ = ["Token", "TokenType", "Lexer"]
