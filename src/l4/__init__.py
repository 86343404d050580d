"""l4 — lexer and Pratt parser producing S-expression trees."""

__version__ = "0.1.0"
