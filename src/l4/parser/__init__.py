"""l4 parser — Pratt expressions, types, declarations and statements."""

from l4.parser.parser import Parser, parse, parse_body, parse_expression

__all__ = ["Parser", "parse", "parse_body", "parse_expression"]
