"""l4 command-line driver.

Usage:
    l4 tokenize <file.l4>           Display the token stream
    l4 parse <file.l4> [--json] [--body]
                                    Parse and display the S-expression tree;
                                    --body reads the file as a function body
    l4 expr <expression>...         Parse each argument as one expression

Options:
    -v, --verbose                   Log debug output to stderr
    -h, --help                      Show this message
    --version                       Show the version
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from l4.ast.nodes import to_data, to_text
from l4.errors import L4Error
from l4.lexer.lexer import Lexer
from l4.parser.parser import Parser, parse_expression


def main(argv: list[str] | None = None) -> int:
    args = list(argv if argv is not None else sys.argv[1:])

    verbose = False
    for flag in ("-v", "--verbose"):
        while flag in args:
            args.remove(flag)
            verbose = True
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if len(args) < 1:
        print(__doc__.strip())
        return 1

    command = args[0]

    if command in ("--help", "-h"):
        print(__doc__.strip())
        return 0

    if command == "--version":
        from l4 import __version__
        print(f"l4 {__version__}")
        return 0

    if len(args) < 2:
        print(f"Error: command '{command}' requires an argument")
        return 1

    if command == "expr":
        return _cmd_expr(args[1:])

    if command not in ("tokenize", "parse"):
        print(f"Error: unknown command '{command}'")
        print(__doc__.strip())
        return 1

    filepath = Path(args[1])
    if not filepath.exists():
        print(f"Error: file not found: {filepath}")
        return 1

    source = filepath.read_text(encoding="utf-8")
    filename = str(filepath)

    if command == "tokenize":
        return _cmd_tokenize(source, filename)
    return _cmd_parse(
        source, filename,
        as_json="--json" in args[2:],
        as_body="--body" in args[2:],
    )


def _cmd_tokenize(source: str, filename: str) -> int:
    """Display the token stream."""
    try:
        tokens = Lexer(source, filename).tokenize()
    except L4Error as e:
        print(f"Error: {e}")
        return 1

    for tok in tokens:
        print(tok)
    return 0


def _cmd_parse(
    source: str, filename: str, as_json: bool = False, as_body: bool = False,
) -> int:
    """Parse the file and display the tree."""
    try:
        parser = Parser(Lexer(source, filename))
        tree = parser.parse_body() if as_body else parser.parse()
    except L4Error as e:
        print(f"Error: {e}")
        return 1

    if as_json:
        print(json.dumps(to_data(tree), indent=2))
    else:
        for item in tree:
            print(to_text(item))
    return 0


def _cmd_expr(sources: list[str]) -> int:
    """Parse each argument as an expression: '<src>' -> <tree>."""
    status = 0
    for source in sources:
        try:
            tree = parse_expression(source, "<expr>")
        except L4Error as e:
            print(f"'{source}' -> Error: {e}")
            status = 1
            continue
        print(f"'{source}' -> {to_text(tree)}")
    return status


if __name__ == "__main__":
    sys.exit(main())
