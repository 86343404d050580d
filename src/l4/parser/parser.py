"""l4 recursive descent / Pratt parser.

Pulls tokens from a `Lexer` one at a time and builds an S-expression tree
(`l4.ast.nodes`). Expressions are parsed by precedence climbing over the
binding-power tables below; types, declarations and statements are plain
recursive descent. Lookahead is a single token, with a one-token rewind for
the few places that consume a token before deciding what it starts.

Grammar reference (simplified EBNF, ';' also inserted at line ends). At the
top level a block holds declarations only; the other statements are legal
inside function bodies:

    block        ::= (statement | ';')*
    statement    ::= declaration ';' | 'return' expr (',' expr)* ';'
                   | 'for' [expr [';' expr ';' expr]] '{' block '}'
                   | 'if' expr '{' block '}' ['else' ('{' block '}' | if)]
                   | ('break' | 'continue' | 'fallthrough') ';'
                   | expr ';'
    declaration  ::= ('var' | 'const') NAME ['=' expr | type ['=' expr]]
                   | 'type' NAME type
                   | 'func' NAME '(' [NAME type (',' NAME type)*] ')'
                     [type | '(' type (',' type)* ')'] '{' block '}'
    type         ::= ('[' [expr] ']' | 'in' | 'out')* [PRIMITIVE | NAME | struct]
    struct       ::= 'struct' '{' [NAME type (';' NAME type)* [';']] '}'

A type needs a modifier or a base type, and has at most one modifier.

Tree shapes::

    1 + 2 * 3                 (+ 1 (* 2 3))
    f(x, y)                   (f x y)
    var x [3]out [4]int       (var x ((3 out) (4 int)))
    var y = 1                 (var y () 1)
    var z                     (var z ())
    var p struct { a int }    (var p (struct ((a (int)))))
    if a {} else {}           (if a () ())
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager

from l4.ast.nodes import Node, SList, new_atom, new_list
from l4.errors import ExpectedTokenError, RecursionLimitError, UnexpectedTokenError
from l4.lexer.lexer import Lexer
from l4.lexer.tokens import MODIFIERS, PREDECLARED, TYPE_KINDS, Token, TokenType

logger = logging.getLogger(__name__)


# Binding power of a prefix operator's operand.
_PREFIX_BP: dict[TokenType, int] = {
    TokenType.PLUS: 100,
    TokenType.MINUS: 100,
}

# Binding power of a token following a complete operand. Zero ends the
# expression without consuming the token; a missing entry is an error.
_INFIX_BP: dict[TokenType, int] = {
    TokenType.EOF: 0,
    TokenType.COMMA: 0,
    TokenType.LBRACE: 0,
    TokenType.RPAREN: 0,
    TokenType.RBRACKET: 0,
    TokenType.SEMICOLON: 0,
    TokenType.ASSIGN: 5,
    TokenType.EQ: 30,
    TokenType.NEQ: 30,
    TokenType.PLUS: 40,
    TokenType.MINUS: 40,
    TokenType.STAR: 50,
    TokenType.SLASH: 50,
    TokenType.PERCENT: 50,
    TokenType.LPAREN: 100,
    TokenType.INC: 100,
    TokenType.DEC: 100,
}

_BINARY_OPS: frozenset[TokenType] = frozenset({
    TokenType.ASSIGN, TokenType.EQ, TokenType.NEQ,
    TokenType.PLUS, TokenType.MINUS,
    TokenType.STAR, TokenType.SLASH, TokenType.PERCENT,
})

_POSTFIX_OPS: frozenset[TokenType] = frozenset({TokenType.INC, TokenType.DEC})

# Right-associative operators recurse at (power - 1). None at present.
_RIGHT_ASSOCIATIVE: frozenset[TokenType] = frozenset()

_ATOM_TYPES: frozenset[TokenType] = PREDECLARED | {TokenType.NUMBER, TokenType.IDENTIFIER}

_DECLARATION_TYPES: frozenset[TokenType] = frozenset({
    TokenType.VAR, TokenType.CONST, TokenType.TYPE, TokenType.FUNC,
})

_BARE_STATEMENTS: frozenset[TokenType] = frozenset({
    TokenType.BREAK, TokenType.CONTINUE, TokenType.FALLTHROUGH,
})

_UNSUPPORTED_STATEMENTS: frozenset[TokenType] = frozenset({
    TokenType.SWITCH, TokenType.CASE, TokenType.DEFAULT, TokenType.GOTO,
})

# Upper bound on Python frames spent per level of `depth`.
_FRAMES_PER_LEVEL = 6


@contextmanager
def _recursion_headroom(frames: int):
    """Temporarily allow at least `frames` more Python frames."""
    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(limit + frames)
    try:
        yield
    finally:
        sys.setrecursionlimit(limit)


def _describe(token: Token) -> str:
    if token.type is TokenType.EOF:
        return "end of input"
    if token.type is TokenType.SEMICOLON and token.value != ";":
        return "end of line"
    return f"{token.type.name} ({token.value!r})"


class Parser:
    """Pratt parser for l4 source code.

    Usage::

        from l4.lexer import Lexer
        from l4.parser import Parser

        tree = Parser(Lexer(source, "example.l4")).parse()
        print(to_text(tree))
    """

    MAX_DEPTH = 1024

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self.filename = lexer.filename
        self._current: Token | None = None
        self._next: Token = lexer.next_token()
        # One-token rewind: the token current before the last consume, and
        # the lookahead pushed back by a rewind.
        self._prev: Token | None = None
        self._undo_slot: Token | None = None
        self._undo_armed = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self) -> SList:
        """Parse the entire source unit into a block of top-level items."""
        logger.debug("parsing %s", self.filename)
        with _recursion_headroom(self.MAX_DEPTH * _FRAMES_PER_LEVEL):
            program = self._parse_block(0, 0)
        logger.debug("parsed %s: %d top-level item(s)", self.filename, len(program))
        return program

    def parse_body(self) -> SList:
        """Parse the source as the statements of a function body."""
        with _recursion_headroom(self.MAX_DEPTH * _FRAMES_PER_LEVEL):
            body = self._parse_block(1, 1)
        self._expect(TokenType.EOF)
        return body

    def parse_single_expression(self) -> Node:
        """Parse one expression that must make up the whole input."""
        with _recursion_headroom(self.MAX_DEPTH * _FRAMES_PER_LEVEL):
            expr = self._parse_expr(0, 0)
        while self._check(TokenType.SEMICOLON):
            self._advance()
        self._expect(TokenType.EOF)
        return expr

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_block(self, depth: int, level: int) -> SList:
        """Parse statements until EOF, or an unconsumed '}' when level > 0."""
        self._check_depth(depth)
        block = new_list()
        while True:
            token = self._peek()
            if token.type is TokenType.EOF:
                break
            if token.type is TokenType.RBRACE and level > 0:
                break
            if token.type is TokenType.SEMICOLON:
                self._advance()
                continue
            block.append(self._parse_statement(depth, level))
        return block

    def _parse_statement(self, depth: int, level: int) -> Node:
        token = self._advance()
        tt = token.type

        if tt in _DECLARATION_TYPES:
            self._rewind()
            node = self._parse_declaration(depth, level)
            self._expect(TokenType.SEMICOLON)
            return node

        # Outside function bodies only declarations are allowed.
        if level == 0:
            raise UnexpectedTokenError(
                f"Expected declaration, got {_describe(token)}", token,
            )

        if tt is TokenType.RETURN:
            node = new_list(new_atom(token), self._parse_expr(0, depth + 1))
            while self._check(TokenType.COMMA):
                self._advance()
                node.append(self._parse_expr(0, depth + 1))
            self._expect(TokenType.SEMICOLON)
            return node

        if tt is TokenType.FOR:
            return self._parse_for(token, depth, level)

        if tt is TokenType.IF:
            return self._parse_if(token, depth, level)

        if tt in _BARE_STATEMENTS:
            self._expect(TokenType.SEMICOLON)
            return new_list(new_atom(token))

        if tt in _UNSUPPORTED_STATEMENTS:
            raise UnexpectedTokenError(f"{token.value!r} is not supported", token)

        self._rewind()
        node = self._parse_expr(0, depth + 1)
        self._expect(TokenType.SEMICOLON)
        return node

    def _parse_for(self, keyword: Token, depth: int, level: int) -> SList:
        """for {}  |  for cond {}  |  for init; cond; post {}"""
        node = new_list(new_atom(keyword))
        if not self._check(TokenType.LBRACE):
            node.append(self._parse_expr(0, depth + 1))
            if self._check(TokenType.SEMICOLON):
                self._advance()
                node.append(self._parse_expr(0, depth + 1))
                self._expect(TokenType.SEMICOLON)
                node.append(self._parse_expr(0, depth + 1))
        node.append(self._parse_braced_block(depth, level))
        return node

    def _parse_if(self, keyword: Token, depth: int, level: int) -> SList:
        node = new_list(new_atom(keyword))
        node.append(self._parse_expr(0, depth + 1))
        node.append(self._parse_braced_block(depth, level))

        if self._check(TokenType.ELSE):
            self._advance()
            if self._check(TokenType.IF):
                nested = self._advance()
                node.append(new_list(self._parse_if(nested, depth + 1, level)))
            else:
                node.append(self._parse_braced_block(depth, level))
        return node

    def _parse_braced_block(self, depth: int, level: int) -> SList:
        self._expect(TokenType.LBRACE)
        block = self._parse_block(depth + 1, level)
        self._expect(TokenType.RBRACE)
        return block

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _parse_declaration(self, depth: int, level: int) -> SList:
        keyword = self._advance()
        name = self._expect(TokenType.IDENTIFIER)
        node = new_list(new_atom(keyword), new_atom(name))

        if keyword.type in (TokenType.VAR, TokenType.CONST):
            self._parse_var_spec(node, depth)
        elif keyword.type is TokenType.TYPE:
            node.append(self._parse_type(depth + 1))
        else:
            self._parse_func_spec(node, depth, level)
        return node

    def _parse_var_spec(self, node: SList, depth: int) -> None:
        """Append the type slot and an optional initializer to a var/const node.

        Without an explicit type the slot holds an empty list.
        """
        token = self._advance()
        if token.type is TokenType.ASSIGN:
            node.append(new_list())
            node.append(self._parse_expr(0, depth + 1))
            return

        # Anything else belongs to someone else: the terminator to the
        # statement parser, a type to `_parse_type`.
        self._rewind()
        if token.type is TokenType.SEMICOLON:
            node.append(new_list())
            return

        node.append(self._parse_type(depth + 1))
        if self._check(TokenType.ASSIGN):
            self._advance()
            node.append(self._parse_expr(0, depth + 1))

    def _parse_func_spec(self, node: SList, depth: int, level: int) -> None:
        self._expect(TokenType.LPAREN)
        params = new_list()
        if not self._check(TokenType.RPAREN):
            while True:
                param = self._expect(TokenType.IDENTIFIER)
                params.append(new_list(new_atom(param), self._parse_type(depth + 1)))
                if not self._check(TokenType.COMMA):
                    break
                self._advance()
        self._expect(TokenType.RPAREN)
        node.append(params)

        results = new_list()
        if self._check(TokenType.LPAREN):
            self._advance()
            results.append(self._parse_type(depth + 1))
            while self._check(TokenType.COMMA):
                self._advance()
                results.append(self._parse_type(depth + 1))
            self._expect(TokenType.RPAREN)
        elif not self._check(TokenType.LBRACE):
            results.append(self._parse_type(depth + 1))
        node.append(results)

        self._expect(TokenType.LBRACE)
        node.append(self._parse_block(depth + 1, level + 1))
        self._expect(TokenType.RBRACE)

    # ------------------------------------------------------------------
    # Type expressions
    # ------------------------------------------------------------------

    def _parse_type(self, depth: int) -> SList:
        """Parse array dimensions, an optional modifier and a base type.

        Parts are appended at a cursor that starts at the returned list. A
        sized dimension becomes the new cursor, so everything after it nests
        inside it; an unsized one appends an empty marker plus a fresh list
        for the rest; a modifier sends the cursor back to the top. A modifier
        with no base type after it is a complete type.
        """
        self._check_depth(depth)
        root = new_list()
        cursor = root
        modifier: Token | None = None

        while True:
            token = self._advance()
            tt = token.type

            if tt is TokenType.LBRACKET:
                if self._check(TokenType.RBRACKET):
                    self._advance()
                    rest = new_list()
                    cursor.append(new_list())
                    cursor.append(rest)
                    cursor = rest
                else:
                    dimension = new_list(self._parse_expr(0, depth + 1))
                    self._expect(TokenType.RBRACKET)
                    cursor.append(dimension)
                    cursor = dimension
            elif tt in MODIFIERS:
                if modifier is not None:
                    raise UnexpectedTokenError(
                        f"Duplicate direction modifier {token.value!r} "
                        f"(already {modifier.value!r})",
                        token,
                    )
                modifier = token
                cursor.append(new_atom(token))
                cursor = root
            elif tt in TYPE_KINDS or tt is TokenType.IDENTIFIER:
                cursor.append(new_atom(token))
                return root
            elif tt is TokenType.STRUCT:
                cursor.append(new_atom(token))
                cursor.append(self._parse_struct_fields(depth + 1))
                return root
            elif modifier is not None:
                self._rewind()
                return root
            else:
                raise UnexpectedTokenError(f"Expected type, got {_describe(token)}", token)

    def _parse_struct_fields(self, depth: int) -> SList:
        """Parse '{' (NAME type) fields separated by ';' '}'."""
        self._check_depth(depth)
        self._expect(TokenType.LBRACE)
        fields = new_list()
        while not self._check(TokenType.RBRACE):
            name = self._expect(TokenType.IDENTIFIER)
            fields.append(new_list(new_atom(name), self._parse_type(depth + 1)))
            if self._check(TokenType.RBRACE):
                break
            self._expect(TokenType.SEMICOLON)
        self._expect(TokenType.RBRACE)
        return fields

    # ------------------------------------------------------------------
    # Expressions (precedence climbing)
    # ------------------------------------------------------------------

    def _parse_expr(self, min_bp: int, depth: int) -> Node:
        """Parse an expression whose operators bind tighter than `min_bp`."""
        self._check_depth(depth)
        token = self._advance()
        tt = token.type

        # Null denotation
        if tt in _ATOM_TYPES:
            left: Node = new_atom(token)
        elif tt in _PREFIX_BP:
            left = new_list(new_atom(token), self._parse_expr(_PREFIX_BP[tt], depth + 1))
        elif tt is TokenType.LPAREN:
            left = self._parse_expr(0, depth + 1)
            self._expect(TokenType.RPAREN)
        else:
            raise UnexpectedTokenError(
                f"Expected expression, got {_describe(token)}", token,
            )

        # Left denotation
        while True:
            lookahead = self._peek()
            power = _INFIX_BP.get(lookahead.type)
            if power is None:
                raise UnexpectedTokenError(
                    f"Unexpected {_describe(lookahead)} after expression", lookahead,
                )
            if min_bp >= power:
                return left

            op = self._advance()
            if op.type in _BINARY_OPS:
                rbp = power - 1 if op.type in _RIGHT_ASSOCIATIVE else power
                left = new_list(new_atom(op), left, self._parse_expr(rbp, depth + 1))
            elif op.type is TokenType.LPAREN:
                left = self._parse_call(left, depth)
            else:
                left = new_list(new_atom(op), left)

    def _parse_call(self, callee: Node, depth: int) -> SList:
        """Parse the arguments of a call whose '(' was just consumed."""
        call = new_list(callee)
        if not self._check(TokenType.RPAREN):
            call.append(self._parse_expr(0, depth + 1))
            while self._check(TokenType.COMMA):
                self._advance()
                call.append(self._parse_expr(0, depth + 1))
        self._expect(TokenType.RPAREN)
        return call

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def _peek(self) -> Token:
        """Return the lookahead token without consuming it."""
        return self._next

    def _advance(self) -> Token:
        """Consume and return the lookahead token."""
        token = self._next
        self._prev = self._current
        self._current = token
        if self._undo_slot is not None:
            self._next = self._undo_slot
            self._undo_slot = None
        else:
            self._next = self.lexer.next_token()
        self._undo_armed = True
        return token

    def _rewind(self) -> None:
        """Un-consume the last token. Only one rewind per consume."""
        if not self._undo_armed:
            raise RuntimeError("Parser cannot rewind twice without consuming a token")
        self._undo_slot = self._next
        self._next = self._current
        self._current = self._prev
        self._undo_armed = False

    def _check(self, token_type: TokenType) -> bool:
        """Check if the lookahead matches without consuming."""
        return self._next.type is token_type

    def _expect(self, token_type: TokenType) -> Token:
        """Consume the lookahead if it matches, otherwise raise."""
        token = self._next
        if token.type is not token_type:
            raise ExpectedTokenError(
                f"Expected {token_type.name}, got {_describe(token)}",
                token, token_type,
            )
        return self._advance()

    def _check_depth(self, depth: int) -> None:
        if depth >= self.MAX_DEPTH:
            raise RecursionLimitError(
                f"Maximum nesting depth of {self.MAX_DEPTH} exceeded",
                self._next,
            )


def parse(source: str | bytes, filename: str = "<unknown>") -> SList:
    """Parse a whole source unit."""
    return Parser(Lexer(source, filename)).parse()


def parse_expression(source: str | bytes, filename: str = "<unknown>") -> Node:
    """Parse `source` as a single expression."""
    return Parser(Lexer(source, filename)).parse_single_expression()


def parse_body(source: str | bytes, filename: str = "<unknown>") -> SList:
    """Parse `source` as the statements of a function body."""
    return Parser(Lexer(source, filename)).parse_body()
