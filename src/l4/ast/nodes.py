"""S-expression tree nodes produced by the l4 parser.

The tree has exactly two node kinds: an `Atom` wrapping one token, and an
`SList` holding an ordered sequence of child nodes. The parser grows lists
by appending while it works; once `parse()` returns, the tree is treated as
read-only and is dropped as a whole when the caller lets go of it.

The canonical text form (`to_text`) is what tests and tools compare::

    1 + 2 * 3    ->   (+ 1 (* 2 3))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from l4.lexer.tokens import Token


# ---------------------------------------------------------------------------
# Node kinds
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Atom:
    """A leaf wrapping a single token."""

    token: Token

    @property
    def text(self) -> str:
        return self.token.value

    def __str__(self) -> str:
        return to_text(self)


@dataclass(slots=True)
class SList:
    """An ordered list of child nodes.

    Children preserve insertion order; a child belongs to exactly one list.
    """

    children: list[Node] = field(default_factory=list)

    def append(self, child: Node) -> SList:
        """Add `child` at the end of the list and return the list."""
        self.children.append(child)
        return self

    def __len__(self) -> int:
        return len(self.children)

    def __getitem__(self, index: int) -> Node:
        return self.children[index]

    def __iter__(self):
        return iter(self.children)

    def __str__(self) -> str:
        return to_text(self)


Node = Union[Atom, SList]


# ---------------------------------------------------------------------------
# Construction and inspection
# ---------------------------------------------------------------------------

def new_atom(token: Token) -> Atom:
    return Atom(token)


def new_list(*children: Node) -> SList:
    return SList(list(children))


def is_atom(node: Node) -> bool:
    return isinstance(node, Atom)


def is_list(node: Node) -> bool:
    return isinstance(node, SList)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def to_text(node: Node) -> str:
    """Render `node` in canonical S-expression form.

    Atoms render as their source text; lists as their children joined by
    single spaces inside parentheses. Iterative, so deep trees are safe.
    """
    out: list[str] = []
    # Stack entries are nodes still to render, or ")" markers.
    stack: list[Node | str] = [node]
    pending_space = False
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            out.append(")")
            pending_space = True
            continue
        if pending_space:
            out.append(" ")
        if isinstance(item, Atom):
            out.append(item.text)
            pending_space = True
        else:
            out.append("(")
            stack.append(")")
            stack.extend(reversed(item.children))
            pending_space = False
    return "".join(out)


def to_data(node: Node) -> str | list:
    """Convert a tree to nested lists of strings (JSON-serializable)."""
    if isinstance(node, Atom):
        return node.text
    root: list = []
    stack: list[tuple[SList, list]] = [(node, root)]
    while stack:
        current, target = stack.pop()
        for child in current.children:
            if isinstance(child, Atom):
                target.append(child.text)
            else:
                sub: list = []
                target.append(sub)
                stack.append((child, sub))
    return root
