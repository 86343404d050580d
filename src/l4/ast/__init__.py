"""S-expression tree model for l4 parse results."""

from l4.ast.nodes import (
    Atom,
    Node,
    SList,
    is_atom,
    is_list,
    new_atom,
    new_list,
    to_data,
    to_text,
)

__all__ = [
    "Atom",
    "Node",
    "SList",
    "is_atom",
    "is_list",
    "new_atom",
    "new_list",
    "to_data",
    "to_text",
]
