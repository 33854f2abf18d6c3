"""Parse Lua source with tree-sitter."""

from __future__ import annotations

import tree_sitter
import tree_sitter_lua

LUA: tree_sitter.Language = tree_sitter.Language(tree_sitter_lua.language())


class ParseError(Exception):
    """Raised when source text does not parse to an error-free tree."""

    def __init__(self, offset: int) -> None:
        super().__init__(f"syntax error at byte {offset}")
        self.offset = offset


def _first_error(node: tree_sitter.Node) -> tree_sitter.Node:
    """Return the first ERROR or missing node below *node*."""
    while True:
        if node.type == "ERROR" or node.is_missing:
            return node
        broken = next((child for child in node.children if child.has_error), None)
        if broken is None:
            return node
        node = broken


def parse(source: str | bytes) -> tree_sitter.Tree:
    """Parse *source* into a syntax tree.

    A new parser is created for every call; tree-sitter parsers must not be
    shared between threads.

    Raises:
        ParseError: If the tree contains error or missing nodes.
    """
    data = source.encode() if isinstance(source, str) else source
    tree = tree_sitter.Parser(LUA).parse(data)
    if tree.root_node.has_error:
        raise ParseError(_first_error(tree.root_node).start_byte)
    return tree
