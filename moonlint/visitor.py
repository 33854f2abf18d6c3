"""Single-pass traversal over tree-sitter syntax trees."""

from __future__ import annotations

import tree_sitter


class Visitor:
    """Walk every node of a syntax tree once, dispatching on node type.

    Nodes are visited pre-order, left to right: a parent before its
    children, earlier siblings before later ones. Subclasses define
    ``visit_<node type>`` for the named node kinds they care about, e.g.
    ``visit_binary_expression``. Named nodes without such a method go to
    ``generic_visit``. Anonymous tokens (operators, keywords, punctuation)
    go to ``visit_token``. Both defaults do nothing.

    Handlers only observe. Descent into a node's children always happens
    after its handler returns, so no handler can skip or repeat a subtree.
    """

    def visit_tree(self, tree: tree_sitter.Tree | tree_sitter.Node) -> None:
        """Visit *tree*, or the subtree rooted at a node."""
        root = tree.root_node if isinstance(tree, tree_sitter.Tree) else tree
        # A cursor never climbs above the node it was created from.
        cursor = root.walk()
        while True:
            self._dispatch(cursor.node)
            if cursor.goto_first_child():
                continue
            while not cursor.goto_next_sibling():
                if not cursor.goto_parent():
                    return

    def _dispatch(self, node: tree_sitter.Node) -> None:
        if not node.is_named:
            self.visit_token(node)
            return
        handler = getattr(self, f"visit_{node.type}", None)
        if handler is None:
            self.generic_visit(node)
        else:
            handler(node)

    def generic_visit(self, node: tree_sitter.Node) -> None:
        """Called for named nodes with no dedicated handler."""

    def visit_token(self, node: tree_sitter.Node) -> None:
        """Called for anonymous tokens."""
