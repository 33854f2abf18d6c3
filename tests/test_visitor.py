"""Tests for moonlint.visitor: traversal order, coverage and dispatch."""

import tree_sitter

from moonlint import parser, visitor

_SOURCE = """\
local function area(w, h)
    -- width times height
    return w * h / 2
end
print(area(3, 4), #"abc", not true)
"""


def _key(node: tree_sitter.Node) -> tuple[str, int, int]:
    return (node.type, node.start_byte, node.end_byte)


def _named_count(node: tree_sitter.Node) -> int:
    return int(node.is_named) + sum(_named_count(child) for child in node.children)


def _preorder(node: tree_sitter.Node) -> list[tuple[str, int, int]]:
    keys = [_key(node)]
    for child in node.children:
        keys.extend(_preorder(child))
    return keys


class _Recorder(visitor.Visitor):
    def __init__(self) -> None:
        self.seen: list[tuple[str, int, int]] = []
        self.tokens: list[str] = []

    def generic_visit(self, node: tree_sitter.Node) -> None:
        self.seen.append(_key(node))

    def visit_token(self, node: tree_sitter.Node) -> None:
        self.seen.append(_key(node))
        self.tokens.append(node.type)


class _BinaryOnly(visitor.Visitor):
    def __init__(self) -> None:
        self.binary: list[str] = []
        self.other = 0

    def visit_binary_expression(self, node: tree_sitter.Node) -> None:
        self.binary.append(node.text.decode())

    def generic_visit(self, node: tree_sitter.Node) -> None:
        self.other += 1


# ---------------------------------------------------------------------------
# Coverage and order
# ---------------------------------------------------------------------------


class TestTraversal:
    def test_visits_every_node_once_in_document_order(self) -> None:
        tree = parser.parse(_SOURCE)
        recorder = _Recorder()
        recorder.visit_tree(tree)
        assert recorder.seen == _preorder(tree.root_node)

    def test_root_is_visited_first(self) -> None:
        recorder = _Recorder()
        recorder.visit_tree(parser.parse(_SOURCE))
        assert recorder.seen[0][0] == "chunk"

    def test_comments_are_visited(self) -> None:
        recorder = _Recorder()
        recorder.visit_tree(parser.parse(_SOURCE))
        assert any(kind == "comment" for kind, _, _ in recorder.seen)

    def test_anonymous_tokens_go_to_visit_token(self) -> None:
        recorder = _Recorder()
        recorder.visit_tree(parser.parse(_SOURCE))
        assert "/" in recorder.tokens
        assert "local" in recorder.tokens
        assert "identifier" not in recorder.tokens

    def test_subtree_visit_stays_inside_node(self) -> None:
        tree = parser.parse("local a = 1\nlocal b = 2\n")
        first = tree.root_node.children[0]
        recorder = _Recorder()
        recorder.visit_tree(first)
        assert recorder.seen == _preorder(first)
        assert all(end <= first.end_byte for _, _, end in recorder.seen)

    def test_visiting_twice_gives_same_sequence(self) -> None:
        tree = parser.parse(_SOURCE)
        first, second = _Recorder(), _Recorder()
        first.visit_tree(tree)
        second.visit_tree(tree)
        assert first.seen == second.seen

    def test_deep_nesting_does_not_recurse(self) -> None:
        depth = 1000
        source = "local y = " + "(" * depth + "x" + ")" * depth
        counter = _Recorder()
        counter.visit_tree(parser.parse(source))
        parens = [kind for kind, _, _ in counter.seen if kind == "parenthesized_expression"]
        assert len(parens) == depth


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_handler_receives_matching_nodes_outer_first(self) -> None:
        found = _BinaryOnly()
        found.visit_tree(parser.parse(_SOURCE))
        assert found.binary == ["w * h / 2", "w * h"]

    def test_handled_kinds_skip_generic_visit(self) -> None:
        tree = parser.parse("local y = a + b")
        found = _BinaryOnly()
        found.visit_tree(tree)
        assert found.binary == ["a + b"]
        assert found.other == _named_count(tree.root_node) - 1

    def test_default_visitor_is_a_no_op(self) -> None:
        visitor.Visitor().visit_tree(parser.parse(_SOURCE))
