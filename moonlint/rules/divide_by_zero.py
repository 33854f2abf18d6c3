"""divide_by_zero: flag division by the literal ``0``."""

from __future__ import annotations

import typing

from moonlint import visitor
from moonlint.rules import base

if typing.TYPE_CHECKING:
    import tree_sitter

_MESSAGE = "dividing by zero is not allowed, use math.huge instead"


def _is_literal_zero(node: tree_sitter.Node) -> bool:
    # Textual match only: 0.0, 00, 0x0 and -0 are not flagged.
    return node.type == "number" and node.text == b"0"


def _operator(node: tree_sitter.Node) -> str | None:
    """Return the operator token of a binary expression."""
    for child in node.children:
        if not child.is_named:
            return child.type
    return None


class _DivideByZeroVisitor(visitor.Visitor):
    def __init__(self) -> None:
        self.ranges: list[base.SourceRange] = []

    def visit_binary_expression(self, node: tree_sitter.Node) -> None:
        if _operator(node) != "/":
            return
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is None or right is None:
            return
        if _is_literal_zero(right) and not _is_literal_zero(left):
            self.ranges.append(base.SourceRange.from_node(node))


class DivideByZero(base.Rule):
    """Flag expressions that divide by the number literal ``0``.

    Only the exact spelling ``0`` on the right of ``/`` counts. ``0 / 0`` is
    left alone since it is already a deliberate NaN, and floor division
    ``//`` is not inspected. The divisor must be the bare literal, so a
    parenthesized ``(0)`` is not flagged either.

    Allowed:
        local nan = 0 / 0
        local ratio = x / 0.0
        local half = x / (0)

    Flagged:
        local inf = 1 / 0
        print(x / 0)
    """

    rule_id = "divide_by_zero"

    @classmethod
    def new(cls, config: base.NoConfig) -> DivideByZero:
        """Build the rule. There is nothing to validate, so this never raises."""
        return cls()

    def check(
        self, tree: tree_sitter.Tree, context: base.AnalysisContext
    ) -> list[base.Diagnostic]:
        """Return a diagnostic for every division by a literal zero."""
        found = _DivideByZeroVisitor()
        found.visit_tree(tree)
        return [
            base.Diagnostic(
                rule_id=self.rule_id,
                message=_MESSAGE,
                severity=self.severity(),
                labels=(base.Label(source_range),),
            )
            for source_range in found.ranges
        ]

    def severity(self) -> base.Severity:
        """Division by zero is reported as a warning."""
        return base.Severity.WARNING

    def rule_type(self) -> base.RuleType:
        """The rule belongs to the complexity category."""
        return base.RuleType.COMPLEXITY
