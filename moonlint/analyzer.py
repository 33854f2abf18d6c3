"""Orchestrates rule execution against a parsed syntax tree."""

from __future__ import annotations

import dataclasses
import re
import typing

from loguru import logger

from moonlint import parser
from moonlint.rules import base

if typing.TYPE_CHECKING:
    from collections.abc import Mapping

# Matches:  -- moonlint: noqa                   (suppress all rules on this line)
#           -- moonlint: noqa: divide_by_zero   (suppress specific rules on this line)
_LINE_NOQA_PAT = re.compile(
    r"--\s*moonlint:\s*noqa(?::\s*([a-z0-9_][a-z0-9_,\s]*))?",
    re.IGNORECASE,
)

# Matches:  -- moonlint: disable-file                  (suppress all rules in this file)
#           -- moonlint: disable-file: divide_by_zero  (suppress specific rules in this file)
_FILE_DISABLE_PAT = re.compile(
    r"--\s*moonlint:\s*disable-file(?::\s*([a-z0-9_][a-z0-9_,\s]*))?",
    re.IGNORECASE,
)


def _rule_ids(raw: str | None) -> frozenset[str] | None:
    """Parse rule IDs from a suppression comment capture group.

    Returns None to indicate all rules are suppressed, or a frozenset of
    specific lowercased rule IDs.
    """
    if not raw or not raw.strip():
        return None
    ids = frozenset(part.strip().lower() for part in raw.split(",") if part.strip())
    return ids or None


def _covers(suppressed: frozenset[str] | None, rule_id: str) -> bool:
    """Return True if rule_id falls within the suppression set.

    None means all rules are suppressed.
    """
    return suppressed is None or rule_id in suppressed


def location(source: bytes, offset: int) -> tuple[int, int]:
    """Return the 1-indexed line and 0-indexed byte column of *offset*."""
    line = source.count(b"\n", 0, offset) + 1
    col = offset - (source.rfind(b"\n", 0, offset) + 1)
    return line, col


def render(diag: base.Diagnostic, source: bytes, path: str) -> str:
    """Format a diagnostic as ``path:line:col: severity[rule_id]: message``."""
    line, col = location(source, diag.primary_label.range.start)
    return f"{path}:{line}:{col}: {diag.severity.value}[{diag.rule_id}]: {diag.message}"


def _apply_suppressions(
    diagnostics: list[base.Diagnostic],
    source: bytes,
) -> list[base.Diagnostic]:
    """Remove diagnostics covered by inline moonlint suppression comments."""
    file_sup_active = False
    file_sup_rules: frozenset[str] | None = None
    line_sups: dict[int, frozenset[str] | None] = {}

    for lineno, raw_line in enumerate(source.split(b"\n"), start=1):
        line_text = raw_line.decode(errors="replace")
        file_match = _FILE_DISABLE_PAT.search(line_text)
        if file_match:
            file_sup_active = True
            file_sup_rules = _rule_ids(file_match.group(1))

        line_match = _LINE_NOQA_PAT.search(line_text)
        if line_match:
            line_sups[lineno] = _rule_ids(line_match.group(1))

    kept: list[base.Diagnostic] = []
    for diag in diagnostics:
        if file_sup_active and _covers(file_sup_rules, diag.rule_id):
            continue
        line, _ = location(source, diag.primary_label.range.start)
        if line in line_sups and _covers(line_sups[line], diag.rule_id):
            continue
        kept.append(diag)
    return kept


class Analyzer:
    """Runs a set of rules against Lua source files."""

    def __init__(
        self,
        rules: list[base.Rule],
        severities: Mapping[str, base.Severity] | None = None,
        standard_library: str = "lua51",
    ) -> None:
        """Initialize with a list of rule instances.

        Args:
            rules: Rule instances to run on every analysis request.
            severities: Severity overrides keyed by rule id. ``ALLOW`` turns
                a rule off; anything else replaces the severity of its
                diagnostics.
            standard_library: Passed to rules through the AnalysisContext.
        """
        self.rules = rules
        self.severities = dict(severities or {})
        self.standard_library = standard_library

    def analyze(self, source: str | bytes) -> list[base.Diagnostic]:
        """Parse source, run all enabled rules, and apply inline suppressions.

        Exceptions raised by a rule are not caught: they signal a broken
        rule or a broken tree, not a problem in the analyzed code.

        Args:
            source: Raw Lua source code to analyze.

        Returns:
            Diagnostics sorted by start offset with suppressed entries
            removed. Returns an empty list if the source cannot be parsed.
        """
        data = source.encode() if isinstance(source, str) else source
        try:
            tree = parser.parse(data)
        except parser.ParseError as exc:
            logger.warning("skipping unparsable source: {}", exc)
            return []

        context = base.AnalysisContext(
            source=data, standard_library=self.standard_library
        )
        diagnostics: list[base.Diagnostic] = []
        for rule in self.rules:
            severity = self.severities.get(rule.rule_id, rule.severity())
            if severity is base.Severity.ALLOW:
                logger.debug("rule {} is allowed, skipping", rule.rule_id)
                continue
            diagnostics.extend(
                diag
                if diag.severity is severity
                else dataclasses.replace(diag, severity=severity)
                for diag in rule.check(tree, context)
            )

        diagnostics.sort(key=lambda diag: diag.primary_label.range.start)
        return _apply_suppressions(diagnostics, data)
