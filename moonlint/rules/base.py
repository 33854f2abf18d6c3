"""Base abstractions for moonlint rules."""

from __future__ import annotations

import dataclasses
import typing
from abc import ABC, abstractmethod
from enum import Enum

if typing.TYPE_CHECKING:
    from collections.abc import Mapping

    import tree_sitter


class Severity(Enum):
    """How much weight a rule's findings carry."""

    ERROR = "error"
    WARNING = "warning"
    ALLOW = "allow"


class RuleType(Enum):
    """Coarse category of a rule, used for filtering and documentation."""

    COMPLEXITY = "complexity"
    CORRECTNESS = "correctness"
    PERFORMANCE = "performance"
    STYLE = "style"


class ConfigurationError(Exception):
    """Raised when a rule cannot be built from the options it was given."""

    def __init__(self, rule_id: str, message: str) -> None:
        super().__init__(f"{rule_id}: {message}")
        self.rule_id = rule_id


@dataclasses.dataclass(frozen=True)
class SourceRange:
    """Half-open byte range ``[start, end)`` into the analyzed source."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            msg = f"invalid source range ({self.start}, {self.end})"
            raise ValueError(msg)

    @classmethod
    def from_node(cls, node: tree_sitter.Node) -> SourceRange:
        """Return the byte range covered by a syntax tree node."""
        return cls(node.start_byte, node.end_byte)


@dataclasses.dataclass(frozen=True)
class Label:
    """A source range, optionally annotated with a short message."""

    range: SourceRange
    message: str | None = None


@dataclasses.dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic emitted by a rule."""

    rule_id: str
    message: str
    severity: Severity
    labels: tuple[Label, ...]

    def __post_init__(self) -> None:
        if not self.labels:
            msg = f"diagnostic {self.rule_id!r} has no labels"
            raise ValueError(msg)

    @property
    def primary_label(self) -> Label:
        """The first label, which locates the diagnostic."""
        return self.labels[0]


@dataclasses.dataclass(frozen=True)
class AnalysisContext:
    """Read-only data shared by every rule while analyzing one file.

    Attributes:
        source: The raw bytes the tree was parsed from.
        standard_library: Name of the Lua standard library the file targets.
    """

    source: bytes
    standard_library: str = "lua51"


@dataclasses.dataclass(frozen=True)
class NoConfig:
    """Options for a rule that recognises none."""


class Rule(ABC):
    """Abstract base class for all moonlint rules.

    A rule is built once from its configuration and then run over many
    files, possibly from several threads at once, so instances must not
    hold state that changes during ``check``.
    """

    rule_id: typing.ClassVar[str]
    config_type: typing.ClassVar[type[typing.Any]] = NoConfig

    @classmethod
    def parse_config(cls, options: Mapping[str, object]) -> typing.Any:
        """Build this rule's config value from a raw option table.

        Args:
            options: Option names mapped to values, as read from
                ``[rules.<rule_id>]``.

        Returns:
            An instance of ``cls.config_type``.

        Raises:
            ConfigurationError: If an option is not recognised by the rule.
        """
        known = {field.name for field in dataclasses.fields(cls.config_type)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError(
                cls.rule_id, f"unrecognised option(s): {', '.join(unknown)}"
            )
        return cls.config_type(**options)

    @classmethod
    @abstractmethod
    def new(cls, config: typing.Any) -> typing.Self:
        """Construct the rule from a parsed config.

        Raises:
            ConfigurationError: If the config is semantically invalid.
        """

    @abstractmethod
    def check(
        self, tree: tree_sitter.Tree, context: AnalysisContext
    ) -> list[Diagnostic]:
        """Run the rule once over a parsed file.

        Args:
            tree: The syntax tree of the file, free of parse errors.
            context: Data shared by all rules for this file.

        Returns:
            A list of Diagnostic instances, empty if nothing was found.
            Tree shapes the rule does not recognise are skipped, never
            reported as errors.
        """

    @abstractmethod
    def severity(self) -> Severity:
        """Return the severity this rule reports its findings at."""

    @abstractmethod
    def rule_type(self) -> RuleType:
        """Return the category this rule belongs to."""
