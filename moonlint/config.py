"""Load moonlint configuration from moonlint.toml."""

from __future__ import annotations

import dataclasses
import pathlib
import tomllib

from loguru import logger

from moonlint.rules import base

CONFIG_FILENAME = "moonlint.toml"

_LINT_LEVELS: dict[str, base.Severity] = {
    "allow": base.Severity.ALLOW,
    "warn": base.Severity.WARNING,
    "deny": base.Severity.ERROR,
}


@dataclasses.dataclass(frozen=True)
class Config:
    """Resolved moonlint configuration.

    Attributes:
        select: Rule IDs to run. ``None`` means all registered rules are active.
        ignore: Rule IDs to exclude from the active set.
        std: Name of the Lua standard library the analyzed code targets.
        lints: Severity overrides keyed by rule ID.
        rule_options: Per-rule option tables keyed by rule ID.
    """

    select: frozenset[str] | None
    ignore: frozenset[str]
    std: str = "lua51"
    lints: dict[str, base.Severity] = dataclasses.field(
        default_factory=dict, hash=False
    )
    rule_options: dict[str, dict[str, object]] = dataclasses.field(
        default_factory=dict, hash=False
    )


def _find_config_file(start: pathlib.Path) -> pathlib.Path | None:
    """Walk up from *start* to find the nearest moonlint.toml."""
    for directory in [start, *start.parents]:
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _table(data: dict[str, object], key: str) -> dict[str, object]:
    """Return ``data[key]`` if it is a table, else an empty one."""
    value = data.get(key, {})
    if isinstance(value, dict):
        return value
    logger.warning("ignoring {!r}: expected a table, got {!r}", key, value)
    return {}


def _id_list(data: dict[str, object], key: str) -> frozenset[str] | None:
    """Return ``data[key]`` as lowercased rule IDs, or None if absent or malformed."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return frozenset(rule_id.lower() for rule_id in value)
    logger.warning("ignoring {!r}: expected a list of rule ids, got {!r}", key, value)
    return None


def _parse_lints(raw: dict[str, object]) -> dict[str, base.Severity]:
    lints: dict[str, base.Severity] = {}
    for rule_id, level in raw.items():
        severity = _LINT_LEVELS.get(str(level).lower())
        if severity is None:
            logger.warning(
                "ignoring unknown lint level {!r} for {}", level, rule_id
            )
            continue
        lints[rule_id.lower()] = severity
    return lints


def load_config(start: pathlib.Path | None = None) -> Config:
    """Return the Config from the nearest moonlint.toml, or defaults.

    Reads the first ``moonlint.toml`` found by walking up from *start*
    (defaults to ``Path.cwd()``). Returns a default Config (all rules
    active, none ignored) if no file is found or it cannot be read.

    Args:
        start: Directory to begin the upward search.  Defaults to cwd.

    Returns:
        A Config reflecting the file's ``std``, ``select``, ``ignore``,
        ``[lints]`` and ``[rules.*]`` entries, where present.
    """
    search_root = start if start is not None else pathlib.Path.cwd()
    config_file = _find_config_file(search_root)
    if config_file is None:
        return Config(select=None, ignore=frozenset())

    try:
        with config_file.open("rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("could not read {}: {}", config_file, exc)
        return Config(select=None, ignore=frozenset())

    logger.debug("loaded configuration from {}", config_file)
    select = _id_list(data, "select")
    ignore = _id_list(data, "ignore") or frozenset()
    rule_options: dict[str, dict[str, object]] = {
        rule_id.lower(): dict(opts)
        for rule_id, opts in _table(data, "rules").items()
        if isinstance(opts, dict)
    }
    return Config(
        select=select,
        ignore=ignore,
        std=str(data.get("std", "lua51")),
        lints=_parse_lints(_table(data, "lints")),
        rule_options=rule_options,
    )


def filter_rules(
    all_rules: dict[str, type[base.Rule]],
    config: Config,
) -> dict[str, type[base.Rule]]:
    """Return the subset of *all_rules* allowed by *config*.

    ``select`` is applied first (restricting to that set), then ``ignore``
    removes any listed IDs.

    Args:
        all_rules: Registered rule classes keyed by rule ID.
        config: The active configuration.

    Returns:
        Filtered mapping preserving the original order.
    """
    active = all_rules
    if config.select is not None:
        active = {
            rule_id: rule for rule_id, rule in active.items()
            if rule_id in config.select
        }
    if config.ignore:
        active = {
            rule_id: rule for rule_id, rule in active.items()
            if rule_id not in config.ignore
        }
    return active


def configure_rules(
    active_rules: dict[str, type[base.Rule]],
    config: Config,
) -> list[base.Rule]:
    """Build an instance of every active rule from its configured options.

    Args:
        active_rules: The filtered rule classes to construct.
        config: The active configuration.

    Returns:
        Rule instances, preserving order.

    Raises:
        base.ConfigurationError: If a rule rejects its options.
    """
    result: list[base.Rule] = []
    for rule_id, rule_cls in active_rules.items():
        rule_config = rule_cls.parse_config(config.rule_options.get(rule_id, {}))
        result.append(rule_cls.new(rule_config))
    return result
