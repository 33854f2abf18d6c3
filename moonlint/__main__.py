"""Entry point: moonlint [--verbose] check <path>..."""

import pathlib
import sys
import typing

import typer
from loguru import logger

from moonlint.rules import base as rules_base

app = typer.Typer()

# Silent unless --verbose is given.
logger.remove()
_verbose_sink: int | None = None

# Directories that are never interesting to analyse.
_SKIP_DIRS: frozenset[str] = frozenset(
    {".git", ".luarocks", "lua_modules", "node_modules", "build", "dist"}
)


def _collect_lua_files(root: pathlib.Path) -> list[pathlib.Path]:
    """Recursively find .lua files under root, skipping non-source directories."""
    return sorted(
        lua_file
        for lua_file in root.rglob("*.lua")
        if not any(part in _SKIP_DIRS for part in lua_file.parts)
    )


def _resolve_files(paths: list[pathlib.Path] | None) -> list[pathlib.Path]:
    """Expand paths into a deduplicated .lua file list."""
    candidates: list[pathlib.Path] = []
    for raw_path in paths or []:
        if raw_path.is_dir():
            candidates.extend(_collect_lua_files(raw_path))
        else:
            candidates.append(raw_path)
    seen: set[pathlib.Path] = set()
    unique: list[pathlib.Path] = []
    for file_path in candidates:
        resolved = file_path.resolve()
        if resolved not in seen:
            seen.add(resolved)
            unique.append(file_path)
    return unique


def _is_failing(diag: rules_base.Diagnostic, *, deny_warnings: bool) -> bool:
    if diag.severity is rules_base.Severity.ERROR:
        return True
    return deny_warnings and diag.severity is rules_base.Severity.WARNING


@app.callback()
def main_callback(
    verbose: typing.Annotated[  # noqa: FBT002
        bool,
        typer.Option("--verbose", "-v", help="Log progress to stderr."),
    ] = False,
) -> None:
    """Lint Lua source files."""
    global _verbose_sink  # noqa: PLW0603
    if _verbose_sink is not None:
        logger.remove(_verbose_sink)
        _verbose_sink = None
    if verbose:
        _verbose_sink = logger.add(sys.stderr, level="DEBUG")


@app.command(no_args_is_help=True)
def check(
    paths: typing.Annotated[
        list[pathlib.Path] | None,
        typer.Argument(help="Files or directories to check."),
    ] = None,
    deny_warnings: typing.Annotated[  # noqa: FBT002
        bool,
        typer.Option("--deny-warnings", help="Exit non-zero on warnings too."),
    ] = False,
) -> None:
    """Check one or more files/directories for rule violations.

    Raises:
        typer.Exit: With code 1 if any failing diagnostic was reported, or
            code 2 if the configuration is invalid.
    """
    from moonlint import analyzer as moonlint_analyzer  # noqa: PLC0415
    from moonlint import config as moonlint_config  # noqa: PLC0415
    from moonlint import rules  # noqa: PLC0415

    lua_files = _resolve_files(paths)
    logger.info("found {} Lua files to check", len(lua_files))
    cfg = moonlint_config.load_config()
    try:
        active_rules = moonlint_config.configure_rules(
            moonlint_config.filter_rules(rules.ALL_RULES, cfg), cfg
        )
    except rules_base.ConfigurationError as e:
        typer.echo(f"error: invalid configuration: {e}", err=True)
        raise typer.Exit(code=2) from e

    analyzer = moonlint_analyzer.Analyzer(
        rules=active_rules, severities=cfg.lints, standard_library=cfg.std
    )
    failed = False

    for file_path in lua_files:
        try:
            source = file_path.read_bytes()
        except OSError as e:
            typer.echo(f"error: {e}", err=True)
            continue

        diagnostics = analyzer.analyze(source)
        for diag in diagnostics:
            typer.echo(moonlint_analyzer.render(diag, source, str(file_path)))
        if any(_is_failing(diag, deny_warnings=deny_warnings) for diag in diagnostics):
            failed = True

    if failed:
        raise typer.Exit(code=1)


def main() -> None:
    """Run the moonlint CLI."""
    app()


if __name__ == "__main__":
    main()
