# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line trigger surface for one-shot analysis runs."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, Final

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from .config import ConfigError, load_config_file
from .console import output_console
from .editor import ConsoleEditor, LogLevel
from .invocation import resolve_working_directory
from .logging import ok, section
from .plugin import AderynPlugin
from .rendering import render_diagnostics
from .severity import SEVERITY_CHOICES

_SKIPPED_DIRECTORIES: Final[frozenset[str]] = frozenset({".git", "node_modules"})
_DEFAULT_WAIT: Final[float] = 600.0

app = typer.Typer(
    name="aderyn-diagnostics",
    help="Run Aderyn and surface its findings as editor diagnostics.",
    no_args_is_help=True,
    add_completion=False,
)


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class SessionOptions:
    """Options shared by every command."""

    root: Path
    min_severity: str | None = None
    extra_args: list[str] = field(default_factory=list)
    aderyn_root: str | None = None
    executable: str | None = None
    timeout: float | None = None
    emoji: bool = True
    debug: bool = False

    def overrides(self) -> dict[str, Any]:
        """Return configuration overrides supplied on the command line."""

        overrides: dict[str, Any] = {}
        if self.extra_args:
            overrides["extra_args"] = list(self.extra_args)
        if self.aderyn_root is not None:
            overrides["aderyn_root"] = self.aderyn_root
        if self.executable is not None:
            overrides["executable"] = self.executable
        if self.timeout is not None:
            overrides["timeout"] = self.timeout
        return overrides


RootArgument = Annotated[
    Path,
    typer.Argument(help="Directory the project marker search starts from.", file_okay=False),
]
MinSeverityOption = Annotated[
    str | None,
    typer.Option("--min-severity", help=f"Minimum severity to show ({', '.join(SEVERITY_CHOICES)})."),
]
ExtraArgOption = Annotated[
    list[str] | None,
    typer.Option("--extra-arg", help="Extra argument passed to aderyn (repeatable)."),
]
AderynRootOption = Annotated[
    str | None,
    typer.Option("--aderyn-root", help="Directory to analyse instead of the discovered project root."),
]
ExecutableOption = Annotated[str | None, typer.Option("--executable", help="Analyzer executable name or path.")]
TimeoutOption = Annotated[float | None, typer.Option("--timeout", min=0, help="Seconds before aderyn is stopped.")]
EmojiOption = Annotated[bool, typer.Option("--emoji/--no-emoji", help="Toggle emoji in messages.")]
DebugOption = Annotated[bool, typer.Option("--debug", help="Log invocation details.")]


def _configure_logging(debug: bool, console: Console) -> None:
    if not debug:
        return
    handler = RichHandler(console=console, show_time=False, show_path=False)
    package_logger = logging.getLogger("aderyn_diagnostics")
    package_logger.handlers = [handler]
    package_logger.setLevel(logging.DEBUG)


def _build_session(options: SessionOptions, console: Console) -> AderynPlugin:
    """Return a plugin session configured from files and command line overrides.

    Raises:
        CLIError: If the configuration is invalid.
    """

    _configure_logging(options.debug, console)
    editor = ConsoleEditor(console=console, use_emoji=options.emoji)
    plugin = AderynPlugin(editor, cwd=options.root)
    try:
        plugin.store.setup(load_config_file(options.root))
        plugin.store.setup(options.overrides())
    except ConfigError as exc:
        raise CLIError(f"invalid configuration: {exc}", exit_code=2) from exc
    if options.min_severity is not None and not plugin.set_minimum_severity(options.min_severity):
        raise CLIError(f"invalid severity level '{options.min_severity}'", exit_code=2)
    return plugin


def iter_sources(root: Path) -> Iterator[Path]:
    """Yield Solidity sources below ``root``, skipping VCS and dependency folders."""

    for path in sorted(root.rglob("*.sol")):
        if _SKIPPED_DIRECTORIES.intersection(path.relative_to(root).parts):
            continue
        if path.is_file():
            yield path


def _analyse(plugin: AderynPlugin, wait: float) -> None:
    """Open every source, run once and wait for the result.

    Raises:
        CLIError: If the run could not start or its report was unusable.
    """

    working_directory = resolve_working_directory(plugin.config, plugin.cwd)
    for source in iter_sources(working_directory):
        plugin.open(source)
    if not plugin.run():
        raise CLIError("analysis did not start")
    if not plugin.wait(wait):
        raise CLIError(f"aderyn did not finish within {wait:.0f}s")
    result = plugin.last_result
    if result is None or not result.ok:
        raise CLIError("analysis failed")


def _exit_on_error(exc: CLIError, console: Console) -> typer.Exit:
    console.print(Text(str(exc), style="red"))
    return typer.Exit(code=exc.exit_code)


@app.command("run")
def run_analysis(
    root: RootArgument = Path("."),
    min_severity: MinSeverityOption = None,
    extra_arg: ExtraArgOption = None,
    aderyn_root: AderynRootOption = None,
    executable: ExecutableOption = None,
    timeout: TimeoutOption = None,
    emoji: EmojiOption = True,
    debug: DebugOption = False,
    wait: Annotated[float, typer.Option("--wait", min=0, help="Seconds to wait for the run.")] = _DEFAULT_WAIT,
) -> None:
    """Run Aderyn once and print the published diagnostics."""

    console = output_console(emoji=emoji)
    options = SessionOptions(
        root=root.resolve(),
        min_severity=min_severity,
        extra_args=extra_arg or [],
        aderyn_root=aderyn_root,
        executable=executable,
        timeout=timeout,
        emoji=emoji,
        debug=debug,
    )
    try:
        plugin = _build_session(options, console)
        try:
            _analyse(plugin, wait)
            published = {
                buffer.path: plugin.editor.get_diagnostics(buffer.bufnr, namespace=plugin.namespace)
                for buffer in plugin.editor.list_buffers()
            }
            render_diagnostics(published, console=console)
            count = sum(len(entries) for entries in published.values())
            if count:
                ok(f"Published {count} Aderyn diagnostic(s)", use_emoji=emoji, console=console)
        finally:
            plugin.shutdown()
    except CLIError as exc:
        raise _exit_on_error(exc, console) from exc


@app.command("details")
def show_details(
    file: Annotated[Path, typer.Argument(help="Solidity source to inspect.", dir_okay=False)],
    line: Annotated[int, typer.Argument(min=1, help="1-based line number.")],
    root: Annotated[Path | None, typer.Option("--root", help="Directory the marker search starts from.")] = None,
    min_severity: MinSeverityOption = None,
    extra_arg: ExtraArgOption = None,
    aderyn_root: AderynRootOption = None,
    executable: ExecutableOption = None,
    timeout: TimeoutOption = None,
    emoji: EmojiOption = True,
    debug: DebugOption = False,
) -> None:
    """Run Aderyn and show the issue reported at FILE:LINE."""

    console = output_console(emoji=emoji)
    target = file.resolve()
    options = SessionOptions(
        root=(root or target.parent).resolve(),
        min_severity=min_severity,
        extra_args=extra_arg or [],
        aderyn_root=aderyn_root,
        executable=executable,
        timeout=timeout,
        emoji=emoji,
        debug=debug,
    )
    try:
        plugin = _build_session(options, console)
        try:
            plugin.open(target)
            _analyse(plugin, _DEFAULT_WAIT)
            plugin.open(target)
            plugin.editor.set_cursor(line)
            if plugin.show_issue_details() is None:
                raise CLIError(f"nothing reported at {target}:{line}")
        finally:
            plugin.shutdown()
    except CLIError as exc:
        raise _exit_on_error(exc, console) from exc


@app.command("config")
def print_config(
    root: RootArgument = Path("."),
    min_severity: MinSeverityOption = None,
    extra_arg: ExtraArgOption = None,
    aderyn_root: AderynRootOption = None,
    executable: ExecutableOption = None,
    timeout: TimeoutOption = None,
    emoji: EmojiOption = True,
    debug: DebugOption = False,
) -> None:
    """Print the effective configuration."""

    console = output_console(emoji=emoji)
    options = SessionOptions(
        root=root.resolve(),
        min_severity=min_severity,
        extra_args=extra_arg or [],
        aderyn_root=aderyn_root,
        executable=executable,
        timeout=timeout,
        emoji=emoji,
        debug=debug,
    )
    try:
        plugin = _build_session(options, console)
    except CLIError as exc:
        raise _exit_on_error(exc, console) from exc
    section("Aderyn", use_color=False, console=console)
    for entry in plugin.store.describe():
        console.print(entry, markup=False)
    working_directory = resolve_working_directory(plugin.config, plugin.cwd)
    plugin.editor.notify(f"working directory: {working_directory}", LogLevel.INFO)
    plugin.shutdown()


__all__ = ["CLIError", "app", "iter_sources"]
