# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build and launch ``aderyn`` invocations off the main thread."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

from .config import AderynConfig
from .errors import AderynError, AnalyzerNotFoundError
from .mapper import REPORT_DIR_PREFIX, discard_report, process_report
from .models import DiagnosticsByFile
from .process import CommandOptions, find_executable, run_command

LOGGER = logging.getLogger(__name__)

# Checked in order; the first marker found in the start directory or any ancestor wins.
ROOT_MARKERS: Final[tuple[str, ...]] = (
    "foundry.toml",
    "hardhat.config.js",
    "hardhat.config.ts",
    "truffle-config.js",
    "package.json",
)
OUTPUT_FLAG: Final[str] = "--output"
REPORT_FILENAME: Final[str] = "report.json"

CommandRunner = Callable[..., CompletedProcess[str]]
ExecutableLookup = Callable[[str], "str | None"]


def find_project_root(start: Path) -> Path | None:
    """Return the nearest directory holding a project marker, searching upwards from ``start``."""

    directories = (start, *start.parents)
    for marker in ROOT_MARKERS:
        for directory in directories:
            if (directory / marker).is_file():
                return directory
    return None


def resolve_working_directory(config: AderynConfig, start: Path | None = None) -> Path:
    """Return the directory Aderyn should analyse.

    Args:
        config: Configuration snapshot; a non-empty ``aderyn_root`` wins.
        start: Directory the marker search begins in. Defaults to the process cwd.

    Returns:
        Path: Explicit root, discovered project root, or ``start`` itself.
    """

    if config.aderyn_root:
        return Path(config.aderyn_root).expanduser().absolute()
    origin = (start or Path.cwd()).absolute()
    return find_project_root(origin) or origin


def new_report_path() -> Path:
    """Return a unique, not yet existing report location for one run."""

    return Path(tempfile.mkdtemp(prefix=REPORT_DIR_PREFIX)) / REPORT_FILENAME


def format_command(command: Sequence[str]) -> str:
    """Render ``command`` for display."""

    return " ".join(command)


def build_command(config: AderynConfig, cwd: Path, report_path: Path) -> list[str]:
    """Return ``aderyn --output <report> [extra args...] <cwd>``."""

    return [config.executable, OUTPUT_FLAG, str(report_path), *config.extra_args, str(cwd)]


@dataclass(slots=True, frozen=True)
class Invocation:
    """Everything needed to launch and post-process one analyzer run."""

    command: tuple[str, ...]
    cwd: Path
    report_path: Path
    config: AderynConfig


@dataclass(slots=True)
class InvocationResult:
    """Outcome of one analyzer run, ready to be published on the main thread."""

    invocation: Invocation
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""
    diagnostics: DiagnosticsByFile = field(default_factory=dict)
    error: AderynError | None = None

    @property
    def ok(self) -> bool:
        """Return ``True`` when the report was read and mapped."""

        return self.error is None


class AnalysisInvoker:
    """Launch analyzer runs on a worker thread and report back through a callback."""

    def __init__(
        self,
        *,
        executor: ThreadPoolExecutor | None = None,
        runner: CommandRunner | None = None,
        which: ExecutableLookup | None = None,
    ) -> None:
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="aderyn")
        self._runner = runner
        self._which = which

    def prepare(self, config: AderynConfig, start: Path | None = None) -> Invocation:
        """Resolve the working directory and command line for a run.

        Raises:
            AnalyzerNotFoundError: If ``config.executable`` is not on ``PATH``.
        """

        which = self._which or find_executable
        if not which(config.executable):
            raise AnalyzerNotFoundError(config.executable)
        cwd = resolve_working_directory(config, start)
        report_path = new_report_path()
        command = build_command(config, cwd, report_path)
        LOGGER.debug("Running: %s", format_command(command))
        LOGGER.debug("CWD: %s", cwd)
        return Invocation(command=tuple(command), cwd=cwd, report_path=report_path, config=config)

    def submit(
        self,
        invocation: Invocation,
        on_complete: Callable[[InvocationResult], None],
    ) -> Future[InvocationResult]:
        """Run ``invocation`` asynchronously and hand the result to ``on_complete``.

        ``on_complete`` fires exactly once, on the worker thread, even when the
        run fails unexpectedly. Callers that touch editor state must marshal it
        onto their own context.
        """

        future = self._executor.submit(self.execute, invocation)

        def _done(completed: Future[InvocationResult]) -> None:
            try:
                result = completed.result()
            except Exception as exc:
                LOGGER.exception("aderyn run failed unexpectedly")
                discard_report(invocation.report_path)
                result = InvocationResult(invocation=invocation, error=AderynError(f"Aderyn run failed: {exc}"))
            on_complete(result)

        future.add_done_callback(_done)
        return future

    def execute(self, invocation: Invocation) -> InvocationResult:
        """Run the analyzer synchronously and map its report."""

        result = InvocationResult(invocation=invocation)
        runner = self._runner or run_command
        options = CommandOptions(cwd=invocation.cwd, timeout=invocation.config.timeout)
        try:
            completed = runner(list(invocation.command), options=options)
        except FileNotFoundError:
            discard_report(invocation.report_path)
            result.error = AnalyzerNotFoundError(invocation.config.executable)
            return result
        except OSError as exc:
            discard_report(invocation.report_path)
            result.error = AderynError(f"unable to run {invocation.config.executable}: {exc}")
            return result
        result.returncode = completed.returncode
        result.stdout = completed.stdout or ""
        result.stderr = completed.stderr or ""
        LOGGER.debug("aderyn exited with status %s", completed.returncode)
        try:
            result.diagnostics = process_report(invocation.report_path, invocation.config, invocation.cwd)
        except AderynError as exc:
            result.error = exc
        return result

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop the worker pool."""

        self._executor.shutdown(wait=wait)


__all__ = [
    "OUTPUT_FLAG",
    "ROOT_MARKERS",
    "AnalysisInvoker",
    "Invocation",
    "InvocationResult",
    "build_command",
    "find_project_root",
    "format_command",
    "new_report_path",
    "resolve_working_directory",
]
