# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plugin session wiring configuration, invocation and presentation together."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, Final

from .config import AderynConfig, ConfigError, ConfigStore
from .editor import Buffer, Editor, FloatingPreview, LogLevel
from .errors import AderynError, AnalyzerNotFoundError, ReportFormatError, ReportReadError
from .invocation import AnalysisInvoker, InvocationResult
from .presentation import NAMESPACE, clear, publish, show_issue_details
from .scheduler import MainThreadScheduler
from .severity import SEVERITY_CHOICES, DiagnosticSeverity, format_choice

LOGGER = logging.getLogger(__name__)

INITIAL_RUN_DELAY: Final[float] = 0.5
SAVE_RUN_DELAY: Final[float] = 0.1
SOURCE_PATTERN: Final[str] = "*.sol"
READ_FAILED_MESSAGE: Final[str] = "Failed to read Aderyn output"
PARSE_FAILED_MESSAGE: Final[str] = "Failed to parse Aderyn JSON output"


@dataclass(slots=True, frozen=True)
class KeyBinding:
    """Buffer-local mapping installed when a watched filetype is attached."""

    lhs: str
    action: str
    desc: str


KEY_BINDINGS: Final[tuple[KeyBinding, ...]] = (
    KeyBinding("<leader>at", "toggle", "[A]deryn [T]oggle diagnostics"),
    KeyBinding("<leader>ac", "print_config", "[A]deryn print [C]onfig"),
    KeyBinding("<leader>ad", "show_issue_details", "[A]deryn show issue [D]etails"),
    KeyBinding("<leader>ar", "run", "[A]deryn [R]un analysis"),
    KeyBinding("<leader>av", "prompt_minimum_severity", "[A]deryn set minimum se[v]erity"),
)


def describe_error(error: AderynError) -> str:
    """Return the user-facing notice for a failed run."""

    if isinstance(error, ReportReadError):
        return READ_FAILED_MESSAGE
    if isinstance(error, ReportFormatError):
        return PARSE_FAILED_MESSAGE
    return str(error)


class AderynPlugin:
    """One editor session of the Aderyn integration.

    All methods are meant to be called on the thread that pumps
    :attr:`scheduler`. Runs are serialised: a trigger that arrives while a run
    is in flight is coalesced into a single follow-up run.
    """

    def __init__(
        self,
        editor: Editor,
        *,
        config_store: ConfigStore | None = None,
        scheduler: MainThreadScheduler | None = None,
        invoker: AnalysisInvoker | None = None,
        cwd: Path | None = None,
    ) -> None:
        self.editor = editor
        self.store = config_store or ConfigStore()
        self.scheduler = scheduler or MainThreadScheduler()
        self.invoker = invoker or AnalysisInvoker()
        self.cwd = cwd
        self.namespace = editor.create_namespace(NAMESPACE)
        self.last_result: InvocationResult | None = None
        self.runs_started = 0
        self._in_flight = False
        self._rerun_requested = False

    @property
    def config(self) -> AderynConfig:
        return self.store.config

    @property
    def busy(self) -> bool:
        """Return ``True`` while a run is in flight or queued."""

        return self._in_flight or self._rerun_requested

    # Lifecycle

    def setup(self, opts: Mapping[str, Any] | None = None) -> None:
        """Merge ``opts`` into the configuration and schedule the initial run.

        Raises:
            ConfigError: If ``opts`` holds invalid values.
        """

        self.store.setup(opts)
        for buffer in self.editor.list_buffers():
            self.on_filetype(buffer)
        if self.config.enabled:
            self.scheduler.defer(INITIAL_RUN_DELAY, self.run)

    def shutdown(self) -> None:
        """Cancel deferred triggers and stop the worker pool."""

        self.scheduler.cancel_timers()
        self.invoker.shutdown(wait=True)

    # Triggers

    def open(self, path: str | Path) -> Buffer:
        """Open ``path`` in the editor and attach to it when its filetype is watched."""

        buffer = self.editor.open(path)
        self.on_filetype(buffer)
        return buffer

    def on_filetype(self, buffer: Buffer) -> bool:
        """Attach key mappings to ``buffer`` when its filetype is watched."""

        if buffer.filetype not in self.config.filetypes:
            return False
        self.attach(buffer.bufnr)
        return True

    def attach(self, bufnr: int) -> None:
        """Install the plugin's key mappings in buffer ``bufnr``."""

        for binding in KEY_BINDINGS:
            self.editor.set_keymap(bufnr, binding.lhs, getattr(self, binding.action), desc=binding.desc)

    def on_save(self, path: str | Path) -> bool:
        """Schedule a run shortly after a Solidity source is written."""

        if not self.config.enabled or not fnmatch.fnmatch(Path(path).name, SOURCE_PATTERN):
            return False
        self.scheduler.defer(SAVE_RUN_DELAY, self.run)
        return True

    # Actions

    def run(self) -> bool:
        """Start an analysis run.

        Returns:
            bool: ``True`` when a process was launched.
        """

        if not self.config.enabled:
            return False
        if self._in_flight:
            LOGGER.debug("run requested while another is in flight; queued")
            self._rerun_requested = True
            return False
        try:
            invocation = self.invoker.prepare(self.store.snapshot(), self._search_start())
        except AnalyzerNotFoundError as exc:
            self.editor.notify(str(exc), LogLevel.ERROR)
            return False
        self._in_flight = True
        self.runs_started += 1
        self.invoker.submit(invocation, self._complete_from_worker)
        return True

    def toggle(self) -> bool:
        """Flip the enabled flag and return the new state."""

        enabled = not self.config.enabled
        self.store.set_enabled(enabled)
        if not enabled:
            self._rerun_requested = False
            clear(self.editor, self.namespace)
            self.editor.notify("Aderyn diagnostics disabled", LogLevel.INFO)
        else:
            self.editor.notify("Aderyn diagnostics enabled", LogLevel.INFO)
            self.run()
        return enabled

    def set_minimum_severity(self, level: object) -> bool:
        """Change the minimum severity; invalid levels are reported and ignored."""

        try:
            severity = self.store.set_minimum_severity(level)
        except ConfigError as exc:
            self.editor.notify(str(exc), LogLevel.ERROR)
            return False
        self.editor.notify(f"Minimum severity set to: {int(severity)}", LogLevel.INFO)
        return True

    def prompt_minimum_severity(self) -> None:
        """Let the user pick the minimum severity from the four levels."""

        def _format(item: str) -> str:
            return format_choice(DiagnosticSeverity[item])

        def _chosen(choice: str | None) -> None:
            if choice:
                self.set_minimum_severity(DiagnosticSeverity[choice])

        self.editor.select(
            SEVERITY_CHOICES,
            prompt="Select minimum severity level:",
            format_item=_format,
            on_choice=_chosen,
        )

    def print_config(self) -> None:
        """Show the current configuration to the user."""

        self.editor.notify("\n".join(self.store.describe()), LogLevel.INFO)

    def show_issue_details(self) -> FloatingPreview | None:
        """Open the detail panel for the diagnostic under the cursor."""

        return show_issue_details(self.editor, self.namespace)

    def wait(self, timeout: float = 60.0) -> bool:
        """Pump the scheduler until no run is in flight or queued."""

        return self.scheduler.drain_until(lambda: not self.busy, timeout)

    # Internals

    def _search_start(self) -> Path:
        buffer = self.editor.current_buffer
        if buffer is not None:
            return Path(buffer.path).parent
        return self.cwd or Path.cwd()

    def _complete_from_worker(self, result: InvocationResult) -> None:
        self.scheduler.schedule(partial(self._finish, result))

    def _finish(self, result: InvocationResult) -> None:
        self._in_flight = False
        self.last_result = result
        if result.error is not None:
            self.editor.notify(describe_error(result.error), LogLevel.ERROR)
        elif self.config.enabled:
            count = publish(self.editor, self.namespace, result.diagnostics)
            LOGGER.debug("published %d diagnostic(s)", count)
        if self._rerun_requested:
            self._rerun_requested = False
            self.run()


__all__ = [
    "INITIAL_RUN_DELAY",
    "KEY_BINDINGS",
    "PARSE_FAILED_MESSAGE",
    "READ_FAILED_MESSAGE",
    "SAVE_RUN_DELAY",
    "AderynPlugin",
    "KeyBinding",
    "describe_error",
]
