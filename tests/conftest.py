# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from subprocess import CompletedProcess
from typing import Any

import pytest

from aderyn_diagnostics.editor import Editor
from aderyn_diagnostics.invocation import AnalysisInvoker
from aderyn_diagnostics.plugin import AderynPlugin
from aderyn_diagnostics.process import CommandOptions

REENTRANCY_REPORT: dict[str, Any] = {
    "high_issues": {
        "issues": [
            {
                "title": "Reentrancy",
                "description": "desc",
                "detector_name": "reentrancy",
                "instances": [{"contract_path": "src/A.sol", "line_no": 10}],
            }
        ]
    },
    "low_issues": {"issues": []},
}


@dataclass
class FakeAderyn:
    """Stand-in for the analyzer executable that writes a canned report."""

    report: dict[str, Any] | str | bytes | None = field(default_factory=lambda: dict(REENTRANCY_REPORT))
    installed: bool = True
    gate: threading.Event | None = None
    calls: list[tuple[list[str], CommandOptions | None]] = field(default_factory=list)

    def which(self, name: str) -> str | None:
        return f"/usr/local/bin/{name}" if self.installed else None

    def run(self, args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
        self.calls.append((list(args), options))
        if self.gate is not None:
            self.gate.wait(timeout=10)
        output = Path(args[args.index("--output") + 1])
        if isinstance(self.report, bytes):
            output.write_bytes(self.report)
        elif isinstance(self.report, str):
            output.write_text(self.report, encoding="utf-8")
        elif self.report is not None:
            output.write_text(json.dumps(self.report), encoding="utf-8")
        return CompletedProcess(args=list(args), returncode=0, stdout="", stderr="")


@pytest.fixture
def fake_aderyn() -> FakeAderyn:
    """Return a fake analyzer reporting a single reentrancy issue."""
    return FakeAderyn()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a Foundry-style project with two contracts."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "foundry.toml").write_text("[profile.default]\n", encoding="utf-8")
    (root / "src" / "A.sol").write_text("contract A {}\n", encoding="utf-8")
    (root / "src" / "B.sol").write_text("contract B {}\n", encoding="utf-8")
    return root


@pytest.fixture
def make_plugin(fake_aderyn: FakeAderyn, project: Path) -> Iterator[Callable[..., AderynPlugin]]:
    """Return a factory for plugins wired to ``fake_aderyn`` and ``project``."""
    created: list[AderynPlugin] = []

    def _make(editor: Editor | None = None, **opts: Any) -> AderynPlugin:
        invoker = AnalysisInvoker(runner=fake_aderyn.run, which=fake_aderyn.which)
        plugin = AderynPlugin(editor or Editor(), invoker=invoker, cwd=project)
        plugin.store.setup(opts)
        created.append(plugin)
        return plugin

    yield _make
    for plugin in created:
        plugin.shutdown()
