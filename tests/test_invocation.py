# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for building and launching analyzer invocations."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from aderyn_diagnostics.config import AderynConfig
from aderyn_diagnostics.errors import AnalyzerNotFoundError, ReportFormatError, ReportReadError
from aderyn_diagnostics.invocation import (
    AnalysisInvoker,
    InvocationResult,
    build_command,
    find_project_root,
    new_report_path,
    resolve_working_directory,
)

if TYPE_CHECKING:
    from conftest import FakeAderyn


def test_marker_order_wins_over_proximity(tmp_path: Path) -> None:
    nested = tmp_path / "contracts" / "src"
    nested.mkdir(parents=True)
    (tmp_path / "foundry.toml").write_text("", encoding="utf-8")
    (tmp_path / "contracts" / "package.json").write_text("{}", encoding="utf-8")

    assert find_project_root(nested) == tmp_path


def test_nearest_directory_wins_for_the_same_marker(tmp_path: Path) -> None:
    inner = tmp_path / "inner"
    inner.mkdir()
    (tmp_path / "hardhat.config.ts").write_text("", encoding="utf-8")
    (inner / "hardhat.config.ts").write_text("", encoding="utf-8")

    assert find_project_root(inner) == inner


def test_working_directory_prefers_explicit_root(tmp_path: Path) -> None:
    (tmp_path / "foundry.toml").write_text("", encoding="utf-8")
    explicit = tmp_path / "explicit"

    config = AderynConfig(aderyn_root=str(explicit))

    assert resolve_working_directory(config, tmp_path) == explicit


def test_working_directory_falls_back_to_start(tmp_path: Path) -> None:
    start = tmp_path / "bare"
    start.mkdir()

    assert resolve_working_directory(AderynConfig(), start) == start


def test_build_command_orders_arguments(tmp_path: Path) -> None:
    config = AderynConfig(extra_args=["--no-snippets", "--src", "src"])
    report = tmp_path / "report.json"

    assert build_command(config, tmp_path, report) == [
        "aderyn",
        "--output",
        str(report),
        "--no-snippets",
        "--src",
        "src",
        str(tmp_path),
    ]


def test_report_paths_are_unique_per_run() -> None:
    first = new_report_path()
    second = new_report_path()

    assert first != second
    assert not first.exists()
    assert first.parent.is_dir()
    first.parent.rmdir()
    second.parent.rmdir()


def test_prepare_requires_the_executable(project: Path) -> None:
    invoker = AnalysisInvoker(which=lambda name: None)

    with pytest.raises(AnalyzerNotFoundError, match="aderyn executable not found in PATH"):
        invoker.prepare(AderynConfig(), project / "src")
    invoker.shutdown()


def test_execute_runs_in_the_project_root(project: Path, fake_aderyn: FakeAderyn) -> None:
    invoker = AnalysisInvoker(runner=fake_aderyn.run, which=fake_aderyn.which)
    invocation = invoker.prepare(AderynConfig(timeout=30), project / "src")

    result = invoker.execute(invocation)
    invoker.shutdown()

    assert result.ok
    args, options = fake_aderyn.calls[0]
    assert args[-1] == str(project)
    assert options is not None
    assert options.cwd == project
    assert options.timeout == 30
    assert list(result.diagnostics) == [str(project / "src" / "A.sol")]
    assert not invocation.report_path.exists()
    assert not invocation.report_path.parent.exists()


def test_execute_reports_missing_output(project: Path, fake_aderyn: FakeAderyn) -> None:
    fake_aderyn.report = None
    invoker = AnalysisInvoker(runner=fake_aderyn.run, which=fake_aderyn.which)

    result = invoker.execute(invoker.prepare(AderynConfig(), project))
    invoker.shutdown()

    assert isinstance(result.error, ReportReadError)
    assert result.diagnostics == {}


def test_execute_reports_malformed_output(project: Path, fake_aderyn: FakeAderyn) -> None:
    fake_aderyn.report = "<html>"
    invoker = AnalysisInvoker(runner=fake_aderyn.run, which=fake_aderyn.which)

    result = invoker.execute(invoker.prepare(AderynConfig(), project))
    invoker.shutdown()

    assert isinstance(result.error, ReportFormatError)


def test_execute_maps_vanished_executable(project: Path) -> None:
    def _runner(args: list[str], **_: object) -> None:
        raise FileNotFoundError(args[0])

    invoker = AnalysisInvoker(runner=_runner, which=lambda name: name)
    result = invoker.execute(invoker.prepare(AderynConfig(), project))
    invoker.shutdown()

    assert isinstance(result.error, AnalyzerNotFoundError)


def test_submit_calls_back_from_the_worker(project: Path, fake_aderyn: FakeAderyn) -> None:
    invoker = AnalysisInvoker(runner=fake_aderyn.run, which=fake_aderyn.which)
    received: list[InvocationResult] = []
    done = threading.Event()

    def _on_complete(result: InvocationResult) -> None:
        received.append(result)
        done.set()

    invoker.submit(invoker.prepare(AderynConfig(), project), _on_complete)

    assert done.wait(timeout=10)
    invoker.shutdown()
    assert received[0].ok
