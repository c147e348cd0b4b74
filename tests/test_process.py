# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the subprocess wrapper."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from aderyn_diagnostics.process import (
    TIMEOUT_RETURNCODE,
    CommandOptions,
    run_command,
)


def test_run_command_captures_output_in_cwd(tmp_path: Path) -> None:
    completed = run_command(
        [sys.executable, "-c", "import os; print(os.getcwd())"],
        options=CommandOptions(cwd=tmp_path),
    )

    assert completed.returncode == 0
    assert Path(completed.stdout.strip()).resolve() == tmp_path.resolve()


def test_run_command_rejects_unknown_executables() -> None:
    with pytest.raises(FileNotFoundError):
        run_command(["definitely-not-a-real-aderyn-binary"])


def test_run_command_requires_arguments() -> None:
    with pytest.raises(ValueError):
        run_command([])


def test_run_command_reports_timeouts() -> None:
    completed = run_command(
        [sys.executable, "-c", "import time; time.sleep(5)"],
        options=CommandOptions(timeout=0.2),
    )

    assert completed.returncode == TIMEOUT_RETURNCODE
    assert "timed out" in completed.stderr


def test_run_command_returns_nonzero_status_without_raising() -> None:
    completed = run_command(
        [sys.executable, "-c", "import os, sys; sys.stderr.write(os.environ['ADERYN_MARKER']); sys.exit(3)"],
        options=CommandOptions(env={**os.environ, "ADERYN_MARKER": "bad"}),
    )

    assert completed.returncode == 3
    assert completed.stderr == "bad"
