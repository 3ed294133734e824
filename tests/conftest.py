# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from threaded_exec.execution.runner import CommandRunner

from .fakes import RecordingSink


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with runner_from_settings().

    A SimpleNamespace rather than the real config, to keep tests independent
    of the environment the suite runs in.
    """
    return SimpleNamespace(
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        chunk_size=8,
        encoding="utf-8",
        decode_errors="replace",
        shell=None,
        max_workers=4,
    )


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def runner() -> CommandRunner:
    """Real-process runner with a deliberately tiny chunk size."""
    return CommandRunner(chunk_size=16)
