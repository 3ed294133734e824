# tests/test_scheduler.py

from __future__ import annotations

import logging
import threading
import time

import pytest

from threaded_exec.execution.runner import CommandRunner
from threaded_exec.execution.scheduler import InlineScheduler, ThreadPoolScheduler, ThreadScheduler
from threaded_exec.execution.task import ExecutionTask

from .fakes import RecordingSink, posix_only


def test_inline_scheduler_logs_and_swallows_entry_point_errors(caplog: pytest.LogCaptureFixture) -> None:
    def boom() -> None:
        raise RuntimeError("callback blew up")

    with caplog.at_level(logging.ERROR, logger="threaded_exec.execution.scheduler"):
        InlineScheduler().submit(boom)

    assert "entry point failed" in caplog.text


def test_thread_scheduler_runs_off_the_caller_thread() -> None:
    seen: list[str] = []
    sched = ThreadScheduler(name_prefix="t")

    sched.submit(lambda: seen.append(threading.current_thread().name))

    assert sched.join_all(timeout=5.0) is True
    assert len(seen) == 1
    assert seen[0] != threading.current_thread().name
    assert seen[0].startswith("t-")


def test_thread_pool_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    def boom() -> None:
        raise ValueError("nope")

    with caplog.at_level(logging.ERROR, logger="threaded_exec.execution.scheduler"):
        with ThreadPoolScheduler(max_workers=1) as sched:
            sched.submit(boom)

    assert "entry point failed" in caplog.text


@posix_only
@pytest.mark.parametrize("scheduler_kind", ["pool", "thread"])
def test_n_concurrent_tasks_deliver_exactly_once_each(scheduler_kind: str) -> None:
    sink = RecordingSink()
    runner = CommandRunner(chunk_size=4)
    values = list(range(-10, 30))

    if scheduler_kind == "pool":
        with ThreadPoolScheduler(max_workers=8) as sched:
            for v in values:
                sched.submit(ExecutionTask(f"echo {v}", v, sink, runner=runner).run)
    else:
        sched = ThreadScheduler()
        for v in values:
            sched.submit(ExecutionTask(f"echo {v}", v, sink, runner=runner).run)
        assert sched.join_all(timeout=30.0) is True

    got = sorted(c.correlation_value for c in sink.calls)
    assert got == values
    for c in sink.calls:
        assert c.spawn_failed is False
        assert c.exit_status == 0
        assert c.output_text == f"{c.correlation_value}\n"


def test_join_all_timeout_is_shared_across_threads() -> None:
    release = threading.Event()
    sched = ThreadScheduler()
    for _ in range(5):
        sched.submit(release.wait)

    try:
        started = time.monotonic()
        assert sched.join_all(timeout=0.2) is False
        assert time.monotonic() - started < 0.8
    finally:
        release.set()

    assert sched.join_all(timeout=5.0) is True


def test_failed_thread_start_is_not_tracked(monkeypatch: pytest.MonkeyPatch) -> None:
    sched = ThreadScheduler()

    def refuse(self) -> None:
        raise RuntimeError("can't start new thread")

    monkeypatch.setattr(threading.Thread, "start", refuse)
    with pytest.raises(RuntimeError):
        sched.submit(lambda: None)
    monkeypatch.undo()

    sched.submit(lambda: None)
    assert sched.join_all(timeout=5.0) is True
