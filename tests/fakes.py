# tests/fakes.py

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field

import pytest

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="uses POSIX shell syntax")


@dataclass(slots=True)
class Delivery:
    output_text: str
    exit_status: int | None
    spawn_failed: bool
    correlation_value: int


@dataclass
class RecordingSink:
    """
    CompletionSink that records every deliver() call.

    Thread-safe so one instance can be shared by concurrently running tasks.
    """

    calls: list[Delivery] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def deliver(
        self,
        output_text: str,
        exit_status: int | None,
        spawn_failed: bool,
        correlation_value: int,
    ) -> None:
        with self._lock:
            self.calls.append(Delivery(output_text, exit_status, spawn_failed, correlation_value))


class TrickleStream:
    """
    Readable pipe stand-in that hands out at most `max_read` bytes per read,
    and optionally raises `fail_with` once `fail_after` reads have succeeded.
    """

    def __init__(
        self,
        data: bytes,
        *,
        max_read: int | None = None,
        fail_after: int | None = None,
        fail_with: BaseException | None = None,
    ) -> None:
        self.data = data
        self.pos = 0
        self.max_read = max_read
        self.fail_after = fail_after
        self.fail_with = fail_with or OSError("broken pipe")
        self.reads = 0
        self.requested: list[int] = []
        self.closed = False

    def read(self, n: int = -1) -> bytes:
        self.requested.append(n)
        if self.fail_after is not None and self.reads >= self.fail_after:
            raise self.fail_with
        self.reads += 1
        size = n if self.max_read is None else min(n, self.max_read)
        chunk = self.data[self.pos:self.pos + size]
        self.pos += len(chunk)
        return chunk

    def close(self) -> None:
        self.closed = True


class FakeProcess:
    def __init__(self, stdout: TrickleStream | None, returncode: int = 0, *, wait_error: BaseException | None = None) -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.wait_error = wait_error
        self.waited = 0

    def wait(self) -> int:
        self.waited += 1
        if self.wait_error is not None:
            raise self.wait_error
        return self.returncode


class FakeBackend:
    """ProcessBackend that returns a scripted process, or raises `spawn_error`."""

    def __init__(self, process: FakeProcess | None = None, *, spawn_error: BaseException | None = None) -> None:
        self.process = process
        self.spawn_error = spawn_error
        self.commands: list[str] = []

    def spawn(self, command: str) -> FakeProcess:
        self.commands.append(command)
        if self.spawn_error is not None:
            raise self.spawn_error
        assert self.process is not None
        return self.process


class ExplodingRunner:
    """Runner whose run() raises something the runner itself never should."""

    def __init__(self) -> None:
        self.calls = 0

    def run(self, command: str):
        self.calls += 1
        raise RuntimeError("unexpected runner bug")


class StaticRunner:
    """Runner that answers every command with the same outcome, no process involved."""

    def __init__(self, outcome) -> None:
        self.outcome = outcome

    def run(self, command: str):
        return self.outcome
