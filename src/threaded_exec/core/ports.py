# src/threaded_exec/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the execution core.

The core depends on Protocols instead of concrete implementations.
This keeps the scheduling primitive, the platform process facility and the
result consumer swappable and makes testing easier.
"""

from typing import IO, Callable, Protocol

EntryPoint = Callable[[], None]


class CompletionSink(Protocol):
    """
    Consumer-side port: where a finished task delivers its result.

    Invoked exactly once per task, on the worker thread that ran the command.
    The same sink may be shared by many tasks; concurrent invocations are the
    sink owner's problem, not the core's.
    """

    def deliver(
            self,
            output_text: str,
            exit_status: int | None,
            spawn_failed: bool,
            correlation_value: int,
    ) -> None: ...


class Scheduler(Protocol):
    """Runs an entry point somewhere off the caller's thread (fire-and-forget)."""

    def submit(self, entry_point: EntryPoint) -> None: ...


class ProcessHandle(Protocol):
    """A spawned child: one readable combined-output pipe plus a final status."""

    stdout: IO[bytes] | None

    def wait(self) -> int: ...


class ProcessBackend(Protocol):
    """Platform process facility: spawn a command line through the default shell."""

    def spawn(self, command: str) -> ProcessHandle: ...
