# src/threaded_exec/execution/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TaskState(StrEnum):
    """
    ExecutionTask lifecycle.

    There is no cancelled state: once the entry point starts, the task runs
    until the child process exits and the callback returns.
    """

    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"


class OperatingSystem(StrEnum):
    WINDOWS = "windows"
    LINUX = "linux"
    MAC = "mac"
    UNKNOWN = "unknown"


@dataclass(slots=True, frozen=True)
class RunOutcome:
    """What CommandRunner.run() hands back to the task."""

    output: str
    exit_status: int | None
    spawn_failed: bool
    term_signal: int | None = None

    @classmethod
    def spawn_failure(cls) -> RunOutcome:
        return cls(output="", exit_status=None, spawn_failed=True)


@dataclass(slots=True, frozen=True)
class ExecutionResult:
    """
    Value delivered to the completion sink.

    exit_status is only meaningful when spawn_failed is False. A process
    killed by signal N reports exit_status = 128 + N and term_signal = N.
    """

    command: str
    output: str
    exit_status: int | None
    spawn_failed: bool
    correlation_value: int
    term_signal: int | None = None

    @property
    def success(self) -> bool:
        return not self.spawn_failed and self.exit_status == 0

    @property
    def length(self) -> int:
        return len(self.output)

    def get_output(self, start: int = 0, delimiter: str = "", include: bool = True) -> str:
        """
        Slice the captured output.

        Starts at character offset `start`; with a delimiter, stops at its first
        occurrence at or after `start` (keeping it when `include` is true).
        """
        if start < 0 or start >= len(self.output):
            return ""

        if not delimiter:
            return self.output[start:]

        pos = self.output.find(delimiter, start)
        if pos == -1:
            return self.output[start:]

        end = pos + len(delimiter) if include else pos
        return self.output[start:end]

    @classmethod
    def from_outcome(cls, command: str, correlation_value: int, outcome: RunOutcome) -> ExecutionResult:
        return cls(
            command=command,
            output=outcome.output,
            exit_status=outcome.exit_status,
            spawn_failed=outcome.spawn_failed,
            correlation_value=correlation_value,
            term_signal=outcome.term_signal,
        )
