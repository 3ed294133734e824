# src/threaded_exec/execution/task.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Union

from ..core.ports import CompletionSink
from .models import ExecutionResult, RunOutcome, TaskState
from .runner import CommandRunner, runner_from_settings

logger = logging.getLogger(__name__)

ResultCallback = Callable[[ExecutionResult], None]
Callback = Union[CompletionSink, ResultCallback]


def _as_result_callback(callback: Callback) -> ResultCallback:
    """Normalize a sink object (deliver(...)) or a plain callable into one call shape."""
    deliver = getattr(callback, "deliver", None)
    if callable(deliver):
        def _deliver(result: ExecutionResult) -> None:
            deliver(result.output, result.exit_status, result.spawn_failed, result.correlation_value)

        return _deliver

    if callable(callback):
        return callback

    raise TypeError(f"callback must be a CompletionSink or a callable, got {type(callback).__name__}")


class ExecutionTask:
    """
    One (command, correlation_value, callback) triple.

    run() is the entry point handed to a scheduler. It runs the command on the
    current thread, then invokes the callback exactly once with the result.
    Core failures (spawn, read) arrive as data on the result; only exceptions
    raised by the callback itself leave run().
    """

    def __init__(
        self,
        command: str,
        correlation_value: int,
        callback: Callback,
        *,
        runner: CommandRunner | None = None,
    ) -> None:
        if not isinstance(command, str):
            raise TypeError(f"command must be str, got {type(command).__name__}")
        if isinstance(correlation_value, bool) or not isinstance(correlation_value, int):
            raise TypeError(f"correlation_value must be int, got {type(correlation_value).__name__}")
        if callback is None:
            raise TypeError("callback is required")

        self.command = command
        self.correlation_value = correlation_value
        self.callback = callback
        self.runner = runner if runner is not None else runner_from_settings()

        self._emit = _as_result_callback(callback)
        self._state = TaskState.CREATED
        self._lock = threading.Lock()
        self.result: ExecutionResult | None = None

    @property
    def state(self) -> TaskState:
        return self._state

    def __repr__(self) -> str:
        return (
            f"ExecutionTask(command={self.command!r}, "
            f"correlation_value={self.correlation_value}, state={self._state.value})"
        )

    def run(self) -> None:
        with self._lock:
            if self._state != TaskState.CREATED:
                logger.warning("Task already %s; ignoring repeated run: %r", self._state.value, self)
                return
            self._state = TaskState.RUNNING

        try:
            outcome = self.runner.run(self.command)
        except Exception:
            logger.exception("runner crashed correlation_value=%s", self.correlation_value)
            outcome = RunOutcome.spawn_failure()

        result = ExecutionResult.from_outcome(self.command, self.correlation_value, outcome)
        self.result = result

        try:
            self._emit(result)
        finally:
            self._state = TaskState.COMPLETED
