# src/threaded_exec/execution/api.py

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

from ..config import get_settings
from ..core.ports import Scheduler
from .models import ExecutionResult, OperatingSystem
from .runner import CommandRunner, current_os, runner_from_settings
from .scheduler import ThreadPoolScheduler
from .task import Callback, ExecutionTask

logger = logging.getLogger(__name__)

_default_scheduler: ThreadPoolScheduler | None = None
_default_lock = threading.Lock()


def _default_scheduler_locked() -> ThreadPoolScheduler:
    global _default_scheduler
    if _default_scheduler is None:
        max_workers = get_settings().max_workers
        _default_scheduler = ThreadPoolScheduler(max_workers=max_workers)
        logger.debug("Default scheduler started (max_workers=%s)", max_workers)
    return _default_scheduler


def get_default_scheduler() -> ThreadPoolScheduler:
    """Shared worker pool, created lazily on first use."""
    with _default_lock:
        return _default_scheduler_locked()


def shutdown_default_scheduler(wait: bool = True) -> None:
    global _default_scheduler
    with _default_lock:
        sched, _default_scheduler = _default_scheduler, None
    if sched is not None:
        sched.shutdown(wait=wait)


def execute_threaded(
    command: str,
    callback: Callback,
    correlation_value: int = 0,
    *,
    scheduler: Scheduler | None = None,
    runner: CommandRunner | None = None,
) -> ExecutionTask:
    """
    Run `command` in the background and deliver the result to `callback`.

    Returns the task handle (its state/result can be inspected); the callback
    is the delivery channel.
    """
    task = ExecutionTask(
        command,
        correlation_value,
        callback,
        runner=runner if runner is not None else runner_from_settings(),
    )
    if scheduler is not None:
        scheduler.submit(task.run)
    else:
        # Held across fetch+submit so a concurrent shutdown cannot close the pool in between.
        with _default_lock:
            _default_scheduler_locked().submit(task.run)
    logger.debug("Dispatched %r", task)
    return task


def execute_formatted_threaded(
    callback: Callback,
    correlation_value: int,
    fmt: str,
    *args: Any,
    scheduler: Scheduler | None = None,
    runner: CommandRunner | None = None,
    **kwargs: Any,
) -> ExecutionTask:
    """execute_threaded() with the command built by fmt.format(*args, **kwargs)."""
    command = fmt.format(*args, **kwargs)
    return execute_threaded(
        command,
        callback,
        correlation_value,
        scheduler=scheduler,
        runner=runner,
    )


def execute(command: str, *, runner: CommandRunner | None = None) -> ExecutionResult:
    """Blocking variant: runs on the calling thread and returns the result."""
    box: list[ExecutionResult] = []
    task = ExecutionTask(
        command,
        0,
        box.append,
        runner=runner if runner is not None else runner_from_settings(),
    )
    task.run()
    return box[0]


async def execute_async(
    command: str,
    correlation_value: int = 0,
    *,
    runner: CommandRunner | None = None,
) -> ExecutionResult:
    """Awaitable variant: the command runs in a worker thread, the loop stays free."""
    box: list[ExecutionResult] = []
    task = ExecutionTask(
        command,
        correlation_value,
        box.append,
        runner=runner if runner is not None else runner_from_settings(),
    )
    await asyncio.to_thread(task.run)
    return box[0]


def get_os() -> OperatingSystem:
    return current_os()
