# src/threaded_exec/execution/scheduler.py

from __future__ import annotations

"""
Schedulers: ways to run an entry point off the caller.

All of them are fire-and-forget: submit() returns nothing, and whatever
escapes an entry point (only callback failures can) is logged, not re-raised.
None of them order completions across entry points.
"""

import itertools
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor

from ..core.ports import EntryPoint

logger = logging.getLogger(__name__)


def _guarded(entry_point: EntryPoint) -> None:
    try:
        entry_point()
    except Exception:
        logger.exception("entry point failed: %r", entry_point)


class InlineScheduler:
    """Runs the entry point right away on the calling thread (tests / sync use)."""

    def submit(self, entry_point: EntryPoint) -> None:
        _guarded(entry_point)


class ThreadScheduler:
    """One dedicated daemon thread per entry point."""

    def __init__(self, *, name_prefix: str = "exec") -> None:
        self.name_prefix = name_prefix
        self._counter = itertools.count(1)
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    def submit(self, entry_point: EntryPoint) -> None:
        t = threading.Thread(
            target=_guarded,
            args=(entry_point,),
            name=f"{self.name_prefix}-{next(self._counter)}",
            daemon=True,
        )
        t.start()
        with self._lock:
            # Forget finished threads so long-lived schedulers don't grow.
            self._threads = [x for x in self._threads if x.is_alive()]
            self._threads.append(t)

    def join_all(self, timeout: float | None = None) -> bool:
        """
        Wait for every submitted thread, `timeout` seconds in total.
        Returns False if any is still alive.
        """
        with self._lock:
            threads = list(self._threads)
        deadline = None if timeout is None else time.monotonic() + timeout
        for t in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            t.join(timeout=remaining)
        return not any(t.is_alive() for t in threads)


class ThreadPoolScheduler:
    """Bounded pool of worker threads (concurrent.futures)."""

    def __init__(self, max_workers: int = 8, *, name_prefix: str = "exec-pool") -> None:
        self.max_workers = max(1, int(max_workers))
        self._pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix=name_prefix)

    def submit(self, entry_point: EntryPoint) -> None:
        fut: Future[None] = self._pool.submit(entry_point)
        fut.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(fut: Future[None]) -> None:
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            logger.error("entry point failed", exc_info=(type(exc), exc, exc.__traceback__))

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> ThreadPoolScheduler:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=True)
