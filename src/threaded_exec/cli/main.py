# src/threaded_exec/cli/main.py

"""
CLI entrypoint.

Initializes logging, dispatches every COMMAND argument as a background task
(correlation value = its position), prints each result as it arrives, and
exits non-zero if any command failed or did not finish in time.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from collections.abc import Sequence

from ..config import get_settings
from ..execution.api import runner_from_settings
from ..execution.models import ExecutionResult
from ..execution.scheduler import ThreadScheduler
from ..execution.task import ExecutionTask
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


class _ConsoleSink:
    """Prints results to stdout; one lock serializes concurrent deliveries."""

    def __init__(self, expected: int) -> None:
        self.lock = threading.Lock()
        self.results: dict[int, ExecutionResult] = {}
        self.all_done = threading.Event()
        self.expected = expected
        if expected == 0:
            self.all_done.set()

    def __call__(self, result: ExecutionResult) -> None:
        with self.lock:
            self.results[result.correlation_value] = result
            if result.spawn_failed:
                header = f"[{result.correlation_value}] {result.command!r}: spawn failed"
            else:
                header = f"[{result.correlation_value}] {result.command!r}: exit {result.exit_status}"
                if result.term_signal is not None:
                    header += f" (signal {result.term_signal})"
            try:
                print(header)
                if result.output:
                    sys.stdout.write(result.output)
                    if not result.output.endswith("\n"):
                        sys.stdout.write("\n")
                sys.stdout.flush()
            finally:
                if len(self.results) >= self.expected:
                    self.all_done.set()


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="threaded-exec",
        description="Run shell commands in background threads and report each result.",
    )
    p.add_argument("commands", nargs="+", metavar="COMMAND", help="command line passed to the shell as-is")
    p.add_argument("--log-level", default=None, help="console log level (default: settings)")
    p.add_argument("--timeout", type=float, default=None, help="seconds to wait for all commands")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()

    level_name = str(args.log_level or settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    runner = runner_from_settings(settings)
    scheduler = ThreadScheduler(name_prefix="cli-exec")
    sink = _ConsoleSink(expected=len(args.commands))

    for idx, command in enumerate(args.commands):
        scheduler.submit(ExecutionTask(command, idx, sink, runner=runner).run)

    if not sink.all_done.wait(timeout=args.timeout):
        logger.error("Timed out after %ss; %d of %d commands finished.",
                     args.timeout, len(sink.results), sink.expected)
        return 1

    ok = all(r.success for r in sink.results.values())
    logger.debug("All %d commands finished (ok=%s).", sink.expected, ok)
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
