# src/threaded_exec/execution/runner.py

from __future__ import annotations

"""
Command runner.

Runs one command line under the platform shell on the current thread:
- spawn the shell with a single pipe carrying stdout+stderr,
- drain the pipe in fixed-size chunks until end-of-stream,
- close the pipe and wait for the exit status.

Failures to spawn are returned as data (RunOutcome.spawn_failed), never raised.
Platform differences live in the backends; CommandRunner itself never branches on the OS.
"""

import codecs
import contextlib
import logging
import os
import subprocess
import sys

from ..config import Settings, get_settings
from ..core.ports import ProcessBackend, ProcessHandle
from .models import OperatingSystem, RunOutcome

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096


def current_os() -> OperatingSystem:
    if sys.platform.startswith("win"):
        return OperatingSystem.WINDOWS
    if sys.platform.startswith("linux"):
        return OperatingSystem.LINUX
    if sys.platform == "darwin":
        return OperatingSystem.MAC
    return OperatingSystem.UNKNOWN


class PosixShellBackend:
    """`/bin/sh -c <command>` with stderr folded into stdout."""

    def __init__(self, shell: str | None = None) -> None:
        self.shell = shell or "/bin/sh"

    def spawn(self, command: str) -> ProcessHandle:
        # bufsize=0: reads return whatever the pipe has, possibly less than requested.
        return subprocess.Popen(
            [self.shell, "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            bufsize=0,
        )


class WindowsShellBackend:
    """`cmd.exe /c <command>` with stderr folded into stdout."""

    def __init__(self, shell: str | None = None) -> None:
        self.shell = shell or os.environ.get("COMSPEC", "cmd.exe")

    def spawn(self, command: str) -> ProcessHandle:
        return subprocess.Popen(
            f'"{self.shell}" /c "{command}"',
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            bufsize=0,
        )


def default_backend(shell: str | None = None) -> ProcessBackend:
    if current_os() == OperatingSystem.WINDOWS:
        return WindowsShellBackend(shell)
    return PosixShellBackend(shell)


def _translate_status(returncode: int) -> tuple[int, int | None]:
    """Fold signal termination (negative returncode) into the shell's 128+N convention."""
    if returncode < 0:
        sig = -returncode
        return 128 + sig, sig
    return returncode, None


class CommandRunner:
    """
    Synchronous command execution with combined output capture.

    One call = one child process + one pipe; no state survives between calls,
    so a single runner may be shared by many worker threads.
    """

    def __init__(
        self,
        backend: ProcessBackend | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        encoding: str = "utf-8",
        errors: str = "replace",
    ) -> None:
        if int(chunk_size) < 1:
            raise ValueError("chunk_size must be >= 1")
        # Unknown codec / error handler names fail here (LookupError), not after a command ran.
        codecs.lookup(encoding)
        codecs.lookup_error(errors)

        self.backend = backend if backend is not None else default_backend()
        self.chunk_size = int(chunk_size)
        self.encoding = encoding
        self.errors = errors

    def run(self, command: str) -> RunOutcome:
        try:
            proc = self.backend.spawn(command)
        except (OSError, ValueError):
            logger.exception("spawn failed command=%r", command)
            return RunOutcome.spawn_failure()

        stream = proc.stdout
        if stream is None:
            logger.error("spawned process has no output pipe command=%r", command)
            with contextlib.suppress(OSError):
                proc.wait()
            return RunOutcome.spawn_failure()

        try:
            chunks = self._drain(stream, command)
        finally:
            with contextlib.suppress(OSError):
                stream.close()
            returncode = self._wait(proc, command)

        output = self._decode(b"".join(chunks), command)

        if returncode is None:
            return RunOutcome(output=output, exit_status=None, spawn_failed=False)

        exit_status, term_signal = _translate_status(returncode)
        logger.debug(
            "command finished status=%s signal=%s bytes=%d command=%r",
            exit_status,
            term_signal,
            sum(len(c) for c in chunks),
            command,
        )
        return RunOutcome(
            output=output,
            exit_status=exit_status,
            spawn_failed=False,
            term_signal=term_signal,
        )

    def _drain(self, stream, command: str) -> list[bytes]:
        chunks: list[bytes] = []
        while True:
            try:
                chunk = stream.read(self.chunk_size)
            except OSError:
                # Keep what we already have; treat the error as end-of-stream.
                logger.warning(
                    "read failed after %d chunks, keeping partial output command=%r",
                    len(chunks),
                    command,
                    exc_info=True,
                )
                break

            if not chunk:
                break
            chunks.append(chunk)
        return chunks

    @staticmethod
    def _wait(proc: ProcessHandle, command: str) -> int | None:
        try:
            return int(proc.wait())
        except OSError:
            logger.exception("wait failed command=%r", command)
            return None

    def _decode(self, raw: bytes, command: str) -> str:
        try:
            return raw.decode(self.encoding, errors=self.errors)
        except UnicodeDecodeError:
            logger.warning(
                "output is not valid %s (errors=%s), decoding with replacement command=%r",
                self.encoding,
                self.errors,
                command,
                exc_info=True,
            )
            return raw.decode(self.encoding, errors="replace")


def runner_from_settings(settings: Settings | None = None) -> CommandRunner:
    """Build a CommandRunner from settings (chunk size, decoding, shell override)."""
    s = settings or get_settings()
    return CommandRunner(
        default_backend(s.shell),
        chunk_size=s.chunk_size,
        encoding=s.encoding,
        errors=s.decode_errors,
    )
