"""Run one command to completion while streaming its output.

The runner owns the running/cancelled state shared with observer threads and
forwards every output line to a sink as soon as the line is complete. It never
raises for process problems; every path ends in an exit code and a terminal
log line.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future

from engine_launcher.launcher.deferred import start_deferred
from engine_launcher.launcher.process.backend import (
    ABNORMAL_EXIT,
    ProcessBackend,
    SpawnedProcess,
    SpawnError,
)
from engine_launcher.launcher.process.factory import ProcessBackendFactory
from engine_launcher.launcher.process.lines import LineSplitter

logger = logging.getLogger(__name__)

OutputSink = Callable[[str, bool], None]

Command = str | Sequence[str]

DONE_MESSAGE = "[DONE] Command completed successfully"


def join_command(args: Sequence[str]) -> str:
    """Join arguments into one shell command, double-quoting any with whitespace."""

    parts: list[str] = []
    for arg in args:
        if any(ch.isspace() for ch in arg):
            parts.append(f'"{arg}"')
        else:
            parts.append(arg)
    return " ".join(parts)


class ProcessRunner:
    """Executes shell commands one at a time and streams their output.

    One instance is reused across sequential executions; callers must not start
    a second execution while :meth:`is_running` is true.
    """

    def __init__(
        self,
        output_sink: OutputSink | None = None,
        *,
        backend: ProcessBackend | None = None,
        poll_interval_seconds: float = 0.1,
    ) -> None:
        """Initialize the runner.

        Args:
            output_sink: Receives ``(line, is_error)`` for every output line.
            backend: Process backend; defaults to the one for the current host.
            poll_interval_seconds: Longest a single read waits for output before
                the cancellation flag is checked again.
        """
        self._sink = output_sink
        self._backend = backend or ProcessBackendFactory.create()
        self._poll_interval = poll_interval_seconds

        self._running = threading.Event()
        self._cancelled = threading.Event()
        self._runs = itertools.count(1)

    def is_running(self) -> bool:
        return self._running.is_set()

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Request early termination of the current execution.

        Does nothing when idle and never waits for the child to stop.
        """
        if not self._running.is_set():
            return
        logger.info("Cancellation requested")
        self._cancelled.set()

    def execute(self, command: Command) -> int:
        """Run ``command`` and block until it has exited.

        Returns:
            The child's exit code, or ``-1`` on spawn failure or abnormal
            termination.
        """
        self._begin()
        return self._execute(command)

    def execute_async(self, command: Command) -> Future[int]:
        """Run ``command`` on a background thread.

        :meth:`is_running` is already true when this returns.
        """
        self._begin()
        try:
            return start_deferred(
                self._execute,
                name=f"process-runner-{next(self._runs)}",
                kwargs={"command": command},
            )
        except BaseException:
            self._running.clear()
            raise

    def _begin(self) -> None:
        self._cancelled.clear()
        self._running.set()

    def _output(self, message: str, is_error: bool = False) -> None:
        if self._sink is None:
            return
        try:
            self._sink(message, is_error)
        except Exception:
            logger.exception("Output sink failed", extra={"line": message})

    def _execute(self, command: Command) -> int:
        try:
            line = command if isinstance(command, str) else join_command(command)

            if not line.strip():
                self._output("Nothing to execute: empty command", True)
                result = ABNORMAL_EXIT
            else:
                self._output(f"Executing: {line}")
                logger.info("Executing command", extra={"command": line})
                try:
                    result = self._run_child(line)
                except Exception as e:
                    logger.exception("Command execution failed", extra={"command": line})
                    self._output(f"Failed to execute command: {e}", True)
                    result = ABNORMAL_EXIT

            if result == 0:
                self._output(DONE_MESSAGE)
            else:
                self._output(f"[ERR] Command failed with code: {result}", True)

            logger.info("Command finished", extra={"command": line, "exit_code": result})
            return result
        finally:
            self._running.clear()

    def _run_child(self, command: str) -> int:
        try:
            process = self._backend.spawn(command)
        except SpawnError as e:
            logger.error("Spawn failed", extra={"command": command, "reason": e.reason})
            self._output(str(e), True)
            return ABNORMAL_EXIT

        try:
            self._stream(process)
        except BaseException:
            process.terminate()
            process.close()
            process.wait()
            raise

        process.close()
        return process.wait()

    def _stream(self, process: SpawnedProcess) -> None:
        splitter = LineSplitter()
        while True:
            if self._cancelled.is_set():
                logger.info("Terminating cancelled process", extra={"pid": process.pid})
                self._output("Cancelled, terminating process", True)
                process.terminate()
                return

            chunk = process.read(self._poll_interval)
            if chunk is None:
                continue
            if not chunk:
                break
            for line in splitter.feed(chunk):
                self._output(line)

        tail = splitter.flush()
        if tail is not None:
            self._output(tail)
