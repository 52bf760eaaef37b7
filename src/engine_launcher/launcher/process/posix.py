"""POSIX backend: /bin/sh in its own session, selector-driven pipe reads."""

from __future__ import annotations

import logging
import os
import selectors
import signal
import subprocess

from engine_launcher.launcher.process.backend import (
    ABNORMAL_EXIT,
    ProcessBackend,
    SpawnedProcess,
    SpawnError,
)

logger = logging.getLogger(__name__)

SHELL = "/bin/sh"


class PosixProcess(SpawnedProcess):
    def __init__(self, popen: subprocess.Popen[bytes], chunk_size: int) -> None:
        if popen.stdout is None:
            raise ValueError("PosixProcess requires a piped stdout")
        self._popen = popen
        self._stdout = popen.stdout
        self._fd = popen.stdout.fileno()
        self._chunk_size = chunk_size
        self._selector = selectors.DefaultSelector()
        self._selector.register(self._fd, selectors.EVENT_READ)

    @property
    def pid(self) -> int:
        return self._popen.pid

    def read(self, timeout: float) -> bytes | None:
        if not self._selector.select(timeout):
            return None
        try:
            return os.read(self._fd, self._chunk_size)
        except OSError as e:
            logger.debug("Output pipe read failed", extra={"pid": self.pid, "error": str(e)})
            return b""

    def terminate(self) -> None:
        # The child leads its own process group, so the shell and everything it
        # started receive the signal.
        try:
            os.killpg(self._popen.pid, signal.SIGTERM)
        except ProcessLookupError:
            pass
        except PermissionError:
            self._popen.terminate()

    def close(self) -> None:
        self._selector.close()
        self._stdout.close()

    def wait(self) -> int:
        code = self._popen.wait()
        # Negative return codes mean "killed by signal".
        return code if code >= 0 else ABNORMAL_EXIT


class PosixBackend(ProcessBackend):
    """Runs commands as ``/bin/sh -c <command>`` (pipe + fork + exec)."""

    def spawn(self, command: str) -> PosixProcess:
        try:
            popen = subprocess.Popen(
                [SHELL, "-c", command],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                bufsize=0,
                start_new_session=True,
            )
        except OSError as e:
            raise SpawnError(command=command, reason=f"Failed to spawn {SHELL}: {e}") from e

        logger.debug("Spawned child process", extra={"pid": popen.pid})
        return PosixProcess(popen, self.chunk_size)
