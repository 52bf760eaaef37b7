"""Windows backend: cmd.exe in a new process group, handle reads on a pump thread.

Anonymous pipe handles cannot be select()ed on Windows, so a daemon thread
blocks on the pipe and hands chunks over through a queue. The runner waits on
the queue with a timeout.
"""

from __future__ import annotations

import logging
import os
import queue
import signal
import subprocess
import threading

from engine_launcher.launcher.process.backend import ProcessBackend, SpawnedProcess, SpawnError

logger = logging.getLogger(__name__)

# subprocess only defines this constant on Windows.
CREATE_NEW_PROCESS_GROUP = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0x00000200)


class WindowsProcess(SpawnedProcess):
    def __init__(self, popen: subprocess.Popen[bytes], chunk_size: int) -> None:
        if popen.stdout is None:
            raise ValueError("WindowsProcess requires a piped stdout")
        self._popen = popen
        self._stdout = popen.stdout
        self._chunk_size = chunk_size
        self._chunks: queue.Queue[bytes] = queue.Queue()
        self._eof = False

        self._pump = threading.Thread(
            target=self._pump_output,
            name=f"pipe-reader-{popen.pid}",
            daemon=True,
        )
        self._pump.start()

    @property
    def pid(self) -> int:
        return self._popen.pid

    def _pump_output(self) -> None:
        fd = self._stdout.fileno()
        try:
            while True:
                chunk = os.read(fd, self._chunk_size)
                if not chunk:
                    break
                self._chunks.put(chunk)
        except OSError as e:
            logger.debug("Output pipe read failed", extra={"pid": self.pid, "error": str(e)})
        finally:
            self._stdout.close()
            self._chunks.put(b"")

    def read(self, timeout: float) -> bytes | None:
        if self._eof:
            return b""
        try:
            chunk = self._chunks.get(timeout=timeout)
        except queue.Empty:
            return None
        if not chunk:
            self._eof = True
        return chunk

    def terminate(self) -> None:
        # CTRL_BREAK reaches every process in the group and lets console tools
        # shut down cleanly; fall back to TerminateProcess if it cannot be sent.
        ctrl_break = getattr(signal, "CTRL_BREAK_EVENT", None)
        if ctrl_break is not None:
            try:
                os.kill(self._popen.pid, ctrl_break)
                return
            except OSError as e:
                logger.debug("CTRL_BREAK failed", extra={"pid": self.pid, "error": str(e)})
        try:
            self._popen.terminate()
        except OSError as e:
            logger.debug("Terminate failed", extra={"pid": self.pid, "error": str(e)})

    def close(self) -> None:
        # The pump keeps draining (so the child never blocks on a full pipe) and
        # closes the handle itself once the child's end goes away.
        self._eof = True

    def wait(self) -> int:
        return self._popen.wait()


class WindowsBackend(ProcessBackend):
    """Runs commands through ``cmd.exe /c`` (handle-based pipes)."""

    def spawn(self, command: str) -> WindowsProcess:
        try:
            popen = subprocess.Popen(
                command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                bufsize=0,
                creationflags=CREATE_NEW_PROCESS_GROUP,
            )
        except OSError as e:
            raise SpawnError(command=command, reason=f"Failed to execute command: {e}") from e

        logger.debug("Spawned child process", extra={"pid": popen.pid})
        return WindowsProcess(popen, self.chunk_size)
