"""Abstract base classes for process backends.

A backend knows how to start a shell command with stdout and stderr merged
into one pipe, hand out that output in chunks and ask the child to stop.
Everything above that (line splitting, cancellation, exit-code reporting)
lives in :mod:`engine_launcher.launcher.process.runner` and is shared by all
backends.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

# Exit code reported for spawn failures and abnormal (signal) termination.
ABNORMAL_EXIT = -1


@dataclass(frozen=True, slots=True)
class SpawnError(Exception):
    """Raised when the child process (or its output pipe) cannot be created."""

    command: str
    reason: str

    def __str__(self) -> str:
        return self.reason


class SpawnedProcess(ABC):
    """A running child whose combined output can be read incrementally."""

    @property
    @abstractmethod
    def pid(self) -> int:
        """Process id of the spawned child."""

    @abstractmethod
    def read(self, timeout: float) -> bytes | None:
        """Read the next chunk of output.

        Args:
            timeout: Seconds to wait for output before giving up.

        Returns:
            The chunk, ``b""`` once the stream is exhausted, or ``None`` if no
            output arrived within ``timeout``.
        """

    @abstractmethod
    def terminate(self) -> None:
        """Ask the child to stop (graceful signal, not a forced kill)."""

    @abstractmethod
    def close(self) -> None:
        """Release the read end of the output pipe."""

    @abstractmethod
    def wait(self) -> int:
        """Wait for the child to exit.

        Returns:
            The child's exit status, or ``ABNORMAL_EXIT`` if it did not exit
            normally.
        """


class ProcessBackend(ABC):
    """Spawns shell commands for one family of operating systems."""

    def __init__(self, chunk_size: int = 256) -> None:
        self.chunk_size = chunk_size

    @abstractmethod
    def spawn(self, command: str) -> SpawnedProcess:
        """Start ``command`` through the host shell.

        Raises:
            SpawnError: If the pipe or the process cannot be created.
        """
