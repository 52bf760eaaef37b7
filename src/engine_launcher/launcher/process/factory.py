"""Factory for creating process backends."""

import logging

from engine_launcher.launcher.platforms import Platform, current_platform
from engine_launcher.launcher.process.backend import ProcessBackend
from engine_launcher.launcher.process.posix import PosixBackend
from engine_launcher.launcher.process.windows import WindowsBackend

logger = logging.getLogger(__name__)


class ProcessBackendFactory:
    """Factory for creating process backend instances."""

    @staticmethod
    def create(host: Platform | None = None, chunk_size: int = 256) -> ProcessBackend:
        """Create the process backend for a host platform.

        Args:
            host: Platform the commands will run on. Defaults to the current one.
            chunk_size: Bytes read from the output pipe per iteration.

        Returns:
            Configured backend instance.

        Raises:
            ValueError: If ``host`` cannot run a launcher (e.g. Android).
        """
        host = host or current_platform()
        logger.debug(f"Creating process backend for: {host.value}")

        if host is Platform.WINDOWS:
            return WindowsBackend(chunk_size=chunk_size)
        elif host in (Platform.LINUX, Platform.MAC):
            return PosixBackend(chunk_size=chunk_size)
        else:
            raise ValueError(f"Unsupported host platform: {host.value}")
