"""Process execution package initialization."""

from engine_launcher.launcher.process.backend import (
    ABNORMAL_EXIT,
    ProcessBackend,
    SpawnedProcess,
    SpawnError,
)
from engine_launcher.launcher.process.factory import ProcessBackendFactory
from engine_launcher.launcher.process.runner import OutputSink, ProcessRunner, join_command

__all__ = [
    "ABNORMAL_EXIT",
    "OutputSink",
    "ProcessBackend",
    "ProcessBackendFactory",
    "ProcessRunner",
    "SpawnError",
    "SpawnedProcess",
    "join_command",
]
