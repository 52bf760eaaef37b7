"""Test configuration and fixtures."""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path

import pytest

from engine_launcher.launcher.deferred import start_deferred


class RecordingSink:
    """Collects ``(message, is_error)`` pairs from any thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._lines: list[tuple[str, bool]] = []

    def __call__(self, message: str, is_error: bool) -> None:
        with self._lock:
            self._lines.append((message, is_error))

    @property
    def lines(self) -> list[tuple[str, bool]]:
        with self._lock:
            return list(self._lines)

    @property
    def messages(self) -> list[str]:
        return [message for message, _ in self.lines]

    @property
    def errors(self) -> list[str]:
        return [message for message, is_error in self.lines if is_error]


class FakeRunner:
    """Stands in for ProcessRunner; records commands instead of spawning them."""

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.commands: list[str] = []
        self.cancel_calls = 0
        self.release = threading.Event()
        self.release.set()

    def execute(self, command: str) -> int:
        self.commands.append(command)
        self.release.wait(timeout=10)
        return self.exit_code

    def execute_async(self, command: str) -> Future[int]:
        return start_deferred(self.execute, name="fake-runner", kwargs={"command": command})

    def is_running(self) -> bool:
        return False

    def cancel(self) -> None:
        self.cancel_calls += 1


def _wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    """Poll a predicate until it holds or the timeout elapses."""
    return _wait_until


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project folder with a manifest associated with engine 5.3."""
    project = tmp_path / "MyGame"
    project.mkdir()
    (project / "MyGame.uproject").write_text(
        json.dumps({"FileVersion": 3, "EngineAssociation": "5.3"}), encoding="utf-8"
    )
    return project


@pytest.fixture
def config_dir(tmp_path: Path, project_dir: Path) -> Path:
    """A config directory listing one engine and one project."""
    config = tmp_path / "config"
    config.mkdir()
    (config / "engines.json").write_text(
        json.dumps(
            {
                "engines": [
                    {
                        "association": "5.3",
                        "displayName": "UE 5.3",
                        "path": str(tmp_path / "UE_5.3"),
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    (config / "projects.json").write_text(
        json.dumps(
            {
                "projects": [
                    {
                        "name": "MyGame",
                        "path": str(project_dir),
                        "uprojectPath": str(project_dir / "MyGame.uproject"),
                        "engineVersion": "5.3",
                        "commandLineArgs": "-log",
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    return config
