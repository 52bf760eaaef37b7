from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from engine_launcher.launcher.main import _wait, main

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh syntax")


@pytest.fixture(autouse=True)
def _quiet_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LAUNCHER_POLL_INTERVAL_SECONDS", "0.05")
    for name in ("LAUNCHER_CONFIG_DIR", "LAUNCHER_MAX_LOG_LINES", "LAUNCHER_READ_CHUNK_SIZE"):
        monkeypatch.delenv(name, raising=False)

    yield

    root.handlers[:] = handlers
    root.setLevel(level)


@posix_only
def test_exec_prints_output_and_succeeds(capsys) -> None:
    assert main(["exec", "echo hello"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == [
        "Executing: echo hello",
        "hello",
        "[DONE] Command completed successfully",
    ]


@posix_only
def test_exec_failure_goes_to_stderr(capsys) -> None:
    assert main(["exec", "exit 3"]) == 1

    assert "[ERR] Command failed with code: 3" in capsys.readouterr().err


def test_clean_by_manifest(capsys, project_dir: Path) -> None:
    (project_dir / "Intermediate").mkdir()

    code = main(["clean", "--manifest", str(project_dir / "MyGame.uproject")])

    assert code == 0
    assert not (project_dir / "Intermediate").exists()
    assert "[DONE] Project cleaned successfully" in capsys.readouterr().out


@posix_only
def test_build_with_missing_engine_tools_fails(capsys, config_dir: Path) -> None:
    code = main(["--config-dir", str(config_dir), "build", "--project", "MyGame"])

    captured = capsys.readouterr()
    assert code == 1
    assert "Building MyGameEditor (" in captured.out
    assert "[ERR] Command failed with code:" in captured.err


def test_unknown_engine_is_a_configuration_error(capsys, project_dir: Path, tmp_path: Path) -> None:
    code = main(
        [
            "--config-dir",
            str(tmp_path / "empty"),
            "generate",
            "--manifest",
            str(project_dir / "MyGame.uproject"),
        ]
    )

    assert code == 2
    assert "Engine version not found: 5.3" in capsys.readouterr().err


def test_unknown_project_is_a_configuration_error(capsys, config_dir: Path) -> None:
    code = main(["--config-dir", str(config_dir), "clean", "--project", "Unknown"])

    assert code == 2
    assert "Project not found: Unknown" in capsys.readouterr().err


def test_list_prints_catalog(capsys, config_dir: Path) -> None:
    assert main(["--config-dir", str(config_dir), "list"]) == 0

    out = capsys.readouterr().out
    assert "5.3  UE 5.3" in out
    assert "MyGame  [5.3]" in out


def test_invalid_settings_exit_with_2(capsys, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LAUNCHER_MAX_LOG_LINES", "0")

    assert main(["list"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_unknown_platform_is_rejected_by_the_parser(project_dir: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["package", "--manifest", str(project_dir / "MyGame.uproject"), "--platform", "PS5"])

    assert excinfo.value.code == 2


class _InterruptedFuture:
    def __init__(self) -> None:
        self.calls = 0

    def result(self, timeout: float | None = None):
        self.calls += 1
        raise KeyboardInterrupt


def test_second_interrupt_stops_waiting(capsys) -> None:
    future = _InterruptedFuture()
    cancels: list[None] = []

    assert _wait(future, lambda: cancels.append(None), 0.05) is None

    assert len(cancels) == 1
    assert future.calls == 2
    err = capsys.readouterr().err
    assert "Cancelling..." in err
    assert "Interrupted" in err


def test_first_interrupt_cancels_and_waits_for_the_result() -> None:
    outcomes = iter([KeyboardInterrupt(), 0])
    cancels: list[None] = []

    class _Future:
        def result(self, timeout: float | None = None):
            outcome = next(outcomes)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

    assert _wait(_Future(), lambda: cancels.append(None), 0.05) == 0
    assert len(cancels) == 1
