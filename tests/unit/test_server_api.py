from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from engine_launcher.launcher.catalog import LauncherCatalog
from engine_launcher.launcher.config import LauncherSettings
from engine_launcher.launcher.log_buffer import LogBuffer
from engine_launcher.launcher.operations import ProjectOperations
from engine_launcher.launcher.platforms import Platform
from engine_launcher.launcher.session import LauncherSession
from engine_launcher.server.app import create_app


@pytest.fixture
def session(config_dir: Path, fake_runner) -> LauncherSession:
    log = LogBuffer()
    operations = ProjectOperations(log.as_sink(), runner=fake_runner, host=Platform.LINUX)
    return LauncherSession(LauncherCatalog.load(config_dir), log=log, operations=operations)


@pytest.fixture
def client(session: LauncherSession, config_dir: Path) -> TestClient:
    settings = LauncherSettings(_env_file=None).model_copy(update={"config_dir": config_dir})
    return TestClient(create_app(settings=settings, session=session))


def test_health_and_catalog(client: TestClient) -> None:
    health = client.get("/api/health").json()
    assert health["status"] == "ok"
    assert "version" in health

    engines = client.get("/api/engines").json()
    assert engines[0]["association"] == "5.3"
    assert engines[0]["displayName"] == "UE 5.3"

    projects = client.get("/api/projects").json()
    assert [p["name"] for p in projects] == ["MyGame"]
    assert projects[0]["commandLineArgs"] == "-log"


def test_start_operation_and_read_logs(client: TestClient, session, fake_runner) -> None:
    resp = client.post("/api/operations", json={"workflow": "build", "project": "MyGame"})

    assert resp.status_code == 202
    body = resp.json()
    assert body["workflow"] == "build"
    assert body["project"] == "MyGame"

    assert session.wait(timeout=10) is True
    current = client.get("/api/operations/current").json()
    assert current == {"running": False, "workflow": "build", "project": "MyGame", "result": True}

    logs = client.get("/api/logs", params={"limit": 1}).json()
    assert logs[0]["message"] == "Building MyGameEditor (Linux Development)..."
    assert logs[0]["is_error"] is False

    assert client.delete("/api/logs").status_code == 204
    assert client.get("/api/logs").json() == []


def test_busy_session_rejects_new_operation(client: TestClient, session, fake_runner) -> None:
    fake_runner.release.clear()
    try:
        first = client.post("/api/operations", json={"workflow": "run", "project": "MyGame"})
        second = client.post("/api/operations", json={"workflow": "clean", "project": "MyGame"})

        assert first.status_code == 202
        assert first.json()["running"] is True
        assert second.status_code == 409

        cancel = client.post("/api/operations/cancel")
        assert cancel.status_code == 200
        assert fake_runner.cancel_calls >= 1
    finally:
        fake_runner.release.set()
    assert session.wait(timeout=10) is not None


def test_unknown_project_or_engine_is_404(client: TestClient, session) -> None:
    resp = client.post("/api/operations", json={"workflow": "build", "project": "Nope"})
    assert resp.status_code == 404

    project = session.catalog.projects[0]
    session.catalog.projects[0] = project.model_copy(update={"engine_version": "4.27"})

    resp = client.post("/api/operations", json={"workflow": "package", "project": "MyGame"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Engine version not found: 4.27"


def test_invalid_request_is_422(client: TestClient) -> None:
    resp = client.post("/api/operations", json={"workflow": "deploy", "project": "MyGame"})

    assert resp.status_code == 422


def test_idle_state(client: TestClient) -> None:
    assert client.get("/api/operations/current").json() == {
        "running": False,
        "workflow": None,
        "project": None,
        "result": None,
    }
