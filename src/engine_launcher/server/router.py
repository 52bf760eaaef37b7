"""Launcher REST API.

All routes are mounted under `/api`.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, HTTPException, Query, Request

from engine_launcher import __version__
from engine_launcher.launcher.catalog import EngineInstall, ProjectEntry
from engine_launcher.launcher.session import (
    EngineNotFound,
    LauncherSession,
    OperationInProgress,
    ProjectNotFound,
    WorkflowRequest,
)
from engine_launcher.server.models import ApiLogLine, OperationRequest, OperationState

router = APIRouter()


def _session(request: Request) -> LauncherSession:
    session = getattr(request.app.state, "session", None)
    if not isinstance(session, LauncherSession):
        raise HTTPException(status_code=500, detail="Launcher session not configured")
    return session


def _state(session: LauncherSession) -> OperationState:
    current = session.current()
    if current is None:
        return OperationState(running=session.is_busy())
    return OperationState(
        running=session.is_busy(),
        workflow=current.workflow,
        project=current.project,
        result=current.result(),
    )


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}


@router.get("/engines", response_model=list[EngineInstall])
def list_engines(request: Request) -> list[EngineInstall]:
    return _session(request).catalog.engines


@router.get("/projects", response_model=list[ProjectEntry])
def list_projects(request: Request) -> list[ProjectEntry]:
    return _session(request).catalog.projects


@router.post("/operations", response_model=OperationState, status_code=202)
def start_operation(body: OperationRequest, request: Request) -> OperationState:
    session = _session(request)
    try:
        project = session.resolve_project(body.project)
        session.start(
            WorkflowRequest(
                workflow=body.workflow,
                project=project,
                configuration=body.configuration,
                platform=body.platform,
                extra_args=body.extra_args,
                output_dir=Path(body.output_dir) if body.output_dir else None,
            )
        )
    except OperationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except (ProjectNotFound, EngineNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return _state(session)


@router.get("/operations/current", response_model=OperationState)
def current_operation(request: Request) -> OperationState:
    return _state(_session(request))


@router.post("/operations/cancel", response_model=OperationState)
def cancel_operation(request: Request) -> OperationState:
    session = _session(request)
    session.cancel()
    return _state(session)


@router.get("/logs", response_model=list[ApiLogLine])
def get_logs(
    request: Request,
    limit: int | None = Query(default=None, ge=1),
) -> list[ApiLogLine]:
    lines = _session(request).log.snapshot(limit)
    return [
        ApiLogLine(message=line.message, is_error=line.is_error, timestamp=line.timestamp)
        for line in lines
    ]


@router.delete("/logs", status_code=204)
def clear_logs(request: Request) -> None:
    _session(request).log.clear()
