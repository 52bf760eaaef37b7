"""Pydantic models for the REST server."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from engine_launcher.launcher.platforms import BuildConfiguration, Platform
from engine_launcher.launcher.session import Workflow


class OperationRequest(BaseModel):
    workflow: Workflow
    project: str = Field(min_length=1, description="Project name or manifest path")

    configuration: BuildConfiguration = BuildConfiguration.DEVELOPMENT
    platform: Platform | None = None
    extra_args: str | None = None
    output_dir: str | None = None


class OperationState(BaseModel):
    running: bool
    workflow: Workflow | None = None
    project: str | None = None
    result: bool | None = None


class ApiLogLine(BaseModel):
    message: str
    is_error: bool
    timestamp: datetime
