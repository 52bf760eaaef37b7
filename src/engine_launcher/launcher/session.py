"""One launcher session: catalog, log buffer and a single in-flight workflow."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from engine_launcher.launcher.catalog import LauncherCatalog, ProjectEntry
from engine_launcher.launcher.config import LauncherSettings
from engine_launcher.launcher.log_buffer import LogBuffer
from engine_launcher.launcher.operations import ProjectOperations
from engine_launcher.launcher.platforms import BuildConfiguration, Platform
from engine_launcher.launcher.process.factory import ProcessBackendFactory
from engine_launcher.launcher.process.runner import ProcessRunner

logger = logging.getLogger(__name__)


class Workflow(str, Enum):
    CLEAN = "clean"
    GENERATE = "generate"
    BUILD = "build"
    RUN = "run"
    PACKAGE = "package"


@dataclass(frozen=True, slots=True)
class OperationInProgress(Exception):
    """Raised when a workflow is requested while another is still running."""

    workflow: Workflow | None = None

    def __str__(self) -> str:
        if self.workflow is None:
            return "Another operation is already running"
        return f"Another operation is already running: {self.workflow.value}"


@dataclass(frozen=True, slots=True)
class EngineNotFound(Exception):
    engine_version: str

    def __str__(self) -> str:
        return f"Engine version not found: {self.engine_version}"


@dataclass(frozen=True, slots=True)
class ProjectNotFound(Exception):
    project: str

    def __str__(self) -> str:
        return f"Project not found: {self.project}"


@dataclass(frozen=True, slots=True)
class WorkflowRequest:
    workflow: Workflow
    project: ProjectEntry
    configuration: BuildConfiguration = BuildConfiguration.DEVELOPMENT
    # Package target; defaults to the host platform.
    platform: Platform | None = None
    # None means the project's own command line arguments.
    extra_args: str | None = None
    output_dir: Path | None = None
    engine_root: Path | None = None


@dataclass(frozen=True, slots=True)
class CurrentOperation:
    workflow: Workflow
    project: str
    future: Future[bool]

    def result(self) -> bool | None:
        """None while pending; a workflow that raised counts as failed."""

        if not self.future.done():
            return None
        if self.future.cancelled() or self.future.exception() is not None:
            return False
        return self.future.result()


class LauncherSession:
    def __init__(
        self,
        catalog: LauncherCatalog,
        *,
        log: LogBuffer | None = None,
        operations: ProjectOperations | None = None,
        max_log_lines: int = 500,
    ) -> None:
        self._catalog = catalog
        self._log = log or LogBuffer(max_log_lines)
        self._operations = operations or ProjectOperations(self._log.as_sink())

        self._lock = threading.Lock()
        self._current: CurrentOperation | None = None

    @classmethod
    def from_settings(cls, settings: LauncherSettings) -> LauncherSession:
        catalog = LauncherCatalog.from_files(settings.engines_file, settings.projects_file)
        log = LogBuffer(settings.max_log_lines)
        runner = ProcessRunner(
            log.as_sink(),
            backend=ProcessBackendFactory.create(chunk_size=settings.read_chunk_size),
            poll_interval_seconds=settings.poll_interval_seconds,
        )
        return cls(catalog, log=log, operations=ProjectOperations(log.as_sink(), runner=runner))

    @property
    def catalog(self) -> LauncherCatalog:
        return self._catalog

    @property
    def log(self) -> LogBuffer:
        return self._log

    @property
    def operations(self) -> ProjectOperations:
        return self._operations

    def is_busy(self) -> bool:
        return self._operations.is_running()

    def current(self) -> CurrentOperation | None:
        return self._current

    def resolve_project(self, name_or_manifest: str | Path) -> ProjectEntry:
        project = self._catalog.find_project(name_or_manifest)
        if project is None:
            raise ProjectNotFound(project=str(name_or_manifest))
        return project

    def start(self, request: WorkflowRequest) -> CurrentOperation:
        """Dispatch ``request`` unless a workflow is already running.

        Raises:
            OperationInProgress: Another workflow has not finished yet.
            EngineNotFound: The project's engine is not in the catalog.
        """
        with self._lock:
            if self._operations.is_running():
                previous = self._current.workflow if self._current else None
                raise OperationInProgress(workflow=previous)

            future = self._dispatch(request)
            self._current = CurrentOperation(
                workflow=request.workflow,
                project=request.project.name,
                future=future,
            )
            logger.info(
                "Workflow started",
                extra={"workflow": request.workflow.value, "project": request.project.name},
            )
            return self._current

    def poll(self) -> bool | None:
        current = self._current
        return None if current is None else current.result()

    def wait(self, timeout: float | None = None) -> bool | None:
        """Block until the current workflow finishes, or ``timeout`` elapses."""

        current = self._current
        if current is None:
            return None
        concurrent.futures.wait([current.future], timeout=timeout)
        return current.result()

    def cancel(self) -> None:
        self._operations.cancel()

    def _engine_root(self, request: WorkflowRequest) -> Path:
        if request.engine_root is not None:
            return request.engine_root

        version = request.project.engine_version
        engine = self._catalog.find_engine(version)
        if engine is None:
            self._log.append(f"Engine version not found: {version}", True)
            raise EngineNotFound(engine_version=version)
        return engine.path

    def _dispatch(self, request: WorkflowRequest) -> Future[bool]:
        project = request.project
        if request.workflow is Workflow.CLEAN:
            return self._operations.clean(project.path)

        engine_root = self._engine_root(request)
        if request.workflow is Workflow.GENERATE:
            return self._operations.generate_project_files(engine_root, project.uproject_path)
        if request.workflow is Workflow.BUILD:
            return self._operations.build(engine_root, project.uproject_path, request.configuration)
        if request.workflow is Workflow.RUN:
            extra_args = request.extra_args
            if extra_args is None:
                extra_args = project.command_line_args
            return self._operations.run(engine_root, project.uproject_path, extra_args)

        platform = request.platform or self._operations.host
        return self._operations.package(
            engine_root, project.uproject_path, platform, request.output_dir
        )
