"""High-level project workflows: clean, generate, build, run and package.

Each workflow runs on its own background thread and reports a single boolean
through a Future. All but clean are one external tool invocation through the
owned :class:`ProcessRunner`; clean is a direct, best-effort filesystem sweep.
"""

from __future__ import annotations

import logging
import os
import shutil
import threading
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path
from typing import Any

from engine_launcher.launcher.commands import (
    build_command,
    default_package_dir,
    editor_target,
    generate_project_files_command,
    package_command,
    run_command,
)
from engine_launcher.launcher.deferred import start_deferred
from engine_launcher.launcher.platforms import (
    BuildConfiguration,
    EngineLayout,
    Platform,
    build_config_to_string,
    build_platform_id,
    current_platform,
    platform_to_string,
)
from engine_launcher.launcher.process.runner import OutputSink, ProcessRunner

logger = logging.getLogger(__name__)

# Derived-artifact folders removed from the project root by clean.
CLEAN_FOLDERS: tuple[str, ...] = (
    "Binaries",
    "DerivedDataCache",
    "Intermediate",
    "Saved",
    "Script",
)

# Removed from every immediate subdirectory of <project>/Plugins.
PLUGIN_CLEAN_FOLDERS: tuple[str, ...] = ("Binaries", "Intermediate")


class ProjectOperations:
    """Translate workflows into tool invocations through one owned runner.

    Overlapping calls are not queued or rejected here; callers check
    :meth:`is_running` before starting another workflow.
    """

    def __init__(
        self,
        log_callback: OutputSink,
        *,
        runner: ProcessRunner | None = None,
        host: Platform | None = None,
    ) -> None:
        """Initialize the operations.

        Args:
            log_callback: Sink for progress and error lines; also used as the
                runner's output sink unless ``runner`` is given.
            runner: Process runner to execute tools with.
            host: Platform whose tool layout and tokens are used. Defaults to
                the current platform.
        """
        self._log = log_callback
        self._runner = runner or ProcessRunner(log_callback)
        self._host = host or current_platform()
        # Validates that the host can actually run the engine tools.
        build_platform_id(self._host)

        self._busy = threading.Event()
        self._cancelled = threading.Event()

    @property
    def host(self) -> Platform:
        return self._host

    def is_running(self) -> bool:
        """True while a submitted workflow or its child process is in flight."""

        return self._busy.is_set() or self._runner.is_running()

    def cancel(self) -> None:
        """Cancel the in-flight workflow, including one whose tool has not started yet."""

        if self._busy.is_set():
            self._cancelled.set()
        self._runner.cancel()

    def clean(self, project_path: Path) -> Future[bool]:
        return self._submit("clean", self._clean, project_path=Path(project_path))

    def generate_project_files(self, engine_path: Path, uproject_path: Path) -> Future[bool]:
        return self._submit(
            "generate",
            self._generate_project_files,
            engine_path=Path(engine_path),
            uproject_path=Path(uproject_path),
        )

    def build(
        self,
        engine_path: Path,
        uproject_path: Path,
        configuration: BuildConfiguration = BuildConfiguration.DEVELOPMENT,
    ) -> Future[bool]:
        return self._submit(
            "build",
            self._build,
            engine_path=Path(engine_path),
            uproject_path=Path(uproject_path),
            configuration=configuration,
        )

    def run(self, engine_path: Path, uproject_path: Path, additional_args: str = "") -> Future[bool]:
        return self._submit(
            "run",
            self._run,
            engine_path=Path(engine_path),
            uproject_path=Path(uproject_path),
            additional_args=additional_args,
        )

    def package(
        self,
        engine_path: Path,
        uproject_path: Path,
        platform: Platform,
        output_path: Path | None = None,
    ) -> Future[bool]:
        uproject_path = Path(uproject_path)
        if output_path is None:
            output_path = default_package_dir(uproject_path, platform)
        return self._submit(
            "package",
            self._package,
            engine_path=Path(engine_path),
            uproject_path=uproject_path,
            platform=platform,
            output_path=Path(output_path),
        )

    def _submit(self, name: str, fn: Callable[..., bool], **kwargs: Any) -> Future[bool]:
        self._cancelled.clear()
        self._busy.set()
        try:
            return start_deferred(
                self._tracked,
                name=f"operation-{name}",
                kwargs={"name": name, "fn": fn, "kwargs": kwargs},
            )
        except BaseException:
            self._busy.clear()
            raise

    def _tracked(self, *, name: str, fn: Callable[..., bool], kwargs: dict[str, Any]) -> bool:
        try:
            success = fn(**kwargs)
            logger.info("Workflow finished", extra={"workflow": name, "success": success})
            return success
        finally:
            self._busy.clear()

    def _layout(self, engine_path: Path) -> EngineLayout:
        return EngineLayout(root=engine_path, host=self._host)

    def _execute(self, command: str) -> bool:
        if self._cancelled.is_set():
            self._log("Cancelled before the command started", True)
            return False

        future = self._runner.execute_async(command)
        # A cancel that arrived before the runner was marked running was a no-op there.
        if self._cancelled.is_set():
            self._runner.cancel()
        return future.result() == 0

    def _clean(self, *, project_path: Path) -> bool:
        self._log(f"Cleaning project: {project_path}", False)

        targets = [project_path / folder for folder in CLEAN_FOLDERS]
        success = True

        plugins = project_path / "Plugins"
        if plugins.is_dir():
            try:
                plugin_dirs = sorted(p for p in plugins.iterdir() if p.is_dir())
            except OSError as e:
                self._log(f"Failed to clean plugins: {e}", True)
                success = False
                plugin_dirs = []
            for plugin in plugin_dirs:
                targets.extend(plugin / folder for folder in PLUGIN_CLEAN_FOLDERS)

        for target in targets:
            if not self._remove(target):
                success = False

        if success:
            self._log("[DONE] Project cleaned successfully", False)
        else:
            self._log("[ERR] Project clean finished with errors", True)
        return success

    def _remove(self, path: Path) -> bool:
        if not os.path.lexists(path):
            return True
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            logger.warning("Failed to delete", extra={"path": str(path), "error": str(e)})
            self._log(f"Failed to delete {path}: {e}", True)
            return False

        self._log(f"Deleted: {path}", False)
        return True

    def _generate_project_files(self, *, engine_path: Path, uproject_path: Path) -> bool:
        self._log("Generating project files...", False)
        command = generate_project_files_command(self._layout(engine_path), uproject_path)
        return self._execute(command)

    def _build(
        self, *, engine_path: Path, uproject_path: Path, configuration: BuildConfiguration
    ) -> bool:
        target = editor_target(uproject_path)
        self._log(
            f"Building {target} ({build_platform_id(self._host)} "
            f"{build_config_to_string(configuration)})...",
            False,
        )
        command = build_command(self._layout(engine_path), uproject_path, configuration)
        return self._execute(command)

    def _run(self, *, engine_path: Path, uproject_path: Path, additional_args: str) -> bool:
        self._log("Launching project...", False)
        command = run_command(self._layout(engine_path), uproject_path, additional_args)
        return self._execute(command)

    def _package(
        self, *, engine_path: Path, uproject_path: Path, platform: Platform, output_path: Path
    ) -> bool:
        self._log(f"Packaging project for {platform_to_string(platform)}...", False)
        command = package_command(self._layout(engine_path), uproject_path, platform, output_path)
        return self._execute(command)
