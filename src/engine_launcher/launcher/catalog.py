"""Read-only catalog of installed engines and registered projects.

Both files are JSON documents kept in the launcher config directory:

- ``engines.json``: ``{"engines": [{"association", "displayName", "path"}]}``
- ``projects.json``: ``{"projects": [{"name", "path", "uprojectPath",
  "engineVersion", "commandLineArgs"}]}``

A missing or unreadable file is not fatal; the catalog is simply empty.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

ENGINES_FILE_NAME = "engines.json"
PROJECTS_FILE_NAME = "projects.json"


class EngineInstall(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    association: str
    display_name: str = Field(default="", alias="displayName")
    path: Path


class ProjectEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    path: Path
    uproject_path: Path = Field(alias="uprojectPath")
    engine_version: str = Field(default="", alias="engineVersion")
    command_line_args: str = Field(default="", alias="commandLineArgs")

    @classmethod
    def from_manifest(cls, uproject_path: Path) -> ProjectEntry:
        """Describe a project directly from its manifest file."""

        uproject_path = Path(uproject_path)
        return cls(
            name=uproject_path.stem,
            path=uproject_path.parent,
            uproject_path=uproject_path,
            engine_version=read_engine_association(uproject_path),
        )


def read_engine_association(uproject_path: Path) -> str:
    """Return the manifest's ``EngineAssociation``, or ``""`` when unreadable."""

    try:
        raw = json.loads(Path(uproject_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(
            "Failed to read engine association",
            extra={"path": str(uproject_path), "error": str(e)},
        )
        return ""
    if not isinstance(raw, dict):
        return ""
    value = raw.get("EngineAssociation", "")
    return value if isinstance(value, str) else ""


def _load_items(path: Path, key: str) -> list[dict[str, Any]]:
    if not path.exists():
        logger.info("Catalog file does not exist", extra={"path": str(path)})
        return []
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to load catalog file", extra={"path": str(path), "error": str(e)})
        return []
    items = raw.get(key) if isinstance(raw, dict) else None
    if not isinstance(items, list):
        logger.warning("Catalog file has no list", extra={"path": str(path), "key": key})
        return []
    return [item for item in items if isinstance(item, dict)]


def _load_engines(path: Path) -> list[EngineInstall]:
    engines: list[EngineInstall] = []
    for item in _load_items(path, "engines"):
        try:
            engines.append(EngineInstall.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping invalid engine entry", extra={"path": str(path), "error": str(e)})
    return engines


def _load_projects(path: Path) -> list[ProjectEntry]:
    projects: list[ProjectEntry] = []
    for item in _load_items(path, "projects"):
        try:
            project = ProjectEntry.model_validate(item)
        except ValidationError as e:
            logger.warning("Skipping invalid project entry", extra={"path": str(path), "error": str(e)})
            continue
        if not project.uproject_path.exists():
            logger.warning("Project no longer exists, skipping", extra={"project": project.name})
            continue
        projects.append(project)
    return projects


@dataclass
class LauncherCatalog:
    engines: list[EngineInstall] = field(default_factory=list)
    projects: list[ProjectEntry] = field(default_factory=list)

    @classmethod
    def load(cls, config_dir: Path) -> LauncherCatalog:
        config_dir = Path(config_dir)
        return cls.from_files(config_dir / ENGINES_FILE_NAME, config_dir / PROJECTS_FILE_NAME)

    @classmethod
    def from_files(cls, engines_file: Path, projects_file: Path) -> LauncherCatalog:
        catalog = cls(
            engines=_load_engines(Path(engines_file)),
            projects=_load_projects(Path(projects_file)),
        )
        logger.info(
            "Catalog loaded",
            extra={"engines": len(catalog.engines), "projects": len(catalog.projects)},
        )
        return catalog

    def find_engine(self, association: str) -> EngineInstall | None:
        for engine in self.engines:
            if engine.association == association:
                return engine
        return None

    def find_project(self, name_or_manifest: str | Path) -> ProjectEntry | None:
        """Look a project up by name, or by its manifest path."""

        key = str(name_or_manifest)
        for project in self.projects:
            if project.name == key:
                return project
        manifest = Path(name_or_manifest)
        for project in self.projects:
            if project.uproject_path == manifest:
                return project
        return None
