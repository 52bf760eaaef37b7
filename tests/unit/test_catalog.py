from __future__ import annotations

import json
from pathlib import Path

from engine_launcher.launcher.catalog import (
    LauncherCatalog,
    ProjectEntry,
    read_engine_association,
)


def test_load_reads_engines_and_projects(config_dir: Path, project_dir: Path) -> None:
    catalog = LauncherCatalog.load(config_dir)

    engine = catalog.find_engine("5.3")
    assert engine is not None
    assert engine.display_name == "UE 5.3"

    project = catalog.find_project("MyGame")
    assert project is not None
    assert project.uproject_path == project_dir / "MyGame.uproject"
    assert project.engine_version == "5.3"
    assert project.command_line_args == "-log"

    assert catalog.find_project(project_dir / "MyGame.uproject") == project
    assert catalog.find_engine("4.27") is None
    assert catalog.find_project("Other") is None


def test_missing_files_give_an_empty_catalog(tmp_path: Path) -> None:
    catalog = LauncherCatalog.load(tmp_path / "nowhere")

    assert catalog.engines == []
    assert catalog.projects == []


def test_invalid_json_gives_an_empty_list(tmp_path: Path) -> None:
    (tmp_path / "engines.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "projects.json").write_text(json.dumps({"projects": "nope"}), encoding="utf-8")

    catalog = LauncherCatalog.load(tmp_path)

    assert catalog.engines == []
    assert catalog.projects == []


def test_projects_without_manifest_are_skipped(tmp_path: Path) -> None:
    (tmp_path / "projects.json").write_text(
        json.dumps(
            {
                "projects": [
                    {
                        "name": "Gone",
                        "path": str(tmp_path / "Gone"),
                        "uprojectPath": str(tmp_path / "Gone" / "Gone.uproject"),
                        "engineVersion": "5.3",
                    },
                    {"name": "Broken"},
                ]
            }
        ),
        encoding="utf-8",
    )

    assert LauncherCatalog.load(tmp_path).projects == []


def test_from_manifest_reads_engine_association(project_dir: Path) -> None:
    entry = ProjectEntry.from_manifest(project_dir / "MyGame.uproject")

    assert entry.name == "MyGame"
    assert entry.path == project_dir
    assert entry.engine_version == "5.3"
    assert entry.command_line_args == ""


def test_read_engine_association_tolerates_bad_manifests(tmp_path: Path) -> None:
    bad = tmp_path / "Bad.uproject"
    bad.write_text("[1, 2]", encoding="utf-8")

    assert read_engine_association(bad) == ""
    assert read_engine_association(tmp_path / "Missing.uproject") == ""
