from pathlib import Path

import pytest
import yaml

from backup_jobgraph.config.loader import (
    ConfigLoaderError,
    load_config,
    load_config_data,
    load_config_reference,
)


def _write(tmp_path: Path, data, name: str = "jobs.yaml") -> Path:
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data) if not isinstance(data, str) else data)
    return path


def test_load_config_list_form(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "project": {"name": "nightly"},
            "jobs": [
                {"name": "Dump-DB", "command": "pg_dump app > /tmp/app.sql"},
                {"name": "Backup-DB", "depends_on": ["Dump-DB"]},
                {"name": "Archive", "enabled": False},
            ],
        },
    )
    cfg = load_config(path)

    assert cfg.project.name == "nightly"
    assert [job.name for job in cfg.jobs] == ["Dump-DB", "Backup-DB", "Archive"]
    assert cfg.jobs[1].depends_on == ["Dump-DB"]
    assert cfg.jobs[2].enabled is False
    assert cfg.validation.fail_fast is True
    assert cfg.planner.disabled_prerequisites == "exclude_dependent"
    assert cfg.runner is None


def test_load_config_mapping_form_and_scalar_depends_on(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
jobs:
  Dump-DB: {}
  Backup-DB:
    depends_on: Dump-DB
  Backup-Files:
""",
    )
    cfg = load_config(path)

    assert [job.name for job in cfg.jobs] == ["Dump-DB", "Backup-DB", "Backup-Files"]
    assert cfg.jobs[1].depends_on == ["Dump-DB"]
    assert cfg.jobs[2].depends_on == []


def test_load_config_keeps_blank_dependency_entries(tmp_path: Path) -> None:
    path = _write(tmp_path, {"jobs": [{"name": "A", "depends_on": ["", " B "]}]})
    cfg = load_config(path)

    assert cfg.jobs[0].depends_on == ["", " B "]


def test_load_config_runner_shorthand(tmp_path: Path) -> None:
    path = _write(tmp_path, {"jobs": [], "runner": "command"})
    cfg = load_config(path)

    assert cfg.runner.class_name == "CommandJobRunner"


def test_load_config_interpolation(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("BACKUP_TARGET", "/mnt/backup")
    path = _write(
        tmp_path,
        {
            "jobs": [
                {"name": "Copy", "command": "cp -r /srv ${oc.env:BACKUP_TARGET}/srv_${now:%Y}"},
            ]
        },
    )
    cfg = load_config(path)

    assert cfg.jobs[0].command.startswith("cp -r /srv /mnt/backup/srv_")
    assert "${" not in cfg.jobs[0].command


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoaderError):
        load_config(tmp_path / "missing.yaml")


def test_load_config_duplicate_names(tmp_path: Path) -> None:
    path = _write(tmp_path, {"jobs": [{"name": "A"}, {"name": "A"}]})
    with pytest.raises(ConfigLoaderError, match="Duplicate job name"):
        load_config(path)


def test_load_config_empty_name(tmp_path: Path) -> None:
    path = _write(tmp_path, {"jobs": [{"name": "  "}]})
    with pytest.raises(ConfigLoaderError, match="empty name"):
        load_config(path)


def test_load_config_bad_policy(tmp_path: Path) -> None:
    path = _write(tmp_path, {"jobs": [], "planner": {"disabled_prerequisites": "maybe"}})
    with pytest.raises(ConfigLoaderError, match="disabled_prerequisites"):
        load_config(path)


def test_load_config_root_not_mapping(tmp_path: Path) -> None:
    path = _write(tmp_path, "- just\n- a list\n")
    with pytest.raises(ConfigLoaderError):
        load_config(path)


def test_load_config_data() -> None:
    cfg = load_config_data({"jobs": {"A": {"depends_on": ["B"]}, "B": {}}})
    assert [job.name for job in cfg.jobs] == ["A", "B"]


def test_load_config_reference_file_with_overrides(tmp_path: Path) -> None:
    path = _write(tmp_path, {"jobs": {"A": {"enabled": True}}, "validation": {"fail_fast": True}})
    cfg = load_config_reference(path, tmp_path, overrides=["validation.fail_fast=false"])

    assert cfg.validation.fail_fast is False


def test_load_config_reference_bad_override(tmp_path: Path) -> None:
    path = _write(tmp_path, {"jobs": []})
    with pytest.raises(ConfigLoaderError):
        load_config_reference(path, tmp_path, overrides=["novalue"])


def test_load_config_reference_missing_dir(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoaderError):
        load_config_reference("jobs", tmp_path / "missing")


def test_load_hydra_config_with_group_override(tmp_path: Path) -> None:
    config_dir = tmp_path / "conf"
    (config_dir / "planner").mkdir(parents=True)
    (config_dir / "backup.yaml").write_text(
        """
defaults:
  - planner: strict
  - _self_

project:
  name: hydra
jobs:
  - name: Dump-DB
  - name: Backup-DB
    depends_on: [Dump-DB]
"""
    )
    (config_dir / "planner" / "strict.yaml").write_text("disabled_prerequisites: exclude_dependent\n")
    (config_dir / "planner" / "lenient.yaml").write_text("disabled_prerequisites: skip_prerequisite\n")

    cfg = load_config_reference("backup", config_dir, overrides=["planner=lenient"])

    assert cfg.project.name == "hydra"
    assert cfg.planner.disabled_prerequisites == "skip_prerequisite"
    assert cfg.jobs[1].depends_on == ["Dump-DB"]
