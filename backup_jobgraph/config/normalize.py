"""Normalization helpers shared by config loaders."""

from __future__ import annotations

from copy import deepcopy
from typing import Any
from collections.abc import Mapping

from . import schema
from ..graph.planner import DisabledPrerequisitePolicy


class ConfigNormalizationError(ValueError):
    """Raised when raw configuration data has an unusable shape."""


def normalize_config_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """Bring the accepted job notations into the list form compoconf
    parses."""

    normalized: dict[str, Any] = deepcopy(dict(data))

    _normalize_jobs(normalized)
    _normalize_runner(normalized)
    return normalized


def check_jobs(root: schema.RootConfig) -> None:
    """Reject configurations whose job names are empty or repeated."""

    seen: set[str] = set()
    for idx, job in enumerate(root.jobs):
        if not isinstance(job.name, str) or not job.name.strip():
            raise ConfigNormalizationError(f"jobs[{idx}] has an empty name")
        if job.name in seen:
            raise ConfigNormalizationError(f"Duplicate job name: {job.name!r}")
        seen.add(job.name)

    policy = root.planner.disabled_prerequisites
    try:
        DisabledPrerequisitePolicy(policy)
    except ValueError as exc:
        choices = ", ".join(p.value for p in DisabledPrerequisitePolicy)
        raise ConfigNormalizationError(
            f"planner.disabled_prerequisites must be one of {choices}, got {policy!r}"
        ) from exc


def _normalize_jobs(data: dict[str, Any]) -> None:
    """Accept ``jobs`` as a mapping of name -> body and scalar ``depends_on``."""

    jobs = data.get("jobs")
    if jobs is None:
        data["jobs"] = []
        return

    if isinstance(jobs, Mapping):
        entries = []
        for name, body in jobs.items():
            body = dict(body or {})
            if "name" in body and body["name"] != name:
                raise ConfigNormalizationError(
                    f"Job key {name!r} does not match its name field {body['name']!r}"
                )
            body["name"] = name
            entries.append(body)
        jobs = entries
    elif not isinstance(jobs, list):
        raise ConfigNormalizationError("`jobs` must be a list or a mapping of job name to job")

    for entry in jobs:
        if not isinstance(entry, dict):
            raise ConfigNormalizationError(f"Job entries must be mappings, got {entry!r}")
        depends_on = entry.get("depends_on")
        if depends_on is None:
            entry["depends_on"] = []
        elif isinstance(depends_on, str):
            entry["depends_on"] = [depends_on]
        else:
            entry["depends_on"] = ["" if dep is None else str(dep) for dep in depends_on]
        if "env" in entry and entry["env"] is not None:
            entry["env"] = {str(k): str(v) for k, v in entry["env"].items()}

    data["jobs"] = jobs


def _normalize_runner(data: dict[str, Any]) -> None:
    """Expand the ``runner: command`` shorthand."""

    runner = data.get("runner")
    if isinstance(runner, str):
        aliases = {"null": "NullJobRunner", "command": "CommandJobRunner"}
        data["runner"] = {"class_name": aliases.get(runner.lower(), runner)}


__all__ = ["ConfigNormalizationError", "check_jobs", "normalize_config_data"]
