"""Configuration dataclasses and registries for backup_jobgraph.

These types are designed for use with compoconf so that job runners can be
registered declaratively and selected from configuration files.
"""

from __future__ import annotations

from dataclasses import dataclass, field, MISSING
from typing import Any

from compoconf import (
    ConfigInterface,
    RegistrableConfigInterface,
    register_interface,
)

# ---------------------------------------------------------------------------
# Core interfaces
# ---------------------------------------------------------------------------


@register_interface
class JobRunnerInterface(RegistrableConfigInterface):
    """Executes a single backup job.

    Implementations receive a config dataclass defined via
    ``JobRunnerInterface.cfgtype`` and are handed jobs one at a time in
    planned order.
    """


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class ProjectConfig(ConfigInterface):
    """Project-level metadata."""

    class_name: str = "Project"
    name: str = "backup"
    description: str = ""


@dataclass(kw_only=True)
class JobConfig(ConfigInterface):
    """One backup job.

    Attributes:
        name: Unique, case-sensitive job identifier
        enabled: Disabled jobs are never run, and by default neither is
            anything that depends on them
        depends_on: Names of jobs that must complete before this one starts
        command: Shell command run by ``CommandJobRunner``
        cwd: Working directory for ``command``
        env: Extra environment variables for ``command``
        timeout_seconds: Kill ``command`` after this many seconds
    """

    class_name: str = "Job"
    name: str = field(default_factory=MISSING)
    enabled: bool = True
    depends_on: list[str] = field(default_factory=list)
    command: str | None = None
    cwd: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    timeout_seconds: float | None = None


@dataclass(kw_only=True)
class ValidationConfig(ConfigInterface):
    """How strictly graph diagnostics are enforced before planning."""

    class_name: str = "Validation"
    fail_fast: bool = True
    fail_on_warnings: bool = False


@dataclass(kw_only=True)
class PlannerConfig(ConfigInterface):
    """Planner settings.

    ``disabled_prerequisites`` is one of ``exclude_dependent``,
    ``skip_prerequisite`` or ``include``.
    """

    class_name: str = "Planner"
    disabled_prerequisites: str = "exclude_dependent"


@dataclass(kw_only=True)
class RootConfig(ConfigInterface):
    """Top-level configuration schema."""

    class_name: str = "Root"
    project: ProjectConfig = field(default_factory=ProjectConfig)
    jobs: list[JobConfig] = field(default_factory=list)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    runner: JobRunnerInterface.cfgtype | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
