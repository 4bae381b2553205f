"""Job runner abstractions used by backup_jobgraph."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from collections.abc import Mapping

from compoconf import ConfigInterface, register

from backup_jobgraph.config.schema import JobConfig, JobRunnerInterface

LOGGER = logging.getLogger(__name__)


class JobStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NOT_RUN = "not_run"


@dataclass(kw_only=True)
class JobOutcome:
    """What happened to one job of a run."""

    name: str
    status: JobStatus
    returncode: int | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is JobStatus.SUCCEEDED


@dataclass(kw_only=True)
class JobContext:
    """Information a runner receives about the job it executes."""

    job: JobConfig
    prerequisites: list[str] = field(default_factory=list)
    completed: Mapping[str, JobOutcome] = field(default_factory=dict)


class BaseJobRunner(JobRunnerInterface):
    """Base class for job runners."""

    config: ConfigInterface

    def __init__(self, config: ConfigInterface) -> None:
        self.config = config

    def run(self, context: JobContext) -> JobOutcome:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(kw_only=True)
class NullJobRunnerConfig(ConfigInterface):
    """Runner that only reports the jobs it would execute."""

    fail_jobs: list[str] = field(default_factory=list)


@register
class NullJobRunner(BaseJobRunner):
    config: NullJobRunnerConfig

    def run(self, context: JobContext) -> JobOutcome:
        name = context.job.name
        if name in self.config.fail_jobs:
            LOGGER.info("[null] %s marked to fail", name)
            return JobOutcome(name=name, status=JobStatus.FAILED, returncode=1, message="forced failure")
        LOGGER.info("[null] %s (after: %s)", name, ", ".join(context.prerequisites) or "-")
        return JobOutcome(name=name, status=JobStatus.SUCCEEDED, returncode=0)


__all__ = [
    "BaseJobRunner",
    "JobContext",
    "JobOutcome",
    "JobStatus",
    "NullJobRunner",
    "NullJobRunnerConfig",
]
