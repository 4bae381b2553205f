"""Runner that executes each job's shell command."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field

from compoconf import ConfigInterface, register

from backup_jobgraph.runner.base import BaseJobRunner, JobContext, JobOutcome, JobStatus
from backup_jobgraph.utils.run import run_with_tee

LOGGER = logging.getLogger(__name__)


@dataclass(kw_only=True)
class CommandJobRunnerConfig(ConfigInterface):
    """Run ``job.command`` through the shell.

    Attributes:
        shell: Shell binary used to interpret commands
        env: Environment shared by all jobs; per-job ``env`` wins
        inherit_env: Start from the current process environment
        default_timeout_seconds: Used when a job has no ``timeout_seconds``
    """

    shell: str = "/bin/sh"
    env: dict[str, str] = field(default_factory=dict)
    inherit_env: bool = True
    default_timeout_seconds: float | None = None


@register
class CommandJobRunner(BaseJobRunner):
    config: CommandJobRunnerConfig

    def build_env(self, context: JobContext) -> dict[str, str]:
        env = dict(os.environ) if self.config.inherit_env else {}
        env.update(self.config.env)
        env.update(context.job.env)
        env["BACKUP_JOB_NAME"] = context.job.name
        env["BACKUP_JOB_PREREQUISITES"] = ",".join(context.prerequisites)
        return env

    def run(self, context: JobContext) -> JobOutcome:
        job = context.job
        if not job.command:
            LOGGER.info("Job %s has no command, nothing to do", job.name)
            return JobOutcome(name=job.name, status=JobStatus.SUCCEEDED, message="no command")

        timeout = job.timeout_seconds or self.config.default_timeout_seconds
        try:
            result = run_with_tee(
                [self.config.shell, "-c", job.command],
                env=self.build_env(context),
                cwd=job.cwd,
                timeout=timeout,
                text=True,
            )
        except subprocess.TimeoutExpired:
            LOGGER.error("Job %s timed out after %ss", job.name, timeout)
            return JobOutcome(
                name=job.name, status=JobStatus.FAILED, message=f"timed out after {timeout}s"
            )
        except OSError as exc:
            LOGGER.error("Job %s could not be started: %s", job.name, exc)
            return JobOutcome(name=job.name, status=JobStatus.FAILED, message=str(exc))

        if result.returncode != 0:
            LOGGER.error("Job %s failed with exit code %d", job.name, result.returncode)
            return JobOutcome(
                name=job.name,
                status=JobStatus.FAILED,
                returncode=result.returncode,
                message=(result.stderr or "").strip()[-500:],
            )
        return JobOutcome(name=job.name, status=JobStatus.SUCCEEDED, returncode=0)


__all__ = ["CommandJobRunner", "CommandJobRunnerConfig"]
