"""Job runner package exports."""

from .base import BaseJobRunner, JobContext, JobOutcome, JobStatus, NullJobRunner
from .command import CommandJobRunner

__all__ = [
    "BaseJobRunner",
    "CommandJobRunner",
    "JobContext",
    "JobOutcome",
    "JobStatus",
    "NullJobRunner",
]
