"""Core data types shared by the graph builder, validator and planner."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from collections.abc import Iterable


DependencyMap = dict[str, list[str]]


@dataclass(frozen=True)
class JobDefinition:
    """A named backup job and the jobs it must wait for.

    ``depends_on`` keeps the declared order. Entries are stored as given;
    trimming happens when the dependency map is built.
    """

    name: str
    enabled: bool = True
    depends_on: tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config: Any) -> JobDefinition:
        return cls(
            name=config.name,
            enabled=bool(config.enabled),
            depends_on=tuple(config.depends_on or ()),
        )


def index_jobs(jobs: Iterable[JobDefinition]) -> dict[str, JobDefinition]:
    """Key job definitions by name, keeping the input order."""

    indexed: dict[str, JobDefinition] = {}
    for job in jobs:
        if job.name in indexed:
            raise ValueError(f"Duplicate job name: {job.name!r}")
        indexed[job.name] = job
    return indexed


class ValidationKind(str, Enum):
    BLANK = "blank"
    MISSING = "missing"
    DISABLED = "disabled"
    DUPLICATE = "duplicate"
    CYCLE = "cycle"


_WARNING_KINDS = frozenset({ValidationKind.DISABLED, ValidationKind.DUPLICATE})


@dataclass(frozen=True)
class ValidationMessage:
    """One integrity problem found in the dependency graph."""

    kind: ValidationKind
    job: str
    target: str | None = None
    path: tuple[str, ...] = ()
    position: int | None = None

    @property
    def severity(self) -> str:
        return "warning" if self.kind in _WARNING_KINDS else "error"

    @property
    def text(self) -> str:
        if self.kind is ValidationKind.BLANK:
            return f"Job '{self.job}' has a blank dependency entry at position {self.position}"
        if self.kind is ValidationKind.MISSING:
            return f"Job '{self.job}' depends on missing job '{self.target}'"
        if self.kind is ValidationKind.DISABLED:
            return f"Job '{self.job}' depends on disabled job '{self.target}'"
        if self.kind is ValidationKind.DUPLICATE:
            return f"Job '{self.job}' lists dependency '{self.target}' more than once"
        return "Circular dependency detected: " + " -> ".join(self.path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "severity": self.severity,
            "job": self.job,
            "target": self.target,
            "path": list(self.path),
            "message": self.text,
        }

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class SkippedJob:
    """A job left out of an execution plan and why."""

    name: str
    reason: str


@dataclass(kw_only=True)
class ExecutionPlan:
    """Result of one planning call.

    ``order`` lists every member of ``working_set`` exactly once, each job
    after all of its prerequisites that are also in the working set.
    """

    requested: list[str] = field(default_factory=list)
    order: list[str] = field(default_factory=list)
    working_set: set[str] = field(default_factory=set)
    skipped: list[SkippedJob] = field(default_factory=list)
    edges: dict[str, list[str]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.order)

    def __iter__(self):
        return iter(self.order)

    def prerequisites_of(self, name: str) -> list[str]:
        return list(self.edges.get(name, []))

    def to_dict(self) -> dict[str, Any]:
        return {
            "requested": list(self.requested),
            "order": list(self.order),
            "prerequisites": {name: list(self.edges.get(name, [])) for name in self.order},
            "skipped": [{"name": s.name, "reason": s.reason} for s in self.skipped],
        }


__all__ = [
    "DependencyMap",
    "ExecutionPlan",
    "JobDefinition",
    "SkippedJob",
    "ValidationKind",
    "ValidationMessage",
    "index_jobs",
]
