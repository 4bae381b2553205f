"""Exceptions raised by the dependency graph engine."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .model import ValidationMessage


class GraphError(Exception):
    """Base class for dependency graph failures."""


class GraphIntegrityError(GraphError):
    """Raised by a host that refuses to continue with an unsound graph."""

    def __init__(self, messages: Sequence[ValidationMessage]):
        self.messages = list(messages)
        lines = [f"Dependency graph has {len(self.messages)} problem(s):"]
        lines.extend(f"  - {msg}" for msg in self.messages)
        super().__init__("\n".join(lines))


class CycleDetectedError(GraphIntegrityError):
    """Raised when at least one of the problems is a dependency cycle."""

    @property
    def cycles(self) -> list[tuple[str, ...]]:
        return [msg.path for msg in self.messages if msg.path]


class PlanningFailure(GraphError):
    """Planning aborted; no partial order is available."""

    MISSING_PREREQUISITE = "missing_prerequisite"
    CYCLE = "cycle"

    def __init__(self, kind: str, jobs: Iterable[str], detail: str | None = None):
        self.kind = kind
        self.jobs = tuple(jobs)
        if detail is None:
            if kind == self.MISSING_PREREQUISITE:
                detail = f"Prerequisite not defined: {', '.join(self.jobs)}"
            else:
                detail = f"Cycle among jobs: {', '.join(self.jobs)}"
        super().__init__(detail)


__all__ = ["GraphError", "GraphIntegrityError", "CycleDetectedError", "PlanningFailure"]
