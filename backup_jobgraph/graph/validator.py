"""Integrity checks for the global job dependency graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from collections.abc import Mapping

from .errors import CycleDetectedError, GraphIntegrityError
from .model import DependencyMap, JobDefinition, ValidationKind, ValidationMessage

LOGGER = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Diagnostics collected over the whole graph."""

    messages: list[ValidationMessage] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationMessage]:
        return [msg for msg in self.messages if msg.severity == "error"]

    @property
    def warnings(self) -> list[ValidationMessage]:
        return [msg for msg in self.messages if msg.severity == "warning"]

    @property
    def cycles(self) -> list[ValidationMessage]:
        return [msg for msg in self.messages if msg.kind is ValidationKind.CYCLE]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self, fail_on_warnings: bool = False) -> None:
        """Raise if the graph should not be planned against.

        Cycles take precedence and raise ``CycleDetectedError``; any other
        error (or warning, when ``fail_on_warnings``) raises
        ``GraphIntegrityError`` with every offending message attached.
        """

        offending = list(self.messages) if fail_on_warnings else self.errors
        if not offending:
            return
        if self.cycles:
            raise CycleDetectedError(offending)
        raise GraphIntegrityError(offending)

    def __str__(self) -> str:
        lines = []
        if self.errors:
            lines.append("Errors:")
            for error in self.errors:
                lines.append(f"  - {error}")
        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  - {warning}")
        if self.is_valid:
            lines.append("Validation passed.")
        return "\n".join(lines)


def validate_graph(jobs: Mapping[str, JobDefinition], dep_map: DependencyMap) -> ValidationResult:
    """Check references and acyclicity of ``dep_map``.

    Never raises on malformed data; every problem becomes a message.
    Reference problems are listed first (per job, in map order), followed by
    one message per detected cycle.
    """

    LOGGER.info("Validating dependency graph with %d jobs", len(dep_map))
    messages: list[ValidationMessage] = []

    for name, prerequisites in dep_map.items():
        messages.extend(_check_references(name, prerequisites, jobs))

    for path in _find_cycles(dep_map):
        messages.append(ValidationMessage(kind=ValidationKind.CYCLE, job=path[0], path=path))

    result = ValidationResult(messages=messages)
    LOGGER.info(
        "Dependency graph validation finished: %d error(s), %d warning(s)",
        len(result.errors),
        len(result.warnings),
    )
    return result


def _check_references(
    name: str, prerequisites: list[str], jobs: Mapping[str, JobDefinition]
) -> list[ValidationMessage]:
    messages: list[ValidationMessage] = []
    seen: set[str] = set()
    duplicated: set[str] = set()

    for position, entry in enumerate(prerequisites):
        target = entry.strip() if isinstance(entry, str) else ""
        if not target:
            messages.append(
                ValidationMessage(kind=ValidationKind.BLANK, job=name, position=position)
            )
            continue
        if target in seen:
            if target not in duplicated:
                duplicated.add(target)
                messages.append(
                    ValidationMessage(kind=ValidationKind.DUPLICATE, job=name, target=target)
                )
            continue
        seen.add(target)

        job = jobs.get(target)
        if job is None:
            messages.append(ValidationMessage(kind=ValidationKind.MISSING, job=name, target=target))
        elif not job.enabled:
            messages.append(
                ValidationMessage(kind=ValidationKind.DISABLED, job=name, target=target)
            )
    return messages


def _find_cycles(dep_map: DependencyMap) -> list[tuple[str, ...]]:
    """DFS three-colouring; at most one cycle path per DFS root.

    Uses an explicit stack of ``(node, prerequisite iterator)`` frames so
    long dependency chains do not hit the interpreter recursion limit.
    """

    visiting: set[str] = set()
    processed: set[str] = set()
    cycles: list[tuple[str, ...]] = []

    for root in dep_map:
        if root in processed:
            continue

        found: tuple[str, ...] | None = None
        path: list[str] = [root]
        frames = [(root, iter(dep_map.get(root, ())))]
        visiting.add(root)

        while frames:
            node, prerequisites = frames[-1]
            for prereq in prerequisites:
                if prereq not in dep_map or prereq in processed:
                    continue
                if prereq in visiting:
                    if found is None:
                        found = tuple(path[path.index(prereq) :]) + (prereq,)
                    continue
                visiting.add(prereq)
                path.append(prereq)
                frames.append((prereq, iter(dep_map.get(prereq, ()))))
                break
            else:
                frames.pop()
                path.pop()
                visiting.discard(node)
                processed.add(node)

        if found is not None:
            cycles.append(found)

    return cycles


__all__ = ["ValidationResult", "validate_graph"]
