"""Working-set expansion and topological ordering for a run request."""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from collections.abc import Iterable, Mapping

from .errors import PlanningFailure
from .model import DependencyMap, ExecutionPlan, JobDefinition, SkippedJob

LOGGER = logging.getLogger(__name__)


class DisabledPrerequisitePolicy(str, Enum):
    """What to do with a disabled job reached through another job's prerequisites.

    Requested jobs that are themselves disabled are always skipped; this only
    governs prerequisites discovered while expanding the working set.
    """

    EXCLUDE_DEPENDENT = "exclude_dependent"
    SKIP_PREREQUISITE = "skip_prerequisite"
    INCLUDE = "include"


def plan_execution(
    requested: Iterable[str],
    dep_map: DependencyMap,
    jobs: Mapping[str, JobDefinition],
    *,
    disabled_prerequisites: DisabledPrerequisitePolicy | str = (
        DisabledPrerequisitePolicy.EXCLUDE_DEPENDENT
    ),
) -> ExecutionPlan:
    """Compute the jobs to run for ``requested`` and a valid order for them.

    Args:
        requested: Job names asked for, in priority order. Duplicates are ignored.
        dep_map: Output of ``build_dependency_map`` over all known jobs.
        jobs: All job definitions keyed by name.
        disabled_prerequisites: Policy for disabled jobs found while expanding.

    Returns:
        ExecutionPlan whose ``order`` places every job after its prerequisites.

    Raises:
        PlanningFailure: a prerequisite is not defined, or the working set
            contains a cycle. Nothing is returned in that case.
    """

    policy = DisabledPrerequisitePolicy(disabled_prerequisites)
    requested_names = list(dict.fromkeys(requested))
    skipped: list[SkippedJob] = []

    roots: list[str] = []
    for name in requested_names:
        job = jobs.get(name)
        if job is None:
            LOGGER.warning("Requested job %s is not defined, skipping", name)
            skipped.append(SkippedJob(name, "not defined"))
        elif not job.enabled:
            LOGGER.info("Requested job %s is disabled, skipping", name)
            skipped.append(SkippedJob(name, "disabled"))
        else:
            roots.append(name)

    working = _expand(
        roots,
        dep_map,
        jobs,
        skip_disabled=policy is DisabledPrerequisitePolicy.SKIP_PREREQUISITE,
        stop_at_disabled=policy is DisabledPrerequisitePolicy.EXCLUDE_DEPENDENT,
        skipped=skipped,
    )

    if policy is DisabledPrerequisitePolicy.EXCLUDE_DEPENDENT:
        excluded = _disabled_dependents(working, dep_map, jobs)
        if excluded:
            noted = {entry.name for entry in skipped}
            for name, blocker in excluded.items():
                if name in noted:
                    continue
                if name == blocker:
                    reason = "disabled"
                else:
                    reason = f"requires disabled job '{blocker}'"
                LOGGER.info("Excluding job %s: %s", name, reason)
                skipped.append(SkippedJob(name, reason))
            roots = [name for name in roots if name not in excluded]
            working = _expand(
                roots, dep_map, jobs, skip_disabled=False, stop_at_disabled=True, skipped=skipped
            )

    order, edges = _topological_order(working, dep_map)
    LOGGER.debug("Planned %d job(s): %s", len(order), " -> ".join(order))
    return ExecutionPlan(
        requested=requested_names,
        order=order,
        working_set=set(working),
        skipped=skipped,
        edges=edges,
    )


def _expand(
    roots: list[str],
    dep_map: DependencyMap,
    jobs: Mapping[str, JobDefinition],
    *,
    skip_disabled: bool,
    stop_at_disabled: bool = False,
    skipped: list[SkippedJob],
) -> dict[str, None]:
    """Breadth-first closure over prerequisites, in discovery order.

    With ``stop_at_disabled`` a disabled prerequisite joins the closure but
    its own prerequisites are not explored.
    """

    working: dict[str, None] = dict.fromkeys(roots)
    queue = deque(roots)
    noted = {entry.name for entry in skipped}

    while queue:
        node = queue.popleft()
        for prereq in dep_map.get(node, ()):
            if not prereq or prereq in working:
                continue
            job = jobs.get(prereq)
            if job is None:
                raise PlanningFailure(
                    PlanningFailure.MISSING_PREREQUISITE,
                    [prereq],
                    detail=f"Job '{node}' requires undefined job '{prereq}'",
                )
            if skip_disabled and not job.enabled:
                if prereq not in noted:
                    noted.add(prereq)
                    LOGGER.info("Prerequisite %s of %s is disabled, running without it", prereq, node)
                    skipped.append(SkippedJob(prereq, "disabled"))
                continue
            working[prereq] = None
            if stop_at_disabled and not job.enabled:
                continue
            queue.append(prereq)

    return working


def _disabled_dependents(
    working: dict[str, None],
    dep_map: DependencyMap,
    jobs: Mapping[str, JobDefinition],
) -> dict[str, str]:
    """Map each disabled working-set job, and every job above it, to the
    disabled job that blocks it."""

    blocked: dict[str, str] = {name: name for name in working if not jobs[name].enabled}
    if not blocked:
        return blocked

    dependents: dict[str, list[str]] = {name: [] for name in working}
    for name in working:
        for prereq in dep_map.get(name, ()):
            if prereq in dependents:
                dependents[prereq].append(name)

    queue = deque(blocked)
    while queue:
        node = queue.popleft()
        for dependent in dependents[node]:
            if dependent not in blocked:
                blocked[dependent] = blocked[node]
                queue.append(dependent)
    return blocked


def _topological_order(
    working: dict[str, None], dep_map: DependencyMap
) -> tuple[list[str], dict[str, list[str]]]:
    """Kahn's algorithm restricted to ``working``; FIFO tie-breaking."""

    in_degree: dict[str, int] = dict.fromkeys(working, 0)
    adjacency: dict[str, list[str]] = {name: [] for name in working}
    edges: dict[str, list[str]] = {name: [] for name in working}

    for dependent in working:
        for prereq in dep_map.get(dependent, ()):
            if prereq not in working or prereq in edges[dependent]:
                continue
            edges[dependent].append(prereq)
            adjacency[prereq].append(dependent)
            in_degree[dependent] += 1

    queue = deque(name for name, degree in in_degree.items() if degree == 0)
    order: list[str] = []
    while queue:
        node = queue.popleft()
        order.append(node)
        for dependent in adjacency[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(order) != len(working):
        placed = set(order)
        remaining = [name for name in working if name not in placed]
        raise PlanningFailure(PlanningFailure.CYCLE, remaining)

    return order, edges


__all__ = ["DisabledPrerequisitePolicy", "plan_execution"]
