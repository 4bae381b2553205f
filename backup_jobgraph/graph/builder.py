"""Turn job definitions into a dependency map."""

from __future__ import annotations

from collections.abc import Mapping

import networkx as nx

from .model import DependencyMap, JobDefinition


def build_dependency_map(jobs: Mapping[str, JobDefinition]) -> DependencyMap:
    """Map every job name to its trimmed prerequisite list.

    All jobs are included, enabled or not. References are not checked here;
    blank entries survive as empty strings so the validator can report them.
    """

    return {name: [entry.strip() for entry in job.depends_on] for name, job in jobs.items()}


def dependency_digraph(
    dep_map: DependencyMap, jobs: Mapping[str, JobDefinition] | None = None
) -> nx.DiGraph:
    """Directed graph with an edge ``prerequisite -> dependent`` per reference.

    Unknown prerequisites still become nodes (``defined=False``) so that a
    rendered graph shows the dangling reference.
    """

    graph = nx.DiGraph()
    for name in dep_map:
        job = jobs.get(name) if jobs is not None else None
        graph.add_node(name, defined=True, enabled=job.enabled if job is not None else True)

    for name, prerequisites in dep_map.items():
        for prereq in prerequisites:
            if not prereq:
                continue
            if prereq not in graph:
                graph.add_node(prereq, defined=False, enabled=False)
            graph.add_edge(prereq, name)
    return graph


__all__ = ["build_dependency_map", "dependency_digraph"]
