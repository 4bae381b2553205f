"""Dependency graph construction, validation and execution planning."""

from .builder import build_dependency_map, dependency_digraph
from .errors import CycleDetectedError, GraphError, GraphIntegrityError, PlanningFailure
from .model import (
    DependencyMap,
    ExecutionPlan,
    JobDefinition,
    SkippedJob,
    ValidationKind,
    ValidationMessage,
    index_jobs,
)
from .planner import DisabledPrerequisitePolicy, plan_execution
from .validator import ValidationResult, validate_graph

__all__ = [
    "CycleDetectedError",
    "DependencyMap",
    "DisabledPrerequisitePolicy",
    "ExecutionPlan",
    "GraphError",
    "GraphIntegrityError",
    "JobDefinition",
    "PlanningFailure",
    "SkippedJob",
    "ValidationKind",
    "ValidationMessage",
    "ValidationResult",
    "build_dependency_map",
    "dependency_digraph",
    "index_jobs",
    "plan_execution",
    "validate_graph",
]
