"""Orchestration tying together configuration, the dependency graph and job runners."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, MISSING
from pathlib import Path
from collections.abc import Iterable

from backup_jobgraph.config.loader import load_config
from backup_jobgraph.config.schema import JobConfig, JobRunnerInterface, RootConfig
from backup_jobgraph.graph import (
    DependencyMap,
    ExecutionPlan,
    JobDefinition,
    ValidationResult,
    build_dependency_map,
    index_jobs,
    plan_execution,
    validate_graph,
)
from backup_jobgraph.runner.base import (
    BaseJobRunner,
    JobContext,
    JobOutcome,
    JobStatus,
    NullJobRunner,
    NullJobRunnerConfig,
)


LOGGER = logging.getLogger(__name__)


@dataclass(kw_only=True)
class JobGraph:
    """Everything derived once per process from the job configuration."""

    config: RootConfig = field(default_factory=MISSING)
    jobs: dict[str, JobDefinition] = field(default_factory=dict)
    dep_map: DependencyMap = field(default_factory=dict)
    validation: ValidationResult = field(default_factory=ValidationResult)

    def job_config(self, name: str) -> JobConfig:
        for job in self.config.jobs:
            if job.name == name:
                return job
        raise KeyError(name)

    def enabled_jobs(self) -> list[str]:
        return [name for name, job in self.jobs.items() if job.enabled]


@dataclass(kw_only=True)
class RunReport:
    """Return value of a sequential run."""

    plan: ExecutionPlan = field(default_factory=MISSING)
    outcomes: list[JobOutcome] = field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return all(outcome.status is not JobStatus.FAILED for outcome in self.outcomes)

    @property
    def failed(self) -> list[str]:
        return [o.name for o in self.outcomes if o.status is JobStatus.FAILED]

    @property
    def succeeded(self) -> list[str]:
        return [o.name for o in self.outcomes if o.status is JobStatus.SUCCEEDED]


def load_job_graph(config: str | Path | RootConfig, *, enforce: bool | None = None) -> JobGraph:
    """Build and validate the global dependency graph.

    When ``enforce`` is true (default: ``validation.fail_fast`` from the
    config) any error raises ``GraphIntegrityError``/``CycleDetectedError``.
    """

    root = load_config(config) if isinstance(config, (str, Path)) else config
    jobs = index_jobs(JobDefinition.from_config(job) for job in root.jobs)
    dep_map = build_dependency_map(jobs)
    validation = validate_graph(jobs, dep_map)

    for message in validation.messages:
        if message.severity == "error":
            LOGGER.error("%s", message)
        else:
            LOGGER.warning("%s", message)

    if enforce is None:
        enforce = root.validation.fail_fast
    if enforce:
        validation.raise_for_errors(fail_on_warnings=root.validation.fail_on_warnings)

    return JobGraph(config=root, jobs=jobs, dep_map=dep_map, validation=validation)


def select_jobs(graph: JobGraph, requested: Iterable[str], all_jobs: bool = False) -> list[str]:
    requested = list(requested)
    if all_jobs:
        extra = [name for name in requested if name not in graph.jobs]
        return graph.enabled_jobs() + extra
    return requested


def build_execution_plan(graph: JobGraph, requested: Iterable[str]) -> ExecutionPlan:
    plan = plan_execution(
        requested,
        graph.dep_map,
        graph.jobs,
        disabled_prerequisites=graph.config.planner.disabled_prerequisites,
    )
    for skipped in plan.skipped:
        LOGGER.info("Skipping %s: %s", skipped.name, skipped.reason)
    return plan


def create_runner(graph: JobGraph) -> BaseJobRunner:
    if graph.config.runner is None:
        return NullJobRunner(NullJobRunnerConfig())
    return graph.config.runner.instantiate(JobRunnerInterface)


def execute_plan(
    graph: JobGraph,
    plan: ExecutionPlan,
    runner: BaseJobRunner | None = None,
    dry_run: bool = False,
) -> RunReport:
    """Run the planned jobs one after another, stopping at the first failure."""

    report = RunReport(plan=plan, dry_run=dry_run)
    if dry_run:
        report.outcomes = [
            JobOutcome(name=name, status=JobStatus.NOT_RUN, message="dry run") for name in plan.order
        ]
        return report

    runner = runner or create_runner(graph)
    completed: dict[str, JobOutcome] = {}
    failed_at: str | None = None

    for position, name in enumerate(plan.order, start=1):
        if failed_at is not None:
            outcome = JobOutcome(
                name=name, status=JobStatus.NOT_RUN, message=f"not started after {failed_at} failed"
            )
        else:
            LOGGER.info("[%d/%d] Running %s", position, len(plan.order), name)
            context = JobContext(
                job=graph.job_config(name),
                prerequisites=plan.prerequisites_of(name),
                completed=dict(completed),
            )
            outcome = runner.run(context)
            if not outcome.ok:
                failed_at = name
                LOGGER.error("Job %s failed: %s", name, outcome.message or outcome.returncode)
        completed[name] = outcome
        report.outcomes.append(outcome)

    return report


def run_jobs(
    config: str | Path | RootConfig,
    requested: Iterable[str],
    *,
    all_jobs: bool = False,
    runner: BaseJobRunner | None = None,
    dry_run: bool = False,
) -> RunReport:
    graph = load_job_graph(config)
    plan = build_execution_plan(graph, select_jobs(graph, requested, all_jobs))
    return execute_plan(graph, plan, runner=runner, dry_run=dry_run)


__all__ = [
    "JobGraph",
    "RunReport",
    "build_execution_plan",
    "create_runner",
    "execute_plan",
    "load_job_graph",
    "run_jobs",
    "select_jobs",
]
