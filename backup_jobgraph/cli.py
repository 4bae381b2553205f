"""Command line interface for backup_jobgraph."""

from __future__ import annotations

import json
from pathlib import Path

import click
import networkx as nx

from backup_jobgraph.config.loader import ConfigLoaderError, load_config_reference
from backup_jobgraph.graph import GraphError, dependency_digraph
from backup_jobgraph.orchestrator import (
    build_execution_plan,
    execute_plan,
    load_job_graph,
    select_jobs,
)
from backup_jobgraph.utils.logging_config import configure_logging


def _config_options(func):
    func = click.option("--override", multiple=True, help="Hydra-style overrides (key=value)")(func)
    func = click.option(
        "--config-dir",
        type=click.Path(path_type=Path),
        default=Path("config"),
        show_default=True,
        help="Directory searched when CONFIG_REF is not a file",
    )(func)
    func = click.argument("config_ref")(func)
    return func


def _load_graph(ctx: click.Context, config_ref: str, config_dir: Path, override, enforce=None):
    try:
        root = load_config_reference(config_ref, config_dir, override)
        return load_job_graph(root, enforce=enforce)
    except (ConfigLoaderError, GraphError) as exc:
        if ctx.obj.get("debug"):
            raise
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log progress at INFO level")
@click.option("--debug", is_flag=True, help="Log at DEBUG level and show tracebacks")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """Dependency-aware planning and execution of backup jobs."""

    configure_logging(verbose=verbose, debug=debug)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@_config_options
@click.option("--strict", is_flag=True, help="Treat warnings as errors")
@click.option("--json", "as_json", is_flag=True, help="Emit diagnostics as JSON")
@click.pass_context
def validate(
    ctx: click.Context,
    config_ref: str,
    config_dir: Path,
    override: tuple[str, ...],
    strict: bool,
    as_json: bool,
) -> None:
    """Check the dependency graph for missing, disabled or blank references and cycles."""

    graph = _load_graph(ctx, config_ref, config_dir, override, enforce=False)
    result = graph.validation
    if as_json:
        payload = {
            "valid": result.is_valid and not (strict and result.warnings),
            "jobs": len(graph.jobs),
            "messages": [msg.to_dict() for msg in result.messages],
        }
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(str(result))

    if result.errors or (strict and result.warnings):
        ctx.exit(1)


@cli.command()
@_config_options
@click.argument("jobs", nargs=-1)
@click.option("--all", "all_jobs", is_flag=True, help="Plan every enabled job")
@click.option("--json", "as_json", is_flag=True, help="Emit the plan as JSON")
@click.pass_context
def plan(
    ctx: click.Context,
    config_ref: str,
    config_dir: Path,
    override: tuple[str, ...],
    jobs: tuple[str, ...],
    all_jobs: bool,
    as_json: bool,
) -> None:
    """Print the order in which JOBS and their prerequisites would run."""

    if not jobs and not all_jobs:
        raise click.UsageError("Name at least one job or pass --all")

    graph = _load_graph(ctx, config_ref, config_dir, override)
    try:
        execution_plan = build_execution_plan(graph, select_jobs(graph, jobs, all_jobs))
    except GraphError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        click.echo(json.dumps(execution_plan.to_dict(), indent=2))
        return
    for position, name in enumerate(execution_plan.order, start=1):
        after = execution_plan.prerequisites_of(name)
        suffix = f"  (after {', '.join(after)})" if after else ""
        click.echo(f"{position:>3}. {name}{suffix}")
    for skipped in execution_plan.skipped:
        click.echo(f"  skipped {skipped.name}: {skipped.reason}")


@cli.command()
@_config_options
@click.argument("jobs", nargs=-1)
@click.option("--all", "all_jobs", is_flag=True, help="Run every enabled job")
@click.option("--dry-run", is_flag=True, help="Plan only, do not execute")
@click.pass_context
def run(
    ctx: click.Context,
    config_ref: str,
    config_dir: Path,
    override: tuple[str, ...],
    jobs: tuple[str, ...],
    all_jobs: bool,
    dry_run: bool,
) -> None:
    """Run JOBS after their prerequisites, one at a time."""

    if not jobs and not all_jobs:
        raise click.UsageError("Name at least one job or pass --all")

    graph = _load_graph(ctx, config_ref, config_dir, override)
    try:
        execution_plan = build_execution_plan(graph, select_jobs(graph, jobs, all_jobs))
    except GraphError as exc:
        raise click.ClickException(str(exc)) from exc

    report = execute_plan(graph, execution_plan, dry_run=dry_run)
    for outcome in report.outcomes:
        line = f"{outcome.status.value:<9} {outcome.name}"
        if outcome.message:
            line += f"  {outcome.message}"
        click.echo(line)
    for skipped in execution_plan.skipped:
        click.echo(f"{'skipped':<9} {skipped.name}  {skipped.reason}")

    if not report.ok:
        raise click.ClickException(f"Failed job(s): {', '.join(report.failed)}")


@cli.command()
@_config_options
@click.pass_context
def graph(ctx: click.Context, config_ref: str, config_dir: Path, override: tuple[str, ...]) -> None:
    """Dump the full dependency graph as node-link JSON."""

    job_graph = _load_graph(ctx, config_ref, config_dir, override, enforce=False)
    digraph = dependency_digraph(job_graph.dep_map, job_graph.jobs)
    click.echo(json.dumps(nx.node_link_data(digraph, edges="edges"), indent=2))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
