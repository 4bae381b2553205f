"""Tests for dependency graph validation."""

import pytest

from backup_jobgraph.graph import (
    CycleDetectedError,
    GraphIntegrityError,
    JobDefinition,
    ValidationKind,
    build_dependency_map,
    index_jobs,
    validate_graph,
)


def _validate(deps, disabled=()):
    jobs = index_jobs(
        JobDefinition(name=name, enabled=name not in disabled, depends_on=tuple(d))
        for name, d in deps.items()
    )
    return validate_graph(jobs, build_dependency_map(jobs))


def test_validate_sound_graph_has_no_messages():
    result = _validate({"Dump-DB": [], "Backup-DB": ["Dump-DB"], "Backup-Files": []})

    assert result.messages == []
    assert result.is_valid
    assert "Validation passed." in str(result)


def test_validate_two_cycle_reports_once():
    result = _validate({"A": ["B"], "B": ["A"]})

    assert len(result.messages) == 1
    message = result.messages[0]
    assert message.kind is ValidationKind.CYCLE
    assert "A" in str(message) and "B" in str(message)
    assert message.path == ("A", "B", "A")


def test_validate_three_cycle_path():
    result = _validate({"A": ["B"], "B": ["C"], "C": ["A"]})

    assert [str(m) for m in result.cycles] == ["Circular dependency detected: A -> B -> C -> A"]


def test_validate_self_dependency_is_cycle():
    result = _validate({"A": ["A"]})
    assert [m.path for m in result.cycles] == [("A", "A")]


def test_validate_disjoint_cycles_reported_separately():
    result = _validate({"A": ["B"], "B": ["A"], "C": ["D"], "D": ["C"], "E": ["A"]})

    assert [m.path for m in result.cycles] == [("A", "B", "A"), ("C", "D", "C")]


def test_validate_cycle_behind_acyclic_prefix():
    result = _validate({"root": ["A"], "A": ["B"], "B": ["C"], "C": ["A"]})

    assert [m.path for m in result.cycles] == [("A", "B", "C", "A")]


def test_validate_missing_dependency():
    result = _validate({"Backup-DB": ["Dump-DB"]})

    assert not result.is_valid
    assert len(result.errors) == 1
    message = result.errors[0]
    assert message.kind is ValidationKind.MISSING
    assert message.job == "Backup-DB"
    assert message.target == "Dump-DB"
    assert str(message) == "Job 'Backup-DB' depends on missing job 'Dump-DB'"


def test_validate_disabled_dependency_is_warning():
    result = _validate({"A": ["B"], "B": []}, disabled={"B"})

    assert result.is_valid
    assert [m.kind for m in result.warnings] == [ValidationKind.DISABLED]
    assert "disabled job 'B'" in str(result.warnings[0])


def test_validate_blank_entries_one_message_each():
    result = _validate({"A": ["", "B", "   "], "B": []})

    blanks = [m for m in result.messages if m.kind is ValidationKind.BLANK]
    assert [m.position for m in blanks] == [0, 2]
    assert all(m.job == "A" for m in blanks)


def test_validate_duplicate_entry_warns_once():
    result = _validate({"A": ["B", " B", "B"], "B": []})

    assert [m.kind for m in result.messages] == [ValidationKind.DUPLICATE]
    assert result.is_valid


def test_validate_does_not_mutate_inputs():
    jobs = index_jobs([JobDefinition(name="A", depends_on=("B", "missing")), JobDefinition(name="B")])
    dep_map = build_dependency_map(jobs)
    snapshot = {k: list(v) for k, v in dep_map.items()}

    validate_graph(jobs, dep_map)

    assert dep_map == snapshot


def test_validate_tolerates_non_string_entries():
    jobs = index_jobs([JobDefinition(name="A")])
    result = validate_graph(jobs, {"A": [None]})  # type: ignore[list-item]

    assert [m.kind for m in result.messages] == [ValidationKind.BLANK]


def test_raise_for_errors_prefers_cycle_error():
    result = _validate({"A": ["B", "ghost"], "B": ["A"]})

    with pytest.raises(CycleDetectedError) as excinfo:
        result.raise_for_errors()
    assert excinfo.value.cycles == [("A", "B", "A")]
    assert len(excinfo.value.messages) == 2


def test_raise_for_errors_integrity_only():
    result = _validate({"A": ["ghost"]})

    with pytest.raises(GraphIntegrityError) as excinfo:
        result.raise_for_errors()
    assert not isinstance(excinfo.value, CycleDetectedError)
    assert "ghost" in str(excinfo.value)


def test_raise_for_errors_warnings_only_when_requested():
    result = _validate({"A": ["B"], "B": []}, disabled={"B"})

    result.raise_for_errors()
    with pytest.raises(GraphIntegrityError):
        result.raise_for_errors(fail_on_warnings=True)


def test_validate_long_chain():
    deps = {f"j{idx}": [f"j{idx + 1}"] for idx in range(1999)}
    deps["j1999"] = []

    result = _validate(deps)

    assert result.messages == []


def test_validate_long_chain_closing_into_cycle():
    deps = {f"j{idx}": [f"j{idx + 1}"] for idx in range(1999)}
    deps["j1999"] = ["j1000"]

    result = _validate(deps)

    assert len(result.cycles) == 1
    path = result.cycles[0].path
    assert path[0] == path[-1] == "j1000"
    assert len(path) == 1001
