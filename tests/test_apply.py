"""Tests for apply: created/updated/noop decisions and run shape."""

from __future__ import annotations

from pathlib import Path

import pytest

from vcon.config import WorkspaceConfig
from vcon.core.apply import apply_spec
from vcon.core.run import Outcome
from vcon.registry.events import (
    ARTIFACT_CREATED,
    ARTIFACT_UPDATED,
    RUN_COMPLETED,
    RUN_STARTED,
    ArtifactCreatedPayload,
    ArtifactUpdatedPayload,
    RunCompletedPayload,
)
from vcon.registry.log import InMemoryEventLog, JsonlEventLog
from vcon.registry.projection import project_state


def test_scenarios_created_then_noop_then_updated(workspace: WorkspaceConfig, event_log: JsonlEventLog, make_spec) -> None:
    # A: empty log -> created, 3 events
    a = apply_spec(make_spec(spec={"x": 1}), workspace)
    assert a.outcome is Outcome.CREATED
    assert a.event_types == [RUN_STARTED, ARTIFACT_CREATED, RUN_COMPLETED]
    assert event_log.count() == 3

    # B: identical reapply -> noop, 2 more events
    b = apply_spec(make_spec(spec={"x": 1}), workspace)
    assert b.outcome is Outcome.NOOP
    assert b.event_types == [RUN_STARTED, RUN_COMPLETED]
    assert b.artifact_id == a.artifact_id
    assert event_log.count() == 5

    # C: changed spec payload -> updated with the new spec in the patch
    c = apply_spec(make_spec(spec={"x": 2}), workspace)
    assert c.outcome is Outcome.UPDATED
    assert c.event_types == [RUN_STARTED, ARTIFACT_UPDATED, RUN_COMPLETED]
    assert c.artifact_id == a.artifact_id
    assert event_log.count() == 8

    updated = c.events[1].payload
    assert isinstance(updated, ArtifactUpdatedPayload)
    assert updated.patch.spec == {"x": 2}
    assert updated.artifact_ref.artifact_id == a.artifact_id

    state = project_state(event_log.read_all())
    assert state.by_id[a.artifact_id].spec == {"x": 2}


def test_created_artifact_initial_state(workspace: WorkspaceConfig, make_spec) -> None:
    result = apply_spec(make_spec(kind="server", name="Volcano Lair", slug="volcano-lair"), workspace, owner="gru")

    payload = result.events[1].payload
    assert isinstance(payload, ArtifactCreatedPayload)
    artifact = payload.artifact
    assert artifact.artifact_id == result.artifact_id
    assert artifact.artifact_id.startswith("art_")
    assert artifact.identity == ("server", "global", "volcano-lair")
    assert artifact.status == "active"
    assert artifact.narrative.codename == "Lair"
    assert artifact.ownership.owner == "gru"
    assert artifact.meta.tags == []
    assert artifact.links == []
    assert artifact.meta.created_at == artifact.meta.updated_at != ""


def test_run_events_share_context_actor_and_intent(workspace: WorkspaceConfig, make_spec) -> None:
    result = apply_spec(make_spec(), workspace, owner="alice", reason="bootstrap", spec_ref="specs/kevin.yaml")

    run_ids = {e.context.run_id for e in result.events}
    assert run_ids == {result.run_id}
    assert all(e.actor.id == "alice" for e in result.events)
    assert {e.intent.intent_hash for e in result.events} == {result.events[0].intent.intent_hash}
    assert all(e.intent.reason == "bootstrap" for e in result.events)
    assert all(e.intent.dedupe_key == "agent|global|kevin|apply" for e in result.events)
    assert all(e.context.action == "apply-agent-kevin" for e in result.events)
    assert result.events[0].context.spec_ref == "specs/kevin.yaml"

    completed = result.events[-1].payload
    assert isinstance(completed, RunCompletedPayload)
    assert completed.outcome == "created"
    assert completed.noop is False


def test_reapply_is_noop_regardless_of_actor(workspace: WorkspaceConfig, make_spec) -> None:
    apply_spec(make_spec(), workspace, owner="alice")
    again = apply_spec(make_spec(), workspace, owner="bob", reason="different reason")
    assert again.outcome is Outcome.NOOP
    assert again.events[-1].payload.noop is True


def test_name_only_change_is_noop(workspace: WorkspaceConfig, event_log: JsonlEventLog, make_spec) -> None:
    first = apply_spec(make_spec(name="Kevin"), workspace)
    second = apply_spec(make_spec(name="Kevin the Great"), workspace)

    assert second.outcome is Outcome.NOOP
    state = project_state(event_log.read_all())
    assert state.by_id[first.artifact_id].name == "Kevin"


def test_key_order_in_spec_does_not_matter(workspace: WorkspaceConfig, make_spec) -> None:
    apply_spec(make_spec(spec={"a": 1, "b": {"c": 2, "d": 3}}), workspace)
    again = apply_spec(make_spec(spec={"b": {"d": 3, "c": 2}, "a": 1}), workspace)
    assert again.outcome is Outcome.NOOP


def test_repeated_earlier_intent_is_noop_even_after_update(workspace: WorkspaceConfig, event_log: JsonlEventLog, make_spec) -> None:
    apply_spec(make_spec(spec={"x": 1}), workspace)
    apply_spec(make_spec(spec={"x": 2}), workspace)

    back = apply_spec(make_spec(spec={"x": 1}), workspace)

    assert back.outcome is Outcome.NOOP
    state = project_state(event_log.read_all())
    assert state.lookup("agent", "global", "kevin").spec == {"x": 2}


def test_namespaces_bind_separate_artifacts(workspace: WorkspaceConfig, event_log: JsonlEventLog, make_spec) -> None:
    default_ns = apply_spec(make_spec(), workspace)
    other_ns = apply_spec(make_spec(), workspace, namespace="lab")

    assert other_ns.outcome is Outcome.CREATED
    assert other_ns.artifact_id != default_ns.artifact_id
    state = project_state(event_log.read_all())
    assert set(state.by_key) == {("agent", "global", "kevin"), ("agent", "lab", "kevin")}


def test_identity_stays_unique_across_many_applies(workspace: WorkspaceConfig, event_log: JsonlEventLog, make_spec) -> None:
    for i in range(5):
        apply_spec(make_spec(spec={"rev": i}), workspace)
        apply_spec(make_spec(kind="repo", name="Plans", slug="plans", spec={"rev": i % 2}), workspace)

    state = project_state(event_log.read_all())
    assert len(state.by_key) == 2
    assert len(state.by_id) == 2


def test_dry_run_leaves_log_untouched(workspace: WorkspaceConfig, event_log: JsonlEventLog, make_spec) -> None:
    apply_spec(make_spec(spec={"x": 1}), workspace)
    before = event_log.path.read_bytes()

    result = apply_spec(make_spec(spec={"x": 2}), workspace, dry_run=True)

    assert result.outcome is Outcome.UPDATED
    assert result.dry_run is True
    assert result.event_types == [RUN_STARTED, ARTIFACT_UPDATED, RUN_COMPLETED]
    assert all(e.context.dry_run for e in result.events)
    assert event_log.path.read_bytes() == before


def test_dry_run_on_empty_workspace_creates_no_log(workspace: WorkspaceConfig, event_log: JsonlEventLog, make_spec) -> None:
    result = apply_spec(make_spec(), workspace, dry_run=True)

    assert result.outcome is Outcome.CREATED
    assert not event_log.exists()
    # governance init and the debrief still happen
    assert (workspace.governance_path / "README.md").exists()
    assert (result.report_dir / "report.md").exists()


def test_report_is_written_for_every_outcome(workspace: WorkspaceConfig, make_spec) -> None:
    result = apply_spec(make_spec(), workspace)

    assert result.report_dir.parent.parent == workspace.reports_path
    assert result.report_dir.name == "apply-agent-kevin"
    report = (result.report_dir / "report.md").read_text(encoding="utf-8")
    assert "Created Minion (agent): Kevin" in report
    assert result.run_id in report
    assert "registry/events.ndjson" in report


def test_config_defaults_supply_namespace_and_owner(tmp_path: Path, make_spec) -> None:
    config = WorkspaceConfig(root=tmp_path, namespace="lab", owner="gru")
    result = apply_spec(make_spec(), config)

    assert result.events[1].payload.artifact.namespace == "lab"
    assert result.events[0].actor.id == "gru"


def test_injected_log_is_used_instead_of_file(workspace: WorkspaceConfig, make_spec) -> None:
    log = InMemoryEventLog()

    apply_spec(make_spec(), workspace, log=log)
    again = apply_spec(make_spec(), workspace, log=log)

    assert log.count() == 5
    assert again.outcome is Outcome.NOOP
    assert not workspace.events_path.exists()


def test_governance_failure_aborts_before_any_event(tmp_path: Path, make_spec) -> None:
    config = WorkspaceConfig(root=tmp_path, templates_dir=tmp_path / "no-templates")

    with pytest.raises(FileNotFoundError):
        apply_spec(make_spec(), config)

    assert not config.events_path.exists()


def test_float_spelling_of_same_number_is_noop(workspace: WorkspaceConfig, event_log: JsonlEventLog, make_spec) -> None:
    apply_spec(make_spec(spec={"x": 1, "limits": [2, 3]}), workspace)

    again = apply_spec(make_spec(spec={"x": 1.0, "limits": [2.0, 3]}), workspace)

    assert again.outcome is Outcome.NOOP
    assert event_log.count() == 5
