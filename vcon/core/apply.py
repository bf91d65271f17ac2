"""
Apply a spec to the registry.

Given a validated spec, decide exactly one outcome and record it:

- the intent hash was seen before anywhere in the log -> noop
- no artifact bound to (kind, namespace, slug)        -> created
- bound, spec payload canonically equal              -> noop
- bound, spec payload differs                        -> updated

A run always emits run.started and run.completed; created/updated add one
artifact event in between. The whole run is appended as one batch unless it
is a dry-run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import WorkspaceConfig
from ..constants import MINIONS_PROTOCOL, STATUS_ACTIVE
from ..registry.events import (
    ARTIFACT_CREATED,
    ARTIFACT_UPDATED,
    ArtifactCreatedPayload,
    ArtifactPatch,
    ArtifactRef,
    ArtifactUpdatedPayload,
    Intent,
    VconEvent,
)
from ..registry.hashing import artifact_key, canonicalize, compute_dedupe_key, compute_intent_hash
from ..registry.log import EventLog
from ..registry.snapshot import ArtifactMeta, ArtifactState, Narrative, Ownership
from ..registry.util import new_artifact_id
from ..spec.schema import VconSpec
from .run import Outcome, Run, open_run, prepare_state, report_run, resolve_log

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    outcome: Outcome
    run_id: str
    events: list[VconEvent]
    artifact_id: str | None
    report_dir: Path
    dry_run: bool

    @property
    def event_types(self) -> list[str]:
        return [e.event_type for e in self.events]


def intent_payload(spec: VconSpec, namespace: str) -> dict[str, Any]:
    """The fields that make two apply requests the same request."""
    return {
        "kind": spec.kind,
        "namespace": namespace,
        "slug": spec.slug,
        "spec": spec.spec,
    }


def apply_spec(
    spec: VconSpec,
    config: WorkspaceConfig,
    *,
    dry_run: bool = False,
    namespace: str | None = None,
    owner: str | None = None,
    reason: str | None = None,
    spec_ref: str | None = None,
    log: EventLog | None = None,
) -> ApplyResult:
    """
    Apply a spec: decide created/updated/noop and append the run's events.

    Args:
        spec: Already validated spec
        config: Workspace configuration (paths, default namespace/owner)
        dry_run: Compute and report the outcome without writing events
        namespace: Namespace override (defaults to config.namespace)
        owner: Actor/owner id override (defaults to config.owner)
        reason: Free-text audit reason stored on every event's intent
        spec_ref: Optional pointer to the spec source (e.g. its path)
        log: Event log to use (defaults to the workspace events.ndjson)

    Returns:
        ApplyResult with the outcome and every event of the run
    """
    namespace = namespace or config.namespace
    owner = owner or config.owner
    log = resolve_log(config, log)

    action = f"apply-{spec.kind}-{spec.slug}"
    intent = Intent(
        intent_hash=compute_intent_hash(intent_payload(spec, namespace)),
        dedupe_key=compute_dedupe_key(spec.kind, namespace, spec.slug, "apply"),
        reason=reason,
    )
    run = open_run(config, action=action, owner=owner, intent=intent, dry_run=dry_run, spec_ref=spec_ref)

    state = prepare_state(config, log)
    run.start("apply", spec.slug)

    artifact_id: str | None = None
    if intent.intent_hash in state.intents_seen:
        outcome = Outcome.NOOP
        artifact_id = state.by_key.get(artifact_key(spec.kind, namespace, spec.slug))
    else:
        existing_id = state.by_key.get(artifact_key(spec.kind, namespace, spec.slug))
        if existing_id is None:
            outcome = Outcome.CREATED
            artifact_id = _emit_created(run, spec, namespace, owner)
        else:
            artifact_id = existing_id
            existing = state.by_id[existing_id]
            if canonicalize(existing.spec) == canonicalize(spec.spec):
                outcome = Outcome.NOOP
            else:
                outcome = Outcome.UPDATED
                _emit_updated(run, spec, namespace, existing_id)

    run.complete(outcome)
    run.commit(log)
    logger.info("%s: %s (run %s, dry_run=%s)", action, outcome.value, run.run_id, dry_run)

    codename = MINIONS_PROTOCOL[spec.kind]
    verb = {Outcome.CREATED: "Created", Outcome.UPDATED: "Updated", Outcome.NOOP: "Noop"}[outcome]
    report_dir = report_run(
        config,
        log,
        run,
        prompt=f"Apply spec (kind={spec.kind}, name={spec.name})",
        what=f"{verb} {codename} ({spec.kind}): {spec.name}",
        why="Bootstrap artifact according to canonical VCON + Minions Protocol standards.",
        extra={"kind": spec.kind, "namespace": namespace, "slug": spec.slug},
    )

    return ApplyResult(
        outcome=outcome,
        run_id=run.run_id,
        events=list(run.events),
        artifact_id=artifact_id,
        report_dir=report_dir,
        dry_run=dry_run,
    )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _emit_created(run: Run, spec: VconSpec, namespace: str, owner: str) -> str:
    now = _now()
    artifact = ArtifactState(
        artifact_id=new_artifact_id(),
        kind=spec.kind,
        namespace=namespace,
        slug=spec.slug,
        name=spec.name,
        status=STATUS_ACTIVE,
        narrative=Narrative(codename=MINIONS_PROTOCOL[spec.kind]),
        ownership=Ownership(owner=owner, steward=None),
        meta=ArtifactMeta(tags=[], created_at=now, updated_at=now),
        spec=spec.spec,
        links=[],
    )
    run.emit(ARTIFACT_CREATED, ArtifactCreatedPayload(artifact=artifact.copy()))
    return artifact.artifact_id


def _emit_updated(run: Run, spec: VconSpec, namespace: str, artifact_id: str) -> None:
    run.emit(
        ARTIFACT_UPDATED,
        ArtifactUpdatedPayload(
            artifact_ref=ArtifactRef(
                artifact_id=artifact_id,
                kind=spec.kind,
                namespace=namespace,
                slug=spec.slug,
            ),
            patch=ArtifactPatch(
                name=spec.name,
                spec=spec.spec,
                meta={"updated_at": _now()},
            ),
        ),
    )
