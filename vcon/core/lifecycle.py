"""
Lifecycle commands on existing artifacts: linking and status changes.

Both follow the apply run shape (run.started, optional artifact event,
run.completed, one batch). Unlike apply, their noop decision comes from the
current projection: a link that already exists or a status that is already
set. That keeps a status toggle (active -> paused -> active -> paused)
possible even though each request repeats an earlier intent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..config import WorkspaceConfig
from ..constants import ARTIFACT_STATUSES, MINIONS_PROTOCOL
from ..registry.events import (
    ARTIFACT_LINKED,
    ARTIFACT_STATUS_CHANGED,
    ArtifactLinkedPayload,
    ArtifactRef,
    Intent,
    StatusChangedPayload,
    VconEvent,
)
from ..registry.hashing import compute_dedupe_key, compute_intent_hash
from ..registry.log import EventLog
from ..registry.projection import ProjectionState
from ..registry.snapshot import ArtifactState
from ..utils import slugify
from .run import Outcome, open_run, prepare_state, report_run, resolve_log

logger = logging.getLogger(__name__)


class ArtifactNotFoundError(LookupError):
    """No artifact is bound to the requested identity."""


@dataclass
class LifecycleResult:
    outcome: Outcome
    run_id: str
    events: list[VconEvent]
    artifact_id: str
    report_dir: Path
    dry_run: bool


def _resolve(state: ProjectionState, kind: str, namespace: str, slug: str) -> ArtifactState:
    artifact = state.lookup(kind, namespace, slug)
    if artifact is None:
        raise ArtifactNotFoundError(f"no artifact bound to {kind}/{slug} in namespace {namespace!r}")
    return artifact


def link_artifacts(
    source: tuple[str, str],
    rel: str,
    target: tuple[str, str],
    config: WorkspaceConfig,
    *,
    dry_run: bool = False,
    namespace: str | None = None,
    owner: str | None = None,
    reason: str | None = None,
    log: EventLog | None = None,
) -> LifecycleResult:
    """
    Record a typed link from one artifact to another.

    Args:
        source: (kind, slug) of the artifact the link starts from
        rel: Relation name (e.g. "deploys-to", "owns")
        target: (kind, slug) of the linked artifact
    """
    rel = rel.strip()
    if not rel:
        raise ValueError("relation must be a non-empty string")

    namespace = namespace or config.namespace
    owner = owner or config.owner
    log = resolve_log(config, log)

    src_kind, src_slug = source
    dst_kind, dst_slug = target
    action = f"link-{src_kind}-{src_slug}-{slugify(rel)}-{dst_kind}-{dst_slug}"
    intent = Intent(
        intent_hash=compute_intent_hash({
            "action": "link",
            "namespace": namespace,
            "from": {"kind": src_kind, "slug": src_slug},
            "rel": rel,
            "to": {"kind": dst_kind, "slug": dst_slug},
        }),
        dedupe_key=compute_dedupe_key(src_kind, namespace, src_slug, "link"),
        reason=reason,
    )
    run = open_run(config, action=action, owner=owner, intent=intent, dry_run=dry_run)

    state = prepare_state(config, log)
    src = _resolve(state, src_kind, namespace, src_slug)
    dst = _resolve(state, dst_kind, namespace, dst_slug)

    run.start("link", f"{src_kind}/{src_slug}", rel, f"{dst_kind}/{dst_slug}")
    if src.has_link(rel, dst.artifact_id):
        outcome = Outcome.NOOP
    else:
        outcome = Outcome.UPDATED
        run.emit(
            ARTIFACT_LINKED,
            ArtifactLinkedPayload(source_id=src.artifact_id, rel=rel, target_id=dst.artifact_id),
        )
    run.complete(outcome)
    run.commit(log)
    logger.info("%s: %s (run %s, dry_run=%s)", action, outcome.value, run.run_id, dry_run)

    report_dir = report_run(
        config,
        log,
        run,
        prompt=f"Link {src_kind}/{src_slug} -[{rel}]-> {dst_kind}/{dst_slug}",
        what=(
            f"Linked {MINIONS_PROTOCOL[src_kind]} {src.name} to {MINIONS_PROTOCOL[dst_kind]} {dst.name} ({rel})"
            if outcome is Outcome.UPDATED
            else f"Noop: {src.name} already {rel} {dst.name}"
        ),
        why="Record a typed relation between governed artifacts.",
    )
    return LifecycleResult(
        outcome=outcome,
        run_id=run.run_id,
        events=list(run.events),
        artifact_id=src.artifact_id,
        report_dir=report_dir,
        dry_run=dry_run,
    )


def set_status(
    kind: str,
    slug: str,
    status: str,
    config: WorkspaceConfig,
    *,
    dry_run: bool = False,
    namespace: str | None = None,
    owner: str | None = None,
    reason: str | None = None,
    log: EventLog | None = None,
) -> LifecycleResult:
    """Change an artifact's status (draft, active, paused, retired)."""
    if status not in ARTIFACT_STATUSES:
        raise ValueError(f"status must be one of {', '.join(sorted(ARTIFACT_STATUSES))}; got {status!r}")

    namespace = namespace or config.namespace
    owner = owner or config.owner
    log = resolve_log(config, log)

    action = f"status-{kind}-{slug}"
    intent = Intent(
        intent_hash=compute_intent_hash({
            "action": "status",
            "kind": kind,
            "namespace": namespace,
            "slug": slug,
            "status": status,
        }),
        dedupe_key=compute_dedupe_key(kind, namespace, slug, "status"),
        reason=reason,
    )
    run = open_run(config, action=action, owner=owner, intent=intent, dry_run=dry_run)

    state = prepare_state(config, log)
    artifact = _resolve(state, kind, namespace, slug)
    previous = artifact.status

    run.start("status", f"{kind}/{slug}", status)
    if previous == status:
        outcome = Outcome.NOOP
    else:
        outcome = Outcome.UPDATED
        run.emit(
            ARTIFACT_STATUS_CHANGED,
            StatusChangedPayload(
                artifact_ref=ArtifactRef(
                    artifact_id=artifact.artifact_id,
                    kind=kind,
                    namespace=namespace,
                    slug=slug,
                ),
                to=status,
                from_status=previous,
            ),
        )
    run.complete(outcome)
    run.commit(log)
    logger.info("%s: %s -> %s (%s)", action, previous, status, outcome.value)

    report_dir = report_run(
        config,
        log,
        run,
        prompt=f"Set status of {kind}/{slug} to {status}",
        what=f"{MINIONS_PROTOCOL[kind]} {artifact.name}: {previous} -> {status}",
        why=reason or "Lifecycle change requested by owner.",
    )
    return LifecycleResult(
        outcome=outcome,
        run_id=run.run_id,
        events=list(run.events),
        artifact_id=artifact.artifact_id,
        report_dir=report_dir,
        dry_run=dry_run,
    )
