"""
Projection of the event log into current artifact state.

The projection is computed state - it is derived by folding every event from
the start of the log and is never persisted. Folding the same sequence twice
yields equal results; input events are never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .events import (
    ArtifactCreatedPayload,
    ArtifactLinkedPayload,
    ArtifactUpdatedPayload,
    StatusChangedPayload,
    VconEvent,
)
from .hashing import artifact_key
from .snapshot import ArtifactMeta, ArtifactState, Link, Narrative, Ownership


@dataclass
class ProjectionState:
    by_id: dict[str, ArtifactState] = field(default_factory=dict)
    by_key: dict[tuple[str, str, str], str] = field(default_factory=dict)  # (kind, namespace, slug) -> artifact_id
    intents_seen: set[str] = field(default_factory=set)

    def lookup(self, kind: str, namespace: str, slug: str) -> ArtifactState | None:
        artifact_id = self.by_key.get(artifact_key(kind, namespace, slug))
        if artifact_id is None:
            return None
        return self.by_id.get(artifact_id)


def project_state(events: Iterable[VconEvent]) -> ProjectionState:
    """
    Fold an ordered event sequence into a ProjectionState.

    Events are applied left to right in log order; timestamps are
    informational only.
    """
    state = ProjectionState()
    for event in events:
        apply_event(state, event)
    return state


def apply_event(state: ProjectionState, event: VconEvent) -> None:
    """Apply a single event to the projection in place."""
    if event.intent.intent_hash:
        state.intents_seen.add(event.intent.intent_hash)

    payload = event.payload

    if isinstance(payload, ArtifactCreatedPayload):
        artifact = payload.artifact.copy()
        state.by_id[artifact.artifact_id] = artifact
        # First binding wins; a triple is never rebound.
        state.by_key.setdefault(artifact.identity, artifact.artifact_id)

    elif isinstance(payload, ArtifactUpdatedPayload):
        existing = state.by_id.get(payload.artifact_ref.artifact_id)
        if existing is not None:
            _apply_patch(existing, payload)

    elif isinstance(payload, ArtifactLinkedPayload):
        existing = state.by_id.get(payload.source_id)
        if existing is not None and not existing.has_link(payload.rel, payload.target_id):
            existing.links.append(Link(rel=payload.rel, target_id=payload.target_id))

    elif isinstance(payload, StatusChangedPayload):
        existing = state.by_id.get(payload.artifact_ref.artifact_id)
        if existing is not None:
            existing.status = payload.to

    # run.* and unknown event types carry no artifact state


def _apply_patch(artifact: ArtifactState, payload: ArtifactUpdatedPayload) -> None:
    patch = payload.patch.to_dict()  # deep copy

    if "name" in patch:
        artifact.name = patch["name"]
    if "status" in patch:
        artifact.status = patch["status"]
    if "narrative" in patch:
        artifact.narrative = Narrative.from_dict({**artifact.narrative.to_dict(), **patch["narrative"]})
    if "ownership" in patch:
        artifact.ownership = Ownership.from_dict({**artifact.ownership.to_dict(), **patch["ownership"]})
    if "meta" in patch:
        artifact.meta = ArtifactMeta.from_dict({**artifact.meta.to_dict(), **patch["meta"]})
    if "spec" in patch:
        artifact.spec = patch["spec"]
