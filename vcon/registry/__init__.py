"""
Event-sourced artifact registry.

- Append-only event log (never modified)
- Canonical intent hashing (what was asked, not who/when)
- Projection: current artifact state folded from the full log
"""

from .events import (
    ARTIFACT_CREATED,
    ARTIFACT_LINKED,
    ARTIFACT_STATUS_CHANGED,
    ARTIFACT_UPDATED,
    RUN_COMPLETED,
    RUN_STARTED,
    Actor,
    ActorType,
    EventContext,
    Intent,
    MalformedRecordError,
    VconEvent,
    create_event,
)
from .hashing import artifact_key, canonicalize, compute_dedupe_key, compute_intent_hash
from .log import EventLog, InMemoryEventLog, JsonlEventLog
from .projection import ProjectionState, apply_event, project_state
from .snapshot import ArtifactState, Link

__all__ = [
    # Events
    "VconEvent",
    "Actor",
    "ActorType",
    "EventContext",
    "Intent",
    "MalformedRecordError",
    "create_event",
    "RUN_STARTED",
    "RUN_COMPLETED",
    "ARTIFACT_CREATED",
    "ARTIFACT_UPDATED",
    "ARTIFACT_LINKED",
    "ARTIFACT_STATUS_CHANGED",
    # Hashing
    "canonicalize",
    "compute_intent_hash",
    "compute_dedupe_key",
    "artifact_key",
    # Storage
    "EventLog",
    "JsonlEventLog",
    "InMemoryEventLog",
    # Projection
    "ProjectionState",
    "ArtifactState",
    "Link",
    "apply_event",
    "project_state",
]
