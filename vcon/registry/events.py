"""
Immutable event types for the artifact registry.

Events are the atomic unit of the registry - each line in events.ndjson is one
event. Current state is computed by folding events, never by mutating prior
entries.

Payloads form a tagged union keyed by ``event_type``: every known type has its
own payload class, anything else decodes to ``UnknownPayload`` so that newer
logs can still be replayed.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from ..constants import EVENTS_API_VERSION
from .snapshot import ArtifactState
from .util import new_event_id

# Event type constants
RUN_STARTED = "run.started"
RUN_COMPLETED = "run.completed"
ARTIFACT_CREATED = "artifact.created"
ARTIFACT_UPDATED = "artifact.updated"
ARTIFACT_LINKED = "artifact.linked"
ARTIFACT_STATUS_CHANGED = "artifact.status_changed"

EVENT_TYPES = frozenset({
    RUN_STARTED,
    RUN_COMPLETED,
    ARTIFACT_CREATED,
    ARTIFACT_UPDATED,
    ARTIFACT_LINKED,
    ARTIFACT_STATUS_CHANGED,
})


class MalformedRecordError(ValueError):
    """A log record could not be decoded into an event."""


class ActorType(str, Enum):
    HUMAN = "human"
    MINION = "minion"
    SYSTEM = "system"


# -----------------------------------------------------------------------------
# Envelope parts
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Actor:
    type: str  # ActorType value
    id: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "id": self.id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Actor:
        return cls(type=data["type"], id=data["id"])


@dataclass(frozen=True)
class EventContext:
    run_id: str
    action: str
    dry_run: bool
    workspace: str
    spec_ref: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "action": self.action,
            "dry_run": self.dry_run,
            "workspace": self.workspace,
            "spec_ref": self.spec_ref,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventContext:
        return cls(
            run_id=data["run_id"],
            action=data["action"],
            dry_run=bool(data.get("dry_run", False)),
            workspace=data.get("workspace", ""),
            spec_ref=data.get("spec_ref"),
        )


@dataclass(frozen=True)
class Intent:
    intent_hash: str
    dedupe_key: str
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent_hash": self.intent_hash,
            "dedupe_key": self.dedupe_key,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Intent:
        return cls(
            intent_hash=data["intent_hash"],
            dedupe_key=data.get("dedupe_key", ""),
            reason=data.get("reason"),
        )


# -----------------------------------------------------------------------------
# Payloads
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class RunStartedPayload:
    command: str
    args: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"command": self.command, "args": list(self.args)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunStartedPayload:
        return cls(command=data.get("command", ""), args=tuple(data.get("args") or ()))


@dataclass(frozen=True)
class RunCompletedPayload:
    outcome: str
    noop: bool

    def to_dict(self) -> dict[str, Any]:
        return {"outcome": self.outcome, "noop": self.noop}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunCompletedPayload:
        return cls(outcome=data["outcome"], noop=bool(data.get("noop", False)))


@dataclass(frozen=True)
class ArtifactCreatedPayload:
    artifact: ArtifactState

    def to_dict(self) -> dict[str, Any]:
        return {"artifact": self.artifact.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArtifactCreatedPayload:
        return cls(artifact=ArtifactState.from_dict(data["artifact"]))


@dataclass(frozen=True)
class ArtifactRef:
    artifact_id: str
    kind: str | None = None
    namespace: str | None = None
    slug: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"artifact_id": self.artifact_id}
        for key in ("kind", "namespace", "slug"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArtifactRef:
        return cls(
            artifact_id=data["artifact_id"],
            kind=data.get("kind"),
            namespace=data.get("namespace"),
            slug=data.get("slug"),
        )


@dataclass(frozen=True)
class ArtifactPatch:
    """Partial update; ``None`` means "leave this field alone"."""

    name: str | None = None
    status: str | None = None
    narrative: dict[str, Any] | None = None
    ownership: dict[str, Any] | None = None
    meta: dict[str, Any] | None = None
    spec: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key in ("name", "status", "narrative", "ownership", "meta", "spec"):
            value = getattr(self, key)
            if value is not None:
                result[key] = copy.deepcopy(value)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArtifactPatch:
        return cls(**{
            key: copy.deepcopy(data[key])
            for key in ("name", "status", "narrative", "ownership", "meta", "spec")
            if data.get(key) is not None
        })


@dataclass(frozen=True)
class ArtifactUpdatedPayload:
    artifact_ref: ArtifactRef
    patch: ArtifactPatch

    def to_dict(self) -> dict[str, Any]:
        return {"artifact_ref": self.artifact_ref.to_dict(), "patch": self.patch.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArtifactUpdatedPayload:
        return cls(
            artifact_ref=ArtifactRef.from_dict(data["artifact_ref"]),
            patch=ArtifactPatch.from_dict(data.get("patch") or {}),
        )


@dataclass(frozen=True)
class ArtifactLinkedPayload:
    source_id: str
    rel: str
    target_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": {"artifact_id": self.source_id},
            "rel": self.rel,
            "to": {"artifact_id": self.target_id},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArtifactLinkedPayload:
        return cls(
            source_id=data["from"]["artifact_id"],
            rel=data["rel"],
            target_id=data["to"]["artifact_id"],
        )


@dataclass(frozen=True)
class StatusChangedPayload:
    artifact_ref: ArtifactRef
    to: str
    from_status: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifact_ref": self.artifact_ref.to_dict(),
            "from": self.from_status,
            "to": self.to,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StatusChangedPayload:
        return cls(
            artifact_ref=ArtifactRef.from_dict(data["artifact_ref"]),
            to=data["to"],
            from_status=data.get("from"),
        )


@dataclass(frozen=True)
class UnknownPayload:
    """Payload of an event type this version does not understand."""

    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UnknownPayload:
        return cls(data=copy.deepcopy(data))


EventPayload = Union[
    RunStartedPayload,
    RunCompletedPayload,
    ArtifactCreatedPayload,
    ArtifactUpdatedPayload,
    ArtifactLinkedPayload,
    StatusChangedPayload,
    UnknownPayload,
]

PAYLOAD_TYPES: dict[str, type] = {
    RUN_STARTED: RunStartedPayload,
    RUN_COMPLETED: RunCompletedPayload,
    ARTIFACT_CREATED: ArtifactCreatedPayload,
    ARTIFACT_UPDATED: ArtifactUpdatedPayload,
    ARTIFACT_LINKED: ArtifactLinkedPayload,
    ARTIFACT_STATUS_CHANGED: StatusChangedPayload,
}


def decode_payload(event_type: str, data: dict[str, Any]) -> EventPayload:
    payload_cls = PAYLOAD_TYPES.get(event_type, UnknownPayload)
    return payload_cls.from_dict(data)


# -----------------------------------------------------------------------------
# Envelope
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class VconEvent:
    """
    Immutable event in the registry.

    Events are append-only - once written, they are never modified.
    """

    event_id: str
    event_type: str
    occurred_at: datetime
    actor: Actor
    context: EventContext
    intent: Intent
    payload: EventPayload
    api_version: str = EVENTS_API_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "apiVersion": self.api_version,
            "event_id": self.event_id,
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "actor": self.actor.to_dict(),
            "context": self.context.to_dict(),
            "intent": self.intent.to_dict(),
            "payload": self.payload.to_dict(),
        }

    def to_json(self) -> str:
        """Serialize to JSON string (single line)."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VconEvent:
        """Reconstruct from JSON dict."""
        try:
            event_type = data["event_type"]
            return cls(
                event_id=data["event_id"],
                event_type=event_type,
                occurred_at=datetime.fromisoformat(data["occurred_at"]),
                actor=Actor.from_dict(data["actor"]),
                context=EventContext.from_dict(data["context"]),
                intent=Intent.from_dict(data["intent"]),
                payload=decode_payload(event_type, data.get("payload") or {}),
                api_version=data.get("apiVersion", EVENTS_API_VERSION),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise MalformedRecordError(f"invalid event record: {exc!r}") from exc

    @classmethod
    def from_json(cls, line: str) -> VconEvent:
        """Parse from JSON string."""
        try:
            data = json.loads(line)
        except json.JSONDecodeError as exc:
            raise MalformedRecordError(f"invalid JSON: {exc.msg}") from exc
        if not isinstance(data, dict):
            raise MalformedRecordError("event record must be a JSON object")
        return cls.from_dict(data)


def create_event(
    event_type: str,
    context: EventContext,
    actor: Actor,
    intent: Intent,
    payload: EventPayload,
    *,
    occurred_at: datetime | None = None,
) -> VconEvent:
    """
    Factory function for creating events.

    Only known event types may be written; the payload class must match.
    """
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Invalid event_type: {event_type}")
    expected = PAYLOAD_TYPES[event_type]
    if not isinstance(payload, expected):
        raise TypeError(f"{event_type} requires {expected.__name__}, got {type(payload).__name__}")
    return VconEvent(
        event_id=new_event_id(),
        event_type=event_type,
        occurred_at=occurred_at or datetime.now(timezone.utc),
        actor=actor,
        context=context,
        intent=intent,
        payload=payload,
    )
