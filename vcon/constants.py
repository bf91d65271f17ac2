"""Shared constants: spec api version, artifact kinds and their codenames."""

from __future__ import annotations

from typing import Literal

VCON_API_VERSION = "vcon/v1"
EVENTS_API_VERSION = "vcon.events/v0"

Kind = Literal["agent", "project", "repo", "server", "container"]

KINDS: tuple[str, ...] = ("agent", "project", "repo", "server", "container")

# Minions Protocol: narrative codename for each artifact kind
MINIONS_PROTOCOL: dict[str, str] = {
    "agent": "Minion",
    "project": "Master Plan",
    "repo": "Blueprint",
    "server": "Lair",
    "container": "Capsule",
}

STATUS_DRAFT = "draft"
STATUS_ACTIVE = "active"
STATUS_PAUSED = "paused"
STATUS_RETIRED = "retired"

ARTIFACT_STATUSES = frozenset({
    STATUS_DRAFT,
    STATUS_ACTIVE,
    STATUS_PAUSED,
    STATUS_RETIRED,
})

DEFAULT_NAMESPACE = "global"
DEFAULT_OWNER = "unknown"
