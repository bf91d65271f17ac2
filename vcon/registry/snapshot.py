"""
Projected artifact state.

An ArtifactState is computed by folding events, never stored as the source of
truth. The same shape is carried verbatim in the payload of an
``artifact.created`` event, which is why it knows how to (de)serialize itself.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Narrative:
    codename: str
    label: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"codename": self.codename}
        if self.label is not None:
            result["label"] = self.label
        if self.description is not None:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Narrative:
        return cls(
            codename=str(data.get("codename", "")),
            label=data.get("label"),
            description=data.get("description"),
        )


@dataclass
class Ownership:
    owner: str
    steward: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"owner": self.owner, "steward": self.steward}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Ownership:
        return cls(owner=str(data.get("owner", "")), steward=data.get("steward"))


@dataclass
class ArtifactMeta:
    tags: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "tags": list(self.tags),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArtifactMeta:
        return cls(
            tags=list(data.get("tags") or []),
            created_at=str(data.get("created_at", "")),
            updated_at=str(data.get("updated_at", "")),
        )


@dataclass(frozen=True)
class Link:
    """Typed edge from one artifact to another."""

    rel: str
    target_id: str

    def to_dict(self) -> dict[str, str]:
        return {"rel": self.rel, "target_id": self.target_id}


@dataclass
class ArtifactState:
    """
    Current state of one artifact.

    Identity is (kind, namespace, slug); artifact_id is bound to it once at
    creation and never changes.
    """

    artifact_id: str
    kind: str
    namespace: str
    slug: str
    name: str
    status: str
    narrative: Narrative
    ownership: Ownership
    meta: ArtifactMeta = field(default_factory=ArtifactMeta)
    spec: dict[str, Any] = field(default_factory=dict)
    links: list[Link] = field(default_factory=list)

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.kind, self.namespace, self.slug)

    def has_link(self, rel: str, target_id: str) -> bool:
        return any(link.rel == rel and link.target_id == target_id for link in self.links)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "artifact_id": self.artifact_id,
            "kind": self.kind,
            "namespace": self.namespace,
            "name": self.name,
            "slug": self.slug,
            "status": self.status,
            "narrative": self.narrative.to_dict(),
            "ownership": self.ownership.to_dict(),
            "meta": self.meta.to_dict(),
            "spec": copy.deepcopy(self.spec),
            "links": [link.to_dict() for link in self.links],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArtifactState:
        """Reconstruct from JSON dict. Nested values are copied, never shared."""
        return cls(
            artifact_id=data["artifact_id"],
            kind=data["kind"],
            namespace=data["namespace"],
            slug=data["slug"],
            name=data.get("name", ""),
            status=data.get("status", ""),
            narrative=Narrative.from_dict(data.get("narrative") or {}),
            ownership=Ownership.from_dict(data.get("ownership") or {}),
            meta=ArtifactMeta.from_dict(data.get("meta") or {}),
            spec=copy.deepcopy(data.get("spec") or {}),
            links=[Link(rel=link["rel"], target_id=link["target_id"]) for link in data.get("links") or []],
        )

    def copy(self) -> ArtifactState:
        return ArtifactState.from_dict(self.to_dict())
