"""Read-only registry inspection commands."""

from __future__ import annotations

import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import WorkspaceConfig
from ..registry.events import (
    ArtifactCreatedPayload,
    ArtifactLinkedPayload,
    ArtifactUpdatedPayload,
    RunCompletedPayload,
    StatusChangedPayload,
    VconEvent,
)
from ..registry.log import JsonlEventLog
from ..registry.projection import ProjectionState, project_state


def _load(config: WorkspaceConfig) -> ProjectionState:
    return project_state(JsonlEventLog(config.events_path).read_all())


def run_registry_list(
    config: WorkspaceConfig,
    *,
    kind: str | None = None,
    status: str | None = None,
    namespace: str | None = None,
) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        state = _load(config)
    except (ValueError, OSError) as e:
        err.print(escape(str(e)), style="bold red")
        return 1

    artifacts = list(state.by_id.values())
    if kind:
        artifacts = [a for a in artifacts if a.kind == kind]
    if status:
        artifacts = [a for a in artifacts if a.status == status]
    if namespace:
        artifacts = [a for a in artifacts if a.namespace == namespace]

    artifacts.sort(key=lambda a: (a.kind, a.namespace, a.slug))

    table = Table(title="Artifacts")
    table.add_column("artifact_id", style="cyan", no_wrap=True)
    table.add_column("kind", style="magenta")
    table.add_column("codename")
    table.add_column("namespace")
    table.add_column("slug")
    table.add_column("name")
    table.add_column("status")
    table.add_column("links", justify="right")

    for a in artifacts:
        table.add_row(
            a.artifact_id,
            a.kind,
            a.narrative.codename,
            a.namespace,
            a.slug,
            a.name,
            a.status,
            str(len(a.links)),
        )

    console.print(table)
    return 0


def run_registry_show(
    config: WorkspaceConfig,
    kind: str,
    slug: str,
    *,
    namespace: str | None = None,
    output_json: bool = False,
) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        state = _load(config)
    except (ValueError, OSError) as e:
        err.print(escape(str(e)), style="bold red")
        return 1

    ns = namespace or config.namespace
    artifact = state.lookup(kind, ns, slug)
    if artifact is None:
        err.print(f"Artifact not found: {kind}/{slug} (namespace {ns})", style="bold red")
        return 1

    data = artifact.to_dict()
    if output_json:
        print(json.dumps(data, indent=2, sort_keys=True))
        return 0

    console.print(f"[bold]{escape(artifact.name)}[/] ({artifact.narrative.codename}, {artifact.kind})")
    console.print(f"  artifact_id: {artifact.artifact_id}")
    console.print(f"  identity:    {artifact.kind}/{artifact.namespace}/{artifact.slug}")
    console.print(f"  status:      {artifact.status}")
    console.print(f"  owner:       {artifact.ownership.owner}")
    if artifact.ownership.steward:
        console.print(f"  steward:     {artifact.ownership.steward}")
    console.print(f"  created_at:  {artifact.meta.created_at}", style="dim")
    console.print(f"  updated_at:  {artifact.meta.updated_at}", style="dim")
    for link in artifact.links:
        target = state.by_id.get(link.target_id)
        label = f"{target.kind}/{target.slug}" if target else link.target_id
        console.print(escape(f"  link: -[{link.rel}]-> {label}"))
    console.print("  spec:")
    console.print_json(json.dumps(data["spec"], sort_keys=True))
    return 0


def _describe(event: VconEvent) -> str:
    payload = event.payload
    if isinstance(payload, ArtifactCreatedPayload):
        a = payload.artifact
        return f"{a.kind}/{a.slug} ({a.artifact_id})"
    if isinstance(payload, ArtifactUpdatedPayload):
        fields = ", ".join(sorted(payload.patch.to_dict()))
        return f"{payload.artifact_ref.artifact_id}: {fields}"
    if isinstance(payload, ArtifactLinkedPayload):
        return f"{payload.source_id} -[{payload.rel}]-> {payload.target_id}"
    if isinstance(payload, StatusChangedPayload):
        return f"{payload.artifact_ref.artifact_id}: {payload.from_status} -> {payload.to}"
    if isinstance(payload, RunCompletedPayload):
        return payload.outcome
    return ""


def run_registry_events(config: WorkspaceConfig, *, limit: int | None = None) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        events = JsonlEventLog(config.events_path).read_all()
    except (ValueError, OSError) as e:
        err.print(escape(str(e)), style="bold red")
        return 1

    if limit is not None:
        events = events[-limit:] if limit > 0 else []

    table = Table(title=f"Events ({config.events_path.name})")
    table.add_column("occurred_at", style="dim", no_wrap=True)
    table.add_column("event_type", style="magenta")
    table.add_column("run_id", style="cyan", no_wrap=True)
    table.add_column("actor")
    table.add_column("detail")

    for event in events:
        table.add_row(
            event.occurred_at.strftime("%Y-%m-%d %H:%M:%S"),
            event.event_type,
            event.context.run_id,
            f"{event.actor.type}:{event.actor.id}",
            _describe(event),
        )

    console.print(table)
    return 0
