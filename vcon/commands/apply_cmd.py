"""Apply / link / status CLI commands."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import WorkspaceConfig
from ..constants import MINIONS_PROTOCOL
from ..core.apply import apply_spec
from ..core.lifecycle import LifecycleResult, link_artifacts, set_status
from ..core.run import Outcome, registry_label, resolve_log
from ..spec.load import load_spec

_OUTCOME_STYLE = {
    Outcome.CREATED: "bold green",
    Outcome.UPDATED: "bold cyan",
    Outcome.NOOP: "dim",
}


def _mode(dry_run: bool) -> str:
    return "DRY-RUN" if dry_run else "APPLY"


def _print_registry_line(console: Console, config: WorkspaceConfig, dry_run: bool) -> None:
    label = registry_label(config, resolve_log(config, None), dry_run=dry_run)
    suffix = " (dry-run)" if dry_run else ""
    console.print(f"   registry: {label}{suffix}")


def run_apply(
    config: WorkspaceConfig,
    spec_path: Path,
    *,
    dry_run: bool,
    namespace: str | None,
    owner: str | None,
    reason: str | None,
) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        spec = load_spec(spec_path)
        result = apply_spec(
            spec,
            config,
            dry_run=dry_run,
            namespace=namespace,
            owner=owner,
            reason=reason,
            spec_ref=str(spec_path),
        )
    except (ValueError, LookupError, OSError) as e:
        err.print(escape(f"Apply failed: {e}"), style="bold red")
        return 1

    console.print(f"{_mode(result.dry_run)} {result.outcome.value}", style=_OUTCOME_STYLE[result.outcome])
    console.print(escape(f"   {MINIONS_PROTOCOL[spec.kind]} ({spec.kind}): {spec.name}"))
    if result.artifact_id:
        console.print(f"   artifact: {result.artifact_id}")
    console.print(f"   run_id:   {result.run_id}")
    console.print(f"   events:   {', '.join(result.event_types)}")
    console.print(f"   report:   {result.report_dir}")
    _print_registry_line(console, config, result.dry_run)
    return 0


def _print_lifecycle(console: Console, config: WorkspaceConfig, result: LifecycleResult, headline: str) -> None:
    console.print(f"{_mode(result.dry_run)} {result.outcome.value}", style=_OUTCOME_STYLE[result.outcome])
    console.print(f"   {escape(headline)}")
    console.print(f"   run_id:   {result.run_id}")
    console.print(f"   events:   {', '.join(e.event_type for e in result.events)}")
    console.print(f"   report:   {result.report_dir}")
    _print_registry_line(console, config, result.dry_run)


def _parse_ref(ref: str) -> tuple[str, str]:
    kind, sep, slug = ref.partition("/")
    if not sep or not kind or not slug:
        raise ValueError(f"expected KIND/SLUG, got {ref!r}")
    return kind, slug


def run_link(
    config: WorkspaceConfig,
    source: str,
    rel: str,
    target: str,
    *,
    dry_run: bool,
    namespace: str | None,
    owner: str | None,
    reason: str | None,
) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        result = link_artifacts(
            _parse_ref(source),
            rel,
            _parse_ref(target),
            config,
            dry_run=dry_run,
            namespace=namespace,
            owner=owner,
            reason=reason,
        )
    except (ValueError, LookupError, OSError) as e:
        err.print(escape(f"Link failed: {e}"), style="bold red")
        return 1

    _print_lifecycle(console, config, result, f"{source} -[{rel}]-> {target}")
    return 0


def run_status(
    config: WorkspaceConfig,
    kind: str,
    slug: str,
    status: str,
    *,
    dry_run: bool,
    namespace: str | None,
    owner: str | None,
    reason: str | None,
) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        result = set_status(
            kind,
            slug,
            status,
            config,
            dry_run=dry_run,
            namespace=namespace,
            owner=owner,
            reason=reason,
        )
    except (ValueError, LookupError, OSError) as e:
        err.print(escape(f"Status change failed: {e}"), style="bold red")
        return 1

    _print_lifecycle(console, config, result, f"{kind}/{slug} -> {status}")
    return 0
