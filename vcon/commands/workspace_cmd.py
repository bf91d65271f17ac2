"""Workspace commands: init, new, validate, report."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape

from ..config import WorkspaceConfig
from ..constants import MINIONS_PROTOCOL
from ..core.scaffold import scaffold_spec
from ..governance import init_governance
from ..reports import read_report
from ..spec.load import load_spec


def _rel(config: WorkspaceConfig, path: Path) -> str:
    try:
        return str(path.relative_to(config.root))
    except ValueError:
        return str(path)


def run_init(config: WorkspaceConfig) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        result = init_governance(config.templates_dir, config.governance_path)
        config.registry_path.mkdir(parents=True, exist_ok=True)
        config.reports_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        err.print(escape(f"Init failed: {e}"), style="bold red")
        return 1

    console.print("VCON initialized", style="bold green")
    console.print(f"   governance: {_rel(config, config.governance_path)} ({len(result.copied)} new file(s))")
    console.print(f"   registry:   {_rel(config, config.registry_path)}/")
    console.print(f"   reports:    {_rel(config, config.reports_path)}/")
    return 0


def run_new(config: WorkspaceConfig, kind: str, name: str, out_dir: Path) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        result = scaffold_spec(kind, name, config.templates_dir, out_dir.resolve())
    except (ValueError, OSError) as e:
        err.print(escape(str(e)), style="bold red")
        return 1

    console.print("Spec generated", style="bold green")
    console.print(f"   kind: {kind} ({MINIONS_PROTOCOL[kind]})")
    console.print(f"   slug: {result.slug}")
    console.print(f"   path: {result.out_path}")
    return 0


def run_validate(spec_path: Path) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        spec = load_spec(spec_path)
    except (ValueError, OSError) as e:
        err.print(escape(str(e)), style="bold red")
        return 1

    console.print("Spec valid", style="bold green")
    console.print(f"   kind: {spec.kind} ({MINIONS_PROTOCOL[spec.kind]})")
    console.print(escape(f"   name: {spec.name}"))
    console.print(f"   slug: {spec.slug}")
    return 0


def run_report(report_dir: Path, *, show: bool = False) -> int:
    console = Console()
    err = Console(stderr=True)
    report_dir = report_dir.resolve()
    if not report_dir.is_dir():
        err.print(escape(f"Report directory not found: {report_dir}"), style="bold red")
        return 1

    debrief = read_report(report_dir)
    console.print(escape(f"Debrief: {report_dir}"), style="bold")
    for key in ("run_id", "outcome", "dry_run", "registry"):
        if key in debrief.metadata:
            console.print(escape(f"   {key}: {debrief.metadata[key]}"))
    console.print(f"   prompt: {'found' if debrief.prompt is not None else 'not found'}")
    console.print(f"   report: {'found' if debrief.report is not None else 'not found'}")

    if show and debrief.report is not None:
        console.print(Markdown(debrief.report))
    return 0
