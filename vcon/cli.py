"""CLI entrypoint for vcon."""

import logging
import sys
import tomllib
from pathlib import Path

import click

from . import __version__
from .config import load_config
from .constants import ARTIFACT_STATUSES, KINDS


def _configure_logging(verbose: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(__version__, prog_name="vcon")
@click.option(
    "--root",
    "-r",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    envvar="VCON_ROOT",
    default=None,
    help="Workspace root (defaults to $VCON_ROOT, then the current directory)",
)
@click.option("--verbose", "-V", is_flag=True, help="Log registry activity to stderr")
@click.pass_context
def cli(ctx: click.Context, root: Path | None, verbose: bool) -> None:
    """vcon - Villain-Con (VCON) Minions Protocol bootstrapper.

    Scaffold, validate and apply artifact specs against an append-only,
    event-sourced registry.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)

    root = (root or Path.cwd()).resolve()
    if root.exists() and not root.is_dir():
        raise click.BadParameter(f"'{root}' is not a directory.", param_hint="--root / -r")

    try:
        ctx.obj["config"] = load_config(root)
    except (tomllib.TOMLDecodeError, OSError) as e:
        raise click.ClickException(f"Cannot read vcon.toml: {e}")


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create minimal VCON workspace scaffolding (non-destructive)."""
    from .commands.workspace_cmd import run_init

    sys.exit(run_init(ctx.obj["config"]))


@cli.command()
@click.argument("kind", type=click.Choice(list(KINDS)))
@click.argument("name")
@click.option(
    "--out",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Output directory",
)
@click.pass_context
def new(ctx: click.Context, kind: str, name: str, out: Path) -> None:
    """Generate a VCON spec for a kind + human name.

    Examples:

        vcon new agent "Kevin the Minion"

        vcon new server "Volcano Lair" --out specs/
    """
    from .commands.workspace_cmd import run_new

    sys.exit(run_new(ctx.obj["config"], kind, name, out))


@cli.command()
@click.argument("spec_path", metavar="SPEC", type=click.Path(dir_okay=False, path_type=Path))
def validate(spec_path: Path) -> None:
    """Validate a VCON spec (schema + Minions Protocol mapping)."""
    from .commands.workspace_cmd import run_validate

    sys.exit(run_validate(spec_path))


@cli.command()
@click.argument("spec_path", metavar="SPEC", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, help="Decide and report, but do not write registry events")
@click.option("--namespace", type=str, default=None, help="Namespace (default from vcon.toml, else 'global')")
@click.option("--owner", type=str, default=None, help="Owner id (default from vcon.toml, else 'unknown')")
@click.option("--reason", type=str, default=None, help="Reason for this apply (audit)")
@click.pass_context
def apply(
    ctx: click.Context,
    spec_path: Path,
    dry_run: bool,
    namespace: str | None,
    owner: str | None,
    reason: str | None,
) -> None:
    """Apply a VCON spec: event-sourced registry write + report.

    Re-applying an identical spec is a noop; changing only the spec payload
    records an update.
    """
    from .commands.apply_cmd import run_apply

    sys.exit(
        run_apply(
            ctx.obj["config"],
            spec_path,
            dry_run=dry_run,
            namespace=namespace,
            owner=owner,
            reason=reason,
        )
    )


@cli.command()
@click.argument("source", metavar="FROM")
@click.argument("rel")
@click.argument("target", metavar="TO")
@click.option("--dry-run", is_flag=True, help="Decide and report, but do not write registry events")
@click.option("--namespace", type=str, default=None, help="Namespace of both artifacts")
@click.option("--owner", type=str, default=None, help="Owner id recorded as the actor")
@click.option("--reason", type=str, default=None, help="Reason for this link (audit)")
@click.pass_context
def link(
    ctx: click.Context,
    source: str,
    rel: str,
    target: str,
    dry_run: bool,
    namespace: str | None,
    owner: str | None,
    reason: str | None,
) -> None:
    """Link two artifacts, given as KIND/SLUG.

    Examples:

        vcon link agent/kevin deploys-to server/volcano-lair
    """
    from .commands.apply_cmd import run_link

    sys.exit(
        run_link(
            ctx.obj["config"],
            source,
            rel,
            target,
            dry_run=dry_run,
            namespace=namespace,
            owner=owner,
            reason=reason,
        )
    )


@cli.command()
@click.argument("kind", type=click.Choice(list(KINDS)))
@click.argument("slug")
@click.argument("status", type=click.Choice(sorted(ARTIFACT_STATUSES)))
@click.option("--dry-run", is_flag=True, help="Decide and report, but do not write registry events")
@click.option("--namespace", type=str, default=None, help="Namespace of the artifact")
@click.option("--owner", type=str, default=None, help="Owner id recorded as the actor")
@click.option("--reason", type=str, default=None, help="Reason for the change (audit)")
@click.pass_context
def status(
    ctx: click.Context,
    kind: str,
    slug: str,
    status: str,
    dry_run: bool,
    namespace: str | None,
    owner: str | None,
    reason: str | None,
) -> None:
    """Change an artifact's status (retire instead of delete)."""
    from .commands.apply_cmd import run_status

    sys.exit(
        run_status(
            ctx.obj["config"],
            kind,
            slug,
            status,
            dry_run=dry_run,
            namespace=namespace,
            owner=owner,
            reason=reason,
        )
    )


@cli.group()
def registry() -> None:
    """Inspect the event-sourced registry (read-only)."""
    pass


@registry.command("list")
@click.option("--kind", type=click.Choice(list(KINDS)), default=None, help="Only this kind")
@click.option("--status", type=click.Choice(sorted(ARTIFACT_STATUSES)), default=None, help="Only this status")
@click.option("--namespace", type=str, default=None, help="Only this namespace")
@click.pass_context
def registry_list(ctx: click.Context, kind: str | None, status: str | None, namespace: str | None) -> None:
    """List artifacts projected from the event log."""
    from .commands.registry_cmd import run_registry_list

    sys.exit(run_registry_list(ctx.obj["config"], kind=kind, status=status, namespace=namespace))


@registry.command("show")
@click.argument("kind", type=click.Choice(list(KINDS)))
@click.argument("slug")
@click.option("--namespace", type=str, default=None, help="Namespace (default from vcon.toml)")
@click.option("--json", "output_json", is_flag=True, help="Output the artifact state as JSON")
@click.pass_context
def registry_show(ctx: click.Context, kind: str, slug: str, namespace: str | None, output_json: bool) -> None:
    """Show the current state of one artifact."""
    from .commands.registry_cmd import run_registry_show

    sys.exit(run_registry_show(ctx.obj["config"], kind, slug, namespace=namespace, output_json=output_json))


@registry.command("events")
@click.option("--limit", type=int, default=None, help="Only the last N events")
@click.pass_context
def registry_events(ctx: click.Context, limit: int | None) -> None:
    """Print the raw event log in append order."""
    from .commands.registry_cmd import run_registry_events

    sys.exit(run_registry_events(ctx.obj["config"], limit=limit))


@cli.command()
@click.argument("report_dir", metavar="DIR", type=click.Path(path_type=Path))
@click.option("--show", is_flag=True, help="Render report.md")
def report(report_dir: Path, show: bool) -> None:
    """Show a debrief from a previous action.

    Example: vcon report reports/2026-02-18/apply-agent-kevin
    """
    from .commands.workspace_cmd import run_report

    sys.exit(run_report(report_dir, show=show))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
