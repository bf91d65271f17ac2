"""Generate a starter spec file for a kind + human name."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..constants import KINDS
from ..utils import render_template, slugify


@dataclass
class ScaffoldResult:
    out_path: Path
    slug: str


def _yaml_quoted(value: str) -> str:
    # Templates wrap values in double quotes; escape what would close or fold them.
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def scaffold_spec(kind: str, name: str, templates_dir: Path, out_dir: Path) -> ScaffoldResult:
    """
    Render ``templates/specs/<kind>.yaml`` into ``<out_dir>/<kind>.<slug>.vcon.yaml``.

    An existing file at the destination is overwritten.
    """
    if kind not in KINDS:
        raise ValueError(f"kind must be one of {', '.join(KINDS)}; got {kind!r}")

    slug = slugify(name)
    if not slug:
        raise ValueError(f"cannot derive a slug from name {name!r}")

    template_path = templates_dir / "specs" / f"{kind}.yaml"
    if not template_path.exists():
        raise FileNotFoundError(f"template not found for kind {kind!r}: {template_path}")

    rendered = render_template(
        template_path.read_text(encoding="utf-8"),
        {"name": _yaml_quoted(name.strip()), "slug": slug},
    )

    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{kind}.{slug}.vcon.yaml"
    out_path.write_text(rendered, encoding="utf-8")
    return ScaffoldResult(out_path=out_path, slug=slug)
