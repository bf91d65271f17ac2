"""
Human-facing run reports ("debriefs").

Each run writes ``prompt.md`` and ``report.md`` under
``<reports>/<YYYY-MM-DD>/<action>/``. Bodies come from the packaged
templates; run metadata is stored as YAML front matter so the ``report``
command can read it back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import frontmatter

from ..utils import render_template, today_str

logger = logging.getLogger(__name__)

PROMPT_FILENAME = "prompt.md"
REPORT_FILENAME = "report.md"


@dataclass
class ReportInput:
    reports_path: Path
    templates_dir: Path
    action: str
    prompt: str
    what: str
    why: str
    how: str
    result: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Debrief:
    report_dir: Path
    metadata: dict[str, Any]
    prompt: str | None
    report: str | None


def _render(templates_dir: Path, name: str, variables: dict[str, str]) -> str:
    template = (templates_dir / "reports" / name).read_text(encoding="utf-8")
    return render_template(template, variables)


def write_report(report: ReportInput, *, today: date | None = None) -> Path:
    """
    Render and write a debrief for one run.

    A second run with the same action on the same day overwrites the previous
    debrief; the event log remains the record of both.

    Returns:
        The report directory
    """
    report_dir = report.reports_path / today_str(today) / report.action
    report_dir.mkdir(parents=True, exist_ok=True)

    metadata = {
        "action": report.action,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        **report.metadata,
    }

    prompt_post = frontmatter.Post(
        _render(report.templates_dir, PROMPT_FILENAME, {"prompt": report.prompt}),
        **metadata,
    )
    report_post = frontmatter.Post(
        _render(
            report.templates_dir,
            REPORT_FILENAME,
            {"what": report.what, "why": report.why, "how": report.how, "result": report.result},
        ),
        **metadata,
    )

    (report_dir / PROMPT_FILENAME).write_text(frontmatter.dumps(prompt_post) + "\n", encoding="utf-8")
    (report_dir / REPORT_FILENAME).write_text(frontmatter.dumps(report_post) + "\n", encoding="utf-8")

    logger.info("report written to %s", report_dir)
    return report_dir


def read_report(report_dir: Path) -> Debrief:
    """Load a debrief back; missing files come back as None."""
    metadata: dict[str, Any] = {}
    bodies: dict[str, str | None] = {}
    for name in (PROMPT_FILENAME, REPORT_FILENAME):
        path = report_dir / name
        if not path.exists():
            bodies[name] = None
            continue
        post = frontmatter.load(path)
        metadata.update(post.metadata)
        bodies[name] = post.content
    return Debrief(
        report_dir=report_dir,
        metadata=metadata,
        prompt=bodies[PROMPT_FILENAME],
        report=bodies[REPORT_FILENAME],
    )
