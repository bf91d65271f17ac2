"""Tests for governance scaffolding and run debriefs."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from vcon.config import PACKAGE_TEMPLATES_DIR
from vcon.governance import init_governance
from vcon.reports import ReportInput, read_report, write_report


def test_init_governance_copies_templates_once(tmp_path: Path) -> None:
    target = tmp_path / "ai" / "governance"

    first = init_governance(PACKAGE_TEMPLATES_DIR, target)
    second = init_governance(PACKAGE_TEMPLATES_DIR, target)

    names = sorted(p.name for p in first.copied)
    assert names == ["README.md", "minions-protocol.md", "principles.md"]
    assert second.copied == []


def test_init_governance_never_overwrites(tmp_path: Path) -> None:
    target = tmp_path / "gov"
    target.mkdir()
    (target / "principles.md").write_text("our own rules\n", encoding="utf-8")

    result = init_governance(PACKAGE_TEMPLATES_DIR, target)

    assert (target / "principles.md").read_text(encoding="utf-8") == "our own rules\n"
    assert target / "principles.md" not in result.copied


def test_init_governance_missing_templates(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        init_governance(tmp_path / "nowhere", tmp_path / "gov")
    assert not (tmp_path / "gov").exists()


def _report(tmp_path: Path, **overrides) -> ReportInput:
    fields = dict(
        reports_path=tmp_path / "reports",
        templates_dir=PACKAGE_TEMPLATES_DIR,
        action="apply-agent-kevin",
        prompt="Apply spec (kind=agent, name=Kevin)",
        what="Created Minion (agent): Kevin",
        why="Bootstrap",
        how="run_id: run_X\noutcome: created",
        result="created: 3 events appended to registry.",
        metadata={"run_id": "run_X", "outcome": "created", "dry_run": False, "events": ["run.started"]},
    )
    fields.update(overrides)
    return ReportInput(**fields)


def test_write_report_layout_and_front_matter(tmp_path: Path) -> None:
    report_dir = write_report(_report(tmp_path), today=date(2026, 2, 18))

    assert report_dir == tmp_path / "reports" / "2026-02-18" / "apply-agent-kevin"
    text = (report_dir / "report.md").read_text(encoding="utf-8")
    assert text.startswith("---\n")
    assert "## What" in text
    assert "Created Minion (agent): Kevin" in text

    debrief = read_report(report_dir)
    assert debrief.metadata["run_id"] == "run_X"
    assert debrief.metadata["dry_run"] is False
    assert debrief.metadata["action"] == "apply-agent-kevin"
    assert "Apply spec (kind=agent, name=Kevin)" in debrief.prompt
    assert "outcome: created" in debrief.report


def test_same_action_same_day_overwrites(tmp_path: Path) -> None:
    day = date(2026, 2, 18)
    write_report(_report(tmp_path), today=day)
    report_dir = write_report(_report(tmp_path, what="Noop Minion (agent): Kevin"), today=day)

    debrief = read_report(report_dir)
    assert "Noop Minion" in debrief.report
    assert "Created Minion" not in debrief.report


def test_read_report_tolerates_missing_files(tmp_path: Path) -> None:
    debrief = read_report(tmp_path)
    assert debrief.prompt is None
    assert debrief.report is None
    assert debrief.metadata == {}
