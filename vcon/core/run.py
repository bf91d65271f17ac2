"""
One run of a registry command.

A run collects every event it emits under a shared context, actor and intent,
then commits them to the log as a single batch (or not at all on dry-run).

    Started -> Decided{created|updated|noop} -> Completed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..config import WorkspaceConfig
from ..governance import init_governance
from ..registry.events import (
    RUN_COMPLETED,
    RUN_STARTED,
    Actor,
    ActorType,
    EventContext,
    EventPayload,
    Intent,
    RunCompletedPayload,
    RunStartedPayload,
    VconEvent,
    create_event,
)
from ..registry.log import EventLog, JsonlEventLog
from ..registry.projection import ProjectionState, project_state
from ..registry.util import new_run_id
from ..reports import ReportInput, write_report

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    NOOP = "noop"


@dataclass
class Run:
    context: EventContext
    actor: Actor
    intent: Intent
    events: list[VconEvent] = field(default_factory=list)
    outcome: Outcome | None = None

    @property
    def run_id(self) -> str:
        return self.context.run_id

    @property
    def dry_run(self) -> bool:
        return self.context.dry_run

    def emit(self, event_type: str, payload: EventPayload) -> VconEvent:
        event = create_event(event_type, self.context, self.actor, self.intent, payload)
        self.events.append(event)
        return event

    def start(self, command: str, *args: str) -> VconEvent:
        mode = "--dry-run" if self.dry_run else "--apply"
        return self.emit(RUN_STARTED, RunStartedPayload(command=command, args=(*args, mode)))

    def complete(self, outcome: Outcome) -> VconEvent:
        self.outcome = outcome
        return self.emit(
            RUN_COMPLETED,
            RunCompletedPayload(outcome=outcome.value, noop=outcome is Outcome.NOOP),
        )

    def commit(self, log: EventLog) -> bool:
        """Append this run's events as one batch. Returns False on dry-run."""
        if self.outcome is None:
            raise RuntimeError(f"run {self.run_id} committed before completion")
        if self.dry_run:
            logger.debug("dry-run %s: %d event(s) not written", self.run_id, len(self.events))
            return False
        log.append_batch(self.events)
        return True

    @property
    def event_types(self) -> list[str]:
        return [e.event_type for e in self.events]


def open_run(
    config: WorkspaceConfig,
    *,
    action: str,
    owner: str,
    intent: Intent,
    dry_run: bool,
    spec_ref: str | None = None,
) -> Run:
    context = EventContext(
        run_id=new_run_id(),
        action=action,
        dry_run=dry_run,
        workspace=str(config.root),
        spec_ref=spec_ref,
    )
    return Run(context=context, actor=Actor(type=ActorType.HUMAN.value, id=owner), intent=intent)


def resolve_log(config: WorkspaceConfig, log: EventLog | None) -> EventLog:
    return log if log is not None else JsonlEventLog(config.events_path)


def prepare_state(config: WorkspaceConfig, log: EventLog) -> ProjectionState:
    """Ensure governance exists, then replay the log."""
    init_governance(config.templates_dir, config.governance_path)
    return project_state(log.read_all())


def registry_label(config: WorkspaceConfig, log: EventLog, *, dry_run: bool) -> str:
    if dry_run:
        return "not written"
    if isinstance(log, JsonlEventLog):
        try:
            return str(log.path.relative_to(config.root))
        except ValueError:
            return str(log.path)
    return repr(log)


def report_run(
    config: WorkspaceConfig,
    log: EventLog,
    run: Run,
    *,
    prompt: str,
    what: str,
    why: str,
    extra: dict[str, str] | None = None,
) -> Path:
    """Hand the run summary to the report writer."""
    if run.outcome is None:
        raise RuntimeError(f"run {run.run_id} reported before completion")
    outcome = run.outcome.value
    registry = registry_label(config, log, dry_run=run.dry_run)
    how = [
        f"run_id: {run.run_id}",
        f"outcome: {outcome}",
        f"dry_run: {str(run.dry_run).lower()}",
        f"events: {', '.join(run.event_types)}",
        f"registry: {registry}",
    ]
    if run.dry_run:
        result = f"DRY-RUN: {outcome} planned but registry not written."
    else:
        result = f"{outcome}: {len(run.events)} events appended to registry."

    return write_report(
        ReportInput(
            reports_path=config.reports_path,
            templates_dir=config.templates_dir,
            action=run.context.action,
            prompt=prompt,
            what=what,
            why=why,
            how="\n".join(how),
            result=result,
            metadata={
                "run_id": run.run_id,
                "outcome": outcome,
                "dry_run": run.dry_run,
                "events": run.event_types,
                "registry": registry,
                **(extra or {}),
            },
        )
    )
