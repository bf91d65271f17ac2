"""
Append-only event log.

The log is the source of truth for all artifact state. It contains only
VconEvent records, written once and never modified. Current state is computed
by projecting events (see ``projection.py``).

Known limitation: there is no locking and no check that the log is unchanged
between ``read_all`` and ``append_batch``. Concurrent writers can interleave
and miss each other's intent.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Protocol, Sequence

from .events import MalformedRecordError, VconEvent

logger = logging.getLogger(__name__)


class EventLog(Protocol):
    """Narrow storage interface the orchestrator depends on."""

    def read_all(self) -> list[VconEvent]:
        """Return every event in append order (empty if nothing was written)."""
        ...

    def append_batch(self, events: Sequence[VconEvent]) -> None:
        """Append events in order as one write."""
        ...


class JsonlEventLog:
    """
    Newline-delimited JSON event log.

    INVARIANT: This class NEVER modifies existing lines.
    """

    def __init__(self, path: Path):
        """
        Initialize log.

        Args:
            path: Path to the events.ndjson file (created on first append)
        """
        self.path = path

    def __repr__(self) -> str:
        return f"JsonlEventLog({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.exists()

    def iter_events(self) -> Iterator[VconEvent]:
        """
        Iterate over all events in the log.

        Events are returned in append order. A line that cannot be decoded
        aborts iteration with MalformedRecordError.
        """
        if not self.path.exists():
            return

        with self.path.open("r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield VconEvent.from_json(line)
                except MalformedRecordError as exc:
                    raise MalformedRecordError(f"{self.path}:{lineno}: {exc}") from exc

    def read_all(self) -> list[VconEvent]:
        events = list(self.iter_events())
        logger.debug("read %d events from %s", len(events), self.path)
        return events

    def append_batch(self, events: Sequence[VconEvent]) -> None:
        """
        Append multiple events in a single write.

        The batch is serialized up front so that an encoding failure leaves
        the file untouched.
        """
        if not events:
            return
        data = "".join(event.to_json() + "\n" for event in events)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self._missing_final_newline():
            # keep the unterminated last record on its own line
            logger.warning("%s does not end with a newline", self.path)
            data = "\n" + data
        with self.path.open("a", encoding="utf-8") as f:
            f.write(data)
        logger.debug("appended %d events to %s", len(events), self.path)

    def _missing_final_newline(self) -> bool:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return False
        with self.path.open("rb") as f:
            f.seek(-1, os.SEEK_END)
            return f.read(1) != b"\n"

    def count(self) -> int:
        """Count events in the log."""
        return sum(1 for _ in self.iter_events())


class InMemoryEventLog:
    """List-backed log with the same semantics as JsonlEventLog."""

    def __init__(self, events: Sequence[VconEvent] | None = None):
        self._events: list[VconEvent] = list(events or [])

    def read_all(self) -> list[VconEvent]:
        return list(self._events)

    def append_batch(self, events: Sequence[VconEvent]) -> None:
        self._events.extend(events)

    def count(self) -> int:
        return len(self._events)
