"""
Identifier helpers for the registry.

Every id is a ULID behind a short type prefix, so ids sort by creation time
and the kind of record is readable straight from the log:

    evt_01J...  one event
    run_01J...  one command invocation (shared by all of its events)
    art_01J...  one artifact, bound to its (kind, namespace, slug) forever
"""

from __future__ import annotations

from ulid import ULID

EVENT_PREFIX = "evt"
RUN_PREFIX = "run"
ARTIFACT_PREFIX = "art"


def _prefixed(prefix: str) -> str:
    return f"{prefix}_{ULID()}"


def new_event_id() -> str:
    return _prefixed(EVENT_PREFIX)


def new_run_id() -> str:
    return _prefixed(RUN_PREFIX)


def new_artifact_id() -> str:
    return _prefixed(ARTIFACT_PREFIX)
