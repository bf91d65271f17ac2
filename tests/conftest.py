"""Pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from vcon.config import WorkspaceConfig, load_config
from vcon.registry.log import JsonlEventLog
from vcon.spec.schema import VconSpec, validate_spec


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceConfig:
    """Empty workspace rooted in tmp_path, default settings."""
    root = tmp_path / "ws"
    root.mkdir()
    return load_config(root)


@pytest.fixture
def event_log(workspace: WorkspaceConfig) -> JsonlEventLog:
    return JsonlEventLog(workspace.events_path)


def spec_document(
    kind: str = "agent",
    name: str = "Kevin",
    slug: str = "kevin",
    spec: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "apiVersion": "vcon/v1",
        "kind": kind,
        "metadata": {"name": name, "slug": slug},
        "spec": {"role": "assistant"} if spec is None else spec,
    }


@pytest.fixture
def make_spec() -> Callable[..., VconSpec]:
    """Build a validated spec: make_spec(kind, name, slug, spec)."""

    def _make(**kwargs: Any) -> VconSpec:
        return validate_spec(spec_document(**kwargs))

    return _make


@pytest.fixture
def write_spec(tmp_path: Path) -> Callable[..., Path]:
    """Write a spec document to YAML and return its path."""

    def _write(filename: str = "spec.vcon.yaml", **kwargs: Any) -> Path:
        path = tmp_path / filename
        path.write_text(yaml.safe_dump(spec_document(**kwargs), sort_keys=False), encoding="utf-8")
        return path

    return _write
