"""
Workspace configuration.

Settings come from three layers, later ones winning:
built-in defaults, ``<root>/vcon.toml``, then explicit CLI flags.

    [defaults]
    namespace = "global"
    owner = "alice"

    [paths]
    registry = "registry"
    reports = "reports"
    governance = "ai/governance"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .constants import DEFAULT_NAMESPACE, DEFAULT_OWNER

CONFIG_FILENAME = "vcon.toml"
EVENTS_FILENAME = "events.ndjson"

PACKAGE_TEMPLATES_DIR = Path(__file__).parent / "templates"


@dataclass(frozen=True)
class WorkspaceConfig:
    root: Path
    namespace: str = DEFAULT_NAMESPACE
    owner: str = DEFAULT_OWNER
    registry_dir: str = "registry"
    reports_dir: str = "reports"
    governance_dir: str = "ai/governance"
    templates_dir: Path = PACKAGE_TEMPLATES_DIR

    @property
    def registry_path(self) -> Path:
        return self.root / self.registry_dir

    @property
    def events_path(self) -> Path:
        return self.registry_path / EVENTS_FILENAME

    @property
    def reports_path(self) -> Path:
        return self.root / self.reports_dir

    @property
    def governance_path(self) -> Path:
        return self.root / self.governance_dir


def _coerce_str(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def load_config(root: Path) -> WorkspaceConfig:
    """
    Load workspace configuration for ``root``.

    A missing vcon.toml is not an error. An unreadable or invalid one is:
    tomllib.TOMLDecodeError (a ValueError) propagates.
    """
    root = root.resolve()
    config_path = root / CONFIG_FILENAME
    data: dict[str, Any] = {}
    if config_path.exists():
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))

    defaults = _coerce_dict(data.get("defaults"))
    paths = _coerce_dict(data.get("paths"))

    return WorkspaceConfig(
        root=root,
        namespace=_coerce_str(defaults.get("namespace"), DEFAULT_NAMESPACE),
        owner=_coerce_str(defaults.get("owner"), DEFAULT_OWNER),
        registry_dir=_coerce_str(paths.get("registry"), "registry"),
        reports_dir=_coerce_str(paths.get("reports"), "reports"),
        governance_dir=_coerce_str(paths.get("governance"), "ai/governance"),
    )
