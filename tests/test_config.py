from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from vcon.config import load_config


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.root == tmp_path.resolve()
    assert config.namespace == "global"
    assert config.owner == "unknown"
    assert config.events_path == tmp_path.resolve() / "registry" / "events.ndjson"
    assert config.reports_path == tmp_path.resolve() / "reports"
    assert config.governance_path == tmp_path.resolve() / "ai" / "governance"
    assert (config.templates_dir / "governance").is_dir()


def test_vcon_toml_overrides_defaults(tmp_path: Path) -> None:
    (tmp_path / "vcon.toml").write_text(
        '[defaults]\nnamespace = "lab"\nowner = "gru"\n\n[paths]\nregistry = "state"\nreports = "debriefs"\n',
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.namespace == "lab"
    assert config.owner == "gru"
    assert config.events_path == tmp_path.resolve() / "state" / "events.ndjson"
    assert config.reports_path == tmp_path.resolve() / "debriefs"
    assert config.governance_path == tmp_path.resolve() / "ai" / "governance"


def test_blank_or_wrongly_typed_values_fall_back(tmp_path: Path) -> None:
    (tmp_path / "vcon.toml").write_text('defaults = 3\n[paths]\nregistry = "  "\n', encoding="utf-8")

    config = load_config(tmp_path)

    assert config.namespace == "global"
    assert config.registry_dir == "registry"


def test_invalid_toml_propagates(tmp_path: Path) -> None:
    (tmp_path / "vcon.toml").write_text("[defaults\n", encoding="utf-8")
    with pytest.raises(tomllib.TOMLDecodeError):
        load_config(tmp_path)
