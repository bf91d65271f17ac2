from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from vcon.spec import SpecValidationError, load_spec, validate_spec


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "spec.vcon.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_valid_spec(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
apiVersion: vcon/v1
kind: agent
metadata:
  name: "Kevin the Minion"
  slug: kevin
spec:
  role: assistant
  tools: [git, banana]
  limits: {tokens: 1000, strict: true}
""",
    )

    spec = load_spec(path)

    assert spec.kind == "agent"
    assert spec.name == "Kevin the Minion"
    assert spec.slug == "kevin"
    assert spec.spec == {"role": "assistant", "tools": ["git", "banana"], "limits": {"tokens": 1000, "strict": True}}


def test_every_problem_is_reported(tmp_path: Path) -> None:
    path = _write(tmp_path, "apiVersion: vcon/v2\nkind: robot\nmetadata: {name: ''}\nspec: []\n")

    with pytest.raises(SpecValidationError) as exc_info:
        load_spec(path)

    problems = exc_info.value.problems
    assert len(problems) == 5
    assert any("apiVersion" in p for p in problems)
    assert any("kind" in p for p in problems)
    assert any("metadata.name" in p for p in problems)
    assert any("metadata.slug" in p for p in problems)
    assert any(p.startswith("spec must be a mapping") for p in problems)


def test_invalid_yaml_is_a_validation_error(tmp_path: Path) -> None:
    path = _write(tmp_path, "kind: [agent\n")
    with pytest.raises(SpecValidationError, match="invalid YAML"):
        load_spec(path)


def test_non_mapping_document(tmp_path: Path) -> None:
    with pytest.raises(SpecValidationError, match="mapping"):
        load_spec(_write(tmp_path, "- just\n- a list\n"))


def test_unquoted_dates_are_rejected() -> None:
    raw = {
        "apiVersion": "vcon/v1",
        "kind": "project",
        "metadata": {"name": "Moon", "slug": "moon"},
        "spec": {"launch": date(2026, 1, 1)},
    }
    with pytest.raises(SpecValidationError, match="spec.launch"):
        validate_spec(raw)


def test_missing_file_raises_oserror(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        load_spec(tmp_path / "missing.yaml")


def test_validation_error_is_a_value_error() -> None:
    assert issubclass(SpecValidationError, ValueError)


@pytest.mark.parametrize(
    "slug",
    ["x/../../../../escaped", "Kevin", "kevin--minion", "-kevin", "kevin-", "kevin minion", "a" * 81],
)
def test_slug_must_be_slugify_shaped(slug: str) -> None:
    raw = {
        "apiVersion": "vcon/v1",
        "kind": "agent",
        "metadata": {"name": "Kevin", "slug": slug},
        "spec": {},
    }
    with pytest.raises(SpecValidationError, match="metadata.slug"):
        validate_spec(raw)


def test_longest_slug_is_accepted() -> None:
    raw = {
        "apiVersion": "vcon/v1",
        "kind": "agent",
        "metadata": {"name": "Kevin", "slug": "a" * 80},
        "spec": {},
    }
    assert validate_spec(raw).slug == "a" * 80
