"""
Governance scaffolding.

Copies the packaged governance documents into ``<root>/ai/governance`` without
ever overwriting a file that is already there.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class GovernanceResult:
    governance_path: Path
    copied: list[Path] = field(default_factory=list)


def init_governance(templates_dir: Path, governance_path: Path) -> GovernanceResult:
    """
    Ensure governance documents exist (idempotent, non-destructive).

    Args:
        templates_dir: Package templates directory (contains ``governance/``)
        governance_path: Destination directory in the workspace

    Returns:
        GovernanceResult listing the files copied on this call
    """
    source = templates_dir / "governance"
    if not source.is_dir():
        raise FileNotFoundError(f"governance templates not found: {source}")

    governance_path.mkdir(parents=True, exist_ok=True)
    result = GovernanceResult(governance_path=governance_path)

    for src_file in sorted(p for p in source.rglob("*") if p.is_file()):
        dst_file = governance_path / src_file.relative_to(source)
        if dst_file.exists():
            continue
        dst_file.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src_file, dst_file)
        result.copied.append(dst_file)

    if result.copied:
        logger.info("governance: copied %d file(s) into %s", len(result.copied), governance_path)
    return result
