"""Registry commands: apply, link, status, plus spec scaffolding."""

from .apply import ApplyResult, apply_spec
from .lifecycle import ArtifactNotFoundError, LifecycleResult, link_artifacts, set_status
from .run import Outcome, Run
from .scaffold import ScaffoldResult, scaffold_spec

__all__ = [
    "ApplyResult",
    "ArtifactNotFoundError",
    "LifecycleResult",
    "Outcome",
    "Run",
    "ScaffoldResult",
    "apply_spec",
    "link_artifacts",
    "scaffold_spec",
    "set_status",
]
