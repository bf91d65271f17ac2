"""Spec loading and schema validation."""

from .load import load_spec
from .schema import SpecMetadata, SpecValidationError, VconSpec, validate_spec

__all__ = [
    "SpecMetadata",
    "SpecValidationError",
    "VconSpec",
    "load_spec",
    "validate_spec",
]
