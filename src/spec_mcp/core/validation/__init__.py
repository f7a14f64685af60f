"""Validation for spec entities.

- ``validation_manager``: schema checks and basic reference existence
- ``reference_validator``: cross-entity references, cycles and orphans
- ``similarity``: Levenshtein helpers for reference fix suggestions
"""

from spec_mcp.core.validation.models import BrokenReference, ReferenceValidationOptions, ValidationResult
from spec_mcp.core.validation.reference_validator import (
    ReferenceValidator,
    find_all_cycles,
    find_cycle,
    full_id,
    ref_key,
)
from spec_mcp.core.validation.similarity import levenshtein_distance, similar_ids, similarity
from spec_mcp.core.validation.validation_manager import ValidationManager

__all__ = [
    "BrokenReference",
    "ReferenceValidationOptions",
    "ReferenceValidator",
    "ValidationManager",
    "ValidationResult",
    "find_all_cycles",
    "find_cycle",
    "full_id",
    "levenshtein_distance",
    "ref_key",
    "similar_ids",
    "similarity",
]
