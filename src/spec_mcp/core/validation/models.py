"""Validation result models."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ValidationResult:
    """
    Outcome of validating one entity or the whole store.
    """

    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    entity_id: Optional[str] = None

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> None:
        for message in other.errors:
            self.add_error(message)
        self.warnings.extend(other.warnings)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.entity_id is None:
            data.pop("entity_id")
        return data


@dataclass
class ReferenceValidationOptions:
    check_existence: bool = True
    check_cycles: bool = True
    check_orphans: bool = False
    allow_self_references: bool = False


@dataclass
class BrokenReference:
    """A reference from ``source`` whose ``target`` does not resolve."""

    source: str
    field: str
    target: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)
