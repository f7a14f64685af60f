"""Schema and basic reference validation for spec entities."""

import logging
from typing import Any, Dict, Union

from pydantic import ValidationError

from spec_mcp.core.entity_types import EntityType
from spec_mcp.core.errors import InvalidEntityIdError
from spec_mcp.core.schemas import Component, Plan, SpecBase, format_validation_errors, model_for
from spec_mcp.core.storage import SpecManager
from spec_mcp.core.validation.models import ValidationResult
from spec_mcp.core.validation.reference_validator import full_id

logger = logging.getLogger(__name__)


class ValidationManager:
    """Checks entity data against its schema and that referenced IDs exist."""

    def __init__(self, specs: SpecManager, *, reference_validation: bool = True) -> None:
        self.specs = specs
        self.reference_validation = reference_validation

    def validate_schema(self, entity_type: "EntityType | str", data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        try:
            model = model_for(entity_type)
        except ValueError:
            result.add_error(f"Unknown entity type: {entity_type}")
            return result
        try:
            model.model_validate(data)
        except ValidationError as exc:
            for message in format_validation_errors(exc):
                result.add_error(message)
        return result

    def _exists(self, ref: str) -> bool:
        try:
            return self.specs.entity_path(ref) is not None
        except InvalidEntityIdError:
            return False

    def _basic_references(self, entity: SpecBase, result: ValidationResult) -> None:
        if isinstance(entity, (Plan, Component)):
            for dep in entity.depends_on:
                if not self._exists(dep):
                    result.add_error(f"Referenced entity '{dep}' does not exist")
        if isinstance(entity, Plan):
            for milestone in entity.milestones:
                if not self._exists(milestone):
                    result.add_error(f"Referenced milestone '{milestone}' does not exist")
            if entity.criteria is not None:
                requirement = self.specs.get_entity(entity.criteria.requirement)
                if requirement is None:
                    result.add_error(f"Referenced requirement '{entity.criteria.requirement}' does not exist")
                elif not any(c.id == entity.criteria.criteria for c in getattr(requirement, "criteria", [])):
                    result.add_error(
                        f"Referenced criteria '{entity.criteria.criteria}' does not exist in "
                        f"'{entity.criteria.requirement}'"
                    )

    def validate_entity(self, entity: Union[SpecBase, Dict[str, Any]]) -> ValidationResult:
        """Schema check (for raw data) followed by reference existence."""
        if isinstance(entity, dict):
            result = self.validate_schema(entity.get("type", ""), entity)
            if not result.valid:
                return result
            entity = model_for(entity["type"]).model_validate(entity)
        result = ValidationResult(entity_id=full_id(entity))
        if self.reference_validation:
            self._basic_references(entity, result)
        return result

    def validate_all(self) -> Dict[str, Any]:
        """Validate every stored entity.

        Files that failed to load are reported through ``file_warnings``
        and make the overall result invalid.
        """
        self.specs.clear_validation_warnings()
        entities = self.specs.list_all()
        results = [self.validate_entity(e) for e in entities]
        file_warnings = self.specs.get_all_validation_warnings()
        invalid = [r for r in results if not r.valid]
        logger.debug("Validated %d entities, %d invalid", len(results), len(invalid))
        return {
            "valid": not invalid and not file_warnings,
            "total": len(results) + len(file_warnings),
            "valid_count": len(results) - len(invalid),
            "invalid_count": len(invalid) + len(file_warnings),
            "results": [r.to_dict() for r in invalid],
            "file_warnings": file_warnings,
        }
