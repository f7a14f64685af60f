"""Shared helpers for spec handler modules."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.entity_types import entity_type_values
from spec_mcp.core.observability import get_metrics
from spec_mcp.core.schemas import SpecBase
from spec_mcp.core.storage import SpecManager, entity_to_dict
from spec_mcp.core.validation import ReferenceValidationOptions, ReferenceValidator
from spec_mcp.tools.unified.common import (
    build_request_id,
    make_metric_name,
    make_validation_error_fn,
    open_spec_manager,
    resolve_specs_dir,
)

logger = logging.getLogger(__name__)
_metrics = get_metrics()

_ENTITY_TYPES = frozenset(entity_type_values())

_ACTION_SUMMARY = {
    "get": "Fetch an entity by full or short ID",
    "create": "Create an entity with the next free number",
    "update": "Update top-level fields of an entity",
    "delete": "Delete an entity file",
    "list": "List entities, optionally of one type",
    "query": "Filter, sort and page entities across types",
    "next-number": "Preview the next number for an entity type",
}


def _metric_name(action: str) -> str:
    return make_metric_name("unified_tools.spec", action)


def _request_id() -> str:
    return build_request_id("spec")


_validation_error = make_validation_error_fn("spec")


def _open_specs(config: ServerConfig, path: Optional[str]) -> Tuple[Optional[SpecManager], Optional[dict]]:
    specs_dir, err = resolve_specs_dir(config, path)
    if err:
        return None, err
    assert specs_dir is not None
    return open_spec_manager(config, specs_dir), None


def _summary(entity: SpecBase) -> Dict[str, Any]:
    data = entity_to_dict(entity)
    return {key: data[key] for key in ("id", "type", "number", "slug", "name", "priority", "updated_at") if key in data}


def _reference_warnings(specs: SpecManager, entity: SpecBase) -> List[str]:
    """Broken references of a freshly written entity, reported as warnings."""
    result = ReferenceValidator(specs).validate_entity_references(
        entity, ReferenceValidationOptions(check_orphans=False)
    )
    return result.errors + result.warnings
