"""Shared helpers for item handler modules."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.errors import SpecValidationError, UnsupportedFieldError
from spec_mcp.core.observability import get_metrics
from spec_mcp.core.schemas import ArrayField, SpecBase, array_field, format_validation_errors
from spec_mcp.core.storage import SpecManager, dump_entity
from spec_mcp.tools.unified.common import (
    build_request_id,
    make_metric_name,
    make_validation_error_fn,
    open_spec_manager,
    resolve_specs_dir,
)

logger = logging.getLogger(__name__)
_metrics = get_metrics()

_ACTION_SUMMARY = {
    "add": "Append an item with the next free ID (or supersede one)",
    "supersede": "Replace an item with a new version, keeping the old one",
    "remove": "Delete an item by ID",
    "get": "Fetch an item by ID",
    "history": "Return every version of an item, oldest first",
    "add-simple": "Append a value to an array without item IDs",
    "remove-simple": "Remove a value by index from an array without item IDs",
}


def _metric_name(action: str) -> str:
    return make_metric_name("unified_tools.item", action)


def _request_id() -> str:
    return build_request_id("item")


_validation_error = make_validation_error_fn("item")


def _open_specs(config: ServerConfig, path: Optional[str]) -> Tuple[Optional[SpecManager], Optional[dict]]:
    specs_dir, err = resolve_specs_dir(config, path)
    if err:
        return None, err
    assert specs_dir is not None
    return open_spec_manager(config, specs_dir), None


def _load_field(specs: SpecManager, spec_id: str, field: str) -> Tuple[SpecBase, Dict[str, Any], ArrayField]:
    """Entity, its JSON form and the array field being edited.

    Raises:
        SpecNotFoundError: if the entity does not exist.
        UnsupportedFieldError: if ``field`` is not an array of the entity.
    """
    entity = specs.require_entity(spec_id)
    spec = array_field(entity.type, field)
    if spec is None:
        raise UnsupportedFieldError(field, entity.type)
    return entity, dump_entity(entity), spec


def _check_item(spec: ArrayField, value: Any) -> Any:
    try:
        return spec.validate_item(value)
    except ValidationError as exc:
        errors = format_validation_errors(exc)
        raise SpecValidationError(f"Invalid {spec.name} item: {'; '.join(errors)}", errors) from exc
    except ValueError as exc:
        raise SpecValidationError(str(exc), [str(exc)]) from exc


def _write_field(specs: SpecManager, spec_id: str, field: str, values: List[Any]) -> SpecBase:
    return specs.update(spec_id, {field: values})
