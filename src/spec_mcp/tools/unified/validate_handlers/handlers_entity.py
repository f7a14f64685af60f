"""Entity validation handlers: entity, all."""

from __future__ import annotations

import time
from dataclasses import asdict
from typing import Any, Dict

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.entity_types import entity_type_values
from spec_mcp.core.errors import SpecMcpError
from spec_mcp.core.observability import audit_log
from spec_mcp.core.responses import success_response
from spec_mcp.core.validation import (
    ReferenceValidationOptions,
    ReferenceValidator,
    ValidationManager,
    ValidationResult,
)
from spec_mcp.tools.unified.common import domain_error_response
from spec_mcp.tools.unified.param_schema import AtLeastOne, Bool, Dict_, Str, validate_payload
from spec_mcp.tools.unified.validate_handlers._helpers import (
    _metric_name,
    _metrics,
    _open_specs,
    _request_id,
    logger,
)

_ENTITY_TYPES = frozenset(entity_type_values())

_ENTITY_SCHEMA = {
    "spec_id": Str(),
    "data": Dict_(non_empty=True),
    "type": Str(choices=_ENTITY_TYPES),
    "references": Bool(default=True),
    "path": Str(),
}

_ENTITY_RULES = [
    AtLeastOne(
        fields=("spec_id", "data"),
        remediation="Pass spec_id to validate a stored entity, or data to validate a draft object",
    )
]

_ALL_SCHEMA = {
    "type": Str(choices=_ENTITY_TYPES),
    "references": Bool(default=True),
    "path": Str(),
}


def _handle_entity(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "entity"

    err = validate_payload(
        payload,
        _ENTITY_SCHEMA,
        tool_name="validate",
        action=action,
        request_id=request_id,
        cross_field_rules=_ENTITY_RULES,
    )
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    metric_key = _metric_name(action)
    manager = ValidationManager(specs, reference_validation=payload["references"])
    try:
        if payload.get("spec_id"):
            entity = specs.require_entity(payload["spec_id"])
            result = manager.validate_entity(entity)
            if payload["references"]:
                result.merge(
                    ReferenceValidator(specs).validate_entity_references(
                        entity, ReferenceValidationOptions(check_orphans=True)
                    )
                )
        else:
            data = dict(payload["data"])
            if payload.get("type"):
                data.setdefault("type", payload["type"])
            result = manager.validate_entity(data)
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    # Basic existence checks and the reference validator can report the same target.
    result.errors = list(dict.fromkeys(result.errors))

    _metrics.counter(metric_key, labels={"status": "success", "valid": str(result.valid).lower()})
    return asdict(success_response(data=result.to_dict(), request_id=request_id))


def _summarize(results: list, file_warnings: list) -> Dict[str, Any]:
    invalid = [r for r in results if not r.valid]
    return {
        "valid": not invalid and not file_warnings,
        "total": len(results) + len(file_warnings),
        "valid_count": len(results) - len(invalid),
        "invalid_count": len(invalid) + len(file_warnings),
        "results": [r.to_dict() for r in invalid],
        "file_warnings": file_warnings,
    }


def _handle_all(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "all"

    err = validate_payload(payload, _ALL_SCHEMA, tool_name="validate", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    entity_type = payload.get("type")
    audit_log("tool_invocation", tool="validate", action=action, entity_type=entity_type or "all")

    metric_key = _metric_name(action)
    start_time = time.perf_counter()
    manager = ValidationManager(specs, reference_validation=payload["references"])
    if entity_type:
        specs.clear_validation_warnings()
        results = [manager.validate_entity(e) for e in specs.list_all([entity_type])]
        summary = _summarize(results, specs.get_all_validation_warnings())
    else:
        summary = manager.validate_all()

    if payload["references"]:
        references: ValidationResult = ReferenceValidator(specs).validate_all_references()
        summary["reference_errors"] = references.errors
        summary["reference_warnings"] = references.warnings
        if entity_type is None and references.errors:
            summary["valid"] = False

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    _metrics.timer(metric_key + ".duration_ms", elapsed_ms)
    _metrics.counter(metric_key, labels={"status": "success", "valid": str(summary["valid"]).lower()})
    logger.debug("validate.all checked %d entities in %.1fms", summary["total"], elapsed_ms)
    return asdict(success_response(data=summary, request_id=request_id))
