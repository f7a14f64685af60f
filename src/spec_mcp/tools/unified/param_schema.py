"""Declarative parameter validation for unified tool handlers.

Each handler declares a schema dict mapping field names to type
descriptors, then calls :func:`validate_payload` once::

    _SCHEMA = {
        "spec_id": Str(required=True, remediation="Pass an ID such as pln-001"),
        "field": Str(required=True),
        "index": Num(integer_only=True, min_val=0),
        "data": Dict_(),
    }


    def _handle(*, config, **payload):
        err = validate_payload(payload, _SCHEMA, tool_name="item", action="add", request_id=rid)
        if err:
            return err

The error envelopes match those of
:func:`~spec_mcp.tools.unified.common.make_validation_error_fn`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from spec_mcp.core.responses.builders import error_response
from spec_mcp.core.responses.types import ErrorCode, ErrorType


@dataclass(frozen=True)
class Str:
    """String parameter."""

    required: bool = False
    strip: bool = True
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    choices: Optional[FrozenSet[str]] = None
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class Num:
    """Numeric parameter. ``integer_only`` keeps ints as ints."""

    required: bool = False
    integer_only: bool = False
    min_val: Optional[Union[int, float]] = None
    max_val: Optional[Union[int, float]] = None
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class Bool:
    required: bool = False
    default: Optional[bool] = None
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class List_:
    """List parameter, optionally restricted to strings."""

    required: bool = False
    min_items: Optional[int] = None
    strings_only: bool = False
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class Dict_:
    required: bool = False
    non_empty: bool = False
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class AtLeastOne:
    """Cross-field rule: at least one of *fields* must be non-None."""

    fields: Tuple[str, ...]
    error_code: ErrorCode = ErrorCode.VALIDATION_ERROR
    remediation: Optional[str] = None


FieldSchema = Union[Str, Num, Bool, List_, Dict_]

# Returns an error message, or None when the value passes.
_Check = Callable[[str, Any, Any], Optional[str]]


def _check_str(name: str, value: Any, spec: Str) -> Optional[str]:
    if not isinstance(value, str):
        return f"{name} must be a string"
    text = value.strip() if spec.strip else value
    if spec.min_length is not None and len(text) < spec.min_length:
        return f"{name} must be at least {spec.min_length} characters"
    if spec.max_length is not None and len(text) > spec.max_length:
        return f"{name} must be at most {spec.max_length} characters"
    if spec.choices is not None and text not in spec.choices:
        return f"Must be one of: {', '.join(sorted(spec.choices))}"
    return None


def _check_num(name: str, value: Any, spec: Num) -> Optional[str]:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "Provide an integer value" if spec.integer_only else "Provide a numeric value"
    if spec.integer_only and not isinstance(value, int):
        return f"{name} must be an integer"
    if spec.min_val is not None and value < spec.min_val:
        return f"Value must be >= {spec.min_val}"
    if spec.max_val is not None and value > spec.max_val:
        return f"Value must be <= {spec.max_val}"
    return None


def _check_bool(name: str, value: Any, spec: Bool) -> Optional[str]:
    return None if isinstance(value, bool) else "Expected a boolean value"


def _check_list(name: str, value: Any, spec: List_) -> Optional[str]:
    if not isinstance(value, list):
        return f"{name} must be a list"
    if spec.min_items is not None and len(value) < spec.min_items:
        return f"{name} must have at least {spec.min_items} items"
    if spec.strings_only and not all(isinstance(v, str) for v in value):
        return f"{name} must contain only strings"
    return None


def _check_dict(name: str, value: Any, spec: Dict_) -> Optional[str]:
    if not isinstance(value, dict):
        return f"{name} must be an object"
    if spec.non_empty and not value:
        return f"{name} must not be empty"
    return None


_CHECKS: Dict[type, _Check] = {
    Str: _check_str,
    Num: _check_num,
    Bool: _check_bool,
    List_: _check_list,
    Dict_: _check_dict,
}


def _is_blank(value: Any, spec: FieldSchema) -> bool:
    return value is None or (isinstance(spec, Str) and isinstance(value, str) and not value.strip())


def validate_payload(
    payload: Dict[str, Any],
    schema: Mapping[str, FieldSchema],
    *,
    tool_name: str,
    action: str,
    request_id: Optional[str] = None,
    cross_field_rules: Optional[List[AtLeastOne]] = None,
) -> Optional[dict]:
    """Validate *payload* against *schema*, returning an error dict or ``None``.

    On success, payload values are normalised in place: strings are
    stripped and boolean defaults applied. Checks run per field in
    schema order (presence, then type and format) followed by the
    cross-field rules.
    """

    def _error(field: str, message: str, code: ErrorCode, remediation: Optional[str]) -> dict:
        return asdict(
            error_response(
                f"Invalid field '{field}' for {tool_name}.{action}: {message}",
                error_code=code,
                error_type=ErrorType.VALIDATION,
                remediation=remediation or f"Provide a valid '{field}' value",
                details={"field": field, "action": f"{tool_name}.{action}"},
                request_id=request_id,
            )
        )

    for name, spec in schema.items():
        value = payload.get(name)
        if isinstance(spec, Bool) and value is None and spec.default is not None:
            payload[name] = value = spec.default

        if _is_blank(value, spec):
            if spec.required:
                return _error(name, f"Provide a non-empty {name} parameter", ErrorCode.MISSING_REQUIRED, spec.remediation)
            if value is not None:
                payload[name] = None
            continue

        message = _CHECKS[type(spec)](name, value, spec)
        if message is not None:
            return _error(name, message, spec.error_code, spec.remediation)

        if isinstance(spec, Str) and spec.strip:
            payload[name] = value.strip()

    for rule in cross_field_rules or ():
        if all(payload.get(f) is None for f in rule.fields):
            names = ", ".join(f"'{f}'" for f in rule.fields)
            return _error(rule.fields[0], f"At least one of {names} must be provided", rule.error_code, rule.remediation)

    return None
