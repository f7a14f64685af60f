"""
Tests for response helper functions and standard format validation.

Verifies that the response contract is properly implemented across all tools.
"""

from dataclasses import asdict

import pytest

from spec_mcp.core.context import sync_request_context
from spec_mcp.core.errors import (
    AlreadySupersededError,
    DraftNotFoundError,
    InvalidStateTransitionError,
    ItemNotFoundError,
    SpecNotFoundError,
    error_to_response,
)
from spec_mcp.core.responses import (
    ErrorCode,
    ErrorType,
    ToolResponse,
    error_response,
    not_found_error,
    success_response,
    validation_error,
)


class TestToolResponse:
    """Tests for the ToolResponse dataclass."""

    def test_success_response_structure(self):
        """Test that success responses have correct structure."""
        response = ToolResponse(success=True, data={"spec_id": "pln-001", "count": 5}, error=None)
        assert response.success is True
        assert response.data == {"spec_id": "pln-001", "count": 5}
        assert response.error is None

    def test_default_data_is_empty_dict(self):
        response = ToolResponse(success=True, error=None)
        assert response.data == {}

    def test_default_meta_carries_version(self):
        response = ToolResponse(success=True)
        assert response.meta == {"version": "response-v2"}


class TestSuccessResponse:
    """Tests for the success_response helper function."""

    def test_creates_success_true(self):
        response = success_response()
        assert response.success is True
        assert response.error is None

    def test_merges_data_and_fields(self):
        """Keyword fields are added to the data payload."""
        response = success_response({"spec": {"id": "pln-001"}}, count=1)
        assert response.data == {"spec": {"id": "pln-001"}, "count": 1}

    def test_warnings_go_to_meta(self):
        response = success_response({}, warnings=["Referenced milestone 'mls-009' does not exist"])
        assert response.meta["warnings"] == ["Referenced milestone 'mls-009' does not exist"]
        assert "warnings" not in response.data

    def test_empty_warnings_are_omitted(self):
        response = success_response({}, warnings=[])
        assert "warnings" not in response.meta

    def test_pagination_and_telemetry(self):
        response = success_response(
            {"items": []},
            pagination={"offset": 0, "limit": 10, "total": 0, "has_more": False},
            telemetry={"duration_ms": 1.5},
        )
        assert response.meta["pagination"]["has_more"] is False
        assert response.meta["telemetry"] == {"duration_ms": 1.5}

    def test_explicit_request_id(self):
        response = success_response({}, request_id="spec_abc123")
        assert response.meta["request_id"] == "spec_abc123"

    def test_request_id_from_context(self):
        """Without an explicit ID the current correlation ID is used."""
        with sync_request_context("req_from_context"):
            response = success_response({})
        assert response.meta["request_id"] == "req_from_context"

    def test_no_request_id_outside_context(self):
        response = success_response({})
        assert "request_id" not in response.meta


class TestErrorResponse:
    """Tests for the error_response helper function."""

    def test_defaults_to_internal(self):
        response = error_response("boom")
        assert response.success is False
        assert response.error == "boom"
        assert response.data["error_code"] == "INTERNAL_ERROR"
        assert response.data["error_type"] == "internal"

    def test_codes_are_serialized_as_strings(self):
        response = error_response(
            "bad id",
            error_code=ErrorCode.INVALID_ENTITY_ID,
            error_type=ErrorType.VALIDATION,
            remediation="Use pln-001",
            details={"value": "plan-1"},
        )
        assert response.data == {
            "error_code": "INVALID_ENTITY_ID",
            "error_type": "validation",
            "remediation": "Use pln-001",
            "details": {"value": "plan-1"},
        }

    def test_data_keys_are_not_overwritten(self):
        response = error_response("x", data={"error_code": "CUSTOM"}, error_code=ErrorCode.CONFLICT)
        assert response.data["error_code"] == "CUSTOM"


class TestErrorHelpers:
    """Tests for the generic error helpers."""

    def test_validation_error_adds_field_to_details(self):
        response = validation_error("spec_id is required", field="spec_id")
        assert response.data["error_code"] == "VALIDATION_ERROR"
        assert response.data["details"] == {"field": "spec_id"}

    def test_not_found_error_message(self):
        response = not_found_error("Spec", "pln-009")
        assert response.error == "Spec 'pln-009' not found"
        assert response.data["error_type"] == "not_found"

    def test_not_found_error_default_remediation(self):
        response = not_found_error("Specs directory", "/work/specs", request_id="req_2")
        assert response.data["remediation"] == "Verify the specs directory exists."
        assert response.data["resource_id"] == "/work/specs"
        assert response.meta["request_id"] == "req_2"


class TestErrorToResponse:
    """Domain exceptions map to stable error codes."""

    @pytest.mark.parametrize(
        "exc, code, error_type",
        [
            (SpecNotFoundError("pln-009"), "SPEC_NOT_FOUND", "not_found"),
            (ItemNotFoundError("tsk-009", "tasks", "pln-001"), "ITEM_NOT_FOUND", "not_found"),
            (AlreadySupersededError("tsk-001", "tsk-002"), "ALREADY_SUPERSEDED", "conflict"),
            (InvalidStateTransitionError("tsk-001", "completed", "in-progress"), "INVALID_STATE_TRANSITION", "conflict"),
            (DraftNotFoundError("pln-004"), "DRAFT_NOT_FOUND", "not_found"),
        ],
    )
    def test_known_errors(self, exc, code, error_type):
        response = error_to_response(exc, request_id="req_1")
        assert response["success"] is False
        assert response["error"] == str(exc)
        assert response["data"]["error_code"] == code
        assert response["data"]["error_type"] == error_type
        assert response["data"]["details"] == exc.details
        assert response["meta"]["request_id"] == "req_1"

    def test_unknown_error_returns_none(self):
        assert error_to_response(RuntimeError("boom")) is None


class TestResponseContractCompliance:
    """Every envelope has the same four top-level keys."""

    def test_success_envelope_keys(self):
        assert set(asdict(success_response({"x": 1}))) == {"success", "data", "error", "meta"}

    def test_error_envelope_keys(self):
        assert set(asdict(error_response("x"))) == {"success", "data", "error", "meta"}
