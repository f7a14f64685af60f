"""Draft session handlers: start, answer, skip, continue, status, list, delete."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.entity_types import entity_type_values
from spec_mcp.core.errors import DraftError, DraftNotFoundError, SpecMcpError
from spec_mcp.core.observability import audit_log
from spec_mcp.core.responses import success_response
from spec_mcp.tools.unified.common import domain_error_response
from spec_mcp.tools.unified.draft_handlers._helpers import (
    _metric_name,
    _metrics,
    _open_store,
    _request_id,
    _step,
    logger,
)
from spec_mcp.tools.unified.param_schema import Str, validate_payload

_DRAFT_ID = Str(required=True, remediation="Pass the draft ID returned by start, e.g. pln-004")

_START_SCHEMA = {
    "type": Str(required=True, choices=frozenset(entity_type_values())),
    "path": Str(),
}

_ANSWER_SCHEMA = {
    "draft_id": _DRAFT_ID,
    "answer": Str(required=True, remediation="Pass the answer text ('none' for an empty list)"),
    "question_id": Str(),
    "path": Str(),
}

_SKIP_SCHEMA = {
    "draft_id": _DRAFT_ID,
    "question_id": Str(),
    "path": Str(),
}

_DRAFT_SCHEMA = {
    "draft_id": _DRAFT_ID,
    "path": Str(),
}

_LIST_SCHEMA = {
    "path": Str(),
}


def _handle_start(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "start"

    err = validate_payload(payload, _START_SCHEMA, tool_name="draft", action=action, request_id=request_id)
    if err:
        return err

    store, store_err = _open_store(config, payload.get("path"))
    if store_err:
        return store_err
    assert store is not None

    entity_type = payload["type"]
    audit_log("tool_invocation", tool="draft", action=action, entity_type=entity_type)

    metric_key = _metric_name(action)
    try:
        manager = store.start(entity_type)
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(metric_key, labels={"status": "success"})
    return asdict(success_response(data=_step(manager), request_id=request_id))


def _handle_answer(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "answer"

    err = validate_payload(payload, _ANSWER_SCHEMA, tool_name="draft", action=action, request_id=request_id)
    if err:
        return err

    store, store_err = _open_store(config, payload.get("path"))
    if store_err:
        return store_err
    assert store is not None

    draft_id = payload["draft_id"]
    question_id = payload.get("question_id")
    metric_key = _metric_name(action)
    try:
        manager = store.require(draft_id)
        drafter = manager.drafter
        if question_id:
            question = drafter.answer_question_by_id(question_id, payload["answer"])
        else:
            question = drafter.submit_answer(payload["answer"])
        store.save(draft_id)
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(metric_key, labels={"status": "success"})
    logger.debug("Draft %s answered %s", draft_id, question.id)
    return asdict(
        success_response(
            data={"answered": {"id": question.id, "question": question.question, "answer": question.answer}, **_step(manager)},
            request_id=request_id,
        )
    )


def _handle_skip(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "skip"

    err = validate_payload(payload, _SKIP_SCHEMA, tool_name="draft", action=action, request_id=request_id)
    if err:
        return err

    store, store_err = _open_store(config, payload.get("path"))
    if store_err:
        return store_err
    assert store is not None

    draft_id = payload["draft_id"]
    metric_key = _metric_name(action)
    try:
        manager = store.require(draft_id)
        question_id = payload.get("question_id")
        if not question_id:
            current = manager.drafter.current_question()
            if current is None:
                raise DraftError("All questions have already been answered.")
            question_id = current.id
        question = manager.drafter.skip_question(question_id)
        store.save(draft_id)
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(metric_key, labels={"status": "success"})
    return asdict(success_response(data={"skipped": question.id, **_step(manager)}, request_id=request_id))


def _handle_continue(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "continue"

    err = validate_payload(payload, _DRAFT_SCHEMA, tool_name="draft", action=action, request_id=request_id)
    if err:
        return err

    store, store_err = _open_store(config, payload.get("path"))
    if store_err:
        return store_err
    assert store is not None

    try:
        manager = store.require(payload["draft_id"])
    except SpecMcpError as exc:
        _metrics.counter(_metric_name(action), labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(success_response(data=_step(manager), request_id=request_id))


def _handle_status(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "status"

    err = validate_payload(payload, _DRAFT_SCHEMA, tool_name="draft", action=action, request_id=request_id)
    if err:
        return err

    store, store_err = _open_store(config, payload.get("path"))
    if store_err:
        return store_err
    assert store is not None

    try:
        manager = store.require(payload["draft_id"])
    except SpecMcpError as exc:
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(
        success_response(
            data={**manager.status(), "all_questions": manager.progress()},
            request_id=request_id,
        )
    )


def _handle_list(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "list"

    err = validate_payload(payload, _LIST_SCHEMA, tool_name="draft", action=action, request_id=request_id)
    if err:
        return err

    store, store_err = _open_store(config, payload.get("path"))
    if store_err:
        return store_err
    assert store is not None

    drafts = store.list()
    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(success_response(data={"drafts": drafts, "count": len(drafts)}, request_id=request_id))


def _handle_delete(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "delete"

    err = validate_payload(payload, _DRAFT_SCHEMA, tool_name="draft", action=action, request_id=request_id)
    if err:
        return err

    store, store_err = _open_store(config, payload.get("path"))
    if store_err:
        return store_err
    assert store is not None

    draft_id = payload["draft_id"]
    audit_log("tool_invocation", tool="draft", action=action, draft_id=draft_id)
    try:
        if not store.delete_with_file(draft_id):
            raise DraftNotFoundError(draft_id)
    except SpecMcpError as exc:
        _metrics.counter(_metric_name(action), labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(success_response(data={"draft_id": draft_id, "deleted": True}, request_id=request_id))
