"""Draft finalization handler."""

from __future__ import annotations

import time
from dataclasses import asdict
from typing import Any

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.errors import SpecMcpError
from spec_mcp.core.observability import audit_log
from spec_mcp.core.responses import success_response
from spec_mcp.core.storage import entity_to_dict
from spec_mcp.tools.unified.common import domain_error_response
from spec_mcp.tools.unified.draft_handlers._helpers import (
    _metric_name,
    _metrics,
    _open_store,
    _request_id,
    _step,
    logger,
)
from spec_mcp.tools.unified.param_schema import Dict_, Str, validate_payload

_FINALIZE_SCHEMA = {
    "draft_id": Str(required=True, remediation="Pass the draft ID returned by start"),
    "entity_id": Str(remediation="Pass 'main' or an item address such as tasks[0]"),
    "data": Dict_(required=True, remediation="Pass the generated object as data"),
    "path": Str(),
}


def _handle_finalize(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "finalize"

    err = validate_payload(payload, _FINALIZE_SCHEMA, tool_name="draft", action=action, request_id=request_id)
    if err:
        return err

    store, store_err = _open_store(config, payload.get("path"))
    if store_err:
        return store_err
    assert store is not None

    draft_id = payload["draft_id"]
    entity_id = payload.get("entity_id") or "main"
    audit_log("tool_invocation", tool="draft", action=action, draft_id=draft_id, entity_id=entity_id)

    metric_key = _metric_name(action)
    start_time = time.perf_counter()
    try:
        manager = store.require(draft_id)
        outcome = store.finalize(draft_id, entity_id, payload["data"])
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    _metrics.timer(metric_key + ".duration_ms", elapsed_ms)
    _metrics.counter(metric_key, labels={"status": "success", "target": "entity" if entity_id == "main" else "item"})

    if entity_id != "main":
        return asdict(
            success_response(
                data={"entity_id": entity_id, "item": outcome["item"], **_step(manager)},
                request_id=request_id,
            )
        )

    spec = entity_to_dict(outcome["entity"])
    logger.info("Draft %s saved as %s", draft_id, spec["id"])
    audit_log("draft_finalized", draft_id=draft_id, spec_id=spec["id"])
    return asdict(
        success_response(
            data={"entity_id": "main", "draft_id": draft_id, "spec_id": spec["id"], "spec": spec, "draft_deleted": True},
            request_id=request_id,
        )
    )
