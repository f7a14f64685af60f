"""Shared helpers for validate handler modules."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.observability import get_metrics
from spec_mcp.core.storage import SpecManager
from spec_mcp.tools.unified.common import (
    build_request_id,
    make_metric_name,
    open_spec_manager,
    resolve_specs_dir,
)

logger = logging.getLogger(__name__)
_metrics = get_metrics()

_ACTION_SUMMARY = {
    "entity": "Validate one stored entity or raw entity data",
    "all": "Validate every entity in the specs directory",
    "references": "Check cross-entity references, cycles and orphans",
    "warnings": "List files that failed to load",
    "suggest": "Suggest existing IDs for a broken reference",
}


def _metric_name(action: str) -> str:
    return make_metric_name("unified_tools.validate", action)


def _request_id() -> str:
    return build_request_id("validate")


def _open_specs(config: ServerConfig, path: Optional[str]) -> Tuple[Optional[SpecManager], Optional[dict]]:
    specs_dir, err = resolve_specs_dir(config, path)
    if err:
        return None, err
    assert specs_dir is not None
    return open_spec_manager(config, specs_dir), None
