"""Markdown guides served as ``spec-mcp://guide/{name}``.

Guides ship as ``.md`` files inside the package so they can be edited
without touching code.
"""

import logging
from importlib import resources
from typing import Dict

from mcp.server.fastmcp import FastMCP

from spec_mcp.core.observability import mcp_resource

logger = logging.getLogger(__name__)

GUIDE_URI = "spec-mcp://guide/{name}"

GUIDES: Dict[str, str] = {
    "choosing-spec-types": "Which spec types to use for different situations",
    "business-requirement": "How to write a business requirement",
    "implementation-workflow": "Working through a plan with the task tool",
    "best-practices": "Conventions for keeping specs useful over time",
}


def guide_markdown(name: str) -> str:
    """Markdown body of the guide called ``name``."""
    if name not in GUIDES:
        raise ValueError(f"Unknown guide '{name}'. Expected one of: {', '.join(GUIDES)}")
    return resources.files("spec_mcp.resources").joinpath("guides", f"{name}.md").read_text(encoding="utf-8")


def register_guide_resources(mcp: FastMCP) -> None:
    @mcp.resource(GUIDE_URI, mime_type="text/markdown")
    @mcp_resource(resource_type="guide")
    def guide(name: str) -> str:
        """Authoring guide: choosing-spec-types, business-requirement, implementation-workflow, best-practices."""
        return guide_markdown(name)

    logger.debug("Registered %d guide resources", len(GUIDES))
