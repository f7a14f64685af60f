"""Read-only resources: entity JSON Schemas and raw spec YAML.

- ``spec-mcp://schema/{entity_type}``: JSON Schema of an entity type
- ``spec-mcp://specs/{spec_id}``: the stored YAML of one entity
"""

import json
import logging

from mcp.server.fastmcp import FastMCP

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.entity_types import entity_type_values
from spec_mcp.core.errors import SpecNotFoundError
from spec_mcp.core.observability import mcp_resource
from spec_mcp.core.schemas import model_for
from spec_mcp.core.storage import SpecManager

logger = logging.getLogger(__name__)

SCHEMA_URI = "spec-mcp://schema/{entity_type}"
SPEC_URI = "spec-mcp://specs/{spec_id}"


def entity_schema_json(entity_type: str) -> str:
    """JSON Schema (field aliases applied) for ``entity_type``."""
    if entity_type not in entity_type_values():
        raise ValueError(
            f"Unknown entity type '{entity_type}'. Expected one of: {', '.join(entity_type_values())}"
        )
    schema = model_for(entity_type).model_json_schema(by_alias=True)
    return json.dumps(schema, indent=2)


def spec_yaml(config: ServerConfig, spec_id: str) -> str:
    """Stored YAML of an entity, read verbatim from disk."""
    specs = SpecManager(config.get_specs_dir(), auto_create_folders=config.auto_create_folders)
    path = specs.entity_path(spec_id)
    if path is None:
        raise SpecNotFoundError(spec_id)
    return path.read_text(encoding="utf-8")


def register_spec_resources(mcp: FastMCP, config: ServerConfig) -> None:
    @mcp.resource(SCHEMA_URI, mime_type="application/schema+json")
    @mcp_resource(resource_type="schema")
    def entity_schema(entity_type: str) -> str:
        """JSON Schema for an entity type (business-requirement, plan, decision, ...)."""
        return entity_schema_json(entity_type)

    @mcp.resource(SPEC_URI, mime_type="application/yaml")
    @mcp_resource(resource_type="spec")
    def spec_content(spec_id: str) -> str:
        """YAML content of a stored spec, by full or short ID."""
        return spec_yaml(config, spec_id)

    logger.debug("Registered spec resources")
