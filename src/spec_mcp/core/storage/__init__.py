"""YAML-backed storage for spec entities.

Sub-modules:
- ``file_manager``: YAML read/write with atomic replace
- ``counters``: per-type number allocation in ``specs.yml``
- ``entity_manager``: CRUD for one entity type
- ``spec_manager``: facade over all entity managers, plus query
"""

from spec_mcp.core.storage.counters import COUNTERS_FILE, Counters
from spec_mcp.core.storage.entity_manager import EntityManager, dump_entity
from spec_mcp.core.storage.file_manager import FileManager
from spec_mcp.core.storage.spec_manager import SpecManager, entity_to_dict

__all__ = [
    "COUNTERS_FILE",
    "Counters",
    "EntityManager",
    "FileManager",
    "SpecManager",
    "dump_entity",
    "entity_to_dict",
]
