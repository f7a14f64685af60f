"""Per-type number counters persisted in ``specs.yml``."""

import logging
import re
from typing import Dict

from filelock import FileLock

from spec_mcp.core.entity_types import EntityType, get_info
from spec_mcp.core.storage.file_manager import FileManager

logger = logging.getLogger(__name__)

COUNTERS_FILE = "specs.yml"
LOCK_ACQUISITION_TIMEOUT = 10.0

_NUMBERED_FILE = re.compile(r"^([a-z]{3,4})-(\d{1,3})")


def highest_number_on_disk(files: FileManager, entity_type: "EntityType | str") -> int:
    """Highest number among entity and draft files of a type, 0 when empty."""
    info = get_info(entity_type)
    highest = 0
    for path in files.list_files(info.folder, "*.yml"):
        match = _NUMBERED_FILE.match(path.name)
        if match and match.group(1) == info.prefix:
            highest = max(highest, int(match.group(2)))
    return highest


class Counters:
    """Hands out sequential numbers per entity type.

    A counter missing from ``specs.yml`` starts at the highest number found
    on disk, so numbers are never reused after a manual edit.
    """

    def __init__(self, files: FileManager) -> None:
        self.files = files

    def _load(self) -> Dict[str, int]:
        data = self.files.read_yaml(COUNTERS_FILE) or {}
        counters = data.get("counters", {})
        return {k: int(v) for k, v in counters.items()} if isinstance(counters, dict) else {}

    def _save(self, counters: Dict[str, int]) -> None:
        data = self.files.read_yaml(COUNTERS_FILE) or {}
        data["counters"] = counters
        self.files.write_yaml(COUNTERS_FILE, data)

    def peek(self, entity_type: "EntityType | str") -> int:
        """The number the next call to ``next`` would return."""
        info = get_info(entity_type)
        return max(self._load().get(info.counter_key, 0), highest_number_on_disk(self.files, entity_type)) + 1

    def next(self, entity_type: "EntityType | str") -> int:
        """Allocate the next number; the read-increment-write runs under a file lock.

        Raises:
            filelock.Timeout: If another process holds the lock for too long
        """
        info = get_info(entity_type)
        counters_path = self.files.resolve(COUNTERS_FILE)
        counters_path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(f"{counters_path}.lock", timeout=LOCK_ACQUISITION_TIMEOUT):
            counters = self._load()
            current = max(counters.get(info.counter_key, 0), highest_number_on_disk(self.files, entity_type))
            counters[info.counter_key] = current + 1
            self._save(counters)
        logger.debug("Allocated %s number %d", info.entity_type.value, current + 1)
        return current + 1
