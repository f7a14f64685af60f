"""YAML file I/O rooted at the specs directory."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from spec_mcp.core.entity_types import ENTITY_TYPES
from spec_mcp.core.errors import StorageError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileManager:
    """Reads and writes YAML documents below a specs root.

    Relative paths are resolved against ``specs_dir``. Writes go through a
    temporary file in the target folder followed by ``os.replace``.
    """

    def __init__(self, specs_dir: PathLike, *, auto_create_folders: bool = True) -> None:
        self.specs_dir = Path(specs_dir)
        self.auto_create_folders = auto_create_folders

    def resolve(self, path: PathLike) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.specs_dir / p

    def exists(self, path: PathLike) -> bool:
        return self.resolve(path).exists()

    def read_yaml(self, path: PathLike) -> Optional[Dict[str, Any]]:
        """Load a YAML mapping, or None when the file is missing.

        Raises:
            StorageError: if the file is unreadable or not a YAML mapping.
        """
        target = self.resolve(path)
        if not target.exists():
            return None
        try:
            with open(target, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise StorageError(f"Malformed YAML in {target.name}", path=str(target), reason=str(exc)) from exc
        except OSError as exc:
            raise StorageError(f"Cannot read {target.name}", path=str(target), reason=str(exc)) from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StorageError(
                f"Expected a mapping in {target.name}",
                path=str(target),
                reason=f"top-level value is {type(data).__name__}",
            )
        return data

    def write_yaml(self, path: PathLike, data: Dict[str, Any]) -> Path:
        target = self.resolve(path)
        if not target.parent.exists():
            if not self.auto_create_folders:
                raise StorageError(
                    f"Folder does not exist: {target.parent}",
                    path=str(target),
                    reason="auto_create_folders is disabled",
                )
            target.parent.mkdir(parents=True, exist_ok=True)

        content = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
        fd, tmp_path = tempfile.mkstemp(suffix=".tmp", prefix=target.stem + "_", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp_path, target)
        except OSError as exc:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Cannot write {target.name}", path=str(target), reason=str(exc)) from exc

        logger.debug("Wrote %s", target)
        return target

    def delete(self, path: PathLike) -> bool:
        target = self.resolve(path)
        if not target.exists():
            return False
        try:
            target.unlink()
        except OSError as exc:
            raise StorageError(f"Cannot delete {target.name}", path=str(target), reason=str(exc)) from exc
        logger.debug("Deleted %s", target)
        return True

    def list_files(self, folder: PathLike, pattern: str = "*.yml") -> List[Path]:
        directory = self.resolve(folder)
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.glob(pattern) if p.is_file())

    def ensure_structure(self) -> None:
        """Create the specs root and every entity folder."""
        self.specs_dir.mkdir(parents=True, exist_ok=True)
        for info in ENTITY_TYPES.values():
            (self.specs_dir / info.folder).mkdir(parents=True, exist_ok=True)
