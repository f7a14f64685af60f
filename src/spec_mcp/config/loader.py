"""ServerConfig loading and validation logic.

Provides ``_ServerConfigLoader``, a mixin whose methods are inherited by
``ServerConfig`` (defined in ``server.py``). Keeping the loading code here
leaves ``server.py`` with field definitions and simple accessors.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional, cast

if TYPE_CHECKING:
    from spec_mcp.config.server import ServerConfig

from spec_mcp.config.parsing import (
    _normalize_log_level,
    _parse_bool,
    _parse_csv,
    _try_parse_bool,
)

logger = logging.getLogger(__name__)

KNOWN_TOOLS = ("spec", "item", "task", "draft", "validate")


class _ServerConfigLoader:
    """Mixin providing config-loading methods for ``ServerConfig``.

    At runtime ``self`` is always a ``ServerConfig`` instance.
    """

    if TYPE_CHECKING:
        specs_dir: Optional[Path]
        log_level: str
        structured_logging: bool
        server_name: str
        server_version: str
        auto_create_folders: bool
        persist_drafts: bool
        disabled_tools: List[str]

        def _add_startup_warning(self, message: str) -> None: ...

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ServerConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. Project TOML config (./spec-mcp.toml or ./.spec-mcp.toml)
        3. User TOML config (~/.spec-mcp.toml)
        4. XDG config (~/.config/spec-mcp/config.toml)
        5. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get("SPEC_MCP_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "spec-mcp" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug(f"Loaded XDG config from {xdg_config}")

            home_config = Path.home() / ".spec-mcp.toml"
            if home_config.exists():
                config._load_toml(home_config)
                logger.debug(f"Loaded user config from {home_config}")

            project_config = Path("spec-mcp.toml")
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug(f"Loaded project config from {project_config}")
            else:
                hidden_config = Path(".spec-mcp.toml")
                if hidden_config.exists():
                    config._load_toml(hidden_config)
                    logger.debug(f"Loaded project config from {hidden_config}")

        config._load_env()
        config._validate_startup_configuration()

        return cast("ServerConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            self._add_startup_warning(f"Ignored unreadable config file {path}: {e}")
            return

        if "workspace" in data:
            ws = data["workspace"]
            if "specs_dir" in ws:
                self.specs_dir = Path(ws["specs_dir"])
            if "auto_create_folders" in ws:
                self.auto_create_folders = _parse_bool(ws["auto_create_folders"])

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = _normalize_log_level(str(log["level"]))
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        if "server" in data:
            srv = data["server"]
            if "name" in srv:
                self.server_name = srv["name"]
            if "version" in srv:
                self.server_version = srv["version"]

        if "tools" in data:
            tools_cfg = data["tools"]
            if "disabled_tools" in tools_cfg:
                self.disabled_tools = list(tools_cfg["disabled_tools"])

        if "drafts" in data:
            drafts_cfg = data["drafts"]
            if "persist" in drafts_cfg:
                self.persist_drafts = _parse_bool(drafts_cfg["persist"])

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if specs := os.environ.get("SPEC_MCP_SPECS_DIR"):
            self.specs_dir = Path(specs)

        if level := os.environ.get("SPEC_MCP_LOG_LEVEL"):
            self.log_level = _normalize_log_level(level)

        if structured := os.environ.get("SPEC_MCP_STRUCTURED_LOGGING"):
            parsed = _try_parse_bool(structured)
            if parsed is None:
                self._add_startup_warning(
                    f"Ignoring SPEC_MCP_STRUCTURED_LOGGING: expected true/false value, got {structured!r}"
                )
            else:
                self.structured_logging = parsed

        if auto_create := os.environ.get("SPEC_MCP_AUTO_CREATE_FOLDERS"):
            self.auto_create_folders = _parse_bool(auto_create)

        if persist := os.environ.get("SPEC_MCP_PERSIST_DRAFTS"):
            self.persist_drafts = _parse_bool(persist)

        if disabled := os.environ.get("SPEC_MCP_DISABLED_TOOLS"):
            self.disabled_tools = _parse_csv(disabled)

    def _validate_startup_configuration(self) -> None:
        """Record warnings for settings that will not behave as the user expects."""
        unknown = [name for name in self.disabled_tools if name not in KNOWN_TOOLS]
        if unknown:
            self._add_startup_warning(
                f"Unknown tools in disabled_tools: {', '.join(unknown)}. Known tools: {', '.join(KNOWN_TOOLS)}"
            )

        specs_dir = self.specs_dir or Path("./specs")
        if specs_dir.exists() and not specs_dir.is_dir():
            self._add_startup_warning(f"specs_dir {specs_dir} exists but is not a directory")
        elif not specs_dir.exists() and not self.auto_create_folders:
            self._add_startup_warning(
                f"specs_dir {specs_dir} does not exist and auto_create_folders is disabled; writes will fail"
            )

    def _describe(self) -> dict[str, Any]:
        """Summarize the effective configuration for diagnostics."""
        return {
            "specs_dir": str(self.specs_dir) if self.specs_dir else None,
            "log_level": self.log_level,
            "structured_logging": self.structured_logging,
            "auto_create_folders": self.auto_create_folders,
            "persist_drafts": self.persist_drafts,
            "disabled_tools": list(self.disabled_tools),
        }
