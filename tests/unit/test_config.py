"""Tests for ServerConfig loading from TOML files and environment variables."""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from spec_mcp.config import ServerConfig, _parse_bool, _parse_csv, _try_parse_bool, get_config, set_config
from spec_mcp.config.parsing import _normalize_log_level


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Empty environment, fake home and a cwd without project config."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    with patch.object(Path, "home", return_value=home), patch.dict(os.environ, {}, clear=True):
        yield work


class TestDefaults:
    def test_defaults(self, isolated_env):
        config = ServerConfig.from_env()
        assert config.specs_dir is None
        assert config.get_specs_dir() == Path("./specs")
        assert config.log_level == "INFO"
        assert config.server_name == "spec-mcp"
        assert config.auto_create_folders is True
        assert config.persist_drafts is True
        assert config.disabled_tools == []
        assert config.startup_warnings == []


class TestTomlLoading:
    """Project TOML sections map onto config fields."""

    def test_all_sections(self, isolated_env):
        (isolated_env / "spec-mcp.toml").write_text(
            """
[workspace]
specs_dir = "./my-specs"
auto_create_folders = false

[logging]
level = "debug"
structured = false

[server]
name = "specs-dev"

[tools]
disabled_tools = ["draft"]

[drafts]
persist = false
"""
        )
        (isolated_env / "my-specs").mkdir()

        config = ServerConfig.from_env()

        assert config.specs_dir == Path("./my-specs")
        assert config.auto_create_folders is False
        assert config.log_level == "DEBUG"
        assert config.structured_logging is False
        assert config.server_name == "specs-dev"
        assert config.disabled_tools == ["draft"]
        assert config.persist_drafts is False
        assert config.startup_warnings == []

    def test_hidden_project_file(self, isolated_env):
        (isolated_env / ".spec-mcp.toml").write_text('[logging]\nlevel = "ERROR"\n')
        assert ServerConfig.from_env().log_level == "ERROR"

    def test_project_overrides_home(self, isolated_env):
        Path.home().joinpath(".spec-mcp.toml").write_text('[logging]\nlevel = "DEBUG"\nstructured = false\n')
        (isolated_env / "spec-mcp.toml").write_text('[logging]\nlevel = "WARNING"\n')

        config = ServerConfig.from_env()

        assert config.log_level == "WARNING"
        assert config.structured_logging is False

    def test_explicit_config_file(self, isolated_env, tmp_path):
        explicit = tmp_path / "custom.toml"
        explicit.write_text('[workspace]\nspecs_dir = "/srv/specs"\n')
        (isolated_env / "spec-mcp.toml").write_text('[workspace]\nspecs_dir = "ignored"\n')

        assert ServerConfig.from_env(str(explicit)).specs_dir == Path("/srv/specs")

    def test_unreadable_file_is_a_warning(self, isolated_env):
        (isolated_env / "spec-mcp.toml").write_text("[logging\nlevel = ")
        config = ServerConfig.from_env()
        assert config.log_level == "INFO"
        assert any("Ignored unreadable config file" in w for w in config.startup_warnings)


class TestEnvironment:
    def test_env_overrides_toml(self, isolated_env):
        (isolated_env / "spec-mcp.toml").write_text('[workspace]\nspecs_dir = "./from-toml"\n')
        os.environ["SPEC_MCP_SPECS_DIR"] = "/tmp/from-env"
        assert ServerConfig.from_env().specs_dir == Path("/tmp/from-env")

    def test_env_values(self, isolated_env):
        os.environ.update(
            {
                "SPEC_MCP_LOG_LEVEL": "warning",
                "SPEC_MCP_STRUCTURED_LOGGING": "no",
                "SPEC_MCP_AUTO_CREATE_FOLDERS": "yes",
                "SPEC_MCP_PERSIST_DRAFTS": "0",
                "SPEC_MCP_DISABLED_TOOLS": "draft, validate,,",
            }
        )

        config = ServerConfig.from_env()

        assert config.log_level == "WARNING"
        assert config.structured_logging is False
        assert config.persist_drafts is False
        assert config.disabled_tools == ["draft", "validate"]

    def test_config_file_from_env(self, isolated_env, tmp_path):
        explicit = tmp_path / "env.toml"
        explicit.write_text('[server]\nname = "from-env-file"\n')
        os.environ["SPEC_MCP_CONFIG_FILE"] = str(explicit)
        assert ServerConfig.from_env().server_name == "from-env-file"

    def test_invalid_structured_logging_value(self, isolated_env):
        os.environ["SPEC_MCP_STRUCTURED_LOGGING"] = "sometimes"
        config = ServerConfig.from_env()
        assert config.structured_logging is True
        assert any("SPEC_MCP_STRUCTURED_LOGGING" in w for w in config.startup_warnings)


class TestStartupWarnings:
    def test_unknown_disabled_tool(self, isolated_env):
        os.environ["SPEC_MCP_DISABLED_TOOLS"] = "draft,research"
        warnings = ServerConfig.from_env().startup_warnings
        assert len(warnings) == 1
        assert "research" in warnings[0]

    def test_missing_specs_dir_without_auto_create(self, isolated_env):
        os.environ["SPEC_MCP_AUTO_CREATE_FOLDERS"] = "false"
        warnings = ServerConfig.from_env().startup_warnings
        assert any("auto_create_folders is disabled" in w for w in warnings)

    def test_specs_dir_is_a_file(self, isolated_env):
        (isolated_env / "specs").write_text("not a directory")
        warnings = ServerConfig.from_env().startup_warnings
        assert warnings == ["specs_dir specs exists but is not a directory"]

    def test_warnings_are_not_duplicated(self):
        config = ServerConfig()
        config._add_startup_warning("twice")
        config._add_startup_warning("twice")
        assert config.startup_warnings == ["twice"]


class TestParsing:
    @pytest.mark.parametrize("value, expected", [("true", True), ("ON", True), ("1", True), ("off", False), ("x", False)])
    def test_parse_bool(self, value, expected):
        assert _parse_bool(value) is expected

    @pytest.mark.parametrize("value, expected", [("yes", True), ("no", False), ("maybe", None), (False, False)])
    def test_try_parse_bool(self, value, expected):
        assert _try_parse_bool(value) is expected

    def test_parse_csv(self):
        assert _parse_csv(" spec , ,item") == ["spec", "item"]

    def test_invalid_log_level_falls_back(self):
        assert _normalize_log_level("verbose") == "INFO"
        assert _normalize_log_level(" error ") == "ERROR"


class TestGlobalConfig:
    def test_set_and_get(self):
        config = ServerConfig(server_name="custom")
        set_config(config)
        try:
            assert get_config() is config
        finally:
            set_config(None)

    def test_setup_logging_replaces_handlers(self):
        config = ServerConfig(log_level="DEBUG", structured_logging=False)
        config.setup_logging()
        config.setup_logging()
        package_logger = logging.getLogger("spec_mcp")
        try:
            assert package_logger.level == logging.DEBUG
            assert len(package_logger.handlers) == 1
        finally:
            for handler in list(package_logger.handlers):
                package_logger.removeHandler(handler)
            package_logger.setLevel(logging.NOTSET)
