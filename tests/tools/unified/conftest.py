"""Shared fixtures for unified tool dispatch tests."""

from unittest.mock import MagicMock

import pytest

from spec_mcp.config.server import ServerConfig


@pytest.fixture
def mock_config():
    """Create a mock ServerConfig."""
    config = MagicMock()
    return config


@pytest.fixture
def server_config(specs_dir):
    """A real ServerConfig pointing at the temporary specs directory."""
    return ServerConfig(specs_dir=specs_dir, structured_logging=False)
