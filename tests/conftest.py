"""Shared fixtures and entity factories for the spec-mcp test suite."""

import pytest

from spec_mcp.core.drafts import reset_draft_stores
from spec_mcp.core.storage import SpecManager


@pytest.fixture(autouse=True)
def _fresh_draft_stores():
    """Draft stores are cached per specs directory; start every test empty."""
    reset_draft_stores()
    yield
    reset_draft_stores()


@pytest.fixture
def specs_dir(tmp_path):
    path = tmp_path / "specs"
    path.mkdir()
    return path


@pytest.fixture
def specs(specs_dir):
    """A SpecManager rooted at an empty temporary specs directory."""
    return SpecManager(specs_dir)

