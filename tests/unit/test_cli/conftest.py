"""Shared fixtures for CLI command tests."""

import pytest
from click.testing import CliRunner
from factories import business_requirement_data, plan_data

from spec_mcp.core.storage import SpecManager


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def temp_specs_dir(specs_dir):
    """Specs directory holding brd-001-user-login and pln-001-auth-flow."""
    specs = SpecManager(specs_dir)
    specs.create("business-requirement", business_requirement_data())
    specs.create("plan", plan_data(criteria={"requirement": "brd-001", "criteria": "crt-001"}))
    return specs_dir
