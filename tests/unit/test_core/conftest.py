"""Shared fixtures for core unit tests."""

import pytest
from factories import business_requirement_data, plan_data

from spec_mcp.core.schemas import Plan


@pytest.fixture
def seeded_specs(specs):
    """A store holding brd-001 and a plan pln-001 that fulfils brd-001/crt-001."""
    specs.create("business-requirement", business_requirement_data())
    specs.create(
        "plan",
        plan_data(criteria={"requirement": "brd-001-user-login", "criteria": "crt-001"}),
    )
    return specs


@pytest.fixture
def plan_model():
    """An in-memory plan with a small task graph.

    tsk-002 depends on tsk-001; tsk-003 has no dependencies and high priority.
    """
    return Plan.model_validate(
        {
            "type": "plan",
            "number": 1,
            "slug": "auth-flow",
            **plan_data(),
            "tasks": [
                {"id": "tsk-001", "task": "Create the user model and migrations"},
                {"id": "tsk-002", "task": "Build the login endpoint", "depends_on": ["tsk-001"]},
                {"id": "tsk-003", "task": "Write the security review notes", "priority": "high"},
            ],
        }
    )
