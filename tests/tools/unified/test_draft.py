"""Tests for the unified draft tool: guided entity creation."""

import logging
from unittest.mock import patch

import pytest
from factories import decision_data

from spec_mcp.core.drafts import reset_draft_stores
from spec_mcp.tools.unified.draft import _dispatch_draft_action
from spec_mcp.tools.unified.spec import _dispatch_spec_action


def draft_call(config, action, **payload):
    return _dispatch_draft_action(action=action, payload=payload, config=config)


def answer_all_main(config, draft_id, count):
    for index in range(count):
        draft_call(config, "answer", draft_id=draft_id, answer=f"answer number {index + 1}")


class TestDraftDispatchExceptionHandling:
    def test_dispatch_catches_exceptions(self, mock_config):
        with patch("spec_mcp.tools.unified.draft._DRAFT_ROUTER") as mock_router:
            mock_router.allowed_actions.return_value = ["start"]
            mock_router.dispatch.side_effect = RuntimeError("Draft store offline")

            result = draft_call(mock_config, "start")

        assert result["success"] is False
        assert "Draft action 'start' failed: Draft store offline" == result["error"]
        assert result["data"]["error_code"] == "INTERNAL_ERROR"


class TestStartAndAnswer:
    def test_start(self, server_config, specs_dir):
        result = draft_call(server_config, "start", type="milestone")

        data = result["data"]
        assert result["success"] is True
        assert data["draft_id"] == "mls-001"
        assert data["type"] == "milestone"
        assert data["progress"] == {"answered": 0, "total": 3}
        assert data["stage"] == "questions"
        assert data["next_action"]["question_id"] == "q-001"
        assert (specs_dir / "milestones" / "mls-001.draft.yml").exists()

    def test_start_reserves_after_existing_entities(self, server_config):
        _dispatch_spec_action(action="create", payload={"type": "decision", "data": decision_data()}, config=server_config)
        assert draft_call(server_config, "start", type="decision")["data"]["draft_id"] == "dec-002"

    def test_start_unknown_type(self, server_config):
        result = draft_call(server_config, "start", type="epic")
        assert result["data"]["error_code"] == "INVALID_FORMAT"
        assert result["data"]["details"] == {"field": "type", "action": "draft.start"}

    def test_answer_current_question(self, server_config):
        draft_call(server_config, "start", type="milestone")
        result = draft_call(server_config, "answer", draft_id="mls-001", answer="Beta: first public release")

        assert result["data"]["answered"]["id"] == "q-001"
        assert result["data"]["answered"]["answer"] == "Beta: first public release"
        assert result["data"]["progress"]["answered"] == 1
        assert result["data"]["next_action"]["question_id"] == "q-002"

    def test_answer_by_id(self, server_config):
        draft_call(server_config, "start", type="milestone")
        result = draft_call(server_config, "answer", draft_id="mls-001", question_id="q-003", answer="none")
        assert result["data"]["answered"]["id"] == "q-003"
        assert result["data"]["next_action"]["question_id"] == "q-001"

    def test_answer_unknown_draft(self, server_config):
        result = draft_call(server_config, "answer", draft_id="mls-009", answer="anything")
        assert result["data"]["error_code"] == "DRAFT_NOT_FOUND"

    def test_answer_after_all_answered(self, server_config):
        draft_call(server_config, "start", type="milestone")
        answer_all_main(server_config, "mls-001", 3)
        result = draft_call(server_config, "answer", draft_id="mls-001", answer="one more")
        assert result["data"]["error_code"] == "DRAFT_INCOMPLETE"

    def test_skip_defaults_to_current_question(self, server_config):
        draft_call(server_config, "start", type="milestone")
        draft_call(server_config, "answer", draft_id="mls-001", answer="Beta: first public release")

        result = draft_call(server_config, "skip", draft_id="mls-001")

        assert result["data"]["skipped"] == "q-002"
        assert result["data"]["next_action"]["question_id"] == "q-003"

    def test_skip_required_question(self, server_config):
        draft_call(server_config, "start", type="milestone")
        result = draft_call(server_config, "skip", draft_id="mls-001", question_id="q-001")
        assert result["success"] is False


class TestSessionQueries:
    def test_continue_and_status(self, server_config):
        draft_call(server_config, "start", type="milestone")
        draft_call(server_config, "answer", draft_id="mls-001", answer="Beta: first public release")

        step = draft_call(server_config, "continue", draft_id="mls-001")["data"]
        status = draft_call(server_config, "status", draft_id="mls-001")["data"]

        assert step["next_action"]["question_id"] == "q-002"
        assert status["stage"] == "in_progress"
        assert status["progress"] == {"current": 1, "total": 3}
        assert status["all_questions"] == {"answered": 1, "total": 3}
        assert status["partial_draft"] == {"q-001": "Beta: first public release"}

    def test_list(self, server_config):
        draft_call(server_config, "start", type="milestone")
        draft_call(server_config, "start", type="decision")

        result = draft_call(server_config, "list")

        assert result["data"]["count"] == 2
        assert [d["draft_id"] for d in result["data"]["drafts"]] == ["dec-001", "mls-001"]

    def test_delete(self, server_config, specs_dir):
        draft_call(server_config, "start", type="milestone")

        assert draft_call(server_config, "delete", draft_id="mls-001")["data"] == {"draft_id": "mls-001", "deleted": True}
        assert not (specs_dir / "milestones" / "mls-001.draft.yml").exists()
        assert draft_call(server_config, "delete", draft_id="mls-001")["data"]["error_code"] == "DRAFT_NOT_FOUND"

    def test_drafts_survive_a_new_store(self, server_config):
        draft_call(server_config, "start", type="milestone")
        draft_call(server_config, "answer", draft_id="mls-001", answer="Beta: first public release")
        reset_draft_stores()

        status = draft_call(server_config, "status", draft_id="mls-001")["data"]
        assert status["partial_draft"] == {"q-001": "Beta: first public release"}

    def test_in_memory_drafts(self, server_config, specs_dir):
        server_config.persist_drafts = False
        draft_call(server_config, "start", type="milestone")
        assert not (specs_dir / "milestones" / "mls-001.draft.yml").exists()


class TestFinalize:
    @pytest.fixture
    def decision_draft(self, server_config):
        """dec-001 with every main question answered and one consequence drafted."""
        draft_call(server_config, "start", type="decision")
        answer_all_main(server_config, "dec-001", 6)
        draft_call(server_config, "answer", draft_id="dec-001", answer="Faster reporting")
        draft_call(server_config, "answer", draft_id="dec-001", answer="positive")
        draft_call(server_config, "answer", draft_id="dec-001", answer="Reports run in minutes instead of hours")
        draft_call(server_config, "skip", draft_id="dec-001")
        return server_config

    def test_item_stage(self, decision_draft):
        step = draft_call(decision_draft, "continue", draft_id="dec-001")["data"]
        assert step["stage"] == "finalization"
        assert step["next_action"]["entity_id"] == "consequences[0]"

    def test_finalize_main_before_items(self, server_config):
        draft_call(server_config, "start", type="decision")
        answer_all_main(server_config, "dec-001", 6)
        result = draft_call(server_config, "finalize", draft_id="dec-001", data=decision_data())
        assert result["data"]["error_code"] == "DRAFT_INCOMPLETE"

    def test_finalize_item_then_main(self, decision_draft, specs_dir):
        item = draft_call(
            decision_draft,
            "finalize",
            draft_id="dec-001",
            entity_id="consequences[0]",
            data={"type": "positive", "description": "Reports run in minutes instead of hours"},
        )
        assert item["data"]["item"]["type"] == "positive"
        assert item["data"]["next_action"]["entity_id"] == "main"

        result = draft_call(decision_draft, "finalize", draft_id="dec-001", entity_id="main", data=decision_data())

        data = result["data"]
        assert data["spec_id"] == "dec-001-use-postgresql"
        assert data["draft_deleted"] is True
        assert data["spec"]["consequences"][0]["type"] == "positive"
        assert (specs_dir / "decisions" / "dec-001-use-postgresql.yml").exists()
        assert draft_call(decision_draft, "status", draft_id="dec-001")["data"]["error_code"] == "DRAFT_NOT_FOUND"

    def test_finalize_main_is_audited(self, decision_draft, caplog):
        caplog.set_level(logging.INFO, logger="spec_mcp.audit")
        draft_call(
            decision_draft,
            "finalize",
            draft_id="dec-001",
            entity_id="consequences[0]",
            data={"type": "positive", "description": "Reports run in minutes instead of hours"},
        )

        draft_call(decision_draft, "finalize", draft_id="dec-001", data=decision_data())

        events = [r.audit for r in caplog.records if getattr(r, "audit", None)]
        finalized = [e["details"] for e in events if e["event_type"] == "draft_finalized"]
        assert finalized == [{"draft_id": "dec-001", "spec_id": "dec-001-use-postgresql"}]

    def test_invalid_item_data(self, decision_draft):
        result = draft_call(
            decision_draft,
            "finalize",
            draft_id="dec-001",
            entity_id="consequences[0]",
            data={"type": "great", "description": "short"},
        )
        assert result["data"]["error_code"] == "VALIDATION_ERROR"

    def test_finalize_requires_data(self, decision_draft):
        result = draft_call(decision_draft, "finalize", draft_id="dec-001")
        assert result["data"]["error_code"] == "MISSING_REQUIRED"
