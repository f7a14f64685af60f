"""Tests for guided drafting: the drafter state machine and draft sessions."""

import pytest

from spec_mcp.core.drafts import DraftManager, DraftStore, EntityDrafter, get_draft_store
from spec_mcp.core.errors import DraftError, DraftNotFoundError, DraftValidationError

DECISION_MAIN = {
    "name": "Use PostgreSQL",
    "description": "Primary datastore for the service",
    "decision": "Store all relational data in PostgreSQL 16",
    "context": "We need transactions and mature tooling for reporting",
}


def answer_main(drafter):
    """Answer every main question with a placeholder."""
    for question in drafter.questions:
        drafter.answer_question_by_id(question.id, f"answer to {question.id}")


class TestEntityDrafter:
    def test_milestone_questions(self):
        drafter = EntityDrafter.for_type("milestone")
        assert [q.id for q in drafter.questions] == ["q-001", "q-002", "q-003"]
        assert [q.optional for q in drafter.questions] == [False, True, True]
        assert drafter.arrays == {}

    def test_answers_follow_question_order(self):
        drafter = EntityDrafter.for_type("milestone")
        answered = drafter.submit_answer("Beta: first public release")
        assert answered.id == "q-001"
        assert drafter.current_question().id == "q-002"

    def test_submit_after_all_answered(self):
        drafter = EntityDrafter.for_type("milestone")
        answer_main(drafter)
        with pytest.raises(DraftError):
            drafter.submit_answer("one more")

    def test_unknown_question(self):
        with pytest.raises(DraftError):
            EntityDrafter.for_type("decision").answer_question_by_id("q-099", "x")

    def test_skip_optional_only(self):
        drafter = EntityDrafter.for_type("decision")
        assert drafter.skip_question("q-003").answer == ""
        with pytest.raises(DraftError):
            drafter.skip_question("q-001")


class TestCollections:
    def test_collection_answer_creates_items(self):
        drafter = EntityDrafter.for_type("decision")
        answer_main(drafter)
        assert drafter.current_question().id == "q-consequences"

        drafter.submit_answer("Faster reporting, Ops burden")

        items = drafter.arrays["consequences"].items
        assert [item.description for item in items] == ["Faster reporting", "Ops burden"]
        assert drafter.current_question().id == "consequences[0].cq-q-001"

    @pytest.mark.parametrize("answer", ["none", "N/A", ""])
    def test_empty_collection_answers(self, answer):
        drafter = EntityDrafter.for_type("decision")
        answer_main(drafter)
        drafter.submit_answer(answer)
        assert drafter.arrays["consequences"].items == []
        assert drafter.questions_complete

    def test_item_question_context(self):
        drafter = EntityDrafter.for_type("decision")
        answer_main(drafter)
        drafter.submit_answer("Faster reporting")
        next_action = drafter.continue_context()["next_action"]
        assert next_action["question_id"] == "consequences[0].cq-q-001"
        assert next_action["context"] == {
            "type": "item",
            "field": "consequences",
            "item_index": 0,
            "description": "Faster reporting",
        }


class TestFinalization:
    @pytest.fixture
    def answered(self):
        drafter = EntityDrafter.for_type("decision")
        answer_main(drafter)
        drafter.submit_answer("Faster reporting")
        drafter.submit_answer("positive")
        drafter.submit_answer("Reports run in minutes instead of hours")
        drafter.skip_question("consequences[0].cq-q-003")
        return drafter

    def test_item_is_finalized_before_main(self, answered):
        step = answered.continue_context()
        assert step["stage"] == "finalization"
        assert step["next_action"]["entity_id"] == "consequences[0]"
        assert step["next_action"]["context"]["questions_and_answers"][0]["answer"] == "positive"

    def test_finalize_item(self, answered):
        item = answered.finalize_by_entity_id(
            "consequences[0]", {"type": "positive", "description": "Reports run in minutes instead of hours"}
        )
        assert item == {"type": "positive", "description": "Reports run in minutes instead of hours"}
        assert answered.continue_context()["next_action"]["entity_id"] == "main"
        assert answered.prefilled_array_data() == {"consequences": [item]}

    def test_invalid_item_data(self, answered):
        with pytest.raises(DraftValidationError) as exc_info:
            answered.finalize_by_entity_id("consequences[0]", {"type": "great", "description": "short"})
        assert len(exc_info.value.errors) == 2

    def test_item_with_open_questions(self):
        drafter = EntityDrafter.for_type("decision")
        answer_main(drafter)
        drafter.submit_answer("Faster reporting")
        with pytest.raises(DraftError) as exc_info:
            drafter.finalize_by_entity_id("consequences[0]", {"type": "positive"})
        assert "Cannot finalize item 0" in str(exc_info.value)

    @pytest.mark.parametrize("entity_id", ["consequences", "tasks[0]", "consequences[3]"])
    def test_bad_entity_ids(self, answered, entity_id):
        with pytest.raises(DraftError):
            answered.finalize_by_entity_id(entity_id, {})

    def test_main_requires_answers(self):
        with pytest.raises(DraftError):
            EntityDrafter.for_type("milestone").finalize({})

    def test_round_trip_state(self, answered):
        restored = EntityDrafter.from_dict(answered.config, answered.to_dict())
        assert [q.answer for q in restored.all_questions()] == [q.answer for q in answered.all_questions()]


class TestDraftManager:
    def test_status_and_progress(self):
        manager = DraftManager("milestone", 2)
        manager.drafter.submit_answer("Beta: first public release")

        status = manager.status()
        assert status["draft_id"] == "mls-002"
        assert status["stage"] == "in_progress"
        assert status["progress"] == {"current": 1, "total": 3}
        assert status["current_question"]["id"] == "q-002"
        assert status["partial_draft"] == {"q-001": "Beta: first public release"}
        assert manager.progress() == {"answered": 1, "total": 3}

    def test_build_before_finalize(self):
        with pytest.raises(DraftError):
            DraftManager("milestone").build()


class TestDraftStore:
    def test_start_reserves_number_and_persists(self, specs, specs_dir):
        store = DraftStore(specs)
        manager = store.start("decision")

        assert manager.draft_id == "dec-001"
        assert store.has("dec-001")
        assert (specs_dir / "decisions" / "dec-001.draft.yml").exists()
        assert store.start("decision").draft_id == "dec-002"

    def test_in_memory_store_writes_nothing(self, specs, specs_dir):
        DraftStore(specs, persist=False).start("milestone")
        assert not (specs_dir / "milestones" / "mls-001.draft.yml").exists()

    def test_require_unknown(self, specs):
        with pytest.raises(DraftNotFoundError):
            DraftStore(specs).require("dec-404")

    def test_finalize_main_creates_entity(self, specs, specs_dir):
        store = DraftStore(specs)
        store.start("decision")
        drafter = store.require("dec-001").drafter
        answer_main(drafter)
        drafter.submit_answer("none")

        outcome = store.finalize("dec-001", "main", dict(DECISION_MAIN))

        entity = outcome["entity"]
        assert entity.number == 1
        assert entity.slug == "use-postgresql"
        assert specs.get_entity("dec-001-use-postgresql") is not None
        assert not store.has("dec-001")
        assert not (specs_dir / "decisions" / "dec-001.draft.yml").exists()

    def test_finalize_merges_drafted_items(self, specs):
        store = DraftStore(specs, persist=False)
        store.start("decision")
        drafter = store.require("dec-001").drafter
        answer_main(drafter)
        drafter.submit_answer("Faster reporting")
        drafter.submit_answer("positive")
        drafter.submit_answer("Reports run in minutes instead of hours")
        drafter.submit_answer("")
        store.finalize(
            "dec-001", "consequences[0]", {"type": "positive", "description": "Reports run in minutes instead of hours"}
        )

        entity = store.finalize("dec-001", "main", dict(DECISION_MAIN))["entity"]

        assert [c.type for c in entity.consequences] == ["positive"]

    def test_load_all_restores_sessions(self, specs):
        first = DraftStore(specs)
        first.start("milestone")
        first.require("mls-001").drafter.submit_answer("Beta: first public release")

        first.save("mls-001")
        second = DraftStore(specs)

        assert second.load_all() == 1
        assert second.require("mls-001").drafter.questions[0].answer == "Beta: first public release"
        assert second.load_all() == 0

    def test_delete_with_file(self, specs, specs_dir):
        store = DraftStore(specs)
        store.start("milestone")
        assert store.delete_with_file("mls-001") is True
        assert not (specs_dir / "milestones" / "mls-001.draft.yml").exists()
        assert store.delete_with_file("mls-001") is False

    def test_list(self, specs):
        store = DraftStore(specs, persist=False)
        store.start("milestone")
        store.start("decision")
        assert [d["draft_id"] for d in store.list()] == ["dec-001", "mls-001"]

    def test_get_draft_store_is_cached(self, specs):
        assert get_draft_store(specs) is get_draft_store(specs)
