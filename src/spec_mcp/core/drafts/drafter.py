"""Question-driven drafting of a single entity.

An ``EntityDrafter`` walks an LLM through three stages:

1. ``questions``: answer the main questions, then for each list-valued
   field the collection question and the per-item questions.
2. ``finalization``: turn each item's answers into schema-valid data
   (``field[index]``), then the entity itself (``main``).
3. ``complete``: the entity data is validated and ready to be stored.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from spec_mcp.core.drafts.questions import ArrayDrafterConfig, DrafterConfig, QuestionTemplate, drafter_config
from spec_mcp.core.entity_types import EntityType
from spec_mcp.core.errors import DraftError, DraftValidationError
from spec_mcp.core.ids import next_item_id
from spec_mcp.core.schemas import ArrayField, array_field, format_validation_errors, item_json_schema, model_for

logger = logging.getLogger(__name__)

ENTITY_ID_PATTERN = re.compile(r"^(\w+)\[(\d+)\]$")
_EMPTY_COLLECTION = {"", "none", "n/a"}


@dataclass
class DraftQuestion:
    id: str
    question: str
    answer: Optional[str] = None
    optional: bool = False

    @classmethod
    def from_template(cls, template: QuestionTemplate, id_prefix: str = "") -> "DraftQuestion":
        return cls(id=f"{id_prefix}{template.id}", question=template.question, optional=template.optional)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "question": self.question, "answer": self.answer, "optional": self.optional}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DraftQuestion":
        return cls(
            id=data["id"],
            question=data["question"],
            answer=data.get("answer"),
            optional=bool(data.get("optional", False)),
        )


def _qa(questions: List[DraftQuestion]) -> List[Dict[str, str]]:
    return [{"id": q.id, "question": q.question, "answer": q.answer or ""} for q in questions]


def _validation_failure(exc: ValidationError) -> DraftValidationError:
    errors = format_validation_errors(exc)
    return DraftValidationError(f"Invalid data: {'; '.join(errors)}", errors)


@dataclass
class DraftItem:
    """One element of a list-valued field being drafted."""

    description: str
    questions: List[DraftQuestion]
    data: Dict[str, Any] = field(default_factory=dict)
    finalized: bool = False

    @property
    def questions_complete(self) -> bool:
        return all(q.answer is not None for q in self.questions)

    def current_question(self) -> Optional[DraftQuestion]:
        return next((q for q in self.questions if q.answer is None), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "questions": [q.to_dict() for q in self.questions],
            "data": self.data,
            "finalized": self.finalized,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DraftItem":
        return cls(
            description=data.get("description", ""),
            questions=[DraftQuestion.from_dict(q) for q in data.get("questions", [])],
            data=data.get("data") or {},
            finalized=bool(data.get("finalized", False)),
        )


class ArrayDrafter:
    """Drafts the items of one list-valued field."""

    def __init__(self, config: ArrayDrafterConfig, spec: ArrayField, question: Optional[DraftQuestion] = None) -> None:
        self.config = config
        self.spec = spec
        self.question = question or DraftQuestion.from_template(config.question)
        self.items: List[DraftItem] = []

    @property
    def field(self) -> str:
        return self.config.field

    def set_descriptions(self, descriptions: List[str]) -> None:
        self.items = [
            DraftItem(
                description=desc,
                questions=[DraftQuestion.from_template(t, f"{self.field}[{i}].") for t in self.config.item_questions],
            )
            for i, desc in enumerate(descriptions)
        ]

    def current_question(self) -> Optional[Tuple[Optional[int], DraftQuestion]]:
        if self.question.answer is None:
            return None, self.question
        for index, item in enumerate(self.items):
            if item.finalized:
                continue
            question = item.current_question()
            if question is not None:
                return index, question
        return None

    @property
    def incomplete_indices(self) -> List[int]:
        return [i for i, item in enumerate(self.items) if not item.finalized]

    @property
    def is_complete(self) -> bool:
        return self.question.answer is not None and not self.incomplete_indices

    def finalized_data(self) -> List[Dict[str, Any]]:
        return [item.data for item in self.items if item.finalized]

    def _item(self, index: int) -> DraftItem:
        if not 0 <= index < len(self.items):
            raise DraftError(f"Invalid item index: {index}")
        return self.items[index]

    def finalize_item(self, index: int, data: Dict[str, Any]) -> Dict[str, Any]:
        item = self._item(index)
        if not item.questions_complete:
            raise DraftError(f"Cannot finalize item {index}: questions not complete")
        payload = dict(data)
        if self.spec.has_ids and not payload.get("id"):
            payload["id"] = item.data.get("id") or next_item_id(self.finalized_data(), self.spec.prefix)
        try:
            item.data = self.spec.validate_item(payload)
        except ValidationError as exc:
            raise _validation_failure(exc) from exc
        except ValueError as exc:
            raise DraftValidationError(f"Invalid data: {exc}") from exc
        item.finalized = True
        return item.data

    def item_context(self, index: int) -> Dict[str, Any]:
        item = self._item(index)
        return {
            "field": self.field,
            "item_index": index,
            "description": item.description,
            "questions_and_answers": _qa(item.questions),
            "schema": item_json_schema(self.spec),
            "instruction": (
                f"Generate a JSON object for {self.field}[{index}] ('{item.description}') that conforms to the "
                "schema, using the answers above. Then call the draft tool with action 'finalize', "
                f"entity_id '{self.field}[{index}]' and the object as data."
            ),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"question": self.question.to_dict(), "items": [item.to_dict() for item in self.items]}


class EntityDrafter:
    """Holds the questions, answers and finalized data for one draft."""

    def __init__(self, config: DrafterConfig) -> None:
        self.config = config
        self.entity_type: EntityType = config.entity_type
        self.model = model_for(config.entity_type)
        self.questions: List[DraftQuestion] = [DraftQuestion.from_template(t) for t in config.questions]
        self.arrays: Dict[str, ArrayDrafter] = {}
        for array_config in config.arrays:
            spec = array_field(config.entity_type, array_config.field)
            if spec is None:
                raise ValueError(f"{array_config.field} is not an array field of {config.entity_type.value}")
            self.arrays[array_config.field] = ArrayDrafter(array_config, spec)
        self.data: Dict[str, Any] = {}
        self.finalized = False

    @classmethod
    def for_type(cls, entity_type: "EntityType | str") -> "EntityDrafter":
        return cls(drafter_config(entity_type))

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def all_questions(self) -> List[DraftQuestion]:
        questions = list(self.questions)
        for drafter in self.arrays.values():
            questions.append(drafter.question)
            for item in drafter.items:
                questions.extend(item.questions)
        return questions

    def current_question(self) -> Optional[DraftQuestion]:
        found = self._current()
        return found[0] if found else None

    def _current(self) -> Optional[Tuple[DraftQuestion, Dict[str, Any]]]:
        for question in self.questions:
            if question.answer is None:
                return question, {"type": "main"}
        for name, drafter in self.arrays.items():
            found = drafter.current_question()
            if found is None:
                continue
            index, question = found
            if index is None:
                return question, {"type": "collection", "field": name}
            return question, {
                "type": "item",
                "field": name,
                "item_index": index,
                "description": drafter.items[index].description,
            }
        return None

    def find_question(self, question_id: str) -> Optional[Tuple[DraftQuestion, Dict[str, Any]]]:
        for question in self.questions:
            if question.id == question_id:
                return question, {"type": "main"}
        for name, drafter in self.arrays.items():
            if drafter.question.id == question_id:
                return drafter.question, {"type": "collection", "field": name}
            for index, item in enumerate(drafter.items):
                for question in item.questions:
                    if question.id == question_id:
                        return question, {"type": "item", "field": name, "item_index": index}
        return None

    @property
    def questions_complete(self) -> bool:
        """All questions answered and every drafted item finalized."""
        return all(q.answer is not None for q in self.questions) and all(
            d.is_complete for d in self.arrays.values()
        )

    def submit_answer(self, answer: str) -> DraftQuestion:
        question = self.current_question()
        if question is None:
            raise DraftError("All questions have already been answered.")
        return self.answer_question_by_id(question.id, answer)

    def answer_question_by_id(self, question_id: str, answer: str) -> DraftQuestion:
        """Record an answer; a collection answer creates one item per value."""
        found = self.find_question(question_id)
        if found is None:
            raise DraftError(f"Question with ID '{question_id}' not found")
        question, context = found
        question.answer = answer
        if context["type"] == "collection":
            descriptions = [s.strip() for s in answer.split(",")]
            self.arrays[context["field"]].set_descriptions(
                [d for d in descriptions if d.lower() not in _EMPTY_COLLECTION]
            )
        return question

    def skip_question(self, question_id: str) -> DraftQuestion:
        found = self.find_question(question_id)
        if found is None:
            raise DraftError(f"Question with ID '{question_id}' not found")
        question, _ = found
        if not question.optional:
            raise DraftError(f"Question '{question_id}' is required and cannot be skipped")
        question.answer = ""
        return question

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def prefilled_array_data(self) -> Dict[str, List[Dict[str, Any]]]:
        return {name: d.finalized_data() for name, d in self.arrays.items() if d.finalized_data()}

    def finalize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not self.questions_complete:
            raise DraftError("Cannot finalize: not all questions have been answered.")
        try:
            entity = self.model.model_validate(data)
        except ValidationError as exc:
            raise _validation_failure(exc) from exc
        self.data = entity.model_dump(mode="json", by_alias=True, exclude_none=True)
        self.finalized = True
        return self.data

    def finalize_by_entity_id(self, entity_id: Optional[str], data: Dict[str, Any]) -> Dict[str, Any]:
        if not entity_id or entity_id == "main":
            return self.finalize(data)
        match = ENTITY_ID_PATTERN.match(entity_id)
        if not match:
            raise DraftError(f"Invalid entity ID format: '{entity_id}'. Expected 'fieldName[index]' or 'main'")
        name, index = match.group(1), int(match.group(2))
        drafter = self.arrays.get(name)
        if drafter is None:
            raise DraftError(f"Array field '{name}' not found")
        return drafter.finalize_item(index, data)

    def entity_context(self) -> Dict[str, Any]:
        prefilled = self.prefilled_array_data()
        return {
            "main_questions": _qa(self.questions),
            "array_fields_status": {
                name: {"finalized": d.is_complete, "item_count": len(d.finalized_data())}
                for name, d in self.arrays.items()
            },
            "prefilled_data": prefilled,
            "schema": self.model.model_json_schema(by_alias=True),
            "instruction": (
                f"Generate the complete {self.entity_type.value} object from the answers above. Array fields "
                f"already drafted ({', '.join(prefilled) or 'none'}) are merged in automatically; type, number, "
                "slug and timestamps are filled in on finalize. Call the draft tool with action 'finalize', "
                "entity_id 'main' and the object as data."
            ),
        }

    def continue_context(self) -> Dict[str, Any]:
        current = self._current()
        if current is not None:
            question, context = current
            return {
                "stage": "questions",
                "next_action": {
                    "action": "answer_question",
                    "question_id": question.id,
                    "question": question.question,
                    "optional": question.optional,
                    "context": context,
                },
            }

        if not self.finalized:
            for name, drafter in self.arrays.items():
                pending = drafter.incomplete_indices
                if pending:
                    return {
                        "stage": "finalization",
                        "next_action": {
                            "action": "finalize_entity",
                            "entity_id": f"{name}[{pending[0]}]",
                            "context": drafter.item_context(pending[0]),
                        },
                    }
            return {
                "stage": "finalization",
                "next_action": {"action": "finalize_entity", "entity_id": "main", "context": self.entity_context()},
            }

        return {
            "stage": "complete",
            "next_action": {"action": "complete", "message": "Draft is finalized and ready to be saved as a spec"},
        }

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questions": [q.to_dict() for q in self.questions],
            "data": self.data,
            "finalized": self.finalized,
            "arrays": {name: d.to_dict() for name, d in self.arrays.items()},
        }

    @classmethod
    def from_dict(cls, config: DrafterConfig, state: Dict[str, Any]) -> "EntityDrafter":
        """Rebuild a drafter; item schemas always come from ``config``."""
        drafter = cls(config)
        saved = {q["id"]: q for q in state.get("questions", [])}
        for question in drafter.questions:
            if question.id in saved:
                question.answer = saved[question.id].get("answer")
        for name, array_state in (state.get("arrays") or {}).items():
            array_drafter = drafter.arrays.get(name)
            if array_drafter is None:
                logger.warning("Dropping unknown draft array field %s", name)
                continue
            if array_state.get("question"):
                array_drafter.question = DraftQuestion.from_dict(array_state["question"])
            array_drafter.items = [DraftItem.from_dict(item) for item in array_state.get("items", [])]
        drafter.data = state.get("data") or {}
        drafter.finalized = bool(state.get("finalized", False))
        return drafter
