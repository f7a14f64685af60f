"""Guided drafting of spec entities.

Sub-modules:
- ``questions``: per-type question sets
- ``drafter``: ``EntityDrafter`` state machine (questions, finalization)
- ``store``: ``DraftManager`` sessions and the persisted ``DraftStore``
"""

from spec_mcp.core.drafts.drafter import ArrayDrafter, DraftItem, DraftQuestion, EntityDrafter
from spec_mcp.core.drafts.questions import DRAFTER_CONFIGS, DrafterConfig, QuestionTemplate, drafter_config
from spec_mcp.core.drafts.store import DraftManager, DraftStore, get_draft_store, reset_draft_stores

__all__ = [
    "DRAFTER_CONFIGS",
    "ArrayDrafter",
    "DraftItem",
    "DraftManager",
    "DraftQuestion",
    "DraftStore",
    "DrafterConfig",
    "EntityDrafter",
    "QuestionTemplate",
    "drafter_config",
    "get_draft_store",
    "reset_draft_stores",
]
