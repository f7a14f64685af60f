"""Action routing for unified tools.

A unified tool exposes a single ``action`` argument; the router maps the
action (or one of its aliases) to a handler and forwards the remaining
keyword arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from spec_mcp.core.errors.execution import ActionRouterError

ActionHandler = Callable[..., dict]


@dataclass(frozen=True)
class ActionDefinition:
    """A routable action and its handler."""

    name: str
    handler: ActionHandler
    summary: Optional[str] = None
    aliases: Tuple[str, ...] = field(default_factory=tuple)


class ActionRouter:
    """Dispatches ``action`` names to handlers for one tool."""

    def __init__(self, tool_name: str, actions: Sequence[ActionDefinition]) -> None:
        self.tool_name = tool_name
        self._definitions: Dict[str, ActionDefinition] = {}
        self._lookup: Dict[str, ActionDefinition] = {}
        for definition in actions:
            if definition.name in self._definitions:
                raise ValueError(f"Duplicate action '{definition.name}' for tool '{tool_name}'")
            self._definitions[definition.name] = definition
            for key in (definition.name, *definition.aliases):
                self._lookup[key.lower()] = definition

    def allowed_actions(self, include_aliases: bool = False) -> List[str]:
        """Canonical action names; with ``include_aliases`` every accepted spelling."""
        if include_aliases:
            return list(self._lookup)
        return list(self._definitions)

    def describe(self) -> Dict[str, Optional[str]]:
        """Action name to summary, in registration order."""
        return {name: d.summary for name, d in self._definitions.items()}

    def resolve(self, action: Optional[str]) -> ActionDefinition:
        definition = self._lookup.get((action or "").strip().lower())
        if definition is None:
            allowed = self.allowed_actions()
            raise ActionRouterError(
                f"Unsupported {self.tool_name} action '{action}'. Allowed actions: {', '.join(sorted(allowed))}",
                allowed_actions=allowed,
            )
        return definition

    def dispatch(self, action: Optional[str] = None, **kwargs: Any) -> dict:
        return self.resolve(action).handler(**kwargs)
