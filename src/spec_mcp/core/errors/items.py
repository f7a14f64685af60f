"""Array item and supersession error classes."""

from spec_mcp.core.errors.spec import SpecMcpError


class ItemError(SpecMcpError):
    """Base class for errors about items inside a spec array field."""


class ItemNotFoundError(ItemError):
    """Raised when an item ID is not present in the target array."""

    def __init__(self, item_id: str, field: str, spec_id: str = "") -> None:
        self.item_id = item_id
        self.field = field
        self.spec_id = spec_id
        where = f" of {spec_id}" if spec_id else ""
        super().__init__(
            f"Item '{item_id}' not found in {field}{where}",
            details={"item_id": item_id, "field": field, "spec_id": spec_id},
        )


class AlreadySupersededError(ItemError):
    """Raised when superseding an item that already has a successor."""

    def __init__(self, item_id: str, superseded_by: str) -> None:
        self.item_id = item_id
        self.superseded_by = superseded_by
        super().__init__(
            f"{item_id} has already been superseded by {superseded_by}",
            details={"item_id": item_id, "superseded_by": superseded_by},
        )


class UnsupportedFieldError(ItemError):
    """Raised when an array field does not exist on the entity type."""

    def __init__(self, field: str, entity_type: str) -> None:
        self.field = field
        self.entity_type = entity_type
        super().__init__(
            f"Field '{field}' is not an array field of {entity_type}",
            details={"field": field, "entity_type": entity_type},
        )
