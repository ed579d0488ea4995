# =============================================================================
# core/models/selection.py - Selection Schemas
# =============================================================================
# - SelectionEntry: one (item id, quantity) pair of the draft order
# - SelectionActionType / SelectionAction: mutations the selection accepts
# - LineItem: an entry joined with current catalog data, for display
# =============================================================================

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SelectionEntry(BaseModel):
    """
    One item of the draft order.

    Quantity is always at least 1; an entry at 0 is removed instead.
    """

    model_config = ConfigDict(frozen=True)

    item_id: str
    quantity: int = Field(default=1, ge=1)

    @field_validator("item_id", mode="before")
    @classmethod
    def _coerce_item_id(cls, value):
        return str(value)


class SelectionActionType(str, Enum):
    TOGGLE = "toggle"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    REMOVE = "remove"
    CLEAR = "clear"


class SelectionAction(BaseModel):
    """
    A single mutation request.

    Example:
        {"type": "increment", "item_id": "42"}
        {"type": "clear"}
    """

    type: SelectionActionType
    item_id: str | None = None

    @field_validator("item_id", mode="before")
    @classmethod
    def _coerce_item_id(cls, value):
        return None if value is None else str(value)

    @model_validator(mode="after")
    def _require_item_id(self):
        if self.type is not SelectionActionType.CLEAR and not self.item_id:
            raise ValueError(f"item_id is required for '{self.type.value}'")
        return self


class LineItem(BaseModel):
    """A selection entry priced with current catalog data."""

    item_id: str
    name: str
    price: Decimal
    quantity: int = Field(..., ge=1)
    quantifiable: bool = False
    line_total: Decimal
    image: str | None = None
