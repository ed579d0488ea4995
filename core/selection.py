# =============================================================================
# core/selection.py - Selection State
# =============================================================================
# SelectionState holds the draft order being built: an ordered set of
# (item id, quantity) entries, the catalog items seen so far (for prices) and
# the package details that set the budget.
#
# Invariants:
# - at most one entry per item id
# - every entry has quantity >= 1 (removing the last unit removes the entry)
# - a rejected change leaves the state exactly as it was
#
# Every applied change notifies the registered listeners so callers can
# persist the selection and push new totals.
#
# Usage:
#   state = SelectionState(package=PackageDetails(name="Gift", budget=15000))
#   state.increment(candle)
#   state.decrement(candle.id)
#   state.totals.final_total_display
# =============================================================================

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable

from app.exceptions import InvalidSelectionError
from core.budget import ensure_within_budget
from core.models.catalog import CatalogItem, CatalogKind
from core.models.package import PackageDetails
from core.models.selection import (
    LineItem,
    SelectionAction,
    SelectionActionType,
    SelectionEntry,
)
from core.pricing import Totals, compute_subtotal, line_total

logger = logging.getLogger(__name__)

Listener = Callable[["SelectionState"], None]


class SelectionState:
    """
    The shopper's current selection.

    Mutations that add cost (toggle on, increment) go through the budget
    evaluator first and raise BudgetExceededError when rejected. Mutations
    that lower cost never fail.
    """

    def __init__(
        self,
        package: PackageDetails | None = None,
        kind: CatalogKind = CatalogKind.CUSTOM,
        entries: list[SelectionEntry] | None = None,
        items: list[CatalogItem] | None = None,
        edit_curation_id: str | None = None,
    ):
        self.package = package
        self.kind = kind
        self.edit_curation_id = edit_curation_id

        self._entries: dict[str, SelectionEntry] = {}
        self._items: dict[str, CatalogItem] = {}
        self._listeners: list[Listener] = []

        for item in items or []:
            self._items[item.id] = item
        for entry in entries or []:
            # Later duplicates collapse onto the first occurrence
            if entry.item_id not in self._entries:
                self._entries[entry.item_id] = entry

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def entries(self) -> list[SelectionEntry]:
        return list(self._entries.values())

    @property
    def items(self) -> list[CatalogItem]:
        return [self._items[item_id] for item_id in self._entries if item_id in self._items]

    @property
    def effective_budget(self) -> Decimal | None:
        return self.package.effective_budget if self.package else None

    @property
    def prices(self) -> dict[str, Decimal]:
        return {item_id: item.price for item_id, item in self._items.items()}

    @property
    def subtotal(self) -> Decimal:
        return compute_subtotal(self.entries, self.prices)

    @property
    def totals(self) -> Totals:
        return Totals.from_subtotal(self.subtotal)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item_id: object) -> bool:
        return str(item_id) in self._entries

    def is_empty(self) -> bool:
        return not self._entries

    def quantity_of(self, item_id: str) -> int:
        entry = self._entries.get(str(item_id))
        return entry.quantity if entry else 0

    def line_items(self) -> list[LineItem]:
        """Entries priced with the catalog data known to this state."""
        lines = []
        for entry in self._entries.values():
            item = self._items.get(entry.item_id)
            if item is None:
                continue
            lines.append(LineItem(
                item_id=item.id,
                name=item.name,
                price=item.price,
                quantity=entry.quantity,
                quantifiable=item.quantifiable,
                line_total=line_total(item.price, entry.quantity),
                image=item.image,
            ))
        return lines

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener(self)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def toggle(self, item: CatalogItem) -> bool:
        """
        Select or deselect a single-unit item.

        Returns:
            True if the item is now selected, False if it was removed

        Raises:
            InvalidSelectionError: If the item is quantifiable
            BudgetExceededError: If selecting it would exceed the budget
        """
        if item.quantifiable:
            raise InvalidSelectionError(
                item.id, f"{item.name} is sold by quantity; use increment/decrement"
            )

        if item.id in self._entries:
            del self._entries[item.id]
            logger.debug(f"Deselected item {item.id}")
            self._changed()
            return False

        self._admit(item, 1)
        self._items[item.id] = item
        self._entries[item.id] = SelectionEntry(item_id=item.id, quantity=1)
        logger.debug(f"Selected item {item.id}")
        self._changed()
        return True

    def increment(self, item: CatalogItem) -> int:
        """
        Add one unit of an item, inserting it at quantity 1 if absent.

        Returns:
            The new quantity

        Raises:
            InvalidSelectionError: If a single-unit item is already selected
            BudgetExceededError: If the extra unit would exceed the budget
        """
        current = self.quantity_of(item.id)

        if current and not item.quantifiable:
            raise InvalidSelectionError(
                item.id, f"{item.name} can only be selected once"
            )

        candidate = current + 1
        self._admit(item, candidate)

        self._items[item.id] = item
        self._entries[item.id] = SelectionEntry(item_id=item.id, quantity=candidate)
        logger.debug(f"Item {item.id} quantity -> {candidate}")
        self._changed()
        return candidate

    def decrement(self, item_id: str) -> int:
        """
        Remove one unit of an item. The entry goes away at zero.

        No-op for items that are not selected.

        Returns:
            The new quantity (0 when the entry was removed or absent)
        """
        item_id = str(item_id)
        entry = self._entries.get(item_id)
        if entry is None:
            return 0

        if entry.quantity <= 1:
            del self._entries[item_id]
            quantity = 0
        else:
            quantity = entry.quantity - 1
            self._entries[item_id] = SelectionEntry(item_id=item_id, quantity=quantity)

        logger.debug(f"Item {item_id} quantity -> {quantity}")
        self._changed()
        return quantity

    def remove(self, item_id: str) -> bool:
        """Remove an item whatever its quantity. Returns False if it was absent."""
        item_id = str(item_id)
        if item_id not in self._entries:
            return False
        del self._entries[item_id]
        self._changed()
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._changed()

    def apply(
        self,
        action: SelectionAction,
        resolve_item: Callable[[str], CatalogItem] | None = None,
    ) -> Any:
        """
        Apply a SelectionAction.

        Toggle and increment need the catalog item; it is taken from the
        items already known to this state or looked up with resolve_item.
        """
        if action.type is SelectionActionType.CLEAR:
            return self.clear()
        if action.type is SelectionActionType.DECREMENT:
            return self.decrement(action.item_id)
        if action.type is SelectionActionType.REMOVE:
            return self.remove(action.item_id)

        item = resolve_item(action.item_id) if resolve_item else self._items.get(action.item_id)
        if item is None:
            raise InvalidSelectionError(action.item_id, f"Unknown item: {action.item_id}")

        if action.type is SelectionActionType.TOGGLE:
            return self.toggle(item)
        return self.increment(item)

    def _admit(self, item: CatalogItem, candidate_quantity: int) -> None:
        # Prices of the current entries plus the candidate's current price
        prices = self.prices
        prices[item.id] = item.price
        ensure_within_budget(
            self.entries,
            prices,
            item_id=item.id,
            price=item.price,
            candidate_quantity=candidate_quantity,
            effective_budget=self.effective_budget,
        )

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe dump used by the ephemeral store and WebSocket pushes."""
        return {
            "package": self.package.model_dump(mode="json") if self.package else None,
            "kind": self.kind.value,
            "edit_curation_id": self.edit_curation_id,
            "entries": [entry.model_dump(mode="json") for entry in self.entries],
            "items": [self._items[e.item_id].model_dump(mode="json")
                      for e in self.entries if e.item_id in self._items],
            "totals": self.totals.model_dump(mode="json"),
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> SelectionState:
        package = data.get("package")
        return cls(
            package=PackageDetails.model_validate(package) if package else None,
            kind=CatalogKind(data.get("kind", CatalogKind.CUSTOM.value)),
            entries=[SelectionEntry.model_validate(e) for e in data.get("entries", [])],
            items=[CatalogItem.model_validate(i) for i in data.get("items", [])],
            edit_curation_id=data.get("edit_curation_id"),
        )
