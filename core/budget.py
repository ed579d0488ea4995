# =============================================================================
# core/budget.py - Budget Evaluator
# =============================================================================
# Decides whether adding an item (or raising its quantity) keeps the item
# subtotal within the package's effective budget.
#
# The check always recomputes the subtotal from the full list of entries.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from app.exceptions import BudgetExceededError
from core.pricing import compute_subtotal, format_currency, round2, to_decimal

if TYPE_CHECKING:
    from core.models.selection import SelectionEntry


@dataclass(frozen=True)
class BudgetCheck:
    """Outcome of a budget check."""

    admitted: bool
    item_id: str
    candidate_quantity: int
    new_total: Decimal
    effective_budget: Decimal | None = None

    @property
    def message(self) -> str:
        if self.admitted:
            return "Within budget"
        return (
            f"Adding this item would bring your items to {format_currency(self.new_total)}, "
            f"which would exceed budget of {format_currency(self.effective_budget)}"
        )


def check_budget(
    entries: Iterable[SelectionEntry],
    prices: Mapping[str, Any],
    item_id: str,
    price: Any,
    candidate_quantity: int,
    effective_budget: Any | None,
) -> BudgetCheck:
    """
    Check a proposed quantity for one item against the effective budget.

    new_total = subtotal - current contribution of the item + price x candidate_quantity

    Both sides are rounded to 2 decimals before comparing.

    Args:
        entries: The current selection
        prices: Unit price per item id for the current entries
        item_id: The item being added or incremented
        price: Unit price of that item
        candidate_quantity: The quantity the item would have after the change
        effective_budget: Budget minus packaging fee, or None for no budget

    Returns:
        BudgetCheck with admitted=True when the change fits
    """
    entries = list(entries)
    subtotal = compute_subtotal(entries, prices)

    current_contribution = Decimal("0")
    for entry in entries:
        if entry.item_id == item_id:
            current_contribution = to_decimal(prices.get(item_id, price)) * entry.quantity
            break

    new_total = round2(subtotal - current_contribution + to_decimal(price) * candidate_quantity)

    if effective_budget is None:
        return BudgetCheck(
            admitted=True,
            item_id=item_id,
            candidate_quantity=candidate_quantity,
            new_total=new_total,
        )

    limit = round2(effective_budget)
    return BudgetCheck(
        admitted=new_total <= limit,
        item_id=item_id,
        candidate_quantity=candidate_quantity,
        new_total=new_total,
        effective_budget=limit,
    )


def ensure_within_budget(*args, **kwargs) -> BudgetCheck:
    """
    Same as check_budget() but raises when the change is rejected.

    Raises:
        BudgetExceededError: If the change would exceed the effective budget
    """
    result = check_budget(*args, **kwargs)
    if not result.admitted:
        raise BudgetExceededError(
            item_id=result.item_id,
            new_total=str(result.new_total),
            effective_budget=str(result.effective_budget),
            message=result.message,
        )
    return result
