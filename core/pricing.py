# =============================================================================
# core/pricing.py - Pricing and Totals
# =============================================================================
# Money arithmetic for packages:
# - PACKAGING_FEE: flat fee added once per order
# - compute_subtotal(): sum of price x quantity with 2dp rounding per step
# - Totals: subtotal, fee and final total with their display strings
#
# All amounts are Decimal. Floats coming back from PostgREST are converted
# through str() so 1250.5 stays 1250.50 and not 1250.4999...
# =============================================================================

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from pydantic import BaseModel, Field

from app.config import settings

if TYPE_CHECKING:
    from core.models.selection import SelectionEntry


PACKAGING_FEE = Decimal("10000")
REFERRAL_COMMISSION_RATE = Decimal("0.10")

_CENT = Decimal("0.01")

# Compact total badge sizing, in pixels
SHORTCUT_BASE_WIDTH = 100
SHORTCUT_WIDTH_INCREMENT = 8
SHORTCUT_MAX_WIDTH = 160


def to_decimal(value: Any) -> Decimal:
    """Convert a number from the database or a request into a Decimal."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def round2(value: Any) -> Decimal:
    """Round to 2 decimal places, halves away from zero."""
    return to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def line_total(price: Any, quantity: int) -> Decimal:
    return round2(to_decimal(price) * quantity)


def compute_subtotal(
    entries: Iterable[SelectionEntry],
    prices: Mapping[str, Any],
) -> Decimal:
    """
    Sum price x quantity over the entries.

    The running sum is rounded to 2 decimals after every addition.
    Entries whose price is unknown contribute nothing.
    """
    subtotal = Decimal("0.00")
    for entry in entries:
        price = prices.get(entry.item_id)
        if price is None:
            continue
        subtotal = round2(subtotal + to_decimal(price) * entry.quantity)
    return subtotal


def final_total(subtotal: Any) -> Decimal:
    """Subtotal plus the packaging fee."""
    return round2(to_decimal(subtotal) + PACKAGING_FEE)


def commission_for(total: Any) -> Decimal:
    """Referral commission owed on an order total."""
    return round2(to_decimal(total) * REFERRAL_COMMISSION_RATE)


def format_currency(value: Any, symbol: str | None = None) -> str:
    """
    Render an amount with the currency symbol and exactly 2 fraction digits.

    Example: format_currency(Decimal("2250.5")) -> "₦2250.50"
    """
    prefix = settings.CURRENCY_SYMBOL if symbol is None else symbol
    return f"{prefix}{round2(value):.2f}"


def shortcut_width(text: str) -> int:
    """Width in pixels of the compact total badge for a rendered amount."""
    width = SHORTCUT_BASE_WIDTH + (len(text) - 5) * SHORTCUT_WIDTH_INCREMENT
    return min(width, SHORTCUT_MAX_WIDTH)


class Totals(BaseModel):
    """
    Displayable totals for a selection.

    Example:
        {
            "subtotal": "2250.50",
            "packaging_fee": "10000",
            "final_total": "12250.50",
            "subtotal_display": "₦2250.50",
            "final_total_display": "₦12250.50",
            "shortcut_display": "₦2250.50",
            "shortcut_width": 124
        }
    """

    subtotal: Decimal = Field(..., ge=0)
    packaging_fee: Decimal = Field(default=PACKAGING_FEE)
    final_total: Decimal = Field(..., ge=0)

    subtotal_display: str
    final_total_display: str

    # The compact badge shows the running item subtotal
    shortcut_display: str
    shortcut_width: int

    @classmethod
    def from_subtotal(cls, subtotal: Any) -> Totals:
        subtotal = round2(subtotal)
        total = final_total(subtotal)
        subtotal_text = format_currency(subtotal)
        return cls(
            subtotal=subtotal,
            final_total=total,
            subtotal_display=subtotal_text,
            final_total_display=format_currency(total),
            shortcut_display=subtotal_text,
            shortcut_width=shortcut_width(subtotal_text),
        )
