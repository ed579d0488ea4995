# =============================================================================
# tests/test_pricing.py - Pricing Tests
# =============================================================================
# This module contains tests for:
# - 2dp rounding and currency formatting
# - Subtotal accumulation with per-step rounding
# - Final totals with the packaging fee
# - Compact badge width
# =============================================================================

from __future__ import annotations

from decimal import Decimal

import pytest

from core.models.selection import SelectionEntry
from core.pricing import (
    PACKAGING_FEE,
    Totals,
    commission_for,
    compute_subtotal,
    final_total,
    format_currency,
    line_total,
    round2,
    shortcut_width,
)


# =============================================================================
# Rounding / Formatting
# =============================================================================

class TestRound2:
    """Test 2dp rounding."""

    def test_half_rounds_up(self):
        assert round2(Decimal("0.005")) == Decimal("0.01")
        assert round2(Decimal("2.675")) == Decimal("2.68")

    def test_float_goes_through_str(self):
        """A float from PostgREST keeps its printed value."""
        assert round2(1250.5) == Decimal("1250.50")
        assert round2(0.1 + 0.2) == Decimal("0.30")

    def test_none_is_zero(self):
        assert round2(None) == Decimal("0.00")


class TestFormatCurrency:
    """Test currency display strings."""

    def test_two_fraction_digits(self):
        assert format_currency(Decimal("2250.5")) == "₦2250.50"
        assert format_currency(10000) == "₦10000.00"

    def test_custom_symbol(self):
        assert format_currency(Decimal("5"), symbol="$") == "$5.00"

    def test_empty_symbol(self):
        assert format_currency(Decimal("5"), symbol="") == "5.00"


# =============================================================================
# Subtotal / Totals
# =============================================================================

class TestComputeSubtotal:
    """Test subtotal accumulation."""

    def test_mixed_selection(self):
        """Candle x2 at 500 plus a card at 1250.50."""
        entries = [
            SelectionEntry(item_id="1", quantity=2),
            SelectionEntry(item_id="2", quantity=1),
        ]
        prices = {"1": Decimal("500"), "2": Decimal("1250.50")}

        subtotal = compute_subtotal(entries, prices)

        assert subtotal == Decimal("2250.50")
        assert final_total(subtotal) == Decimal("12250.50")

    def test_empty_selection(self):
        assert compute_subtotal([], {}) == Decimal("0.00")

    def test_unknown_price_contributes_nothing(self):
        entries = [SelectionEntry(item_id="1"), SelectionEntry(item_id="gone")]

        assert compute_subtotal(entries, {"1": Decimal("300")}) == Decimal("300.00")

    def test_rounds_after_each_item(self):
        """Each addition is rounded before the next one."""
        entries = [SelectionEntry(item_id="a"), SelectionEntry(item_id="b")]
        prices = {"a": Decimal("0.005"), "b": Decimal("0.005")}

        # 0.005 -> 0.01, then 0.01 + 0.005 = 0.015 -> 0.02
        assert compute_subtotal(entries, prices) == Decimal("0.02")

    def test_accepts_float_prices(self):
        entries = [SelectionEntry(item_id="1", quantity=3)]

        assert compute_subtotal(entries, {"1": 0.1}) == Decimal("0.30")


class TestTotals:
    """Test the Totals model."""

    def test_from_subtotal(self):
        totals = Totals.from_subtotal(Decimal("2250.5"))

        assert totals.subtotal == Decimal("2250.50")
        assert totals.packaging_fee == PACKAGING_FEE
        assert totals.final_total == Decimal("12250.50")
        assert totals.subtotal_display == "₦2250.50"
        assert totals.final_total_display == "₦12250.50"
        assert totals.shortcut_display == "₦2250.50"

    def test_empty_selection_still_pays_fee(self):
        totals = Totals.from_subtotal(0)

        assert totals.final_total == Decimal("10000.00")
        assert totals.final_total_display == "₦10000.00"


class TestHelpers:
    """Test line totals and commission."""

    def test_line_total(self):
        assert line_total(Decimal("1250.50"), 3) == Decimal("3751.50")

    def test_commission_is_ten_percent(self):
        assert commission_for(Decimal("12250.50")) == Decimal("1225.05")

    @pytest.mark.parametrize("text,expected", [
        ("₦0.00", 100),
        ("₦2250.50", 124),
        ("₦12250.50", 132),
        ("₦1234567890.00", 160),
    ])
    def test_shortcut_width(self, text, expected):
        assert shortcut_width(text) == expected

    def test_shortcut_width_never_shrinks_with_length(self):
        widths = [shortcut_width("₦" + "9" * n + ".00") for n in range(1, 15)]

        assert widths == sorted(widths)
        assert max(widths) == 160
