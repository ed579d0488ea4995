# =============================================================================
# tests/test_package_service.py - Package Session Tests
# =============================================================================
# This module contains tests for:
# - starting a package and validating the form
# - selection changes persisted to the local store
# - change listeners
# - saving / resuming drafts
# - checkout clearing the selection (and the draft on request)
# =============================================================================

from __future__ import annotations

from decimal import Decimal

import pytest

from app.exceptions import (
    BudgetExceededError,
    CurationNotFoundError,
    ItemNotFoundError,
    NoActivePackageError,
    OrderPersistenceError,
    ValidationFailedError,
)
from core.models.catalog import CatalogKind
from core.models.selection import SelectionAction
from core.services.curation_service import CurationStore
from core.services.package_service import PackageSessionService
from lib.supabase_client import SupabaseClientError


def increment(item_id):
    return SelectionAction(type="increment", item_id=item_id)


@pytest.fixture
def user_id(shopper):
    return str(shopper.id)


# =============================================================================
# Start / Apply
# =============================================================================

class TestStartPackage:
    """Test the package form."""

    def test_start(self, user_id):
        state = PackageSessionService.start_package(user_id, name="Gift", budget="15000")

        assert state.package.name == "Gift"
        assert state.effective_budget == Decimal("5000.00")
        assert PackageSessionService.get_state(user_id).package == state.package

    def test_name_required(self, user_id):
        with pytest.raises(ValidationFailedError) as exc_info:
            PackageSessionService.start_package(user_id, name="  ")

        assert exc_info.value.message == "Package name is required"

    def test_budget_below_fee(self, user_id):
        with pytest.raises(ValidationFailedError) as exc_info:
            PackageSessionService.start_package(user_id, name="Gift", budget=5000)

        assert exc_info.value.message == (
            "Budget must be at least ₦10000.00 to cover the packaging fee"
        )

    def test_curated_has_no_budget(self, user_id):
        state = PackageSessionService.start_package(
            user_id, budget=20000, kind=CatalogKind.CURATED
        )

        assert state.package.name.startswith("Curated Box - ")
        assert state.package.budget is None
        assert state.kind is CatalogKind.CURATED

    def test_start_discards_previous_selection(self, user_id, mock_catalog):
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))

        state = PackageSessionService.start_package(user_id, name="Another")

        assert state.is_empty()
        assert PackageSessionService.get_state(user_id).is_empty()


class TestApply:
    """Test selection changes through the service."""

    def test_requires_package(self, user_id):
        with pytest.raises(NoActivePackageError):
            PackageSessionService.apply(user_id, increment("1"))

    def test_change_is_persisted(self, user_id, mock_catalog):
        PackageSessionService.start_package(user_id, name="Gift")

        PackageSessionService.apply(user_id, increment("1"))
        PackageSessionService.apply(user_id, increment("1"))
        PackageSessionService.apply(user_id, SelectionAction(type="toggle", item_id="2"))

        state = PackageSessionService.get_state(user_id)
        assert state.quantity_of("1") == 2
        assert state.quantity_of("2") == 1
        assert state.totals.final_total_display == "₦12250.50"

    def test_budget_rejection_leaves_stored_state(self, user_id, mock_catalog):
        PackageSessionService.start_package(user_id, name="Gift", budget=15000)
        PackageSessionService.apply(user_id, increment("3"))

        with pytest.raises(BudgetExceededError):
            PackageSessionService.apply(user_id, increment("3"))

        assert PackageSessionService.get_state(user_id).quantity_of("3") == 1

    def test_unknown_item(self, user_id, mock_catalog):
        PackageSessionService.start_package(user_id, name="Gift")

        with pytest.raises(ItemNotFoundError):
            PackageSessionService.apply(user_id, increment("999"))

    def test_reset(self, user_id, mock_catalog):
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))

        PackageSessionService.reset(user_id)

        state = PackageSessionService.get_state(user_id)
        assert state.package is None
        assert state.is_empty()


class TestListeners:
    """Test change notifications."""

    def test_listener_gets_snapshots(self, user_id, mock_catalog):
        received = []
        PackageSessionService.add_listener(lambda uid, snap: received.append((uid, snap)))

        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))

        assert [uid for uid, _ in received] == [user_id, user_id]
        assert received[-1][1]["entries"] == [{"item_id": "1", "quantity": 1}]
        assert received[-1][1]["totals"]["subtotal_display"] == "₦500.00"

    def test_failing_listener_does_not_block_changes(self, user_id, mock_catalog):
        def broken(uid, snap):
            raise RuntimeError("socket closed")

        PackageSessionService.add_listener(broken)
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))

        assert PackageSessionService.get_state(user_id).quantity_of("1") == 1

    def test_remove_listener(self, user_id):
        received = []

        def listener(uid, snap):
            received.append(uid)

        PackageSessionService.add_listener(listener)
        PackageSessionService.remove_listener(listener)
        PackageSessionService.start_package(user_id, name="Gift")

        assert received == []


# =============================================================================
# Drafts
# =============================================================================

class TestDrafts:
    """Test saving and resuming drafts."""

    def test_save_draft(self, user_id, mock_catalog):
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))

        curation = PackageSessionService.save_draft(user_id)

        assert curation.package.name == "Gift"
        assert PackageSessionService.get_state(user_id).edit_curation_id == curation.id

    def test_saving_twice_updates_one_draft(self, user_id, mock_catalog):
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))
        first = PackageSessionService.save_draft(user_id)

        PackageSessionService.apply(user_id, increment("1"))
        second = PackageSessionService.save_draft(user_id)

        drafts = CurationStore.for_user(user_id).list_all()
        assert second.id == first.id
        assert len(drafts) == 1
        assert drafts[0].entries[0].quantity == 2

    def test_save_after_draft_deleted(self, user_id, mock_catalog):
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))
        first = PackageSessionService.save_draft(user_id)
        CurationStore.for_user(user_id).delete(first.id)

        second = PackageSessionService.save_draft(user_id)

        assert second.id != first.id
        assert PackageSessionService.get_state(user_id).edit_curation_id == second.id
        assert [c.id for c in CurationStore.for_user(user_id).list_all()] == [second.id]

    def test_save_empty_selection(self, user_id):
        PackageSessionService.start_package(user_id, name="Gift")

        with pytest.raises(ValidationFailedError):
            PackageSessionService.save_draft(user_id)

    def test_resume(self, user_id, mock_catalog):
        PackageSessionService.start_package(user_id, name="Gift", budget=20000)
        PackageSessionService.apply(user_id, increment("1"))
        PackageSessionService.apply(user_id, SelectionAction(type="toggle", item_id="2"))
        curation = PackageSessionService.save_draft(user_id)
        PackageSessionService.reset(user_id)

        state = PackageSessionService.resume_curation(user_id, curation.id)

        assert state.edit_curation_id == curation.id
        assert state.package.budget == Decimal("20000")
        assert [e.item_id for e in state.entries] == ["1", "2"]

    def test_resume_drops_items_gone_from_catalog(self, user_id, mock_catalog, catalog_rows):
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))
        PackageSessionService.apply(user_id, SelectionAction(type="toggle", item_id="2"))
        curation = PackageSessionService.save_draft(user_id)
        catalog_rows["items"] = [row for row in catalog_rows["items"] if row["id"] != 2]

        state = PackageSessionService.resume_curation(user_id, curation.id)

        assert [e.item_id for e in state.entries] == ["1"]

    def test_resume_unknown(self, user_id):
        with pytest.raises(CurationNotFoundError):
            PackageSessionService.resume_curation(user_id, "missing")


# =============================================================================
# Checkout
# =============================================================================

class TestCheckout:
    """Test checkout through the package session."""

    def test_checkout_clears_selection(self, shopper, user_id, mock_catalog, mock_orders):
        PackageSessionService.start_package(user_id, name="Gift", budget=15000)
        PackageSessionService.apply(user_id, increment("1"))

        receipt = PackageSessionService.checkout(shopper)

        assert receipt.total_price == Decimal("10500.00")
        assert receipt.offer_draft_deletion is False
        assert PackageSessionService.get_state(user_id).package is None

    def test_checkout_without_package(self, shopper, mock_orders):
        with pytest.raises(NoActivePackageError):
            PackageSessionService.checkout(shopper)

        mock_orders.insert_cart.assert_not_called()

    def test_failed_checkout_keeps_selection(self, shopper, user_id, mock_catalog, mock_orders):
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))
        mock_orders.insert_cart.side_effect = SupabaseClientError("down")

        with pytest.raises(OrderPersistenceError):
            PackageSessionService.checkout(shopper)

        assert PackageSessionService.get_state(user_id).quantity_of("1") == 1

    def test_draft_kept_unless_asked(self, shopper, user_id, mock_catalog, mock_orders):
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))
        curation = PackageSessionService.save_draft(user_id)

        receipt = PackageSessionService.checkout(shopper)

        assert receipt.source_curation_id == curation.id
        assert receipt.offer_draft_deletion is True
        assert CurationStore.for_user(user_id).get(curation.id)

    def test_draft_deleted_on_request(self, shopper, user_id, mock_catalog, mock_orders):
        PackageSessionService.start_package(user_id, name="Gift")
        PackageSessionService.apply(user_id, increment("1"))
        PackageSessionService.save_draft(user_id)

        receipt = PackageSessionService.checkout(shopper, delete_source_draft=True)

        assert receipt.draft_deleted is True
        assert receipt.offer_draft_deletion is False
        assert CurationStore.for_user(user_id).list_all() == []
