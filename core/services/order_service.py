# =============================================================================
# core/services/order_service.py - Order Submission
# =============================================================================
# Turns a finished selection into a `cart` row, an optional referral record
# and a pre-filled WhatsApp message for manual confirmation.
#
# Write order:
# 1. validate (items present, items still in catalog, budget re-checked)
# 2. resolve the referral code (unknown codes become a warning)
# 3. insert the cart row - failure aborts everything
# 4. insert the referral record - failure becomes a warning, order stands
# 5. build the summary text and deep link
#
# Steps 3 and 4 are independent writes; there is no transaction spanning
# them.
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.whatsapp import build_whatsapp_url
from core.models.catalog import CatalogItem, CatalogKind
from core.models.order import (
    CartOrder,
    OrderLine,
    OrderList,
    OrderReceipt,
    OrderStatus,
    OrderView,
    ReferralRecord,
)
from core.models.package import PackageDetails
from core.models.selection import LineItem, SelectionEntry
from core.pricing import (
    PACKAGING_FEE,
    commission_for,
    compute_subtotal,
    final_total,
    format_currency,
    line_total,
    round2,
    to_decimal,
)
from core.services.catalog_service import CatalogService
from app.auth.models import AuthUser
from app.exceptions import (
    BudgetExceededError,
    ItemNotFoundError,
    OrderPersistenceError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)


def default_curated_box_name(now: datetime | None = None) -> str:
    """Package name used for curated box orders."""
    now = now or datetime.now(timezone.utc)
    return f"Curated Box - {now.strftime('%d/%m/%Y')}"


def build_order_summary(
    customer: str,
    package_name: str,
    line_items: list[LineItem],
    subtotal: Decimal,
    budget: Decimal | None = None,
    referral_code: str | None = None,
) -> str:
    """
    Human-readable order summary sent over WhatsApp.

    Quantities are shown only for quantifiable items.
    """
    item_lines = []
    for line in line_items:
        quantity = f" (x{line.quantity})" if line.quantifiable else ""
        item_lines.append(f"- {line.name}{quantity}: {format_currency(line.line_total)}")

    lines = [
        f"New Order from {customer}",
        f"Package Name: {package_name}",
        "Items:",
        *item_lines,
        f"Subtotal: {format_currency(subtotal)}",
        f"Packaging Fee: {format_currency(PACKAGING_FEE)}",
        f"Total: {format_currency(final_total(subtotal))}",
        f"Budget: {format_currency(budget) if budget is not None else 'Not specified'}",
    ]
    if referral_code:
        lines.append(f"Referral Code: {referral_code}")
    lines.append("Please confirm payment details.")
    return "\n".join(lines)


def _line_items(entries: list[SelectionEntry], catalog: dict[str, CatalogItem]) -> list[LineItem]:
    lines = []
    for entry in entries:
        item = catalog.get(entry.item_id)
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


def _order_lines(raw: list | None) -> list[OrderLine]:
    """Read item references from a cart row; old rows stored bare ids."""
    lines = []
    for value in raw or []:
        if isinstance(value, dict):
            lines.append(OrderLine(id=str(value["id"]), quantity=value.get("quantity") or 1))
        else:
            lines.append(OrderLine(id=str(value)))
    return lines


class OrderService:
    """Service for checkout, cart listing and purchase recording."""

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------

    @staticmethod
    def resolve_referral(referral_code: str | None) -> tuple[dict | None, str | None]:
        """
        Look up the affiliate for a referral code.

        Returns:
            (affiliate row or None, warning message or None)
        """
        if not referral_code:
            return None, None

        try:
            affiliate = SupabaseClient.fetch_affiliate_by_code(referral_code)
        except SupabaseClientError as e:
            logger.warning(f"Referral lookup failed for '{referral_code}': {e.message}")
            return None, (
                f"Referral code {referral_code} could not be checked ({e.message}); "
                f"order placed without referral"
            )

        if not affiliate:
            logger.warning(f"Unknown referral code '{referral_code}'")
            return None, f"Referral code {referral_code} was not found; order placed without referral"

        return affiliate, None

    @staticmethod
    def submit(
        user: AuthUser,
        package: PackageDetails | None,
        entries: Iterable[SelectionEntry],
        kind: CatalogKind = CatalogKind.CUSTOM,
        source_curation_id: str | None = None,
    ) -> OrderReceipt:
        """
        Submit a selection as an order.

        Args:
            user: The authenticated shopper
            package: Package details (curated boxes may pass None)
            entries: The selection
            kind: Catalog the items come from
            source_curation_id: Draft the order came from, if any

        Returns:
            OrderReceipt with the deep link and any warnings

        Raises:
            ValidationFailedError: If nothing is selected or a custom package has no details
            ItemNotFoundError: If a selected item is no longer in the catalog
            BudgetExceededError: If the subtotal exceeds the effective budget
            CatalogUnavailableError: If the catalog can't be read
            OrderPersistenceError: If the cart row can't be written
        """
        entries = list(entries)
        if not entries:
            raise ValidationFailedError("No items selected!", field="entries")
        if package is None and kind is CatalogKind.CUSTOM:
            raise ValidationFailedError("Package details are required", field="package")

        if package is None:
            package = PackageDetails(name=default_curated_box_name())

        # Prices are read now, not trusted from when the items were picked
        catalog = CatalogService.get_items((e.item_id for e in entries), kind=kind)
        for entry in entries:
            if entry.item_id not in catalog:
                raise ItemNotFoundError(entry.item_id, kind.value)

        prices = {item_id: item.price for item_id, item in catalog.items()}
        subtotal = compute_subtotal(entries, prices)
        effective_budget = package.effective_budget
        if effective_budget is not None and subtotal > round2(effective_budget):
            raise BudgetExceededError(
                item_id="",
                new_total=str(subtotal),
                effective_budget=str(effective_budget),
                message=(
                    f"Total price ({format_currency(subtotal)}) exceeds your budget "
                    f"({format_currency(effective_budget)})!"
                ),
            )

        warnings: list[str] = []
        affiliate, warning = OrderService.resolve_referral(package.referral_code)
        if warning:
            warnings.append(warning)
        referral_code = package.referral_code if affiliate else None

        total = final_total(subtotal)
        order_lines = [OrderLine.from_entry(e) for e in entries]
        order = CartOrder(
            user_id=str(user.id),
            username=user.display_name,
            package_name=package.name,
            budget=package.budget,
            items=order_lines if kind is CatalogKind.CUSTOM else [],
            curated_items=order_lines if kind is CatalogKind.CURATED else [],
            total_price=total,
            status=OrderStatus.PENDING,
            referral_code=referral_code,
        )

        try:
            row = SupabaseClient.insert_cart(order.to_row())
        except SupabaseClientError as e:
            logger.error(f"Error adding to cart for user {user.id}: {e.message}")
            raise OrderPersistenceError(e.message)

        order_id = str(row.get("id"))
        logger.info(f"Created order {order_id} for user {user.id}: total {total}")

        if affiliate:
            record = ReferralRecord(
                affiliate_id=str(affiliate["id"]),
                customer_id=str(user.id),
                customer_email=user.email,
                order_id=order_id,
                referral_code=referral_code,
                commission=commission_for(total),
            )
            try:
                SupabaseClient.insert_referral(record.to_row())
                logger.info(f"Recorded referral {referral_code} for order {order_id}")
            except SupabaseClientError as e:
                logger.warning(f"Order {order_id} placed but referral was not recorded: {e.message}")
                warnings.append(f"Order placed, but the referral could not be recorded: {e.message}")

        message = build_order_summary(
            customer=user.display_name,
            package_name=package.name,
            line_items=_line_items(entries, catalog),
            subtotal=subtotal,
            budget=package.budget,
            referral_code=referral_code,
        )

        return OrderReceipt(
            order_id=order_id,
            subtotal=subtotal,
            total_price=total,
            total_display=format_currency(total),
            message=message,
            whatsapp_url=build_whatsapp_url(message),
            referral_code=referral_code,
            warnings=warnings,
            source_curation_id=source_curation_id,
            offer_draft_deletion=source_curation_id is not None,
        )

    # -------------------------------------------------------------------------
    # Cart / Purchases
    # -------------------------------------------------------------------------

    @staticmethod
    def _views(rows: list[dict]) -> OrderList:
        custom_ids, curated_ids = set(), set()
        for row in rows:
            custom_ids.update(line.id for line in _order_lines(row.get("items")))
            curated_ids.update(line.id for line in _order_lines(row.get("curated_items")))

        custom = CatalogService.get_items(custom_ids, kind=CatalogKind.CUSTOM)
        curated = CatalogService.get_items(curated_ids, kind=CatalogKind.CURATED)

        views = []
        total = Decimal("0.00")
        for row in rows:
            entries_custom = [SelectionEntry(item_id=line.id, quantity=line.quantity)
                              for line in _order_lines(row.get("items"))]
            entries_curated = [SelectionEntry(item_id=line.id, quantity=line.quantity)
                               for line in _order_lines(row.get("curated_items"))]
            row_total = round2(row.get("total_price") or 0)
            total = round2(total + row_total)
            views.append(OrderView(
                id=str(row["id"]) if row.get("id") is not None else None,
                package_name=row.get("package_name"),
                budget=to_decimal(row["budget"]) if row.get("budget") is not None else None,
                status=row.get("status"),
                total_price=row_total,
                payment_ref=row.get("payment_ref"),
                created_at=row.get("created_at"),
                line_items=_line_items(entries_custom, custom) + _line_items(entries_curated, curated),
            ))

        return OrderList(orders=views, total=total, total_display=format_currency(total))

    @staticmethod
    def list_cart(user_id: str) -> OrderList:
        """
        List a shopper's submitted orders awaiting payment, newest first.

        Raises:
            OrderPersistenceError: If the cart can't be read
        """
        try:
            rows = SupabaseClient.fetch_cart(user_id)
        except SupabaseClientError as e:
            logger.error(f"Error loading cart: {e.message}")
            raise OrderPersistenceError(
                e.message,
                context="Error loading cart",
                suggestion="Try again later",
            )
        return OrderService._views(rows)

    @staticmethod
    def list_purchases(user_id: str) -> OrderList:
        """List a shopper's paid orders, newest first."""
        try:
            rows = SupabaseClient.fetch_purchases(user_id)
        except SupabaseClientError as e:
            logger.error(f"Error loading purchases: {e.message}")
            raise OrderPersistenceError(
                e.message,
                context="Error loading purchases",
                suggestion="Try again later",
            )
        return OrderService._views(rows)

    @staticmethod
    def record_payment(user_id: str, reference: str) -> int:
        """
        Move the shopper's cart rows to purchases under a payment reference.

        The payment itself is taken by the provider's widget and is not
        verified here.

        Returns:
            Number of orders moved

        Raises:
            ValidationFailedError: If the reference is blank or the cart is empty
            OrderPersistenceError: If the cart can't be read or purchases can't be written
        """
        reference = (reference or "").strip()
        if not reference:
            raise ValidationFailedError("Payment reference is required", field="reference")

        try:
            rows = SupabaseClient.fetch_cart(user_id)
        except SupabaseClientError as e:
            logger.error(f"Error fetching cart: {e.message}")
            raise OrderPersistenceError(
                e.message,
                context="Error loading cart",
                suggestion="Your payment reference was not recorded. Contact support",
            )

        if not rows:
            raise ValidationFailedError("Your cart is empty")

        purchases = []
        for row in rows:
            purchase = {k: v for k, v in row.items() if k != "id"}
            purchase["payment_ref"] = reference
            purchases.append(purchase)

        try:
            SupabaseClient.insert_purchases(purchases)
        except SupabaseClientError as e:
            logger.error(f"Error moving to purchases: {e.message}")
            raise OrderPersistenceError(
                e.message,
                context="Error moving to purchases",
                suggestion="Your payment reference was not recorded. Contact support",
            )

        try:
            SupabaseClient.delete_cart(user_id)
        except SupabaseClientError as e:
            logger.error(f"Error clearing cart for user {user_id}: {e.message}")

        logger.info(f"Recorded payment {reference} for {len(purchases)} orders of user {user_id}")
        return len(purchases)
