# =============================================================================
# core/models/order.py - Order Schemas
# =============================================================================
# - OrderStatus: lifecycle of a submitted cart row
# - CartOrder: the row written to the `cart` table on checkout
# - ReferralRecord: commission bookkeeping written to `referrals`
# - OrderReceipt: what checkout returns to the shopper
# =============================================================================

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from core.pricing import PACKAGING_FEE

from .selection import LineItem, SelectionEntry


class OrderStatus(str, Enum):
    """
    Status of a submitted order.

    Orders are always created as pending; delivered/cancelled are set by
    the back office.
    """
    PENDING = "pending"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderLine(BaseModel):
    """An item reference as stored on a cart row."""

    id: str
    quantity: int = Field(default=1, ge=1)

    @classmethod
    def from_entry(cls, entry: SelectionEntry) -> "OrderLine":
        return cls(id=entry.item_id, quantity=entry.quantity)


class CartOrder(BaseModel):
    """
    A submitted order.

    `items` holds custom package lines, `curated_items` holds curated box
    lines. `total_price` already includes the packaging fee.
    """

    user_id: str
    username: str | None = None
    package_name: str
    budget: Decimal | None = None
    items: list[OrderLine] = Field(default_factory=list)
    curated_items: list[OrderLine] = Field(default_factory=list)
    total_price: Decimal = Field(..., ge=0)
    status: OrderStatus = OrderStatus.PENDING
    referral_code: str | None = None

    def to_row(self) -> dict:
        """Row payload for the `cart` table (JSON-safe)."""
        return self.model_dump(mode="json")


class ReferralRecord(BaseModel):
    """Commission owed to an affiliate for one order."""

    affiliate_id: str
    customer_id: str
    customer_email: str | None = None
    order_id: str
    referral_code: str
    commission: Decimal = Field(..., ge=0)
    status: OrderStatus = OrderStatus.PENDING

    def to_row(self) -> dict:
        return self.model_dump(mode="json")


class OrderReceipt(BaseModel):
    """
    Result of a successful checkout.

    `warnings` lists secondary problems that did not stop the order, such as
    an unknown referral code or a referral record that failed to save.
    """

    order_id: str
    subtotal: Decimal
    packaging_fee: Decimal = PACKAGING_FEE
    total_price: Decimal
    total_display: str
    message: str
    whatsapp_url: str
    referral_code: str | None = None
    warnings: list[str] = Field(default_factory=list)

    # Set when the order came from a saved draft; the shopper is then asked
    # whether to delete that draft
    source_curation_id: str | None = None
    offer_draft_deletion: bool = False
    draft_deleted: bool = False


class OrderView(BaseModel):
    """A cart or purchase row with its items priced from the catalog."""

    id: str | None = None
    package_name: str | None = None
    budget: Decimal | None = None
    status: OrderStatus | None = None
    total_price: Decimal = Decimal("0")
    payment_ref: str | None = None
    created_at: str | None = None
    line_items: list[LineItem] = Field(default_factory=list)


class OrderList(BaseModel):
    """A shopper's cart or purchase history with the grand total."""

    orders: list[OrderView] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    total_display: str
