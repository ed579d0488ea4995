# =============================================================================
# app/routers/orders.py - Order Endpoints
# =============================================================================
# Checkout, the shopper's cart, payment recording and purchase history.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from app.dependencies import CurrentUser
from core.models.order import OrderList, OrderReceipt
from core.services.order_service import OrderService
from core.services.package_service import PackageSessionService

router = APIRouter()


class PaymentRequest(BaseModel):
    """Reference returned by the payment widget."""
    reference: str = Field(..., min_length=1, description="Payment provider reference")


@router.post("/checkout", response_model=OrderReceipt)
async def checkout(
    user: CurrentUser,
    delete_draft: Annotated[
        bool, Query(description="Delete the draft this package was resumed from")
    ] = False,
):
    """
    Submit the package in progress.

    Returns the WhatsApp link to open for confirmation. Warnings (e.g. an
    unknown referral code) don't stop the order. When the package came from
    a saved draft and delete_draft is false, `offer_draft_deletion` is set
    so the client can ask before calling DELETE /curations/{id}.
    """
    return PackageSessionService.checkout(user, delete_source_draft=delete_draft)


@router.get("/cart", response_model=OrderList)
async def get_cart(user: CurrentUser):
    """List submitted orders awaiting payment."""
    return OrderService.list_cart(str(user.id))


@router.post("/payments")
async def record_payment(request: PaymentRequest, user: CurrentUser):
    """Move the cart to purchases after the payment widget reports success."""
    count = OrderService.record_payment(str(user.id), request.reference)
    return {
        "reference": request.reference,
        "orders": count,
        "message": "Payment successful! Package moved to purchases.",
    }


@router.get("/purchases", response_model=OrderList)
async def get_purchases(user: CurrentUser):
    """List paid orders."""
    return OrderService.list_purchases(str(user.id))
