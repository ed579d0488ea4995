# =============================================================================
# core/models/package.py - Package Details Schema
# =============================================================================
# PackageDetails is what the shopper fills in before picking items:
# a name, an optional budget and an optional referral code.
# It is created once per package session and not changed while items are
# being selected.
# =============================================================================

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from core.pricing import PACKAGING_FEE, format_currency, round2


class PackageDetails(BaseModel):
    """
    Package form input.

    The budget covers the whole order, so the packaging fee is taken off the
    top: items are checked against `effective_budget`, not `budget`.

    Example:
        {
            "name": "Mum's birthday",
            "budget": "15000",
            "referral_code": "ADA10"
        }
        -> effective_budget == Decimal("5000")
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Package name shown on the order")

    budget: Decimal | None = Field(
        default=None,
        description="Total the shopper is willing to spend, packaging included"
    )

    referral_code: str | None = Field(
        default=None,
        description="Affiliate referral code"
    )

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        if value is None:
            raise ValueError("Package name is required")
        value = str(value).strip()
        if not value:
            raise ValueError("Package name is required")
        return value

    @field_validator("budget", mode="before")
    @classmethod
    def _coerce_budget(cls, value):
        if value is None or value == "":
            return None
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @field_validator("budget")
    @classmethod
    def _budget_covers_fee(cls, value):
        if value is not None and value < PACKAGING_FEE:
            raise ValueError(
                f"Budget must be at least {format_currency(PACKAGING_FEE)} "
                f"to cover the packaging fee"
            )
        return value

    @field_validator("referral_code", mode="before")
    @classmethod
    def _blank_referral_is_none(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @computed_field
    @property
    def effective_budget(self) -> Decimal | None:
        """Budget available for items once the packaging fee is set aside."""
        if self.budget is None:
            return None
        return round2(self.budget - PACKAGING_FEE)
