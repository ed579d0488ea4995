# =============================================================================
# core/models/catalog.py - Catalog Schemas
# =============================================================================
# Read-only views of the storefront catalog:
# - CatalogKind: which pair of tables an item lives in
# - Category: a browsable group of items
# - CatalogItem: a single purchasable item
#
# Custom packages are built from `items` grouped by `custom_categories`.
# Curated boxes are built from `curated_items` grouped by `curated_categories`.
# =============================================================================

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogKind(str, Enum):
    """
    The two catalogs a shopper can build from.

    - custom: free-form packages with an optional budget
    - curated: ready-made boxes, never budgeted
    """
    CUSTOM = "custom"
    CURATED = "curated"

    @property
    def items_table(self) -> str:
        return "items" if self is CatalogKind.CUSTOM else "curated_items"

    @property
    def categories_table(self) -> str:
        return "custom_categories" if self is CatalogKind.CUSTOM else "curated_categories"


class Category(BaseModel):
    """A catalog category as shown on the browse grid."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    image: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # PostgREST returns bigint ids as ints
        return str(value)


class CatalogItem(BaseModel):
    """
    A purchasable item.

    Owned by the catalog; never mutated by the storefront.

    Example:
        {
            "id": "42",
            "name": "Scented candle",
            "price": "4900.00",
            "description": "Lavender, 200g",
            "image": "https://.../candle.png",
            "quantifiable": true,
            "category_id": "7",
            "kind": "custom"
        }
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: Decimal = Field(..., ge=0)
    description: str | None = None
    image: str | None = None

    # Quantifiable items are sold in variable quantities; the rest are
    # single-unit selections (present or absent)
    quantifiable: bool = False

    category_id: str | None = None
    kind: CatalogKind = CatalogKind.CUSTOM

    @field_validator("id", "category_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value):
        return None if value is None else str(value)

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value):
        return Decimal(str(value)) if isinstance(value, float) else value

    @field_validator("quantifiable", mode="before")
    @classmethod
    def _coerce_quantifiable(cls, value):
        return bool(value)
