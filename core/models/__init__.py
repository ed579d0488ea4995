# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - catalog.py: categories and items (read-only)
# - selection.py: selection entries, actions and priced line items
# - package.py: package form details and the effective budget
# - curation.py: saved drafts
# - order.py: submitted orders, referral records and receipts
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Catalog Models
# -----------------------------------------------------------------------------
from .catalog import (
    CatalogItem,
    CatalogKind,
    Category,
)

# -----------------------------------------------------------------------------
# Selection Models
# -----------------------------------------------------------------------------
from .selection import (
    LineItem,
    SelectionAction,
    SelectionActionType,
    SelectionEntry,
)

# -----------------------------------------------------------------------------
# Package / Curation Models
# -----------------------------------------------------------------------------
from .package import PackageDetails
from .curation import Curation, ResolvedCuration

# -----------------------------------------------------------------------------
# Order Models
# -----------------------------------------------------------------------------
from .order import (
    CartOrder,
    OrderLine,
    OrderList,
    OrderReceipt,
    OrderStatus,
    OrderView,
    ReferralRecord,
)

__all__ = [
    # Catalog
    "CatalogItem",
    "CatalogKind",
    "Category",
    # Selection
    "LineItem",
    "SelectionAction",
    "SelectionActionType",
    "SelectionEntry",
    # Package / Curation
    "PackageDetails",
    "Curation",
    "ResolvedCuration",
    # Order
    "CartOrder",
    "OrderLine",
    "OrderList",
    "OrderReceipt",
    "OrderStatus",
    "OrderView",
    "ReferralRecord",
]
