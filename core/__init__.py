# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the storefront logic:
# - models/: Pydantic schemas for catalog, selections, drafts and orders
# - pricing.py: Money arithmetic, packaging fee and display formatting
# - budget.py: Budget checks for selection changes
# - selection.py: The SelectionState of a package in progress
# - services/: Catalog reads, drafts, package sessions and checkout
#
# Code in this package should NOT import from FastAPI routers.
# This keeps the logic testable and reusable.
# =============================================================================
