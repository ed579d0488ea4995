# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - catalog.py: Category and item browsing
# - package.py: Package form and selection changes
# - curations.py: Saved drafts
# - orders.py: Checkout, cart, payments and purchases
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import catalog
from . import package
from . import curations
from . import orders

__all__ = [
    "health",
    "catalog",
    "package",
    "curations",
    "orders",
]
