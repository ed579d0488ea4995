# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .catalog_service import CatalogService
from .curation_service import CurationStore
from .order_service import OrderService
from .package_service import PackageSessionService

__all__ = [
    "CatalogService",
    "CurationStore",
    "OrderService",
    "PackageSessionService",
]
