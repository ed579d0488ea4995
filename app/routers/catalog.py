# =============================================================================
# app/routers/catalog.py - Catalog Endpoints
# =============================================================================
# Browse categories and items of either catalog. Browsing doesn't require
# authentication.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from core.models.catalog import CatalogItem, CatalogKind, Category
from core.services.catalog_service import CatalogService

router = APIRouter()

KindPath = Annotated[CatalogKind, Path(description="Catalog: custom or curated")]


@router.get("/{kind}/categories", response_model=list[Category])
async def list_categories(kind: KindPath):
    """List the categories of a catalog, ordered by name."""
    return CatalogService.list_categories(kind)


@router.get("/{kind}/categories/{category_id}/items", response_model=list[CatalogItem])
async def list_items(
    kind: KindPath,
    category_id: Annotated[str, Path(description="Category id")],
):
    """List the items of a category, ordered by name."""
    return CatalogService.list_items(category_id, kind)


@router.get("/{kind}/items/{item_id}", response_model=CatalogItem)
async def get_item(
    kind: KindPath,
    item_id: Annotated[str, Path(description="Item id")],
):
    """Get one item."""
    return CatalogService.get_item(item_id, kind)
