# =============================================================================
# core/services/catalog_service.py - Catalog Access
# =============================================================================
# Reads categories and items from Supabase and turns rows into models.
# The catalog is read-only here; the back office owns it.
# =============================================================================

import logging
from typing import Iterable

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.catalog import CatalogItem, CatalogKind, Category
from app.exceptions import CatalogUnavailableError, ItemNotFoundError

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for catalog reads."""

    @staticmethod
    def _to_item(row: dict, kind: CatalogKind) -> CatalogItem:
        return CatalogItem.model_validate({**row, "kind": kind})

    @staticmethod
    def list_categories(kind: CatalogKind = CatalogKind.CUSTOM) -> list[Category]:
        """
        List the categories of a catalog, ordered by name.

        Raises:
            CatalogUnavailableError: If the query fails
        """
        try:
            rows = SupabaseClient.fetch_categories(kind.categories_table)
        except SupabaseClientError as e:
            logger.error(f"Error loading categories: {e.message}")
            raise CatalogUnavailableError(e.message)

        return [Category.model_validate(row) for row in rows]

    @staticmethod
    def list_items(
        category_id: str,
        kind: CatalogKind = CatalogKind.CUSTOM,
    ) -> list[CatalogItem]:
        """
        List the items of a category, ordered by name.

        Raises:
            CatalogUnavailableError: If the query fails
        """
        try:
            rows = SupabaseClient.fetch_items(kind.items_table, category_id)
        except SupabaseClientError as e:
            logger.error(f"Error loading items: {e.message}")
            raise CatalogUnavailableError(e.message)

        return [CatalogService._to_item(row, kind) for row in rows]

    @staticmethod
    def get_item(item_id: str, kind: CatalogKind = CatalogKind.CUSTOM) -> CatalogItem:
        """
        Get one item.

        Raises:
            ItemNotFoundError: If the item doesn't exist
            CatalogUnavailableError: If the query fails
        """
        try:
            row = SupabaseClient.fetch_item(kind.items_table, item_id)
        except SupabaseClientError as e:
            logger.error(f"Error loading item {item_id}: {e.message}")
            raise CatalogUnavailableError(e.message)

        if not row:
            raise ItemNotFoundError(str(item_id), kind.value)

        return CatalogService._to_item(row, kind)

    @staticmethod
    def get_items(
        item_ids: Iterable[str],
        kind: CatalogKind = CatalogKind.CUSTOM,
    ) -> dict[str, CatalogItem]:
        """
        Get several items keyed by id.

        Ids that no longer exist are left out of the result; callers decide
        whether that matters.

        Raises:
            CatalogUnavailableError: If the query fails
        """
        item_ids = [str(i) for i in item_ids]
        if not item_ids:
            return {}

        try:
            rows = SupabaseClient.fetch_items_by_ids(kind.items_table, item_ids)
        except SupabaseClientError as e:
            logger.error(f"Error loading selected items: {e.message}")
            raise CatalogUnavailableError(e.message)

        items = [CatalogService._to_item(row, kind) for row in rows]
        return {item.id: item for item in items}
