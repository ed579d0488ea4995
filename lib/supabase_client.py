# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for the storefront's Supabase tables.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for:
# - Catalog reads (categories and items, custom and curated)
# - User profiles (role and username)
# - Affiliates and referrals
# - Cart rows and purchases
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   items = SupabaseClient.fetch_items("items", category_id="7")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Iterable
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

ITEM_COLUMNS = "id, name, price, description, image, category_id, quantifiable"
CATEGORY_COLUMNS = "id, name, image"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries the upstream message so it can be shown to the shopper as-is.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        categories = SupabaseClient.fetch_categories("custom_categories")
        item = SupabaseClient.fetch_item("items", "42")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Every query that touches shopper data filters by user_id itself.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_id(cls, value: str | int | UUID) -> str:
        """Convert ids to strings for queries."""
        return str(value)

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_categories(cls, table: str) -> list[dict[str, Any]]:
        """
        Fetch all categories of one catalog, ordered by name.

        Args:
            table: "custom_categories" or "curated_categories"

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select(CATEGORY_COLUMNS)
                .order("name")
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=str(e),
                code="FETCH_CATEGORIES_FAILED",
                details={"table": table}
            )

    @classmethod
    def fetch_items(cls, table: str, category_id: str | int) -> list[dict[str, Any]]:
        """
        Fetch the items of a category, ordered by name.

        Args:
            table: "items" or "curated_items"
            category_id: The category id

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        category_id_str = cls._normalize_id(category_id)

        try:
            response = (
                client.table(table)
                .select(ITEM_COLUMNS)
                .eq("category_id", category_id_str)
                .order("name")
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=str(e),
                code="FETCH_ITEMS_FAILED",
                details={"table": table, "category_id": category_id_str}
            )

    @classmethod
    def fetch_item(cls, table: str, item_id: str | int) -> dict[str, Any] | None:
        """
        Fetch a single item by id.

        Returns:
            Item dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        item_id_str = cls._normalize_id(item_id)

        try:
            response = (
                client.table(table)
                .select(ITEM_COLUMNS)
                .eq("id", item_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if "PGRST116" in str(e):  # PostgREST code for no rows
                return None
            raise SupabaseClientError(
                message=str(e),
                code="FETCH_ITEM_FAILED",
                details={"table": table, "item_id": item_id_str}
            )

    @classmethod
    def fetch_items_by_ids(
        cls,
        table: str,
        item_ids: Iterable[str | int],
    ) -> list[dict[str, Any]]:
        """
        Fetch several items in one query.

        Ids that no longer exist are simply absent from the result.

        Raises:
            SupabaseClientError: If query fails
        """
        ids = [cls._normalize_id(i) for i in item_ids]
        if not ids:
            return []

        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select(ITEM_COLUMNS)
                .in_("id", ids)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=str(e),
                code="FETCH_ITEMS_FAILED",
                details={"table": table, "item_ids": ids}
            )

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch role, username, email and phone number from the public users table.

        Returns:
            Profile dict, or None if the user has no row yet
        """
        client = cls.get_client()
        user_id_str = cls._normalize_id(user_id)

        try:
            response = (
                client.table("users")
                .select("id, email, role, username, phone_number")
                .eq("id", user_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if "PGRST116" in str(e):
                return None
            raise SupabaseClientError(
                message=str(e),
                code="FETCH_USER_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def update_user_profile(cls, user_id: str | UUID, fields: dict[str, Any]) -> dict[str, Any] | None:
        """
        Update columns of the user's row in the public users table.

        Returns:
            Updated row, or None if the user has no row

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_id(user_id)

        try:
            response = (
                client.table("users")
                .update(fields)
                .eq("id", user_id_str)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=str(e),
                code="UPDATE_USER_FAILED",
                details={"user_id": user_id_str}
            )

        return response.data[0] if response.data else None

    # -------------------------------------------------------------------------
    # Affiliates / Referrals
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_affiliate_by_code(cls, referral_code: str) -> dict[str, Any] | None:
        """
        Look up an affiliate by referral code.

        Returns:
            Affiliate dict, or None if no affiliate uses this code
        """
        client = cls.get_client()

        try:
            response = (
                client.table("affiliates")
                .select("id, user_id, referral_code")
                .eq("referral_code", referral_code)
                .limit(1)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=str(e),
                code="FETCH_AFFILIATE_FAILED",
                details={"referral_code": referral_code}
            )

    @classmethod
    def insert_referral(cls, row: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a referral record.

        Raises:
            SupabaseClientError: If insert fails
        """
        return cls._insert_one("referrals", row, code="INSERT_REFERRAL_FAILED")

    # -------------------------------------------------------------------------
    # Cart / Purchases
    # -------------------------------------------------------------------------

    @classmethod
    def insert_cart(cls, row: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a cart row (a submitted order).

        Returns:
            Inserted row with generated id and created_at

        Raises:
            SupabaseClientError: If insert fails
        """
        return cls._insert_one("cart", row, code="INSERT_CART_FAILED")

    @classmethod
    def fetch_cart(cls, user_id: str | UUID) -> list[dict[str, Any]]:
        """Fetch a user's cart rows, newest first."""
        return cls._fetch_user_rows("cart", user_id, code="FETCH_CART_FAILED")

    @classmethod
    def fetch_purchases(cls, user_id: str | UUID) -> list[dict[str, Any]]:
        """Fetch a user's purchases, newest first."""
        return cls._fetch_user_rows("purchases", user_id, code="FETCH_PURCHASES_FAILED")

    @classmethod
    def insert_purchases(cls, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Insert purchase rows in one request.

        Raises:
            SupabaseClientError: If insert fails
        """
        if not rows:
            return []

        client = cls.get_client()

        try:
            response = client.table("purchases").insert(rows).execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=str(e),
                code="INSERT_PURCHASES_FAILED",
                details={"count": len(rows)}
            )

    @classmethod
    def delete_cart(cls, user_id: str | UUID) -> None:
        """
        Delete all cart rows of a user.

        Raises:
            SupabaseClientError: If delete fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_id(user_id)

        try:
            client.table("cart").delete().eq("user_id", user_id_str).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=str(e),
                code="DELETE_CART_FAILED",
                details={"user_id": user_id_str}
            )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @classmethod
    def _fetch_user_rows(cls, table: str, user_id: str | UUID, code: str) -> list[dict[str, Any]]:
        client = cls.get_client()
        user_id_str = cls._normalize_id(user_id)

        try:
            response = (
                client.table(table)
                .select("*")
                .eq("user_id", user_id_str)
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=str(e),
                code=code,
                details={"user_id": user_id_str}
            )

    @classmethod
    def _insert_one(cls, table: str, row: dict[str, Any], code: str) -> dict[str, Any]:
        client = cls.get_client()

        try:
            response = client.table(table).insert(row).execute()

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=str(e),
                code=code,
                details={"table": table}
            )
