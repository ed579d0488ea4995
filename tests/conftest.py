# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Points the local draft store at a per-test temp directory
# - Provides a small catalog and mocked Supabase access
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from decimal import Decimal
from unittest.mock import patch
from uuid import UUID

import pytest

from app.auth.models import AuthUser
from app.config import settings
from core.models.catalog import CatalogItem, CatalogKind
from core.services.package_service import PackageSessionService


# =============================================================================
# Environment
# =============================================================================

@pytest.fixture(autouse=True)
def local_store_dir(tmp_path, monkeypatch):
    """Every test gets its own local store directory."""
    store_dir = tmp_path / "store"
    monkeypatch.setattr(settings, "LOCAL_STORE_DIR", str(store_dir))
    monkeypatch.setattr(settings, "CURATION_MATCH_BY_NAME", True)
    return store_dir


@pytest.fixture(autouse=True)
def no_selection_listeners(monkeypatch):
    """Listeners registered by one test must not leak into the next."""
    monkeypatch.setattr(PackageSessionService, "_listeners", [])


# =============================================================================
# Catalog
# =============================================================================

@pytest.fixture
def catalog_rows():
    """Rows as PostgREST returns them, keyed by table."""
    return {
        "items": [
            {"id": 1, "name": "Candle", "price": 500, "description": "Lavender",
             "image": None, "category_id": 10, "quantifiable": True},
            {"id": 2, "name": "Card", "price": 1250.5, "description": None,
             "image": None, "category_id": 10, "quantifiable": False},
            {"id": 3, "name": "Perfume", "price": 4900, "description": None,
             "image": "https://cdn.example/perfume.png", "category_id": 11, "quantifiable": True},
            {"id": 4, "name": "Teddy", "price": 3000, "description": None,
             "image": None, "category_id": 11, "quantifiable": False},
        ],
        "curated_items": [
            {"id": 100, "name": "Spa Box", "price": 25000, "description": None,
             "image": None, "category_id": 50, "quantifiable": False},
        ],
        "custom_categories": [
            {"id": 10, "name": "Candles & Cards", "image": None},
            {"id": 11, "name": "Luxury", "image": None},
        ],
        "curated_categories": [
            {"id": 50, "name": "Boxes", "image": None},
        ],
    }


def _by_table(rows):
    def fetch_items_by_ids(table, ids):
        ids = {str(i) for i in ids}
        return [row for row in rows[table] if str(row["id"]) in ids]

    def fetch_item(table, item_id):
        for row in rows[table]:
            if str(row["id"]) == str(item_id):
                return row
        return None

    def fetch_items(table, category_id):
        return [row for row in rows[table] if str(row["category_id"]) == str(category_id)]

    def fetch_categories(table):
        return rows[table]

    return fetch_items_by_ids, fetch_item, fetch_items, fetch_categories


@pytest.fixture
def mock_catalog(catalog_rows):
    """Patch the Supabase access used by CatalogService."""
    with patch("core.services.catalog_service.SupabaseClient") as mock:
        by_ids, one, in_category, categories = _by_table(catalog_rows)
        mock.fetch_items_by_ids.side_effect = by_ids
        mock.fetch_item.side_effect = one
        mock.fetch_items.side_effect = in_category
        mock.fetch_categories.side_effect = categories
        yield mock


@pytest.fixture
def mock_orders():
    """Patch the Supabase access used by OrderService."""
    with patch("core.services.order_service.SupabaseClient") as mock:
        mock.fetch_affiliate_by_code.return_value = None
        mock.insert_cart.return_value = {"id": 777, "created_at": "2026-10-19T10:00:00Z"}
        mock.insert_referral.return_value = {"id": 1}
        mock.fetch_cart.return_value = []
        mock.fetch_purchases.return_value = []
        mock.insert_purchases.return_value = []
        yield mock


@pytest.fixture
def candle():
    """Quantifiable item at 500."""
    return CatalogItem(id="1", name="Candle", price=Decimal("500"), quantifiable=True)


@pytest.fixture
def card():
    """Single-unit item at 1250.50."""
    return CatalogItem(id="2", name="Card", price=Decimal("1250.50"), quantifiable=False)


@pytest.fixture
def perfume():
    """Quantifiable item at 4900."""
    return CatalogItem(id="3", name="Perfume", price=Decimal("4900"), quantifiable=True)


@pytest.fixture
def curated_box():
    return CatalogItem(id="100", name="Spa Box", price=Decimal("25000"), kind=CatalogKind.CURATED)


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def shopper():
    """An authenticated customer."""
    return AuthUser(
        id=UUID("6f1c2d3e-4a5b-4c6d-8e7f-9a0b1c2d3e4f"),
        email="ada@example.com",
        role="customer",
        username="ada",
    )
