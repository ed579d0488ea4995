# =============================================================================
# tests/test_api.py - API Endpoint Tests
# =============================================================================
# This module contains tests for:
# - JWT authentication against the configured HS256 secret
# - package, curation and order endpoints
# - error responses (code, detail, status)
#
# Supabase is mocked; get_current_user is overridden except in TestAuth.
# =============================================================================

from __future__ import annotations

import time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.auth.dependencies import get_current_user
from app.config import settings
from app.main import app


def make_token(sub, expires_in=3600, **claims):
    payload = {"sub": sub, "aud": "authenticated", "exp": int(time.time()) + expires_in, **claims}
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


@pytest.fixture
def client(shopper):
    app.dependency_overrides[get_current_user] = lambda: shopper
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client():
    return TestClient(app)


# =============================================================================
# Auth
# =============================================================================

class TestAuth:
    """Test bearer token handling."""

    def test_missing_token(self, anonymous_client):
        response = anonymous_client.get("/api/v1/package")

        assert response.status_code in (401, 403)

    def test_valid_token(self, anonymous_client, shopper):
        token = make_token(str(shopper.id), email=shopper.email)

        with patch("app.auth.dependencies.SupabaseClient") as mock:
            mock.fetch_user_profile.return_value = {"username": "ada", "role": "customer"}
            response = anonymous_client.get(
                "/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"}
            )

        assert response.status_code == 200
        assert response.json()["user_id"] == str(shopper.id)

    def test_expired_token(self, anonymous_client, shopper):
        token = make_token(str(shopper.id), expires_in=-60)

        response = anonymous_client.get(
            "/api/v1/package", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_malformed_subject(self, anonymous_client):
        token = make_token("not-a-uuid")

        response = anonymous_client.get(
            "/api/v1/package", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    def test_profile_lookup_failure_still_authenticates(self, anonymous_client, shopper):
        from lib.supabase_client import SupabaseClientError
        token = make_token(str(shopper.id), email=shopper.email)

        with patch("app.auth.dependencies.SupabaseClient") as mock:
            mock.fetch_user_profile.side_effect = SupabaseClientError("down")
            response = anonymous_client.get(
                "/api/v1/package", headers={"Authorization": f"Bearer {token}"}
            )

        assert response.status_code == 200


class TestProfileEndpoints:
    """Test viewing and editing the shopper profile."""

    def test_get_profile(self, client, shopper):
        row = {"id": str(shopper.id), "email": "ada@example.com", "username": "ada", "phone_number": "0801"}

        with patch("app.auth.routes.SupabaseClient") as mock:
            mock.fetch_user_profile.return_value = row
            response = client.get("/api/v1/auth/profile")

        assert response.status_code == 200
        assert response.json()["phone_number"] == "0801"

    def test_missing_profile_is_404(self, client):
        with patch("app.auth.routes.SupabaseClient") as mock:
            mock.fetch_user_profile.return_value = None
            response = client.get("/api/v1/auth/profile")

        assert response.status_code == 404
        assert response.json()["code"] == "PROFILE_NOT_FOUND"

    def test_update_sends_only_given_fields(self, client, shopper):
        row = {"id": str(shopper.id), "email": "ada@example.com", "username": "Ada L", "phone_number": None}

        with patch("app.auth.routes.SupabaseClient") as mock:
            mock.update_user_profile.return_value = row
            response = client.patch(
                "/api/v1/auth/profile", json={"username": " Ada L ", "phone_number": " "}
            )

        assert response.status_code == 200
        assert response.json()["username"] == "Ada L"
        mock.update_user_profile.assert_called_once_with(
            shopper.id, {"username": "Ada L", "phone_number": None}
        )

    def test_blank_email_is_422(self, client):
        with patch("app.auth.routes.SupabaseClient") as mock:
            response = client.patch("/api/v1/auth/profile", json={"email": "  "})

        assert response.status_code == 422
        mock.update_user_profile.assert_not_called()

    def test_empty_update_is_400(self, client):
        response = client.patch("/api/v1/auth/profile", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Nothing to update"

    def test_update_failure_is_502(self, client):
        from lib.supabase_client import SupabaseClientError

        with patch("app.auth.routes.SupabaseClient") as mock:
            mock.update_user_profile.side_effect = SupabaseClientError("denied")
            response = client.patch("/api/v1/auth/profile", json={"username": "ada"})

        assert response.status_code == 502
        assert response.json()["detail"] == "Error updating profile: denied"


# =============================================================================
# Package / Selection
# =============================================================================

class TestPackageEndpoints:
    """Test the package session over HTTP."""

    def test_start_and_select(self, client, mock_catalog):
        response = client.post("/api/v1/package", json={"name": "Gift", "budget": "15000"})
        assert response.status_code == 200
        assert response.json()["package"]["effective_budget"] == "5000.00"

        response = client.post(
            "/api/v1/package/selection", json={"type": "increment", "item_id": "3"}
        )
        body = response.json()
        assert response.status_code == 200
        assert body["line_items"][0]["name"] == "Perfume"
        assert body["totals"]["final_total_display"] == "₦14900.00"

    def test_budget_exceeded_is_409(self, client, mock_catalog):
        client.post("/api/v1/package", json={"name": "Gift", "budget": "15000"})
        client.post("/api/v1/package/selection", json={"type": "increment", "item_id": "3"})

        response = client.post(
            "/api/v1/package/selection", json={"type": "increment", "item_id": "3"}
        )

        assert response.status_code == 409
        assert response.json()["code"] == "BUDGET_EXCEEDED"
        state = client.get("/api/v1/package").json()
        assert state["line_items"][0]["quantity"] == 1

    def test_budget_below_fee_is_400(self, client):
        response = client.post("/api/v1/package", json={"name": "Gift", "budget": "9000"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    def test_selection_without_package(self, client):
        response = client.post(
            "/api/v1/package/selection", json={"type": "increment", "item_id": "1"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "NO_ACTIVE_PACKAGE"

    def test_bad_action_is_422(self, client):
        response = client.post("/api/v1/package/selection", json={"type": "increment"})

        assert response.status_code == 422

    def test_reset(self, client, mock_catalog):
        client.post("/api/v1/package", json={"name": "Gift"})

        response = client.delete("/api/v1/package")

        assert response.status_code == 200
        assert client.get("/api/v1/package").json()["package"] is None


# =============================================================================
# Curations / Orders
# =============================================================================

class TestCurationEndpoints:
    """Test drafts over HTTP."""

    def test_save_list_delete(self, client, mock_catalog):
        client.post("/api/v1/package", json={"name": "Gift"})
        client.post("/api/v1/package/selection", json={"type": "toggle", "item_id": "2"})

        saved = client.post("/api/v1/curations")
        assert saved.status_code == 200
        curation_id = saved.json()["id"]

        listed = client.get("/api/v1/curations").json()
        assert [c["curation"]["id"] for c in listed] == [curation_id]
        assert listed[0]["totals"]["subtotal_display"] == "₦1250.50"

        deleted = client.delete(f"/api/v1/curations/{curation_id}")
        assert deleted.json()["deleted"] is True
        assert client.get("/api/v1/curations").json() == []

    def test_unknown_curation_is_404(self, client):
        response = client.get("/api/v1/curations/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "CURATION_NOT_FOUND"


class TestOrderEndpoints:
    """Test checkout over HTTP."""

    def test_checkout(self, client, mock_catalog, mock_orders):
        client.post("/api/v1/package", json={"name": "Gift"})
        client.post("/api/v1/package/selection", json={"type": "increment", "item_id": "1"})

        response = client.post("/api/v1/orders/checkout")

        body = response.json()
        assert response.status_code == 200
        assert body["order_id"] == "777"
        assert body["whatsapp_url"].startswith("https://wa.me/")
        assert client.get("/api/v1/package").json()["package"] is None

    def test_checkout_persistence_failure_is_502(self, client, mock_catalog, mock_orders):
        from lib.supabase_client import SupabaseClientError
        mock_orders.insert_cart.side_effect = SupabaseClientError("down")
        client.post("/api/v1/package", json={"name": "Gift"})
        client.post("/api/v1/package/selection", json={"type": "increment", "item_id": "1"})

        response = client.post("/api/v1/orders/checkout")

        assert response.status_code == 502
        assert response.json()["code"] == "ORDER_PERSISTENCE_FAILED"

    def test_payments(self, client, mock_orders):
        mock_orders.fetch_cart.return_value = [{"id": 1, "user_id": "u"}]

        response = client.post("/api/v1/orders/payments", json={"reference": "ref_1"})

        assert response.status_code == 200
        assert response.json()["orders"] == 1


class TestCatalogEndpoints:
    """Test catalog browsing."""

    def test_categories(self, client, mock_catalog):
        response = client.get("/api/v1/catalog/curated/categories")

        assert response.status_code == 200
        assert response.json() == [{"id": "50", "name": "Boxes", "image": None}]

    def test_items_in_category(self, client, mock_catalog):
        response = client.get("/api/v1/catalog/custom/categories/10/items")

        assert [item["name"] for item in response.json()] == ["Candle", "Card"]

    def test_unknown_item_is_404(self, client, mock_catalog):
        response = client.get("/api/v1/catalog/custom/items/999")

        assert response.status_code == 404
        assert response.json()["code"] == "ITEM_NOT_FOUND"
