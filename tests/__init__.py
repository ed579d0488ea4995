# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the BoxCurate API:
# - test_pricing.py / test_budget.py: Money arithmetic and budget checks
# - test_selection.py: SelectionState mutations and invariants
# - test_models.py: Unit tests for Pydantic model validation
# - test_local_store.py / test_curation_service.py: Draft storage
# - test_order_service.py / test_package_service.py: Checkout flow
# - test_api.py: Endpoint tests with FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
