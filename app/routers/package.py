# =============================================================================
# app/routers/package.py - Package Session Endpoints
# =============================================================================
# Start a package, change its selection and read the running totals.
# All endpoints require authentication.
# =============================================================================

from decimal import Decimal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.dependencies import CurrentUser
from core.models.catalog import CatalogKind
from core.models.package import PackageDetails
from core.models.selection import LineItem, SelectionAction
from core.pricing import Totals
from core.selection import SelectionState
from core.services.package_service import PackageSessionService

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class PackageStartRequest(BaseModel):
    """Package form submission."""
    name: str | None = Field(
        default=None,
        examples=["Mum's birthday"],
        description="Package name (optional for curated boxes)"
    )
    budget: Decimal | None = Field(
        default=None,
        examples=["15000"],
        description="Whole-order budget including the packaging fee"
    )
    referral_code: str | None = Field(default=None, description="Affiliate referral code")
    kind: CatalogKind = Field(default=CatalogKind.CUSTOM)


class SelectionResponse(BaseModel):
    """Current package, selection and totals."""
    package: PackageDetails | None = None
    kind: CatalogKind
    edit_curation_id: str | None = None
    line_items: list[LineItem] = Field(default_factory=list)
    totals: Totals


def selection_response(state: SelectionState) -> SelectionResponse:
    return SelectionResponse(
        package=state.package,
        kind=state.kind,
        edit_curation_id=state.edit_curation_id,
        line_items=state.line_items(),
        totals=state.totals,
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=SelectionResponse)
async def start_package(request: PackageStartRequest, user: CurrentUser):
    """
    Start a new package.

    Any selection in progress is discarded. Budgets below the packaging fee
    are rejected.
    """
    state = PackageSessionService.start_package(
        str(user.id),
        name=request.name,
        budget=request.budget,
        referral_code=request.referral_code,
        kind=request.kind,
    )
    return selection_response(state)


@router.get("", response_model=SelectionResponse)
async def get_package(user: CurrentUser):
    """Get the package in progress with its totals."""
    return selection_response(PackageSessionService.get_state(str(user.id)))


@router.delete("")
async def reset_package(user: CurrentUser):
    """Discard the package in progress."""
    PackageSessionService.reset(str(user.id))
    return {"message": "Package discarded"}


@router.post("/selection", response_model=SelectionResponse)
async def change_selection(action: SelectionAction, user: CurrentUser):
    """
    Change the selection.

    Adding or incrementing an item that would push the items past the
    effective budget returns 409 BUDGET_EXCEEDED and leaves the selection
    unchanged.
    """
    state = PackageSessionService.apply(str(user.id), action)
    return selection_response(state)
