# =============================================================================
# app/routers/curations.py - Saved Curation Endpoints
# =============================================================================
# Save the package in progress as a draft, list drafts priced with the
# current catalog, resume and delete them.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import CurationStoreDep, CurrentUser
from app.routers.package import SelectionResponse, selection_response
from core.models.curation import Curation, ResolvedCuration
from core.services.package_service import PackageSessionService

router = APIRouter()

CurationIdPath = Annotated[str, Path(description="Curation id")]


@router.post("", response_model=Curation)
async def save_curation(user: CurrentUser):
    """
    Save the package in progress as a draft.

    Saving again updates the same draft.
    """
    return PackageSessionService.save_draft(str(user.id))


@router.get("", response_model=list[ResolvedCuration])
async def list_curations(store: CurationStoreDep):
    """List saved drafts, each priced with the current catalog."""
    return [store.resolve_items(curation) for curation in store.list_all()]


@router.get("/{curation_id}", response_model=ResolvedCuration)
async def get_curation(curation_id: CurationIdPath, store: CurationStoreDep):
    """Get one draft priced with the current catalog."""
    return store.resolve_items(store.get(curation_id))


@router.post("/{curation_id}/resume", response_model=SelectionResponse)
async def resume_curation(curation_id: CurationIdPath, user: CurrentUser):
    """Load a draft into the package session for editing."""
    state = PackageSessionService.resume_curation(str(user.id), curation_id)
    return selection_response(state)


@router.delete("/{curation_id}")
async def delete_curation(curation_id: CurationIdPath, store: CurationStoreDep):
    """Delete a draft."""
    deleted = store.delete(curation_id)
    return {
        "curation_id": curation_id,
        "deleted": deleted,
        "message": "Curation deleted" if deleted else "Curation was already gone",
    }
