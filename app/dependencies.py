# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends

from app.auth import AuthUser, get_current_user
from core.services.curation_service import CurationStore


def get_curation_store(
    user: AuthUser = Depends(get_current_user),
) -> CurationStore:
    """
    Get the draft store of the authenticated shopper.

    Drafts are scoped to the shopper's profile.
    """
    return CurationStore.for_user(str(user.id))


# Type aliases for dependency injection
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
CurationStoreDep = Annotated[CurationStore, Depends(get_curation_store)]
