# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# These routes are for getting user info after authentication and for
# editing the shopper profile (username, email, phone number).
# =============================================================================

import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, ProfileUpdate, UserResponse
from app.exceptions import ProfileNotFoundError, ProfileUnavailableError, ValidationFailedError
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current authenticated user's profile.

    The role decides which pages the front end sends the user to
    (admin or customer).

    Raises:
        401: If not authenticated
    """
    try:
        profile = SupabaseClient.fetch_user_profile(user.id)
        if profile:
            return UserResponse(**profile)

    except SupabaseClientError as e:
        logger.warning(f"Could not fetch user profile: {e.message}")

    # User exists in auth but not yet in public.users
    return UserResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        username=user.username,
    )


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email,
        "role": user.role,
    }


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the shopper's profile row.

    Raises:
        404: If the user has no row in the users table
        502: If the users table can't be read
    """
    try:
        profile = SupabaseClient.fetch_user_profile(user.id)
    except SupabaseClientError as e:
        logger.error(f"Error loading profile for {user.id}: {e.message}")
        raise ProfileUnavailableError(e.message, context="Error loading profile")

    if not profile:
        raise ProfileNotFoundError(str(user.id))
    return UserResponse(**profile)


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    request: ProfileUpdate,
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Update username, email and/or phone number.

    The username is the customer name shown on new orders. The Supabase
    Auth login email is not changed here.

    Raises:
        400: If no field was sent
        404: If the user has no row in the users table
        502: If the update fails
    """
    changes = request.changes()
    if not changes:
        raise ValidationFailedError("Nothing to update")

    try:
        profile = SupabaseClient.update_user_profile(user.id, changes)
    except SupabaseClientError as e:
        logger.error(f"Error updating profile for {user.id}: {e.message}")
        raise ProfileUnavailableError(e.message)

    if not profile:
        raise ProfileNotFoundError(str(user.id))

    logger.info(f"Updated profile for {user.id}: {sorted(changes)}")
    return UserResponse(**profile)
