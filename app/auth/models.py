# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, field_validator
from uuid import UUID
from typing import Optional


class AuthUser(BaseModel):
    """
    Authenticated shopper.

    id and email come from the Supabase JWT; role and username come from
    the public users table.
    """
    id: UUID
    email: Optional[str] = None
    role: Optional[str] = None
    username: Optional[str] = None

    class Config:
        frozen = True  # Make immutable

    @property
    def display_name(self) -> str:
        """Name used on orders: username, then email, then 'Customer'."""
        return self.username or self.email or "Customer"


class UserResponse(BaseModel):
    """
    Full user response for API endpoints.

    Includes profile data from the public.users table.
    """
    id: UUID
    email: Optional[str] = None
    role: Optional[str] = None
    username: Optional[str] = None
    phone_number: Optional[str] = None


class ProfileUpdate(BaseModel):
    """
    Partial profile update. Only fields that are sent are written.

    A blank username or phone number clears it; email can't be blank.
    """
    username: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None

    @field_validator("username", "phone_number")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("email")
    @classmethod
    def email_required(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            raise ValueError("Email is required")
        return v.strip()

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
