"""Auth Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from backend.common.constants import UserRole


class LoginLookupRequest(BaseModel):
    id_pjlp: str = Field(..., min_length=1, max_length=50)


class LoginLookupResponse(BaseModel):
    """Email to sign in with at the identity provider, and where to land after."""

    email: str
    role: UserRole
    redirect_to: str
