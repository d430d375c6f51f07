"""Auth service — identity-provider JWT verification and login-key lookup.

Credentials are verified by the hosted identity provider; this service only
checks the tokens it signs and maps them to local profiles.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth.schemas import LoginLookupResponse
from backend.common.constants import UserRole
from backend.common.exceptions import ValidationException
from backend.config import settings
from backend.profiles.service import ProfileService

_ROLE_HOME: dict[UserRole, str] = {
    UserRole.admin: "/admin/dashboard",
    UserRole.member: "/dashboard",
}


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature, expiry and audience; return the claims."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Token has no subject.")
    return payload


def subject_id(payload: dict[str, Any]) -> uuid.UUID:
    try:
        return uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token subject.")


async def resolve_login(db: AsyncSession, id_pjlp: str) -> LoginLookupResponse:
    """First login step: map ID PJLP to the email the identity provider expects."""
    profile = await ProfileService.get_by_login_key(db, id_pjlp)
    if not profile.email:
        raise ValidationException(
            {"email": ["Data email untuk pengguna ini tidak lengkap. Hubungi admin."]},
            detail="Data email untuk pengguna ini tidak lengkap. Hubungi admin.",
        )
    return LoginLookupResponse(
        email=profile.email,
        role=profile.role,
        redirect_to=_ROLE_HOME[profile.role],
    )
