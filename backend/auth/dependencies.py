"""Auth dependencies — bearer token validation and role enforcement.

The authenticated ``Profile`` is returned to each handler explicitly; no
request-global user state is kept.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth.service import decode_access_token, subject_id
from backend.common.constants import UserRole
from backend.common.exceptions import ForbiddenException
from backend.database import get_db
from backend.profiles.models import Profile


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Validate the JWT and return the caller's Profile."""
    payload = decode_access_token(_extract_bearer(request))

    result = await db.execute(
        select(Profile).where(Profile.id == subject_id(payload))
    )
    profile = result.scalars().first()
    if profile is None:
        raise HTTPException(status_code=401, detail="Profile not found for this account.")
    return profile


# ── Capability checks ───────────────────────────────────────────────

def ensure_role(profile: Profile, *allowed_roles: UserRole) -> None:
    """Raise ForbiddenException unless *profile* holds one of *allowed_roles*."""
    if profile.role not in allowed_roles:
        raise ForbiddenException(
            detail=f"Role '{profile.role.value}' is not permitted. Required: {[r.value for r in allowed_roles]}.",
        )


def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership."""

    async def _check(profile: Profile = Depends(get_current_user)) -> Profile:
        ensure_role(profile, *allowed_roles)
        return profile

    return _check
