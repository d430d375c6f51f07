"""Auth router — login-key lookup and current profile."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth.dependencies import get_current_user
from backend.auth.schemas import LoginLookupRequest, LoginLookupResponse
from backend.auth.service import resolve_login
from backend.common.rate_limit import LOGIN_LOOKUP_LIMIT, limiter
from backend.database import get_db
from backend.profiles.models import Profile
from backend.profiles.schemas import ProfileOut

router = APIRouter(prefix="", tags=["auth"])


# ── POST /login-lookup ──────────────────────────────────────────────

@router.post("/login-lookup", response_model=LoginLookupResponse)
@limiter.limit(LOGIN_LOOKUP_LIMIT)
async def login_lookup(
    request: Request,
    body: LoginLookupRequest,
    db: AsyncSession = Depends(get_db),
):
    """Resolve an ID PJLP to the sign-in email and post-login landing page."""
    return await resolve_login(db, body.id_pjlp)


# ── GET /me ─────────────────────────────────────────────────────────

@router.get("/me", response_model=ProfileOut)
async def me(profile: Profile = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return profile
