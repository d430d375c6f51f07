"""Profile router — view and edit the caller's own profile."""


from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth.dependencies import get_current_user
from backend.database import get_db
from backend.profiles.models import Profile
from backend.profiles.schemas import ProfileOut, ProfileUpdate
from backend.profiles.service import ProfileService

router = APIRouter(prefix="", tags=["profiles"])


@router.get("/me", response_model=ProfileOut)
async def get_my_profile(profile: Profile = Depends(get_current_user)):
    return profile


@router.put("/me", response_model=ProfileOut)
async def update_my_profile(
    body: ProfileUpdate,
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update name, ID PJLP, phone or avatar of the authenticated user."""
    return await ProfileService.update_profile(db, profile, body)
