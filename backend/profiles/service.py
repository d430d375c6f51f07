"""Profile service — lookups by id / login key and self-service edits."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.common.exceptions import ConflictError, NotFoundException
from backend.common.models import utcnow
from backend.profiles.models import Profile
from backend.profiles.schemas import ProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    """Async profile operations."""

    @staticmethod
    async def get_profile(db: AsyncSession, user_id: uuid.UUID) -> Profile:
        result = await db.execute(select(Profile).where(Profile.id == user_id))
        profile = result.scalars().first()
        if profile is None:
            raise NotFoundException("Profile", user_id)
        return profile

    @staticmethod
    async def get_by_login_key(db: AsyncSession, id_pjlp: str) -> Profile:
        """Resolve the external login key (ID PJLP) to a profile."""
        result = await db.execute(
            select(Profile).where(Profile.id_pjlp == id_pjlp.strip())
        )
        profile = result.scalars().first()
        if profile is None:
            raise NotFoundException("Profile", id_pjlp)
        return profile

    @staticmethod
    async def update_profile(
        db: AsyncSession,
        profile: Profile,
        data: ProfileUpdate,
    ) -> Profile:
        """Partial-update the caller's own profile."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return profile

        new_key = changes.get("id_pjlp")
        if new_key and new_key != profile.id_pjlp:
            taken = await db.execute(
                select(Profile.id).where(
                    Profile.id_pjlp == new_key,
                    Profile.id != profile.id,
                )
            )
            if taken.scalar() is not None:
                raise ConflictError("id_pjlp", new_key)

        for field, value in changes.items():
            setattr(profile, field, value)
        profile.updated_at = utcnow()

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("id_pjlp", new_key or "")

        logger.info("Profile %s updated fields: %s", profile.id, sorted(changes))
        return profile
