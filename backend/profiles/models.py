"""Profile ORM model — one row per identity-provider account."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.common.constants import UserRole
from backend.common.models import TimestampMixin, enum_column
from backend.database import Base

if TYPE_CHECKING:
    from backend.leave.models import LeaveBalance, LeaveRequest


class Profile(TimestampMixin, Base):
    """Member or admin. ``id`` equals the identity provider's user id (JWT ``sub``)."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole, "user_role"),
        nullable=False,
        default=UserRole.member,
        server_default=UserRole.member.value,
    )
    name: Mapped[Optional[str]] = mapped_column(sa.String(150))
    id_pjlp: Mapped[Optional[str]] = mapped_column(sa.String(50), unique=True)
    email: Mapped[Optional[str]] = mapped_column(sa.String(255))
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    avatar_url: Mapped[Optional[str]] = mapped_column(sa.String(500))

    # ── Relationships ───────────────────────────────────────────────
    leave_requests: Mapped[list[LeaveRequest]] = relationship(
        back_populates="user",
    )
    leave_balances: Mapped[list[LeaveBalance]] = relationship(
        back_populates="user",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    def __repr__(self) -> str:
        return f"<Profile {self.id_pjlp!r} role={self.role.value}>"
