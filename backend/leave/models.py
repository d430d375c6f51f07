"""Leave ORM models: LeaveBalance, LeaveRequest."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.common.constants import LeaveStatus
from backend.common.models import TimestampMixin, enum_column, utcnow
from backend.config import settings
from backend.database import Base

if TYPE_CHECKING:
    from backend.profiles.models import Profile


class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "year", name="uq_leave_balance_user_year"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    total_days: Mapped[int] = mapped_column(
        sa.Integer,
        nullable=False,
        default=lambda: settings.DEFAULT_ANNUAL_LEAVE_DAYS,
        server_default=sa.text("12"),
    )
    used_days: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=0, server_default=sa.text("0"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utcnow,
        server_default=sa.func.now(),
    )

    # Relationships
    user: Mapped[Profile] = relationship(back_populates="leave_balances")

    @property
    def remaining_days(self) -> int:
        return self.total_days - self.used_days


class LeaveRequest(TimestampMixin, Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_request_date_range"),
        sa.Index("ix_leave_requests_user_start", "user_id", "start_date"),
        sa.Index("ix_leave_requests_status_created", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    # Inclusive day count, fixed at submission
    duration: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        enum_column(LeaveStatus, "leave_status"),
        nullable=False,
        default=LeaveStatus.pending,
        server_default=LeaveStatus.pending.value,
    )
    is_read_by_user: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=True, server_default=sa.text("TRUE"),
    )

    # Relationships
    user: Mapped[Profile] = relationship(back_populates="leave_requests")
