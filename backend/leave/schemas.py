"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out / *Result      → response bodies (read)
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from backend.common.constants import LeaveStatus, NotificationOutcome
from backend.profiles.schemas import ProfileBrief


# Field-level messages shown to members (id_ID)
DATES_REQUIRED_MSG = "Tanggal mulai dan selesai harus diisi."
TITLE_MIN_MSG = "Judul pengajuan minimal 3 karakter."
REASON_MIN_MSG = "Alasan harus diisi minimal 10 karakter."


# ═════════════════════════════════════════════════════════════════════
# Leave Balance
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceOut(BaseModel):
    """Annual balance; ``is_default`` when no row exists yet for the year."""

    user_id: uuid.UUID
    year: int
    total_days: int
    used_days: int
    is_default: bool = False

    @computed_field
    @property
    def remaining_days(self) -> int:
        return self.total_days - self.used_days


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for submitting a leave request.

    The end-before-start check lives in the service so it can surface as
    its own error kind.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    title: str = Field(..., min_length=3, max_length=200)
    reason: str = Field(..., min_length=10, max_length=2000)


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    """Full leave request response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    reason: str
    start_date: date
    end_date: date
    duration: int
    status: LeaveStatus
    is_read_by_user: bool
    created_at: datetime
    updated_at: datetime

    # Enriched by service
    user: Optional[ProfileBrief] = None


class LeaveHistoryOut(BaseModel):
    """A member's requests for one year, newest start date first."""

    year: int
    available_years: list[int]
    data: list[LeaveRequestOut]


# ═════════════════════════════════════════════════════════════════════
# Status transition
# ═════════════════════════════════════════════════════════════════════


class LeaveStatusUpdateRequest(BaseModel):
    """Admin decision payload."""

    status: LeaveStatus


class StatusUpdateResult(BaseModel):
    """Outcome of a transition. ``success`` reflects the status change only."""

    success: bool
    message: str
    notification: NotificationOutcome
    request: LeaveRequestOut


# ═════════════════════════════════════════════════════════════════════
# Reconciliation
# ═════════════════════════════════════════════════════════════════════


class ReconcileResult(BaseModel):
    """used_days recomputed from approved requests for one year."""

    year: int
    balances_updated: int
    balances_created: int
