"""Report Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class LeaveBalanceReportRow(BaseModel):
    """One member's annual leave position."""

    user_id: uuid.UUID
    name: Optional[str] = None
    id_pjlp: Optional[str] = None
    avatar_url: Optional[str] = None
    total_days: int
    used_days: int
    remaining_days: int
    approved_days: int = Field(0, description="Sum of approved durations starting in the year")
    pending_count: int = 0


class LeaveBalanceReportResponse(BaseModel):
    year: int
    query: Optional[str] = None
    available_years: list[int]
    data: list[LeaveBalanceReportRow]
