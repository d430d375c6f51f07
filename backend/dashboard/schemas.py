"""Dashboard Pydantic v2 schemas — response models for all dashboard endpoints."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from backend.leave.schemas import LeaveBalanceOut, LeaveRequestOut


# ═════════════════════════════════════════════════════════════════════
# GET /admin/monthly-stats
# ═════════════════════════════════════════════════════════════════════


class MonthlyStatusCount(BaseModel):
    """Requests created in one calendar month, by status."""

    month: date = Field(..., description="First day of the month")
    label: str = Field(..., description="Indonesian month name, e.g. 'Juni'")
    menunggu: int = 0
    disetujui: int = 0
    ditolak: int = 0


class MonthlyStatsResponse(BaseModel):
    """Trailing window of monthly buckets, oldest first."""

    months: int
    data: list[MonthlyStatusCount]


# ═════════════════════════════════════════════════════════════════════
# GET /admin/summary
# ═════════════════════════════════════════════════════════════════════


class AdminSummaryResponse(BaseModel):
    """KPI cards and recent pending activity for the admin dashboard."""

    total_members: int = Field(..., description="Profiles with role 'anggota'")
    requests_this_month: int = Field(..., description="Requests created since the 1st")
    approved_this_month: int = Field(
        ..., description="Approved requests created since the 1st"
    )
    pending_total: int = Field(..., description="All requests awaiting a decision")
    recent_pending: list[LeaveRequestOut] = Field(default_factory=list)


# ═════════════════════════════════════════════════════════════════════
# GET /member
# ═════════════════════════════════════════════════════════════════════


class MemberSummaryResponse(BaseModel):
    """Balance card, yearly counters and recent requests for a member."""

    year: int
    balance: LeaveBalanceOut
    pending_count: int = 0
    approved_count: int = 0
    unread_count: int = 0
    recent_requests: list[LeaveRequestOut] = Field(default_factory=list)
