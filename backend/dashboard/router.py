"""Dashboard router — read-only endpoints for the admin and member dashboards.

Admin widgets require the admin role; the member dashboard is available to
any authenticated profile and only ever shows the caller's own data.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth.dependencies import get_current_user, require_role
from backend.common.constants import MONTHLY_STATS_WINDOW, UserRole
from backend.dashboard.schemas import (
    AdminSummaryResponse,
    MemberSummaryResponse,
    MonthlyStatsResponse,
)
from backend.dashboard.service import DashboardService
from backend.database import get_db
from backend.profiles.models import Profile

router = APIRouter()


# ── GET /admin/summary ──────────────────────────────────────────────

@router.get("/admin/summary", response_model=AdminSummaryResponse)
async def admin_summary(
    profile: Profile = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    """KPI cards: members, requests and approvals this month, latest pending."""
    return await DashboardService.get_admin_summary(db)


# ── GET /admin/monthly-stats ────────────────────────────────────────

@router.get("/admin/monthly-stats", response_model=MonthlyStatsResponse)
async def monthly_stats(
    months: int = Query(MONTHLY_STATS_WINDOW, ge=1, le=24, description="Window size in months"),
    profile: Profile = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    """Requests per month by status for the chart, oldest month first."""
    return await DashboardService.get_monthly_stats(db, months=months)


# ── GET /member ─────────────────────────────────────────────────────

@router.get("/member", response_model=MemberSummaryResponse)
async def member_summary(
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Balance, yearly counters, unread count and latest requests for the caller."""
    return await DashboardService.get_member_summary(db, profile)
