"""Reports router — per-member annual leave balances (admin only)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth.dependencies import require_role
from backend.common.constants import UserRole
from backend.database import get_db
from backend.profiles.models import Profile
from backend.reports.schemas import LeaveBalanceReportResponse
from backend.reports.service import ReportService

router = APIRouter(prefix="", tags=["reports"])


# ── GET /leave-balances ─────────────────────────────────────────────

@router.get("/leave-balances", response_model=LeaveBalanceReportResponse)
async def leave_balance_report(
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Defaults to current year"),
    query: Optional[str] = Query(None, max_length=100, description="Search by name or ID PJLP"),
    profile: Profile = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    """Annual balance, approved days and pending requests for every member."""
    return await ReportService.get_balance_report(db, year, query)
