"""Dashboard service — read-only aggregation queries over leave requests.

All methods are static async, following the project convention.
Counts run at DB level; month bucketing happens in Python so that
months without any request still appear with zeros.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.common.constants import (
    MONTHLY_STATS_WINDOW,
    RECENT_ACTIVITY_LIMIT,
    LeaveStatus,
    UserRole,
)
from backend.common.dates import (
    app_today,
    month_label_id,
    month_start,
    shift_month,
    start_of_day,
    to_app_date,
)
from backend.dashboard.schemas import (
    AdminSummaryResponse,
    MemberSummaryResponse,
    MonthlyStatsResponse,
    MonthlyStatusCount,
)
from backend.leave.models import LeaveRequest
from backend.leave.service import LeaveService
from backend.profiles.models import Profile


def _today() -> date:
    """Current date in the application timezone."""
    return app_today()


_STATUS_FIELD = {
    LeaveStatus.pending: "menunggu",
    LeaveStatus.approved: "disetujui",
    LeaveStatus.rejected: "ditolak",
}


def bucket_monthly(
    rows: Iterable[tuple[datetime, LeaveStatus]],
    today: date,
    months: int = MONTHLY_STATS_WINDOW,
) -> list[MonthlyStatusCount]:
    """Group ``(created_at, status)`` rows into *months* calendar buckets.

    The window ends with the month containing *today*. Rows outside the
    window are ignored.
    """
    first = shift_month(today, -(months - 1))
    buckets = [
        MonthlyStatusCount(month=m, label=month_label_id(m))
        for m in (shift_month(first, i) for i in range(months))
    ]
    index = {b.month: b for b in buckets}

    for created_at, status in rows:
        bucket = index.get(month_start(to_app_date(created_at)))
        if bucket is None:
            continue
        field = _STATUS_FIELD[LeaveStatus(status)]
        setattr(bucket, field, getattr(bucket, field) + 1)

    return buckets


class DashboardService:
    """Async dashboard aggregation queries."""

    # ═════════════════════════════════════════════════════════════════
    # GET /admin/monthly-stats
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_monthly_stats(
        db: AsyncSession,
        months: int = MONTHLY_STATS_WINDOW,
        today: Optional[date] = None,
    ) -> MonthlyStatsResponse:
        """Per-month status counts for the trailing *months*, oldest first."""
        today = today or _today()
        window_start = start_of_day(shift_month(today, -(months - 1)))

        result = await db.execute(
            select(LeaveRequest.created_at, LeaveRequest.status).where(
                LeaveRequest.created_at >= window_start,
            )
        )
        return MonthlyStatsResponse(
            months=months,
            data=bucket_monthly(result.all(), today, months),
        )

    # ═════════════════════════════════════════════════════════════════
    # GET /admin/summary
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_admin_summary(
        db: AsyncSession,
        today: Optional[date] = None,
    ) -> AdminSummaryResponse:
        """Member count, this month's volume, and the latest pending requests."""
        today = today or _today()
        since = start_of_day(month_start(today))

        members_q = select(func.count(Profile.id)).where(
            Profile.role == UserRole.member,
        )
        monthly_q = select(func.count(LeaveRequest.id)).where(
            LeaveRequest.created_at >= since,
        )
        approved_q = select(func.count(LeaveRequest.id)).where(
            LeaveRequest.created_at >= since,
            LeaveRequest.status == LeaveStatus.approved,
        )
        pending_q = select(func.count(LeaveRequest.id)).where(
            LeaveRequest.status == LeaveStatus.pending,
        )
        counts = await _multi_scalar(db, members_q, monthly_q, approved_q, pending_q)

        recent = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.status == LeaveStatus.pending)
            .options(selectinload(LeaveRequest.user))
            .order_by(LeaveRequest.created_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )

        return AdminSummaryResponse(
            total_members=counts[0] or 0,
            requests_this_month=counts[1] or 0,
            approved_this_month=counts[2] or 0,
            pending_total=counts[3] or 0,
            recent_pending=[
                LeaveService._build_request_response(r)
                for r in recent.scalars().all()
            ],
        )

    # ═════════════════════════════════════════════════════════════════
    # GET /member
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_member_summary(
        db: AsyncSession,
        user: Profile,
        today: Optional[date] = None,
    ) -> MemberSummaryResponse:
        """Balance for the current year plus the member's own counters."""
        today = today or _today()
        year = today.year
        in_year = (
            LeaveRequest.user_id == user.id,
            LeaveRequest.start_date >= date(year, 1, 1),
            LeaveRequest.start_date <= date(year, 12, 31),
        )

        balance = await LeaveService.get_balance(db, user.id, year)
        counts = await _multi_scalar(
            db,
            select(func.count(LeaveRequest.id)).where(
                *in_year, LeaveRequest.status == LeaveStatus.pending,
            ),
            select(func.count(LeaveRequest.id)).where(
                *in_year, LeaveRequest.status == LeaveStatus.approved,
            ),
        )
        unread = await LeaveService.get_unread_count(db, user.id)

        recent = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.user_id == user.id)
            .order_by(LeaveRequest.created_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )

        return MemberSummaryResponse(
            year=year,
            balance=balance,
            pending_count=counts[0] or 0,
            approved_count=counts[1] or 0,
            unread_count=unread,
            recent_requests=[
                LeaveService._build_request_response(r, user=user)
                for r in recent.scalars().all()
            ],
        )


# ── Helpers ──────────────────────────────────────────────────────────


async def _multi_scalar(db: AsyncSession, *stmts) -> list:
    """Execute multiple scalar queries and return their results in order."""
    results = []
    for stmt in stmts:
        result = await db.execute(stmt)
        results.append(result.scalar())
    return results
