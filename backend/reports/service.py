"""Report service — annual leave balance summary across members."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.common.constants import REPORT_YEARS_BACK, LeaveStatus, UserRole
from backend.common.dates import app_today
from backend.common.filters import apply_search
from backend.config import settings
from backend.leave.models import LeaveBalance, LeaveRequest
from backend.profiles.models import Profile
from backend.reports.schemas import LeaveBalanceReportResponse, LeaveBalanceReportRow


class ReportService:
    """Read-only reporting queries."""

    @staticmethod
    async def get_balance_report(
        db: AsyncSession,
        year: Optional[int] = None,
        query: Optional[str] = None,
    ) -> LeaveBalanceReportResponse:
        """One row per member, sorted by name; optional search on name / ID PJLP.

        Members without a balance row for *year* report the default allotment.
        """
        target_year = year or app_today().year

        members_q = apply_search(
            select(Profile).where(Profile.role == UserRole.member),
            Profile,
            query,
            ("name", "id_pjlp"),
        ).order_by(Profile.name.asc(), Profile.id_pjlp.asc())
        members = (await db.execute(members_q)).scalars().all()

        ids: list[uuid.UUID] = [m.id for m in members]
        balances: dict[uuid.UUID, LeaveBalance] = {}
        activity: dict[uuid.UUID, tuple[int, int]] = {}

        if ids:
            bal_result = await db.execute(
                select(LeaveBalance).where(
                    LeaveBalance.user_id.in_(ids),
                    LeaveBalance.year == target_year,
                )
            )
            balances = {b.user_id: b for b in bal_result.scalars().all()}

            act_result = await db.execute(
                select(
                    LeaveRequest.user_id,
                    func.coalesce(
                        func.sum(
                            case(
                                (LeaveRequest.status == LeaveStatus.approved, LeaveRequest.duration),
                                else_=0,
                            )
                        ),
                        0,
                    ).label("approved_days"),
                    func.count(
                        case((LeaveRequest.status == LeaveStatus.pending, 1))
                    ).label("pending_count"),
                )
                .where(
                    LeaveRequest.user_id.in_(ids),
                    LeaveRequest.start_date >= date(target_year, 1, 1),
                    LeaveRequest.start_date <= date(target_year, 12, 31),
                )
                .group_by(LeaveRequest.user_id)
            )
            activity = {
                row.user_id: (int(row.approved_days), int(row.pending_count))
                for row in act_result.all()
            }

        rows: list[LeaveBalanceReportRow] = []
        for member in members:
            bal = balances.get(member.id)
            total = bal.total_days if bal else settings.DEFAULT_ANNUAL_LEAVE_DAYS
            used = bal.used_days if bal else 0
            approved_days, pending_count = activity.get(member.id, (0, 0))
            rows.append(LeaveBalanceReportRow(
                user_id=member.id,
                name=member.name,
                id_pjlp=member.id_pjlp,
                avatar_url=member.avatar_url,
                total_days=total,
                used_days=used,
                remaining_days=total - used,
                approved_days=approved_days,
                pending_count=pending_count,
            ))

        return LeaveBalanceReportResponse(
            year=target_year,
            query=query.strip() if query and query.strip() else None,
            available_years=[target_year - i for i in range(REPORT_YEARS_BACK + 1)],
            data=rows,
        )
