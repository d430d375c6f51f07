"""Report tests — annual leave balance summary across members."""

from __future__ import annotations

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from backend.common.constants import LeaveStatus, UserRole
from backend.reports.service import ReportService
from tests.conftest import _seed_balance, _seed_profile, _seed_request


async def _seed_team(db: AsyncSession):
    budi = await _seed_profile(db, name="Budi Santoso", id_pjlp="PJLP-002")
    siti = await _seed_profile(db, name="Siti Aminah", id_pjlp="PJLP-001", email="siti@example.id")
    await _seed_profile(db, name="Admin Cuti", id_pjlp="ADM-1", role=UserRole.admin)
    return budi, siti


class TestBalanceReport:
    """ReportService.get_balance_report()."""

    async def test_rows_sorted_by_name_members_only(self, db: AsyncSession):
        await _seed_team(db)

        report = await ReportService.get_balance_report(db, 2024)

        assert [r.name for r in report.data] == ["Budi Santoso", "Siti Aminah"]
        assert report.available_years == [2024, 2023, 2022]

    async def test_balance_and_activity_columns(self, db: AsyncSession):
        budi, siti = await _seed_team(db)
        await _seed_balance(db, budi.id, year=2024, total_days=14, used_days=4)
        await _seed_request(
            db, budi.id, start_date=date(2024, 3, 4), end_date=date(2024, 3, 7),
            status=LeaveStatus.approved,
        )
        await _seed_request(db, budi.id, start_date=date(2024, 5, 1))
        await _seed_request(
            db, budi.id, start_date=date(2023, 5, 1), status=LeaveStatus.approved,
        )

        report = await ReportService.get_balance_report(db, 2024)
        rows = {r.name: r for r in report.data}

        budi_row = rows["Budi Santoso"]
        assert (budi_row.total_days, budi_row.used_days, budi_row.remaining_days) == (14, 4, 10)
        assert budi_row.approved_days == 4
        assert budi_row.pending_count == 1

        siti_row = rows["Siti Aminah"]
        assert (siti_row.total_days, siti_row.used_days, siti_row.remaining_days) == (12, 0, 12)
        assert (siti_row.approved_days, siti_row.pending_count) == (0, 0)

    async def test_search_by_name_or_login_key(self, db: AsyncSession):
        await _seed_team(db)

        by_name = await ReportService.get_balance_report(db, 2024, "aminah")
        by_key = await ReportService.get_balance_report(db, 2024, "pjlp-002")
        nothing = await ReportService.get_balance_report(db, 2024, "tidak ada")

        assert [r.name for r in by_name.data] == ["Siti Aminah"]
        assert [r.name for r in by_key.data] == ["Budi Santoso"]
        assert nothing.data == []
        assert by_name.query == "aminah"


class TestReportAPI:

    async def test_admin_only(self, client, auth_headers, admin_headers):
        denied = await client.get("/api/v1/reports/leave-balances", headers=auth_headers)
        allowed = await client.get(
            "/api/v1/reports/leave-balances?year=2024&query=budi", headers=admin_headers,
        )
        assert denied.status_code == 403
        assert allowed.status_code == 200
        body = allowed.json()
        assert body["year"] == 2024
        assert [r["name"] for r in body["data"]] == ["Budi Santoso"]
