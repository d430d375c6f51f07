"""Tests for common utilities — filters, search, pagination, calendar helpers,
and the RFC 7807 error envelope.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.common.constants import LeaveStatus, UserRole
from backend.common.dates import (
    format_date_id,
    inclusive_days,
    month_label_id,
    shift_month,
    start_of_day,
    to_app_date,
)
from backend.common.filters import _get_column, apply_filters, apply_search, apply_sorting
from backend.common.pagination import PaginationParams, paginate
from backend.leave.models import LeaveRequest
from backend.profiles.models import Profile
from tests.conftest import _seed_profile, _seed_request


def _params(page: int = 1, page_size: int = 10, sort=None) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size, sort=sort)


# ═════════════════════════════════════════════════════════════════════
# FILTER TESTS
# ═════════════════════════════════════════════════════════════════════


class TestApplyFilters:
    """Tests for apply_filters utility."""

    async def test_filter_by_equality(self, db: AsyncSession, member, admin):
        q = apply_filters(select(Profile), Profile, {"role": UserRole.admin})
        rows = (await db.execute(q)).scalars().all()
        assert [p.id for p in rows] == [admin.id]

    async def test_filter_none_values_skipped(self, db: AsyncSession, member, admin):
        q = apply_filters(select(Profile), Profile, {"role": None})
        assert len((await db.execute(q)).scalars().all()) == 2

    async def test_filter_combines_keys(self, db: AsyncSession, member):
        other = await _seed_profile(db, name="Siti Aminah", email="siti@example.id")
        await _seed_request(db, member.id, start_date=date(2024, 1, 1))
        await _seed_request(
            db, member.id, start_date=date(2024, 2, 1), status=LeaveStatus.approved,
        )
        await _seed_request(
            db, other.id, start_date=date(2024, 3, 1), status=LeaveStatus.approved,
        )

        q = apply_filters(
            select(LeaveRequest),
            LeaveRequest,
            {"status": LeaveStatus.approved, "user_id": member.id},
        )
        rows = (await db.execute(q)).scalars().all()
        assert [r.start_date for r in rows] == [date(2024, 2, 1)]

    async def test_filter_nonexistent_column_ignored(self, db: AsyncSession, member):
        q = apply_filters(select(Profile), Profile, {"nonexistent": "x"})
        assert len((await db.execute(q)).scalars().all()) == 1


class TestApplySearch:

    async def test_search_name_or_login_key(self, db: AsyncSession):
        await _seed_profile(db, name="Budi Santoso", id_pjlp="PJLP-001")
        await _seed_profile(db, name="Siti Aminah", id_pjlp="PJLP-002", email="siti@example.id")

        by_name = apply_search(select(Profile), Profile, "santoso", ("name", "id_pjlp"))
        by_key = apply_search(select(Profile), Profile, "pjlp-002", ("name", "id_pjlp"))

        assert [p.name for p in (await db.execute(by_name)).scalars().all()] == ["Budi Santoso"]
        assert [p.name for p in (await db.execute(by_key)).scalars().all()] == ["Siti Aminah"]

    async def test_blank_search_is_noop(self, db: AsyncSession, member):
        q = apply_search(select(Profile), Profile, "   ", ("name",))
        assert len((await db.execute(q)).scalars().all()) == 1


class TestApplySorting:

    async def test_sort_descending_replaces_existing_order(self, db: AsyncSession, member):
        for month in (1, 3, 2):
            await _seed_request(db, member.id, start_date=date(2024, month, 1))

        q = apply_sorting(
            select(LeaveRequest).order_by(LeaveRequest.created_at),
            LeaveRequest,
            "-start_date",
        )
        rows = (await db.execute(q)).scalars().all()
        assert [r.start_date.month for r in rows] == [3, 2, 1]

    def test_sort_none_no_op(self):
        q = select(LeaveRequest)
        assert apply_sorting(q, LeaveRequest, None) is q

    def test_sort_nonexistent_column_fallback(self):
        q = select(LeaveRequest)
        assert apply_sorting(q, LeaveRequest, "-bogus") is q


class TestGetColumn:

    def test_get_existing_column(self):
        assert _get_column(Profile, "id_pjlp") is Profile.id_pjlp

    def test_get_nonexistent_column(self):
        assert _get_column(Profile, "nope") is None


# ═════════════════════════════════════════════════════════════════════
# PAGINATION TESTS
# ═════════════════════════════════════════════════════════════════════


class TestPagination:

    async def test_paginate_page_2(self, db: AsyncSession, member):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for i in range(5):
            await _seed_request(
                db, member.id, start_date=date(2024, 2, 1 + i),
                created_at=base + timedelta(days=i),
            )

        result = await paginate(
            db,
            select(LeaveRequest).order_by(LeaveRequest.created_at),
            _params(page=2, page_size=2),
        )

        assert result.meta.total == 5
        assert result.meta.total_pages == 3
        assert result.meta.has_prev is True
        assert result.meta.has_next is True
        assert [r.start_date.day for r in result.data] == [3, 4]

    async def test_paginate_sort_and_transform(self, db: AsyncSession, member):
        for day in (5, 1, 3):
            await _seed_request(db, member.id, start_date=date(2024, 2, day))

        result = await paginate(
            db,
            select(LeaveRequest),
            _params(sort="start_date"),
            model=LeaveRequest,
            transform=lambda r: r.start_date.day,
        )
        assert list(result.data) == [1, 3, 5]

    async def test_paginate_empty_result(self, db: AsyncSession):
        result = await paginate(db, select(LeaveRequest), _params())
        assert result.meta.total == 0
        assert result.meta.total_pages == 0
        assert result.meta.has_next is False
        assert list(result.data) == []


# ═════════════════════════════════════════════════════════════════════
# CALENDAR HELPERS
# ═════════════════════════════════════════════════════════════════════


class TestDates:

    def test_inclusive_days(self):
        assert inclusive_days(date(2024, 6, 10), date(2024, 6, 12)) == 3
        assert inclusive_days(date(2024, 6, 10), date(2024, 6, 10)) == 1
        assert inclusive_days(date(2024, 2, 28), date(2024, 3, 1)) == 3

    def test_shift_month(self):
        assert shift_month(date(2024, 1, 31), -1) == date(2023, 12, 1)
        assert shift_month(date(2024, 11, 15), 3) == date(2025, 2, 1)
        assert shift_month(date(2024, 6, 15), 0) == date(2024, 6, 1)

    def test_start_of_day_is_utc(self):
        # Asia/Jakarta is UTC+7
        assert start_of_day(date(2024, 6, 1)) == datetime(2024, 5, 31, 17, tzinfo=timezone.utc)

    def test_to_app_date(self):
        assert to_app_date(datetime(2024, 5, 31, 18, tzinfo=timezone.utc)) == date(2024, 6, 1)
        assert to_app_date(datetime(2024, 5, 31, 16)) == date(2024, 5, 31)

    def test_indonesian_names(self):
        assert month_label_id(date(2024, 8, 17)) == "Agustus"
        assert format_date_id(date(2024, 8, 17)) == "Sabtu, 17 Agustus 2024"


# ═════════════════════════════════════════════════════════════════════
# ERROR ENVELOPE
# ═════════════════════════════════════════════════════════════════════


class TestProblemDetails:

    async def test_not_found_is_problem_json(self, client, auth_headers):
        resp = await client.put(f"/api/v1/leave/{uuid.uuid4()}/read", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["type"] == "https://siap-cuti.id/errors/not-found"
        assert body["instance"].startswith("/api/v1/leave/")

    async def test_request_validation_reshaped(self, client, admin_headers):
        resp = await client.put(
            f"/api/v1/leave/{uuid.uuid4()}/status",
            json={"status": "Dibatalkan"},
            headers=admin_headers,
        )
        assert resp.status_code == 422
        assert "status" in resp.json()["errors"]

    async def test_health(self, client):
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
