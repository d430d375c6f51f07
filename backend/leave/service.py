"""Leave service layer — submission, balance ledger, admin decisions, history.

Business logic:
  - Submission validation: field rules, date range, annual balance check
  - Balance lookup with the default allotment when no row exists
  - Admin status transitions with best-effort email notification
  - Member history, owner read flags, and used_days reconciliation
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, inspect as sa_inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.auth.dependencies import ensure_role
from backend.common.constants import (
    TERMINAL_LEAVE_STATUSES,
    LeaveStatus,
    NotificationOutcome,
    UserRole,
)
from backend.common.dates import app_today, inclusive_days
from backend.common.exceptions import (
    DateRangeException,
    InsufficientBalanceException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from backend.common.filters import apply_filters
from backend.common.models import utcnow
from backend.common.pagination import PaginatedResponse, PaginationParams, paginate
from backend.config import settings
from backend.leave.models import LeaveBalance, LeaveRequest
from backend.leave.schemas import (
    DATES_REQUIRED_MSG,
    REASON_MIN_MSG,
    TITLE_MIN_MSG,
    LeaveBalanceOut,
    LeaveHistoryOut,
    LeaveRequestCreate,
    LeaveRequestOut,
    ReconcileResult,
    StatusUpdateResult,
)
from backend.notifications.email import send_leave_status_email
from backend.profiles.models import Profile
from backend.profiles.schemas import ProfileBrief

logger = logging.getLogger(__name__)

_REQUEST_FIELDS = tuple(f for f in LeaveRequestOut.model_fields if f != "user")

_DATE_FIELDS = ("start_date", "end_date")

# Localized messages per (field, pydantic error type); other errors keep pydantic's text
_FIELD_MESSAGES = {
    ("title", "missing"): TITLE_MIN_MSG,
    ("title", "string_too_short"): TITLE_MIN_MSG,
    ("reason", "missing"): REASON_MIN_MSG,
    ("reason", "string_too_short"): REASON_MIN_MSG,
}


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations: balances, submission, decisions, history."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _build_request_response(
        req: LeaveRequest,
        *,
        user: Optional[Profile] = None,
    ) -> LeaveRequestOut:
        """Build LeaveRequestOut from ORM without triggering lazy loads."""
        data: dict[str, Any] = {f: getattr(req, f) for f in _REQUEST_FIELDS}
        if user is None and "user" not in sa_inspect(req).unloaded:
            user = req.user
        if user is not None:
            data["user"] = ProfileBrief.model_validate(user)
        return LeaveRequestOut(**data)

    @staticmethod
    def _parse_submission(
        data: Union[LeaveRequestCreate, Mapping[str, Any]],
    ) -> LeaveRequestCreate:
        """Accept a parsed payload or raw form data; map errors to field messages."""
        if isinstance(data, LeaveRequestCreate):
            return data
        try:
            return LeaveRequestCreate.model_validate(dict(data))
        except PydanticValidationError as exc:
            errors: dict[str, list[str]] = {}
            for err in exc.errors():
                field = str(err["loc"][0]) if err.get("loc") else "unknown"
                if field in _DATE_FIELDS:
                    msg = DATES_REQUIRED_MSG
                else:
                    msg = _FIELD_MESSAGES.get(
                        (field, err.get("type")), err.get("msg", "Invalid value"),
                    )
                if msg not in errors.setdefault(field, []):
                    errors[field].append(msg)
            raise ValidationException(errors)

    @staticmethod
    async def _get_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        with_user: bool = False,
    ) -> LeaveRequest:
        query = select(LeaveRequest).where(LeaveRequest.id == request_id)
        if with_user:
            query = query.options(selectinload(LeaveRequest.user))
        leave_req = (await db.execute(query)).scalars().first()
        if leave_req is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave_req

    # ─────────────────────────────────────────────────────────────────
    # Balance
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_balance(
        db: AsyncSession,
        user_id: uuid.UUID,
        year: Optional[int] = None,
    ) -> LeaveBalanceOut:
        """Balance for *year* (default: current year). Missing row → 12 total, 0 used."""
        target_year = year or app_today().year
        result = await db.execute(
            select(LeaveBalance).where(
                LeaveBalance.user_id == user_id,
                LeaveBalance.year == target_year,
            )
        )
        balance = result.scalars().first()
        if balance is None:
            return LeaveBalanceOut(
                user_id=user_id,
                year=target_year,
                total_days=settings.DEFAULT_ANNUAL_LEAVE_DAYS,
                used_days=0,
                is_default=True,
            )
        return LeaveBalanceOut(
            user_id=user_id,
            year=target_year,
            total_days=balance.total_days,
            used_days=balance.used_days,
        )

    # ─────────────────────────────────────────────────────────────────
    # Submit
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def submit_leave(
        db: AsyncSession,
        user: Profile,
        data: Union[LeaveRequestCreate, Mapping[str, Any]],
    ) -> LeaveRequestOut:
        """Validate and persist a new pending request.

        Order of checks: field rules, date range, balance. Nothing is
        written unless all pass; used_days is never touched here.
        """
        payload = LeaveService._parse_submission(data)

        if payload.end_date < payload.start_date:
            raise DateRangeException()

        duration = inclusive_days(payload.start_date, payload.end_date)

        balance = await LeaveService.get_balance(db, user.id)
        if duration > balance.remaining_days:
            raise InsufficientBalanceException(
                remaining=balance.remaining_days, requested=duration,
            )

        now = utcnow()
        leave_req = LeaveRequest(
            user_id=user.id,
            title=payload.title,
            reason=payload.reason,
            start_date=payload.start_date,
            end_date=payload.end_date,
            duration=duration,
            status=LeaveStatus.pending,
            is_read_by_user=True,
            created_at=now,
            updated_at=now,
        )
        db.add(leave_req)
        await db.flush()

        logger.info(
            "Leave request %s submitted by %s (%s → %s, %d day(s))",
            leave_req.id, user.id, payload.start_date, payload.end_date, duration,
        )
        return LeaveService._build_request_response(leave_req, user=user)

    # ─────────────────────────────────────────────────────────────────
    # Status transition
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def update_status(
        db: AsyncSession,
        actor: Profile,
        request_id: uuid.UUID,
        new_status: LeaveStatus,
    ) -> StatusUpdateResult:
        """Apply an admin decision, then try to email the owner.

        The status change is flushed before any notification attempt and is
        never undone by a notification failure.
        """
        ensure_role(actor, UserRole.admin)

        if new_status not in TERMINAL_LEAVE_STATUSES:
            raise ValidationException(
                {"status": [f"Status harus '{LeaveStatus.approved.value}' atau '{LeaveStatus.rejected.value}'."]}
            )

        leave_req = await LeaveService._get_request(db, request_id, with_user=True)

        if leave_req.status == new_status:
            # Idempotent repeat: nothing changes, nothing is re-sent
            return StatusUpdateResult(
                success=True,
                message=f'Pengajuan sudah berstatus "{new_status.value}".',
                notification=NotificationOutcome.not_attempted,
                request=LeaveService._build_request_response(leave_req),
            )
        if leave_req.status in TERMINAL_LEAVE_STATUSES:
            raise InvalidTransitionException(leave_req.status.value, new_status.value)

        leave_req.status = new_status
        leave_req.updated_at = utcnow()
        leave_req.is_read_by_user = False
        await db.flush()

        logger.info(
            "Leave request %s set to %s by admin %s",
            leave_req.id, new_status.value, actor.id,
        )

        out = LeaveService._build_request_response(leave_req)
        outcome, message = await LeaveService._notify_owner(leave_req, new_status)
        return StatusUpdateResult(
            success=True, message=message, notification=outcome, request=out,
        )

    @staticmethod
    async def _notify_owner(
        leave_req: LeaveRequest,
        new_status: LeaveStatus,
    ) -> tuple[NotificationOutcome, str]:
        if not settings.email_configured:
            logger.warning(
                "Email configuration missing; notification for leave request %s skipped.",
                leave_req.id,
            )
            return (
                NotificationOutcome.skipped_unconfigured,
                "Status pengajuan berhasil diperbarui, namun notifikasi email tidak "
                "terkirim karena konfigurasi server email belum lengkap. "
                "Silakan hubungi teknisi.",
            )

        owner = leave_req.user
        try:
            if owner is None or not owner.email or not owner.name:
                raise ValidationException(
                    {"profile": ["Informasi profil (nama/email) tidak lengkap untuk pengiriman notifikasi."]},
                    detail="Informasi profil (nama/email) tidak lengkap untuk pengiriman notifikasi.",
                )
            await send_leave_status_email(
                to=owner.email,
                name=owner.name,
                status=new_status,
                request_title=leave_req.title,
                start_date=leave_req.start_date,
                end_date=leave_req.end_date,
            )
        except Exception as exc:
            logger.error(
                "Status updated but notification email failed for leave request %s: %s",
                leave_req.id, getattr(exc, "detail", exc),
                exc_info=True,
            )
            return (
                NotificationOutcome.failed,
                "Pengajuan berhasil diubah, namun notifikasi email gagal dikirim. "
                "Periksa log server untuk detail.",
            )

        return (
            NotificationOutcome.sent,
            f'Pengajuan berhasil diubah menjadi "{new_status.value}" dan notifikasi email telah dikirim.',
        )

    # ─────────────────────────────────────────────────────────────────
    # Admin listing
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        pagination: PaginationParams,
        *,
        status: Optional[LeaveStatus] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> PaginatedResponse:
        """All requests, newest first, optionally filtered by status / owner."""
        query = apply_filters(
            select(LeaveRequest),
            LeaveRequest,
            {"status": status, "user_id": user_id},
        ).order_by(LeaveRequest.created_at.desc())

        return await paginate(
            db,
            query,
            pagination,
            model=LeaveRequest,
            options=[selectinload(LeaveRequest.user)],
            transform=LeaveService._build_request_response,
        )

    # ─────────────────────────────────────────────────────────────────
    # Member history
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_history(
        db: AsyncSession,
        user_id: uuid.UUID,
        year: Optional[int] = None,
    ) -> LeaveHistoryOut:
        """Requests starting in *year*, ``start_date`` descending."""
        current_year = app_today().year
        target_year = year or current_year

        years_result = await db.execute(
            select(LeaveRequest.start_date).where(LeaveRequest.user_id == user_id)
        )
        years = {d.year for d in years_result.scalars().all()}
        years.add(current_year)

        result = await db.execute(
            select(LeaveRequest)
            .where(
                LeaveRequest.user_id == user_id,
                LeaveRequest.start_date >= date(target_year, 1, 1),
                LeaveRequest.start_date <= date(target_year, 12, 31),
            )
            .order_by(LeaveRequest.start_date.desc(), LeaveRequest.created_at.desc())
        )
        return LeaveHistoryOut(
            year=target_year,
            available_years=sorted(years, reverse=True),
            data=[
                LeaveService._build_request_response(r)
                for r in result.scalars().all()
            ],
        )

    # ─────────────────────────────────────────────────────────────────
    # Owner read flags
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_unread_count(db: AsyncSession, user_id: uuid.UUID) -> int:
        """Decisions the owner has not opened yet."""
        result = await db.execute(
            select(func.count())
            .select_from(LeaveRequest)
            .where(
                LeaveRequest.user_id == user_id,
                LeaveRequest.is_read_by_user.is_(False),
            )
        )
        return result.scalar_one()

    @staticmethod
    async def mark_read(
        db: AsyncSession,
        request_id: uuid.UUID,
        user: Profile,
    ) -> LeaveRequestOut:
        """Mark one of the caller's own requests as read."""
        leave_req = await LeaveService._get_request(db, request_id)
        if leave_req.user_id != user.id:
            # Other members' requests are invisible, not forbidden
            raise NotFoundException("LeaveRequest", str(request_id))

        leave_req.is_read_by_user = True
        await db.flush()
        return LeaveService._build_request_response(leave_req, user=user)

    @staticmethod
    async def mark_all_read(db: AsyncSession, user_id: uuid.UUID) -> int:
        """Bulk-mark the caller's unread decisions as read. Returns count updated."""
        result = await db.execute(
            update(LeaveRequest)
            .where(
                LeaveRequest.user_id == user_id,
                LeaveRequest.is_read_by_user.is_(False),
            )
            .values(is_read_by_user=True)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount  # type: ignore[return-value]

    # ─────────────────────────────────────────────────────────────────
    # Reconciliation
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def reconcile_used_days(
        db: AsyncSession,
        year: Optional[int] = None,
        *,
        user_id: Optional[uuid.UUID] = None,
    ) -> ReconcileResult:
        """Set used_days to the sum of approved durations starting in *year*.

        Approval never debits the balance synchronously; this is the
        periodic job that brings the ledger in line. Members with approved
        leave but no balance row get one with the default allotment.
        """
        target_year = year or app_today().year

        sums_q = (
            select(
                LeaveRequest.user_id,
                func.coalesce(func.sum(LeaveRequest.duration), 0).label("used"),
            )
            .where(
                LeaveRequest.status == LeaveStatus.approved,
                LeaveRequest.start_date >= date(target_year, 1, 1),
                LeaveRequest.start_date <= date(target_year, 12, 31),
            )
            .group_by(LeaveRequest.user_id)
        )
        if user_id is not None:
            sums_q = sums_q.where(LeaveRequest.user_id == user_id)
        used_by_user = {row.user_id: int(row.used) for row in (await db.execute(sums_q)).all()}

        balances_q = select(LeaveBalance).where(LeaveBalance.year == target_year)
        if user_id is not None:
            balances_q = balances_q.where(LeaveBalance.user_id == user_id)
        balances = (await db.execute(balances_q)).scalars().all()

        now = utcnow()
        updated = 0
        for balance in balances:
            used = used_by_user.pop(balance.user_id, 0)
            if balance.used_days != used:
                balance.used_days = used
                balance.updated_at = now
                updated += 1

        for owner_id, used in used_by_user.items():
            db.add(LeaveBalance(
                user_id=owner_id,
                year=target_year,
                total_days=settings.DEFAULT_ANNUAL_LEAVE_DAYS,
                used_days=used,
                updated_at=now,
            ))

        await db.flush()
        logger.info(
            "Reconciled leave balances for %d: %d updated, %d created",
            target_year, updated, len(used_by_user),
        )
        return ReconcileResult(
            year=target_year,
            balances_updated=updated,
            balances_created=len(used_by_user),
        )
