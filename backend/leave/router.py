"""Leave router — apply, balance, history, read flags, admin decisions.

All endpoints require authentication. Admin endpoints enforce the role
check through ``require_role``.
"""


import uuid
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.auth.dependencies import get_current_user, require_role
from backend.common.constants import ALL_STATUSES, LeaveStatus, UserRole
from backend.common.exceptions import ValidationException
from backend.common.pagination import PaginationParams
from backend.common.rate_limit import SUBMIT_LEAVE_LIMIT, limiter
from backend.database import get_db
from backend.leave.schemas import (
    LeaveBalanceOut,
    LeaveHistoryOut,
    LeaveRequestOut,
    LeaveStatusUpdateRequest,
    ReconcileResult,
    StatusUpdateResult,
)
from backend.leave.service import LeaveService
from backend.profiles.models import Profile

router = APIRouter(prefix="", tags=["leave"])


def _parse_status_filter(value: Optional[str]) -> Optional[LeaveStatus]:
    """``None`` / ``"Semua"`` → no filter; otherwise one of the status values."""
    if value is None or value == ALL_STATUSES:
        return None
    try:
        return LeaveStatus(value)
    except ValueError:
        allowed = [ALL_STATUSES] + [s.value for s in LeaveStatus]
        raise ValidationException({"status": [f"Status harus salah satu dari {allowed}."]})


# ── POST /apply ─────────────────────────────────────────────────────

@router.post("/apply", response_model=LeaveRequestOut, status_code=201)
@limiter.limit(SUBMIT_LEAVE_LIMIT)
async def apply_leave(
    request: Request,
    body: dict[str, Any] = Body(...),
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave request. Validates fields, date range and annual balance."""
    return await LeaveService.submit_leave(db, profile, body)


# ── GET /balance ────────────────────────────────────────────────────

@router.get("/balance", response_model=LeaveBalanceOut)
async def get_balance(
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Defaults to current year"),
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the authenticated user's annual leave balance."""
    return await LeaveService.get_balance(db, profile.id, year)


# ── GET /history ────────────────────────────────────────────────────

@router.get("/history", response_model=LeaveHistoryOut)
async def get_history(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The authenticated user's requests starting in *year*."""
    return await LeaveService.get_history(db, profile.id, year)


# ── GET /unread-count ───────────────────────────────────────────────

@router.get("/unread-count")
async def unread_count(
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Number of decided requests the owner has not opened yet."""
    count = await LeaveService.get_unread_count(db, profile.id)
    return {"unread_count": count}


# ── PUT /read-all ───────────────────────────────────────────────────

@router.put("/read-all")
async def mark_all_read(
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark all of the authenticated user's requests as read."""
    count = await LeaveService.mark_all_read(db, profile.id)
    return {"updated": count}


# ── PUT /{id}/read ──────────────────────────────────────────────────

@router.put("/{request_id}/read", response_model=LeaveRequestOut)
async def mark_read(
    request_id: uuid.UUID,
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark one of the authenticated user's requests as read."""
    return await LeaveService.mark_read(db, request_id, profile)


# ── GET /requests ───────────────────────────────────────────────────

@router.get("/requests")
async def list_requests(
    status: Optional[str] = Query(None, description='"Semua" or omitted = all'),
    user_id: Optional[uuid.UUID] = Query(None),
    pagination: PaginationParams = Depends(),
    profile: Profile = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    """All leave requests, newest first (admin)."""
    return await LeaveService.list_requests(
        db,
        pagination,
        status=_parse_status_filter(status),
        user_id=user_id,
    )


# ── PUT /{id}/status ────────────────────────────────────────────────

@router.put("/{request_id}/status", response_model=StatusUpdateResult)
async def update_status(
    request_id: uuid.UUID,
    body: LeaveStatusUpdateRequest,
    profile: Profile = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a pending request, then notify the owner by email."""
    return await LeaveService.update_status(db, profile, request_id, body.status)


# ── POST /balances/reconcile ────────────────────────────────────────

@router.post("/balances/reconcile", response_model=ReconcileResult)
async def reconcile_balances(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    profile: Profile = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    """Recompute used_days from approved requests for *year* (admin)."""
    return await LeaveService.reconcile_used_days(db, year)
