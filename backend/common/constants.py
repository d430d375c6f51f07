"""Enums and constants for SIAP CUTI — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    admin = "admin"
    member = "anggota"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "Menunggu"
    approved = "Disetujui"
    rejected = "Ditolak"


TERMINAL_LEAVE_STATUSES = frozenset({LeaveStatus.approved, LeaveStatus.rejected})

# Query-string value meaning "no status filter" on the admin request list
ALL_STATUSES = "Semua"


class NotificationOutcome(str, enum.Enum):
    sent = "sent"
    skipped_unconfigured = "skipped_unconfigured"
    failed = "failed"
    not_attempted = "not_attempted"


# ── Localized calendar names (id_ID) ────────────────────────────────

MONTH_NAMES_ID = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]

# date.weekday(): Monday == 0
DAY_NAMES_ID = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]


# ── Misc constants ──────────────────────────────────────────────────

RECENT_ACTIVITY_LIMIT = 5
MONTHLY_STATS_WINDOW = 6
REPORT_YEARS_BACK = 2
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10
