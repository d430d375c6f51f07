"""Calendar helpers: app-local today, month arithmetic, Indonesian formatting."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from backend.common.constants import DAY_NAMES_ID, MONTH_NAMES_ID
from backend.config import settings


def app_today() -> date:
    """Current date in the application timezone (Asia/Jakarta by default)."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


def inclusive_days(start: date, end: date) -> int:
    """Inclusive day count: the same start and end date is one day."""
    return (end - start).days + 1


def month_start(d: date) -> date:
    return d.replace(day=1)


def shift_month(d: date, months: int) -> date:
    """First day of the month *months* away from *d* (negative goes back)."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def start_of_day(d: date) -> datetime:
    """Midnight of *d* in the application timezone, expressed in UTC."""
    local = datetime.combine(d, time.min, tzinfo=ZoneInfo(settings.TIMEZONE))
    return local.astimezone(timezone.utc)


def to_app_date(value: datetime) -> date:
    """Calendar date of a stored timestamp in the application timezone.

    Naive values (SQLite drops tzinfo) are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(settings.TIMEZONE)).date()


def month_label_id(d: date) -> str:
    return MONTH_NAMES_ID[d.month - 1]


def format_date_id(d: date) -> str:
    """``Senin, 10 Juni 2024``."""
    return f"{DAY_NAMES_ID[d.weekday()]}, {d.day} {MONTH_NAMES_ID[d.month - 1]} {d.year}"
