"""Generic filtering, sorting, and search utilities."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import Select, String, and_, cast, or_
from sqlalchemy.orm import InstrumentedAttribute


# ── Sorting ─────────────────────────────────────────────────────────

def apply_sorting(
    query: Select,
    model: Any,
    sort: Optional[str],
) -> Select:
    """
    Parse a sort string like ``"-created_at"`` and apply ORDER BY.

    * Leading ``-`` → DESC; otherwise ASC.
    * Unknown columns are ignored; the query keeps its existing order.
    * An explicit sort replaces any ORDER BY already on the query.
    """
    if not sort:
        return query

    descending = sort.startswith("-")
    col = _get_column(model, sort.lstrip("-"))
    if col is None:
        return query

    return query.order_by(None).order_by(col.desc() if descending else col.asc())


# ── Generic filtering ──────────────────────────────────────────────

def apply_filters(
    query: Select,
    model: Any,
    filters: dict[str, Any],
) -> Select:
    """
    AND together ``column == value`` for each entry in *filters*.

    ``None`` values and unknown column names are skipped.
    """
    conditions: list = []

    for key, value in filters.items():
        if value is None:
            continue
        col = _get_column(model, key)
        if col is not None:
            conditions.append(col == value)

    if conditions:
        query = query.where(and_(*conditions))

    return query


# ── Search ──────────────────────────────────────────────────────────

def apply_search(
    query: Select,
    model: Any,
    search: Optional[str],
    columns: Sequence[str],
) -> Select:
    """
    Keep rows where any of *columns* contains *search* (case-insensitive).

    Blank searches leave the query untouched.
    """
    if not search or not search.strip():
        return query

    term = f"%{search.strip()}%"
    like_conds = [
        cast(col, String).ilike(term)
        for col in (_get_column(model, name) for name in columns)
        if col is not None
    ]
    if not like_conds:
        return query

    return query.where(or_(*like_conds))


# ── Internal helper ─────────────────────────────────────────────────

def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    """Safely retrieve a mapped column attribute by name."""
    return getattr(model, name, None)
