"""Generic query filtering and sorting utilities."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Select, and_
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
    * Unknown columns are ignored.
    """
    if not sort:
        return query

    descending = sort.startswith("-")
    col = _get_column(model, sort.lstrip("-"))
    if col is None:
        return query
    return query.order_by(col.desc() if descending else col.asc())


# ── Generic filtering ──────────────────────────────────────────────

def apply_filters(
    query: Select,
    model: Any,
    filters: dict[str, Any],
) -> Select:
    """
    Apply ``column == value`` for each entry of *filters*.

    ``None`` values are skipped; unknown columns are ignored.
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


# ── Internal helper ─────────────────────────────────────────────────

def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    """Safely retrieve a mapped column attribute by name."""
    return getattr(model, name, None)
