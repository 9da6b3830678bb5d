"""
periods.py – Calendar helpers relative to "today" for the dashboard payloads.

Payload builders take ``today`` / ``now`` as arguments so route handlers pass
the wall clock and tests pass fixed dates.
"""
from __future__ import annotations

from datetime import date, datetime, timezone

from building_ops.aggregation import month_label_th, previous_month


def previous_month_key(today: date) -> str:
    """Month key of the calendar month before *today*'s, e.g. 2025-10-17 → "2025-09"."""
    year, month = previous_month(today.year, today.month)
    return f"{year}-{month:02d}"


def current_month_key(today: date) -> str:
    return f"{today.year}-{today.month:02d}"


def previous_month_placeholder(today: date) -> dict:
    """Per-floor payload for a metric that has no per-floor data source yet."""
    key = previous_month_key(today)
    return {
        "month_used": key,
        "month_name_th": month_label_th(key),
        "total_rows": 0,
        "floors": [],
    }


def iso_utc(moment: datetime | float) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing "Z"."""
    if not isinstance(moment, datetime):
        moment = datetime.fromtimestamp(moment, tz=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
