"""
aggregation.py – Month/quarter bucketing and change metrics over Records.

Every function here is pure: it reads the records it is given and returns a
new value.  Route payload builders in dashboard_api compose these.

Period keys
────────────
 Month     "YYYY-MM"    e.g. "2025-06"
 Quarter   "Qn/YYYY"    e.g. "Q3/2025"   (n = (month - 1) // 3 + 1)

Rollup rule
────────────
 A total-like field (total_waste_kg, landfill_waste_kg) is used as-is when it
 is > 0, otherwise it is rebuilt from its component categories.  Always go
 through resolve_total() so every endpoint agrees.

Rounding
────────
 round_half_up(x, 1)  presentation values
 ceil_to(x, 1)        per-person / per-1000 widget values
"""
from __future__ import annotations

import math
from datetime import date
from typing import Callable, Iterable

from building_ops.constants import (
    BUDDHIST_ERA_OFFSET,
    LANDFILL_WASTE_COMPONENTS,
    LATEST_MONTHS_MAX_STEPS,
    MONTH_NAMES_TH,
    TOTAL_WASTE_COMPONENTS,
)
from building_ops.records import Record

ValueGetter = Callable[[Record], float]


# ─────────────────────────────────────────────────────────────────────────────
# Dates and month keys
# ─────────────────────────────────────────────────────────────────────────────

def record_date(record: Record) -> date | None:
    """Return the record's date, or None when it is blank or not ISO formatted."""
    if not record.date:
        return None
    try:
        return date.fromisoformat(record.date)
    except ValueError:
        return None


def month_key(d: date) -> str:
    return f"{d.year}-{d.month:02d}"


def parse_month_key(key: str) -> tuple[int, int]:
    """``"2025-06"`` → ``(2025, 6)``."""
    year, month = key.split("-")
    return int(year), int(month)


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month > 1:
        return year, month - 1
    return year - 1, 12


def month_keys_back(today: date, count: int) -> list[str]:
    """The *count* calendar months ending with *today*'s month, oldest first."""
    keys = []
    year, month = today.year, today.month
    for _ in range(count):
        keys.append(f"{year}-{month:02d}")
        year, month = previous_month(year, month)
    return list(reversed(keys))


def month_name_th(month: int) -> str:
    return MONTH_NAMES_TH[month - 1]


def month_label_th(key: str) -> str:
    """``"2025-09"`` → ``"กันยายน 2568"`` (Buddhist-era year)."""
    year, month = parse_month_key(key)
    return f"{month_name_th(month)} {year + BUDDHIST_ERA_OFFSET}"


def max_record_date(records: Iterable[Record]) -> date | None:
    dates = [d for d in (record_date(r) for r in records) if d is not None]
    return max(dates) if dates else None


# ─────────────────────────────────────────────────────────────────────────────
# Month buckets
# ─────────────────────────────────────────────────────────────────────────────

def _getter(value: str | ValueGetter) -> ValueGetter:
    if callable(value):
        return value
    return lambda record: record.value(value)


def month_bucket_sums(
    records: Iterable[Record],
    month_keys: Iterable[str],
    value: str | ValueGetter,
) -> dict[str, float]:
    """
    Sum *value* per month for the requested month keys.

    Parameters
    ----------
    records:
        Records to aggregate; undated records are ignored.
    month_keys:
        ``"YYYY-MM"`` keys of interest.  Every key appears in the result,
        with 0.0 when no record falls in that month.
    value:
        A numeric field name or a callable returning the value of a record.

    Returns
    -------
    dict[str, float]
        Ordered like *month_keys*.
    """
    get = _getter(value)
    sums = {key: 0.0 for key in month_keys}
    for record in records:
        d = record_date(record)
        if d is None:
            continue
        key = month_key(d)
        if key in sums:
            sums[key] += get(record)
    return sums


def latest_distinct_months(
    records: Iterable[Record],
    count: int = 2,
    max_steps: int = LATEST_MONTHS_MAX_STEPS,
) -> set[str]:
    """
    Collect up to *count* most recent months that actually have data.

    Starts at the month of the latest record date and walks backwards one
    calendar month at a time, at most *max_steps* steps, so gaps in the data
    are skipped.  Returns fewer keys when history is short.
    """
    present: set[str] = set()
    latest: date | None = None
    for record in records:
        d = record_date(record)
        if d is None:
            continue
        present.add(month_key(d))
        if latest is None or d > latest:
            latest = d

    wanted: set[str] = set()
    if latest is None:
        return wanted
    year, month = latest.year, latest.month
    for _ in range(max_steps):
        if len(wanted) >= count:
            break
        key = f"{year}-{month:02d}"
        if key in present:
            wanted.add(key)
        year, month = previous_month(year, month)
    return wanted


def filter_by_months(records: Iterable[Record], months: set[str] | frozenset[str]) -> list[Record]:
    """Keep records whose month key is in *months* (empty set → empty list)."""
    if not months:
        return []
    kept = []
    for record in records:
        d = record_date(record)
        if d is not None and month_key(d) in months:
            kept.append(record)
    return kept


# ─────────────────────────────────────────────────────────────────────────────
# Quarters
# ─────────────────────────────────────────────────────────────────────────────

def quarter_of(month: int) -> int:
    return (month - 1) // 3 + 1


def quarter_key(quarter: int, year: int) -> str:
    return f"Q{quarter}/{year}"


def quarter_key_of(d: date) -> str:
    return quarter_key(quarter_of(d.month), d.year)


def previous_quarter(quarter: int, year: int) -> tuple[int, int]:
    if quarter > 1:
        return quarter - 1, year
    return 4, year - 1


def latest_quarters(quarter: int, year: int, count: int = 4) -> list[tuple[int, int]]:
    """*count* quarters ending with (quarter, year), oldest first."""
    out = [(quarter, year)]
    while len(out) < count:
        out.append(previous_quarter(*out[-1]))
    return list(reversed(out))


def months_of_quarter(quarter: int, year: int) -> list[str]:
    first = (quarter - 1) * 3 + 1
    return [f"{year}-{m:02d}" for m in range(first, first + 3)]


# ─────────────────────────────────────────────────────────────────────────────
# Change metrics and rounding
# ─────────────────────────────────────────────────────────────────────────────

def percent_change(previous: float, current: float) -> float | None:
    """(current - previous) / previous × 100, or None when previous is exactly 0."""
    if previous == 0:
        return None
    return (current - previous) / previous * 100


def direction(delta: float | None) -> str:
    if delta is not None and delta > 0:
        return "up"
    if delta is not None and delta < 0:
        return "down"
    return "flat"


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def ceil_to(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.ceil(value * factor) / factor


# ─────────────────────────────────────────────────────────────────────────────
# Fallback-then-sum rollups
# ─────────────────────────────────────────────────────────────────────────────

def resolve_total(explicit_total: float, components: Iterable[float]) -> float:
    """Use *explicit_total* when it is > 0, otherwise the sum of *components*."""
    if explicit_total > 0:
        return explicit_total
    return sum(components)


def total_waste_of(record: Record) -> float:
    return resolve_total(
        record.total_waste_kg,
        (record.value(f) for f in TOTAL_WASTE_COMPONENTS),
    )


def landfill_waste_of(record: Record) -> float:
    return resolve_total(
        record.landfill_waste_kg,
        (record.value(f) for f in LANDFILL_WASTE_COMPONENTS),
    )
