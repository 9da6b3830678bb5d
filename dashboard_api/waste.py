"""
waste.py – Payload builders for the /api/v1/wasted routes.

Each builder takes the cached record list (plus "today" where the payload is
calendar-relative) and returns a JSON-serialisable dict.  None of them fetch.
"""
from __future__ import annotations

import logging
import math
from datetime import date

from building_ops.aggregation import (
    ceil_to,
    direction,
    filter_by_months,
    landfill_waste_of,
    latest_distinct_months,
    latest_quarters,
    max_record_date,
    month_bucket_sums,
    month_key,
    month_label_th,
    percent_change,
    quarter_key,
    quarter_key_of,
    quarter_of,
    record_date,
    round_half_up,
    total_waste_of,
)
from building_ops.cache import CachedRows
from building_ops.records import Record
from building_ops.row_source import is_totals_floor

from .emission_factors import (
    LANDFILL_KG_PER_KG,
    PEOPLE_IN_BUILDING,
    UNIT_COST_WASTED_THB_PER_KG,
)
from .periods import iso_utc, previous_month_key

logger = logging.getLogger(__name__)


def _round_or_none(value: float | None, digits: int) -> float | None:
    return None if value is None else round_half_up(value, digits)


# ─────────────────────────────────────────────────────────────────────────────
# /json
# ─────────────────────────────────────────────────────────────────────────────

def rows_payload(result: CachedRows, ttl_days: float) -> dict:
    """Raw normalised rows with cache metadata."""
    return {
        "count": len(result.records),
        "cached": result.cached,
        "fetched_at": iso_utc(result.fetched_at),
        "ttl_days": ttl_days,
        "rows": [r.to_dict() for r in result.records],
    }


# ─────────────────────────────────────────────────────────────────────────────
# /wasted-latest_four-quarterly
# ─────────────────────────────────────────────────────────────────────────────

def latest_four_quarterly(records: list[Record]) -> dict:
    """
    Per-category waste sums for the four quarters ending at the latest data date.

    Quarters are ordered oldest → newest.  ``months_included`` lists only the
    months of that quarter that actually have rows.
    """
    latest = max_record_date(records)
    if latest is None:
        return {"quarterly_summary": {}}

    quarters = latest_quarters(quarter_of(latest.month), latest.year, 4)
    keys = [quarter_key(q, y) for q, y in quarters]
    acc = {
        key: {
            "months": set(),
            "total_general_waste_kg": 0.0,
            "total_organic_waste_kg": 0.0,
            "total_recycle_waste_kg": 0.0,
            "total_hazardous_waste_kg": 0.0,
            "total_waste_kg": 0.0,
            "total_landfill_waste_kg": 0.0,
        }
        for key in keys
    }

    for r in records:
        d = record_date(r)
        if d is None:
            continue
        bucket = acc.get(quarter_key_of(d))
        if bucket is None:
            continue
        bucket["total_general_waste_kg"] += r.general_waste_kg
        bucket["total_organic_waste_kg"] += r.organic_waste_kg
        bucket["total_recycle_waste_kg"] += r.recycle_waste_kg
        bucket["total_hazardous_waste_kg"] += r.hazardous_waste_kg
        bucket["total_waste_kg"] += total_waste_of(r)
        bucket["total_landfill_waste_kg"] += landfill_waste_of(r)
        bucket["months"].add(month_key(d))

    summary = {}
    for key in keys:
        bucket = acc[key]
        months = bucket.pop("months")
        summary[key] = {"months_included": sorted(months), **bucket}
    return {"quarterly_summary": summary}


# ─────────────────────────────────────────────────────────────────────────────
# /widget
# ─────────────────────────────────────────────────────────────────────────────

def _per_thousand_summary(month_keys: list[str], sums: dict[str, float]) -> list[dict]:
    out = []
    for key in month_keys:
        total = sums.get(key, 0.0)
        out.append({
            "month": key,
            "total_kg": ceil_to(total, 1),
            "computed_value": ceil_to(total / PEOPLE_IN_BUILDING * 1000, 1),
        })
    return out


def _compare_computed(summary: list[dict]) -> dict:
    prev, curr = summary[0], summary[1]
    diff = curr["computed_value"] - prev["computed_value"]
    return {
        "previous_month": prev["month"],
        "current_month": curr["month"],
        "previous_value": prev["computed_value"],
        "current_value": curr["computed_value"],
        "diff": diff,
        "pct_change": _round_or_none(
            percent_change(prev["computed_value"], curr["computed_value"]), 2
        ),
        "direction": direction(diff),
    }


def _compare_total_kg(summary: list[dict]) -> dict:
    # Hazardous compares ceiled kilograms, not the per-1000 value, and
    # reports no diff.
    prev, curr = summary[0], summary[1]
    pct = _round_or_none(percent_change(prev["total_kg"], curr["total_kg"]), 2)
    return {
        "previous_month": prev["month"],
        "current_month": curr["month"],
        "previous_value": prev["total_kg"],
        "current_value": curr["total_kg"],
        "diff": None,
        "pct_change": pct,
        "direction": direction(pct),
    }


def widget(records: list[Record]) -> dict:
    """
    Organic, hazardous and landfill waste per 1000 people for the two latest
    months that have data, with month-over-month comparisons.

    Values are ceiling-rounded to one decimal; percent changes are rounded
    half-up to two decimals.
    """
    months_set = latest_distinct_months(records, 2)
    months = sorted(months_set)
    filtered = filter_by_months(records, months_set)

    payload = {
        "months_used": months,
        "organic_summary": [],
        "hazardous_summary": [],
        "landfill_summary": [],
        "organic_trend": None,
        "hazardous_comparison": None,
        "landfill_comparison": None,
        "total_rows": len(filtered),
    }
    if len(months) < 2:
        return payload

    organic = _per_thousand_summary(
        months, month_bucket_sums(filtered, months, "organic_waste_kg")
    )
    hazardous = _per_thousand_summary(
        months, month_bucket_sums(filtered, months, "hazardous_waste_kg")
    )
    landfill = _per_thousand_summary(
        months, month_bucket_sums(filtered, months, landfill_waste_of)
    )

    payload.update(
        organic_summary=organic,
        hazardous_summary=hazardous,
        landfill_summary=landfill,
        organic_trend=_compare_computed(organic),
        hazardous_comparison=_compare_total_kg(hazardous),
        landfill_comparison=_compare_computed(landfill),
    )
    return payload


# ─────────────────────────────────────────────────────────────────────────────
# /wasted-floors
# ─────────────────────────────────────────────────────────────────────────────

def _floor_sort_key(floor: str) -> tuple:
    try:
        number = float(floor)
    except ValueError:
        return (1, 0.0, floor)
    if not math.isfinite(number):
        return (1, 0.0, floor)
    return (0, number, "")


def _floor_label(raw: str) -> str:
    """Canonical floor label: "01" and "1.0" become "1", names are kept."""
    floor = raw.strip()
    try:
        number = float(floor)
    except ValueError:
        return floor
    if math.isfinite(number) and number.is_integer():
        return str(int(number))
    return floor


def wasted_floors(records: list[Record], today: date) -> dict:
    """
    Total waste per floor for the calendar month before *today*.

    Numeric floors sort first in numeric order, then symbolic floors.  Floor
    "0" (the basement total) is split evenly into B1 and B2, listed first.
    """
    if not records:
        return {"month_used": None, "month_name_th": None, "total_rows": 0, "floors": []}

    key = previous_month_key(today)
    filtered = filter_by_months(records, {key})

    per_floor: dict[str, float] = {}
    for r in filtered:
        floor = _floor_label(r.floor)
        if not floor or is_totals_floor(floor):
            continue
        per_floor[floor] = per_floor.get(floor, 0.0) + total_waste_of(r)

    floors = [
        {"floor": floor, "total_waste_kg": round_half_up(total, 1)}
        for floor, total in sorted(per_floor.items(), key=lambda item: _floor_sort_key(item[0]))
        if floor != "0"
    ]
    if "0" in per_floor:
        half = round_half_up(per_floor["0"] / 2, 1)
        floors = [
            {"floor": "B1", "total_waste_kg": half},
            {"floor": "B2", "total_waste_kg": half},
        ] + floors

    return {
        "month_used": key,
        "month_name_th": month_label_th(key),
        "total_rows": len(filtered),
        "floors": floors,
    }


# ─────────────────────────────────────────────────────────────────────────────
# /recycle-rate
# ─────────────────────────────────────────────────────────────────────────────

def recycle_rate(
    records: list[Record],
    today: date,
    year: int | None = None,
    target: float = 5,
) -> dict:
    """
    Monthly recycle rate (recycle ÷ total waste × 100, rounded to an integer).

    For the current year the series stops at the previous month (January at
    the earliest); other years cover all twelve months.
    """
    if not records:
        return {"RecycleRate": []}

    year = today.year if year is None else year
    end_month = max(1, today.month - 1) if year == today.year else 12
    keys = [f"{year}-{m:02d}" for m in range(1, end_month + 1)]

    recycled = month_bucket_sums(records, keys, "recycle_waste_kg")
    totals = month_bucket_sums(records, keys, total_waste_of)

    series = []
    for month, key in enumerate(keys, start=1):
        total = totals[key]
        percent = recycled[key] / total * 100 if total > 0 else 0.0
        series.append({
            "year": year,
            "month": month,
            "recycle_rate_percent": int(round_half_up(percent, 0)),
            "target": target,
        })
    return {"RecycleRate": series}


# ─────────────────────────────────────────────────────────────────────────────
# /waste-management-information
# ─────────────────────────────────────────────────────────────────────────────

def waste_management_information(records: list[Record]) -> dict:
    """
    Landfill change and disposal-cost change between the last two data months.

    Landfill kilograms go through the fallback-then-sum rollup; the CO2e
    figure applies the landfill factor to the kilogram change.
    """
    present = sorted({month_key(d) for d in (record_date(r) for r in records) if d is not None})
    if len(present) < 2:
        return {"months_used": present, "landfill_rate": None, "cost": None}

    prev_key, curr_key = present[-2:]
    landfill = month_bucket_sums(records, [prev_key, curr_key], landfill_waste_of)
    prev_kg, curr_kg = landfill[prev_key], landfill[curr_key]
    diff_kg = curr_kg - prev_kg

    prev_cost = prev_kg * UNIT_COST_WASTED_THB_PER_KG
    curr_cost = curr_kg * UNIT_COST_WASTED_THB_PER_KG
    change_baht = round_half_up(curr_cost - prev_cost, 1)

    logger.debug("Landfill %s → %s: %.1f → %.1f kg", prev_key, curr_key, prev_kg, curr_kg)

    return {
        "months_used": [prev_key, curr_key],
        "previous_month_name": month_label_th(prev_key),
        "current_month_name": month_label_th(curr_key),
        "landfill_rate": {
            "change_kg": round_half_up(diff_kg, 1),
            "wasted_kgco2e": round_half_up(diff_kg * LANDFILL_KG_PER_KG, 1),
            "percent_change": _round_or_none(percent_change(prev_kg, curr_kg), 1),
            "direction_kg": direction(diff_kg),
        },
        "cost": {
            "change_baht": change_baht,
            "percent_change": _round_or_none(percent_change(prev_cost, curr_cost), 1),
            "unit_cost_per_kg": UNIT_COST_WASTED_THB_PER_KG,
            "direction": direction(change_baht),
        },
    }
