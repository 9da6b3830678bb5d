"""
carbon.py – Payload builders for the /api/v1/carbon-footprint routes.
"""
from __future__ import annotations

from datetime import date

from building_ops.aggregation import (
    direction,
    month_bucket_sums,
    month_keys_back,
    month_label_th,
    month_name_th,
    parse_month_key,
    percent_change,
    round_half_up,
)
from building_ops.records import Record

from .emission_factors import (
    TREE_ABSORPTION_KG,
    TREE_REFERENCE,
    emission_factors_payload,
)
from .periods import current_month_key, previous_month_key, previous_month_placeholder


def carbon_floors(today: date) -> dict:
    """Per-floor carbon for last month; no per-floor source exists yet."""
    return previous_month_placeholder(today)


def monthly_printing(records: list[Record], today: date) -> dict:
    """
    Carbon emission per month for the 12 calendar months ending this month,
    oldest first, plus the emission factors used by the printed report.

    Energy emission is reported as 0 until an energy data source exists.
    """
    if not records:
        return {"monthly_emission_report": [], "emission_factors": emission_factors_payload()}

    keys = month_keys_back(today, 12)
    sums = month_bucket_sums(records, keys, "carbon_emission_kgco2e")

    report = []
    for key in keys:
        year, month = parse_month_key(key)
        report.append({
            "month_name_th": month_name_th(month),
            "year": year,
            "carbon_emission_kgco2e": round_half_up(sums[key], 1),
            "energy_emission_kgco2e": 0,
        })
    return {"emission_factors": emission_factors_payload(), "monthly_emission_report": report}


def carbon_reduction_info(records: list[Record], today: date) -> dict:
    """
    Carbon change between this calendar month and the previous one.

    Months without rows count as 0.  ``trees_equivalent`` is the absolute
    change divided by the per-tree absorption factor.
    """
    prev_key, curr_key = previous_month_key(today), current_month_key(today)
    sums = month_bucket_sums(records, [prev_key, curr_key], "carbon_emission_kgco2e")
    prev_carbon, curr_carbon = sums[prev_key], sums[curr_key]

    change = round_half_up(curr_carbon - prev_carbon, 1)
    pct = percent_change(prev_carbon, curr_carbon)

    return {
        "period": {
            "months_used": [prev_key, curr_key],
            "previous_month_name_th": month_label_th(prev_key),
            "current_month_name_th": month_label_th(curr_key),
            "previous_month_carbon_kgco2e": round_half_up(prev_carbon, 1),
            "current_month_carbon_kgco2e": round_half_up(curr_carbon, 1),
        },
        "carbon_emission_rate": {
            "change_kgco2e": change,
            "percent_change": None if pct is None else round_half_up(pct, 1),
            "direction": direction(change),
        },
        "trees_replacement_equivalent": {
            "trees_equivalent": round_half_up(abs(change) / TREE_ABSORPTION_KG, 1),
            "per_tree_factor_kgco2e": TREE_ABSORPTION_KG,
            "reference": TREE_REFERENCE,
        },
    }
