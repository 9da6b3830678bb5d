"""
energy.py – Payload builders for the /api/v1/energy_consumption routes.

There is no energy data source yet: every payload here is either zeroed or
mock data shaped like the dashboard expects.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from building_ops.aggregation import (
    direction,
    latest_quarters,
    month_name_th,
    months_of_quarter,
    quarter_key,
    quarter_of,
    round_half_up,
)

from .emission_factors import ECON_TARGET_KWH
from .periods import iso_utc, previous_month_placeholder
from .schemas import EnergyWidgetCard, EnergyWidgetResponse, SolarResponse

BANGKOK = timezone(timedelta(hours=7))

# Mock monthly building consumption (kWh), January → December
MOCK_LAST_YEAR_KWH: tuple[float, ...] = (
    137571, 134294, 146991, 137148, 146681, 133828,
    135507.9, 145008, 138121, 132131.8, 0, 0,
)
MOCK_CURRENT_YEAR_KWH: tuple[float, ...] = (
    113941.4, 121612.1, 135974, 156997.1, 141046.5, 126615,
    65848.5, 148453, 94997.5, 154559, 0, 0,
)

_COMPARE_TO_TH = "จากปีที่แล้ว"


def energy_floors(today: date) -> dict:
    """Per-floor energy for last month; no per-floor source exists yet."""
    return previous_month_placeholder(today)


def latest_four_quarterly(today: date) -> dict:
    """The four quarters ending with today's, oldest first, with zeroed systems."""
    summary = {}
    for q, y in latest_quarters(quarter_of(today.month), today.year, 4):
        summary[quarter_key(q, y)] = {
            "months_included": months_of_quarter(q, y),
            "lighting_system": 0,
            "air_conditioning_system": 0,
            "other_electrical_systems": 0,
        }
    return {"quarterly_summary": summary}


def eui(today: date) -> dict:
    """Energy Use Intensity (kWh ÷ m²) for the current month."""
    building_area_m2 = 0
    total_energy_kwh = 0
    eui_value = total_energy_kwh / building_area_m2 if building_area_m2 > 0 else 0
    return {
        "eui_report": {
            "year": today.year,
            "month_name_th": month_name_th(today.month),
            "building_area_m2": building_area_m2,
            "total_energy_kwh": total_energy_kwh,
            "eui_kwh_per_m2": eui_value,
        }
    }


def _month_start_epoch(year: int, month: int) -> int:
    """Epoch seconds of 00:00 on the 1st of the month, Bangkok time."""
    return int(datetime(year, month, 1, tzinfo=BANGKOK).timestamp())


def yearly_comparison(today: date) -> dict:
    """Mock monthly kWh, this year vs last year, January up to this month."""
    months = []
    for month in range(1, today.month + 1):
        months.append({
            "month_name_th": month_name_th(month),
            "timestamp": _month_start_epoch(today.year, month),
            "last_year_energy_used": round_half_up(MOCK_LAST_YEAR_KWH[month - 1], 1),
            "current_year_energy_used": round_half_up(MOCK_CURRENT_YEAR_KWH[month - 1], 1),
        })
    return {"energy_yearly_comparison": months, "econ": ECON_TARGET_KWH}


def solar() -> SolarResponse:
    return SolarResponse()


def _card(key: str, title_th: str, value_kwh: float, change_percent: float) -> EnergyWidgetCard:
    return EnergyWidgetCard(
        key=key,
        title_th=title_th,
        value_kwh=value_kwh,
        value_display=f"{value_kwh:,.1f}",
        change_percent=change_percent,
        direction=direction(change_percent),
        compare_to_th=_COMPARE_TO_TH,
    )


def widget(now: datetime) -> EnergyWidgetResponse:
    """Three mock dashboard cards: whole building, HVAC and lighting."""
    cards = [
        _card("building", "พลังงานรวมทั้งอาคาร", 1500621.3, 8.5),
        _card("hvac", "พลังงานประเภทระบบปรับอากาศ", 828305.9, 49.0),
        _card("lighting", "พลังงานประเภทระบบแสงสว่าง", 238225.7, 66.1),
    ]
    return EnergyWidgetResponse(updated_at=iso_utc(now), widgets=cards)
