"""
schemas.py – Pydantic response models for the fixed-shape dashboard payloads.

Aggregated waste/carbon payloads are plain dicts built in waste.py and
carbon.py; only the mock and metadata payloads, whose shapes never vary,
are modelled here.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


# ─────────────────────────────────────────────────────────────
# Health / rows
# ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    ok: bool = True


class WastedRowsResponse(BaseModel):
    """Normalised sheet rows with cache metadata."""

    count: int = Field(..., description="Number of rows returned")
    cached: bool = Field(..., description="True when served from the in-memory cache")
    fetched_at: str = Field(..., description="UTC ISO-8601 time of the underlying fetch")
    ttl_days: float = Field(..., description="Cache time-to-live in days")
    rows: list[dict[str, Any]] = Field(default_factory=list)


# ─────────────────────────────────────────────────────────────
# Energy
# ─────────────────────────────────────────────────────────────

class EnergyWidgetCard(BaseModel):
    """One summary card on the energy dashboard."""

    key: Literal["building", "hvac", "lighting"]
    title_th: str
    value_kwh: float
    value_display: str = Field(..., description="value_kwh with thousands separators")
    unit: str = "kWh"
    change_percent: float
    direction: Literal["up", "down", "flat"]
    compare_to_th: str


class EnergyWidgetResponse(BaseModel):
    updated_at: str
    widgets: list[EnergyWidgetCard]


class SolarResponse(BaseModel):
    solar_energy_generated_kwh: float = 0
    solar_energy_unit: str = "kWh"
    current_month: str = ""


# ─────────────────────────────────────────────────────────────
# Indoor air quality
# ─────────────────────────────────────────────────────────────

class IaqWeather(BaseModel):
    label_th: str
    temperature_c: float
    condition: Literal["sunny", "cloudy", "rainy"]


class IaqReading(BaseModel):
    """A concentration reading (PM2.5, PM10, CO2)."""

    label_th: str
    value: float
    unit: str
    status: str


class IaqHumidity(BaseModel):
    label_th: str
    value_percent: float
    unit: str = "%"
    status: str


class IaqVoc(BaseModel):
    label_th: str
    value_ppb: float
    unit: str = "ppb"
    status: str


class IaqResponse(BaseModel):
    weather: IaqWeather
    pm25: IaqReading
    pm10: IaqReading
    co2: IaqReading
    humidity: IaqHumidity
    voc: IaqVoc
    updated_at: str
