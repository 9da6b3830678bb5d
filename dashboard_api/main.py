"""
main.py – FastAPI dashboard API for building operations (energy, waste,
carbon footprint, indoor air quality).

Start:
    cd /path/to/repo
    python -m dashboard_api                       # HOST / PORT from .env
    uvicorn dashboard_api.main:app --reload --port 3000

Waste and carbon routes read the Google Sheet named by SHEET_ID through an
in-memory cache (CACHE_TTL_DAYS, default 30); energy and IAQ routes are mock.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from building_ops.cache import RowCache
from building_ops.config import Config, get_config

from . import carbon, energy, iaq, report, waste
from .deps import SheetTab, get_row_cache, get_settings
from .schemas import (
    EnergyWidgetResponse,
    HealthResponse,
    IaqResponse,
    SolarResponse,
    WastedRowsResponse,
)

logger = logging.getLogger(__name__)


async def warm_cache(cache: RowCache, gid: str | None, timeout: float) -> bool:
    """
    Fetch the default tab once so the first request is served from cache.

    Returns False (and logs a warning) when the fetch fails or takes longer
    than *timeout* seconds; the server starts either way.
    """
    try:
        await asyncio.wait_for(
            asyncio.to_thread(cache.get_rows, None, gid),
            timeout=timeout,
        )
    except Exception as exc:
        reason = str(exc) or type(exc).__name__
        logger.warning("Cache warm-up failed: %s -> continuing without cache", reason)
        return False
    logger.info("Initial sheet fetch complete")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the row cache and warm it before serving."""
    config = get_config()
    app.state.config = config
    app.state.row_cache = RowCache(ttl_seconds=config.cache_ttl_seconds)
    logger.info("Fetching initial sheet data (cache TTL %s days)", config.cache_ttl_days)
    await warm_cache(app.state.row_cache, config.sheet_gid, config.warmup_timeout_seconds)
    yield


app = FastAPI(
    title="Building Operations – Dashboard API",
    version="1.0.0",
    description="Energy, waste, carbon-footprint and air-quality data for the building dashboard.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _server_error(route: str, exc: Exception) -> HTTPException:
    logger.error("[%s] %s", route, exc)
    return HTTPException(status_code=500, detail=str(exc))


@app.get("/healthz", summary="Liveness check", response_model=HealthResponse)
def healthz():
    return HealthResponse()


# ─────────────────────────────────────────────────────────────────────────────
# Waste
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/api/v1/wasted/json", summary="Normalised sheet rows", response_model=WastedRowsResponse)
def wasted_json(
    month: str | None = None,
    year: str | None = None,
    tab: SheetTab = Depends(),
    cache: RowCache = Depends(get_row_cache),
    settings: Config = Depends(get_settings),
):
    """
    Returns count, cached, fetched_at, ttl_days and rows.
    ``month`` and ``year`` filter the rows only when both are given; a
    non-integer value matches no rows.
    """
    try:
        result = cache.get_rows(tab.sheet_id, tab.gid, month=month, year=year)
        return waste.rows_payload(result, settings.cache_ttl_days)
    except Exception as exc:
        raise _server_error("wasted/json", exc) from exc


@app.get("/api/v1/wasted/wasted-latest_four-quarterly", summary="Waste by type, last four quarters")
def wasted_latest_four_quarterly(
    tab: SheetTab = Depends(),
    cache: RowCache = Depends(get_row_cache),
):
    """
    Returns {quarterly_summary: {"Qn/YYYY": {months_included, total_*_kg}}}
    for the four quarters ending at the latest data date, oldest first.
    """
    try:
        return waste.latest_four_quarterly(cache.get_rows(tab.sheet_id, tab.gid).records)
    except Exception as exc:
        raise _server_error("wasted-latest_four-quarterly", exc) from exc


@app.get("/api/v1/wasted/widget", summary="Waste per 1000 people, last two data months")
def wasted_widget(
    tab: SheetTab = Depends(),
    cache: RowCache = Depends(get_row_cache),
):
    """
    Returns organic / hazardous / landfill summaries per 1000 people with
    month-over-month comparisons.
    """
    try:
        return waste.widget(cache.get_rows(tab.sheet_id, tab.gid).records)
    except Exception as exc:
        raise _server_error("wasted/widget", exc) from exc


@app.get("/api/v1/wasted/wasted-floors", summary="Waste by floor, previous month")
def wasted_floors(
    tab: SheetTab = Depends(),
    cache: RowCache = Depends(get_row_cache),
):
    """
    Returns month_used, month_name_th, total_rows and [{floor, total_waste_kg}].
    Floor "0" is reported as B1 and B2.
    """
    try:
        return waste.wasted_floors(cache.get_rows(tab.sheet_id, tab.gid).records, date.today())
    except Exception as exc:
        raise _server_error("wasted-floors", exc) from exc


@app.get("/api/v1/wasted/recycle-rate", summary="Monthly recycle rate for a year")
def wasted_recycle_rate(
    year: int | None = None,
    target: float = 5,
    tab: SheetTab = Depends(),
    cache: RowCache = Depends(get_row_cache),
):
    """
    Returns {RecycleRate: [{year, month, recycle_rate_percent, target}]}.
    ``year`` defaults to the current year; ``target`` is a percentage.
    """
    try:
        records = cache.get_rows(tab.sheet_id, tab.gid).records
        return waste.recycle_rate(records, date.today(), year=year, target=target)
    except Exception as exc:
        raise _server_error("recycle-rate", exc) from exc


@app.get("/api/v1/wasted/waste-management-information", summary="Landfill and disposal cost change")
def wasted_management_information(
    tab: SheetTab = Depends(),
    cache: RowCache = Depends(get_row_cache),
):
    """Returns landfill_rate and cost blocks comparing the last two data months."""
    try:
        return waste.waste_management_information(cache.get_rows(tab.sheet_id, tab.gid).records)
    except Exception as exc:
        raise _server_error("waste-management-information", exc) from exc


# ─────────────────────────────────────────────────────────────────────────────
# Carbon footprint
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/api/v1/carbon-footprint/carbonfootpint-floors", summary="Carbon by floor (placeholder)")
def carbon_floors():
    try:
        return carbon.carbon_floors(date.today())
    except Exception as exc:
        raise _server_error("carbonfootpint-floors", exc) from exc


@app.get("/api/v1/carbon-footprint/monthly-printing", summary="Monthly carbon emission, last 12 months")
def carbon_monthly_printing(
    tab: SheetTab = Depends(),
    cache: RowCache = Depends(get_row_cache),
):
    """Returns emission_factors and monthly_emission_report (oldest first)."""
    try:
        return carbon.monthly_printing(cache.get_rows(tab.sheet_id, tab.gid).records, date.today())
    except Exception as exc:
        raise _server_error("monthly-printing", exc) from exc


@app.get("/api/v1/carbon-footprint/carbon-reduction-info", summary="Carbon change vs previous month")
def carbon_reduction_info(
    tab: SheetTab = Depends(),
    cache: RowCache = Depends(get_row_cache),
):
    """Returns period, carbon_emission_rate and trees_replacement_equivalent."""
    try:
        return carbon.carbon_reduction_info(cache.get_rows(tab.sheet_id, tab.gid).records, date.today())
    except Exception as exc:
        raise _server_error("carbon-reduction-info", exc) from exc


# ─────────────────────────────────────────────────────────────────────────────
# Energy (mock)
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/api/v1/energy_consumption/energy-floors", summary="Energy by floor (placeholder)")
def energy_floors():
    try:
        return energy.energy_floors(date.today())
    except Exception as exc:
        raise _server_error("energy-floors", exc) from exc


@app.get("/api/v1/energy_consumption/energy-latest_four-quarterly", summary="Energy by system, last four quarters")
def energy_latest_four_quarterly():
    try:
        return energy.latest_four_quarterly(date.today())
    except Exception as exc:
        raise _server_error("energy-latest_four-quarterly", exc) from exc


@app.get("/api/v1/energy_consumption/energy-eui", summary="Energy use intensity, current month")
def energy_eui():
    try:
        return energy.eui(date.today())
    except Exception as exc:
        raise _server_error("energy-eui", exc) from exc


@app.get("/api/v1/energy_consumption/energy-yearly-comparison", summary="Monthly energy, this year vs last")
def energy_yearly_comparison():
    """Returns energy_yearly_comparison (January to this month) and the econ target."""
    try:
        return energy.yearly_comparison(date.today())
    except Exception as exc:
        raise _server_error("energy-yearly-comparison", exc) from exc


@app.get("/api/v1/energy_consumption/energy-solar", summary="Solar generation (placeholder)", response_model=SolarResponse)
def energy_solar():
    return energy.solar()


@app.get("/api/v1/energy_consumption/widget", summary="Energy dashboard cards", response_model=EnergyWidgetResponse)
def energy_widget():
    try:
        return energy.widget(datetime.now(timezone.utc))
    except Exception as exc:
        raise _server_error("energy/widget", exc) from exc


# ─────────────────────────────────────────────────────────────────────────────
# Indoor air quality (mock)
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/api/v1/IAQ/iaq/current", summary="Current indoor air quality", response_model=IaqResponse)
def iaq_current():
    try:
        return iaq.current(datetime.now(timezone.utc))
    except Exception as exc:
        raise _server_error("iaq/current", exc) from exc


# ─────────────────────────────────────────────────────────────────────────────
# Report
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/api/v1/report/generate-full-report", summary="Monthly report as PDF")
def generate_full_report():
    """Renders the multi-page A4 monthly report and returns it inline."""
    try:
        pdf = report.build_full_report()
    except Exception as exc:
        raise _server_error("generate-full-report", exc) from exc
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": 'inline; filename="monthly_report.pdf"'},
    )
