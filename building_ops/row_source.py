"""
row_source.py – Fetch waste/carbon rows from a Google Sheet CSV export.

Steps:
  1. Build the export URL from the sheet id (and optional tab gid).
  2. GET the CSV text; any non-2xx response is a SheetFetchError.
  3. Parse the CSV, rename Thai column headers to canonical field names.
  4. Normalise dates (D/M/YYYY → YYYY-MM-DD) and numbers ("1,406.75" → 1406.75).
  5. Drop rows whose floor is the "all floors" sentinel and fully blank rows.
  6. Optionally keep only one month/year.

Uses SHEET_ID from the environment (.env) when no sheet id is passed.
Nothing here touches shared state; caching lives in cache.py.
"""
from __future__ import annotations

import logging
from typing import Iterable

import httpx

from building_ops.aggregation import record_date
from building_ops.config import get_config
from building_ops.constants import (
    COLUMN_MAP,
    NUMERIC_FIELDS,
    SHEET_EXPORT_URL,
    TOTALS_FLOOR_EN,
    TOTALS_FLOOR_TH,
)
from building_ops.parsing import parse_csv, parse_number_lenient, to_iso_date
from building_ops.records import Record

logger = logging.getLogger(__name__)

_CANONICAL_FIELDS = frozenset(("date", "submitted_by", "floor") + NUMERIC_FIELDS)


class RowSourceError(RuntimeError):
    """Base class for request-level row source failures."""


class SheetConfigError(RowSourceError):
    """No sheet id was supplied and SHEET_ID is not set."""


class SheetFetchError(RowSourceError):
    """The spreadsheet export returned a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Google Sheet error: {status_code}")
        self.status_code = status_code


# ─────────────────────────────────────────────────────────────────────────────
# Fetch
# ─────────────────────────────────────────────────────────────────────────────

def resolve_sheet_id(sheet_id: str | None = None) -> str:
    """Return *sheet_id* or SHEET_ID from the environment; raise if neither is set."""
    sid = sheet_id or get_config().sheet_id
    if not sid:
        raise SheetConfigError("Missing SHEET_ID")
    return sid


def sheet_csv_url(sheet_id: str, gid: str | int | None = None) -> str:
    base = SHEET_EXPORT_URL.format(sheet_id=sheet_id)
    return f"{base}&gid={gid}" if gid else base


def fetch_sheet_csv(
    sheet_id: str,
    gid: str | int | None = None,
    client: httpx.Client | None = None,
) -> str:
    """
    Download the CSV export of one sheet tab and return its text.

    Parameters
    ----------
    sheet_id:
        Google Sheet id.
    gid:
        Tab id; the first tab is exported when omitted.
    client:
        Optional httpx client (tests pass one backed by MockTransport).

    Raises
    ------
    SheetFetchError
        If the response status is not 2xx.
    """
    url = sheet_csv_url(sheet_id, gid)
    if client is None:
        timeout = get_config().http_timeout_seconds
        with httpx.Client(timeout=timeout, follow_redirects=True) as own_client:
            resp = own_client.get(url)
    else:
        resp = client.get(url)
    if not resp.is_success:
        raise SheetFetchError(resp.status_code)
    return resp.text


# ─────────────────────────────────────────────────────────────────────────────
# Normalisation
# ─────────────────────────────────────────────────────────────────────────────

def is_totals_floor(raw_floor: str) -> bool:
    floor = raw_floor.strip()
    return floor == TOTALS_FLOOR_TH or floor.upper() == TOTALS_FLOOR_EN


def normalize_row(raw: dict[str, str]) -> Record | None:
    """
    Map one raw CSV row to a Record.

    Returns None for "all floors" total rows and for fully blank rows.
    """
    canonical: dict[str, str] = {}
    extra: dict[str, str] = {}
    for key, value in raw.items():
        name = COLUMN_MAP.get(key, key)
        if name in _CANONICAL_FIELDS:
            canonical[name] = value
        else:
            extra[name] = value

    floor = str(canonical.get("floor") or "").strip()
    if is_totals_floor(floor):
        return None

    record = Record(
        date=to_iso_date(canonical.get("date")),
        submitted_by=str(canonical.get("submitted_by") or "").strip(),
        floor=floor,
        extra=extra,
    )
    for name in NUMERIC_FIELDS:
        if name in canonical:
            setattr(record, name, parse_number_lenient(canonical[name]))

    if record.is_blank():
        return None
    return record


def normalize_rows(raw_rows: Iterable[dict[str, str]]) -> list[Record]:
    records = []
    for raw in raw_rows:
        record = normalize_row(raw)
        if record is None:
            logger.debug("Dropped total/blank row: %s", raw)
            continue
        records.append(record)
    return records


def filter_by_month(
    records: list[Record],
    month: int | str | None = None,
    year: int | str | None = None,
) -> list[Record]:
    """
    Keep only records dated in *month*/*year*; a copy of *records* unless
    both are given.  A month or year that is not an integer matches nothing.
    """
    if not month or not year:
        return list(records)
    try:
        month, year = int(month), int(year)
    except ValueError:
        return []
    kept = []
    for record in records:
        d = record_date(record)
        if d is not None and d.month == month and d.year == year:
            kept.append(record)
    return kept


# ─────────────────────────────────────────────────────────────────────────────
# Public entry point
# ─────────────────────────────────────────────────────────────────────────────

def fetch_rows(
    sheet_id: str | None = None,
    gid: str | int | None = None,
    month: int | str | None = None,
    year: int | str | None = None,
    client: httpx.Client | None = None,
) -> list[Record]:
    """
    Fetch, normalise and optionally month-filter the rows of one sheet tab.

    Raises
    ------
    SheetConfigError
        If no sheet id is available.
    SheetFetchError
        If the export request fails.
    """
    sid = resolve_sheet_id(sheet_id)
    text = fetch_sheet_csv(sid, gid, client=client)
    raw_rows = parse_csv(text)
    records = filter_by_month(normalize_rows(raw_rows), month, year)
    logger.info(
        "Fetched sheet %s (gid=%s): %d raw rows, %d records",
        sid, gid or "default", len(raw_rows), len(records),
    )
    return records
