"""
parsing.py – Lenient cell parsing for spreadsheet exports.

Normalisation rules
-------------------
* Numbers: strip thousands separators and whitespace, parse as float.
  ``parse_number_lenient`` turns anything unparseable or non-finite into 0.0;
  ``parse_number_strict`` raises ``ValueError`` instead.
* Dates: ``D/M/YYYY`` → ``YYYY-MM-DD``.  Out-of-range days and months roll
  over into the following month/year (``31/02/2025`` → ``2025-03-03``).
  Anything that is not three integer components is returned unchanged.
* CSV: the first non-blank row is the header; later rows are labelled
  positionally.  Quoted values may contain commas (``"1,406.75"``).

Row-level problems never raise here – the caller decides what to drop.
"""
from __future__ import annotations

import csv
import io
import math
from datetime import date
from typing import Any

from dateutil.relativedelta import relativedelta


# ─────────────────────────────────────────────────────────────
# Numbers
# ─────────────────────────────────────────────────────────────

def _to_finite_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = str(value).replace(",", "").strip()
        if not cleaned or "_" in cleaned:
            raise ValueError(f"not a number: {value!r}")
        number = float(cleaned)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


def parse_number_strict(value: Any) -> float:
    """
    Parse *value* as a float, accepting comma-grouped strings like ``"1,406.75"``.

    Raises
    ------
    ValueError
        If *value* is blank, unparseable, or not finite.
    """
    return _to_finite_float(value)


def parse_number_lenient(value: Any) -> float:
    """Parse *value* like ``parse_number_strict`` but return 0.0 on any failure."""
    try:
        return _to_finite_float(value)
    except ValueError:
        return 0.0


# ─────────────────────────────────────────────────────────────
# Dates
# ─────────────────────────────────────────────────────────────

def to_iso_date(value: str | None) -> str:
    """
    Convert a ``D/M/YYYY`` string to ``YYYY-MM-DD``.

    Returns ``""`` for empty input and the original string when it does not
    hold three integer components or the result falls outside the calendar.
    """
    if not value:
        return ""
    text = str(value)
    parts = text.split("/")
    if len(parts) < 3 or not all(parts[:3]):
        return text
    try:
        day, month, year = (int(p.strip()) for p in parts[:3])
        start = date(year, 1, 1)
        result = start + relativedelta(months=month - 1, days=day - 1)
    except (ValueError, OverflowError):
        return text
    return result.isoformat()


# ─────────────────────────────────────────────────────────────
# CSV
# ─────────────────────────────────────────────────────────────

def split_csv_line(line: str) -> list[str]:
    """
    Split one CSV line into trimmed values, honouring double quotes.

    Single-line counterpart of :func:`parse_csv`, for ad-hoc lines such as
    ``2025-07-01,"1,406.75",5``; whole exports go through ``parse_csv``.
    """
    for values in csv.reader([line]):
        return [v.strip() for v in values]
    return [""]


def parse_csv(text: str) -> list[dict[str, str]]:
    """
    Parse CSV text into one dict per data row, keyed by the header labels.

    Extra trailing values are ignored; missing trailing values leave the
    corresponding key absent.  Blank lines are skipped.
    """
    # Sheets exports may start with a UTF-8 byte-order mark
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff").strip()))
    headers: list[str] | None = None
    rows: list[dict[str, str]] = []
    for values in reader:
        if not values:
            continue
        if headers is None:
            headers = [h.strip() for h in values]
            continue
        rows.append(
            {header: values[i].strip() for i, header in enumerate(headers) if i < len(values)}
        )
    return rows
