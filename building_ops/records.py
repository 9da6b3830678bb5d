"""
records.py – The normalised row type shared by the row source, cache and
aggregation helpers.

All date fields use ISO 8601 (YYYY-MM-DD) when the source date could be parsed.
All numeric fields are floats; 0.0 means the value was absent or unparseable.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from building_ops.constants import NUMERIC_FIELDS


@dataclass
class Record:
    """One normalised, date-stamped waste/carbon row for a single floor."""

    date: str = ""
    submitted_by: str = ""
    floor: str = ""
    general_waste_kg: float = 0.0
    organic_waste_kg: float = 0.0
    recycle_waste_kg: float = 0.0
    hazardous_waste_kg: float = 0.0
    total_waste_kg: float = 0.0
    landfill_waste_kg: float = 0.0
    carbon_emission_kgco2e: float = 0.0
    # Source columns with no canonical name, passed through unchanged
    extra: dict[str, str] = field(default_factory=dict)

    def value(self, name: str) -> float:
        """Return numeric field *name* (0.0 for unknown names)."""
        if name in NUMERIC_FIELDS:
            return getattr(self, name)
        return 0.0

    def is_blank(self) -> bool:
        """True when date and submitted_by are blank and every number is zero."""
        return (
            not self.date
            and not self.submitted_by
            and all(getattr(self, f) == 0 for f in NUMERIC_FIELDS)
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-serialisable dict with canonical fields first, then extras."""
        out: dict[str, Any] = {
            "date": self.date,
            "submitted_by": self.submitted_by,
            "floor": self.floor,
        }
        for name in NUMERIC_FIELDS:
            out[name] = getattr(self, name)
        for key, raw in self.extra.items():
            out.setdefault(key, raw)
        return out
