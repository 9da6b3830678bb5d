"""
emission_factors.py – Emission factors and building constants used by the
dashboard payloads.

Source: Thailand Greenhouse Gas Management Organization (TGO), March 2024
(Buddhist-era March 2567).

All factors are kg CO2e per unit unless otherwise noted.
"""
from __future__ import annotations

# ─── Reference ─────────────────────────────────────────────────────────────
DATA_SOURCE_REFERENCE = "องค์การบริหารจัดการก๊าซเรือนกระจก (อบก.) มีนาคม 2567"
TREE_REFERENCE = "องค์การบริหารจัดการก๊าซเรือนกระจก (อบก.), มีนาคม 2567"

# ─── Factors ───────────────────────────────────────────────────────────────
# Grid electricity (kg CO2e / kWh)
ENERGY_KG_PER_KWH: float = 0.4999

# Landfilled waste (kg CO2e / kg)
LANDFILL_KG_PER_KG: float = 2.32

# Absorption of one planted tree (kg CO2e / tree)
TREE_ABSORPTION_KG: float = 9.5

# ─── Building ──────────────────────────────────────────────────────────────
PEOPLE_IN_BUILDING: int = 372

# Average municipal disposal rate (THB / kg of landfilled waste)
UNIT_COST_WASTED_THB_PER_KG: float = 2.28

# Annual energy-conservation target line (kWh / month)
ECON_TARGET_KWH: float = 131177.0


def emission_factors_payload() -> dict:
    """The emission_factors block shared by the carbon-footprint payloads."""
    return {
        "energy_factor_kgco2e_per_kwh": ENERGY_KG_PER_KWH,
        "waste_factor_kgco2e_per_kg": LANDFILL_KG_PER_KG,
        "data_source_reference": DATA_SOURCE_REFERENCE,
    }
