"""
Unit tests for dashboard_api/carbon.py, energy.py and iaq.py
"""
from datetime import date, datetime, timezone

import pytest

from building_ops.records import Record
from dashboard_api import carbon, energy, iaq
from dashboard_api.emission_factors import DATA_SOURCE_REFERENCE

TODAY = date(2025, 10, 17)


def rec(d: str, carbon_kg: float) -> Record:
    return Record(date=d, floor="1", carbon_emission_kgco2e=carbon_kg)


# ─────────────────────────────────────────────────────────────────────────────
# 1. Carbon footprint
# ─────────────────────────────────────────────────────────────────────────────

class TestCarbonFloors:

    def test_placeholder_for_previous_month(self):
        assert carbon.carbon_floors(TODAY) == {
            "month_used": "2025-09",
            "month_name_th": "กันยายน 2568",
            "total_rows": 0,
            "floors": [],
        }


class TestMonthlyPrinting:

    def test_no_records_still_reports_factors(self):
        payload = carbon.monthly_printing([], TODAY)
        assert payload["monthly_emission_report"] == []
        assert payload["emission_factors"] == {
            "energy_factor_kgco2e_per_kwh": 0.4999,
            "waste_factor_kgco2e_per_kg": 2.32,
            "data_source_reference": DATA_SOURCE_REFERENCE,
        }

    def test_twelve_months_ending_this_month(self):
        records = [
            rec("2024-11-03", 10.04),
            rec("2025-10-01", 1.25),
            rec("2025-10-02", 1.0),
            rec("2024-10-31", 500),
        ]
        report = carbon.monthly_printing(records, TODAY)["monthly_emission_report"]

        assert len(report) == 12
        assert report[0] == {
            "month_name_th": "พฤศจิกายน",
            "year": 2024,
            "carbon_emission_kgco2e": 10.0,
            "energy_emission_kgco2e": 0,
        }
        assert report[-1]["month_name_th"] == "ตุลาคม"
        assert report[-1]["year"] == 2025
        assert report[-1]["carbon_emission_kgco2e"] == 2.3


class TestCarbonReductionInfo:

    def test_change_and_trees(self):
        records = [rec("2025-09-10", 100), rec("2025-10-05", 4.5), rec("2025-10-06", 0.5)]
        payload = carbon.carbon_reduction_info(records, TODAY)

        assert payload["period"] == {
            "months_used": ["2025-09", "2025-10"],
            "previous_month_name_th": "กันยายน 2568",
            "current_month_name_th": "ตุลาคม 2568",
            "previous_month_carbon_kgco2e": 100.0,
            "current_month_carbon_kgco2e": 5.0,
        }
        rate = payload["carbon_emission_rate"]
        assert rate == {"change_kgco2e": -95.0, "percent_change": -95.0, "direction": "down"}
        trees = payload["trees_replacement_equivalent"]
        # |−95| / 9.5
        assert trees["trees_equivalent"] == 10.0
        assert trees["per_tree_factor_kgco2e"] == 9.5

    def test_empty_previous_month(self):
        payload = carbon.carbon_reduction_info([rec("2025-10-05", 19)], TODAY)
        assert payload["carbon_emission_rate"]["percent_change"] is None
        assert payload["carbon_emission_rate"]["direction"] == "up"
        assert payload["trees_replacement_equivalent"]["trees_equivalent"] == 2.0

    def test_no_records_is_flat(self):
        payload = carbon.carbon_reduction_info([], TODAY)
        assert payload["carbon_emission_rate"] == {
            "change_kgco2e": 0.0, "percent_change": None, "direction": "flat",
        }


# ─────────────────────────────────────────────────────────────────────────────
# 2. Energy (mock)
# ─────────────────────────────────────────────────────────────────────────────

class TestEnergy:

    def test_quarters_end_with_todays(self):
        summary = energy.latest_four_quarterly(TODAY)["quarterly_summary"]
        assert list(summary) == ["Q1/2025", "Q2/2025", "Q3/2025", "Q4/2025"]
        assert summary["Q4/2025"] == {
            "months_included": ["2025-10", "2025-11", "2025-12"],
            "lighting_system": 0,
            "air_conditioning_system": 0,
            "other_electrical_systems": 0,
        }

    def test_eui_is_zero_without_area(self):
        report = energy.eui(TODAY)["eui_report"]
        assert report["year"] == 2025
        assert report["month_name_th"] == "ตุลาคม"
        assert report["eui_kwh_per_m2"] == 0

    def test_yearly_comparison_up_to_this_month(self):
        payload = energy.yearly_comparison(date(2025, 3, 9))
        months = payload["energy_yearly_comparison"]

        assert payload["econ"] == 131177.0
        assert [m["month_name_th"] for m in months] == ["มกราคม", "กุมภาพันธ์", "มีนาคม"]
        # 2025-01-01T00:00:00+07:00
        assert months[0]["timestamp"] == 1735664400
        assert months[0]["last_year_energy_used"] == 137571
        assert months[0]["current_year_energy_used"] == pytest.approx(113941.4)

    def test_widget_cards(self):
        now = datetime(2025, 10, 17, 3, 4, 5, tzinfo=timezone.utc)
        payload = energy.widget(now).model_dump()

        assert payload["updated_at"] == "2025-10-17T03:04:05.000Z"
        assert [w["key"] for w in payload["widgets"]] == ["building", "hvac", "lighting"]
        building = payload["widgets"][0]
        assert building["value_display"] == "1,500,621.3"
        assert building["unit"] == "kWh"
        assert building["direction"] == "up"

    def test_floors_placeholder(self):
        assert energy.energy_floors(TODAY)["month_used"] == "2025-09"


# ─────────────────────────────────────────────────────────────────────────────
# 3. Indoor air quality (mock)
# ─────────────────────────────────────────────────────────────────────────────

class TestIaq:

    def test_current_readings(self):
        payload = iaq.current(datetime(2025, 10, 17, tzinfo=timezone.utc)).model_dump()
        assert payload["co2"]["value"] == 403
        assert payload["co2"]["unit"] == "ppm"
        assert payload["humidity"]["value_percent"] == 70
        assert payload["voc"]["unit"] == "ppb"
        assert payload["updated_at"] == "2025-10-17T00:00:00.000Z"
