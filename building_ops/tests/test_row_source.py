"""
Unit tests for building_ops/row_source.py

The spreadsheet export is faked with httpx.MockTransport; SHEET_ID is set
or cleared per test with monkeypatch so the real .env never matters.
"""
import httpx
import pytest

from building_ops.records import Record
from building_ops.row_source import (
    SheetConfigError,
    SheetFetchError,
    fetch_rows,
    fetch_sheet_csv,
    filter_by_month,
    normalize_row,
    normalize_rows,
    resolve_sheet_id,
    sheet_csv_url,
)

HEADER = (
    "วัน/เดือน/ปี,ชื่อผู้กรอกข้อมูล,ชั้นที่,ขยะทั่วไป (กิโลกรัม),"
    "ขยะอินทรีย์ (กิโลกรัม) (ทำปุ๋ย),ขยะรีไซเคิล (กิโลกรัม),ขยะอันตราย (กิโลกรัม),"
    "รวมขยะทั้งหมด (กก),รวมขยะฝังกลบ (กก),Carbon emission (kgCO2e/kg),หมายเหตุ"
)

SHEET_CSV = "\n".join([
    HEADER,
    '15/6/2025,Somchai,1,"1,200.5",30,20,1,"1,251.5",1201.5,2787.48,',
    "20/7/2025,Malee,2,100,10,5,0,115,100,232,checked",
    "20/7/2025,Malee,รวม,9999,0,0,0,9999,9999,0,",
    "20/7/2025,Malee,all,9999,0,0,0,9999,9999,0,",
    ",,,,,,,,,,",
    "",
])


def make_client(body: str = SHEET_CSV, status: int = 200, seen: list | None = None) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(str(request.url))
        return httpx.Response(status, text=body)

    return httpx.Client(transport=httpx.MockTransport(handler))


# ─────────────────────────────────────────────────────────────────────────────
# 1. Sheet id and URL
# ─────────────────────────────────────────────────────────────────────────────

class TestResolveSheetId:

    def test_argument_wins(self, monkeypatch):
        monkeypatch.setenv("SHEET_ID", "from-env")
        assert resolve_sheet_id("explicit") == "explicit"

    def test_falls_back_to_environment(self, monkeypatch):
        monkeypatch.setenv("SHEET_ID", "from-env")
        assert resolve_sheet_id() == "from-env"

    def test_missing_everywhere_raises(self, monkeypatch):
        monkeypatch.delenv("SHEET_ID", raising=False)
        with pytest.raises(SheetConfigError, match="Missing SHEET_ID"):
            resolve_sheet_id()


class TestSheetCsvUrl:

    def test_without_gid(self):
        assert sheet_csv_url("abc") == (
            "https://docs.google.com/spreadsheets/d/abc/export?format=csv"
        )

    def test_with_gid(self):
        assert sheet_csv_url("abc", "42").endswith("/d/abc/export?format=csv&gid=42")


# ─────────────────────────────────────────────────────────────────────────────
# 2. Fetch
# ─────────────────────────────────────────────────────────────────────────────

class TestFetchSheetCsv:

    def test_returns_body_text(self):
        assert fetch_sheet_csv("abc", client=make_client("a,b\n1,2")) == "a,b\n1,2"

    def test_requests_the_export_url(self):
        seen = []
        fetch_sheet_csv("abc", "7", client=make_client(seen=seen))
        assert seen == ["https://docs.google.com/spreadsheets/d/abc/export?format=csv&gid=7"]

    @pytest.mark.parametrize("status", [400, 403, 404, 500])
    def test_non_success_status_raises(self, status):
        with pytest.raises(SheetFetchError) as excinfo:
            fetch_sheet_csv("abc", client=make_client(status=status))
        assert excinfo.value.status_code == status
        assert str(excinfo.value) == f"Google Sheet error: {status}"


# ─────────────────────────────────────────────────────────────────────────────
# 3. Normalisation
# ─────────────────────────────────────────────────────────────────────────────

class TestNormalizeRow:

    def test_maps_thai_columns_to_canonical_fields(self):
        record = normalize_row({
            "วัน/เดือน/ปี": "1/7/2025",
            "ชื่อผู้กรอกข้อมูล": " Somchai ",
            "ชั้นที่": "3",
            "ขยะทั่วไป (กิโลกรัม)": "1,406.75",
        })
        assert record == Record(
            date="2025-07-01", submitted_by="Somchai", floor="3", general_waste_kg=1406.75,
        )

    def test_unmapped_columns_go_to_extra(self):
        record = normalize_row({"วัน/เดือน/ปี": "1/7/2025", "หมายเหตุ": "ok"})
        assert record.extra == {"หมายเหตุ": "ok"}

    def test_canonical_column_names_are_accepted(self):
        record = normalize_row({"date": "1/7/2025", "organic_waste_kg": "4"})
        assert record.organic_waste_kg == 4.0
        assert record.extra == {}

    @pytest.mark.parametrize("floor", ["รวม", " รวม ", "ALL", "all", "All"])
    def test_totals_floor_is_dropped(self, floor):
        assert normalize_row({"วัน/เดือน/ปี": "1/7/2025", "ชั้นที่": floor}) is None

    def test_floor_zero_is_kept(self):
        record = normalize_row({"วัน/เดือน/ปี": "1/7/2025", "ชั้นที่": "0"})
        assert record is not None
        assert record.floor == "0"

    def test_blank_row_is_dropped(self):
        assert normalize_row({"วัน/เดือน/ปี": "", "ชื่อผู้กรอกข้อมูล": "", "ขยะทั่วไป (กิโลกรัม)": ""}) is None

    def test_blank_row_with_only_floor_is_dropped(self):
        assert normalize_row({"ชั้นที่": "2", "ขยะทั่วไป (กิโลกรัม)": "0"}) is None

    def test_unparseable_number_becomes_zero(self):
        record = normalize_row({"วัน/เดือน/ปี": "1/7/2025", "ขยะอันตราย (กิโลกรัม)": "-"})
        assert record.hazardous_waste_kg == 0.0

    def test_unparseable_date_is_kept_verbatim(self):
        record = normalize_row({"วัน/เดือน/ปี": "July 2025", "ชั้นที่": "1"})
        assert record.date == "July 2025"


class TestNormalizeRows:

    def test_drops_totals_and_blank_rows_only(self):
        raw = [
            {"ชั้นที่": "1", "วัน/เดือน/ปี": "1/7/2025"},
            {"ชั้นที่": "รวม", "วัน/เดือน/ปี": "1/7/2025"},
            {},
        ]
        assert [r.floor for r in normalize_rows(raw)] == ["1"]


class TestFilterByMonth:

    records = [
        Record(date="2025-06-15", floor="1"),
        Record(date="2025-07-20", floor="2"),
        Record(date="not a date", floor="3"),
    ]

    def test_keeps_only_matching_month(self):
        assert [r.floor for r in filter_by_month(self.records, 7, 2025)] == ["2"]

    def test_string_arguments(self):
        assert [r.floor for r in filter_by_month(self.records, "6", "2025")] == ["1"]

    @pytest.mark.parametrize("month,year", [(None, None), (7, None), (None, 2025)])
    def test_no_op_unless_both_given(self, month, year):
        assert filter_by_month(self.records, month, year) == self.records

    def test_no_op_returns_a_copy(self):
        kept = filter_by_month(self.records)
        kept.append(Record(date="2025-08-01", floor="4"))
        assert len(self.records) == 3

    @pytest.mark.parametrize("month,year", [("abc", "2025"), ("6", "20x5")])
    def test_non_integer_matches_nothing(self, month, year):
        assert filter_by_month(self.records, month, year) == []


# ─────────────────────────────────────────────────────────────────────────────
# 4. fetch_rows  (full pipeline)
# ─────────────────────────────────────────────────────────────────────────────

class TestFetchRows:

    def test_pipeline_normalises_and_filters(self):
        records = fetch_rows(sheet_id="abc", client=make_client())

        assert [r.date for r in records] == ["2025-06-15", "2025-07-20"]
        first = records[0]
        assert first.general_waste_kg == pytest.approx(1200.5)
        assert first.total_waste_kg == pytest.approx(1251.5)
        assert first.carbon_emission_kgco2e == pytest.approx(2787.48)
        assert records[1].extra == {"หมายเหตุ": "checked"}

    def test_no_totals_floor_survives(self):
        records = fetch_rows(sheet_id="abc", client=make_client())
        assert all(r.floor not in ("รวม",) and r.floor.upper() != "ALL" for r in records)

    def test_export_with_byte_order_mark_keeps_dates(self):
        records = fetch_rows(sheet_id="abc", client=make_client("\ufeff" + SHEET_CSV))
        assert [r.date for r in records] == ["2025-06-15", "2025-07-20"]

    def test_month_year_filter(self):
        records = fetch_rows(sheet_id="abc", month=7, year=2025, client=make_client())
        assert [r.submitted_by for r in records] == ["Malee"]

    def test_missing_sheet_id_raises_before_fetching(self, monkeypatch):
        monkeypatch.delenv("SHEET_ID", raising=False)
        seen = []
        with pytest.raises(SheetConfigError):
            fetch_rows(client=make_client(seen=seen))
        assert seen == []

    def test_fetch_error_propagates(self):
        with pytest.raises(SheetFetchError):
            fetch_rows(sheet_id="abc", client=make_client(status=503))
