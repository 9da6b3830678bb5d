"""
constants.py – Column vocabulary, sentinels, and building constants.
"""

# ── Source sheet → canonical field names ──────────────────────
COLUMN_MAP: dict[str, str] = {
    "วัน/เดือน/ปี": "date",
    "ชื่อผู้กรอกข้อมูล": "submitted_by",
    "ชั้นที่": "floor",
    "ขยะทั่วไป (กิโลกรัม)": "general_waste_kg",
    "ขยะอินทรีย์ (กิโลกรัม) (ทำปุ๋ย)": "organic_waste_kg",
    "ขยะรีไซเคิล (กิโลกรัม)": "recycle_waste_kg",
    "ขยะอันตราย (กิโลกรัม)": "hazardous_waste_kg",
    "รวมขยะทั้งหมด (กก)": "total_waste_kg",
    "รวมขยะฝังกลบ (กก)": "landfill_waste_kg",
    "Carbon emission (kgCO2e/kg)": "carbon_emission_kgco2e",
}

# ── Canonical numeric fields (order matters for JSON output) ──
NUMERIC_FIELDS: tuple[str, ...] = (
    "general_waste_kg",
    "organic_waste_kg",
    "recycle_waste_kg",
    "hazardous_waste_kg",
    "total_waste_kg",
    "landfill_waste_kg",
    "carbon_emission_kgco2e",
)

# Components summed when an explicit total is missing or zero
TOTAL_WASTE_COMPONENTS: tuple[str, ...] = (
    "general_waste_kg",
    "organic_waste_kg",
    "recycle_waste_kg",
    "hazardous_waste_kg",
)
LANDFILL_WASTE_COMPONENTS: tuple[str, ...] = (
    "general_waste_kg",
    "hazardous_waste_kg",
)

# ── Floor value meaning "all floors" ──────────────────────────
TOTALS_FLOOR_TH = "รวม"        # exact match
TOTALS_FLOOR_EN = "ALL"         # case-insensitive

# ── Google Sheets export ──────────────────────────────────────
SHEET_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv"
DEFAULT_TAB_KEY = "default"

# ── Calendar ──────────────────────────────────────────────────
MONTH_NAMES_TH: tuple[str, ...] = (
    "มกราคม", "กุมภาพันธ์", "มีนาคม", "เมษายน", "พฤษภาคม", "มิถุนายน",
    "กรกฎาคม", "สิงหาคม", "กันยายน", "ตุลาคม", "พฤศจิกายน", "ธันวาคม",
)
BUDDHIST_ERA_OFFSET = 543
LATEST_MONTHS_MAX_STEPS = 24
