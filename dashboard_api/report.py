"""
report.py – Monthly building report rendered as a multi-page A4 PDF.

Layout: A4 portrait, 25 mm margins, one section per page:

  I.   Summary and table of contents
  II.  Energy – EUI against the efficiency levels, energy by floor
  II.  Energy (cont.) – monthly energy vs the ECON target, quarterly by system
  II.  Energy (cont.) – energy comparison against last year
  III. Waste – waste by floor, quarterly waste by type

Figures are the fixed values of the July 2025 report.  Text is English
because the built-in PDF fonts carry no Thai glyphs.
"""
from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from reportlab.graphics.charts.barcharts import VerticalBarChart
from reportlab.graphics.charts.legends import Legend
from reportlab.graphics.shapes import Drawing, Line, Rect, String
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    HRFlowable,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from .emission_factors import ECON_TARGET_KWH

logger = logging.getLogger(__name__)

MARGIN = 25 * mm
INNER_WIDTH = A4[0] - 2 * MARGIN

MONTHS_SHORT = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

PALETTE = {
    "primary": colors.HexColor("#0f766e"),
    "text": colors.HexColor("#111827"),
    "muted": colors.HexColor("#6b7280"),
    "border": colors.HexColor("#d0d7de"),
    "target": colors.HexColor("#f97316"),
}


# ─────────────────────────────────────────────
# Report content
# ─────────────────────────────────────────────

Series = Tuple[str, str, Sequence[float]]       # (legend label, hex colour, values)


@dataclass
class MonthlyReport:
    """Figures shown in the printed monthly report."""

    period_label: str = "July 2025"

    summary: List[str] = field(default_factory=lambda: [
        "The building shows a positive carbon trend, with energy use up 18.8% "
        "compared with 2024.",
        "Overall waste generation fell 9.9% compared with June 2025, and total "
        "carbon emission fell 45.1% compared with June 2025.",
        "Indoor air quality stayed very good throughout the month, with every "
        "measured parameter within the recommended thresholds.",
        "This report follows the topics shown on the dashboard:",
    ])
    contents: Dict[str, List[str]] = field(default_factory=lambda: {
        "II. Energy Consumption": [
            "Energy use against each energy-conservation level",
            "Monthly energy use by floor",
            "Monthly building energy use over the year",
            "Quarterly energy use by HVAC, lighting and other systems",
            "Energy use comparison",
        ],
        "III. Waste Management": [
            "Monthly waste generated by floor",
            "Building waste generated by type over the year",
            "Waste generation comparison",
            "Waste management information",
            "Recycling rate",
        ],
        "IV. Carbon Footprint": [
            "Carbon footprint by floor",
            "Monthly carbon footprint comparison",
            "Carbon emission comparison",
            "Carbon reduction information",
        ],
        "V. Air Quality": [],
    })

    # Energy
    eui_current: float = 169.9                     # kWh/m²-y
    eui_levels: List[Tuple[str, float, str]] = field(default_factory=lambda: [
        ("REF", 219, "#e74c3c"),
        ("BEC", 171, "#f1c40f"),
        ("HEPS", 141, "#2ea8df"),
        ("ECON", 82, "#1f5ca8"),
        ("ZEB", 57, "#b26ae2"),
    ])
    energy_by_floor: List[Tuple[str, float]] = field(default_factory=lambda: [
        ("B2", 29812.0), ("B1", 8046.8), ("1", 5078.8), ("2", 4406.2), ("3", 4244.0),
        ("4", 3415.6), ("5", 7164.9), ("6", 2160.9), ("Roof", 7463.2),
    ])
    energy_last_year: List[float] = field(default_factory=lambda: [
        120000, 118000, 122000, 130000, 110000, 98000, 105000, 0, 0, 0, 0, 0,
    ])
    energy_this_year: List[float] = field(default_factory=lambda: [
        115000, 119000, 112000, 108000, 99000, 96000, 65848.5, 0, 0, 0, 0, 0,
    ])
    energy_target_kwh: float = ECON_TARGET_KWH
    solar_kwh: float = 2306.7
    energy_quarters: List[str] = field(default_factory=lambda: [
        "Q4/2024", "Q1/2025", "Q2/2025", "Q3/2025",
    ])
    energy_by_system: List[Series] = field(default_factory=lambda: [
        ("Lighting", "#f0a11a", [65434.5, 106008.5, 64463.6, 9674.2]),
        ("HVAC", "#07a1bd", [153343.3, 306521.1, 231646.7, 41288.0]),
        ("Other electrical", "#69be45", [187992.2, 151234.9, 139098.6, 20830.2]),
    ])
    energy_compare: List[Tuple[str, float, float]] = field(default_factory=lambda: [
        ("Whole building", 998973.4, 18.8),
        ("HVAC", 538167.8, 60.0),
        ("Lighting", 170472.1, 100.0),
    ])

    # Waste
    waste_by_floor: List[Tuple[str, float]] = field(default_factory=lambda: [
        ("B2", 106), ("B1", 106), ("1", 1018), ("2", 355),
        ("3", 176), ("4", 552), ("5", 271), ("6", 100),
    ])
    waste_quarters: List[str] = field(default_factory=lambda: [
        "Q1/2025", "Q2/2025", "Q3/2025", "Q4/2025",
    ])
    waste_by_type: List[Series] = field(default_factory=lambda: [
        ("General", "#3B82F6", [4000, 6384, 0, 0]),
        ("Recycle", "#22C55E", [2000, 3200, 0, 0]),
        ("Organic", "#F59E0B", [1500, 1800, 0, 0]),
        ("Hazardous", "#9CA3AF", [0, 0, 0, 0]),
    ])


# ─────────────────────────────────────────────
# Charts
# ─────────────────────────────────────────────

def _axis_max(values: Sequence[float]) -> float:
    """Round the largest value up to a whole number of its leading digit."""
    top = max([v for v in values if v > 0], default=1.0)
    magnitude = 10 ** math.floor(math.log10(top))
    return math.ceil(top / magnitude) * magnitude


def bar_chart(
    categories: Sequence[str],
    series: Sequence[Series],
    height: float = 70 * mm,
    target: Tuple[str, float] | None = None,
) -> Drawing:
    """
    Grouped vertical bar chart as a Drawing flowable.

    Parameters
    ----------
    categories:
        Category-axis labels.
    series:
        ``(label, hex colour, values)`` per bar group member; values align
        with *categories*.
    target:
        Optional ``(label, value)`` drawn as a dashed horizontal line.
    """
    drawing = Drawing(INNER_WIDTH, height)

    chart = VerticalBarChart()
    chart.x = 14 * mm
    chart.y = 16 * mm
    chart.width = INNER_WIDTH - 18 * mm
    chart.height = height - 22 * mm
    chart.data = [tuple(values) for _, _, values in series]
    chart.categoryAxis.categoryNames = list(categories)
    chart.categoryAxis.labels.fontName = "Helvetica"
    chart.categoryAxis.labels.fontSize = 7
    chart.valueAxis.labels.fontName = "Helvetica"
    chart.valueAxis.labels.fontSize = 7
    chart.valueAxis.labelTextFormat = "{:,.0f}".format
    chart.barSpacing = 1
    chart.groupSpacing = 6

    all_values = [v for _, _, values in series for v in values]
    if target is not None:
        all_values.append(target[1])
    chart.valueAxis.valueMin = 0
    chart.valueAxis.valueMax = _axis_max(all_values)
    chart.valueAxis.valueStep = chart.valueAxis.valueMax / 4
    for i, (_, hex_colour, _) in enumerate(series):
        chart.bars[i].fillColor = colors.HexColor(hex_colour)
        chart.bars[i].strokeColor = None
    drawing.add(chart)

    pairs = [(colors.HexColor(c), label) for label, c, _ in series]
    if target is not None:
        label, value = target
        y = chart.y + chart.height * value / chart.valueAxis.valueMax
        drawing.add(Line(
            chart.x, y, chart.x + chart.width, y,
            strokeColor=PALETTE["target"], strokeWidth=1, strokeDashArray=[4, 2],
        ))
        pairs.append((PALETTE["target"], label))

    if len(pairs) > 1:
        legend = Legend()
        legend.x = chart.x
        legend.y = 5 * mm
        legend.boxAnchor = "w"
        legend.alignment = "right"
        legend.columnMaximum = 1
        legend.deltax = 70
        legend.fontName = "Helvetica"
        legend.fontSize = 7
        legend.colorNamePairs = pairs
        drawing.add(legend)
    return drawing


def eui_scale(report: MonthlyReport) -> Drawing:
    """Coloured EUI level bands with the current value marked above them."""
    height = 24 * mm
    drawing = Drawing(INNER_WIDTH, height)
    band_w = INNER_WIDTH / len(report.eui_levels)
    for i, (label, value, hex_colour) in enumerate(report.eui_levels):
        x = i * band_w
        drawing.add(Rect(x, 4 * mm, band_w, 8 * mm,
                         fillColor=colors.HexColor(hex_colour), strokeColor=None))
        drawing.add(String(x + band_w / 2, 7 * mm, label, textAnchor="middle",
                           fontName="Helvetica-Bold", fontSize=8, fillColor=colors.white))
        drawing.add(String(x + band_w / 2, 0.5 * mm, f"{value:g}", textAnchor="middle",
                           fontName="Helvetica", fontSize=7, fillColor=PALETTE["muted"]))
    drawing.add(String(0, 16 * mm, f"Current EUI {report.eui_current:g} kWh/m²-y",
                       fontName="Helvetica-Bold", fontSize=10, fillColor=PALETTE["primary"]))
    return drawing


# ─────────────────────────────────────────────
# Sections
# ─────────────────────────────────────────────

def _styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("T", parent=base["Title"], fontSize=20, fontName="Helvetica-Bold",
                                textColor=PALETTE["text"], alignment=TA_CENTER, spaceAfter=18),
        "h1": ParagraphStyle("H1", parent=base["Heading1"], fontSize=14, fontName="Helvetica-Bold",
                             textColor=PALETTE["text"], spaceBefore=6, spaceAfter=8),
        "h2": ParagraphStyle("H2", parent=base["Heading2"], fontSize=12, fontName="Helvetica-Bold",
                             textColor=PALETTE["primary"], spaceBefore=10, spaceAfter=6),
        "body": ParagraphStyle("B", parent=base["Normal"], fontSize=11, fontName="Helvetica",
                               textColor=PALETTE["text"], leading=15, spaceAfter=6),
        "bullet": ParagraphStyle("BL", parent=base["Normal"], fontSize=10, fontName="Helvetica",
                                 textColor=PALETTE["text"], leftIndent=14, bulletIndent=4,
                                 spaceAfter=3),
        "footer": ParagraphStyle("FT", parent=base["Normal"], fontSize=7, fontName="Helvetica",
                                 textColor=PALETTE["muted"], alignment=TA_CENTER),
    }


def _render_summary(r: MonthlyReport, s: dict) -> list:
    elements = [
        Paragraph(f"Monthly Report - {r.period_label}", s["title"]),
        Paragraph(f"I. Summary for {r.period_label}", s["h1"]),
    ]
    elements.extend(Paragraph(text, s["body"]) for text in r.summary)
    for heading, items in r.contents.items():
        elements.append(Paragraph(heading, s["h2"]))
        elements.extend(Paragraph(item, s["bullet"], bulletText="•") for item in items)
    return elements


def _render_energy_overview(r: MonthlyReport, s: dict) -> list:
    floors = [name for name, _ in r.energy_by_floor]
    kwh = [value for _, value in r.energy_by_floor]
    top_floor, top_kwh = max(r.energy_by_floor, key=lambda item: item[1])
    return [
        Paragraph("II. Energy Consumption", s["h1"]),
        Paragraph("Energy use against each energy-conservation level", s["h2"]),
        eui_scale(r),
        Spacer(1, 4 * mm),
        Paragraph(
            f"Since 1 January the building's energy use intensity is {r.eui_current:g} "
            "kWh/m² per year, within the BEC level.",
            s["body"],
        ),
        Paragraph(f"Energy use by floor, {r.period_label}", s["h2"]),
        bar_chart(floors, [("kWh", "#10a7b5", kwh)]),
        Paragraph(
            f"Floor {top_floor} used the most energy this month ({top_kwh:,.1f} kWh).",
            s["body"],
        ),
    ]


def _render_energy_trend(r: MonthlyReport, s: dict) -> list:
    return [
        Paragraph("Monthly building energy use over the year", s["h2"]),
        bar_chart(
            MONTHS_SHORT,
            [("Last year", "#fcd34d", r.energy_last_year),
             ("This year", "#4ade80", r.energy_this_year)],
            height=80 * mm,
            target=(f"Target {r.energy_target_kwh:,.0f} kWh", r.energy_target_kwh),
        ),
        Paragraph(
            f"Solar panels generated {r.solar_kwh:,.1f} kWh in {r.period_label}.",
            s["body"],
        ),
        Paragraph("Quarterly energy use by system", s["h2"]),
        bar_chart(r.energy_quarters, r.energy_by_system, height=70 * mm),
    ]


def _render_energy_comparison(r: MonthlyReport, s: dict) -> list:
    rows = [["System", "Energy used (kWh)", "Change vs last year"]]
    for name, kwh, pct in r.energy_compare:
        rows.append([name, f"{kwh:,.1f}", f"{pct:+.1f}%"])
    table = Table(rows, colWidths=[INNER_WIDTH * 0.4, INNER_WIDTH * 0.3, INNER_WIDTH * 0.3])
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), PALETTE["primary"]),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ("LINEBELOW", (0, 0), (-1, -1), 0.5, PALETTE["border"]),
    ]))
    total_name, total_kwh, total_pct = r.energy_compare[0]
    return [
        Paragraph("Energy use comparison", s["h2"]),
        table,
        Spacer(1, 6 * mm),
        Paragraph(
            f"{total_name} energy use reached {total_kwh:,.1f} kWh, "
            f"{abs(total_pct):.1f}% {'higher' if total_pct >= 0 else 'lower'} than last year.",
            s["body"],
        ),
    ]


def _render_waste(r: MonthlyReport, s: dict) -> list:
    floors = [name for name, _ in r.waste_by_floor]
    kg = [value for _, value in r.waste_by_floor]
    top_floor, top_kg = max(r.waste_by_floor, key=lambda item: item[1])
    return [
        Paragraph("III. Waste Management", s["h1"]),
        Paragraph(f"Waste generated by floor, {r.period_label}", s["h2"]),
        bar_chart(floors, [("kg", "#3B82F6", kg)]),
        Paragraph(
            f"Floor {top_floor} generated the most waste this month ({top_kg:,.0f} kg).",
            s["body"],
        ),
        Paragraph("Quarterly waste generated by type", s["h2"]),
        bar_chart(r.waste_quarters, r.waste_by_type, height=75 * mm),
    ]


# ─────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────

def build_full_report(report: MonthlyReport | None = None) -> bytes:
    """Render the monthly report and return the PDF bytes."""
    report = report or MonthlyReport()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4,
        topMargin=MARGIN, bottomMargin=MARGIN,
        leftMargin=MARGIN, rightMargin=MARGIN,
        title=f"Monthly Report - {report.period_label}",
    )
    styles = _styles()

    sections = (
        _render_summary,
        _render_energy_overview,
        _render_energy_trend,
        _render_energy_comparison,
        _render_waste,
    )
    story: list = []
    for i, renderer in enumerate(sections):
        if i:
            story.append(PageBreak())
        story.extend(renderer(report, styles))

    story.append(Spacer(1, 8 * mm))
    story.append(HRFlowable(width="100%", thickness=0.5, color=PALETTE["border"]))
    story.append(Paragraph(f"Building operations report | {report.period_label}", styles["footer"]))

    doc.build(story)
    pdf = buf.getvalue()
    logger.info("Rendered monthly report for %s (%d bytes)", report.period_label, len(pdf))
    return pdf
