"""
Smoke tests for dashboard_api/report.py
"""
from reportlab.graphics.shapes import Drawing

from dashboard_api.report import MonthlyReport, _axis_max, bar_chart, build_full_report


class TestBuildFullReport:

    def test_returns_pdf_bytes(self):
        pdf = build_full_report()
        assert pdf.startswith(b"%PDF")
        assert pdf.rstrip().endswith(b"%%EOF")

    def test_custom_period(self):
        pdf = build_full_report(MonthlyReport(period_label="August 2025"))
        assert pdf.startswith(b"%PDF")


class TestCharts:

    def test_axis_max_rounds_up_leading_digit(self):
        assert _axis_max([29812.0, 100]) == 30000
        assert _axis_max([131177, 130000]) == 200000
        assert _axis_max([0, 0]) == 1

    def test_bar_chart_with_target_line(self):
        drawing = bar_chart(
            ["Jan", "Feb"],
            [("Last year", "#fcd34d", [1, 2]), ("This year", "#4ade80", [2, 3])],
            target=("Target", 4),
        )
        assert isinstance(drawing, Drawing)
        # chart, target line, legend
        assert len(drawing.contents) == 3
