"""Report rendering: Plotly figures for comparison reports and missingness profiles."""

from services.report.chart_service import CF, ChartFactory

__all__ = ["ChartFactory", "CF"]
