"""
ImputeLab - Unit Tests for the Chart Service
"""

import plotly.graph_objects as go
import pytest

from agents.eda.distribution_comparator import compare
from agents.eda.missing_data_analyzer import MissingDataAnalyzer
from agents.imputation.runner import run_strategies
from agents.imputation.strategies import MeanFillStrategy, MedianFillStrategy
from agents.imputation.model_strategies import KnnFillStrategy
from services.report.chart_service import CF, ChartFactory


@pytest.fixture
def report(birthwt_cat, injected):
    result_set = run_strategies(
        injected.data, "bwt", [MeanFillStrategy(), MedianFillStrategy(), KnnFillStrategy(k=500)]
    )
    return compare(birthwt_cat["bwt"], injected.injected_column, result_set)


class TestDensityOverlay:
    """Tests for the density overlay figure"""

    def test_one_trace_per_series(self, report):
        fig = ChartFactory.density_overlay(report)
        assert isinstance(fig, go.Figure)
        assert [t.name for t in fig.data] == [s.label for s in report.series.values()]

    def test_shared_axes(self, report):
        fig = CF.density_overlay(report)
        assert tuple(fig.layout.xaxis.range) == pytest.approx(report.x_domain)
        assert fig.layout.yaxis.range[0] == 0.0
        assert fig.layout.yaxis.range[1] >= report.y_domain[1]

    def test_skipped_annotated(self, report):
        fig = CF.density_overlay(report)
        assert any("knn" in a.text for a in fig.layout.annotations)


class TestMissingnessBars:
    """Tests for the missingness figure"""

    def test_bars_and_patterns(self, injected):
        profile = MissingDataAnalyzer().run(data=injected.data).data
        fig = CF.missingness_bars(profile)
        kinds = [t.type for t in fig.data]
        assert kinds == ["bar", "heatmap"]
        assert list(fig.data[0].x)[0] == "bwt"

    def test_empty_profile(self):
        fig = CF.missingness_bars({"columns": [], "patterns": []})
        assert len(fig.data) == 0
        assert fig.layout.annotations[0].text == "No data to profile"


class TestSaveFigure:
    """Tests for saving figures"""

    def test_writes_html(self, report, tmp_path):
        out = CF.save_figure(CF.density_overlay(report), tmp_path / "nested" / "density.png")
        assert out.suffix == ".html"
        assert out.exists()
        assert "plotly" in out.read_text(encoding="utf-8").lower()

    def test_save_batch(self, report, tmp_path):
        paths = CF.save_batch({"a": CF.density_overlay(report), "b": go.Figure()}, tmp_path)
        assert [p.name for p in paths] == ["a.html", "b.html"]
