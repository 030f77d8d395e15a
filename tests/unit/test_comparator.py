"""
ImputeLab - Unit Tests for the Distribution Comparator
"""

import numpy as np
import pandas as pd
import pytest

from agents.eda.distribution_comparator import DistributionComparator, compare, nrd0_bandwidth
from agents.imputation.injector import inject
from agents.imputation.model_strategies import KnnFillStrategy
from agents.imputation.runner import StrategyResultSet, run_strategies
from agents.imputation.strategies import DropStrategy, MeanFillStrategy, MedianFillStrategy, StrategyOutput
from core.exceptions import DataValidationError


@pytest.fixture
def result_set(injected):
    return run_strategies(
        injected.data, "bwt", [DropStrategy(), MeanFillStrategy(), MedianFillStrategy()]
    )


class TestNrd0Bandwidth:
    """Tests for the rule-of-thumb bandwidth"""

    def test_matches_formula(self):
        x = np.array([1.0, 2.0, 3.0, 4.0, 10.0])
        sd = np.std(x, ddof=1)
        iqr = np.percentile(x, 75) - np.percentile(x, 25)
        expected = 0.9 * min(sd, iqr / 1.34) * len(x) ** -0.2
        assert nrd0_bandwidth(x) == pytest.approx(expected)

    def test_zero_iqr_falls_back_to_sd(self):
        x = np.array([5.0, 5.0, 5.0, 5.0, 6.0])
        assert nrd0_bandwidth(x) > 0


class TestCompare:
    """Tests for compare()"""

    def test_series_order(self, birthwt_cat, injected, result_set):
        report = compare(birthwt_cat["bwt"], injected.injected_column, result_set)
        assert report.names == ["original", "missing_removed", "drop", "mean", "median"]
        assert report["original"].label == "original complete data"
        assert report["missing_removed"].label == "with missing values removed"

    def test_counts(self, birthwt_cat, injected, result_set):
        report = compare(birthwt_cat["bwt"], injected.injected_column, result_set)
        assert report["original"].count == 189
        assert report["missing_removed"].count == 174
        assert report["drop"].count == 174
        assert report["mean"].count == 189

    def test_statistics(self, birthwt_cat, injected, result_set):
        report = compare(birthwt_cat["bwt"], injected.injected_column, result_set)
        original = birthwt_cat["bwt"].astype(float)
        assert report["original"].mean == pytest.approx(original.mean())
        assert report["original"].variance == pytest.approx(original.var(ddof=1))
        assert report["mean"].mean == pytest.approx(injected.injected_column.mean())
        assert report["mean"].variance < report["missing_removed"].variance

    def test_shared_domains(self, birthwt_cat, injected, result_set):
        report = compare(birthwt_cat["bwt"], injected.injected_column, result_set, grid_points=256)
        lo = min(birthwt_cat["bwt"].min(), injected.injected_column.min())
        hi = max(birthwt_cat["bwt"].max(), injected.injected_column.max())
        assert report.x_domain == (pytest.approx(lo), pytest.approx(hi))
        assert len(report.grid) == 256
        assert report.grid[0] == pytest.approx(lo)
        assert report.grid[-1] == pytest.approx(hi)
        assert report.y_domain[0] == 0.0
        assert report.y_domain[1] == pytest.approx(
            max(s.density.max() for s in report.series.values())
        )
        for summary in report.series.values():
            assert len(summary.density) == 256
            assert (summary.density >= 0).all()

    def test_idempotent(self, birthwt_cat, injected, result_set):
        comparator = DistributionComparator()
        a = comparator.compare(birthwt_cat["bwt"], injected.injected_column, result_set)
        b = comparator.compare(birthwt_cat["bwt"], injected.injected_column, result_set)
        assert a.to_dict() == b.to_dict()

    def test_failures_listed_as_skipped(self, birthwt_cat, injected):
        result_set = run_strategies(
            injected.data, "bwt", [KnnFillStrategy(k=500), MeanFillStrategy()]
        )
        report = compare(birthwt_cat["bwt"], injected.injected_column, result_set)
        assert "knn" not in report.series
        assert report.skipped["knn"].startswith("InsufficientNeighbors")

    def test_degenerate_strategy_skipped(self, birthwt_cat, injected):
        constant = pd.Series(np.full(189, 3000.0), index=injected.data.index, name="bwt")
        result_set = StrategyResultSet(
            target_column="bwt",
            results={"flat": StrategyOutput("flat", constant, injected.mask_index)},
            order=["flat"],
        )
        report = compare(birthwt_cat["bwt"], injected.injected_column, result_set)
        assert "flat" in report.skipped
        assert report.names == ["original", "missing_removed"]

    def test_reconstruction_errors(self, birthwt_cat, injected, result_set):
        report = compare(
            birthwt_cat["bwt"], injected.injected_column, result_set, mask=injected.mask
        )
        truth = birthwt_cat["bwt"].to_numpy(dtype=float)[list(injected.mask)]
        fill = injected.injected_column.mean()
        assert report.reconstruction["mean"]["mae"] == pytest.approx(np.abs(fill - truth).mean())
        assert report.reconstruction["mean"]["bias"] == pytest.approx((fill - truth).mean())
        assert "drop" not in report.reconstruction

    def test_to_frame(self, birthwt_cat, injected, result_set):
        frame = compare(
            birthwt_cat["bwt"], injected.injected_column, result_set, mask=injected.mask
        ).to_frame()
        assert list(frame.index) == ["original", "missing_removed", "drop", "mean", "median"]
        assert {"count", "mean", "variance", "std", "mae", "rmse"} <= set(frame.columns)

    def test_length_mismatch(self, birthwt_cat, injected, result_set):
        with pytest.raises(DataValidationError):
            compare(birthwt_cat["bwt"].iloc[:10], injected.injected_column, result_set)

    def test_constant_reference_rejected(self, result_set):
        flat = pd.Series(np.ones(189))
        with pytest.raises(DataValidationError):
            compare(flat, flat, result_set)

    def test_invalid_grid(self):
        with pytest.raises(ValueError):
            DistributionComparator(grid_points=1)


class TestEndToEnd:
    """189 rows, 15 gaps, seed 555"""

    def test_mean_fill_walkthrough(self, birthwt):
        assert birthwt["bwt"].notna().all()
        injection = inject(birthwt, "bwt", 15, seed=555)
        assert injection.data["bwt"].isna().sum() == 15

        result_set = run_strategies(injection.data, "bwt", [MeanFillStrategy()])
        filled = result_set["mean"].values
        assert filled.isna().sum() == 0

        present_mean = injection.data["bwt"].dropna()
        assert len(present_mean) == 174
        np.testing.assert_allclose(filled.iloc[list(injection.mask)], present_mean.mean())

        report = compare(birthwt["bwt"], injection.injected_column, result_set)
        assert {"original", "mean"} <= set(report.names)
        original = birthwt["bwt"]
        assert filled.min() <= original.max() and original.min() <= filled.max()
