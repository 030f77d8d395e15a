"""
ImputeLab - Unit Tests for regression and kNN strategies
"""

import numpy as np
import pandas as pd
import pytest

from agents.imputation.model_strategies import (
    KnnFillStrategy,
    RegressionFillStrategy,
    encode_design,
)
from core.exceptions import InsufficientNeighbors, SingularFit


class TestEncodeDesign:
    """Tests for encode_design()"""

    def test_categorical_dummies_drop_first(self, birthwt_cat):
        design, terms = encode_design(birthwt_cat[["lwt", "race"]])
        assert terms["lwt"] == ["lwt"]
        assert terms["race"] == ["race_2", "race_3"]
        assert list(design.columns) == ["lwt", "race_2", "race_3"]
        assert design.dtypes.eq(float).all()

    def test_numeric_code_treated_as_categorical_on_request(self, birthwt):
        _, terms = encode_design(birthwt[["race"]], categorical_columns=["race"])
        assert terms["race"] == ["race_2", "race_3"]

    def test_missing_category_stays_missing(self):
        X = pd.DataFrame({"g": pd.Categorical(["a", "b", None, "b"])})
        design, _ = encode_design(X)
        assert design["g_b"].isna().tolist() == [False, False, True, False]


class TestRegressionFillStrategy:
    """Tests for OLS imputation"""

    def test_exact_linear_relation(self):
        df = pd.DataFrame({
            "x": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0],
            "y": [3.0, np.nan, 7.0, 9.0, np.nan, 13.0, 15.0],
        })
        out = RegressionFillStrategy(significance_threshold=1.0).apply(df, "y")
        np.testing.assert_allclose(out.values.to_numpy(), [3, 5, 7, 9, 11, 13, 15], atol=1e-8)
        assert out.metadata["selected_terms"] == ["x"]

    def test_only_missing_rows_change(self, injected, walkthrough_config):
        strategy = RegressionFillStrategy(
            exclude_columns=walkthrough_config.regression_exclude,
            categorical_columns=walkthrough_config.categorical_columns,
        )
        out = strategy.apply(injected.data, "bwt")
        present = injected.data["bwt"].notna()
        pd.testing.assert_series_equal(out.values[present], injected.data["bwt"][present])
        assert out.values.notna().all()
        assert out.n_imputed == 15

    def test_strong_predictors_selected(self, injected):
        out = RegressionFillStrategy(
            exclude_columns=["low"], categorical_columns=["race"]
        ).apply(injected.data, "bwt")
        selected = out.metadata["selected_terms"]
        assert "smoke" in selected
        assert "lwt" in selected
        assert "low" not in selected + out.metadata["dropped_terms"]
        assert out.metadata["n_fit"] == 174

    def test_selected_terms_are_significant(self, injected):
        out = RegressionFillStrategy(
            significance_threshold=0.05, exclude_columns=["low"]
        ).apply(injected.data, "bwt")
        pvalues = out.metadata["pvalues"]
        for term in out.metadata["selected_terms"]:
            columns = [c for c in pvalues if c == term or c.startswith(f"{term}_")]
            assert min(pvalues[c] for c in columns) <= 0.05

    def test_duplicated_predictor_is_singular(self):
        rng = np.random.default_rng(0)
        x = rng.normal(size=30)
        df = pd.DataFrame({"x": x, "x_copy": x, "y": 2 * x + rng.normal(scale=0.1, size=30)})
        df.loc[[3, 7], "y"] = np.nan
        with pytest.raises(SingularFit):
            RegressionFillStrategy(significance_threshold=1.0).apply(df, "y")

    def test_too_few_rows_is_singular(self):
        df = pd.DataFrame({
            "a": [1.0, 2.0, 3.0, 4.0],
            "b": [2.0, 1.0, 0.0, 5.0],
            "y": [1.0, 2.0, np.nan, np.nan],
        })
        with pytest.raises(SingularFit):
            RegressionFillStrategy(significance_threshold=1.0).apply(df, "y")

    def test_nothing_missing(self, birthwt):
        out = RegressionFillStrategy().apply(birthwt, "bwt")
        assert out.n_imputed == 0
        assert out.values.tolist() == birthwt["bwt"].astype(float).tolist()


class TestKnnFillStrategy:
    """Tests for kNN imputation"""

    def test_mean_of_nearest(self):
        df = pd.DataFrame({
            "x": [0.0, 0.1, 5.0, 5.1, 10.0],
            "y": [np.nan, 2.0, 50.0, 52.0, 100.0],
        })
        out = KnnFillStrategy(k=1).apply(df, "y")
        assert out.values.iloc[0] == 2.0
        assert out.metadata["neighbors"] == {"0": ["1"]}

    def test_ties_resolved_by_row_order(self):
        df = pd.DataFrame({
            "x": [0.0, 1.0, 1.0, 1.0, 2.0],
            "y": [np.nan, 10.0, 20.0, 30.0, 40.0],
        })
        out = KnnFillStrategy(k=2).apply(df, "y")
        assert out.values.iloc[0] == 15.0
        assert out.metadata["neighbors"]["0"] == ["1", "2"]

    def test_categorical_mismatch_counts_as_one(self):
        df = pd.DataFrame({
            "g": pd.Categorical(["a", "b", "a", "b"]),
            "x": [0.0, 0.0, 1.0, 1.0],
            "y": [np.nan, 100.0, 7.0, 9.0],
        })
        # row 1: g differs (1) + x equal (0) → 0.5; row 2: g equal (0) + x range 1 (1) → 0.5;
        # row 3: both differ → 1.0
        knn = KnnFillStrategy(k=1)
        distances = knn.gower_distances(df.drop(columns="y"), np.array([0]), np.array([1, 2, 3]))
        np.testing.assert_allclose(distances, [[0.5, 0.5, 1.0]])
        assert knn.apply(df, "y").values.iloc[0] == 100.0

    def test_missing_feature_skipped(self):
        df = pd.DataFrame({
            "a": [0.0, np.nan, 1.0],
            "b": [0.0, 0.0, 0.0],
            "y": [np.nan, 5.0, 9.0],
        })
        distances = KnnFillStrategy(k=1).gower_distances(
            df.drop(columns="y"), np.array([0]), np.array([1, 2])
        )
        np.testing.assert_allclose(distances, [[0.0, 0.5]])

    def test_nearest_donors_tie_takes_earlier_rows(self):
        query = np.array([[0.3, 0.3, 0.3, 0.1]])
        square = np.zeros((4, 4))
        nearest = KnnFillStrategy(k=2).nearest_donors(query, square)
        assert nearest[0].tolist() == [3, 0]

    def test_nearest_donors_unreachable_ranked_last(self):
        query = np.array([[np.inf, 0.9, 0.2]])
        square = np.full((3, 3), np.inf)
        nearest = KnnFillStrategy(k=3).nearest_donors(query, square)
        assert nearest[0].tolist() == [2, 1, 0]

    def test_walkthrough_fill(self, injected):
        out = KnnFillStrategy(k=5, categorical_columns=["race"]).apply(injected.data, "bwt")
        present = injected.data["bwt"].notna()
        pd.testing.assert_series_equal(out.values[present], injected.data["bwt"][present])
        assert out.values.notna().all()
        for neighbours in out.metadata["neighbors"].values():
            assert len(neighbours) == 5

    def test_insufficient_neighbours(self, injected):
        with pytest.raises(InsufficientNeighbors):
            KnnFillStrategy(k=175).apply(injected.data, "bwt")

    def test_k_equal_to_donors(self, injected):
        out = KnnFillStrategy(k=174).apply(injected.data, "bwt")
        donors_mean = injected.data["bwt"].mean()
        np.testing.assert_allclose(out.values[injected.mask_index], donors_mean)

    def test_invalid_k(self):
        with pytest.raises(ValueError):
            KnnFillStrategy(k=0)
