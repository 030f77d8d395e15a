# agents/imputation/model_strategies.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Model-based Strategies                                        ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ RegressionFill: OLS + backward p-value elimination (statsmodels)       ║
║  ✓ KnnFill: Gower distance over mixed columns, stable tie-breaking        ║
╚════════════════════════════════════════════════════════════════════════════╝

Usage:
```python
    from agents.imputation.model_strategies import RegressionFillStrategy, KnnFillStrategy

    reg = RegressionFillStrategy(
        significance_threshold=0.05,
        exclude_columns=["low"],
        categorical_columns=["race"],
    )
    out = reg.apply(injected_df, "bwt")
    out.metadata["selected_terms"]     # ['lwt', 'race', 'smoke', 'ht', 'ui']

    knn = KnnFillStrategy(k=5)
    out = knn.apply(injected_df, "bwt")
```

Dependencies:
    • statsmodels (OLS, p-values)
    • scikit-learn (NearestNeighbors on the precomputed Gower matrix)
    • numpy / pandas
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.neighbors import NearestNeighbors

from config.constants import STRATEGY_KNN, STRATEGY_REGRESSION
from core.exceptions import (
    DataValidationError,
    ImputationError,
    InsufficientNeighbors,
    SingularFit,
    exception_context,
)
from core.utils import get_categorical_columns
from agents.imputation.strategies import ImputationStrategy, StrategyOutput

__all__ = ["RegressionFillStrategy", "KnnFillStrategy", "encode_design"]

_UNREACHABLE = 2.0


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Design Matrix Encoding
# ═══════════════════════════════════════════════════════════════════════════

def encode_design(
    X: pd.DataFrame,
    categorical_columns: Sequence[str] = (),
) -> Tuple[pd.DataFrame, Dict[str, List[str]]]:
    """
    Dummy-encode categorical predictors once for the whole table.

    Returns the float design matrix and a mapping term → design columns, so
    a categorical term can be kept or removed as a unit.
    """
    cat_cols = set(get_categorical_columns(X, extra=categorical_columns))
    parts: List[pd.DataFrame] = []
    terms: Dict[str, List[str]] = {}

    for col in X.columns:
        if col in cat_cols:
            dummies = pd.get_dummies(
                X[col].astype("category"),
                prefix=str(col),
                prefix_sep="_",
                drop_first=True,
                dtype=float,
            )
            if dummies.shape[1] == 0:
                continue
            # Keep NaN visible for rows where the category itself is missing
            dummies.loc[X[col].isna().to_numpy()] = np.nan
            parts.append(dummies)
            terms[str(col)] = [str(c) for c in dummies.columns]
        else:
            parts.append(pd.to_numeric(X[col], errors="raise").astype(float).to_frame(str(col)))
            terms[str(col)] = [str(col)]

    design = pd.concat(parts, axis=1) if parts else pd.DataFrame(index=X.index)
    design.columns = [str(c) for c in design.columns]
    return design, terms


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Regression
# ═══════════════════════════════════════════════════════════════════════════

class RegressionFillStrategy(ImputationStrategy):
    """
    📈 **Regression Fill**

    Fits ordinary least squares of the target on the remaining columns using
    rows whose target is present, removes predictors whose p-value exceeds
    ``significance_threshold`` one at a time (largest first), refits, and
    predicts the rows whose target is missing. Present rows are returned
    untouched.

    A categorical term counts as significant when any of its dummy columns
    is; it is kept or removed as a whole.
    """

    identifier = STRATEGY_REGRESSION

    def __init__(
        self,
        significance_threshold: float = 0.05,
        exclude_columns: Sequence[str] = (),
        categorical_columns: Sequence[str] = (),
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.significance_threshold = float(significance_threshold)
        self.exclude_columns = tuple(exclude_columns)
        self.categorical_columns = tuple(categorical_columns)

    def _apply(self, data: pd.DataFrame, target_column: str) -> StrategyOutput:
        column = data[target_column]
        missing = column.isna().to_numpy()

        if not missing.any():
            return self._fill(column, np.array([]), selected_terms=[], dropped_terms=[])

        predictors = data.drop(
            columns=[target_column, *[c for c in self.exclude_columns if c in data.columns]]
        )
        design, terms = encode_design(predictors, self.categorical_columns)
        y = column.astype(float)

        selected = list(terms)
        dropped: List[str] = []

        # ═══════════════════════════════════════════════════════════════
        # Backward elimination
        # ═══════════════════════════════════════════════════════════════

        while True:
            cols = [c for t in selected for c in terms[t]]
            fit_rows = (~missing) & design[cols].notna().all(axis=1).to_numpy()
            n_params = len(cols) + 1

            if int(fit_rows.sum()) <= n_params:
                raise SingularFit(
                    f"{int(fit_rows.sum())} complete row(s) cannot identify "
                    f"{n_params} regression parameters",
                    details={"terms": selected},
                    context={"strategy": self.identifier},
                )

            X_fit = sm.add_constant(design.loc[fit_rows, cols], has_constant="add")
            with exception_context(to=ImputationError, message="OLS fit failed"):
                model = sm.OLS(y[fit_rows], X_fit).fit()

            if not selected:
                break

            term_p = {
                t: min(
                    (1.0 if np.isnan(model.pvalues[c]) else float(model.pvalues[c]))
                    for c in terms[t]
                )
                for t in selected
            }
            worst = max(selected, key=lambda t: term_p[t])

            if term_p[worst] <= self.significance_threshold:
                break

            self._log.debug(f"Dropping '{worst}' (p={term_p[worst]:.4f})")
            selected.remove(worst)
            dropped.append(worst)

        if np.linalg.matrix_rank(X_fit.to_numpy()) < X_fit.shape[1]:
            raise SingularFit(
                "Regression design matrix is rank-deficient",
                details={"terms": selected, "columns": list(X_fit.columns)},
                context={"strategy": self.identifier},
            )

        # ═══════════════════════════════════════════════════════════════
        # Predict missing rows only
        # ═══════════════════════════════════════════════════════════════

        X_new = design.loc[missing, cols]
        if X_new.isna().any().any():
            bad = X_new.index[X_new.isna().any(axis=1).to_numpy()]
            raise DataValidationError(
                "Rows to impute have missing predictor values",
                details={"rows": [str(i) for i in bad]},
                context={"strategy": self.identifier},
            )

        X_new = sm.add_constant(X_new, has_constant="add")
        predictions = np.asarray(model.predict(X_new), dtype=float)

        self._log.info(
            f"OLS on {int(fit_rows.sum())} rows kept {selected} "
            f"(dropped {dropped}), R²={model.rsquared:.3f}"
        )

        return self._fill(
            column,
            predictions,
            selected_terms=selected,
            dropped_terms=dropped,
            coefficients={k: float(v) for k, v in model.params.items()},
            pvalues={k: float(v) for k, v in model.pvalues.items()},
            r_squared=float(model.rsquared),
            n_fit=int(fit_rows.sum()),
            significance_threshold=self.significance_threshold,
        )


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: k-Nearest Neighbours
# ═══════════════════════════════════════════════════════════════════════════

class KnnFillStrategy(ImputationStrategy):
    """
    👥 **kNN Fill**

    Donors are rows with a present target. Distance is Gower's coefficient
    over all other columns:

      • numeric: ``|a - b| / range`` (range over all rows)
      • categorical: 0 if equal, 1 otherwise
      • a feature missing in either row is skipped; the distance is the
        mean over the remaining features

    The ``k`` closest donors are found with scikit-learn's ``NearestNeighbors``
    on the precomputed matrix (ties resolved by row order) and averaged.
    """

    identifier = STRATEGY_KNN

    def __init__(
        self,
        k: int = 5,
        categorical_columns: Sequence[str] = (),
        **kwargs,
    ):
        super().__init__(**kwargs)
        if int(k) < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        self.k = int(k)
        self.categorical_columns = tuple(categorical_columns)

    def _apply(self, data: pd.DataFrame, target_column: str) -> StrategyOutput:
        column = data[target_column]
        missing = column.isna().to_numpy()
        donors = np.flatnonzero(~missing)
        recipients = np.flatnonzero(missing)

        if len(donors) < self.k:
            raise InsufficientNeighbors(
                f"k={self.k} exceeds the {len(donors)} row(s) with a present "
                f"'{target_column}' value",
                details={"k": self.k, "donors": int(len(donors))},
                context={"strategy": self.identifier},
            )

        if not len(recipients):
            return self._fill(column, np.array([]), k=self.k, neighbors={})

        features = data.drop(columns=[target_column])
        nearest_donors = self.nearest_donors(
            self.gower_distances(features, recipients, donors),
            self.gower_distances(features, donors, donors),
        )

        donor_values = column.to_numpy(dtype=float)[donors]
        values = np.empty(len(recipients))
        neighbors: Dict[str, List[str]] = {}

        for i, nearest in enumerate(nearest_donors):
            values[i] = donor_values[nearest].mean()
            neighbors[str(column.index[recipients[i]])] = [
                str(column.index[donors[j]]) for j in nearest
            ]

        self._log.info(
            f"kNN (k={self.k}) filled {len(recipients)} gap(s) from {len(donors)} donors"
        )

        return self._fill(column, values, k=self.k, neighbors=neighbors)

    def nearest_donors(self, query: np.ndarray, donor_square: np.ndarray) -> List[np.ndarray]:
        """
        Positions of the ``k`` closest donors for each query row.

        ``NearestNeighbors`` finds the k-th smallest distance; donors tied at
        that distance are then taken in row order.
        """
        nn = NearestNeighbors(n_neighbors=self.k, metric="precomputed")
        with exception_context(to=ImputationError, message="Neighbour search failed"):
            nn.fit(_finite(donor_square))
            kth, _ = nn.kneighbors(_finite(query))

        out: List[np.ndarray] = []
        for row, radius in zip(_finite(query), kth[:, -1]):
            candidates = np.flatnonzero(row <= radius)
            order = np.argsort(row[candidates], kind="stable")
            out.append(candidates[order][: self.k])
        return out

    def gower_distances(
        self,
        features: pd.DataFrame,
        recipients: np.ndarray,
        donors: np.ndarray,
    ) -> np.ndarray:
        """Recipient × donor Gower distance matrix (``inf`` when no feature is comparable)."""
        total = np.zeros((len(recipients), len(donors)))
        counted = np.zeros((len(recipients), len(donors)))

        cat_cols = set(get_categorical_columns(features, extra=self.categorical_columns))

        for col in features.columns:
            series = features[col]

            if col in cat_cols:
                codes, _ = pd.factorize(series)
                a, b = codes[recipients][:, None], codes[donors][None, :]
                valid = (a >= 0) & (b >= 0)
                diff = (a != b).astype(float)
            else:
                values = pd.to_numeric(series, errors="coerce").to_numpy(dtype=float)
                span = np.nanmax(values) - np.nanmin(values) if np.isfinite(values).any() else 0.0
                a, b = values[recipients][:, None], values[donors][None, :]
                valid = ~(np.isnan(a) | np.isnan(b))
                diff = np.abs(a - b) / span if span > 0 else np.zeros_like(a - b)

            total += np.where(valid, diff, 0.0)
            counted += valid

        with np.errstate(invalid="ignore", divide="ignore"):
            dist = np.where(counted > 0, total / np.maximum(counted, 1), np.inf)
        return dist


def _finite(distances: np.ndarray) -> np.ndarray:
    # rows with no comparable feature rank after every real Gower distance (max 1)
    return np.where(np.isfinite(distances), distances, _UNREACHABLE)
