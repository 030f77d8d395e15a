# agents/imputation/multiple_imputation.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Multiple Imputation Strategies                                ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ m stochastic completions reduced to one column ('first' | 'mean')      ║
║  ✓ PMM: chained equations with predictive mean matching (statsmodels)     ║
║  ✓ Bootstrap EM: posterior-sampling iterative imputer per bootstrap       ║
║    resample (scikit-learn), numeric columns only                          ║
║  ✓ Reduction + per-replicate values reported in metadata                  ║
╚════════════════════════════════════════════════════════════════════════════╝

Usage:
```python
    from agents.imputation.multiple_imputation import PmmFillStrategy

    pmm = PmmFillStrategy(m=5, reduction="first", seed=555)
    out = pmm.apply(injected_df, "bwt")
    out.metadata["reduction"]     # 'first'
    out.metadata["replicates"]    # DataFrame, one column per replicate
```

Both strategies are reproducible for a fixed ``seed``. Each call builds its
own ``numpy.random.Generator`` from the seed and hands it to the library
(``MICEData(rng=...)``, ``IterativeImputer(random_state=...)``); NumPy's
global RNG is never touched, so runs on a thread pool stay reproducible.

Dependencies:
    • statsmodels (MICEData)
    • scikit-learn (IterativeImputer, BayesianRidge)
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.experimental import enable_iterative_imputer  # noqa: F401
from sklearn.impute import IterativeImputer
from sklearn.linear_model import BayesianRidge
from statsmodels.imputation.mice import MICEData

from config.constants import REDUCTIONS, STRATEGY_BOOTSTRAP_EM, STRATEGY_PMM
from core.exceptions import ConfigurationError, DataValidationError, ImputationError, exception_context
from core.utils import get_categorical_columns
from agents.imputation.model_strategies import encode_design
from agents.imputation.strategies import ImputationStrategy, StrategyOutput

__all__ = [
    "MultipleImputationFillStrategy",
    "PmmFillStrategy",
    "BootstrapEmFillStrategy",
]


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Base
# ═══════════════════════════════════════════════════════════════════════════

class MultipleImputationFillStrategy(ImputationStrategy):
    """
    🎰 **Multiple Imputation Fill (base)**

    Subclasses produce an ``(m, n_missing)`` array of replicate values; this
    class validates options, reduces the replicates and records how.

    Reductions:
        first: value of replicate 1 (what ``complete(imp, 1)`` returns)
        mean:  average across the m replicates
    """

    def __init__(
        self,
        m: int = 5,
        reduction: str = "mean",
        seed: Optional[int] = 555,
        max_iter: int = 10,
        categorical_columns: Sequence[str] = (),
        **kwargs,
    ):
        super().__init__(**kwargs)
        if int(m) < 1:
            raise ConfigurationError(f"m must be >= 1, got {m}")
        if reduction not in REDUCTIONS:
            raise ConfigurationError(
                f"reduction must be one of {REDUCTIONS}, got '{reduction}'"
            )
        if int(max_iter) < 1:
            raise ConfigurationError(f"max_iter must be >= 1, got {max_iter}")

        self.m = int(m)
        self.reduction = reduction
        self.seed = seed
        self.max_iter = int(max_iter)
        self.categorical_columns = tuple(categorical_columns)

    def _apply(self, data: pd.DataFrame, target_column: str) -> StrategyOutput:
        column = data[target_column]
        self._require_present(column)
        missing = column.isna().to_numpy()

        if not missing.any():
            return self._fill(column, np.array([]), reduction=self.reduction, m=self.m)

        replicates, extra = self._replicates(data, target_column, missing)
        replicates = np.asarray(replicates, dtype=float)

        if replicates.shape != (self.m, int(missing.sum())):
            raise ImputationError(
                "Replicate matrix has an unexpected shape",
                details={"shape": replicates.shape, "expected": (self.m, int(missing.sum()))},
            )

        reduced = replicates[0] if self.reduction == "first" else replicates.mean(axis=0)

        replicate_frame = pd.DataFrame(
            replicates.T,
            index=column.index[missing],
            columns=[f"replicate_{i + 1}" for i in range(self.m)],
        )

        self._log.info(
            f"{self.identifier}: {self.m} replicate(s) reduced by '{self.reduction}' "
            f"for {int(missing.sum())} gap(s)"
        )

        return self._fill(
            column,
            reduced,
            reduction=self.reduction,
            m=self.m,
            seed=self.seed,
            replicates=replicate_frame,
            **extra,
        )

    @abstractmethod
    def _replicates(
        self,
        data: pd.DataFrame,
        target_column: str,
        missing: np.ndarray,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """Return the ``(m, n_missing)`` replicate values and extra metadata."""
        raise NotImplementedError


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Predictive Mean Matching
# ═══════════════════════════════════════════════════════════════════════════

class PmmFillStrategy(MultipleImputationFillStrategy):
    """
    Chained-equation imputation with predictive mean matching.

    Each replicate is an independent ``MICEData`` chain run for ``max_iter``
    cycles; the imputed target values of the final cycle form the replicate.
    Categorical columns are dummy-encoded first; the table is given
    formula-safe column names.
    """

    identifier = STRATEGY_PMM

    def __init__(self, *args, k_pmm: int = 5, **kwargs):
        super().__init__(*args, **kwargs)
        self.k_pmm = int(k_pmm)

    def _replicates(
        self,
        data: pd.DataFrame,
        target_column: str,
        missing: np.ndarray,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        predictors = data.drop(columns=[target_column])
        if predictors.shape[1] == 0:
            raise DataValidationError(
                "Predictive mean matching needs at least one predictor column",
                context={"strategy": self.identifier},
            )

        design, _ = encode_design(predictors, self.categorical_columns)
        frame = pd.concat([data[target_column].astype(float), design], axis=1)
        frame = frame.reset_index(drop=True)

        if frame.isna().all(axis=1).any():
            raise DataValidationError(
                "Rows with every value missing cannot be imputed by PMM",
                context={"strategy": self.identifier},
            )

        # MICEData builds formulas from column names
        names = [f"c{i}" for i in range(frame.shape[1])]
        frame.columns = pd.Index(names, dtype=object)
        target_name = names[0]

        out = np.empty((self.m, int(missing.sum())))
        # one generator shared by the m chains, so replicates differ but the run repeats
        rng = np.random.default_rng(self.seed)

        for r in range(self.m):
            with exception_context(to=ImputationError, message="MICE chain failed"):
                chain = MICEData(frame, k_pmm=self.k_pmm, rng=rng)
                chain.update_all(self.max_iter)
            out[r] = chain.data[target_name].to_numpy(dtype=float)[missing]

        return out, {"k_pmm": self.k_pmm, "cycles": self.max_iter}


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Bootstrap EM
# ═══════════════════════════════════════════════════════════════════════════

class BootstrapEmFillStrategy(MultipleImputationFillStrategy):
    """
    EM-style imputation with bootstrapping.

    For every replicate a bootstrap resample of the rows fits an
    ``IterativeImputer`` with a Bayesian ridge model drawing from the
    posterior; the fitted imputer then completes the original table.
    Works on numeric columns only, so categorical columns are removed first.
    """

    identifier = STRATEGY_BOOTSTRAP_EM
    excludes_categorical = True

    def _replicates(
        self,
        data: pd.DataFrame,
        target_column: str,
        missing: np.ndarray,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        categorical = [
            c for c in get_categorical_columns(data, extra=self.categorical_columns)
            if c != target_column
        ]
        numeric = data.drop(columns=categorical).apply(pd.to_numeric, errors="coerce")
        target_pos = numeric.columns.get_loc(target_column)
        values = numeric.to_numpy(dtype=float)
        n_rows = len(values)

        if categorical:
            self._log.debug(f"Excluding categorical columns {categorical}")

        rng = np.random.default_rng(self.seed)
        out = np.empty((self.m, int(missing.sum())))

        for r in range(self.m):
            sample = values[rng.integers(0, n_rows, size=n_rows)]
            random_state = None if self.seed is None else self.seed + r

            with exception_context(to=ImputationError, message="Bootstrap EM replicate failed"):
                imputer = IterativeImputer(
                    estimator=BayesianRidge(),
                    sample_posterior=True,
                    max_iter=self.max_iter,
                    random_state=random_state,
                    keep_empty_features=True,
                )
                imputer.fit(sample)
                completed = imputer.transform(values)

            out[r] = completed[missing, target_pos]

        return out, {
            "excluded_columns": [str(c) for c in categorical],
            "iterations": self.max_iter,
        }
