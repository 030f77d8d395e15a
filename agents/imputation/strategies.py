# agents/imputation/strategies.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Imputation Strategies (interface + simple fills)              ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ ImputationStrategy Interface                                           ║
║  ✓ StrategyOutput (values, imputed rows, metadata)                        ║
║  ✓ Drop / Mean / Median                                                   ║
╚════════════════════════════════════════════════════════════════════════════╝

Every strategy receives the injected table and the target column name and
returns a ``StrategyOutput``. Strategies never see the missingness mask:
they impute whatever is missing in the target column.

    ┌──────────────┬───────────────────────────────────────────────┐
    │ Strategy     │ Result                                        │
    ├──────────────┼───────────────────────────────────────────────┤
    │ drop         │ rows with a missing target removed            │
    │ mean         │ gaps ← mean of present values                 │
    │ median       │ gaps ← median of present values               │
    │ regression   │ gaps ← OLS prediction (model_strategies)      │
    │ knn          │ gaps ← mean of k nearest donors               │
    │ mice_pmm     │ gaps ← PMM replicates reduced to one value    │
    │ amelia_emb   │ gaps ← bootstrap EM replicates reduced        │
    └──────────────┴───────────────────────────────────────────────┘
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.impute import SimpleImputer

from config.constants import SERIES_LABELS, STRATEGY_DROP, STRATEGY_MEAN, STRATEGY_MEDIAN
from core.exceptions import DataValidationError, EmptyColumn
from core.utils import validate_table

__all__ = [
    "StrategyOutput",
    "ImputationStrategy",
    "DropStrategy",
    "MeanFillStrategy",
    "MedianFillStrategy",
]


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Output
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StrategyOutput:
    """
    📦 **Result of one strategy call**

    Attributes:
        strategy: Strategy identifier
        values: Imputed target column. Index-aligned with the input for every
            strategy except ``drop``, whose column only keeps surviving rows.
        imputed_index: Index labels that received an imputed value
        table: Full resulting table (``drop`` only)
        metadata: Strategy-specific facts (fill value, features, reduction, ...)
    """

    strategy: str
    values: pd.Series
    imputed_index: pd.Index
    table: Optional[pd.DataFrame] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def n_imputed(self) -> int:
        return len(self.imputed_index)

    @property
    def index_aligned(self) -> bool:
        """False for row-removing strategies."""
        return self.table is None


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Interface
# ═══════════════════════════════════════════════════════════════════════════

class ImputationStrategy(ABC):
    """
    🧩 **Imputation Strategy Interface**

    Subclasses set ``identifier`` and implement ``_apply``. ``apply`` takes
    care of validation, copying and logging.

    Declared preprocessing:
        excludes_categorical: categorical columns are dropped before the
            underlying primitive is called (it only handles numeric data)
    """

    identifier: str = ""
    excludes_categorical: bool = False

    def __init__(self, identifier: Optional[str] = None, label: Optional[str] = None):
        if identifier:
            self.identifier = identifier
        if not self.identifier:
            raise ValueError(f"{type(self).__name__} needs an identifier")
        self.label = label or SERIES_LABELS.get(self.identifier, self.identifier)
        self._log = logger.bind(agent="ImputationStrategy", strategy=self.identifier)

    @property
    def requirements(self) -> Dict[str, Any]:
        """Declared preprocessing requirements."""
        return {"excludes_categorical": self.excludes_categorical}

    def apply(self, data: pd.DataFrame, target_column: str) -> StrategyOutput:
        """
        Impute the missing entries of ``target_column``.

        The input table is never modified.
        """
        validate_table(data, target_column)
        if not pd.api.types.is_numeric_dtype(data[target_column]):
            raise DataValidationError(
                f"Target column '{target_column}' must be numeric",
                details={"dtype": str(data[target_column].dtype)},
            )

        output = self._apply(data.copy(), target_column)
        self._log.debug(f"[{self.identifier}] imputed {output.n_imputed} value(s)")
        return output

    @abstractmethod
    def _apply(self, data: pd.DataFrame, target_column: str) -> StrategyOutput:
        raise NotImplementedError

    # ───────────────────────────────────────────────────────────────────
    # Shared helpers
    # ───────────────────────────────────────────────────────────────────

    @staticmethod
    def _missing_index(column: pd.Series) -> pd.Index:
        return column.index[column.isna().to_numpy()]

    def _require_present(self, column: pd.Series) -> None:
        if int(column.notna().sum()) == 0:
            raise EmptyColumn(
                f"Column '{column.name}' has no present values",
                details={"rows": int(len(column))},
                context={"strategy": self.identifier},
            )

    def _fill(
        self,
        column: pd.Series,
        values: np.ndarray,
        **metadata: Any,
    ) -> StrategyOutput:
        """Write ``values`` into the missing slots of ``column``."""
        missing = column.isna().to_numpy()
        filled = column.astype(float).copy()
        filled.iloc[np.flatnonzero(missing)] = values
        return StrategyOutput(
            strategy=self.identifier,
            values=filled,
            imputed_index=column.index[missing],
            metadata=metadata,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier='{self.identifier}')"


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Simple Strategies
# ═══════════════════════════════════════════════════════════════════════════

class DropStrategy(ImputationStrategy):
    """Remove every row whose target value is missing (listwise deletion)."""

    identifier = STRATEGY_DROP

    def _apply(self, data: pd.DataFrame, target_column: str) -> StrategyOutput:
        keep = data[target_column].notna()
        table = data.loc[keep]
        dropped = int((~keep).sum())

        self._log.info(f"Dropped {dropped} row(s); {len(table)} remain")

        return StrategyOutput(
            strategy=self.identifier,
            values=table[target_column],
            imputed_index=pd.Index([], dtype=data.index.dtype),
            table=table,
            metadata={"rows_dropped": dropped, "rows_remaining": int(len(table))},
        )


class _SimpleFillStrategy(ImputationStrategy):
    """Single-statistic fill through scikit-learn's ``SimpleImputer``."""

    statistic: str = "mean"

    def _apply(self, data: pd.DataFrame, target_column: str) -> StrategyOutput:
        column = data[target_column]
        self._require_present(column)

        imputer = SimpleImputer(strategy=self.statistic)
        imputer.fit(column.to_numpy(dtype=float).reshape(-1, 1))
        fill_value = float(imputer.statistics_[0])

        n_missing = int(column.isna().sum())
        self._log.info(
            f"Filling {n_missing} gap(s) in '{target_column}' with "
            f"{self.statistic}={fill_value:.4f}"
        )

        return self._fill(
            column,
            np.full(n_missing, fill_value),
            fill_value=fill_value,
            statistic=self.statistic,
        )


class MeanFillStrategy(_SimpleFillStrategy):
    """Replace gaps with the arithmetic mean of present values."""

    identifier = STRATEGY_MEAN
    statistic = "mean"


class MedianFillStrategy(_SimpleFillStrategy):
    """Replace gaps with the median of present values."""

    identifier = STRATEGY_MEDIAN
    statistic = "median"
