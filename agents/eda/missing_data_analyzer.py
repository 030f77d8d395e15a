# === MODULE DESCRIPTION ===
"""
ImputeLab - Missing Data Analyzer
Missingness profile of a table: dataset-level summary, per-column counts and
proportions, and the distinct row patterns of missing/present cells with
their frequencies (the two panels of an aggregation plot).

Contract (AgentResult.data):
{
  "summary": {
      "total_cells": int, "total_missing": int, "missing_percentage": float,
      "n_columns_with_missing": int, "n_rows_with_missing": int, "complete_rows": int
  },
  "columns": [
      {"column": str, "n_missing": int, "proportion": float, "dtype": str}
  ],                                              # sorted by n_missing, descending
  "patterns": [
      {"pattern": {column: bool, ...},            # True = missing
       "missing_columns": List[str], "count": int, "proportion": float}
  ],                                              # most frequent first
  "telemetry": {"elapsed_ms": float, "n_patterns": int}
}
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd
from loguru import logger

from core.base_agent import AgentResult, BaseAgent

__all__ = ["MissingConfig", "MissingDataAnalyzer"]


# === SECTION === CONFIG ===
@dataclass(frozen=True)
class MissingConfig:
    """Profile options."""
    include_complete_columns: bool = True   # list columns with 0 missing too
    max_patterns: Optional[int] = None      # cap the pattern list (None = all)
    treat_inf_as_na: bool = True


# === SECTION === MAIN CLASS ===
class MissingDataAnalyzer(BaseAgent):
    """
    Profiles missing data by column and by row pattern.
    """

    def __init__(self, config: Optional[MissingConfig] = None) -> None:
        super().__init__(name="MissingDataAnalyzer", description="Profiles missing data patterns")
        self.config = config or MissingConfig()
        self._log = logger.bind(agent="MissingDataAnalyzer")

    # === SECTION === EXECUTION ===
    def execute(self, data: pd.DataFrame, **kwargs: Any) -> AgentResult:
        """
        Analyze missing data.
        """
        result = AgentResult(agent_name=self.name)
        t0 = time.perf_counter()

        if data is None or not isinstance(data, pd.DataFrame):
            result.add_error("MissingDataAnalyzer: 'data' must be a pandas DataFrame")
            return result

        if data.empty:
            result.add_warning("Empty DataFrame — no missing-data analysis performed.")
            result.data = self._empty_payload()
            return result

        isna = data.isna()
        if self.config.treat_inf_as_na:
            numeric = data.select_dtypes("number")
            isna[numeric.columns] = isna[numeric.columns] | numeric.isin([float("inf"), float("-inf")])

        summary = self._get_missing_summary(isna)
        columns = self._analyze_missing_by_column(data, isna)
        patterns = self._analyze_patterns(isna)

        result.data = {
            "summary": summary,
            "columns": columns,
            "patterns": patterns,
            "telemetry": {
                "elapsed_ms": round((time.perf_counter() - t0) * 1000, 1),
                "n_patterns": len(patterns),
            },
        }

        if summary["total_missing"] == 0:
            self._log.success("No missing data found!")
        else:
            self._log.info(
                f"Missing data profile: {summary['total_missing']} missing values "
                f"({summary['missing_percentage']:.2f}%) in {len(patterns)} pattern(s)"
            )

        return result

    # === SECTION === DATASET SUMMARY ===
    def _get_missing_summary(self, isna: pd.DataFrame) -> Dict[str, Any]:
        rows, cols = int(isna.shape[0]), int(isna.shape[1])
        total_cells = rows * cols
        total_missing = int(isna.to_numpy().sum())
        row_missing = isna.any(axis=1)
        return {
            "total_cells": total_cells,
            "total_missing": total_missing,
            "missing_percentage": float(total_missing / max(1, total_cells) * 100.0),
            "n_columns_with_missing": int((isna.sum(axis=0) > 0).sum()),
            "n_rows_with_missing": int(row_missing.sum()),
            "complete_rows": int((~row_missing).sum()),
        }

    # === SECTION === COLUMNS ===
    def _analyze_missing_by_column(
        self, data: pd.DataFrame, isna: pd.DataFrame
    ) -> List[Dict[str, Any]]:
        n = max(1, len(isna))
        out: List[Dict[str, Any]] = []
        for col, n_missing in isna.sum(axis=0).items():
            if n_missing == 0 and not self.config.include_complete_columns:
                continue
            out.append({
                "column": str(col),
                "n_missing": int(n_missing),
                "proportion": float(n_missing / n),
                "dtype": str(data[col].dtype),
            })
        # stable sort keeps column order among ties
        out.sort(key=lambda x: x["n_missing"], reverse=True)
        return out

    # === SECTION === ROW PATTERNS ===
    def _analyze_patterns(self, isna: pd.DataFrame) -> List[Dict[str, Any]]:
        n = max(1, len(isna))
        columns = [str(c) for c in isna.columns]
        counts = (
            isna.set_axis(columns, axis=1)
            .value_counts(sort=False)
            .rename("count")
            .reset_index()
        )
        counts = counts.sort_values("count", ascending=False, kind="stable")
        if self.config.max_patterns is not None:
            counts = counts.head(self.config.max_patterns)

        patterns: List[Dict[str, Any]] = []
        for _, row in counts.iterrows():
            flags = {c: bool(row[c]) for c in columns}
            patterns.append({
                "pattern": flags,
                "missing_columns": [c for c, miss in flags.items() if miss],
                "count": int(row["count"]),
                "proportion": float(row["count"] / n),
            })
        return patterns

    # === SECTION === HELPERS ===
    @staticmethod
    def _empty_payload() -> Dict[str, Any]:
        return {
            "summary": {
                "total_cells": 0,
                "total_missing": 0,
                "missing_percentage": 0.0,
                "n_columns_with_missing": 0,
                "n_rows_with_missing": 0,
                "complete_rows": 0,
            },
            "columns": [],
            "patterns": [],
            "telemetry": {"elapsed_ms": 0.0, "n_patterns": 0},
        }
