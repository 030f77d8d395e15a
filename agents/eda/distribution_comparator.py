# agents/eda/distribution_comparator.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Distribution Comparator                                       ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Count / Mean / Variance per Series                                     ║
║  ✓ Gaussian KDE (R bw.nrd0 bandwidth) on a Shared Grid                    ║
║  ✓ Shared x-domain [min, max] and y-domain [0, max density]               ║
║  ✓ Optional Reconstruction Error at Injected Positions                    ║
╚════════════════════════════════════════════════════════════════════════════╝

Series order:
    1. original          (complete column before injection)
    2. missing_removed   (injected column with gaps dropped)
    3. every successful strategy, in result-set order

The comparator is a pure function of its inputs and renders nothing; the
chart service turns a ``ComparisonReport`` into figures.

Usage:
```python
    from agents.eda.distribution_comparator import compare

    report = compare(df["bwt"], injection.injected_column, result_set, mask=injection.mask)
    report.to_frame()
    report.x_domain, report.y_domain
```

Dependencies:
    • scipy (gaussian_kde)
    • numpy / pandas
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from loguru import logger
from scipy import stats

from config.constants import MISSING_REMOVED_SERIES, ORIGINAL_SERIES, SERIES_LABELS
from core.exceptions import DataValidationError
from agents.imputation.runner import StrategyResultSet

__all__ = [
    "SeriesSummary",
    "ComparisonReport",
    "DistributionComparator",
    "compare",
    "nrd0_bandwidth",
]


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Report Types
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class SeriesSummary:
    """Statistics and density of one series."""

    name: str
    label: str
    count: int
    mean: float
    variance: float
    bandwidth: float
    density: np.ndarray = field(repr=False)

    @property
    def std(self) -> float:
        return float(np.sqrt(self.variance))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "count": self.count,
            "mean": self.mean,
            "variance": self.variance,
            "bandwidth": self.bandwidth,
            "density": self.density.tolist(),
        }


@dataclass(frozen=True, eq=False)
class ComparisonReport:
    """
    📊 **Comparison Report**

    Attributes:
        series: Ordered mapping name → SeriesSummary
        grid: Shared x positions of every density
        x_domain: (min, max) over all series
        y_domain: (0, max density) over all series
        skipped: Strategies with no series, name → reason
        reconstruction: name → {mae, rmse, bias} at the injected positions
    """

    series: Dict[str, SeriesSummary]
    grid: np.ndarray = field(repr=False)
    x_domain: Tuple[float, float]
    y_domain: Tuple[float, float]
    skipped: Dict[str, str] = field(default_factory=dict)
    reconstruction: Optional[Dict[str, Dict[str, float]]] = None

    @property
    def names(self) -> List[str]:
        return list(self.series)

    def __getitem__(self, name: str) -> SeriesSummary:
        return self.series[name]

    def to_frame(self) -> pd.DataFrame:
        """Summary table: one row per series."""
        rows = [
            {
                "series": s.name,
                "label": s.label,
                "count": s.count,
                "mean": s.mean,
                "variance": s.variance,
                "std": s.std,
            }
            for s in self.series.values()
        ]
        frame = pd.DataFrame(rows).set_index("series")
        if self.reconstruction:
            errors = pd.DataFrame.from_dict(self.reconstruction, orient="index")
            frame = frame.join(errors)
        return frame

    def to_dict(self) -> Dict[str, Any]:
        return {
            "series": {k: v.to_dict() for k, v in self.series.items()},
            "grid": self.grid.tolist(),
            "x_domain": list(self.x_domain),
            "y_domain": list(self.y_domain),
            "skipped": dict(self.skipped),
            "reconstruction": self.reconstruction,
        }


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Density helpers
# ═══════════════════════════════════════════════════════════════════════════

def nrd0_bandwidth(values: np.ndarray) -> float:
    """Silverman's rule of thumb as computed by R's ``bw.nrd0``."""
    x = np.asarray(values, dtype=float)
    sd = float(np.std(x, ddof=1)) if len(x) > 1 else 0.0
    q75, q25 = np.percentile(x, [75, 25])
    spread = min(sd, (q75 - q25) / 1.34)
    if spread <= 0:
        spread = sd or abs(float(x[0])) or 1.0
    return 0.9 * spread * len(x) ** -0.2


def _density(values: np.ndarray, grid: np.ndarray) -> Tuple[np.ndarray, float]:
    bandwidth = nrd0_bandwidth(values)
    sd = float(np.std(values, ddof=1))
    # gaussian_kde scales the factor by the sample standard deviation
    kde = stats.gaussian_kde(values, bw_method=bandwidth / sd)
    return kde(grid), bandwidth


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Comparator
# ═══════════════════════════════════════════════════════════════════════════

class DistributionComparator:
    """
    📐 **Distribution Comparator**

    Turns the original column, the injected column and a result set into a
    ``ComparisonReport``. Strategies whose output cannot carry a density
    (fewer than two distinct values) are listed under ``skipped``; the two
    reference series must always be valid.
    """

    def __init__(
        self,
        grid_points: int = 512,
        labels: Optional[Mapping[str, str]] = None,
    ):
        if grid_points < 2:
            raise ValueError("grid_points must be >= 2")
        self.grid_points = int(grid_points)
        self.labels = {**SERIES_LABELS, **(labels or {})}
        self._log = logger.bind(agent="DistributionComparator")

    def compare(
        self,
        original_column: pd.Series,
        injected_column: pd.Series,
        result_set: StrategyResultSet,
        *,
        mask: Optional[Sequence[int]] = None,
    ) -> ComparisonReport:
        if len(original_column) != len(injected_column):
            raise DataValidationError(
                "Original and injected columns differ in length",
                details={"original": len(original_column), "injected": len(injected_column)},
            )

        raw: Dict[str, np.ndarray] = {
            ORIGINAL_SERIES: self._values(original_column),
            MISSING_REMOVED_SERIES: self._values(injected_column),
        }
        for name, values in raw.items():
            self._check(name, values)

        skipped: Dict[str, str] = {
            name: failure.reason for name, failure in result_set.failures.items()
        }

        for name in result_set.succeeded:
            values = self._values(result_set.results[name].values)
            try:
                self._check(name, values)
            except DataValidationError as e:
                self._log.warning(f"Skipping series '{name}': {e.message}")
                skipped[name] = e.message
                continue
            raw[name] = values

        # ═══════════════════════════════════════════════════════════════
        # Shared grid
        # ═══════════════════════════════════════════════════════════════

        lo = float(min(v.min() for v in raw.values()))
        hi = float(max(v.max() for v in raw.values()))
        grid = np.linspace(lo, hi, self.grid_points)

        series: Dict[str, SeriesSummary] = {}
        for name, values in raw.items():
            density, bandwidth = _density(values, grid)
            series[name] = SeriesSummary(
                name=name,
                label=self.labels.get(name, name),
                count=int(len(values)),
                mean=float(values.mean()),
                variance=float(values.var(ddof=1)),
                bandwidth=float(bandwidth),
                density=density,
            )

        y_max = float(max(s.density.max() for s in series.values()))

        reconstruction = None
        if mask is not None:
            reconstruction = self._reconstruction(original_column, result_set, mask)

        self._log.info(
            f"Compared {len(series)} series on [{lo:.2f}, {hi:.2f}] "
            f"(skipped: {sorted(skipped) or 'none'})"
        )

        return ComparisonReport(
            series=series,
            grid=grid,
            x_domain=(lo, hi),
            y_domain=(0.0, y_max),
            skipped=skipped,
            reconstruction=reconstruction,
        )

    # ───────────────────────────────────────────────────────────────────
    # Internals
    # ───────────────────────────────────────────────────────────────────

    @staticmethod
    def _values(column: pd.Series) -> np.ndarray:
        return pd.to_numeric(column, errors="coerce").dropna().to_numpy(dtype=float)

    @staticmethod
    def _check(name: str, values: np.ndarray) -> None:
        if len(values) < 2 or np.unique(values).size < 2:
            raise DataValidationError(
                f"Series '{name}' needs at least two distinct values for a density",
                details={"count": int(len(values))},
            )

    @staticmethod
    def _reconstruction(
        original_column: pd.Series,
        result_set: StrategyResultSet,
        mask: Sequence[int],
    ) -> Dict[str, Dict[str, float]]:
        positions = np.asarray(list(mask), dtype=int)
        truth = original_column.to_numpy(dtype=float)[positions]
        errors: Dict[str, Dict[str, float]] = {}

        for name in result_set.succeeded:
            output = result_set.results[name]
            if not output.index_aligned or len(output.values) != len(original_column):
                continue
            diff = output.values.to_numpy(dtype=float)[positions] - truth
            errors[name] = {
                "mae": float(np.nanmean(np.abs(diff))),
                "rmse": float(np.sqrt(np.nanmean(diff ** 2))),
                "bias": float(np.nanmean(diff)),
            }

        return errors


def compare(
    original_column: pd.Series,
    injected_column: pd.Series,
    result_set: StrategyResultSet,
    *,
    mask: Optional[Sequence[int]] = None,
    grid_points: int = 512,
) -> ComparisonReport:
    """
    🚀 **Convenience Function: Compare Distributions**

    Example:
```python
        report = compare(df["bwt"], injection.injected_column, result_set)
```
    """
    return DistributionComparator(grid_points=grid_points).compare(
        original_column, injected_column, result_set, mask=mask
    )
