# config/constants.py
"""
ImputeLab — shared constants.

Strategy identifiers, legend labels and the plotting palette used by the
comparison report and charts. The order of ``STRATEGY_ORDER`` is the order in
which the default registry applies strategies and in which the density
overlay draws them.
"""

from __future__ import annotations

from typing import Dict, Final, Tuple

__all__ = [
    "ORIGINAL_SERIES",
    "MISSING_REMOVED_SERIES",
    "STRATEGY_DROP",
    "STRATEGY_MEAN",
    "STRATEGY_MEDIAN",
    "STRATEGY_REGRESSION",
    "STRATEGY_KNN",
    "STRATEGY_PMM",
    "STRATEGY_BOOTSTRAP_EM",
    "STRATEGY_ORDER",
    "SERIES_LABELS",
    "SERIES_STYLES",
    "FALLBACK_STYLE",
    "REDUCTIONS",
    "SUPPORTED_EXTENSIONS",
]


# ═══════════════════════════════════════════════════════════════════════════
# Series & Strategy Identifiers
# ═══════════════════════════════════════════════════════════════════════════

ORIGINAL_SERIES: Final[str] = "original"
MISSING_REMOVED_SERIES: Final[str] = "missing_removed"

STRATEGY_DROP: Final[str] = "drop"
STRATEGY_MEAN: Final[str] = "mean"
STRATEGY_MEDIAN: Final[str] = "median"
STRATEGY_REGRESSION: Final[str] = "regression"
STRATEGY_KNN: Final[str] = "knn"
STRATEGY_PMM: Final[str] = "mice_pmm"
STRATEGY_BOOTSTRAP_EM: Final[str] = "amelia_emb"

STRATEGY_ORDER: Final[Tuple[str, ...]] = (
    STRATEGY_DROP,
    STRATEGY_MEAN,
    STRATEGY_MEDIAN,
    STRATEGY_REGRESSION,
    STRATEGY_KNN,
    STRATEGY_PMM,
    STRATEGY_BOOTSTRAP_EM,
)

SERIES_LABELS: Final[Dict[str, str]] = {
    ORIGINAL_SERIES: "original complete data",
    MISSING_REMOVED_SERIES: "with missing values removed",
    STRATEGY_DROP: "rows with missing target dropped",
    STRATEGY_MEAN: "mean replacement",
    STRATEGY_MEDIAN: "median replacement",
    STRATEGY_REGRESSION: "regression",
    STRATEGY_KNN: "kNN",
    STRATEGY_PMM: "MICE",
    STRATEGY_BOOTSTRAP_EM: "Amelia",
}


# ═══════════════════════════════════════════════════════════════════════════
# Plot Styles (color, plotly dash)
# ═══════════════════════════════════════════════════════════════════════════

SERIES_STYLES: Final[Dict[str, Tuple[str, str]]] = {
    ORIGINAL_SERIES: ("black", "solid"),
    MISSING_REMOVED_SERIES: ("gray", "dot"),
    STRATEGY_DROP: ("gray", "dot"),
    STRATEGY_MEAN: ("red", "dash"),
    STRATEGY_MEDIAN: ("orange", "dash"),
    STRATEGY_REGRESSION: ("blue", "dot"),
    STRATEGY_KNN: ("cyan", "dashdot"),
    STRATEGY_PMM: ("green", "longdash"),
    STRATEGY_BOOTSTRAP_EM: ("magenta", "longdashdot"),
}

FALLBACK_STYLE: Final[Tuple[str, str]] = ("#636EFA", "solid")


# ═══════════════════════════════════════════════════════════════════════════
# Misc
# ═══════════════════════════════════════════════════════════════════════════

REDUCTIONS: Final[Tuple[str, ...]] = ("first", "mean")

SUPPORTED_EXTENSIONS: Final[Tuple[str, ...]] = (
    ".csv", ".tsv", ".txt", ".xlsx", ".xls", ".json", ".parquet",
)
