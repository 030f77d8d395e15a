# agents/eda/__init__.py
"""
ImputeLab — analysis package (lazy exports + a light helper)

Exports:
- MissingDataAnalyzer     (agents.eda.missing_data_analyzer)
- DistributionComparator  (agents.eda.distribution_comparator)
- compare                 (agents.eda.distribution_comparator)

Helper available without importing scipy:
- missing_counts(df) -> pandas.Series

Usage:
    from agents.eda import DistributionComparator, missing_counts
"""

from __future__ import annotations

from importlib import import_module
from types import ModuleType
from typing import Dict, Tuple

import pandas as pd

# ===== Lazy exports =====
_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    "MissingDataAnalyzer": ("agents.eda.missing_data_analyzer", "MissingDataAnalyzer"),
    "MissingConfig": ("agents.eda.missing_data_analyzer", "MissingConfig"),
    "DistributionComparator": ("agents.eda.distribution_comparator", "DistributionComparator"),
    "ComparisonReport": ("agents.eda.distribution_comparator", "ComparisonReport"),
    "compare": ("agents.eda.distribution_comparator", "compare"),
}

__all__ = tuple(list(_LAZY_EXPORTS.keys()) + ["missing_counts"])


def __getattr__(name: str):
    """Resolve a lazy export and cache it in module globals()."""
    if name in _LAZY_EXPORTS:
        mod_name, symbol = _LAZY_EXPORTS[name]
        module: ModuleType = import_module(mod_name)
        obj = getattr(module, symbol)
        globals()[name] = obj
        return obj
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_EXPORTS.keys()))


def missing_counts(df: pd.DataFrame) -> pd.Series:
    """Missing cells per column, most affected first (does not modify ``df``)."""
    if not isinstance(df, pd.DataFrame):
        raise TypeError("missing_counts expects a pandas DataFrame")
    return df.isna().sum().sort_values(ascending=False, kind="stable").astype(int)
