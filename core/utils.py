"""
ImputeLab - Utility Functions
Common helpers shared by strategies, the comparator and the CLI
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from loguru import logger
from pandas.api import types as ptypes

from core.exceptions import DataValidationError


# ---------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------
def validate_table(data: Any, target_column: str) -> pd.DataFrame:
    """Ensure ``data`` is a non-empty DataFrame holding ``target_column``."""
    if not isinstance(data, pd.DataFrame):
        raise DataValidationError(
            f"Expected a pandas DataFrame, got {type(data).__name__}"
        )
    if data.empty:
        raise DataValidationError("Table is empty")
    if target_column not in data.columns:
        raise DataValidationError(
            f"Target column '{target_column}' not found",
            details={"available": [str(c) for c in data.columns]},
        )
    return data


# ---------------------------------------------------------------------
# Column helpers
# ---------------------------------------------------------------------
def is_categorical(series: pd.Series) -> bool:
    """Object, string, bool or pandas Categorical columns."""
    return (
        isinstance(series.dtype, pd.CategoricalDtype)
        or ptypes.is_object_dtype(series)
        or ptypes.is_string_dtype(series)
        or ptypes.is_bool_dtype(series)
    )


def get_categorical_columns(
    df: pd.DataFrame,
    extra: Optional[Sequence[str]] = None,
    max_unique: Optional[int] = None,
) -> List[str]:
    """Categorical columns by dtype, plus any listed in ``extra``."""
    extra = set(extra or ())
    cols: List[str] = []
    for col in df.columns:
        s = df[col]
        if col in extra or is_categorical(s):
            if max_unique is None or s.nunique(dropna=True) <= max_unique:
                cols.append(col)
    return cols


# ---------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------
def json_default(obj: Any) -> Any:
    """``json.dumps`` fallback for numpy, pandas, datetimes and report objects."""
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, pd.DataFrame):
        return json.loads(obj.to_json(orient="records"))
    if isinstance(obj, (pd.Series, pd.Index)):
        return obj.tolist()
    if isinstance(obj, (pd.Timestamp, datetime)):
        return obj.isoformat()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return str(obj)


def save_json(data: Dict, filepath: Union[str, Path], indent: int = 2) -> None:
    """Save dictionary to JSON file."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False, default=json_default)
    logger.info(f"Saved JSON to {filepath}")
