# agents/imputation/injector.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Missingness Injector                                          ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Seeded Uniform Sampling Without Replacement                            ║
║  ✓ Copy-on-Write (source table never mutated)                             ║
║  ✓ Mask Returned Alongside the Injected Table                             ║
╚════════════════════════════════════════════════════════════════════════════╝

Usage:
```python
    from agents.imputation.injector import inject

    injection = inject(df, "bwt", count=15, seed=555)
    injection.data["bwt"].isna().sum()   # 15
    injection.mask                       # sorted row positions
```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd
from loguru import logger

from core.exceptions import InvalidSampleSize
from core.utils import validate_table

__all__ = ["InjectionResult", "MissingnessInjector", "inject"]


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Result
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class InjectionResult:
    """
    Injected table plus the positions that were blanked.

    Attributes:
        data: Copy of the input with ``target_column`` set to NaN at ``mask``
        mask: Sorted, distinct row positions (0-based) that were blanked
        target_column: Column that received the missing values
        seed: Seed used for sampling
        count: Number of injected gaps (``len(mask)``)
        mask_index: Index labels matching ``mask``
        pre_existing_missing: Missing entries in the target before injection
    """

    data: pd.DataFrame
    mask: Tuple[int, ...]
    target_column: str
    seed: int
    count: int
    mask_index: pd.Index = field(repr=False)
    pre_existing_missing: int = 0

    @property
    def injected_column(self) -> pd.Series:
        """Target column of the injected table."""
        return self.data[self.target_column]

    def mask_array(self) -> np.ndarray:
        """Boolean row mask (True where a value was blanked)."""
        out = np.zeros(len(self.data), dtype=bool)
        out[list(self.mask)] = True
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_column": self.target_column,
            "seed": self.seed,
            "count": self.count,
            "mask": list(self.mask),
            "pre_existing_missing": self.pre_existing_missing,
        }


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Injector
# ═══════════════════════════════════════════════════════════════════════════

class MissingnessInjector:
    """
    🎲 **Missingness Injector**

    Blanks ``count`` uniformly chosen entries of one column. The same
    ``(row_count, count, seed)`` always selects the same positions.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._log = logger.bind(component="MissingnessInjector")

    def inject(
        self,
        data: pd.DataFrame,
        target_column: str,
        count: int,
        seed: Optional[int] = None,
    ) -> InjectionResult:
        """
        Inject ``count`` missing values into ``target_column``.

        Raises:
            DataValidationError: Not a DataFrame, empty, or unknown column
            InvalidSampleSize: ``count`` outside ``1..len(data)``
        """
        validate_table(data, target_column)

        seed = self.seed if seed is None else seed
        n_rows = len(data)

        if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
            raise InvalidSampleSize(
                f"count must be an integer, got {type(count).__name__}",
                details={"count": count},
            )
        if count <= 0 or count > n_rows:
            raise InvalidSampleSize(
                f"Cannot inject {count} missing values into a {n_rows}-row table",
                details={"count": int(count), "rows": n_rows},
            )

        rng = np.random.default_rng(seed)
        positions = np.sort(rng.choice(n_rows, size=int(count), replace=False))

        out = data.copy()
        pre_existing = int(out[target_column].isna().sum())

        # Integer and bool columns cannot hold NaN; object, string and category can
        target_dtype = out[target_column].dtype
        if pd.api.types.is_integer_dtype(target_dtype) or pd.api.types.is_bool_dtype(target_dtype):
            out[target_column] = out[target_column].astype(float)

        col_pos = out.columns.get_loc(target_column)
        out.iloc[positions, col_pos] = np.nan

        mask = tuple(int(p) for p in positions)

        self._log.info(
            f"Injected {len(mask)} missing values into '{target_column}' "
            f"(rows={n_rows}, seed={seed}, pre-existing={pre_existing})"
        )

        return InjectionResult(
            data=out,
            mask=mask,
            target_column=target_column,
            seed=seed,
            count=len(mask),
            mask_index=data.index[positions],
            pre_existing_missing=pre_existing,
        )


def inject(
    data: pd.DataFrame,
    target_column: str,
    count: int,
    seed: Optional[int] = None,
) -> InjectionResult:
    """
    🚀 **Convenience Function: Inject Missingness**

    Example:
```python
        injection = inject(df, "bwt", 15, seed=555)
```
    """
    return MissingnessInjector().inject(data, target_column, count, seed)
