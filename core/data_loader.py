# core/data_loader.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Data Loader                                                   ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ CSV / TSV / Excel / JSON / Parquet                                     ║
║  ✓ Compression Detection (.csv.gz, .csv.bz2, ...)                         ║
║  ✓ Encoding Fallback                                                      ║
║  ✓ Categorical Casting & Target Validation                                ║
╚════════════════════════════════════════════════════════════════════════════╝

Usage:
```python
    from core.data_loader import DataLoader

    loader = DataLoader()
    df = loader.load(
        "data/birthwt.csv",
        target_column="bwt",
        categorical_columns=["race"],
    )
```

Dependencies:
    • pandas
    • openpyxl (Excel), pyarrow (Parquet) when those formats are used
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import pandas as pd
from loguru import logger

from config.constants import SUPPORTED_EXTENSIONS
from core.exceptions import DataLoadError, DataValidationError, exception_context

__all__ = ["DataLoader", "load_table"]


COMPRESSION_MAP = {
    ".gz": "gzip",
    ".bz2": "bz2",
    ".zip": "zip",
    ".xz": "xz",
}

# Leftover row-name column written by R's write.csv / pandas to_csv
_INDEX_ARTIFACTS = ("Unnamed: 0", "")


# ═══════════════════════════════════════════════════════════════════════════
# Data Loader
# ═══════════════════════════════════════════════════════════════════════════

class DataLoader:
    """
    📦 **Table Loader**

    Loads a table with automatic format detection and prepares it for the
    imputation pipeline: row-name artifacts are dropped, requested columns
    are cast to ``category`` and the target column is validated.
    """

    def __init__(self):
        self.logger = logger.bind(component="DataLoader")

    # ───────────────────────────────────────────────────────────────────
    # Public API
    # ───────────────────────────────────────────────────────────────────

    def load(
        self,
        filepath: Union[str, Path],
        *,
        file_type: Optional[str] = None,
        target_column: Optional[str] = None,
        categorical_columns: Optional[Sequence[str]] = None,
        **kwargs
    ) -> pd.DataFrame:
        """
        📂 **Load Data from File**

        Args:
            filepath: Path to data file
            file_type: File type (auto-detected if None)
            target_column: Column that must exist and be numeric
            categorical_columns: Columns to cast to ``category``
            **kwargs: Format-specific reader arguments

        Raises:
            DataLoadError: Missing file, unsupported format or reader failure
            DataValidationError: Target or categorical column problems
        """
        path = Path(filepath)

        if not path.exists():
            raise DataLoadError(f"File not found: {path}", details={"path": str(path)})

        norm_type, compression = self._normalize_file_type(path, file_type)

        if norm_type not in SUPPORTED_EXTENSIONS:
            raise DataLoadError(
                f"Unsupported file type: {norm_type}. "
                f"Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
            )

        self.logger.info(
            f"Loading data from {path} "
            f"(type: {norm_type}, compression: {compression or 'none'})"
        )

        with exception_context(to=DataLoadError, message=f"Failed to read {path.name}"):
            if norm_type in (".csv", ".txt"):
                df = self._load_csv(path, compression=compression, **kwargs)
            elif norm_type == ".tsv":
                df = self._load_csv(path, compression=compression, delimiter="\t", **kwargs)
            elif norm_type in (".xlsx", ".xls"):
                df = pd.read_excel(path, **kwargs)
            elif norm_type == ".json":
                df = pd.read_json(path, **kwargs)
            else:
                df = pd.read_parquet(path, **kwargs)

        df = self.prepare(
            df,
            target_column=target_column,
            categorical_columns=categorical_columns,
        )

        self.logger.success(
            f"Data loaded: {len(df)} rows × {len(df.columns)} columns"
        )

        return df

    def prepare(
        self,
        df: pd.DataFrame,
        *,
        target_column: Optional[str] = None,
        categorical_columns: Optional[Sequence[str]] = None,
    ) -> pd.DataFrame:
        """Drop index artifacts, cast categoricals, validate the target."""
        df = df.drop(columns=[c for c in _INDEX_ARTIFACTS if c in df.columns])

        for col in categorical_columns or ():
            if col not in df.columns:
                raise DataValidationError(
                    f"Categorical column '{col}' not found",
                    details={"available": list(map(str, df.columns))},
                )
            df[col] = df[col].astype("category")

        if target_column is not None:
            if target_column not in df.columns:
                raise DataValidationError(
                    f"Target column '{target_column}' not found",
                    details={"available": list(map(str, df.columns))},
                )
            if not pd.api.types.is_numeric_dtype(df[target_column]):
                raise DataValidationError(
                    f"Target column '{target_column}' must be numeric",
                    details={"dtype": str(df[target_column].dtype)},
                )

        return df

    def get_info(self, df: pd.DataFrame) -> Dict[str, Any]:
        """Shape, dtypes and missing counts."""
        return {
            "n_rows": int(len(df)),
            "n_columns": int(df.shape[1]),
            "columns": [str(c) for c in df.columns],
            "dtypes": {str(k): str(v) for k, v in df.dtypes.items()},
            "missing": {str(k): int(v) for k, v in df.isna().sum().items()},
            "memory_mb": round(float(df.memory_usage(deep=True).sum()) / 1024**2, 3),
        }

    # ───────────────────────────────────────────────────────────────────
    # Internal
    # ───────────────────────────────────────────────────────────────────

    def _load_csv(
        self,
        filepath: Path,
        encoding: str = "utf-8",
        delimiter: Optional[str] = None,
        compression: Optional[str] = None,
        **kwargs
    ) -> pd.DataFrame:
        """Load CSV file with encoding fallback."""
        try:
            return pd.read_csv(
                filepath,
                encoding=encoding,
                sep=delimiter or ",",
                compression=compression,
                **kwargs
            )
        except UnicodeDecodeError:
            self.logger.warning(f"Failed with {encoding}, trying latin-1")
            return pd.read_csv(
                filepath,
                encoding="latin-1",
                sep=delimiter or ",",
                compression=compression,
                **kwargs
            )

    def _normalize_file_type(
        self,
        path: Path,
        explicit: Optional[str]
    ) -> Tuple[str, Optional[str]]:
        """
        Normalize file type and detect compression.

        Returns:
            (normalized_type, compression)
        """
        if explicit:
            explicit = explicit.lower()
            return (explicit if explicit.startswith(".") else f".{explicit}"), None

        suffixes = [s.lower() for s in path.suffixes]

        if not suffixes:
            return path.suffix.lower(), None

        compression = None

        if suffixes[-1] in COMPRESSION_MAP:
            compression = COMPRESSION_MAP[suffixes[-1]]
            base = suffixes[-2] if len(suffixes) >= 2 else ".csv"
        else:
            base = suffixes[-1]

        return base, compression


def load_table(filepath: Union[str, Path], **kwargs) -> pd.DataFrame:
    """Convenience wrapper around ``DataLoader().load``."""
    return DataLoader().load(filepath, **kwargs)
