# core/exceptions.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Exceptions                                                    ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Centralized Exception Hierarchy                                        ║
║  ✓ Error Code & Severity System                                           ║
║  ✓ Context & Details Tracking                                             ║
║  ✓ Context Manager for Library Calls                                      ║
╚════════════════════════════════════════════════════════════════════════════╝

Architecture:
```
    ImputeLabError (Base)
    ├── ErrorCode (taxonomy)
    ├── ErrorSeverity (info/warning/error/critical)
    └── Context & Details

    Specific Exceptions:
    ├── InvalidSampleSize       (injector: count outside 1..N)
    ├── EmptyColumn             (mean/median: no present values)
    ├── SingularFit             (regression: rank-deficient design)
    ├── InsufficientNeighbors   (kNN: fewer donors than k)
    ├── StrategyFailure         (runner: wraps any strategy error)
    ├── DataValidationError
    ├── DataLoadError
    ├── ConfigurationError
    └── ImputationError         (wrapped third-party failure)
```

Usage:
```python
    from core.exceptions import InvalidSampleSize, exception_context, ImputationError

    raise InvalidSampleSize(
        "Cannot mask 200 rows of a 189-row table",
        details={"count": 200, "rows": 189},
    )

    with exception_context(to=ImputationError, message="OLS fit failed"):
        model = sm.OLS(y, X).fit()
```
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Type

from loguru import logger

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

__all__ = [
    # Enums
    "ErrorCode",
    "ErrorSeverity",
    # Base Exception
    "ImputeLabError",
    # Specific Exceptions
    "InvalidSampleSize",
    "EmptyColumn",
    "SingularFit",
    "InsufficientNeighbors",
    "StrategyFailure",
    "DataLoadError",
    "DataValidationError",
    "ConfigurationError",
    "ImputationError",
    # Helpers
    "exception_context",
]


# ═══════════════════════════════════════════════════════════════════════════
# Error Taxonomy
# ═══════════════════════════════════════════════════════════════════════════

class ErrorSeverity(str, Enum):
    """Severity classification for errors."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCode(str, Enum):
    """
    🏷️ **Error Code Taxonomy**

    Standardized error codes for categorization.
    """
    UNKNOWN = "unknown_error"
    INVALID_SAMPLE_SIZE = "invalid_sample_size"
    EMPTY_COLUMN = "empty_column"
    SINGULAR_FIT = "singular_fit"
    INSUFFICIENT_NEIGHBORS = "insufficient_neighbors"
    STRATEGY_FAILURE = "strategy_failure"
    DATA_LOAD = "data_load_error"
    DATA_VALIDATION = "data_validation_error"
    CONFIG = "configuration_error"
    IMPUTATION = "imputation_error"


# ═══════════════════════════════════════════════════════════════════════════
# Base Exception
# ═══════════════════════════════════════════════════════════════════════════

class ImputeLabError(Exception):
    """
    🎯 **Base ImputeLab Exception**

    Base exception class with rich context and metadata.

    Usage:
```python
        raise ImputeLabError(
            "Operation failed",
            details={"reason": "invalid input"},
            error_code=ErrorCode.DATA_VALIDATION,
            severity=ErrorSeverity.ERROR,
            context={"strategy": "knn"}
        )
```
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        error_code: ErrorCode = ErrorCode.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None
    ):
        """
        Initialize exception.

        Args:
            message: Error message
            details: Additional details dictionary
            error_code: Error code classification
            severity: Error severity level
            context: Execution context dictionary
            cause: Original exception (if wrapping)
        """
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}
        self.error_code: ErrorCode = error_code
        self.severity: ErrorSeverity = severity
        self.context: Dict[str, Any] = context or {}
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"{self.error_code.value}: {self.message}"]

        if self.details:
            parts.append(f"Details: {self.details}")

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.cause:
            parts.append(f"Cause: {type(self.cause).__name__}: {self.cause}")

        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "error": {
                "code": self.error_code.value,
                "message": self.message,
                "details": self.details or {},
                "context": self.context or {},
                "severity": self.severity.value,
                "cause": str(self.cause) if self.cause else None
            }
        }

    @classmethod
    def from_exc(
        cls,
        exc: BaseException,
        *,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR
    ) -> "ImputeLabError":
        """
        Create from existing exception.

        Already-typed ImputeLab errors are returned unchanged.
        """
        if isinstance(exc, ImputeLabError):
            return exc

        return cls(
            message or str(exc) or "An unexpected error occurred",
            details=details,
            severity=severity,
            context=context,
            cause=exc
        )


# ═══════════════════════════════════════════════════════════════════════════
# Specific Exception Classes
# ═══════════════════════════════════════════════════════════════════════════

class InvalidSampleSize(ImputeLabError):
    """🎲 Requested missing count is not within 1..row_count."""
    def __init__(self, message: str, details: Optional[Dict] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.INVALID_SAMPLE_SIZE)
        super().__init__(message, details, **kwargs)


class EmptyColumn(ImputeLabError):
    """🕳️ Target column has no present values to aggregate."""
    def __init__(self, message: str, details: Optional[Dict] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.EMPTY_COLUMN)
        super().__init__(message, details, **kwargs)


class SingularFit(ImputeLabError):
    """📐 Regression design matrix is rank-deficient."""
    def __init__(self, message: str, details: Optional[Dict] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.SINGULAR_FIT)
        super().__init__(message, details, **kwargs)


class InsufficientNeighbors(ImputeLabError):
    """👥 Fewer complete donor rows than the requested k."""
    def __init__(self, message: str, details: Optional[Dict] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.INSUFFICIENT_NEIGHBORS)
        super().__init__(message, details, **kwargs)


class StrategyFailure(ImputeLabError):
    """
    ⚠️ Wraps any error raised inside a single strategy.

    Carries the strategy identifier so the runner can record the failure and
    continue with the remaining strategies.
    """

    def __init__(
        self,
        strategy: str,
        cause: BaseException,
        details: Optional[Dict] = None,
        **kwargs
    ):
        kwargs.setdefault("error_code", ErrorCode.STRATEGY_FAILURE)
        kwargs.setdefault("context", {"strategy": strategy})
        message = f"Strategy '{strategy}' failed: {type(cause).__name__}: {cause}"
        super().__init__(message, details, cause=cause, **kwargs)
        self.strategy = strategy

    @property
    def reason(self) -> str:
        """Short human readable reason (the underlying error)."""
        cause = self.cause
        if isinstance(cause, ImputeLabError):
            return f"{type(cause).__name__}: {cause.message}"
        return f"{type(cause).__name__}: {cause}"


class DataLoadError(ImputeLabError):
    """❌ Data loading error."""
    def __init__(self, message: str, details: Optional[Dict] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.DATA_LOAD)
        super().__init__(message, details, **kwargs)


class DataValidationError(ImputeLabError):
    """⚠️ Data validation error."""
    def __init__(self, message: str, details: Optional[Dict] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.DATA_VALIDATION)
        super().__init__(message, details, **kwargs)


class ConfigurationError(ImputeLabError):
    """⚙️ Configuration error."""
    def __init__(self, message: str, details: Optional[Dict] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.CONFIG)
        super().__init__(message, details, **kwargs)


class ImputationError(ImputeLabError):
    """🧩 Failure inside a third-party imputation primitive."""
    def __init__(self, message: str, details: Optional[Dict] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.IMPUTATION)
        super().__init__(message, details, **kwargs)


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

@contextmanager
def exception_context(
    *,
    to: Type[ImputeLabError] = ImputeLabError,
    message: str = "Operation failed",
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    context: Optional[Dict[str, Any]] = None,
    log: bool = True
) -> Iterator[None]:
    """
    🔒 **Exception Context Manager**

    Converts foreign exceptions raised inside the block into ``to``.
    ImputeLab errors pass through untouched.

    Example:
```python
        with exception_context(
            to=DataLoadError,
            message="Failed to load data"
        ):
            df = pd.read_csv("data.csv")
```
    """
    try:
        yield
    except ImputeLabError:
        raise
    except Exception as e:
        wrapped = to(
            message,
            details={"original_error": str(e)},
            severity=severity,
            context=context,
            cause=e
        )

        if log:
            logger.error(str(wrapped))

        raise wrapped from e
