# agents/imputation/config.py
"""
ImputeLab — imputation run configuration.

``ImputationConfig`` is the object every component of the pipeline accepts.
It mirrors the configuration surface of a walkthrough run (seed, missing
count, k, m, significance threshold, reduction) plus a few knobs that only
the library wrappers need.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Literal, Optional, Tuple

from config.constants import REDUCTIONS
from core.exceptions import ConfigurationError

__all__ = ["ImputationConfig", "Reduction"]


Reduction = Literal["first", "mean"]


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Configuration
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ImputationConfig:
    """
    🎯 **Imputation Configuration**

    Injection:
        seed: RNG seed for the missingness mask and stochastic strategies (default: 555)
        missing_count: Number of target entries to mask (default: 15)

    Strategies:
        k: kNN neighbour count (default: 5)
        significance_threshold: p-value cut-off for regression feature selection (default: 0.05)
        m: Number of multiple-imputation replicates (default: 5)
        reduction: How MI replicates collapse into one column, 'first' or 'mean' (default: 'mean')
        mi_max_iter: Chained-equation / iterative imputer cycles (default: 10)
        regression_exclude: Predictors removed before regression (e.g. columns derived from the target)
        categorical_columns: Numeric-coded columns to treat as categorical (e.g. 'race')

    Execution & Reporting:
        max_workers: Runner thread pool size, 1 = sequential (default: 1)
        density_grid_points: Number of x positions for density curves (default: 512)
    """

    # Injection
    seed: int = 555
    missing_count: int = 15

    # Strategies
    k: int = 5
    significance_threshold: float = 0.05
    m: int = 5
    reduction: Reduction = "mean"
    mi_max_iter: int = 10
    regression_exclude: Tuple[str, ...] = field(default_factory=tuple)
    categorical_columns: Tuple[str, ...] = field(default_factory=tuple)

    # Execution & reporting
    max_workers: int = 1
    density_grid_points: int = 512

    def __post_init__(self):
        """Validate configuration."""
        if self.missing_count < 1:
            raise ConfigurationError(f"missing_count must be >= 1, got {self.missing_count}")
        if self.k < 1:
            raise ConfigurationError(f"k must be >= 1, got {self.k}")
        if self.m < 1:
            raise ConfigurationError(f"m must be >= 1, got {self.m}")
        if not 0.0 < self.significance_threshold < 1.0:
            raise ConfigurationError(
                f"significance_threshold must be in (0, 1), got {self.significance_threshold}"
            )
        if self.reduction not in REDUCTIONS:
            raise ConfigurationError(
                f"reduction must be one of {REDUCTIONS}, got '{self.reduction}'"
            )
        if self.mi_max_iter < 1:
            raise ConfigurationError(f"mi_max_iter must be >= 1, got {self.mi_max_iter}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.density_grid_points < 2:
            raise ConfigurationError(
                f"density_grid_points must be >= 2, got {self.density_grid_points}"
            )

        # Lists from settings / CLI become tuples so the config stays hashable
        object.__setattr__(self, "regression_exclude", tuple(self.regression_exclude))
        object.__setattr__(self, "categorical_columns", tuple(self.categorical_columns))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def with_overrides(self, **changes: Any) -> "ImputationConfig":
        """Copy with some fields replaced (``None`` values are ignored)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_settings(cls, settings: Optional[Any] = None) -> "ImputationConfig":
        """Build from the global ``Settings`` (environment / .env)."""
        if settings is None:
            from config.settings import settings as global_settings
            settings = global_settings

        return cls(
            seed=settings.RANDOM_SEED,
            missing_count=settings.MISSING_COUNT,
            k=settings.KNN_NEIGHBORS,
            significance_threshold=settings.SIGNIFICANCE_THRESHOLD,
            m=settings.MI_REPLICATES,
            reduction=settings.MI_REDUCTION,
            mi_max_iter=settings.MI_MAX_ITER,
            regression_exclude=tuple(settings.REGRESSION_EXCLUDE),
            categorical_columns=tuple(settings.CATEGORICAL_COLUMNS),
            max_workers=settings.RUNNER_MAX_WORKERS,
            density_grid_points=settings.DENSITY_GRID_POINTS,
        )
