# config/settings.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Settings                                                      ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Pydantic v2 Settings                                                   ║
║  ✓ Environment Variable / .env Support                                    ║
║  ✓ Imputation Defaults (seed, count, k, m, alpha, reduction)              ║
║  ✓ Logging Configuration                                                  ║
╚════════════════════════════════════════════════════════════════════════════╝

Architecture:
```
    Settings
    ├── Application (name, version, environment)
    ├── Logging (level, format, rotation)
    ├── Paths (data, reports, logs)
    └── Imputation (seed, missing count, k, m, threshold, reduction, ...)
```

Usage:
```python
    from config.settings import settings

    print(settings.RANDOM_SEED)        # 555
    print(settings.KNN_NEIGHBORS)      # 5
    print(settings.MI_REDUCTION)       # "mean"
```

Environment Variables:
    Every field can be overridden from the environment or a `.env` file,
    e.g. `MISSING_COUNT=30`, `MI_REDUCTION=first`, `LOG_LEVEL=DEBUG`.

Dependencies:
    • pydantic
    • pydantic-settings
    • python-dotenv
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

__all__ = ["Settings", "settings", "get_settings"]


# Load environment variables
load_dotenv()

# Project root directory
ROOT_DIR = Path(__file__).resolve().parent.parent


# ═══════════════════════════════════════════════════════════════════════════
# Settings Class
# ═══════════════════════════════════════════════════════════════════════════

class Settings(BaseSettings):
    """
    🔧 **Central Configuration**

    Type-safe configuration with Pydantic v2. Imputation defaults reproduce
    the birth-weight walkthrough: seed 555, 15 injected gaps, k=5, m=5.
    """

    # ───────────────────────────────────────────────────────────────────
    # Application
    # ───────────────────────────────────────────────────────────────────

    APP_NAME: str = "ImputeLab"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    LOG_LEVEL: str = "INFO"

    # Logging configuration
    LOG_JSON_ENABLED: bool = True
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "30 days"
    LOG_CONSOLE_COMPACT: bool = False

    TEST_MODE: bool = False

    # ───────────────────────────────────────────────────────────────────
    # Paths
    # ───────────────────────────────────────────────────────────────────

    DATA_PATH: Path = ROOT_DIR / "data"
    REPORTS_PATH: Path = ROOT_DIR / "reports"
    LOGS_PATH: Path = ROOT_DIR / "logs"

    # ───────────────────────────────────────────────────────────────────
    # Imputation
    # ───────────────────────────────────────────────────────────────────

    TARGET_COLUMN: str = "bwt"
    RANDOM_SEED: int = 555
    MISSING_COUNT: int = 15

    KNN_NEIGHBORS: int = 5
    SIGNIFICANCE_THRESHOLD: float = 0.05

    MI_REPLICATES: int = 5
    MI_REDUCTION: Literal["first", "mean"] = "mean"
    MI_MAX_ITER: int = 10

    REGRESSION_EXCLUDE: List[str] = Field(default_factory=list)
    CATEGORICAL_COLUMNS: List[str] = Field(default_factory=list)

    DENSITY_GRID_POINTS: int = 512
    RUNNER_MAX_WORKERS: int = 1

    # ───────────────────────────────────────────────────────────────────
    # Pydantic Configuration
    # ───────────────────────────────────────────────────────────────────

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # ───────────────────────────────────────────────────────────────────
    # Computed Fields
    # ───────────────────────────────────────────────────────────────────

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    # ───────────────────────────────────────────────────────────────────
    # Field Validators
    # ───────────────────────────────────────────────────────────────────

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        normalized = (v or "").upper()

        if normalized not in allowed:
            raise ValueError(
                f"Invalid LOG_LEVEL '{v}'. "
                f"Allowed: {', '.join(sorted(allowed))}"
            )

        return normalized

    @field_validator("DATA_PATH", "REPORTS_PATH", "LOGS_PATH", mode="before")
    @classmethod
    def normalize_paths(cls, v: Path | str) -> Path:
        """Expand user and resolve path."""
        return Path(v).expanduser().resolve()

    @field_validator("MISSING_COUNT", "KNN_NEIGHBORS", "MI_REPLICATES", "MI_MAX_ITER")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Counts must be >= 1."""
        if v < 1:
            raise ValueError("value must be a positive integer")
        return v

    @field_validator("SIGNIFICANCE_THRESHOLD")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Validate significance level."""
        if not 0.0 < v < 1.0:
            raise ValueError("SIGNIFICANCE_THRESHOLD must be in range (0.0, 1.0)")
        return v

    @field_validator("DENSITY_GRID_POINTS")
    @classmethod
    def validate_grid(cls, v: int) -> int:
        """Density grid needs at least two points."""
        if v < 2:
            raise ValueError("DENSITY_GRID_POINTS must be >= 2")
        return v

    # ───────────────────────────────────────────────────────────────────
    # Model Validators
    # ───────────────────────────────────────────────────────────────────

    @model_validator(mode="after")
    def validate_configuration(self) -> "Settings":
        """Cross-field checks."""
        if self.RUNNER_MAX_WORKERS < 1:
            self.RUNNER_MAX_WORKERS = 1
        if self.TARGET_COLUMN in self.REGRESSION_EXCLUDE:
            raise ValueError("TARGET_COLUMN cannot be listed in REGRESSION_EXCLUDE")
        return self

    # ───────────────────────────────────────────────────────────────────
    # Helpers
    # ───────────────────────────────────────────────────────────────────

    def ensure_directories(self) -> None:
        """Create the output directories on demand."""
        for path in (self.REPORTS_PATH, self.LOGS_PATH):
            path.mkdir(parents=True, exist_ok=True)

    def report_path(self, name: Optional[str] = None) -> Path:
        """Path inside REPORTS_PATH (the directory itself when name is None)."""
        return self.REPORTS_PATH / name if name else self.REPORTS_PATH


# ═══════════════════════════════════════════════════════════════════════════
# Global Instance
# ═══════════════════════════════════════════════════════════════════════════

settings = Settings()


def get_settings() -> Settings:
    """Return the global settings instance."""
    return settings
