"""
ImputeLab - Pytest Configuration
Shared fixtures and configuration for all tests
"""

import os
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

# No file sinks while testing
os.environ.setdefault("TEST_MODE", "true")

from agents.imputation.config import ImputationConfig  # noqa: E402
from agents.imputation.injector import inject  # noqa: E402


# ==================== DATA FIXTURES ====================

def make_birthwt(n: int = 189, seed: int = 2024) -> pd.DataFrame:
    """
    Synthetic table shaped like MASS::birthwt: mother's characteristics plus
    birth weight in grams. ``race`` is a numeric code (1, 2, 3) and ``low`` is
    derived from ``bwt``.
    """
    rng = np.random.default_rng(seed)
    age = rng.integers(14, 45, n)
    lwt = rng.integers(80, 250, n)
    race = rng.choice([1, 2, 3], n, p=[0.5, 0.15, 0.35])
    smoke = rng.binomial(1, 0.4, n)
    ptl = rng.choice([0, 0, 0, 1, 2], n)
    ht = rng.binomial(1, 0.07, n)
    ui = rng.binomial(1, 0.15, n)
    ftv = rng.choice([0, 1, 2, 3], n)

    bwt = (
        2800
        + 4.0 * lwt
        - 400 * smoke
        - 450 * (race == 2)
        - 300 * (race == 3)
        - 550 * ht
        - 500 * ui
        + rng.normal(0, 420, n)
    ).round().astype(int)

    return pd.DataFrame({
        "low": (bwt < 2500).astype(int),
        "age": age,
        "lwt": lwt,
        "race": race,
        "smoke": smoke,
        "ptl": ptl,
        "ht": ht,
        "ui": ui,
        "ftv": ftv,
        "bwt": bwt,
    })


@pytest.fixture
def birthwt():
    """189-row birth-weight table (race as numeric code)."""
    return make_birthwt()


@pytest.fixture
def birthwt_cat(birthwt):
    """Same table with ``race`` cast to category."""
    df = birthwt.copy()
    df["race"] = df["race"].astype("category")
    return df


@pytest.fixture
def injected(birthwt_cat):
    """Walkthrough injection: 15 gaps in ``bwt`` with seed 555."""
    return inject(birthwt_cat, "bwt", count=15, seed=555)


@pytest.fixture
def walkthrough_config():
    """Configuration of the birth-weight walkthrough."""
    return ImputationConfig(
        seed=555,
        missing_count=15,
        k=5,
        m=5,
        regression_exclude=("low",),
        categorical_columns=("race",),
        mi_max_iter=5,
    )


@pytest.fixture
def small_df():
    """Tiny numeric table with two gaps in the target."""
    return pd.DataFrame({
        "x": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        "y": [10.0, np.nan, 30.0, 40.0, np.nan, 60.0],
    })


# ==================== FILE FIXTURES ====================

@pytest.fixture
def temp_csv_file(birthwt, tmp_path):
    """Birth-weight table written R-style (with a row-name column)."""
    path = tmp_path / "birthwt.csv"
    df = birthwt.set_axis(birthwt.index + 1, axis=0)
    df.to_csv(path, index_label="")
    return path


# ==================== PYTEST CONFIGURATION ====================

def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line("markers", "slow: marks tests as slow")
