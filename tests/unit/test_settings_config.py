"""
ImputeLab - Unit Tests for settings and run configuration
"""

import pytest
from pydantic import ValidationError

from agents.imputation.config import ImputationConfig
from config import use_test_settings, validate_settings
from config.settings import Settings, get_settings, settings
from core.exceptions import ConfigurationError


class TestSettings:
    """Tests for environment-backed settings"""

    def test_walkthrough_defaults(self):
        s = Settings(_env_file=None)
        assert s.RANDOM_SEED == 555
        assert s.MISSING_COUNT == 15
        assert s.KNN_NEIGHBORS == 5
        assert s.MI_REPLICATES == 5
        assert s.SIGNIFICANCE_THRESHOLD == 0.05
        assert s.MI_REDUCTION == "mean"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("KNN_NEIGHBORS", "7")
        monkeypatch.setenv("MI_REDUCTION", "first")
        monkeypatch.setenv("CATEGORICAL_COLUMNS", '["race"]')
        s = Settings(_env_file=None)
        assert s.KNN_NEIGHBORS == 7
        assert s.MI_REDUCTION == "first"
        assert s.CATEGORICAL_COLUMNS == ["race"]

    def test_invalid_threshold(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, SIGNIFICANCE_THRESHOLD=1.5)

    def test_invalid_reduction(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, MI_REDUCTION="median")

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_target_cannot_be_excluded(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, TARGET_COLUMN="bwt", REGRESSION_EXCLUDE=["bwt"])

    def test_report_path(self, tmp_path):
        s = Settings(_env_file=None, REPORTS_PATH=tmp_path)
        assert s.report_path("density.html") == tmp_path.resolve() / "density.html"
        assert s.report_path() == tmp_path.resolve()

    def test_global_instance(self):
        assert get_settings() is settings
        assert settings.TEST_MODE is True


class TestConfigPackage:
    """Tests for config package helpers"""

    def test_validate_settings(self, tmp_path):
        original = (settings.REPORTS_PATH, settings.LOGS_PATH, settings.DATA_PATH)
        try:
            use_test_settings(
                REPORTS_PATH=tmp_path / "reports",
                LOGS_PATH=tmp_path / "logs",
                DATA_PATH=tmp_path / "missing",
            )
            warnings = validate_settings()
            assert (tmp_path / "reports").is_dir()
            assert set(warnings) == {"DATA_PATH"}
            with pytest.raises(ValueError):
                validate_settings(strict=True)
        finally:
            use_test_settings(
                REPORTS_PATH=original[0], LOGS_PATH=original[1], DATA_PATH=original[2]
            )

    def test_use_test_settings(self):
        original = settings.DENSITY_GRID_POINTS
        try:
            use_test_settings(DENSITY_GRID_POINTS=64)
            assert settings.DENSITY_GRID_POINTS == 64
        finally:
            use_test_settings(DENSITY_GRID_POINTS=original)

    def test_use_test_settings_unknown_key(self):
        with pytest.raises(AttributeError):
            use_test_settings(NOT_A_SETTING=1)


class TestImputationConfig:
    """Tests for the run configuration"""

    def test_defaults(self):
        config = ImputationConfig()
        assert (config.seed, config.missing_count, config.k, config.m) == (555, 15, 5, 5)
        assert config.significance_threshold == 0.05
        assert config.reduction == "mean"

    @pytest.mark.parametrize("changes", [
        {"missing_count": 0},
        {"k": 0},
        {"m": 0},
        {"significance_threshold": 0.0},
        {"reduction": "median"},
        {"max_workers": 0},
        {"density_grid_points": 1},
    ])
    def test_invalid(self, changes):
        with pytest.raises(ConfigurationError):
            ImputationConfig(**changes)

    def test_lists_become_tuples(self):
        config = ImputationConfig(categorical_columns=["race"], regression_exclude=["low"])
        assert config.categorical_columns == ("race",)
        assert config.regression_exclude == ("low",)
        hash(config)

    def test_with_overrides_ignores_none(self):
        config = ImputationConfig().with_overrides(k=3, m=None)
        assert config.k == 3
        assert config.m == 5

    def test_from_settings(self):
        s = Settings(_env_file=None, KNN_NEIGHBORS=9, CATEGORICAL_COLUMNS=["race"])
        config = ImputationConfig.from_settings(s)
        assert config.k == 9
        assert config.categorical_columns == ("race",)
        assert config.seed == s.RANDOM_SEED

    def test_to_dict(self):
        assert ImputationConfig().to_dict()["reduction"] == "mean"
