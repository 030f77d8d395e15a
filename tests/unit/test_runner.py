"""
ImputeLab - Unit Tests for the Imputation Runner and Strategy Registry
"""

import pandas as pd
import pytest

from agents.imputation.config import ImputationConfig
from agents.imputation.model_strategies import KnnFillStrategy
from agents.imputation.registry import StrategyRegistry, default_registry, default_strategies
from agents.imputation.runner import ImputationRunner, run_strategies
from agents.imputation.strategies import DropStrategy, MeanFillStrategy, MedianFillStrategy
from config.constants import STRATEGY_ORDER
from core.exceptions import ConfigurationError, InsufficientNeighbors, StrategyFailure


class ExplodingStrategy(MeanFillStrategy):
    identifier = "exploding"

    def _apply(self, data, target_column):
        raise RuntimeError("boom")


class TestRunStrategies:
    """Tests for run_strategies()"""

    def test_all_succeed(self, injected):
        result_set = run_strategies(
            injected.data, "bwt", [DropStrategy(), MeanFillStrategy(), MedianFillStrategy()]
        )
        assert result_set.succeeded == ["drop", "mean", "median"]
        assert result_set.failures == {}
        assert len(result_set) == 3

    def test_partial_failure(self, injected):
        result_set = run_strategies(
            injected.data, "bwt", [KnnFillStrategy(k=500), MeanFillStrategy()]
        )
        assert "mean" in result_set
        assert result_set.failed == ["knn"]
        failure = result_set.failures["knn"]
        assert isinstance(failure, StrategyFailure)
        assert isinstance(failure.cause, InsufficientNeighbors)
        assert failure.strategy == "knn"
        assert failure.reason.startswith("InsufficientNeighbors")

    def test_unexpected_error_wrapped(self, injected):
        result_set = run_strategies(injected.data, "bwt", [ExplodingStrategy()])
        assert result_set.results == {}
        assert result_set.failures["exploding"].reason == "RuntimeError: boom"

    def test_results_and_failures_disjoint(self, injected):
        result_set = run_strategies(
            injected.data, "bwt", [ExplodingStrategy(), MeanFillStrategy(), KnnFillStrategy(k=500)]
        )
        assert set(result_set.results).isdisjoint(result_set.failures)
        assert set(result_set.results) | set(result_set.failures) == set(result_set.order)

    def test_duplicate_identifiers_rejected(self, injected):
        with pytest.raises(ConfigurationError):
            run_strategies(injected.data, "bwt", [MeanFillStrategy(), MeanFillStrategy()])

    def test_input_not_mutated(self, injected):
        before = injected.data.copy()
        run_strategies(injected.data, "bwt", [MeanFillStrategy(), DropStrategy()])
        pd.testing.assert_frame_equal(injected.data, before)

    def test_thread_pool_keeps_order(self, injected):
        strategies = [MedianFillStrategy(), KnnFillStrategy(k=5), DropStrategy(), MeanFillStrategy()]
        sequential = run_strategies(injected.data, "bwt", strategies)
        pooled = run_strategies(injected.data, "bwt", strategies, max_workers=4)
        assert pooled.order == ["median", "knn", "drop", "mean"]
        assert pooled.succeeded == sequential.succeeded
        for name in sequential.succeeded:
            pd.testing.assert_series_equal(pooled[name].values, sequential[name].values)

    def test_to_dict(self, injected):
        payload = run_strategies(
            injected.data, "bwt", [DropStrategy(), KnnFillStrategy(k=500)]
        ).to_dict()
        assert payload["order"] == ["drop", "knn"]
        assert payload["results"]["drop"]["index_aligned"] is False
        assert payload["results"]["drop"]["n_rows"] == 174
        assert "knn" in payload["failures"]


class TestImputationRunner:
    """Tests for the runner agent"""

    def test_partial_status(self, injected):
        result = ImputationRunner().run(
            data=injected.data,
            target_column="bwt",
            strategies=[KnnFillStrategy(k=500), MeanFillStrategy()],
        )
        assert result.is_partial()
        assert len(result.warnings) == 1
        assert "knn" in result.warnings[0]
        assert result.data["result_set"].succeeded == ["mean"]

    def test_all_failed(self, injected):
        result = ImputationRunner().run(
            data=injected.data, target_column="bwt", strategies=[ExplodingStrategy()]
        )
        assert result.is_failed()
        assert result.errors

    def test_success(self, injected):
        result = ImputationRunner(max_workers=2).run(
            data=injected.data,
            target_column="bwt",
            strategies=[MeanFillStrategy(), MedianFillStrategy()],
        )
        assert result.is_success()
        assert result.metadata["max_workers"] == 2

    def test_invalid_table_fails_run(self):
        result = ImputationRunner().run(data="not a table", target_column="bwt",
                                        strategies=[MeanFillStrategy()])
        assert result.is_failed()


class TestStrategyRegistry:
    """Tests for the strategy registry"""

    def test_default_order(self):
        assert default_registry().identifiers == list(STRATEGY_ORDER)

    def test_default_strategies_follow_config(self):
        config = ImputationConfig(k=7, m=3, reduction="first", regression_exclude=("low",))
        by_id = {s.identifier: s for s in default_strategies(config)}
        assert by_id["knn"].k == 7
        assert by_id["mice_pmm"].m == 3
        assert by_id["amelia_emb"].reduction == "first"
        assert by_id["regression"].exclude_columns == ("low",)

    def test_duplicate_registration(self):
        registry = StrategyRegistry([MeanFillStrategy()])
        with pytest.raises(ConfigurationError):
            registry.register(MeanFillStrategy())

    def test_register_rejects_non_strategy(self):
        with pytest.raises(ConfigurationError):
            StrategyRegistry().register("mean")

    def test_select_keeps_registration_order(self):
        registry = default_registry()
        selected = registry.select(["knn", "drop"])
        assert [s.identifier for s in selected] == ["drop", "knn"]

    def test_select_unknown(self):
        with pytest.raises(ConfigurationError):
            default_registry().select(["nope"])

    def test_get_and_unregister(self):
        registry = StrategyRegistry([MeanFillStrategy(), DropStrategy()])
        assert registry.get("mean").identifier == "mean"
        assert registry.unregister("mean") is True
        assert registry.unregister("mean") is False
        assert "mean" not in registry
        assert len(registry) == 1
        with pytest.raises(ConfigurationError):
            registry.get("mean")

    def test_registry_usable_by_runner(self, injected):
        registry = StrategyRegistry([MeanFillStrategy(), DropStrategy()])
        result_set = run_strategies(injected.data, "bwt", registry)
        assert result_set.order == ["mean", "drop"]
