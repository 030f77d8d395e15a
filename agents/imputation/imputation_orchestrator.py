# === MODULE DESCRIPTION ===
"""
ImputeLab - Imputation Orchestrator
Runs the whole walkthrough on one table: inject gaps into the target, profile
the missingness, apply every strategy, and compare the resulting
distributions. Returns one stable data contract plus telemetry.

Contract (AgentResult.data):
{
  "injection": InjectionResult,
  "missingness": { ... MissingDataAnalyzer payload ... },
  "result_set": StrategyResultSet,
  "report": ComparisonReport,
  "summary": {
      "dataset_shape": (int, int),
      "target_column": str,
      "injected": int,
      "succeeded": List[str],
      "failed": {identifier: reason},
      "config": { ... ImputationConfig.to_dict() ... }
  },
  "telemetry": {
      "timings_ms": {"inject": float, "profile": float, "impute": float,
                     "compare": float, "_total": float}
  }
}
"""

from __future__ import annotations

import time
from typing import Any, Dict, Iterable, Optional

import pandas as pd
from loguru import logger

from core.base_agent import AgentResult, BaseAgent
from core.utils import validate_table
from agents.eda.distribution_comparator import DistributionComparator
from agents.eda.missing_data_analyzer import MissingDataAnalyzer
from agents.imputation.config import ImputationConfig
from agents.imputation.injector import MissingnessInjector
from agents.imputation.registry import default_strategies
from agents.imputation.runner import run_strategies
from agents.imputation.strategies import ImputationStrategy

__all__ = ["ImputationOrchestrator", "run_walkthrough"]


class ImputationOrchestrator(BaseAgent):
    """
    Orchestrates injection → profiling → imputation → comparison.

    Injection errors (bad count, unknown target) fail the whole run.
    Strategy errors only add a warning each and leave the run partial.
    """

    def __init__(
        self,
        config: Optional[ImputationConfig] = None,
        strategies: Optional[Iterable[ImputationStrategy]] = None,
    ) -> None:
        super().__init__(
            name="ImputationOrchestrator",
            description="Missing-value imputation walkthrough"
        )
        self.config = config or ImputationConfig()
        self.strategies = list(strategies) if strategies is not None else None
        self._log = logger.bind(agent="ImputationOrchestrator")

    # === EXECUTION ===
    def execute(
        self,
        data: pd.DataFrame,
        target_column: str,
        **kwargs: Any
    ) -> AgentResult:
        """
        Execute the walkthrough on ``data``.

        Args:
            data: Complete input table
            target_column: Column that receives the injected gaps
        """
        result = AgentResult(agent_name=self.name)
        cfg = self.config
        validate_table(data, target_column)

        timings: Dict[str, float] = {}
        t0_total = time.perf_counter()

        # 1) inject
        t = time.perf_counter()
        injection = MissingnessInjector(seed=cfg.seed).inject(
            data, target_column, cfg.missing_count
        )
        timings["inject"] = round((time.perf_counter() - t) * 1000.0, 1)

        # 2) profile
        t = time.perf_counter()
        profile = MissingDataAnalyzer().run(data=injection.data)
        timings["profile"] = round((time.perf_counter() - t) * 1000.0, 1)
        if profile.errors:
            for err in profile.errors:
                result.add_warning(f"Missingness profile: {err}")

        # 3) impute
        strategies = self.strategies if self.strategies is not None else default_strategies(cfg)
        self._log.info(f"▶ Applying {len(strategies)} strategies to '{target_column}'")
        t = time.perf_counter()
        result_set = run_strategies(
            injection.data,
            target_column,
            strategies,
            max_workers=cfg.max_workers,
        )
        timings["impute"] = round((time.perf_counter() - t) * 1000.0, 1)

        for identifier, failure in result_set.failures.items():
            result.add_warning(f"Strategy '{identifier}' failed: {failure.reason}")

        # 4) compare
        t = time.perf_counter()
        report = DistributionComparator(grid_points=cfg.density_grid_points).compare(
            data[target_column],
            injection.injected_column,
            result_set,
            mask=injection.mask,
        )
        timings["compare"] = round((time.perf_counter() - t) * 1000.0, 1)
        timings["_total"] = round((time.perf_counter() - t0_total) * 1000.0, 1)

        result.data = {
            "injection": injection,
            "missingness": profile.data,
            "result_set": result_set,
            "report": report,
            "summary": {
                "dataset_shape": tuple(int(x) for x in data.shape),
                "target_column": target_column,
                "injected": injection.count,
                "succeeded": result_set.succeeded,
                "failed": {i: f.reason for i, f in result_set.failures.items()},
                "config": cfg.to_dict(),
            },
            "telemetry": {"timings_ms": timings},
        }

        if result_set.failures:
            self._log.warning(
                f"Walkthrough finished with {len(result_set.failures)} failed strategies: "
                f"{result_set.failed}"
            )
        else:
            self._log.success("Imputation walkthrough completed successfully")
        return result


def run_walkthrough(
    data: pd.DataFrame,
    target_column: str,
    config: Optional[ImputationConfig] = None,
    strategies: Optional[Iterable[ImputationStrategy]] = None,
) -> AgentResult:
    """
    Convenience function: run the full walkthrough.

    Example:
        result = run_walkthrough(df, "bwt", ImputationConfig(seed=555))
        result.data["report"].to_frame()
    """
    return ImputationOrchestrator(config, strategies).run(
        data=data, target_column=target_column
    )
