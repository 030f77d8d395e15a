# agents/imputation/runner.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Imputation Runner                                             ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Applies every strategy independently to the same injected table       ║
║  ✓ Each strategy works on its own copy                                    ║
║  ✓ Partial-failure tolerant (errors become StrategyFailure records)       ║
║  ✓ Optional thread pool, results kept in registration order               ║
╚════════════════════════════════════════════════════════════════════════════╝

Usage:
```python
    from agents.imputation.runner import ImputationRunner, run_strategies
    from agents.imputation.registry import default_strategies

    result_set = run_strategies(injected_df, "bwt", default_strategies())
    result_set.results["mean"].values
    result_set.failures            # {} when everything succeeded

    # As an agent (AgentResult with success / partial / failed status)
    result = ImputationRunner(max_workers=4).run(
        data=injected_df, target_column="bwt", strategies=default_strategies()
    )
    result.data["result_set"]
```
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd
from loguru import logger

from config.logging_config import LogContext
from core.base_agent import AgentResult, BaseAgent
from core.exceptions import ConfigurationError, StrategyFailure
from core.utils import validate_table
from agents.imputation.registry import StrategyRegistry, default_strategies
from agents.imputation.strategies import ImputationStrategy, StrategyOutput

__all__ = ["StrategyResultSet", "ImputationRunner", "run_strategies"]


StrategiesLike = Union[StrategyRegistry, Iterable[ImputationStrategy]]


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Result Set
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class StrategyResultSet:
    """
    Outputs of one batch, keyed by strategy identifier.

    ``results`` and ``failures`` are disjoint; together they cover every
    strategy of the batch. Both keep registration order.
    """

    target_column: str
    results: Dict[str, StrategyOutput] = field(default_factory=dict)
    failures: Dict[str, StrategyFailure] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)

    def __getitem__(self, identifier: str) -> StrategyOutput:
        return self.results[identifier]

    def __contains__(self, identifier: object) -> bool:
        return identifier in self.results

    def __len__(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> List[str]:
        return [i for i in self.order if i in self.results]

    @property
    def failed(self) -> List[str]:
        return [i for i in self.order if i in self.failures]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary (no series)."""
        return {
            "target_column": self.target_column,
            "order": list(self.order),
            "results": {
                i: {
                    "n_imputed": out.n_imputed,
                    "n_rows": int(len(out.values)),
                    "index_aligned": out.index_aligned,
                }
                for i, out in self.results.items()
            },
            "failures": {i: f.reason for i, f in self.failures.items()},
        }


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Core batch logic
# ═══════════════════════════════════════════════════════════════════════════

def _as_list(strategies: StrategiesLike) -> List[ImputationStrategy]:
    items = list(strategies)
    seen = set()
    for s in items:
        if s.identifier in seen:
            raise ConfigurationError(
                f"Duplicate strategy identifier '{s.identifier}'",
                details={"identifiers": [x.identifier for x in items]},
            )
        seen.add(s.identifier)
    return items


def _apply_one(
    strategy: ImputationStrategy,
    data: pd.DataFrame,
    target_column: str,
) -> Union[StrategyOutput, StrategyFailure]:
    with LogContext(strategy=strategy.identifier):
        try:
            return strategy.apply(data.copy(), target_column)
        except Exception as e:
            failure = StrategyFailure(strategy.identifier, e)
            logger.bind(agent="ImputationRunner").warning(
                f"✗ {strategy.identifier}: {failure.reason}"
            )
            return failure


def run_strategies(
    data: pd.DataFrame,
    target_column: str,
    strategies: StrategiesLike,
    *,
    max_workers: int = 1,
) -> StrategyResultSet:
    """
    🚀 **Apply strategies independently**

    A failing strategy is recorded in ``failures`` and never stops the
    batch. Duplicate identifiers raise ``ConfigurationError`` before any
    strategy runs.
    """
    validate_table(data, target_column)
    items = _as_list(strategies)

    outcomes: Dict[str, Union[StrategyOutput, StrategyFailure]] = {}

    if max_workers > 1 and len(items) > 1:
        workers = min(max_workers, len(items))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(_apply_one, s, data, target_column): s
                for s in items
            }
            for future in as_completed(futures):
                outcomes[futures[future].identifier] = future.result()
    else:
        for s in items:
            outcomes[s.identifier] = _apply_one(s, data, target_column)

    result_set = StrategyResultSet(target_column=target_column)
    for s in items:
        result_set.order.append(s.identifier)
        outcome = outcomes[s.identifier]
        if isinstance(outcome, StrategyFailure):
            result_set.failures[s.identifier] = outcome
        else:
            result_set.results[s.identifier] = outcome

    return result_set


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Runner Agent
# ═══════════════════════════════════════════════════════════════════════════

class ImputationRunner(BaseAgent):
    """
    🏃 **Imputation Runner**

    Agent wrapper around ``run_strategies``.

    Status:
        success: every strategy produced an output
        partial: at least one failed, at least one succeeded (one warning each)
        failed: no strategy succeeded
    """

    def __init__(self, max_workers: int = 1):
        super().__init__(
            name="ImputationRunner",
            description="Applies imputation strategies independently"
        )
        self.max_workers = max(1, int(max_workers))
        self._log = logger.bind(agent="ImputationRunner")

    def execute(
        self,
        data: pd.DataFrame,
        target_column: str,
        strategies: Optional[StrategiesLike] = None,
        **kwargs: Any
    ) -> AgentResult:
        result = AgentResult(agent_name=self.name)

        if strategies is None:
            strategies = default_strategies()

        result_set = run_strategies(
            data,
            target_column,
            strategies,
            max_workers=self.max_workers,
        )

        for identifier, failure in result_set.failures.items():
            result.add_warning(f"Strategy '{identifier}' failed: {failure.reason}")

        if result_set.order and not result_set.results:
            result.add_error("All imputation strategies failed")

        result.add_data(result_set=result_set)
        result.add_metadata(
            strategies=list(result_set.order),
            succeeded=result_set.succeeded,
            failed=result_set.failed,
            max_workers=self.max_workers,
        )

        self._log.success(
            f"✓ {len(result_set.results)}/{len(result_set.order)} strategies succeeded"
        )

        return result
