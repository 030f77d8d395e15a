# agents/imputation/registry.py
"""
Strategy registry: an ordered, identifier-unique collection of strategies,
plus the factory for the default line-up (drop, mean, median, regression,
kNN, PMM, bootstrap EM).
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from core.exceptions import ConfigurationError
from agents.imputation.config import ImputationConfig
from agents.imputation.model_strategies import KnnFillStrategy, RegressionFillStrategy
from agents.imputation.multiple_imputation import BootstrapEmFillStrategy, PmmFillStrategy
from agents.imputation.strategies import (
    DropStrategy,
    ImputationStrategy,
    MeanFillStrategy,
    MedianFillStrategy,
)

__all__ = ["StrategyRegistry", "default_strategies", "default_registry"]


class StrategyRegistry:
    """Strategies in registration order, keyed by identifier."""

    def __init__(self, strategies: Optional[Iterable[ImputationStrategy]] = None):
        self._strategies: Dict[str, ImputationStrategy] = {}
        for strategy in strategies or ():
            self.register(strategy)

    def register(self, strategy: ImputationStrategy) -> "StrategyRegistry":
        if not isinstance(strategy, ImputationStrategy):
            raise ConfigurationError(
                f"Expected an ImputationStrategy, got {type(strategy).__name__}"
            )
        if strategy.identifier in self._strategies:
            raise ConfigurationError(
                f"Strategy '{strategy.identifier}' is already registered",
                details={"registered": self.identifiers},
            )
        self._strategies[strategy.identifier] = strategy
        return self

    def unregister(self, identifier: str) -> bool:
        return self._strategies.pop(identifier, None) is not None

    def get(self, identifier: str) -> ImputationStrategy:
        try:
            return self._strategies[identifier]
        except KeyError:
            raise ConfigurationError(
                f"Unknown strategy '{identifier}'",
                details={"registered": self.identifiers},
            ) from None

    def select(self, identifiers: Iterable[str]) -> List[ImputationStrategy]:
        """Strategies for ``identifiers``, keeping registration order."""
        wanted = set(identifiers)
        unknown = wanted - set(self._strategies)
        if unknown:
            raise ConfigurationError(
                f"Unknown strategies: {sorted(unknown)}",
                details={"registered": self.identifiers},
            )
        return [s for i, s in self._strategies.items() if i in wanted]

    @property
    def identifiers(self) -> List[str]:
        return list(self._strategies)

    def __iter__(self) -> Iterator[ImputationStrategy]:
        return iter(list(self._strategies.values()))

    def __len__(self) -> int:
        return len(self._strategies)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._strategies

    def __repr__(self) -> str:
        return f"StrategyRegistry({self.identifiers})"


def default_strategies(config: Optional[ImputationConfig] = None) -> List[ImputationStrategy]:
    """The seven strategies of the walkthrough, configured from ``config``."""
    config = config or ImputationConfig()
    mi_options = dict(
        m=config.m,
        reduction=config.reduction,
        seed=config.seed,
        max_iter=config.mi_max_iter,
        categorical_columns=config.categorical_columns,
    )
    return [
        DropStrategy(),
        MeanFillStrategy(),
        MedianFillStrategy(),
        RegressionFillStrategy(
            significance_threshold=config.significance_threshold,
            exclude_columns=config.regression_exclude,
            categorical_columns=config.categorical_columns,
        ),
        KnnFillStrategy(k=config.k, categorical_columns=config.categorical_columns),
        PmmFillStrategy(**mi_options),
        BootstrapEmFillStrategy(**mi_options),
    ]


def default_registry(config: Optional[ImputationConfig] = None) -> StrategyRegistry:
    return StrategyRegistry(default_strategies(config))
