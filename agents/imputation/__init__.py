# agents/imputation/__init__.py
"""
ImputeLab — imputation package.

Modules:
- config                   ImputationConfig
- injector                 inject / MissingnessInjector
- strategies               Drop / MeanFill / MedianFill
- model_strategies         RegressionFill / KnnFill
- multiple_imputation      PMM / bootstrap EM (multiple imputation)
- registry                 StrategyRegistry / default_strategies
- runner                   run_strategies / ImputationRunner
- imputation_orchestrator  ImputationOrchestrator / run_walkthrough
"""

from __future__ import annotations

from importlib import import_module
from typing import Dict, Tuple

_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    "ImputationConfig": ("agents.imputation.config", "ImputationConfig"),
    "InjectionResult": ("agents.imputation.injector", "InjectionResult"),
    "MissingnessInjector": ("agents.imputation.injector", "MissingnessInjector"),
    "inject": ("agents.imputation.injector", "inject"),
    "ImputationStrategy": ("agents.imputation.strategies", "ImputationStrategy"),
    "StrategyOutput": ("agents.imputation.strategies", "StrategyOutput"),
    "DropStrategy": ("agents.imputation.strategies", "DropStrategy"),
    "MeanFillStrategy": ("agents.imputation.strategies", "MeanFillStrategy"),
    "MedianFillStrategy": ("agents.imputation.strategies", "MedianFillStrategy"),
    "RegressionFillStrategy": ("agents.imputation.model_strategies", "RegressionFillStrategy"),
    "KnnFillStrategy": ("agents.imputation.model_strategies", "KnnFillStrategy"),
    "MultipleImputationFillStrategy": (
        "agents.imputation.multiple_imputation", "MultipleImputationFillStrategy"
    ),
    "PmmFillStrategy": ("agents.imputation.multiple_imputation", "PmmFillStrategy"),
    "BootstrapEmFillStrategy": ("agents.imputation.multiple_imputation", "BootstrapEmFillStrategy"),
    "StrategyRegistry": ("agents.imputation.registry", "StrategyRegistry"),
    "default_strategies": ("agents.imputation.registry", "default_strategies"),
    "StrategyResultSet": ("agents.imputation.runner", "StrategyResultSet"),
    "ImputationRunner": ("agents.imputation.runner", "ImputationRunner"),
    "run_strategies": ("agents.imputation.runner", "run_strategies"),
    "ImputationOrchestrator": (
        "agents.imputation.imputation_orchestrator", "ImputationOrchestrator"
    ),
    "run_walkthrough": ("agents.imputation.imputation_orchestrator", "run_walkthrough"),
}

__all__ = tuple(_LAZY_EXPORTS)


def __getattr__(name: str):
    if name in _LAZY_EXPORTS:
        mod_name, symbol = _LAZY_EXPORTS[name]
        obj = getattr(import_module(mod_name), symbol)
        globals()[name] = obj
        return obj
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_EXPORTS.keys()))
