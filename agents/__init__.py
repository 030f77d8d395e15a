# agents/__init__.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Agents Package                                                ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Lazy Import System (PEP 562)                                          ║
║  ✓ Imputation: injector, strategies, runner, orchestrator                 ║
║  ✓ Analysis: missingness profile, distribution comparison                 ║
╚════════════════════════════════════════════════════════════════════════════╝

Usage:
```python
    from agents import ImputationOrchestrator, ImputationConfig

    result = ImputationOrchestrator(ImputationConfig(seed=555)).run(
        data=df, target_column="bwt"
    )
```
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Dict, List


@dataclass(frozen=True)
class _LazySpec:
    """Specification for lazy-loaded symbol."""
    module: str
    symbol: str
    category: str = "other"


# Map: public_name → _LazySpec
_LAZY_EXPORTS: Dict[str, _LazySpec] = {
    # Orchestration
    "ImputationOrchestrator": _LazySpec(
        "agents.imputation.imputation_orchestrator", "ImputationOrchestrator", "orchestrator"
    ),
    "ImputationConfig": _LazySpec("agents.imputation.config", "ImputationConfig", "config"),

    # Imputation
    "inject": _LazySpec("agents.imputation.injector", "inject", "imputation"),
    "run_strategies": _LazySpec("agents.imputation.runner", "run_strategies", "imputation"),
    "ImputationRunner": _LazySpec("agents.imputation.runner", "ImputationRunner", "imputation"),
    "default_strategies": _LazySpec("agents.imputation.registry", "default_strategies", "imputation"),

    # Analysis
    "MissingDataAnalyzer": _LazySpec("agents.eda.missing_data_analyzer", "MissingDataAnalyzer", "analysis"),
    "DistributionComparator": _LazySpec(
        "agents.eda.distribution_comparator", "DistributionComparator", "analysis"
    ),
}

__all__ = tuple(_LAZY_EXPORTS)


def __getattr__(name: str) -> Any:
    spec = _LAZY_EXPORTS.get(name)
    if spec is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
    try:
        module: ModuleType = importlib.import_module(spec.module)
        obj = getattr(module, spec.symbol)
    except (ImportError, AttributeError) as e:
        raise AttributeError(f"Failed to load '{name}' from '{spec.module}': {e}") from e
    globals()[name] = obj
    return obj


def __dir__() -> List[str]:
    return sorted(set(list(globals().keys()) + list(_LAZY_EXPORTS.keys())))


def list_agents(category: str = "") -> List[str]:
    """Public names, optionally filtered by category."""
    return [n for n, s in _LAZY_EXPORTS.items() if not category or s.category == category]
