# core/__init__.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Core Package                                                  ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Lazy Module Loading (PEP 562)                                          ║
║  ✓ Agent Framework, Errors, Data Loading                                  ║
╚════════════════════════════════════════════════════════════════════════════╝

Usage:
```python
    from core import BaseAgent, AgentResult, DataLoader
    from core import InvalidSampleSize, StrategyFailure
```
"""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from types import ModuleType
from typing import Any, Dict, List, Tuple

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

try:
    __version__ = _pkg_version("imputelab")
except PackageNotFoundError:
    # Development mode / uninstalled package
    __version__ = "1.0.0-dev"


# ═══════════════════════════════════════════════════════════════════════════
# Lazy Export Definitions
# ═══════════════════════════════════════════════════════════════════════════

_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    # Agent Framework
    "BaseAgent": ("core.base_agent", "BaseAgent"),
    "AgentResult": ("core.base_agent", "AgentResult"),
    "AgentStatus": ("core.base_agent", "AgentStatus"),

    # Data
    "DataLoader": ("core.data_loader", "DataLoader"),
    "load_table": ("core.data_loader", "load_table"),

    # Errors
    "ImputeLabError": ("core.exceptions", "ImputeLabError"),
    "InvalidSampleSize": ("core.exceptions", "InvalidSampleSize"),
    "EmptyColumn": ("core.exceptions", "EmptyColumn"),
    "SingularFit": ("core.exceptions", "SingularFit"),
    "InsufficientNeighbors": ("core.exceptions", "InsufficientNeighbors"),
    "StrategyFailure": ("core.exceptions", "StrategyFailure"),
}

__all__ = ("__version__",) + tuple(_LAZY_EXPORTS)


# ═══════════════════════════════════════════════════════════════════════════
# Lazy Loading Implementation
# ═══════════════════════════════════════════════════════════════════════════

def __getattr__(name: str) -> Any:
    """
    Lazy attribute resolution.

    Loads modules only when their exports are first accessed and caches the
    object in module globals.
    """
    if name in _LAZY_EXPORTS:
        module_name, symbol_name = _LAZY_EXPORTS[name]
        try:
            module: ModuleType = import_module(module_name)
            obj = getattr(module, symbol_name)
        except (ImportError, AttributeError) as e:
            raise AttributeError(
                f"Failed to load '{name}' from '{module_name}': {e}"
            ) from e
        globals()[name] = obj
        return obj

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> List[str]:
    return sorted(set(list(globals().keys()) + list(_LAZY_EXPORTS.keys())))
