# config/__init__.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Configuration Package                                         ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Lazy Module Loading                                                   ║
║  ✓ Settings Validation                                                   ║
║  ✓ Test Utilities                                                        ║
╚════════════════════════════════════════════════════════════════════════════╝

Layout:
```
    config/
    ├── __init__.py          # Lazy exports (this file)
    ├── settings.py          # Environment-backed settings
    ├── constants.py         # Series names, labels and styles
    └── logging_config.py    # Loguru sinks
```

Usage:
```python
    from config import settings, setup_logging

    setup_logging()
    print(settings.RANDOM_SEED, settings.MISSING_COUNT)

    from config import validate_settings
    warnings = validate_settings()
```
"""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from types import ModuleType
from typing import Any, Dict, List, Tuple

# ═══════════════════════════════════════════════════════════════════════════
# Package Metadata
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
    # Settings
    "settings": ("config.settings", "settings"),
    "Settings": ("config.settings", "Settings"),
    "get_settings": ("config.settings", "get_settings"),

    # Logging
    "setup_logging": ("config.logging_config", "setup_logging"),
    "get_logger": ("config.logging_config", "get_logger"),
}

__all__ = (
    "__version__",
    *_LAZY_EXPORTS,
    "validate_settings",
    "use_test_settings",
)


# ═══════════════════════════════════════════════════════════════════════════
# Lazy Loading Implementation
# ═══════════════════════════════════════════════════════════════════════════

def __getattr__(name: str) -> Any:
    """Load an export on first access and cache it in module globals."""
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


# ═══════════════════════════════════════════════════════════════════════════
# Configuration Validation
# ═══════════════════════════════════════════════════════════════════════════

def validate_settings(*, strict: bool = False) -> Dict[str, str]:
    """
    🔍 **Validate Configuration Settings**

    Checks the output directories and the walkthrough parameters that field
    validators cannot judge on their own.

    Args:
        strict: If True, raises ValueError on the first issue

    Returns:
        Dictionary of warnings (empty if all OK)
    """
    from pathlib import Path
    from config.settings import settings as _s

    warnings: Dict[str, str] = {}

    def _flag(key: str, msg: str) -> None:
        if strict:
            raise ValueError(msg)
        warnings[key] = msg

    for label in ("REPORTS_PATH", "LOGS_PATH"):
        path = Path(getattr(_s, label))
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            _flag(label, f"{label} ({path}) is not accessible: {e}")

    if not Path(_s.DATA_PATH).exists():
        _flag("DATA_PATH", f"DATA_PATH ({_s.DATA_PATH}) does not exist")

    if _s.KNN_NEIGHBORS > 50:
        _flag(
            "KNN_NEIGHBORS",
            f"KNN_NEIGHBORS is very high ({_s.KNN_NEIGHBORS}); "
            "small tables will not have enough donors"
        )

    if _s.MI_REPLICATES > 100:
        _flag(
            "MI_REPLICATES",
            f"MI_REPLICATES is very high ({_s.MI_REPLICATES}); runs will be slow"
        )

    return warnings


# ═══════════════════════════════════════════════════════════════════════════
# Test Utilities
# ═══════════════════════════════════════════════════════════════════════════

def use_test_settings(**overrides: Any) -> None:
    """
    🧪 **Override Settings for Tests**

    Example:
```python
        use_test_settings(RANDOM_SEED=123, MISSING_COUNT=5)
```

    Warning:
        These changes are global and persist until process restart.
    """
    mod: ModuleType = import_module("config.settings")
    settings_instance = getattr(mod, "settings")

    for key, value in overrides.items():
        if not hasattr(settings_instance, key):
            raise AttributeError(f"Setting '{key}' does not exist in configuration")
        setattr(settings_instance, key, value)
