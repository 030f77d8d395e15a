# config/logging_config.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Logging                                                       ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ loguru sinks: console, app.log, errors.log, optional app.jsonl         ║
║  ✓ statsmodels / scikit-learn logging and warnings routed into loguru     ║
║  ✓ agent / component / strategy fields on every line                      ║
║  ✓ Bound loggers, LogContext, execution time decorator                    ║
╚════════════════════════════════════════════════════════════════════════════╝

The model libraries complain through the stdlib: statsmodels raises
``ConvergenceWarning`` / ``ValueWarning`` from MICE and OLS, scikit-learn
raises ``ConvergenceWarning`` from ``IterativeImputer``. After
``setup_logging()`` those arrive in the same sinks as our own messages,
tagged with the strategy that was running (see ``LogContext``).

Usage:
```python
    from config.logging_config import setup_logging, get_logger, log_execution_time

    setup_logging(log_level="DEBUG")
    log = get_logger(__name__, component="cli")

    @log_execution_time
    def run():
        ...
```
"""

from __future__ import annotations

import logging
import sys
import time
import warnings
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from loguru import logger

from config.settings import settings

__all__ = [
    "setup_logging",
    "get_logger",
    "log_execution_time",
    "LogContext",
    "InterceptHandler",
    "route_library_logs",
]

# Loggers of the libraries the strategies wrap
LIBRARY_LOGGERS = ("statsmodels", "sklearn", "py.warnings")

LOG_FORMAT_HUMAN = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<blue>{extra[agent]}</blue>/<blue>{extra[component]}</blue>"
    "[<magenta>{extra[strategy]}</magenta>] | "
    "<level>{message}</level>"
)

LOG_FORMAT_COMPACT = "{time:HH:mm:ss} | {level: <8} | {extra[strategy]} | {message}"

_SINK_IDS: List[int] = []
_configured = False


# ═══════════════════════════════════════════════════════════════════════════
# Stdlib bridge
# ═══════════════════════════════════════════════════════════════════════════

class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Union[str, int] = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        logger.bind(component=record.name).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


def route_library_logs(names: Sequence[str] = LIBRARY_LOGGERS) -> None:
    """Send the named stdlib loggers, and Python warnings, to loguru."""
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in names:
        lib_logger = logging.getLogger(name)
        lib_logger.handlers = [InterceptHandler()]
        lib_logger.propagate = False

    # one line per distinct warning location, not one per MICE cycle
    warnings.simplefilter("default")
    logging.captureWarnings(True)


def _patch_record(record: Dict[str, Any]) -> None:
    extra = record["extra"]
    extra.setdefault("agent", "-")
    extra.setdefault("component", "-")
    extra.setdefault("strategy", "-")


def _file_sink(path: Path, level: str, retention: str, **kwargs: Any) -> int:
    return logger.add(
        path,
        level=level,
        rotation=settings.LOG_ROTATION,
        retention=retention,
        compression="zip",
        encoding="utf-8",
        enqueue=True,
        **kwargs,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Setup
# ═══════════════════════════════════════════════════════════════════════════

def setup_logging(
    app_name: Optional[str] = None,
    log_level: Optional[str] = None,
    *,
    enable_json: Optional[bool] = None,
    console_compact: Optional[bool] = None,
    logs_path: Optional[Union[str, Path]] = None,
    reset_existing: bool = False
) -> None:
    """
    Configure loguru once per process.

    Later calls are no-ops unless ``reset_existing=True``. File sinks
    (``app.log``, ``errors.log`` and, with ``LOG_JSON_ENABLED``,
    ``app.jsonl``) are skipped in ``TEST_MODE``.
    """
    global _configured

    if _configured and not reset_existing:
        return

    app_name = app_name or settings.APP_NAME
    level = (log_level or settings.LOG_LEVEL).upper()
    logs_dir = Path(logs_path or settings.LOGS_PATH).resolve()
    enable_json = settings.LOG_JSON_ENABLED if enable_json is None else enable_json
    compact = settings.LOG_CONSOLE_COMPACT if console_compact is None else console_compact

    logger.remove()
    _SINK_IDS.clear()
    logger.configure(patcher=_patch_record)

    _SINK_IDS.append(
        logger.add(
            sys.stderr,
            format=LOG_FORMAT_COMPACT if compact else LOG_FORMAT_HUMAN,
            level=level,
            colorize=True,
            backtrace=(level == "DEBUG"),
            diagnose=False,
        )
    )

    if not settings.TEST_MODE:
        logs_dir.mkdir(parents=True, exist_ok=True)
        _SINK_IDS.append(
            _file_sink(logs_dir / "app.log", level, settings.LOG_RETENTION, format=LOG_FORMAT_HUMAN)
        )
        _SINK_IDS.append(
            _file_sink(logs_dir / "errors.log", "ERROR", "90 days", format=LOG_FORMAT_HUMAN)
        )
        if enable_json:
            _SINK_IDS.append(
                _file_sink(logs_dir / "app.jsonl", level, settings.LOG_RETENTION, serialize=True)
            )

    route_library_logs()

    logger.info(
        f"Logging ready: app={app_name}, level={level}, json={enable_json}, "
        f"files={'off' if settings.TEST_MODE else logs_dir}"
    )
    _configured = True


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

def get_logger(name: Optional[str] = None, **binds: Any):
    """Logger bound to ``name`` plus any extra fields (``component="cli"``)."""
    if name:
        binds = {"name": name, **binds}
    return logger.bind(**binds) if binds else logger


class LogContext:
    """
    Bind fields to every log call inside the block, including calls made by
    library code routed through ``InterceptHandler``.

    Example:
```python
        with LogContext(strategy="knn"):
            strategy.apply(df, "bwt")
```
    """

    def __init__(self, **fields: Any):
        self._fields = fields
        self._cm = None

    def __enter__(self):
        self._cm = logger.contextualize(**self._fields)
        self._cm.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(f"{exc_type.__name__} inside {self._fields}: {exc_val}")
        self._cm.__exit__(exc_type, exc_val, exc_tb)
        return False


def log_execution_time(func: Callable) -> Callable:
    """Log how long ``func`` took; failures are logged and re-raised."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        logger.debug(f"▶ {func.__name__}")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"✗ {func.__name__} failed after {time.perf_counter() - start:.3f}s: {e}")
            raise
        logger.info(f"✓ Completed {func.__name__} in {time.perf_counter() - start:.3f}s")
        return result

    return wrapper
