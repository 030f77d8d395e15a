# core/base_agent.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeLab — Agent Framework                                               ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ BaseAgent: validate → before → execute → after, always returns a result║
║  ✓ AgentResult: success / partial / failed + payload, warnings, errors    ║
║  ✓ ImputeLab errors keep their code and details on failed results         ║
║  ✓ Optional progress callback                                             ║
╚════════════════════════════════════════════════════════════════════════════╝

Usage:
```python
    from core.base_agent import BaseAgent, AgentResult

    class ColumnMeans(BaseAgent):
        def __init__(self):
            super().__init__(name="ColumnMeans", description="Per-column means")

        def execute(self, data, **kwargs) -> AgentResult:
            result = AgentResult(agent_name=self.name)
            result.add_data(means=data.mean(numeric_only=True))
            return result

    result = ColumnMeans().run(data=df)
    result.is_success(), result.data["means"]
```

A run is never retried: with a fixed seed the same inputs fail the same way,
so an exception is reported once on a failed AgentResult.
"""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Optional
from uuid import uuid4

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import ImputeLabError
from core.utils import json_default

__all__ = [
    "BaseAgent",
    "AgentResult",
    "AgentStatus",
    "AgentError",
]


AgentStatus = Literal["success", "failed", "partial"]

ProgressCallback = Callable[[Dict[str, Any]], None]


class AgentError(RuntimeError):
    """An agent broke the ``execute`` contract."""


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Result
# ═══════════════════════════════════════════════════════════════════════════

class AgentResult(BaseModel):
    """
    📊 **Agent Result**

    ``status`` starts as ``success``; a warning downgrades it to ``partial``
    and an error makes it ``failed``. ``data`` holds the agent's contract
    (strategy outputs, reports, profiles), ``metadata`` holds facts about
    the run itself.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    agent_name: str
    status: AgentStatus = Field(default="success")

    execution_time: float = Field(default=0.0)
    timestamp: datetime = Field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    trace_id: str = Field(default_factory=lambda: uuid4().hex)

    data: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    def is_success(self) -> bool:
        return self.status == "success"

    def is_failed(self) -> bool:
        return self.status == "failed"

    def is_partial(self) -> bool:
        return self.status == "partial"

    def add_error(self, error: str) -> None:
        """Record an error; the result is failed from now on."""
        self.errors.append(error)
        self.status = "failed"

    def add_warning(self, warning: str) -> None:
        """Record a warning; a successful result becomes partial."""
        self.warnings.append(warning)
        if self.status == "success":
            self.status = "partial"

    def add_data(self, **items: Any) -> None:
        self.data.update(items)

    def add_metadata(self, **items: Any) -> None:
        self.metadata.update(items)

    @property
    def error_code(self) -> Optional[str]:
        """Code of the ImputeLab error that failed the run, if any."""
        payload = self.metadata.get("error")
        return payload.get("code") if isinstance(payload, dict) else None

    def to_json(self) -> str:
        """JSON dump; numpy, pandas and report objects are converted."""
        return json.dumps(self.model_dump(), default=json_default, ensure_ascii=False)


# ═══════════════════════════════════════════════════════════════════════════
# SECTION: Agent
# ═══════════════════════════════════════════════════════════════════════════

class BaseAgent(ABC):
    """
    🤖 **Base Agent**

    Subclasses implement ``execute(**kwargs) -> AgentResult``. Callers use
    ``run(**kwargs)``, which times the call and turns any exception into a
    failed result instead of raising.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        version: str = "1.0",
        *,
        on_progress: Optional[ProgressCallback] = None
    ):
        self.name = name
        self.description = description
        self.version = version
        self.on_progress = on_progress

        self.logger = logger.bind(agent=name, component="agent")
        self._result: Optional[AgentResult] = None

    @abstractmethod
    def execute(self, **kwargs) -> AgentResult:
        raise NotImplementedError

    # ───────────────────────────────────────────────────────────────────
    # Hooks
    # ───────────────────────────────────────────────────────────────────

    def validate_input(self, **kwargs) -> bool:
        """Raise to abort the run before ``execute``."""
        return True

    def before_execute(self, **kwargs) -> None:
        self._notify("start", inputs=sorted(kwargs))
        self.logger.info(f"[{self.name}] started")

    def after_execute(self, result: AgentResult) -> None:
        self._notify("end", status=result.status, execution_time=round(result.execution_time, 3))
        log = self.logger.warning if result.is_failed() else self.logger.info
        log(f"[{self.name}] {result.status} in {result.execution_time:.3f}s")

    def _notify(self, event: str, **extra: Any) -> None:
        if not self.on_progress:
            return
        try:
            self.on_progress({
                "agent": self.name,
                "event": event,
                "ts": datetime.now(timezone.utc).isoformat(),
                **extra,
            })
        except Exception as e:
            # a broken listener must not fail the run
            self.logger.debug(f"on_progress callback raised: {e}")

    # ───────────────────────────────────────────────────────────────────
    # Entry point
    # ───────────────────────────────────────────────────────────────────

    def run(self, **kwargs) -> AgentResult:
        """
        🚀 Run ``execute`` with timing and error capture.

        Returns:
            AgentResult, failed when ``execute`` raised
        """
        t0 = time.perf_counter()
        started_at = datetime.now()

        try:
            self.validate_input(**kwargs)
            self.before_execute(**kwargs)
            result = self.execute(**kwargs)
            if not isinstance(result, AgentResult):
                raise AgentError(
                    f"{self.name}.execute returned {type(result).__name__}, "
                    f"expected AgentResult"
                )
        except Exception as e:
            self.logger.error(f"[{self.name}] failed: {e}")
            result = self._failed(e)

        result.execution_time = time.perf_counter() - t0
        result.started_at = started_at
        result.finished_at = datetime.now()

        self._result = result
        self.after_execute(result)
        return result

    def _failed(self, exc: Exception) -> AgentResult:
        result = AgentResult(agent_name=self.name)
        result.add_error(f"{type(exc).__name__}: {exc}")
        result.add_metadata(exception=exc)
        if isinstance(exc, ImputeLabError):
            result.add_metadata(error=exc.to_dict()["error"])
        return result

    def get_last_result(self) -> Optional[AgentResult]:
        return self._result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', version='{self.version}')"
