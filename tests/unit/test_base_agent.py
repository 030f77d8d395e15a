"""
ImputeLab - Unit Tests for the agent framework
"""

import json

import numpy as np
import pandas as pd

from core.base_agent import AgentResult, BaseAgent
from core.exceptions import EmptyColumn


class EchoAgent(BaseAgent):
    def __init__(self, **kwargs):
        super().__init__(name="EchoAgent", description="returns its input", **kwargs)

    def execute(self, value=None, **kwargs) -> AgentResult:
        result = AgentResult(agent_name=self.name)
        if value is None:
            raise ValueError("value is required")
        result.add_data(value=value)
        return result


class TestAgentResult:
    """Tests for AgentResult"""

    def test_warning_marks_partial(self):
        result = AgentResult(agent_name="x")
        result.add_warning("careful")
        assert result.is_partial()

    def test_error_marks_failed(self):
        result = AgentResult(agent_name="x")
        result.add_warning("careful")
        result.add_error("broken")
        assert result.is_failed()

    def test_to_json_handles_numpy_and_pandas(self):
        result = AgentResult(agent_name="x")
        result.add_data(
            mean=np.float64(1.5),
            n=np.int64(3),
            series=pd.Series([1.0, 2.0]),
            frame=pd.DataFrame({"a": [1]}),
        )
        payload = json.loads(result.to_json())
        assert payload["data"]["mean"] == 1.5
        assert payload["data"]["n"] == 3


class TestBaseAgent:
    """Tests for the run() lifecycle"""

    def test_success(self):
        result = EchoAgent().run(value=3)
        assert result.is_success()
        assert result.data["value"] == 3
        assert result.execution_time >= 0
        assert result.finished_at is not None

    def test_exception_becomes_failed_result(self):
        agent = EchoAgent()
        result = agent.run()
        assert result.is_failed()
        assert result.errors == ["ValueError: value is required"]
        assert isinstance(result.metadata["exception"], ValueError)
        assert agent.get_last_result() is result

    def test_imputelab_error_keeps_code(self):
        class Rejecting(BaseAgent):
            def __init__(self):
                super().__init__(name="Rejecting")

            def execute(self, **kwargs) -> AgentResult:
                raise EmptyColumn("Column 'bwt' has no present values", details={"rows": 3})

        result = Rejecting().run()
        assert result.is_failed()
        assert result.error_code == "empty_column"
        assert result.metadata["error"]["details"] == {"rows": 3}

    def test_plain_exception_has_no_code(self):
        assert EchoAgent().run().error_code is None

    def test_wrong_return_type_fails(self):
        class Broken(BaseAgent):
            def __init__(self):
                super().__init__(name="Broken")

            def execute(self, **kwargs):
                return {"not": "a result"}

        result = Broken().run()
        assert result.is_failed()
        assert result.errors[0].startswith("AgentError")

    def test_progress_callback(self):
        events = []
        EchoAgent(on_progress=events.append).run(value=1)
        assert [e["event"] for e in events] == ["start", "end"]
        assert events[-1]["status"] == "success"

    def test_failing_callback_ignored(self):
        def boom(_):
            raise RuntimeError("callback")

        assert EchoAgent(on_progress=boom).run(value=1).is_success()
