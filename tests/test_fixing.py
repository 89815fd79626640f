"""
Tests for the fixing coordinator: bounded repair of invalid structured output.
"""

import json

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from chatter.agents.structured.fixing import FixingCoordinator
from chatter.agents.structured.metrics import get_metrics_summary
from chatter.agents.structured.schemas import StructuredResponse
from chatter.graph.session import Session
from chatter.utils.errors import ModelClientError, StructuredOutputExhaustedError

from conftest import ANSWER_MODEL, FIXING_MODEL, FakeModelClient, run

MALFORMED = '{"title": "Login form"}'
STILL_BROKEN = '{"title": "Login form", "message": 1}'
FIXED = json.dumps({"title": "Login form", "message": "Which framework?", "checklist": [{"point": "Framework"}]})


def _session() -> Session:
    return Session.create(ANSWER_MODEL, system_prompt="main", messages=[HumanMessage(content="build a login form")])


def _parse(coordinator, text, session=None):
    return run(coordinator.parse(text, StructuredResponse, session or _session(), node="collect_info"))


class TestFixingBound:
    """At most `retries` repair calls per parse"""

    def test_valid_output_needs_no_repair(self):
        client = FakeModelClient()
        outcome = _parse(FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=3), FIXED)

        assert outcome.repair_calls == 0
        assert client.call_count == 0
        assert outcome.value.title == "Login form"

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_kth_repair_succeeds(self, k):
        """If the k-th repaired text validates, exactly k calls were made"""
        client = FakeModelClient([STILL_BROKEN] * (k - 1) + [FIXED])
        outcome = _parse(FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=3), MALFORMED)

        assert outcome.repair_calls == k
        assert client.call_count == k
        assert outcome.value.message == "Which framework?"

    def test_exhausted_budget(self):
        client = FakeModelClient([STILL_BROKEN] * 5)
        coordinator = FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=3)

        with pytest.raises(StructuredOutputExhaustedError) as exc_info:
            _parse(coordinator, MALFORMED)

        error = exc_info.value
        assert client.call_count == 3
        assert error.attempts == 3
        assert error.last_text == STILL_BROKEN
        assert "message" in error.validation_error
        assert error.node == "collect_info"

    def test_zero_retries(self):
        client = FakeModelClient()
        coordinator = FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=0)

        with pytest.raises(StructuredOutputExhaustedError) as exc_info:
            _parse(coordinator, MALFORMED)
        assert client.call_count == 0
        assert exc_info.value.last_text == MALFORMED

    def test_negative_retries_rejected(self):
        with pytest.raises(ValueError):
            FixingCoordinator(FakeModelClient(), fixing_model=FIXING_MODEL, retries=-1)

    def test_failed_repair_call_consumes_attempt(self):
        client = FakeModelClient([ModelClientError("timeout"), FIXED])
        outcome = _parse(FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=3), MALFORMED)

        assert outcome.repair_calls == 2
        assert client.call_count == 2


class TestFixingPrompt:
    def test_repair_runs_isolated_on_fixing_model(self):
        """Repair calls use the secondary model and leave the session prompt untouched"""
        client = FakeModelClient([FIXED])
        session = _session()
        before = session.prompt

        _parse(FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=3), MALFORMED, session)

        call = client.calls[0]
        assert call["model"] == FIXING_MODEL
        assert call["structured"]
        assert call["isolated"]
        assert session.prompt == before

    def test_prompt_contains_schema_error_and_text(self):
        client = FakeModelClient([FIXED])
        _parse(FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=3), MALFORMED)

        system, user = client.calls[0]["messages"]
        assert isinstance(system, SystemMessage)
        assert "JSON SCHEMA" in user.content
        assert '"checklist"' in user.content
        assert "1. message" in user.content
        assert MALFORMED in user.content
        assert "build a login form" not in user.content

    def test_repair_usage_counted_on_session(self):
        client = FakeModelClient([STILL_BROKEN, FIXED])
        session = _session()
        _parse(FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=3), MALFORMED, session)

        assert session.usage.calls == 2


class TestFixingObservability:
    def test_metrics_recorded(self):
        client = FakeModelClient([STILL_BROKEN, FIXED])
        _parse(FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=3), MALFORMED)
        summary = get_metrics_summary()

        assert summary["total_attempts"] == 2
        assert summary["total_fixes"] == 1
        assert summary["by_error_type"]["failures"] == {"missing_field": 1}
        assert summary["by_error_type"]["fixes"] == {"wrong_type": 1}
        assert summary["by_node"] == {"collect_info": 2}

    def test_session_events(self):
        client = FakeModelClient([STILL_BROKEN] * 2)
        session = _session()
        with pytest.raises(StructuredOutputExhaustedError):
            _parse(FixingCoordinator(client, fixing_model=FIXING_MODEL, retries=2), MALFORMED, session)

        assert session.events[-1] == {
            "event": "structured_output_exhausted",
            "node": "collect_info",
            "repair_calls": 2,
        }
        assert get_metrics_summary()["total_exhausted"] == 1
