"""
Tests for the history-length guard and the compression node.
"""

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from chatter.agents.assistant.nodes.compress import compress_node
from chatter.agents.assistant.routing import is_history_too_long
from chatter.agents.assistant.state import ConversationRequest
from chatter.graph.session import Session
from chatter.memory.history import SUMMARY_PREFIX, estimate_tokens
from chatter.utils.errors import AnswerGenerationError, ModelClientError

from conftest import ANSWER_MODEL, make_context, run


def _long_session(turns: int = 10, chars: int = 200, last: str = "current question") -> Session:
    messages = []
    for i in range(turns):
        cls = HumanMessage if i % 2 == 0 else AIMessage
        messages.append(cls(content=f"{i}" * chars))
    messages.append(HumanMessage(content=last))
    return Session.create(ANSWER_MODEL, system_prompt="You are a helpful assistant.", messages=messages)


class TestHistoryGuard:
    def test_short_history_is_not_too_long(self, fake_client):
        ctx = make_context(fake_client, history_token_threshold=1000)
        assert not is_history_too_long(_long_session(turns=2), ctx)

    def test_long_history_is_too_long(self, fake_client):
        ctx = make_context(fake_client, history_token_threshold=100)
        assert is_history_too_long(_long_session(), ctx)

    def test_threshold_defaults_to_model_context(self, fake_client):
        """Without an override the limit is a fraction of the context length"""
        ctx = make_context(fake_client)
        assert not is_history_too_long(_long_session(), ctx)


class TestCompressNode:
    def test_compresses_below_threshold(self, fake_client):
        ctx = make_context(fake_client, history_token_threshold=150, keep_recent_messages=2)
        fake_client.queue("short summary")
        session = _long_session()
        before = estimate_tokens(session.messages)

        run(compress_node(ConversationRequest(message="current question"), session, ctx))

        assert not is_history_too_long(session, ctx)
        assert estimate_tokens(session.messages) < before
        assert fake_client.call_count == 1
        assert session.warnings == []

    def test_composition_order(self, fake_client):
        """System messages, then the summary, then the recent tail"""
        ctx = make_context(fake_client, history_token_threshold=150, keep_recent_messages=2)
        fake_client.queue("short summary")
        session = _long_session()
        tail = session.messages[-2:]

        run(compress_node(ConversationRequest(message="current question"), session, ctx))

        messages = session.messages
        assert isinstance(messages[0], SystemMessage)
        assert messages[1].content == f"{SUMMARY_PREFIX}short summary"
        assert messages[2:] == tail
        assert messages[-1].content == "current question"

    def test_summary_call_is_isolated(self, fake_client):
        ctx = make_context(fake_client, history_token_threshold=150, keep_recent_messages=2)
        fake_client.queue("short summary")
        session = _long_session()

        run(compress_node(ConversationRequest(message="current question"), session, ctx))

        call = fake_client.calls[0]
        assert call["isolated"]
        transcript = call["messages"][-1].content
        assert "0" * 200 in transcript
        assert "current question" not in transcript

    def test_recompresses_with_smaller_tail(self, fake_client):
        """A second pass keeps only the latest message"""
        ctx = make_context(fake_client, history_token_threshold=100, keep_recent_messages=4)
        fake_client.queue("short summary", "shorter")
        session = _long_session()

        run(compress_node(ConversationRequest(message="current question"), session, ctx))

        assert fake_client.call_count == 2
        assert not is_history_too_long(session, ctx)
        assert len(session.messages) == 3
        assert session.events[-1]["passes"] == 2

    def test_records_compressed_size(self, fake_client):
        ctx = make_context(fake_client, history_token_threshold=150, keep_recent_messages=2)
        fake_client.queue("short summary")
        session = _long_session()
        before = estimate_tokens(session.messages)

        request = ConversationRequest(message="current question")
        result = run(compress_node(request, session, ctx))

        event = session.events[-1]
        assert result is request
        assert event["event"] == "history_compressed"
        assert event["tokens_before"] == before
        assert event["tokens_after"] == estimate_tokens(session.messages)
        assert event["tokens_after"] < event["tokens_before"]

    def test_gives_up_with_warning(self, fake_client):
        """An oversized latest message cannot be compressed away"""
        ctx = make_context(fake_client, history_token_threshold=20, max_compression_passes=3)
        fake_client.queue("short summary", "short summary", "short summary")
        session = _long_session(turns=3, last="x" * 400)

        run(compress_node(ConversationRequest(message="x" * 400), session, ctx))

        assert fake_client.call_count <= 3
        assert session.warnings == ["history_still_too_long"]
        assert session.messages[-1].content == "x" * 400

    def test_summary_failure_is_terminal(self, fake_client):
        ctx = make_context(fake_client, history_token_threshold=150)
        fake_client.queue(ModelClientError("provider down"))
        session = _long_session()
        before = session.prompt

        with pytest.raises(AnswerGenerationError) as exc_info:
            run(compress_node(ConversationRequest(message="current question"), session, ctx))

        assert exc_info.value.node == "compress"
        assert session.prompt == before

    def test_mid_history_system_message_keeps_its_place(self, fake_client):
        """Only the leading system messages stay ahead of the summary"""
        ctx = make_context(fake_client, history_token_threshold=150, keep_recent_messages=3)
        fake_client.queue("short summary")
        messages = [
            HumanMessage(content="0" * 200),
            AIMessage(content="1" * 200),
            HumanMessage(content="2" * 200),
            AIMessage(content="a"),
            SystemMessage(content="mid-history system note"),
            HumanMessage(content="now"),
        ]
        session = Session.create(ANSWER_MODEL, system_prompt="main", messages=messages)

        run(compress_node(ConversationRequest(message="now"), session, ctx))

        contents = [m.content for m in session.messages]
        assert contents == [
            "main",
            f"{SUMMARY_PREFIX}short summary",
            "2" * 200,
            "a",
            "mid-history system note",
            "now",
        ]
        assert isinstance(session.messages[4], SystemMessage)

    def test_summary_call_runs_at_zero_temperature(self, fake_client):
        ctx = make_context(fake_client, history_token_threshold=150, keep_recent_messages=2)
        fake_client.queue("short summary")
        session = _long_session()

        run(compress_node(ConversationRequest(message="current question"), session, ctx))

        call = fake_client.calls[0]
        assert call["model"].id == ANSWER_MODEL.id
        assert call["model"].temperature == 0.0
        assert session.model == ANSWER_MODEL
