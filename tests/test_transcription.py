"""
Tests for the audio transcription node.
"""

import asyncio

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from chatter.agents.assistant.nodes.transcribe import transcribe_node
from chatter.agents.assistant.prompts import TRANSCRIPTION_SYSTEM_PROMPT
from chatter.agents.assistant.state import ChatTurn, ConversationRequest
from chatter.graph.session import Session
from chatter.llm.models import Capability
from chatter.utils.errors import ModelClientError, TranscriptionError, ValidationError

from conftest import ANSWER_MODEL, TRANSCRIPTION_MODEL, run


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "voice.wav"
    path.write_bytes(b"RIFF\x24\x00\x00\x00WAVEfmt fake audio payload")
    return path


@pytest.fixture
def history_session() -> Session:
    return Session.create(
        ANSWER_MODEL,
        system_prompt="main system prompt",
        messages=[HumanMessage(content="earlier question"), AIMessage(content="earlier answer")],
    )


def _audio_request(path) -> ConversationRequest:
    return ConversationRequest(
        message="",
        audio_reference=str(path),
        history=(ChatTurn(role="user", content="earlier question"),),
    )


class TestPassThrough:
    def test_no_audio_returns_identical_request(self, fake_client, ctx, session):
        """No audio: same object back, no model call, no session change"""
        request = ConversationRequest(message="hello", history=(ChatTurn(role="user", content="hi"),))
        before = session.prompt

        result = run(transcribe_node(request, session, ctx))

        assert result is request
        assert fake_client.call_count == 0
        assert session.prompt == before
        assert session.events == []


class TestTranscription:
    def test_transcribes_and_clears_reference(self, fake_client, ctx, history_session, audio_file):
        fake_client.queue("  hello world \n")

        result = run(transcribe_node(_audio_request(audio_file), history_session, ctx))

        assert result.message == "hello world"
        assert result.audio_reference is None
        assert result.history == _audio_request(audio_file).history

    def test_isolated_prompt_has_no_history(self, fake_client, ctx, history_session, audio_file):
        fake_client.queue("hello world")

        run(transcribe_node(_audio_request(audio_file), history_session, ctx))

        call = fake_client.calls[0]
        assert call["isolated"]
        assert len(call["messages"]) == 2
        assert call["messages"][0].content == TRANSCRIPTION_SYSTEM_PROMPT
        assert "earlier question" not in str(call["messages"])
        assert "earlier answer" not in str(call["messages"])
        audio_block = call["messages"][1].content[1]
        assert audio_block["type"] == "audio"
        assert audio_block["mime_type"] == "audio/wav"

    def test_uses_audio_model_at_low_temperature(self, fake_client, ctx, history_session, audio_file):
        fake_client.queue("hello world")

        run(transcribe_node(_audio_request(audio_file), history_session, ctx))

        model = fake_client.calls[0]["model"]
        assert model == TRANSCRIPTION_MODEL
        assert model.supports(Capability.AUDIO)
        assert model.temperature == 0.0

    def test_restored_history_gains_one_user_message(self, fake_client, ctx, history_session, audio_file):
        fake_client.queue("hello world")
        before = history_session.messages

        run(transcribe_node(_audio_request(audio_file), history_session, ctx))

        assert history_session.messages[:-1] == before
        assert history_session.messages[-1] == HumanMessage(content="hello world")
        assert history_session.model == ANSWER_MODEL
        assert not history_session.in_isolated_call


class TestTranscriptionErrors:
    def test_missing_file(self, fake_client, ctx, history_session, tmp_path):
        with pytest.raises(ValidationError) as exc_info:
            run(transcribe_node(_audio_request(tmp_path / "missing.wav"), history_session, ctx))

        assert exc_info.value.node == "transcribe"
        assert fake_client.call_count == 0

    def test_empty_file(self, fake_client, ctx, history_session, tmp_path):
        empty = tmp_path / "empty.wav"
        empty.write_bytes(b"")

        with pytest.raises(ValidationError):
            run(transcribe_node(_audio_request(empty), history_session, ctx))
        assert fake_client.call_count == 0

    def test_model_failure_is_terminal(self, fake_client, ctx, history_session, audio_file):
        fake_client.queue(ModelClientError("provider down"))
        before = history_session.prompt

        with pytest.raises(TranscriptionError) as exc_info:
            run(transcribe_node(_audio_request(audio_file), history_session, ctx))

        assert exc_info.value.node == "transcribe"
        assert history_session.prompt == before

    def test_empty_transcription_is_terminal(self, fake_client, ctx, history_session, audio_file):
        fake_client.queue("   ")

        with pytest.raises(TranscriptionError):
            run(transcribe_node(_audio_request(audio_file), history_session, ctx))

    def test_cancellation_restores_prompt(self, fake_client, ctx, history_session, audio_file):
        """Cancelling during the model call leaves no half-restored prompt"""
        before = history_session.prompt

        async def scenario():
            started = asyncio.Event()

            async def hang(session):
                started.set()
                await asyncio.sleep(10)

            fake_client.queue(hang)
            task = asyncio.create_task(transcribe_node(_audio_request(audio_file), history_session, ctx))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        run(scenario())
        assert history_session.prompt == before
        assert not history_session.in_isolated_call
