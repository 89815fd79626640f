"""
Transcribe node - turns an audio reference into the request message
"""

from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger

from chatter.agents.assistant.context import AssistantContext
from chatter.agents.assistant.prompts import TRANSCRIPTION_SYSTEM_PROMPT, TRANSCRIPTION_USER_PROMPT
from chatter.agents.assistant.state import ConversationRequest
from chatter.graph.session import Prompt, Session
from chatter.storage.audio import AudioArtifact
from chatter.utils.errors import ModelClientError, TranscriptionError

NODE_NAME = "transcribe"


def build_transcription_prompt(artifact: AudioArtifact, ctx: AssistantContext) -> Prompt:
    """Isolated prompt: no conversation history, only the audio."""
    audio_message = HumanMessage(
        content=[
            {"type": "text", "text": TRANSCRIPTION_USER_PROMPT},
            {
                "type": "audio",
                "source_type": "base64",
                "data": artifact.read_base64(),
                "mime_type": artifact.mime_type,
            },
        ]
    )
    return Prompt(
        messages=(SystemMessage(content=TRANSCRIPTION_SYSTEM_PROMPT), audio_message),
        model=ctx.transcription_model,
    )


async def transcribe_node(request: ConversationRequest, session: Session, ctx: AssistantContext) -> ConversationRequest:
    """
    Pass-through when the request has no audio; otherwise transcribe it in an
    isolated call and append the transcript to the original conversation.
    """
    if not request.audio_reference:
        return request

    artifact = ctx.audio_storage.validate(request.audio_reference, node=NODE_NAME)
    logger.info(f"Transcribing audio {artifact.path.name} with {ctx.transcription_model.id}")

    with session.isolated_call(build_transcription_prompt(artifact, ctx), label="transcription"):
        try:
            completion = await ctx.client.complete(session)
        except ModelClientError as e:
            raise TranscriptionError(f"Audio transcription failed: {e}", node=NODE_NAME) from e

    transcription = completion.text.strip()
    if not transcription:
        raise TranscriptionError("Audio transcription returned no text", node=NODE_NAME)

    session.user(transcription)
    session.record("audio_transcribed", model=ctx.transcription_model.id, chars=len(transcription))
    return request.model_copy(update={"message": transcription, "audio_reference": None})
