"""
LLM client factory and Model Client

Creates LangChain chat models from model descriptors and performs the
actual model calls for graph nodes.
"""

import asyncio
from typing import TYPE_CHECKING, Callable, Dict, Optional

from langchain_core.language_models import BaseChatModel
from loguru import logger

from chatter.config.settings import settings
from chatter.llm.models import Capability, Completion, ModelDescriptor
from chatter.llm.response_utils import extract_text_from_response, extract_usage_from_response
from chatter.utils.errors import ModelClientError

if TYPE_CHECKING:
    from chatter.graph.session import Session


def _validate_ollama_model(model: str) -> None:
    """Check that the Ollama server is reachable and serves the model."""
    import httpx

    try:
        response = httpx.get(f"{settings.ollama_base_url}/api/tags", timeout=3.0)
        response.raise_for_status()
    except httpx.RequestError as e:
        error_msg = (
            f"Could not connect to Ollama server at {settings.ollama_base_url}. "
            f"Make sure Ollama is running. Error: {e}"
        )
        logger.error(f"❌ {error_msg}")
        raise ConnectionError(error_msg) from e

    available_models = [m.get("name", "").split(":")[0] for m in response.json().get("models", [])]
    if model.split(":")[0] not in available_models:
        error_msg = (
            f"Ollama model '{model}' is not available on the server. "
            f"Available models: {', '.join(available_models) if available_models else 'None'}. "
            f"To install: ollama pull {model}"
        )
        logger.error(f"❌ {error_msg}")
        raise ValueError(error_msg)


def create_llm(
    descriptor: ModelDescriptor,
    max_completion_tokens: Optional[int] = None,
    timeout: Optional[float] = None,
) -> BaseChatModel:
    """
    Factory function to create the LangChain chat model for a descriptor.

    Args:
        descriptor: Target model, provider and temperature
        max_completion_tokens: Max tokens for completion (defaults to settings.max_output_tokens)
        timeout: Request timeout in seconds (defaults to settings.llm_timeout_seconds)

    Returns:
        LangChain ChatModel instance (ChatOpenAI or ChatOllama)
    """
    provider = (descriptor.provider or settings.llm_provider).lower()
    max_tokens = max_completion_tokens or settings.max_output_tokens
    temperature = descriptor.temperature if descriptor.supports(Capability.TEMPERATURE) else None

    if provider in ("openai", "openrouter"):
        from langchain_openai import ChatOpenAI

        kwargs = {
            "model": descriptor.id,
            "max_completion_tokens": max_tokens,
            "timeout": timeout or settings.llm_timeout_seconds,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        if provider == "openrouter":
            if not settings.openrouter_api_key:
                raise ValueError("OPENROUTER_API_KEY is required when LLM_PROVIDER=openrouter")
            kwargs["base_url"] = settings.openrouter_base_url
            kwargs["api_key"] = settings.openrouter_api_key
        else:
            if not settings.openai_api_key:
                raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER=openai")
            kwargs["api_key"] = settings.openai_api_key

        return ChatOpenAI(**kwargs)

    elif provider == "ollama":
        from langchain_community.chat_models import ChatOllama

        _validate_ollama_model(descriptor.id)
        return ChatOllama(
            model=descriptor.id,
            base_url=settings.ollama_base_url,
            temperature=temperature,
            num_predict=max_tokens,  # Ollama uses num_predict instead of max_completion_tokens
        )

    else:
        raise ValueError(f"Unsupported LLM provider: {provider}. Supported: 'openrouter', 'openai', 'ollama'")


class ModelClient:
    """
    Sends a session's active prompt to a language model.

    Every call is bounded by a timeout; provider failures and timeouts are
    raised as ModelClientError for the calling node to handle. The client
    never retries on its own.
    """

    def __init__(
        self,
        llm_factory: Callable[[ModelDescriptor], BaseChatModel] = create_llm,
        timeout: Optional[float] = None,
    ):
        self._llm_factory = llm_factory
        self.timeout = timeout if timeout is not None else settings.llm_timeout_seconds
        self._llms: Dict[ModelDescriptor, BaseChatModel] = {}

    def get_llm(self, descriptor: ModelDescriptor) -> BaseChatModel:
        """Get (cached) chat model for a descriptor."""
        llm = self._llms.get(descriptor)
        if llm is None:
            llm = self._llm_factory(descriptor)
            self._llms[descriptor] = llm
        return llm

    def _structured_runnable(self, llm: BaseChatModel, descriptor: ModelDescriptor):
        provider = (descriptor.provider or settings.llm_provider).lower()
        if not descriptor.supports(Capability.STRUCTURED_OUTPUT):
            return llm
        if provider == "ollama":
            return llm.bind(format="json")
        return llm.bind(response_format={"type": "json_object"})

    async def complete(self, session: "Session", structured: bool = False) -> Completion:
        """
        Run the session's active prompt through its model.

        Args:
            session: Session whose active prompt (messages + model) is sent
            structured: Request JSON output when the model supports it

        Returns:
            Completion with the response text and token usage
        """
        prompt = session.prompt
        descriptor = prompt.model

        try:
            llm = self.get_llm(descriptor)
        except (ValueError, ConnectionError, ImportError) as e:
            raise ModelClientError(f"Could not create model '{descriptor.id}': {e}") from e

        runnable = self._structured_runnable(llm, descriptor) if structured else llm
        logger.debug(
            f"Model call: model={descriptor.id} messages={len(prompt.messages)} structured={structured}"
        )

        try:
            response = await asyncio.wait_for(
                runnable.ainvoke(list(prompt.messages)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ModelClientError(
                f"Model call to '{descriptor.id}' timed out after {self.timeout:.0f}s"
            ) from e
        except Exception as e:
            raise ModelClientError(f"Model call to '{descriptor.id}' failed: {e}") from e

        usage = extract_usage_from_response(response)
        session.usage.add(usage)
        logger.debug(f"TOKENS USAGE ({descriptor.id}): {usage.total_tokens}")

        return Completion(
            text=extract_text_from_response(response),
            usage=usage,
            model=descriptor.id,
        )
