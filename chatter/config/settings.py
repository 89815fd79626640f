"""
Configuration management for the application.
Loads settings from environment variables and the project .env file.
"""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# This file is at chatter/config/settings.py, so project root is 3 levels up
_project_root = Path(__file__).resolve().parent.parent.parent

PROJECT_ROOT = _project_root

_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=True)
    logger.debug(f"Loaded .env from: {_env_file}")
else:
    load_dotenv(override=False)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_project_root / ".env"),
        env_file_encoding="utf-8",
        extra="allow",
    )

    # LLM Provider Selection
    llm_provider: str = Field(default="openrouter")  # Options: "openrouter" | "openai" | "ollama"

    # API Keys
    openai_api_key: str = Field(default="")
    openrouter_api_key: str = Field(default="")

    # Provider endpoints
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1")
    ollama_base_url: str = Field(default="http://localhost:11434")

    # Models per role
    answer_model: str = Field(default="qwen/qwen3-8b")
    answer_temperature: float = Field(default=0.7)
    classifier_model: str = Field(default="z-ai/glm-4.6")
    classifier_temperature: float = Field(default=0.0)
    collect_info_model: str = Field(default="qwen/qwen3-8b")
    transcription_model: str = Field(default="google/gemini-2.0-flash-001")
    transcription_temperature: float = Field(default=0.0)
    fixing_model: str = Field(default="z-ai/glm-4.6")
    fixing_context_length: int = Field(default=20_000)  # Repair prompts are short

    # Limits
    max_output_tokens: int = Field(default=4000)
    llm_timeout_seconds: float = Field(default=300.0)
    fixing_max_retries: int = Field(default=3)
    graph_max_steps: int = Field(default=25)

    # History handling
    max_history_length: int = Field(default=10)  # Turns taken from a request
    classification_history_turns: int = Field(default=4)
    history_compression_ratio: float = Field(default=0.8)  # Fraction of the answer model context
    history_token_threshold: Optional[int] = Field(default=None)  # Absolute override of the ratio
    history_keep_recent_messages: int = Field(default=4)
    history_max_compression_passes: int = Field(default=3)
    history_summary_budget_ratio: float = Field(default=0.25)  # Max summary size vs threshold

    # Storage
    conversation_db_path: str = Field(default="data/conversations.db")
    audio_root: Optional[str] = Field(default=None)

    # Logging
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="data/logs")

    def resolve_path(self, value: str) -> Path:
        """Resolve a configured path relative to the project root."""
        path = Path(value)
        if not path.is_absolute():
            path = _project_root / path
        return path


# Create global settings instance
settings = Settings()
