# Environment configuration
"""Settings read from environment variables"""
from typing import Mapping, Optional
import logging
import os

from pydantic import BaseModel, Field

from llm.providers.base import LLMProvider

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseModel):
    """Runtime configuration of the orchestration service"""
    # applies to the primary provider only; unset keeps each provider's default
    ai_model: Optional[str] = None
    ai_provider: LLMProvider = LLMProvider.OPENAI
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None

    config_path: str = ".chara.json"

    provider_connect_timeout: float = Field(default=30, gt=0)
    provider_connect_attempts: int = Field(default=1, ge=1)

    summary_start_timeout: float = Field(default=30, gt=0)
    summary_max_prompt_tokens: int = Field(default=12000, gt=0)
    summary_retained: int = Field(default=100, ge=1)

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from the environment

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Settings with defaults for unset variables
        """
        env = os.environ if environ is None else environ

        names = {
            "ai_model": "AI_MODEL",
            "ai_provider": "AI_PROVIDER",
            "openai_api_key": "OPENAI_API_KEY",
            "anthropic_api_key": "ANTHROPIC_API_KEY",
            "config_path": "CHARA_CONFIG",
            "provider_connect_timeout": "PROVIDER_CONNECT_TIMEOUT",
            "provider_connect_attempts": "PROVIDER_CONNECT_ATTEMPTS",
            "summary_start_timeout": "SUMMARY_START_TIMEOUT",
            "summary_max_prompt_tokens": "SUMMARY_MAX_PROMPT_TOKENS",
            "summary_retained": "SUMMARY_RETAINED",
            "log_level": "LOG_LEVEL",
        }
        values = {field: env[var] for field, var in names.items() if env.get(var)}
        return cls(**values)


def configure_logging(level: str = "INFO"):
    """Set the root log format and level"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
