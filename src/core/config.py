"""
Configuration for the AI opponent.

Values come from the environment (a `.env` file in the working directory is loaded first);
anything not set keeps the default declared on `Settings`.
"""

import os
from typing import Mapping, Optional, Self

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Settings field -> environment variable
ENV_VARIABLES: dict[str, str] = {
    "api_url": "CHESS_LLM_API_URL",
    "api_key": "CHESS_LLM_API_KEY",
    "model": "CHESS_LLM_MODEL",
    "temperature": "CHESS_LLM_TEMPERATURE",
    "request_timeout_s": "CHESS_LLM_TIMEOUT_S",
    "rule_breaking_start_move": "CHESS_RULE_BREAKING_START_MOVE",
    "rule_breaking_probability": "CHESS_RULE_BREAKING_PROBABILITY",
    "fallback_max_attempts": "CHESS_FALLBACK_MAX_ATTEMPTS",
    "fallback_destination_cap": "CHESS_FALLBACK_DESTINATION_CAP",
    "max_retries": "CHESS_AI_MAX_RETRIES",
    "response_delay_s": "CHESS_AI_RESPONSE_DELAY_S",
}


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # external text-completion service
    api_url: str = "https://api.openai.com/v1/chat/completions"
    api_key: str = ""
    model: str = "gpt-4.1-mini"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    request_timeout_s: float = Field(default=30.0, gt=0.0)

    # rule adherence: always legal up to this many plies, then a per-turn coin flip
    rule_breaking_start_move: int = Field(default=6, ge=0)
    rule_breaking_probability: float = Field(default=0.2, ge=0.0, le=1.0)

    # fallback synthesis
    fallback_max_attempts: int = Field(default=1000, ge=1)
    fallback_destination_cap: int = Field(default=64, ge=1)

    # corrective re-prompts after a rejected move. Transport failures are never retried.
    max_retries: int = Field(default=0, ge=0)
    response_delay_s: float = Field(default=1.0, ge=0.0)

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be an http(s) URL, got {value!r}")
        return value

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Build settings from environment variables. Passing `environ` skips reading `.env` (used by tests)."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        values = {
            field_name: environ[variable]
            for field_name, variable in ENV_VARIABLES.items()
            if environ.get(variable) not in (None, "")
        }
        return cls.model_validate(values)
