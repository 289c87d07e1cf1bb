"""Text-completion provider and local runtime configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

type LlmProtocol = Literal["openai", "ollama"]

DEFAULT_OLLAMA_URL = "http://127.0.0.1:11434"
LLM_TIMEOUT_SECONDS = 120.0
OLLAMA_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class LlmConfig:
    """Holds the settings of an OpenAI-compatible or Ollama chat endpoint."""

    protocol: LlmProtocol
    base_url: str
    model: str
    api_key: str | None
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class OllamaConfig:
    base_url: str
    resilience: ResilienceConfig


def get_llm_config(*, resilience: ResilienceConfig | None = None) -> LlmConfig | None:
    """Return the configured completion endpoint, or ``None`` when none is set up."""

    if optional_env_var("MODELCAT_LLM_BASE_URL") is None:
        return None
    values = require_env_vars(("MODELCAT_LLM_BASE_URL", "MODELCAT_LLM_MODEL"))
    protocol = (optional_env_var("MODELCAT_LLM_PROTOCOL") or "openai").lower()
    if protocol not in {"openai", "ollama"}:
        raise ConfigurationError(f"Unsupported MODELCAT_LLM_PROTOCOL: {protocol}")
    api_key = optional_env_var("MODELCAT_LLM_API_KEY")
    if protocol == "openai" and api_key is None:
        raise ConfigurationError("MODELCAT_LLM_API_KEY is required for the openai protocol")

    base_url = values["MODELCAT_LLM_BASE_URL"].rstrip("/")
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
    return LlmConfig(
        protocol="ollama" if protocol == "ollama" else "openai",
        base_url=base_url,
        model=values["MODELCAT_LLM_MODEL"],
        api_key=api_key,
        resilience=resilience
        or ResilienceConfig(
            name="llm",
            base_url=base_url,
            timeout_seconds=LLM_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=2),
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            cache=None,
            default_headers=headers,
        ),
    )


def get_ollama_config() -> OllamaConfig:
    base_url = (optional_env_var("MODELCAT_OLLAMA_URL") or DEFAULT_OLLAMA_URL).rstrip("/")
    return OllamaConfig(
        base_url=base_url,
        resilience=ResilienceConfig(
            name="ollama",
            base_url=base_url,
            timeout_seconds=OLLAMA_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=1),
            cache=None,
        ),
    )
