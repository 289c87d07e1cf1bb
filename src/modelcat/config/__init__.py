"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_list, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .llm import LlmConfig, OllamaConfig, get_llm_config, get_ollama_config
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config
from .sync import LLM_DISCOVERY_SOURCE, LOCAL_DISCOVERY_SOURCE, SyncConfig, get_sync_config

__all__ = [
    "LLM_DISCOVERY_SOURCE",
    "LOCAL_DISCOVERY_SOURCE",
    "CacheConfig",
    "ConfigurationError",
    "LlmConfig",
    "MissingConfigurationError",
    "OllamaConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "env_flag",
    "env_list",
    "get_llm_config",
    "get_ollama_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_vars",
]
