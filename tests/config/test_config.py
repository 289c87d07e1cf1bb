from __future__ import annotations

import logging
from pathlib import Path

import pytest

from modelcat.config import (
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    env_flag,
    env_list,
    get_llm_config,
    get_ollama_config,
    get_storage_config,
    get_sync_config,
    optional_env_var,
    require_env_vars,
)
from modelcat.config.logging import HTTP_LOGGERS


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_missing_and_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)
    monkeypatch.setenv("BLANK_VAR", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR", "BLANK_VAR"])

    assert "BLANK_VAR, MISSING_VAR" in str(exc.value)


def test_optional_env_var_strips(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")
    monkeypatch.setenv("BLANK_VAR", "")

    assert optional_env_var("EXAMPLE_VAR") == "value"
    assert optional_env_var("BLANK_VAR") is None


def test_env_flag_parses_and_rejects(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAG_ON", "Yes")
    monkeypatch.setenv("FLAG_OFF", "0")
    monkeypatch.setenv("FLAG_BAD", "sometimes")

    assert env_flag("FLAG_ON", default=False) is True
    assert env_flag("FLAG_OFF", default=True) is False
    assert env_flag("FLAG_UNSET", default=True) is True
    with pytest.raises(ConfigurationError):
        env_flag("FLAG_BAD", default=False)


def test_env_list_splits_on_commas(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIST_VAR", " hf, civitai ,,ollama ")

    assert env_list("LIST_VAR") == ("hf", "civitai", "ollama")
    assert env_list("LIST_UNSET") == ()


def test_sync_config_defaults() -> None:
    config = get_sync_config()

    assert dict(config.sources) == {}
    assert config.enable_nsfw_filtering is False
    assert config.log_nsfw_attempts is True
    assert config.enable_translation is True
    assert config.auto_merge_duplicates is False


def test_sync_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODELCAT_SOURCES", "hf,llm_discovery")
    monkeypatch.setenv("MODELCAT_BLOCK_NSFW", "true")
    monkeypatch.setenv("MODELCAT_NSFW_KEYWORDS", "spicy, lewd")
    monkeypatch.setenv("MODELCAT_TRANSLATE", "off")

    config = get_sync_config(overrides={"hf": False, "civitai": True})

    assert config.source_enabled("llm_discovery")
    assert config.source_enabled("civitai")
    assert not config.source_enabled("hf")
    assert not config.source_enabled("unknown")
    assert config.enable_nsfw_filtering is True
    assert config.custom_nsfw_keywords == ("spicy", "lewd")
    assert config.enable_translation is False


def test_llm_config_absent_without_base_url() -> None:
    assert get_llm_config() is None


def test_llm_config_openai_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODELCAT_LLM_BASE_URL", "https://api.openai.com/v1/")
    monkeypatch.setenv("MODELCAT_LLM_MODEL", "gpt-4o-mini")

    with pytest.raises(ConfigurationError, match="API_KEY"):
        get_llm_config()

    monkeypatch.setenv("MODELCAT_LLM_API_KEY", "sk-test")
    config = get_llm_config()

    assert config is not None
    assert config.protocol == "openai"
    assert config.base_url == "https://api.openai.com/v1"
    assert config.resilience.default_headers == {"Authorization": "Bearer sk-test"}
    assert config.resilience.cache is None


def test_llm_config_ollama_needs_no_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODELCAT_LLM_BASE_URL", "http://localhost:11434")
    monkeypatch.setenv("MODELCAT_LLM_MODEL", "llama3")
    monkeypatch.setenv("MODELCAT_LLM_PROTOCOL", "Ollama")

    config = get_llm_config()

    assert config is not None
    assert config.protocol == "ollama"
    assert config.resilience.default_headers is None


def test_llm_config_rejects_unknown_protocol(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODELCAT_LLM_BASE_URL", "http://localhost")
    monkeypatch.setenv("MODELCAT_LLM_MODEL", "m")
    monkeypatch.setenv("MODELCAT_LLM_PROTOCOL", "grpc")

    with pytest.raises(ConfigurationError, match="grpc"):
        get_llm_config()


def test_ollama_config_default_and_override(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_ollama_config().base_url == "http://127.0.0.1:11434"

    monkeypatch.setenv("MODELCAT_OLLAMA_URL", "http://gpu-box:11434/")

    assert get_ollama_config().base_url == "http://gpu-box:11434"


def test_storage_config_uses_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MODELCAT_DATA_DIR", str(tmp_path / "store"))

    cache_path = get_storage_config().http_cache_path()

    assert cache_path == (tmp_path / "store").resolve() / "http_cache.db"
    assert cache_path.parent.is_dir()
    assert isinstance(cache_path, Path)


def test_configure_logging_quiets_http_loggers_unless_debugging() -> None:
    loggers = [logging.getLogger(name) for name in HTTP_LOGGERS]
    previous = [logger.level for logger in loggers]
    try:
        configure_logging(level=logging.INFO)
        assert {logger.level for logger in loggers} == {logging.WARNING}

        configure_logging(level=logging.DEBUG)
        assert {logger.level for logger in loggers} == {logging.DEBUG}
    finally:
        for logger, level in zip(loggers, previous, strict=True):
            logger.setLevel(level)
