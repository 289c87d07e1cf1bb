"""Local runtime adapter listing the models installed in an Ollama instance."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from modelcat.adapters.http_resilience import ResilientClient
from modelcat.config import get_ollama_config
from modelcat.domain.ports.local_runtime import LocalRuntimeError

from .schema import OllamaTagsResponse
from .translator import parse_local_model

if TYPE_CHECKING:
    from modelcat.adapters.http_resilience import ClientFactory
    from modelcat.config import OllamaConfig, ResilienceConfig
    from modelcat.domain.model import ModelRecord
    from modelcat.domain.ports.local_runtime import LocalRuntime

log = getLogger(__name__)

TAGS_PATH = "/api/tags"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class OllamaRuntime:
    config: OllamaConfig = field(default_factory=get_ollama_config)
    client_factory: ClientFactory = field(default=_default_client_factory)

    async def list_models(self) -> list[ModelRecord]:
        try:
            async with self.client_factory(self.config.resilience) as client:
                response = await client.get(TAGS_PATH)
            response.raise_for_status()
            payload = OllamaTagsResponse.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise LocalRuntimeError(f"Ollama at {self.config.base_url} unreachable: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise LocalRuntimeError("Unexpected Ollama tags payload") from exc
        log.debug("Ollama lists %d models", len(payload.models))
        return [parse_local_model(model) for model in payload.models]


if TYPE_CHECKING:
    _runtime_check: LocalRuntime = OllamaRuntime()
