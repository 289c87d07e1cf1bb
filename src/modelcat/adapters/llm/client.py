"""Chat-completion client for OpenAI-compatible and Ollama endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from modelcat.adapters.http_resilience import ResilientClient
from modelcat.domain.ports.completion import CompletionError

from .schema import OllamaChatResponse, OpenAIChatResponse, OpenAIErrorResponse

if TYPE_CHECKING:
    from modelcat.adapters.http_resilience import ClientFactory
    from modelcat.config import LlmConfig, ResilienceConfig
    from modelcat.domain.ports.completion import TextCompletion

log = getLogger(__name__)

OPENAI_CHAT_PATH = "/chat/completions"
OLLAMA_CHAT_PATH = "/api/chat"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class ChatCompletionClient:
    """:class:`TextCompletion` over a single chat endpoint.

    One HTTP client is opened per call; sync runs issue few, large prompts.
    """

    config: LlmConfig
    temperature: float = 0.0
    client_factory: ClientFactory = field(default=_default_client_factory)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        if self.config.protocol == "ollama":
            path = OLLAMA_CHAT_PATH
            body: dict[str, object] = {
                "model": self.config.model,
                "messages": messages,
                "stream": False,
                "options": {"temperature": self.temperature},
            }
        else:
            path = OPENAI_CHAT_PATH
            body = {
                "model": self.config.model,
                "messages": messages,
                "temperature": self.temperature,
            }

        try:
            async with self.client_factory(self.config.resilience) as client:
                response = await client.post(path, json=body)
        except httpx.HTTPError as exc:
            raise CompletionError(f"Completion request failed: {exc}") from exc

        payload = self._decode(response)
        text = self._extract_text(payload)
        if not text:
            raise CompletionError("Completion response carried no text")
        return text

    def _decode(self, response: httpx.Response) -> object:
        try:
            payload = response.json()
        except ValueError as exc:
            raise CompletionError(
                f"Completion endpoint returned non-JSON body (status {response.status_code})"
            ) from exc
        if response.is_error:
            message = f"HTTP {response.status_code}"
            if isinstance(payload, dict) and "error" in payload:
                try:
                    message = OpenAIErrorResponse.model_validate(payload).error.message
                except ValidationError:
                    message = str(payload["error"])
            log.error("Completion endpoint error: %s", message)
            raise CompletionError(message)
        return payload

    def _extract_text(self, payload: object) -> str | None:
        try:
            if self.config.protocol == "ollama":
                return OllamaChatResponse.model_validate(payload).text
            return OpenAIChatResponse.model_validate(payload).text
        except ValidationError as exc:
            raise CompletionError("Unexpected completion response payload") from exc


if TYPE_CHECKING:

    def _completion_check(config: LlmConfig) -> TextCompletion:
        return ChatCompletionClient(config)
