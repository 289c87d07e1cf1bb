from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

import httpx
import pytest

from modelcat.adapters.llm import ChatCompletionClient
from modelcat.config import LlmConfig
from modelcat.domain.ports import CompletionError, TextCompletion
from tests.helpers.fakes import make_client_factory, make_resilience


def _config(protocol: str = "openai") -> LlmConfig:
    return LlmConfig(
        protocol=protocol,  # type: ignore[arg-type]
        base_url="https://llm.test/v1",
        model="test-model",
        api_key="secret",
        resilience=make_resilience("llm", "https://llm.test/v1"),
    )


def _client(
    handler: Callable[[httpx.Request], httpx.Response],
    protocol: str = "openai",
) -> ChatCompletionClient:
    return ChatCompletionClient(_config(protocol), client_factory=make_client_factory(handler))


def test_openai_protocol_posts_chat_completion() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"choices": [{"index": 0, "message": {"role": "assistant", "content": "hi"}}]},
        )

    client = _client(handler)

    answer = asyncio.run(client.complete("system", "user"))

    assert answer == "hi"
    assert captured["path"] == "/v1/chat/completions"
    assert captured["body"] == {
        "model": "test-model",
        "messages": [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ],
        "temperature": 0.0,
    }


def test_ollama_protocol_uses_chat_endpoint() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"model": "m", "message": {"content": "[]"}, "done": True})

    answer = asyncio.run(_client(handler, "ollama").complete("s", "u"))

    assert answer == "[]"
    assert captured["path"] == "/v1/api/chat"
    body = captured["body"]
    assert isinstance(body, dict)
    assert body["stream"] is False
    assert body["options"] == {"temperature": 0.0}


def test_error_response_raises_completion_error(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("ERROR")

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            401, json={"error": {"message": "Invalid API key", "type": "auth_error"}}
        )

    with pytest.raises(CompletionError, match="Invalid API key"):
        asyncio.run(_client(handler).complete("s", "u"))

    client_records = [r for r in caplog.records if r.name == "modelcat.adapters.llm.client"]
    assert [record.args for record in client_records] == [("Invalid API key",)]
    assert "Completion endpoint error: Invalid API key" in caplog.text


@pytest.mark.parametrize(
    "payload",
    [
        {"text": "<html>oops</html>"},
        {"json": {"choices": []}},
        {"json": {"unexpected": True, "choices": "nope"}},
    ],
)
def test_unusable_payload_raises_completion_error(payload: dict[str, object]) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, **payload)  # type: ignore[arg-type]

    with pytest.raises(CompletionError):
        asyncio.run(_client(handler).complete("s", "u"))


def test_transport_failure_raises_completion_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(CompletionError, match="Completion request failed"):
        asyncio.run(_client(handler).complete("s", "u"))


def test_client_satisfies_completion_port() -> None:
    assert isinstance(ChatCompletionClient(_config()), TextCompletion)
