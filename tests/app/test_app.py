from __future__ import annotations

import pytest

from modelcat.adapters.feed import JsonFeedFetcher
from modelcat.adapters.llm import ChatCompletionClient
from modelcat.adapters.merge_worker import BackgroundMergeTask
from modelcat.app import build_completion, build_registry, import_models, sync_models
from modelcat.domain.ports import FetchResult
from modelcat.domain.sync import FetcherRegistry, PartialModelsEvent, SyncCallbacks
from modelcat.domain.sync.events import SyncEvent
from tests.helpers.fakes import FakeFetcher, make_config, make_record


def test_build_registry_registers_one_fetcher_per_feed() -> None:
    registry = build_registry({"hf": "https://a.test/hf.json", "lab": "https://b.test/lab.json"})

    assert len(registry) == 2
    fetcher = registry.get("lab")
    assert isinstance(fetcher, JsonFeedFetcher)
    assert fetcher.url == "https://b.test/lab.json"


def test_build_completion_follows_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    assert build_completion() is None

    monkeypatch.setenv("MODELCAT_LLM_BASE_URL", "http://localhost:11434")
    monkeypatch.setenv("MODELCAT_LLM_MODEL", "llama3")
    monkeypatch.setenv("MODELCAT_LLM_PROTOCOL", "ollama")

    assert isinstance(build_completion(), ChatCompletionClient)


def test_sync_models_merges_complete_records_into_existing() -> None:
    registry = FetcherRegistry()
    registry.register(
        FakeFetcher(
            "hf",
            FetchResult(
                complete=[
                    make_record("hf-1", name="Llama v2", parameters="7B"),
                    make_record("hf-2", name="Mistral"),
                    make_record("hf-3", name="xxx-mix"),
                ]
            ),
        )
    )
    existing = [make_record("hf-1", name="Llama", provider="Meta", is_favorite=True)]
    events: list[SyncEvent] = []

    result = sync_models(
        registry=registry,
        existing=existing,
        config=make_config(enable_nsfw_filtering=True),
        callbacks=SyncCallbacks(on_event=events.append),
        merge_task=BackgroundMergeTask.start(background=False),
    )

    assert [record.id for record in result.sync.flagged] == ["hf-3"]
    assert (result.merge.added, result.merge.updated) == (1, 1)
    llama = result.merge.models[0]
    assert (llama.name, llama.parameters, llama.is_favorite) == ("Llama", "7B", True)
    assert existing[0].parameters is None
    assert any(isinstance(event, PartialModelsEvent) for event in events)


def test_import_models_normalizes_and_merges() -> None:
    rows = [
        {"Model Name": "Whisper", "Company": "OpenAI", "Model Type": "Speech recognition"},
        {"id": "hf-1", "name": "Llama", "Released": 44197},
    ]
    existing = [make_record("hf-1", name="Llama", provider="Meta")]

    response = import_models(
        rows,
        existing=existing,
        merge_task=BackgroundMergeTask.start(background=False),
    )

    assert (response.added, response.updated) == (1, 1)
    whisper = response.models[1]
    assert whisper.id == "import-Whisper"
    assert whisper.source == "Import"
    assert response.models[0].release_date == "2021-01-01"
