"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from modelcat.adapters.feed import JsonFeedFetcher
from modelcat.adapters.llm import ChatCompletionClient
from modelcat.adapters.merge_worker import BackgroundMergeTask, MergeRequest, MergeResponse
from modelcat.adapters.ollama import OllamaRuntime
from modelcat.config import LOCAL_DISCOVERY_SOURCE, get_llm_config, get_sync_config
from modelcat.domain.importing import normalize_import_rows
from modelcat.domain.sync import (
    DiscoveryService,
    FetcherRegistry,
    SafetyService,
    SyncCallbacks,
    SyncOrchestrator,
    SyncResult,
    TranslationService,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from modelcat.config import SyncConfig
    from modelcat.domain.importing import ImportRow
    from modelcat.domain.model import ModelRecord
    from modelcat.domain.ports import LocalRuntime, TextCompletion

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class SyncModelsResult:
    sync: SyncResult
    merge: MergeResponse


def build_registry(feeds: Mapping[str, str] | None = None) -> FetcherRegistry:
    """Register one :class:`JsonFeedFetcher` per ``{id: url}`` entry."""

    registry = FetcherRegistry()
    for feed_id, url in (feeds or {}).items():
        registry.register(JsonFeedFetcher(id=feed_id, url=url))
    return registry


def build_completion() -> TextCompletion | None:
    config = get_llm_config()
    if config is None:
        log.info("No completion endpoint configured; model-based stages are disabled")
        return None
    return ChatCompletionClient(config)


def build_orchestrator(
    registry: FetcherRegistry,
    *,
    config: SyncConfig,
    completion: TextCompletion | None = None,
    local_runtime: LocalRuntime | None = None,
) -> SyncOrchestrator:
    if local_runtime is None and config.source_enabled(LOCAL_DISCOVERY_SOURCE):
        local_runtime = OllamaRuntime()
    return SyncOrchestrator(
        registry,
        safety=SafetyService(completion),
        discovery=DiscoveryService(completion, local_runtime),
        translation=TranslationService(completion),
    )


def sync_models(
    *,
    registry: FetcherRegistry,
    existing: Sequence[ModelRecord] = (),
    config: SyncConfig | None = None,
    callbacks: SyncCallbacks | None = None,
    completion: TextCompletion | None = None,
    local_runtime: LocalRuntime | None = None,
    merge_task: BackgroundMergeTask | None = None,
) -> SyncModelsResult:
    """Run one sync and merge its complete records into ``existing``."""

    effective_config = config or get_sync_config()
    effective_callbacks = callbacks or SyncCallbacks()
    orchestrator = build_orchestrator(
        registry,
        config=effective_config,
        completion=completion,
        local_runtime=local_runtime,
    )
    log.info(
        "Starting sync: sources=%s, blocking=%s, translate=%s",
        len(registry.enabled(effective_config)),
        effective_config.enable_nsfw_filtering,
        effective_config.enable_translation,
    )

    async def run() -> SyncModelsResult:
        sync_result = await orchestrator.run(effective_config, effective_callbacks)
        request = MergeRequest(
            current_models=list(existing),
            new_models=sync_result.complete,
            auto_merge_duplicates=effective_config.auto_merge_duplicates,
        )
        task = merge_task or BackgroundMergeTask.start()
        try:
            merged = await task.merge(request)
        finally:
            if merge_task is None:
                task.shutdown()
        return SyncModelsResult(sync=sync_result, merge=merged)

    result = asyncio.run(run())
    log.info(
        "Finished sync: complete=%d, flagged=%d, added=%d, updated=%d",
        len(result.sync.complete),
        len(result.sync.flagged),
        result.merge.added,
        result.merge.updated,
    )
    return result


def import_models(
    rows: Iterable[ImportRow],
    *,
    existing: Sequence[ModelRecord] = (),
    auto_merge_duplicates: bool = False,
    sheet_name: str | None = None,
    merge_task: BackgroundMergeTask | None = None,
) -> MergeResponse:
    """Normalize import rows and merge them into ``existing``."""

    records = normalize_import_rows(rows, sheet_name=sheet_name)
    request = MergeRequest(
        current_models=list(existing),
        new_models=records,
        auto_merge_duplicates=auto_merge_duplicates,
    )
    task = merge_task or BackgroundMergeTask.start()
    try:
        response = task.merge_blocking(request)
    finally:
        if merge_task is None:
            task.shutdown()
    log.info(
        "Finished import: rows=%d, added=%d, updated=%d",
        len(records),
        response.added,
        response.updated,
    )
    return response
