"""Coordinator of one sync run: fan-out fetch, then safety, discovery and translation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from modelcat.domain.ports.fetching import FetchResult

from .events import LogEvent, SyncCallbacks, SyncCancelledError
from .results import SyncResult

if TYPE_CHECKING:
    from modelcat.config import SyncConfig
    from modelcat.domain.ports.fetching import Fetcher

    from .discovery import DiscoveryService
    from .registry import FetcherRegistry
    from .safety import SafetyService
    from .translation import TranslationService

log = logging.getLogger(__name__)


class SyncOrchestrator:
    """Run every enabled fetcher concurrently and pipe the aggregate through the stages.

    Partial results are streamed per fetcher as they arrive. The run does not
    persist anything; callers merge ``SyncResult.complete`` into their catalog.
    """

    def __init__(
        self,
        registry: FetcherRegistry,
        *,
        safety: SafetyService,
        discovery: DiscoveryService,
        translation: TranslationService,
    ) -> None:
        self._registry = registry
        self._safety = safety
        self._discovery = discovery
        self._translation = translation

    async def run(self, config: SyncConfig, callbacks: SyncCallbacks | None = None) -> SyncResult:
        callbacks = callbacks or SyncCallbacks()
        try:
            return await self._run(config, callbacks)
        except SyncCancelledError:
            raise
        except Exception:
            log.exception("Sync failed")
            raise

    async def _run(self, config: SyncConfig, callbacks: SyncCallbacks) -> SyncResult:
        fetchers = self._registry.enabled(config)
        total = len(fetchers)
        completed = 0
        callbacks.progress(0, total)

        async def execute(fetcher: Fetcher) -> FetchResult:
            nonlocal completed
            callbacks.log(f"Fetching from {fetcher.name}", logger=log)
            result = await self._fetch_one(fetcher, config, callbacks)
            completed += 1
            if result.complete:
                callbacks.log(f"{fetcher.name}: found {len(result.complete)} models", logger=log)
                callbacks.partial_models(fetcher.id, result.complete)
            callbacks.progress(completed, total, source=fetcher.name)
            return result

        results = await asyncio.gather(*(execute(fetcher) for fetcher in fetchers))
        self._checkpoint(callbacks, "fetch")

        candidates = [record for result in results for record in result.complete]
        source_flagged = [record for result in results for record in result.flagged]
        callbacks.log(f"Collected {len(candidates)} models from {total} sources", logger=log)

        screened = await self._safety.run(candidates, config, callbacks)
        self._checkpoint(callbacks, "safety")

        complete = list(screened.complete)
        discovered = await self._discovery.run(config, callbacks)
        complete.extend(discovered)
        self._checkpoint(callbacks, "discovery")

        complete = await self._translation.run(complete, config, callbacks)
        callbacks.progress(total, total, source="Completed")
        return SyncResult(complete=complete, flagged=[*source_flagged, *screened.flagged])

    async def _fetch_one(
        self,
        fetcher: Fetcher,
        config: SyncConfig,
        callbacks: SyncCallbacks,
    ) -> FetchResult:
        try:
            result = await fetcher.fetch(config, callbacks)
        except Exception as exc:  # noqa: BLE001
            log.exception("Fetcher %s failed", fetcher.id)
            callbacks.emit(LogEvent(message=f"{fetcher.name}: failed - {exc}", level=logging.ERROR))
            return FetchResult()
        return self._registry.validate_result(fetcher, result)

    @staticmethod
    def _checkpoint(callbacks: SyncCallbacks, stage: str) -> None:
        if callbacks.is_cancelled():
            callbacks.log(f"Sync cancelled after {stage}", level=logging.WARNING, logger=log)
            callbacks.cancelled(stage)
            raise SyncCancelledError(stage)


def run_sync(
    orchestrator: SyncOrchestrator,
    config: SyncConfig,
    callbacks: SyncCallbacks | None = None,
) -> SyncResult:
    """Blocking wrapper around :meth:`SyncOrchestrator.run`."""

    return asyncio.run(orchestrator.run(config, callbacks))

