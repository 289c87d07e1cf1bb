"""Generic fetcher for URLs that serve already record-shaped JSON."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from modelcat.adapters.catalog_file import parse_records
from modelcat.adapters.http_resilience import ResilientClient
from modelcat.config import CacheConfig, RateLimit, ResilienceConfig
from modelcat.domain.ports.fetching import FetchResult

if TYPE_CHECKING:
    from modelcat.adapters.http_resilience import ClientFactory
    from modelcat.config import SyncConfig
    from modelcat.domain.ports.fetching import Fetcher
    from modelcat.domain.sync.events import SyncCallbacks

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 30.0


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def default_feed_resilience(name: str) -> ResilienceConfig:
    return ResilienceConfig(
        name=name,
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        cache=CacheConfig(backend="sqlite", default_ttl_seconds=3600.0),
    )


@dataclass(slots=True)
class JsonFeedFetcher:
    """Fetch ``url`` and read a JSON list of records, or ``{"models": [...], "flagged": [...]}``.

    Enabled when ``config.sources[id]`` is true.
    """

    id: str
    url: str
    name: str = ""
    resilience: ResilienceConfig | None = None
    client_factory: ClientFactory = field(default=_default_client_factory)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.id
        if self.resilience is None:
            self.resilience = default_feed_resilience(self.id)

    def is_enabled(self, config: SyncConfig) -> bool:
        return config.source_enabled(self.id)

    async def fetch(self, config: SyncConfig, callbacks: SyncCallbacks) -> FetchResult:
        assert self.resilience is not None
        try:
            async with self.client_factory(self.resilience) as client:
                response = await client.get(self.url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            callbacks.log(f"{self.name}: unavailable ({exc})", level=logging.WARNING, logger=log)
            return FetchResult()
        except ValueError:
            callbacks.log(f"{self.name}: response is not JSON", level=logging.WARNING, logger=log)
            return FetchResult()

        complete_entries, flagged_entries = _split_payload(payload)
        if complete_entries is None:
            callbacks.log(
                f"{self.name}: unexpected payload shape", level=logging.WARNING, logger=log
            )
            return FetchResult()
        return FetchResult(
            complete=parse_records(complete_entries, origin=self.url),
            flagged=parse_records(flagged_entries, origin=self.url),
        )


def _split_payload(payload: object) -> tuple[list[object] | None, list[object]]:
    if isinstance(payload, list):
        return payload, []
    if isinstance(payload, dict):
        models = payload.get("models")
        flagged = payload.get("flagged")
        if isinstance(models, list):
            return models, flagged if isinstance(flagged, list) else []
    return None, []


if TYPE_CHECKING:
    _fetcher_check: Fetcher = JsonFeedFetcher(id="feed", url="https://example.invalid")
