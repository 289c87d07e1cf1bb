"""Caller-owned registry of the fetchers a sync may run."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from modelcat.domain.ports.fetching import FetchResult
from modelcat.errors import ModelcatError

if TYPE_CHECKING:
    from modelcat.config import SyncConfig
    from modelcat.domain.ports.fetching import Fetcher

log = getLogger(__name__)


class FetcherContractError(ModelcatError, TypeError):
    """Raised when a fetcher hands back something other than a ``FetchResult``."""

    def __init__(self, fetcher_id: str, result: object) -> None:
        self.fetcher_id = fetcher_id
        super().__init__(
            f"Fetcher {fetcher_id!r} returned {type(result).__name__}, expected FetchResult"
        )


class FetcherRegistry:
    def __init__(self) -> None:
        self._fetchers: dict[str, Fetcher] = {}

    def register(self, fetcher: Fetcher) -> None:
        if fetcher.id in self._fetchers:
            log.warning("Fetcher %s already registered; overwriting", fetcher.id)
        self._fetchers[fetcher.id] = fetcher

    def get(self, fetcher_id: str) -> Fetcher | None:
        return self._fetchers.get(fetcher_id)

    def get_all(self) -> list[Fetcher]:
        return list(self._fetchers.values())

    def enabled(self, config: SyncConfig) -> list[Fetcher]:
        return [fetcher for fetcher in self._fetchers.values() if fetcher.is_enabled(config)]

    def clear(self) -> None:
        self._fetchers.clear()

    def __len__(self) -> int:
        return len(self._fetchers)

    def __contains__(self, fetcher_id: object) -> bool:
        return fetcher_id in self._fetchers

    @staticmethod
    def validate_result(fetcher: Fetcher, result: object) -> FetchResult:
        if not isinstance(result, FetchResult):
            raise FetcherContractError(fetcher.id, result)
        return result
