"""Ports for fetching model records from external sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from modelcat.domain.model import ModelRecord

if TYPE_CHECKING:
    from modelcat.config import SyncConfig
    from modelcat.domain.sync.events import SyncCallbacks


@dataclass(slots=True, kw_only=True)
class FetchResult:
    """Records produced by one fetcher run.

    ``flagged`` holds records the source itself already withheld (for example
    explicit content a source marks as such).
    """

    complete: list[ModelRecord] = field(default_factory=list[ModelRecord])
    flagged: list[ModelRecord] = field(default_factory=list[ModelRecord])

    @property
    def total(self) -> int:
        return len(self.complete) + len(self.flagged)


@runtime_checkable
class Fetcher(Protocol):
    """A named source of model records.

    ``fetch`` must not raise for ordinary source unavailability; it reports the
    problem through ``callbacks`` and returns an empty :class:`FetchResult`.
    """

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    def is_enabled(self, config: SyncConfig) -> bool: ...

    async def fetch(self, config: SyncConfig, callbacks: SyncCallbacks) -> FetchResult: ...


__all__ = ["FetchResult", "Fetcher"]
