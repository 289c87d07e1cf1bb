"""Synchronisation settings for a reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from .env import env_flag, env_list

if TYPE_CHECKING:
    from collections.abc import Mapping

LLM_DISCOVERY_SOURCE = "llm_discovery"
LOCAL_DISCOVERY_SOURCE = "local_discovery"


def _empty_sources() -> Mapping[str, bool]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Which sources run and how the safety/translation stages behave.

    ``enable_nsfw_filtering`` selects blocking mode; when false flagged records
    are tagged and kept.
    """

    sources: Mapping[str, bool] = field(default_factory=_empty_sources)
    enable_nsfw_filtering: bool = False
    log_nsfw_attempts: bool = True
    custom_nsfw_keywords: tuple[str, ...] = ()
    enable_translation: bool = True
    auto_merge_duplicates: bool = False

    def source_enabled(self, source_id: str) -> bool:
        return bool(self.sources.get(source_id, False))


def get_sync_config(*, overrides: Mapping[str, bool] | None = None) -> SyncConfig:
    """Build the sync configuration from ``MODELCAT_*`` environment variables."""

    sources = dict.fromkeys(env_list("MODELCAT_SOURCES"), True)
    if overrides:
        sources.update(overrides)
    return SyncConfig(
        sources=MappingProxyType(sources),
        enable_nsfw_filtering=env_flag("MODELCAT_BLOCK_NSFW", default=False),
        log_nsfw_attempts=env_flag("MODELCAT_LOG_NSFW", default=True),
        custom_nsfw_keywords=env_list("MODELCAT_NSFW_KEYWORDS"),
        enable_translation=env_flag("MODELCAT_TRANSLATE", default=True),
        auto_merge_duplicates=env_flag("MODELCAT_AUTO_MERGE", default=False),
    )
