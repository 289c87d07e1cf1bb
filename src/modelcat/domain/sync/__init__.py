"""Sync pipeline: fetch fan-out, safety screening, discovery and translation."""

from __future__ import annotations

from .discovery import DiscoveryService, parse_discovery_answer
from .events import (
    CancellationSignal,
    CancelledEvent,
    LogEvent,
    PartialModelsEvent,
    ProgressEvent,
    SkipSignal,
    SyncCallbacks,
    SyncCancelledError,
    SyncEvent,
)
from .orchestrator import SyncOrchestrator, run_sync
from .registry import FetcherContractError, FetcherRegistry
from .results import SyncResult
from .safety import (
    NsfwCheck,
    SafetyPolicy,
    SafetyService,
    ScreeningResult,
    detect_nsfw,
    screen_records,
)
from .translation import TranslationService, needs_translation

__all__ = [
    "CancellationSignal",
    "CancelledEvent",
    "DiscoveryService",
    "FetcherContractError",
    "FetcherRegistry",
    "LogEvent",
    "NsfwCheck",
    "PartialModelsEvent",
    "ProgressEvent",
    "SafetyPolicy",
    "SafetyService",
    "ScreeningResult",
    "SkipSignal",
    "SyncCallbacks",
    "SyncCancelledError",
    "SyncEvent",
    "SyncOrchestrator",
    "SyncResult",
    "TranslationService",
    "detect_nsfw",
    "needs_translation",
    "parse_discovery_answer",
    "run_sync",
    "screen_records",
]
