"""Domain port definitions for adapters."""

from __future__ import annotations

from .completion import CompletionError, TextCompletion
from .fetching import Fetcher, FetchResult
from .local_runtime import LocalRuntime, LocalRuntimeError

__all__ = [
    "CompletionError",
    "FetchResult",
    "Fetcher",
    "LocalRuntime",
    "LocalRuntimeError",
    "TextCompletion",
]
