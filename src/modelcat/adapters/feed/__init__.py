"""Generic JSON feed fetcher."""

from __future__ import annotations

from .fetcher import JsonFeedFetcher, default_feed_resilience

__all__ = ["JsonFeedFetcher", "default_feed_resilience"]
