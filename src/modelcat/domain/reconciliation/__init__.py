"""Reconciliation of incoming model records with the existing catalog.

Flow per batch:
1) resolve each incoming record to an existing one (id, repo, url, fuzzy name)
2) merge matched pairs field by field, or admit the record as new
3) optionally collapse residual duplicates across the whole set
"""

from __future__ import annotations

from .batch import MergeBatchResult, perform_merge_batch
from .deduplicate import dedupe_key, deduplicate_records
from .merge import apply_release_tags, is_future_release, merge_records
from .resolve import NO_MATCH, MatchKind, match_existing_index, resolve_match

__all__ = [
    "NO_MATCH",
    "MatchKind",
    "MergeBatchResult",
    "apply_release_tags",
    "dedupe_key",
    "deduplicate_records",
    "is_future_release",
    "match_existing_index",
    "merge_records",
    "perform_merge_batch",
    "resolve_match",
]
