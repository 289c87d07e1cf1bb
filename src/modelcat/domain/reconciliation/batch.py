"""Merge a batch of incoming records into the current catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from modelcat.domain.model import ModelRecord, copy_record

from .deduplicate import deduplicate_records
from .merge import admit_record, merge_records
from .resolve import NO_MATCH, match_existing_index

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class MergeBatchResult:
    models: list[ModelRecord] = field(default_factory=list[ModelRecord])
    added: int = 0
    updated: int = 0


def perform_merge_batch(
    current: Sequence[ModelRecord],
    incoming: Sequence[ModelRecord],
    *,
    auto_merge_duplicates: bool,
    now: datetime | None = None,
) -> MergeBatchResult:
    """Resolve each incoming record against the growing working set.

    ``current`` and ``incoming`` are not modified. Fuzzy name matching and the
    closing catalog-wide de-duplication run only with ``auto_merge_duplicates``.
    """

    working = [copy_record(record) for record in current]
    added = 0
    updated = 0
    for record in incoming:
        index = match_existing_index(working, record, fuzzy=auto_merge_duplicates)
        if index == NO_MATCH:
            working.append(admit_record(record, now=now))
            added += 1
        else:
            working[index] = merge_records(working[index], record, now=now)
            updated += 1

    if auto_merge_duplicates:
        before = len(working)
        working = deduplicate_records(working, now=now)
        if len(working) != before:
            log.info("Collapsed %d duplicate records", before - len(working))

    return MergeBatchResult(models=working, added=added, updated=updated)
