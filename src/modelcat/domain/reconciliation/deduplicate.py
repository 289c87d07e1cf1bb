"""Catalog-wide collapse of residual duplicates.

After per-record resolution a set may still hold two records for one model,
e.g. the same checkpoint published under different ids by two sources. They
share a provider and a normalized name; later occurrences are merged into the
first one.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from modelcat.domain.text import normalize_name_for_match, normalize_provider_key

from .merge import merge_records

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from modelcat.domain.model import ModelRecord

log = getLogger(__name__)


def dedupe_key(record: ModelRecord) -> str:
    provider = normalize_provider_key(record.provider)
    raw = record.name or record.id
    name = normalize_name_for_match(raw) or raw.lower()
    return f"{provider}::{name}"


def deduplicate_records(
    records: Sequence[ModelRecord],
    *,
    now: datetime | None = None,
) -> list[ModelRecord]:
    """Return ``records`` with same-key entries folded into their first occurrence."""

    survivors: list[ModelRecord] = []
    position_by_key: dict[str, int] = {}
    for record in records:
        key = dedupe_key(record)
        position = position_by_key.get(key)
        if position is None:
            position_by_key[key] = len(survivors)
            survivors.append(record)
            continue
        log.debug("Folding duplicate %s into %s", record.id, survivors[position].id)
        survivors[position] = merge_records(survivors[position], record, now=now)
    return survivors
