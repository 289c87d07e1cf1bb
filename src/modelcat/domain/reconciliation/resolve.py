"""Identity resolution of an incoming record against an existing record set.

Tiers, first match wins; a tier is skipped when the incoming record lacks its key:
1) exact ``id``
2) exact ``repo``
3) exact ``url``
4) fuzzy (opt-in): normalized name + compatible domain + compatible provider
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from modelcat.domain.text import normalize_name_for_match

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from modelcat.domain.model import ModelRecord

    type _Predicate = Callable[[ModelRecord], bool]

NO_MATCH = -1


class MatchKind(StrEnum):
    ID = "id"
    REPO = "repo"
    URL = "url"
    FUZZY_NAME = "fuzzy_name"


def match_existing_index(
    existing: Sequence[ModelRecord],
    incoming: ModelRecord,
    *,
    fuzzy: bool,
) -> int:
    """Return the index of the record ``incoming`` refers to, or ``NO_MATCH``."""

    index, _kind = resolve_match(existing, incoming, fuzzy=fuzzy)
    return index


def resolve_match(
    existing: Sequence[ModelRecord],
    incoming: ModelRecord,
    *,
    fuzzy: bool,
) -> tuple[int, MatchKind | None]:
    if incoming.id:
        index = _find(existing, lambda record: record.id == incoming.id)
        if index != NO_MATCH:
            return index, MatchKind.ID
    if incoming.repo:
        index = _find(existing, lambda record: record.repo == incoming.repo)
        if index != NO_MATCH:
            return index, MatchKind.REPO
    if incoming.url:
        index = _find(existing, lambda record: record.url == incoming.url)
        if index != NO_MATCH:
            return index, MatchKind.URL
    if fuzzy:
        base_name = normalize_name_for_match(incoming.name)
        if base_name:
            index = _find(
                existing,
                lambda record: normalize_name_for_match(record.name) == base_name
                and domains_compatible(record, incoming)
                and providers_compatible(record.provider, incoming.provider),
            )
            if index != NO_MATCH:
                return index, MatchKind.FUZZY_NAME
    return NO_MATCH, None


def domains_compatible(left: ModelRecord, right: ModelRecord) -> bool:
    if left.domain is None or right.domain is None:
        return True
    return left.domain == right.domain


def providers_compatible(left: str | None, right: str | None) -> bool:
    """Case-insensitive equality or containment; an unset side is compatible."""

    left_key = (left or "").lower()
    right_key = (right or "").lower()
    if not left_key or not right_key:
        return True
    return left_key == right_key or left_key in right_key or right_key in left_key


def _find(records: Sequence[ModelRecord], predicate: _Predicate) -> int:
    for index, record in enumerate(records):
        if predicate(record):
            return index
    return NO_MATCH
