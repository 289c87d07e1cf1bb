"""Field merge of a matched (existing, incoming) record pair.

The merge is pure: both inputs are left untouched and a new record is returned.
Field groups are listed in :mod:`modelcat.domain.reconciliation.policy`.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from modelcat.domain.model import Hosting, License, ModelRecord, PricingEntry, Tag, copy_record
from modelcat.domain.text import clean_description, contains_cjk

from .policy import DYNAMIC_FIELDS, HOSTING_FLAGS, IDENTITY_FIELDS, LICENSE_FIELDS

if TYPE_CHECKING:
    from collections.abc import Iterable

FUTURE_RELEASE_TAGS = (Tag.UNRELEASED.value, Tag.FUTURE_RELEASE.value)


def merge_records(
    existing: ModelRecord,
    incoming: ModelRecord,
    *,
    now: datetime | None = None,
) -> ModelRecord:
    """Merge ``incoming`` into ``existing`` and return the merged record."""

    merged = copy_record(existing)
    reference = copy_record(incoming)

    for name in IDENTITY_FIELDS:
        setattr(merged, name, _prefer_present(getattr(existing, name), getattr(reference, name)))
    merged.name = _merged_name(existing, reference)

    for name in DYNAMIC_FIELDS:
        setattr(merged, name, _prefer_present(getattr(reference, name), getattr(existing, name)))
    if merged.description:
        merged.description = clean_description(merged.description)

    merged.tags = union_ordered(existing.tags, reference.tags)
    merged.usage_restrictions = union_ordered(
        existing.usage_restrictions, reference.usage_restrictions
    )
    merged.images = union_ordered(reference.images, existing.images)
    merged.pricing = merge_pricing(existing.pricing, reference.pricing)
    merged.license = merge_license(existing.license, reference.license)
    merged.hosting = merge_hosting(existing.hosting, reference.hosting)

    merged.is_favorite = _prefer_set(existing.is_favorite, reference.is_favorite)
    merged.is_nsfw_flagged = _prefer_set(existing.is_nsfw_flagged, reference.is_nsfw_flagged)
    merged.flagged_image_urls = union_ordered(
        existing.flagged_image_urls, reference.flagged_image_urls
    )

    merged.id = existing.id
    merged.tags = apply_release_tags(merged.tags, merged.release_date, now=now)
    return merged


def merge_license(existing: License | None, incoming: License | None) -> License | None:
    """Member-by-member merge; a member the incoming license states wins."""

    if existing is None and incoming is None:
        return None
    merged = License()
    for name in LICENSE_FIELDS:
        incoming_value = getattr(incoming, name) if incoming is not None else None
        existing_value = getattr(existing, name) if existing is not None else None
        setattr(merged, name, _prefer_present(incoming_value, existing_value))
    return merged


def merge_hosting(existing: Hosting, incoming: Hosting) -> Hosting:
    merged = Hosting(providers=union_ordered(existing.providers, incoming.providers))
    for name in HOSTING_FLAGS:
        setattr(merged, name, bool(getattr(existing, name) or getattr(incoming, name)))
    return merged


def merge_pricing(
    existing: Iterable[PricingEntry],
    incoming: Iterable[PricingEntry],
) -> list[PricingEntry]:
    """Union of price entries; incoming first so it wins over an equal existing entry."""

    merged: list[PricingEntry] = []
    seen: set[str] = set()
    for entry in (*incoming, *existing):
        normalized = normalize_pricing(entry)
        key = pricing_key(normalized)
        if key in seen:
            continue
        seen.add(key)
        merged.append(normalized)
    return merged


def normalize_pricing(entry: PricingEntry) -> PricingEntry:
    return PricingEntry(
        model=entry.model or "Usage",
        unit=entry.unit or ("month" if entry.flat is not None else "token"),
        input=entry.input,
        output=entry.output,
        flat=entry.flat,
        currency=entry.currency or "USD",
        notes=entry.notes,
        url=entry.url,
    )


def pricing_key(entry: PricingEntry) -> str:
    parts = (
        (entry.model or "").lower(),
        (entry.unit or "").lower(),
        _number_key(entry.input),
        _number_key(entry.output),
        _number_key(entry.flat),
        (entry.currency or "").upper(),
    )
    return "|".join(parts)


def union_ordered(*groups: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    merged: list[str] = []
    for group in groups:
        for value in group:
            if value in seen:
                continue
            seen.add(value)
            merged.append(value)
    return merged


def is_future_release(release_date: str | None, *, now: datetime | None = None) -> bool:
    """True if ``release_date`` lies strictly after ``now``; unparseable dates are not."""

    parsed = parse_iso_datetime(release_date)
    if parsed is None:
        return False
    return parsed > (now or datetime.now(UTC))


def apply_release_tags(
    tags: Iterable[str],
    release_date: str | None,
    *,
    now: datetime | None = None,
) -> list[str]:
    """Add or strip the future-release tags so they match ``release_date``."""

    kept = [tag for tag in tags if tag not in FUTURE_RELEASE_TAGS]
    if is_future_release(release_date, now=now):
        kept.extend(FUTURE_RELEASE_TAGS)
    return kept


def admit_record(record: ModelRecord, *, now: datetime | None = None) -> ModelRecord:
    """Copy a record that matched nothing into the shape a merge would leave it in."""

    admitted = copy_record(record)
    if admitted.description:
        admitted.description = clean_description(admitted.description)
    admitted.pricing = merge_pricing((), admitted.pricing)
    admitted.tags = apply_release_tags(admitted.tags, admitted.release_date, now=now)
    return admitted


def parse_iso_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _merged_name(existing: ModelRecord, incoming: ModelRecord) -> str:
    if incoming.name and Tag.TRANSLATED in incoming.tags:
        return incoming.name
    if incoming.name and not contains_cjk(incoming.name) and contains_cjk(existing.name):
        return incoming.name
    return existing.name or incoming.name


def _prefer_present[T](preferred: T, fallback: T) -> T:
    if _is_present(preferred):
        return preferred
    return fallback


def _prefer_set(existing: bool | None, incoming: bool | None) -> bool | None:
    return existing if existing is not None else incoming


def _is_present(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str | list | dict):
        return len(value) > 0
    return True


def _number_key(value: float | None) -> str:
    if value is None:
        return ""
    return repr(float(value))
