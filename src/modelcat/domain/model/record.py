"""The catalog record and its sub-records."""

from __future__ import annotations

from dataclasses import dataclass, field

from modelcat.domain.model.enums import Domain, LicenseType


@dataclass(slots=True, kw_only=True)
class License:
    """License terms; ``None`` members mean the source did not say."""

    name: str | None = None
    type: LicenseType | None = None
    commercial_use: bool | None = None
    attribution_required: bool | None = None
    share_alike: bool | None = None
    copyleft: bool | None = None
    url: str | None = None
    notes: str | None = None


@dataclass(slots=True, kw_only=True)
class Hosting:
    weights_available: bool = False
    api_available: bool = False
    on_premise_friendly: bool = False
    providers: list[str] = field(default_factory=list[str])


@dataclass(slots=True, kw_only=True)
class PricingEntry:
    model: str | None = None
    unit: str | None = None
    input: float | None = None
    output: float | None = None
    flat: float | None = None
    currency: str | None = None
    notes: str | None = None
    url: str | None = None


@dataclass(slots=True, kw_only=True)
class BenchmarkEntry:
    name: str
    score: float | str | None = None
    unit: str | None = None
    source: str | None = None


@dataclass(slots=True, kw_only=True)
class ModelRecord:
    """One catalog entry describing a single AI model.

    ``id`` is namespaced by source (``hf-meta-llama/Llama-3``) and never changes
    once the record is admitted. ``is_favorite``, ``is_nsfw_flagged`` and
    ``flagged_image_urls`` belong to the user; ``None`` means never set.
    """

    id: str
    name: str
    description: str | None = None
    provider: str | None = None
    domain: Domain | None = None
    source: str | None = None
    url: str | None = None
    repo: str | None = None
    license: License | None = None
    hosting: Hosting = field(default_factory=Hosting)
    pricing: list[PricingEntry] = field(default_factory=list[PricingEntry])
    downloads: int | None = None
    release_date: str | None = None
    updated_at: str | None = None
    tags: list[str] = field(default_factory=list[str])
    parameters: str | None = None
    context_window: str | None = None
    indemnity: str | None = None
    data_provenance: str | None = None
    usage_restrictions: list[str] = field(default_factory=list[str])
    images: list[str] = field(default_factory=list[str])
    benchmarks: list[BenchmarkEntry] = field(default_factory=list[BenchmarkEntry])
    analytics: dict[str, float | str] = field(default_factory=dict[str, float | str])
    is_favorite: bool | None = None
    is_nsfw_flagged: bool | None = None
    flagged_image_urls: list[str] = field(default_factory=list[str])

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def with_tags(self, *extra: str) -> ModelRecord:
        """Return a copy carrying ``extra`` tags in addition to the current ones."""

        copied = copy_record(self)
        for tag in extra:
            if tag not in copied.tags:
                copied.tags.append(tag)
        return copied


def copy_record(record: ModelRecord) -> ModelRecord:
    """Copy ``record`` deeply enough that list/sub-record edits do not leak back."""

    return ModelRecord(
        id=record.id,
        name=record.name,
        description=record.description,
        provider=record.provider,
        domain=record.domain,
        source=record.source,
        url=record.url,
        repo=record.repo,
        license=_copy_license(record.license),
        hosting=Hosting(
            weights_available=record.hosting.weights_available,
            api_available=record.hosting.api_available,
            on_premise_friendly=record.hosting.on_premise_friendly,
            providers=list(record.hosting.providers),
        ),
        pricing=[_copy_pricing(entry) for entry in record.pricing],
        downloads=record.downloads,
        release_date=record.release_date,
        updated_at=record.updated_at,
        tags=list(record.tags),
        parameters=record.parameters,
        context_window=record.context_window,
        indemnity=record.indemnity,
        data_provenance=record.data_provenance,
        usage_restrictions=list(record.usage_restrictions),
        images=list(record.images),
        benchmarks=[_copy_benchmark(entry) for entry in record.benchmarks],
        analytics=dict(record.analytics),
        is_favorite=record.is_favorite,
        is_nsfw_flagged=record.is_nsfw_flagged,
        flagged_image_urls=list(record.flagged_image_urls),
    )


def _copy_license(license_: License | None) -> License | None:
    if license_ is None:
        return None
    return License(
        name=license_.name,
        type=license_.type,
        commercial_use=license_.commercial_use,
        attribution_required=license_.attribution_required,
        share_alike=license_.share_alike,
        copyleft=license_.copyleft,
        url=license_.url,
        notes=license_.notes,
    )


def _copy_pricing(entry: PricingEntry) -> PricingEntry:
    return PricingEntry(
        model=entry.model,
        unit=entry.unit,
        input=entry.input,
        output=entry.output,
        flat=entry.flat,
        currency=entry.currency,
        notes=entry.notes,
        url=entry.url,
    )


def _copy_benchmark(entry: BenchmarkEntry) -> BenchmarkEntry:
    return BenchmarkEntry(name=entry.name, score=entry.score, unit=entry.unit, source=entry.source)
