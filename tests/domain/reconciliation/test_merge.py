from __future__ import annotations

from datetime import datetime

from modelcat.domain.model import Hosting, License, LicenseType, PricingEntry, Tag
from modelcat.domain.reconciliation import apply_release_tags, is_future_release, merge_records
from modelcat.domain.reconciliation.merge import merge_pricing, parse_iso_datetime
from tests.helpers.fakes import make_record


def test_identity_fields_keep_existing_and_dynamic_fields_take_incoming() -> None:
    existing = make_record("hf-1", name="Llama", provider="Meta", parameters=None)
    incoming = make_record("hf-1", name="Llama v2", parameters="7B")

    merged = merge_records(existing, incoming)

    assert merged.name == "Llama"
    assert merged.provider == "Meta"
    assert merged.parameters == "7B"


def test_incoming_fills_missing_identity_fields() -> None:
    existing = make_record("hf-1", name="Llama", repo=None)
    incoming = make_record("hf-1", repo="https://github.com/meta/llama")

    merged = merge_records(existing, incoming)

    assert merged.repo == "https://github.com/meta/llama"


def test_dynamic_field_keeps_existing_when_incoming_is_blank() -> None:
    existing = make_record("a", description="A capable model", downloads=10)
    incoming = make_record("a", description="", downloads=None)

    merged = merge_records(existing, incoming)

    assert merged.description == "A capable model"
    assert merged.downloads == 10


def test_merged_id_never_changes() -> None:
    existing = make_record("hf-1", repo="https://github.com/org/model")
    incoming = make_record("gh-org-model", repo="https://github.com/org/model")

    assert merge_records(existing, incoming).id == "hf-1"


def test_translated_incoming_name_replaces_cjk_name() -> None:
    existing = make_record("a", name="通义千问")
    translated = make_record("a", name="Tongyi Qianwen", tags=[Tag.TRANSLATED.value])
    plain = make_record("a", name="Qwen")

    assert merge_records(existing, translated).name == "Tongyi Qianwen"
    assert merge_records(existing, plain).name == "Qwen"
    assert merge_records(make_record("a", name="Qwen"), existing).name == "Qwen"


def test_user_fields_survive_merge() -> None:
    existing = make_record(
        "a",
        is_favorite=True,
        is_nsfw_flagged=False,
        flagged_image_urls=["https://img/1.png"],
    )
    incoming = make_record(
        "a",
        is_favorite=False,
        is_nsfw_flagged=True,
        flagged_image_urls=["https://img/2.png"],
    )

    merged = merge_records(existing, incoming)

    assert merged.is_favorite is True
    assert merged.is_nsfw_flagged is False
    assert merged.flagged_image_urls == ["https://img/1.png", "https://img/2.png"]


def test_unset_user_fields_take_incoming_values() -> None:
    merged = merge_records(make_record("a"), make_record("a", is_nsfw_flagged=True))

    assert merged.is_nsfw_flagged is True
    assert merged.is_favorite is None


def test_tags_accumulate_in_order() -> None:
    existing = make_record("a", tags=["llm", "chat"])
    incoming = make_record("a", tags=["chat", "code"])

    assert merge_records(existing, incoming).tags == ["llm", "chat", "code"]


def test_images_prefer_incoming_order() -> None:
    existing = make_record("a", images=["old.png", "shared.png"])
    incoming = make_record("a", images=["new.png", "shared.png"])

    assert merge_records(existing, incoming).images == ["new.png", "shared.png", "old.png"]


def test_pricing_is_deduplicated_after_normalization() -> None:
    existing = [PricingEntry(input=0.5, output=1.5)]
    incoming = [
        PricingEntry(model="Usage", unit="token", input=0.5, output=1.5, currency="usd"),
        PricingEntry(flat=20.0),
    ]

    merged = merge_pricing(existing, incoming)

    assert len(merged) == 2
    assert merged[0].currency == "usd"
    assert merged[1] == PricingEntry(model="Usage", unit="month", flat=20.0, currency="USD")


def test_license_merges_member_by_member() -> None:
    existing = make_record(
        "a",
        license=License(name="Llama 3 Community", type=LicenseType.CUSTOM, url="https://l"),
    )
    incoming = make_record("a", license=License(commercial_use=True))

    merged = merge_records(existing, incoming)

    assert merged.license == License(
        name="Llama 3 Community",
        type=LicenseType.CUSTOM,
        commercial_use=True,
        url="https://l",
    )


def test_hosting_flags_are_ored_and_providers_unioned() -> None:
    existing = make_record("a", hosting=Hosting(weights_available=True, providers=["HF"]))
    incoming = make_record("a", hosting=Hosting(api_available=True, providers=["Together", "HF"]))

    merged = merge_records(existing, incoming)

    assert merged.hosting == Hosting(
        weights_available=True,
        api_available=True,
        on_premise_friendly=False,
        providers=["HF", "Together"],
    )


def test_merge_does_not_mutate_inputs() -> None:
    existing = make_record("a", tags=["llm"], hosting=Hosting(providers=["HF"]))
    incoming = make_record("a", tags=["chat"], hosting=Hosting(providers=["Replicate"]))

    merge_records(existing, incoming)

    assert existing.tags == ["llm"]
    assert existing.hosting.providers == ["HF"]
    assert incoming.tags == ["chat"]


def test_description_is_cleaned_of_markdown() -> None:
    incoming = make_record("a", description="## Overview\n**Fast** model, see [docs](https://d)")

    merged = merge_records(make_record("a"), incoming)

    assert merged.description == "Overview\nFast model, see docs"


def test_future_release_tags_follow_release_date(now: datetime) -> None:
    existing = make_record("a", tags=["llm", "unreleased", "future-release"])

    released = merge_records(existing, make_record("a", release_date="2025-01-15"), now=now)
    upcoming = merge_records(existing, make_record("a", release_date="2025-12-01"), now=now)

    assert released.tags == ["llm"]
    assert upcoming.tags == ["llm", "unreleased", "future-release"]


def test_is_future_release_handles_unparseable_dates(now: datetime) -> None:
    assert is_future_release("2030-01-01T00:00:00Z", now=now)
    assert not is_future_release("2025-06-01", now=now)
    assert not is_future_release("soon", now=now)
    assert not is_future_release(None, now=now)


def test_apply_release_tags_does_not_duplicate(now: datetime) -> None:
    tags = apply_release_tags(["unreleased"], "2026-01-01", now=now)

    assert tags == ["unreleased", "future-release"]


def test_parse_iso_datetime_assumes_utc_for_naive_values() -> None:
    parsed = parse_iso_datetime("2025-03-04T05:06:07")

    assert parsed is not None
    assert parsed.isoformat() == "2025-03-04T05:06:07+00:00"
