from __future__ import annotations

from datetime import datetime

import pytest

from modelcat.domain.model import ModelRecord, PricingEntry
from modelcat.domain.reconciliation import dedupe_key, deduplicate_records, perform_merge_batch
from tests.helpers.fakes import make_record


def test_merge_batch_updates_matched_record() -> None:
    current = [make_record("hf-1", name="Llama", provider="Meta")]
    incoming = [make_record("hf-1", name="Llama v2", parameters="7B")]

    result = perform_merge_batch(current, incoming, auto_merge_duplicates=False)

    assert (result.added, result.updated) == (0, 1)
    assert len(result.models) == 1
    assert result.models[0].name == "Llama"
    assert result.models[0].parameters == "7B"


@pytest.mark.parametrize(
    ("auto_merge", "expected_count", "expected_added", "expected_updated"),
    [(True, 1, 0, 1), (False, 2, 1, 0)],
)
def test_fuzzy_matching_follows_auto_merge_flag(
    auto_merge: bool,  # noqa: FBT001
    expected_count: int,
    expected_added: int,
    expected_updated: int,
) -> None:
    current = [make_record("a", name="GPT-4", provider="OpenAI")]
    incoming = [make_record("b", name="gpt-4", provider="openai")]

    result = perform_merge_batch(current, incoming, auto_merge_duplicates=auto_merge)

    assert len(result.models) == expected_count
    assert result.added == expected_added
    assert result.updated == expected_updated


def test_merge_batch_is_idempotent(now: datetime) -> None:
    current = [make_record("a", name="Alpha", tags=["llm"], is_favorite=True)]
    incoming = [
        make_record("a", description="**Updated** card", tags=["chat"]),
        make_record("b", name="Beta", pricing=[PricingEntry(input=1.0)], release_date="2026-01-01"),
    ]

    once = perform_merge_batch(current, incoming, auto_merge_duplicates=True, now=now)
    twice = perform_merge_batch(once.models, incoming, auto_merge_duplicates=True, now=now)

    assert twice.models == once.models
    assert twice.added == 0


def test_merge_batch_leaves_inputs_untouched() -> None:
    current = [make_record("a", tags=["llm"])]
    incoming = [make_record("a", tags=["chat"]), make_record("b")]

    result = perform_merge_batch(current, incoming, auto_merge_duplicates=False)

    assert current == [make_record("a", tags=["llm"])]
    assert incoming[0].tags == ["chat"]
    assert result.models is not current
    assert [record.id for record in result.models] == ["a", "b"]


def test_new_records_are_admitted_with_release_tags(now: datetime) -> None:
    incoming = [make_record("upcoming", release_date="2025-09-01")]

    result = perform_merge_batch([], incoming, auto_merge_duplicates=False, now=now)

    assert result.models[0].tags == ["unreleased", "future-release"]
    assert incoming[0].tags == []


def test_incoming_duplicates_within_one_batch_collapse_by_id() -> None:
    incoming = [make_record("x", downloads=1), make_record("x", downloads=5)]

    result = perform_merge_batch([], incoming, auto_merge_duplicates=False)

    assert (result.added, result.updated) == (1, 1)
    assert result.models[0].downloads == 5


def test_deduplicate_folds_later_occurrences_into_first() -> None:
    records = [
        make_record("hf-flux", name="FLUX.1 [dev]", provider="Black Forest Labs", tags=["hf"]),
        make_record("rep-flux", name="flux 1 dev", provider="black-forest-labs", tags=["api"]),
        make_record("other", name="SDXL", provider="Stability"),
    ]

    survivors = deduplicate_records(records)

    assert [record.id for record in survivors] == ["hf-flux", "other"]
    assert survivors[0].tags == ["hf", "api"]


def test_dedupe_key_falls_back_to_id_without_name() -> None:
    record = ModelRecord(id="Some-Model", name="", provider="ACME Corp.")

    assert dedupe_key(record) == "acmecorp::some model"


def test_cjk_only_names_from_one_provider_stay_distinct() -> None:
    current = [make_record("hf-a", name="通义千问", provider="Alibaba")]
    incoming = [make_record("hf-b", name="文心一言", provider="Alibaba")]

    result = perform_merge_batch(current, incoming, auto_merge_duplicates=True)

    assert [record.id for record in result.models] == ["hf-a", "hf-b"]
    assert result.added == 1
    assert dedupe_key(current[0]) != dedupe_key(incoming[0])
