from __future__ import annotations

import pytest

from modelcat.domain.text import (
    clean_description,
    contains_cjk,
    normalize_name_for_match,
    normalize_provider_key,
    safe_json_from_text,
    slugify,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("FLUX.1 [pro]", "flux 1 pro"),
        ("Llama-3.1-8B-Instruct", "llama 3 1 8b instruct"),
        ("  GPT-4o  ", "gpt 4o"),
        (None, ""),
    ],
)
def test_normalize_name_for_match(raw: str | None, expected: str) -> None:
    assert normalize_name_for_match(raw) == expected


def test_normalize_provider_key_drops_punctuation() -> None:
    assert normalize_provider_key("Black Forest Labs") == "blackforestlabs"
    assert normalize_provider_key("black-forest-labs") == "blackforestlabs"
    assert normalize_provider_key(None) == ""


def test_contains_cjk() -> None:
    assert contains_cjk("通义千问")
    assert contains_cjk("ひらがな model")
    assert contains_cjk("한국어")
    assert not contains_cjk("Qwen 2.5")
    assert not contains_cjk(None)


def test_clean_description_strips_markdown() -> None:
    text = "![logo](https://x/logo.png)\n# Model\nUse `pip install x`.\n\n\n\nDone"

    assert clean_description(text) == "Model\nUse pip install x.\n\nDone"


def test_safe_json_from_text_extracts_embedded_payload() -> None:
    assert safe_json_from_text('[{"id": "a"}]') == [{"id": "a"}]
    assert safe_json_from_text('Sure! {"a": {"isNSFW": false}} Hope it helps') == {
        "a": {"isNSFW": False}
    }
    assert safe_json_from_text('Result:\n[{"id": "a"}, {"id": "b"}]') == [{"id": "a"}, {"id": "b"}]
    assert safe_json_from_text('Here:\n[{"id": "a"}]') == [{"id": "a"}]
    assert safe_json_from_text("no json here") is None


def test_slugify() -> None:
    assert slugify("Mistral Large 2") == "mistral-large-2"
