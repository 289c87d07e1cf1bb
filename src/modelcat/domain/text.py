"""Text helpers shared by reconciliation, safety and translation."""

from __future__ import annotations

import json
import re

_BRACKET_QUALIFIER = re.compile(r"\[([^\]]+)\]")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
_CJK = re.compile(r"[\u4e00-\u9fff\u3400-\u4dbf\u3040-\u30ff\uac00-\ud7af]")

_MD_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]+\)")
_MD_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_MD_HEADER = re.compile(r"(^|\n)#+\s+")
_MD_BOLD = re.compile(r"(\*\*|__)(.*?)\1")
_MD_ITALIC = re.compile(r"(\*|_)(.*?)\1")
_MD_CODE_BLOCK = re.compile(r"```[\s\S]*?```")
_MD_INLINE_CODE = re.compile(r"`([^`]+)`")
_RUN_ON_KEY = re.compile(r"([a-zA-Z0-9])\s+([A-Z][a-zA-Z\s]+:)")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def normalize_name_for_match(name: str | None) -> str:
    """Matching key for names: ``"FLUX.1 [pro]"`` becomes ``"flux 1 pro"``."""

    if not name:
        return ""
    text = name.lower()
    text = _BRACKET_QUALIFIER.sub(r" \1 ", text)
    text = _NON_ALNUM_RUN.sub(" ", text)
    return text.strip()


def normalize_provider_key(provider: str | None) -> str:
    if not provider:
        return ""
    return _NON_ALNUM_RUN.sub("", provider.lower())


def contains_cjk(text: str | None) -> bool:
    """True if ``text`` has Chinese, Japanese kana or Korean hangul code points."""

    if not text:
        return False
    return _CJK.search(text) is not None


def clean_description(text: str | None) -> str:
    """Strip markdown noise that scraped model cards tend to carry."""

    if not text:
        return ""
    cleaned = _MD_IMAGE.sub("", text)
    cleaned = _MD_LINK.sub(r"\1", cleaned)
    cleaned = _MD_HEADER.sub(r"\1", cleaned)
    cleaned = _MD_BOLD.sub(r"\2", cleaned)
    cleaned = _MD_ITALIC.sub(r"\2", cleaned)
    cleaned = _MD_CODE_BLOCK.sub("", cleaned)
    cleaned = _MD_INLINE_CODE.sub(r"\1", cleaned)
    cleaned = _RUN_ON_KEY.sub(r"\1\n\2", cleaned)
    cleaned = _EXCESS_NEWLINES.sub("\n\n", cleaned)
    return cleaned.strip()


def safe_json_from_text(text: str) -> object | None:
    """Parse JSON out of free-form model output.

    Tries the whole text first, then the outermost ``{...}`` and ``[...]`` spans,
    the one that opens first before the other. Returns ``None`` if nothing parses.
    """

    spans: list[tuple[int, str]] = []
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = text.find(opener), text.rfind(closer)
        if start != -1 and end > start:
            spans.append((start, text[start : end + 1]))
    candidates = [text, *(span for _start, span in sorted(spans))]
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return None


def slugify(value: str) -> str:
    return normalize_name_for_match(value).replace(" ", "-")
