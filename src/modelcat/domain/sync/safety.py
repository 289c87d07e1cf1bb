"""Two-stage explicit-content screening of candidate records.

Stage 1 is a deterministic keyword and pattern check that always runs. Stage 2
asks the completion capability to classify whatever stage 1 let through; it only
runs in blocking mode, after the caller confirmed the estimated cost.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import ValidationError

from modelcat.domain.model import ModelRecord, Tag, copy_record
from modelcat.domain.text import safe_json_from_text

from .results import SyncResult
from .schema import SAFETY_VERDICTS

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from modelcat.config import SyncConfig
    from modelcat.domain.ports.completion import TextCompletion

    from .events import SyncCallbacks
    from .schema import SafetyVerdict

log = logging.getLogger(__name__)

EXPLICIT_TERMS = (
    "porn",
    "hentai",
    "xxx",
    "rule34",
    "yiff",
    "fetish",
    "bdsm",
    "kink",
    "nsfw",
    "18+",
)

TRUSTED_PROVIDERS = (
    "google",
    "google-bert",
    "google-t5",
    "facebook",
    "facebookai",
    "meta-llama",
    "microsoft",
    "openai",
    "anthropic",
    "huggingface",
    "sentence-transformers",
    "distilbert",
    "bert-base",
    "transformers",
    "pytorch",
    "tensorflow",
)

SAFE_NAME_PATTERNS = (
    re.compile(r"^(bert|distilbert|roberta|albert|electra)-", re.IGNORECASE),
    re.compile(r"^(gpt|llama|t5|gemma)-", re.IGNORECASE),
    re.compile(r"^sentence-transformers/", re.IGNORECASE),
    re.compile(r"^google-(bert|t5)/", re.IGNORECASE),
    re.compile(r"^facebook(ai)?/(roberta|bart|contriever)", re.IGNORECASE),
    re.compile(r"^meta-llama/", re.IGNORECASE),
    re.compile(r"/(bert|roberta|t5)-", re.IGNORECASE),
    re.compile(r"(detection|classification)$", re.IGNORECASE),
    re.compile(r"embedding", re.IGNORECASE),
)

SAFETY_TOOL_WORDS = ("detection", "classifier", "filter")

HIGH_RISK_SOURCES = ("civitai", "civitaiarchive", "civitasbay")

# Tags containing these are topic labels, never explicit markers.
_BENIGN_TAG_PARTS = (
    "text2text",
    "textgeneration",
    "textclassification",
    "language",
    "multilingual",
    "code",
)
_NON_ALNUM = re.compile(r"[^a-z0-9]")

SAFETY_SYSTEM_PROMPT = """You are a Content Safety Validator.
Analyze the provided AI model metadata for Not-Safe-For-Work (NSFW) content.
NSFW includes: Nudity, Pornography, Sexual Acts, Fetishes, and sexually explicit LoRA/Checkpoints.
Be strict. If a model seems designed for generating nude or pornographic content, flag it.
Return valid JSON ONLY: a map where keys are model IDs and values are objects:
{ "isNSFW": boolean, "reason": "string" }.
Example: { "model-1": { "isNSFW": true, "reason": "Explicit tag detected" },
"model-2": { "isNSFW": false, "reason": "Safe" } }"""


@dataclass(frozen=True, slots=True)
class SafetyPolicy:
    explicit_terms: tuple[str, ...] = EXPLICIT_TERMS
    trusted_providers: tuple[str, ...] = TRUSTED_PROVIDERS
    safe_name_patterns: tuple[re.Pattern[str], ...] = SAFE_NAME_PATTERNS
    high_risk_sources: tuple[str, ...] = HIGH_RISK_SOURCES
    scan_descriptions: bool = True


@dataclass(frozen=True, slots=True)
class NsfwCheck:
    is_nsfw: bool
    reasons: tuple[str, ...] = ()
    flagged_terms: tuple[str, ...] = ()


@dataclass(slots=True, kw_only=True)
class ScreeningResult:
    safe_models: list[ModelRecord] = field(default_factory=list[ModelRecord])
    flagged_models: list[ModelRecord] = field(default_factory=list[ModelRecord])


def detect_nsfw(
    record: ModelRecord,
    policy: SafetyPolicy | None = None,
    custom_keywords: Iterable[str] = (),
) -> NsfwCheck:
    policy = policy or SafetyPolicy()
    name = record.name or ""
    lowered_name = name.lower()
    provider = (record.provider or "").lower()

    if any(trusted in provider for trusted in policy.trusted_providers):
        return NsfwCheck(is_nsfw=False, reasons=("Trusted provider",))
    if any(pattern.search(name) for pattern in policy.safe_name_patterns):
        return NsfwCheck(is_nsfw=False, reasons=("Known safe model pattern",))
    if "nsfw" in lowered_name and any(word in lowered_name for word in SAFETY_TOOL_WORDS):
        return NsfwCheck(is_nsfw=False, reasons=("Content safety model",))

    terms = _unique([*policy.explicit_terms, *(k.strip().lower() for k in custom_keywords)])
    reasons: list[str] = []
    flagged: list[str] = []

    name_hits = [term for term in terms if term in lowered_name]
    if name_hits:
        reasons.append("Flagged terms in model name")
        flagged.extend(name_hits)

    if policy.scan_descriptions and record.description:
        description = record.description.lower()
        description_hits = [term for term in terms if _contains_word(description, term)]
        if description_hits:
            reasons.append("Flagged terms in description")
            flagged.extend(description_hits)

    tag_hits = _explicit_tags(record.tags, terms)
    if tag_hits:
        reasons.append("Explicit tags")
        flagged.extend(tag_hits)

    source = (record.source or "").lower()
    if any(risk in provider or risk in source for risk in policy.high_risk_sources):
        reasons.append("High-risk content source")

    return NsfwCheck(
        is_nsfw=bool(reasons),
        reasons=tuple(reasons),
        flagged_terms=tuple(_unique(flagged)),
    )


def screen_records(
    records: Iterable[ModelRecord],
    policy: SafetyPolicy | None = None,
    custom_keywords: Iterable[str] = (),
) -> ScreeningResult:
    keywords = tuple(custom_keywords)
    result = ScreeningResult()
    for record in records:
        if detect_nsfw(record, policy, keywords).is_nsfw:
            result.flagged_models.append(record)
        else:
            result.safe_models.append(record)
    return result


def mark_nsfw(record: ModelRecord) -> ModelRecord:
    tagged = record.with_tags(Tag.NSFW.value)
    tagged.is_nsfw_flagged = True
    return tagged


class SafetyService:
    def __init__(
        self,
        completion: TextCompletion | None = None,
        *,
        policy: SafetyPolicy | None = None,
        batch_size: int = 10,
        seconds_per_batch: float = 2.0,
        batch_delay: float = 0.5,
    ) -> None:
        self._completion = completion
        self._policy = policy or SafetyPolicy()
        self._batch_size = batch_size
        self._seconds_per_batch = seconds_per_batch
        self._batch_delay = batch_delay

    async def run(
        self,
        records: Sequence[ModelRecord],
        config: SyncConfig,
        callbacks: SyncCallbacks,
    ) -> SyncResult:
        blocking = config.enable_nsfw_filtering
        mode = "blocking" if blocking else "tagging"
        callbacks.log(f"Safety filter: running in {mode} mode on {len(records)} models", logger=log)

        screening = screen_records(records, self._policy, config.custom_nsfw_keywords)
        if screening.flagged_models and config.log_nsfw_attempts:
            self._log_flagged(screening.flagged_models, callbacks)

        if not blocking:
            flagged_ids = {id(record) for record in screening.flagged_models}
            complete = [
                mark_nsfw(record) if id(record) in flagged_ids else record for record in records
            ]
            if flagged_ids:
                callbacks.log(
                    f"Safety filter: tagged {len(flagged_ids)} models as NSFW (not blocking)",
                    logger=log,
                )
            return SyncResult(complete=complete, flagged=[])

        result = SyncResult(
            complete=list(screening.safe_models),
            flagged=list(screening.flagged_models),
        )
        if screening.flagged_models:
            callbacks.log(
                f"Safety filter: blocked {len(screening.flagged_models)} NSFW models", logger=log
            )
        if self._completion is not None and result.complete:
            result = await self._classify(result, callbacks)
        callbacks.log("Safety analysis complete", logger=log)
        return result

    def estimate_seconds(self, count: int) -> float:
        return math.ceil(count / self._batch_size) * self._seconds_per_batch

    async def _classify(self, screened: SyncResult, callbacks: SyncCallbacks) -> SyncResult:
        candidates = screened.complete
        if callbacks.confirm_llm_check is None:
            callbacks.log("Skipping model-based safety check: no confirmation hook", logger=log)
            return screened
        estimate = self.estimate_seconds(len(candidates))
        if not callbacks.confirm_llm_check(len(candidates), estimate):
            callbacks.log("Model-based safety check skipped by user", logger=log)
            return screened

        callbacks.log(f"Running model-based safety check on {len(candidates)} models", logger=log)
        safe: list[ModelRecord] = []
        flagged = list(screened.flagged)
        batches = _chunks(candidates, self._batch_size)
        failures = 0
        for position, batch in enumerate(batches):
            if callbacks.should_skip():
                remaining = [record for rest in batches[position:] for record in rest]
                callbacks.log(
                    f"Skip requested: accepting remaining {len(remaining)} models as safe",
                    logger=log,
                )
                safe.extend(remaining)
                break
            if position:
                await asyncio.sleep(self._batch_delay)

            verdicts = await self._classify_batch(batch)
            if verdicts is None:
                failures += 1
                safe.extend(batch)
                continue
            for record in batch:
                verdict = verdicts.get(record.id)
                if verdict is not None and verdict.is_nsfw:
                    log.warning("Model-based check flagged %s: %s", record.name, verdict.reason)
                    blocked = copy_record(record)
                    blocked.is_nsfw_flagged = True
                    flagged.append(blocked)
                else:
                    safe.append(record)

        if failures:
            callbacks.log(
                f"{failures}/{len(batches)} safety batches failed; their models were kept as safe",
                level=logging.WARNING,
                logger=log,
            )
        caught = len(flagged) - len(screened.flagged)
        if caught:
            callbacks.log(f"Model-based check flagged {caught} additional models", logger=log)
        return SyncResult(complete=safe, flagged=flagged)

    async def _classify_batch(
        self, batch: Sequence[ModelRecord]
    ) -> dict[str, SafetyVerdict] | None:
        assert self._completion is not None
        payload = [
            {
                "id": record.id,
                "name": record.name,
                "description": (record.description or "")[:300],
                "tags": list(record.tags),
            }
            for record in batch
        ]
        try:
            answer = await self._completion.complete(SAFETY_SYSTEM_PROMPT, json.dumps(payload))
        except Exception as exc:  # noqa: BLE001
            log.warning("Safety batch failed: %s", exc)
            return None
        parsed = safe_json_from_text(answer)
        if not isinstance(parsed, dict):
            return None
        try:
            return SAFETY_VERDICTS.validate_python(parsed)
        except ValidationError as exc:
            log.debug("Safety batch answer did not validate: %s", exc)
            return None

    @staticmethod
    def _log_flagged(flagged: Sequence[ModelRecord], callbacks: SyncCallbacks) -> None:
        count = len(flagged)
        if count <= 10:
            names = ", ".join((record.name or "Unknown")[:40] for record in flagged)
            summary = f"Safety filter: detected {count} NSFW models: {names}"
        else:
            names = ", ".join((record.name or "Unknown")[:30] for record in flagged[:5])
            summary = f"Safety filter: detected {count} NSFW models: {names} and {count - 5} more"
        callbacks.log(summary, level=logging.WARNING, logger=log)


def _contains_word(text: str, term: str) -> bool:
    pattern = rf"(?<![a-z0-9]){re.escape(term)}(?![a-z0-9])"
    return re.search(pattern, text) is not None


def _explicit_tags(tags: Iterable[str], terms: Iterable[str]) -> list[str]:
    normalized_terms = {_NON_ALNUM.sub("", term) for term in terms}
    normalized_terms.discard("")
    hits: list[str] = []
    for tag in tags:
        normalized = _NON_ALNUM.sub("", tag.lower())
        if any(part in normalized for part in _BENIGN_TAG_PARTS):
            continue
        if normalized in normalized_terms:
            hits.append(tag)
    return hits


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(value for value in values if value))


def _chunks(records: Sequence[ModelRecord], size: int) -> list[list[ModelRecord]]:
    return [list(records[start : start + size]) for start in range(0, len(records), size)]
