"""English normalization of records carrying CJK names or descriptions."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from modelcat.domain.model import Tag, copy_record
from modelcat.domain.text import contains_cjk, safe_json_from_text

from .schema import TRANSLATIONS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from modelcat.config import SyncConfig
    from modelcat.domain.model import ModelRecord
    from modelcat.domain.ports.completion import TextCompletion

    from .events import SyncCallbacks
    from .schema import TranslationItem

log = logging.getLogger(__name__)

TRANSLATION_SYSTEM_PROMPT = """You are a professional translator specializing in AI/ML technical content.
Translate Chinese, Japanese, or Korean text to clear, professional English suitable for technical documentation.
- Preserve technical terms and model names when appropriate
- Keep translations concise but descriptive
- If text is already in English or mixed language, improve clarity without changing meaning
Return ONLY a JSON array of objects with: id, name_en, description_en"""


def needs_translation(record: ModelRecord) -> bool:
    return contains_cjk(record.name) or contains_cjk(record.description)


def apply_translation(record: ModelRecord, item: TranslationItem) -> ModelRecord:
    """Return a translated copy, or ``record`` itself when ``item`` carries no text."""

    if item.name_en is None and item.description_en is None:
        return record
    translated = copy_record(record)
    if item.name_en is not None:
        translated.name = item.name_en
    if item.description_en is not None:
        translated.description = item.description_en
    if Tag.TRANSLATED not in translated.tags:
        translated.tags.append(Tag.TRANSLATED.value)
    return translated


class TranslationService:
    def __init__(
        self,
        completion: TextCompletion | None = None,
        *,
        batch_size: int = 25,
        batch_delay: float = 0.5,
    ) -> None:
        self._completion = completion
        self._batch_size = batch_size
        self._batch_delay = batch_delay

    async def run(
        self,
        records: Sequence[ModelRecord],
        config: SyncConfig,
        callbacks: SyncCallbacks,
    ) -> list[ModelRecord]:
        result = list(records)
        if not config.enable_translation or self._completion is None:
            return result

        pending = [index for index, record in enumerate(result) if needs_translation(record)]
        if not pending:
            callbacks.log("Translation: no CJK text found", logger=log)
            return result
        callbacks.log(f"Translation: {len(pending)} models with CJK text", logger=log)

        translated = 0
        failed = 0
        batches = [
            pending[start : start + self._batch_size]
            for start in range(0, len(pending), self._batch_size)
        ]
        for position, batch in enumerate(batches):
            if position:
                await asyncio.sleep(self._batch_delay)
            items = await self._translate_batch([result[index] for index in batch])
            if items is None:
                failed += 1
                continue
            for index in batch:
                item = items.get(result[index].id)
                if item is None:
                    continue
                updated = apply_translation(result[index], item)
                if updated is not result[index]:
                    log.debug("Translated %r to %r", result[index].name, updated.name)
                    result[index] = updated
                    translated += 1
            callbacks.progress(position + 1, len(batches), source="translation")

        if failed:
            callbacks.log(
                f"Translation: {failed}/{len(batches)} batches failed; original text kept",
                level=logging.WARNING,
                logger=log,
            )
        callbacks.log(f"Translation: translated {translated} models to English", logger=log)
        return result

    async def _translate_batch(
        self, batch: Sequence[ModelRecord]
    ) -> dict[str, TranslationItem] | None:
        assert self._completion is not None
        payload = [
            {
                "id": record.id,
                "name": record.name,
                "description": record.description or "",
                "provider": record.provider or "",
            }
            for record in batch
        ]
        user_prompt = (
            "Translate the following AI model information to English:\n"
            + json.dumps(payload, ensure_ascii=False, indent=2)
        )
        try:
            answer = await self._completion.complete(TRANSLATION_SYSTEM_PROMPT, user_prompt)
        except Exception as exc:  # noqa: BLE001
            log.warning("Translation batch failed: %s", exc)
            return None
        parsed = safe_json_from_text(answer)
        if not isinstance(parsed, list):
            return None
        try:
            items = TRANSLATIONS.validate_python(parsed)
        except ValidationError as exc:
            log.debug("Translation answer did not validate: %s", exc)
            return None
        return {item.id: item for item in items}
