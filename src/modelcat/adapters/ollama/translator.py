"""Translate Ollama tag payloads into catalog records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modelcat.domain.model import Domain, Hosting, License, LicenseType, ModelRecord, Tag

if TYPE_CHECKING:
    from .schema import OllamaModelPayload

OLLAMA_ID_PREFIX = "local-ollama-"
OLLAMA_PROVIDER = "Local (Ollama)"
OLLAMA_HOSTING_PROVIDER = "Ollama (Local)"


def parse_local_model(payload: OllamaModelPayload) -> ModelRecord:
    parameters = payload.details.parameter_size if payload.details else None
    return ModelRecord(
        id=f"{OLLAMA_ID_PREFIX}{payload.name.replace(':', '-')}",
        name=payload.name,
        provider=OLLAMA_PROVIDER,
        domain=Domain.LLM,
        source="Local",
        updated_at=payload.modified_at,
        release_date=payload.modified_at,
        tags=[Tag.LOCAL.value, "ollama"],
        parameters=parameters or None,
        context_window="Varies",
        license=License(
            name="Local",
            type=LicenseType.CUSTOM,
            commercial_use=True,
            attribution_required=False,
            share_alike=False,
            copyleft=False,
            notes="Model installed locally",
        ),
        hosting=Hosting(
            weights_available=True,
            api_available=True,
            on_premise_friendly=True,
            providers=[OLLAMA_HOSTING_PROVIDER],
        ),
    )
