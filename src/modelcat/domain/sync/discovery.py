"""Supplementary records proposed by the completion capability or a local runtime."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from modelcat.config import LLM_DISCOVERY_SOURCE, LOCAL_DISCOVERY_SOURCE
from modelcat.domain.importing import coerce_domain, map_license_type
from modelcat.domain.model import Hosting, License, ModelRecord
from modelcat.domain.ports.local_runtime import LocalRuntimeError
from modelcat.domain.text import clean_description, safe_json_from_text, slugify

from .schema import DiscoveredModel

if TYPE_CHECKING:
    from modelcat.config import SyncConfig
    from modelcat.domain.ports.completion import TextCompletion
    from modelcat.domain.ports.local_runtime import LocalRuntime

    from .events import SyncCallbacks

log = logging.getLogger(__name__)

DISCOVERY_ID_PREFIX = "llm-discovery-"
DISCOVERY_SOURCE_NAME = "LLM Discovery"

DISCOVERY_SYSTEM_PROMPT = """You are an AI research assistant. Find newly released or \
significantly updated AI models and summarize key metadata.

Domain catalog: LLM, VLM, Vision, ImageGen, VideoGen, Audio, ASR, TTS, 3D, World/Sim,
LoRA, FineTune, BackgroundRemoval, Upscaler, Other.

Prioritize license terms, parameters (e.g., 7B), context window (e.g., 128K),
release/update dates, and availability (weights/API).

Return ONLY a JSON array of model objects with fields: id(optional), name, provider, domain,
source, url, repo(optional), description(optional), license{name,type,commercial_use},
updated_at(optional), release_date(optional), tags(optional), parameters(optional),
context_window(optional), hosting{weights_available,api_available,on_premise_friendly}."""

DISCOVERY_USER_PROMPT = """Find newly released or significantly updated AI models from the \
past 30 days. Focus on models that might not be captured by standard API sources.

Look for:
- New model releases from major AI companies
- Open source models on GitHub, GitLab, or other platforms
- Research paper implementations that have become available
- Models from new or smaller providers/researchers

Return a JSON array of discovered models. Each model should include complete metadata."""


def to_record(discovered: DiscoveredModel) -> ModelRecord:
    slug = slugify(discovered.name) or "unnamed"
    record_id = discovered.id if discovered.id else f"{DISCOVERY_ID_PREFIX}{slug}"
    license_ = None
    if discovered.license is not None:
        license_ = License(
            name=discovered.license.name,
            type=map_license_type(discovered.license.type or discovered.license.name),
            commercial_use=discovered.license.commercial_use,
        )
    hosting = Hosting()
    if discovered.hosting is not None:
        hosting = Hosting(
            weights_available=discovered.hosting.weights_available,
            api_available=discovered.hosting.api_available,
            on_premise_friendly=discovered.hosting.on_premise_friendly,
        )
    return ModelRecord(
        id=record_id,
        name=discovered.name,
        description=clean_description(discovered.description) or None,
        provider=discovered.provider,
        domain=coerce_domain(discovered.domain),
        source=discovered.source or DISCOVERY_SOURCE_NAME,
        url=discovered.url,
        repo=discovered.repo,
        license=license_,
        hosting=hosting,
        release_date=discovered.release_date,
        updated_at=discovered.updated_at,
        tags=list(discovered.tags),
        parameters=discovered.parameters,
        context_window=discovered.context_window,
    )


def parse_discovery_answer(answer: str) -> list[ModelRecord]:
    """Turn the capability's answer into records, skipping entries that do not validate."""

    parsed = safe_json_from_text(answer)
    if isinstance(parsed, dict):
        parsed = parsed.get("models")
    if not isinstance(parsed, list):
        return []
    records: list[ModelRecord] = []
    for entry in parsed:
        try:
            discovered = DiscoveredModel.model_validate(entry)
        except ValidationError as exc:
            log.debug("Skipping discovered entry: %s", exc)
            continue
        records.append(to_record(discovered))
    return records


class DiscoveryService:
    def __init__(
        self,
        completion: TextCompletion | None = None,
        local_runtime: LocalRuntime | None = None,
    ) -> None:
        self._completion = completion
        self._local_runtime = local_runtime

    async def run(self, config: SyncConfig, callbacks: SyncCallbacks) -> list[ModelRecord]:
        records: list[ModelRecord] = []
        if config.source_enabled(LLM_DISCOVERY_SOURCE):
            records.extend(await self._discover_via_completion(callbacks))
        if config.source_enabled(LOCAL_DISCOVERY_SOURCE):
            records.extend(await self._discover_local(callbacks))
        return records

    async def _discover_via_completion(self, callbacks: SyncCallbacks) -> list[ModelRecord]:
        if self._completion is None:
            callbacks.log("API discovery: no completion capability configured", logger=log)
            return []
        callbacks.log("API discovery: searching for new models", logger=log)
        try:
            answer = await self._completion.complete(DISCOVERY_SYSTEM_PROMPT, DISCOVERY_USER_PROMPT)
        except Exception as exc:  # noqa: BLE001
            callbacks.log(f"API discovery failed: {exc}", level=logging.WARNING, logger=log)
            return []
        records = parse_discovery_answer(answer)
        callbacks.log(f"API discovery: found {len(records)} models", logger=log)
        return records

    async def _discover_local(self, callbacks: SyncCallbacks) -> list[ModelRecord]:
        if self._local_runtime is None:
            callbacks.log("Local discovery: no local runtime configured", logger=log)
            return []
        callbacks.log("Local discovery: checking local runtime", logger=log)
        try:
            records = await self._local_runtime.list_models()
        except LocalRuntimeError as exc:
            callbacks.log(f"Local discovery failed: {exc}", level=logging.WARNING, logger=log)
            return []
        callbacks.log(f"Local discovery: found {len(records)} local models", logger=log)
        return records
