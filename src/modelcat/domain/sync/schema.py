"""Pydantic models describing the JSON the completion capability answers with."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class CompletionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SafetyVerdict(CompletionPayload):
    is_nsfw: bool = Field(default=False, alias="isNSFW")
    reason: str = ""


class TranslationItem(CompletionPayload):
    id: str
    name_en: str | None = None
    description_en: str | None = None

    normalize_text = field_validator("name_en", "description_en", mode="before")(_blank_to_none)


class DiscoveredLicense(CompletionPayload):
    name: str | None = None
    type: str | None = None
    commercial_use: bool | None = None


class DiscoveredHosting(CompletionPayload):
    weights_available: bool = False
    api_available: bool = False
    on_premise_friendly: bool = False


class DiscoveredModel(CompletionPayload):
    id: str | None = None
    name: str
    provider: str | None = None
    domain: str | None = None
    description: str | None = None
    url: str | None = None
    repo: str | None = None
    source: str | None = None
    release_date: str | None = None
    updated_at: str | None = None
    parameters: str | None = None
    context_window: str | None = None
    tags: list[str] = Field(default_factory=list[str])
    license: DiscoveredLicense | None = None
    hosting: DiscoveredHosting | None = None

    normalize_optional = field_validator(
        "id",
        "provider",
        "description",
        "url",
        "repo",
        "source",
        "release_date",
        "updated_at",
        mode="before",
    )(_blank_to_none)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_or_empty(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("parameters", "context_window", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return _blank_to_none(value)


SAFETY_VERDICTS: TypeAdapter[dict[str, SafetyVerdict]] = TypeAdapter(dict[str, SafetyVerdict])
TRANSLATIONS: TypeAdapter[list[TranslationItem]] = TypeAdapter(list[TranslationItem])
