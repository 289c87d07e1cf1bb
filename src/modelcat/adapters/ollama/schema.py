"""Pydantic models describing the Ollama ``/api/tags`` payload."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OllamaBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OllamaModelDetails(OllamaBaseModel):
    family: str | None = None
    parameter_size: str | None = None
    quantization_level: str | None = None


class OllamaModelPayload(OllamaBaseModel):
    name: str
    modified_at: str | None = None
    size: int | None = None
    digest: str | None = None
    details: OllamaModelDetails | None = None


class OllamaTagsResponse(OllamaBaseModel):
    models: list[OllamaModelPayload] = Field(default_factory=list[OllamaModelPayload])
