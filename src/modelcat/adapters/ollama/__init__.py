"""Public interface for the Ollama local runtime adapter."""

from __future__ import annotations

from .client import OllamaRuntime
from .schema import OllamaTagsResponse
from .translator import parse_local_model

__all__ = ["OllamaRuntime", "OllamaTagsResponse", "parse_local_model"]
