"""Text-completion adapter."""

from __future__ import annotations

from .client import ChatCompletionClient

__all__ = ["ChatCompletionClient"]
