"""Port for a black-box text-completion capability."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from modelcat.errors import ModelcatError


class CompletionError(ModelcatError):
    """Raised when the completion capability fails or answers unusably."""


@runtime_checkable
class TextCompletion(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


__all__ = ["CompletionError", "TextCompletion"]
