"""Port for a locally running model runtime (e.g. Ollama)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from modelcat.errors import ModelcatError

if TYPE_CHECKING:
    from modelcat.domain.model import ModelRecord


class LocalRuntimeError(ModelcatError):
    """Raised when the local runtime cannot be reached or answers unusably."""


@runtime_checkable
class LocalRuntime(Protocol):
    async def list_models(self) -> list[ModelRecord]: ...


__all__ = ["LocalRuntime", "LocalRuntimeError"]
