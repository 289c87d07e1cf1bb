"""Run merge batches off the caller's thread, in a worker process when possible.

Both execution strategies call the same :func:`perform_merge_batch`; the worker
process only isolates memory and keeps the event loop responsive.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ProcessPoolExecutor
from concurrent.futures.process import BrokenProcessPool
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from modelcat.domain.model import ModelRecord
from modelcat.domain.reconciliation import perform_merge_batch
from modelcat.errors import ModelcatError

if TYPE_CHECKING:
    from concurrent.futures import Executor
    from types import TracebackType

log = getLogger(__name__)


class MergeTaskError(ModelcatError):
    """Raised when the merge task reports a failure."""


@dataclass(slots=True, kw_only=True)
class MergeRequest:
    current_models: list[ModelRecord] = field(default_factory=list[ModelRecord])
    new_models: list[ModelRecord] = field(default_factory=list[ModelRecord])
    auto_merge_duplicates: bool = False


@dataclass(slots=True, kw_only=True)
class MergeResponse:
    models: list[ModelRecord] = field(default_factory=list[ModelRecord])
    added: int = 0
    updated: int = 0


@dataclass(slots=True, kw_only=True)
class MergeFailure:
    error: str


def run_merge(request: MergeRequest) -> MergeResponse | MergeFailure:
    """Process one request; errors come back as a :class:`MergeFailure` message."""

    try:
        result = perform_merge_batch(
            request.current_models,
            request.new_models,
            auto_merge_duplicates=request.auto_merge_duplicates,
        )
    except Exception as exc:  # noqa: BLE001
        log.exception("Merge batch failed")
        return MergeFailure(error=f"{type(exc).__name__}: {exc}")
    return MergeResponse(models=result.models, added=result.added, updated=result.updated)


class BackgroundMergeTask:
    """Merge executor whose strategy is fixed by :meth:`start`.

    With a worker process, requests and responses are pickled across the
    process boundary. Without one, or after the pool broke, requests run inline.
    """

    def __init__(self, executor: Executor | None = None) -> None:
        self._executor = executor
        self._owns_executor = False

    @classmethod
    def start(cls, *, background: bool = True) -> BackgroundMergeTask:
        if not background:
            return cls()
        try:
            executor = ProcessPoolExecutor(max_workers=1)
        except (OSError, NotImplementedError) as exc:
            log.warning("No worker process available (%s); merging inline", exc)
            return cls()
        task = cls(executor)
        task._owns_executor = True
        return task

    @property
    def in_background(self) -> bool:
        return self._executor is not None

    def __enter__(self) -> BackgroundMergeTask:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=True)
        self._executor = None

    async def merge(self, request: MergeRequest) -> MergeResponse:
        if self._executor is None:
            return _unwrap(run_merge(request))
        loop = asyncio.get_running_loop()
        try:
            outcome = await loop.run_in_executor(self._executor, run_merge, request)
        except BrokenProcessPool:
            self._fall_back_inline()
            outcome = run_merge(request)
        return _unwrap(outcome)

    def merge_blocking(self, request: MergeRequest) -> MergeResponse:
        if self._executor is None:
            return _unwrap(run_merge(request))
        try:
            outcome = self._executor.submit(run_merge, request).result()
        except BrokenProcessPool:
            self._fall_back_inline()
            outcome = run_merge(request)
        return _unwrap(outcome)

    def _fall_back_inline(self) -> None:
        log.warning("Merge worker process died; merging inline from now on")
        executor, self._executor = self._executor, None
        if executor is not None and self._owns_executor:
            executor.shutdown(wait=False)


def _unwrap(outcome: MergeResponse | MergeFailure) -> MergeResponse:
    if isinstance(outcome, MergeFailure):
        raise MergeTaskError(outcome.error)
    return outcome
