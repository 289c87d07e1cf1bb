from __future__ import annotations

import asyncio
from concurrent.futures import Future
from concurrent.futures.process import BrokenProcessPool

import pytest

from modelcat.adapters import merge_worker
from modelcat.adapters.merge_worker import (
    BackgroundMergeTask,
    MergeFailure,
    MergeRequest,
    MergeResponse,
    MergeTaskError,
    run_merge,
)
from tests.helpers.fakes import make_record


def _request() -> MergeRequest:
    return MergeRequest(
        current_models=[make_record("a", name="GPT-4", provider="OpenAI", tags=["llm"])],
        new_models=[
            make_record("b", name="gpt-4", provider="openai", tags=["chat"]),
            make_record("c", name="Claude", provider="Anthropic"),
        ],
        auto_merge_duplicates=True,
    )


def test_run_merge_returns_response() -> None:
    response = run_merge(_request())

    assert isinstance(response, MergeResponse)
    assert (response.added, response.updated) == (1, 1)
    assert [record.id for record in response.models] == ["a", "c"]
    assert response.models[0].tags == ["llm", "chat"]


def test_run_merge_reports_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(*_: object, **__: object) -> None:
        raise ValueError("bad input")

    monkeypatch.setattr(merge_worker, "perform_merge_batch", explode)

    assert run_merge(_request()) == MergeFailure(error="ValueError: bad input")


def test_background_and_inline_paths_agree() -> None:
    with BackgroundMergeTask.start(background=False) as inline:
        expected = inline.merge_blocking(_request())
        assert not inline.in_background

    with BackgroundMergeTask.start() as background:
        blocking = background.merge_blocking(_request())
        awaited = asyncio.run(background.merge(_request()))

    assert blocking == expected
    assert awaited == expected


def test_failure_raises_merge_task_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(*_: object, **__: object) -> None:
        raise ValueError("bad input")

    monkeypatch.setattr(merge_worker, "perform_merge_batch", explode)
    task = BackgroundMergeTask.start(background=False)

    with pytest.raises(MergeTaskError, match="bad input"):
        task.merge_blocking(_request())
    with pytest.raises(MergeTaskError):
        asyncio.run(task.merge(_request()))


class _BrokenExecutor:
    def __init__(self) -> None:
        self.shut_down = False

    def submit(self, *_: object, **__: object) -> Future[object]:
        future: Future[object] = Future()
        future.set_exception(BrokenProcessPool("worker died"))
        return future

    def shutdown(self, wait: bool = True) -> None:  # noqa: FBT001, FBT002, ARG002
        self.shut_down = True


def test_broken_worker_falls_back_inline() -> None:
    executor = _BrokenExecutor()
    task = BackgroundMergeTask(executor)  # type: ignore[arg-type]

    response = task.merge_blocking(_request())

    assert (response.added, response.updated) == (1, 1)
    assert not task.in_background
