from __future__ import annotations

import logging

import pytest

from modelcat.domain.sync import (
    CancelledEvent,
    LogEvent,
    PartialModelsEvent,
    ProgressEvent,
    SyncCallbacks,
)
from modelcat.domain.sync.events import SyncEvent
from tests.helpers.fakes import make_record


def test_events_reach_generic_and_typed_handlers() -> None:
    seen: list[SyncEvent] = []
    progress: list[ProgressEvent] = []
    logs: list[LogEvent] = []
    partials: list[PartialModelsEvent] = []
    cancelled: list[CancelledEvent] = []
    callbacks = SyncCallbacks(
        on_event=seen.append,
        on_progress=progress.append,
        on_log=logs.append,
        on_partial_models=partials.append,
        on_cancelled=cancelled.append,
    )

    callbacks.progress(1, 2, source="hf")
    callbacks.log("careful", level=logging.WARNING)
    callbacks.partial_models("hf", [make_record("a")])
    callbacks.cancelled("fetch")

    assert len(seen) == 4
    assert progress == [ProgressEvent(current=1, total=2, source="hf")]
    assert logs == [LogEvent(message="careful", level=logging.WARNING)]
    assert partials[0].models == (make_record("a"),)
    assert cancelled == [CancelledEvent(stage="fetch")]


def test_signals_are_independent() -> None:
    callbacks = SyncCallbacks()

    callbacks.skip.set()

    assert callbacks.should_skip()
    assert not callbacks.is_cancelled()
    callbacks.skip.clear()
    assert not callbacks.should_skip()


def test_callbacks_without_handlers_still_log(caplog: pytest.LogCaptureFixture) -> None:
    SyncCallbacks().log("quiet run", level=logging.WARNING)

    assert "quiet run" in caplog.text
