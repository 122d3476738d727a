"""Unit tests for the processing state machine."""

from __future__ import annotations

import pytest

from studygraph.models.document import InvalidTransitionError, ProcessingState


def test_happy_path_stamps_timestamps():
    state = ProcessingState()
    state.transition("processing", 10)
    assert state.started_at is not None
    assert state.completed_at is None

    started = state.started_at
    state.transition("processing", 50)
    assert state.started_at == started

    state.transition("completed", 100)
    assert state.status == "completed"
    assert state.progress == 100
    assert state.completed_at is not None
    assert state.is_terminal


def test_progress_never_decreases():
    state = ProcessingState()
    state.transition("processing", 70)
    state.transition("processing", 30)
    assert state.progress == 70


def test_failure_keeps_last_checkpoint():
    state = ProcessingState()
    state.transition("processing", 50)
    state.transition("failed", 100, error="boom")
    assert state.status == "failed"
    assert state.progress == 50
    assert state.error == "boom"
    assert state.completed_at is not None


def test_pending_can_fail_directly():
    state = ProcessingState()
    state.transition("failed")
    assert state.error == "Processing failed"


@pytest.mark.parametrize(
    "path",
    [("completed",), ("processing", "completed", "processing"), ("failed", "processing")],
)
def test_invalid_transitions_raise(path):
    state = ProcessingState()
    with pytest.raises(InvalidTransitionError):
        for status in path:
            state.transition(status)


def test_reset_returns_to_pending():
    state = ProcessingState()
    state.transition("processing", 40)
    state.transition("failed", error="boom")
    state.reset()
    assert (state.status, state.progress, state.error, state.started_at, state.completed_at) == (
        "pending", 0, None, None, None,
    )
