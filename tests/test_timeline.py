"""Tests for the timeline aggregator — live entries, archive gate, phases."""

from __future__ import annotations

import pytest

from research_console.timeline import (
    InvalidTransitionError,
    TimelineAggregator,
    TimelineEntry,
    TurnPhase,
)


def _entry(n: int) -> TimelineEntry:
    return TimelineEntry(title=f"Step {n}", data=f"data {n}")


def _finalized(*entries: TimelineEntry) -> TimelineAggregator:
    agg = TimelineAggregator()
    agg.begin_turn()
    for entry in entries:
        agg.append(entry)
    agg.mark_finalize_pending()
    return agg


def test_initial_state_is_idle():
    agg = TimelineAggregator()
    assert agg.phase == TurnPhase.IDLE
    assert agg.live == []
    assert agg.history == {}
    assert agg.stream_idle is True


def test_append_preserves_arrival_order():
    agg = TimelineAggregator()
    agg.begin_turn()
    for i in range(3):
        agg.append(_entry(i))
    assert [e.title for e in agg.live] == ["Step 0", "Step 1", "Step 2"]


def test_reset_clears_live_only():
    agg = _finalized(_entry(1))
    agg.set_stream_idle(True)
    agg.archive("m1")
    agg.reset()
    assert agg.live == []
    assert agg.lookup("m1") == [_entry(1)]


def test_begin_turn_resets_live_timeline():
    agg = TimelineAggregator()
    agg.begin_turn()
    agg.append(_entry(1))
    agg.begin_turn()
    assert agg.live == []
    assert agg.phase == TurnPhase.STREAMING
    assert agg.stream_idle is False


def test_full_turn_cycle():
    agg = _finalized(_entry(1), _entry(2))
    assert agg.phase == TurnPhase.FINALIZE_PENDING
    agg.set_stream_idle(True)
    assert agg.archive("m1") is True
    assert agg.phase == TurnPhase.ARCHIVED
    assert agg.finalize_pending is False
    assert agg.lookup("m1") == [_entry(1), _entry(2)]

    agg.begin_turn()
    assert agg.phase == TurnPhase.STREAMING
    assert agg.lookup("m1") == [_entry(1), _entry(2)]


def test_archive_is_a_snapshot():
    agg = _finalized(_entry(1))
    agg.set_stream_idle(True)
    agg.archive("m1")
    agg.append(_entry(2))
    assert agg.lookup("m1") == [_entry(1)]


def test_archive_deferred_without_terminal_signal():
    agg = TimelineAggregator()
    agg.begin_turn()
    agg.append(_entry(1))
    agg.set_stream_idle(True)
    assert agg.archive("m1") is False
    assert agg.history == {}


def test_archive_deferred_while_streaming():
    agg = _finalized(_entry(1))
    assert agg.archive("m1") is False
    assert agg.phase == TurnPhase.FINALIZE_PENDING


@pytest.mark.parametrize("message_id", [None, ""])
def test_archive_deferred_without_message_id(message_id: str | None) -> None:
    agg = _finalized(_entry(1))
    agg.set_stream_idle(True)
    assert agg.archive(message_id) is False


def test_unmet_archive_twice_changes_nothing():
    agg = _finalized(_entry(1))
    before = (agg.phase, agg.live, agg.history)
    agg.archive("m1")
    agg.archive("m1")
    assert (agg.phase, agg.live, agg.history) == before


def test_second_archive_in_same_turn_is_noop():
    agg = _finalized(_entry(1))
    agg.set_stream_idle(True)
    assert agg.archive("m1") is True
    assert agg.archive("m2") is False
    assert list(agg.history) == ["m1"]


def test_archive_overwrites_same_id_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    agg = _finalized(_entry(1))
    agg.set_stream_idle(True)
    agg.archive("m1")

    agg.begin_turn()
    agg.append(_entry(2))
    agg.mark_finalize_pending()
    agg.set_stream_idle(True)
    with caplog.at_level("WARNING"):
        assert agg.archive("m1") is True
    assert agg.lookup("m1") == [_entry(2)]
    assert "Overwriting" in caplog.text


def test_lookup_unknown_id_returns_empty():
    assert TimelineAggregator().lookup("missing") == []


def test_repeated_terminal_signal_is_tolerated():
    agg = _finalized(_entry(1))
    assert agg.mark_finalize_pending() is True
    assert agg.phase == TurnPhase.FINALIZE_PENDING


def test_terminal_signal_outside_turn_is_ignored():
    agg = TimelineAggregator()
    assert agg.mark_finalize_pending() is False
    assert agg.phase == TurnPhase.IDLE


def test_abandoned_turn_is_dropped_on_next_turn(caplog: pytest.LogCaptureFixture) -> None:
    agg = _finalized(_entry(1))
    with caplog.at_level("WARNING"):
        agg.begin_turn()
    assert agg.live == []
    assert agg.history == {}
    assert "never archived" in caplog.text


def test_invalid_transition_raises():
    agg = TimelineAggregator()
    assert agg.can_transition(TurnPhase.ARCHIVED) is False
    with pytest.raises(InvalidTransitionError, match="Invalid transition"):
        agg._transition(TurnPhase.ARCHIVED)


def test_clear_resets_everything():
    agg = _finalized(_entry(1))
    agg.set_stream_idle(True)
    agg.archive("m1")
    agg.begin_turn()
    agg.append(_entry(2))
    agg.clear()
    assert agg.phase == TurnPhase.IDLE
    assert agg.live == []
    assert agg.history == {}


def test_history_view_is_a_copy():
    agg = _finalized(_entry(1))
    agg.set_stream_idle(True)
    agg.archive("m1")
    view = agg.history
    view["m1"].append(_entry(9))
    view["m2"] = []
    assert agg.lookup("m1") == [_entry(1)]
    assert "m2" not in agg.history
