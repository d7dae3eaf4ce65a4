"""
Tests for core.events module.
"""

from core.events import EventBus, EventKind, GameEvent


def test_subscribers_receive_events_in_order():
    bus = EventBus()
    seen = []
    bus.subscribe(seen.append)

    bus.emit(GameEvent(EventKind.CELL_TOGGLED, player_id=1, round=1, row=0, col=2))
    bus.emit(GameEvent(EventKind.ANSWER_WRONG, player_id=1, round=1))

    assert [e.kind for e in seen] == [EventKind.CELL_TOGGLED, EventKind.ANSWER_WRONG]
    assert seen[0].row == 0 and seen[0].col == 2


def test_unsubscribe_stops_delivery():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe(seen.append)
    unsubscribe()
    unsubscribe()  # second call is harmless

    bus.emit(GameEvent(EventKind.GAME_STARTED))
    assert seen == []


def test_history_is_bounded():
    bus = EventBus(history_size=3)
    for i in range(5):
        bus.emit(GameEvent(EventKind.CELL_TOGGLED, player_id=1, row=i, col=0))

    assert [e.row for e in bus.history] == [2, 3, 4]
    bus.clear_history()
    assert len(bus.history) == 0


def test_sound_cues():
    assert GameEvent(EventKind.CELL_TOGGLED).sound_cue == "cell_click"
    assert GameEvent(EventKind.MATCH_WON, winner=2).sound_cue == "victory"
    assert GameEvent(EventKind.GAME_OVER).sound_cue == "game_over"
    assert GameEvent(EventKind.ROUND_ADVANCED).sound_cue is None


def test_event_kind_values_match_wire_names():
    assert EventKind.MATCH_WON.value == "matchWon"
    assert EventKind.PLAYER_FINISHED.value == "playerFinished"


def test_failing_subscriber_is_logged_and_skipped(caplog):
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(seen.append)

    with caplog.at_level("ERROR", logger="core.events"):
        bus.emit(GameEvent(EventKind.ANSWER_CORRECT, player_id=1, round=1))

    assert [e.kind for e in seen] == [EventKind.ANSWER_CORRECT]
    assert len(bus.history) == 1
    assert "answerCorrect" in caplog.text
