"""
Tests for the event log and its subscribers.
"""

from bdmonopoly.money import EventLog, EventType, GameEvent


def test_log_flattens_details():
    log = EventLog()

    event = log.log(EventType.PURCHASE, player_id=0, details={"position": 9, "price": 1200})

    assert event.details == {"position": 9, "price": 1200}
    assert event.to_dict() == {"event_type": "purchase", "player_id": 0, "position": 9, "price": 1200}


def test_log_without_details():
    log = EventLog()

    event = log.log(EventType.TURN_START, player_id=1)

    assert event.details == {}
    assert event.to_dict() == {"event_type": "turn_start", "player_id": 1}


def test_log_copies_details():
    log = EventLog()
    details = {"amount": 2000}

    event = log.log(EventType.TAX_PAYMENT, player_id=1, details=details)
    details["amount"] = 0

    assert event.details == {"amount": 2000}


def test_subscribers_receive_events():
    log = EventLog()
    received = []
    log.subscribe(received.append)

    log.log(EventType.TURN_START, player_id=1)
    log.unsubscribe(received.append)
    log.log(EventType.TURN_START, player_id=0)

    assert len(received) == 1
    assert received[0].player_id == 1


def test_queries():
    log = EventLog()
    for i in range(5):
        log.log(EventType.DICE_ROLL, player_id=i % 2)
    log.log(EventType.GAME_END)

    assert len(log.of_type(EventType.DICE_ROLL)) == 5
    assert log.get_recent_events(2)[-1].event_type == EventType.GAME_END
    assert len(log.get_events()) == 6

    log.clear()
    assert log.get_events() == []


def test_pacing_hints():
    assert GameEvent(EventType.DICE_ROLL).delay_ms == 1000
    assert GameEvent(EventType.CARD_DRAW).delay_ms == 1500
    assert GameEvent(EventType.PURCHASE).delay_ms == 0


def test_engine_events_in_order(basic_game):
    basic_game.teleport(0, 30)

    types = [e.event_type for e in basic_game.event_log.events]
    assert types == [EventType.GAME_START, EventType.MOVE, EventType.LAND, EventType.GO_TO_JAIL]
