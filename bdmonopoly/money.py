"""
Game events and the event log.

The engine never talks to a renderer, audio or dialog directly. Every state
change is recorded as a GameEvent and pushed to subscribed listeners.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of game events."""

    GAME_START = "game_start"
    TURN_START = "turn_start"
    DICE_ROLL = "dice_roll"
    EXTRA_TURN = "extra_turn"
    MOVE = "move"
    PASS_GO = "pass_go"
    LAND = "land"

    BUY_OFFER = "buy_offer"
    PURCHASE = "purchase"
    AUCTION_START = "auction_start"
    AUCTION_END = "auction_end"

    RENT_PAYMENT = "rent_payment"
    RENT_WAIVED = "rent_waived"
    TAX_PAYMENT = "tax_payment"
    JACKPOT_DEPOSIT = "jackpot_deposit"
    JACKPOT_PAYOUT = "jackpot_payout"

    CARD_DRAW = "card_draw"
    CARD_EFFECT = "card_effect"
    DECK_EMPTY = "deck_empty"

    BUILD_HOUSE = "build_house"
    BUILD_HOTEL = "build_hotel"
    SELL_BUILDING = "sell_building"

    MORTGAGE = "mortgage"
    UNMORTGAGE = "unmortgage"

    GO_TO_JAIL = "go_to_jail"
    JAIL_ATTEMPT = "jail_attempt"
    JAIL_RELEASE = "jail_release"

    ACTION_REJECTED = "action_rejected"

    TRANSFER = "transfer"
    BANKRUPTCY = "bankruptcy"
    GAME_END = "game_end"

    GAME_SAVED = "game_saved"
    GAME_LOADED = "game_loaded"
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"


# Animation pacing hints in milliseconds. Only a presentation layer reads these.
PACING_HINTS_MS: Dict[EventType, int] = {
    EventType.DICE_ROLL: 1000,
    EventType.MOVE: 500,
    EventType.CARD_DRAW: 1500,
}


@dataclass
class GameEvent:
    """A logged event in the game."""

    event_type: EventType
    player_id: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def delay_ms(self) -> int:
        return PACING_HINTS_MS.get(self.event_type, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "player_id": self.player_id,
            **self.details,
        }

    def __repr__(self) -> str:
        player_str = f"P{self.player_id}" if self.player_id is not None else "System"
        return f"[{player_str}] {self.event_type.value}: {self.details}"


Listener = Callable[[GameEvent], None]


class EventLog:
    """Manages the game event log and its subscribers."""

    def __init__(self):
        self.events: List[GameEvent] = []
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        """Register a callable that receives every new event."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def log(
        self,
        event_type: EventType,
        player_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> GameEvent:
        """Log a game event and notify listeners."""
        event = GameEvent(event_type, player_id, dict(details or {}))
        self.events.append(event)
        logger.debug("%r", event)
        for listener in list(self._listeners):
            listener(event)
        return event

    def get_events(self) -> List[GameEvent]:
        """Get all logged events."""
        return self.events.copy()

    def get_recent_events(self, count: int = 10) -> List[GameEvent]:
        """Get the most recent N events."""
        return self.events[-count:]

    def of_type(self, event_type: EventType) -> List[GameEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def clear(self) -> None:
        """Clear the event log."""
        self.events.clear()
