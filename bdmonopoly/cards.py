"""
Event and Local News card system.

Each card carries exactly one action variant. The engine resolves them by
exhaustive isinstance dispatch in GameState.execute_card.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union
import random


@dataclass(frozen=True)
class CollectMoney:
    amount: int
    action: str = field(default="collect_money", init=False)


@dataclass(frozen=True)
class PayMoney:
    amount: int
    action: str = field(default="pay_money", init=False)


@dataclass(frozen=True)
class MoveTo:
    tile_id: int
    action: str = field(default="move_to", init=False)


@dataclass(frozen=True)
class MoveSteps:
    steps: int
    action: str = field(default="move_steps", init=False)


@dataclass(frozen=True)
class GoToJail:
    action: str = field(default="go_to_jail", init=False)


@dataclass(frozen=True)
class GetOutOfJailFree:
    action: str = field(default="get_out_of_jail_free", init=False)


@dataclass(frozen=True)
class PropertyRepairs:
    house_cost: int
    hotel_cost: int
    action: str = field(default="property_repairs", init=False)


@dataclass(frozen=True)
class AdvanceToNearestStation:
    action: str = field(default="advance_to_nearest_station", init=False)


CardAction = Union[
    CollectMoney,
    PayMoney,
    MoveTo,
    MoveSteps,
    GoToJail,
    GetOutOfJailFree,
    PropertyRepairs,
    AdvanceToNearestStation,
]


@dataclass(frozen=True)
class Card:
    """Represents an Event or Local News card."""

    text_en: str
    action: CardAction
    text_bn: Optional[str] = None

    @property
    def text(self) -> str:
        return self.text_en

    def display_text(self, language: str = "en") -> str:
        if language == "bn" and self.text_bn:
            return self.text_bn
        return self.text_en

    def __repr__(self) -> str:
        return f"Card('{self.text_en}')"


class Deck:
    """
    A deck of cards with a fixed template, a draw pile and a discard pile.

    Drawing from an empty draw pile shuffles the discard pile back in. Cards
    held by players (Get Out of Jail Free) are in neither pile until returned.
    """

    def __init__(self, name: str, cards: Sequence[Card], rng: random.Random):
        self.name = name
        self.template: tuple = tuple(cards)
        self.rng = rng
        self.cards: List[Card] = list(self.template)
        self.discard_pile: List[Card] = []
        self.held_cards: List[Card] = []
        self.shuffle()

    def shuffle(self) -> None:
        """Shuffle the draw pile (Fisher-Yates)."""
        self.rng.shuffle(self.cards)

    def reset(self) -> None:
        """Rebuild the draw pile from the template and shuffle it."""
        self.cards = list(self.template)
        self.discard_pile.clear()
        self.held_cards.clear()
        self.shuffle()

    def draw(self) -> Optional[Card]:
        """
        Draw the top card.

        If the draw pile is empty, shuffle the discard pile back in.
        Returns None when no card is left anywhere.
        """
        if not self.cards:
            if not self.discard_pile:
                return None
            self.cards = self.discard_pile.copy()
            self.discard_pile.clear()
            self.shuffle()

        return self.cards.pop(0)

    def discard(self, card: Card) -> None:
        """Put a resolved card on the discard pile."""
        self.discard_pile.append(card)

    def hold_card(self, card: Card) -> None:
        """Mark a card as being held by a player (Get Out of Jail Free)."""
        self.held_cards.append(card)

    def return_held_card(self) -> bool:
        """Return one held card to the discard pile. False if none is held."""
        if not self.held_cards:
            return False
        self.discard(self.held_cards.pop(0))
        return True

    def index_of(self, card: Card) -> int:
        """Position of a card in the template, used for saving deck order."""
        for i, candidate in enumerate(self.template):
            if candidate is card:
                return i
        return self.template.index(card)

    def __len__(self) -> int:
        return len(self.cards)


def action_from_dict(data: dict) -> CardAction:
    """
    Build an action variant from the card file format.

    Raises:
        ValueError: unknown action name
    """
    name = data.get("action")
    if name == "collect_money":
        return CollectMoney(int(data["amount"]))
    if name == "pay_money":
        return PayMoney(int(data["amount"]))
    if name == "move_to":
        return MoveTo(int(data["tileId"]))
    if name == "move_steps":
        return MoveSteps(int(data["steps"]))
    if name == "go_to_jail":
        return GoToJail()
    if name == "get_out_of_jail_free":
        return GetOutOfJailFree()
    if name == "property_repairs":
        return PropertyRepairs(int(data["houseCost"]), int(data["hotelCost"]))
    if name == "advance_to_nearest_station":
        return AdvanceToNearestStation()
    raise ValueError(f"Unknown card action: {name}")
