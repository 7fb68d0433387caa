"""
Player state and management.
"""

from dataclasses import dataclass
from typing import Optional


class PlayerState:
    """Represents the complete state of a player in the game."""

    def __init__(self, player_id: int, name: str, starting_cash: int):
        self.player_id = player_id
        self.name = name
        self.cash = starting_cash
        self.position = 0
        self.in_jail = False
        self.jail_turns = 0
        self.get_out_of_jail_cards = 0
        self.is_bankrupt = False
        self.properties: set[int] = set()
        self.doubles_rolled = 0

    def add_cash(self, amount: int) -> None:
        self.cash += amount

    def deduct_cash(self, amount: int) -> None:
        """Unchecked debit. Negative cash signals insolvency to the caller."""
        self.cash -= amount

    @property
    def is_insolvent(self) -> bool:
        return self.cash < 0

    def __repr__(self) -> str:
        return (
            f"PlayerState(id={self.player_id}, name='{self.name}', "
            f"cash={self.cash}, position={self.position}, bankrupt={self.is_bankrupt})"
        )


@dataclass
class PropertyOwnership:
    """Tracks the mutable state of an ownable tile."""

    owner_id: Optional[int] = None
    houses: int = 0
    has_hotel: bool = False
    is_mortgaged: bool = False

    def is_owned(self) -> bool:
        """Check if the tile is owned by any player."""
        return self.owner_id is not None

    @property
    def improvement_level(self) -> int:
        """Houses count, or 5 for a hotel."""
        return 5 if self.has_hotel else self.houses

    @property
    def is_improved(self) -> bool:
        return self.has_hotel or self.houses > 0

    def clear_improvements(self) -> None:
        self.houses = 0
        self.has_hotel = False

    def release(self) -> None:
        """Return the tile to the bank."""
        self.owner_id = None
        self.clear_improvements()
        self.is_mortgaged = False


class Player:
    """
    Convenience wrapper for player information.
    This is what setup code hands to create_game.
    """

    def __init__(self, player_id: int, name: str):
        self.player_id = player_id
        self.name = name

    def __repr__(self) -> str:
        return f"Player(id={self.player_id}, name='{self.name}')"
