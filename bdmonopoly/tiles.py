"""
Board tile definitions and types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class TileType(Enum):
    """Types of tiles on the board."""

    GO = "go"
    PROPERTY = "property"
    STATION = "station"
    UTILITY = "utility"
    TAX = "tax"
    EVENT = "event"
    LOCAL_NEWS = "local_news"
    JAIL_VISITING = "jail_visiting"
    FREE_PARKING = "free_parking"
    GOTO_JAIL = "goto_jail"


OWNABLE_TYPES = (TileType.PROPERTY, TileType.STATION, TileType.UTILITY)
CARD_TYPES = (TileType.EVENT, TileType.LOCAL_NEWS)
HOTEL_RENT_INDEX = 5


@dataclass(frozen=True)
class Tile:
    """Base class for a board tile. Tile data never changes during a game."""

    id: int
    name_en: str
    tile_type: TileType
    name_bn: Optional[str] = None

    @property
    def name(self) -> str:
        return self.name_en

    @property
    def is_ownable(self) -> bool:
        return self.tile_type in OWNABLE_TYPES

    def display_name(self, language: str = "en") -> str:
        """Return the Bengali name when requested and available."""
        if language == "bn" and self.name_bn:
            return self.name_bn
        return self.name_en

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, name='{self.name_en}')"


@dataclass(frozen=True, repr=False)
class GoTile(Tile):
    """The GO tile."""

    payout: int = 0


@dataclass(frozen=True, repr=False)
class PropertyTile(Tile):
    """A colour-group property that can be owned, improved and mortgaged."""

    group: str = ""
    price: int = 0
    rent: Tuple[int, ...] = ()

    def base_rent_for(self, houses: int, has_hotel: bool) -> int:
        """
        Rent table lookup, before any monopoly doubling.

        Args:
            houses: Number of houses (0-4)
            has_hotel: Whether a hotel stands on the tile

        Returns:
            Rent amount
        """
        if has_hotel:
            return self.rent[HOTEL_RENT_INDEX]
        return self.rent[houses]


@dataclass(frozen=True, repr=False)
class StationTile(Tile):
    """A railway station."""

    price: int = 0
    base_rent: int = 0

    def rent_for(self, stations_owned: int) -> int:
        """Rent doubles with every additional station held by the owner."""
        return self.base_rent * (2 ** (stations_owned - 1))


@dataclass(frozen=True, repr=False)
class UtilityTile(Tile):
    """A utility (power or internet provider)."""

    price: int = 0
    subtype: Optional[str] = None


@dataclass(frozen=True, repr=False)
class TaxTile(Tile):
    """A tax tile (NBR income tax or luxury duty)."""

    amount: int = 0
    subtype: Optional[str] = None


@dataclass(frozen=True, repr=False)
class CardTile(Tile):
    """An Event or Local News card tile."""


@dataclass(frozen=True, repr=False)
class CornerTile(Tile):
    """Thana (just visiting), Cha Bazar Break and Go to Thana."""
