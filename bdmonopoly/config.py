"""
Game configuration settings and board/card data loading.

Board and deck files are JSON documents (`board.json`, `event_cards.json`,
`local_news_cards.json`) with camelCase keys for rule fields. They are
validated with pydantic before any engine object is built, so a broken
file is reported as a ConfigurationError and no game is initialized.
"""

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from bdmonopoly.board import Board
from bdmonopoly.cards import Card, action_from_dict
from bdmonopoly.exceptions import ConfigurationError
from bdmonopoly.tiles import (
    CardTile,
    CornerTile,
    GoTile,
    PropertyTile,
    StationTile,
    TaxTile,
    Tile,
    TileType,
    UtilityTile,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
BOARD_FILE = "board.json"
EVENT_CARDS_FILE = "event_cards.json"
LOCAL_NEWS_CARDS_FILE = "local_news_cards.json"

RENT_TABLE_SIZE = 6


@dataclass
class GameConfig:
    """Rule parameters for a game."""

    currency_symbol: str = "৳"
    starting_cash: int = 15000
    go_payout: int = 2000
    house_cost: int = 1000
    hotel_cost: int = 5000
    mortgage_rate: float = 0.5
    mortgage_interest_rate: float = 0.10
    jail_fine: int = 500

    max_jail_turns: int = 3
    max_doubles: int = 3

    free_parking_jackpot: bool = False

    # Dice-sum multipliers for one and for two utilities held by the owner
    utility_multipliers: Tuple[int, int] = (40, 100)

    min_players: int = 2
    max_players: int = 6

    seed: Optional[int] = None


class TileSpec(BaseModel):
    """One entry of the board file's tile list."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(ge=0)
    type: TileType
    name_en: str
    name_bn: Optional[str] = None
    group: Optional[str] = None
    price: Optional[int] = Field(default=None, gt=0)
    rent: Optional[List[int]] = None
    base_rent: Optional[int] = Field(default=None, alias="baseRent", ge=0)
    subtype: Optional[str] = None
    payout: Optional[int] = Field(default=None, ge=0)
    amount: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_economics(self) -> "TileSpec":
        """Ownable and tax tiles must carry the fields their rules read."""
        if self.type == TileType.PROPERTY:
            if not self.group:
                raise ValueError(f"property tile {self.id} has no group")
            if self.price is None:
                raise ValueError(f"property tile {self.id} has no price")
            if self.rent is None or len(self.rent) != RENT_TABLE_SIZE:
                raise ValueError(
                    f"property tile {self.id} needs a rent table of {RENT_TABLE_SIZE} entries"
                )
        elif self.type == TileType.STATION:
            if self.price is None or self.base_rent is None:
                raise ValueError(f"station tile {self.id} needs price and baseRent")
        elif self.type == TileType.UTILITY:
            if self.price is None:
                raise ValueError(f"utility tile {self.id} has no price")
        elif self.type == TileType.TAX:
            if self.amount is None:
                raise ValueError(f"tax tile {self.id} has no amount")
        return self

    def to_tile(self) -> Tile:
        common = {"id": self.id, "name_en": self.name_en, "tile_type": self.type, "name_bn": self.name_bn}
        if self.type == TileType.GO:
            return GoTile(**common, payout=self.payout or 0)
        if self.type == TileType.PROPERTY:
            return PropertyTile(**common, group=self.group, price=self.price, rent=tuple(self.rent))
        if self.type == TileType.STATION:
            return StationTile(**common, price=self.price, base_rent=self.base_rent)
        if self.type == TileType.UTILITY:
            return UtilityTile(**common, price=self.price, subtype=self.subtype)
        if self.type == TileType.TAX:
            return TaxTile(**common, amount=self.amount, subtype=self.subtype)
        if self.type in (TileType.EVENT, TileType.LOCAL_NEWS):
            return CardTile(**common)
        return CornerTile(**common)


class BoardFile(BaseModel):
    """The board file: global rule parameters plus the tile ring."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    currency_symbol: str = Field(default="৳", alias="currencySymbol")
    go_money: int = Field(default=2000, alias="goMoney", ge=0)
    house_cost: int = Field(default=1000, alias="houseCost", gt=0)
    hotel_cost: int = Field(default=5000, alias="hotelCost", gt=0)
    mortgage_rate: float = Field(default=0.5, alias="mortgageRate", gt=0, le=1)
    jail_fine: int = Field(default=500, alias="jailFine", ge=0)
    free_parking_jackpot: bool = Field(default=False, alias="freeParkingJackpot")
    starting_cash: int = Field(default=15000, alias="startingCash", ge=0)
    tiles: List[TileSpec]

    @field_validator("tiles")
    @classmethod
    def check_ring(cls, tiles: List[TileSpec]) -> List[TileSpec]:
        """Tile ids must match their index; GO first; exactly one jail."""
        if not tiles:
            raise ValueError("board has no tiles")
        for index, tile in enumerate(tiles):
            if tile.id != index:
                raise ValueError(f"tile at index {index} has id {tile.id}")
        if tiles[0].type != TileType.GO:
            raise ValueError("the first tile must be GO")
        jails = [t for t in tiles if t.type == TileType.JAIL_VISITING]
        if len(jails) != 1:
            raise ValueError("board needs exactly one jail_visiting tile")
        return tiles

    def to_board(self) -> Board:
        return Board([spec.to_tile() for spec in self.tiles])

    def apply_rules(self, config: Optional[GameConfig] = None) -> GameConfig:
        """Return a GameConfig carrying this file's rule parameters."""
        return replace(
            config or GameConfig(),
            currency_symbol=self.currency_symbol,
            go_payout=self.go_money,
            house_cost=self.house_cost,
            hotel_cost=self.hotel_cost,
            mortgage_rate=self.mortgage_rate,
            jail_fine=self.jail_fine,
            free_parking_jackpot=self.free_parking_jackpot,
            starting_cash=self.starting_cash,
        )


ActionName = Literal[
    "collect_money",
    "pay_money",
    "move_to",
    "move_steps",
    "go_to_jail",
    "get_out_of_jail_free",
    "property_repairs",
    "advance_to_nearest_station",
]

_REQUIRED_CARD_FIELDS = {
    "collect_money": ("amount",),
    "pay_money": ("amount",),
    "move_to": ("tile_id",),
    "move_steps": ("steps",),
    "property_repairs": ("house_cost", "hotel_cost"),
}


class CardSpec(BaseModel):
    """One card of a deck file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text_en: str
    text_bn: Optional[str] = None
    action: ActionName
    amount: Optional[int] = Field(default=None, ge=0)
    tile_id: Optional[int] = Field(default=None, alias="tileId", ge=0)
    steps: Optional[int] = None
    house_cost: Optional[int] = Field(default=None, alias="houseCost", ge=0)
    hotel_cost: Optional[int] = Field(default=None, alias="hotelCost", ge=0)

    @model_validator(mode="after")
    def check_action_fields(self) -> "CardSpec":
        for name in _REQUIRED_CARD_FIELDS.get(self.action, ()):
            if getattr(self, name) is None:
                raise ValueError(f"card '{self.text_en}' ({self.action}) is missing {name}")
        return self

    def to_card(self) -> Card:
        action = action_from_dict(self.model_dump(by_alias=True))
        return Card(self.text_en, action, self.text_bn)


class DeckFile(BaseModel):
    cards: List[CardSpec]

    def to_cards(self) -> List[Card]:
        return [spec.to_card() for spec in self.cards]


@dataclass
class GameData:
    """Everything needed to start a game, loaded from the data directory."""

    config: GameConfig
    board: Board
    event_cards: List[Card]
    local_news_cards: List[Card]


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Could not read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e


def _validate(model: type, payload: Any, path: Union[str, Path]):
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid data in {path}: {e}") from e


def load_board_file(path: Optional[Union[str, Path]] = None) -> BoardFile:
    """Load and validate a board file (default: the bundled board)."""
    path = Path(path) if path is not None else DATA_DIR / BOARD_FILE
    return _validate(BoardFile, _read_json(path), path)


def load_cards(path: Union[str, Path]) -> List[Card]:
    """Load and validate a deck file."""
    path = Path(path)
    deck_file = _validate(DeckFile, _read_json(path), path)
    return deck_file.to_cards()


def load_default_board() -> Board:
    return load_board_file().to_board()


def load_default_event_cards() -> List[Card]:
    return load_cards(DATA_DIR / EVENT_CARDS_FILE)


def load_default_local_news_cards() -> List[Card]:
    return load_cards(DATA_DIR / LOCAL_NEWS_CARDS_FILE)


def load_game_data(
    data_dir: Optional[Union[str, Path]] = None,
    config: Optional[GameConfig] = None,
) -> GameData:
    """
    Load the board and both decks from a data directory.

    Args:
        data_dir: Directory holding board.json, event_cards.json and
            local_news_cards.json (default: bundled data)
        config: Base configuration; the board file's rule parameters
            override the matching fields

    Raises:
        ConfigurationError: if any file is missing or invalid
    """
    data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
    board_file = load_board_file(data_dir / BOARD_FILE)
    board = board_file.to_board()
    event_cards = load_cards(data_dir / EVENT_CARDS_FILE)
    local_news_cards = load_cards(data_dir / LOCAL_NEWS_CARDS_FILE)

    for card in event_cards + local_news_cards:
        tile_id = getattr(card.action, "tile_id", None)
        if tile_id is not None and tile_id >= len(board):
            raise ConfigurationError(f"Card '{card.text_en}' targets unknown tile {tile_id}")

    logger.info(
        "Loaded board with %d tiles, %d event cards, %d local news cards from %s",
        len(board),
        len(event_cards),
        len(local_news_cards),
        data_dir,
    )
    return GameData(board_file.apply_rules(config), board, event_cards, local_news_cards)
