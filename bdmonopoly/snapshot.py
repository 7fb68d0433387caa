"""
Snapshot serialization of GameState.

`serialize_snapshot` produces a sanitized, UI-friendly view without deck
order. `serialize_state` / `restore_state` handle the full save blob; a
restore is validated completely before anything is applied and then
reconciled onto the live player and ownership objects by id, so references
held by a renderer stay valid.
"""

from __future__ import annotations

import random
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from bdmonopoly.cards import Deck
from bdmonopoly.config import GameConfig
from bdmonopoly.exceptions import PersistenceError
from bdmonopoly.game import GameState, TurnPhase
from bdmonopoly.money import EventType
from bdmonopoly.player import PlayerState
from bdmonopoly.tiles import PropertyTile

SNAPSHOT_VERSION = 1


def serialize_snapshot(game: GameState, language: str = "en") -> Dict[str, Any]:
    """Serialize a GameState into a public, stable JSON dict.

    The snapshot includes:
    - turn_number, phase and current_player_id
    - players with public info (cash, position, jail, properties with status)
    - the free parking pot and last dice roll
    - deck counts (remaining / discard / held) only
    """
    players: List[Dict[str, Any]] = []
    for pid in game.player_order:
        pstate = game.players[pid]
        props: List[Dict[str, Any]] = []
        for tile in game.owned_tiles(pid):
            ownership = game.property_ownership[tile.id]
            entry: Dict[str, Any] = {
                "position": tile.id,
                "name": tile.display_name(language),
                "houses": ownership.houses,
                "has_hotel": ownership.has_hotel,
                "mortgaged": ownership.is_mortgaged,
            }
            if isinstance(tile, PropertyTile):
                entry["color_group"] = tile.group
            props.append(entry)

        players.append(
            {
                "player_id": pid,
                "name": pstate.name,
                "cash": pstate.cash,
                "net_worth": game.net_worth(pid),
                "position": pstate.position,
                "in_jail": pstate.in_jail,
                "jail_turns": pstate.jail_turns,
                "jail_cards": pstate.get_out_of_jail_cards,
                "is_bankrupt": pstate.is_bankrupt,
                "properties": props,
            }
        )

    def deck_counts(deck: Deck) -> Dict[str, int]:
        return {
            "cards_remaining": len(deck.cards),
            "discard_count": len(deck.discard_pile),
            "held_count": len(deck.held_cards),
        }

    return {
        "turn_number": game.turn_number,
        "phase": game.phase.value,
        "current_player_id": game.get_current_player().player_id,
        "currency_symbol": game.config.currency_symbol,
        "dice": list(game.last_dice_roll),
        "free_parking_pot": game.free_parking_pot,
        "pending_purchase": game.pending_purchase,
        "game_over": game.game_over,
        "winner": game.winner,
        "players": players,
        "decks": {
            "event": deck_counts(game.event_deck),
            "local_news": deck_counts(game.local_news_deck),
        },
    }


# ---------------------------------------------------------------------------
# Full save blob
# ---------------------------------------------------------------------------


class SavedPlayer(BaseModel):
    player_id: int
    name: str
    cash: int
    position: int = Field(ge=0)
    in_jail: bool = False
    jail_turns: int = Field(default=0, ge=0)
    get_out_of_jail_cards: int = Field(default=0, ge=0)
    doubles_rolled: int = Field(default=0, ge=0)
    is_bankrupt: bool = False
    properties: List[int] = Field(default_factory=list)


class SavedOwnership(BaseModel):
    id: int
    owner: Optional[int] = None
    houses: int = Field(default=0, ge=0, le=4)
    has_hotel: bool = False
    is_mortgaged: bool = False


class SavedDeck(BaseModel):
    draw: List[int] = Field(default_factory=list)
    discard: List[int] = Field(default_factory=list)
    held: List[int] = Field(default_factory=list)


class SavedGame(BaseModel):
    version: int = SNAPSHOT_VERSION
    config: Dict[str, Any]
    players: List[SavedPlayer]
    tiles: List[SavedOwnership]
    decks: Dict[str, SavedDeck]
    current_player_index: int = Field(ge=0)
    turn_number: int = Field(default=0, ge=0)
    dice: List[int] = Field(min_length=2, max_length=2)
    last_roll_was_doubles: bool = False
    free_parking_pot: int = Field(default=0, ge=0)
    is_running: bool = True
    game_over: bool = False
    winner: Optional[int] = None
    phase: TurnPhase = TurnPhase.AWAITING_ROLL
    pending_purchase: Optional[int] = None
    rng_state: Optional[List[Any]] = None


def _deck_state(deck: Deck) -> Dict[str, List[int]]:
    return {
        "draw": [deck.index_of(c) for c in deck.cards],
        "discard": [deck.index_of(c) for c in deck.discard_pile],
        "held": [deck.index_of(c) for c in deck.held_cards],
    }


def serialize_state(game: GameState) -> Dict[str, Any]:
    """Serialize the entire game into a JSON-compatible dict."""
    version, internal, gauss = game.rng.getstate()
    config = asdict(game.config)
    config["utility_multipliers"] = list(game.config.utility_multipliers)

    return {
        "version": SNAPSHOT_VERSION,
        "config": config,
        "players": [
            {
                "player_id": p.player_id,
                "name": p.name,
                "cash": p.cash,
                "position": p.position,
                "in_jail": p.in_jail,
                "jail_turns": p.jail_turns,
                "get_out_of_jail_cards": p.get_out_of_jail_cards,
                "doubles_rolled": p.doubles_rolled,
                "is_bankrupt": p.is_bankrupt,
                "properties": sorted(p.properties),
            }
            for p in (game.players[pid] for pid in game.player_order)
        ],
        "tiles": [
            {
                "id": tile_id,
                "owner": o.owner_id,
                "houses": o.houses,
                "has_hotel": o.has_hotel,
                "is_mortgaged": o.is_mortgaged,
            }
            for tile_id, o in sorted(game.property_ownership.items())
        ],
        "decks": {
            game.event_deck.name: _deck_state(game.event_deck),
            game.local_news_deck.name: _deck_state(game.local_news_deck),
        },
        "current_player_index": game.current_player_index,
        "turn_number": game.turn_number,
        "dice": list(game.last_dice_roll),
        "last_roll_was_doubles": game.last_roll_was_doubles,
        "free_parking_pot": game.free_parking_pot,
        "is_running": game.is_running,
        "game_over": game.game_over,
        "winner": game.winner,
        "phase": game.phase.value,
        "pending_purchase": game.pending_purchase,
        "rng_state": [version, list(internal), gauss],
    }


def _check_consistency(game: GameState, saved: SavedGame) -> None:
    """Cross-check a parsed save against the live board and decks."""
    player_ids = [p.player_id for p in saved.players]
    if len(set(player_ids)) != len(player_ids):
        raise PersistenceError(f"Duplicate player ids in save: {player_ids}")
    if not saved.players:
        raise PersistenceError("Save contains no players")
    if saved.current_player_index >= len(saved.players):
        raise PersistenceError(f"Current player index {saved.current_player_index} out of range")

    board_size = len(game.board)
    for p in saved.players:
        if p.position >= board_size:
            raise PersistenceError(f"Player {p.player_id} position {p.position} is off the board")

    for entry in saved.tiles:
        if entry.id not in game.property_ownership:
            raise PersistenceError(f"Save references unknown ownable tile {entry.id}")
        if entry.owner is not None and entry.owner not in player_ids:
            raise PersistenceError(f"Tile {entry.id} owned by unknown player {entry.owner}")
        if entry.has_hotel and entry.houses:
            raise PersistenceError(f"Tile {entry.id} has both houses and a hotel")

    owners = {entry.id: entry.owner for entry in saved.tiles}
    for p in saved.players:
        owned = sorted(tile_id for tile_id, owner in owners.items() if owner == p.player_id)
        if sorted(p.properties) != owned:
            raise PersistenceError(
                f"Player {p.player_id} properties {sorted(p.properties)} do not match tile owners {owned}"
            )

    if saved.phase == TurnPhase.AWAITING_BUY_DECISION:
        pending = saved.pending_purchase
        if pending not in game.property_ownership or owners.get(pending) is not None:
            raise PersistenceError(f"Buy decision pending on invalid tile {pending}")
    elif saved.pending_purchase is not None:
        raise PersistenceError(f"Pending purchase {saved.pending_purchase} outside a buy decision")

    if saved.winner is not None and saved.winner not in player_ids:
        raise PersistenceError(f"Winner {saved.winner} is not a player")

    for deck in (game.event_deck, game.local_news_deck):
        deck_state = saved.decks.get(deck.name)
        if deck_state is None:
            raise PersistenceError(f"Save has no state for deck '{deck.name}'")
        for index in deck_state.draw + deck_state.discard + deck_state.held:
            if not 0 <= index < len(deck.template):
                raise PersistenceError(f"Deck '{deck.name}' card index {index} out of range")

    try:
        GameConfig(**saved.config)
    except TypeError as e:
        raise PersistenceError(f"Invalid config in save: {e}") from e

    if saved.rng_state is not None:
        try:
            version, internal, gauss = saved.rng_state
            random.Random().setstate((version, tuple(internal), gauss))
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Invalid RNG state in save: {e}") from e


def restore_state(game: GameState, data: Dict[str, Any]) -> None:
    """
    Restore a saved blob onto a live game.

    Raises:
        PersistenceError: the blob is malformed or does not fit this board;
            the game is left untouched
    """
    try:
        saved = SavedGame.model_validate(data)
    except PydanticValidationError as e:
        raise PersistenceError(f"Invalid save data: {e}") from e
    if saved.version != SNAPSHOT_VERSION:
        raise PersistenceError(f"Unsupported save version {saved.version}")
    _check_consistency(game, saved)

    config = dict(saved.config)
    config["utility_multipliers"] = tuple(config.get("utility_multipliers", (40, 100)))
    game.config = GameConfig(**config)

    # Players: update live objects in place, create any new ones
    restored: Dict[int, PlayerState] = {}
    for entry in saved.players:
        player = game.players.get(entry.player_id)
        if player is None:
            player = PlayerState(entry.player_id, entry.name, entry.cash)
        player.name = entry.name
        player.cash = entry.cash
        player.position = entry.position
        player.in_jail = entry.in_jail
        player.jail_turns = entry.jail_turns
        player.get_out_of_jail_cards = entry.get_out_of_jail_cards
        player.doubles_rolled = entry.doubles_rolled
        player.is_bankrupt = entry.is_bankrupt
        player.properties = set(entry.properties)
        restored[entry.player_id] = player
    game.players = restored
    game.player_order = [p.player_id for p in saved.players]

    # Ownership: tiles missing from the save return to the bank
    saved_tiles = {entry.id: entry for entry in saved.tiles}
    for tile_id, ownership in game.property_ownership.items():
        entry = saved_tiles.get(tile_id)
        if entry is None:
            ownership.release()
            continue
        ownership.owner_id = entry.owner
        ownership.houses = entry.houses
        ownership.has_hotel = entry.has_hotel
        ownership.is_mortgaged = entry.is_mortgaged

    for deck in (game.event_deck, game.local_news_deck):
        deck_state = saved.decks[deck.name]
        deck.cards = [deck.template[i] for i in deck_state.draw]
        deck.discard_pile = [deck.template[i] for i in deck_state.discard]
        deck.held_cards = [deck.template[i] for i in deck_state.held]

    game.current_player_index = saved.current_player_index
    game.turn_number = saved.turn_number
    game.last_dice_roll = (saved.dice[0], saved.dice[1])
    game.last_roll_was_doubles = saved.last_roll_was_doubles
    game.free_parking_pot = saved.free_parking_pot
    game.is_running = saved.is_running
    game.game_over = saved.game_over
    game.winner = saved.winner
    game.phase = saved.phase
    game.pending_purchase = saved.pending_purchase
    game.last_rejection = None

    if saved.rng_state is not None:
        version, internal, gauss = saved.rng_state
        game.rng.setstate((version, tuple(internal), gauss))

    game.event_log.log(
        EventType.GAME_LOADED,
        details={"turn": game.turn_number, "players": [p.name for p in restored.values()]},
    )
