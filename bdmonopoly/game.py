"""
Main game engine and state management.
"""

import logging
import random
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bdmonopoly.board import Board
from bdmonopoly.cards import (
    AdvanceToNearestStation,
    Card,
    CollectMoney,
    Deck,
    GetOutOfJailFree,
    GoToJail,
    MoveSteps,
    MoveTo,
    PayMoney,
    PropertyRepairs,
)
from bdmonopoly.config import (
    GameConfig,
    load_default_board,
    load_default_event_cards,
    load_default_local_news_cards,
)
from bdmonopoly.exceptions import ValidationError
from bdmonopoly.money import EventLog, EventType
from bdmonopoly.player import Player, PlayerState, PropertyOwnership
from bdmonopoly.tiles import (
    CardTile,
    PropertyTile,
    StationTile,
    TaxTile,
    Tile,
    TileType,
    UtilityTile,
)

logger = logging.getLogger(__name__)

STARTING_DICE = (1, 1)


class TurnPhase(Enum):
    """Where the current turn stands."""

    AWAITING_ROLL = "awaiting_roll"
    ROLLING = "rolling"
    MOVING = "moving"
    RESOLVING_LANDING = "resolving_landing"
    AWAITING_BUY_DECISION = "awaiting_buy_decision"
    AWAITING_END_TURN = "awaiting_end_turn"
    IN_JAIL = "in_jail"
    GAME_OVER = "game_over"


class GameState:
    """
    Represents the complete state of a game.
    This is the main interface for the game engine.

    Every operation runs to completion before returning. Invalid decisions
    return False (or None), leave state unchanged and record the reason in
    `last_rejection` plus an ACTION_REJECTED event.
    """

    def __init__(
        self,
        config: GameConfig,
        players: Sequence[Player],
        board: Board,
        event_cards: Sequence[Card],
        local_news_cards: Sequence[Card],
    ):
        self.config = config
        self.board = board
        self.event_log = EventLog()

        self.rng = random.Random(config.seed)

        self.event_deck = Deck(TileType.EVENT.value, event_cards, self.rng)
        self.local_news_deck = Deck(TileType.LOCAL_NEWS.value, local_news_cards, self.rng)

        # Property ownership tracking, keyed by tile id
        self.property_ownership: Dict[int, PropertyOwnership] = {
            tile.id: PropertyOwnership() for tile in board.ownable_tiles()
        }

        self.players: Dict[int, PlayerState] = {}
        self.player_order: List[int] = []
        self.current_player_index = 0
        self.turn_number = 0
        self.last_dice_roll: Tuple[int, int] = STARTING_DICE
        self.last_roll_was_doubles = False
        self.free_parking_pot = 0
        self.is_running = False
        self.game_over = False
        self.winner: Optional[int] = None
        self.phase = TurnPhase.AWAITING_ROLL
        self.pending_purchase: Optional[int] = None
        self.last_rejection: Optional[str] = None

        self.start_new_game(players)

    def start_new_game(self, players: Sequence[Player]) -> None:
        """Reset ownership, decks and counters and seat the given players."""
        for ownership in self.property_ownership.values():
            ownership.release()

        self.players = {}
        self.player_order = []
        for player in players:
            self.players[player.player_id] = PlayerState(
                player.player_id, player.name, self.config.starting_cash
            )
            self.player_order.append(player.player_id)

        self.event_deck.reset()
        self.local_news_deck.reset()

        self.current_player_index = 0
        self.turn_number = 0
        self.last_dice_roll = STARTING_DICE
        self.last_roll_was_doubles = False
        self.free_parking_pot = 0
        self.is_running = True
        self.game_over = False
        self.winner = None
        self.phase = TurnPhase.AWAITING_ROLL
        self.pending_purchase = None
        self.last_rejection = None

        self.event_log.log(
            EventType.GAME_START,
            details={
                "players": [p.name for p in players],
                "starting_cash": self.config.starting_cash,
                "seed": self.config.seed,
            },
        )

    def reseed(self, seed: Optional[int]) -> None:
        """Re-seed dice and shuffles for deterministic replays."""
        self.rng.seed(seed)

    @property
    def event_cards(self) -> List[Card]:
        """All event cards not held by players."""
        return self.event_deck.cards + self.event_deck.discard_pile

    @property
    def local_news_cards(self) -> List[Card]:
        """All local news cards not held by players."""
        return self.local_news_deck.cards + self.local_news_deck.discard_pile

    def get_current_player(self) -> PlayerState:
        """Get the current active player."""
        return self.players[self.player_order[self.current_player_index]]

    def get_active_players(self) -> List[PlayerState]:
        """Get all non-bankrupt players in turn order."""
        return [self.players[pid] for pid in self.player_order if not self.players[pid].is_bankrupt]

    def is_current_player(self, player_id: int) -> bool:
        return self.get_current_player().player_id == player_id

    def _reject(self, player_id: Optional[int], action: str, reason: str, **details: Any) -> bool:
        self.last_rejection = reason
        self.event_log.log(
            EventType.ACTION_REJECTED,
            player_id=player_id,
            details={"action": action, "reason": reason, **details},
        )
        return False

    # ------------------------------------------------------------------
    # Dice and movement
    # ------------------------------------------------------------------

    def _roll(self, player_id: int) -> Tuple[int, int]:
        die1 = self.rng.randint(1, 6)
        die2 = self.rng.randint(1, 6)
        self.last_dice_roll = (die1, die2)

        self.event_log.log(
            EventType.DICE_ROLL,
            player_id=player_id,
            details={"die1": die1, "die2": die2, "total": die1 + die2, "doubles": die1 == die2},
        )
        return (die1, die2)

    def roll_dice(self) -> Optional[Tuple[int, int]]:
        """
        Roll for the current player, move and resolve the landing.

        Returns the dice pair, or None when rolling is not allowed (game not
        running, player in jail, or not awaiting a roll).
        """
        if not self.is_running:
            return None

        player = self.get_current_player()
        if player.in_jail:
            self.phase = TurnPhase.IN_JAIL
            self._reject(player.player_id, "roll_dice", "in_jail")
            return None

        if self.phase != TurnPhase.AWAITING_ROLL:
            self._reject(player.player_id, "roll_dice", "not_awaiting_roll", phase=self.phase.value)
            return None

        self.phase = TurnPhase.ROLLING
        die1, die2 = self._roll(player.player_id)

        if die1 == die2:
            player.doubles_rolled += 1
            if player.doubles_rolled >= self.config.max_doubles:
                # Three doubles in a row: straight to Thana, no movement
                self.send_to_jail(player.player_id, reason="three_doubles")
                self.phase = TurnPhase.AWAITING_END_TURN
                self.end_turn()
                return (die1, die2)
            self.last_roll_was_doubles = True
        else:
            player.doubles_rolled = 0
            self.last_roll_was_doubles = False

        self.phase = TurnPhase.MOVING
        self.move_player(player.player_id, die1 + die2)
        self._finish_resolution()
        return (die1, die2)

    def _finish_resolution(self) -> None:
        if self.phase in (TurnPhase.MOVING, TurnPhase.RESOLVING_LANDING):
            self.phase = TurnPhase.AWAITING_END_TURN

    def move_player(self, player_id: int, steps: int) -> int:
        """
        Move a player by the given number of steps and resolve the landing.
        GO pays out whenever the new index is lower than the old one.
        Returns the new position.
        """
        player = self.players[player_id]
        old_position = player.position
        new_position = (old_position + steps) % len(self.board)
        player.position = new_position

        if new_position < old_position:
            self._collect_go(player_id)

        self.event_log.log(
            EventType.MOVE,
            player_id=player_id,
            details={"from": old_position, "to": new_position, "spaces": steps},
        )

        self._land(player_id)
        return new_position

    def move_player_to(self, player_id: int, position: int, collect_go: bool = True) -> None:
        """
        Jump a player to a specific tile and resolve the landing.
        A backward jump pays GO, except a jump to the jail tile.
        """
        player = self.players[player_id]
        old_position = player.position
        player.position = position

        if collect_go and position < old_position and position != self.board.jail_position:
            self._collect_go(player_id)

        self.event_log.log(
            EventType.MOVE,
            player_id=player_id,
            details={"from": old_position, "to": position, "direct": True},
        )

        self._land(player_id)

    def _collect_go(self, player_id: int) -> None:
        """Player collects the GO payout."""
        player = self.players[player_id]
        player.add_cash(self.config.go_payout)

        self.event_log.log(
            EventType.PASS_GO,
            player_id=player_id,
            details={"amount": self.config.go_payout, "new_balance": player.cash},
        )

    # ------------------------------------------------------------------
    # Jail
    # ------------------------------------------------------------------

    def send_to_jail(self, player_id: int, reason: str = "tile") -> None:
        """Send a player to Thana."""
        player = self.players[player_id]
        player.position = self.board.jail_position
        player.in_jail = True
        player.jail_turns = 0
        player.doubles_rolled = 0
        if self.is_current_player(player_id):
            self.last_roll_was_doubles = False

        self.event_log.log(EventType.GO_TO_JAIL, player_id=player_id, details={"reason": reason})

    def _release_from_jail(self, player_id: int, method: str, **details: Any) -> None:
        player = self.players[player_id]
        player.in_jail = False
        player.jail_turns = 0

        self.event_log.log(
            EventType.JAIL_RELEASE,
            player_id=player_id,
            details={"method": method, **details},
        )

    def _check_jail_action(self, player_id: int, action: str) -> bool:
        if not self.is_running:
            return self._reject(player_id, action, "game_not_running")
        if not self.is_current_player(player_id):
            return self._reject(player_id, action, "not_your_turn")
        if not self.players[player_id].in_jail:
            return self._reject(player_id, action, "not_in_jail")
        return True

    def pay_jail_fine(self, player_id: int) -> bool:
        """
        Player pays the fine to leave Thana, then rolls normally.
        Returns False if the player cannot afford it.
        """
        if not self._check_jail_action(player_id, "pay_jail_fine"):
            return False

        player = self.players[player_id]
        if player.cash < self.config.jail_fine:
            return self._reject(
                player_id, "pay_jail_fine", "insufficient_cash", required=self.config.jail_fine
            )

        player.deduct_cash(self.config.jail_fine)
        self._release_from_jail(player_id, "fine", amount=self.config.jail_fine)
        self.phase = TurnPhase.AWAITING_ROLL
        return True

    def use_jail_card(self, player_id: int) -> bool:
        """
        Use a Get Out of Jail Free card, then roll normally.
        Returns False if the player holds no card.
        """
        if not self._check_jail_action(player_id, "use_jail_card"):
            return False

        player = self.players[player_id]
        if player.get_out_of_jail_cards == 0:
            return self._reject(player_id, "use_jail_card", "no_jail_card")

        player.get_out_of_jail_cards -= 1
        self._return_jail_card()
        self._release_from_jail(player_id, "card")
        self.phase = TurnPhase.AWAITING_ROLL
        return True

    def _return_jail_card(self) -> None:
        for deck in (self.event_deck, self.local_news_deck):
            if deck.return_held_card():
                return

    def roll_for_doubles(self, player_id: int) -> Optional[Tuple[int, int]]:
        """
        Try to roll out of Thana.

        Doubles release the player, who moves by the roll (no extra roll).
        A miss counts a jail turn and ends the turn; on the third miss the
        fine is taken regardless of cash and the player moves by the roll.
        """
        if not self._check_jail_action(player_id, "roll_for_doubles"):
            return None

        player = self.players[player_id]
        die1, die2 = self._roll(player_id)
        is_doubles = die1 == die2
        self.last_roll_was_doubles = False

        self.event_log.log(
            EventType.JAIL_ATTEMPT,
            player_id=player_id,
            details={"attempt": player.jail_turns + 1, "doubles": is_doubles},
        )

        if is_doubles:
            self._release_from_jail(player_id, "doubles")
            self.phase = TurnPhase.MOVING
            self.move_player(player_id, die1 + die2)
            self._finish_resolution()
            return (die1, die2)

        player.jail_turns += 1
        if player.jail_turns < self.config.max_jail_turns:
            self._advance_turn()
            return (die1, die2)

        # Forced fine after the last allowed attempt
        player.deduct_cash(self.config.jail_fine)
        if player.is_insolvent:
            self.declare_bankruptcy(player_id, None)
            return (die1, die2)

        self._release_from_jail(player_id, "forced_fine", amount=self.config.jail_fine)
        self.phase = TurnPhase.MOVING
        self.move_player(player_id, die1 + die2)
        self._finish_resolution()
        return (die1, die2)

    # ------------------------------------------------------------------
    # Landing resolution
    # ------------------------------------------------------------------

    def _land(self, player_id: int) -> None:
        player = self.players[player_id]
        tile = self.board.get_tile(player.position)

        if self.phase == TurnPhase.MOVING:
            self.phase = TurnPhase.RESOLVING_LANDING

        self.event_log.log(
            EventType.LAND,
            player_id=player_id,
            details={"position": tile.id, "tile": tile.name, "tile_type": tile.tile_type.value},
        )

        if isinstance(tile, (PropertyTile, StationTile, UtilityTile)):
            self._land_on_ownable(player_id, tile)
        elif isinstance(tile, TaxTile):
            self.pay_tax(player_id, tile.amount)
        elif isinstance(tile, CardTile):
            deck = self.event_deck if tile.tile_type == TileType.EVENT else self.local_news_deck
            self.draw_card(player_id, deck)
        elif tile.tile_type == TileType.GOTO_JAIL:
            self.send_to_jail(player_id)
        elif tile.tile_type == TileType.FREE_PARKING:
            self._free_parking(player_id)
        # GO and Thana (just visiting) need nothing further

    def _land_on_ownable(self, player_id: int, tile: Tile) -> None:
        ownership = self.property_ownership[tile.id]

        if not ownership.is_owned():
            self._offer_purchase(player_id, tile)
            return

        if ownership.owner_id == player_id:
            self.event_log.log(
                EventType.RENT_WAIVED,
                player_id=player_id,
                details={"position": tile.id, "reason": "own_property"},
            )
            return

        owner = self.players[ownership.owner_id]
        if owner.is_bankrupt:
            reason = "owner_bankrupt"
        elif ownership.is_mortgaged:
            reason = "mortgaged"
        else:
            rent = self.calculate_rent(tile.id)
            self.pay_rent(player_id, owner.player_id, rent, position=tile.id)
            return

        self.event_log.log(
            EventType.RENT_WAIVED,
            player_id=player_id,
            details={"position": tile.id, "owner": owner.player_id, "reason": reason},
        )

    def _offer_purchase(self, player_id: int, tile: Tile) -> None:
        if not self.is_current_player(player_id):
            return

        player = self.players[player_id]
        self.pending_purchase = tile.id
        self.phase = TurnPhase.AWAITING_BUY_DECISION

        self.event_log.log(
            EventType.BUY_OFFER,
            player_id=player_id,
            details={
                "property": tile.name,
                "position": tile.id,
                "price": tile.price,
                "affordable": player.cash >= tile.price,
            },
        )

    def owns_color_group(self, player_id: int, color_group: str) -> bool:
        """Check if a player owns every property in a colour group."""
        group_positions = self.board.get_color_group(color_group)
        return bool(group_positions) and all(
            self.property_ownership[pos].owner_id == player_id for pos in group_positions
        )

    def _count_owned(self, player_id: int, positions: List[int]) -> int:
        return sum(1 for pos in positions if self.property_ownership[pos].owner_id == player_id)

    def calculate_rent(self, position: int, dice_total: Optional[int] = None) -> int:
        """
        Calculate the rent owed for landing on an ownable tile.

        Args:
            position: Tile id
            dice_total: Dice sum for utilities (default: the last roll)

        Returns:
            Rent amount, 0 for unowned or mortgaged tiles
        """
        ownership = self.property_ownership.get(position)
        if ownership is None or not ownership.is_owned() or ownership.is_mortgaged:
            return 0

        tile = self.board.get_tile(position)
        owner_id = ownership.owner_id

        if isinstance(tile, PropertyTile):
            rent = tile.base_rent_for(ownership.houses, ownership.has_hotel)
            if not ownership.is_improved and self.owns_color_group(owner_id, tile.group):
                rent *= 2
            return rent

        if isinstance(tile, StationTile):
            stations_owned = self._count_owned(owner_id, self.board.get_all_stations())
            return tile.rent_for(stations_owned)

        if isinstance(tile, UtilityTile):
            if dice_total is None:
                dice_total = sum(self.last_dice_roll)
            utilities_owned = self._count_owned(owner_id, self.board.get_all_utilities())
            multipliers = self.config.utility_multipliers
            multiplier = multipliers[min(utilities_owned, len(multipliers)) - 1]
            return dice_total * multiplier

        return 0

    def pay_rent(self, payer_id: int, owner_id: int, amount: int, position: Optional[int] = None) -> bool:
        """
        Move rent from payer to owner.
        Returns False if the payer went bankrupt over it.
        """
        payer = self.players[payer_id]
        owner = self.players[owner_id]

        payer.deduct_cash(amount)
        owner.add_cash(amount)

        self.event_log.log(
            EventType.RENT_PAYMENT,
            player_id=payer_id,
            details={
                "owner": owner_id,
                "position": position,
                "amount": amount,
                "payer_balance": payer.cash,
                "owner_balance": owner.cash,
            },
        )

        if payer.is_insolvent:
            self.declare_bankruptcy(payer_id, owner_id)
            return False
        return True

    def pay_tax(self, player_id: int, amount: int) -> bool:
        """
        Player pays tax to the bank (or the jackpot pot when enabled).
        Returns False if the player went bankrupt over it.
        """
        player = self.players[player_id]
        player.deduct_cash(amount)

        self.event_log.log(
            EventType.TAX_PAYMENT,
            player_id=player_id,
            details={"amount": amount, "new_balance": player.cash},
        )
        self._deposit_to_jackpot(player_id, amount)

        if player.is_insolvent:
            self.declare_bankruptcy(player_id, None)
            return False
        return True

    def _deposit_to_jackpot(self, player_id: int, amount: int) -> None:
        if not self.config.free_parking_jackpot:
            return
        self.free_parking_pot += amount
        self.event_log.log(
            EventType.JACKPOT_DEPOSIT,
            player_id=player_id,
            details={"amount": amount, "pot": self.free_parking_pot},
        )

    def _free_parking(self, player_id: int) -> None:
        if not self.config.free_parking_jackpot or self.free_parking_pot <= 0:
            return

        player = self.players[player_id]
        amount = self.free_parking_pot
        player.add_cash(amount)
        self.free_parking_pot = 0

        self.event_log.log(
            EventType.JACKPOT_PAYOUT,
            player_id=player_id,
            details={"amount": amount, "new_balance": player.cash},
        )

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def draw_card(self, player_id: int, deck: Deck) -> Optional[Card]:
        """Draw from a deck and resolve the card. None when the deck is exhausted."""
        card = deck.draw()
        if card is None:
            self.event_log.log(EventType.DECK_EMPTY, player_id=player_id, details={"deck": deck.name})
            return None

        self.event_log.log(
            EventType.CARD_DRAW,
            player_id=player_id,
            details={
                "deck": deck.name,
                "card": card.text_en,
                "card_bn": card.text_bn,
                "action": card.action.action,
            },
        )

        self.execute_card(player_id, card, deck)
        return card

    def execute_card(self, player_id: int, card: Card, deck: Deck) -> None:
        """Apply a card's action to a player."""
        player = self.players[player_id]
        action = card.action

        # Held cards leave the deck; everything else goes to the discard pile
        # before any follow-up move so chained draws can reshuffle it.
        if isinstance(action, GetOutOfJailFree):
            player.get_out_of_jail_cards += 1
            deck.hold_card(card)
        else:
            deck.discard(card)

        self.event_log.log(
            EventType.CARD_EFFECT,
            player_id=player_id,
            details={"deck": deck.name, "action": action.action},
        )

        if isinstance(action, CollectMoney):
            player.add_cash(action.amount)

        elif isinstance(action, PayMoney):
            player.deduct_cash(action.amount)
            self._deposit_to_jackpot(player_id, action.amount)
            if player.is_insolvent:
                self.declare_bankruptcy(player_id, None)

        elif isinstance(action, MoveTo):
            self.move_player_to(player_id, action.tile_id)

        elif isinstance(action, MoveSteps):
            self.move_player(player_id, action.steps)

        elif isinstance(action, GoToJail):
            self.send_to_jail(player_id, reason="card")

        elif isinstance(action, GetOutOfJailFree):
            pass

        elif isinstance(action, PropertyRepairs):
            cost = self.repair_cost(player_id, action.house_cost, action.hotel_cost)
            player.deduct_cash(cost)
            self.event_log.log(
                EventType.TAX_PAYMENT,
                player_id=player_id,
                details={"amount": cost, "new_balance": player.cash, "reason": "repairs"},
            )
            if player.is_insolvent:
                self.declare_bankruptcy(player_id, None)

        elif isinstance(action, AdvanceToNearestStation):
            target = self.board.find_nearest_station(player.position)
            if target is None:
                logger.warning("No station ahead of position %d", player.position)
                return
            self.move_player(player_id, self.board.forward_distance(player.position, target))

        else:
            logger.warning("Unhandled card action %r", action)

    def repair_cost(self, player_id: int, house_cost: int, hotel_cost: int) -> int:
        """Total repair bill over a player's improved properties."""
        cost = 0
        for position in self.players[player_id].properties:
            if not isinstance(self.board.get_tile(position), PropertyTile):
                continue
            ownership = self.property_ownership[position]
            cost += ownership.houses * house_cost
            if ownership.has_hotel:
                cost += hotel_cost
        return cost

    # ------------------------------------------------------------------
    # Buying
    # ------------------------------------------------------------------

    def buy_property(self, player_id: int, position: int, confirmed: bool = True) -> bool:
        """
        Answer the outstanding buy offer.

        A declined offer, or a confirmed one the player cannot afford,
        goes to auction. Returns True only if the player bought the tile.
        """
        if self.pending_purchase != position or not self.is_current_player(player_id):
            return self._reject(player_id, "buy_property", "no_pending_offer", position=position)

        if not confirmed:
            self.decline_purchase(player_id)
            return False

        player = self.players[player_id]
        tile = self.board.get_tile(position)

        if player.cash < tile.price:
            self._reject(player_id, "buy_property", "insufficient_cash", price=tile.price)
            self._resolve_purchase_offer()
            self._start_auction(position, "unaffordable")
            return False

        player.deduct_cash(tile.price)
        player.properties.add(position)
        ownership = self.property_ownership[position]
        ownership.owner_id = player_id
        ownership.clear_improvements()
        ownership.is_mortgaged = False

        self.event_log.log(
            EventType.PURCHASE,
            player_id=player_id,
            details={
                "property": tile.name,
                "position": position,
                "price": tile.price,
                "new_balance": player.cash,
            },
        )

        self._resolve_purchase_offer()
        return True

    def decline_purchase(self, player_id: int) -> bool:
        """Turn down the outstanding buy offer; the tile goes to auction."""
        if self.pending_purchase is None or not self.is_current_player(player_id):
            return self._reject(player_id, "decline_purchase", "no_pending_offer")

        position = self.pending_purchase
        self._resolve_purchase_offer()
        self._start_auction(position, "declined")
        return True

    def _resolve_purchase_offer(self) -> None:
        self.pending_purchase = None
        if self.phase == TurnPhase.AWAITING_BUY_DECISION:
            self.phase = TurnPhase.AWAITING_END_TURN

    def _start_auction(self, position: int, trigger: str) -> None:
        """
        Auction placeholder: bidding is not implemented, the tile stays
        with the bank.
        """
        tile = self.board.get_tile(position)
        self.event_log.log(
            EventType.AUCTION_START,
            details={"property": tile.name, "position": position, "trigger": trigger},
        )
        self.event_log.log(
            EventType.AUCTION_END,
            details={"position": position, "winner": None, "reason": "not_implemented"},
        )

    # ------------------------------------------------------------------
    # Improvements and mortgages
    # ------------------------------------------------------------------

    def _group_siblings(self, position: int, group: str) -> List[PropertyOwnership]:
        return [
            self.property_ownership[pos]
            for pos in self.board.get_color_group(group)
            if pos != position
        ]

    def _build_rejection(self, player_id: int, position: int) -> Optional[str]:
        tile = self.board.get_property_tile(position)
        if tile is None or position not in self.property_ownership:
            return "not_a_property"

        ownership = self.property_ownership[position]
        if ownership.owner_id != player_id:
            return "not_owner"
        if not self.owns_color_group(player_id, tile.group):
            return "incomplete_group"
        if ownership.is_mortgaged:
            return "mortgaged"
        if ownership.has_hotel:
            return "max_improvements"

        # Even building: a hotel sibling counts as level 5 and never blocks
        level = ownership.improvement_level
        if any(level > sibling.improvement_level for sibling in self._group_siblings(position, tile.group)):
            return "uneven_building"

        if self.players[player_id].cash < self._next_improvement_cost(ownership):
            return "insufficient_cash"
        return None

    def _next_improvement_cost(self, ownership: PropertyOwnership) -> int:
        return self.config.hotel_cost if ownership.houses == 4 else self.config.house_cost

    def can_build_house(self, player_id: int, position: int) -> bool:
        """Check if a player can add a house (or the hotel) on a property."""
        return self._build_rejection(player_id, position) is None

    def build_house(self, player_id: int, position: int) -> bool:
        """
        Build one improvement on a property.

        Houses cost the configured house cost; on a tile with four houses
        the next build is a hotel, which replaces the houses.
        Returns True if successful, False otherwise.
        """
        reason = self._build_rejection(player_id, position)
        if reason is not None:
            return self._reject(player_id, "build_house", reason, position=position)

        tile = self.board.get_tile(position)
        player = self.players[player_id]
        ownership = self.property_ownership[position]
        cost = self._next_improvement_cost(ownership)

        player.deduct_cash(cost)
        if ownership.houses == 4:
            ownership.houses = 0
            ownership.has_hotel = True
            event_type = EventType.BUILD_HOTEL
        else:
            ownership.houses += 1
            event_type = EventType.BUILD_HOUSE

        self.event_log.log(
            event_type,
            player_id=player_id,
            details={
                "property": tile.name,
                "position": position,
                "cost": cost,
                "houses": ownership.houses,
                "has_hotel": ownership.has_hotel,
                "new_balance": player.cash,
            },
        )
        return True

    def _sell_rejection(self, player_id: int, position: int) -> Optional[str]:
        tile = self.board.get_property_tile(position)
        if tile is None or position not in self.property_ownership:
            return "not_a_property"

        ownership = self.property_ownership[position]
        if ownership.owner_id != player_id:
            return "not_owner"
        if not ownership.is_improved:
            return "no_improvements"

        level = ownership.improvement_level
        if any(level < sibling.improvement_level for sibling in self._group_siblings(position, tile.group)):
            return "uneven_selling"
        return None

    def can_sell_house(self, player_id: int, position: int) -> bool:
        return self._sell_rejection(player_id, position) is None

    def sell_house(self, player_id: int, position: int) -> bool:
        """
        Sell one improvement back to the bank for half its cost.
        Selling a hotel puts four houses back on the tile.
        Returns True if successful, False otherwise.
        """
        reason = self._sell_rejection(player_id, position)
        if reason is not None:
            return self._reject(player_id, "sell_house", reason, position=position)

        tile = self.board.get_tile(position)
        player = self.players[player_id]
        ownership = self.property_ownership[position]

        if ownership.has_hotel:
            refund = self.config.hotel_cost // 2
            ownership.has_hotel = False
            ownership.houses = 4
            building = "hotel"
        else:
            refund = self.config.house_cost // 2
            ownership.houses -= 1
            building = "house"

        player.add_cash(refund)

        self.event_log.log(
            EventType.SELL_BUILDING,
            player_id=player_id,
            details={
                "property": tile.name,
                "position": position,
                "building": building,
                "refund": refund,
                "houses": ownership.houses,
                "new_balance": player.cash,
            },
        )
        return True

    def mortgage_value(self, position: int) -> int:
        return int(self.board.get_tile(position).price * self.config.mortgage_rate)

    def unmortgage_cost(self, position: int) -> int:
        """Mortgage value plus interest."""
        tile = self.board.get_tile(position)
        return round(tile.price * self.config.mortgage_rate * (1 + self.config.mortgage_interest_rate))

    def _mortgage_rejection(self, player_id: int, position: int) -> Optional[str]:
        ownership = self.property_ownership.get(position)
        if ownership is None:
            return "not_ownable"
        if ownership.owner_id != player_id:
            return "not_owner"
        if ownership.is_mortgaged:
            return "already_mortgaged"

        tile = self.board.get_tile(position)
        if isinstance(tile, PropertyTile):
            group = [self.property_ownership[pos] for pos in self.board.get_color_group(tile.group)]
            if any(o.is_improved for o in group):
                return "group_has_improvements"
        return None

    def can_mortgage(self, player_id: int, position: int) -> bool:
        return self._mortgage_rejection(player_id, position) is None

    def mortgage_property(self, player_id: int, position: int) -> bool:
        """
        Mortgage a tile for price x mortgage rate.
        Not allowed while any property of its colour group carries buildings.
        """
        reason = self._mortgage_rejection(player_id, position)
        if reason is not None:
            return self._reject(player_id, "mortgage_property", reason, position=position)

        player = self.players[player_id]
        value = self.mortgage_value(position)
        player.add_cash(value)
        self.property_ownership[position].is_mortgaged = True

        self.event_log.log(
            EventType.MORTGAGE,
            player_id=player_id,
            details={
                "property": self.board.get_tile(position).name,
                "position": position,
                "amount": value,
                "new_balance": player.cash,
            },
        )
        return True

    def _unmortgage_rejection(self, player_id: int, position: int) -> Optional[str]:
        ownership = self.property_ownership.get(position)
        if ownership is None:
            return "not_ownable"
        if ownership.owner_id != player_id:
            return "not_owner"
        if not ownership.is_mortgaged:
            return "not_mortgaged"
        if self.players[player_id].cash < self.unmortgage_cost(position):
            return "insufficient_cash"
        return None

    def can_unmortgage(self, player_id: int, position: int) -> bool:
        return self._unmortgage_rejection(player_id, position) is None

    def unmortgage_property(self, player_id: int, position: int) -> bool:
        """Pay off a mortgage with 10% interest."""
        reason = self._unmortgage_rejection(player_id, position)
        if reason is not None:
            return self._reject(player_id, "unmortgage_property", reason, position=position)

        player = self.players[player_id]
        cost = self.unmortgage_cost(position)
        player.deduct_cash(cost)
        self.property_ownership[position].is_mortgaged = False

        self.event_log.log(
            EventType.UNMORTGAGE,
            player_id=player_id,
            details={
                "property": self.board.get_tile(position).name,
                "position": position,
                "cost": cost,
                "new_balance": player.cash,
            },
        )
        return True

    # ------------------------------------------------------------------
    # Bankruptcy and turn order
    # ------------------------------------------------------------------

    def declare_bankruptcy(self, player_id: int, creditor_id: Optional[int] = None) -> None:
        """
        Liquidate and remove a player.

        Buildings are sold to the bank at half cost (hotels are removed, not
        turned back into houses). Tiles go unmortgaged to the creditor, or
        back to the bank when there is none. The final balance, negative
        included, is settled with the creditor or lost to the bank.
        """
        player = self.players[player_id]
        if player.is_bankrupt:
            return

        creditor = self.players.get(creditor_id) if creditor_id is not None else None
        if creditor is not None and creditor.is_bankrupt:
            creditor = None

        was_current = self.is_current_player(player_id)
        player.is_bankrupt = True

        liquidated = 0
        transferred = []
        for position in sorted(player.properties):
            ownership = self.property_ownership[position]
            if ownership.has_hotel:
                liquidated += self.config.hotel_cost // 2
            liquidated += ownership.houses * (self.config.house_cost // 2)
            ownership.clear_improvements()

            if creditor is not None:
                ownership.owner_id = creditor.player_id
                ownership.is_mortgaged = False
                creditor.properties.add(position)
            else:
                ownership.release()
            transferred.append(position)

        player.add_cash(liquidated)
        # Signed: a negative balance claws back the unpaid part of the debt
        remaining_cash = player.cash
        if creditor is not None:
            creditor.add_cash(remaining_cash)
            self.event_log.log(
                EventType.TRANSFER,
                player_id=player_id,
                details={
                    "to": creditor.player_id,
                    "cash": remaining_cash,
                    "properties": transferred,
                },
            )

        for _ in range(player.get_out_of_jail_cards):
            self._return_jail_card()

        player.cash = 0
        player.properties.clear()
        player.get_out_of_jail_cards = 0
        player.in_jail = False
        player.jail_turns = 0
        player.doubles_rolled = 0
        if was_current:
            self.pending_purchase = None
            self.last_roll_was_doubles = False

        self.event_log.log(
            EventType.BANKRUPTCY,
            player_id=player_id,
            details={
                "creditor": creditor.player_id if creditor is not None else None,
                "properties": transferred,
                "liquidated": liquidated,
                "cash_transferred": remaining_cash if creditor is not None else 0,
            },
        )
        logger.info("Player %s went bankrupt (creditor=%s)", player.name, creditor_id)

        if self._check_game_over():
            return
        if was_current:
            self._advance_turn()

    def _check_game_over(self) -> bool:
        active = self.get_active_players()
        if len(active) > 1:
            return False

        self.game_over = True
        self.is_running = False
        self.winner = active[0].player_id if active else None
        self.phase = TurnPhase.GAME_OVER
        self.pending_purchase = None

        self.event_log.log(
            EventType.GAME_END,
            details={"winner": self.winner, "turns": self.turn_number, "standings": self.standings()},
        )
        return True

    def end_turn(self) -> bool:
        """
        Finish the current player's turn.

        After a doubles roll (and outside Thana) the same player rolls
        again instead. Returns False when the turn cannot end yet.
        """
        if not self.is_running:
            return False

        player = self.get_current_player()
        if self.phase == TurnPhase.AWAITING_BUY_DECISION:
            return self._reject(player.player_id, "end_turn", "pending_purchase")
        if self.phase in (TurnPhase.AWAITING_ROLL, TurnPhase.IN_JAIL):
            return self._reject(player.player_id, "end_turn", "must_roll")

        if self.last_roll_was_doubles and not player.in_jail:
            # doubles_rolled keeps counting towards the three-doubles rule
            self.last_roll_was_doubles = False
            self.phase = TurnPhase.AWAITING_ROLL
            self.event_log.log(
                EventType.EXTRA_TURN,
                player_id=player.player_id,
                details={"doubles_rolled": player.doubles_rolled},
            )
            return True

        self._advance_turn()
        return True

    def _advance_turn(self) -> None:
        current = self.get_current_player()
        current.doubles_rolled = 0
        self.last_roll_was_doubles = False
        self.pending_purchase = None

        if self._check_game_over():
            return

        count = len(self.player_order)
        index = self.current_player_index
        for _ in range(count):
            index = (index + 1) % count
            if not self.players[self.player_order[index]].is_bankrupt:
                break

        self.current_player_index = index
        self.turn_number += 1

        next_player = self.get_current_player()
        self.phase = TurnPhase.IN_JAIL if next_player.in_jail else TurnPhase.AWAITING_ROLL

        self.event_log.log(
            EventType.TURN_START,
            player_id=next_player.player_id,
            details={"turn": self.turn_number, "in_jail": next_player.in_jail},
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def owned_tiles(self, player_id: int) -> List[Tile]:
        """Tiles a player owns, in board order."""
        return [self.board.get_tile(pos) for pos in sorted(self.players[player_id].properties)]

    def net_worth(self, player_id: int) -> int:
        """Cash plus purchase price and building cost of every owned tile."""
        player = self.players[player_id]
        worth = player.cash
        for position in player.properties:
            worth += self.board.get_tile(position).price
            ownership = self.property_ownership[position]
            worth += ownership.houses * self.config.house_cost
            if ownership.has_hotel:
                worth += self.config.hotel_cost
        return worth

    def standings(self) -> List[Dict[str, Any]]:
        """Players ranked by net worth, bankrupt players last."""
        rows = [
            {
                "player_id": p.player_id,
                "name": p.name,
                "cash": p.cash,
                "net_worth": self.net_worth(p.player_id),
                "properties": len(p.properties),
                "is_bankrupt": p.is_bankrupt,
            }
            for p in (self.players[pid] for pid in self.player_order)
        ]
        return sorted(rows, key=lambda r: (r["is_bankrupt"], -r["net_worth"]))

    def describe_tile(self, tile_id: int, language: str = "en") -> Dict[str, Any]:
        """Details of a tile for a property card view."""
        tile = self.board.get_tile(tile_id)
        info: Dict[str, Any] = {
            "id": tile.id,
            "name": tile.display_name(language),
            "type": tile.tile_type.value,
        }

        if isinstance(tile, PropertyTile):
            info["group"] = tile.group
            info["rent"] = list(tile.rent)
        elif isinstance(tile, StationTile):
            info["base_rent"] = tile.base_rent
        elif isinstance(tile, TaxTile):
            info["amount"] = tile.amount
        elif isinstance(tile, UtilityTile):
            info["multipliers"] = list(self.config.utility_multipliers)

        ownership = self.property_ownership.get(tile_id)
        if ownership is not None:
            info.update(
                {
                    "price": tile.price,
                    "owner": ownership.owner_id,
                    "houses": ownership.houses,
                    "has_hotel": ownership.has_hotel,
                    "is_mortgaged": ownership.is_mortgaged,
                    "mortgage_value": self.mortgage_value(tile_id),
                    "current_rent": self.calculate_rent(tile_id),
                }
            )
        return info

    # ------------------------------------------------------------------
    # Debug helpers
    # ------------------------------------------------------------------

    def give_cash(self, player_id: int, amount: int) -> None:
        """Adjust a player's cash directly. Going negative bankrupts them."""
        player = self.players[player_id]
        player.add_cash(amount)
        logger.debug("Debug: gave %d to player %d", amount, player_id)
        if player.is_insolvent:
            self.declare_bankruptcy(player_id, None)

    def teleport(self, player_id: int, position: int, resolve: bool = True) -> None:
        """Place a player on a tile without passing GO, optionally resolving the landing."""
        player = self.players[player_id]
        old_position = player.position
        player.position = position % len(self.board)

        self.event_log.log(
            EventType.MOVE,
            player_id=player_id,
            details={"from": old_position, "to": player.position, "teleport": True},
        )

        if resolve:
            self._land(player_id)
            self._finish_resolution()

    def force_bankruptcy(self, player_id: int) -> None:
        """Bankrupt a player with no creditor."""
        self.declare_bankruptcy(player_id, None)


def create_game(
    config: GameConfig,
    players: Sequence[Player],
    board: Optional[Board] = None,
    event_cards: Optional[Sequence[Card]] = None,
    local_news_cards: Optional[Sequence[Card]] = None,
) -> GameState:
    """
    Create a new game.

    Board and decks default to the bundled data files.

    Raises:
        ValidationError: player count outside the allowed range or
            duplicate player ids
        ConfigurationError: bundled data could not be loaded
    """
    if not config.min_players <= len(players) <= config.max_players:
        raise ValidationError(
            f"A game needs {config.min_players}-{config.max_players} players, got {len(players)}"
        )
    ids = [p.player_id for p in players]
    if len(set(ids)) != len(ids):
        raise ValidationError(f"Duplicate player ids: {ids}")

    if board is None:
        board = load_default_board()
    if event_cards is None:
        event_cards = load_default_event_cards()
    if local_news_cards is None:
        local_news_cards = load_default_local_news_cards()

    return GameState(config, players, board, event_cards, local_news_cards)
