"""
High-level rules API for controlling game flow.
This module provides the public interface for user decisions and legal move detection.
"""

from enum import Enum
from typing import Any, List, Optional

from bdmonopoly.exceptions import InvalidActionError
from bdmonopoly.game import GameState, TurnPhase


class ActionType(Enum):
    """Types of actions a player can take."""

    ROLL_DICE = "roll_dice"
    BUY_PROPERTY = "buy_property"
    DECLINE_PURCHASE = "decline_purchase"
    BUILD_HOUSE = "build_house"
    SELL_HOUSE = "sell_house"
    MORTGAGE_PROPERTY = "mortgage_property"
    UNMORTGAGE_PROPERTY = "unmortgage_property"
    PAY_JAIL_FINE = "pay_jail_fine"
    ROLL_FOR_DOUBLES = "roll_for_doubles"
    USE_JAIL_CARD = "use_jail_card"
    END_TURN = "end_turn"


POSITION_ACTIONS = (
    ActionType.BUY_PROPERTY,
    ActionType.BUILD_HOUSE,
    ActionType.SELL_HOUSE,
    ActionType.MORTGAGE_PROPERTY,
    ActionType.UNMORTGAGE_PROPERTY,
)


class Action:
    """Represents a game action that can be taken."""

    def __init__(self, action_type: ActionType, **params: Any):
        self.action_type = action_type
        self.params = params

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Action):
            return NotImplemented
        return self.action_type == other.action_type and self.params == other.params

    def __repr__(self) -> str:
        return f"Action({self.action_type.value}, {self.params})"


def get_legal_actions(game_state: GameState, player_id: int) -> List[Action]:
    """
    Get all legal actions available to a player.

    Only the current player has actions. Property management (build, sell,
    mortgage, unmortgage) is offered alongside every turn decision.

    Args:
        game_state: Current game state
        player_id: Player to get actions for

    Returns:
        List of legal Action objects
    """
    if game_state.game_over or not game_state.is_running:
        return []

    current_player = game_state.get_current_player()
    if current_player.player_id != player_id:
        return []

    player = game_state.players[player_id]
    actions: List[Action] = []

    if player.in_jail and game_state.phase == TurnPhase.IN_JAIL:
        actions.append(Action(ActionType.ROLL_FOR_DOUBLES))
        if player.cash >= game_state.config.jail_fine:
            actions.append(Action(ActionType.PAY_JAIL_FINE))
        if player.get_out_of_jail_cards > 0:
            actions.append(Action(ActionType.USE_JAIL_CARD))

    elif game_state.phase == TurnPhase.AWAITING_BUY_DECISION:
        position = game_state.pending_purchase
        if player.cash >= game_state.board.get_tile(position).price:
            actions.append(Action(ActionType.BUY_PROPERTY, position=position))
        actions.append(Action(ActionType.DECLINE_PURCHASE, position=position))

    elif game_state.phase == TurnPhase.AWAITING_ROLL:
        actions.append(Action(ActionType.ROLL_DICE))

    elif game_state.phase == TurnPhase.AWAITING_END_TURN:
        actions.append(Action(ActionType.END_TURN))

    actions.extend(_get_property_management_actions(game_state, player_id))
    return actions


def _get_property_management_actions(game_state: GameState, player_id: int) -> List[Action]:
    """Get actions related to building, selling and mortgaging."""
    actions: List[Action] = []

    for tile in game_state.owned_tiles(player_id):
        position = tile.id
        if game_state.can_build_house(player_id, position):
            actions.append(Action(ActionType.BUILD_HOUSE, position=position))
        if game_state.can_sell_house(player_id, position):
            actions.append(Action(ActionType.SELL_HOUSE, position=position))
        if game_state.can_mortgage(player_id, position):
            actions.append(Action(ActionType.MORTGAGE_PROPERTY, position=position))
        if game_state.can_unmortgage(player_id, position):
            actions.append(Action(ActionType.UNMORTGAGE_PROPERTY, position=position))

    return actions


def apply_action(
    game_state: GameState,
    action: Action,
    player_id: Optional[int] = None,
    strict: bool = False,
) -> bool:
    """
    Apply an action to the game state.

    This is the main interface for executing user decisions.

    Args:
        game_state: Current game state
        action: Action to apply
        player_id: Player executing the action (defaults to current player)
        strict: Raise instead of returning False on a rejected action

    Returns:
        True if action was successful, False otherwise

    Raises:
        InvalidActionError: only when strict is set and the action was rejected
    """
    if player_id is None:
        player_id = game_state.get_current_player().player_id

    success = _dispatch(game_state, action, player_id)

    if not success and strict:
        reason = game_state.last_rejection or "rejected"
        raise InvalidActionError(f"{action!r} rejected for player {player_id}: {reason}")
    return success


def _dispatch(game_state: GameState, action: Action, player_id: int) -> bool:
    action_type = action.action_type
    game_state.last_rejection = None

    if action_type in POSITION_ACTIONS and "position" not in action.params:
        game_state.last_rejection = "missing_position"
        return False
    position = action.params.get("position")

    if not game_state.is_current_player(player_id):
        game_state.last_rejection = "not_your_turn"
        return False

    if action_type == ActionType.ROLL_DICE:
        return game_state.roll_dice() is not None

    elif action_type == ActionType.BUY_PROPERTY:
        return game_state.buy_property(player_id, position)

    elif action_type == ActionType.DECLINE_PURCHASE:
        return game_state.decline_purchase(player_id)

    elif action_type == ActionType.BUILD_HOUSE:
        return game_state.build_house(player_id, position)

    elif action_type == ActionType.SELL_HOUSE:
        return game_state.sell_house(player_id, position)

    elif action_type == ActionType.MORTGAGE_PROPERTY:
        return game_state.mortgage_property(player_id, position)

    elif action_type == ActionType.UNMORTGAGE_PROPERTY:
        return game_state.unmortgage_property(player_id, position)

    elif action_type == ActionType.PAY_JAIL_FINE:
        return game_state.pay_jail_fine(player_id)

    elif action_type == ActionType.ROLL_FOR_DOUBLES:
        return game_state.roll_for_doubles(player_id) is not None

    elif action_type == ActionType.USE_JAIL_CARD:
        return game_state.use_jail_card(player_id)

    elif action_type == ActionType.END_TURN:
        return game_state.end_turn()

    game_state.last_rejection = "unknown_action"
    return False
