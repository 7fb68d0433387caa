"""Decision collaborators that answer the engine's questions."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, TYPE_CHECKING

from bdmonopoly.rules import Action, ActionType

if TYPE_CHECKING:
    from bdmonopoly.game import GameState


JAIL_ACTIONS = (ActionType.USE_JAIL_CARD, ActionType.PAY_JAIL_FINE, ActionType.ROLL_FOR_DOUBLES)
MANAGEMENT_ACTIONS = (
    ActionType.BUILD_HOUSE,
    ActionType.SELL_HOUSE,
    ActionType.MORTGAGE_PROPERTY,
    ActionType.UNMORTGAGE_PROPERTY,
)


class Prompter(ABC):
    """
    Abstract base class for whoever makes a player's decisions.

    Subclasses answer the specific questions (buy?, how to leave Thana?,
    which property to manage?); `choose_action` maps those answers onto the
    legal action list.
    """

    @abstractmethod
    def ask_player_count(self, minimum: int, maximum: int) -> int:
        pass

    @abstractmethod
    def ask_player_name(self, index: int, default: str) -> str:
        pass

    @abstractmethod
    def confirm_purchase(self, game: "GameState", player_id: int, position: int) -> bool:
        """Return True to buy the offered tile, False to send it to auction."""

    @abstractmethod
    def choose_jail_action(self, game: "GameState", player_id: int, options: List[ActionType]) -> ActionType:
        pass

    def choose_management_action(
        self, game: "GameState", player_id: int, actions: List[Action]
    ) -> Optional[Action]:
        """Pick a build/sell/mortgage action, or None to carry on with the turn."""
        return None

    def choose_action(self, game: "GameState", legal_actions: List[Action]) -> Optional[Action]:
        """
        Choose an action from the list of legal actions.

        Args:
            game: The current game state.
            legal_actions: List of legal actions available to the player.

        Returns:
            The chosen action, or None if there is nothing to do.
        """
        if not legal_actions:
            return None

        player_id = game.get_current_player().player_id
        by_type = {a.action_type: a for a in legal_actions}

        if ActionType.DECLINE_PURCHASE in by_type:
            position = by_type[ActionType.DECLINE_PURCHASE].params["position"]
            if self.confirm_purchase(game, player_id, position):
                # An unaffordable confirmation still goes through; the engine auctions it
                return by_type.get(ActionType.BUY_PROPERTY, Action(ActionType.BUY_PROPERTY, position=position))
            return by_type[ActionType.DECLINE_PURCHASE]

        jail_options = [t for t in JAIL_ACTIONS if t in by_type]
        if jail_options:
            return by_type[self.choose_jail_action(game, player_id, jail_options)]

        management = [a for a in legal_actions if a.action_type in MANAGEMENT_ACTIONS]
        if management:
            choice = self.choose_management_action(game, player_id, management)
            if choice is not None:
                return choice

        for action_type in (ActionType.ROLL_DICE, ActionType.END_TURN):
            if action_type in by_type:
                return by_type[action_type]
        return None


class AutoPrompter(Prompter):
    """
    Non-interactive prompter for simulations and tests.

    Always accepts purchases and leaves Thana by card, then fine, then dice.
    It never manages properties.
    """

    DEFAULT_NAMES = ["Rahim", "Karim", "Fatema", "Nusrat", "Tanvir", "Sadia"]

    def __init__(self, player_count: int = 2, names: Optional[List[str]] = None):
        self.player_count = player_count
        self.names = names or self.DEFAULT_NAMES

    def ask_player_count(self, minimum: int, maximum: int) -> int:
        return max(minimum, min(self.player_count, maximum))

    def ask_player_name(self, index: int, default: str) -> str:
        return self.names[index] if index < len(self.names) else default

    def confirm_purchase(self, game: "GameState", player_id: int, position: int) -> bool:
        return True

    def choose_jail_action(self, game: "GameState", player_id: int, options: List[ActionType]) -> ActionType:
        return options[0]


class ConsolePrompter(Prompter):
    """Asks a human at the terminal."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        language: str = "en",
    ):
        self.input = input_func
        self.output = output
        self.language = language

    def _ask_int(self, question: str, minimum: int, maximum: int, default: Optional[int] = None) -> Optional[int]:
        while True:
            answer = self.input(question).strip()
            if not answer and default is not None:
                return default
            if not answer:
                return None
            try:
                value = int(answer)
            except ValueError:
                self.output(f"Please enter a number between {minimum} and {maximum}.")
                continue
            if minimum <= value <= maximum:
                return value
            self.output(f"Please enter a number between {minimum} and {maximum}.")

    def ask_player_count(self, minimum: int, maximum: int) -> int:
        return self._ask_int(f"Number of players ({minimum}-{maximum}) [2]: ", minimum, maximum, default=2)

    def ask_player_name(self, index: int, default: str) -> str:
        return self.input(f"Name for player {index + 1} [{default}]: ").strip() or default

    def confirm_purchase(self, game: "GameState", player_id: int, position: int) -> bool:
        tile = game.board.get_tile(position)
        symbol = game.config.currency_symbol
        cash = game.players[player_id].cash
        answer = self.input(
            f"Buy {tile.display_name(self.language)} for {symbol}{tile.price}? "
            f"(cash {symbol}{cash}) [y/N]: "
        )
        return answer.strip().lower() in ("y", "yes")

    def choose_jail_action(self, game: "GameState", player_id: int, options: List[ActionType]) -> ActionType:
        labels = {
            ActionType.USE_JAIL_CARD: "Use Get Out of Thana Free card",
            ActionType.PAY_JAIL_FINE: f"Pay fine ({game.config.currency_symbol}{game.config.jail_fine})",
            ActionType.ROLL_FOR_DOUBLES: "Roll for doubles",
        }
        self.output("You are in Thana:")
        for i, option in enumerate(options, start=1):
            self.output(f"  {i}. {labels[option]}")
        choice = self._ask_int("Choose: ", 1, len(options), default=len(options))
        return options[choice - 1]

    def choose_management_action(
        self, game: "GameState", player_id: int, actions: List[Action]
    ) -> Optional[Action]:
        self.output("Manage properties (Enter to skip):")
        for i, action in enumerate(actions, start=1):
            tile = game.board.get_tile(action.params["position"])
            label = action.action_type.value.replace("_", " ")
            self.output(f"  {i}. {label}: {tile.display_name(self.language)}")
        choice = self._ask_int("Choose: ", 1, len(actions))
        return actions[choice - 1] if choice is not None else None
