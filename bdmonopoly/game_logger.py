"""
JSONL logger for game events.

Subscribes to a game's EventLog and writes every event to a JSONL file,
one JSON object per line.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, TYPE_CHECKING, Union

from bdmonopoly.money import GameEvent

if TYPE_CHECKING:
    from bdmonopoly.game import GameState

logger = logging.getLogger(__name__)


class GameLogger:
    """Logger that writes game events to a JSONL file."""

    def __init__(self, log_file: Optional[Union[str, Path]] = None, language: str = "en"):
        """
        Initialize game logger.

        Args:
            log_file: Path to log file. If None, generates timestamped filename.
            language: Language used for player-facing names in the log
        """
        if log_file is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = f"bdmonopoly_game_{timestamp}.jsonl"

        self.log_file = Path(log_file)
        self.language = language
        self.event_count = 0
        self._game: Optional["GameState"] = None

        # Create/clear log file
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_file, "w", encoding="utf-8"):
            pass

    def attach(self, game: "GameState") -> None:
        """Start logging every new event of a game."""
        self._game = game
        game.event_log.subscribe(self.on_event)

    def detach(self) -> None:
        if self._game is not None:
            self._game.event_log.unsubscribe(self.on_event)
            self._game = None

    def on_event(self, event: GameEvent) -> None:
        """Event log listener: enrich the event and append it to the file."""
        data = event.to_dict()
        game = self._game
        if game is not None:
            data.setdefault("turn_number", game.turn_number)
            if event.player_id is not None and event.player_id in game.players:
                data["player_name"] = game.players[event.player_id].name
            position = data.get("position")
            if isinstance(position, int) and 0 <= position < len(game.board):
                data["tile_name"] = game.board.get_tile(position).display_name(self.language)
        self.log_event(**data)

    def log_event(self, event_type: str, **kwargs: Any) -> None:
        """
        Log a game event to JSONL file.

        Args:
            event_type: Type of event (e.g., "game_start", "dice_roll", "purchase")
            **kwargs: Additional event data
        """
        event = {
            "event_id": self.event_count,
            "timestamp": datetime.now().isoformat(),
            "event_type": event_type,
            **kwargs,
        }

        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(event, ensure_ascii=False, default=str) + "\n")
        except OSError as e:
            # A full disk must not stop the game
            logger.warning("Could not write game log %s: %s", self.log_file, e)
            return

        self.event_count += 1
