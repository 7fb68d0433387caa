"""
Persistence of saved games.

A save is a single JSON blob stored under one fixed key in a key-value
store. `save_game` / `load_game` / `clear_saved_game` never raise: failures
are logged, reported as SAVE_FAILED / LOAD_FAILED events and the game is
left unchanged. The lower-level `write_state` / `read_state` raise
PersistenceError.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from bdmonopoly.exceptions import PersistenceError
from bdmonopoly.game import GameState
from bdmonopoly.money import EventType
from bdmonopoly.snapshot import restore_state, serialize_state

logger = logging.getLogger(__name__)

SAVE_KEY = "bangladeshiMonopolySave"


class KeyValueStore(ABC):
    """Opaque string storage keyed by name."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a key. Returns False if nothing was stored."""


class MemoryStore(KeyValueStore):
    """In-process store, mainly for tests."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None


class FileStore(KeyValueStore):
    """One `<key>.json` file per key in a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Could not read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise PersistenceError(f"Could not write {path}: {e}") from e

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceError(f"Could not delete {path}: {e}") from e


def write_state(game: GameState, store: KeyValueStore, key: str = SAVE_KEY) -> None:
    """Serialize the game and store it. Raises PersistenceError."""
    try:
        blob = json.dumps(serialize_state(game), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"Could not serialize game: {e}") from e
    store.set(key, blob)


def read_state(store: KeyValueStore, key: str = SAVE_KEY) -> Optional[Dict[str, Any]]:
    """Fetch and decode a stored blob. None if nothing is saved."""
    blob = store.get(key)
    if blob is None:
        return None
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Saved game under '{key}' is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise PersistenceError(f"Saved game under '{key}' is not an object")
    return data


def save_game(game: GameState, store: KeyValueStore, key: str = SAVE_KEY) -> bool:
    """Save the full game. Returns False (and reports why) on failure."""
    try:
        write_state(game, store, key)
    except PersistenceError as e:
        logger.error("Saving game failed: %s", e)
        game.event_log.log(EventType.SAVE_FAILED, details={"key": key, "error": str(e)})
        return False

    logger.info("Game saved under '%s' (turn %d)", key, game.turn_number)
    game.event_log.log(EventType.GAME_SAVED, details={"key": key, "turn": game.turn_number})
    return True


def load_game(game: GameState, store: KeyValueStore, key: str = SAVE_KEY) -> bool:
    """
    Restore a saved game onto `game`.

    Returns False when nothing is saved or the save is unusable; the game
    is then unchanged.
    """
    try:
        data = read_state(store, key)
        if data is None:
            logger.info("No saved game under '%s'", key)
            game.event_log.log(EventType.LOAD_FAILED, details={"key": key, "error": "no_saved_game"})
            return False
        restore_state(game, data)
    except PersistenceError as e:
        logger.error("Loading game failed: %s", e)
        game.event_log.log(EventType.LOAD_FAILED, details={"key": key, "error": str(e)})
        return False

    logger.info("Game loaded from '%s' (turn %d)", key, game.turn_number)
    return True


def clear_saved_game(store: KeyValueStore, key: str = SAVE_KEY) -> bool:
    """Delete the saved game. Returns False if none existed or deletion failed."""
    try:
        return store.delete(key)
    except PersistenceError as e:
        logger.error("Clearing saved game failed: %s", e)
        return False
