"""
Bangladeshi Monopoly Rules Engine

A deterministic, UI-free implementation of a Dhaka-themed Monopoly, with
Thana as the jail and taka as the currency.
"""

from .game import GameState, TurnPhase, create_game
from .player import Player, PlayerState
from .board import Board
from .config import GameConfig, load_game_data

__all__ = [
    "GameState",
    "TurnPhase",
    "create_game",
    "Player",
    "PlayerState",
    "Board",
    "GameConfig",
    "load_game_data",
]
