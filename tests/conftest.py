"""Shared test fixtures for the Bangladeshi Monopoly engine tests."""

import pytest

from bdmonopoly.config import GameConfig
from bdmonopoly.game import create_game
from bdmonopoly.player import Player


@pytest.fixture
def game_config():
    """Default game configuration with fixed seed for reproducibility."""
    return GameConfig(seed=42)


@pytest.fixture
def two_players():
    """Two test players."""
    return [Player(0, "Alice"), Player(1, "Bob")]


@pytest.fixture
def three_players():
    """Three test players."""
    return [Player(0, "Alice"), Player(1, "Bob"), Player(2, "Charlie")]


@pytest.fixture
def basic_game(game_config, two_players):
    """Basic game with two players, the bundled board and fixed seed."""
    return create_game(game_config, two_players)


@pytest.fixture
def three_player_game(game_config, three_players):
    return create_game(game_config, three_players)


@pytest.fixture
def load_dice():
    """Return a helper that makes a game's dice produce the given (die1, die2) pairs in order."""

    def _load(game, *rolls):
        faces = [face for roll in rolls for face in roll]

        def randint(a, b):
            assert faces, "dice script exhausted"
            return faces.pop(0)

        game.rng.randint = randint

    return _load


@pytest.fixture
def give_property():
    """Return a helper that hands tiles straight to a player, bypassing the buy offer."""

    def _give(game, player_id, *positions, houses=0, has_hotel=False, mortgaged=False):
        for position in positions:
            ownership = game.property_ownership[position]
            ownership.owner_id = player_id
            ownership.houses = houses
            ownership.has_hotel = has_hotel
            ownership.is_mortgaged = mortgaged
            game.players[player_id].properties.add(position)

    return _give
