"""
Tests for loading board and card data and for engine settings.
"""

import json
import shutil

import pytest
from pydantic import ValidationError as PydanticValidationError

from bdmonopoly.config import (
    BOARD_FILE,
    DATA_DIR,
    EVENT_CARDS_FILE,
    LOCAL_NEWS_CARDS_FILE,
    GameConfig,
    load_board_file,
    load_cards,
    load_default_board,
    load_game_data,
)
from bdmonopoly.exceptions import ConfigurationError
from bdmonopoly.settings import EngineSettings, get_settings
from bdmonopoly.tiles import PropertyTile, StationTile, TaxTile, TileType, UtilityTile


@pytest.fixture
def data_dir(tmp_path):
    """A writable copy of the bundled data files."""
    for name in (BOARD_FILE, EVENT_CARDS_FILE, LOCAL_NEWS_CARDS_FILE):
        shutil.copy(DATA_DIR / name, tmp_path / name)
    return tmp_path


def _edit_json(path, edit):
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    edit(data)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)


def test_default_board_layout():
    board = load_default_board()

    assert len(board) == 40
    assert board.jail_position == 10
    assert board.get_tile(0).tile_type == TileType.GO
    assert board.get_tile(30).tile_type == TileType.GOTO_JAIL
    assert board.get_all_stations() == [5, 15, 25, 35]
    assert board.get_all_utilities() == [12, 28]
    assert len(board.color_groups) == 8
    assert board.get_color_group("dark_blue") == [37, 39]


def test_default_board_tile_types():
    board = load_default_board()

    farmgate = board.get_tile(9)
    assert isinstance(farmgate, PropertyTile)
    assert farmgate.price == 1200
    assert farmgate.rent == (80, 400, 1000, 3000, 4500, 6000)
    assert isinstance(board.get_tile(5), StationTile)
    assert board.get_tile(5).base_rent == 250
    assert isinstance(board.get_tile(12), UtilityTile)
    assert isinstance(board.get_tile(4), TaxTile)
    assert board.get_tile(4).amount == 2000
    assert board.get_tile(10).display_name("bn") != board.get_tile(10).display_name("en")


def test_load_game_data_applies_board_rules():
    data = load_game_data()

    assert data.config.currency_symbol == "৳"
    assert data.config.go_payout == 2000
    assert data.config.starting_cash == 15000
    assert data.config.jail_fine == 500
    assert len(data.event_cards) == 10
    assert len(data.local_news_cards) == 10


def test_load_game_data_keeps_base_config_fields():
    data = load_game_data(config=GameConfig(seed=3, max_players=4))

    assert data.config.seed == 3
    assert data.config.max_players == 4


def test_board_rule_overrides(data_dir):
    _edit_json(data_dir / BOARD_FILE, lambda d: d.update(goMoney=2500, freeParkingJackpot=True))

    config = load_board_file(data_dir / BOARD_FILE).apply_rules()

    assert config.go_payout == 2500
    assert config.free_parking_jackpot


@pytest.mark.parametrize(
    "edit",
    [
        lambda d: d["tiles"].reverse(),
        lambda d: d["tiles"][1].update(rent=[20, 100]),
        lambda d: d["tiles"][1].pop("group"),
        lambda d: d["tiles"][5].pop("baseRent"),
        lambda d: d["tiles"][4].pop("amount"),
        lambda d: d["tiles"][10].update(type="free_parking"),
        lambda d: d["tiles"][3].update(type="castle"),
        lambda d: d.update(mortgageRate=1.5),
        lambda d: d.update(tiles=[]),
    ],
)
def test_invalid_board_rejected(data_dir, edit):
    _edit_json(data_dir / BOARD_FILE, edit)

    with pytest.raises(ConfigurationError):
        load_game_data(data_dir)


@pytest.mark.parametrize(
    "edit",
    [
        lambda d: d["cards"][0].update(action="win_lottery"),
        lambda d: d["cards"].append({"text_en": "Pay up", "action": "pay_money"}),
        lambda d: d["cards"].append({"text_en": "Go far", "action": "move_to", "tileId": 55}),
    ],
)
def test_invalid_cards_rejected(data_dir, edit):
    _edit_json(data_dir / EVENT_CARDS_FILE, edit)

    with pytest.raises(ConfigurationError):
        load_game_data(data_dir)


def test_missing_data_file(data_dir):
    (data_dir / LOCAL_NEWS_CARDS_FILE).unlink()

    with pytest.raises(ConfigurationError, match="Could not read"):
        load_game_data(data_dir)


def test_invalid_json(data_dir):
    (data_dir / BOARD_FILE).write_text("{ not json", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid JSON"):
        load_board_file(data_dir / BOARD_FILE)


def test_load_cards_bangla_text():
    cards = load_cards(DATA_DIR / EVENT_CARDS_FILE)

    assert all(card.text_bn for card in cards)


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("BDMONOPOLY_LOG_LEVEL", "debug")
    monkeypatch.setenv("BDMONOPOLY_SEED", "11")
    monkeypatch.setenv("BDMONOPOLY_SAVE_DIR", str(tmp_path))
    monkeypatch.setenv("BDMONOPOLY_LANGUAGE", "BN")

    settings = EngineSettings()

    assert settings.log_level == "DEBUG"
    assert settings.seed == 11
    assert settings.save_dir == tmp_path
    assert settings.language == "bn"


def test_settings_defaults(monkeypatch):
    for name in ("LOG_LEVEL", "SEED", "LANGUAGE", "DATA_DIR"):
        monkeypatch.delenv(f"BDMONOPOLY_{name}", raising=False)

    settings = EngineSettings()

    assert settings.log_level == "INFO"
    assert settings.seed is None
    assert settings.data_dir == DATA_DIR


def test_settings_reject_unknown_log_level(monkeypatch):
    monkeypatch.setenv("BDMONOPOLY_LOG_LEVEL", "chatty")

    with pytest.raises(PydanticValidationError):
        EngineSettings()


def test_get_settings_is_cached():
    get_settings.cache_clear()

    assert get_settings() is get_settings()
