"""
Tests for the JSONL game event logger.
"""

import json

from bdmonopoly.game_logger import GameLogger


def _read(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_logger_writes_enriched_events(tmp_path, basic_game, load_dice):
    log_file = tmp_path / "logs" / "game.jsonl"
    game_logger = GameLogger(log_file)
    game_logger.attach(basic_game)
    load_dice(basic_game, (4, 5))

    basic_game.roll_dice()

    events = _read(log_file)
    assert [e["event_id"] for e in events] == list(range(len(events)))
    roll = next(e for e in events if e["event_type"] == "dice_roll")
    assert roll["player_name"] == "Alice"
    assert roll["total"] == 9
    assert roll["turn_number"] == 0
    land = next(e for e in events if e["event_type"] == "land")
    assert land["tile_name"] == "Farmgate"
    assert game_logger.event_count == len(events)


def test_logger_uses_bangla_names(tmp_path, basic_game):
    log_file = tmp_path / "game.jsonl"
    GameLogger(log_file, language="bn").attach(basic_game)

    basic_game.teleport(0, 9)

    land = next(e for e in _read(log_file) if e["event_type"] == "land")
    assert land["tile_name"] == "ফার্মগেট"


def test_logger_detach_stops_logging(tmp_path, basic_game):
    log_file = tmp_path / "game.jsonl"
    game_logger = GameLogger(log_file)
    game_logger.attach(basic_game)
    basic_game.teleport(0, 9)
    count = len(_read(log_file))

    game_logger.detach()
    basic_game.teleport(0, 10)

    assert len(_read(log_file)) == count


def test_logger_clears_existing_file(tmp_path):
    log_file = tmp_path / "game.jsonl"
    log_file.write_text("old line\n", encoding="utf-8")

    GameLogger(log_file)

    assert log_file.read_text(encoding="utf-8") == ""


def test_logger_default_filename(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    game_logger = GameLogger()

    assert game_logger.log_file.name.startswith("bdmonopoly_game_")
    assert game_logger.log_file.exists()


def test_log_event_directly(tmp_path):
    log_file = tmp_path / "game.jsonl"
    game_logger = GameLogger(log_file)

    game_logger.log_event("custom", note="৳ works")

    event = _read(log_file)[0]
    assert event["event_type"] == "custom"
    assert event["note"] == "৳ works"
