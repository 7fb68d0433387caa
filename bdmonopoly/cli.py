"""
Command-line driver for playing or simulating a game.

Runs a game with AutoPrompter players (simulation) or asks a human at the
terminal for every decision (--interactive).
"""

import argparse
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from bdmonopoly.config import load_game_data
from bdmonopoly.exceptions import ConfigurationError, ValidationError
from bdmonopoly.game import GameState, create_game
from bdmonopoly.game_logger import GameLogger
from bdmonopoly.money import EventType, GameEvent
from bdmonopoly.player import Player
from bdmonopoly.prompter import AutoPrompter, ConsolePrompter, Prompter
from bdmonopoly.rules import apply_action, get_legal_actions
from bdmonopoly.settings import get_settings
from bdmonopoly.storage import FileStore, clear_saved_game, load_game, save_game

logger = logging.getLogger(__name__)

MAX_ACTIONS_PER_TURN = 100
MAX_ITERATIONS = 10000


def print_game_state(game: GameState, language: str = "en") -> None:
    """Print current game state."""
    symbol = game.config.currency_symbol
    print("\n" + "=" * 60)
    print(f"TURN {game.turn_number}")
    print("=" * 60)

    for player_id in game.player_order:
        player = game.players[player_id]
        if player.is_bankrupt:
            status = "BANKRUPT"
        elif player.in_jail:
            status = f"IN THANA ({player.jail_turns} turns)"
        else:
            status = f"at {game.board.get_tile(player.position).display_name(language)}"

        print(
            f"Player {player_id} ({player.name}): {symbol}{player.cash} | "
            f"{len(player.properties)} properties | {status}"
        )


def print_game_summary(game: GameState) -> None:
    """Print final game summary."""
    symbol = game.config.currency_symbol
    print("\n" + "=" * 60)
    print("GAME OVER" if game.game_over else "GAME STOPPED")
    print("=" * 60)

    if game.winner is not None:
        winner = game.players[game.winner]
        print(f"\nWinner: {winner.name}")
        print(f"Final Cash: {symbol}{winner.cash}")
        print(f"Properties Owned: {len(winner.properties)}")
    elif game.game_over:
        print("\nNo winner.")

    print("\nFinal Standings:")
    for row in game.standings():
        status = "BANKRUPT" if row["is_bankrupt"] else f"{symbol}{row['net_worth']}"
        print(f"  {row['name']}: {status}")

    print(f"\nTotal Turns: {game.turn_number}")


def play_turn(game: GameState, prompter: Prompter) -> int:
    """
    Play the current player's turn to completion.

    Returns the number of actions applied.
    """
    player_id = game.get_current_player().player_id
    turn_number = game.turn_number
    actions_taken = 0

    while not game.game_over and actions_taken < MAX_ACTIONS_PER_TURN:
        legal_actions = get_legal_actions(game, player_id)
        action = prompter.choose_action(game, legal_actions)
        if action is None:
            break

        apply_action(game, action, player_id=player_id)
        actions_taken += 1

        # Turn passed on (end of turn, failed jail roll, bankruptcy)
        if game.turn_number != turn_number:
            break

    if actions_taken >= MAX_ACTIONS_PER_TURN:
        logger.warning("Player %d hit the action limit, forcing end of turn", player_id)
        game.end_turn()
    return actions_taken


def setup_players(prompter: Prompter, min_players: int, max_players: int) -> List[Player]:
    count = prompter.ask_player_count(min_players, max_players)
    return [Player(i, prompter.ask_player_name(i, f"Player {i + 1}")) for i in range(count)]


def simulate_game(
    num_players: int = 2,
    seed: Optional[int] = None,
    data_dir: Optional[Path] = None,
    interactive: bool = False,
    verbose: bool = True,
    max_turns: Optional[int] = None,
    log_file: Optional[str] = None,
    save_dir: Optional[Path] = None,
    resume: bool = False,
    language: str = "en",
    jackpot: bool = False,
) -> GameState:
    """
    Run a complete game.

    Args:
        num_players: Number of players (2-6) for simulations
        seed: Random seed for reproducibility
        data_dir: Directory with board and card files (default: bundled data)
        interactive: Ask a human for every decision
        verbose: Whether to print progress
        max_turns: Stop after this many turns
        log_file: Path to JSONL log file (None = no JSONL log)
        save_dir: Autosave after every turn into this directory
        resume: Continue the game saved in save_dir
        language: en | bn for tile names and card text
        jackpot: Enable the Cha Bazar Break jackpot rule

    Raises:
        ConfigurationError: board or card data could not be loaded
        ValidationError: invalid player count
    """
    data = load_game_data(data_dir)
    config = replace(data.config, seed=seed, free_parking_jackpot=jackpot or data.config.free_parking_jackpot)

    prompter: Prompter = ConsolePrompter(language=language) if interactive else AutoPrompter(num_players)
    players = setup_players(prompter, config.min_players, config.max_players)
    game = create_game(config, players, data.board, data.event_cards, data.local_news_cards)

    store = FileStore(save_dir) if save_dir is not None else None
    if resume and store is not None:
        if load_game(game, store):
            print(f"Resumed saved game at turn {game.turn_number}")
        else:
            print("No usable saved game, starting a new one")

    game_logger = None
    if log_file is not None:
        game_logger = GameLogger(log_file, language=language)
        game_logger.attach(game)

    if verbose:
        print(f"Starting game with {len(players)} players")
        print(f"Seed: {seed}")

        def announce(event: GameEvent) -> None:
            if event.event_type in (EventType.CARD_DRAW, EventType.BANKRUPTCY, EventType.GO_TO_JAIL):
                print(f"  {event!r}")

        game.event_log.subscribe(announce)

    iteration_count = 0
    while not game.game_over and iteration_count < MAX_ITERATIONS:
        iteration_count += 1
        if max_turns is not None and game.turn_number >= max_turns:
            break
        if verbose and (interactive or game.turn_number % 10 == 0):
            print_game_state(game, language)

        play_turn(game, prompter)

        if store is not None:
            save_game(game, store)

    if iteration_count >= MAX_ITERATIONS:
        logger.error("Safety limit of %d iterations hit at turn %d", MAX_ITERATIONS, game.turn_number)

    if game.game_over and store is not None:
        clear_saved_game(store)
    if game_logger is not None:
        game_logger.detach()

    if verbose:
        print_game_summary(game)
        if game_logger is not None:
            print(f"\nGame logged to: {game_logger.log_file}")

    return game


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Play or simulate a Bangladeshi Monopoly game")
    parser.add_argument(
        "--players",
        type=int,
        default=2,
        choices=range(2, 7),
        help="Number of players for simulations (2-6)",
    )
    parser.add_argument("--seed", type=int, default=settings.seed, help="Random seed")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir, help="Board and card data directory")
    parser.add_argument("--interactive", action="store_true", help="Ask for every decision at the terminal")
    parser.add_argument("--quiet", action="store_true", help="Reduce output verbosity")
    parser.add_argument("--max-turns", type=int, default=None, help="Stop after this many turns")
    parser.add_argument("--log-file", type=str, default=None, help="Write a JSONL event log to this path")
    parser.add_argument(
        "--log-events", action="store_true", help="Write a timestamped JSONL event log into the log directory"
    )
    parser.add_argument("--autosave", action="store_true", help="Save after every turn")
    parser.add_argument("--resume", action="store_true", help="Continue the autosaved game")
    parser.add_argument("--jackpot", action="store_true", help="Enable the free parking jackpot rule")
    parser.add_argument("--language", choices=["en", "bn"], default=settings.language, help="Display language")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    save_dir = settings.save_dir if (args.autosave or args.resume) else None
    log_file = args.log_file
    if log_file is None and args.log_events:
        log_file = str(settings.log_dir / f"bdmonopoly_game_{datetime.now():%Y%m%d_%H%M%S}.jsonl")

    try:
        simulate_game(
            num_players=args.players,
            seed=args.seed,
            data_dir=args.data_dir,
            interactive=args.interactive,
            verbose=not args.quiet,
            max_turns=args.max_turns,
            log_file=log_file,
            save_dir=save_dir,
            resume=args.resume,
            language=args.language,
            jackpot=args.jackpot,
        )
    except (ConfigurationError, ValidationError) as e:
        logger.error("Could not start game: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
