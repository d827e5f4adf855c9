"""
cli.py - Command-line interface for the Connect-N engine

This module provides a CLI for playing against the engine at any board
size and difficulty, watching engine-vs-engine games, analyzing a board
position and benchmarking decision times per difficulty.
"""

import argparse
import random
import sys
import time
from typing import List, Optional

import numpy as np

from connectn.ai.difficulty import TIER_PROFILES, Difficulty, choose_move
from connectn.ai.evaluation import evaluate
from connectn.ai.worker import MoveWorker
from connectn.debug import debug, DebugLevel
from connectn.game.analysis import terminal_state, valid_moves
from connectn.game.board import Board, Settings, SettingsError
from connectn.game.rules import GameSession, Player
from connectn.utils import DEFAULT_COLS, DEFAULT_ROWS, DEFAULT_WIN_LENGTH, NO_MOVE, piece_symbol

DIFFICULTY_CHOICES = [d.value.replace(" ", "-") for d in Difficulty]


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


class SimpleCLI:
    """Simple command-line interface for Connect-N."""

    def __init__(self, argv: Optional[List[str]] = None):
        self.argv = argv
        self.args = None

    def parse_args(self) -> None:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(description='Connect-N engine CLI')

        common = argparse.ArgumentParser(add_help=False)
        common.add_argument('--rows', type=int, default=DEFAULT_ROWS, help='Board rows')
        common.add_argument('--cols', type=int, default=DEFAULT_COLS, help='Board columns')
        common.add_argument('--win', type=int, default=DEFAULT_WIN_LENGTH,
                            help='Pieces in a row needed to win')
        common.add_argument('--no-diagonal', action='store_true',
                            help='Do not count diagonal lines as wins')
        common.add_argument('--seed', type=int, help='Random seed for reproducible games')
        common.add_argument('--debug', action='store_true', help='Enable debug logging')
        common.add_argument('--debug_level',
                            choices=['none', 'error', 'warning', 'info', 'debug', 'trace'],
                            default='warning', help='Logging level')

        subparsers = parser.add_subparsers(dest='command', help='Command to run')

        play_parser = subparsers.add_parser('play', parents=[common], help='Play a game interactively')
        play_parser.add_argument('--opponent', choices=DIFFICULTY_CHOICES + ['none'], default='easy',
                                 help="Engine difficulty, or 'none' for two human players")
        play_parser.add_argument('--ai-first', action='store_true', help='Let the engine move first')
        play_parser.add_argument('--watch', choices=DIFFICULTY_CHOICES,
                                 help='Replace the human with an engine of this difficulty')
        play_parser.add_argument('--delay', type=float, default=0.5,
                                 help='Pause between engine moves in seconds')
        play_parser.add_argument('--sync', action='store_true',
                                 help='Compute engine moves on the main thread')

        analyze_parser = subparsers.add_parser('analyze', parents=[common],
                                               help='Analyze a board position')
        analyze_parser.add_argument('--position', type=str, required=True,
                                    help='Comma-separated cell values, row by row from the top')
        analyze_parser.add_argument('--to-move', type=int, choices=[1, 2],
                                    help='Player to move (inferred from piece counts if omitted)')

        benchmark_parser = subparsers.add_parser('benchmark', parents=[common],
                                                 help='Time engine decisions per difficulty')
        benchmark_parser.add_argument('--positions', type=positive_int, default=10,
                                      help='Number of random positions per difficulty')
        benchmark_parser.add_argument('--difficulty', choices=DIFFICULTY_CHOICES, action='append',
                                      help='Difficulty to benchmark (repeatable, default all)')

        self.args = parser.parse_args(self.argv)

        if getattr(self.args, 'debug', False):
            debug.configure(level=DebugLevel.DEBUG)
        elif getattr(self.args, 'debug_level', None):
            debug.set_from_string(self.args.debug_level)

    def settings(self) -> Settings:
        return Settings(rows=self.args.rows, cols=self.args.cols, win_length=self.args.win,
                        diagonal_enabled=not self.args.no_diagonal).validate()

    def rng(self) -> random.Random:
        return random.Random(self.args.seed)

    def run(self) -> None:
        """Run the CLI based on the parsed arguments."""
        if not self.args:
            self.parse_args()

        try:
            if self.args.command == 'play':
                self.play_game()
            elif self.args.command == 'analyze':
                self.analyze_position()
            elif self.args.command == 'benchmark':
                self.benchmark()
            else:
                print("Please specify a command. Use --help for options.")
                sys.exit(1)
        except SettingsError as e:
            print(f"Invalid settings: {e}")
            sys.exit(2)

    # --- play ---

    def create_session(self) -> GameSession:
        """Build the session described by the play arguments."""
        if self.args.watch:
            first = Player(1, is_ai=True, difficulty=Difficulty.parse(self.args.watch),
                           name=f"Engine ({self.args.watch})")
        else:
            first = Player(1, name="You")

        if self.args.opponent == 'none':
            second = Player(2, name="Player 2")
        else:
            second = Player(2, is_ai=True, difficulty=Difficulty.parse(self.args.opponent),
                            name=f"Engine ({self.args.opponent})")

        players = [second, first] if self.args.ai_first else [first, second]
        return GameSession(self.settings(), players, rng=self.rng())

    def play_game(self) -> None:
        """Play a game interactively."""
        session = self.create_session()
        worker = None if self.args.sync else MoveWorker(rng=self.rng())

        print(f"Starting a {session.settings.rows}x{session.settings.cols} connect-{session.settings.win_length} game!")
        print(f"Enter a column number (0-{session.settings.cols - 1}) to make a move.")
        print("Other commands: 'q' to quit, 'u' to undo, 'r' to restart, 'h' for a hint.")
        print(session.render())

        try:
            while not session.game_over:
                player = session.current_player

                if player.is_ai:
                    print(f"{player.label} is thinking...")
                    column = session.play_ai_turn(worker)
                    print(f"{player.label} plays column {column}")
                    print(session.render())
                    time.sleep(self.args.delay)
                    continue

                command = self.get_human_move(session)
                if command == 'q':
                    print("Quitting game.")
                    return
                if command == 'u':
                    # Take back the engine's reply as well as our own move
                    undone = session.undo_move()
                    while undone and session.current_player.is_ai and session.undo_move():
                        pass
                    print("Move undone." if undone else "No moves to undo.")
                elif command == 'r':
                    session.reset()
                    print("Game restarted.")
                elif command == 'h':
                    print(f"Hint: try column {session.hint()}")
                    continue
                elif not session.make_move(command):
                    print(f"Invalid move: {command}")
                    continue
                print(session.render())
        finally:
            if worker is not None:
                worker.shutdown()

        print("Game over!")
        winner = session.winner
        if winner is None:
            print("It's a draw!")
        else:
            print(f"{winner.label} ({piece_symbol(winner.id)}) wins!")
            print(f"Winning cells: {list(session.winning_cells)}")

    def get_human_move(self, session: GameSession):
        """
        Read a move from the human player.

        Returns:
            Column index, or one of the command letters q/u/r/h
        """
        cols = session.settings.cols
        while True:
            user_input = input(f"{session.current_player.label} (0-{cols - 1}, q/u/r/h): ").strip().lower()
            if user_input in ('q', 'u', 'r', 'h'):
                return user_input
            try:
                move = int(user_input)
            except ValueError:
                print("Invalid input. Please enter a column number or command.")
                continue
            if 0 <= move < cols:
                return move
            print(f"Column must be between 0 and {cols - 1}.")

    # --- analyze ---

    def analyze_position(self) -> None:
        """Report the state of a position and each difficulty's choice."""
        settings = self.settings()
        try:
            cells = [int(c) for c in self.args.position.split(',')]
            if len(cells) != settings.cell_count:
                raise ValueError(f"Position string must have {settings.cell_count} values")
            board = Board(settings, np.array(cells).reshape(settings.rows, settings.cols))
        except ValueError as e:
            print(f"Error parsing position: {e}")
            return

        print("Loaded position:")
        print(board.render())

        result = terminal_state(board)
        print(f"\nState: {result.outcome.name}")
        if result.winner is not None:
            print(f"Winner: {result.winner} at {list(result.cells)}")
        print(f"Valid moves: {valid_moves(board)}")
        print(f"Empty cells: {board.empty_count()}")

        for player_id in (1, 2):
            print(f"Evaluation for player {player_id}: {evaluate(board, player_id)}")

        to_move = self.args.to_move
        if to_move is None:
            ones = int(np.count_nonzero(board.grid == 1))
            twos = int(np.count_nonzero(board.grid == 2))
            to_move = 1 if ones <= twos else 2
        print(f"\nEngine choices for player {to_move} (noise disabled):")
        for difficulty in Difficulty:
            profile = TIER_PROFILES[difficulty].without_noise()
            started = time.perf_counter()
            column = choose_move(board, settings, [1, 2], to_move - 1, difficulty,
                                 rng=self.rng(), profile=profile)
            elapsed = time.perf_counter() - started
            shown = "no legal move" if column == NO_MOVE else f"column {column}"
            print(f"  {difficulty.value:>9}: {shown} ({elapsed:.3f}s)")

    # --- benchmark ---

    def benchmark(self) -> None:
        """Time engine decisions on random mid-game positions."""
        settings = self.settings()
        rng = self.rng()
        difficulties = [Difficulty.parse(d) for d in (self.args.difficulty or DIFFICULTY_CHOICES)]

        positions = []
        while len(positions) < self.args.positions:
            session = GameSession(settings, [Player(1), Player(2)], rng=rng)
            for _ in range(rng.randint(0, settings.cell_count // 3)):
                moves = session.valid_moves()
                if not moves:
                    break
                session.make_move(rng.choice(moves))
            if not session.game_over:
                positions.append((session.board.copy(), session.current_player_index))

        print(f"Benchmarking {len(positions)} positions on a "
              f"{settings.rows}x{settings.cols} connect-{settings.win_length} board")
        for difficulty in difficulties:
            debug.start_timer(f"benchmark-{difficulty.name}")
            for board, index in positions:
                choose_move(board, settings, [1, 2], index, difficulty, rng=rng)
            elapsed = debug.end_timer(f"benchmark-{difficulty.name}", "cli")
            print(f"  {difficulty.value:>9}: {elapsed:.3f}s total, "
                  f"{elapsed / len(positions) * 1000:.1f} ms per move")


def main(argv: Optional[List[str]] = None):
    """Main entry point for the CLI."""
    cli = SimpleCLI(argv)
    cli.run()


if __name__ == "__main__":
    main()
