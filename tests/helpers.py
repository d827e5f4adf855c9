"""Board builders shared by the test modules."""

import random

import numpy as np

from connectn.game.analysis import terminal_state, valid_moves
from connectn.game.board import Board, Settings


def board_from_rows(rows, win_length=4, diagonal_enabled=True):
    """Build a board from strings, top row first; '.' is empty."""
    grid = [[0 if ch == '.' else int(ch) for ch in row] for row in rows]
    return Board.from_grid(grid, win_length, diagonal_enabled)


def draw_grid(rows=6, cols=7):
    """A full grid with no line longer than two in any direction."""
    grid = np.zeros((rows, cols), dtype=np.int8)
    for r in range(rows):
        for c in range(cols):
            grid[r, c] = 1 + ((r // 2 + c) % 2)
    return grid


def random_position(settings, pieces, seed, players=(1, 2)):
    """
    Play random moves until ``pieces`` are on the board without a result.

    Returns:
        (board, index of the player to move), or None if the playout ended early
    """
    rng = random.Random(seed)
    board = Board(settings)
    for turn in range(pieces):
        board.drop(rng.choice(valid_moves(board)), players[turn % len(players)])
        if terminal_state(board).is_terminal:
            return None
    return board, pieces % len(players)


def random_positions(settings, pieces, count, players=(1, 2)):
    """Collect ``count`` reproducible non-terminal positions."""
    found = []
    seed = 0
    while len(found) < count:
        position = random_position(settings, pieces, seed, players)
        if position is not None:
            found.append(position)
        seed += 1
    return found


SMALL = Settings(rows=4, cols=4, win_length=3, diagonal_enabled=True)
