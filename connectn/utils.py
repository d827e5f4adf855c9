"""
utils.py - Shared constants, enumerations and helpers for Connect-N

This module provides the cell and move sentinels, default board settings,
the line directions used by win detection and evaluation, and an ASCII
renderer that works for any board size and player count.
"""

from enum import Enum, auto
from typing import Dict, List, Tuple

import numpy as np

# Cell and move sentinels
EMPTY = 0
NO_MOVE = -1  # Returned by the engine when no column is playable
MAX_PLAYER_ID = int(np.iinfo(np.int8).max)  # Cells are stored as int8

# Default game parameters (classic Connect Four)
DEFAULT_ROWS = 6
DEFAULT_COLS = 7
DEFAULT_WIN_LENGTH = 4
MIN_DIMENSION = 3
MIN_WIN_LENGTH = 3

# Symbols used when rendering pieces, indexed by player id
PIECE_SYMBOLS = " XOABCDEFGH"


class Direction(Enum):
    """Line directions scanned for wins and evaluation windows."""
    HORIZONTAL = auto()
    VERTICAL = auto()
    DIAGONAL_DOWN_RIGHT = auto()  # From top-left towards bottom-right
    DIAGONAL_DOWN_LEFT = auto()   # From top-right towards bottom-left

    @property
    def is_diagonal(self) -> bool:
        return self in (Direction.DIAGONAL_DOWN_RIGHT, Direction.DIAGONAL_DOWN_LEFT)


# Direction vectors (row, col); row 0 is the top of the board
DIRECTION_VECTORS: Dict[Direction, Tuple[int, int]] = {
    Direction.HORIZONTAL: (0, 1),
    Direction.VERTICAL: (1, 0),
    Direction.DIAGONAL_DOWN_RIGHT: (1, 1),
    Direction.DIAGONAL_DOWN_LEFT: (1, -1),
}


def active_directions(diagonal_enabled: bool) -> List[Tuple[Direction, Tuple[int, int]]]:
    """
    Get the directions that count towards a win.

    Args:
        diagonal_enabled: Whether diagonal lines are allowed

    Returns:
        List of (direction, (dr, dc)) pairs
    """
    return [(direction, vector) for direction, vector in DIRECTION_VECTORS.items()
            if diagonal_enabled or not direction.is_diagonal]


def piece_symbol(player_id: int) -> str:
    """Get the display symbol for a cell value."""
    if 0 <= player_id < len(PIECE_SYMBOLS):
        return PIECE_SYMBOLS[player_id]
    return "?"


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render a board grid as ASCII art.

    Args:
        grid: 2D array of cell values (row 0 at the top)

    Returns:
        ASCII representation of the board with column numbers underneath
    """
    rows, cols = grid.shape
    width = max(len(str(cols - 1)), 1)
    border = "|" + "-" * (cols * (width + 1) - 1) + "|"

    result = [border]
    for row in range(rows):
        cells = [piece_symbol(int(grid[row, col])).center(width) for col in range(cols)]
        result.append("|" + " ".join(cells) + "|")
    result.append(border)
    result.append("|" + " ".join(str(col).center(width) for col in range(cols)) + "|")

    return "\n".join(result)
