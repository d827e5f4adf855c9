"""
evaluation.py - Static heuristic evaluation of Connect-N positions

The score is the sum of independent terms, each computed with numpy over
the whole grid:

1. Center column control (deeper pieces count more)
2. Window scoring over every line segment of exactly win_length cells
   - mixed windows are dead and score nothing
   - near-complete own lines are rewarded super-linearly
   - the opponent's mirror case is penalized slightly less (offense bias)
3. Connectivity: own pieces touching other own pieces (8 neighbours)
4. Isolation: own pieces with no orthogonal own neighbour are penalized
5. Position: low pieces and pieces resting on another piece
6. Column control: pieces in each column and columns where we lead

Higher is better for the evaluated player. The evaluation is deterministic
and never modifies the board.
"""

from functools import lru_cache
from typing import Optional

import numpy as np

from connectn.game.board import Board, Settings
from connectn.utils import EMPTY, active_directions

# Tunable weights. The ordering of incentives is what matters:
# near-win > two-away > connectivity > isolation > raw position.
CENTER_BASE = 6
WINDOW_GAINS = (1000, 100, 10)    # Own windows one, two and three cells from complete
WINDOW_LOSSES = (900, 90, 9)      # Opponent windows, same distances
PIECE_CREDIT = 3                  # Per own piece in any other live own window
CONNECTIVITY_WEIGHT = 2
ISOLATION_PENALTY = 3
HEIGHT_WEIGHT = 2
SUPPORT_BONUS = 3
COLUMN_CONTROL_BONUS = 5

NEIGHBOURS_8 = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)]
NEIGHBOURS_4 = [(-1, 0), (1, 0), (0, -1), (0, 1)]


@lru_cache(maxsize=32)
def window_indices(settings: Settings) -> np.ndarray:
    """
    Get the flat grid indices of every scoring window.

    Args:
        settings: Board dimensions, win length and diagonal flag

    Returns:
        Array of shape (n_windows, win_length); diagonal windows are
        included only when diagonals are enabled
    """
    rows, cols, k = settings.rows, settings.cols, settings.win_length
    windows = []
    for _, (dr, dc) in active_directions(settings.diagonal_enabled):
        for r in range(rows):
            for c in range(cols):
                end_r, end_c = r + dr * (k - 1), c + dc * (k - 1)
                if 0 <= end_r < rows and 0 <= end_c < cols:
                    windows.append([(r + i * dr) * cols + (c + i * dc) for i in range(k)])

    if not windows:
        return np.empty((0, k), dtype=np.intp)
    return np.array(windows, dtype=np.intp)


def _neighbour_counts(mask: np.ndarray, offsets) -> np.ndarray:
    """Count, for every cell, how many of the given neighbours are set in mask."""
    rows, cols = mask.shape
    padded = np.pad(mask, 1)
    counts = np.zeros(mask.shape, dtype=np.int64)
    for dr, dc in offsets:
        counts += padded[1 + dr:1 + dr + rows, 1 + dc:1 + dc + cols]
    return counts


def center_score(board: Board, player_id: int) -> int:
    """Reward own pieces in the middle column, more for lower pieces."""
    rows = board.rows
    column = board.grid[:, board.settings.center_col]
    own_rows = np.flatnonzero(column == player_id)
    return int(np.sum(CENTER_BASE + (rows - own_rows)))


def window_score(board: Board, player_id: int, settings: Optional[Settings] = None) -> int:
    """
    Score every line segment of exactly win_length cells.

    Args:
        board: The board to evaluate
        player_id: Player the score is computed for
        settings: Rules to apply (defaults to the board's own)

    Returns:
        Signed window score
    """
    settings = settings or board.settings
    indices = window_indices(settings)
    if indices.size == 0:
        return 0

    windows = board.grid.ravel()[indices]
    k = settings.win_length
    own = np.count_nonzero(windows == player_id, axis=1)
    empty = np.count_nonzero(windows == EMPTY, axis=1)
    opp = k - own - empty

    live_own = (own > 0) & (opp == 0)
    live_opp = (opp > 0) & (own == 0)

    score = 0
    tiered = np.zeros(len(windows), dtype=bool)
    for missing, (gain, loss) in enumerate(zip(WINDOW_GAINS, WINDOW_LOSSES), start=1):
        own_hits = live_own & (empty == missing)
        score += gain * int(np.count_nonzero(own_hits))
        score -= loss * int(np.count_nonzero(live_opp & (empty == missing)))
        tiered |= own_hits

    # Small credit for any other live own window
    score += PIECE_CREDIT * int(np.sum(own[live_own & ~tiered]))
    return score


def connectivity_score(board: Board, player_id: int) -> int:
    """Count own-to-own adjacencies in all eight directions."""
    mask = board.grid == player_id
    return CONNECTIVITY_WEIGHT * int(np.sum(_neighbour_counts(mask, NEIGHBOURS_8)[mask]))


def isolated_pieces(board: Board, player_id: int) -> int:
    """Count own pieces with no orthogonally adjacent own piece."""
    mask = board.grid == player_id
    return int(np.count_nonzero(mask & (_neighbour_counts(mask, NEIGHBOURS_4) == 0)))


def positional_score(board: Board, player_id: int) -> int:
    """Reward low pieces and pieces resting on another piece."""
    grid = board.grid
    mask = grid == player_id
    heights = (board.rows - np.arange(board.rows))[:, np.newaxis]

    score = HEIGHT_WEIGHT * int(np.sum(heights * mask))
    supported = mask[:-1] & (grid[1:] != EMPTY)
    score += SUPPORT_BONUS * int(np.count_nonzero(supported))
    return score


def column_control_score(board: Board, player_id: int) -> int:
    """Reward depth of own pieces and columns where we hold the majority."""
    grid = board.grid
    mask = grid == player_id
    heights = (board.rows - np.arange(board.rows))[:, np.newaxis]

    own_per_col = np.count_nonzero(mask, axis=0)
    opp_per_col = np.count_nonzero((grid != EMPTY) & ~mask, axis=0)
    score = int(np.sum(heights * mask))
    score += COLUMN_CONTROL_BONUS * int(np.count_nonzero(own_per_col > opp_per_col))
    return score


def evaluate(board: Board, player_id: int, settings: Optional[Settings] = None) -> int:
    """
    Heuristic evaluation of a position.

    Args:
        board: The board to evaluate
        player_id: Player the score is computed for
        settings: Rules to apply (defaults to the board's own)

    Returns:
        Signed score; higher favors player_id
    """
    score = center_score(board, player_id)
    score += window_score(board, player_id, settings)
    score += connectivity_score(board, player_id)
    score -= ISOLATION_PENALTY * isolated_pieces(board, player_id)
    score += positional_score(board, player_id)
    score += column_control_score(board, player_id)
    return score
