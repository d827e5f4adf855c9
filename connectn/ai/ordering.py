"""
ordering.py - Candidate move ordering for alpha-beta search

Searching the most promising columns first lets alpha-beta cut off more
siblings. Candidates are scored by closeness to the center, closeness to
the previous move and a cheap one-ply probe of the horizontal and vertical
runs the move would create.
"""

from typing import Iterable, List, Optional

from connectn.game.analysis import valid_moves
from connectn.game.board import Board

CENTER_REACH = 4      # Center bonus falls from 4 to 0 with distance
LAST_MOVE_REACH = 3   # Proximity bonus falls from 3 to 0 with distance
RUN_COMPLETE_BONUS = 100
RUN_PIECE_BONUS = 10


def quick_probe(board: Board, row: int, col: int, player_id: int) -> int:
    """
    Score the horizontal and vertical runs through a freshly placed piece.

    Args:
        board: Board with player_id's piece already at (row, col)
        row: Row of the placed piece
        col: Column of the placed piece
        player_id: Owner of the piece

    Returns:
        RUN_COMPLETE_BONUS for each run that reaches win_length, otherwise
        RUN_PIECE_BONUS per adjoining own piece
    """
    grid = board.grid
    win_length = board.settings.win_length
    score = 0

    left = 0
    c = col - 1
    while c >= 0 and grid[row, c] == player_id:
        left += 1
        c -= 1
    right = 0
    c = col + 1
    while c < board.cols and grid[row, c] == player_id:
        right += 1
        c += 1
    if left + right + 1 >= win_length:
        score += RUN_COMPLETE_BONUS
    else:
        score += (left + right) * RUN_PIECE_BONUS

    # Pieces only ever sit below a freshly dropped one
    down = 0
    r = row + 1
    while r < board.rows and grid[r, col] == player_id:
        down += 1
        r += 1
    if down + 1 >= win_length:
        score += RUN_COMPLETE_BONUS
    else:
        score += down * RUN_PIECE_BONUS

    return score


def order_moves(board: Board, player_id: int, last_move: Optional[int] = None,
                columns: Optional[Iterable[int]] = None) -> List[int]:
    """
    Sort candidate columns best-first.

    The board is probed in place and restored before returning. Equal
    scores keep their ascending column order.

    Args:
        board: Current board
        player_id: Player about to move
        last_move: Column of the previous move, if any
        columns: Candidates (defaults to all legal columns)

    Returns:
        Candidate columns, most promising first
    """
    if columns is None:
        columns = valid_moves(board)
    center = board.settings.center_col

    scores = {}
    for col in columns:
        score = max(0, CENTER_REACH - abs(col - center))
        if last_move is not None and last_move >= 0:
            score += max(0, LAST_MOVE_REACH - abs(col - last_move))

        if board.is_playable(col):
            row = board.drop(col, player_id)
            try:
                score += quick_probe(board, row, col, player_id)
            finally:
                board.lift(col)
        scores[col] = score

    return sorted(scores, key=lambda c: -scores[c])
