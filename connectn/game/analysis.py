"""
analysis.py - Move validity and terminal-state detection for Connect-N

All functions here are pure queries over a board: legal columns, win
detection from a just-placed piece (with the exact winning cells for
highlighting), whole-board terminal classification, and the one-ply
tactical probes (immediate wins and forks) used by the difficulty tiers.
Probes drop a piece temporarily and always lift it again before returning.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional, Tuple

from connectn.game.board import Board, Settings
from connectn.utils import EMPTY, NO_MOVE, Direction, active_directions

Cell = Tuple[int, int]


class Outcome(Enum):
    """Classification of a board position."""
    ONGOING = auto()
    WIN = auto()
    DRAW = auto()


@dataclass(frozen=True)
class WinResult:
    """A winning line through a placed piece."""
    player_id: int
    direction: Direction
    cells: Tuple[Cell, ...]  # Exactly win_length contiguous coordinates


@dataclass(frozen=True)
class TerminalResult:
    """Outcome of a position, with the winner and line when there is one."""
    outcome: Outcome
    winner: Optional[int] = None
    cells: Tuple[Cell, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.outcome != Outcome.ONGOING


ONGOING = TerminalResult(Outcome.ONGOING)
DRAW = TerminalResult(Outcome.DRAW)


def valid_moves(board: Board) -> List[int]:
    """
    Get the playable columns.

    Args:
        board: The board to inspect

    Returns:
        Column indices whose top cell is empty, in ascending order
    """
    top = board.grid[0]
    return [col for col in range(board.cols) if top[col] == EMPTY]


def _run(board: Board, row: int, col: int, dr: int, dc: int, owner: int, limit: int) -> List[Cell]:
    """Collect up to ``limit`` contiguous cells owned by ``owner`` stepping from (row, col)."""
    cells = []
    grid = board.grid
    r, c = row + dr, col + dc
    while len(cells) < limit and 0 <= r < board.rows and 0 <= c < board.cols and grid[r, c] == owner:
        cells.append((r, c))
        r += dr
        c += dc
    return cells


def check_win_at(board: Board, row: int, col: int,
                 settings: Optional[Settings] = None) -> Optional[WinResult]:
    """
    Check whether the piece at (row, col) completes a line.

    Args:
        board: The board to inspect
        row: Row of the piece that was just placed
        col: Column of the piece that was just placed
        settings: Rules to apply (defaults to the board's own)

    Returns:
        WinResult for the owner of the cell, or None if there is no win or
        the cell is empty
    """
    settings = settings or board.settings
    owner = int(board.grid[row, col])
    if owner == EMPTY:
        return None

    win_length = settings.win_length
    for direction, (dr, dc) in active_directions(settings.diagonal_enabled):
        backward = _run(board, row, col, -dr, -dc, owner, win_length - 1)
        forward = _run(board, row, col, dr, dc, owner, win_length - 1)
        if len(backward) + len(forward) + 1 >= win_length:
            line = backward[::-1] + [(row, col)] + forward
            return WinResult(owner, direction, tuple(line[:win_length]))

    return None


def terminal_state(board: Board, settings: Optional[Settings] = None) -> TerminalResult:
    """
    Classify a position as ongoing, won or drawn.

    Every occupied cell is re-checked, so this works without knowing the
    last move. Callers that do know it should use check_win_at instead.

    Args:
        board: The board to inspect
        settings: Rules to apply (defaults to the board's own)

    Returns:
        TerminalResult describing the position
    """
    settings = settings or board.settings
    occupied = zip(*board.grid.nonzero())
    for row, col in occupied:
        win = check_win_at(board, int(row), int(col), settings)
        if win is not None:
            return TerminalResult(Outcome.WIN, win.player_id, win.cells)

    if board.is_full():
        return DRAW
    return ONGOING


def winning_columns(board: Board, player_id: int,
                    columns: Optional[Iterable[int]] = None) -> List[int]:
    """
    Get every column where dropping a piece would win for ``player_id``.

    Args:
        board: The board (left unchanged)
        player_id: Player to probe for
        columns: Candidate columns (defaults to all legal columns)

    Returns:
        Winning columns in candidate order
    """
    if columns is None:
        columns = valid_moves(board)

    found = []
    for col in columns:
        if not board.is_playable(col):
            continue
        row = board.drop(col, player_id)
        try:
            if check_win_at(board, row, col) is not None:
                found.append(col)
        finally:
            board.lift(col)
    return found


def find_immediate_win(board: Board, player_id: int,
                       columns: Optional[Iterable[int]] = None) -> int:
    """
    Find the first column that wins immediately for ``player_id``.

    Returns:
        Column index, or NO_MOVE if there is none
    """
    if columns is None:
        columns = valid_moves(board)

    for col in columns:
        if winning_columns(board, player_id, [col]):
            return col
    return NO_MOVE


def find_fork(board: Board, player_id: int,
              columns: Optional[Iterable[int]] = None) -> int:
    """
    Find a move that creates two or more separate winning threats.

    A fork is a column after which at least two *other* columns would
    each complete a win for the same player on their next turn.

    Returns:
        Column index of the first forking move, or NO_MOVE
    """
    if columns is None:
        columns = valid_moves(board)
    columns = list(columns)

    for col in columns:
        if not board.is_playable(col):
            continue
        board.drop(col, player_id)
        try:
            threats = winning_columns(board, player_id, [c for c in columns if c != col])
        finally:
            board.lift(col)
        if len(threats) >= 2:
            return col
    return NO_MOVE
