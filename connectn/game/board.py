"""
board.py - Board representation for Connect-N

This module implements the game Settings (rows, columns, win length and
diagonal eligibility) and the Board class, a fixed-shape grid of cell
occupancy with gravity-drop queries. Row 0 is the top of the board; pieces
settle in the highest-index row.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

import numpy as np

from connectn.debug import debug
from connectn.utils import (DEFAULT_COLS, DEFAULT_ROWS, DEFAULT_WIN_LENGTH, EMPTY,
                            MIN_DIMENSION, MIN_WIN_LENGTH, render_board_ascii)


class SettingsError(ValueError):
    """Raised when game settings fail validation."""


class InvalidMoveError(ValueError):
    """Raised when a piece is dropped into a full or out-of-range column."""


@dataclass(frozen=True)
class Settings:
    """Game parameters; immutable for the duration of a search."""
    rows: int = DEFAULT_ROWS
    cols: int = DEFAULT_COLS
    win_length: int = DEFAULT_WIN_LENGTH
    diagonal_enabled: bool = True

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols

    @property
    def center_col(self) -> int:
        return self.cols // 2

    def validate(self) -> 'Settings':
        """
        Check the settings are playable.

        The engine itself never calls this; it is the caller's job to
        validate settings before starting a session.

        Returns:
            self, so the call can be chained

        Raises:
            SettingsError: If a dimension or the win length is out of range
        """
        if self.rows < MIN_DIMENSION or self.cols < MIN_DIMENSION:
            raise SettingsError(
                f"Board must be at least {MIN_DIMENSION}x{MIN_DIMENSION}, got {self.rows}x{self.cols}")
        if self.win_length < MIN_WIN_LENGTH:
            raise SettingsError(f"Win length must be at least {MIN_WIN_LENGTH}, got {self.win_length}")
        if self.win_length > max(self.rows, self.cols):
            raise SettingsError(
                f"Win length {self.win_length} exceeds both board dimensions ({self.rows}x{self.cols})")
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Settings':
        """
        Build settings from a mapping.

        Accepts both the Python field names and the camelCase names used by
        saved browser sessions (``winCondition``, ``enableDiagonal``).
        """
        return cls(
            rows=int(data.get("rows", DEFAULT_ROWS)),
            cols=int(data.get("cols", DEFAULT_COLS)),
            win_length=int(data.get("win_length", data.get("winCondition", DEFAULT_WIN_LENGTH))),
            diagonal_enabled=bool(data.get("diagonal_enabled", data.get("enableDiagonal", True))),
        )


GridLike = Union[np.ndarray, Sequence[Sequence[int]]]


class Board:
    """
    A Connect-N board.

    The grid holds EMPTY or a positive player id in every cell. Its shape
    always matches the settings it was created with. Cells are int8, so
    player ids must not exceed MAX_PLAYER_ID (127).
    """

    def __init__(self, settings: Optional[Settings] = None, grid: Optional[GridLike] = None):
        """
        Initialize a board.

        Args:
            settings: Game parameters (defaults to a classic 6x7 connect-4)
            grid: Optional initial cell values; copied, never aliased
        """
        self.settings = settings or Settings()
        if grid is None:
            self.grid = np.zeros((self.settings.rows, self.settings.cols), dtype=np.int8)
        else:
            self.grid = np.array(grid, dtype=np.int8)
            if self.grid.shape != (self.settings.rows, self.settings.cols):
                raise SettingsError(
                    f"Grid shape {self.grid.shape} does not match settings "
                    f"{self.settings.rows}x{self.settings.cols}")

    @classmethod
    def from_grid(cls, grid: GridLike, win_length: int = DEFAULT_WIN_LENGTH,
                  diagonal_enabled: bool = True) -> 'Board':
        """Create a board whose dimensions are taken from the grid."""
        array = np.array(grid, dtype=np.int8)
        settings = Settings(rows=array.shape[0], cols=array.shape[1],
                            win_length=win_length, diagonal_enabled=diagonal_enabled)
        return cls(settings, array)

    @property
    def rows(self) -> int:
        return self.settings.rows

    @property
    def cols(self) -> int:
        return self.settings.cols

    def copy(self) -> 'Board':
        """
        Create an independent copy of the board.

        Returns:
            A new Board sharing the settings but not the grid
        """
        return Board(self.settings, self.grid)

    def cell(self, row: int, col: int) -> int:
        """Get the value at (row, col)."""
        return int(self.grid[row, col])

    def lowest_empty_row(self, col: int) -> int:
        """
        Get the row a piece dropped into this column would land in.

        Args:
            col: Column index

        Returns:
            Row index, or -1 if the column is full or out of range
        """
        if not 0 <= col < self.cols:
            return -1
        column = self.grid[:, col]
        for row in range(self.rows - 1, -1, -1):
            if column[row] == EMPTY:
                return row
        return -1

    def top_piece_row(self, col: int) -> int:
        """Get the row of the uppermost piece in a column, or -1 if it is empty."""
        if not 0 <= col < self.cols:
            return -1
        row = self.lowest_empty_row(col) + 1
        if row >= self.rows or self.grid[row, col] == EMPTY:
            return -1
        return row

    def is_playable(self, col: int) -> bool:
        """Check whether a piece can be dropped into a column."""
        return 0 <= col < self.cols and self.grid[0, col] == EMPTY

    def is_full(self) -> bool:
        """Check whether no column is playable."""
        return not (self.grid[0] == EMPTY).any()

    def empty_count(self) -> int:
        return int(np.count_nonzero(self.grid == EMPTY))

    def piece_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def drop(self, col: int, player_id: int) -> int:
        """
        Drop a piece into a column.

        Args:
            col: Column index
            player_id: Id of the player the piece belongs to

        Returns:
            The row the piece landed in

        Raises:
            InvalidMoveError: If the column is full or out of range
        """
        row = self.lowest_empty_row(col)
        if row < 0:
            raise InvalidMoveError(f"Column {col} is not playable")
        self.grid[row, col] = player_id
        debug.trace(f"Placed {player_id} at ({row}, {col})", "board")
        return row

    def lift(self, col: int) -> int:
        """
        Remove the uppermost piece from a column (undo of drop).

        Returns:
            The row that was cleared

        Raises:
            InvalidMoveError: If the column has no pieces
        """
        row = self.top_piece_row(col)
        if row < 0:
            raise InvalidMoveError(f"Column {col} has no piece to remove")
        self.grid[row, col] = EMPTY
        debug.trace(f"Cleared ({row}, {col})", "board")
        return row

    def get_state(self) -> np.ndarray:
        """Get a copy of the grid."""
        return self.grid.copy()

    def to_list(self):
        """Get the grid as nested lists of ints."""
        return self.grid.tolist()

    def render(self) -> str:
        return render_board_ascii(self.grid)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.settings == other.settings and np.array_equal(self.grid, other.grid)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        s = self.settings
        return (f"Board(rows={s.rows}, cols={s.cols}, win_length={s.win_length}, "
                f"diagonal_enabled={s.diagonal_enabled}, pieces={self.piece_count()})")
