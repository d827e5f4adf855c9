import unittest

from connectn.game.analysis import (Outcome, check_win_at, find_fork,
                                    find_immediate_win, terminal_state, valid_moves,
                                    winning_columns)
from connectn.game.board import Board, Settings
from connectn.utils import EMPTY, NO_MOVE, Direction
from tests.helpers import SMALL, board_from_rows, draw_grid, random_positions

EMPTY_ROWS = ["......."] * 4

DIAGONAL_ROWS = [
    ".......",
    ".......",
    "...1...",
    "..12...",
    ".122...",
    "1222...",
]


class TestWinDetection(unittest.TestCase):
    def test_horizontal_win_reports_exact_cells(self):
        board = board_from_rows(EMPTY_ROWS + [".......", "1111..."])
        win = check_win_at(board, 5, 0)
        self.assertIsNotNone(win)
        self.assertEqual(win.player_id, 1)
        self.assertEqual(win.direction, Direction.HORIZONTAL)
        self.assertEqual(win.cells, ((5, 0), (5, 1), (5, 2), (5, 3)))

    def test_longer_line_reports_win_length_cells(self):
        board = board_from_rows(EMPTY_ROWS + [".......", "11111.."])
        win = check_win_at(board, 5, 2)
        self.assertEqual(len(win.cells), 4)
        self.assertEqual(win.cells, ((5, 0), (5, 1), (5, 2), (5, 3)))

    def test_vertical_win(self):
        board = board_from_rows([".......", ".......", "..2....", "..2....", "..2....", "..2...."])
        win = check_win_at(board, 2, 2)
        self.assertEqual(win.player_id, 2)
        self.assertEqual(win.direction, Direction.VERTICAL)
        self.assertEqual(win.cells, ((2, 2), (3, 2), (4, 2), (5, 2)))

    def test_diagonal_win(self):
        board = board_from_rows(DIAGONAL_ROWS)
        win = check_win_at(board, 2, 3)
        self.assertEqual(win.player_id, 1)
        self.assertTrue(win.direction.is_diagonal)
        self.assertEqual(win.cells, ((2, 3), (3, 2), (4, 1), (5, 0)))

    def test_diagonal_ignored_when_disabled(self):
        board = board_from_rows(DIAGONAL_ROWS, diagonal_enabled=False)
        self.assertIsNone(check_win_at(board, 2, 3))
        self.assertEqual(terminal_state(board).outcome, Outcome.ONGOING)

    def test_three_is_not_enough(self):
        board = board_from_rows(EMPTY_ROWS + [".......", "111...."])
        self.assertIsNone(check_win_at(board, 5, 2))

    def test_empty_cell_is_never_a_win(self):
        self.assertIsNone(check_win_at(Board(), 5, 3))


class TestTerminalState(unittest.TestCase):
    def test_empty_board_is_ongoing(self):
        result = terminal_state(Board())
        self.assertEqual(result.outcome, Outcome.ONGOING)
        self.assertFalse(result.is_terminal)
        self.assertIsNone(result.winner)

    def test_win_found_without_last_move(self):
        result = terminal_state(board_from_rows(DIAGONAL_ROWS))
        self.assertEqual(result.outcome, Outcome.WIN)
        self.assertEqual(result.winner, 1)
        self.assertEqual(len(result.cells), 4)

    def test_full_board_without_line_is_draw(self):
        board = Board(grid=draw_grid())
        result = terminal_state(board)
        self.assertEqual(result.outcome, Outcome.DRAW)
        self.assertTrue(result.is_terminal)
        self.assertEqual(valid_moves(board), [])

    def test_full_board_with_line_is_win(self):
        board = Board.from_grid([[1, 2, 1], [2, 1, 2], [1, 2, 1]], win_length=3)
        self.assertTrue(board.is_full())
        result = terminal_state(board)
        self.assertEqual(result.outcome, Outcome.WIN)
        self.assertEqual(result.winner, 1)


class TestTacticalProbes(unittest.TestCase):
    def test_valid_moves_skip_full_columns(self):
        board = board_from_rows(["..1....", "..2....", "..1....", "..2....", "..1....", "..2...."])
        self.assertEqual(valid_moves(board), [0, 1, 3, 4, 5, 6])
        self.assertEqual(board.piece_count(), 6)

    def test_valid_moves_match_open_top_cells(self):
        positions = random_positions(Settings(), 12, 10) + random_positions(SMALL, 8, 10)
        for board, _ in positions:
            open_columns = [c for c in range(board.cols) if board.cell(0, c) == EMPTY]
            self.assertEqual(valid_moves(board), open_columns)

    def test_find_immediate_win(self):
        board = board_from_rows(EMPTY_ROWS + [".......", "111...."])
        before = board.get_state()
        self.assertEqual(find_immediate_win(board, 1), 3)
        self.assertEqual(find_immediate_win(board, 2), NO_MOVE)
        self.assertEqual(board.get_state().tolist(), before.tolist())

    def test_winning_columns_lists_every_threat(self):
        board = board_from_rows(EMPTY_ROWS + [".......", ".111..."])
        self.assertEqual(winning_columns(board, 1), [0, 4])
        self.assertEqual(winning_columns(board, 1, [4, 0]), [4, 0])

    def test_find_fork(self):
        board = board_from_rows(EMPTY_ROWS + [".......", "..11..."])
        self.assertEqual(find_fork(board, 1), 1)
        self.assertEqual(find_fork(board, 2), NO_MOVE)
        self.assertEqual(board.piece_count(), 2)

    def test_single_threat_is_not_a_fork(self):
        board = board_from_rows(EMPTY_ROWS + [".......", "2.11..2"])
        self.assertEqual(find_fork(board, 1), 4)
        self.assertEqual(find_fork(board, 1, [0, 1, 2, 3]), NO_MOVE)


if __name__ == '__main__':
    unittest.main()
