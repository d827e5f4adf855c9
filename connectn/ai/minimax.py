"""
minimax.py - Minimax search with alpha-beta pruning for Connect-N

This module provides a MinimaxSearch class that looks ahead a bounded
number of plies from a position, scoring leaves for one fixed player.

The search works on a scratch board: every piece it drops is lifted again
before the call returns, so the board is bit-for-bit identical afterwards.
Players move in rotation; nodes where the evaluated player is to move are
maximizing, every other node is minimizing. The search itself is fully
deterministic; any randomness belongs to the difficulty policy.
"""

import math
import threading
from typing import Optional, Sequence, Tuple

from connectn.ai.evaluation import evaluate
from connectn.ai.ordering import order_moves
from connectn.debug import debug
from connectn.game.analysis import Outcome, TerminalResult, check_win_at, terminal_state, valid_moves
from connectn.game.analysis import DRAW, ONGOING
from connectn.game.board import Board, Settings
from connectn.utils import NO_MOVE

WIN_SCORE = 100000  # Plus remaining depth, so faster wins score higher


def adaptive_depth(board: Board, ceiling: int) -> int:
    """
    Bound a search depth by the number of moves left in the game.

    Args:
        board: Current board
        ceiling: Maximum depth allowed by the difficulty

    Returns:
        min(ceiling, empty cells), never negative
    """
    return max(0, min(ceiling, board.empty_count()))


class MinimaxSearch:
    """
    Depth-bounded minimax with alpha-beta pruning and move ordering.

    One instance scores positions for a single player (``ai_index``) in a
    fixed turn rotation.
    """

    def __init__(self, settings: Settings, player_ids: Sequence[int], ai_index: int,
                 prune: bool = True, use_ordering: bool = True):
        """
        Initialize the search.

        Args:
            settings: Game parameters
            player_ids: Ids of all players in turn order
            ai_index: Index into player_ids of the player scores are computed for
            prune: Apply alpha-beta cutoffs (disable only to cross-check results)
            use_ordering: Sort candidates with order_moves before expanding them
        """
        self.settings = settings
        self.player_ids = tuple(player_ids)
        self.ai_index = ai_index
        self.ai_id = self.player_ids[ai_index]
        self.prune = prune
        self.use_ordering = use_ordering
        self.nodes_evaluated = 0  # For performance tracking

    def next_index(self, index: int) -> int:
        return (index + 1) % len(self.player_ids)

    def _candidates(self, board: Board, player_id: int, last_move: Optional[int]):
        if self.use_ordering:
            return order_moves(board, player_id, last_move)
        return valid_moves(board)

    def get_move(self, board: Board, depth: int) -> Tuple[int, float]:
        """
        Find the best column for the evaluated player, who is to move.

        Args:
            board: Scratch board; restored before returning
            depth: Number of plies to look ahead (at least 1)

        Returns:
            (column, score), or (NO_MOVE, -inf) if no column is playable
        """
        self.nodes_evaluated = 0
        depth = max(1, depth)
        timer = f"search:{threading.get_ident()}"
        debug.start_timer(timer)

        best_column = NO_MOVE
        best_score = -math.inf
        alpha = -math.inf
        beta = math.inf
        child_index = self.next_index(self.ai_index)

        for column in self._candidates(board, self.ai_id, None):
            board.drop(column, self.ai_id)
            try:
                score = self._minimax(board, depth - 1, alpha, beta,
                                      child_index == self.ai_index, child_index, column)
            finally:
                board.lift(column)

            if score > best_score:
                best_score = score
                best_column = column
            alpha = max(alpha, score)

        elapsed = debug.end_timer(timer, "search")
        debug.debug(f"Depth {depth}: column {best_column} score {best_score} "
                    f"({self.nodes_evaluated} nodes, {elapsed or 0:.3f}s)", "search")
        return best_column, best_score

    def value(self, board: Board, depth: int, mover_index: int,
              last_move: Optional[int] = None) -> float:
        """
        Score a position with a full alpha-beta window.

        Args:
            board: Scratch board; restored before returning
            depth: Remaining plies
            mover_index: Index of the player to move
            last_move: Column of the piece placed last, if known

        Returns:
            Minimax value for the evaluated player
        """
        return self._minimax(board, depth, -math.inf, math.inf,
                             mover_index == self.ai_index, mover_index, last_move)

    def _terminal(self, board: Board, last_move: Optional[int]) -> TerminalResult:
        """Classify a node, checking only the last placed piece when it is known."""
        if last_move is None or last_move < 0:
            return terminal_state(board, self.settings)

        row = board.top_piece_row(last_move)
        win = check_win_at(board, row, last_move, self.settings) if row >= 0 else None
        if win is not None:
            return TerminalResult(Outcome.WIN, win.player_id, win.cells)
        if board.is_full():
            return DRAW
        return ONGOING

    def _leaf_value(self, board: Board, depth: int, result: TerminalResult) -> float:
        if result.outcome == Outcome.DRAW:
            return 0
        if result.outcome == Outcome.WIN:
            if result.winner == self.ai_id:
                return WIN_SCORE + depth  # Prefer faster wins
            return -WIN_SCORE - depth     # Prefer slower losses
        return evaluate(board, self.ai_id, self.settings)

    def _minimax(self, board: Board, depth: int, alpha: float, beta: float,
                 is_maximizing: bool, mover_index: int, last_move: Optional[int]) -> float:
        """
        Minimax algorithm with alpha-beta pruning.

        Args:
            board: Scratch board
            depth: Remaining search depth
            alpha: Best score the maximizer can guarantee so far
            beta: Best score the minimizer can guarantee so far
            is_maximizing: True if the evaluated player is to move
            mover_index: Index of the player to move
            last_move: Column of the piece placed last

        Returns:
            The evaluation score for this position
        """
        self.nodes_evaluated += 1

        result = self._terminal(board, last_move)
        if depth <= 0 or result.is_terminal:
            return self._leaf_value(board, depth, result)

        mover_id = self.player_ids[mover_index]
        child_index = self.next_index(mover_index)
        child_maximizing = child_index == self.ai_index

        if is_maximizing:
            max_score = -math.inf
            for column in self._candidates(board, mover_id, last_move):
                board.drop(column, mover_id)
                try:
                    score = self._minimax(board, depth - 1, alpha, beta,
                                          child_maximizing, child_index, column)
                finally:
                    board.lift(column)

                max_score = max(max_score, score)
                alpha = max(alpha, score)

                # Beta cutoff
                if self.prune and beta <= alpha:
                    break

            return max_score

        min_score = math.inf
        for column in self._candidates(board, mover_id, last_move):
            board.drop(column, mover_id)
            try:
                score = self._minimax(board, depth - 1, alpha, beta,
                                      child_maximizing, child_index, column)
            finally:
                board.lift(column)

            min_score = min(min_score, score)
            beta = min(beta, score)

            # Alpha cutoff
            if self.prune and beta <= alpha:
                break

        return min_score
