"""
worker.py - Background move computation for Connect-N

A MoveWorker owns one background thread that computes engine moves one
request at a time, so the interactive thread stays responsive during deep
searches. Each request carries its own copy of the board; no mutable state
is shared between the caller and the worker.

If the worker cannot accept the request (shut down) or the computation
fails, the caller gets a move from the cheaper synchronous fallback
instead. Failures are logged, never raised.
"""

import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np

from connectn.ai.difficulty import Difficulty, PlayerLike, choose_move, fallback_move, player_ids
from connectn.debug import debug
from connectn.game.board import Board, GridLike, Settings


class WorkerBusyError(RuntimeError):
    """Raised when a request is submitted while another is still running."""


@dataclass(frozen=True, eq=False)
class MoveRequest:
    """Snapshot of a session handed to the engine."""
    grid: np.ndarray
    settings: Settings
    players: Tuple[int, ...]
    current_player_index: int
    difficulty: Difficulty
    generation: int = 0  # Session state version the request was built from

    @classmethod
    def from_snapshot(cls, board: Union[Board, GridLike], settings: Optional[Settings],
                      players: Sequence[PlayerLike], current_player_index: int,
                      difficulty: Union[Difficulty, str, int, None],
                      generation: int = 0) -> 'MoveRequest':
        if isinstance(board, Board):
            settings = settings or board.settings
            grid = board.get_state()
        else:
            grid = np.array(board, dtype=np.int8)
        return cls(grid, settings, tuple(player_ids(players)), current_player_index,
                   Difficulty.parse(difficulty), generation)

    def board(self) -> Board:
        return Board(self.settings, self.grid)


@dataclass(frozen=True)
class MoveResponse:
    """Column chosen for a request."""
    request: MoveRequest
    column: int
    fallback: bool = False


MoveFunction = Callable[..., int]


class MoveWorker:
    """Single background thread computing engine moves."""

    def __init__(self, rng: Optional[random.Random] = None,
                 move_fn: MoveFunction = choose_move,
                 fallback_fn: MoveFunction = fallback_move):
        """
        Initialize the worker.

        Args:
            rng: Random source shared by the worker and the fallback
            move_fn: Function computing a move in the background
            fallback_fn: Function used on the calling thread when the worker fails
        """
        self.rng = rng or random.Random()
        self._move_fn = move_fn
        self._fallback_fn = fallback_fn
        self._executor: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="connectn-ai")
        self._pending: Optional[Future] = None
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._pending is not None and not self._pending.done()

    @property
    def available(self) -> bool:
        return self._executor is not None

    def submit(self, request: MoveRequest) -> Optional[Future]:
        """
        Start computing a move in the background.

        Args:
            request: Snapshot to compute a move for

        Returns:
            Future resolving to the column, or None if the worker is unavailable

        Raises:
            WorkerBusyError: If the previous request has not finished
        """
        with self._lock:
            if self.busy:
                raise WorkerBusyError("A move request is already in progress")
            if self._executor is None:
                debug.warning("Worker unavailable, request will use the fallback", "worker")
                return None

            try:
                future = self._executor.submit(self._compute, request)
            except RuntimeError as exc:
                debug.warning(f"Worker rejected request: {exc}", "worker")
                return None
            self._pending = future
            return future

    def _compute(self, request: MoveRequest) -> int:
        return self._move_fn(request.grid, request.settings, request.players,
                             request.current_player_index, request.difficulty, self.rng)

    def fallback(self, request: MoveRequest) -> MoveResponse:
        """Compute a move synchronously on the calling thread."""
        column = self._fallback_fn(request.grid, request.settings, request.players,
                                   request.current_player_index, request.difficulty, self.rng)
        return MoveResponse(request, column, fallback=True)

    def resolve(self, request: MoveRequest, future: Optional[Future]) -> MoveResponse:
        """
        Wait for a submitted request, falling back if the worker failed.

        Args:
            request: The request that was submitted
            future: What submit returned for it

        Returns:
            MoveResponse for the request
        """
        if future is None:
            return self.fallback(request)

        try:
            column = future.result()
        except Exception as exc:
            debug.warning(f"Background search failed ({exc!r}), using fallback", "worker")
            return self.fallback(request)
        return MoveResponse(request, column)

    def request_move(self, request: MoveRequest) -> MoveResponse:
        """Submit a request and wait for its answer."""
        return self.resolve(request, self.submit(request))

    def shutdown(self, wait: bool = True):
        """Stop the background thread; later requests use the fallback."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> 'MoveWorker':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
