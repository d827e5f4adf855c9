import random
import threading
import unittest

from connectn.ai.difficulty import Difficulty
from connectn.ai.worker import MoveRequest, MoveResponse, MoveWorker, WorkerBusyError
from connectn.game.board import Board
from tests.helpers import board_from_rows

EMPTY_ROWS = ["......."] * 5


def failing_move(*args):
    raise RuntimeError("search exploded")


class TestMoveRequest(unittest.TestCase):
    def test_snapshot_is_independent_of_board(self):
        board = Board()
        request = MoveRequest.from_snapshot(board, None, [1, 2], 0, "hard", generation=4)
        board.drop(3, 1)
        self.assertEqual(int(request.grid.sum()), 0)
        self.assertEqual(request.settings, board.settings)
        self.assertEqual(request.players, (1, 2))
        self.assertEqual(request.difficulty, Difficulty.HARD)
        self.assertEqual(request.generation, 4)
        self.assertEqual(request.board().piece_count(), 0)


class TestMoveWorker(unittest.TestCase):
    def setUp(self):
        self.board = board_from_rows(EMPTY_ROWS + ["111...."])
        self.request = MoveRequest.from_snapshot(self.board, None, [1, 2], 1, Difficulty.VERY_HARD)

    def test_background_move(self):
        with MoveWorker(rng=random.Random(0)) as worker:
            response = worker.request_move(self.request)
        self.assertIsInstance(response, MoveResponse)
        self.assertIs(response.request, self.request)
        self.assertEqual(response.column, 3)
        self.assertFalse(response.fallback)

    def test_failed_search_uses_fallback(self):
        worker = MoveWorker(rng=random.Random(0), move_fn=failing_move)
        try:
            with self.assertLogs("connectn", level="WARNING") as logs:
                response = worker.request_move(self.request)
        finally:
            worker.shutdown()
        self.assertTrue(response.fallback)
        self.assertEqual(response.column, 3)
        self.assertTrue(any("fallback" in line for line in logs.output))

    def test_shut_down_worker_uses_fallback(self):
        worker = MoveWorker(rng=random.Random(0))
        worker.shutdown()
        self.assertFalse(worker.available)
        self.assertIsNone(worker.submit(self.request))
        response = worker.request_move(self.request)
        self.assertTrue(response.fallback)
        self.assertEqual(response.column, 3)

    def test_second_request_while_busy_is_rejected(self):
        started = threading.Event()
        release = threading.Event()

        def slow_move(*args):
            started.set()
            release.wait(5)
            return 0

        worker = MoveWorker(move_fn=slow_move)
        try:
            future = worker.submit(self.request)
            started.wait(5)
            self.assertTrue(worker.busy)
            with self.assertRaises(WorkerBusyError):
                worker.submit(self.request)
            release.set()
            response = worker.resolve(self.request, future)
        finally:
            release.set()
            worker.shutdown()
        self.assertEqual(response.column, 0)
        self.assertFalse(worker.busy)

    def test_moves_do_not_touch_caller_board(self):
        before = self.board.get_state()
        with MoveWorker() as worker:
            worker.request_move(self.request)
        self.assertEqual(self.board.get_state().tolist(), before.tolist())


if __name__ == '__main__':
    unittest.main()
