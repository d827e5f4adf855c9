import random
import unittest

import numpy as np

from connectn.ai.difficulty import Difficulty
from connectn.ai.worker import MoveResponse, MoveWorker
from connectn.game.analysis import Outcome
from connectn.game.board import Board, Settings, SettingsError
from connectn.game.rules import ConnectNEnv, GameSession, Player, default_players
from connectn.utils import NO_MOVE
from tests.helpers import draw_grid


class TestPlayer(unittest.TestCase):
    def test_from_dict_accepts_browser_keys(self):
        player = Player.from_dict({"id": 2, "isAI": True, "difficulty": "very hard"})
        self.assertTrue(player.is_ai)
        self.assertEqual(player.difficulty, Difficulty.VERY_HARD)
        self.assertEqual(player.label, "Player 2")

    def test_human_has_no_difficulty(self):
        player = Player.from_dict({"id": 1, "difficulty": "hard", "name": "Ann"})
        self.assertFalse(player.is_ai)
        self.assertIsNone(player.difficulty)
        self.assertEqual(player.label, "Ann")

    def test_default_players(self):
        humans = default_players()
        self.assertFalse(any(p.is_ai for p in humans))
        versus = default_players("medium")
        self.assertTrue(versus[1].is_ai)
        self.assertEqual(versus[1].difficulty, Difficulty.MEDIUM)


class TestGameSession(unittest.TestCase):
    def play(self, session, columns):
        for column in columns:
            self.assertTrue(session.make_move(column), column)

    def test_rejects_bad_setup(self):
        with self.assertRaises(SettingsError):
            GameSession(Settings(rows=2))
        with self.assertRaises(ValueError):
            GameSession(players=[Player(1), Player(1)])
        with self.assertRaises(ValueError):
            GameSession(players=[Player(1)])
        with self.assertRaises(ValueError):
            GameSession(players=[Player(1), Player(200)])
        with self.assertRaises(ValueError):
            GameSession(players=[Player(0), Player(2)])
        GameSession(players=[Player(1), Player(127)])

    def test_turns_rotate(self):
        session = GameSession()
        self.assertEqual(session.current_player.id, 1)
        self.play(session, [3])
        self.assertEqual(session.current_player.id, 2)
        self.assertEqual(session.board.cell(5, 3), 1)

    def test_three_player_rotation(self):
        session = GameSession(players=[Player(1), Player(2), Player(3)])
        self.play(session, [0, 1, 2])
        self.assertEqual(session.current_player.id, 1)
        self.assertEqual([session.board.cell(5, c) for c in range(3)], [1, 2, 3])

    def test_illegal_move_is_rejected(self):
        session = GameSession(Settings(rows=3, cols=3, win_length=3))
        self.play(session, [0, 0, 0])
        self.assertFalse(session.make_move(0))
        self.assertFalse(session.make_move(5))
        self.assertEqual(len(session.history), 3)

    def test_win_ends_the_game(self):
        session = GameSession()
        self.play(session, [0, 6, 1, 6, 2, 6, 3])
        self.assertTrue(session.game_over)
        self.assertEqual(session.result.outcome, Outcome.WIN)
        self.assertEqual(session.winner.id, 1)
        self.assertEqual(session.winning_cells, ((5, 0), (5, 1), (5, 2), (5, 3)))
        self.assertEqual(session.valid_moves(), [])
        self.assertFalse(session.make_move(4))

    def test_draw_on_full_board(self):
        session = GameSession()
        grid = draw_grid()
        grid[0, 4] = 0
        session.board = Board(session.settings, grid)
        self.play(session, [4])
        self.assertEqual(session.result.outcome, Outcome.DRAW)
        self.assertIsNone(session.winner)

    def test_last_piece_can_win(self):
        settings = Settings(rows=3, cols=3, win_length=3)
        session = GameSession(settings)
        session.board = Board(settings, [[0, 2, 2], [2, 1, 2], [1, 2, 1]])
        self.play(session, [0])
        self.assertTrue(session.board.is_full())
        self.assertEqual(session.result.outcome, Outcome.WIN)
        self.assertEqual(session.winner.id, 1)
        self.assertEqual(session.winning_cells, ((0, 0), (1, 1), (2, 2)))

    def test_undo(self):
        session = GameSession()
        self.assertFalse(session.undo_move())
        self.play(session, [0, 6, 1, 6, 2, 6, 3])
        self.assertTrue(session.undo_move())
        self.assertFalse(session.game_over)
        self.assertEqual(session.current_player.id, 1)
        self.assertEqual(session.board.cell(5, 3), 0)

    def test_generation_changes_with_every_state_change(self):
        session = GameSession()
        seen = {session.generation}
        session.make_move(3)
        seen.add(session.generation)
        session.undo_move()
        seen.add(session.generation)
        session.reset()
        seen.add(session.generation)
        self.assertEqual(len(seen), 4)

    def test_stale_response_is_discarded(self):
        session = GameSession()
        request = session.build_request(Difficulty.EASY)
        session.make_move(0)
        self.assertFalse(session.apply_response(MoveResponse(request, 3)))
        self.assertEqual(session.board.cell(5, 3), 0)

        fresh = session.build_request(Difficulty.EASY)
        self.assertFalse(session.apply_response(MoveResponse(fresh, NO_MOVE)))
        self.assertTrue(session.apply_response(MoveResponse(fresh, 3)))
        self.assertEqual(session.board.cell(5, 3), 2)

    def ai_session(self):
        players = [Player(1), Player(2, is_ai=True, difficulty=Difficulty.VERY_HARD)]
        session = GameSession(players=players, rng=random.Random(0))
        self.play(session, [0, 6, 1, 6, 2])
        return session

    def test_ai_turn_blocks(self):
        session = self.ai_session()
        self.assertEqual(session.play_ai_turn(), 3)
        self.assertEqual(session.board.cell(5, 3), 2)
        self.assertEqual(session.current_player.id, 1)

    def test_ai_turn_through_worker(self):
        session = self.ai_session()
        with MoveWorker(rng=random.Random(0)) as worker:
            self.assertEqual(session.play_ai_turn(worker), 3)

    def test_ai_turn_after_game_over(self):
        session = GameSession()
        self.play(session, [0, 6, 1, 6, 2, 6, 3])
        self.assertEqual(session.play_ai_turn(difficulty=Difficulty.EASY), NO_MOVE)

    def test_hint(self):
        session = self.ai_session()
        self.assertEqual(session.hint(), 3)
        self.assertEqual(GameSession().hint(), 3)


class TestConnectNEnv(unittest.TestCase):
    def setUp(self):
        self.env = ConnectNEnv(opponent=Difficulty.VERY_EASY)

    def test_reset(self):
        obs, info = self.env.reset(seed=1)
        self.assertEqual(obs.shape, (6, 7))
        self.assertEqual(obs.dtype, np.int8)
        self.assertTrue(self.env.observation_space.contains(obs))
        self.assertEqual(info['valid_moves'], list(range(7)))
        self.assertEqual(info['moves_made'], 0)

    def test_engine_opens_when_agent_is_second(self):
        env = ConnectNEnv(opponent=Difficulty.VERY_EASY, agent_first=False)
        obs, info = env.reset(seed=3)
        self.assertEqual(int(np.count_nonzero(obs == 2)), 1)
        self.assertEqual(info['current_player'], 1)

    def test_step_gets_engine_reply(self):
        self.env.reset(seed=1)
        obs, reward, terminated, truncated, info = self.env.step(3)
        self.assertEqual(int(np.count_nonzero(obs == 1)), 1)
        self.assertEqual(int(np.count_nonzero(obs == 2)), 1)
        self.assertAlmostEqual(reward, -0.01)
        self.assertFalse(terminated)
        self.assertFalse(truncated)

    def test_invalid_action_truncates(self):
        self.env.reset(seed=1)
        _, reward, terminated, truncated, info = self.env.step(99)
        self.assertAlmostEqual(reward, -0.5)
        self.assertFalse(terminated)
        self.assertTrue(truncated)
        self.assertTrue(info['invalid_move'])

    def test_winning_action(self):
        self.env.reset(seed=1)
        self.env.session.board.grid[5, :3] = 1
        self.env.session.board.grid[5, 6] = 2
        self.env.session.board.grid[4, 6] = 2
        _, reward, terminated, _, info = self.env.step(3)
        self.assertTrue(terminated)
        self.assertEqual(reward, 1.0)
        self.assertEqual(info['game_result'], 'WIN')
        self.assertEqual(len(info['winning_line']), 4)

    def test_ascii_render(self):
        env = ConnectNEnv(render_mode="ascii")
        env.reset(seed=0)
        self.assertIn("|0 1 2 3 4 5 6|", env.render())


if __name__ == '__main__':
    unittest.main()
