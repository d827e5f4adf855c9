"""
rules.py - Game session management and Gymnasium environment for Connect-N

This module provides:
1. Player, the per-seat description (id, AI flag, difficulty)
2. GameSession, which owns the board and turn order, applies moves and
   asks the engine for AI moves
3. ConnectNEnv, a gymnasium environment where an agent plays against the
   engine at a chosen difficulty
"""

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from connectn.ai.difficulty import Difficulty, choose_move, suggest_move
from connectn.ai.worker import MoveRequest, MoveResponse, MoveWorker
from connectn.debug import debug
from connectn.game.analysis import (Outcome, TerminalResult, check_win_at, valid_moves,
                                    DRAW, ONGOING)
from connectn.game.board import Board, Settings
from connectn.utils import MAX_PLAYER_ID, NO_MOVE


@dataclass(frozen=True)
class Player:
    """A seat in the turn rotation."""
    id: int
    is_ai: bool = False
    difficulty: Optional[Difficulty] = None
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Player':
        """Build a player from a mapping (accepts ``isAI`` as well as ``is_ai``)."""
        is_ai = bool(data.get("is_ai", data.get("isAI", False)))
        difficulty = data.get("difficulty")
        return cls(
            id=int(data["id"]),
            is_ai=is_ai,
            difficulty=Difficulty.parse(difficulty) if is_ai else None,
            name=str(data.get("name", "")),
        )

    @property
    def label(self) -> str:
        return self.name or f"Player {self.id}"


def default_players(ai_difficulty: Union[Difficulty, str, None] = None) -> List[Player]:
    """Two players; the second is an AI when a difficulty is given."""
    human = Player(1, name="Player 1")
    if ai_difficulty is None:
        return [human, Player(2, name="Player 2")]
    return [human, Player(2, is_ai=True, difficulty=Difficulty.parse(ai_difficulty), name="Computer")]


class GameSession:
    """
    A single game: board, players, turn order and result.

    The engine never mutates the session; it receives snapshots and the
    session applies the returned column.
    """

    def __init__(self, settings: Optional[Settings] = None,
                 players: Optional[Sequence[Player]] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize a new game.

        Args:
            settings: Game parameters (validated here)
            players: Players in turn order (defaults to two humans)
            rng: Random source for engine moves and hints
        """
        self.settings = (settings or Settings()).validate()
        self.players = list(players or default_players())
        ids = [p.id for p in self.players]
        if len(self.players) < 2 or len(set(ids)) != len(ids):
            raise ValueError(f"Players need at least two distinct ids, got {ids}")
        if min(ids) <= 0 or max(ids) > MAX_PLAYER_ID:
            raise ValueError(f"Player ids must be between 1 and {MAX_PLAYER_ID}, got {ids}")
        self.rng = rng or random.Random()
        self.generation = 0
        self.reset()

    def reset(self, first_player_index: int = 0) -> None:
        """Reset the game to an empty board."""
        debug.debug("Resetting session", "session")
        self.board = Board(self.settings)
        self.current_player_index = first_player_index
        self.history: List[Tuple[int, int, int]] = []  # (row, col, player index)
        self.result: TerminalResult = ONGOING
        self.generation += 1

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def game_over(self) -> bool:
        return self.result.is_terminal

    @property
    def winner(self) -> Optional[Player]:
        if self.result.outcome != Outcome.WIN:
            return None
        return next(p for p in self.players if p.id == self.result.winner)

    @property
    def winning_cells(self) -> Tuple[Tuple[int, int], ...]:
        return self.result.cells

    def valid_moves(self) -> List[int]:
        if self.game_over:
            return []
        return valid_moves(self.board)

    def make_move(self, column: int) -> bool:
        """
        Drop the current player's piece and advance the turn.

        Args:
            column: Column to play

        Returns:
            True if the move was applied, False if it was illegal
        """
        if self.game_over or not self.board.is_playable(column):
            debug.debug(f"Rejected move {column}", "session")
            return False

        player = self.current_player
        row = self.board.drop(column, player.id)
        self.history.append((row, column, self.current_player_index))
        self.generation += 1

        win = check_win_at(self.board, row, column)
        if win is not None:
            self.result = TerminalResult(Outcome.WIN, win.player_id, win.cells)
            debug.info(f"{player.label} wins with {list(win.cells)}", "session")
        elif self.board.is_full():
            self.result = DRAW
            debug.info("Game ends in a draw", "session")
        else:
            self.current_player_index = (self.current_player_index + 1) % len(self.players)

        return True

    def undo_move(self) -> bool:
        """
        Take back the last move.

        Returns:
            True if a move was undone, False if there was none
        """
        if not self.history:
            return False

        row, column, player_index = self.history.pop()
        self.board.lift(column)
        self.current_player_index = player_index
        self.result = ONGOING
        self.generation += 1
        debug.debug(f"Undid move at ({row}, {column})", "session")
        return True

    def build_request(self, difficulty: Union[Difficulty, str, None] = None) -> MoveRequest:
        """Snapshot the session for the engine."""
        difficulty = difficulty or self.current_player.difficulty
        return MoveRequest.from_snapshot(self.board, self.settings, self.players,
                                         self.current_player_index, difficulty, self.generation)

    def apply_response(self, response: MoveResponse) -> bool:
        """
        Apply an engine answer if it still matches the live game.

        Returns:
            True if the move was applied
        """
        if response.request.generation != self.generation:
            debug.info("Discarding stale engine move", "session")
            return False
        if response.column == NO_MOVE:
            return False
        return self.make_move(response.column)

    def play_ai_turn(self, worker: Optional[MoveWorker] = None,
                     difficulty: Union[Difficulty, str, None] = None) -> int:
        """
        Let the engine choose and apply a move for the current player.

        Args:
            worker: Background worker to use (synchronous if None)
            difficulty: Override for the player's difficulty

        Returns:
            The column played, or NO_MOVE if nothing was applied
        """
        if self.game_over:
            return NO_MOVE

        request = self.build_request(difficulty)
        if worker is not None:
            response = worker.request_move(request)
        else:
            column = choose_move(request.grid, request.settings, request.players,
                                 request.current_player_index, request.difficulty, self.rng)
            response = MoveResponse(request, column)

        if self.apply_response(response):
            return response.column
        return NO_MOVE

    def hint(self) -> int:
        """Suggest a column for the current player."""
        if self.game_over:
            return NO_MOVE
        return suggest_move(self.board, self.settings, self.players,
                            self.current_player_index, self.rng)

    def render(self) -> str:
        return self.board.render()


class ConnectNEnv(gym.Env):
    """
    Connect-N environment following the Gymnasium interface.

    The agent plays player 1; the engine answers every agent move as
    player 2 at the configured difficulty.
    """

    metadata = {'render_modes': ['ascii', 'human'], 'render_fps': 4}

    def __init__(self, settings: Optional[Settings] = None,
                 opponent: Union[Difficulty, str] = Difficulty.MEDIUM,
                 agent_first: bool = True,
                 render_mode: Optional[str] = None):
        """
        Initialize the environment.

        Args:
            settings: Game parameters
            opponent: Engine difficulty for player 2
            agent_first: Whether the agent makes the opening move
            render_mode: 'ascii', 'human' or None
        """
        self.settings = (settings or Settings()).validate()
        self.opponent = Difficulty.parse(opponent)
        self.agent_first = agent_first
        self.render_mode = render_mode

        self.action_space = spaces.Discrete(self.settings.cols)
        self.observation_space = spaces.Box(
            low=0, high=2, shape=(self.settings.rows, self.settings.cols), dtype=np.int8
        )

        self.agent = Player(1, name="Agent")
        self.engine = Player(2, is_ai=True, difficulty=self.opponent, name="Engine")
        self.session = GameSession(self.settings, [self.agent, self.engine])

        self.reward_win = 1.0
        self.reward_lose = -1.0
        self.reward_draw = 0.1
        self.reward_invalid_move = -0.5
        self.reward_step = -0.01

    def reset(self, seed: Optional[int] = None, options: Optional[Dict] = None) -> Tuple[np.ndarray, Dict]:
        """
        Reset the environment to an empty board.

        Returns:
            Initial observation and info dictionary
        """
        super().reset(seed=seed)
        self.session.rng = random.Random(seed)
        self.session.reset()

        if not self.agent_first:
            self.session.current_player_index = 1
            self.session.play_ai_turn()

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        """
        Play the agent's column, then the engine's reply.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info)
        """
        action = int(action)
        if not self.session.make_move(action):
            debug.warning(f"Invalid action: {action}", "env")
            info = self._get_info()
            info['invalid_move'] = True
            return self._get_observation(), self.reward_invalid_move, False, True, info

        reward = self.reward_step
        if not self.session.game_over:
            self.session.play_ai_turn()

        terminated = self.session.game_over
        if terminated:
            winner = self.session.winner
            if winner is None:
                reward = self.reward_draw
            elif winner.id == self.agent.id:
                reward = self.reward_win
            else:
                reward = self.reward_lose
            debug.info(f"Episode finished: {self.session.result.outcome.name}", "env")

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), reward, terminated, False, self._get_info()

    def render(self) -> Optional[str]:
        if self.render_mode == "ascii":
            return self.session.render()
        if self.render_mode == "human":
            print(self.session.render())
        return None

    def _get_observation(self) -> np.ndarray:
        return self.session.board.get_state()

    def _get_info(self) -> Dict:
        valid = self.session.valid_moves()
        return {
            'valid_moves': valid,
            'num_valid_moves': len(valid),
            'current_player': self.session.current_player.id,
            'game_result': self.session.result.outcome.name,
            'moves_made': len(self.session.history),
            'winning_line': list(self.session.winning_cells),
        }
