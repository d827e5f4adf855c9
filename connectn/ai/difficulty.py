"""
difficulty.py - Difficulty tiers and the engine entry point

This module maps the five difficulty tiers onto compositions of the
analyzer, evaluator and search:

1. very easy  - uniform random legal column
2. easy       - occasional random move, else win / block / shallow ranking
3. medium     - as easy, plus blocking opponent forks, slightly deeper
4. hard       - win / block short-circuits, then ordered minimax
5. very hard  - as hard, plus fork play in the mid-game, deepest search

``choose_move`` is a pure function of the snapshot it is given: it copies
the grid into a private scratch board, so the caller's board is never
touched. All randomness comes from the ``rng`` argument.
"""

import math
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from connectn.ai.evaluation import evaluate
from connectn.ai.minimax import MinimaxSearch, adaptive_depth
from connectn.debug import debug
from connectn.game.analysis import find_fork, find_immediate_win, valid_moves
from connectn.game.board import Board, GridLike, Settings
from connectn.utils import NO_MOVE

SHALLOW_EVAL_WEIGHT = 2  # Static score of the resulting position counts double


class Difficulty(Enum):
    """Engine strength tiers, weakest first."""
    VERY_EASY = "very easy"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    VERY_HARD = "very hard"

    @property
    def tier(self) -> int:
        return list(Difficulty).index(self) + 1

    @classmethod
    def parse(cls, value: Union['Difficulty', str, int, None]) -> 'Difficulty':
        """
        Resolve a difficulty from a tier, enum or case-insensitive name.

        Unrecognized values fall back to EASY.
        """
        if isinstance(value, Difficulty):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            tiers = list(cls)
            return tiers[value - 1] if 1 <= value <= len(tiers) else cls.EASY
        if isinstance(value, str):
            name = " ".join(value.strip().lower().replace("_", " ").replace("-", " ").split())
            for difficulty in cls:
                if difficulty.value == name:
                    return difficulty
        debug.debug(f"Unknown difficulty {value!r}, using easy", "policy")
        return cls.EASY


class Strategy(Enum):
    RANDOM = "random"
    SHALLOW = "shallow"   # Tactics, then evaluation plus a small fixed-depth search
    DEEP = "deep"         # Tactics, then move-ordered minimax at adaptive depth


@dataclass(frozen=True)
class TierProfile:
    """Tuning for one difficulty tier."""
    strategy: Strategy
    random_move_probability: float
    depth: int                                   # Shallow search depth or deep search ceiling
    block_forks: bool = False
    create_forks: bool = False
    fork_window: Optional[Tuple[float, float]] = None  # (filled share, empty share), both exclusive
    fallback_depth: int = 2

    def without_noise(self) -> 'TierProfile':
        return replace(self, random_move_probability=0.0)


TIER_PROFILES = {
    Difficulty.VERY_EASY: TierProfile(Strategy.RANDOM, 1.0, 0, fallback_depth=0),
    Difficulty.EASY: TierProfile(Strategy.SHALLOW, 0.3, 2),
    Difficulty.MEDIUM: TierProfile(Strategy.SHALLOW, 0.1, 3, block_forks=True),
    Difficulty.HARD: TierProfile(Strategy.DEEP, 0.02, 5, fallback_depth=3),
    Difficulty.VERY_HARD: TierProfile(Strategy.DEEP, 0.0, 6, block_forks=True, create_forks=True,
                                      fork_window=(0.15, 0.3), fallback_depth=3),
}


PlayerLike = Union[int, Mapping[str, Any], Any]


def player_ids(players: Sequence[PlayerLike]) -> List[int]:
    """Extract player ids from Player objects, mappings or plain ints."""
    ids = []
    for player in players:
        if isinstance(player, int):
            ids.append(player)
        elif isinstance(player, Mapping):
            ids.append(int(player["id"]))
        else:
            ids.append(int(player.id))
    return ids


def _scratch_board(board: Union[Board, GridLike], settings: Optional[Settings]) -> Board:
    if isinstance(board, Board):
        return Board(settings or board.settings, board.grid)
    return Board(settings, board)


@dataclass
class _Context:
    board: Board
    settings: Settings
    ids: List[int]
    ai_index: int
    rng: random.Random

    @property
    def ai_id(self) -> int:
        return self.ids[self.ai_index]

    @property
    def opponent_id(self) -> int:
        return self.ids[(self.ai_index + 1) % len(self.ids)]


def _rank_shallow(ctx: _Context, columns: Sequence[int], depth: int) -> int:
    """Pick the column maximizing 2 x evaluation + a small lookahead."""
    search = MinimaxSearch(ctx.settings, ctx.ids, ctx.ai_index)
    reply_index = search.next_index(ctx.ai_index)

    best_score = -math.inf
    best_column = columns[0]
    for column in columns:
        ctx.board.drop(column, ctx.ai_id)
        try:
            score = SHALLOW_EVAL_WEIGHT * evaluate(ctx.board, ctx.ai_id, ctx.settings)
            score += search.value(ctx.board, adaptive_depth(ctx.board, depth), reply_index, column)
        finally:
            ctx.board.lift(column)

        if score > best_score:
            best_score = score
            best_column = column

    debug.debug(f"Shallow ranking picked {best_column} ({best_score})", "policy")
    return best_column


def fork_window_open(board: Board, window: Optional[Tuple[float, float]]) -> bool:
    """
    Check whether fork play is worth its cost on this board.

    Args:
        board: Current board
        window: Shares of the board that must be filled and still empty
            (both exclusive), or None for no restriction

    Returns:
        True if the filled and empty shares both exceed the window
    """
    if window is None:
        return True
    filled_share, empty_share = window
    cells = board.settings.cell_count
    return board.piece_count() > filled_share * cells and board.empty_count() > empty_share * cells


def _tactical_move(ctx: _Context, columns: Sequence[int], profile: TierProfile) -> int:
    """Immediate win, immediate block, then fork play when the profile allows it."""
    column = find_immediate_win(ctx.board, ctx.ai_id, columns)
    if column != NO_MOVE:
        debug.debug(f"Winning move {column}", "policy")
        return column

    column = find_immediate_win(ctx.board, ctx.opponent_id, columns)
    if column != NO_MOVE:
        debug.debug(f"Blocking move {column}", "policy")
        return column

    if not fork_window_open(ctx.board, profile.fork_window):
        return NO_MOVE

    if profile.create_forks:
        column = find_fork(ctx.board, ctx.ai_id, columns)
        if column != NO_MOVE:
            debug.debug(f"Fork created at {column}", "policy")
            return column

    if profile.block_forks:
        column = find_fork(ctx.board, ctx.opponent_id, columns)
        if column != NO_MOVE:
            debug.debug(f"Opponent fork blocked at {column}", "policy")
            return column

    return NO_MOVE


def _play(ctx: _Context, profile: TierProfile) -> int:
    columns = valid_moves(ctx.board)
    if not columns:
        return NO_MOVE
    if len(columns) == 1:
        return columns[0]

    if profile.strategy == Strategy.RANDOM or ctx.rng.random() < profile.random_move_probability:
        column = ctx.rng.choice(columns)
        debug.debug(f"Random move {column}", "policy")
        return column

    column = _tactical_move(ctx, columns, profile)
    if column != NO_MOVE:
        return column

    if profile.strategy == Strategy.SHALLOW:
        return _rank_shallow(ctx, columns, profile.depth)

    search = MinimaxSearch(ctx.settings, ctx.ids, ctx.ai_index)
    column, _ = search.get_move(ctx.board, adaptive_depth(ctx.board, profile.depth))
    return column


def choose_move(board: Union[Board, GridLike], settings: Optional[Settings],
                players: Sequence[PlayerLike], current_player_index: int,
                difficulty: Union[Difficulty, str, int, None],
                rng: Optional[random.Random] = None,
                profile: Optional[TierProfile] = None) -> int:
    """
    Choose a column for the player to move.

    Args:
        board: Board or grid snapshot (never modified)
        settings: Game parameters (defaults to the board's own for a Board)
        players: Players in turn order (Player objects, mappings with an
            ``id`` key, or plain ids)
        current_player_index: Index of the player to move
        difficulty: Tier enum, tier number or case-insensitive name
        rng: Random source for noisy tiers
        profile: Override for the tier's tuning

    Returns:
        A playable column, or NO_MOVE when the board is full
    """
    scratch = _scratch_board(board, settings)
    difficulty = Difficulty.parse(difficulty)
    profile = profile or TIER_PROFILES[difficulty]
    ctx = _Context(scratch, scratch.settings, player_ids(players), current_player_index,
                   rng or random.Random())

    column = _play(ctx, profile)
    debug.debug(f"{difficulty.value} move for player {ctx.ai_id}: {column}", "policy")
    return column


def fallback_move(board: Union[Board, GridLike], settings: Optional[Settings],
                  players: Sequence[PlayerLike], current_player_index: int,
                  difficulty: Union[Difficulty, str, int, None],
                  rng: Optional[random.Random] = None) -> int:
    """
    Cheaper synchronous equivalent of choose_move.

    Used when the background worker is unavailable. Keeps the tier's
    tactics but always ranks with a shallow search at the tier's
    fallback depth, so the time taken stays bounded.
    """
    difficulty = Difficulty.parse(difficulty)
    tier = TIER_PROFILES[difficulty]
    if tier.strategy == Strategy.RANDOM:
        profile = tier
    else:
        profile = TierProfile(Strategy.SHALLOW, 0.0, tier.fallback_depth)
    return choose_move(board, settings, players, current_player_index, difficulty, rng, profile)


def suggest_move(board: Union[Board, GridLike], settings: Optional[Settings],
                 players: Sequence[PlayerLike], current_player_index: int,
                 rng: Optional[random.Random] = None) -> int:
    """
    Hint for a human player: win, else block, else center, else random.

    Returns:
        A playable column, or NO_MOVE when the board is full
    """
    scratch = _scratch_board(board, settings)
    ids = player_ids(players)
    ctx = _Context(scratch, scratch.settings, ids, current_player_index, rng or random.Random())

    columns = valid_moves(scratch)
    if not columns:
        return NO_MOVE

    column = _tactical_move(ctx, columns, TierProfile(Strategy.SHALLOW, 0.0, 0))
    if column != NO_MOVE:
        return column
    if scratch.settings.center_col in columns:
        return scratch.settings.center_col
    return ctx.rng.choice(columns)
