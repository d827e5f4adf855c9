"""
connectn - Artificial opponent for generalized connect-N games

This package provides the board model, move and terminal analysis, static
evaluation, alpha-beta search and the difficulty tiers that turn them into
an engine, plus a game session, a gymnasium environment and a CLI built on
top of it.
"""

# Version number
__version__ = '0.1.0'

from connectn.ai.difficulty import Difficulty, choose_move
from connectn.game.board import Board, Settings
from connectn.utils import NO_MOVE

__all__ = ['Board', 'Settings', 'Difficulty', 'choose_move', 'NO_MOVE']
