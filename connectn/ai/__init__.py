"""
connectn/ai/__init__.py - Decision engine for Connect-N

This package provides the static evaluator, move ordering, alpha-beta
search, the difficulty tiers and the background move worker.
"""

from connectn.ai.difficulty import Difficulty, TierProfile, TIER_PROFILES, choose_move, fallback_move
from connectn.ai.evaluation import evaluate
from connectn.ai.minimax import MinimaxSearch, adaptive_depth
from connectn.ai.ordering import order_moves

__all__ = ['Difficulty', 'TierProfile', 'TIER_PROFILES', 'choose_move', 'fallback_move',
           'evaluate', 'MinimaxSearch', 'adaptive_depth', 'order_moves']
