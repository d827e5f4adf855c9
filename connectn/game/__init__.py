"""
connectn.game - Board model and rules for Connect-N

This package contains the board representation, move and terminal-state
analysis, and game session management. Import GameSession and ConnectNEnv
from connectn.game.rules; they depend on the engine package.
"""

from connectn.game.board import Board, Settings, SettingsError, InvalidMoveError
from connectn.game.analysis import (Outcome, TerminalResult, WinResult, check_win_at,
                                    terminal_state, valid_moves)

__all__ = ['Board', 'Settings', 'SettingsError', 'InvalidMoveError', 'Outcome',
           'TerminalResult', 'WinResult', 'check_win_at', 'terminal_state', 'valid_moves']
