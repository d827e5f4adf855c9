"""
connectn.interfaces - User interfaces for Connect-N

This package contains the command-line interface for playing against the
engine and inspecting its decisions.
"""

# Don't import anything here to avoid circular imports
__all__ = []
