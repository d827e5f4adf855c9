#!/usr/bin/env python3
"""
run.py - Main entry point for the Connect-N engine

Examples:

    # Play classic Connect Four against the medium engine
    python run.py play --opponent medium

    # Play connect-5 on an 8x9 board without diagonals, engine first
    python run.py play --rows 8 --cols 9 --win 5 --no-diagonal --opponent hard --ai-first

    # Watch two engines play each other
    python run.py play --watch very-hard --opponent easy --delay 0.2

    # Analyze a 6x7 position (row by row from the top)
    python run.py analyze --position 0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,2,2,0,1,1,1,0

    # Time every difficulty on 20 random positions
    python run.py benchmark --positions 20
"""

from connectn.interfaces.cli import main

if __name__ == "__main__":
    main()
