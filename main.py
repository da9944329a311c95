#!/usr/bin/env python3
"""
Battlemon - turn-based creature battles in the terminal.

Thin wrapper around the battlemon package:
- battlemon.battle: combatants, moves, items and the async battle loop
- battlemon.game: player state and game flow
- battlemon.system: settings and save files
- battlemon.ui: rich battle view

To run: python main.py
"""

from battlemon.cli import run

if __name__ == "__main__":
    run()
