"""
Wastesort - Timed Waste-Sorting Session Engine

A small, deterministic engine for the timed recycling mini-game.
The engine owns the game rules and leaves rendering to the host:
- Item spawning with a no-immediate-repeat category rule
- Bin rules and round resolution
- Score and statistics
- Countdown clock and session completion
- Bot players for simulation
"""

__version__ = "0.1.0"
