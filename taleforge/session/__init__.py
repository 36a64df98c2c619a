"""
Session Module - Runs a loaded game turn by turn.

A session represents one play-through of a game:
- Created from loaded content (or resumed from a save)
- Holds the current game state
- Processes intents one at a time
- Saves snapshots on request
"""

from .game_session import GameSession

__all__ = ["GameSession"]
