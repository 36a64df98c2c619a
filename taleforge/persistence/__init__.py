"""
Persistence Module - Save folders for game snapshots.

Saves are plain JSON written through pydantic models; see schemas.py for
the format and save.py for the folder layout.
"""

from .schemas import GameStateModel, IntentModel, SaveMetadataModel
from .save import list_saves, load_history, load_metadata, load_save, save_game

__all__ = [
    "GameStateModel",
    "IntentModel",
    "SaveMetadataModel",
    "save_game",
    "load_save",
    "load_metadata",
    "load_history",
    "list_saves",
]
