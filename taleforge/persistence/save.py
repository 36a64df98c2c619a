"""
Save Files - Writes and reads save folders.

Each save is a folder named <game_id>_<milliseconds> under the saves
directory:

    snapshot.json   the full GameState (GameStateModel)
    metadata.json   SaveMetadataModel, used for listing
    history.jsonl   one recorded intent per line, for replays
"""

from __future__ import annotations
from pathlib import Path
import logging
import time

from pydantic import ValidationError

from ..config import get_settings
from ..errors import SaveNotFoundError
from ..engine_core.state import GameState
from .schemas import GameStateModel, IntentModel, SaveMetadataModel

logger = logging.getLogger(__name__)

SNAPSHOT_FILE = "snapshot.json"
METADATA_FILE = "metadata.json"
HISTORY_FILE = "history.jsonl"

DEFAULT_ACTOR_ID = "player"


def _saves_root(saves_dir: str | Path | None) -> Path:
    return Path(saves_dir) if saves_dir is not None else get_settings().saves_dir


def save_game(state: GameState, game_id: str, saves_dir: str | Path | None = None) -> str:
    """
    Write a save folder for state.

    Returns:
        The save id (folder name)
    """
    root = _saves_root(saves_dir)
    timestamp = int(time.time() * 1000)
    save_id = f"{game_id}_{timestamp}"
    # Two saves in the same millisecond get distinct folders
    while (root / save_id).exists():
        timestamp += 1
        save_id = f"{game_id}_{timestamp}"

    folder = root / save_id
    folder.mkdir(parents=True)

    snapshot = GameStateModel.from_domain(state)
    (folder / SNAPSHOT_FILE).write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")

    player = state.get_character(DEFAULT_ACTOR_ID)
    metadata = SaveMetadataModel(
        id=save_id,
        game_id=game_id,
        timestamp=timestamp,
        turn=state.turn,
        character_name=player.name if player else "Unknown",
        current_scene_id=state.current_scene_id,
    )
    (folder / METADATA_FILE).write_text(metadata.model_dump_json(indent=2), encoding="utf-8")

    lines = [intent.model_dump_json() for intent in snapshot.action_history]
    (folder / HISTORY_FILE).write_text("\n".join(lines), encoding="utf-8")

    logger.info("Saved %s at turn %d", save_id, state.turn)
    return save_id


def load_save(save_id: str, saves_dir: str | Path | None = None) -> GameState:
    """
    Reconstruct the GameState stored in a save folder.

    Raises:
        SaveNotFoundError: if the folder or its snapshot is missing
    """
    path = _saves_root(saves_dir) / save_id / SNAPSHOT_FILE
    if not path.is_file():
        raise SaveNotFoundError(save_id)
    snapshot = GameStateModel.model_validate_json(path.read_text(encoding="utf-8"))
    logger.debug("Loaded %s", save_id)
    return snapshot.to_domain()


def load_metadata(save_id: str, saves_dir: str | Path | None = None) -> SaveMetadataModel:
    path = _saves_root(saves_dir) / save_id / METADATA_FILE
    if not path.is_file():
        raise SaveNotFoundError(save_id)
    return SaveMetadataModel.model_validate_json(path.read_text(encoding="utf-8"))


def load_history(save_id: str, saves_dir: str | Path | None = None) -> list[IntentModel]:
    """Recorded intents of a save, oldest first."""
    path = _saves_root(saves_dir) / save_id / HISTORY_FILE
    if not path.is_file():
        raise SaveNotFoundError(save_id)
    return [
        IntentModel.model_validate_json(line)
        for line in path.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]


def list_saves(game_id: str | None = None, saves_dir: str | Path | None = None) -> list[SaveMetadataModel]:
    """
    List saves, newest first.

    Folders without readable metadata are skipped.
    """
    root = _saves_root(saves_dir)
    if not root.is_dir():
        return []

    saves = []
    for folder in root.iterdir():
        if not folder.is_dir():
            continue
        try:
            metadata = load_metadata(folder.name, root)
        except (SaveNotFoundError, ValidationError) as e:
            logger.debug("Skipping %s: %s", folder.name, e)
            continue
        if game_id is None or metadata.game_id == game_id:
            saves.append(metadata.model_copy(update={"id": folder.name}))

    return sorted(saves, key=lambda metadata: metadata.timestamp, reverse=True)
