"""
Content Loader - Reads game content from JSON.

Two layouts are supported:

1. A single content file holding the whole bundle
   (id, name, start_scene_id, scenes, characters, effects).

2. A game directory:

       <games_root>/<game_id>/game.json        manifest (id, name, start_scene_id, characters)
       <games_root>/<game_id>/effects.json     optional {"effects": [...]}
       <games_root>/<game_id>/scenes/<name>/scene.json

   Any string value inside scene.json that starts with "#" names a file in
   the scene folder; its trimmed text replaces the string.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any
import json
import logging

from pydantic import ValidationError

from ..errors import ContentError, ContentValidationError
from .definitions import GameContent
from .models import GameContentModel
from .validation import ValidationResult, validate_content, validate_or_raise

logger = logging.getLogger(__name__)

FILE_REFERENCE_PREFIX = "#"


def parse_content(data: dict[str, Any], validate: bool = True) -> GameContent:
    """Build GameContent from already-decoded JSON data."""
    try:
        content = GameContentModel.model_validate(data).to_domain()
    except ValidationError as e:
        messages = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise ContentValidationError(messages) from e

    if validate:
        result = validate_or_raise(content)
        for warning in result.warnings:
            logger.warning("Content %s: %s", content.id, warning)
    return content


def load_content_file(path: str | Path, validate: bool = True) -> GameContent:
    """Load a single-file content bundle."""
    return parse_content(_read_json(Path(path)), validate=validate)


def list_games(games_root: str | Path) -> list[dict[str, Any]]:
    """Return the manifests of every game directory under games_root."""
    root = Path(games_root)
    manifests = []
    for game_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        manifest_path = game_dir / "game.json"
        if not manifest_path.exists():
            continue
        try:
            manifests.append(_read_json(manifest_path))
        except ContentError:
            logger.error("Skipping unreadable manifest %s", manifest_path)
    return manifests


def load_game(games_root: str | Path, game_id: str, validate: bool = True) -> GameContent:
    """Load a game from its directory layout."""
    game_dir = Path(games_root) / game_id
    data = dict(_read_json(game_dir / "game.json"))

    scenes = []
    scenes_dir = game_dir / "scenes"
    if scenes_dir.is_dir():
        for scene_dir in sorted(p for p in scenes_dir.iterdir() if p.is_dir()):
            scene_path = scene_dir / "scene.json"
            if not scene_path.exists():
                logger.debug("Skipping %s: no scene.json", scene_dir)
                continue
            scenes.append(resolve_file_references(_read_json(scene_path), scene_dir))
    data["scenes"] = data.get("scenes", []) + scenes

    effects_path = game_dir / "effects.json"
    if effects_path.exists():
        data["effects"] = data.get("effects", []) + _read_json(effects_path).get("effects", [])

    logger.info("Loaded game %s with %d scene(s)", game_id, len(data["scenes"]))
    return parse_content(data, validate=validate)


def resolve_file_references(value: Any, base_dir: Path) -> Any:
    """Replace "#file" strings with the trimmed contents of base_dir/file."""
    if isinstance(value, str) and value.startswith(FILE_REFERENCE_PREFIX):
        file_path = base_dir / value[len(FILE_REFERENCE_PREFIX):]
        try:
            return file_path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ContentError(f"Failed to load file reference: {value} (file not found: {file_path})") from e
    if isinstance(value, list):
        return [resolve_file_references(item, base_dir) for item in value]
    if isinstance(value, dict):
        return {key: resolve_file_references(item, base_dir) for key, item in value.items()}
    return value


def check_content_file(path: str | Path) -> ValidationResult:
    """Load a content file without raising on semantic errors and return its ValidationResult."""
    content = load_content_file(path, validate=False)
    return validate_content(content)


def _read_json(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ContentError(f"Content file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e
