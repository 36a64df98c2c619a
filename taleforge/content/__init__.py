"""
Content - Authoring-time data shapes, built-in effects, validation and loading.
"""

from .definitions import (
    STAT_NAMES,
    CONTAINER_TRAIT,
    EffectDefinition,
    ObjectDefinition,
    Slot,
    StateDef,
    InventoryEntry,
    SceneDefinition,
    SceneExit,
    CharacterTemplate,
    GameContent,
)
from .payload import EffectPayload, Target, TargetType, TransferItem, ObjectStateChange
from .builtin_effects import BUILTIN_EFFECTS, get_builtin_effects
from .validation import ValidationResult, validate_content, validate_or_raise, validate_object
from .loader import load_content_file, load_game, list_games, parse_content

__all__ = [
    "STAT_NAMES",
    "CONTAINER_TRAIT",
    "EffectDefinition",
    "ObjectDefinition",
    "Slot",
    "StateDef",
    "InventoryEntry",
    "SceneDefinition",
    "SceneExit",
    "CharacterTemplate",
    "GameContent",
    "EffectPayload",
    "Target",
    "TargetType",
    "TransferItem",
    "ObjectStateChange",
    "BUILTIN_EFFECTS",
    "get_builtin_effects",
    "ValidationResult",
    "validate_content",
    "validate_or_raise",
    "validate_object",
    "load_content_file",
    "load_game",
    "list_games",
    "parse_content",
]
