"""
Built-in effect definitions.

These ship with the engine and are shared by every EffectManager. The
registry is a read-only mapping built once at import time.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Mapping

from .definitions import EffectDefinition


def _create_builtin_effects() -> dict[str, EffectDefinition]:
    definitions = [
        EffectDefinition(
            id="blindness",
            name="Blindness",
            description="Your vision is completely obscured.",
            stat_modifiers={"perception": -999},
            builtin=True,
        ),
        EffectDefinition(
            id="unconscious",
            name="Unconscious",
            description="You are unconscious and cannot act.",
            stat_modifiers={"agility": -999},
            builtin=True,
        ),
        EffectDefinition(
            id="dead",
            name="Dead",
            description="You are dead.",
            stat_modifiers={"health": -999, "agility": -999},
            builtin=True,
        ),
        EffectDefinition(
            id="poison",
            name="Poisoned",
            description="You feel a burning sensation.",
            per_turn_modifiers={"health": -1},
            duration=5,
            builtin=True,
        ),
    ]
    return {definition.id: definition for definition in definitions}


BUILTIN_EFFECTS: Mapping[str, EffectDefinition] = MappingProxyType(_create_builtin_effects())


def get_builtin_effects() -> Mapping[str, EffectDefinition]:
    """Return the shared read-only built-in registry."""
    return BUILTIN_EFFECTS
