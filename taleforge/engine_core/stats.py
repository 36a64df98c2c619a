"""
Stats - StatBlock algebra and the StatCalculator.

A StatBlock maps stat names to numbers. Partial blocks (a subset of the
names) are used for modifiers and deltas; a missing key means "untouched",
which is different from 0.

Current stats are derived, never stored as a source of truth:

    current = base_stats + sum(static modifiers of active effects)

Objects affect stats only through the effects they attach to a character.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Iterable, Mapping

from ..content.definitions import STAT_NAMES, ObjectDefinition, StatBlock
from .container import build_objects_map

if TYPE_CHECKING:
    from .state import CharacterState


def empty_stat_block() -> StatBlock:
    """Full block with every stat at 0."""
    return {name: 0 for name in STAT_NAMES}


def add_stats(base: Mapping[str, float], delta: Mapping[str, float] | None) -> StatBlock:
    """Return base + delta stat-by-stat. Neither input is modified."""
    result = dict(base)
    for name, value in (delta or {}).items():
        result[name] = result.get(name, 0) + value
    return result


def sum_stat_blocks(blocks: Iterable[Mapping[str, float] | None]) -> StatBlock:
    """
    Sum partial stat blocks.

    Stats that appear in no block are absent from the result.
    """
    total: StatBlock = {}
    for block in blocks:
        if not block:
            continue
        for name, value in block.items():
            total[name] = total.get(name, 0) + value
    return total


def negate_stats(block: Mapping[str, float] | None) -> StatBlock:
    return {name: -value for name, value in (block or {}).items()}


class StatCalculator:
    """Derives a character's current stats from base stats and active effects."""

    def calculate_current_stats(
        self,
        character: CharacterState,
        resolved_objects: Mapping[str, ObjectDefinition] | None = None,
    ) -> StatBlock:
        """
        Calculate current stats: base stats plus the static modifiers of every
        active effect.

        resolved_objects is accepted so callers can pass the inventory
        object map; objects only reach stats through attached effects.
        """
        modifiers = sum_stat_blocks(effect.stat_modifiers for effect in character.effects)
        return add_stats(character.base_stats, modifiers)

    def get_effective_stat(
        self,
        character: CharacterState,
        stat_name: str,
        resolved_objects: Mapping[str, ObjectDefinition] | None = None,
    ) -> float:
        """Get a single current stat value."""
        return self.calculate_current_stats(character, resolved_objects).get(stat_name, 0)

    def update_character_stats(
        self,
        character: CharacterState,
        resolved_objects: Mapping[str, ObjectDefinition] | None = None,
    ) -> CharacterState:
        """Return a new character whose stats are recomputed. Base stats are untouched."""
        return character.with_stats(self.calculate_current_stats(character, resolved_objects))

    def resolve_objects(self, character: CharacterState) -> dict[str, ObjectDefinition]:
        """Build the id -> object map for everything the character carries."""
        return build_objects_map(character.inventory)
