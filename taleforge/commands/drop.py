"""
Drop Command - Puts one carried item down in the current scene.

The item can be anywhere in the inventory tree, including a slot. Its
carry effects are undone in the same payload.
"""

from __future__ import annotations
from dataclasses import replace
from typing import TYPE_CHECKING

from ..content.definitions import InventoryEntry, ObjectDefinition
from ..content.payload import EffectPayload
from ..engine_core.action import ActionIntent, Result, SceneContext
from ..engine_core.container import (
    build_objects_map,
    find_item_in_inventory,
    get_all_items_with_containers,
)
from .base import Command

if TYPE_CHECKING:
    from ..engine_core.effects import EffectManager
    from ..engine_core.state import CharacterState, GameState
    from ..engine_core.stats import StatCalculator


class DropCommand(Command):
    command_id = "drop"

    def resolve(
        self,
        state: GameState,
        intent: ActionIntent,
        context: SceneContext,
        stat_calculator: StatCalculator | None = None,
        effect_manager: EffectManager | None = None,
    ) -> Result:
        if not intent.item_id:
            return Result.failed("Drop what?")

        character = state.get_character(intent.actor_id)
        if character is None:
            return Result.failed("Character not found.")

        item = self._find_item(state, character, intent.item_id)
        if item is None:
            return Result.failed(f'You don\'t have "{intent.item_id}" in your inventory.')

        description = item.description or item.id
        if not item.removable:
            return Result.failed(f"You can't drop {description}.")

        effects = EffectPayload(remove_items=[InventoryEntry(id=item.id, quantity=1)])
        if item.carry_effects is not None:
            undo = replace(item.carry_effects.inverted(), effect_source_id=item.id)
            effects = effects.merged_with(undo)

        return Result.succeeded(f"You drop {description}.", effects=effects)

    def _find_item(
        self,
        state: GameState,
        character: CharacterState,
        item_id: str,
    ) -> ObjectDefinition | None:
        """Exact id first, then a case-insensitive match on id or description."""
        resolved = build_objects_map(character.inventory, state.object_catalog)
        location = find_item_in_inventory(character.inventory, item_id, resolved)
        if location is not None:
            return location.item

        term = item_id.lower()
        top_level = [entry.object_data for entry in character.inventory if entry.object_data is not None]
        candidates = top_level + [found.item for found in get_all_items_with_containers(character.inventory, resolved)]
        for obj in candidates:
            if obj.id.lower() == term:
                return obj
        for obj in candidates:
            if obj.description and term in obj.description.lower():
                return obj
        return None
