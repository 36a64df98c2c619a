"""
Pickup Command - Takes an object from the scene into the actor's inventory.

The object becomes a top-level inventory entry and, unless it is itself a
container (worn, like a backpack), is moved into the first container with
room: hands first, then anything else carried. The object's carry
effects ride along in the same payload.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging

from ..content.definitions import InventoryEntry, ObjectDefinition
from ..content.payload import EffectPayload, TransferItem
from ..engine_core.action import ActionIntent, Result, SceneContext
from ..engine_core.container import (
    HAND_IDS,
    build_objects_map,
    calculate_container_weight,
    calculate_inventory_weight,
    can_fit_in_container,
    get_effective_strength,
    iter_containers,
)
from ..engine_core.stats import StatCalculator
from .base import Command

if TYPE_CHECKING:
    from ..engine_core.effects import EffectManager
    from ..engine_core.state import CharacterState, GameState

logger = logging.getLogger(__name__)

# Carrying capacity is strength times this
CAPACITY_PER_STRENGTH = 10


class PickupCommand(Command):
    command_id = "pickup"

    def resolve(
        self,
        state: GameState,
        intent: ActionIntent,
        context: SceneContext,
        stat_calculator: StatCalculator | None = None,
        effect_manager: EffectManager | None = None,
    ) -> Result:
        if not intent.item_id:
            return Result.failed("Pick up what?")

        obj = context.find_object(intent.item_id)
        if obj is None:
            return Result.failed(f'I don\'t see "{intent.item_id}" here.')

        character = state.get_character(intent.actor_id)
        if character is None:
            return Result.failed("Character not found.")

        calculator = stat_calculator or StatCalculator()
        resolved = build_objects_map(character.inventory, state.object_catalog)
        perception = calculator.get_effective_stat(character, "perception", resolved)
        if not obj.is_visible(perception):
            return Result.failed("You don't notice anything special here.")

        description = obj.description or obj.id
        if not obj.removable:
            return Result.failed(f"You can't pick up {description}.")

        capacity_problem = self._check_capacity(character, obj, calculator, resolved)
        if capacity_problem is not None:
            return Result.failed(capacity_problem)

        effects = EffectPayload(
            add_items=[InventoryEntry(id=obj.id, quantity=obj.quantity or 1, object_data=obj)],
        )

        if not obj.is_container():
            container = self._find_container(character, obj, resolved)
            if container is None:
                return Result.failed("You don't have a container that can hold this item.")
            effects = EffectPayload(
                add_items=effects.add_items,
                transfer_item=TransferItem(
                    item_id=obj.id,
                    from_container_id=None,
                    to_container_id=container.id,
                ),
            )

        if obj.carry_effects is not None:
            effects = effects.merged_with(obj.carry_effects)

        logger.debug("%s picks up %s", character.id, obj.id)
        return Result.succeeded(f"You pick up {description}.", effects=effects)

    def _check_capacity(
        self,
        character: CharacterState,
        obj: ObjectDefinition,
        calculator: StatCalculator,
        resolved: dict[str, ObjectDefinition],
    ) -> str | None:
        """Failure text when the object would exceed carrying capacity."""
        if "strength" not in character.base_stats:
            return None
        strength = calculator.get_effective_stat(character, "strength", resolved)
        capacity = get_effective_strength(strength, character.inventory) * CAPACITY_PER_STRENGTH
        carried = calculate_inventory_weight(character.inventory, resolved)
        if carried + calculate_container_weight(obj, resolved) > capacity:
            return (
                f"You can't carry that much. Your carrying capacity is {capacity:g}, "
                f"and you're already carrying {carried:.1f}."
            )
        return None

    def _find_container(
        self,
        character: CharacterState,
        obj: ObjectDefinition,
        resolved: dict[str, ObjectDefinition],
    ) -> ObjectDefinition | None:
        """First container with room for obj, hands before anything else."""
        containers = list(iter_containers(character.inventory))
        containers.sort(key=lambda container: container.id not in HAND_IDS)
        for container in containers:
            if can_fit_in_container(obj, container, resolved):
                return container
        return None
