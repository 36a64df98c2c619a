"""
Effect Applier - Materializes a Result's payload onto a new GameState.

apply_effects() is pure: the input state is never modified. Steps run in
a fixed order, each reading and replacing the working snapshot held in an
ApplyContext:

 1. stats          deltas folded into the target character's base stats
 2. traits         set additions / removals on the target character
 3. flags          character flags, or world flags for a scene target
 4. effects        named effects applied / removed via the EffectManager
 5. inventory      items added (picked up) or removed (dropped)
 6. transfer       an item moved between containers, after fit checks
 7. scene objects  picked-up items leave the scene, dropped ones join it
 8. visited        the next scene is marked visited
 9. object state   an object's state id is recorded
10. scene          the current scene changes
11. stats          current stats recomputed for every touched character
12. log            lines for effects that were applied or removed
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import logging

from ..content.definitions import InventoryEntry, ObjectDefinition
from ..content.payload import EffectPayload, Target, TargetType
from .action import Result
from .container import (
    ItemLocation,
    add_to_container,
    build_objects_map,
    can_fit_in_container,
    can_fit_in_slot,
    find_container,
    find_item_at,
    find_item_in_inventory,
    find_slot_in_container,
    remove_from_container,
    replace_container,
)
from .effects import EffectManager
from .state import CharacterState, GameState, LogEntry, LogType
from .stats import StatCalculator, add_stats

logger = logging.getLogger(__name__)

DEFAULT_ACTOR_ID = "player"

CARRY_SOURCE = "carry"


@dataclass
class ApplyContext:
    """Working state threaded through the application steps."""
    current_state: GameState
    next_state: GameState
    payload: EffectPayload
    actor_id: str
    next_scene_id: str | None = None

    touched: set[str] = field(default_factory=set)
    added_effect_ids: list[str] = field(default_factory=list)
    removed_effect_ids: list[str] = field(default_factory=list)
    dropped_objects: list[ObjectDefinition] = field(default_factory=list)

    @property
    def target(self) -> Target:
        return self.payload.target or Target.character(self.actor_id)

    def target_character_id(self) -> str | None:
        """Id of the character a character-targeted payload applies to."""
        target = self.target
        if target.type == TargetType.CHARACTER:
            return target.id or self.actor_id
        if target.type == TargetType.SCENE:
            return None
        raise ValueError(f"Unknown target type: {target.type!r}")

    def get_character(self, character_id: str) -> CharacterState | None:
        return self.next_state.get_character(character_id)

    def put_character(self, character: CharacterState) -> None:
        self.next_state = self.next_state.with_character(character)
        self.touched.add(character.id)


class EffectApplier:
    """Runs the application steps in order."""

    def __init__(
        self,
        effect_manager: EffectManager | None = None,
        stat_calculator: StatCalculator | None = None,
    ):
        self.effect_manager = effect_manager or EffectManager()
        self.stat_calculator = stat_calculator or StatCalculator()
        self.steps = [
            self._apply_stats,
            self._apply_traits,
            self._apply_flags,
            self._apply_character_effects,
            self._apply_inventory,
            self._apply_transfer,
            self._apply_scene_objects,
            self._apply_visited_scenes,
            self._apply_object_state,
            self._apply_scene_transition,
        ]

    def apply(
        self,
        state: GameState,
        result: Result,
        actor_id: str = DEFAULT_ACTOR_ID,
    ) -> GameState:
        """
        Apply a result's payload.

        Failure results return the same state instance.
        """
        if not result.success:
            return state

        payload = result.effects or EffectPayload()
        if payload.is_empty and result.next_scene_id is None:
            return state

        if state.get_character(actor_id) is None:
            logger.warning("Actor %s not found; no effects applied", actor_id)
            return state

        context = ApplyContext(
            current_state=state,
            next_state=state,
            payload=payload,
            actor_id=actor_id,
            next_scene_id=result.next_scene_id,
        )
        for step in self.steps:
            step(context)

        self._recalculate_stats(context)
        self._log_effect_changes(context)
        return context.next_state

    # -------------------------------------------------------------------------
    # Character steps
    # -------------------------------------------------------------------------

    def _character_target(self, context: ApplyContext, what: str) -> CharacterState | None:
        character_id = context.target_character_id()
        if character_id is None:
            logger.debug("Skipping %s for scene target", what)
            return None
        character = context.get_character(character_id)
        if character is None:
            logger.warning("Skipping %s: character %s not found", what, character_id)
        return character

    def _apply_stats(self, context: ApplyContext) -> None:
        if not context.payload.stats:
            return
        character = self._character_target(context, "stats")
        if character is None:
            return
        context.put_character(
            character.with_base_stats(add_stats(character.base_stats, context.payload.stats))
        )

    def _apply_traits(self, context: ApplyContext) -> None:
        payload = context.payload
        if not payload.add_traits and not payload.remove_traits:
            return
        character = self._character_target(context, "traits")
        if character is None:
            return
        traits = (character.traits | set(payload.add_traits)) - set(payload.remove_traits)
        context.put_character(character.with_traits(traits))

    def _apply_flags(self, context: ApplyContext) -> None:
        payload = context.payload
        if not payload.add_flags and not payload.remove_flags:
            return

        if context.target.type == TargetType.SCENE:
            world = context.next_state.world
            flags = (world.global_flags | set(payload.add_flags)) - set(payload.remove_flags)
            context.next_state = context.next_state.with_world(world.with_flags(flags))
            return

        character = self._character_target(context, "flags")
        if character is None:
            return
        flags = (character.flags | set(payload.add_flags)) - set(payload.remove_flags)
        context.put_character(character.with_flags(flags))

    def _apply_character_effects(self, context: ApplyContext) -> None:
        payload = context.payload
        if not payload.add_effects and not payload.remove_effects:
            return
        character = self._character_target(context, "effects")
        if character is None:
            return

        carry_sources = {
            effect_id: entry.id
            for entry in payload.add_items
            if entry.object_data is not None and entry.object_data.carry_effects is not None
            for effect_id in entry.object_data.carry_effects.add_effects
        }

        for effect_id in payload.add_effects:
            already_active = character.has_effect(effect_id)
            character = self.effect_manager.apply_effect(character, effect_id)
            if effect_id in carry_sources:
                character = _tag_last_effect(character, {
                    "source_type": CARRY_SOURCE,
                    "source_object_id": carry_sources[effect_id],
                })
            if not already_active:
                context.added_effect_ids.append(effect_id)

        for effect_id in payload.remove_effects:
            if payload.effect_source_id is not None:
                updated = self.effect_manager.remove_effect_from_source(
                    character, effect_id, payload.effect_source_id,
                )
            else:
                updated = self.effect_manager.remove_effect(character, effect_id)
            if updated is not character:
                context.removed_effect_ids.append(effect_id)
            character = updated

        context.put_character(character)

    # -------------------------------------------------------------------------
    # Inventory steps (always the actor)
    # -------------------------------------------------------------------------

    def _apply_inventory(self, context: ApplyContext) -> None:
        payload = context.payload
        if not payload.add_items and not payload.remove_items:
            return
        character = context.get_character(context.actor_id)
        inventory = list(character.inventory)

        for entry in payload.add_items:
            inventory = _add_entry(inventory, entry)
            if entry.object_data is not None:
                context.next_state = context.next_state.with_catalog_entry(entry.object_data)

        for entry in payload.remove_items:
            resolved = build_objects_map(inventory, context.next_state.object_catalog)
            location = find_item_in_inventory(inventory, entry.id, resolved)
            if location is None:
                logger.warning("Cannot remove %s: not carried by %s", entry.id, character.id)
                continue
            inventory, dropped = _remove_entry(inventory, location, entry.quantity)
            context.dropped_objects.append(dropped)

        context.put_character(character.with_inventory(inventory))

    def _apply_transfer(self, context: ApplyContext) -> None:
        transfer = context.payload.transfer_item
        if transfer is None:
            return
        state = context.next_state
        character = context.get_character(context.actor_id)
        inventory = character.inventory
        resolved = build_objects_map(inventory, state.object_catalog)

        location = find_item_at(inventory, transfer.item_id, transfer.from_container_id, resolved)
        if location is None:
            logger.warning(
                "Transfer skipped: %s is not in %s",
                transfer.item_id, transfer.from_container_id or "the inventory",
            )
            return

        item = location.item
        if location.container_id is None:
            entry = next(e for e in inventory if e.id == transfer.item_id)
            if entry.quantity != item.quantity:
                item = item.with_quantity(entry.quantity)

        destination = find_container(inventory, transfer.to_container_id)
        if destination is None:
            logger.warning("Transfer skipped: container %s not found", transfer.to_container_id)
            return

        if transfer.slot_id is not None:
            slot = find_slot_in_container(destination, transfer.slot_id)
            if slot is None or not can_fit_in_slot(item, slot, resolved):
                logger.warning(
                    "Transfer skipped: %s does not fit slot %s of %s",
                    item.id, transfer.slot_id, destination.id,
                )
                return
        elif not can_fit_in_container(item, destination, resolved):
            logger.warning("Transfer skipped: %s does not fit in %s", item.id, destination.id)
            return

        # Remove from source
        if location.container_id is None:
            inventory = [e for e in inventory if e.id != transfer.item_id]
        else:
            source = find_container(inventory, location.container_id)
            inventory = replace_container(
                inventory, remove_from_container(source, item.id, location.slot_id)
            )

        # Insert at destination, re-read in case it was nested in the source
        destination = find_container(inventory, transfer.to_container_id)
        inventory = replace_container(
            inventory, add_to_container(destination, item, transfer.slot_id)
        )
        if transfer.slot_id is not None:
            context.next_state = context.next_state.with_catalog_entry(item)

        logger.debug(
            "Transferred %s to %s%s", item.id, destination.id,
            f" ({transfer.slot_id})" if transfer.slot_id else "",
        )
        context.put_character(character.with_inventory(inventory))

    def _apply_scene_objects(self, context: ApplyContext) -> None:
        payload = context.payload
        if not payload.add_items and not context.dropped_objects:
            return
        scene_id = context.current_state.current_scene_id
        picked_up = {entry.id for entry in payload.add_items}
        objects = [obj for obj in context.next_state.get_scene_objects(scene_id) if obj.id not in picked_up]
        objects.extend(context.dropped_objects)
        context.next_state = context.next_state.with_scene_objects(scene_id, objects)

    # -------------------------------------------------------------------------
    # World steps
    # -------------------------------------------------------------------------

    def _apply_visited_scenes(self, context: ApplyContext) -> None:
        if context.next_scene_id is None:
            return
        world = context.next_state.world
        context.next_state = context.next_state.with_world(world.with_visited(context.next_scene_id))

    def _apply_object_state(self, context: ApplyContext) -> None:
        change = context.payload.set_object_state
        if change is None:
            return
        context.next_state = context.next_state.with_object_state(change.object_id, change.state_id)

    def _apply_scene_transition(self, context: ApplyContext) -> None:
        if context.next_scene_id is None or context.next_scene_id == context.next_state.current_scene_id:
            return
        logger.debug("Scene transition %s -> %s", context.next_state.current_scene_id, context.next_scene_id)
        context.next_state = replace(context.next_state, current_scene_id=context.next_scene_id)

    # -------------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------------

    def _recalculate_stats(self, context: ApplyContext) -> None:
        for character_id in sorted(context.touched | {context.actor_id}):
            character = context.get_character(character_id)
            if character is None:
                continue
            resolved = self.stat_calculator.resolve_objects(character)
            context.next_state = context.next_state.with_character(
                self.stat_calculator.update_character_stats(character, resolved)
            )

    def _log_effect_changes(self, context: ApplyContext) -> None:
        turn = context.next_state.world.turn
        entries: list[LogEntry] = []

        for effect_id in context.added_effect_ids:
            definition = self.effect_manager.get_effect_definition(effect_id)
            if definition is None:
                continue
            duration = f" ({definition.duration} turns)" if definition.duration else " (permanent)"
            if definition.application_description:
                entries.append(LogEntry(turn, definition.application_description, LogType.EFFECT))
                entries.append(LogEntry(turn, f"Effect: {definition.name}{duration}", LogType.MECHANIC))
            else:
                entries.append(LogEntry(
                    turn,
                    f"You are now affected by: {definition.name}{duration}. {definition.description}".rstrip(),
                    LogType.MECHANIC,
                ))

        for effect_id in context.removed_effect_ids:
            entries.append(LogEntry(turn, worn_off_text(self.effect_manager, effect_id), LogType.MECHANIC))

        context.next_state = context.next_state.with_log(*entries)


def worn_off_text(effect_manager: EffectManager, effect_id: str) -> str:
    return f'The effect "{effect_manager.describe(effect_id)}" has worn off.'


def apply_effects(
    state: GameState,
    result: Result,
    effect_manager: EffectManager | None = None,
    actor_id: str = DEFAULT_ACTOR_ID,
    stat_calculator: StatCalculator | None = None,
) -> GameState:
    """Convenience function to apply a result's effects."""
    return EffectApplier(effect_manager, stat_calculator).apply(state, result, actor_id)


def _tag_last_effect(character: CharacterState, metadata: dict) -> CharacterState:
    effects = list(character.effects)
    last = effects[-1]
    effects[-1] = replace(last, metadata={**last.metadata, **metadata})
    return character.with_effects(effects)


def _add_entry(inventory: list[InventoryEntry], entry: InventoryEntry) -> list[InventoryEntry]:
    """Append an entry, stacking onto an existing entry with the same id."""
    for index, existing in enumerate(inventory):
        if existing.id == entry.id:
            updated = list(inventory)
            updated[index] = existing.with_quantity(existing.quantity + entry.quantity)
            return updated
    return list(inventory) + [entry]


def _remove_entry(
    inventory: list[InventoryEntry],
    location: ItemLocation,
    quantity: int,
) -> tuple[list[InventoryEntry], ObjectDefinition]:
    """Take quantity of an item out of the inventory; return (inventory, removed object)."""
    item = location.item
    if location.container_id is None:
        updated = []
        removed = quantity
        for entry in inventory:
            if entry.id != item.id:
                updated.append(entry)
                continue
            removed = min(quantity, entry.quantity)
            if entry.quantity > removed:
                updated.append(entry.with_quantity(entry.quantity - removed))
        return updated, item.with_quantity(removed)

    container = find_container(inventory, location.container_id)
    return replace_container(inventory, remove_from_container(container, item.id, location.slot_id)), item
