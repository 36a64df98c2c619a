"""
Transfer Command - Moves a carried item into a container or one of its slots.

intent.item_id names the item, intent.target_id the destination as the
player typed it ("backpack", "right hand", "left-hand ring"). The slot
can also be given explicitly as params["slot_id"].
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging
import re

from ..content.definitions import ObjectDefinition, Slot
from ..content.payload import EffectPayload, TransferItem
from ..engine_core.action import ActionIntent, Result, SceneContext
from ..engine_core.container import (
    HAND_IDS,
    build_objects_map,
    can_fit_in_container,
    can_fit_in_slot,
    contains_container,
    find_container_by_name,
    find_container_fuzzy,
    find_item_in_inventory,
    find_slot_in_container,
)
from .base import Command

if TYPE_CHECKING:
    from ..engine_core.effects import EffectManager
    from ..engine_core.state import GameState
    from ..engine_core.stats import StatCalculator

logger = logging.getLogger(__name__)


def container_display_name(container_id: str) -> str:
    """'left-hand' -> 'left hand'; other ids unchanged."""
    if container_id in HAND_IDS:
        return container_id.replace("-", " ")
    return container_id


def find_slot_by_name(container: ObjectDefinition, identifier: str) -> Slot | None:
    """Match a slot by id or display name, ignoring case and a trailing "slot"/"finger"."""
    identifier = re.sub(r"\s*\b(slot|finger)\b\s*", " ", identifier.lower()).strip()
    if not identifier:
        return None
    for slot in container.slots or []:
        if slot.id.lower() == identifier or (slot.name and slot.name.lower() == identifier):
            return slot
    for slot in container.slots or []:
        if slot.name and slot.name.lower().split()[0] == identifier:
            return slot
    return None


class TransferCommand(Command):
    command_id = "transfer"

    def resolve(
        self,
        state: GameState,
        intent: ActionIntent,
        context: SceneContext,
        stat_calculator: StatCalculator | None = None,
        effect_manager: EffectManager | None = None,
    ) -> Result:
        item_id = intent.item_id
        destination_term = intent.target_id
        if not item_id or not destination_term:
            return Result.failed("Transfer what to where?")

        character = state.get_character(intent.actor_id)
        if character is None:
            return Result.failed("Character not found.")

        inventory = character.inventory
        resolved = build_objects_map(inventory, state.object_catalog)
        location = find_item_in_inventory(inventory, item_id, resolved)
        if location is None:
            return Result.failed("I don't see that item in your inventory.")
        item = location.item

        if not item.removable:
            return Result.failed(f"You can't move your {container_display_name(item.id)}.")

        destination, slot_term = self._find_destination(inventory, destination_term, resolved)
        if destination is None:
            return Result.failed("That container doesn't exist.")
        if not destination.is_container():
            return Result.failed("That's not a container.")

        slot_id = intent.params.get("slot_id")
        if slot_id is None and slot_term:
            slot = find_slot_by_name(destination, slot_term)
            slot_id = slot.id if slot else slot_term

        destination_name = container_display_name(destination.id)
        if location.container_id == destination.id and location.slot_id == slot_id:
            where = f"your {destination_name}" if destination.id in HAND_IDS else destination.id
            return Result.failed(f"The {item.id} is already in {where}.")

        if destination.id == item.id:
            return Result.failed("You can't transfer a container into itself.")
        if item.is_container() and contains_container(item, destination.id):
            return Result.failed("You can't transfer a container into one of its nested containers.")

        resolved.setdefault(item.id, item)

        if slot_id is not None:
            slot = find_slot_in_container(destination, slot_id)
            if slot is None:
                return Result.failed(f"That slot doesn't exist in {destination.id}.")
            if not slot.is_empty:
                return Result.failed(f"The {slot.display_name} slot is already occupied.")
            if not can_fit_in_slot(item, slot, resolved):
                return Result.failed(f"The {item.id} doesn't fit in the {slot.display_name} slot.")
            narrative = f"You move the {item.id} to the {slot.display_name} slot in your {destination_name}."
        else:
            if not can_fit_in_container(item, destination, resolved):
                return Result.failed(f"The {item.id} doesn't fit in your {destination_name}.")
            narrative = f"You move the {item.id} to your {destination_name}."

        effects = EffectPayload(
            transfer_item=TransferItem(
                item_id=item.id,
                from_container_id=location.container_id,
                to_container_id=destination.id,
                slot_id=slot_id,
            )
        )
        return Result.succeeded(narrative, effects=effects)

    def _find_destination(
        self,
        inventory,
        term: str,
        resolved: dict[str, ObjectDefinition],
    ) -> tuple[ObjectDefinition | None, str | None]:
        """
        Resolve the typed destination into (container, leftover slot text).

        The longest leading run of words naming a container id wins, so
        "backpack sheath", "left-hand.ring" and "right hand index finger"
        all split into container and slot. A term naming a carried
        non-container is returned as-is so the caller can report it.
        """
        words = re.split(r"[\s.]+", term.strip())
        for split in range(len(words), 0, -1):
            container = find_container_by_name(inventory, " ".join(words[:split]))
            if container is not None:
                return container, " ".join(words[split:]) or None

        exact = find_item_in_inventory(inventory, term, resolved)
        if exact is not None:
            return exact.item, None

        return find_container_fuzzy(inventory, term), None
