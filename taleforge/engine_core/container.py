"""
Container Resolver - Nested containers, named slots, fit checks and weight.

A container stores items two ways:
- general storage: the `contains` list, capped by max_items / max_weight
  and by summed per-axis dimensions
- slots: named, single-occupancy places that reference their occupant by
  id; the occupant's definition is resolved through an objects map

Content validation guarantees containers never contain themselves, so the
traversals here recurse without cycle checks.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Mapping
import re

from ..content.definitions import CONTAINER_TRAIT, InventoryEntry, ObjectDefinition, Slot

LEFT_HAND = "left-hand"
RIGHT_HAND = "right-hand"
HAND_IDS = (LEFT_HAND, RIGHT_HAND)

FINGER_SLOTS = (
    ("thumb", "Thumb"),
    ("index", "Index finger"),
    ("middle", "Middle finger"),
    ("ring", "Ring finger"),
    ("pinky", "Pinky"),
)


@dataclass(frozen=True)
class ItemLocation:
    """
    Where an item was found.

    container_id is None for top-level inventory entries; slot_id is None
    for general-storage hits.
    """
    item: ObjectDefinition
    container_id: str | None
    slot_id: str | None = None

    @property
    def in_slot(self) -> bool:
        return self.slot_id is not None


# =============================================================================
# Hands
# =============================================================================

def create_hand_containers() -> list[ObjectDefinition]:
    """
    Create the left and right hand containers.

    Each hand holds one item in general storage (unbounded weight) and has
    five finger slots for rings.
    """
    def finger_slots() -> list[Slot]:
        return [
            Slot(id=slot_id, name=name, max_weight=0.1, width=1, height=1, depth=1)
            for slot_id, name in FINGER_SLOTS
        ]

    return [
        ObjectDefinition(
            id=hand_id,
            weight=0,
            removable=False,
            description=description,
            traits=[CONTAINER_TRAIT],
            contains=[],
            slots=finger_slots(),
            max_weight=None,
            max_items=1,
        )
        for hand_id, description in ((LEFT_HAND, "Left hand"), (RIGHT_HAND, "Right hand"))
    ]


# =============================================================================
# Slots
# =============================================================================

def find_slot_in_container(container: ObjectDefinition, slot_id: str) -> Slot | None:
    for slot in container.slots or []:
        if slot.id == slot_id:
            return slot
    return None


def can_fit_in_slot(
    item: ObjectDefinition,
    slot: Slot,
    resolved_objects: Mapping[str, ObjectDefinition] | None = None,
) -> bool:
    """
    Check slot occupancy, weight ceiling, and each declared dimension.

    Axes are compared independently; an item without a dimension counts
    as 0 on that axis.
    """
    if slot.item_id is not None:
        return False

    if slot.max_weight is not None:
        if calculate_container_weight(item, resolved_objects) > slot.max_weight:
            return False

    for slot_limit, item_size in (
        (slot.width, item.width),
        (slot.height, item.height),
        (slot.depth, item.depth),
    ):
        if slot_limit is not None and (item_size or 0) > slot_limit:
            return False

    return True


def get_available_slots(container: ObjectDefinition) -> list[Slot]:
    return [slot for slot in container.slots or [] if slot.item_id is None]


def get_slot_contents(container: ObjectDefinition) -> list[Slot]:
    return [slot for slot in container.slots or [] if slot.item_id is not None]


# =============================================================================
# Weight and general storage
# =============================================================================

def calculate_container_weight(
    container: ObjectDefinition,
    resolved_objects: Mapping[str, ObjectDefinition] | None = None,
) -> float:
    """
    Total weight: own weight times quantity, plus everything in general
    storage, plus every resolvable slot occupant, all recursively.
    """
    total = container.weight * (container.quantity or 1)

    for child in container.contains or []:
        total += calculate_container_weight(child, resolved_objects)

    if resolved_objects:
        for slot in get_slot_contents(container):
            occupant = resolved_objects.get(slot.item_id)
            if occupant is not None:
                total += calculate_container_weight(occupant, resolved_objects)

    return total


def _slot_contents_weight(
    container: ObjectDefinition,
    resolved_objects: Mapping[str, ObjectDefinition] | None,
) -> float:
    if not resolved_objects:
        return 0
    total = 0.0
    for slot in get_slot_contents(container):
        occupant = resolved_objects.get(slot.item_id)
        if occupant is not None:
            total += calculate_container_weight(occupant, resolved_objects)
    return total


def can_fit_in_container(
    item: ObjectDefinition,
    container: ObjectDefinition,
    resolved_objects: Mapping[str, ObjectDefinition] | None = None,
) -> bool:
    """
    Check general storage: item count, total weight (slot contents
    included), and summed per-axis dimensions when the container declares
    all three.
    """
    existing = container.contains or []

    if container.max_items is not None and len(existing) >= container.max_items:
        return False

    if container.max_weight is not None:
        current = sum(calculate_container_weight(i, resolved_objects) for i in existing)
        incoming = calculate_container_weight(item, resolved_objects)
        if current + incoming + _slot_contents_weight(container, resolved_objects) > container.max_weight:
            return False

    if container.width is not None and container.height is not None and container.depth is not None:
        used_width = sum(i.width or 0 for i in existing)
        used_height = sum(i.height or 0 for i in existing)
        used_depth = sum(i.depth or 0 for i in existing)
        if (
            used_width + (item.width or 0) > container.width
            or used_height + (item.height or 0) > container.height
            or used_depth + (item.depth or 0) > container.depth
        ):
            return False

    return True


def calculate_inventory_weight(
    inventory: list[InventoryEntry],
    resolved_objects: Mapping[str, ObjectDefinition] | None = None,
) -> float:
    return sum(
        calculate_container_weight(entry.object_data, resolved_objects)
        for entry in inventory
        if entry.object_data is not None
    )


def get_effective_strength(strength: float, inventory: list[InventoryEntry]) -> float:
    """
    Add carrying bonuses to strength.

    Carried objects with a trait like "strength_5" add that amount.
    """
    effective = strength
    for entry in inventory:
        if entry.object_data is None:
            continue
        for trait in entry.object_data.traits:
            match = re.fullmatch(r"strength_(-?\d+)", trait)
            if match:
                effective += int(match.group(1))
    return effective


# =============================================================================
# Search
# =============================================================================

def build_objects_map(
    inventory: list[InventoryEntry],
    catalog: Mapping[str, ObjectDefinition] | None = None,
) -> dict[str, ObjectDefinition]:
    """
    Map object ids to definitions for everything carried.

    Catalog entries come first so slot occupants resolve; inventory
    objects (and their general storage) override them.
    """
    objects = dict(catalog or {})
    for entry in inventory:
        if entry.object_data is None:
            continue
        objects[entry.id] = entry.object_data
        for obj in _walk_contents(entry.object_data):
            objects[obj.id] = obj
    return objects


def _walk_contents(container: ObjectDefinition) -> Iterator[ObjectDefinition]:
    for child in container.contains or []:
        yield child
        yield from _walk_contents(child)


def iter_containers(inventory: list[InventoryEntry]) -> Iterator[ObjectDefinition]:
    """Yield every container in the inventory tree, depth-first."""
    def walk(obj: ObjectDefinition) -> Iterator[ObjectDefinition]:
        if obj.is_container():
            yield obj
        for child in obj.contains or []:
            yield from walk(child)

    for entry in inventory:
        if entry.object_data is not None:
            yield from walk(entry.object_data)


def find_inventory_entry(inventory: list[InventoryEntry], entry_id: str) -> InventoryEntry | None:
    for entry in inventory:
        if entry.id == entry_id:
            return entry
    return None


def _placeholder(item_id: str) -> ObjectDefinition:
    return ObjectDefinition(id=item_id, weight=0, description=item_id)


def _search_container(
    container: ObjectDefinition,
    item_id: str,
    resolved_objects: Mapping[str, ObjectDefinition] | None,
) -> ItemLocation | None:
    for child in container.contains or []:
        if child.id == item_id:
            return ItemLocation(item=child, container_id=container.id, slot_id=None)
        if child.is_container():
            found = _search_container(child, item_id, resolved_objects)
            if found is not None:
                return found

    for slot in get_slot_contents(container):
        if slot.item_id == item_id:
            item = (resolved_objects or {}).get(item_id) or _placeholder(item_id)
            return ItemLocation(item=item, container_id=container.id, slot_id=slot.id)

    return None


def find_item_in_inventory(
    inventory: list[InventoryEntry],
    item_id: str,
    resolved_objects: Mapping[str, ObjectDefinition] | None = None,
) -> ItemLocation | None:
    """
    Locate an item anywhere in the inventory tree.

    Top-level entries match with container_id None. Inside containers the
    search is depth-first: general storage (descending into nested
    containers) before slots. A slot occupant missing from
    resolved_objects is returned as a minimal placeholder object.
    """
    for entry in inventory:
        obj = entry.object_data
        if obj is None:
            continue
        if entry.id == item_id:
            return ItemLocation(item=obj, container_id=None, slot_id=None)
        if obj.is_container():
            found = _search_container(obj, item_id, resolved_objects)
            if found is not None:
                return found
    return None


def find_item_at(
    inventory: list[InventoryEntry],
    item_id: str,
    container_id: str | None,
    resolved_objects: Mapping[str, ObjectDefinition] | None = None,
) -> ItemLocation | None:
    """
    Locate an item in one known place.

    container_id None means the top-level entry with that id. Otherwise
    only the direct general storage and slots of that container are
    searched, never nested containers.
    """
    if container_id is None:
        entry = find_inventory_entry(inventory, item_id)
        if entry is None or entry.object_data is None:
            return None
        return ItemLocation(item=entry.object_data, container_id=None)

    container = find_container(inventory, container_id)
    if container is None:
        return None
    for child in container.contains or []:
        if child.id == item_id:
            return ItemLocation(item=child, container_id=container.id)
    for slot in get_slot_contents(container):
        if slot.item_id == item_id:
            item = (resolved_objects or {}).get(item_id) or _placeholder(item_id)
            return ItemLocation(item=item, container_id=container.id, slot_id=slot.id)
    return None


def get_all_items_with_containers(
    inventory: list[InventoryEntry],
    resolved_objects: Mapping[str, ObjectDefinition] | None = None,
) -> list[ItemLocation]:
    """List every carried item with where it sits, for display."""
    items: list[ItemLocation] = []

    def collect(container: ObjectDefinition) -> None:
        for child in container.contains or []:
            items.append(ItemLocation(item=child, container_id=container.id))
            if child.is_container():
                collect(child)
        for slot in get_slot_contents(container):
            item = (resolved_objects or {}).get(slot.item_id) or _placeholder(slot.item_id)
            items.append(ItemLocation(item=item, container_id=container.id, slot_id=slot.id))

    for entry in inventory:
        obj = entry.object_data
        if obj is None:
            continue
        if obj.is_container():
            collect(obj)
        else:
            items.append(ItemLocation(item=obj, container_id=None))
    return items


def find_container(inventory: list[InventoryEntry], container_id: str) -> ObjectDefinition | None:
    for container in iter_containers(inventory):
        if container.id == container_id:
            return container
    return None


def _normalize(term: str) -> str:
    return re.sub(r"[\s\-_]", "", term.lower())


def find_container_by_name(inventory: list[InventoryEntry], term: str) -> ObjectDefinition | None:
    """
    Find a container whose id matches term.

    Passes, in order: exact id, case-insensitive id, normalized id
    ("right hand" == "right-hand").
    """
    containers = list(iter_containers(inventory))
    lowered = term.lower()
    normalized = _normalize(term)

    for container in containers:
        if container.id == term:
            return container
    for container in containers:
        if container.id.lower() == lowered:
            return container
    for container in containers:
        if _normalize(container.id) == normalized:
            return container
    return None


def find_container_fuzzy(inventory: list[InventoryEntry], term: str) -> ObjectDefinition | None:
    """
    Find a container by a player-typed name.

    Id matches (find_container_by_name) win; otherwise the first container
    whose description contains the term, or is contained in it.
    """
    found = find_container_by_name(inventory, term)
    if found is not None:
        return found

    lowered = term.lower()
    normalized = _normalize(term)
    for container in iter_containers(inventory):
        description = container.description or ""
        if lowered in description.lower():
            return container
        normalized_description = _normalize(description)
        if normalized_description and (
            normalized in normalized_description or normalized_description in normalized
        ):
            return container
    return None


def contains_container(container: ObjectDefinition, other_id: str) -> bool:
    """True if other_id is stored anywhere inside container."""
    for child in container.contains or []:
        if child.id == other_id or contains_container(child, other_id):
            return True
    return any(slot.item_id == other_id for slot in container.slots or [])


# =============================================================================
# Copy-on-write updates
# =============================================================================

def remove_from_container(
    container: ObjectDefinition,
    item_id: str,
    slot_id: str | None = None,
) -> ObjectDefinition:
    """Return container with the item cleared from slot_id, or spliced from general storage."""
    if slot_id is not None:
        return container.with_slots([
            slot.with_item(None) if slot.id == slot_id and slot.item_id == item_id else slot
            for slot in container.slots or []
        ])
    contains = list(container.contains or [])
    for index, child in enumerate(contains):
        if child.id == item_id:
            del contains[index]
            break
    return container.with_contains(contains)


def add_to_container(
    container: ObjectDefinition,
    item: ObjectDefinition,
    slot_id: str | None = None,
) -> ObjectDefinition:
    """Return container with item placed in slot_id, or appended to general storage."""
    if slot_id is not None:
        return container.with_slots([
            slot.with_item(item.id) if slot.id == slot_id else slot
            for slot in container.slots or []
        ])
    return container.with_contains(list(container.contains or []) + [item])


def _replace_nested(obj: ObjectDefinition, updated: ObjectDefinition) -> ObjectDefinition:
    if not obj.contains:
        return obj
    children = [
        updated if child.id == updated.id else _replace_nested(child, updated)
        for child in obj.contains
    ]
    if all(new is old for new, old in zip(children, obj.contains)):
        return obj
    return obj.with_contains(children)


def replace_container(inventory: list[InventoryEntry], updated: ObjectDefinition) -> list[InventoryEntry]:
    """Return a new inventory where the container with updated.id is swapped in, at any depth."""
    result = []
    for entry in inventory:
        obj = entry.object_data
        if obj is None:
            result.append(entry)
        elif entry.id == updated.id:
            result.append(entry.with_object(updated))
        else:
            new_obj = _replace_nested(obj, updated)
            result.append(entry if new_obj is obj else entry.with_object(new_obj))
    return result
