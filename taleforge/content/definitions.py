"""
Content Definitions - Authoring-time templates for world content.

These are the static shapes the engine reads:
- EffectDefinition: template from which Effect instances are created
- ObjectDefinition: an item, a piece of scenery, or a container
- Slot: a named, single-occupancy storage location within a container
- StateDef: one state of an object's small state machine
- InventoryEntry: the unit stored in a character's inventory list
- SceneDefinition / SceneExit: locations and the ways between them
- CharacterTemplate, GameContent: what a game declares at load time

All of them are frozen. "Changing" an object means building a new one
with the with_* helpers.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .payload import EffectPayload


STAT_NAMES = ("health", "willpower", "perception", "reputation", "strength", "agility")

CONTAINER_TRAIT = "container"

# A partial stat block: any subset of STAT_NAMES mapped to a delta or value
StatBlock = dict[str, float]


@dataclass(frozen=True)
class EffectDefinition:
    """
    Template for a status effect.

    Built-in definitions carry builtin=True and always shadow
    game-specific definitions with the same id.
    """
    id: str
    name: str
    description: str = ""
    stat_modifiers: StatBlock | None = None
    per_turn_modifiers: StatBlock | None = None
    duration: int | None = None  # None = permanent
    builtin: bool = False
    application_description: str | None = None


@dataclass(frozen=True)
class Slot:
    """
    A named slot that holds at most one item.

    Fit is declarative: a weight ceiling and independent per-axis
    dimension ceilings. Absent constraints impose no limit.
    """
    id: str
    name: str | None = None
    max_weight: float | None = None
    width: float | None = None
    height: float | None = None
    depth: float | None = None
    item_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.item_id is None

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def with_item(self, item_id: str | None) -> Slot:
        """Return new slot holding item_id (None to clear)."""
        return replace(self, item_id=item_id)


@dataclass(frozen=True)
class StateDef:
    """One declared state of an object (e.g. a lantern's "on")."""
    id: str
    action_names: list[str] = field(default_factory=list)
    description: str | None = None
    effects: EffectPayload | None = None


@dataclass(frozen=True)
class ObjectDefinition:
    """
    An object in the world: item, scenery, or container.

    General storage lives in `contains`; named storage lives in `slots`,
    where each slot references its occupant by id only.
    """
    id: str
    weight: float = 0
    perception: float = 0  # Perception required to notice it
    removable: bool = True
    description: str = ""
    traits: list[str] = field(default_factory=list)
    quantity: int = 1

    # Storage
    contains: list[ObjectDefinition] | None = None
    slots: list[Slot] | None = None
    max_weight: float | None = None
    max_items: int | None = None

    # Dimensions, used for slot and container fit checks
    width: float | None = None
    height: float | None = None
    depth: float | None = None

    # State machine
    states: list[StateDef] | None = None
    default_state: str | None = None

    # Applied when picked up, inverted when dropped
    carry_effects: EffectPayload | None = None

    def is_container(self) -> bool:
        return CONTAINER_TRAIT in self.traits

    def has_trait(self, trait: str) -> bool:
        return trait in self.traits

    def is_visible(self, perception: float) -> bool:
        """Check if object is noticed at the given perception."""
        return self.perception <= perception

    def get_state(self, state_id: str) -> StateDef | None:
        """Find a declared state by id."""
        for state in self.states or []:
            if state.id == state_id:
                return state
        return None

    def get_state_description(self, state_id: str | None) -> str | None:
        if state_id is None:
            return None
        state = self.get_state(state_id)
        return state.description if state else None

    def with_contains(self, contains: list[ObjectDefinition]) -> ObjectDefinition:
        """Return new object with replaced general storage."""
        return replace(self, contains=list(contains))

    def with_slots(self, slots: list[Slot]) -> ObjectDefinition:
        """Return new object with replaced slots."""
        return replace(self, slots=list(slots))

    def with_quantity(self, quantity: int) -> ObjectDefinition:
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class InventoryEntry:
    """A top-level entry in a character's inventory."""
    id: str
    quantity: int = 1
    object_data: ObjectDefinition | None = None

    def with_object(self, object_data: ObjectDefinition) -> InventoryEntry:
        return replace(self, object_data=object_data)

    def with_quantity(self, quantity: int) -> InventoryEntry:
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class SceneExit:
    """A way out of a scene."""
    direction: str
    next_scene_id: str
    description: str | None = None


@dataclass(frozen=True)
class SceneDefinition:
    """A location: narrative text, the objects placed there, and its exits."""
    id: str
    narrative: str = ""
    objects: list[ObjectDefinition] = field(default_factory=list)
    exits: list[SceneExit] = field(default_factory=list)

    def get_exit(self, direction: str) -> SceneExit | None:
        direction = direction.lower()
        for scene_exit in self.exits:
            if scene_exit.direction.lower() == direction:
                return scene_exit
        return None


@dataclass(frozen=True)
class CharacterTemplate:
    """Starting shape of a character declared by game content."""
    id: str
    name: str
    base_stats: StatBlock = field(default_factory=dict)
    traits: list[str] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    inventory: list[InventoryEntry] = field(default_factory=list)
    effects: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GameContent:
    """Everything a game ships: scenes, characters and its effect definitions."""
    id: str
    name: str
    start_scene_id: str
    scenes: dict[str, SceneDefinition] = field(default_factory=dict)
    characters: list[CharacterTemplate] = field(default_factory=list)
    effect_definitions: dict[str, EffectDefinition] = field(default_factory=dict)
    description: str = ""
