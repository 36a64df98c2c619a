"""
Effect Payload - Declarative state deltas.

A payload is what a command (or an object state, or an item's carry
effects) declares should happen. It never touches state itself; the
effect applier materializes it onto a new GameState.

Key design decisions:
- The target is a tagged union: TargetType.CHARACTER or TargetType.SCENE
- Numeric fields (stats) are deltas, summed into base stats
- List fields (traits, flags, effects) are set additions/removals
- Absent fields mean "no change", never "reset"
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .definitions import InventoryEntry, StatBlock


class TargetType(str, Enum):
    """What a payload is aimed at."""
    CHARACTER = "character"
    SCENE = "scene"


@dataclass(frozen=True)
class Target:
    """
    Target of a payload.

    Examples:
    - Target(TargetType.CHARACTER)             -> the acting character
    - Target(TargetType.CHARACTER, "guard")    -> another character
    - Target(TargetType.SCENE)                 -> the current scene / world
    """
    type: TargetType
    id: str | None = None

    @classmethod
    def character(cls, character_id: str | None = None) -> Target:
        return cls(type=TargetType.CHARACTER, id=character_id)

    @classmethod
    def scene(cls, scene_id: str | None = None) -> Target:
        return cls(type=TargetType.SCENE, id=scene_id)


@dataclass(frozen=True)
class TransferItem:
    """
    Move one item between containers.

    from_container_id is None when the item is a top-level inventory entry.
    slot_id is None when the destination is general storage.
    """
    item_id: str
    from_container_id: str | None
    to_container_id: str
    slot_id: str | None = None


@dataclass(frozen=True)
class ObjectStateChange:
    """Record the new state id of an object."""
    object_id: str
    state_id: str


@dataclass(frozen=True)
class EffectPayload:
    """
    The set of deltas a result declares.

    Stat values are deltas applied to base stats, not absolute values.
    """
    target: Target | None = None
    stats: StatBlock | None = None
    add_traits: list[str] = field(default_factory=list)
    remove_traits: list[str] = field(default_factory=list)
    add_flags: list[str] = field(default_factory=list)
    remove_flags: list[str] = field(default_factory=list)
    add_effects: list[str] = field(default_factory=list)
    remove_effects: list[str] = field(default_factory=list)
    # Restricts remove_effects to effects carried from this object
    effect_source_id: str | None = None

    # Inventory changes
    add_items: list[InventoryEntry] = field(default_factory=list)
    remove_items: list[InventoryEntry] = field(default_factory=list)
    transfer_item: TransferItem | None = None

    # Object state machine
    set_object_state: ObjectStateChange | None = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.stats
            or self.add_traits
            or self.remove_traits
            or self.add_flags
            or self.remove_flags
            or self.add_effects
            or self.remove_effects
            or self.add_items
            or self.remove_items
            or self.transfer_item
            or self.set_object_state
        )

    def merged_with(self, other: EffectPayload) -> EffectPayload:
        """
        Combine two payloads additively.

        Stats are summed; list fields are concatenated; single-valued
        fields from `other` win when set.
        """
        stats = dict(self.stats or {})
        for key, value in (other.stats or {}).items():
            stats[key] = stats.get(key, 0) + value
        return EffectPayload(
            target=other.target or self.target,
            stats=stats or None,
            add_traits=self.add_traits + other.add_traits,
            remove_traits=self.remove_traits + other.remove_traits,
            add_flags=self.add_flags + other.add_flags,
            remove_flags=self.remove_flags + other.remove_flags,
            add_effects=self.add_effects + other.add_effects,
            remove_effects=self.remove_effects + other.remove_effects,
            effect_source_id=other.effect_source_id or self.effect_source_id,
            add_items=self.add_items + other.add_items,
            remove_items=self.remove_items + other.remove_items,
            transfer_item=other.transfer_item or self.transfer_item,
            set_object_state=other.set_object_state or self.set_object_state,
        )

    def inverted(self) -> EffectPayload:
        """
        Return the payload that undoes this one.

        Stats are negated, additions become removals and vice versa.
        Inventory and state fields are not invertible and are dropped.
        """
        stats = {key: -value for key, value in (self.stats or {}).items()}
        return EffectPayload(
            target=self.target,
            stats=stats or None,
            add_traits=list(self.remove_traits),
            remove_traits=list(self.add_traits),
            add_flags=list(self.remove_flags),
            remove_flags=list(self.add_flags),
            add_effects=list(self.remove_effects),
            remove_effects=list(self.add_effects),
        )

    def with_target(self, target: Target | None) -> EffectPayload:
        return replace(self, target=target)
