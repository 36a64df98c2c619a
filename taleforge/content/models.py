"""
Pydantic Models for Content - The JSON shape of objects, effects and scenes.

These models are the wire format for authored content files and for the
object/effect parts of save snapshots. Every model validates from the
frozen domain dataclasses (from_attributes) and converts back with
to_domain().
"""

from typing import Any, Optional, Union
from pydantic import BaseModel, Field

from .definitions import (
    CharacterTemplate, EffectDefinition, GameContent, InventoryEntry,
    ObjectDefinition, SceneDefinition, SceneExit, Slot, StateDef,
)
from .payload import EffectPayload, ObjectStateChange, Target, TargetType, TransferItem


# Keep ints as ints on round trip
StatValues = dict[str, Union[int, float]]


# =============================================================================
# Payloads
# =============================================================================

class TargetModel(BaseModel):
    """Tagged payload target."""
    type: TargetType
    id: Optional[str] = None

    model_config = {"from_attributes": True}

    def to_domain(self) -> Target:
        return Target(type=self.type, id=self.id)


class TransferItemModel(BaseModel):
    item_id: str
    from_container_id: Optional[str] = None
    to_container_id: str
    slot_id: Optional[str] = None

    model_config = {"from_attributes": True}

    def to_domain(self) -> TransferItem:
        return TransferItem(
            item_id=self.item_id,
            from_container_id=self.from_container_id,
            to_container_id=self.to_container_id,
            slot_id=self.slot_id,
        )


class ObjectStateChangeModel(BaseModel):
    object_id: str
    state_id: str

    model_config = {"from_attributes": True}

    def to_domain(self) -> ObjectStateChange:
        return ObjectStateChange(object_id=self.object_id, state_id=self.state_id)


class EffectPayloadModel(BaseModel):
    """Declared deltas: stats, traits, flags, effects and inventory moves."""
    target: Optional[TargetModel] = None
    stats: Optional[StatValues] = None
    add_traits: list[str] = Field(default_factory=list)
    remove_traits: list[str] = Field(default_factory=list)
    add_flags: list[str] = Field(default_factory=list)
    remove_flags: list[str] = Field(default_factory=list)
    add_effects: list[str] = Field(default_factory=list)
    remove_effects: list[str] = Field(default_factory=list)
    add_items: list["InventoryEntryModel"] = Field(default_factory=list)
    remove_items: list["InventoryEntryModel"] = Field(default_factory=list)
    transfer_item: Optional[TransferItemModel] = None
    set_object_state: Optional[ObjectStateChangeModel] = None

    model_config = {"from_attributes": True}

    def to_domain(self) -> EffectPayload:
        return EffectPayload(
            target=self.target.to_domain() if self.target else None,
            stats=dict(self.stats) if self.stats is not None else None,
            add_traits=list(self.add_traits),
            remove_traits=list(self.remove_traits),
            add_flags=list(self.add_flags),
            remove_flags=list(self.remove_flags),
            add_effects=list(self.add_effects),
            remove_effects=list(self.remove_effects),
            add_items=[entry.to_domain() for entry in self.add_items],
            remove_items=[entry.to_domain() for entry in self.remove_items],
            transfer_item=self.transfer_item.to_domain() if self.transfer_item else None,
            set_object_state=self.set_object_state.to_domain() if self.set_object_state else None,
        )


# =============================================================================
# Objects
# =============================================================================

class SlotModel(BaseModel):
    """Named single-occupancy storage."""
    id: str
    name: Optional[str] = None
    max_weight: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    depth: Optional[float] = None
    item_id: Optional[str] = None

    model_config = {"from_attributes": True}

    def to_domain(self) -> Slot:
        return Slot(
            id=self.id,
            name=self.name,
            max_weight=self.max_weight,
            width=self.width,
            height=self.height,
            depth=self.depth,
            item_id=self.item_id,
        )


class StateDefModel(BaseModel):
    id: str
    action_names: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    effects: Optional[EffectPayloadModel] = None

    model_config = {"from_attributes": True}

    def to_domain(self) -> StateDef:
        return StateDef(
            id=self.id,
            action_names=list(self.action_names),
            description=self.description,
            effects=self.effects.to_domain() if self.effects else None,
        )


class ObjectModel(BaseModel):
    """An item, piece of scenery, or container, with everything stored in it."""
    id: str
    weight: float = 0
    perception: float = 0
    removable: bool = True
    description: str = ""
    traits: list[str] = Field(default_factory=list)
    quantity: int = 1
    contains: Optional[list["ObjectModel"]] = None
    slots: Optional[list[SlotModel]] = None
    max_weight: Optional[float] = None
    max_items: Optional[int] = None
    width: Optional[float] = None
    height: Optional[float] = None
    depth: Optional[float] = None
    states: Optional[list[StateDefModel]] = None
    default_state: Optional[str] = None
    carry_effects: Optional[EffectPayloadModel] = None

    model_config = {"from_attributes": True}

    def to_domain(self) -> ObjectDefinition:
        return ObjectDefinition(
            id=self.id,
            weight=self.weight,
            perception=self.perception,
            removable=self.removable,
            description=self.description,
            traits=list(self.traits),
            quantity=self.quantity,
            contains=[child.to_domain() for child in self.contains] if self.contains is not None else None,
            slots=[slot.to_domain() for slot in self.slots] if self.slots is not None else None,
            max_weight=self.max_weight,
            max_items=self.max_items,
            width=self.width,
            height=self.height,
            depth=self.depth,
            states=[state.to_domain() for state in self.states] if self.states is not None else None,
            default_state=self.default_state,
            carry_effects=self.carry_effects.to_domain() if self.carry_effects else None,
        )


class InventoryEntryModel(BaseModel):
    id: str
    quantity: int = 1
    object_data: Optional[ObjectModel] = None

    model_config = {"from_attributes": True}

    def to_domain(self) -> InventoryEntry:
        return InventoryEntry(
            id=self.id,
            quantity=self.quantity,
            object_data=self.object_data.to_domain() if self.object_data else None,
        )


# =============================================================================
# Effects, scenes, and game bundles
# =============================================================================

class EffectDefinitionModel(BaseModel):
    id: str
    name: str
    description: str = ""
    stat_modifiers: Optional[StatValues] = None
    per_turn_modifiers: Optional[StatValues] = None
    duration: Optional[int] = Field(None, description="Turns until expiry; omit for permanent")
    builtin: bool = False
    application_description: Optional[str] = None

    model_config = {"from_attributes": True}

    def to_domain(self) -> EffectDefinition:
        return EffectDefinition(
            id=self.id,
            name=self.name,
            description=self.description,
            stat_modifiers=dict(self.stat_modifiers) if self.stat_modifiers is not None else None,
            per_turn_modifiers=(
                dict(self.per_turn_modifiers) if self.per_turn_modifiers is not None else None
            ),
            duration=self.duration,
            builtin=self.builtin,
            application_description=self.application_description,
        )


class SceneExitModel(BaseModel):
    direction: str
    next_scene_id: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class SceneModel(BaseModel):
    id: str
    narrative: str = ""
    objects: list[ObjectModel] = Field(default_factory=list)
    exits: list[SceneExitModel] = Field(default_factory=list)

    model_config = {"from_attributes": True}

    def to_domain(self) -> SceneDefinition:
        return SceneDefinition(
            id=self.id,
            narrative=self.narrative,
            objects=[obj.to_domain() for obj in self.objects],
            exits=[
                SceneExit(
                    direction=scene_exit.direction,
                    next_scene_id=scene_exit.next_scene_id,
                    description=scene_exit.description,
                )
                for scene_exit in self.exits
            ],
        )


class CharacterTemplateModel(BaseModel):
    id: str
    name: str
    base_stats: StatValues = Field(default_factory=dict)
    traits: list[str] = Field(default_factory=list)
    flags: list[str] = Field(default_factory=list)
    inventory: list[InventoryEntryModel] = Field(default_factory=list)
    effects: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}

    def to_domain(self) -> CharacterTemplate:
        return CharacterTemplate(
            id=self.id,
            name=self.name,
            base_stats=dict(self.base_stats),
            traits=list(self.traits),
            flags=list(self.flags),
            inventory=[entry.to_domain() for entry in self.inventory],
            effects=list(self.effects),
        )


class GameContentModel(BaseModel):
    """A complete content file."""
    id: str
    name: str
    description: str = ""
    start_scene_id: str
    scenes: list[SceneModel] = Field(default_factory=list)
    characters: list[CharacterTemplateModel] = Field(default_factory=list)
    effects: list[EffectDefinitionModel] = Field(default_factory=list)

    def to_domain(self) -> GameContent:
        return GameContent(
            id=self.id,
            name=self.name,
            description=self.description,
            start_scene_id=self.start_scene_id,
            scenes={scene.id: scene.to_domain() for scene in self.scenes},
            characters=[character.to_domain() for character in self.characters],
            effect_definitions={effect.id: effect.to_domain() for effect in self.effects},
        )


EffectPayloadModel.model_rebuild()
ObjectModel.model_rebuild()


def payload_from_dict(data: dict[str, Any]) -> EffectPayload:
    """Parse a payload written as plain JSON data."""
    return EffectPayloadModel.model_validate(data).to_domain()


def object_from_dict(data: dict[str, Any]) -> ObjectDefinition:
    """Parse an object written as plain JSON data."""
    return ObjectModel.model_validate(data).to_domain()
