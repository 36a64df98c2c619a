"""
Pydantic Schemas for Saves - The on-disk shape of a GameState.

Every model validates straight from the frozen engine dataclasses
(from_attributes) and converts back with to_domain(). Sets (traits, flags,
visited scenes) are written as sorted lists and revived as frozensets.
Objects reuse the content models, so containers round-trip with their
contains/slots structure intact.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from ..content.models import InventoryEntryModel, ObjectModel, StatValues
from ..engine_core.action import ActionIntent
from ..engine_core.effects import Effect
from ..engine_core.state import CharacterState, GameState, LogEntry, LogType, WorldState


def _sorted_list(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return value


# =============================================================================
# Characters
# =============================================================================

class EffectModel(BaseModel):
    """An applied effect instance."""
    id: str
    source: str
    duration: Optional[int] = None
    stat_modifiers: Optional[StatValues] = None
    per_turn_modifiers: Optional[StatValues] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True}

    def to_domain(self) -> Effect:
        return Effect(
            id=self.id,
            source=self.source,
            duration=self.duration,
            stat_modifiers=dict(self.stat_modifiers) if self.stat_modifiers is not None else None,
            per_turn_modifiers=(
                dict(self.per_turn_modifiers) if self.per_turn_modifiers is not None else None
            ),
            metadata=dict(self.metadata),
        )


class CharacterModel(BaseModel):
    id: str
    name: str
    base_stats: StatValues = Field(default_factory=dict)
    stats: StatValues = Field(default_factory=dict)
    traits: list[str] = Field(default_factory=list)
    flags: list[str] = Field(default_factory=list)
    inventory: list[InventoryEntryModel] = Field(default_factory=list)
    effects: list[EffectModel] = Field(default_factory=list)

    model_config = {"from_attributes": True}

    @field_validator("traits", "flags", mode="before")
    @classmethod
    def sort_sets(cls, value: Any) -> Any:
        return _sorted_list(value)

    def to_domain(self) -> CharacterState:
        return CharacterState(
            id=self.id,
            name=self.name,
            base_stats=dict(self.base_stats),
            stats=dict(self.stats),
            traits=frozenset(self.traits),
            flags=frozenset(self.flags),
            inventory=[entry.to_domain() for entry in self.inventory],
            effects=[effect.to_domain() for effect in self.effects],
        )


# =============================================================================
# World and history
# =============================================================================

class WorldModel(BaseModel):
    global_flags: list[str] = Field(default_factory=list)
    visited_scenes: list[str] = Field(default_factory=list)
    turn: int = 0

    model_config = {"from_attributes": True}

    @field_validator("global_flags", "visited_scenes", mode="before")
    @classmethod
    def sort_sets(cls, value: Any) -> Any:
        return _sorted_list(value)

    def to_domain(self) -> WorldState:
        return WorldState(
            global_flags=frozenset(self.global_flags),
            visited_scenes=frozenset(self.visited_scenes),
            turn=self.turn,
        )


class LogEntryModel(BaseModel):
    turn: int
    text: str
    type: LogType = LogType.NARRATIVE

    model_config = {"from_attributes": True}

    def to_domain(self) -> LogEntry:
        return LogEntry(turn=self.turn, text=self.text, type=self.type)


class IntentModel(BaseModel):
    """A recorded intent, one line of history.jsonl."""
    actor_id: str
    type: str
    scene_id: str
    target_id: Optional[str] = None
    item_id: Optional[str] = None
    params: dict[str, Any] = Field(default_factory=dict)
    text: Optional[str] = None
    timestamp: Optional[float] = None

    model_config = {"from_attributes": True}

    def to_domain(self) -> ActionIntent:
        return ActionIntent(
            actor_id=self.actor_id,
            type=self.type,
            scene_id=self.scene_id,
            target_id=self.target_id,
            item_id=self.item_id,
            params=dict(self.params),
            text=self.text,
            timestamp=self.timestamp,
        )


# =============================================================================
# Snapshot
# =============================================================================

class GameStateModel(BaseModel):
    """Complete snapshot, written to snapshot.json."""
    characters: dict[str, CharacterModel] = Field(default_factory=dict)
    world: WorldModel = Field(default_factory=WorldModel)
    current_scene_id: str
    scene_objects: dict[str, list[ObjectModel]] = Field(default_factory=dict)
    object_states: dict[str, Optional[str]] = Field(default_factory=dict)
    object_catalog: dict[str, ObjectModel] = Field(default_factory=dict)
    conversation_history: list[dict[str, Any]] = Field(default_factory=list)
    action_history: list[IntentModel] = Field(default_factory=list)
    log: list[LogEntryModel] = Field(default_factory=list)
    rng_seed: Optional[int] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_domain(cls, state: GameState) -> "GameStateModel":
        return cls.model_validate(state, from_attributes=True)

    def to_domain(self) -> GameState:
        return GameState(
            characters={
                character_id: character.to_domain()
                for character_id, character in self.characters.items()
            },
            world=self.world.to_domain(),
            current_scene_id=self.current_scene_id,
            scene_objects={
                scene_id: [obj.to_domain() for obj in objects]
                for scene_id, objects in self.scene_objects.items()
            },
            object_states=dict(self.object_states),
            object_catalog={
                object_id: obj.to_domain() for object_id, obj in self.object_catalog.items()
            },
            conversation_history=[dict(item) for item in self.conversation_history],
            action_history=[intent.to_domain() for intent in self.action_history],
            log=[entry.to_domain() for entry in self.log],
            rng_seed=self.rng_seed,
        )


class SaveMetadataModel(BaseModel):
    """Summary written to metadata.json and returned by list_saves()."""
    id: str = Field(description="Save folder name, e.g. demo_1709912345678")
    game_id: str
    timestamp: int = Field(description="Milliseconds since the epoch")
    turn: int
    character_name: str
    current_scene_id: str
