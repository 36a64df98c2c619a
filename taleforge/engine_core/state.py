"""
Game State - Immutable world snapshots.

Design principles:
- Immutable: every mutator returns a new instance
- Structural sharing: untouched parts are reused, not copied
- Serializable: see persistence.schemas for the save format

CharacterState.stats is derived from base_stats and effects; the turn
pipeline recomputes it whenever either changes.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Mapping

from ..content.definitions import (
    CharacterTemplate, GameContent, InventoryEntry, ObjectDefinition, StatBlock,
)
from .container import create_hand_containers
from .effects import Effect, EffectManager
from .stats import StatCalculator


class LogType(str, Enum):
    """Kinds of log lines."""
    NARRATIVE = "narrative"
    MECHANIC = "mechanic"
    EFFECT = "effect"


@dataclass(frozen=True)
class LogEntry:
    """One line of the game log."""
    turn: int
    text: str
    type: LogType = LogType.NARRATIVE


@dataclass(frozen=True)
class CharacterState:
    """
    State for a single character.

    traits and flags are frozensets; inventory always holds the two hand
    containers (see container.create_hand_containers).
    """
    id: str
    name: str
    base_stats: StatBlock = field(default_factory=dict)
    stats: StatBlock = field(default_factory=dict)
    traits: frozenset[str] = frozenset()
    flags: frozenset[str] = frozenset()
    inventory: list[InventoryEntry] = field(default_factory=list)
    effects: list[Effect] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        character_id: str,
        name: str,
        base_stats: Mapping[str, float] | None = None,
        traits: Iterable[str] = (),
        flags: Iterable[str] = (),
        inventory: Iterable[InventoryEntry] = (),
        with_hands: bool = True,
    ) -> CharacterState:
        """Create a character whose stats start equal to its base stats."""
        entries = list(inventory)
        if with_hands:
            present = {entry.id for entry in entries}
            for hand in create_hand_containers():
                if hand.id not in present:
                    entries.append(InventoryEntry(id=hand.id, quantity=1, object_data=hand))

        stats = dict(base_stats or {})
        return cls(
            id=character_id,
            name=name,
            base_stats=dict(stats),
            stats=stats,
            traits=frozenset(traits),
            flags=frozenset(flags),
            inventory=entries,
        )

    @classmethod
    def from_template(cls, template: CharacterTemplate) -> CharacterState:
        return cls.create(
            template.id,
            template.name,
            base_stats=template.base_stats,
            traits=template.traits,
            flags=template.flags,
            inventory=template.inventory,
        )

    def has_effect(self, effect_id: str) -> bool:
        return any(effect.id == effect_id for effect in self.effects)

    def get_inventory_entry(self, entry_id: str) -> InventoryEntry | None:
        for entry in self.inventory:
            if entry.id == entry_id:
                return entry
        return None

    def with_base_stats(self, base_stats: StatBlock) -> CharacterState:
        return replace(self, base_stats=dict(base_stats))

    def with_stats(self, stats: StatBlock) -> CharacterState:
        return replace(self, stats=dict(stats))

    def with_traits(self, traits: Iterable[str]) -> CharacterState:
        return replace(self, traits=frozenset(traits))

    def with_flags(self, flags: Iterable[str]) -> CharacterState:
        return replace(self, flags=frozenset(flags))

    def with_inventory(self, inventory: list[InventoryEntry]) -> CharacterState:
        return replace(self, inventory=list(inventory))

    def with_effects(self, effects: list[Effect]) -> CharacterState:
        return replace(self, effects=list(effects))


@dataclass(frozen=True)
class WorldState:
    """World-wide flags and the turn counter."""
    global_flags: frozenset[str] = frozenset()
    visited_scenes: frozenset[str] = frozenset()
    turn: int = 0

    def with_flags(self, flags: Iterable[str]) -> WorldState:
        return replace(self, global_flags=frozenset(flags))

    def with_visited(self, scene_id: str) -> WorldState:
        if scene_id in self.visited_scenes:
            return self
        return replace(self, visited_scenes=self.visited_scenes | {scene_id})

    def next_turn(self) -> WorldState:
        return replace(self, turn=self.turn + 1)


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    This is the snapshot the pipeline operates on. All changes go through
    the effect applier and the reducer.
    """
    characters: dict[str, CharacterState] = field(default_factory=dict)
    world: WorldState = field(default_factory=WorldState)
    current_scene_id: str = ""

    # Scene id -> objects lying in that scene
    scene_objects: dict[str, list[ObjectDefinition]] = field(default_factory=dict)

    # Object id -> current state id (None = untracked)
    object_states: dict[str, str | None] = field(default_factory=dict)

    # Object id -> definition, used to resolve slot occupants
    object_catalog: dict[str, ObjectDefinition] = field(default_factory=dict)

    # History (for replay and saves)
    conversation_history: list[dict[str, Any]] = field(default_factory=list)
    action_history: list[Any] = field(default_factory=list)  # ActionIntent
    log: list[LogEntry] = field(default_factory=list)

    # Random seed for determinism
    rng_seed: int | None = None

    @classmethod
    def create(
        cls,
        characters: Iterable[CharacterState],
        current_scene_id: str,
        scene_objects: Mapping[str, list[ObjectDefinition]] | None = None,
        rng_seed: int | None = None,
    ) -> GameState:
        """
        Create the initial snapshot.

        Every scene object (and anything nested in its general storage) that
        declares a default state has that state recorded in object_states.
        The starting scene is marked visited.
        """
        characters = list(characters)
        scene_objects = {scene_id: list(objs) for scene_id, objs in (scene_objects or {}).items()}
        object_states: dict[str, str | None] = {}
        catalog: dict[str, ObjectDefinition] = {}

        for objects in scene_objects.values():
            for obj in _walk_objects(objects):
                catalog.setdefault(obj.id, obj)
                if obj.default_state is not None:
                    object_states[obj.id] = obj.default_state

        for character in characters:
            for entry in character.inventory:
                if entry.object_data is None:
                    continue
                for obj in _walk_objects([entry.object_data]):
                    catalog.setdefault(obj.id, obj)
                    if obj.default_state is not None:
                        object_states.setdefault(obj.id, obj.default_state)

        return cls(
            characters={character.id: character for character in characters},
            world=WorldState(visited_scenes=frozenset({current_scene_id})),
            current_scene_id=current_scene_id,
            scene_objects=scene_objects,
            object_states=object_states,
            object_catalog=catalog,
            rng_seed=rng_seed,
        )

    @classmethod
    def from_content(cls, content: GameContent, rng_seed: int | None = None) -> GameState:
        """
        Create the initial snapshot for a loaded game.

        Starting effects declared on character templates are applied and
        stats computed, so the snapshot is consistent before the first turn.
        """
        effect_manager = EffectManager(content.effect_definitions)
        calculator = StatCalculator()
        characters = []
        for template in content.characters:
            character = CharacterState.from_template(template)
            for effect_id in template.effects:
                character = effect_manager.apply_effect(character, effect_id)
            characters.append(calculator.update_character_stats(character))

        return cls.create(
            characters=characters,
            current_scene_id=content.start_scene_id,
            scene_objects={scene_id: list(scene.objects) for scene_id, scene in content.scenes.items()},
            rng_seed=rng_seed,
        )

    @property
    def turn(self) -> int:
        return self.world.turn

    def get_character(self, character_id: str) -> CharacterState | None:
        return self.characters.get(character_id)

    def get_object_state(self, object_id: str) -> str | None:
        return self.object_states.get(object_id)

    def get_scene_objects(self, scene_id: str | None = None) -> list[ObjectDefinition]:
        return self.scene_objects.get(scene_id or self.current_scene_id, [])

    def find_scene_object(self, object_id: str, scene_id: str | None = None) -> ObjectDefinition | None:
        for obj in self.get_scene_objects(scene_id):
            if obj.id == object_id:
                return obj
        return None

    def with_character(self, character: CharacterState) -> GameState:
        """Return new state with one character replaced."""
        characters = dict(self.characters)
        characters[character.id] = character
        return self._copy_with(characters=characters)

    def with_world(self, world: WorldState) -> GameState:
        return self._copy_with(world=world)

    def with_scene_objects(self, scene_id: str, objects: list[ObjectDefinition]) -> GameState:
        scene_objects = dict(self.scene_objects)
        scene_objects[scene_id] = list(objects)
        return self._copy_with(scene_objects=scene_objects)

    def with_object_state(self, object_id: str, state_id: str | None) -> GameState:
        object_states = dict(self.object_states)
        object_states[object_id] = state_id
        return self._copy_with(object_states=object_states)

    def with_catalog_entry(self, obj: ObjectDefinition) -> GameState:
        catalog = dict(self.object_catalog)
        catalog[obj.id] = obj
        return self._copy_with(object_catalog=catalog)

    def with_log(self, *entries: LogEntry) -> GameState:
        if not entries:
            return self
        return self._copy_with(log=list(self.log) + list(entries))

    def with_action(self, intent: Any) -> GameState:
        return self._copy_with(action_history=list(self.action_history) + [intent])

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


def _walk_objects(objects: Iterable[ObjectDefinition]):
    """Yield objects and everything in their general storage, depth-first."""
    for obj in objects:
        yield obj
        if obj.contains:
            yield from _walk_objects(obj.contains)
