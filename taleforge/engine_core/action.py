"""
Action System - Intents, results, and scene context.

An ActionIntent is what the player asked for. A command resolves it
against the current snapshot into a Result: an outcome, a narrative, and
the EffectPayload to apply. Results never carry state; the effect applier
turns their payload into a new GameState.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Union

from ..content.definitions import ObjectDefinition, SceneDefinition, SceneExit
from ..content.payload import EffectPayload

if TYPE_CHECKING:
    from .state import GameState


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


# Narrative is either text or a function of the post-turn state
Narrative = Union[str, Callable[["GameState"], str]]


@dataclass(frozen=True)
class ActionIntent:
    """
    A request from an actor.

    Commands interpret target_id and item_id in their own way (for
    set-state, item_id is the requested state id). Extra parameters
    (slot id, destination container, verb phrase) go in params.
    """
    actor_id: str
    type: str
    scene_id: str
    target_id: str | None = None
    item_id: str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    text: str | None = None
    timestamp: float | None = None

    def with_timestamp(self, timestamp: float) -> ActionIntent:
        return replace(self, timestamp=timestamp)

    @classmethod
    def set_state(
        cls,
        actor_id: str,
        scene_id: str,
        object_id: str | None,
        state_id: str | None = None,
        verb: str | None = None,
    ) -> ActionIntent:
        """Factory for an object state change, by state id or verb phrase."""
        params = {"verb": verb} if verb else {}
        return cls(
            actor_id=actor_id, type="set-state", scene_id=scene_id,
            target_id=object_id, item_id=state_id, params=params,
        )

    @classmethod
    def transfer(
        cls,
        actor_id: str,
        scene_id: str,
        item_id: str | None,
        container: str | None,
        slot_id: str | None = None,
    ) -> ActionIntent:
        """Factory for moving a carried item into a container or slot."""
        params = {"slot_id": slot_id} if slot_id else {}
        return cls(
            actor_id=actor_id, type="transfer", scene_id=scene_id,
            target_id=container, item_id=item_id, params=params,
        )

    @classmethod
    def pickup(cls, actor_id: str, scene_id: str, item_id: str | None) -> ActionIntent:
        return cls(actor_id=actor_id, type="pickup", scene_id=scene_id, item_id=item_id)

    @classmethod
    def drop(cls, actor_id: str, scene_id: str, item_id: str | None) -> ActionIntent:
        return cls(actor_id=actor_id, type="drop", scene_id=scene_id, item_id=item_id)

    @classmethod
    def move(cls, actor_id: str, scene_id: str, direction: str | None) -> ActionIntent:
        return cls(actor_id=actor_id, type="move", scene_id=scene_id, target_id=direction)


@dataclass(frozen=True)
class Result:
    """
    Declarative outcome of resolving an intent.

    Failures carry a narrative that names the cause and no effects.
    """
    outcome: Outcome
    narrative: Narrative = ""
    effects: EffectPayload | None = None
    next_scene_id: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    @classmethod
    def succeeded(
        cls,
        narrative: Narrative,
        effects: EffectPayload | None = None,
        next_scene_id: str | None = None,
    ) -> Result:
        return cls(
            outcome=Outcome.SUCCESS,
            narrative=narrative,
            effects=effects,
            next_scene_id=next_scene_id,
        )

    @classmethod
    def failed(cls, narrative: str) -> Result:
        return cls(outcome=Outcome.FAILURE, narrative=narrative)

    def render_narrative(self, state: GameState) -> str:
        if callable(self.narrative):
            return self.narrative(state)
        return self.narrative


@dataclass(frozen=True)
class SceneContext:
    """Read-only view of the current scene handed to commands."""
    id: str
    objects: list[ObjectDefinition] = field(default_factory=list)
    narrative: str = ""
    exits: list[SceneExit] = field(default_factory=list)

    @classmethod
    def from_state(
        cls,
        state: GameState,
        scene: SceneDefinition | None = None,
    ) -> SceneContext:
        """
        Build the context for the state's current scene.

        Objects come from the state (they change as items are picked up
        and dropped); narrative and exits come from the scene definition.
        """
        return cls(
            id=state.current_scene_id,
            objects=list(state.get_scene_objects()),
            narrative=scene.narrative if scene else "",
            exits=list(scene.exits) if scene else [],
        )

    def find_object(self, object_id: str) -> ObjectDefinition | None:
        for obj in self.objects:
            if obj.id == object_id:
                return obj
        return None

    def find_exit(self, direction: str) -> SceneExit | None:
        """Match an exit by direction (case-insensitive), then by description."""
        direction = direction.lower()
        for scene_exit in self.exits:
            if scene_exit.direction.lower() == direction:
                return scene_exit
        for scene_exit in self.exits:
            if scene_exit.description and direction in scene_exit.description.lower():
                return scene_exit
        return None


@dataclass(frozen=True)
class TurnResult:
    """What process_turn hands back: the new snapshot plus what happened."""
    state: GameState
    result: Result
    narrative: str

    @property
    def success(self) -> bool:
        return self.result.success
