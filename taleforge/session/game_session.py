"""
Game Session - Drives one play-through of a loaded game.

The session owns the current snapshot and replaces it after every turn,
so turns are strictly sequential: one intent is resolved to completion
before the next is accepted.

Usage:
    session = GameSession(content)
    turn = session.process(session.intent("pickup", item_id="lantern"))
    print(turn.narrative)
    save_id = session.save()
"""

from __future__ import annotations
from pathlib import Path
from typing import Any
import logging

from ..commands.registry import CommandRegistry, default_registry
from ..content.definitions import GameContent, SceneDefinition
from ..content.loader import load_game
from ..engine_core.action import ActionIntent, SceneContext, TurnResult
from ..engine_core.effect_applier import DEFAULT_ACTOR_ID
from ..engine_core.effects import EffectManager
from ..engine_core.object_states import describe_object
from ..engine_core.reducer import TurnProcessor
from ..engine_core.state import GameState, LogEntry
from ..engine_core.stats import StatCalculator
from ..persistence.save import load_save, save_game

logger = logging.getLogger(__name__)


class GameSession:
    """
    A running game.

    Holds:
    - The loaded content (scenes, characters, effect definitions)
    - The current GameState snapshot
    - The turn processor (command registry, effect manager, stat calculator)
    """

    def __init__(
        self,
        content: GameContent,
        state: GameState | None = None,
        registry: CommandRegistry | None = None,
        actor_id: str = DEFAULT_ACTOR_ID,
        rng_seed: int | None = None,
    ):
        self.content = content
        self.actor_id = actor_id
        self.effect_manager = EffectManager(content.effect_definitions)
        self.stat_calculator = StatCalculator()
        self.processor = TurnProcessor(
            registry=registry or default_registry(),
            effect_manager=self.effect_manager,
            stat_calculator=self.stat_calculator,
        )
        self.state = state if state is not None else GameState.from_content(content, rng_seed=rng_seed)

    @classmethod
    def from_games_dir(cls, games_root: str | Path, game_id: str, **kwargs: Any) -> GameSession:
        """Load a game folder and start a new session on it."""
        return cls(load_game(games_root, game_id), **kwargs)

    @classmethod
    def resume(
        cls,
        content: GameContent,
        save_id: str,
        saves_dir: str | Path | None = None,
        **kwargs: Any,
    ) -> GameSession:
        """Continue a saved game."""
        logger.info("Resuming %s from save %s", content.id, save_id)
        return cls(content, state=load_save(save_id, saves_dir), **kwargs)

    # -------------------------------------------------------------------------
    # Scene
    # -------------------------------------------------------------------------

    @property
    def scene(self) -> SceneDefinition | None:
        return self.content.scenes.get(self.state.current_scene_id)

    def scene_context(self) -> SceneContext:
        return SceneContext.from_state(self.state, self.scene)

    def look(self) -> str:
        """Describe the current scene as the actor perceives it."""
        scene = self.scene
        lines = [scene.narrative] if scene and scene.narrative else []

        actor = self.state.get_character(self.actor_id)
        perception = (
            self.stat_calculator.get_effective_stat(actor, "perception")
            if actor is not None else 0
        )
        for obj in self.state.get_scene_objects():
            if not obj.is_visible(perception):
                continue
            line = f"There is {obj.description or obj.id} here."
            state_description = obj.get_state_description(self.state.get_object_state(obj.id))
            if state_description:
                line = f"{line} {state_description}"
            lines.append(line)

        if scene and scene.exits:
            directions = ", ".join(scene_exit.direction.upper() for scene_exit in scene.exits)
            lines.append(f"Exits: {directions}")
        return "\n".join(lines)

    def inventory_lines(self) -> list[str]:
        """One line per top-level inventory entry, with what it holds."""
        actor = self.state.get_character(self.actor_id)
        if actor is None:
            return []
        lines = []
        for entry in actor.inventory:
            obj = entry.object_data
            if obj is None:
                continue
            held = [describe_object(child) for child in obj.contains or []]
            held += [f"{slot.display_name}: {slot.item_id}" for slot in obj.slots or [] if slot.item_id]
            suffix = f" ({', '.join(held)})" if held else ""
            quantity = f" x{entry.quantity}" if entry.quantity > 1 else ""
            lines.append(f"{describe_object(obj)}{quantity}{suffix}")
        return lines

    def effects_lines(self) -> list[str]:
        actor = self.state.get_character(self.actor_id)
        if actor is None:
            return []
        return self.effect_manager.describe_active_effects(actor)

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def intent(
        self,
        intent_type: str,
        target_id: str | None = None,
        item_id: str | None = None,
        text: str | None = None,
        **params: Any,
    ) -> ActionIntent:
        """Build an intent for the session's actor in the current scene."""
        return ActionIntent(
            actor_id=self.actor_id,
            type=intent_type,
            scene_id=self.state.current_scene_id,
            target_id=target_id,
            item_id=item_id,
            params=params,
            text=text,
        )

    def process(self, intent: ActionIntent) -> TurnResult:
        """Run one turn and keep the resulting snapshot."""
        turn = self.processor.process(self.state, intent, self.scene_context())
        self.state = turn.state
        return turn

    async def process_async(self, intent: ActionIntent) -> TurnResult:
        turn = await self.processor.process_async(self.state, intent, self.scene_context())
        self.state = turn.state
        return turn

    def recent_log(self, count: int = 10) -> list[LogEntry]:
        return list(self.state.log[-count:])

    # -------------------------------------------------------------------------
    # Saves
    # -------------------------------------------------------------------------

    def save(self, saves_dir: str | Path | None = None) -> str:
        return save_game(self.state, self.content.id, saves_dir)
