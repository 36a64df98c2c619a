"""
Move Command - Leaves the current scene through one of its exits.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from ..engine_core.action import ActionIntent, Result, SceneContext
from .base import Command

if TYPE_CHECKING:
    from ..engine_core.effects import EffectManager
    from ..engine_core.state import GameState
    from ..engine_core.stats import StatCalculator


class MoveCommand(Command):
    command_id = "move"

    def resolve(
        self,
        state: GameState,
        intent: ActionIntent,
        context: SceneContext,
        stat_calculator: StatCalculator | None = None,
        effect_manager: EffectManager | None = None,
    ) -> Result:
        direction = intent.target_id
        if not direction:
            return Result.failed("Move where?")

        scene_exit = context.find_exit(direction)
        if scene_exit is None:
            return Result.failed(f"You can't go {direction.upper()} from here.")

        if scene_exit.description:
            narrative = f"You move through {scene_exit.description}."
        else:
            narrative = f"You move {scene_exit.direction.upper()}."
        return Result.succeeded(narrative, next_scene_id=scene_exit.next_scene_id)
