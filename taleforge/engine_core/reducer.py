"""
Reducer - Runs one turn: intent in, new snapshot out.

The reducer is the single entry point for advancing the game.
All state changes of a turn go through TurnProcessor.process().

Pipeline:
1. Check the intent belongs to the current scene
2. Look up the command that handles the intent
3. Resolve it into a Result (commands only read the state)
4. Apply the Result's payload (effect_applier)
5. Turn boundary for the actor: tick effects, recompute stats,
   log effects that wore off
6. Record the intent, the narrative, and advance the turn counter

A failed Result ends the turn at step 3: the input state is returned
unchanged and the turn counter does not move.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable
import inspect
import logging
import time

from ..errors import ContentError
from .action import ActionIntent, Result, SceneContext, TurnResult
from .effect_applier import EffectApplier, worn_off_text
from .effects import EffectManager
from .state import GameState, LogEntry, LogType
from .stats import StatCalculator

if TYPE_CHECKING:
    from ..commands.base import Command
    from ..commands.registry import CommandRegistry

logger = logging.getLogger(__name__)


@dataclass
class TurnProcessor:
    """
    Processes turns against a command registry.

    Stateless - all state is in GameState.
    """
    registry: CommandRegistry | None = None
    effect_manager: EffectManager = field(default_factory=EffectManager)
    stat_calculator: StatCalculator = field(default_factory=StatCalculator)
    clock: Callable[[], float] = time.time

    def __post_init__(self):
        if self.registry is None:
            from ..commands.registry import default_registry
            self.registry = default_registry()

    def process(self, state: GameState, intent: ActionIntent, scene: SceneContext) -> TurnResult:
        """
        Process one intent synchronously.

        Raises TypeError if the command resolves asynchronously; use
        process_async() for such commands.
        """
        rejected = self._check(state, intent, scene)
        if rejected is not None:
            return rejected

        command = self.registry.find(intent)
        result = command.resolve(state, intent, scene, self.stat_calculator, self.effect_manager)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise TypeError(
                f"Command {command.command_id!r} resolved asynchronously; use process_turn_async"
            )
        return self._complete(state, intent, command, result)

    async def process_async(self, state: GameState, intent: ActionIntent, scene: SceneContext) -> TurnResult:
        """Process one intent, awaiting the command if it resolves asynchronously."""
        rejected = self._check(state, intent, scene)
        if rejected is not None:
            return rejected

        command = self.registry.find(intent)
        result = command.resolve(state, intent, scene, self.stat_calculator, self.effect_manager)
        if inspect.isawaitable(result):
            result = await result
        return self._complete(state, intent, command, result)

    def _check(self, state: GameState, intent: ActionIntent, scene: SceneContext) -> TurnResult | None:
        """Reject intents that cannot be resolved at all."""
        if scene.id != state.current_scene_id or intent.scene_id != state.current_scene_id:
            logger.warning(
                "Scene context mismatch: state=%s scene=%s intent=%s",
                state.current_scene_id, scene.id, intent.scene_id,
            )
            return _rejected(state, "Scene context mismatch.")

        if self.registry.find(intent) is None:
            logger.info("No command handles intent type %r", intent.type)
            return _rejected(state, f"I don't know how to {intent.type}.")

        return None

    def _complete(
        self,
        state: GameState,
        intent: ActionIntent,
        command: Command,
        result: Result,
    ) -> TurnResult:
        if not result.success:
            logger.debug("%s failed: %s", command.command_id, result.narrative)
            return TurnResult(state=state, result=result, narrative=result.render_narrative(state))

        try:
            applier = EffectApplier(self.effect_manager, self.stat_calculator)
            new_state = applier.apply(state, result, intent.actor_id)
            new_state = self._end_turn(new_state, intent.actor_id)
        except ContentError:
            logger.exception("Content error while processing %s for %s", command.command_id, intent.actor_id)
            raise

        narrative = result.render_narrative(new_state)
        turn = new_state.turn
        new_state = new_state.with_action(intent.with_timestamp(self.clock()))
        if narrative:
            new_state = new_state.with_log(LogEntry(turn, narrative, LogType.NARRATIVE))
        new_state = new_state.with_world(new_state.world.next_turn())

        logger.debug("Turn %d: %s by %s", turn, command.command_id, intent.actor_id)
        return TurnResult(state=new_state, result=result, narrative=narrative)

    def _end_turn(self, state: GameState, actor_id: str) -> GameState:
        """Tick the actor's effects, recompute stats, log what wore off."""
        actor = state.get_character(actor_id)
        if actor is None:
            return state

        ticked = self.effect_manager.tick_effects(actor)
        ticked = self.stat_calculator.update_character_stats(
            ticked, self.stat_calculator.resolve_objects(ticked)
        )
        state = state.with_character(ticked)

        expired = self.effect_manager.expired_between(actor, ticked)
        return state.with_log(*(
            LogEntry(state.turn, worn_off_text(self.effect_manager, effect_id), LogType.EFFECT)
            for effect_id in expired
        ))


def _rejected(state: GameState, narrative: str) -> TurnResult:
    return TurnResult(state=state, result=Result.failed(narrative), narrative=narrative)


def process_turn(
    state: GameState,
    intent: ActionIntent,
    scene: SceneContext,
    registry: CommandRegistry | None = None,
    effect_manager: EffectManager | None = None,
    stat_calculator: StatCalculator | None = None,
) -> TurnResult:
    """
    Convenience function to process one turn.

    Creates a TurnProcessor and runs the intent through it.
    """
    processor = TurnProcessor(
        registry=registry,
        effect_manager=effect_manager or EffectManager(),
        stat_calculator=stat_calculator or StatCalculator(),
    )
    return processor.process(state, intent, scene)


async def process_turn_async(
    state: GameState,
    intent: ActionIntent,
    scene: SceneContext,
    registry: CommandRegistry | None = None,
    effect_manager: EffectManager | None = None,
    stat_calculator: StatCalculator | None = None,
) -> TurnResult:
    """Async variant of process_turn for commands that await (e.g. narrative generation)."""
    processor = TurnProcessor(
        registry=registry,
        effect_manager=effect_manager or EffectManager(),
        stat_calculator=stat_calculator or StatCalculator(),
    )
    return await processor.process_async(state, intent, scene)
