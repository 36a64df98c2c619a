"""
Command Base - The contract between the turn pipeline and commands.

A command reads the current snapshot and returns a Result describing what
should happen. It never builds a new state itself.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Awaitable, Union

from ..engine_core.action import ActionIntent, Result, SceneContext

if TYPE_CHECKING:
    from ..engine_core.effects import EffectManager
    from ..engine_core.state import GameState
    from ..engine_core.stats import StatCalculator


ResolveResult = Union[Result, Awaitable[Result]]


class Command(ABC):
    """
    Abstract base class for commands.

    Game-outcome failures (missing target, no room, already done) are
    returned as failed Results, never raised.
    """

    command_id: str = ""

    def matches_intent(self, intent: ActionIntent) -> bool:
        """Whether this command handles the intent. Defaults to type == command_id."""
        return intent.type == self.command_id

    @abstractmethod
    def resolve(
        self,
        state: GameState,
        intent: ActionIntent,
        context: SceneContext,
        stat_calculator: StatCalculator | None = None,
        effect_manager: EffectManager | None = None,
    ) -> ResolveResult:
        """
        Resolve an intent against the current state.

        Args:
            state: Snapshot to read; never modified
            intent: What the actor asked for
            context: The current scene
            stat_calculator: For commands that consult current stats
            effect_manager: For commands that consult effect definitions

        Returns:
            Result, or an awaitable producing one
        """
        pass
