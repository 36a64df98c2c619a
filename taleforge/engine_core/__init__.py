"""
Engine Core - Immutable game state, effects, inventory, and turn resolution.

The engine is the runtime that:
1. Holds the GameState snapshot
2. Composes effects and stats
3. Resolves containers and slots
4. Applies declared payloads to produce new snapshots
5. Runs turns through the reducer
"""

from .state import CharacterState, GameState, LogEntry, LogType, WorldState
from .effects import Effect, EffectManager
from .stats import StatCalculator
from .action import ActionIntent, Outcome, Result, SceneContext, TurnResult
from .effect_applier import EffectApplier, apply_effects
from .reducer import TurnProcessor, process_turn, process_turn_async

__all__ = [
    "CharacterState",
    "GameState",
    "LogEntry",
    "LogType",
    "WorldState",
    "Effect",
    "EffectManager",
    "StatCalculator",
    "ActionIntent",
    "Outcome",
    "Result",
    "SceneContext",
    "TurnResult",
    "EffectApplier",
    "apply_effects",
    "TurnProcessor",
    "process_turn",
    "process_turn_async",
]
