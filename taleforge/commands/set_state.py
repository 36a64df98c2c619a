"""
Set-State Command - Switches an object between its declared states.

The intent names the object (target_id) and either the state id
(item_id) or a verb phrase (params["verb"]) matched against the states'
action names.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from ..content.definitions import ObjectDefinition
from ..engine_core.action import ActionIntent, Result, SceneContext
from ..engine_core.container import build_objects_map, find_item_in_inventory
from ..engine_core.object_states import (
    compute_state_transition,
    describe_object,
    find_object_for_action,
    match_action_name,
)
from .base import Command

if TYPE_CHECKING:
    from ..engine_core.effects import EffectManager
    from ..engine_core.state import GameState
    from ..engine_core.stats import StatCalculator


class SetStateCommand(Command):
    command_id = "set-state"

    def resolve(
        self,
        state: GameState,
        intent: ActionIntent,
        context: SceneContext,
        stat_calculator: StatCalculator | None = None,
        effect_manager: EffectManager | None = None,
    ) -> Result:
        object_id = intent.target_id
        state_id = intent.item_id
        verb = intent.params.get("verb")

        if not object_id and verb:
            match = find_object_for_action(context.objects, verb)
            if match is not None:
                object_id, state_id = match[0].id, match[1].id

        if not object_id or not (state_id or verb):
            return Result.failed("I need to know which object and what state to set.")

        obj = self._find_object(state, intent.actor_id, object_id, context)
        if obj is None:
            return Result.failed(f'I can\'t find "{object_id}" here.')

        description = describe_object(obj)
        if not obj.states:
            return Result.failed(f"The {description} doesn't have any states to change.")

        if state_id is None:
            matched = match_action_name(obj, verb)
            if matched is None:
                return Result.failed(f'The {description} doesn\'t have a "{verb}" state.')
            state_id = matched.id

        target_state = obj.get_state(state_id)
        if target_state is None:
            return Result.failed(f'The {description} doesn\'t have a "{state_id}" state.')

        current_state_id = state.get_object_state(obj.id)
        if current_state_id == state_id:
            return Result.succeeded(f"The {description} is already {state_id}.")

        effects = compute_state_transition(obj, current_state_id, state_id)
        action_name = target_state.action_names[0] if target_state.action_names else state_id
        return Result.succeeded(f"You {action_name} {description}.", effects=effects)

    def _find_object(
        self,
        state: GameState,
        actor_id: str,
        object_id: str,
        context: SceneContext,
    ) -> ObjectDefinition | None:
        """Look in the scene first, then in the actor's inventory."""
        obj = context.find_object(object_id) or state.find_scene_object(object_id)
        if obj is not None:
            return obj
        character = state.get_character(actor_id)
        if character is None:
            return None
        resolved = build_objects_map(character.inventory, state.object_catalog)
        location = find_item_in_inventory(character.inventory, object_id, resolved)
        return location.item if location else None
