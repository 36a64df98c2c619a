"""
Content Validation - Authoring-time checks for game content.

Validates that:
1. References are valid (scene ids, effect ids, state ids, stat names)
2. Containers never contain themselves, directly or through nesting
3. Slots within a container have unique ids
4. Effect definitions are well-formed

Cycle-freedom is enforced here so that inventory traversal can recurse
without guarding against loops.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..errors import ContentValidationError
from .builtin_effects import BUILTIN_EFFECTS
from .definitions import (
    STAT_NAMES, EffectDefinition, GameContent, ObjectDefinition,
)
from .payload import EffectPayload


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_content(content: GameContent) -> ValidationResult:
    """
    Validate a complete game content bundle.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not content.id:
        errors.append("game id is required")
    if content.start_scene_id not in content.scenes:
        errors.append(f"start scene '{content.start_scene_id}' does not exist")

    known_effects = set(BUILTIN_EFFECTS) | set(content.effect_definitions)

    # Effect definitions
    for effect_id, definition in content.effect_definitions.items():
        errors.extend(_validate_effect_definition(effect_id, definition))
        if effect_id in BUILTIN_EFFECTS:
            warnings.append(
                f"effect '{effect_id}' is shadowed by the built-in definition"
            )

    # Scenes
    for scene_id, scene in content.scenes.items():
        if scene.id != scene_id:
            errors.append(f"scene key '{scene_id}' does not match scene id '{scene.id}'")
        for scene_exit in scene.exits:
            if scene_exit.next_scene_id not in content.scenes:
                errors.append(
                    f"scene '{scene_id}' exit '{scene_exit.direction}' points to "
                    f"unknown scene '{scene_exit.next_scene_id}'"
                )
        seen_ids: set[str] = set()
        for obj in scene.objects:
            if obj.id in seen_ids:
                warnings.append(f"scene '{scene_id}' lists object '{obj.id}' more than once")
            seen_ids.add(obj.id)
            errors.extend(validate_object(obj, known_effects))

    # Characters
    for character in content.characters:
        errors.extend(_validate_stat_names(character.base_stats, f"character '{character.id}'"))
        for effect_id in character.effects:
            if effect_id not in known_effects:
                errors.append(f"character '{character.id}' starts with unknown effect '{effect_id}'")
        for entry in character.inventory:
            if entry.object_data is not None:
                errors.extend(validate_object(entry.object_data, known_effects))

    return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)


def validate_or_raise(content: GameContent) -> ValidationResult:
    """Validate content, raising ContentValidationError when it has errors."""
    result = validate_content(content)
    if not result.valid:
        raise ContentValidationError(result.errors)
    return result


def validate_object(
    obj: ObjectDefinition,
    known_effects: Iterable[str] = (),
    _ancestors: tuple[str, ...] = (),
) -> list[str]:
    """Validate one object and everything stored inside it."""
    errors: list[str] = []
    known_effects = set(known_effects)
    where = f"object '{obj.id}'"

    if obj.id in _ancestors:
        path = " -> ".join(_ancestors + (obj.id,))
        return [f"container cycle: {path}"]

    if obj.quantity < 1:
        errors.append(f"{where} has quantity {obj.quantity}, must be >= 1")

    # State machine
    state_ids = [state.id for state in obj.states or []]
    if len(state_ids) != len(set(state_ids)):
        errors.append(f"{where} declares duplicate state ids")
    if obj.default_state is not None and obj.default_state not in state_ids:
        errors.append(f"{where} default state '{obj.default_state}' is not declared")
    for state in obj.states or []:
        if state.effects is not None:
            errors.extend(
                _validate_payload(state.effects, known_effects, f"{where} state '{state.id}'")
            )

    if obj.carry_effects is not None:
        errors.extend(_validate_payload(obj.carry_effects, known_effects, f"{where} carry effects"))

    # Slots
    slot_ids = [slot.id for slot in obj.slots or []]
    if len(slot_ids) != len(set(slot_ids)):
        errors.append(f"{where} declares duplicate slot ids")
    for slot in obj.slots or []:
        if slot.item_id == obj.id:
            errors.append(f"container cycle: {obj.id} -> {obj.id} (slot '{slot.id}')")

    # General storage, checked recursively
    for child in obj.contains or []:
        errors.extend(validate_object(child, known_effects, _ancestors + (obj.id,)))

    return errors


def _validate_effect_definition(effect_id: str, definition: EffectDefinition) -> list[str]:
    errors: list[str] = []
    where = f"effect '{effect_id}'"
    if definition.id != effect_id:
        errors.append(f"{where} is registered under a different id '{definition.id}'")
    if not definition.name:
        errors.append(f"{where} has no name")
    if definition.duration is not None and definition.duration < 1:
        errors.append(f"{where} has non-positive duration {definition.duration}")
    errors.extend(_validate_stat_names(definition.stat_modifiers, f"{where} stat modifiers"))
    errors.extend(_validate_stat_names(definition.per_turn_modifiers, f"{where} per-turn modifiers"))
    return errors


def _validate_payload(payload: EffectPayload, known_effects: set[str], where: str) -> list[str]:
    errors = _validate_stat_names(payload.stats, where)
    for effect_id in list(payload.add_effects) + list(payload.remove_effects):
        if effect_id not in known_effects:
            errors.append(f"{where} references unknown effect '{effect_id}'")
    return errors


def _validate_stat_names(stats: Mapping[str, float] | None, where: str) -> list[str]:
    return [
        f"{where} uses unknown stat '{name}'"
        for name in (stats or {})
        if name not in STAT_NAMES
    ]
