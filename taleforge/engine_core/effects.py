"""
Effects - Runtime status effects and the EffectManager.

An Effect is an immutable value attached to a character. It carries two
kinds of modifiers:

- stat_modifiers: static, added every time current stats are derived
- per_turn_modifiers: folded into base stats once per tick, compounding

Lifecycle:
- Created by EffectManager.apply_effect from an EffectDefinition
- Aged by tick() (duration - 1)
- Dropped when should_remove() is true, or by remove_effect()

Built-in definitions always win id lookups over game definitions.
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Iterable, Mapping
import logging

from ..content.builtin_effects import BUILTIN_EFFECTS
from ..content.definitions import EffectDefinition, StatBlock
from ..errors import UnknownEffectError
from .stats import add_stats, sum_stat_blocks

if TYPE_CHECKING:
    from .state import CharacterState

logger = logging.getLogger(__name__)

SOURCE_BUILTIN = "builtin"
SOURCE_GAME = "game"


@dataclass(frozen=True)
class Effect:
    """One applied status on a character."""
    id: str
    source: str = SOURCE_GAME
    duration: int | None = None  # None = permanent
    stat_modifiers: StatBlock | None = None
    per_turn_modifiers: StatBlock | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_definition(cls, definition: EffectDefinition, duration: int | None = None) -> Effect:
        """
        Instantiate an effect from its definition.

        An explicit duration overrides the definition's; otherwise the
        definition's duration is used (which may be None, i.e. permanent).
        Modifier dicts are copied so the instance never shares them.
        """
        return cls(
            id=definition.id,
            source=SOURCE_BUILTIN if definition.builtin else SOURCE_GAME,
            duration=duration if duration is not None else definition.duration,
            stat_modifiers=deepcopy(definition.stat_modifiers),
            per_turn_modifiers=deepcopy(definition.per_turn_modifiers),
        )

    @property
    def is_permanent(self) -> bool:
        return self.duration is None

    def tick(self) -> Effect:
        """Return the effect one turn older. Permanent effects return themselves."""
        if self.duration is None:
            return self
        return replace(self, duration=self.duration - 1)

    def should_remove(self) -> bool:
        return self.duration is not None and self.duration <= 0

    def apply_per_turn_modifiers(self, base_stats: Mapping[str, float]) -> StatBlock:
        """Return base_stats with this effect's per-turn modifiers added."""
        return add_stats(base_stats, self.per_turn_modifiers)


class EffectManager:
    """
    Applies, removes, and ticks effects on characters.

    Stateless apart from its two registries: the shared built-in mapping
    and the game-specific definitions it was constructed with.
    """

    def __init__(self, game_definitions: Mapping[str, EffectDefinition] | None = None):
        self.builtin_definitions = BUILTIN_EFFECTS
        self.game_definitions = dict(game_definitions or {})

    def get_builtin_effect_definition(self, effect_id: str) -> EffectDefinition | None:
        return self.builtin_definitions.get(effect_id)

    def get_effect_definition(self, effect_id: str) -> EffectDefinition | None:
        """Look up a definition, built-in first."""
        builtin = self.get_builtin_effect_definition(effect_id)
        if builtin is not None:
            return builtin
        return self.game_definitions.get(effect_id)

    def apply_effect(
        self,
        character: CharacterState,
        effect_id: str,
        duration: int | None = None,
    ) -> CharacterState:
        """
        Attach a new instance of effect_id to the character.

        The same id may be applied more than once; each application is an
        independent entry with its own duration.

        Raises UnknownEffectError if the id is in neither registry.
        """
        definition = self.get_effect_definition(effect_id)
        if definition is None:
            raise UnknownEffectError(effect_id)

        effect = Effect.from_definition(definition, duration)
        logger.debug(
            "Applying effect %s to %s (duration=%s)",
            effect_id, character.id, effect.duration,
        )
        return character.with_effects(list(character.effects) + [effect])

    def remove_effect(self, character: CharacterState, effect_id: str) -> CharacterState:
        """
        Remove the first effect with effect_id.

        Returns the same character instance when no such effect is attached.
        """
        for index, effect in enumerate(character.effects):
            if effect.id == effect_id:
                effects = list(character.effects)
                del effects[index]
                return character.with_effects(effects)
        return character

    def remove_effect_from_source(
        self,
        character: CharacterState,
        effect_id: str,
        source_object_id: str,
    ) -> CharacterState:
        """
        Remove the first effect_id instance carried from source_object_id.

        Instances applied any other way are left alone.
        Returns the same character instance when nothing matches.
        """
        for index, effect in enumerate(character.effects):
            if effect.id == effect_id and effect.metadata.get("source_object_id") == source_object_id:
                effects = list(character.effects)
                del effects[index]
                return character.with_effects(effects)
        return character

    def tick_effects(self, character: CharacterState) -> CharacterState:
        """
        Advance every effect by one turn.

        For each effect in order: fold its per-turn modifiers into base
        stats, then tick its duration. Effects that expire are dropped
        after their final per-turn modifier has been applied.
        """
        base_stats = dict(character.base_stats)
        remaining: list[Effect] = []

        for effect in character.effects:
            base_stats = effect.apply_per_turn_modifiers(base_stats)
            ticked = effect.tick()
            if ticked.should_remove():
                logger.debug("Effect %s expired on %s", effect.id, character.id)
                continue
            remaining.append(ticked)

        return character.with_base_stats(base_stats).with_effects(remaining)

    def merge_effect_modifiers(self, effects: Iterable[Effect]) -> StatBlock:
        """Sum static modifiers; stats no effect touches are absent."""
        return sum_stat_blocks(effect.stat_modifiers for effect in effects)

    def merge_per_turn_modifiers(self, effects: Iterable[Effect]) -> StatBlock:
        """Sum per-turn modifiers; stats no effect touches are absent."""
        return sum_stat_blocks(effect.per_turn_modifiers for effect in effects)

    def expired_between(self, before: CharacterState, after: CharacterState) -> list[str]:
        """
        Return ids of effects present in `before` but not in `after`.

        Counts occurrences, so one expiring copy of a stacked effect is reported.
        """
        counts: dict[str, int] = {}
        for effect in after.effects:
            counts[effect.id] = counts.get(effect.id, 0) + 1
        expired = []
        for effect in before.effects:
            if counts.get(effect.id, 0) > 0:
                counts[effect.id] -= 1
            else:
                expired.append(effect.id)
        return expired

    def describe(self, effect_id: str) -> str:
        """Display name for an effect id, falling back to the id itself."""
        definition = self.get_effect_definition(effect_id)
        return definition.name if definition else effect_id

    def describe_active_effects(self, character: CharacterState) -> list[str]:
        """
        Player-facing listing of a character's effects, in application order.

        Example:
            Active Effects:
            - Poisoned (3 turns remaining): You feel a burning sensation.
                Per turn: health -1
            - Blindness (Permanent): Your vision is completely obscured.
                Modifiers: perception -999

        Effects without a definition are listed by id.
        """
        if not character.effects:
            return ["You have no active effects."]

        lines = ["Active Effects:"]
        for effect in character.effects:
            definition = self.get_effect_definition(effect.id)
            name = definition.name if definition and definition.name else effect.id
            if effect.duration is None:
                remaining = "Permanent"
            else:
                remaining = f"{effect.duration} turn{'' if effect.duration == 1 else 's'} remaining"
            line = f"- {name} ({remaining})"
            if definition and definition.description:
                line = f"{line}: {definition.description}"
            lines.append(line)
            if effect.stat_modifiers:
                lines.append(f"    Modifiers: {_format_stats(effect.stat_modifiers)}")
            if effect.per_turn_modifiers:
                lines.append(f"    Per turn: {_format_stats(effect.per_turn_modifiers)}")
        return lines


def _format_stats(stats: Mapping[str, float]) -> str:
    return ", ".join(f"{stat} {value:+g}" for stat, value in stats.items())
