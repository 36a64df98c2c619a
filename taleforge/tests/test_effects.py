"""
Tests for effects and the EffectManager.

Tests:
- Effect ticking and removal
- Applying, stacking and removing effects
- Per-turn modifier folding order
- Registry lookup precedence
- The active effects listing
"""

from dataclasses import replace

import pytest

from ..content.definitions import EffectDefinition
from ..engine_core.effects import SOURCE_BUILTIN, SOURCE_GAME, Effect, EffectManager
from ..engine_core.stats import StatCalculator
from ..errors import ContentError, UnknownEffectError


class TestEffect:
    """Tests for the Effect value."""

    def test_permanent_tick_returns_same_instance(self):
        """Ticking a permanent effect is a no-op."""
        effect = Effect(id="curse", stat_modifiers={"health": -1})
        assert effect.tick() is effect

    def test_finite_tick_decrements_duration(self):
        """Ticking a finite effect returns a new effect one turn shorter."""
        effect = Effect(id="haste", duration=3, stat_modifiers={"agility": 2}, metadata={"a": 1})
        ticked = effect.tick()

        assert ticked is not effect
        assert ticked.duration == 2
        assert ticked.stat_modifiers == effect.stat_modifiers
        assert ticked.metadata == effect.metadata
        assert effect.duration == 3

    def test_should_remove(self):
        """Only finite effects at or below zero are removed."""
        assert Effect(id="x", duration=0).should_remove()
        assert Effect(id="x", duration=-1).should_remove()
        assert not Effect(id="x", duration=1).should_remove()
        assert not Effect(id="x").should_remove()

    def test_apply_per_turn_modifiers_does_not_mutate(self):
        """Per-turn modifiers produce a new block; absent stats pass through."""
        effect = Effect(id="poison", duration=2, per_turn_modifiers={"health": -1})
        base = {"health": 10, "strength": 4}

        result = effect.apply_per_turn_modifiers(base)

        assert result == {"health": 9, "strength": 4}
        assert base == {"health": 10, "strength": 4}

    def test_from_definition_copies_modifiers(self):
        """Instances never share modifier dicts with their definition."""
        definition = EffectDefinition(
            id="blessed", name="Blessed", stat_modifiers={"willpower": 2}, duration=3,
        )
        effect = Effect.from_definition(definition)

        assert effect.stat_modifiers == {"willpower": 2}
        assert effect.stat_modifiers is not definition.stat_modifiers
        assert effect.source == SOURCE_GAME
        assert effect.duration == 3

    def test_from_definition_duration_override(self):
        definition = EffectDefinition(id="poison", name="Poisoned", duration=5, builtin=True)
        effect = Effect.from_definition(definition, duration=2)

        assert effect.duration == 2
        assert effect.source == SOURCE_BUILTIN


class TestApplyAndRemove:
    """Tests for applying and removing effects."""

    def test_apply_returns_new_character(self, player, effect_manager):
        updated = effect_manager.apply_effect(player, "blessed")

        assert updated is not player
        assert [effect.id for effect in updated.effects] == ["blessed"]
        assert player.effects == []

    def test_unknown_effect_raises(self, player, effect_manager):
        """Applying an id in neither registry is a content error."""
        with pytest.raises(UnknownEffectError) as excinfo:
            effect_manager.apply_effect(player, "levitation")

        assert excinfo.value.effect_id == "levitation"
        assert "levitation" in str(excinfo.value)
        assert isinstance(excinfo.value, ContentError)

    def test_same_effect_stacks(self, player, effect_manager):
        """The same id can be applied twice; each copy is independent."""
        character = effect_manager.apply_effect(player, "poison")
        character = effect_manager.apply_effect(character, "poison", duration=1)

        assert [effect.id for effect in character.effects] == ["poison", "poison"]
        assert [effect.duration for effect in character.effects] == [5, 1]

    def test_remove_first_occurrence(self, player, effect_manager):
        character = effect_manager.apply_effect(player, "poison", duration=4)
        character = effect_manager.apply_effect(character, "poison", duration=1)

        removed = effect_manager.remove_effect(character, "poison")

        assert len(removed.effects) == 1
        assert removed.effects[0].duration == 1

    def test_remove_absent_returns_same_instance(self, player, effect_manager):
        """Removing an effect that is not attached is an identity no-op."""
        character = effect_manager.apply_effect(player, "blessed")

        updated = effect_manager.remove_effect(character, "poison")

        assert updated is character
        assert len(updated.effects) == 1

    def test_remove_from_source_skips_own_copy(self, player, effect_manager):
        """Only the copy granted by the named object is removed."""
        character = effect_manager.apply_effect(player, "blessed", duration=10)
        character = effect_manager.apply_effect(character, "blessed")
        carried = replace(character.effects[1], metadata={"source_object_id": "amulet"})
        character = character.with_effects([character.effects[0], carried])

        removed = effect_manager.remove_effect_from_source(character, "blessed", "amulet")

        assert [(effect.duration, effect.metadata) for effect in removed.effects] == [(10, {})]

    def test_remove_from_unknown_source_returns_same_instance(self, player, effect_manager):
        character = effect_manager.apply_effect(player, "blessed")
        assert effect_manager.remove_effect_from_source(character, "blessed", "amulet") is character


class TestTickEffects:
    """Tests for the per-turn tick."""

    def test_poison_runs_its_course(self, player, effect_manager):
        """Poison for three turns costs one health per turn, then disappears."""
        character = effect_manager.apply_effect(player, "poison", duration=3)

        healths = []
        for _ in range(3):
            character = effect_manager.tick_effects(character)
            healths.append(character.base_stats["health"])

        assert healths == [9, 8, 7]
        assert character.effects == []

    def test_expiring_effect_still_applies_last_modifier(self, player, effect_manager):
        """Per-turn modifiers apply before the expired effect is dropped."""
        character = effect_manager.apply_effect(player, "poison", duration=1)

        character = effect_manager.tick_effects(character)

        assert character.base_stats["health"] == 9
        assert character.effects == []

    def test_permanent_effect_survives_ticks(self, player, effect_manager):
        """Blindness never expires and never touches base perception."""
        character = effect_manager.apply_effect(player, "blindness")

        for _ in range(10):
            character = effect_manager.tick_effects(character)

        assert [effect.id for effect in character.effects] == ["blindness"]
        assert character.base_stats["perception"] == 5
        assert StatCalculator().get_effective_stat(character, "perception") == 5 - 999

    def test_per_turn_modifiers_compound(self, player, effect_manager):
        """Several effects fold in list order."""
        character = effect_manager.apply_effect(player, "regeneration")
        character = effect_manager.apply_effect(character, "poison")

        character = effect_manager.tick_effects(character)

        assert character.base_stats["health"] == 11

    def test_no_effects_leaves_base_stats(self, player, effect_manager):
        ticked = effect_manager.tick_effects(player)
        assert ticked.base_stats == player.base_stats
        assert ticked.effects == []

    def test_expired_between(self, player, effect_manager):
        """One expiring copy of a stacked effect is reported once."""
        character = effect_manager.apply_effect(player, "poison", duration=1)
        character = effect_manager.apply_effect(character, "poison", duration=4)

        ticked = effect_manager.tick_effects(character)

        assert effect_manager.expired_between(character, ticked) == ["poison"]
        assert len(ticked.effects) == 1


class TestRegistry:
    """Tests for definition lookup."""

    def test_builtin_definitions(self, effect_manager):
        poison = effect_manager.get_builtin_effect_definition("poison")
        assert poison.name == "Poisoned"
        assert poison.duration == 5
        assert poison.per_turn_modifiers == {"health": -1}
        assert effect_manager.get_builtin_effect_definition("blessed") is None

    def test_builtin_wins_over_game_definition(self):
        """A game cannot redefine a built-in id."""
        manager = EffectManager({
            "poison": EffectDefinition(id="poison", name="Mild Poison", duration=99),
        })
        assert manager.get_effect_definition("poison").name == "Poisoned"

    def test_game_definition_fallback(self, effect_manager):
        assert effect_manager.get_effect_definition("blessed").name == "Blessed"
        assert effect_manager.get_effect_definition("nothing") is None

    def test_describe_falls_back_to_id(self, effect_manager):
        assert effect_manager.describe("poison") == "Poisoned"
        assert effect_manager.describe("mystery") == "mystery"

    def test_merge_modifiers(self, player, effect_manager):
        """Merged blocks only contain stats some effect touches."""
        character = effect_manager.apply_effect(player, "blessed")
        character = effect_manager.apply_effect(character, "lantern_light")
        character = effect_manager.apply_effect(character, "poison")

        assert effect_manager.merge_effect_modifiers(character.effects) == {
            "willpower": 2,
            "perception": 3,
        }
        assert effect_manager.merge_per_turn_modifiers(character.effects) == {"health": -1}


class TestDescribeActiveEffects:
    """Tests for the player-facing effects listing."""

    def test_no_effects(self, player, effect_manager):
        assert effect_manager.describe_active_effects(player) == ["You have no active effects."]

    def test_lists_name_duration_and_description(self, player, effect_manager):
        character = effect_manager.apply_effect(player, "poison", duration=3)
        character = effect_manager.apply_effect(character, "blindness")

        assert effect_manager.describe_active_effects(character) == [
            "Active Effects:",
            "- Poisoned (3 turns remaining): You feel a burning sensation.",
            "    Per turn: health -1",
            "- Blindness (Permanent): Your vision is completely obscured.",
            "    Modifiers: perception -999",
        ]

    def test_single_turn_and_positive_modifier(self, player, effect_manager):
        character = effect_manager.apply_effect(player, "blessed", duration=1)

        assert effect_manager.describe_active_effects(character) == [
            "Active Effects:",
            "- Blessed (1 turn remaining): A warm light surrounds you.",
            "    Modifiers: willpower +2",
        ]

    def test_effect_without_definition(self, player, effect_manager):
        character = player.with_effects([Effect(id="unknown-effect", duration=5)])

        assert effect_manager.describe_active_effects(character) == [
            "Active Effects:",
            "- unknown-effect (5 turns remaining)",
        ]

    def test_order_follows_application(self, player, effect_manager):
        """The listing is stable and keeps the order effects were applied in."""
        character = effect_manager.apply_effect(player, "blindness")
        character = effect_manager.apply_effect(character, "poison", duration=5)

        first = effect_manager.describe_active_effects(character)
        names = [line for line in first if line.startswith("- ")]

        assert first == effect_manager.describe_active_effects(character)
        assert [name.split(" (")[0] for name in names] == ["- Blindness", "- Poisoned"]
