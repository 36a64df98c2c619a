"""
Tests for StatBlock algebra and the StatCalculator.
"""

from ..engine_core.stats import (
    StatCalculator,
    add_stats,
    empty_stat_block,
    negate_stats,
    sum_stat_blocks,
)


class TestStatAlgebra:
    """Tests for the block helpers."""

    def test_empty_block_has_every_stat(self):
        block = empty_stat_block()
        assert set(block) == {"health", "willpower", "perception", "reputation", "strength", "agility"}
        assert all(value == 0 for value in block.values())

    def test_add_stats(self):
        base = {"health": 10, "strength": 3}
        result = add_stats(base, {"health": -2, "agility": 1})

        assert result == {"health": 8, "strength": 3, "agility": 1}
        assert base == {"health": 10, "strength": 3}

    def test_add_none_delta(self):
        assert add_stats({"health": 4}, None) == {"health": 4}

    def test_sum_keeps_absent_stats_absent(self):
        """A stat no block mentions is missing, not 0."""
        total = sum_stat_blocks([{"health": 1}, None, {}, {"health": 2, "willpower": -1}])
        assert total == {"health": 3, "willpower": -1}

    def test_negate(self):
        assert negate_stats({"health": 5, "strength": -2}) == {"health": -5, "strength": 2}
        assert negate_stats(None) == {}


class TestStatCalculator:
    """Tests for derived stats."""

    def test_current_stats_include_static_modifiers(self, player, effect_manager):
        character = effect_manager.apply_effect(player, "blessed")
        stats = StatCalculator().calculate_current_stats(character)

        assert stats["willpower"] == 7
        assert character.base_stats["willpower"] == 5

    def test_per_turn_modifiers_do_not_count(self, player, effect_manager):
        """Per-turn modifiers only reach stats through a tick."""
        character = effect_manager.apply_effect(player, "poison")
        assert StatCalculator().get_effective_stat(character, "health") == 10

    def test_missing_stat_reads_zero(self, player):
        calculator = StatCalculator()
        character = player.with_base_stats({"health": 3})
        assert calculator.get_effective_stat(character, "perception") == 0

    def test_update_always_returns_new_instance(self, player):
        """Recomputation returns a new character even when nothing changed."""
        updated = StatCalculator().update_character_stats(player)

        assert updated is not player
        assert updated.stats == player.stats
        assert updated.base_stats == player.base_stats

    def test_update_never_touches_base_stats(self, player, effect_manager):
        character = effect_manager.apply_effect(player, "blindness")
        updated = StatCalculator().update_character_stats(character)

        assert updated.base_stats == player.base_stats
        assert updated.stats["perception"] == 5 - 999
