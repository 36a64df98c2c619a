"""
Tests for the effect applier.

Tests:
- Failure and empty results leave the state untouched
- Character and scene targets
- Effect application and its log lines
- Inventory, transfer and scene object bookkeeping
- Scene transitions and object states
"""

import pytest

from ..content.definitions import InventoryEntry
from ..content.payload import EffectPayload, ObjectStateChange, Target, TransferItem
from ..engine_core.action import Result
from ..engine_core.container import (
    LEFT_HAND,
    RIGHT_HAND,
    add_to_container,
    build_objects_map,
    find_container,
    find_item_in_inventory,
    replace_container,
)
from ..engine_core.effect_applier import CARRY_SOURCE, EffectApplier, apply_effects
from ..engine_core.state import CharacterState, LogType
from ..errors import UnknownEffectError


@pytest.fixture
def applier(effect_manager):
    return EffectApplier(effect_manager)


def succeed(**payload):
    return Result.succeeded("ok", effects=EffectPayload(**payload))


def holding(state, item, hand):
    """Put item in the general storage of one of the player's hands."""
    player = state.get_character("player")
    container = find_container(player.inventory, hand)
    inventory = replace_container(player.inventory, add_to_container(container, item))
    return state.with_character(player.with_inventory(inventory))


class TestNoOp:
    """Results that change nothing."""

    def test_failure_returns_same_state(self, applier, game_state):
        result = Result.failed("Nope.")
        assert applier.apply(game_state, result) is game_state

    def test_empty_payload_returns_same_state(self, applier, game_state):
        assert applier.apply(game_state, Result.succeeded("Nothing happens.")) is game_state

    def test_missing_actor(self, applier, game_state):
        assert applier.apply(game_state, succeed(stats={"health": -1}), actor_id="ghost") is game_state


class TestCharacterChanges:
    """Stats, traits, flags and effects on characters."""

    def test_stat_delta(self, applier, game_state):
        state = applier.apply(game_state, succeed(stats={"health": -3}))
        player = state.get_character("player")

        assert player.base_stats["health"] == 7
        assert player.stats["health"] == 7
        assert game_state.get_character("player").base_stats["health"] == 10

    def test_traits(self, applier, game_state):
        state = applier.apply(game_state, succeed(add_traits=["brave", "wet"]))
        state = applier.apply(state, succeed(remove_traits=["wet"]))
        assert state.get_character("player").traits == frozenset({"brave"})

    def test_character_flags(self, applier, game_state):
        state = applier.apply(game_state, succeed(add_flags=["met_oracle"]))

        assert "met_oracle" in state.get_character("player").flags
        assert state.world.global_flags == frozenset()

    def test_scene_target_flags_go_to_world(self, applier, game_state):
        state = applier.apply(game_state, succeed(target=Target.scene(), add_flags=["gate_open"]))

        assert state.world.global_flags == frozenset({"gate_open"})
        assert state.get_character("player").flags == frozenset()

    def test_scene_target_skips_character_fields(self, applier, game_state):
        state = applier.apply(game_state, succeed(target=Target.scene(), stats={"health": -5}, add_traits=["x"]))
        player = state.get_character("player")

        assert player.base_stats["health"] == 10
        assert player.traits == frozenset()

    def test_other_character_target(self, applier, game_state):
        guard = CharacterState.create("guard", "Guard", base_stats={"health": 8})
        state = applier.apply(
            game_state.with_character(guard),
            succeed(target=Target.character("guard"), stats={"health": -2}),
        )

        assert state.get_character("guard").stats["health"] == 6
        assert state.get_character("player").base_stats["health"] == 10

    def test_apply_effect_recomputes_stats(self, applier, game_state):
        state = applier.apply(game_state, succeed(add_effects=["blessed"]))
        player = state.get_character("player")

        assert [effect.id for effect in player.effects] == ["blessed"]
        assert player.stats["willpower"] == 7
        assert player.base_stats["willpower"] == 5

    def test_unknown_effect_raises(self, applier, game_state):
        with pytest.raises(UnknownEffectError):
            applier.apply(game_state, succeed(add_effects=["levitation"]))


class TestEffectLog:
    """Log lines produced for applied and removed effects."""

    def test_applied_effect_without_flavour(self, applier, game_state):
        state = applier.apply(game_state, succeed(add_effects=["blessed"]))
        entry = state.log[-1]

        assert entry.type == LogType.MECHANIC
        assert entry.turn == 0
        assert entry.text == "You are now affected by: Blessed (3 turns). A warm light surrounds you."

    def test_permanent_effect(self, applier, game_state):
        state = applier.apply(game_state, succeed(add_effects=["lantern_light"]))
        assert state.log[-1].text == "You are now affected by: Lantern Light (permanent)."

    def test_application_description(self, applier, game_state):
        """Flavour text is logged as an EFFECT line before the mechanic line."""
        state = applier.apply(game_state, succeed(add_effects=["regeneration"]))

        assert [(entry.type, entry.text) for entry in state.log] == [
            (LogType.EFFECT, "Your wounds begin to close."),
            (LogType.MECHANIC, "Effect: Regeneration (2 turns)"),
        ]

    def test_reapplied_effect_not_logged_again(self, applier, game_state):
        state = applier.apply(game_state, succeed(add_effects=["blessed"]))
        state = applier.apply(state, succeed(add_effects=["blessed"]))

        assert len(state.log) == 1
        assert len(state.get_character("player").effects) == 2

    def test_removed_effect(self, applier, game_state):
        state = applier.apply(game_state, succeed(add_effects=["blessed"]))
        state = applier.apply(state, succeed(remove_effects=["blessed"]))

        assert state.log[-1].text == 'The effect "Blessed" has worn off.'
        assert state.get_character("player").stats["willpower"] == 5

    def test_removing_absent_effect_is_silent(self, applier, game_state):
        state = applier.apply(game_state, succeed(remove_effects=["blessed"]))
        assert state.log == []


class TestInventory:
    """Picking up, dropping and moving items."""

    def test_add_item_leaves_scene(self, applier, game_state, ring):
        state = applier.apply(game_state, succeed(add_items=[InventoryEntry(id="ring", object_data=ring)]))
        player = state.get_character("player")

        assert player.get_inventory_entry("ring").object_data is ring
        assert state.find_scene_object("ring") is None
        assert game_state.find_scene_object("ring") is ring
        assert state.object_catalog["ring"] is ring

    def test_add_stacks_quantity(self, applier, game_state, carrying, ring):
        state = carrying(game_state, ring)
        state = applier.apply(state, succeed(add_items=[InventoryEntry(id="ring", quantity=2, object_data=ring)]))
        assert state.get_character("player").get_inventory_entry("ring").quantity == 3

    def test_remove_item_joins_scene(self, applier, game_state, ring):
        state = applier.apply(game_state, succeed(add_items=[InventoryEntry(id="ring", object_data=ring)]))
        state = applier.apply(state, succeed(remove_items=[InventoryEntry(id="ring")]))

        assert state.get_character("player").get_inventory_entry("ring") is None
        assert state.find_scene_object("ring") == ring

    def test_remove_missing_item_is_skipped(self, applier, game_state):
        state = applier.apply(game_state, succeed(remove_items=[InventoryEntry(id="crown")]))
        assert state.get_character("player").inventory == game_state.get_character("player").inventory

    def test_carry_effects_are_tagged(self, applier, game_state, amulet):
        payload = EffectPayload(add_items=[InventoryEntry(id="amulet", object_data=amulet)])
        result = Result.succeeded("ok", effects=payload.merged_with(amulet.carry_effects))

        state = applier.apply(game_state, result)
        effect = state.get_character("player").effects[0]

        assert effect.id == "blessed"
        assert effect.metadata == {"source_type": CARRY_SOURCE, "source_object_id": "amulet"}
        assert "warded" in state.get_character("player").traits

    def test_transfer_into_slot(self, applier, game_state, carrying, ring):
        state = carrying(game_state, ring)
        transfer = TransferItem(item_id="ring", from_container_id=None, to_container_id=LEFT_HAND, slot_id="ring")

        state = applier.apply(state, succeed(transfer_item=transfer))
        inventory = state.get_character("player").inventory
        location = find_item_in_inventory(inventory, "ring", build_objects_map(inventory, state.object_catalog))

        assert state.get_character("player").get_inventory_entry("ring") is None
        assert location.container_id == LEFT_HAND
        assert location.slot_id == "ring"
        assert location.item == ring

    def test_transfer_into_general_storage(self, applier, game_state, carrying, ring):
        state = carrying(game_state, ring)
        transfer = TransferItem(item_id="ring", from_container_id=None, to_container_id=LEFT_HAND)

        state = applier.apply(state, succeed(transfer_item=transfer))
        location = find_item_in_inventory(state.get_character("player").inventory, "ring")

        assert location.container_id == LEFT_HAND
        assert location.slot_id is None

    def test_transfer_that_does_not_fit_is_skipped(self, applier, game_state, carrying, lantern):
        state = carrying(game_state, lantern)
        transfer = TransferItem(item_id="lantern", from_container_id=None, to_container_id=LEFT_HAND, slot_id="ring")

        updated = applier.apply(state, succeed(transfer_item=transfer))

        assert updated.get_character("player").get_inventory_entry("lantern") is not None

    def test_transfer_takes_new_entry_not_held_copy(self, applier, game_state, ring):
        """A second ring picked up goes to the destination; the held one stays put."""
        state = holding(game_state, ring, LEFT_HAND)
        payload = EffectPayload(
            add_items=[InventoryEntry(id="ring", object_data=ring)],
            transfer_item=TransferItem(item_id="ring", from_container_id=None, to_container_id=RIGHT_HAND),
        )

        state = applier.apply(state, Result.succeeded("ok", effects=payload))
        player = state.get_character("player")

        assert player.get_inventory_entry("ring") is None
        assert [child.id for child in find_container(player.inventory, LEFT_HAND).contains] == ["ring"]
        assert [child.id for child in find_container(player.inventory, RIGHT_HAND).contains] == ["ring"]

    def test_transfer_out_of_declared_container(self, applier, game_state, ring):
        state = holding(game_state, ring, LEFT_HAND)
        transfer = TransferItem(item_id="ring", from_container_id=LEFT_HAND, to_container_id=RIGHT_HAND)

        state = applier.apply(state, succeed(transfer_item=transfer))
        inventory = state.get_character("player").inventory

        assert find_container(inventory, LEFT_HAND).contains == []
        assert find_item_in_inventory(inventory, "ring").container_id == RIGHT_HAND

    def test_transfer_from_wrong_source_is_skipped(self, applier, game_state, carrying, ring):
        state = carrying(game_state, ring)
        transfer = TransferItem(item_id="ring", from_container_id=RIGHT_HAND, to_container_id=LEFT_HAND)

        updated = applier.apply(state, succeed(transfer_item=transfer))
        player = updated.get_character("player")

        assert player.get_inventory_entry("ring") is not None
        assert find_container(player.inventory, LEFT_HAND).contains == []

    def test_dropping_source_keeps_own_effect(self, applier, effect_manager, game_state, amulet):
        """Removals tied to an object leave an earlier copy of the same effect alone."""
        player = effect_manager.apply_effect(game_state.get_character("player"), "blessed", duration=10)
        state = game_state.with_character(player)
        pickup = EffectPayload(add_items=[InventoryEntry(id="amulet", object_data=amulet)])
        state = applier.apply(state, Result.succeeded("ok", effects=pickup.merged_with(amulet.carry_effects)))
        assert len(state.get_character("player").effects) == 2

        drop = EffectPayload(
            remove_items=[InventoryEntry(id="amulet")],
            remove_effects=["blessed"],
            effect_source_id="amulet",
        )
        state = applier.apply(state, Result.succeeded("ok", effects=drop))
        effects = state.get_character("player").effects

        assert [(effect.id, effect.duration, effect.metadata) for effect in effects] == [("blessed", 10, {})]


class TestWorld:
    """Scene transitions and object states."""

    def test_scene_transition(self, applier, game_state):
        state = applier.apply(game_state, Result.succeeded("You go north.", next_scene_id="vault"))

        assert state.current_scene_id == "vault"
        assert state.world.visited_scenes == frozenset({"hall", "vault"})
        assert game_state.current_scene_id == "hall"

    def test_object_state(self, applier, game_state):
        change = ObjectStateChange(object_id="lantern", state_id="on")
        state = applier.apply(game_state, succeed(set_object_state=change))

        assert state.get_object_state("lantern") == "on"
        assert game_state.get_object_state("lantern") == "off"


def test_apply_effects_convenience(game_state, effect_manager):
    state = apply_effects(game_state, succeed(add_effects=["blessed"]), effect_manager)
    assert state.get_character("player").has_effect("blessed")
