"""
Tests for content validation.
"""

from dataclasses import replace

import pytest

from ..content.definitions import EffectDefinition, ObjectDefinition, SceneExit, Slot, StateDef
from ..content.payload import EffectPayload
from ..content.validation import validate_content, validate_object, validate_or_raise
from ..errors import ContentValidationError


def box(object_id, **kwargs):
    return ObjectDefinition(id=object_id, traits=["container"], **kwargs)


class TestValidateContent:
    """Tests for whole-bundle checks."""

    def test_valid_content(self, content):
        result = validate_content(content)

        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_missing_start_scene(self, content):
        result = validate_content(replace(content, start_scene_id="cellar"))

        assert not result.valid
        assert "start scene 'cellar' does not exist" in result.errors

    def test_exit_to_unknown_scene(self, content, hall_scene):
        hall = replace(hall_scene, exits=[SceneExit(direction="down", next_scene_id="cellar")])
        result = validate_content(replace(content, scenes={**content.scenes, "hall": hall}))

        assert "scene 'hall' exit 'down' points to unknown scene 'cellar'" in result.errors

    def test_unknown_starting_effect(self, content):
        template = replace(content.characters[0], effects=["levitation"])
        result = validate_content(replace(content, characters=[template]))

        assert "character 'player' starts with unknown effect 'levitation'" in result.errors

    def test_unknown_stat(self, content):
        template = replace(content.characters[0], base_stats={"luck": 3})
        result = validate_content(replace(content, characters=[template]))

        assert "character 'player' uses unknown stat 'luck'" in result.errors

    def test_bad_effect_definition(self, content):
        effects = {
            **content.effect_definitions,
            "haste": EffectDefinition(id="haste", name="", duration=0),
        }
        result = validate_content(replace(content, effect_definitions=effects))

        assert "effect 'haste' has no name" in result.errors
        assert "effect 'haste' has non-positive duration 0" in result.errors

    def test_shadowed_builtin_warns(self, content):
        effects = {
            **content.effect_definitions,
            "poison": EffectDefinition(id="poison", name="Mild Poison"),
        }
        result = validate_content(replace(content, effect_definitions=effects))

        assert result.valid
        assert result.warnings == ["effect 'poison' is shadowed by the built-in definition"]

    def test_validate_or_raise(self, content):
        with pytest.raises(ContentValidationError) as excinfo:
            validate_or_raise(replace(content, start_scene_id="cellar"))
        assert excinfo.value.errors == ["start scene 'cellar' does not exist"]


class TestValidateObject:
    """Tests for per-object checks."""

    def test_container_cycle(self):
        """A container nested inside a container with its own id is a cycle."""
        inner = box("sack", contains=[])
        outer = box("sack", contains=[box("bag", contains=[inner])])

        assert validate_object(outer) == ["container cycle: sack -> bag -> sack"]

    def test_slot_holding_itself(self):
        obj = box("belt", slots=[Slot(id="buckle", item_id="belt")])
        assert validate_object(obj) == ["container cycle: belt -> belt (slot 'buckle')"]

    def test_duplicate_slots(self):
        obj = box("belt", slots=[Slot(id="loop"), Slot(id="loop")])
        assert validate_object(obj) == ["object 'belt' declares duplicate slot ids"]

    def test_undeclared_default_state(self):
        obj = ObjectDefinition(id="door", states=[StateDef(id="open")], default_state="closed")
        assert validate_object(obj) == ["object 'door' default state 'closed' is not declared"]

    def test_state_references_unknown_effect(self):
        obj = ObjectDefinition(id="torch", states=[
            StateDef(id="lit", effects=EffectPayload(add_effects=["glow"])),
        ])
        assert validate_object(obj, known_effects=["poison"]) == [
            "object 'torch' state 'lit' references unknown effect 'glow'",
        ]

    def test_carry_effects_checked(self, amulet):
        assert validate_object(amulet, known_effects=["blessed"]) == []
        assert validate_object(amulet) == [
            "object 'amulet' carry effects references unknown effect 'blessed'",
        ]

    def test_quantity(self):
        assert validate_object(ObjectDefinition(id="arrow", quantity=0)) == [
            "object 'arrow' has quantity 0, must be >= 1",
        ]
