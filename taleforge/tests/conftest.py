"""
Pytest fixtures for Taleforge tests.
"""

import pytest

from ..content.definitions import (
    EffectDefinition, GameContent, InventoryEntry, ObjectDefinition,
    SceneDefinition, SceneExit, Slot, StateDef, CharacterTemplate,
)
from ..content.payload import EffectPayload
from ..engine_core.action import SceneContext
from ..engine_core.effects import EffectManager
from ..engine_core.state import CharacterState, GameState


BASE_STATS = {
    "health": 10,
    "willpower": 5,
    "perception": 5,
    "reputation": 0,
    "strength": 5,
    "agility": 5,
}


@pytest.fixture
def game_effects() -> dict[str, EffectDefinition]:
    """Game-specific effect definitions."""
    return {
        "blessed": EffectDefinition(
            id="blessed",
            name="Blessed",
            description="A warm light surrounds you.",
            stat_modifiers={"willpower": 2},
            duration=3,
        ),
        "lantern_light": EffectDefinition(
            id="lantern_light",
            name="Lantern Light",
            stat_modifiers={"perception": 3},
        ),
        "regeneration": EffectDefinition(
            id="regeneration",
            name="Regeneration",
            per_turn_modifiers={"health": 2},
            duration=2,
            application_description="Your wounds begin to close.",
        ),
    }


@pytest.fixture
def effect_manager(game_effects) -> EffectManager:
    return EffectManager(game_effects)


@pytest.fixture
def player() -> CharacterState:
    """A character with full stats and empty hands."""
    return CharacterState.create("player", "Hero", base_stats=BASE_STATS)


@pytest.fixture
def lantern() -> ObjectDefinition:
    """Object with an off/on state machine."""
    return ObjectDefinition(
        id="lantern",
        weight=1,
        description="A brass lantern",
        states=[
            StateDef(id="off", action_names=["extinguish", "turn off"], description="It is dark."),
            StateDef(
                id="on",
                action_names=["light", "turn on"],
                description="It glows warmly.",
                effects=EffectPayload(add_traits=["lit"], add_effects=["lantern_light"]),
            ),
        ],
        default_state="off",
    )


@pytest.fixture
def ring() -> ObjectDefinition:
    return ObjectDefinition(
        id="ring", weight=0.05, width=1, height=1, depth=1, description="A silver ring",
    )


@pytest.fixture
def amulet() -> ObjectDefinition:
    """Carrying it blesses the bearer."""
    return ObjectDefinition(
        id="amulet",
        weight=0.2,
        description="A jade amulet",
        carry_effects=EffectPayload(add_effects=["blessed"], add_traits=["warded"]),
    )


@pytest.fixture
def backpack() -> ObjectDefinition:
    """A worn container with general storage and one slot."""
    return ObjectDefinition(
        id="backpack",
        weight=1,
        description="A leather backpack",
        traits=["container"],
        contains=[],
        slots=[Slot(id="sheath", name="Sheath", max_weight=5)],
        max_weight=20,
    )


@pytest.fixture
def statue() -> ObjectDefinition:
    return ObjectDefinition(id="statue", weight=500, removable=False, description="A marble statue")


@pytest.fixture
def hall_scene(lantern, ring, amulet, statue) -> SceneDefinition:
    return SceneDefinition(
        id="hall",
        narrative="A long hall lined with tapestries.",
        objects=[lantern, ring, amulet, statue],
        exits=[SceneExit(direction="north", next_scene_id="vault", description="a heavy oak door")],
    )


@pytest.fixture
def vault_scene() -> SceneDefinition:
    return SceneDefinition(
        id="vault",
        narrative="A cold stone vault.",
        exits=[SceneExit(direction="south", next_scene_id="hall")],
    )


@pytest.fixture
def game_state(player, hall_scene, vault_scene) -> GameState:
    return GameState.create(
        characters=[player],
        current_scene_id="hall",
        scene_objects={"hall": hall_scene.objects, "vault": vault_scene.objects},
        rng_seed=7,
    )


@pytest.fixture
def hall_context(game_state, hall_scene) -> SceneContext:
    return SceneContext.from_state(game_state, hall_scene)


@pytest.fixture
def content(game_effects, hall_scene, vault_scene, backpack) -> GameContent:
    """A small two-scene game."""
    return GameContent(
        id="demo",
        name="Demo Quest",
        start_scene_id="hall",
        scenes={"hall": hall_scene, "vault": vault_scene},
        characters=[
            CharacterTemplate(
                id="player",
                name="Hero",
                base_stats=dict(BASE_STATS),
                inventory=[InventoryEntry(id="backpack", object_data=backpack)],
                effects=["blessed"],
            ),
        ],
        effect_definitions=game_effects,
    )


@pytest.fixture
def content_data() -> dict:
    """The same kind of game, as it is written in a content file."""
    return {
        "id": "demo",
        "name": "Demo Quest",
        "start_scene_id": "hall",
        "scenes": [
            {
                "id": "hall",
                "narrative": "A long hall.",
                "objects": [
                    {
                        "id": "lantern",
                        "weight": 1,
                        "description": "A brass lantern",
                        "states": [
                            {"id": "off", "action_names": ["extinguish"]},
                            {
                                "id": "on",
                                "action_names": ["light"],
                                "effects": {"add_traits": ["lit"]},
                            },
                        ],
                        "default_state": "off",
                    },
                ],
                "exits": [{"direction": "north", "next_scene_id": "vault"}],
            },
            {"id": "vault", "narrative": "A vault."},
        ],
        "characters": [
            {
                "id": "player",
                "name": "Hero",
                "base_stats": {"health": 10, "perception": 5, "strength": 5},
                "inventory": [
                    {
                        "id": "backpack",
                        "object_data": {
                            "id": "backpack",
                            "weight": 1,
                            "traits": ["container"],
                            "contains": [],
                            "max_weight": 20,
                        },
                    },
                ],
            },
        ],
        "effects": [
            {"id": "blessed", "name": "Blessed", "stat_modifiers": {"willpower": 2}, "duration": 3},
        ],
    }


@pytest.fixture
def carrying():
    """Return a helper that gives a character top-level inventory entries."""
    def give(state: GameState, *objects: ObjectDefinition, character_id: str = "player") -> GameState:
        character = state.get_character(character_id)
        entries = [InventoryEntry(id=obj.id, object_data=obj) for obj in objects]
        return state.with_character(character.with_inventory(list(character.inventory) + entries))
    return give
