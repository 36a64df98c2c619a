"""
Object States - Per-object state machines.

An object may declare states (e.g. a lantern's "off" and "on"), each with
the action names that select it and an EffectPayload that holds while the
object is in that state. Switching states undoes the old payload and
applies the new one as a single net delta:

- stats: old stats negated, summed with new stats
- traits, flags, effects: old additions become removals, new additions
  stay additions; an entry added by both states is left alone
"""

from __future__ import annotations
from typing import Iterable
import re

from ..content.definitions import ObjectDefinition, StateDef
from ..content.payload import EffectPayload, ObjectStateChange
from .stats import add_stats, negate_stats

MIN_PARTIAL_MATCH = 3

_ARTICLE = re.compile(r"^(a|an)\s+", re.IGNORECASE)


def _net_lists(
    previous_adds: list[str],
    new_adds: list[str],
    new_removes: list[str],
) -> tuple[list[str], list[str]]:
    """Return (add, remove) for one list-typed field of a transition."""
    shared = set(previous_adds) & set(new_adds)
    add = [item for item in new_adds if item not in shared]
    remove = []
    for item in list(previous_adds) + list(new_removes):
        if item not in shared and item not in remove:
            remove.append(item)
    return add, remove


def compute_state_transition(
    obj: ObjectDefinition,
    current_state_id: str | None,
    target_state_id: str,
) -> EffectPayload:
    """
    Compute the net payload for moving obj from its current state to
    target_state_id, including the set_object_state instruction.

    With no current state only the new state's payload applies.
    """
    new_state = obj.get_state(target_state_id)
    if new_state is None:
        raise KeyError(f"{obj.id} has no state {target_state_id!r}")

    previous = obj.get_state(current_state_id) if current_state_id else None
    old = previous.effects if previous and previous.effects else EffectPayload()
    new = new_state.effects or EffectPayload()

    stats = add_stats(negate_stats(old.stats), new.stats)

    add_traits, remove_traits = _net_lists(old.add_traits, new.add_traits, new.remove_traits)
    add_flags, remove_flags = _net_lists(old.add_flags, new.add_flags, new.remove_flags)
    add_effects, remove_effects = _net_lists(old.add_effects, new.add_effects, new.remove_effects)

    return EffectPayload(
        target=new.target,
        stats=stats or None,
        add_traits=add_traits,
        remove_traits=remove_traits,
        add_flags=add_flags,
        remove_flags=remove_flags,
        add_effects=add_effects,
        remove_effects=remove_effects,
        set_object_state=ObjectStateChange(object_id=obj.id, state_id=target_state_id),
    )


def match_action_name(obj: ObjectDefinition, phrase: str) -> StateDef | None:
    """
    Find the state whose action names match a player phrase.

    Exact (case-insensitive) matches win over partial ones. A partial match
    needs the shorter of phrase and action name to be contained in the
    longer and to be at least three characters.
    """
    phrase = phrase.strip().lower()
    if not phrase or not obj.states:
        return None

    for state in obj.states:
        if any(name.lower() == phrase for name in state.action_names):
            return state

    for state in obj.states:
        for name in state.action_names:
            action = name.lower()
            longer, shorter = (phrase, action) if len(phrase) > len(action) else (action, phrase)
            if len(shorter) >= MIN_PARTIAL_MATCH and shorter in longer:
                return state
    return None


def find_object_for_action(
    objects: Iterable[ObjectDefinition],
    phrase: str,
) -> tuple[ObjectDefinition, StateDef] | None:
    """First object whose states answer to phrase."""
    for obj in objects:
        state = match_action_name(obj, phrase)
        if state is not None:
            return obj, state
    return None


def describe_object(obj: ObjectDefinition) -> str:
    """Object description without a leading "A"/"An"."""
    return _ARTICLE.sub("", obj.description or obj.id)
