"""
Engine errors.

Only authoring and data problems are raised as exceptions. Expected game
outcomes (missing target, occupied slot, too heavy) are Result values.
"""

from __future__ import annotations


class TaleforgeError(Exception):
    """Base class for all engine errors."""


class ContentError(TaleforgeError):
    """Raised when world content references something that does not exist."""


class UnknownEffectError(ContentError):
    """Raised when an effect id is found in neither registry."""

    def __init__(self, effect_id: str):
        self.effect_id = effect_id
        super().__init__(f"Unknown effect ID: {effect_id}")


class ContentValidationError(ContentError):
    """Raised when content validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Content validation failed with {len(errors)} error(s)")


class SaveNotFoundError(TaleforgeError):
    """Raised when a save folder or snapshot is missing."""

    def __init__(self, save_id: str):
        self.save_id = save_id
        super().__init__(f"Save not found: {save_id}")
