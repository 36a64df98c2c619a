"""
Command Registry - Maps intents to the commands that resolve them.
"""

from __future__ import annotations
from typing import Iterator
import logging

from ..engine_core.action import ActionIntent
from .base import Command
from .drop import DropCommand
from .move import MoveCommand
from .pickup import PickupCommand
from .set_state import SetStateCommand
from .transfer import TransferCommand

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Ordered collection of commands; the first match wins."""

    def __init__(self, commands: list[Command] | None = None):
        self._commands: list[Command] = []
        for command in commands or []:
            self.register(command)

    def register(self, command: Command) -> None:
        if self.get(command.command_id) is not None:
            raise ValueError(f"Command already registered: {command.command_id}")
        self._commands.append(command)
        logger.debug("Registered command %s", command.command_id)

    def get(self, command_id: str) -> Command | None:
        for command in self._commands:
            if command.command_id == command_id:
                return command
        return None

    def find(self, intent: ActionIntent) -> Command | None:
        """Find the command that handles an intent."""
        for command in self._commands:
            if command.matches_intent(intent):
                return command
        return None

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, command_id: object) -> bool:
        return isinstance(command_id, str) and self.get(command_id) is not None


def default_registry() -> CommandRegistry:
    """Registry with every shipped command."""
    return CommandRegistry([
        SetStateCommand(),
        TransferCommand(),
        PickupCommand(),
        DropCommand(),
        MoveCommand(),
    ])
