from .base import Command, ResolveResult
from .drop import DropCommand
from .move import MoveCommand
from .pickup import PickupCommand
from .registry import CommandRegistry, default_registry
from .set_state import SetStateCommand
from .transfer import TransferCommand

__all__ = [
    "Command",
    "ResolveResult",
    "CommandRegistry",
    "default_registry",
    "SetStateCommand",
    "TransferCommand",
    "PickupCommand",
    "DropCommand",
    "MoveCommand",
]
