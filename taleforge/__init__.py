"""
Taleforge - Narrative Inventory & Effects Engine

A deterministic, turn-based rules engine for text adventures and RPGs.
The engine loads world content (objects, containers, effect definitions) and provides:
- Immutable world snapshots
- Timed status effects and stat composition
- Container and slot inventory resolution
- Delta-based turn resolution
"""

__version__ = "0.1.0"
