"""
Component kinds and pin geometry.

Provides the closed set of supported component kinds and the pin catalogue
that resolves ``(kind, pin)`` pairs to workspace coordinates.
"""

from .kinds import ComponentKind, ComponentRole
from .pins import (
    DEFAULT_PIN_TABLE,
    DIGITAL_PINS,
    PinCatalog,
    board_pin_number,
    default_offset,
)

__all__ = [
    "ComponentKind",
    "ComponentRole",
    "PinCatalog",
    "DEFAULT_PIN_TABLE",
    "DIGITAL_PINS",
    "board_pin_number",
    "default_offset",
]
