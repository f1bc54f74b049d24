"""
Component kinds supported on the workspace.

The set of kinds is closed: every member has exactly one role and one
footprint, and both tables below must cover the whole enum.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class ComponentRole(Enum):
    """How a component takes part in signal propagation."""

    BOARD = "board"  # exposes driver pins
    SINK = "sink"  # shows the level that reaches it
    PASS_THROUGH = "pass_through"  # conducts between its leads
    INPUT = "input"  # user-operated, feeds the board


class ComponentKind(Enum):
    """Placeable component kinds."""

    ARDUINO_UNO = "arduino-uno"
    LED_RED = "led-red"
    LED_GREEN = "led-green"
    LED_YELLOW = "led-yellow"
    BUZZER = "buzzer"
    RESISTOR = "resistor"
    PUSHBUTTON = "pushbutton"

    @property
    def role(self) -> ComponentRole:
        return _ROLES[self]

    @property
    def size(self) -> Tuple[float, float]:
        """Footprint (width, height) in workspace units."""
        return _SIZES[self]

    @property
    def is_board(self) -> bool:
        return self.role is ComponentRole.BOARD

    @property
    def is_sink(self) -> bool:
        return self.role is ComponentRole.SINK

    @property
    def is_pass_through(self) -> bool:
        return self.role is ComponentRole.PASS_THROUGH

    @property
    def is_input(self) -> bool:
        return self.role is ComponentRole.INPUT

    @classmethod
    def from_string(cls, value: str) -> ComponentKind:
        """Parse a kind tag, accepting either the value or the member name.

        Raises:
            ValueError: If the tag does not name a supported kind
        """
        tag = value.strip()
        for kind in cls:
            if tag.lower() in (kind.value, kind.name.lower()):
                return kind
        raise ValueError(f"Unknown component kind: {value!r}")


_ROLES: Dict[ComponentKind, ComponentRole] = {
    ComponentKind.ARDUINO_UNO: ComponentRole.BOARD,
    ComponentKind.LED_RED: ComponentRole.SINK,
    ComponentKind.LED_GREEN: ComponentRole.SINK,
    ComponentKind.LED_YELLOW: ComponentRole.SINK,
    ComponentKind.BUZZER: ComponentRole.SINK,
    ComponentKind.RESISTOR: ComponentRole.PASS_THROUGH,
    ComponentKind.PUSHBUTTON: ComponentRole.INPUT,
}

_SIZES: Dict[ComponentKind, Tuple[float, float]] = {
    ComponentKind.ARDUINO_UNO: (340.0, 270.0),
    ComponentKind.LED_RED: (40.0, 80.0),
    ComponentKind.LED_GREEN: (40.0, 80.0),
    ComponentKind.LED_YELLOW: (40.0, 80.0),
    ComponentKind.BUZZER: (60.0, 60.0),
    ComponentKind.RESISTOR: (50.0, 120.0),
    ComponentKind.PUSHBUTTON: (70.0, 120.0),
}
