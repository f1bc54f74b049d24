"""
Circuit data models.

Plain value types shared by the stores, the wiring session and the tracer.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Tuple

from ..catalog import ComponentKind

# Wire colour palette (tag -> hex)
WIRE_COLORS = {
    "red": "#FF0000",
    "green": "#00FF00",
    "blue": "#0066FF",
    "yellow": "#FFFF00",
    "orange": "#FF6600",
    "purple": "#9900FF",
    "white": "#FFFFFF",
    "black": "#333333",
}


def new_id(prefix: str) -> str:
    """Generate a short unique id such as ``led-red-1f3a9c0e``."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class Point:
    """A workspace coordinate."""

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> Point:
        return cls(float(data["x"]), float(data["y"]))


@dataclass(frozen=True)
class Endpoint:
    """A named pin on a placed component."""

    component_id: str
    pin_name: str

    def to_dict(self) -> dict:
        return {"componentId": self.component_id, "pinName": self.pin_name}

    @classmethod
    def from_dict(cls, data: dict) -> Endpoint:
        return cls(str(data["componentId"]), str(data["pinName"]))

    def __str__(self) -> str:
        return f"{self.component_id}.{self.pin_name}"


@dataclass
class ComponentInstance:
    """A component placed on the workspace."""

    id: str
    kind: ComponentKind
    position: Point = field(default_factory=lambda: Point(0.0, 0.0))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "x": self.position.x,
            "y": self.position.y,
        }


@dataclass(frozen=True)
class Wire:
    """
    A wire between two endpoints.

    Bend points only shape the drawn polyline; connectivity depends on the
    endpoints alone.
    """

    id: str
    start: Endpoint
    end: Endpoint
    bend_points: Tuple[Point, ...] = ()
    color: str = "red"

    @property
    def endpoints(self) -> Tuple[Endpoint, Endpoint]:
        return (self.start, self.end)

    @property
    def hex_color(self) -> str:
        """Display colour; unknown tags are passed through unchanged."""
        return WIRE_COLORS.get(self.color, self.color)

    def touches(self, component_id: str) -> bool:
        return self.start.component_id == component_id or self.end.component_id == component_id

    def other_end(self, endpoint: Endpoint) -> Endpoint:
        """The endpoint opposite ``endpoint``."""
        return self.end if endpoint == self.start else self.start

    def points(
        self, pin_position: Callable[[Endpoint], Tuple[float, float]]
    ) -> List[Tuple[float, float]]:
        """
        Polyline for rendering: start pin, bend points, end pin.

        Args:
            pin_position: Resolves an endpoint to its absolute coordinate,
                usually ``Circuit.pin_position``
        """
        bends = [p.as_tuple() for p in self.bend_points]
        return [pin_position(self.start), *bends, pin_position(self.end)]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "bendPoints": [p.to_dict() for p in self.bend_points],
            "color": self.color,
        }

    def __repr__(self) -> str:
        return f"Wire({self.id}: {self.start} -> {self.end})"
