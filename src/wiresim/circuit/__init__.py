"""
Circuit model: placed components, wires, and the stores that own them.
"""

from .circuit import Circuit
from .models import WIRE_COLORS, ComponentInstance, Endpoint, Point, Wire
from .stores import PlacementStore, WireStore, make_wire

__all__ = [
    "Circuit",
    "ComponentInstance",
    "Endpoint",
    "Point",
    "Wire",
    "WIRE_COLORS",
    "PlacementStore",
    "WireStore",
    "make_wire",
]
