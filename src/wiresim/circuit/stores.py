"""
Placement and wire stores.

Both stores are plain ordered containers. Cross-store rules (cascade delete,
endpoint liveness) live in :class:`wiresim.circuit.circuit.Circuit`, which
owns one of each.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from ..catalog import ComponentKind
from .models import ComponentInstance, Endpoint, Point, Wire, new_id

logger = logging.getLogger(__name__)


class PlacementStore:
    """Placed component instances, in placement order."""

    def __init__(self) -> None:
        self._components: Dict[str, ComponentInstance] = {}

    def place(
        self,
        kind: ComponentKind,
        position: Point,
        component_id: Optional[str] = None,
    ) -> ComponentInstance:
        """
        Place a new instance.

        Raises:
            ValueError: If ``component_id`` is already in use
        """
        if component_id is None:
            component_id = new_id(kind.value)
        elif component_id in self._components:
            raise ValueError(f"Component id already in use: {component_id!r}")

        instance = ComponentInstance(id=component_id, kind=kind, position=position)
        self._components[component_id] = instance
        return instance

    def move(self, component_id: str, position: Point) -> bool:
        """Move an instance. Unknown ids are ignored."""
        instance = self._components.get(component_id)
        if instance is None:
            return False
        instance.position = position
        return True

    def remove(self, component_id: str) -> Optional[ComponentInstance]:
        return self._components.pop(component_id, None)

    def get(self, component_id: str) -> Optional[ComponentInstance]:
        return self._components.get(component_id)

    def boards(self) -> List[ComponentInstance]:
        return [c for c in self._components.values() if c.kind.is_board]

    def sinks(self) -> List[ComponentInstance]:
        return [c for c in self._components.values() if c.kind.is_sink]

    def by_kind(self, kind: ComponentKind) -> List[ComponentInstance]:
        return [c for c in self._components.values() if c.kind is kind]

    def clear(self) -> None:
        self._components.clear()

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._components

    def __iter__(self) -> Iterator[ComponentInstance]:
        return iter(list(self._components.values()))

    def __len__(self) -> int:
        return len(self._components)


class WireStore:
    """Wires, in creation order."""

    def __init__(self) -> None:
        self._wires: Dict[str, Wire] = {}

    def add(self, wire: Wire) -> Optional[Wire]:
        """
        Add a wire.

        A wire whose two ends sit on the same component is refused and None is
        returned; this is an authoring rule, not an error.

        Raises:
            ValueError: If the wire id is already in use
        """
        if wire.start.component_id == wire.end.component_id:
            logger.debug(f"Refusing same-component wire {wire.start} -> {wire.end}")
            return None
        if wire.id in self._wires:
            raise ValueError(f"Wire id already in use: {wire.id!r}")
        self._wires[wire.id] = wire
        return wire

    def remove(self, wire_id: str) -> Optional[Wire]:
        return self._wires.pop(wire_id, None)

    def get(self, wire_id: str) -> Optional[Wire]:
        return self._wires.get(wire_id)

    def touching(self, component_id: str) -> List[Wire]:
        """Wires with at least one end on ``component_id``."""
        return [w for w in self._wires.values() if w.touches(component_id)]

    def incident(self, endpoint: Endpoint) -> List[Wire]:
        """Wires with an end exactly at ``endpoint``."""
        return [w for w in self._wires.values() if endpoint in w.endpoints]

    def replace(self, wires: Iterable[Wire]) -> None:
        """Swap the whole contents in one assignment."""
        self._wires = {w.id: w for w in wires}

    def clear(self) -> None:
        self._wires.clear()

    def __contains__(self, wire_id: object) -> bool:
        return wire_id in self._wires

    def __iter__(self) -> Iterator[Wire]:
        return iter(list(self._wires.values()))

    def __len__(self) -> int:
        return len(self._wires)


def make_wire(
    start: Endpoint,
    end: Endpoint,
    bend_points: Iterable[Point] = (),
    color: str = "red",
    wire_id: Optional[str] = None,
) -> Wire:
    """Build a wire value with a fresh id unless one is given."""
    return Wire(
        id=wire_id or new_id("wire"),
        start=start,
        end=end,
        bend_points=tuple(bend_points),
        color=color,
    )
