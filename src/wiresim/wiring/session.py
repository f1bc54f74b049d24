"""
Interactive wire drawing.

A wire is authored with several clicks: a pin to start, any number of empty
canvas clicks to add bends, and a second pin to finish. The session is either
idle or drawing; nothing here is ever persisted.

Rejections (finishing on the start component, deleting something that is not
there) leave the state as it was and never raise.

Example::

    >>> session = WiringSession(circuit)
    >>> session.click_pin(Endpoint("uno", "D10"))
    >>> session.click_canvas((200, 40))
    >>> wire = session.click_pin(Endpoint("led", "anode"))
    >>> session.is_drawing
    False
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from ..circuit import Circuit, Endpoint, Point, Wire

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    DRAWING = "drawing"


class SelectionType(Enum):
    WIRE = "wire"
    COMPONENT = "component"


@dataclass(frozen=True)
class Selection:
    """The item a delete request applies to."""

    type: SelectionType
    id: str


@dataclass
class Drawing:
    """In-progress wire: the start pin and the bends placed so far."""

    start: Endpoint
    bend_points: List[Point] = field(default_factory=list)


class WiringSession:
    """
    State machine for drawing one wire at a time.

    Args:
        circuit: Circuit whose wire store receives completed wires
        color: Colour tag for new wires (default: circuit wiring config)
    """

    def __init__(self, circuit: Circuit, color: Optional[str] = None):
        self.circuit = circuit
        self.color = color or circuit.wiring.default_color
        self.drawing: Optional[Drawing] = None
        self.selection: Optional[Selection] = None

    @property
    def state(self) -> SessionState:
        return SessionState.DRAWING if self.drawing else SessionState.IDLE

    @property
    def is_drawing(self) -> bool:
        return self.drawing is not None

    @property
    def start(self) -> Optional[Endpoint]:
        return self.drawing.start if self.drawing else None

    @property
    def bend_points(self) -> Tuple[Point, ...]:
        return tuple(self.drawing.bend_points) if self.drawing else ()

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def click_pin(self, endpoint: Endpoint) -> Optional[Wire]:
        """
        Handle a click on a pin.

        Idle: start drawing from the pin. Drawing: finish the wire on the pin,
        unless it belongs to the start component, in which case the click is
        ignored and drawing continues unchanged.

        Returns:
            The completed wire, or None when no wire was created
        """
        if endpoint.component_id not in self.circuit.placement:
            logger.debug(f"Ignoring click on pin of unknown component {endpoint}")
            return None

        if self.drawing is None:
            self.drawing = Drawing(start=endpoint)
            logger.debug(f"Started wire at {endpoint}")
            return None

        if endpoint.component_id == self.drawing.start.component_id:
            logger.debug(f"Rejected same-component wire {self.drawing.start} -> {endpoint}")
            return None

        drawing = self.drawing
        wire = self.circuit.add_wire(
            drawing.start, endpoint, drawing.bend_points, color=self.color
        )
        if wire is None:
            # start component vanished mid-draw; nothing sensible to finish
            self.drawing = None
            return None

        self.drawing = None
        logger.debug(f"Completed {wire!r} with {len(wire.bend_points)} bend(s)")
        return wire

    def click_canvas(self, point: Union[Point, Tuple[float, float]]) -> None:
        """
        Handle a click on empty canvas.

        Drawing: append a bend point. Idle: clear the selection.
        """
        if self.drawing is None:
            self.selection = None
            return
        if not isinstance(point, Point):
            point = Point(float(point[0]), float(point[1]))
        self.drawing.bend_points.append(point)

    def click(self, point: Tuple[float, float], radius: float = 6.0) -> Optional[Wire]:
        """Dispatch a raw canvas click to a pin click or an empty-canvas click."""
        endpoint = self.circuit.pin_at(point, radius)
        if endpoint is not None:
            return self.click_pin(endpoint)
        self.click_canvas(point)
        return None

    def cancel(self) -> None:
        """Abandon the wire being drawn."""
        if self.drawing is not None:
            logger.debug(f"Cancelled wire from {self.drawing.start}")
        self.drawing = None

    def preview_points(
        self, cursor: Union[Point, Tuple[float, float]]
    ) -> List[Tuple[float, float]]:
        """Rubber-band polyline from the start pin through the bends to the cursor."""
        if self.drawing is None:
            return []
        if isinstance(cursor, Point):
            cursor = cursor.as_tuple()
        start = self.circuit.pin_position(self.drawing.start)
        return [start, *(p.as_tuple() for p in self.drawing.bend_points), cursor]

    # ------------------------------------------------------------------
    # Selection and deletion
    # ------------------------------------------------------------------

    def select_wire(self, wire_id: str) -> None:
        self.selection = Selection(SelectionType.WIRE, wire_id)

    def select_component(self, component_id: str) -> None:
        self.selection = Selection(SelectionType.COMPONENT, component_id)

    def clear_selection(self) -> None:
        self.selection = None

    def delete_selected(self) -> bool:
        """
        Delete the selected wire or component.

        Deleting a component also removes its wires. A drawing session that
        started on the deleted component is abandoned; any other drawing
        continues.

        Returns:
            True if something was deleted
        """
        selection = self.selection
        if selection is None:
            return False
        self.selection = None

        if selection.type is SelectionType.WIRE:
            return self.circuit.delete_wire(selection.id)

        deleted = self.circuit.delete_component(selection.id)
        if deleted and self.drawing and self.drawing.start.component_id == selection.id:
            self.drawing = None
        return deleted
