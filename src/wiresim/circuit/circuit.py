"""
Circuit aggregate.

Owns the placement store and the wire store and enforces the rules that span
both of them:

- every wire end references a live component
- deleting a component removes every wire touching it in the same step
- auto-provisioned inputs have their wires replaced, never duplicated

Listeners registered with :meth:`Circuit.subscribe` are called after each
complete mutation, so they never observe a half-applied change.

Example::

    >>> from wiresim.circuit import Circuit, Endpoint, Point
    >>> from wiresim.catalog import ComponentKind
    >>> circuit = Circuit()
    >>> uno = circuit.place(ComponentKind.ARDUINO_UNO, Point(0, 0), "uno")
    >>> led = circuit.place(ComponentKind.LED_RED, Point(400, 0), "led")
    >>> wire = circuit.add_wire(Endpoint("uno", "D10"), Endpoint("led", "anode"))
    >>> circuit.delete_component("led")
    True
    >>> len(circuit.wires)
    0
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..catalog import ComponentKind, PinCatalog
from ..config import WiringConfig
from ..exceptions import CircuitFileError
from .models import ComponentInstance, Endpoint, Point, Wire
from .stores import PlacementStore, WireStore, make_wire

logger = logging.getLogger(__name__)

Listener = Callable[[str, "Circuit"], None]

# Input lead wired to the board signal pin / ground when auto-provisioning
INPUT_SIGNAL_LEAD = "1a"
INPUT_GROUND_LEAD = "2a"
BOARD_GROUND_PIN = "GND"


class Circuit:
    """
    Components and wires on one workspace.

    Args:
        catalog: Pin catalogue used for geometry (default: built-in catalogue)
        wiring: Wiring options (default colour, input auto-wiring)
    """

    def __init__(
        self,
        catalog: Optional[PinCatalog] = None,
        wiring: Optional[WiringConfig] = None,
    ):
        self.catalog = catalog or PinCatalog.default()
        self.wiring = wiring or WiringConfig()
        self.placement = PlacementStore()
        self.wires = WireStore()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def place(
        self,
        kind: ComponentKind,
        position: Union[Point, Tuple[float, float]],
        component_id: Optional[str] = None,
        auto_wire: Optional[bool] = None,
    ) -> ComponentInstance:
        """
        Place a component.

        Push buttons are wired to the first board automatically when
        ``wiring.auto_wire_inputs`` is set (override with ``auto_wire``).
        """
        instance = self.placement.place(kind, _as_point(position), component_id)
        logger.debug(f"Placed {instance.kind.value} as {instance.id}")
        self._notify("component_placed")

        if auto_wire is None:
            auto_wire = self.wiring.auto_wire_inputs
        if auto_wire and kind.is_input:
            self.provision_input(instance.id)
        return instance

    def move(self, component_id: str, position: Union[Point, Tuple[float, float]]) -> bool:
        """Move a component; wires follow because they reference pins, not points."""
        moved = self.placement.move(component_id, _as_point(position))
        if moved:
            self._notify("component_moved")
        return moved

    def delete_component(self, component_id: str) -> bool:
        """
        Delete a component and every wire touching it.

        Both stores are updated before any listener runs. Unknown ids are a
        silent no-op.
        """
        if component_id not in self.placement:
            logger.debug(f"Ignoring delete of unknown component {component_id}")
            return False

        remaining = [w for w in self.wires if not w.touches(component_id)]
        removed = len(self.wires) - len(remaining)
        self.placement.remove(component_id)
        self.wires.replace(remaining)

        logger.debug(f"Deleted {component_id} and {removed} wire(s)")
        self._notify("component_deleted")
        return True

    def get(self, component_id: str) -> Optional[ComponentInstance]:
        return self.placement.get(component_id)

    def boards(self) -> List[ComponentInstance]:
        return self.placement.boards()

    # ------------------------------------------------------------------
    # Wires
    # ------------------------------------------------------------------

    def add_wire(
        self,
        start: Endpoint,
        end: Endpoint,
        bend_points: Iterable[Union[Point, Tuple[float, float]]] = (),
        color: Optional[str] = None,
        wire_id: Optional[str] = None,
    ) -> Optional[Wire]:
        """
        Connect two endpoints.

        Returns None, leaving the store unchanged, when either end is on a
        component that does not exist or both ends are on the same component.
        """
        if start.component_id not in self.placement or end.component_id not in self.placement:
            logger.debug(f"Refusing wire with dead endpoint {start} -> {end}")
            return None

        wire = make_wire(
            start,
            end,
            (_as_point(p) for p in bend_points),
            color or self.wiring.default_color,
            wire_id,
        )
        added = self.wires.add(wire)
        if added is not None:
            self._notify("wire_added")
        return added

    def delete_wire(self, wire_id: str) -> bool:
        """Delete a wire. Unknown ids are a silent no-op."""
        if self.wires.remove(wire_id) is None:
            logger.debug(f"Ignoring delete of unknown wire {wire_id}")
            return False
        self._notify("wire_deleted")
        return True

    def auto_wire(
        self,
        component_id: str,
        links: Iterable[Tuple[Endpoint, Endpoint]],
        color: Optional[str] = None,
    ) -> List[Wire]:
        """
        Replace every wire touching ``component_id`` with wires for ``links``.

        Old and new wires are swapped in a single store update. Links with a
        dead or same-component endpoint are skipped.
        """
        if component_id not in self.placement:
            return []

        new_wires = []
        for start, end in links:
            if start.component_id not in self.placement or end.component_id not in self.placement:
                continue
            if start.component_id == end.component_id:
                continue
            new_wires.append(make_wire(start, end, color=color or self.wiring.default_color))

        kept = [w for w in self.wires if not w.touches(component_id)]
        self.wires.replace(kept + new_wires)
        logger.debug(f"Re-wired {component_id} with {len(new_wires)} wire(s)")
        self._notify("wires_replaced")
        return new_wires

    def provision_input(self, component_id: str, board_id: Optional[str] = None) -> List[Wire]:
        """
        Wire an input component to a board's input pin and ground.

        Uses ``board_id`` or the first placed board. Returns the new wires, or
        an empty list when there is no board to wire to.
        """
        instance = self.placement.get(component_id)
        if instance is None or not instance.kind.is_input:
            return []

        board = self.placement.get(board_id) if board_id else None
        if board is None:
            boards = self.placement.boards()
            if not boards:
                return []
            board = boards[0]

        links = [
            (Endpoint(component_id, INPUT_SIGNAL_LEAD), Endpoint(board.id, self.wiring.input_pin)),
            (Endpoint(component_id, INPUT_GROUND_LEAD), Endpoint(board.id, BOARD_GROUND_PIN)),
        ]
        return self.auto_wire(component_id, links)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def pin_position(self, endpoint: Endpoint) -> Tuple[float, float]:
        """Absolute coordinate of an endpoint on a placed component."""
        instance = self.placement.get(endpoint.component_id)
        if instance is None:
            raise KeyError(endpoint.component_id)
        return self.catalog.resolve(
            instance.kind, endpoint.pin_name, instance.position.as_tuple()
        )

    def wire_points(self, wire_id: str) -> List[Tuple[float, float]]:
        """Rendering polyline for a wire."""
        wire = self.wires.get(wire_id)
        if wire is None:
            raise KeyError(wire_id)
        return wire.points(self.pin_position)

    def pin_at(self, point: Tuple[float, float], radius: float = 6.0) -> Optional[Endpoint]:
        """Endpoint under a canvas point, searching the most recently placed first."""
        for instance in reversed(list(self.placement)):
            name = self.catalog.nearest_pin(
                instance.kind, instance.position.as_tuple(), point, radius
            )
            if name is not None:
                return Endpoint(instance.id, name)
        return None

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def check(self) -> List[str]:
        """
        Report suspicious but legal wiring.

        Partial wiring is a normal state, so these are warnings for the user,
        never errors.
        """
        issues = []
        for wire in self.wires:
            for endpoint in wire.endpoints:
                instance = self.placement.get(endpoint.component_id)
                if instance and not self.catalog.has_pin(instance.kind, endpoint.pin_name):
                    issues.append(
                        f"Wire {wire.id} uses unknown pin '{endpoint.pin_name}' "
                        f"on {instance.kind.value} {instance.id}"
                    )

        wired = {e.component_id for w in self.wires for e in w.endpoints}
        for instance in self.placement:
            if instance.id not in wired and not instance.kind.is_board:
                issues.append(f"{instance.kind.value} {instance.id} has no wires")

        if not self.placement.boards() and len(self.placement):
            issues.append("No board placed; nothing will drive the circuit")
        return issues

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "components": [c.to_dict() for c in self.placement],
            "wires": [w.to_dict() for w in self.wires],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        catalog: Optional[PinCatalog] = None,
        wiring: Optional[WiringConfig] = None,
        source: Optional[str] = None,
    ) -> Circuit:
        """
        Build a circuit from its dictionary form.

        Raises:
            CircuitFileError: On unknown kinds, duplicate ids, malformed
                entries, or wires referencing missing components
        """
        circuit = cls(catalog, wiring)
        try:
            for entry in data.get("components", []):
                try:
                    kind = ComponentKind.from_string(entry["kind"])
                except ValueError as e:
                    raise CircuitFileError(
                        str(e),
                        context={"component": entry.get("id")},
                        suggestions=[
                            "Use one of: " + ", ".join(k.value for k in ComponentKind)
                        ],
                        file_path=source,
                    ) from e
                position = Point(float(entry.get("x", 0)), float(entry.get("y", 0)))
                circuit.placement.place(kind, position, entry.get("id"))

            for entry in data.get("wires", []):
                start = Endpoint.from_dict(entry["start"])
                end = Endpoint.from_dict(entry["end"])
                for endpoint in (start, end):
                    if endpoint.component_id not in circuit.placement:
                        raise CircuitFileError(
                            "Wire references unknown component",
                            context={"wire": entry.get("id"), "component": endpoint.component_id},
                            file_path=source,
                        )
                wire = make_wire(
                    start,
                    end,
                    [Point.from_dict(p) for p in entry.get("bendPoints", [])],
                    entry.get("color", circuit.wiring.default_color),
                    entry.get("id"),
                )
                if circuit.wires.add(wire) is None:
                    raise CircuitFileError(
                        "Wire connects a component to itself",
                        context={"wire": wire.id, "component": start.component_id},
                        file_path=source,
                    )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise CircuitFileError(
                f"Malformed circuit data: {e}",
                suggestions=["Check the file against the circuit JSON layout"],
                file_path=source,
            ) from e
        return circuit

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        catalog: Optional[PinCatalog] = None,
        wiring: Optional[WiringConfig] = None,
    ) -> Circuit:
        """Load a circuit from a JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except OSError as e:
            raise CircuitFileError(f"Cannot read circuit file: {e}", file_path=path) from e
        except json.JSONDecodeError as e:
            raise CircuitFileError(
                f"Invalid JSON: {e.msg}",
                context={"line": e.lineno, "column": e.colno},
                file_path=path,
            ) from e
        if not isinstance(data, dict):
            raise CircuitFileError("Circuit file must contain a JSON object", file_path=path)
        return cls.from_dict(data, catalog, wiring, source=str(path))

    def save(self, path: Union[str, Path]) -> None:
        """Write the circuit as JSON."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=2) + "\n")

    def __repr__(self) -> str:
        return f"Circuit({len(self.placement)} components, {len(self.wires)} wires)"


def _as_point(value: Union[Point, Tuple[float, float]]) -> Point:
    if isinstance(value, Point):
        return value
    return Point(float(value[0]), float(value[1]))
