"""
Net tracing and signal propagation.

Follows wires between component pins to work out which indicators a board's
driver pins reach, then turns pin levels into a per-tick :class:`NetState`.

Tracing rules:

- wires are undirected; from a pin, every wire ending there leads to the pin
  at its other end
- sinks (LEDs, buzzers) are recorded when reached but never expanded
- pass-through parts (resistors) conduct: reaching one lead reaches all of
  their leads
- each exact ``(component, pin)`` endpoint is expanded at most once, so
  wiring loops terminate

Example::

    >>> tracer = NetlistTracer(circuit)
    >>> state = tracer.propagate({10: 1})
    >>> state.is_energized("led-1")
    True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Set, Tuple

from ..catalog import PinCatalog, board_pin_number
from ..circuit import Circuit, ComponentInstance, Endpoint, Wire

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetState:
    """
    Energized state of every sink for one tick.

    Always built from scratch; never merged with an earlier state.
    """

    energized: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))
    tick: int = 0

    def is_energized(self, component_id: str) -> bool:
        """Unknown and unreached sinks are off."""
        return self.energized.get(component_id, False)

    def energized_ids(self) -> List[str]:
        return [cid for cid, on in self.energized.items() if on]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"tick": self.tick, "energized": dict(self.energized)}

    def __len__(self) -> int:
        return len(self.energized)


class NetlistTracer:
    """
    Traces signals through a circuit.

    The wire graph is rebuilt from the circuit on every :meth:`propagate`
    call, so the result is a pure function of the current stores and the
    given levels.
    """

    def __init__(self, circuit: Circuit, catalog: Optional[PinCatalog] = None):
        self.circuit = circuit
        self.catalog = catalog or circuit.catalog
        self._build_wire_graph()

    def _build_wire_graph(self) -> None:
        """Index wires by the endpoints they touch."""
        self.wire_endpoints: Dict[Endpoint, List[Wire]] = {}
        self.components: Dict[str, ComponentInstance] = {c.id: c for c in self.circuit.placement}

        for wire in self.circuit.wires:
            for endpoint in wire.endpoints:
                self.wire_endpoints.setdefault(endpoint, []).append(wire)

    def _sibling_leads(self, endpoint: Endpoint) -> List[Endpoint]:
        """Other leads of a pass-through component, empty for anything else."""
        instance = self.components.get(endpoint.component_id)
        if instance is None or not instance.kind.is_pass_through:
            return []
        return [
            Endpoint(instance.id, name)
            for name in self.catalog.pins(instance.kind)
            if name != endpoint.pin_name
        ]

    def _is_sink(self, endpoint: Endpoint) -> bool:
        instance = self.components.get(endpoint.component_id)
        return instance is not None and instance.kind.is_sink

    def trace(
        self,
        start: Endpoint,
        visited: Optional[Set[Endpoint]] = None,
    ) -> Set[Endpoint]:
        """
        Collect every endpoint reachable from ``start``.

        Args:
            start: Endpoint to trace from (included in the result)
            visited: Endpoints already expanded; updated in place. Pass a
                shared set to trace several starts without revisiting.

        Returns:
            Set of reached endpoints, sinks included
        """
        if visited is None:
            visited = set()

        reached: Set[Endpoint] = set()
        to_visit = [start]

        while to_visit:
            endpoint = to_visit.pop()
            if endpoint in visited:
                continue
            visited.add(endpoint)
            reached.add(endpoint)

            if endpoint != start and self._is_sink(endpoint):
                continue

            for wire in self.wire_endpoints.get(endpoint, ()):
                other = wire.other_end(endpoint)
                if other not in visited:
                    to_visit.append(other)

            for lead in self._sibling_leads(endpoint):
                if lead not in visited:
                    to_visit.append(lead)

        return reached

    def reached_components(self, start: Endpoint) -> Set[str]:
        """Ids of components with at least one reached endpoint."""
        return {e.component_id for e in self.trace(start)}

    def reached_sinks(self, start: Endpoint) -> Set[str]:
        return {e.component_id for e in self.trace(start) if self._is_sink(e)}

    def driver_endpoints(self) -> List[Tuple[Endpoint, int]]:
        """
        Driver pins of every placed board with their pin numbers.

        Boards in placement order, pins D0..D13 within a board. This is the
        order in which drivers are applied during propagation.
        """
        drivers = []
        for board in self.circuit.placement.boards():
            for name in self.catalog.driver_pins(board.kind):
                number = board_pin_number(name)
                if number is not None:
                    drivers.append((Endpoint(board.id, name), number))
        return drivers

    def propagate(self, levels: Mapping[int, int], tick: int = 0) -> NetState:
        """
        Compute the sink states for a set of driver levels.

        Every sink starts off. Each driver pin with a known level is traced
        and every sink it reaches takes ``level == 1``. When two drivers
        reach the same sink the one applied last wins.

        Args:
            levels: Digital pin number -> level (0 or 1); missing pins are
                treated as unknown and skipped
            tick: Tick number recorded on the state
        """
        self._build_wire_graph()
        energized: Dict[str, bool] = {s.id: False for s in self.circuit.placement.sinks()}

        for endpoint, number in self.driver_endpoints():
            level = levels.get(number)
            if level is None:
                continue
            for sink_id in self.reached_sinks(endpoint):
                energized[sink_id] = level == 1

        return NetState(energized=MappingProxyType(energized), tick=tick)

    def input_pins(self, component_id: str) -> List[int]:
        """
        Board digital pins wired to an input component.

        Traces from every lead of the component and collects the digital pin
        numbers of any board endpoints reached.
        """
        self._build_wire_graph()
        instance = self.components.get(component_id)
        if instance is None:
            return []

        visited: Set[Endpoint] = set()
        pins: Set[int] = set()
        for name in self.catalog.pins(instance.kind):
            for endpoint in self.trace(Endpoint(component_id, name), visited):
                target = self.components.get(endpoint.component_id)
                if target is None or not target.kind.is_board:
                    continue
                number = board_pin_number(endpoint.pin_name)
                if number is not None:
                    pins.add(number)
        return sorted(pins)


def propagate(circuit: Circuit, levels: Mapping[int, int], tick: int = 0) -> NetState:
    """Convenience function to compute sink states for a circuit."""
    return NetlistTracer(circuit).propagate(levels, tick)
