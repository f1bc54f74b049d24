"""
wiresim: signal propagation and interactive wiring for breadboard simulation.

Place a microcontroller board and a few peripherals, draw wires between their
pins, then run a sketch and watch the board's output levels reach the LEDs.

Modules:
    catalog: Component kinds and pin geometry
    circuit: Placed components, wires, and their stores
    wiring: Multi-click wire drawing session
    simulation: Net tracing, compile client, execution-core boundary, tick loop
    config: TOML configuration
    cli: Command-line tools

Quick Start::

    from wiresim import Circuit, ComponentKind, Endpoint, Point, NetlistTracer

    circuit = Circuit()
    circuit.place(ComponentKind.ARDUINO_UNO, Point(0, 0), "uno")
    circuit.place(ComponentKind.LED_RED, Point(400, 0), "led")
    circuit.add_wire(Endpoint("uno", "D13"), Endpoint("led", "anode"))

    state = NetlistTracer(circuit).propagate({13: 1})
    assert state.is_energized("led")
"""

__version__ = "0.1.0"

from wiresim.catalog import ComponentKind, PinCatalog
from wiresim.circuit import Circuit, ComponentInstance, Endpoint, Point, Wire
from wiresim.config import Config
from wiresim.simulation import (
    CompileClient,
    NetlistTracer,
    NetState,
    SimulationRunner,
    TickScheduler,
)
from wiresim.wiring import WiringSession

__all__ = [
    "__version__",
    "ComponentKind",
    "PinCatalog",
    "Circuit",
    "ComponentInstance",
    "Endpoint",
    "Point",
    "Wire",
    "Config",
    "NetlistTracer",
    "NetState",
    "TickScheduler",
    "SimulationRunner",
    "CompileClient",
    "WiringSession",
]
