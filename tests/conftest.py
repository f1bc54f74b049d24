"""Pytest fixtures for wiresim tests."""

import json
from pathlib import Path

import pytest

from wiresim.catalog import ComponentKind
from wiresim.circuit import Circuit, Endpoint, Point
from wiresim.config import WiringConfig

# First records of an ATmega328P image (interrupt vector jumps)
VECTOR_HEX = """:100000000C9434000C943E000C943E000C943E0082
:100010000C943E000C943E000C943E000C943E0068
:00000001FF
"""


class FakeCore:
    """
    Pin-level core double.

    Pin levels come from ``script``: one ``{pin: level}`` dict per step, the
    last one repeating. Everything the scheduler does to the core is
    recorded.
    """

    def __init__(self, script=None):
        self.script = list(script or [{}])
        self.steps = []
        self.inputs = []
        self.stopped = 0
        self._current = {}

    def step(self, cycles):
        index = min(len(self.steps), len(self.script) - 1)
        self._current = dict(self.script[index])
        self.steps.append(cycles)

    def get_pin_state(self, pin):
        return self._current.get(pin, 0)

    def set_digital_input(self, pin, level):
        self.inputs.append((pin, level))

    def stop(self):
        self.stopped += 1


@pytest.fixture
def fake_core():
    return FakeCore()


@pytest.fixture
def core_class():
    """The FakeCore class, for tests that script pin levels."""
    return FakeCore


@pytest.fixture
def program_hex() -> str:
    return VECTOR_HEX


@pytest.fixture
def manual_wiring() -> WiringConfig:
    """Wiring options with input auto-wiring turned off."""
    return WiringConfig(auto_wire_inputs=False)


@pytest.fixture
def circuit(manual_wiring) -> Circuit:
    """Empty circuit without input auto-wiring."""
    return Circuit(wiring=manual_wiring)


@pytest.fixture
def led_circuit(circuit) -> Circuit:
    """Board D10 -> LED anode, LED cathode -> board GND."""
    circuit.place(ComponentKind.ARDUINO_UNO, Point(0, 0), "uno")
    circuit.place(ComponentKind.LED_RED, Point(400, 0), "led")
    circuit.add_wire(Endpoint("uno", "D10"), Endpoint("led", "anode"), wire_id="w-signal")
    circuit.add_wire(Endpoint("led", "cathode"), Endpoint("uno", "GND"), wire_id="w-ground")
    return circuit


@pytest.fixture
def resistor_circuit(circuit) -> Circuit:
    """Board D10 -> resistor lead1, resistor lead2 -> LED anode."""
    circuit.place(ComponentKind.ARDUINO_UNO, Point(0, 0), "uno")
    circuit.place(ComponentKind.RESISTOR, Point(400, 0), "r1")
    circuit.place(ComponentKind.LED_GREEN, Point(500, 0), "led")
    circuit.add_wire(Endpoint("uno", "D10"), Endpoint("r1", "lead1"))
    circuit.add_wire(Endpoint("r1", "lead2"), Endpoint("led", "anode"))
    circuit.add_wire(Endpoint("led", "cathode"), Endpoint("uno", "GND"))
    return circuit


@pytest.fixture
def circuit_file(tmp_path: Path, led_circuit) -> Path:
    """The LED circuit saved as JSON."""
    path = tmp_path / "blink.json"
    led_circuit.save(path)
    return path


@pytest.fixture
def write_json(tmp_path: Path):
    """Write arbitrary data as a JSON file and return its path."""

    def _write(data, name="circuit.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write
