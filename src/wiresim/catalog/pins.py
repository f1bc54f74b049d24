"""
Pin catalogue and geometry resolver.

Maps ``(kind, pin name)`` to a local offset inside the component footprint.
Adding the instance position gives the absolute coordinate used to draw wire
ends and to hit-test clicks. Lookups are total: a pin that is not in the
catalogue resolves to the footprint centre.

Example::

    >>> from wiresim.catalog import ComponentKind, PinCatalog
    >>> catalog = PinCatalog.default()
    >>> catalog.resolve(ComponentKind.ARDUINO_UNO, "D10", (100, 50))
    (250.0, 66.0)
"""

from __future__ import annotations

import math
import re
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .kinds import ComponentKind

Offset = Tuple[float, float]

# Driver pins in the fixed order used by propagation
DIGITAL_PINS: Tuple[str, ...] = tuple(f"D{n}" for n in range(14))

_DIGITAL_RE = re.compile(r"^D(\d{1,2})$")

# Board header rows (x offsets; top header at y=16, bottom header at y=254)
_UNO_TOP_HEADER = [
    ("AREF", 85), ("GND", 98), ("D13", 111), ("D12", 124), ("D11", 137),
    ("D10", 150), ("D9", 163),
    ("D8", 195), ("D7", 208), ("D6", 221), ("D5", 234), ("D4", 247),
    ("D3", 260), ("D2", 273), ("D1", 286), ("D0", 299),
]  # fmt: skip
_UNO_BOTTOM_HEADER = [
    ("IOREF", 130), ("RESET", 143), ("3.3V", 156), ("5V", 169),
    ("GND1", 182), ("GND2", 195), ("VIN", 208),
    ("A0", 232), ("A1", 245), ("A2", 258), ("A3", 271), ("A4", 284), ("A5", 297),
]  # fmt: skip

_LED_PINS = [("anode", (13.5, 76.0)), ("cathode", (26.5, 70.0))]


def _board_pins() -> List[Tuple[str, Offset]]:
    pins = [(name, (float(x), 16.0)) for name, x in _UNO_TOP_HEADER]
    pins += [(name, (float(x), 254.0)) for name, x in _UNO_BOTTOM_HEADER]
    return pins


DEFAULT_PIN_TABLE: Dict[ComponentKind, List[Tuple[str, Offset]]] = {
    ComponentKind.ARDUINO_UNO: _board_pins(),
    ComponentKind.LED_RED: _LED_PINS,
    ComponentKind.LED_GREEN: _LED_PINS,
    ComponentKind.LED_YELLOW: _LED_PINS,
    ComponentKind.BUZZER: [("1", (25.0, 58.0)), ("2", (35.0, 58.0))],
    ComponentKind.RESISTOR: [("lead1", (25.0, 5.0)), ("lead2", (25.0, 115.0))],
    ComponentKind.PUSHBUTTON: [
        ("1b", (20.0, 15.0)),
        ("2b", (50.0, 15.0)),
        ("1a", (20.0, 105.0)),
        ("2a", (50.0, 105.0)),
    ],
}


def board_pin_number(pin_name: str) -> Optional[int]:
    """Return the digital pin number for names like ``"D10"``, else None."""
    match = _DIGITAL_RE.match(pin_name)
    if match is None:
        return None
    return int(match.group(1))


def default_offset(kind: ComponentKind) -> Offset:
    """Centre of the component footprint."""
    width, height = kind.size
    return (width / 2, height / 2)


class PinCatalog:
    """
    Immutable registry of pin offsets per component kind.

    Build one with :meth:`default` (shared, loaded once) or from a custom
    table, then pass it by reference to whatever needs geometry.
    """

    def __init__(self, table: Mapping[ComponentKind, Iterable[Tuple[str, Offset]]]):
        offsets: Dict[Tuple[ComponentKind, str], Offset] = {}
        order: Dict[ComponentKind, Tuple[str, ...]] = {}
        for kind, pins in table.items():
            names = []
            for name, (dx, dy) in pins:
                offsets[(kind, name)] = (float(dx), float(dy))
                names.append(name)
            order[kind] = tuple(names)
        self._offsets = MappingProxyType(offsets)
        self._order = MappingProxyType(order)

    @classmethod
    @lru_cache(maxsize=1)
    def default(cls) -> PinCatalog:
        """The built-in catalogue, constructed on first use."""
        return cls(DEFAULT_PIN_TABLE)

    def pins(self, kind: ComponentKind) -> Tuple[str, ...]:
        """Pin names of a kind, in catalogue order."""
        return self._order.get(kind, ())

    def has_pin(self, kind: ComponentKind, pin_name: str) -> bool:
        return (kind, pin_name) in self._offsets

    def offset(self, kind: ComponentKind, pin_name: str) -> Offset:
        """Local offset of a pin, falling back to the footprint centre."""
        return self._offsets.get((kind, pin_name), default_offset(kind))

    def resolve(
        self, kind: ComponentKind, pin_name: str, position: Tuple[float, float]
    ) -> Tuple[float, float]:
        """Absolute coordinate of a pin on an instance placed at ``position``."""
        dx, dy = self.offset(kind, pin_name)
        return (position[0] + dx, position[1] + dy)

    def driver_pins(self, kind: ComponentKind) -> Tuple[str, ...]:
        """Digital driver pins of a board kind in propagation order (D0 first)."""
        if not kind.is_board:
            return ()
        present = set(self.pins(kind))
        return tuple(name for name in DIGITAL_PINS if name in present)

    def nearest_pin(
        self,
        kind: ComponentKind,
        position: Tuple[float, float],
        point: Tuple[float, float],
        radius: float = 6.0,
    ) -> Optional[str]:
        """
        Find the pin closest to ``point`` within ``radius``.

        Used to turn a canvas click into a pin click. Returns None when the
        click is not on any pin of the instance.
        """
        best: Optional[str] = None
        best_dist = radius
        for name in self.pins(kind):
            x, y = self.resolve(kind, name, position)
            dist = math.hypot(point[0] - x, point[1] - y)
            if dist <= best_dist:
                best, best_dist = name, dist
        return best

    def __contains__(self, key: Tuple[ComponentKind, str]) -> bool:
        return key in self._offsets

    def __len__(self) -> int:
        return len(self._offsets)
