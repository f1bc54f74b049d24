"""
Boundary to the external microcontroller execution core.

The instruction-level core is not part of wiresim. The tick loop only needs
the pin-level surface described by :class:`ExecutionCore`. This module also
provides the two pieces every ATmega328P-backed core needs on that boundary:
mapping Arduino pin numbers onto port registers, and loading the Intel HEX
image returned by the compile service.
"""

from __future__ import annotations

from typing import Iterator, MutableSequence, Protocol, Tuple, runtime_checkable

from ..exceptions import HexFormatError

# ATmega328P data-space register addresses
PINB = 0x23
PORTB = 0x25
PIND = 0x29
PORTD = 0x2B

# 32 KiB of flash
FLASH_SIZE = 0x8000


@runtime_checkable
class ExecutionCore(Protocol):
    """Pin-level interface of a microcontroller core."""

    def step(self, cycles: int) -> None:
        """Execute ``cycles`` clock cycles and return."""
        ...

    def get_pin_state(self, pin: int) -> int:
        """Output level (0 or 1) of a digital pin."""
        ...

    def set_digital_input(self, pin: int, level: int) -> None:
        """Drive a digital input; visible to the next executed cycle."""
        ...

    def stop(self) -> None:
        """Release any resources held by a running core."""
        ...


class AvrPinMap:
    """
    Arduino Uno pin numbering over ATmega328P port registers.

    D0-D7 are PORTD bits 0-7 and D8-D13 are PORTB bits 0-5. Inputs are
    written to PIND, so only D0-D7 can be driven from outside; writes to
    other pins are remembered but do not reach the core.

    Args:
        data: The core's data memory (anything indexable by address)
    """

    def __init__(self, data: MutableSequence[int]):
        self.data = data
        self.inputs: dict[int, int] = {}

    def get_pin_state(self, pin: int) -> int:
        if 8 <= pin <= 13:
            return (self.data[PORTB] >> (pin - 8)) & 1
        if 0 <= pin <= 7:
            return (self.data[PORTD] >> pin) & 1
        return 0

    def set_digital_input(self, pin: int, level: int) -> None:
        level = 1 if level else 0
        self.inputs[pin] = level

        if 0 <= pin <= 7:
            bit = 1 << pin
            if level:
                self.data[PIND] |= bit
            else:
                self.data[PIND] &= ~bit & 0xFF


def _data_records(source: str) -> Iterator[Tuple[int, int, bytes]]:
    """Yield ``(line number, address, payload)`` for each data record."""
    for line_no, raw in enumerate(source.splitlines(), 1):
        line = raw.strip()
        if not line.startswith(":") or line[7:9] != "00":
            continue
        try:
            count = int(line[1:3], 16)
            address = int(line[3:7], 16)
            payload = bytes.fromhex(line[9 : 9 + count * 2])
        except ValueError as e:
            raise HexFormatError(
                "Malformed Intel HEX record", context={"line": line_no, "record": line}
            ) from e
        if len(payload) != count:
            raise HexFormatError(
                "Truncated Intel HEX record",
                context={"line": line_no, "expected": count, "got": len(payload)},
            )
        yield line_no, address, payload


def load_hex(source: str, size: int = FLASH_SIZE) -> bytearray:
    """
    Decode the data records of an Intel HEX image into a flash image.

    Only data records (type 00) are loaded; end-of-file and address records
    are skipped. Lines not starting with ``:`` are ignored.

    Args:
        source: Intel HEX text
        size: Size of the returned image in bytes

    Raises:
        HexFormatError: On a malformed data record or an address outside
            the image
    """
    image = bytearray(size)
    for line_no, address, payload in _data_records(source):
        if address + len(payload) > size:
            raise HexFormatError(
                "Intel HEX record outside program memory",
                context={"line": line_no, "address": f"0x{address:04X}", "size": size},
            )
        image[address : address + len(payload)] = payload
    return image


def program_size(source: str) -> int:
    """Bytes of flash used by an Intel HEX image (highest address written + 1)."""
    ends = (address + len(payload) for _, address, payload in _data_records(source))
    return max(ends, default=0)
