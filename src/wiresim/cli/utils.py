"""Shared utilities for CLI commands."""

from __future__ import annotations

import sys
import traceback
from typing import TYPE_CHECKING, List, Optional

from wiresim.catalog import DIGITAL_PINS, board_pin_number
from wiresim.circuit import Endpoint
from wiresim.exceptions import WireSimError

if TYPE_CHECKING:
    from rich.console import Console

__all__ = ["format_error", "print_error", "get_error_console", "parse_endpoint", "parse_levels"]

# Module-level console for error output, created lazily
_error_console: Console | None = None


def get_error_console() -> Console:
    """Get or create the Rich console for error output.

    Returns a console configured for stderr. The console is created lazily
    and cached for reuse.
    """
    global _error_console
    if _error_console is None:
        from rich.console import Console

        _error_console = Console(stderr=True, force_terminal=None)
    return _error_console


def print_error(
    e: Exception,
    verbose: bool = False,
    use_rich: bool | None = None,
) -> None:
    """
    Print an exception with Rich formatting when available.

    Uses the Rich console on TTY terminals and plain text for pipes.

    Args:
        e: The exception to print
        verbose: If True, include full stack trace
        use_rich: Override automatic TTY detection (None = auto-detect)
    """
    console = get_error_console()

    if use_rich is None:
        use_rich = console.is_terminal

    if verbose:
        print(traceback.format_exc(), file=sys.stderr)
        return

    if use_rich and isinstance(e, WireSimError):
        console.print(e)
    else:
        print(format_error(e, verbose=False), file=sys.stderr)


def format_error(e: Exception, verbose: bool = False) -> str:
    """
    Format an exception for user-friendly display (plain text).

    Args:
        e: The exception to format
        verbose: If True, include full stack trace

    Returns:
        Formatted error message string
    """
    if verbose:
        return traceback.format_exc()

    if isinstance(e, WireSimError):
        return f"Error: {e}"

    return f"Error: {type(e).__name__}: {e}"


def parse_endpoint(text: str) -> Endpoint:
    """
    Parse ``component.pin`` into an endpoint.

    The component id may itself contain dots; the pin is everything after the
    last one.

    Raises:
        ValueError: If there is no pin part
    """
    component_id, sep, pin_name = text.rpartition(".")
    if not sep or not component_id or not pin_name:
        raise ValueError(f"Expected COMPONENT.PIN, got {text!r}")
    return Endpoint(component_id, pin_name)


def parse_levels(high: Optional[List[str]], low: Optional[List[str]]) -> dict[int, int]:
    """
    Build a pin level map from ``--high`` / ``--low`` pin names.

    Later flags override earlier ones; ``--low`` is applied after ``--high``.

    Raises:
        ValueError: If a name is not a digital pin such as ``D10`` or ``10``
    """
    levels: dict[int, int] = {}
    for names, level in ((high or [], 1), (low or [], 0)):
        for name in names:
            tag = name.strip().upper()
            number = board_pin_number(tag if tag.startswith("D") else f"D{tag}")
            if number is None or number >= len(DIGITAL_PINS):
                raise ValueError(f"Not a digital pin: {name!r}")
            levels[number] = level
    return levels
