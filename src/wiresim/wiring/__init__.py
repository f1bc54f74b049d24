"""
Interactive wiring: the multi-click session that creates wires.
"""

from .session import Drawing, Selection, SelectionType, SessionState, WiringSession

__all__ = [
    "WiringSession",
    "SessionState",
    "Drawing",
    "Selection",
    "SelectionType",
]
