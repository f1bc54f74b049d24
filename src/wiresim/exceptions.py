"""
Custom exception hierarchy for wiresim.

Provides consistent error handling with context, suggestions, and actionable guidance.
All exceptions include:
- Context information (file paths, board ids, service URLs, etc.)
- Suggestions for how to fix the issue
- Clear, formatted error messages

Only the integration boundary (compiling and starting a run) and file/config
loading raise these. Authoring mistakes such as wiring a component to itself
are rejected silently and never surface as exceptions.

Example::

    from wiresim.exceptions import CompileError

    raise CompileError(
        "Sketch failed to compile",
        context={"board": "uno", "stderr": "expected ';' before '}' token"},
        suggestions=["Fix the reported syntax error and run again"]
    )
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class WireSimError(Exception):
    """
    Base exception for all wiresim errors.

    Provides consistent formatting with context and suggestions.

    Attributes:
        context: Dictionary of contextual information (file, board, url, etc.)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()

    def __rich_console__(self, console, options):
        """Render with Rich markup when printed through a Console."""
        from rich.text import Text

        yield Text(f"Error: {self.message}", style="bold red")
        if self.context:
            yield Text("Context:", style="bold")
            for key, value in self.context.items():
                yield Text(f"  {key}: {value}")
        if self.suggestions:
            yield Text("Suggestions:", style="bold")
            for suggestion in self.suggestions:
                yield Text(f"  - {suggestion}", style="cyan")


class CircuitFileError(WireSimError):
    """
    Circuit file could not be read or describes an impossible circuit.

    Raised when loading a circuit JSON file with syntax errors, unknown
    component kinds, or wires pointing at components that do not exist.

    Example::

        raise CircuitFileError(
            "Wire references unknown component",
            context={"wire": "wire-1", "component": "led-9"},
            file_path="blink.json",
        )
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        file_path: Optional[Union[str, Path]] = None,
    ):
        ctx = context or {}
        if file_path and "file" not in ctx:
            ctx["file"] = str(file_path)
        super().__init__(message, ctx, suggestions)


class ValidationError(WireSimError):
    """
    Circuit validation failed with one or more errors.

    Collects all validation errors instead of failing on the first one,
    providing a complete list of issues to fix.

    Attributes:
        errors: List of individual validation error messages
    """

    def __init__(
        self,
        errors: List[str],
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.errors = errors
        message = f"Validation failed with {len(errors)} error(s):\n"
        message += "\n".join(f"  {i + 1}. {e}" for i, e in enumerate(errors))
        super().__init__(message, context, suggestions)


class CompileError(WireSimError):
    """
    The compile service rejected the sketch or could not be reached.

    Fatal to starting a run. Any previously running simulation has already
    been stopped when this is raised, and the circuit is left untouched.

    Example::

        raise CompileError(
            "Compile service unreachable",
            context={"url": "http://localhost:9000/compile", "reason": "Connection refused"},
            suggestions=["Start the compile service", "Check compile.url in .wiresim.toml"]
        )
    """

    pass


class ProgramMissingError(WireSimError):
    """
    A compile reported success but produced no program image.
    """

    pass


class HexFormatError(WireSimError):
    """
    Intel HEX program text could not be decoded.

    Raised when loading the image returned by the compile service.
    """

    pass


class ConfigurationError(WireSimError):
    """
    Configuration or settings error.

    Raised when configuration values are present but unusable, e.g. a
    non-positive cycle batch size or an input pin that is not digital.
    """

    pass


__all__ = [
    "WireSimError",
    "CircuitFileError",
    "ValidationError",
    "CompileError",
    "ProgramMissingError",
    "HexFormatError",
    "ConfigurationError",
]
