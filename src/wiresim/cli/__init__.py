"""
Command-line interface tools for wiresim.

Provides CLI commands via the `wiresim` command:

    wiresim trace <circuit.json>   - Propagate pin levels to indicators
    wiresim check <circuit.json>   - Report suspicious wiring
    wiresim pins [kind]            - Show the pin catalogue
    wiresim compile <sketch>       - Compile a sketch with the compile service
    wiresim config                 - View and initialize configuration

Examples:
    wiresim trace blink.json --high D10
    wiresim trace blink.json --from uno.D10 --format json
    wiresim check blink.json --strict
    wiresim pins arduino-uno --at 100 50
    wiresim compile blink.ino -o blink.hex
    wiresim config --show
"""

import argparse
from typing import List, Optional

from wiresim import __version__
from wiresim.logging import enable_verbose

__all__ = ["main"]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for wiresim CLI."""
    parser = argparse.ArgumentParser(
        prog="wiresim",
        description="Breadboard wiring and signal propagation toolkit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"wiresim {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log what wiresim is doing")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Trace subcommand
    trace_parser = subparsers.add_parser("trace", help="Propagate pin levels through a circuit")
    trace_parser.add_argument("circuit", help="Path to circuit JSON file")
    trace_parser.add_argument("--high", action="append", metavar="PIN")
    trace_parser.add_argument("--low", action="append", metavar="PIN")
    trace_parser.add_argument("--from", dest="start", metavar="COMPONENT.PIN")
    trace_parser.add_argument("--format", choices=["table", "json"])

    # Check subcommand
    check_parser = subparsers.add_parser("check", help="Check a circuit for suspicious wiring")
    check_parser.add_argument("circuit", help="Path to circuit JSON file")
    check_parser.add_argument("--strict", action="store_true")
    check_parser.add_argument("--format", choices=["table", "json"])

    # Pins subcommand
    pins_parser = subparsers.add_parser("pins", help="Show component kinds and pin geometry")
    pins_parser.add_argument("kind", nargs="?")
    pins_parser.add_argument("--at", nargs=2, metavar=("X", "Y"))
    pins_parser.add_argument("--format", choices=["table", "json"], default="table")

    # Compile subcommand
    compile_parser = subparsers.add_parser("compile", help="Compile a sketch")
    compile_parser.add_argument("sketch", help="Path to sketch source")
    compile_parser.add_argument("-o", "--output")
    compile_parser.add_argument("--board")
    compile_parser.add_argument("--url")
    compile_parser.add_argument("--timeout")
    compile_parser.add_argument("--format", choices=["table", "json"])

    # Config subcommand
    config_parser = subparsers.add_parser("config", help="View and initialize configuration")
    config_parser.add_argument("--show", action="store_true")
    config_parser.add_argument("--init", action="store_true")
    config_parser.add_argument("--paths", action="store_true")
    config_parser.add_argument("--user", action="store_true")
    config_parser.add_argument("action", nargs="?", choices=["get"])
    config_parser.add_argument("key", nargs="?")

    args = parser.parse_args(argv)

    if args.verbose:
        enable_verbose("DEBUG")

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "trace":
        from .trace_cmd import main as trace_cmd

        sub_argv = [args.circuit]
        for pin in args.high or []:
            sub_argv.extend(["--high", pin])
        for pin in args.low or []:
            sub_argv.extend(["--low", pin])
        if args.start:
            sub_argv.extend(["--from", args.start])
        if args.format:
            sub_argv.extend(["--format", args.format])
        return trace_cmd(sub_argv)

    elif args.command == "check":
        from .check_cmd import main as check_cmd

        sub_argv = [args.circuit]
        if args.strict:
            sub_argv.append("--strict")
        if args.format:
            sub_argv.extend(["--format", args.format])
        return check_cmd(sub_argv)

    elif args.command == "pins":
        from .pins_cmd import main as pins_cmd

        sub_argv = ["--format", args.format]
        if args.kind:
            sub_argv.insert(0, args.kind)
        if args.at:
            sub_argv.extend(["--at", *args.at])
        return pins_cmd(sub_argv)

    elif args.command == "compile":
        from .compile_cmd import main as compile_cmd

        sub_argv = [args.sketch]
        for flag in ("output", "board", "url", "timeout", "format"):
            value = getattr(args, flag)
            if value:
                sub_argv.extend([f"--{flag}", value])
        return compile_cmd(sub_argv)

    elif args.command == "config":
        from .config_cmd import main as config_cmd

        sub_argv = []
        for flag in ("show", "init", "paths", "user"):
            if getattr(args, flag):
                sub_argv.append(f"--{flag}")
        if args.action:
            sub_argv.append(args.action)
        if args.key:
            sub_argv.append(args.key)
        return config_cmd(sub_argv)

    return 0


if __name__ == "__main__":
    import sys

    sys.exit(main())
