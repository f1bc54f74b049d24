"""
Compile a sketch with the compile service.

Usage:
    wiresim compile <sketch.ino> [options]

Examples:
    wiresim compile blink.ino
    wiresim compile blink.ino -o blink.hex
    wiresim compile blink.ino --url http://build.local:9000 --board uno
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List

from ..config import Config, ConfigError
from ..exceptions import WireSimError
from ..simulation import CompileClient, load_hex, program_size
from .utils import print_error


def main(argv: List[str] | None = None) -> int:
    """Main entry point for the compile command."""
    parser = argparse.ArgumentParser(
        prog="wiresim compile",
        description="Compile a sketch and report the program image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("sketch", help="Path to sketch source")
    parser.add_argument("-o", "--output", help="Write the Intel HEX program here")
    parser.add_argument("--board", help="Board id (default: compile.board)")
    parser.add_argument("--url", help="Compile service URL (default: compile.url)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--format", choices=["table", "json"], help="Output format")

    args = parser.parse_args(argv)
    try:
        config = Config.load()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    output_format = args.format or config.defaults.format

    if args.url:
        config.compile.url = args.url
    if args.timeout is not None:
        config.compile.timeout = args.timeout

    try:
        source_text = Path(args.sketch).read_text()
    except OSError as e:
        print(f"Error: Cannot read sketch: {e}", file=sys.stderr)
        return 1

    client = CompileClient(config.compile)
    try:
        result = client.compile(source_text, args.board)
        image_size = 0
        if result.program:
            load_hex(result.program)
            image_size = program_size(result.program)
    except WireSimError as e:
        print_error(e)
        return 1
    finally:
        client.close()

    if output_format == "json":
        data = result.to_dict()
        data["image_size"] = image_size
        print(json.dumps(data, indent=2))
    else:
        if result.stdout and not config.defaults.quiet:
            print(result.stdout.rstrip())
        if result.stderr:
            print(result.stderr.rstrip(), file=sys.stderr)
        if result.success:
            print(f"Compiled for {result.board}: {image_size} bytes")
        else:
            print(f"Compile failed for {result.board}", file=sys.stderr)

    if not result.success:
        return 1

    if args.output:
        if result.program is None:
            print("Error: Compile returned no program", file=sys.stderr)
            return 1
        Path(args.output).write_text(result.program)
        if output_format != "json":
            print(f"Wrote {args.output}")
    return 0
