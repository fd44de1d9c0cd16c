#!/usr/bin/env python3
"""
Quark Assembler - Command Line Interface

Usage:
    python3 -m quark_asm input.csv output.bin
    python3 -m quark_asm input.csv output.bin 1
    python3 -m quark_asm --inspect output.bin
"""

import argparse
import os
import sys
from typing import List

from .assembler import Assembler
from .config import ConfigError, load_config
from .decoder import DiagnosticRecord, inspect_image, read_image
from .errors import AssemblerError
from .instructions import get_all_mnemonics


def format_report(records: List[DiagnosticRecord]) -> str:
    """Format decoded records as a human-readable report."""
    lines = [f"Record count: {len(records)}", "Binary records:"]
    for r in records:
        lines.append(f"Record {r.index}: {r.binary}")
    lines.append("")
    lines.append("Hexadecimal records:")
    for r in records:
        lines.append(f"Record {r.index}: {r.hex}")
    return "\n".join(lines)


def format_program(asm: Assembler) -> str:
    """Format the instructions and packed words of an assembled program."""
    lines = ["=== Instructions ==="]
    for i, instr in enumerate(asm.program):
        lines.append(f"Instruction {i}: {instr.to_dict()}")
    lines.append("")
    lines.append("=== Machine words ===")
    for i, word in enumerate(asm.words):
        lines.append(f"Instruction {i}: {word:040b}")
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(
        description=f"Quark Assembler ({', '.join(get_all_mnemonics())})",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s programs/demo.csv programs/demo.bin
  %(prog)s programs/demo.csv programs/demo.bin 1
  %(prog)s --inspect programs/demo.bin
        """,
    )

    parser.add_argument(
        "input",
        type=str,
        help="Input CSV source (.csv), or binary image with --inspect",
    )

    parser.add_argument(
        "output",
        type=str,
        nargs="?",
        help="Output binary file (.bin)",
    )

    parser.add_argument(
        "diagnostics",
        nargs="?",
        choices=["0", "1"],
        help="Print diagnostics after assembling (1) or not (0)",
    )

    parser.add_argument(
        "-i",
        "--inspect",
        action="store_true",
        help="Decode an existing binary image instead of assembling",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=str,
        help="YAML configuration file",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-l",
        "--listing",
        action="store_true",
        help="Print assembly listing",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0",
    )

    args = parser.parse_args()

    if not args.inspect and not args.output:
        parser.error("an output file is required unless --inspect is given")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Validate input file
    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    if args.diagnostics is not None:
        diagnostics = args.diagnostics == "1"
    else:
        diagnostics = config["diagnostics"]

    try:
        if args.inspect:
            records = inspect_image(read_image(args.input), config["hex_byte_order"])
            print(format_report(records))
            return

        # Create assembler and assemble
        asm = Assembler(verbose=args.verbose, hex_byte_order=config["hex_byte_order"])
        asm.assemble_file(args.input, args.output)

        # Print listing if requested
        if args.listing:
            print("\n" + asm.get_listing())

        if diagnostics:
            print(format_program(asm))
            print()
            print(f"Binary file size: {os.path.getsize(args.output)} bytes")
            print()
            print("=== Output file check ===")
            print(format_report(inspect_image(read_image(args.output), config["hex_byte_order"])))

        # Print summary
        if args.verbose:
            print(f"\nAssembly successful: {len(asm.words)} instructions")

    except AssemblerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
