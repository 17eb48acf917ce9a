#!/usr/bin/env python3
"""
hackasm - Hack assembler CLI

Usage:
    python hackasm.py <input.asm> [-o output.hack] [--format hack|listing]
                                  [--var-base 16] [--symbols] [--dump] [-v] [-q]

Output format is auto-detected from file extension:
    .hack      → one 16-bit binary word per line (default)
    .lst       → listing with ROM addresses, words and source

Examples:
    python hackasm.py Max.asm -o Max.hack
    python hackasm.py Pong.asm -o Pong.lst -v
    python hackasm.py Add.asm                       # .hack text to stdout
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from hack_asm import __version__
from hack_asm.assembler import Assembler, AssemblerError
from hack_asm.parser import AsmSyntaxError, IllegalCallError, Parser

logger = logging.getLogger("hackasm")


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...), $ prefix, or decimal."""
    value = value.strip()
    if value.startswith("0x") or value.startswith("0X"):
        return int(value, 16)
    if value.startswith("$"):
        return int(value[1:], 16)
    return int(value)


def setup_logging(verbose: int, quiet: bool, log_file: Optional[str] = None):
    """Configure logging from -v/-q/--log-file."""
    if quiet:
        level = logging.ERROR
    elif verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter('[%(name)s] %(levelname)s: %(message)s'))
    handlers = [console]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if log_file else level,
        handlers=handlers,
        force=True,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="hackasm",
        description="Two-pass assembler for the Hack 16-bit computer",
    )
    parser.add_argument("input", help="Input assembly file (.asm)")
    parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    parser.add_argument("--format", choices=["hack", "listing"], default=None,
                        help="Output format (auto-detected from -o extension if not set)")
    parser.add_argument("--var-base", default="16",
                        help="First RAM address for variables (default: 16)")
    parser.add_argument("--dump", action="store_true",
                        help="Dump parsed instructions and exit (debug)")
    parser.add_argument("--symbols", action="store_true",
                        help="Print the final symbol table to stderr")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Suppress all output except errors")
    parser.add_argument("--log-file", help="Write a debug log to this file")
    parser.add_argument("--version", action="version",
                        version=f"hackasm {__version__}")

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.quiet, args.log_file)

    # Read input
    try:
        with open(args.input, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        return 1
    except IOError as e:
        print(f"Error reading {args.input}: {e}", file=sys.stderr)
        return 1

    try:
        variable_base = parse_int_arg(args.var_base)
    except ValueError:
        print(f"Error: Bad --var-base value: {args.var_base}", file=sys.stderr)
        return 1

    logger.info("Input:    %s (%d lines)", args.input, len(lines))
    logger.info("Var base: %d", variable_base)

    try:
        # Instruction dump mode
        if args.dump:
            p = Parser(lines)
            for inst in p:
                print(f"{inst.position}  {inst.kind.name:<8} {inst}")
            return 0

        # Determine output format from --format flag, file extension, or default to hack
        if args.format:
            out_format = args.format
        elif args.output and os.path.splitext(args.output)[1].lower() == '.lst':
            out_format = 'listing'
        else:
            out_format = 'hack'

        asm = Assembler(variable_base=variable_base)
        asm.assemble(lines)
        result = asm.get_listing() if out_format == 'listing' else asm.to_hack()

        if args.symbols:
            for name, address in sorted(asm.symbols.items(), key=lambda item: item[1]):
                print(f"{address:5d}  {name}", file=sys.stderr)

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(result)
            logger.info("Output:   %s (%s)", args.output, out_format)
        else:
            sys.stdout.write(result)

    except AsmSyntaxError as e:
        print(f"{args.input}:{e.line_num}:{e.col}: {e.message}", file=sys.stderr)
        print(e.context(), file=sys.stderr)
        return 1
    except AssemblerError as e:
        print(f"{args.input}: {e}", file=sys.stderr)
        return 1
    except IllegalCallError as e:
        print(f"Internal assembler error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
