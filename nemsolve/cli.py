"""Command line entry point: read a deck, solve it and report the run time."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from .solver import Solver


def main(argv=None):
    """Run the solver on an input deck; returns the process exit status."""
    parser = argparse.ArgumentParser(
        prog="nemsolve", description="Nodal expansion method core solver."
    )
    parser.add_argument("input", nargs="?", help="input deck (asked for when omitted)")
    parser.add_argument(
        "-o", "--output-dir", default=".", help="directory for structure and flux files"
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stdout)

    input_file = args.input or input("Input file name: ").strip()
    solver = Solver()
    try:
        solver.read_input(input_file)
    except OSError:
        print("Error: Cannot open the input file.", file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    solver.print_structure(output_dir / "structure.txt")

    start = time.process_time()
    solver.run(output_dir)
    elapsed = time.process_time() - start
    print(f"{elapsed:.3f} sec")
    return 0


if __name__ == "__main__":
    sys.exit(main())