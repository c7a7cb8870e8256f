#!/usr/bin/env python3
"""
Run locker trace files.

Usage:
    lockers-trace lockers/traces/regression/*.yaml
    lockers-trace my_trace.yaml --verbose
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import ValidationError
from .framework.assertions.evaluator import format_assertion_results
from .framework.runner import run_trace
from .framework.traces.parser import load_trace


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Replay locker protocol traces")
    parser.add_argument("traces", nargs="+", help="YAML trace files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every action")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    failures = 0
    for path in args.traces:
        try:
            trace = load_trace(path)
        except (OSError, ValidationError) as e:
            print(f"{path}: {e}", file=sys.stderr)
            failures += 1
            continue

        result = run_trace(trace)
        print(result)
        if args.verbose:
            for outcome in result.outcomes:
                print(f"    {outcome}")
        print(format_assertion_results(result.assertion_results))
        print()
        if not result.all_passed:
            failures += 1

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
