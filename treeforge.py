#!/usr/bin/env python3
import argparse
import logging
import os
import sys
from typing import List

from treeforge_lib import (
    GenerationError,
    GenerationOptions,
    Mode,
    ValidationError,
    generate,
    load_spec,
    scan_directory,
    write_spec,
)
from treeforge_lib.models import LANGUAGES


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate project directory layouts from a treeforge.yml specification."
    )
    parser.add_argument(
        "-c",
        "--config",
        default=os.path.join(os.getcwd(), "treeforge.yml"),
        help="Path to the specification (default: ./treeforge.yml)",
    )
    parser.add_argument(
        "-o",
        "--out",
        default=os.getcwd(),
        help="Working root the projects are generated into (default: current directory)",
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Initialize mode: create the working root if it does not exist",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress (-v) or every decision (-vv)",
    )
    parser.add_argument(
        "--scan",
        help="Scan an existing directory to produce a specification (switches CLI into scan mode)",
    )
    parser.add_argument(
        "--lang",
        choices=LANGUAGES,
        default="any",
        help="Language recorded for the scanned project (used with --scan). Default: any",
    )
    parser.add_argument(
        "--spec-out",
        default=os.path.join(os.getcwd(), "scanned-treeforge.yml"),
        help="Output path for the scanned specification (used with --scan). Default: ./scanned-treeforge.yml",
    )

    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    # If scanning mode is requested, perform scan and exit
    if args.scan:
        try:
            write_spec(scan_directory(args.scan, args.lang), args.spec_out)
        except (OSError, ValueError) as e:
            print(f"Scan failed: {e}", file=sys.stderr)
            return 1
        print(f"Specification generated at: {args.spec_out}")
        return 0

    default_name = os.path.basename(os.path.abspath(args.out))
    try:
        spec = load_spec(args.config, default_name=default_name)
    except OSError as e:
        print(f"Cannot read specification: {e}", file=sys.stderr)
        return 2
    except ValidationError as e:
        print(str(e), file=sys.stderr)
        return 2

    options = GenerationOptions(mode=Mode.INITIALIZE if args.init else Mode.REGENERATE)
    try:
        report = generate(spec, args.out, options)
    except GenerationError as e:
        print(f"Generation failed: {e}", file=sys.stderr)
        return 1

    for outcome in report.outcomes:
        print(outcome)
    totals = ", ".join(f"{count} {status}" for status, count in report.counts().items() if count)
    print(f"Generation completed ({totals or 'nothing to do'}). Output at: {args.out}")
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
