#!/usr/bin/env python3
"""Command-line interface for deriving star-planet system parameters.

Reads one or more .study files, resolves every study they contain and
prints a summary of each. Studies that cannot be resolved are reported
on stderr without stopping the others.
"""

import argparse
import logging
import sys
from pathlib import Path

from exocalc.engine.batch import resolve_all
from exocalc.engine.report import format_failure, format_summary
from exocalc.errors import StudyFormatError
from exocalc.io.study_reader import load_studies

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exocalc-derive",
        description="Derive self-consistent exoplanet system parameters from literature values",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # All studies in one file
  exocalc-derive data/studies/hat-p-23.study

  # Several files, four worker threads, 3 scale heights where unset
  exocalc-derive data/studies/*.study --workers 4 --n-scales 3
        """
    )

    parser.add_argument(
        "files",
        type=Path,
        nargs="+",
        help="Path(s) to .study files"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker threads (default: $EXOCALC_WORKERS or 1)"
    )

    parser.add_argument(
        "--n-scales",
        type=float,
        default=None,
        help="Scale heights for studies without N_SCALES (default: 5)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log which formula produced each parameter"
    )

    return parser


def main(argv=None):
    """Main entry point for the exocalc-derive CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.workers is not None and args.workers < 1:
        print("Error: --workers must be at least 1", file=sys.stderr)
        return 2
    if args.n_scales is not None and not args.n_scales > 0:
        print("Error: --n-scales must be positive", file=sys.stderr)
        return 2

    studies = []
    for path in args.files:
        try:
            studies.extend(load_studies(path, scale_height_count=args.n_scales))
        except (OSError, StudyFormatError) as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            return 2

    outcomes = resolve_all(studies, max_workers=args.workers)

    n_failed = 0
    for outcome in outcomes:
        if outcome.ok:
            print(format_summary(outcome.result, outcome.provenance))
            print()
        else:
            n_failed += 1
            print(format_failure(outcome), file=sys.stderr)

    if n_failed:
        logger.warning(f"{n_failed} of {len(outcomes)} studies could not be resolved")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
