#!/usr/bin/env python3
"""Print one window of a large file: python -m vlfview FILE [--line N] [--search PATTERN]"""

import argparse
import logging
import sys

from .config import BATCH_SIZE, WindowSettings
from .errors import VlfError
from .view import FileView


def main(argv=None):
    parser = argparse.ArgumentParser(prog="vlfview", description=__doc__)
    parser.add_argument("path")
    parser.add_argument("--line", type=int, help="line to show (negative counts from the end)")
    parser.add_argument("--search", help="regular expression to find after positioning")
    parser.add_argument("--batch", type=int, default=BATCH_SIZE, help="window size in bytes")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        with FileView(args.path, settings=WindowSettings().with_batch(args.batch)) as view:
            if args.line:
                view.goto_line(args.line)
            if args.search:
                outcome = view.search_forward(args.search)
                if not outcome.ok:
                    print(f"Not found: {args.search}", file=sys.stderr)
                    return 1
            snap = view.snapshot()
            print(f"{view.file.encoding} bytes {snap.start}-{snap.end} of {snap.size}")
            sys.stdout.write(view.content)
    except (OSError, VlfError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
