"""Prints a disassembled view of the given class."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional, Sequence

from .classfile import ClassFileReader, resolve_class, split_classpath
from .errors import TraceError
from .renderer import ClassRenderer, RenderOptions

USAGE = (
    "Prints a disassembled view of the given class.\n"
    "Usage: class_trace [-debug] <fully qualified class name or class file name>\n"
)


class _UsageParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        sys.stderr.write(USAGE)
        sys.exit(1)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = _UsageParser(description=__doc__, add_help=False)
    parser.add_argument("target", help="class file path or fully qualified class name")
    parser.add_argument(
        "-debug",
        "--debug",
        dest="debug",
        action="store_true",
        help="Keep source file and debug extension attributes",
    )
    parser.add_argument(
        "--classpath",
        default=os.environ.get("CLASSPATH"),
        help="Directories and archives searched for qualified names",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log resolution and rendering details to stderr",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        data = resolve_class(args.target, split_classpath(args.classpath))
        reader = ClassFileReader(data)
        renderer = ClassRenderer(sys.stdout, RenderOptions())
        reader.accept(renderer, skip_debug=not args.debug)
    except (OSError, TraceError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
