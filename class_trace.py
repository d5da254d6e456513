#!/usr/bin/env python3
"""Command-line entry point for the class trace renderer."""

from __future__ import annotations

import sys

from classtrace.cli import main


if __name__ == "__main__":
    sys.exit(main())
