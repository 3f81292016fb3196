#!/usr/bin/env python3
"""Merge a PR, converting it from draft first when needed."""

import sys

from src.cli import auto_merge_main


if __name__ == "__main__":
    sys.exit(auto_merge_main())
