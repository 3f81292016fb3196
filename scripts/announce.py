#!/usr/bin/env python3
"""Announce a deployment on Twitter/X (public post or DM) from GitHub Actions."""

import sys

from src.cli import announce_main


if __name__ == "__main__":
    sys.exit(announce_main())
