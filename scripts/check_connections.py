#!/usr/bin/env python3
"""Verify the Twitter/X credentials and the Discord webhook."""

import sys

from src.cli import check_connections_main


if __name__ == "__main__":
    sys.exit(check_connections_main())
