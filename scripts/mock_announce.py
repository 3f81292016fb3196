#!/usr/bin/env python3
"""Print the announcement a deployment would get, without posting it."""

import sys

from src.cli import mock_announce_main


if __name__ == "__main__":
    sys.exit(mock_announce_main())
