#!/usr/bin/env python3
"""Trigger the announce.yml workflow for a finished deployment."""

import sys

from src.cli import trigger_announcement_main


if __name__ == "__main__":
    sys.exit(trigger_announcement_main())
