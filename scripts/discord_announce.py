#!/usr/bin/env python3
"""Announce a deployment on Discord from GitHub Actions."""

import sys

from src.cli import discord_announce_main


if __name__ == "__main__":
    sys.exit(discord_announce_main())
