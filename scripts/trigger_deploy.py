#!/usr/bin/env python3
"""Trigger the deploy.yml workflow for a file."""

import sys

from src.cli import trigger_deploy_main


if __name__ == "__main__":
    sys.exit(trigger_deploy_main())
