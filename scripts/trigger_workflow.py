#!/usr/bin/env python3
"""Trigger a GitHub Actions workflow through the REST API (no gh CLI needed)."""

import sys

from src.cli import trigger_workflow_main


if __name__ == "__main__":
    sys.exit(trigger_workflow_main())
