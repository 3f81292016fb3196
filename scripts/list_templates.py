#!/usr/bin/env python3
"""List the reply templates available to the announcers."""

import sys

from src.cli import list_templates_main


if __name__ == "__main__":
    sys.exit(list_templates_main())
