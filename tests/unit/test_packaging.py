"""Checks on the packaging metadata in pyproject.toml."""

import re
from pathlib import Path

from src import cli

ROOT = Path(__file__).resolve().parents[2]
PYPROJECT = (ROOT / "pyproject.toml").read_text(encoding="utf-8")


def test_readme_is_user_facing():
    match = re.search(r'^readme = "([^"]+)"', PYPROJECT, re.MULTILINE)
    assert match and match.group(1) == "README.md"
    assert "## Commands" in (ROOT / match.group(1)).read_text(encoding="utf-8")


def test_console_scripts_resolve():
    targets = re.findall(r'^[\w-]+ = "src\.cli:(\w+)"', PYPROJECT, re.MULTILINE)
    assert "check_connections_main" in targets
    for name in targets:
        assert callable(getattr(cli, name))
