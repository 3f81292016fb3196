#!/usr/bin/env python3
"""
Reply templates for deployment announcements.
Templates live in ``<templates_dir>/<name>.json`` and use ``{placeholder}`` markers.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from src.errors import ConfigurationError
from src.models import DeploymentOutcome

logger = logging.getLogger(__name__)

SUCCESS_TEMPLATE = "success"
NO_CHANGE_TEMPLATE = "no-changes"
PLACEHOLDER_RX = re.compile(r"\{(\w+)\}")


class TemplateError(ConfigurationError):
    """A reply template is missing, unreadable or malformed."""


class ReplyTemplate(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    template: str = Field(min_length=1)
    example: Optional[str] = None

    def placeholders(self) -> List[str]:
        return PLACEHOLDER_RX.findall(self.template)


def load_template(name: str, templates_dir: Path) -> ReplyTemplate:
    path = Path(templates_dir) / f"{name}.json"
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateError(f"Template '{name}' not found: {exc}") from exc

    try:
        return ReplyTemplate.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise TemplateError(f"Template '{name}' is invalid: {exc.errors()[0]['msg']}") from exc


def list_templates(templates_dir: Path) -> List[ReplyTemplate]:
    """Return every valid template in ``templates_dir``; invalid files are logged and skipped."""
    directory = Path(templates_dir)
    if not directory.is_dir():
        return []

    templates = []
    for path in sorted(directory.glob("*.json")):
        try:
            templates.append(load_template(path.stem, directory))
        except TemplateError as exc:
            logger.warning("Skipping template %s: %s", path.name, exc)
    return templates


def render_template(template: ReplyTemplate, variables: Dict[str, object]) -> str:
    """Replace each ``{key}`` with its value; unknown placeholders are left as-is."""
    def substitute(match: re.Match) -> str:
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        value = variables[key]
        return "" if value is None else str(value)

    return PLACEHOLDER_RX.sub(substitute, template.template)


def template_for_outcome(outcome: DeploymentOutcome, templates_dir: Path) -> ReplyTemplate:
    if outcome.is_no_change_event:
        return load_template(NO_CHANGE_TEMPLATE, templates_dir)
    if outcome.succeeded:
        return load_template(SUCCESS_TEMPLATE, templates_dir)
    raise TemplateError("No template available for failed deployments")
