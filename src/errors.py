#!/usr/bin/env python3
"""Exception hierarchy shared by the announce, trigger and merge entry points."""

from __future__ import annotations

from typing import Optional


class AnnounceError(Exception):
    """Base class for every error raised by this package."""

    hint: Optional[str] = None

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        if hint is not None:
            self.hint = hint


class ValidationError(AnnounceError):
    """Bad or missing user input, detected before any network activity."""


class MissingIdentifierError(ValidationError):
    """The deployment hash (undername) was not supplied."""

    def __init__(self, message: str = "Deployment hash is required"):
        super().__init__(message)


class ConfigurationError(AnnounceError):
    """Repository, token or channel settings could not be resolved."""


class TransportFailure(AnnounceError):
    """A remote API call failed (network error or non-2xx response)."""

    def __init__(self, message: str, status_code: Optional[int] = None, hint: Optional[str] = None):
        super().__init__(message, hint=hint)
        self.status_code = status_code


TOKEN_HINT = (
    "Add {names} to your environment variables\n"
    "Get a token from: https://github.com/settings/tokens\n"
    "Add it to your .env file or GitHub Secrets"
)

NOT_MERGEABLE_HINT = (
    "PR is not mergeable. Check for:\n"
    "- Merge conflicts\n"
    "- Required status checks\n"
    "- Required reviews"
)

GH_AUTH_HINT = "GitHub CLI is not authenticated. Run `gh auth login` or unset it from PATH to use the API fallback"


def remediation_hint(exc: BaseException) -> Optional[str]:
    """Return a user-facing hint for a known failure category, if any."""
    hint = getattr(exc, "hint", None)
    if hint:
        return hint

    message = str(exc).lower()
    if "github_token" in message or "repo_token" in message:
        return TOKEN_HINT.format(names="GITHUB_TOKEN or REPO_TOKEN")
    if "not mergeable" in message or "merge conflict" in message:
        return NOT_MERGEABLE_HINT
    if "gh auth login" in message or "not logged in" in message:
        return GH_AUTH_HINT
    return None
