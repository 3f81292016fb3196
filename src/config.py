#!/usr/bin/env python3
"""Process-wide settings, read once from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from src.errors import ConfigurationError

DEFAULT_FILE_PATH = "hello-world.txt"
DEFAULT_OWNER_ARNS_NAME = "unknown"
DEFAULT_TOTAL_APPS = 5
DEFAULT_DM_RECIPIENT = "jonniesparkles"
DEFAULT_ANNOUNCE_MODE = "public"
DEFAULT_TEMPLATES_DIR = "reply-templates"
ANNOUNCE_MODES = ("public", "dm")


def _is_truthy_flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() not in ("", "0", "false", "no", "off")


@dataclass(frozen=True)
class AnnounceConfig:
    """Settings for the announcement channels.

    Built once at process start by :meth:`from_env` and passed explicitly to
    the dispatcher and the channel posters.
    """

    fallback_file_path: str = DEFAULT_FILE_PATH
    owner_arns_name: str = DEFAULT_OWNER_ARNS_NAME
    total_apps: int = DEFAULT_TOTAL_APPS
    default_mode: str = DEFAULT_ANNOUNCE_MODE
    dm_recipient: str = DEFAULT_DM_RECIPIENT
    twitter_app_key: Optional[str] = None
    twitter_app_secret: Optional[str] = None
    twitter_access_token: Optional[str] = None
    twitter_access_secret: Optional[str] = None
    discord_webhook_url: Optional[str] = None
    discord_mention: str = "@everyone"
    dry_run: bool = False
    test_mode: bool = False
    force_announce: bool = True
    templates_dir: str = DEFAULT_TEMPLATES_DIR

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AnnounceConfig":
        env = os.environ if environ is None else environ

        raw_total = env.get("TOTAL_APPS", "").strip()
        try:
            total_apps = int(raw_total) if raw_total else DEFAULT_TOTAL_APPS
        except ValueError:
            raise ConfigurationError(f"TOTAL_APPS must be an integer, got {raw_total!r}")

        default_mode = (env.get("ANNOUNCE_DEFAULT_MODE") or DEFAULT_ANNOUNCE_MODE).strip().lower()
        if default_mode not in ANNOUNCE_MODES:
            raise ConfigurationError(
                f"ANNOUNCE_DEFAULT_MODE must be one of {', '.join(ANNOUNCE_MODES)}, got {default_mode!r}"
            )

        return cls(
            fallback_file_path=env.get("DEFAULT_FILE_PATH") or DEFAULT_FILE_PATH,
            owner_arns_name=env.get("OWNER_ARNS_NAME") or DEFAULT_OWNER_ARNS_NAME,
            total_apps=total_apps,
            default_mode=default_mode,
            dm_recipient=(env.get("TWITTER_DM_RECIPIENT") or DEFAULT_DM_RECIPIENT).lstrip("@"),
            twitter_app_key=env.get("TWITTER_APP_KEY") or None,
            twitter_app_secret=env.get("TWITTER_APP_SECRET") or None,
            twitter_access_token=env.get("TWITTER_ACCESS_TOKEN") or None,
            twitter_access_secret=env.get("TWITTER_ACCESS_SECRET") or None,
            discord_webhook_url=env.get("DISCORD_WEBHOOK_URL") or None,
            discord_mention=env.get("DISCORD_MENTION", "@everyone"),
            dry_run=_is_truthy_flag(env.get("DRY_RUN")),
            test_mode=_is_truthy_flag(env.get("TEST_MODE")),
            force_announce=_is_truthy_flag(env.get("FORCE_ANNOUNCE", "1")),
            templates_dir=env.get("REPLY_TEMPLATES_DIR") or DEFAULT_TEMPLATES_DIR,
        )

    @property
    def twitter_configured(self) -> bool:
        return bool(
            self.twitter_app_key
            and self.twitter_app_secret
            and self.twitter_access_token
            and self.twitter_access_secret
        )
