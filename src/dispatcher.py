#!/usr/bin/env python3
"""
Announcement dispatcher.
Renders one notification for one deployment outcome, hands it to the selected
channel poster and always returns a DispatchResult.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.config import ANNOUNCE_MODES, AnnounceConfig
from src.discord_notifier import DiscordNotifier
from src.formatting import NotificationPayload, render_payload
from src.models import (
    Channel,
    ChatWebhook,
    DeploymentOutcome,
    DirectMessage,
    DispatchResult,
    PublicPost,
)
from src.twitter_client import TwitterAnnouncer

logger = logging.getLogger(__name__)


def resolve_channel(mode: Optional[str], default_mode: str, recipient: str) -> Channel:
    """Map a social announcer mode flag (``public`` or ``dm``) to a Channel.

    Absent or unrecognized modes fall back to ``default_mode``.
    """
    selected = (mode or "").strip().lower()
    if selected and selected not in ANNOUNCE_MODES:
        logger.warning("Unknown announce mode %r, using %r", mode, default_mode)
        selected = ""
    selected = selected or default_mode

    if selected == "dm":
        return DirectMessage(recipient=recipient)
    return PublicPost()


class AnnouncementDispatcher:
    """Fire-once facade over the Twitter and Discord posters."""

    def __init__(
        self,
        config: AnnounceConfig,
        twitter: Optional[TwitterAnnouncer] = None,
        discord: Optional[DiscordNotifier] = None,
        force: Optional[bool] = None,
    ):
        self.config = config
        self.twitter = twitter or TwitterAnnouncer(config)
        self.discord = discord or DiscordNotifier(config)
        self.force = config.force_announce if force is None else force

    async def _post(self, outcome: DeploymentOutcome, channel: Channel, payload: NotificationPayload) -> DispatchResult:
        if isinstance(channel, DirectMessage):
            return await self.twitter.post_dm_announcement(
                outcome, channel.recipient, force=self.force, text=payload.text
            )
        if isinstance(channel, ChatWebhook):
            return await self.discord.send_chat_notification(outcome, force=self.force, message=payload.chat)
        if isinstance(channel, PublicPost):
            return await self.twitter.post_template_announcement(outcome, force=self.force, text=payload.text)
        raise TypeError(f"Unsupported channel: {channel!r}")

    async def dispatch(self, outcome: DeploymentOutcome, channel: Channel) -> DispatchResult:
        try:
            payload = render_payload(outcome, channel, self.config)
            result = await self._post(outcome, channel, payload)
        except Exception as exc:
            logger.error("Dispatch to %s failed: %s", getattr(channel, "kind", channel), exc)
            return DispatchResult.failure(error=str(exc) or exc.__class__.__name__)

        if not result.success:
            logger.warning("Channel %s rejected announcement: %s", channel.kind, result.failure_detail)
        return result
