#!/usr/bin/env python3
"""Discord webhook poster for deployment notifications."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from src.config import AnnounceConfig
from src.errors import ConfigurationError, TransportFailure
from src.formatting import deployment_url, render_chat_message, render_connection_test_message
from src.models import DeploymentOutcome, DispatchResult, WebhookMessage

logger = logging.getLogger(__name__)


class DiscordNotifier:
    def __init__(self, config: AnnounceConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    async def post_message(self, message: WebhookMessage) -> None:
        payload = message.model_dump(exclude_none=True)
        async with httpx.AsyncClient(timeout=30.0, transport=self.transport) as client:
            try:
                response = await client.post(self.config.discord_webhook_url, json=payload)
            except httpx.HTTPError as exc:
                logger.error("Discord webhook request failed: %s", exc)
                raise TransportFailure(f"Discord webhook request failed: {exc}") from exc

        if response.is_error:
            raise TransportFailure(
                f"Discord API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

    async def send_test_message(self) -> None:
        if not self.config.discord_webhook_url:
            raise ConfigurationError("Discord webhook not configured (DISCORD_WEBHOOK_URL not set)")
        await self.post_message(render_connection_test_message(self.config))
        logger.info("Discord test message sent")

    async def send_chat_notification(
        self,
        outcome: DeploymentOutcome,
        force: bool = False,
        message: Optional[WebhookMessage] = None,
    ) -> DispatchResult:
        if not self.config.discord_webhook_url:
            logger.info("Discord notifications not configured (DISCORD_WEBHOOK_URL not set)")
            return DispatchResult.failure(reason="not_configured")
        if outcome.test_mode and not force:
            logger.info("Skipping Discord notification for test mode")
            return DispatchResult.failure(reason="test_mode")

        message = message or render_chat_message(outcome, self.config)
        url = deployment_url(outcome, self.config)
        title = message.embeds[0].title if message.embeds else message.content

        if self.config.dry_run:
            print(f"DRY RUN - would post to Discord:\n\n{message.model_dump_json(indent=2, exclude_none=True)}")
            return DispatchResult.ok(deployment_url=url, message=title)

        await self.post_message(message)
        logger.info("Discord notification sent")
        return DispatchResult.ok(deployment_url=url, message=title)
