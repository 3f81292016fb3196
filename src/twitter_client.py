#!/usr/bin/env python3
"""Twitter/X poster for deployment announcements (public tweets and DMs)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import requests
from requests_oauthlib import OAuth1

from src.config import AnnounceConfig
from src.errors import ConfigurationError, TransportFailure
from src.formatting import render_announcement_text, truncate_tweet
from src.models import DeploymentOutcome, DispatchResult

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.twitter.com/2"


class TwitterAnnouncer:
    """Posts announcements through the Twitter v2 API using OAuth 1.0a user context."""

    def __init__(self, config: AnnounceConfig):
        self.config = config
        self.base_url = API_BASE_URL
        self.headers = {
            "Content-Type": "application/json",
            "User-Agent": "deploy-announce",
        }

    def _auth(self) -> OAuth1:
        if not self.config.twitter_configured:
            raise ConfigurationError("Twitter API credentials not configured")
        return OAuth1(
            self.config.twitter_app_key,
            client_secret=self.config.twitter_app_secret,
            resource_owner_key=self.config.twitter_access_token,
            resource_owner_secret=self.config.twitter_access_secret,
        )

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                auth=self._auth(),
                json=payload,
                timeout=30,
            )
        except requests.RequestException as exc:
            logger.error("Twitter API error %s %s: %s", method, url, exc)
            raise TransportFailure(f"Twitter API request failed: {exc}") from exc

        if not response.ok:
            logger.error("Twitter API error %s %s: %s", method, url, response.status_code)
            raise TransportFailure(
                f"Twitter API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        return response.json() if response.text else {}

    def _skip_reason(self, outcome: DeploymentOutcome, force: bool) -> Optional[str]:
        if not self.config.twitter_app_key:
            logger.info("Twitter notifications not configured (TWITTER_APP_KEY not set)")
            return "not_configured"
        if outcome.test_mode and not force:
            logger.info("Skipping Twitter announcement for test mode")
            return "test_mode"
        return None

    def verify_credentials(self) -> str:
        """Return the username the configured credentials belong to."""
        data = self._request("GET", "/users/me").get("data")
        if not data:
            raise TransportFailure("Twitter API returned no user for the configured credentials")
        return data.get("username", "")

    def tweet(self, text: str) -> Dict[str, Any]:
        return self._request("POST", "/tweets", {"text": truncate_tweet(text)})

    def lookup_user_id(self, username: str) -> str:
        data = self._request("GET", f"/users/by/username/{username}").get("data")
        if not data:
            raise TransportFailure(f"User @{username} not found")
        return data["id"]

    def send_dm(self, username: str, text: str) -> Dict[str, Any]:
        user_id = self.lookup_user_id(username)
        return self._request("POST", f"/dm_conversations/with/{user_id}/messages", {"text": text})

    async def post_template_announcement(
        self,
        outcome: DeploymentOutcome,
        force: bool = False,
        text: Optional[str] = None,
    ) -> DispatchResult:
        reason = self._skip_reason(outcome, force)
        if reason:
            return DispatchResult.failure(reason=reason)

        text = text or render_announcement_text(outcome, self.config)
        if self.config.dry_run:
            print(f"DRY RUN - would tweet:\n\n{truncate_tweet(text)}")
            return DispatchResult.ok(message=text)

        await asyncio.to_thread(self.tweet, text)
        logger.info("Posted template announcement to Twitter")
        return DispatchResult.ok(message=text)

    async def post_dm_announcement(
        self,
        outcome: DeploymentOutcome,
        recipient: Optional[str] = None,
        force: bool = False,
        text: Optional[str] = None,
    ) -> DispatchResult:
        recipient = (recipient or self.config.dm_recipient).lstrip("@")
        reason = self._skip_reason(outcome, force)
        if reason:
            return DispatchResult.failure(reason=reason)

        text = text or render_announcement_text(outcome, self.config)
        if self.config.dry_run:
            print(f"DRY RUN - would DM @{recipient}:\n\n{text}")
            return DispatchResult.ok(recipient=recipient, message=text)

        await asyncio.to_thread(self.send_dm, recipient, text)
        logger.info("DM sent to @%s", recipient)
        return DispatchResult.ok(recipient=recipient, message=text)
