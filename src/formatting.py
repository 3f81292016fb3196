#!/usr/bin/env python3
"""
Message rendering for deployment announcements.
Turns a DeploymentOutcome into tweet/DM text or a Discord webhook message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from src.config import AnnounceConfig
from src.models import (
    Channel,
    ChatWebhook,
    DeploymentOutcome,
    Embed,
    EmbedField,
    EmbedFooter,
    WebhookMessage,
)
from src.templates import TemplateError, render_template, template_for_outcome

logger = logging.getLogger(__name__)

TWEET_LIMIT = 280
DEFAULT_HASHTAGS = "#Arweave #Deployment #AI"
FOOTER_TEXT = "Arweave Deployment System"

COLOR_SUCCESS = 0x00FF00
COLOR_FAILURE = 0xFF0000
COLOR_INFO = 0x0099FF


@dataclass(frozen=True)
class Status:
    glyph: str
    word: str


SUCCESS = Status("✅", "completed")
FAILURE = Status("❌", "failed")


def status_for(outcome: DeploymentOutcome) -> Status:
    return SUCCESS if outcome.succeeded else FAILURE


def format_transaction(transaction_id: Optional[str]) -> str:
    return f"{transaction_id[:8]}..." if transaction_id else "N/A"


def format_duration(duration_ms: int) -> str:
    return f"{duration_ms}ms" if duration_ms else "N/A"


def format_size(size_bytes: int) -> str:
    return f"{size_bytes / 1024:.1f} KB" if size_bytes else "N/A"


def deployment_url(outcome: DeploymentOutcome, config: AnnounceConfig) -> str:
    if outcome.is_no_change_event:
        return f"https://{config.owner_arns_name}.arweave.net"
    return f"https://{outcome.undername}_{config.owner_arns_name}.arweave.net"


def truncate_tweet(text: str, limit: int = TWEET_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def render_post_text(
    outcome: DeploymentOutcome,
    config: AnnounceConfig,
    hashtags: str = DEFAULT_HASHTAGS,
    extra_lines: Iterable[str] = (),
) -> str:
    """Render the text used for both public posts and direct messages."""
    status = status_for(outcome)

    text = f"{status.glyph} Deployment {status.word}!\n\n"
    text += f"🔑 Hash: {outcome.undername}\n"
    text += f"📁 File: {outcome.file_path}\n"
    text += f"🔗 TX: {format_transaction(outcome.transaction_id)}\n"
    text += f"⏱️ Duration: {format_duration(outcome.duration_ms)}\n"
    text += f"📊 Size: {format_size(outcome.file_size_bytes)}\n\n"

    extra = list(extra_lines)
    if extra:
        text += "\n".join(extra) + "\n\n"

    text += f"🌐 {deployment_url(outcome, config)}\n\n"
    text += hashtags
    return text


def template_variables(outcome: DeploymentOutcome, config: AnnounceConfig) -> Dict[str, object]:
    return {
        "undername": outcome.undername,
        "ownerArnsName": config.owner_arns_name,
        "filePath": outcome.file_path,
        "duration": format_duration(outcome.duration_ms),
        "size": format_size(outcome.file_size_bytes),
        "manifestTxId": outcome.transaction_id or "N/A",
        "totalApps": config.total_apps,
        "deploymentUrl": deployment_url(outcome, config),
    }


def render_from_template(outcome: DeploymentOutcome, config: AnnounceConfig) -> Optional[str]:
    """Render the reply template for this outcome, or None when no usable template exists."""
    try:
        template = template_for_outcome(outcome, config.templates_dir)
    except TemplateError as exc:
        logger.warning("%s; using the built-in announcement layout", exc)
        return None
    return render_template(template, template_variables(outcome, config))


def render_announcement_text(outcome: DeploymentOutcome, config: AnnounceConfig) -> str:
    return render_from_template(outcome, config) or render_post_text(outcome, config)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _chat_content(outcome: DeploymentOutcome, config: AnnounceConfig) -> str:
    headline = render_from_template(outcome, config)
    if not headline:
        return config.discord_mention
    return f"{config.discord_mention} {headline}".strip()


def render_chat_message(outcome: DeploymentOutcome, config: AnnounceConfig) -> WebhookMessage:
    content = _chat_content(outcome, config)
    if outcome.is_no_change_event:
        return _render_no_change_message(config, content)

    status = status_for(outcome)
    url = deployment_url(outcome, config)

    fields = [
        EmbedField(name="📁 File", value=outcome.file_path, inline=True),
        EmbedField(name="🔑 Hash", value=f"`{outcome.undername}`", inline=True),
        EmbedField(name="⏱️ Duration", value=format_duration(outcome.duration_ms), inline=True),
        EmbedField(name="📊 Size", value=format_size(outcome.file_size_bytes), inline=True),
        EmbedField(name="🔗 TX", value=format_transaction(outcome.transaction_id), inline=True),
        EmbedField(name="🏷️ Owner", value=config.owner_arns_name, inline=True),
        EmbedField(name="📦 Total Apps", value=str(config.total_apps), inline=True),
        EmbedField(name="🌐 Deployment URL", value=f"[View Deployment]({url})", inline=False),
    ]
    if outcome.transaction_id:
        fields.append(
            EmbedField(
                name="📋 Manifest",
                value=f"[View Manifest](https://arweave.net/raw/{outcome.transaction_id})",
                inline=False,
            )
        )

    embed = Embed(
        title=f"{status.glyph} Deployment {status.word}!",
        description=f"Deployment {status.word} for {outcome.file_path}",
        color=COLOR_SUCCESS if outcome.succeeded else COLOR_FAILURE,
        fields=fields,
        timestamp=_timestamp(),
        footer=EmbedFooter(text=FOOTER_TEXT),
    )
    return WebhookMessage(content=content, embeds=[embed])


def _render_no_change_message(config: AnnounceConfig, content: str) -> WebhookMessage:
    embed = Embed(
        title="ℹ️ No Changes Detected",
        description=(
            f"No deployment was needed. All {config.total_apps} apps under "
            f"{config.owner_arns_name} are already up to date."
        ),
        color=COLOR_INFO,
        fields=[
            EmbedField(name="🏷️ Owner", value=config.owner_arns_name, inline=True),
            EmbedField(name="📦 Total Apps", value=str(config.total_apps), inline=True),
        ],
        timestamp=_timestamp(),
        footer=EmbedFooter(text=FOOTER_TEXT),
    )
    return WebhookMessage(content=content, embeds=[embed])



def render_connection_test_message(config: AnnounceConfig) -> WebhookMessage:
    embed = Embed(
        title="🔧 Connection Test",
        description="Discord webhook is reachable from the deployment pipeline.",
        color=COLOR_INFO,
        fields=[EmbedField(name="🏷️ Owner", value=config.owner_arns_name, inline=True)],
        timestamp=_timestamp(),
        footer=EmbedFooter(text=FOOTER_TEXT),
    )
    return WebhookMessage(content="", embeds=[embed])

@dataclass(frozen=True)
class NotificationPayload:
    """Channel-specific rendering of one outcome."""
    text: str
    chat: Optional[WebhookMessage] = None
    deployment_url: Optional[str] = None


def render_payload(outcome: DeploymentOutcome, channel: Channel, config: AnnounceConfig) -> NotificationPayload:
    url = deployment_url(outcome, config)
    if isinstance(channel, ChatWebhook):
        chat = render_chat_message(outcome, config)
        return NotificationPayload(text=chat.embeds[0].title, chat=chat, deployment_url=url)
    return NotificationPayload(text=render_announcement_text(outcome, config), deployment_url=url)
