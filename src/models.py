#!/usr/bin/env python3
"""Records passed between the CLI layer, the dispatcher and the channel posters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from src.config import AnnounceConfig
from src.errors import MissingIdentifierError

# Hash value the pipeline passes when nothing changed but a notice should still go out.
NO_CHANGE_HASH = "no-changes"


@dataclass(frozen=True)
class DeploymentOutcome:
    """One deployment attempt, as reported by the CI pipeline."""
    identifier_hash: str
    file_path: str
    succeeded: bool = True
    transaction_id: Optional[str] = None
    file_size_bytes: int = 0
    duration_ms: int = 0
    is_no_change_event: bool = False
    test_mode: bool = False

    def __post_init__(self):
        if not self.identifier_hash or not self.identifier_hash.strip():
            raise MissingIdentifierError()

    @property
    def undername(self) -> str:
        return self.identifier_hash

    @classmethod
    def create(
        cls,
        identifier_hash: Optional[str],
        config: AnnounceConfig,
        file_path: Optional[str] = None,
        transaction_id: Optional[str] = None,
        file_size_bytes: Optional[int] = None,
        duration_ms: Optional[int] = None,
        succeeded: bool = True,
        test_mode: bool = False,
    ) -> "DeploymentOutcome":
        """Build an outcome from CLI arguments, filling in configured defaults."""
        identifier_hash = (identifier_hash or "").strip()
        return cls(
            identifier_hash=identifier_hash,
            file_path=file_path or config.fallback_file_path,
            succeeded=succeeded,
            transaction_id=transaction_id or None,
            file_size_bytes=file_size_bytes or 0,
            duration_ms=duration_ms or 0,
            is_no_change_event=identifier_hash == NO_CHANGE_HASH,
            test_mode=test_mode,
        )


@dataclass(frozen=True)
class PublicPost:
    kind = "public"


@dataclass(frozen=True)
class DirectMessage:
    recipient: str
    kind = "dm"


@dataclass(frozen=True)
class ChatWebhook:
    kind = "chat"


Channel = Union[PublicPost, DirectMessage, ChatWebhook]


class DispatchResult(BaseModel):
    """Uniform outcome of posting one notification to one channel."""

    success: bool
    recipient: Optional[str] = None
    deployment_url: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[str] = None
    message: Optional[str] = Field(default=None, description="Rendered text that was (or would be) sent")

    @classmethod
    def ok(cls, **fields) -> "DispatchResult":
        return cls(success=True, **fields)

    @classmethod
    def failure(cls, error: Optional[str] = None, reason: Optional[str] = None) -> "DispatchResult":
        return cls(success=False, error=error, reason=reason)

    @property
    def failure_detail(self) -> str:
        return self.error or self.reason or "unknown error"


class EmbedField(BaseModel):
    name: str
    value: str
    inline: bool = False


class EmbedFooter(BaseModel):
    text: str


class Embed(BaseModel):
    """Discord rich embed (subset of fields used by deployment notices)."""

    title: str
    description: str
    color: int
    fields: List[EmbedField] = Field(default_factory=list)
    timestamp: Optional[str] = None
    footer: Optional[EmbedFooter] = None

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


class WebhookMessage(BaseModel):
    content: str = ""
    embeds: List[Embed] = Field(default_factory=list)
