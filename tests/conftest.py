"""Pytest configuration and fixtures."""

from typing import List, Optional

import pytest

from src.config import AnnounceConfig
from src.models import DeploymentOutcome, DispatchResult


class FakeTwitter:
    """Stands in for TwitterAnnouncer and records what it was asked to post."""

    def __init__(self, result: Optional[DispatchResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[dict] = []

    async def post_template_announcement(self, outcome, force=False, text=None):
        self.calls.append({"kind": "public", "outcome": outcome, "force": force, "text": text})
        if self.error:
            raise self.error
        return self.result or DispatchResult.ok(message=text)

    async def post_dm_announcement(self, outcome, recipient=None, force=False, text=None):
        self.calls.append({"kind": "dm", "outcome": outcome, "recipient": recipient, "force": force, "text": text})
        if self.error:
            raise self.error
        return self.result or DispatchResult.ok(recipient=recipient, message=text)


class FakeDiscord:
    def __init__(self, result: Optional[DispatchResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[dict] = []

    async def send_chat_notification(self, outcome, force=False, message=None):
        self.calls.append({"outcome": outcome, "force": force, "message": message})
        if self.error:
            raise self.error
        return self.result or DispatchResult.ok(deployment_url="https://example.arweave.net")


@pytest.fixture
def config(tmp_path) -> AnnounceConfig:
    return AnnounceConfig(
        templates_dir=str(tmp_path / "reply-templates"),
        owner_arns_name="jonnie",
        total_apps=7,
        twitter_app_key="app-key",
        twitter_app_secret="app-secret",
        twitter_access_token="access-token",
        twitter_access_secret="access-secret",
        discord_webhook_url="https://discord.com/api/webhooks/1/abc",
    )


@pytest.fixture
def outcome(config: AnnounceConfig) -> DeploymentOutcome:
    return DeploymentOutcome.create(
        "deadbeef",
        config,
        file_path="hello-world.txt",
        transaction_id="abcdefghij",
        file_size_bytes=31337,
        duration_ms=10,
    )


@pytest.fixture
def no_change_outcome(config: AnnounceConfig) -> DeploymentOutcome:
    return DeploymentOutcome.create("no-changes", config)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "DRY_RUN",
        "GITHUB_REPOSITORY",
        "GITHUB_TOKEN",
        "REPO_TOKEN",
        "WORKFLOW_REF",
        "DEFAULT_FILE_PATH",
        "LOG_LEVEL",
        "TEST_MODE",
        "FORCE_ANNOUNCE",
        "REPLY_TEMPLATES_DIR",
        "TOTAL_APPS",
    ):
        monkeypatch.delenv(name, raising=False)
