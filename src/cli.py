#!/usr/bin/env python3
"""
Command-line entry points.

Every entry point takes positional arguments, prints human-readable status
lines and returns the process exit code (0 on success, 1 on any failure).
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
import time
from typing import Callable, List, Optional, Sequence

from dotenv import load_dotenv

from src.config import AnnounceConfig
from src.discord_notifier import DiscordNotifier
from src.dispatcher import AnnouncementDispatcher, resolve_channel
from src.errors import AnnounceError, MissingIdentifierError, TransportFailure, remediation_hint
from src.formatting import render_post_text
from src.github_client import (
    MERGE_METHODS,
    GitHubClient,
    has_github_cli,
    mark_ready_with_cli,
    resolve_repository,
    resolve_token,
)
from src.models import ChatWebhook, DeploymentOutcome, DirectMessage
from src.templates import list_templates
from src.twitter_client import TwitterAnnouncer

logger = logging.getLogger(__name__)

ANNOUNCE_USAGE = (
    "Usage: announce <deployment_hash> [file_path] [announce_type]\n"
    "Announce types: public, dm"
)
DISCORD_USAGE = "Usage: discord-announce <deployment_hash> [file_path] [manifest_tx_id]"
MOCK_USAGE = "Usage: mock-announce <deployment_hash> [file_path]"
TRIGGER_WORKFLOW_USAGE = "Usage: trigger-workflow <workflow_name> [inputs_json]"
TRIGGER_ANNOUNCEMENT_USAGE = "Usage: trigger-announcement <deployment_hash> [file_path]"
CHECK_CONNECTIONS_USAGE = "Usage: check-connections [twitter|discord|all]"
AUTO_MERGE_USAGE = (
    "Usage: auto-merge <pr_number> [merge_method]\n"
    "Merge methods: merge, squash, rebase"
)

MOCK_INDEX_BLURB = (
    "🎉 Enhanced with 3D effects, sound, matrix rain, holographic effects, and advanced animations!",
    "🚀 Interactive celebration page with audio, particles, and Konami code support!",
)


def _log_level(raw: Optional[str]) -> str:
    level = (raw or "WARNING").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return "WARNING"
    return level


def _bootstrap() -> None:
    load_dotenv()
    raw_level = os.getenv("LOG_LEVEL")
    level = _log_level(raw_level)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if raw_level and raw_level.strip().upper() != level:
        logger.warning("Unknown LOG_LEVEL %r, using %s", raw_level, level)


def _args(argv: Optional[Sequence[str]]) -> List[str]:
    return list(sys.argv[1:] if argv is None else argv)


def _arg(args: List[str], index: int) -> Optional[str]:
    if len(args) > index and args[index].strip():
        return args[index].strip()
    return None


def _now_ms() -> int:
    return int(time.time() * 1000)


def _usage_error(message: str, usage: str) -> int:
    print(f"❌ {message}", file=sys.stderr)
    print(usage)
    return 1


def _report_failure(prefix: str, exc: BaseException) -> int:
    logger.debug("%s", prefix, exc_info=exc)
    print(f"❌ {prefix}: {exc}", file=sys.stderr)
    hint = remediation_hint(exc)
    if hint:
        print(f"\n💡 {hint}")
    return 1


def announce_main(
    argv: Optional[Sequence[str]] = None,
    config: Optional[AnnounceConfig] = None,
    dispatcher: Optional[AnnouncementDispatcher] = None,
) -> int:
    """Announce a deployment on Twitter/X as a public post or a DM."""
    args = _args(argv)
    _bootstrap()
    if not _arg(args, 0):
        return _usage_error(str(MissingIdentifierError()), ANNOUNCE_USAGE)

    try:
        config = config or AnnounceConfig.from_env()
        outcome = DeploymentOutcome.create(
            _arg(args, 0),
            config,
            file_path=_arg(args, 1),
            transaction_id=f"github-action-{_now_ms()}",
            test_mode=config.test_mode,
        )
        channel = resolve_channel(_arg(args, 2), config.default_mode, config.dm_recipient)
    except AnnounceError as exc:
        return _report_failure("Twitter announcement error", exc)

    dispatcher = dispatcher or AnnouncementDispatcher(config)
    if isinstance(channel, DirectMessage):
        print("📩 Sending DM announcement...")
    else:
        print("🐦 Sending public announcement...")

    result = asyncio.run(dispatcher.dispatch(outcome, channel))
    if not result.success:
        print(f"❌ Twitter announcement failed: {result.failure_detail}")
        return 1

    print("✅ Twitter announcement posted successfully")
    if isinstance(channel, DirectMessage):
        print(f"📩 DM sent to @{result.recipient or channel.recipient} with hash: {outcome.undername}")
    else:
        print(f"🐦 Tweet posted with hash: {outcome.undername}")
    return 0


def discord_announce_main(
    argv: Optional[Sequence[str]] = None,
    config: Optional[AnnounceConfig] = None,
    dispatcher: Optional[AnnouncementDispatcher] = None,
) -> int:
    """Announce a deployment (or a no-change run) on the Discord webhook."""
    args = _args(argv)
    _bootstrap()
    if not _arg(args, 0):
        return _usage_error(str(MissingIdentifierError()), DISCORD_USAGE)

    try:
        config = config or AnnounceConfig.from_env()
        outcome = DeploymentOutcome.create(
            _arg(args, 0),
            config,
            file_path=_arg(args, 1),
            transaction_id=_arg(args, 2),
            test_mode=config.test_mode,
        )
    except AnnounceError as exc:
        return _report_failure("Discord notification error", exc)

    dispatcher = dispatcher or AnnouncementDispatcher(config)
    print("📢 Sending Discord notification...")
    result = asyncio.run(dispatcher.dispatch(outcome, ChatWebhook()))
    if not result.success:
        print(f"❌ Discord notification failed: {result.failure_detail}")
        return 1

    print("✅ Discord notification sent successfully")
    print(f"📢 Notification sent with deployment URL: {result.deployment_url}")
    return 0


def mock_announce_main(argv: Optional[Sequence[str]] = None, config: Optional[AnnounceConfig] = None) -> int:
    """Print the public announcement for a canned outcome without posting it."""
    args = _args(argv)
    _bootstrap()
    if not _arg(args, 0):
        return _usage_error(str(MissingIdentifierError()), MOCK_USAGE)

    try:
        config = config or AnnounceConfig.from_env()
        outcome = DeploymentOutcome.create(
            _arg(args, 0),
            config,
            file_path=_arg(args, 1) or "index.html",
            transaction_id=f"test-{_arg(args, 0)}-{_now_ms()}",
            file_size_bytes=31337,
            duration_ms=10,
        )
    except AnnounceError as exc:
        return _report_failure("Mock announcement error", exc)

    extra = MOCK_INDEX_BLURB if outcome.file_path == "index.html" else ()
    tweet = render_post_text(
        outcome,
        config,
        hashtags="#Arweave #Deployment #AI #Web3 #Interactive",
        extra_lines=extra,
    )

    print("🐦 Mock Twitter Announcement:")
    print("=" * 50)
    print(tweet)
    print("=" * 50)
    print("✅ Mock announcement generated successfully!")
    print("📝 In a real deployment, this would be posted to Twitter/X")
    return 0


def list_templates_main(argv: Optional[Sequence[str]] = None, config: Optional[AnnounceConfig] = None) -> int:
    """Print the reply templates available to the announcers."""
    _args(argv)
    _bootstrap()
    try:
        config = config or AnnounceConfig.from_env()
    except AnnounceError as exc:
        return _report_failure("Template listing error", exc)

    templates = list_templates(config.templates_dir)
    if not templates:
        print(f"⚠️ No reply templates found in {config.templates_dir}")
        return 1

    print(f"📋 Reply templates in {config.templates_dir}:")
    for template in templates:
        print(f"  • {template.name}: {template.description}")
        if template.placeholders():
            print(f"    placeholders: {', '.join(sorted(set(template.placeholders())))}")
    return 0


def _check_twitter(twitter: TwitterAnnouncer) -> bool:
    print("🐦 Checking Twitter/X credentials...")
    try:
        username = twitter.verify_credentials()
    except AnnounceError as exc:
        _report_failure("Twitter connection failed", exc)
        return False
    print(f"✅ Twitter connected as ")
    return True


def _check_discord(discord: DiscordNotifier) -> bool:
    print("📢 Checking Discord webhook...")
    try:
        asyncio.run(discord.send_test_message())
    except AnnounceError as exc:
        _report_failure("Discord connection failed", exc)
        return False
    print("✅ Discord webhook accepted a test message")
    return True


def check_connections_main(
    argv: Optional[Sequence[str]] = None,
    config: Optional[AnnounceConfig] = None,
    twitter: Optional[TwitterAnnouncer] = None,
    discord: Optional[DiscordNotifier] = None,
) -> int:
    """Verify the Twitter credentials and/or the Discord webhook without announcing anything."""
    args = _args(argv)
    _bootstrap()
    target = (_arg(args, 0) or "all").lower()
    if target not in ("twitter", "discord", "all"):
        return _usage_error(f"Unknown target {target!r}", CHECK_CONNECTIONS_USAGE)

    try:
        config = config or AnnounceConfig.from_env()
    except AnnounceError as exc:
        return _report_failure("Connection check error", exc)

    results = []
    if target in ("twitter", "all"):
        if config.twitter_configured or target == "twitter":
            results.append(_check_twitter(twitter or TwitterAnnouncer(config)))
        else:
            print("⚪ Twitter not configured (TWITTER_APP_KEY not set), skipping")
    if target in ("discord", "all"):
        if config.discord_webhook_url or target == "discord":
            results.append(_check_discord(discord or DiscordNotifier(config)))
        else:
            print("⚪ Discord not configured (DISCORD_WEBHOOK_URL not set), skipping")

    if not results:
        print("❌ No announcement channels are configured")
        return 1
    return 0 if all(results) else 1


def _dispatch_workflow(
    workflow: str,
    inputs: dict,
    token_names: Sequence[str],
    client_factory: Callable[[str], GitHubClient],
    repo: Optional[str],
) -> str:
    repo = repo or resolve_repository()
    client = client_factory(resolve_token(token_names))
    print(f"🚀 Triggering workflow: {workflow}")
    print(f"📦 Repository: {repo}")
    client.dispatch_workflow(repo, workflow, inputs, ref=os.getenv("WORKFLOW_REF", "main"))
    return repo


def trigger_workflow_main(
    argv: Optional[Sequence[str]] = None,
    client_factory: Callable[[str], GitHubClient] = GitHubClient,
    repo: Optional[str] = None,
) -> int:
    """Trigger any workflow_dispatch workflow by file name."""
    args = _args(argv)
    _bootstrap()

    workflow = _arg(args, 0)
    if not workflow:
        return _usage_error("Workflow name is required", TRIGGER_WORKFLOW_USAGE)
    try:
        inputs = json.loads(_arg(args, 1) or "{}")
    except json.JSONDecodeError as exc:
        return _usage_error(f"Inputs must be a JSON object: {exc}", TRIGGER_WORKFLOW_USAGE)
    if not isinstance(inputs, dict):
        return _usage_error("Inputs must be a JSON object", TRIGGER_WORKFLOW_USAGE)

    try:
        print(f"📝 Inputs: {json.dumps(inputs)}")
        _dispatch_workflow(workflow, inputs, ("GITHUB_TOKEN", "REPO_TOKEN"), client_factory, repo)
    except AnnounceError as exc:
        return _report_failure("Failed to trigger workflow", exc)

    print("✅ Workflow triggered successfully!")
    print("🔗 Check GitHub Actions to see the workflow running")
    return 0


def trigger_deploy_main(
    argv: Optional[Sequence[str]] = None,
    client_factory: Callable[[str], GitHubClient] = GitHubClient,
    repo: Optional[str] = None,
) -> int:
    """Trigger the deploy.yml workflow for one file."""
    args = _args(argv)
    _bootstrap()

    file_path = _arg(args, 0) or os.getenv("DEFAULT_FILE_PATH") or "hello-world.txt"
    message = _arg(args, 1) or "Deployed via AI agent"
    try:
        print(f"📁 File: {file_path}")
        print(f"📝 Message: {message}")
        _dispatch_workflow(
            "deploy.yml",
            {"file_path": file_path, "message": message},
            ("REPO_TOKEN", "GITHUB_TOKEN"),
            client_factory,
            repo,
        )
    except AnnounceError as exc:
        return _report_failure("Failed to trigger deployment workflow", exc)

    print("✅ Deployment workflow triggered successfully!")
    print("🚀 Check GitHub Actions to see the deployment progress")
    return 0


def trigger_announcement_main(
    argv: Optional[Sequence[str]] = None,
    client_factory: Callable[[str], GitHubClient] = GitHubClient,
    repo: Optional[str] = None,
) -> int:
    """Trigger the announce.yml workflow for a finished deployment."""
    args = _args(argv)
    _bootstrap()

    deployment_hash = _arg(args, 0)
    if not deployment_hash:
        return _usage_error("Deployment hash is required", TRIGGER_ANNOUNCEMENT_USAGE)
    file_path = _arg(args, 1) or os.getenv("DEFAULT_FILE_PATH") or "hello-world.txt"

    try:
        print(f"📝 Deployment hash: {deployment_hash}")
        print(f"📁 File: {file_path}")
        _dispatch_workflow(
            "announce.yml",
            {"deployment_hash": deployment_hash, "file_path": file_path},
            ("REPO_TOKEN", "GITHUB_TOKEN"),
            client_factory,
            repo,
        )
    except AnnounceError as exc:
        return _report_failure("Failed to trigger announcement workflow", exc)

    print("✅ Announcement workflow triggered successfully!")
    print("🐦 Check GitHub Actions to see the announcement being posted")
    return 0


def _mark_ready(client: GitHubClient, pr_number: int, node_id: str) -> None:
    cli_hint = None
    if has_github_cli():
        print("📝 Converting draft PR to ready (using GitHub CLI)...")
        try:
            mark_ready_with_cli(pr_number)
            return
        except TransportFailure as exc:
            cli_hint = exc.hint
            print(f"⚠️ GitHub CLI method failed ({exc}), trying GraphQL API...")
            if cli_hint:
                print(f"💡 {cli_hint}")

    print("📝 Converting draft PR to ready (using GraphQL API)...")
    try:
        client.mark_ready_for_review(node_id)
    except AnnounceError as exc:
        if cli_hint and not exc.hint:
            exc.hint = cli_hint
        raise


def auto_merge_main(
    argv: Optional[Sequence[str]] = None,
    client_factory: Callable[[str], GitHubClient] = GitHubClient,
    repo: Optional[str] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Mark a draft PR ready if needed, wait until it is mergeable, then merge it."""
    args = _args(argv)
    _bootstrap()

    raw_number = _arg(args, 0)
    if not raw_number:
        return _usage_error("PR number is required", AUTO_MERGE_USAGE)
    try:
        pr_number = int(raw_number.lstrip("#"))
    except ValueError:
        return _usage_error(f"PR number must be an integer, got {raw_number!r}", AUTO_MERGE_USAGE)
    merge_method = (_arg(args, 1) or "merge").lower()
    if merge_method not in MERGE_METHODS:
        return _usage_error(f"Unknown merge method {merge_method!r}", AUTO_MERGE_USAGE)

    try:
        repo = repo or resolve_repository()
        client = client_factory(resolve_token(("GITHUB_TOKEN", "REPO_TOKEN")))

        print(f"🔄 Auto-merging PR #{pr_number} for {repo}")
        print(f"📝 Merge method: {merge_method}")
        print("📋 Checking PR status...")
        pr = client.get_pull(repo, pr_number)

        if pr.get("draft"):
            _mark_ready(client, pr_number, pr.get("node_id", ""))
            print("✅ PR marked as ready for review")
            print("⏳ Waiting for PR to be mergeable...")
            client.wait_for_mergeable(repo, pr_number, sleep=sleep)

        print("🔀 Merging PR...")
        merge = client.merge_pull(
            repo,
            pr_number,
            commit_title=f"Merge PR #{pr_number}: {pr.get('title', '')}",
            commit_message=f"Auto-merged by AI agent\n\nCloses #{pr_number}",
            merge_method=merge_method,
        )
    except AnnounceError as exc:
        return _report_failure("Failed to auto-merge PR", exc)

    print("✅ PR merged successfully!")
    print(f"🔗 Merge commit: {merge.get('sha', 'unknown')}")
    return 0
