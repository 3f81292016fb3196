#!/usr/bin/env python3
"""GitHub helper for workflow dispatch and pull request merging."""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import subprocess
import time
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

import requests

from src.errors import ConfigurationError, TransportFailure, TOKEN_HINT, GH_AUTH_HINT

logger = logging.getLogger(__name__)

REMOTE_RX = re.compile(r"github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?$")
DEFAULT_TOKEN_ENV = ("GITHUB_TOKEN", "REPO_TOKEN")
MERGE_METHODS = ("merge", "squash", "rebase")

MARK_READY_MUTATION = """
mutation($pullRequestId: ID!) {
  markPullRequestReadyForReview(input: {pullRequestId: $pullRequestId}) {
    pullRequest {
      id
      isDraft
    }
  }
}
""".strip()


def parse_remote_url(remote_url: str) -> Tuple[str, str]:
    match = REMOTE_RX.search(remote_url.strip())
    if not match:
        raise ConfigurationError("Could not determine repository owner/name")
    return match.group(1), match.group(2)


def _git_remote_url() -> str:
    return subprocess.check_output(["git", "remote", "get-url", "origin"], text=True).strip()


def resolve_repository(
    environ: Optional[Mapping[str, str]] = None,
    remote_url: Callable[[], str] = _git_remote_url,
) -> str:
    """Return ``owner/repo`` from GITHUB_REPOSITORY or the origin remote."""
    env = os.environ if environ is None else environ
    full_name = env.get("GITHUB_REPOSITORY", "").strip()
    if full_name:
        owner, _, repo = full_name.partition("/")
        if owner and repo:
            return f"{owner}/{repo}"
        raise ConfigurationError(f"GITHUB_REPOSITORY must look like owner/repo, got {full_name!r}")

    try:
        url = remote_url()
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ConfigurationError(
            "Could not determine repository owner/name from git config or environment"
        ) from exc
    owner, repo = parse_remote_url(url)
    return f"{owner}/{repo}"


def resolve_token(
    names: Sequence[str] = DEFAULT_TOKEN_ENV,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Return the first non-empty token among ``names``, in order."""
    env = os.environ if environ is None else environ
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    joined = " or ".join(names)
    raise ConfigurationError(
        f"{joined} environment variable is required",
        hint=TOKEN_HINT.format(names=joined),
    )


class GitHubClient:
    """Lightweight GitHub API client for workflow dispatches and PR merges."""

    def __init__(self, github_token: str):
        self.github_token = github_token
        self.base_url = "https://api.github.com"
        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "deploy-announce",
            "Authorization": f"token {github_token}",
        }

    def _request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                data=json.dumps(payload).encode("utf-8") if payload else None,
                timeout=30,
            )
        except requests.RequestException as exc:
            logger.error("GitHub API error %s %s: %s", method, url, exc)
            raise TransportFailure(f"GitHub API request failed: {exc}") from exc

        if not response.ok:
            logger.error("GitHub API error %s %s: %s", method, url, response.status_code)
            raise TransportFailure(
                f"GitHub API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        return response.json() if response.text else {}

    def dispatch_workflow(self, repo: str, workflow: str, inputs: Dict[str, Any], ref: str = "main") -> None:
        url = f"{self.base_url}/repos/{repo}/actions/workflows/{workflow}/dispatches"
        self._request("POST", url, {"ref": ref, "inputs": inputs})

    def get_pull(self, repo: str, pr_number: int) -> Dict[str, Any]:
        url = f"{self.base_url}/repos/{repo}/pulls/{pr_number}"
        return self._request("GET", url)

    def mark_ready_for_review(self, node_id: str) -> None:
        data = self._request(
            "POST",
            f"{self.base_url}/graphql",
            {"query": MARK_READY_MUTATION, "variables": {"pullRequestId": node_id}},
        )
        errors = data.get("errors") if isinstance(data, dict) else None
        if errors:
            raise TransportFailure(f"GraphQL error: {errors[0].get('message', errors)}")

    def merge_pull(
        self,
        repo: str,
        pr_number: int,
        commit_title: str,
        commit_message: str,
        merge_method: str = "merge",
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/repos/{repo}/pulls/{pr_number}/merge"
        payload = {
            "commit_title": commit_title,
            "commit_message": commit_message,
            "merge_method": merge_method,
        }
        return self._request("PUT", url, payload)

    def wait_for_mergeable(
        self,
        repo: str,
        pr_number: int,
        max_attempts: int = 6,
        first_delay: float = 12.0,
        delay: float = 6.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Dict[str, Any]:
        for attempt in range(max_attempts):
            pr = self.get_pull(repo, pr_number)
            if pr.get("mergeable") and not pr.get("draft"):
                return pr

            if attempt < max_attempts - 1:
                wait = first_delay if attempt == 0 else delay
                print(f"⏳ Waiting {wait:g}s for PR to be ready... (attempt {attempt + 1}/{max_attempts})")
                sleep(wait)

        raise TransportFailure("PR did not become mergeable within expected time")


def has_github_cli() -> bool:
    return shutil.which("gh") is not None


def is_gh_auth_failure(output: str) -> bool:
    text = (output or "").lower()
    return "gh auth login" in text or "not logged in" in text


def mark_ready_with_cli(pr_number: int) -> None:
    """Run ``gh pr ready``; raise TransportFailure so callers can fall back to the API."""
    try:
        result = subprocess.run(
            ["gh", "pr", "ready", str(pr_number)],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise TransportFailure(f"GitHub CLI could not be started: {exc}") from exc

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        logger.warning("gh pr ready failed: %s", stderr)
        raise TransportFailure(
            f"gh pr ready exited with {result.returncode}: {stderr}",
            hint=GH_AUTH_HINT if is_gh_auth_failure(stderr) else None,
        )
