"""GitHub REST client for reading and rewriting version refs and releases."""

from __future__ import annotations

import base64
import logging
import os
import subprocess
import time
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_PER_PAGE = 100
RATE_LIMIT_BUFFER = 10
BACKOFF_MULTIPLIER = 1.5


class GitHubAPIError(Exception):
    pass


class RateLimitExceeded(GitHubAPIError):
    pass


@dataclass(frozen=True)
class RefResult:
    success: bool
    requires_manual_fix: bool = False


@dataclass(frozen=True)
class ReleaseResult:
    success: bool
    unfixable: bool = False
    release_id: Optional[int] = None


def _mentions_workflow_scope(response: requests.Response) -> bool:
    return response.status_code in (403, 422) and "workflow" in response.text.lower()


def _mentions_immutable_release(response: requests.Response) -> bool:
    return response.status_code == 422 and "immutable" in response.text.lower()


class GitHubClient:
    """Handles all communication with the GitHub REST API for one repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: float = 30.0,
        retries: int = 3,
        backoff: float = 2.0,
    ):
        self.owner = owner
        self.repo = repo
        self.api_url = (api_url or os.environ.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/")
        self.token = (
            token
            or os.environ.get("GITHUB_TOKEN")
            or os.environ.get("GH_TOKEN")
            or self._get_gh_cli_token()
        )
        if not self.token:
            raise GitHubAPIError(
                "No GitHub token found. Pass --token, set GITHUB_TOKEN, or log in with the gh CLI."
            )
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "semver-checker",
        })
        self._requests_remaining: Optional[int] = None
        self._reset_time: Optional[int] = None

    @staticmethod
    def _get_gh_cli_token() -> Optional[str]:
        try:
            result = subprocess.run(
                ["gh", "auth", "token"],
                capture_output=True, text=True, timeout=10
            )
            if result.returncode == 0:
                return result.stdout.strip() or None
        except (FileNotFoundError, subprocess.TimeoutExpired):
            pass
        return None

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    # ── Transport ───────────────────────────────────────────────

    def _update_rate_limit(self, response: requests.Response):
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset = response.headers.get("X-RateLimit-Reset")
        if remaining is not None:
            self._requests_remaining = int(remaining)
        if reset is not None:
            self._reset_time = int(reset)

    def _wait_for_rate_limit(self):
        if self._requests_remaining is not None and self._requests_remaining < RATE_LIMIT_BUFFER:
            if self._reset_time:
                wait_seconds = max(0, self._reset_time - int(time.time())) + 5
                logger.warning(
                    "Rate limit low (%d remaining). Waiting %d seconds.",
                    self._requests_remaining, wait_seconds
                )
                time.sleep(wait_seconds)

    def _is_rate_limited(self, response: requests.Response) -> bool:
        if response.status_code == 429:
            return True
        return response.status_code == 403 and "rate limit" in response.text.lower()

    def _request(self, method: str, endpoint: str, allow_errors: bool = False, **kwargs) -> requests.Response:
        """Send a request with retries.

        With allow_errors, 4xx responses are returned for the caller to
        classify instead of raising.
        """
        self._wait_for_rate_limit()
        url = f"{self.api_url}{endpoint}" if endpoint.startswith("/") else endpoint
        backoff = self.backoff

        for attempt in range(self.retries + 1):
            try:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except requests.exceptions.RequestException as e:
                if attempt < self.retries:
                    logger.warning("Request failed (%s). Retrying in %.1f seconds.", e, backoff)
                    time.sleep(backoff)
                    backoff *= BACKOFF_MULTIPLIER
                    continue
                raise GitHubAPIError(f"Request failed after {self.retries} retries: {e}") from e

            self._update_rate_limit(response)

            if self._is_rate_limited(response):
                if attempt < self.retries:
                    wait = max(backoff, self._reset_time - time.time() + 5) if self._reset_time else backoff
                    logger.warning("Rate limited. Retrying in %.1f seconds.", wait)
                    time.sleep(wait)
                    backoff *= BACKOFF_MULTIPLIER
                    continue
                raise RateLimitExceeded("GitHub API rate limit exceeded")

            if response.status_code >= 500 and attempt < self.retries:
                logger.warning("Server error %d. Retrying in %.1f seconds.", response.status_code, backoff)
                time.sleep(backoff)
                backoff *= BACKOFF_MULTIPLIER
                continue

            if response.status_code == 404:
                return response
            if allow_errors and response.status_code < 500:
                return response
            if response.status_code >= 400:
                raise GitHubAPIError(
                    f"GitHub API error {response.status_code} for {method} {endpoint}: {response.text[:500]}"
                )
            return response

        raise GitHubAPIError("Max retries exceeded")

    def get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        response = self._request("GET", endpoint, params=params)
        if response.status_code == 404:
            return None
        return response.json()

    def get_paginated(self, endpoint: str, params: Optional[dict] = None, max_pages: int = 50) -> list:
        """Fetch all pages of a paginated endpoint."""
        params = dict(params or {})
        params.setdefault("per_page", DEFAULT_PER_PAGE)
        all_items = []

        for page in range(1, max_pages + 1):
            params["page"] = page
            response = self._request("GET", endpoint, params=params)
            if response.status_code == 404:
                break
            items = response.json()
            if not items:
                break
            all_items.extend(items)
            if len(items) < params["per_page"]:
                break

        return all_items

    # ── Reads ───────────────────────────────────────────────────

    def _list_refs(self, namespace: str) -> list[tuple[str, str]]:
        prefix = f"refs/{namespace}/"
        refs = []
        for item in self.get_paginated(f"{self.repo_path}/git/matching-refs/{namespace}/"):
            name = item.get("ref", "")
            if not name.startswith(prefix):
                continue
            target = item.get("object") or {}
            sha = target.get("sha", "")
            if target.get("type") == "tag":
                sha = self._peel_tag(sha)
            refs.append((name[len(prefix):], sha))
        return refs

    def _peel_tag(self, tag_sha: str) -> str:
        """Resolve an annotated tag object to the commit it points at."""
        data = self.get(f"{self.repo_path}/git/tags/{tag_sha}")
        if not data:
            return tag_sha
        target = data.get("object") or {}
        if target.get("type") == "tag":
            return self._peel_tag(target.get("sha", ""))
        return target.get("sha", tag_sha)

    def list_tags(self) -> list[tuple[str, str]]:
        return self._list_refs("tags")

    def list_branches(self) -> list[tuple[str, str]]:
        return self._list_refs("heads")

    def list_releases(self) -> list[dict]:
        return self.get_paginated(f"{self.repo_path}/releases")

    def latest_release_id(self) -> Optional[int]:
        data = self.get(f"{self.repo_path}/releases/latest")
        if not data:
            return None
        return data.get("id")

    def get_file(self, path: str) -> Optional[str]:
        data = self.get(f"{self.repo_path}/contents/{quote(path)}")
        if not isinstance(data, dict) or data.get("type") != "file":
            return None
        content = data.get("content") or ""
        if data.get("encoding") == "base64":
            return base64.b64decode(content).decode("utf-8", errors="replace")
        return content

    def release_is_immutable(self, tag: str) -> bool:
        data = self.get(f"{self.repo_path}/releases/tags/{quote(tag)}")
        if not data:
            return False
        return bool(data.get("immutable", False)) and not data.get("draft", False)

    # ── Ref writes ──────────────────────────────────────────────

    def create_or_move_ref(self, ref: str, sha: str, force: bool = False) -> RefResult:
        """Create ref at sha, or move it there when force is set."""
        short_ref = ref[len("refs/"):] if ref.startswith("refs/") else ref

        if force:
            response = self._request(
                "PATCH", f"{self.repo_path}/git/refs/{short_ref}",
                allow_errors=True, json={"sha": sha, "force": True},
            )
            if response.status_code == 200:
                return RefResult(success=True)
            if _mentions_workflow_scope(response):
                return RefResult(success=False, requires_manual_fix=True)
            if response.status_code not in (404, 422):
                logger.debug("Moving %s failed: %d %s", ref, response.status_code, response.text[:200])
                return RefResult(success=False)

        response = self._request(
            "POST", f"{self.repo_path}/git/refs",
            allow_errors=True, json={"ref": f"refs/{short_ref}", "sha": sha},
        )
        if response.status_code == 201:
            return RefResult(success=True)
        if _mentions_workflow_scope(response):
            return RefResult(success=False, requires_manual_fix=True)
        logger.debug("Creating %s failed: %d %s", ref, response.status_code, response.text[:200])
        return RefResult(success=False)

    def delete_ref(self, ref: str) -> bool:
        short_ref = ref[len("refs/"):] if ref.startswith("refs/") else ref
        response = self._request("DELETE", f"{self.repo_path}/git/refs/{short_ref}", allow_errors=True)
        if response.status_code == 204:
            return True
        logger.debug("Deleting %s failed: %d %s", ref, response.status_code, response.text[:200])
        return False

    # ── Release writes ──────────────────────────────────────────

    @staticmethod
    def _make_latest_value(make_latest: Optional[bool]) -> dict:
        if make_latest is None:
            return {}
        return {"make_latest": "true" if make_latest else "false"}

    def _release_result(self, response: requests.Response, expected: int, what: str) -> ReleaseResult:
        if response.status_code == expected:
            return ReleaseResult(success=True, release_id=response.json().get("id"))
        if _mentions_immutable_release(response):
            return ReleaseResult(success=False, unfixable=True)
        logger.debug("%s failed: %d %s", what, response.status_code, response.text[:200])
        return ReleaseResult(success=False)

    def create_release(self, tag: str, draft: bool = False, make_latest: Optional[bool] = None) -> ReleaseResult:
        payload = {"tag_name": tag, "name": tag, "draft": draft, "generate_release_notes": True}
        payload.update(self._make_latest_value(make_latest))
        response = self._request("POST", f"{self.repo_path}/releases", allow_errors=True, json=payload)
        return self._release_result(response, 201, f"Creating release {tag}")

    def publish_release(self, tag: str, release_id: int, make_latest: Optional[bool] = None) -> ReleaseResult:
        payload = {"draft": False}
        payload.update(self._make_latest_value(make_latest))
        response = self._request(
            "PATCH", f"{self.repo_path}/releases/{release_id}", allow_errors=True, json=payload
        )
        return self._release_result(response, 200, f"Publishing release {tag}")

    def republish_release(self, tag: str, release_id: int) -> ReleaseResult:
        """Flip a published release back to draft and publish it again.

        Releases published before immutability was enabled only become
        immutable on their next publish.
        """
        response = self._request(
            "PATCH", f"{self.repo_path}/releases/{release_id}", allow_errors=True, json={"draft": True}
        )
        result = self._release_result(response, 200, f"Unpublishing release {tag}")
        if not result.success:
            return result
        return self.publish_release(tag, release_id)

    def delete_release(self, tag: str, release_id: int) -> bool:
        response = self._request("DELETE", f"{self.repo_path}/releases/{release_id}", allow_errors=True)
        if response.status_code == 204:
            return True
        logger.debug("Deleting release %s failed: %d %s", tag, response.status_code, response.text[:200])
        return False

    def set_release_latest(self, tag: str, release_id: int) -> ReleaseResult:
        response = self._request(
            "PATCH", f"{self.repo_path}/releases/{release_id}",
            allow_errors=True, json={"make_latest": "true"},
        )
        return self._release_result(response, 200, f"Marking release {tag} as latest")
