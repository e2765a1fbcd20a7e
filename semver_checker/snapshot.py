"""Builds a RepositoryState snapshot from the GitHub API."""

from __future__ import annotations

import logging
from typing import Optional

import yaml

from .config import CheckerConfig
from .github_client import GitHubClient
from .models import ReleaseInfo, RepositoryState
from .versions import BRANCH, TAG, VersionRef, is_version_name, version_key

logger = logging.getLogger(__name__)

ACTION_FILES = ("action.yml", "action.yaml")
README_FILES = ("README.md", "readme.md", "README")


def _version_refs(pairs: list[tuple[str, str]], ref_type: str) -> list[VersionRef]:
    refs = []
    for name, sha in pairs:
        ref = VersionRef.parse(name, sha, ref_type)
        if ref is not None:
            refs.append(ref)
    return sorted(refs, key=lambda r: version_key(r.version))


def parse_action_metadata(text: str) -> dict:
    """Parse action.yml; unreadable content counts as an empty mapping."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.warning("Could not parse action metadata: %s", e)
        return {}
    return data if isinstance(data, dict) else {}


def load_action_metadata(client: GitHubClient) -> Optional[dict]:
    for path in ACTION_FILES:
        text = client.get_file(path)
        if text is not None:
            return parse_action_metadata(text)
    return None


def has_readme(client: GitHubClient) -> bool:
    return any(client.get_file(path) is not None for path in README_FILES)


def load_repository_state(client: GitHubClient, config: CheckerConfig) -> RepositoryState:
    state = RepositoryState(
        owner=client.owner,
        name=client.repo,
        client=client,
        ignore_versions=config.ignore_versions,
    )
    state.tags = _version_refs(client.list_tags(), TAG)
    state.branches = _version_refs(client.list_branches(), BRANCH)

    latest_id = client.latest_release_id()
    state.releases = [
        ReleaseInfo.from_api_response(data, latest_id)
        for data in client.list_releases()
        if is_version_name(data.get("tag_name") or "")
    ]

    if config.check_marketplace != "none":
        state.action_metadata = load_action_metadata(client)
        state.has_readme = has_readme(client)

    state.apply_ignore_patterns()
    logger.info(
        "Loaded %s: %d version tag(s), %d version branch(es), %d release(s)",
        state.full_name, len(state.tags), len(state.branches), len(state.releases),
    )
    return state
