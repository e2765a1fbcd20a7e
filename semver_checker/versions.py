"""Version ref classification and highest-patch resolution."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .config import CheckerConfig
    from .models import RepositoryState

VERSION_PATTERN = re.compile(r"^v(\d+)(\.(\d+)(\.(\d+))?)?$")
LATEST = "latest"

TAG = "tag"
BRANCH = "branch"

_REF_PREFIXES = {TAG: "refs/tags/", BRANCH: "refs/heads/"}


def is_version_name(name: str) -> bool:
    return name == LATEST or VERSION_PATTERN.match(name) is not None


def parse_version(name: str) -> tuple[Optional[int], Optional[int], Optional[int]] | None:
    """Split a version name into (major, minor, patch).

    Returns None for names that are not version refs. "latest" parses to
    (None, None, None).
    """
    if name == LATEST:
        return None, None, None
    match = VERSION_PATTERN.match(name)
    if not match:
        return None
    major = int(match.group(1))
    minor = int(match.group(3)) if match.group(3) is not None else None
    patch = int(match.group(5)) if match.group(5) is not None else None
    return major, minor, patch


def ref_path(name: str, ref_type: str) -> str:
    return f"{_REF_PREFIXES[ref_type]}{name}"


def major_name(major: int) -> str:
    return f"v{major}"


def minor_name(major: int, minor: int) -> str:
    return f"v{major}.{minor}"


@dataclass
class VersionRef:
    version: str
    sha: str
    ref_type: str
    major: Optional[int] = None
    minor: Optional[int] = None
    patch: Optional[int] = None
    is_ignored: bool = False

    @classmethod
    def parse(cls, name: str, sha: str, ref_type: str) -> "VersionRef | None":
        parts = parse_version(name)
        if parts is None:
            return None
        major, minor, patch = parts
        return cls(version=name, sha=sha, ref_type=ref_type, major=major, minor=minor, patch=patch)

    @property
    def ref_path(self) -> str:
        return ref_path(self.version, self.ref_type)

    @property
    def is_latest(self) -> bool:
        return self.version == LATEST

    @property
    def is_patch(self) -> bool:
        return self.patch is not None

    @property
    def is_minor(self) -> bool:
        return self.minor is not None and self.patch is None

    @property
    def is_major(self) -> bool:
        return self.major is not None and self.minor is None

    @property
    def is_floating(self) -> bool:
        return self.is_major or self.is_minor or self.is_latest

    @property
    def is_tag(self) -> bool:
        return self.ref_type == TAG

    @property
    def is_branch(self) -> bool:
        return self.ref_type == BRANCH

    @property
    def key(self) -> tuple[int, int, int]:
        return self.major or 0, self.minor or 0, self.patch or 0


def version_key(name: str) -> tuple[int, int, int]:
    """Sort key for version names; non-version names sort first."""
    parts = parse_version(name)
    if not parts or parts[0] is None:
        return -1, -1, -1
    major, minor, patch = parts
    return major, minor if minor is not None else -1, patch if patch is not None else -1


def qualifying_patches(
    state: "RepositoryState",
    config: "CheckerConfig",
    *,
    major: Optional[int] = None,
    minor: Optional[int] = None,
) -> list[VersionRef]:
    """Patch refs eligible to be tracked by a floating alias.

    Tags are listed before branches. Ignored refs are dropped, and so are
    prereleases when preview releases are ignored.
    """
    prerelease_tags = set()
    if config.ignore_preview_releases:
        prerelease_tags = {r.tag_name for r in state.releases if r.is_prerelease}

    out = []
    for ref in _tags_then_branches(state):
        if not ref.is_patch or ref.is_ignored:
            continue
        if major is not None and ref.major != major:
            continue
        if minor is not None and ref.minor != minor:
            continue
        if ref.version in prerelease_tags:
            continue
        out.append(ref)
    return out


def highest_patch(
    state: "RepositoryState",
    config: "CheckerConfig",
    *,
    major: Optional[int] = None,
    minor: Optional[int] = None,
) -> VersionRef | None:
    """Highest qualifying patch, optionally scoped to a major or minor series.

    A tag wins over a branch carrying the same version triple because tags
    are scanned first and only a strictly greater triple replaces the best.
    """
    best: VersionRef | None = None
    for ref in qualifying_patches(state, config, major=major, minor=minor):
        if best is None or ref.key > best.key:
            best = ref
    return best


def alias_target(ref: VersionRef, state: "RepositoryState", config: "CheckerConfig") -> VersionRef | None:
    """The patch a floating alias should point at, or None if nothing qualifies."""
    if ref.is_latest:
        return highest_patch(state, config)
    if ref.is_major:
        return highest_patch(state, config, major=ref.major)
    if ref.is_minor:
        return highest_patch(state, config, major=ref.major, minor=ref.minor)
    return None


def _tags_then_branches(state: "RepositoryState") -> Iterable[VersionRef]:
    yield from state.tags
    yield from state.branches
