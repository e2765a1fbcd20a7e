"""Release rules: one published, immutable release per patch tag and none on floating tags."""

from __future__ import annotations

from .actions import (
    CreateReleaseAction,
    DeleteReleaseAction,
    PublishReleaseAction,
    RepublishReleaseAction,
    SetLatestReleaseAction,
)
from .models import IssueStatus, ReleaseInfo, Severity, ValidationIssue
from .pipeline import ValidationRule, severity_for
from .versions import VersionRef, highest_patch, parse_version

DUPLICATE_RELEASE = "duplicate_release"
FLOATING_VERSION_RELEASE = "floating_version_release"
MISSING_RELEASE = "missing_release"
DRAFT_RELEASE = "draft_release"
NON_IMMUTABLE_RELEASE = "non_immutable_release"
INCORRECT_LATEST_RELEASE = "incorrect_latest_release"


def release_rank(release: ReleaseInfo) -> tuple[bool, bool, int]:
    """Sort key for releases sharing a tag; the first one is kept."""
    return release.is_draft, not release.is_immutable, release.id


def kept_release(state, tag_name: str) -> ReleaseInfo | None:
    releases = state.releases_for(tag_name)
    if not releases:
        return None
    return min(releases, key=release_rank)


def _is_patch_name(name: str) -> bool:
    parts = parse_version(name)
    return parts is not None and parts[2] is not None


def _is_floating_name(name: str) -> bool:
    parts = parse_version(name)
    return parts is not None and parts[2] is None


def _is_global_highest(state, config, version: str) -> bool:
    best = highest_patch(state, config)
    return best is not None and best.version == version


def _patch_releases(state):
    return [r for r in state.releases if _is_patch_name(r.tag_name) and not r.is_ignored]


class DuplicateRelease(ValidationRule):
    name = "duplicate_release"
    category = "releases"
    priority = 40

    def candidates(self, state, config):
        if config.check_releases == "none":
            return []
        return _patch_releases(state)

    def check(self, candidate, state, config):
        return kept_release(state, candidate.tag_name) is candidate

    def describe(self, candidate, state, config):
        keep = kept_release(state, candidate.tag_name)
        return ValidationIssue(
            type=DUPLICATE_RELEASE,
            severity=severity_for(config.check_releases),
            message=f"{candidate.tag_name} has more than one release; release {candidate.id} duplicates release {keep.id}",
            version=candidate.tag_name,
            action=DeleteReleaseAction(candidate.tag_name, candidate.id),
        )


class FloatingVersionHasRelease(ValidationRule):
    name = "floating_version_has_release"
    category = "releases"
    priority = 41

    def candidates(self, state, config):
        if config.check_releases == "none":
            return []
        return [r for r in state.releases if _is_floating_name(r.tag_name) and not r.is_ignored]

    def check(self, candidate, state, config):
        return False

    def describe(self, candidate, state, config):
        if candidate.is_immutable:
            return ValidationIssue(
                type=FLOATING_VERSION_RELEASE,
                severity=severity_for(config.check_releases),
                message=(
                    f"Floating version {candidate.tag_name} has an immutable release, so its tag can never "
                    f"be moved. Add {candidate.tag_name} to ignore-versions to silence this check."
                ),
                version=candidate.tag_name,
                status=IssueStatus.UNFIXABLE,
            )
        return ValidationIssue(
            type=FLOATING_VERSION_RELEASE,
            severity=severity_for(config.check_releases),
            message=f"Floating version {candidate.tag_name} should not have a release",
            version=candidate.tag_name,
            action=DeleteReleaseAction(candidate.tag_name, candidate.id),
        )


class PatchReleaseRequired(ValidationRule):
    name = "patch_release_required"
    category = "releases"
    priority = 42

    def candidates(self, state, config):
        if config.check_releases == "none":
            return []
        return [t for t in state.tags if t.is_patch and not t.is_ignored]

    def check(self, candidate: VersionRef, state, config):
        return bool(state.releases_for(candidate.version))

    def describe(self, candidate, state, config):
        return ValidationIssue(
            type=MISSING_RELEASE,
            severity=severity_for(config.check_releases),
            message=f"Patch version {candidate.version} has no release",
            version=candidate.version,
            current_sha=candidate.sha,
            action=CreateReleaseAction(
                candidate.version,
                draft=False,
                make_latest=_is_global_highest(state, config, candidate.version),
            ),
        )


class ReleaseShouldBePublished(ValidationRule):
    name = "release_should_be_published"
    category = "releases"
    priority = 43

    def candidates(self, state, config):
        if config.check_releases == "none":
            return []
        return [
            r for r in _patch_releases(state)
            if r.is_draft and kept_release(state, r.tag_name) is r and state.find_tag(r.tag_name) is not None
        ]

    def check(self, candidate, state, config):
        return not candidate.is_draft

    def describe(self, candidate, state, config):
        return ValidationIssue(
            type=DRAFT_RELEASE,
            severity=severity_for(config.check_releases),
            message=f"Release {candidate.tag_name} is still a draft",
            version=candidate.tag_name,
            action=PublishReleaseAction(
                candidate.tag_name,
                candidate.id,
                make_latest=_is_global_highest(state, config, candidate.tag_name),
            ),
        )


class ReleaseShouldBeImmutable(ValidationRule):
    name = "release_should_be_immutable"
    category = "releases"
    priority = 44

    def candidates(self, state, config):
        if config.check_release_immutability == "none":
            return []
        return [
            r for r in _patch_releases(state)
            if r.is_published and kept_release(state, r.tag_name) is r
        ]

    def check(self, candidate, state, config):
        return candidate.is_immutable

    def describe(self, candidate, state, config):
        return ValidationIssue(
            type=NON_IMMUTABLE_RELEASE,
            severity=severity_for(config.check_release_immutability),
            message=(
                f"Release {candidate.tag_name} is not immutable; enable release immutability "
                "for the repository and republish it"
            ),
            version=candidate.tag_name,
            action=RepublishReleaseAction(candidate.tag_name, candidate.id),
        )


class HighestReleaseShouldBeLatest(ValidationRule):
    name = "highest_release_should_be_latest"
    category = "releases"
    priority = 45

    def candidates(self, state, config):
        if config.check_releases == "none":
            return []
        # Only enforced once the repository marks some release as latest.
        if not any(r.is_latest for r in state.releases):
            return []
        best = highest_patch(state, config)
        if best is None:
            return []
        release = kept_release(state, best.version)
        if release is None or release.is_draft or release.is_prerelease or release.is_ignored:
            return []
        return [release]

    def check(self, candidate, state, config):
        return candidate.is_latest

    def describe(self, candidate, state, config):
        current = next((r.tag_name for r in state.releases if r.is_latest), None)
        suffix = f" (currently {current})" if current else ""
        return ValidationIssue(
            type=INCORRECT_LATEST_RELEASE,
            severity=Severity.WARNING,
            message=f"Release {candidate.tag_name} is the highest version but is not marked as latest{suffix}",
            version=candidate.tag_name,
            action=SetLatestReleaseAction(candidate.tag_name, candidate.id),
        )
