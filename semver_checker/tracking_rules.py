"""Floating version rules: every patch series has a major and minor alias at its highest patch."""

from __future__ import annotations

from .actions import CreateBranchAction, CreateTagAction, UpdateBranchAction, UpdateTagAction
from .config import matches_ignore_pattern
from .models import Severity, ValidationIssue
from .pipeline import ValidationRule
from .versions import highest_patch, major_name, minor_name, qualifying_patches

MISSING_MAJOR_VERSION = "missing_major_version"
MISSING_MINOR_VERSION = "missing_minor_version"
INCORRECT_VERSION = "incorrect_version"


def _create_action(config, version, sha):
    if config.use_branches:
        return CreateBranchAction(version, sha)
    return CreateTagAction(version, sha)


def _update_action(config, version, sha):
    if config.use_branches:
        return UpdateBranchAction(version, sha, force=True)
    return UpdateTagAction(version, sha, force=True)


def _floating_refs(state, config):
    refs = state.branches if config.use_branches else state.tags
    return [r for r in refs if not r.is_ignored]


class MajorVersionMissing(ValidationRule):
    name = "major_version_missing"
    category = "version_tracking"
    priority = 20

    def candidates(self, state, config):
        majors = sorted({r.major for r in qualifying_patches(state, config)})
        out = []
        for major in majors:
            if matches_ignore_pattern(major_name(major), state.ignore_versions):
                continue
            out.append(highest_patch(state, config, major=major))
        return out

    def check(self, candidate, state, config):
        return state.has_ref(major_name(candidate.major))

    def describe(self, candidate, state, config):
        alias = major_name(candidate.major)
        return ValidationIssue(
            type=MISSING_MAJOR_VERSION,
            severity=Severity.ERROR,
            message=f"Major version {alias} is missing; it should point at {candidate.version}",
            version=alias,
            expected_sha=candidate.sha,
            action=_create_action(config, alias, candidate.sha),
        )


class MajorVersionOutdated(ValidationRule):
    name = "major_version_outdated"
    category = "version_tracking"
    priority = 21

    def candidates(self, state, config):
        return [
            r for r in _floating_refs(state, config)
            if r.is_major and highest_patch(state, config, major=r.major) is not None
        ]

    def check(self, candidate, state, config):
        return candidate.sha == highest_patch(state, config, major=candidate.major).sha

    def describe(self, candidate, state, config):
        target = highest_patch(state, config, major=candidate.major)
        return ValidationIssue(
            type=INCORRECT_VERSION,
            severity=Severity.ERROR,
            message=f"{candidate.version} points at {candidate.sha[:7]} but should track {target.version} ({target.sha[:7]})",
            version=candidate.version,
            current_sha=candidate.sha,
            expected_sha=target.sha,
            action=_update_action(config, candidate.version, target.sha),
        )


class MinorVersionMissing(ValidationRule):
    name = "minor_version_missing"
    category = "version_tracking"
    priority = 22

    def candidates(self, state, config):
        if not config.check_minor_version:
            return []
        series = sorted({(r.major, r.minor) for r in qualifying_patches(state, config)})
        out = []
        for major, minor in series:
            if matches_ignore_pattern(minor_name(major, minor), state.ignore_versions):
                continue
            out.append(highest_patch(state, config, major=major, minor=minor))
        return out

    def check(self, candidate, state, config):
        return state.has_ref(minor_name(candidate.major, candidate.minor))

    def describe(self, candidate, state, config):
        alias = minor_name(candidate.major, candidate.minor)
        return ValidationIssue(
            type=MISSING_MINOR_VERSION,
            severity=Severity.ERROR,
            message=f"Minor version {alias} is missing; it should point at {candidate.version}",
            version=alias,
            expected_sha=candidate.sha,
            action=_create_action(config, alias, candidate.sha),
        )


class MinorVersionOutdated(ValidationRule):
    name = "minor_version_outdated"
    category = "version_tracking"
    priority = 23

    def candidates(self, state, config):
        if not config.check_minor_version:
            return []
        return [
            r for r in _floating_refs(state, config)
            if r.is_minor and highest_patch(state, config, major=r.major, minor=r.minor) is not None
        ]

    def check(self, candidate, state, config):
        return candidate.sha == highest_patch(state, config, major=candidate.major, minor=candidate.minor).sha

    def describe(self, candidate, state, config):
        target = highest_patch(state, config, major=candidate.major, minor=candidate.minor)
        return ValidationIssue(
            type=INCORRECT_VERSION,
            severity=Severity.ERROR,
            message=f"{candidate.version} points at {candidate.sha[:7]} but should track {target.version} ({target.sha[:7]})",
            version=candidate.version,
            current_sha=candidate.sha,
            expected_sha=target.sha,
            action=_update_action(config, candidate.version, target.sha),
        )
