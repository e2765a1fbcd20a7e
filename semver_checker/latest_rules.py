"""The "latest" alias tracks the highest patch across all majors."""

from __future__ import annotations

from .actions import UpdateBranchAction, UpdateTagAction
from .models import Severity, ValidationIssue
from .pipeline import ValidationRule
from .versions import LATEST, highest_patch

INCORRECT_LATEST_TAG = "incorrect_latest_tag"
INCORRECT_LATEST_BRANCH = "incorrect_latest_branch"


class LatestTagTracksHighest(ValidationRule):
    name = "latest_tag_tracks_highest"
    category = "latest"
    priority = 30

    def candidates(self, state, config):
        if config.use_branches:
            return []
        latest = state.find_tag(LATEST)
        if latest is None or latest.is_ignored or highest_patch(state, config) is None:
            return []
        return [latest]

    def check(self, candidate, state, config):
        return candidate.sha == highest_patch(state, config).sha

    def describe(self, candidate, state, config):
        target = highest_patch(state, config)
        return ValidationIssue(
            type=INCORRECT_LATEST_TAG,
            severity=Severity.ERROR,
            message=f"Tag latest points at {candidate.sha[:7]} but should track {target.version} ({target.sha[:7]})",
            version=LATEST,
            current_sha=candidate.sha,
            expected_sha=target.sha,
            action=UpdateTagAction(LATEST, target.sha, force=True),
        )


class LatestBranchTracksHighest(ValidationRule):
    name = "latest_branch_tracks_highest"
    category = "latest"
    priority = 31

    def candidates(self, state, config):
        if not config.use_branches:
            return []
        latest = state.find_branch(LATEST)
        if latest is None or latest.is_ignored or highest_patch(state, config) is None:
            return []
        return [latest]

    def check(self, candidate, state, config):
        return candidate.sha == highest_patch(state, config).sha

    def describe(self, candidate, state, config):
        target = highest_patch(state, config)
        return ValidationIssue(
            type=INCORRECT_LATEST_BRANCH,
            severity=Severity.ERROR,
            message=f"Branch latest points at {candidate.sha[:7]} but should track {target.version} ({target.sha[:7]})",
            version=LATEST,
            current_sha=candidate.sha,
            expected_sha=target.sha,
            action=UpdateBranchAction(LATEST, target.sha, force=True),
        )
