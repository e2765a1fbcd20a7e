"""Ref kind rules: patches are tags, floating versions follow floating-versions-use."""

from __future__ import annotations

from .actions import (
    ConvertBranchToTagAction,
    ConvertTagToBranchAction,
    DeleteBranchAction,
    DeleteTagAction,
)
from .models import Severity, ValidationIssue
from .pipeline import ValidationRule, ref_pairs
from .versions import alias_target

WRONG_REF_TYPE = "wrong_ref_type"
DUPLICATE_REF = "duplicate_ref"


def converted_sha(candidate, state, config) -> str:
    """Where the converted ref should point: a tracked alias moves to its highest patch."""
    if candidate.is_minor and not config.check_minor_version:
        return candidate.sha
    target = alias_target(candidate, state, config)
    return target.sha if target is not None else candidate.sha


def _moved_suffix(candidate, sha) -> str:
    if sha == candidate.sha:
        return ""
    return f", and it should move from {candidate.sha[:7]} to {sha[:7]}"


class BranchShouldBeTag(ValidationRule):
    name = "branch_should_be_tag"
    category = "ref_type"
    priority = 10

    def candidates(self, state, config):
        return [
            b for b in state.branches
            if not b.is_ignored and (b.is_patch or (b.is_floating and not config.use_branches))
        ]

    def check(self, candidate, state, config):
        # A same-named tag means the duplicate rule owns the fix.
        return state.find_tag(candidate.version) is not None

    def describe(self, candidate, state, config):
        kind = "patch version" if candidate.is_patch else "floating version"
        sha = converted_sha(candidate, state, config)
        return ValidationIssue(
            type=WRONG_REF_TYPE,
            severity=Severity.ERROR,
            message=f"{candidate.version} is a branch but a {kind} must be a tag{_moved_suffix(candidate, sha)}",
            version=candidate.version,
            current_sha=candidate.sha,
            expected_sha=sha,
            action=ConvertBranchToTagAction(candidate.version, sha),
        )


class TagShouldBeBranch(ValidationRule):
    name = "tag_should_be_branch"
    category = "ref_type"
    priority = 11

    def candidates(self, state, config):
        if not config.use_branches:
            return []
        return [t for t in state.tags if t.is_floating and not t.is_ignored]

    def check(self, candidate, state, config):
        return state.find_branch(candidate.version) is not None

    def describe(self, candidate, state, config):
        sha = converted_sha(candidate, state, config)
        return ValidationIssue(
            type=WRONG_REF_TYPE,
            severity=Severity.ERROR,
            message=(
                f"{candidate.version} is a tag but floating versions must be branches "
                f"(floating-versions-use: branches){_moved_suffix(candidate, sha)}"
            ),
            version=candidate.version,
            current_sha=candidate.sha,
            expected_sha=sha,
            action=ConvertTagToBranchAction(candidate.version, sha),
        )


class DuplicateFloatingRef(ValidationRule):
    name = "duplicate_floating_ref"
    category = "ref_type"
    priority = 12

    def candidates(self, state, config):
        return [p for p in ref_pairs(state) if p.tag.is_floating and not p.tag.is_ignored]

    def check(self, candidate, state, config):
        return False

    def describe(self, candidate, state, config):
        if config.use_branches:
            action, keep, drop = DeleteTagAction(candidate.version), "branch", "tag"
            current = candidate.tag.sha
        else:
            action, keep, drop = DeleteBranchAction(candidate.version), "tag", "branch"
            current = candidate.branch.sha
        return ValidationIssue(
            type=DUPLICATE_REF,
            severity=Severity.ERROR,
            message=f"{candidate.version} exists as both a tag and a branch; the {drop} should be removed and the {keep} kept",
            version=candidate.version,
            current_sha=current,
            action=action,
        )


class DuplicatePatchRef(ValidationRule):
    name = "duplicate_patch_ref"
    category = "ref_type"
    priority = 13

    def candidates(self, state, config):
        return [p for p in ref_pairs(state) if p.tag.is_patch and not p.tag.is_ignored]

    def check(self, candidate, state, config):
        return False

    def describe(self, candidate, state, config):
        return ValidationIssue(
            type=DUPLICATE_REF,
            severity=Severity.ERROR,
            message=f"Patch version {candidate.version} exists as both a tag and a branch; the branch should be removed",
            version=candidate.version,
            current_sha=candidate.branch.sha,
            action=DeleteBranchAction(candidate.version),
        )
