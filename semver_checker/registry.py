"""The fixed table of rules, in evaluation order."""

from __future__ import annotations

from .latest_rules import LatestBranchTracksHighest, LatestTagTracksHighest
from .marketplace_rules import ActionMetadataRequired, ReadmeRequired
from .pipeline import ValidationRule
from .ref_rules import BranchShouldBeTag, DuplicateFloatingRef, DuplicatePatchRef, TagShouldBeBranch
from .release_rules import (
    DuplicateRelease,
    FloatingVersionHasRelease,
    HighestReleaseShouldBeLatest,
    PatchReleaseRequired,
    ReleaseShouldBeImmutable,
    ReleaseShouldBePublished,
)
from .tracking_rules import (
    MajorVersionMissing,
    MajorVersionOutdated,
    MinorVersionMissing,
    MinorVersionOutdated,
)

RULES: tuple[ValidationRule, ...] = (
    BranchShouldBeTag(),
    TagShouldBeBranch(),
    DuplicateFloatingRef(),
    DuplicatePatchRef(),
    MajorVersionMissing(),
    MajorVersionOutdated(),
    MinorVersionMissing(),
    MinorVersionOutdated(),
    LatestTagTracksHighest(),
    LatestBranchTracksHighest(),
    DuplicateRelease(),
    FloatingVersionHasRelease(),
    PatchReleaseRequired(),
    ReleaseShouldBePublished(),
    ReleaseShouldBeImmutable(),
    HighestReleaseShouldBeLatest(),
    ActionMetadataRequired(),
    ReadmeRequired(),
)

CATEGORIES = ("ref_type", "version_tracking", "latest", "releases", "marketplace")


def rules_for(*categories: str) -> tuple[ValidationRule, ...]:
    unknown = set(categories) - set(CATEGORIES)
    if unknown:
        raise ValueError(f"Unknown rule categories: {', '.join(sorted(unknown))}")
    return tuple(r for r in RULES if r.category in categories)


def get_rule(name: str) -> ValidationRule:
    for rule in RULES:
        if rule.name == name:
            return rule
    raise KeyError(name)
