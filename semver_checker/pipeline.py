"""Rule pipeline: each rule turns repository state into validation issues."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Sequence

from .config import CheckerConfig
from .models import RepositoryState, Severity, ValidationIssue
from .versions import VersionRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefPair:
    """A tag and a branch sharing one version name."""

    tag: VersionRef
    branch: VersionRef

    @property
    def version(self) -> str:
        return self.tag.version


def severity_for(level: str) -> Severity:
    return Severity.WARNING if level == "warning" else Severity.ERROR


def ref_pairs(state: RepositoryState) -> list[RefPair]:
    pairs = []
    for tag in state.tags:
        branch = state.find_branch(tag.version)
        if branch is not None:
            pairs.append(RefPair(tag=tag, branch=branch))
    return pairs


class ValidationRule:
    """A stateless check.

    candidates() picks what the rule looks at (empty when the rule is
    switched off), check() returns True when a candidate is compliant, and
    describe() builds the issue for a failing one.
    """

    name: ClassVar[str] = ""
    category: ClassVar[str] = ""
    priority: ClassVar[int] = 100

    def candidates(self, state: RepositoryState, config: CheckerConfig) -> list[Any]:
        raise NotImplementedError

    def check(self, candidate: Any, state: RepositoryState, config: CheckerConfig) -> bool:
        raise NotImplementedError

    def describe(self, candidate: Any, state: RepositoryState, config: CheckerConfig) -> ValidationIssue:
        raise NotImplementedError

    def evaluate(self, state: RepositoryState, config: CheckerConfig) -> list[ValidationIssue]:
        return [
            self.describe(candidate, state, config)
            for candidate in self.candidates(state, config)
            if not self.check(candidate, state, config)
        ]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} priority={self.priority}>"


def evaluate_rules(
    state: RepositoryState,
    config: CheckerConfig,
    rules: Sequence[ValidationRule],
) -> list[ValidationIssue]:
    """Run rules in priority order and concatenate their issues.

    Does not touch state.issues.
    """
    issues: list[ValidationIssue] = []
    for rule in sorted(rules, key=lambda r: r.priority):
        found = rule.evaluate(state, config)
        if found:
            logger.debug("Rule %s reported %d issue(s)", rule.name, len(found))
        issues.extend(found)
    return issues
