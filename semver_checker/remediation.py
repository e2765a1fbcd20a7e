"""Runs the checks and applies the fixes bound to the resulting issues."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .actions import ActionResult
from .config import CheckerConfig
from .models import IssueStatus, RepositoryState, Severity, ValidationIssue
from .pipeline import ValidationRule, evaluate_rules
from .registry import RULES

logger = logging.getLogger(__name__)


@dataclass
class RemediationSummary:
    fixed: int = 0
    failed: int = 0
    unfixable: int = 0
    manual_fix_required: int = 0

    @property
    def attempted(self) -> int:
        return self.fixed + self.failed + self.unfixable + self.manual_fix_required

    def count(self, status: IssueStatus) -> None:
        if status == IssueStatus.FIXED:
            self.fixed += 1
        elif status == IssueStatus.UNFIXABLE:
            self.unfixable += 1
        elif status == IssueStatus.MANUAL_FIX_REQUIRED:
            self.manual_fix_required += 1
        else:
            self.failed += 1


def run_checks(
    state: RepositoryState,
    config: CheckerConfig,
    rules: Sequence[ValidationRule] = RULES,
) -> list[ValidationIssue]:
    """Evaluate every rule against the snapshot and store the issues on it."""
    issues = evaluate_rules(state, config, rules)
    state.issues = issues
    logger.info("Found %d issue(s) in %s", len(issues), state.full_name)
    return issues


def plan_remediation(issues: Iterable[ValidationIssue]) -> list[ValidationIssue]:
    """Fixable issues in execution order.

    sorted() is stable, so issues with equal priority keep discovery order.
    """
    fixable = [i for i in issues if i.is_fixable]
    return sorted(fixable, key=lambda i: i.action.priority)


def unfixable_message(issue: ValidationIssue) -> str:
    return (
        f"{issue.version} cannot be fixed automatically: the tag was used by an immutable release "
        "and GitHub permanently locks that tag name, even after the release is deleted. "
        f"Add '{issue.version}' to ignore-versions to skip this version."
    )


def manual_fix_message(issue: ValidationIssue) -> str:
    return (
        f"Failed to update {issue.version}: the token lacks the 'workflows' permission needed to "
        "push refs whose commits change files under .github/workflows. Use a personal access token "
        "(PAT) or GitHub App token with workflows permission, or run the manual commands below."
    )


def record_result(issue: ValidationIssue, result: ActionResult) -> None:
    if result.success:
        issue.status = IssueStatus.FIXED
    elif result.unfixable:
        issue.status = IssueStatus.UNFIXABLE
        issue.message = unfixable_message(issue)
    elif result.requires_manual_fix:
        issue.status = IssueStatus.MANUAL_FIX_REQUIRED
        issue.message = manual_fix_message(issue)
    else:
        issue.status = IssueStatus.FAILED


def execute_remediation(
    state: RepositoryState,
    issues: Optional[Iterable[ValidationIssue]] = None,
) -> RemediationSummary:
    """Apply the actions of the given issues (default: all of state.issues).

    A failed action never stops the ones after it, and nothing is rolled
    back.
    """
    summary = RemediationSummary()
    ordered = plan_remediation(state.issues if issues is None else issues)
    if not ordered:
        return summary

    logger.info("Applying %d fix(es)", len(ordered))
    for issue in ordered:
        result = issue.action.apply(state)
        record_result(issue, result)
        summary.count(issue.status)

    logger.info(
        "Remediation finished: %d fixed, %d failed, %d unfixable, %d need manual fixes",
        summary.fixed, summary.failed, summary.unfixable, summary.manual_fix_required,
    )
    return summary


def unresolved_errors(issues: Iterable[ValidationIssue]) -> list[ValidationIssue]:
    return [i for i in issues if i.severity == Severity.ERROR and i.status != IssueStatus.FIXED]
