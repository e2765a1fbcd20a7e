"""Marketplace publishing requirements. These can only be fixed by editing the repository."""

from __future__ import annotations

from .models import IssueStatus, ValidationIssue
from .pipeline import ValidationRule, severity_for

MISSING_ACTION_METADATA = "missing_action_metadata"
MISSING_README = "missing_readme"

ACTION_FILE = "action.yml"
REQUIRED_METADATA = ("name", "description", "branding.icon", "branding.color")


def metadata_value(metadata: dict, dotted_key: str):
    value = metadata
    for part in dotted_key.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


class ActionMetadataRequired(ValidationRule):
    name = "action_metadata_required"
    category = "marketplace"
    priority = 50

    def candidates(self, state, config):
        if config.check_marketplace == "none":
            return []
        if state.action_metadata is None:
            return [ACTION_FILE]
        return list(REQUIRED_METADATA)

    def check(self, candidate, state, config):
        if state.action_metadata is None:
            return False
        value = metadata_value(state.action_metadata, candidate)
        return value is not None and str(value).strip() != ""

    def describe(self, candidate, state, config):
        if candidate == ACTION_FILE:
            message = "No action.yml or action.yaml found in the repository root"
        else:
            message = f"action.yml is missing '{candidate}', which the GitHub Marketplace requires"
        return ValidationIssue(
            type=MISSING_ACTION_METADATA,
            severity=severity_for(config.check_marketplace),
            message=message,
            version=candidate,
            status=IssueStatus.MANUAL_FIX_REQUIRED,
        )


class ReadmeRequired(ValidationRule):
    name = "readme_required"
    category = "marketplace"
    priority = 51

    def candidates(self, state, config):
        if config.check_marketplace == "none":
            return []
        return ["README.md"]

    def check(self, candidate, state, config):
        return state.has_readme

    def describe(self, candidate, state, config):
        return ValidationIssue(
            type=MISSING_README,
            severity=severity_for(config.check_marketplace),
            message="The repository has no README.md, which the GitHub Marketplace requires",
            version=candidate,
            status=IssueStatus.MANUAL_FIX_REQUIRED,
        )
