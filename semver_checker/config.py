"""Configuration for the checker."""

from __future__ import annotations

import fnmatch
import json
import re
from dataclasses import dataclass, field
from typing import Mapping

# Recognized input keys, as named in action.yml
FLOATING_VERSIONS_USE = "floating-versions-use"
IGNORE_PREVIEW_RELEASES = "ignore-preview-releases"
CHECK_RELEASES = "check-releases"
CHECK_RELEASE_IMMUTABILITY = "check-release-immutability"
CHECK_MARKETPLACE = "check-marketplace"
CHECK_MINOR_VERSION = "check-minor-version"
IGNORE_VERSIONS = "ignore-versions"
AUTO_FIX = "auto-fix"

INPUT_KEYS = (
    FLOATING_VERSIONS_USE,
    IGNORE_PREVIEW_RELEASES,
    CHECK_RELEASES,
    CHECK_RELEASE_IMMUTABILITY,
    CHECK_MARKETPLACE,
    CHECK_MINOR_VERSION,
    IGNORE_VERSIONS,
    AUTO_FIX,
)

FLOATING_KINDS = ("tags", "branches")
CHECK_LEVELS = ("error", "warning", "none")

_TRUE_VALUES = ("true", "yes", "1", "on")
_FALSE_VALUES = ("false", "no", "0", "off")

_LIST_SPLIT_RE = re.compile(r"[,\r\n]+")


class ConfigError(ValueError):
    pass


def parse_bool(key: str, raw: str | bool | None, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    value = raw.strip().lower()
    if not value:
        return default
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"'{key}' must be true or false, got '{raw}'.")


def parse_choice(key: str, raw: str | None, choices: tuple[str, ...], default: str) -> str:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value not in choices:
        raise ConfigError(f"'{key}' must be one of {', '.join(choices)}, got '{raw}'.")
    return value


def parse_version_list(raw: str | list | None) -> tuple[str, ...]:
    """Parse an ignore list given as comma/newline separated text or a JSON array."""
    if raw is None:
        return tuple()
    if isinstance(raw, (list, tuple)):
        items = [str(item) for item in raw]
    else:
        text = raw.strip()
        if not text:
            return tuple()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError as e:
                raise ConfigError(f"'{IGNORE_VERSIONS}' is not a valid JSON array: {e}") from e
            if not isinstance(decoded, list):
                raise ConfigError(f"'{IGNORE_VERSIONS}' JSON value must be an array.")
            items = [str(item) for item in decoded]
        else:
            items = _LIST_SPLIT_RE.split(text)

    patterns = []
    for item in items:
        item = item.strip().strip("\"'")
        if item and item not in patterns:
            patterns.append(item)
    return tuple(patterns)


def matches_ignore_pattern(version: str, patterns: tuple[str, ...] | list[str]) -> bool:
    for pattern in patterns:
        if version == pattern:
            return True
        if any(ch in pattern for ch in "*?[") and fnmatch.fnmatchcase(version, pattern):
            return True
    return False


@dataclass(frozen=True)
class CheckerConfig:
    floating_versions_use: str = "tags"
    ignore_preview_releases: bool = True
    check_releases: str = "error"
    check_release_immutability: str = "error"
    check_marketplace: str = "none"
    check_minor_version: bool = True
    ignore_versions: tuple[str, ...] = field(default_factory=tuple)
    auto_fix: bool = False

    @classmethod
    def from_inputs(cls, inputs: Mapping[str, str | None]) -> "CheckerConfig":
        """Build a validated config from the flat string inputs of the action."""
        unknown = sorted(set(inputs) - set(INPUT_KEYS))
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        return cls(
            floating_versions_use=parse_choice(
                FLOATING_VERSIONS_USE, inputs.get(FLOATING_VERSIONS_USE), FLOATING_KINDS, "tags"
            ),
            ignore_preview_releases=parse_bool(
                IGNORE_PREVIEW_RELEASES, inputs.get(IGNORE_PREVIEW_RELEASES), True
            ),
            check_releases=parse_choice(
                CHECK_RELEASES, inputs.get(CHECK_RELEASES), CHECK_LEVELS, "error"
            ),
            check_release_immutability=parse_choice(
                CHECK_RELEASE_IMMUTABILITY, inputs.get(CHECK_RELEASE_IMMUTABILITY), CHECK_LEVELS, "error"
            ),
            check_marketplace=parse_choice(
                CHECK_MARKETPLACE, inputs.get(CHECK_MARKETPLACE), CHECK_LEVELS, "none"
            ),
            check_minor_version=parse_bool(CHECK_MINOR_VERSION, inputs.get(CHECK_MINOR_VERSION), True),
            ignore_versions=parse_version_list(inputs.get(IGNORE_VERSIONS)),
            auto_fix=parse_bool(AUTO_FIX, inputs.get(AUTO_FIX), False),
        )

    @property
    def use_branches(self) -> bool:
        return self.floating_versions_use == "branches"

    @property
    def floating_ref_type(self) -> str:
        return "branch" if self.use_branches else "tag"
