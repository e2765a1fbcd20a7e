from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from .config import matches_ignore_pattern
from .versions import BRANCH, TAG, VersionRef

if TYPE_CHECKING:
    from .actions import RemediationAction


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueStatus(str, Enum):
    PENDING = "pending"
    FIXED = "fixed"
    FAILED = "failed"
    UNFIXABLE = "unfixable"
    MANUAL_FIX_REQUIRED = "manual_fix_required"


@dataclass
class ReleaseInfo:
    tag_name: str
    id: int
    is_draft: bool = False
    is_prerelease: bool = False
    is_immutable: bool = False
    is_latest: bool = False
    target_commitish: str = ""
    is_ignored: bool = False

    def __post_init__(self) -> None:
        if self.is_draft and self.is_immutable:
            raise ValueError(f"Release {self.id} for {self.tag_name} cannot be both draft and immutable.")

    @classmethod
    def from_api_response(cls, data: dict[str, Any], latest_id: Optional[int] = None) -> "ReleaseInfo":
        is_draft = bool(data.get("draft", False))
        return cls(
            tag_name=data.get("tag_name", ""),
            id=int(data.get("id", 0)),
            is_draft=is_draft,
            is_prerelease=bool(data.get("prerelease", False)),
            is_immutable=bool(data.get("immutable", False)) and not is_draft,
            is_latest=latest_id is not None and int(data.get("id", 0)) == latest_id,
            target_commitish=data.get("target_commitish") or "",
        )

    @property
    def is_published(self) -> bool:
        return not self.is_draft


@dataclass
class ValidationIssue:
    type: str
    severity: Severity
    message: str
    version: str
    current_sha: Optional[str] = None
    expected_sha: Optional[str] = None
    status: IssueStatus = IssueStatus.PENDING
    action: Optional["RemediationAction"] = None

    @property
    def is_resolved(self) -> bool:
        return self.status == IssueStatus.FIXED

    @property
    def is_fixable(self) -> bool:
        return self.action is not None and self.status == IssueStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "message": self.message,
            "version": self.version,
            "current_sha": self.current_sha,
            "expected_sha": self.expected_sha,
            "status": self.status.value,
            "action": self.action.description if self.action else None,
        }

    def manual_commands(self, state: "RepositoryState") -> list[str]:
        """Commands a human can run to fix the issue; none when it cannot be fixed."""
        if self.status == IssueStatus.UNFIXABLE or self.action is None:
            return []
        return self.action.manual_commands(state)


@dataclass
class RepositoryState:
    owner: str
    name: str
    client: Any = None
    tags: list[VersionRef] = field(default_factory=list)
    branches: list[VersionRef] = field(default_factory=list)
    releases: list[ReleaseInfo] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)
    ignore_versions: tuple[str, ...] = field(default_factory=tuple)
    action_metadata: Optional[dict[str, Any]] = None
    has_readme: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    # ── Lookups ─────────────────────────────────────────────────

    def find_tag(self, version: str) -> VersionRef | None:
        return next((t for t in self.tags if t.version == version), None)

    def find_branch(self, version: str) -> VersionRef | None:
        return next((b for b in self.branches if b.version == version), None)

    def find_ref(self, version: str, ref_type: str) -> VersionRef | None:
        return self.find_tag(version) if ref_type == TAG else self.find_branch(version)

    def has_ref(self, version: str) -> bool:
        return self.find_tag(version) is not None or self.find_branch(version) is not None

    def releases_for(self, tag_name: str) -> list[ReleaseInfo]:
        return [r for r in self.releases if r.tag_name == tag_name]

    def find_release(self, release_id: int) -> ReleaseInfo | None:
        return next((r for r in self.releases if r.id == release_id), None)

    # ── Mutations applied after a successful remote change ─────

    def put_ref(self, version: str, sha: str, ref_type: str) -> VersionRef | None:
        ref = VersionRef.parse(version, sha, ref_type)
        if ref is None:
            return None
        ref.is_ignored = matches_ignore_pattern(version, self.ignore_versions)
        refs = self.tags if ref_type == TAG else self.branches
        for index, existing in enumerate(refs):
            if existing.version == version:
                refs[index] = ref
                return ref
        refs.append(ref)
        return ref

    def drop_ref(self, version: str, ref_type: str) -> None:
        if ref_type == TAG:
            self.tags = [t for t in self.tags if t.version != version]
        elif ref_type == BRANCH:
            self.branches = [b for b in self.branches if b.version != version]

    def put_release(self, release: ReleaseInfo) -> None:
        self.releases = [r for r in self.releases if r.id != release.id]
        self.releases.append(release)

    def drop_release(self, release_id: int) -> None:
        self.releases = [r for r in self.releases if r.id != release_id]

    def apply_ignore_patterns(self) -> None:
        for ref in self.tags + self.branches:
            ref.is_ignored = matches_ignore_pattern(ref.version, self.ignore_versions)
        for release in self.releases:
            release.is_ignored = matches_ignore_pattern(release.tag_name, self.ignore_versions)
