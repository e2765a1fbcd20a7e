"""Remediation actions: one remote mutation each, with manual equivalents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Optional

from .models import ReleaseInfo
from .versions import BRANCH, TAG, ref_path

if TYPE_CHECKING:
    from .models import RepositoryState

logger = logging.getLogger(__name__)

# Execution buckets, lowest runs first
PRIORITY_DELETE = 10
PRIORITY_WRITE_REF = 20
PRIORITY_CONVERT = 25
PRIORITY_CREATE_RELEASE = 30
PRIORITY_PUBLISH = 40
PRIORITY_REPUBLISH = 45
PRIORITY_DEFAULT = 50


@dataclass(frozen=True)
class ActionResult:
    success: bool
    unfixable: bool = False
    requires_manual_fix: bool = False
    detail: str = ""


OK = ActionResult(success=True)


class RemediationAction:
    """Base class for a single fix bound to one issue."""

    priority: ClassVar[int] = PRIORITY_DEFAULT
    version: str

    @property
    def description(self) -> str:
        return f"{type(self).__name__} {self.version}"

    def apply(self, state: "RepositoryState") -> ActionResult:
        """Run the remote mutation and update the state snapshot on success.

        Client errors are logged and reported as a failed result so the
        remaining actions still run.
        """
        try:
            result = self._execute(state)
        except Exception as e:
            logger.debug("%s raised %s", self.description, e, exc_info=True)
            return ActionResult(success=False, detail=str(e))

        if result.success:
            logger.info("Fixed: %s", self.description)
        else:
            logger.warning("Failed: %s%s", self.description, f" ({result.detail})" if result.detail else "")
        return result

    def _execute(self, state: "RepositoryState") -> ActionResult:
        raise NotImplementedError

    def manual_commands(self, state: "RepositoryState") -> list[str]:
        raise NotImplementedError


def _gh_repo(state: "RepositoryState") -> str:
    return f"--repo {state.full_name}"


# ── Refs ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class _DeleteRefAction(RemediationAction):
    version: str

    priority: ClassVar[int] = PRIORITY_DELETE
    ref_type: ClassVar[str] = TAG

    @property
    def description(self) -> str:
        return f"Delete {self.ref_type} {self.version}"

    def _execute(self, state):
        if not state.client.delete_ref(ref_path(self.version, self.ref_type)):
            return ActionResult(success=False)
        state.drop_ref(self.version, self.ref_type)
        return OK

    def manual_commands(self, state):
        return [f"git push origin :{ref_path(self.version, self.ref_type)}"]


@dataclass(frozen=True)
class DeleteTagAction(_DeleteRefAction):
    ref_type: ClassVar[str] = TAG


@dataclass(frozen=True)
class DeleteBranchAction(_DeleteRefAction):
    ref_type: ClassVar[str] = BRANCH


@dataclass(frozen=True)
class _WriteRefAction(RemediationAction):
    version: str
    sha: str
    force: bool = False

    priority: ClassVar[int] = PRIORITY_WRITE_REF
    ref_type: ClassVar[str] = TAG

    @property
    def description(self) -> str:
        verb = "Update" if self.force else "Create"
        return f"{verb} {self.ref_type} {self.version} -> {self.sha[:7]}"

    def _execute(self, state):
        result = state.client.create_or_move_ref(ref_path(self.version, self.ref_type), self.sha, self.force)
        if not result.success:
            return ActionResult(success=False, requires_manual_fix=result.requires_manual_fix)
        state.put_ref(self.version, self.sha, self.ref_type)
        return OK

    def manual_commands(self, state):
        command = f"git push origin {self.sha}:{ref_path(self.version, self.ref_type)}"
        return [f"{command} --force" if self.force else command]


@dataclass(frozen=True)
class CreateTagAction(_WriteRefAction):
    ref_type: ClassVar[str] = TAG


@dataclass(frozen=True)
class UpdateTagAction(_WriteRefAction):
    force: bool = True

    ref_type: ClassVar[str] = TAG


@dataclass(frozen=True)
class CreateBranchAction(_WriteRefAction):
    ref_type: ClassVar[str] = BRANCH


@dataclass(frozen=True)
class UpdateBranchAction(_WriteRefAction):
    force: bool = True

    ref_type: ClassVar[str] = BRANCH


@dataclass(frozen=True)
class _ConvertRefAction(RemediationAction):
    """Replace a ref with a same-named ref of the other kind.

    When the destination already exists only the source is deleted. If the
    create succeeds and the delete fails both refs are left in place.
    """

    version: str
    sha: str

    priority: ClassVar[int] = PRIORITY_CONVERT
    source_type: ClassVar[str] = TAG
    target_type: ClassVar[str] = BRANCH

    @property
    def description(self) -> str:
        return f"Convert {self.source_type} {self.version} to {self.target_type}"

    def _execute(self, state):
        client = state.client
        if state.find_ref(self.version, self.target_type) is None:
            result = client.create_or_move_ref(ref_path(self.version, self.target_type), self.sha, False)
            if not result.success:
                return ActionResult(success=False, requires_manual_fix=result.requires_manual_fix)
            state.put_ref(self.version, self.sha, self.target_type)

        if not client.delete_ref(ref_path(self.version, self.source_type)):
            return ActionResult(
                success=False,
                detail=f"{self.target_type} created but {self.source_type} could not be deleted",
            )
        state.drop_ref(self.version, self.source_type)
        return OK

    def manual_commands(self, state):
        commands = []
        if state.find_ref(self.version, self.target_type) is None:
            commands.append(f"git push origin {self.sha}:{ref_path(self.version, self.target_type)}")
        commands.append(f"git push origin :{ref_path(self.version, self.source_type)}")
        return commands


@dataclass(frozen=True)
class ConvertTagToBranchAction(_ConvertRefAction):
    source_type: ClassVar[str] = TAG
    target_type: ClassVar[str] = BRANCH

    def _execute(self, state):
        # A tag backing an immutable release can never be deleted.
        if state.client.release_is_immutable(self.version):
            return ActionResult(success=False, unfixable=True, detail="tag is held by an immutable release")
        return super()._execute(state)


@dataclass(frozen=True)
class ConvertBranchToTagAction(_ConvertRefAction):
    source_type: ClassVar[str] = BRANCH
    target_type: ClassVar[str] = TAG


# ── Releases ────────────────────────────────────────────────────


@dataclass(frozen=True)
class DeleteReleaseAction(RemediationAction):
    version: str
    release_id: int

    priority: ClassVar[int] = PRIORITY_DELETE

    @property
    def description(self) -> str:
        return f"Delete release {self.version} (id {self.release_id})"

    def _execute(self, state):
        if not state.client.delete_release(self.version, self.release_id):
            return ActionResult(success=False)
        state.drop_release(self.release_id)
        return OK

    def manual_commands(self, state):
        return [f"gh api -X DELETE repos/{state.full_name}/releases/{self.release_id}"]


@dataclass(frozen=True)
class CreateReleaseAction(RemediationAction):
    version: str
    draft: bool = False
    make_latest: Optional[bool] = None

    priority: ClassVar[int] = PRIORITY_CREATE_RELEASE

    @property
    def description(self) -> str:
        return f"Create {'draft ' if self.draft else ''}release {self.version}"

    def _execute(self, state):
        result = state.client.create_release(self.version, self.draft, self.make_latest)
        if not result.success:
            return ActionResult(success=False, unfixable=result.unfixable)
        if result.release_id is not None:
            state.put_release(ReleaseInfo(
                tag_name=self.version,
                id=result.release_id,
                is_draft=self.draft,
                is_latest=bool(self.make_latest),
            ))
        return OK

    def manual_commands(self, state):
        command = f"gh release create {self.version} {_gh_repo(state)} --title {self.version} --generate-notes"
        if self.draft:
            command += " --draft"
        if self.make_latest is not None:
            command += " --latest" if self.make_latest else " --latest=false"
        return [command]


@dataclass(frozen=True)
class PublishReleaseAction(RemediationAction):
    version: str
    release_id: int
    make_latest: Optional[bool] = None

    priority: ClassVar[int] = PRIORITY_PUBLISH

    @property
    def description(self) -> str:
        return f"Publish release {self.version}"

    def _execute(self, state):
        result = state.client.publish_release(self.version, self.release_id, self.make_latest)
        if not result.success:
            return ActionResult(success=False, unfixable=result.unfixable)
        release = state.find_release(self.release_id)
        if release is not None:
            release.is_draft = False
            if self.make_latest:
                release.is_latest = True
        return OK

    def manual_commands(self, state):
        command = f"gh release edit {self.version} {_gh_repo(state)} --draft=false"
        if self.make_latest is not None:
            command += " --latest" if self.make_latest else " --latest=false"
        return [command]


@dataclass(frozen=True)
class RepublishReleaseAction(RemediationAction):
    version: str
    release_id: int

    priority: ClassVar[int] = PRIORITY_REPUBLISH

    @property
    def description(self) -> str:
        return f"Republish release {self.version} to make it immutable"

    def _execute(self, state):
        result = state.client.republish_release(self.version, self.release_id)
        if not result.success:
            return ActionResult(success=False, unfixable=result.unfixable)
        release = state.find_release(self.release_id)
        if release is not None:
            release.is_draft = False
            release.is_immutable = True
        return OK

    def manual_commands(self, state):
        return [
            f"gh release edit {self.version} {_gh_repo(state)} --draft=true",
            f"gh release edit {self.version} {_gh_repo(state)} --draft=false",
        ]


@dataclass(frozen=True)
class SetLatestReleaseAction(RemediationAction):
    version: str
    release_id: int

    priority: ClassVar[int] = PRIORITY_DEFAULT

    @property
    def description(self) -> str:
        return f"Mark release {self.version} as latest"

    def _execute(self, state):
        result = state.client.set_release_latest(self.version, self.release_id)
        if not result.success:
            return ActionResult(success=False, unfixable=result.unfixable)
        for release in state.releases:
            release.is_latest = release.id == self.release_id
        return OK

    def manual_commands(self, state):
        return [f"gh release edit {self.version} {_gh_repo(state)} --latest"]
