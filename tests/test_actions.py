"""Tests for the remediation actions."""

import pytest

from semver_checker.actions import (
    ConvertBranchToTagAction,
    ConvertTagToBranchAction,
    CreateBranchAction,
    CreateReleaseAction,
    CreateTagAction,
    DeleteBranchAction,
    DeleteReleaseAction,
    DeleteTagAction,
    PublishReleaseAction,
    RepublishReleaseAction,
    SetLatestReleaseAction,
    UpdateBranchAction,
    UpdateTagAction,
)
from semver_checker.github_client import RefResult, ReleaseResult
from semver_checker.models import ReleaseInfo


class TestPriorities:
    def test_total_order(self):
        buckets = [
            DeleteTagAction.priority,
            CreateTagAction.priority,
            ConvertTagToBranchAction.priority,
            CreateReleaseAction.priority,
            PublishReleaseAction.priority,
            RepublishReleaseAction.priority,
            SetLatestReleaseAction.priority,
        ]
        assert buckets == [10, 20, 25, 30, 40, 45, 50]

    def test_same_bucket_kinds(self):
        assert DeleteBranchAction.priority == DeleteReleaseAction.priority == 10
        assert UpdateTagAction.priority == CreateBranchAction.priority == UpdateBranchAction.priority == 20
        assert ConvertBranchToTagAction.priority == 25


class TestRefActions:
    def test_create_tag(self, make_state, fake_client):
        state = make_state(tags={"v1.0.0": "sha1"})
        result = CreateTagAction("v1", "sha1").apply(state)
        assert result.success is True
        assert fake_client.calls == [("create_or_move_ref", "refs/tags/v1", "sha1", False)]
        assert state.find_tag("v1").sha == "sha1"

    def test_update_tag_forces(self, make_state, fake_client):
        state = make_state(tags={"latest": "old"})
        result = UpdateTagAction("latest", "new").apply(state)
        assert result.success is True
        assert fake_client.calls == [("create_or_move_ref", "refs/tags/latest", "new", True)]
        assert state.find_tag("latest").sha == "new"
        assert len(state.tags) == 1

    def test_update_branch_requires_manual_fix(self, make_state, fake_client):
        fake_client.ref_results["refs/heads/v1"] = RefResult(success=False, requires_manual_fix=True)
        state = make_state(branches={"v1": "old"})
        result = UpdateBranchAction("v1", "new").apply(state)
        assert result.success is False
        assert result.requires_manual_fix is True
        assert state.find_branch("v1").sha == "old"

    def test_delete_branch(self, make_state, fake_client):
        state = make_state(tags={"v1": "a"}, branches={"v1": "a"})
        result = DeleteBranchAction("v1").apply(state)
        assert result.success is True
        assert fake_client.calls == [("delete_ref", "refs/heads/v1")]
        assert state.find_branch("v1") is None
        assert state.find_tag("v1") is not None

    def test_delete_failure_keeps_state(self, make_state, fake_client):
        fake_client.delete_results["refs/tags/v1"] = False
        state = make_state(tags={"v1": "a"})
        assert DeleteTagAction("v1").apply(state).success is False
        assert state.find_tag("v1") is not None

    def test_exception_becomes_failure(self, make_state, fake_client):
        fake_client.raise_on.add("create_or_move_ref")
        state = make_state()
        result = CreateBranchAction("v1", "sha").apply(state)
        assert result.success is False
        assert "exploded" in result.detail

    def test_manual_commands(self, make_state):
        state = make_state()
        assert CreateTagAction("v1", "abc").manual_commands(state) == ["git push origin abc:refs/tags/v1"]
        assert UpdateBranchAction("v1", "abc").manual_commands(state) == [
            "git push origin abc:refs/heads/v1 --force"
        ]
        assert DeleteTagAction("v1").manual_commands(state) == ["git push origin :refs/tags/v1"]

    def test_description(self):
        assert UpdateTagAction("latest", "abcdef123").description == "Update tag latest -> abcdef1"
        assert DeleteBranchAction("v2").description == "Delete branch v2"


class TestConvertActions:
    def test_branch_to_tag(self, make_state, fake_client):
        state = make_state(branches={"v1": "sha1"})
        result = ConvertBranchToTagAction("v1", "sha1").apply(state)
        assert result.success is True
        assert fake_client.calls == [
            ("create_or_move_ref", "refs/tags/v1", "sha1", False),
            ("delete_ref", "refs/heads/v1"),
        ]
        assert state.find_tag("v1").sha == "sha1"
        assert state.find_branch("v1") is None

    def test_existing_destination_only_deletes_source(self, make_state, fake_client):
        state = make_state(tags={"v1": "other"}, branches={"v1": "sha1"})
        result = ConvertBranchToTagAction("v1", "sha1").apply(state)
        assert result.success is True
        assert fake_client.calls == [("delete_ref", "refs/heads/v1")]
        assert ConvertBranchToTagAction("v1", "sha1").manual_commands(state) == ["git push origin :refs/heads/v1"]

    def test_partial_failure_leaves_both_refs(self, make_state, fake_client):
        fake_client.delete_results["refs/heads/v1"] = False
        state = make_state(branches={"v1": "sha1"})
        result = ConvertBranchToTagAction("v1", "sha1").apply(state)
        assert result.success is False
        assert state.find_tag("v1") is not None
        assert state.find_branch("v1") is not None

    def test_create_failure_skips_delete(self, make_state, fake_client):
        fake_client.ref_results["refs/tags/v1"] = RefResult(success=False)
        state = make_state(branches={"v1": "sha1"})
        assert ConvertBranchToTagAction("v1", "sha1").apply(state).success is False
        assert fake_client.calls == [("create_or_move_ref", "refs/tags/v1", "sha1", False)]

    def test_tag_to_branch(self, make_state, fake_client):
        state = make_state(tags={"v2": "sha2"})
        result = ConvertTagToBranchAction("v2", "sha2").apply(state)
        assert result.success is True
        assert fake_client.mutating_calls() == [
            ("create_or_move_ref", "refs/heads/v2", "sha2", False),
            ("delete_ref", "refs/tags/v2"),
        ]
        assert state.find_branch("v2") is not None
        assert state.find_tag("v2") is None

    def test_tag_locked_by_immutable_release(self, make_state, fake_client):
        fake_client.immutable_tags.add("v2")
        state = make_state(tags={"v2": "sha2"})
        result = ConvertTagToBranchAction("v2", "sha2").apply(state)
        assert result.success is False
        assert result.unfixable is True
        assert fake_client.mutating_calls() == []

    def test_manual_commands(self, make_state):
        state = make_state(tags={"v2": "sha2"})
        assert ConvertTagToBranchAction("v2", "sha2").manual_commands(state) == [
            "git push origin sha2:refs/heads/v2",
            "git push origin :refs/tags/v2",
        ]


class TestReleaseActions:
    def test_create_release(self, make_state, fake_client):
        state = make_state(tags={"v1.0.0": "sha1"})
        result = CreateReleaseAction("v1.0.0", make_latest=True).apply(state)
        assert result.success is True
        assert fake_client.calls == [("create_release", "v1.0.0", False, True)]
        created = state.releases_for("v1.0.0")
        assert len(created) == 1
        assert created[0].is_latest is True

    def test_create_release_unfixable(self, make_state, fake_client):
        fake_client.release_results["v1.0.0"] = ReleaseResult(success=False, unfixable=True)
        state = make_state(tags={"v1.0.0": "sha1"})
        result = CreateReleaseAction("v1.0.0").apply(state)
        assert result.unfixable is True
        assert state.releases == []

    def test_create_release_commands(self, make_state):
        state = make_state()
        assert CreateReleaseAction("v1.0.0", make_latest=False).manual_commands(state) == [
            "gh release create v1.0.0 --repo octo/action --title v1.0.0 --generate-notes --latest=false"
        ]
        assert CreateReleaseAction("v1.0.0", draft=True).manual_commands(state) == [
            "gh release create v1.0.0 --repo octo/action --title v1.0.0 --generate-notes --draft"
        ]

    def test_publish_release(self, make_state, fake_client):
        state = make_state(releases=[ReleaseInfo(tag_name="v1.0.0", id=3, is_draft=True)])
        result = PublishReleaseAction("v1.0.0", 3, make_latest=True).apply(state)
        assert result.success is True
        assert fake_client.calls == [("publish_release", "v1.0.0", 3, True)]
        assert state.find_release(3).is_draft is False
        assert state.find_release(3).is_latest is True
        assert PublishReleaseAction("v1.0.0", 3).manual_commands(state) == [
            "gh release edit v1.0.0 --repo octo/action --draft=false"
        ]

    def test_republish_release(self, make_state, fake_client):
        state = make_state(releases=[ReleaseInfo(tag_name="v1.0.0", id=3)])
        assert RepublishReleaseAction("v1.0.0", 3).apply(state).success is True
        assert state.find_release(3).is_immutable is True
        assert len(RepublishReleaseAction("v1.0.0", 3).manual_commands(state)) == 2

    def test_delete_release(self, make_state, fake_client):
        state = make_state(releases=[ReleaseInfo(tag_name="v1", id=8), ReleaseInfo(tag_name="v1.0.0", id=9)])
        assert DeleteReleaseAction("v1", 8).apply(state).success is True
        assert [r.id for r in state.releases] == [9]
        assert DeleteReleaseAction("v1", 8).manual_commands(state) == [
            "gh api -X DELETE repos/octo/action/releases/8"
        ]

    def test_set_latest(self, make_state, fake_client):
        state = make_state(releases=[
            ReleaseInfo(tag_name="v1.0.0", id=1, is_latest=True),
            ReleaseInfo(tag_name="v1.1.0", id=2),
        ])
        assert SetLatestReleaseAction("v1.1.0", 2).apply(state).success is True
        assert [r.is_latest for r in state.releases] == [False, True]


class TestReleaseInfo:
    def test_draft_cannot_be_immutable(self):
        with pytest.raises(ValueError):
            ReleaseInfo(tag_name="v1.0.0", id=1, is_draft=True, is_immutable=True)

    def test_from_api_response(self):
        release = ReleaseInfo.from_api_response(
            {"tag_name": "v1.0.0", "id": 5, "draft": True, "prerelease": False, "immutable": True},
            latest_id=5,
        )
        assert release.is_draft is True
        assert release.is_immutable is False
        assert release.is_latest is True
