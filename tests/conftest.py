"""Shared fixtures: a scripted GitHub client and a state factory."""

import pytest

from semver_checker.github_client import GitHubAPIError, RefResult, ReleaseResult
from semver_checker.models import RepositoryState
from semver_checker.versions import BRANCH, TAG, VersionRef


class FakeClient:
    """Records mutating calls and returns scripted results (success by default)."""

    owner = "octo"
    repo = "action"

    def __init__(self):
        self.calls = []
        self.ref_results = {}
        self.delete_results = {}
        self.release_results = {}
        self.immutable_tags = set()
        self.raise_on = set()
        self._next_release_id = 1000

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.raise_on:
            raise GitHubAPIError(f"{name} exploded")

    def create_or_move_ref(self, ref, sha, force=False):
        self._record("create_or_move_ref", ref, sha, force)
        return self.ref_results.get(ref, RefResult(success=True))

    def delete_ref(self, ref):
        self._record("delete_ref", ref)
        return self.delete_results.get(ref, True)

    def create_release(self, tag, draft=False, make_latest=None):
        self._record("create_release", tag, draft, make_latest)
        if tag in self.release_results:
            return self.release_results[tag]
        self._next_release_id += 1
        return ReleaseResult(success=True, release_id=self._next_release_id)

    def publish_release(self, tag, release_id, make_latest=None):
        self._record("publish_release", tag, release_id, make_latest)
        return self.release_results.get(tag, ReleaseResult(success=True, release_id=release_id))

    def republish_release(self, tag, release_id):
        self._record("republish_release", tag, release_id)
        return self.release_results.get(tag, ReleaseResult(success=True, release_id=release_id))

    def set_release_latest(self, tag, release_id):
        self._record("set_release_latest", tag, release_id)
        return self.release_results.get(tag, ReleaseResult(success=True, release_id=release_id))

    def delete_release(self, tag, release_id):
        self._record("delete_release", tag, release_id)
        return self.delete_results.get(f"release:{release_id}", True)

    def release_is_immutable(self, tag):
        self._record("release_is_immutable", tag)
        return tag in self.immutable_tags

    def mutating_calls(self):
        return [c for c in self.calls if c[0] != "release_is_immutable"]


def _refs(names, ref_type):
    refs = [VersionRef.parse(name, sha, ref_type) for name, sha in (names or {}).items()]
    return [r for r in refs if r is not None]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def make_state(fake_client):
    def _make(tags=None, branches=None, releases=None, ignore=(), **kwargs):
        state = RepositoryState(
            owner="octo",
            name="action",
            client=fake_client,
            ignore_versions=tuple(ignore),
            **kwargs,
        )
        state.tags = _refs(tags, TAG)
        state.branches = _refs(branches, BRANCH)
        state.releases = list(releases or [])
        state.apply_ignore_patterns()
        return state

    return _make
