"""Tests for input parsing."""

import pytest

from semver_checker.config import (
    CheckerConfig,
    ConfigError,
    matches_ignore_pattern,
    parse_bool,
    parse_version_list,
)


class TestCheckerConfig:
    def test_defaults(self):
        config = CheckerConfig.from_inputs({})
        assert config == CheckerConfig()
        assert config.floating_versions_use == "tags"
        assert config.ignore_preview_releases is True
        assert config.check_releases == "error"
        assert config.check_release_immutability == "error"
        assert config.check_marketplace == "none"
        assert config.check_minor_version is True
        assert config.ignore_versions == ()
        assert config.auto_fix is False

    def test_full_inputs(self):
        config = CheckerConfig.from_inputs({
            "floating-versions-use": "Branches",
            "ignore-preview-releases": "false",
            "check-releases": "warning",
            "check-release-immutability": "none",
            "check-marketplace": "error",
            "check-minor-version": "no",
            "ignore-versions": "v1, v2.*",
            "auto-fix": "TRUE",
        })
        assert config.use_branches is True
        assert config.floating_ref_type == "branch"
        assert config.ignore_preview_releases is False
        assert config.check_releases == "warning"
        assert config.check_release_immutability == "none"
        assert config.check_marketplace == "error"
        assert config.check_minor_version is False
        assert config.ignore_versions == ("v1", "v2.*")
        assert config.auto_fix is True

    def test_blank_values_fall_back_to_defaults(self):
        config = CheckerConfig.from_inputs({"check-releases": "  ", "auto-fix": ""})
        assert config.check_releases == "error"
        assert config.auto_fix is False

    def test_invalid_choice(self):
        with pytest.raises(ConfigError, match="floating-versions-use"):
            CheckerConfig.from_inputs({"floating-versions-use": "both"})

    def test_invalid_level(self):
        with pytest.raises(ConfigError, match="check-releases"):
            CheckerConfig.from_inputs({"check-releases": "fatal"})

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown configuration keys"):
            CheckerConfig.from_inputs({"auto-fixx": "true"})


class TestParseBool:
    @pytest.mark.parametrize("raw", ["true", "True", "yes", "1", "on"])
    def test_truthy(self, raw):
        assert parse_bool("k", raw, False) is True

    @pytest.mark.parametrize("raw", ["false", "FALSE", "no", "0", "off"])
    def test_falsy(self, raw):
        assert parse_bool("k", raw, True) is False

    def test_none_uses_default(self):
        assert parse_bool("k", None, True) is True

    def test_garbage(self):
        with pytest.raises(ConfigError):
            parse_bool("auto-fix", "maybe", False)


class TestParseVersionList:
    def test_comma_separated(self):
        assert parse_version_list("v1.0.0,v1.0.1 , v2") == ("v1.0.0", "v1.0.1", "v2")

    def test_newline_separated(self):
        assert parse_version_list("v1.0.0\nv1.0.1\r\n\nv2\n") == ("v1.0.0", "v1.0.1", "v2")

    def test_json_array(self):
        assert parse_version_list('["v1.0.0", "v1.*"]') == ("v1.0.0", "v1.*")

    def test_invalid_json(self):
        with pytest.raises(ConfigError):
            parse_version_list('["v1.0.0"')

    def test_duplicates_removed(self):
        assert parse_version_list("v1,v1,v2") == ("v1", "v2")

    def test_empty(self):
        assert parse_version_list("") == ()
        assert parse_version_list(None) == ()


class TestMatchesIgnorePattern:
    def test_exact(self):
        assert matches_ignore_pattern("v1.0.0", ["v1.0.0"]) is True

    def test_glob(self):
        assert matches_ignore_pattern("v1.2.3", ["v1.*"]) is True
        assert matches_ignore_pattern("v10.0.0", ["v1.*"]) is False

    def test_question_mark_glob(self):
        assert matches_ignore_pattern("v1.0.5", ["v1.0.?"]) is True

    def test_no_patterns(self):
        assert matches_ignore_pattern("v1", []) is False
