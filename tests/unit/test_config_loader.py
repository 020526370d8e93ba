"""Unit tests for loading and validating mergeling configuration."""

from __future__ import annotations

import typing as typ

import pytest

from mergeling.config import (
    SAMPLE_CONFIG,
    ConfigValidationError,
    MergeType,
    RepoRef,
    SortBy,
    SortDirection,
    load_config,
    parse_config,
    parse_repo_list,
    resolve_repositories,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

_FULL = """\
repos:
  - octo/reef
  - octo/kelp
trusted_authors:
  - dependabot[bot]
  - octocat
base_branch: " main "
head_pattern: "^dependabot/"
merge_if_blocked: true
merge_if_checks_skipped: false
merge_type: rebase
sort_by: long-running
sort_direction: desc
"""

_MINIMAL = """\
repos: [octo/reef]
trusted_authors: [octocat]
merge_type: squash
"""


class TestParseConfig:
    """Tests for parse_config."""

    def test_full_document(self) -> None:
        """Every field is read and normalized."""
        config = parse_config(_FULL)

        assert config.repos == (
            RepoRef(owner="octo", name="reef"),
            RepoRef(owner="octo", name="kelp"),
        )
        assert config.trusted_authors == frozenset({"dependabot[bot]", "octocat"})
        assert config.base_branch == "main"
        assert config.head_pattern is not None
        assert config.head_pattern.pattern == "^dependabot/"
        assert config.merge_if_blocked is True
        assert config.merge_if_checks_skipped is False
        assert config.merge_type is MergeType.REBASE
        assert config.sort_by is SortBy.LONG_RUNNING
        assert config.sort_direction is SortDirection.DESCENDING

    def test_defaults(self) -> None:
        """Optional fields fall back to their defaults."""
        config = parse_config(_MINIMAL)

        assert config.base_branch is None
        assert config.head_pattern is None
        assert config.merge_if_blocked is False
        assert config.merge_if_checks_skipped is True
        assert config.sort_by is SortBy.CREATED
        assert config.sort_direction is SortDirection.ASCENDING

    def test_sample_config_is_valid(self) -> None:
        """The bundled sample parses cleanly."""
        config = parse_config(SAMPLE_CONFIG)

        assert config.merge_type is MergeType.SQUASH
        assert len(config.repos) == 2

    def test_repos_may_be_omitted(self) -> None:
        """Repositories can be left to the command line."""
        config = parse_config("trusted_authors: [octocat]\nmerge_type: merge\n")

        assert config.repos == ()

    @pytest.mark.parametrize(
        ("text", "fragment"),
        [
            ("", "config file is empty"),
            ("repos: [\n", "failed to parse YAML"),
            ("repos: []\n", "schema validation failed"),
            ("merge_type: fast\n", "schema validation failed"),
            ("merge_type: merge\nsort_by: stars\n", "schema validation failed"),
            ("merge_type: merge\nsort_direction: up\n", "schema validation failed"),
            ("merge_type: merge\nauto_merge: true\n", "schema validation failed"),
            ("merge_type: merge\nmerge_type: squash\n", "failed to parse YAML"),
        ],
    )
    def test_invalid_documents(self, text: str, fragment: str) -> None:
        """Malformed and schema-violating documents are rejected."""
        with pytest.raises(ConfigValidationError) as excinfo:
            parse_config(text)

        assert fragment in str(excinfo.value), (
            f"Expected {fragment!r} in {excinfo.value!s}"
        )

    def test_collects_every_issue(self) -> None:
        """Bad repositories and a bad regex are reported together."""
        text = (
            "repos: [octo, octo/reef, a/b/c]\n"
            "head_pattern: '(unclosed'\n"
            "merge_type: merge\n"
        )

        with pytest.raises(ConfigValidationError) as excinfo:
            parse_config(text)

        issues = excinfo.value.issues
        assert len(issues) == 3, f"Expected three issues, got {issues}"
        assert issues[0].startswith('repo needs to be in the form "owner/repo"')
        assert "head_pattern" in issues[2]


class TestLoadConfig:
    """Tests for load_config."""

    def test_reads_file(self, tmp_path: Path) -> None:
        """Configuration files are read from disk."""
        path = tmp_path / "mergeling.yaml"
        path.write_text(_MINIMAL, encoding="utf-8")

        config = load_config(path)

        assert config.trusted_authors == frozenset({"octocat"})

    def test_missing_file(self, tmp_path: Path) -> None:
        """An unreadable file is a validation error."""
        with pytest.raises(ConfigValidationError, match="couldn't read config file"):
            load_config(tmp_path / "absent.yaml")


class TestRepositories:
    """Tests for repository parsing and overrides."""

    @pytest.mark.parametrize("value", ["octo", "/reef", "octo/", "a/b/c", ""])
    def test_repo_ref_rejects_malformed(self, value: str) -> None:
        """Repository strings need exactly one owner and one name."""
        with pytest.raises(ValueError, match="owner/repo"):
            RepoRef.parse(value)

    def test_repo_ref_round_trips_slug(self) -> None:
        """Parsed repositories render back to their slug."""
        repo = RepoRef.parse(" octo/reef ")

        assert str(repo) == "octo/reef"

    def test_parse_repo_list_reports_bad_entries(self) -> None:
        """Override lists are validated like the config file."""
        with pytest.raises(ConfigValidationError):
            parse_repo_list(["octo/reef", "nope"])

    def test_override_replaces_configured(self) -> None:
        """Non-empty overrides take precedence over configured repositories."""
        config = parse_config(_FULL)
        override = parse_repo_list(["octo/coral"])

        resolved = resolve_repositories(config, override)

        assert resolved.repos == override
        assert resolved.trusted_authors == config.trusted_authors

    def test_empty_override_keeps_configured(self) -> None:
        """An empty override list leaves the configuration untouched."""
        config = parse_config(_FULL)

        assert resolve_repositories(config, ()) is config

    def test_no_repositories_anywhere(self) -> None:
        """A run needs at least one repository."""
        config = parse_config("trusted_authors: []\nmerge_type: merge\n")

        with pytest.raises(ConfigValidationError, match="no repos to run for"):
            resolve_repositories(config)
