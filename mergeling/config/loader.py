"""YAML loader and validator for mergeling configuration files."""

from __future__ import annotations

import re
import typing as typ
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigValidationError
from .models import ConfigDocument, MergeConfig, RepoRef

if typ.TYPE_CHECKING:
    import collections.abc as cabc

YAML_VERSION = (1, 2)
DEFAULT_CONFIG_PATH = Path("mergeling.yaml")

SAMPLE_CONFIG = """\
# repositories to check, in the form "owner/name"
repos:
  - owner/repo-1
  - owner/repo-2

# only PRs opened by these logins are considered
trusted_authors:
  - dependabot[bot]

# only consider PRs targeting this branch (optional)
base_branch: main

# the head branch must match this regex (optional)
head_pattern: "(dependabot|update)"

# merge even when GitHub reports the PR as blocked (default: false)
merge_if_blocked: false

# treat skipped checks as passing (default: true)
merge_if_checks_skipped: true

# merge | squash | rebase
merge_type: squash

# created | updated | popularity | long-running (default: created)
sort_by: created

# asc | desc (default: asc)
sort_direction: asc
"""


def load_config(path: Path | str = DEFAULT_CONFIG_PATH) -> MergeConfig:
    """Read, parse, and validate a YAML configuration file."""
    path_obj = Path(path)
    try:
        text = path_obj.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f'couldn\'t read config file "{path_obj}": {exc}'
        raise ConfigValidationError([msg]) from exc
    return parse_config(text)


def parse_config(text: str) -> MergeConfig:
    """Parse configuration text using a YAML 1.2 compliant loader."""
    try:
        loaded = _yaml().load(text)
    except YAMLError as exc:
        raise ConfigValidationError([f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        raise ConfigValidationError(["config file is empty"])

    try:
        document = msgspec.convert(loaded, type=ConfigDocument)
    except msgspec.ValidationError as exc:
        raise ConfigValidationError([f"schema validation failed: {exc}"]) from exc

    return build_config(document)


def build_config(document: ConfigDocument) -> MergeConfig:
    """Validate a raw document and return the immutable run configuration.

    Every invalid repository string and an invalid head pattern are reported
    together in a single :class:`ConfigValidationError`.
    """
    issues: list[str] = []
    repos = _parse_repos(document.repos, issues)
    head_pattern = _compile_head_pattern(document.head_pattern, issues)
    base_branch = document.base_branch.strip() if document.base_branch else None

    if issues:
        raise ConfigValidationError(issues)

    return MergeConfig(
        repos=repos,
        trusted_authors=frozenset(document.trusted_authors),
        merge_type=document.merge_type,
        base_branch=base_branch or None,
        head_pattern=head_pattern,
        merge_if_blocked=document.merge_if_blocked,
        merge_if_checks_skipped=document.merge_if_checks_skipped,
        sort_by=document.sort_by,
        sort_direction=document.sort_direction,
    )


def parse_repo_list(values: cabc.Iterable[str]) -> tuple[RepoRef, ...]:
    """Parse repository strings, e.g. from a ``--repos`` override.

    Raises
    ------
    ConfigValidationError
        If any entry is not in ``owner/name`` form.

    """
    issues: list[str] = []
    repos = _parse_repos(values, issues)
    if issues:
        raise ConfigValidationError(issues)
    return repos


def resolve_repositories(
    config: MergeConfig, overrides: cabc.Sequence[RepoRef] = ()
) -> MergeConfig:
    """Apply command-line repository overrides and require a non-empty list.

    A non-empty ``overrides`` replaces the configured repositories; an empty
    one keeps them.
    """
    resolved = config.with_repos(overrides) if overrides else config
    if not resolved.repos:
        raise ConfigValidationError.no_repositories()
    return resolved


def _parse_repos(
    values: cabc.Iterable[str], issues: list[str]
) -> tuple[RepoRef, ...]:
    repos: list[RepoRef] = []
    for value in values:
        try:
            repos.append(RepoRef.parse(value))
        except ValueError as exc:
            issues.append(str(exc))
    return tuple(repos)


def _compile_head_pattern(
    pattern: str | None, issues: list[str]
) -> re.Pattern[str] | None:
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        issues.append(f"head_pattern {pattern!r} is not a valid regex: {exc}")
        return None


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
