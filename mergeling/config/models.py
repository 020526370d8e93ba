"""Typed run configuration consumed by the merge pipeline.

Two layers live here. :class:`ConfigDocument` mirrors the YAML file and is
what ``msgspec.convert`` targets; :class:`MergeConfig` is the validated,
immutable object the pipeline shares across concurrent repository tasks.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    import re


class MergeType(enum.StrEnum):
    """Merge method passed to the forge when a PR qualifies."""

    MERGE = "merge"
    SQUASH = "squash"
    REBASE = "rebase"


class SortBy(enum.StrEnum):
    """Ordering key for the open pull request listing."""

    CREATED = "created"
    UPDATED = "updated"
    POPULARITY = "popularity"
    LONG_RUNNING = "long-running"

    @property
    def readable(self) -> str:
        """Return a human-readable description of the sort key."""
        return _SORT_BY_READABLE[self]


_SORT_BY_READABLE: dict[SortBy, str] = {
    SortBy.CREATED: "creation date",
    SortBy.UPDATED: "last updated date",
    SortBy.POPULARITY: "popularity",
    SortBy.LONG_RUNNING: "long running status",
}


class SortDirection(enum.StrEnum):
    """Direction for the open pull request listing."""

    ASCENDING = "asc"
    DESCENDING = "desc"

    @property
    def readable(self) -> str:
        """Return a human-readable description of the direction."""
        return "ascending" if self is SortDirection.ASCENDING else "descending"


@dataclasses.dataclass(frozen=True, slots=True)
class RepoRef:
    """Immutable identity of a GitHub repository."""

    owner: str
    name: str

    @property
    def slug(self) -> str:
        """Return the GitHub-style ``owner/name`` identifier."""
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        """Render as ``owner/name``."""
        return self.slug

    @classmethod
    def parse(cls, value: str) -> RepoRef:
        """Parse an ``owner/name`` string.

        Raises
        ------
        ValueError
            If ``value`` does not contain exactly one ``/`` separating two
            non-empty segments.

        Examples
        --------
        >>> RepoRef.parse("dhth/mrj")
        RepoRef(owner='dhth', name='mrj')

        """
        text = value.strip()
        owner, sep, name = text.partition("/")
        if not sep or not owner or not name or "/" in name:
            msg = f'repo needs to be in the form "owner/repo", got {value!r}'
            raise ValueError(msg)
        return cls(owner=owner, name=name)


class ConfigDocument(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Raw configuration document as written in ``mergeling.yaml``.

    Attributes
    ----------
    repos : list[str]
        Repositories in ``owner/name`` form. May be empty when repositories
        are always supplied on the command line.
    trusted_authors : list[str]
        Logins whose pull requests may be merged.
    merge_type : MergeType
        Merge method used for qualifying pull requests.
    base_branch : str, optional
        Only consider pull requests targeting this branch.
    head_pattern : str, optional
        Regular expression the head branch must match.
    merge_if_blocked : bool
        Accept the ``blocked`` mergeable state.
    merge_if_checks_skipped : bool
        Treat ``skipped`` check runs as passing.
    sort_by : SortBy
        Listing order key.
    sort_direction : SortDirection
        Listing order direction.

    """

    repos: list[str] = msgspec.field(default_factory=list)
    trusted_authors: list[str] = msgspec.field(default_factory=list)
    merge_type: MergeType
    base_branch: str | None = None
    head_pattern: str | None = None
    merge_if_blocked: bool = False
    merge_if_checks_skipped: bool = True
    sort_by: SortBy = SortBy.CREATED
    sort_direction: SortDirection = SortDirection.ASCENDING


@dataclasses.dataclass(frozen=True, slots=True)
class MergeConfig:
    """Validated, read-only parameters for a merge run."""

    repos: tuple[RepoRef, ...]
    trusted_authors: frozenset[str]
    merge_type: MergeType
    base_branch: str | None = None
    head_pattern: re.Pattern[str] | None = None
    merge_if_blocked: bool = False
    merge_if_checks_skipped: bool = True
    sort_by: SortBy = SortBy.CREATED
    sort_direction: SortDirection = SortDirection.ASCENDING

    def with_repos(self, repos: typ.Iterable[RepoRef]) -> MergeConfig:
        """Return a copy of the config targeting ``repos`` instead."""
        return dataclasses.replace(self, repos=tuple(repos))
