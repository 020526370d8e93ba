"""Typed views of the GitHub pull request data the merge pipeline consumes."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt


class MergeableState(enum.StrEnum):
    """Mergeable states GitHub is known to report.

    The list is not closed: GitHub may add values at any time, so pull
    requests keep the raw label and only ``clean`` (and ``blocked`` when
    configured) are ever accepted.
    """

    BEHIND = "behind"
    BLOCKED = "blocked"
    CLEAN = "clean"
    DIRTY = "dirty"
    DRAFT = "draft"
    HAS_HOOKS = "has_hooks"
    UNKNOWN = "unknown"
    UNSTABLE = "unstable"


@dataclasses.dataclass(frozen=True, slots=True)
class PullRequestRef:
    """Subset of a GitHub pull request needed to qualify it.

    ``author`` is ``None`` when GitHub sent no user. ``mergeable_state`` is
    ``None`` in listings and whenever GitHub has not computed it yet.
    """

    number: int
    title: str
    url: str
    head_ref: str
    head_sha: str
    author: str | None = None
    mergeable_state: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class CheckRun:
    """A CI check run reported against a commit."""

    name: str
    conclusion: str | None = None
