"""Terminal results of qualifying pull requests and processing repositories.

Every processed pull request ends in exactly one of :class:`PrQualified`,
:class:`PrDisqualified` or :class:`PrErrored`; every repository in exactly one
of :class:`RepoFinished` or :class:`RepoErrored`. All of them are frozen and
are only constructed by the pipeline in :mod:`mergeling.merge.qualify` and
:mod:`mergeling.merge.processor`.
"""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt

# Qualifications: checks a pull request passed, in pipeline order.


@dataclasses.dataclass(frozen=True, slots=True)
class HeadMatched:
    """The head branch matched the configured head pattern."""

    head_ref: str


@dataclasses.dataclass(frozen=True, slots=True)
class TrustedAuthor:
    """The author is in the list of trusted authors."""

    login: str


@dataclasses.dataclass(frozen=True, slots=True)
class CheckPassed:
    """A check run concluded with an accepted conclusion."""

    name: str
    conclusion: str


@dataclasses.dataclass(frozen=True, slots=True)
class StateAccepted:
    """GitHub's mergeable state was accepted."""

    state: str


type Qualification = HeadMatched | TrustedAuthor | CheckPassed | StateAccepted

# Disqualifications: the single reason a pull request was rejected.


@dataclasses.dataclass(frozen=True, slots=True)
class HeadMismatch:
    """The head branch did not match the configured head pattern."""

    head_ref: str

    def describe(self) -> str:
        """Return a short reason for run summaries."""
        return "head didn't match"


@dataclasses.dataclass(frozen=True, slots=True)
class UntrustedAuthor:
    """The author is untrusted; ``login`` is ``None`` when GitHub sent none."""

    login: str | None

    def describe(self) -> str:
        """Return a short reason for run summaries."""
        if self.login is None:
            return "author unknown"
        return f"author {self.login} untrusted"


@dataclasses.dataclass(frozen=True, slots=True)
class CheckRejected:
    """A check run concluded badly or reported no conclusion at all."""

    name: str
    conclusion: str | None

    def describe(self) -> str:
        """Return a short reason for run summaries."""
        if self.conclusion is None:
            return f"check {self.name}: unknown conclusion"
        return f"check {self.name}: {self.conclusion}"


@dataclasses.dataclass(frozen=True, slots=True)
class StateRejected:
    """The mergeable state was rejected; ``None`` when GitHub sent none."""

    state: str | None

    def describe(self) -> str:
        """Return a short reason for run summaries."""
        if self.state is None:
            return "state: unknown"
        return f"state: {self.state}"


type Disqualification = HeadMismatch | UntrustedAuthor | CheckRejected | StateRejected


@dataclasses.dataclass(frozen=True, slots=True)
class PrQualified:
    """The pull request passed every check (and was merged when executing)."""

    number: int
    title: str
    url: str
    created_at: dt.datetime | None
    updated_at: dt.datetime | None
    qualifications: tuple[Qualification, ...]


@dataclasses.dataclass(frozen=True, slots=True)
class PrDisqualified:
    """The pull request failed one check; later checks never ran."""

    number: int
    title: str
    url: str
    created_at: dt.datetime | None
    updated_at: dt.datetime | None
    qualifications: tuple[Qualification, ...]
    reason: Disqualification


@dataclasses.dataclass(frozen=True, slots=True)
class PrErrored:
    """A gateway call failed while the pull request was being checked."""

    number: int
    title: str
    url: str
    created_at: dt.datetime | None
    updated_at: dt.datetime | None
    qualifications: tuple[Qualification, ...]
    error: Exception

    @property
    def message(self) -> str:
        """Return the error text for reports."""
        return str(self.error)


type PrOutcome = PrQualified | PrDisqualified | PrErrored


@dataclasses.dataclass(frozen=True, slots=True)
class RepoFinished:
    """Every listed pull request was evaluated (or evaluation stopped on merge)."""

    owner: str
    name: str
    outcomes: tuple[PrOutcome, ...] = ()

    @property
    def slug(self) -> str:
        """Return ``owner/name``."""
        return f"{self.owner}/{self.name}"


@dataclasses.dataclass(frozen=True, slots=True)
class RepoErrored:
    """The repository could not be processed at all.

    Per pull request failures live in :attr:`RepoFinished.outcomes`; this
    variant covers listing failures and crashed repository tasks.
    """

    owner: str
    name: str
    error: Exception

    @property
    def slug(self) -> str:
        """Return ``owner/name``."""
        return f"{self.owner}/{self.name}"

    @property
    def message(self) -> str:
        """Return the error text for reports."""
        return str(self.error)


type RepoOutcome = RepoFinished | RepoErrored
