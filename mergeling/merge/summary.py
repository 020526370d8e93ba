"""Run-wide aggregation of repository outcomes.

:class:`RunAggregator` is the single consumer of the coordinator's completion
stream. Repository tasks only return values; all counting happens here, on
one logical thread of control, so the summary needs no locking.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from .errors import SummaryFinalizedError
from .outcomes import (
    HeadMismatch,
    PrDisqualified,
    PrErrored,
    PrQualified,
    RepoErrored,
    RepoFinished,
    UntrustedAuthor,
)

if typ.TYPE_CHECKING:
    from .outcomes import PrOutcome, RepoOutcome


@dataclasses.dataclass(frozen=True, slots=True)
class RunBehaviours:
    """Switches that change what a run does and what it reports.

    Attributes
    ----------
    execute
        Merge qualifying pull requests instead of only classifying them.
    show_repos_with_no_prs
        Report repositories that have nothing relevant to show.
    show_prs_from_untrusted_authors
        Report pull requests disqualified for their author.
    show_prs_with_unmatched_head
        Report pull requests disqualified by the head pattern.
    skip_disqualifications_in_summary
        Leave the per-PR disqualification list out of rendered summaries.

    """

    execute: bool = False
    show_repos_with_no_prs: bool = False
    show_prs_from_untrusted_authors: bool = False
    show_prs_with_unmatched_head: bool = False
    skip_disqualifications_in_summary: bool = False


@dataclasses.dataclass(frozen=True, slots=True)
class MergedPullRequest:
    """A pull request merged during the run."""

    repo: str
    title: str


@dataclasses.dataclass(slots=True)
class RunSummary:
    """Statistics accumulated over one run."""

    num_repos: int = 0
    num_repos_with_no_prs: int = 0
    num_qualified: int = 0
    num_disqualifications: int = 0
    num_errors: int = 0
    disqualifications: list[tuple[str, str]] = dataclasses.field(default_factory=list)
    errors: list[tuple[str, str]] = dataclasses.field(default_factory=list)
    prs_merged: list[MergedPullRequest] = dataclasses.field(default_factory=list)

    @property
    def num_merges(self) -> int:
        """Return the number of pull requests merged."""
        return len(self.prs_merged)


@dataclasses.dataclass(frozen=True, slots=True)
class RepoReport:
    """What live loggers should show for one repository.

    ``outcomes`` holds only the visible pull request outcomes; ``elided``
    is set when the repository has nothing relevant and the run does not
    show such repositories.
    """

    slug: str
    outcomes: tuple[PrOutcome, ...] = ()
    error: str | None = None
    elided: bool = False


class RunAggregator:
    """Fold repository outcomes into a :class:`RunSummary`."""

    def __init__(self, behaviours: RunBehaviours | None = None) -> None:
        """Create an aggregator with an empty summary."""
        self._behaviours = behaviours or RunBehaviours()
        self._summary = RunSummary()
        self._finalized = False

    def add_repo_result(self, outcome: RepoOutcome) -> RepoReport:
        """Record one repository's outcome, in arrival order.

        Returns
        -------
        RepoReport
            The subset of the outcome that should be displayed.

        Raises
        ------
        SummaryFinalizedError
            If :meth:`finalize` has already been called.

        """
        if self._finalized:
            raise SummaryFinalizedError
        self._summary.num_repos += 1

        match outcome:
            case RepoErrored():
                self._summary.num_errors += 1
                self._summary.errors.append((outcome.slug, outcome.message))
                return RepoReport(slug=outcome.slug, error=outcome.message)
            case RepoFinished():
                return self._add_finished(outcome)

    def finalize(self) -> RunSummary:
        """Return the accumulated summary; may be called only once."""
        if self._finalized:
            raise SummaryFinalizedError
        self._finalized = True
        return self._summary

    def _add_finished(self, outcome: RepoFinished) -> RepoReport:
        for pr_outcome in outcome.outcomes:
            self._record_pr(outcome.slug, pr_outcome)

        visible = tuple(o for o in outcome.outcomes if self._is_visible(o))
        if visible:
            return RepoReport(slug=outcome.slug, outcomes=visible)

        self._summary.num_repos_with_no_prs += 1
        return RepoReport(
            slug=outcome.slug,
            elided=not self._behaviours.show_repos_with_no_prs,
        )

    def _record_pr(self, slug: str, outcome: PrOutcome) -> None:
        summary = self._summary
        match outcome:
            case PrQualified():
                summary.num_qualified += 1
                if self._behaviours.execute:
                    summary.prs_merged.append(
                        MergedPullRequest(repo=slug, title=outcome.title)
                    )
            case PrDisqualified():
                summary.num_disqualifications += 1
                summary.disqualifications.append(
                    (outcome.url, outcome.reason.describe())
                )
            case PrErrored():
                summary.num_errors += 1
                summary.errors.append((outcome.url, outcome.message))

    def _is_visible(self, outcome: PrOutcome) -> bool:
        if not isinstance(outcome, PrDisqualified):
            return True
        match outcome.reason:
            case UntrustedAuthor():
                return self._behaviours.show_prs_from_untrusted_authors
            case HeadMismatch():
                return self._behaviours.show_prs_with_unmatched_head
            case _:
                return True
