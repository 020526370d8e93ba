"""Qualification pipeline for a single pull request.

Checks run in a fixed order, cheapest first, and the first failing check
ends evaluation:

1. head branch against ``head_pattern`` (when configured)
2. author against ``trusted_authors``
3. pull request detail fetch
4. check runs for the head commit
5. mergeable state
6. the merge itself (only when executing)

Stages 1 and 2 use listing data only, so pull requests that can never
qualify cost no further API calls.
"""

from __future__ import annotations

import typing as typ

from mergeling.github.errors import GitHubError
from mergeling.github.models import MergeableState

from .outcomes import (
    CheckPassed,
    CheckRejected,
    HeadMatched,
    HeadMismatch,
    PrDisqualified,
    PrErrored,
    PrQualified,
    StateAccepted,
    StateRejected,
    TrustedAuthor,
    UntrustedAuthor,
)

if typ.TYPE_CHECKING:
    from mergeling.config.models import MergeConfig, RepoRef
    from mergeling.github.client import PullRequestGateway
    from mergeling.github.models import CheckRun, PullRequestRef

    from .outcomes import Disqualification, PrOutcome, Qualification

_SUCCESS = "success"
_SKIPPED = "skipped"


class _PullRequestCheck:
    """Accumulates qualifications until the pull request reaches an outcome."""

    __slots__ = ("_pr", "_qualifications")

    def __init__(self, pr: PullRequestRef) -> None:
        self._pr = pr
        self._qualifications: list[Qualification] = []

    def qualify(self, qualification: Qualification) -> None:
        self._qualifications.append(qualification)

    def disqualify(self, reason: Disqualification) -> PrDisqualified:
        pr = self._pr
        return PrDisqualified(
            number=pr.number,
            title=pr.title,
            url=pr.url,
            created_at=pr.created_at,
            updated_at=pr.updated_at,
            qualifications=tuple(self._qualifications),
            reason=reason,
        )

    def record_error(self, error: Exception) -> PrErrored:
        pr = self._pr
        return PrErrored(
            number=pr.number,
            title=pr.title,
            url=pr.url,
            created_at=pr.created_at,
            updated_at=pr.updated_at,
            qualifications=tuple(self._qualifications),
            error=error,
        )

    def finish(self) -> PrQualified:
        pr = self._pr
        return PrQualified(
            number=pr.number,
            title=pr.title,
            url=pr.url,
            created_at=pr.created_at,
            updated_at=pr.updated_at,
            qualifications=tuple(self._qualifications),
        )


def _check_head(
    check: _PullRequestCheck, pr: PullRequestRef, config: MergeConfig
) -> Disqualification | None:
    """Match the head branch against the configured pattern, if any."""
    if config.head_pattern is None:
        return None
    if config.head_pattern.search(pr.head_ref) is None:
        return HeadMismatch(pr.head_ref)
    check.qualify(HeadMatched(pr.head_ref))
    return None


def _check_author(
    check: _PullRequestCheck, pr: PullRequestRef, config: MergeConfig
) -> Disqualification | None:
    """Require the author to be present and trusted."""
    if pr.author is None or pr.author not in config.trusted_authors:
        return UntrustedAuthor(pr.author)
    check.qualify(TrustedAuthor(pr.author))
    return None


def _check_runs(
    check: _PullRequestCheck, runs: typ.Sequence[CheckRun], config: MergeConfig
) -> Disqualification | None:
    """Walk check runs in reported order; an empty list passes.

    Conclusions are matched exactly. Only the label of a rejected check is
    lower-cased.
    """
    for run in runs:
        conclusion = run.conclusion
        if conclusion is None:
            return CheckRejected(run.name, None)
        if conclusion == _SUCCESS or (
            conclusion == _SKIPPED and config.merge_if_checks_skipped
        ):
            check.qualify(CheckPassed(run.name, conclusion))
            continue
        return CheckRejected(run.name, conclusion.lower())
    return None


def _check_mergeable_state(
    check: _PullRequestCheck, state: str | None, config: MergeConfig
) -> Disqualification | None:
    """Accept ``clean``, and ``blocked`` when configured; reject the rest.

    Labels GitHub may add in future are rejected like any other state.
    """
    if state is None:
        return StateRejected(None)
    if state == MergeableState.CLEAN or (
        state == MergeableState.BLOCKED and config.merge_if_blocked
    ):
        check.qualify(StateAccepted(state))
        return None
    return StateRejected(state)


async def evaluate_pull_request(
    pr: PullRequestRef,
    repo: RepoRef,
    config: MergeConfig,
    gateway: PullRequestGateway,
    *,
    execute: bool,
) -> PrOutcome:
    """Run the qualification pipeline for one listed pull request.

    Parameters
    ----------
    pr
        Pull request as returned by the open pull request listing.
    repo
        Repository the pull request belongs to.
    config
        Run configuration.
    gateway
        Forge API used for detail, check runs and merging.
    execute
        Merge qualifying pull requests. When ``False`` the merge call is
        skipped but a passing pull request is still :class:`PrQualified`.

    Returns
    -------
    PrOutcome
        Exactly one terminal outcome; gateway failures become
        :class:`PrErrored` rather than propagating.

    """
    check = _PullRequestCheck(pr)

    reason = _check_head(check, pr, config) or _check_author(check, pr, config)
    if reason is not None:
        return check.disqualify(reason)

    try:
        detail = await gateway.get_pull_request(repo, pr.number)
    except GitHubError as exc:
        return check.record_error(exc)

    try:
        runs = await gateway.list_check_runs(repo, detail.head_sha)
    except GitHubError as exc:
        return check.record_error(exc)

    reason = _check_runs(check, runs, config) or _check_mergeable_state(
        check, detail.mergeable_state, config
    )
    if reason is not None:
        return check.disqualify(reason)

    if execute:
        try:
            await gateway.merge_pull_request(repo, detail.number, config.merge_type)
        except GitHubError as exc:
            return check.record_error(exc)

    return check.finish()
