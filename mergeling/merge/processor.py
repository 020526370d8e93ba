"""Per-repository driver for the qualification pipeline."""

from __future__ import annotations

import typing as typ

from mergeling.github.errors import GitHubError

from .outcomes import PrQualified, RepoErrored, RepoFinished
from .qualify import evaluate_pull_request

if typ.TYPE_CHECKING:
    from mergeling.config.models import MergeConfig, RepoRef
    from mergeling.github.client import PullRequestGateway

    from .outcomes import PrOutcome, RepoOutcome


async def process_repository(
    repo: RepoRef,
    config: MergeConfig,
    gateway: PullRequestGateway,
    *,
    execute: bool,
) -> RepoOutcome:
    """Evaluate the open pull requests of one repository, one at a time.

    Pull requests are never evaluated concurrently: a merge changes the
    mergeable state of its siblings. When ``execute`` is set, processing stops
    after the first merge so each repository sees at most one merge per run.
    Dry runs evaluate every listed pull request.

    A failure to list pull requests yields :class:`RepoErrored`; failures for
    individual pull requests are kept in :attr:`RepoFinished.outcomes`.
    """
    try:
        pulls = await gateway.list_open_pull_requests(
            repo,
            sort_by=config.sort_by,
            sort_direction=config.sort_direction,
            base=config.base_branch,
        )
    except GitHubError as exc:
        return RepoErrored(owner=repo.owner, name=repo.name, error=exc)

    outcomes: list[PrOutcome] = []
    for pr in pulls:
        outcome = await evaluate_pull_request(
            pr, repo, config, gateway, execute=execute
        )
        outcomes.append(outcome)
        if execute and isinstance(outcome, PrQualified):
            break

    return RepoFinished(owner=repo.owner, name=repo.name, outcomes=tuple(outcomes))
