"""Entry point for one merge run across all configured repositories."""

from __future__ import annotations

import typing as typ

from mergeling.common.time import utcnow
from mergeling.config.loader import resolve_repositories

from .coordinator import DEFAULT_MAX_CONCURRENCY, iter_repository_outcomes
from .observability import MergeEventLogger, MergeRunContext
from .outcomes import RepoErrored
from .summary import RunAggregator, RunBehaviours

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from mergeling.config.models import MergeConfig, RepoRef
    from mergeling.github.client import PullRequestGateway

    from .summary import RunSummary


async def run_merge(
    config: MergeConfig,
    gateway: PullRequestGateway,
    *,
    behaviours: RunBehaviours | None = None,
    repos_override: cabc.Sequence[RepoRef] = (),
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    event_logger: MergeEventLogger | None = None,
) -> RunSummary:
    """Qualify (and optionally merge) pull requests across repositories.

    Parameters
    ----------
    config
        Validated run configuration.
    gateway
        Forge API used by every repository task.
    behaviours
        Execution and visibility switches; defaults to a dry run.
    repos_override
        Repositories to use instead of ``config.repos`` when non-empty.
    max_concurrency
        Maximum repositories processed at once.
    event_logger
        Receiver for structured run events.

    Returns
    -------
    RunSummary
        Statistics for the completed run. Gateway failures are counted in
        the summary rather than raised.

    Raises
    ------
    ConfigValidationError
        If there are no repositories to run for.

    """
    resolved = resolve_repositories(config, repos_override)
    run_behaviours = behaviours or RunBehaviours()
    events = event_logger or MergeEventLogger()

    context = MergeRunContext(
        started_at=utcnow(),
        execute=run_behaviours.execute,
        num_repos=len(resolved.repos),
    )
    events.log_run_started(context, resolved)

    aggregator = RunAggregator(run_behaviours)
    async for outcome in iter_repository_outcomes(
        resolved.repos,
        resolved,
        gateway,
        execute=run_behaviours.execute,
        max_concurrency=max_concurrency,
    ):
        report = aggregator.add_repo_result(outcome)
        if isinstance(outcome, RepoErrored):
            events.log_repo_failed(outcome.slug, outcome.error)
        else:
            events.log_repo_report(report, execute=run_behaviours.execute)

    summary = aggregator.finalize()
    events.log_run_completed(context, summary, utcnow() - context.started_at)
    return summary
