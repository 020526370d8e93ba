"""Bounded fan-out of repository processing across asyncio tasks."""

from __future__ import annotations

import asyncio
import typing as typ

from .errors import RepositoryTaskError
from .outcomes import RepoErrored
from .processor import process_repository

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from mergeling.config.models import MergeConfig, RepoRef
    from mergeling.github.client import PullRequestGateway

    from .outcomes import RepoOutcome

# Maximum repositories with gateway I/O in flight at once
DEFAULT_MAX_CONCURRENCY = 50


def _joined_outcome(task: asyncio.Task[RepoOutcome], repo: RepoRef) -> RepoOutcome:
    """Return the task's outcome, converting crashes into :class:`RepoErrored`.

    Raises
    ------
    BaseException
        Re-raised for system-level exceptions such as ``KeyboardInterrupt``.

    """
    if task.cancelled():
        return RepoErrored(
            owner=repo.owner, name=repo.name, error=RepositoryTaskError.cancelled()
        )
    exc = task.exception()
    if exc is None:
        return task.result()
    if not isinstance(exc, Exception):
        raise exc
    return RepoErrored(
        owner=repo.owner, name=repo.name, error=RepositoryTaskError.crashed(exc)
    )


async def iter_repository_outcomes(
    repos: cabc.Iterable[RepoRef],
    config: MergeConfig,
    gateway: PullRequestGateway,
    *,
    execute: bool,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> cabc.AsyncIterator[RepoOutcome]:
    """Process repositories concurrently and yield outcomes as they complete.

    One task is started per repository. Each task holds a semaphore permit for
    the whole of its processing, so at most ``max_concurrency`` repositories
    talk to the gateway at any instant. Outcomes arrive in completion order,
    which need not match ``repos``. A task that raises or is cancelled is
    reported as :class:`RepoErrored` for its repository.

    Parameters
    ----------
    repos
        Repositories to process.
    config
        Shared, read-only run configuration.
    gateway
        Forge API shared by all tasks.
    execute
        Whether qualifying pull requests are merged.
    max_concurrency
        Number of admission permits; must be at least 1.

    """
    if max_concurrency < 1:
        msg = f"max_concurrency must be positive, got: {max_concurrency}"
        raise ValueError(msg)

    semaphore = asyncio.Semaphore(max_concurrency)

    async def bounded(repo: RepoRef) -> RepoOutcome:
        async with semaphore:
            return await process_repository(repo, config, gateway, execute=execute)

    pending: dict[asyncio.Task[RepoOutcome], RepoRef] = {
        asyncio.create_task(bounded(repo), name=f"merge:{repo.slug}"): repo
        for repo in repos
    }
    try:
        while pending:
            done, _ = await asyncio.wait(
                pending.keys(), return_when=asyncio.FIRST_COMPLETED
            )
            for task in done:
                repo = pending.pop(task)
                yield _joined_outcome(task, repo)
    finally:
        # Only non-empty when the consumer stopped iterating early.
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
