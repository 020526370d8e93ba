"""Shared builders and a scripted gateway for merge pipeline tests."""

from __future__ import annotations

import asyncio
import dataclasses
import re
import typing as typ

from mergeling.config import MergeConfig, MergeType, RepoRef, SortBy, SortDirection
from mergeling.github import CheckRun, GitHubAPIError, PullRequestRef

if typ.TYPE_CHECKING:
    import collections.abc as cabc

REPO = RepoRef(owner="octo", name="reef")


def make_config(  # noqa: PLR0913
    *,
    repos: cabc.Iterable[RepoRef] = (REPO,),
    trusted_authors: cabc.Iterable[str] = ("dependabot[bot]",),
    head_pattern: str | None = None,
    merge_if_blocked: bool = False,
    merge_if_checks_skipped: bool = True,
    merge_type: MergeType = MergeType.SQUASH,
    base_branch: str | None = None,
) -> MergeConfig:
    """Return a run configuration with test-friendly defaults."""
    return MergeConfig(
        repos=tuple(repos),
        trusted_authors=frozenset(trusted_authors),
        merge_type=merge_type,
        base_branch=base_branch,
        head_pattern=re.compile(head_pattern) if head_pattern else None,
        merge_if_blocked=merge_if_blocked,
        merge_if_checks_skipped=merge_if_checks_skipped,
    )


def make_pr(
    number: int,
    *,
    author: str | None = "dependabot[bot]",
    head_ref: str = "dependabot/pip/httpx-0.28",
    mergeable_state: str | None = None,
) -> PullRequestRef:
    """Return a pull request as the listing or detail endpoint would."""
    return PullRequestRef(
        number=number,
        title=f"Bump dependency #{number}",
        url=f"https://github.com/octo/reef/pull/{number}",
        head_ref=head_ref,
        head_sha=f"sha-{number}",
        author=author,
        mergeable_state=mergeable_state,
    )


def http_error(status: int, operation: str) -> GitHubAPIError:
    """Return the error the REST gateway raises for ``status``."""
    return GitHubAPIError.http_error(status, operation)


@dataclasses.dataclass(slots=True)
class GatewayCall:
    """A single recorded gateway invocation."""

    method: str
    repo: RepoRef
    args: tuple[object, ...] = ()


class FakeGateway:
    """Scripted :class:`~mergeling.github.PullRequestGateway` for tests.

    Listings, details and check runs are keyed by repository (and pull
    request number or SHA). Entries in ``errors`` are raised instead of
    returning data; keys are ``(method, repo_slug, key)`` where ``key`` is
    ``None`` for listings.
    """

    def __init__(self, *, delay: float = 0.0) -> None:
        """Initialise empty scripts and call recording."""
        self.pulls: dict[RepoRef, list[PullRequestRef]] = {}
        self.details: dict[tuple[RepoRef, int], PullRequestRef] = {}
        self.check_runs: dict[tuple[RepoRef, str], list[CheckRun]] = {}
        self.errors: dict[tuple[str, str, object], Exception] = {}
        self.calls: list[GatewayCall] = []
        self.merged: list[tuple[RepoRef, int, MergeType]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self._delay = delay

    def add_pr(
        self,
        repo: RepoRef,
        pr: PullRequestRef,
        *,
        state: str | None = "clean",
        checks: cabc.Iterable[CheckRun] = (),
    ) -> None:
        """Script a listed pull request together with its detail and checks."""
        self.pulls.setdefault(repo, []).append(pr)
        self.details[(repo, pr.number)] = dataclasses.replace(
            pr, mergeable_state=state
        )
        self.check_runs[(repo, pr.head_sha)] = list(checks)

    def fail(
        self, method: str, repo: RepoRef, key: object, error: Exception
    ) -> None:
        """Make ``method`` raise ``error`` for ``repo`` and ``key``."""
        self.errors[(method, repo.slug, key)] = error

    def calls_for(self, method: str) -> list[GatewayCall]:
        """Return recorded calls to ``method`` in call order."""
        return [call for call in self.calls if call.method == method]

    async def _enter(self, method: str, repo: RepoRef, key: object) -> None:
        self.calls.append(GatewayCall(method=method, repo=repo, args=(key,)))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self._delay)
        finally:
            self.in_flight -= 1
        error = self.errors.get((method, repo.slug, key))
        if error is not None:
            raise error

    async def list_open_pull_requests(
        self,
        repo: RepoRef,
        *,
        sort_by: SortBy,
        sort_direction: SortDirection,
        base: str | None = None,
    ) -> list[PullRequestRef]:
        """Return the scripted listing for ``repo``."""
        del sort_by, sort_direction, base
        await self._enter("list_open_pull_requests", repo, None)
        return list(self.pulls.get(repo, []))

    async def get_pull_request(self, repo: RepoRef, number: int) -> PullRequestRef:
        """Return the scripted detail for pull request ``number``."""
        await self._enter("get_pull_request", repo, number)
        return self.details[(repo, number)]

    async def list_check_runs(self, repo: RepoRef, sha: str) -> list[CheckRun]:
        """Return the scripted check runs for ``sha``."""
        await self._enter("list_check_runs", repo, sha)
        return list(self.check_runs.get((repo, sha), []))

    async def merge_pull_request(
        self, repo: RepoRef, number: int, merge_type: MergeType
    ) -> None:
        """Record a merge of pull request ``number``."""
        await self._enter("merge_pull_request", repo, number)
        self.merged.append((repo, number, merge_type))

    async def aclose(self) -> None:
        """Mark the gateway as closed."""
        self.closed = True
