"""GitHub REST gateway used by the merge pipeline."""

from __future__ import annotations

import dataclasses
import os
import typing as typ

import httpx

from mergeling.common.time import parse_github_datetime

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import CheckRun, PullRequestRef

if typ.TYPE_CHECKING:
    import datetime as dt

    from mergeling.config.models import MergeType, RepoRef, SortBy, SortDirection


class PullRequestGateway(typ.Protocol):
    """Capabilities the merge pipeline needs from a forge.

    Implementations raise :class:`~mergeling.github.errors.GitHubError`
    subclasses for every failure, timeouts included.
    """

    async def list_open_pull_requests(
        self,
        repo: RepoRef,
        *,
        sort_by: SortBy,
        sort_direction: SortDirection,
        base: str | None = None,
    ) -> list[PullRequestRef]:
        """Return open pull requests in the requested order."""
        ...

    async def get_pull_request(self, repo: RepoRef, number: int) -> PullRequestRef:
        """Return full detail, including head SHA and mergeable state."""
        ...

    async def list_check_runs(self, repo: RepoRef, sha: str) -> list[CheckRun]:
        """Return check runs for a commit, in the order GitHub reports them."""
        ...

    async def merge_pull_request(
        self, repo: RepoRef, number: int, merge_type: MergeType
    ) -> None:
        """Merge a pull request using ``merge_type``."""
        ...


API_URL_ENV_VAR = "MERGELING_GITHUB_API_URL"
TOKEN_ENV_VAR = "MERGELING_GITHUB_TOKEN"  # noqa: S105 - env var name, not a secret


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    api_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "mergeling/0.1"
    page_size: int = 100

    @classmethod
    def from_env(cls) -> GitHubRestConfig:
        """Build configuration from ``MERGELING_GITHUB_*`` env vars."""
        token = os.environ.get(TOKEN_ENV_VAR, "").strip()
        if not token:
            raise GitHubConfigError.missing_token()
        api_url = os.environ.get(API_URL_ENV_VAR, "").strip()
        if api_url:
            return cls(token=token, api_url=api_url.rstrip("/"))
        return cls(token=token)


_HTTP_ERROR_STATUS_THRESHOLD = 400


def _maybe_login(user: object) -> str | None:
    if not isinstance(user, dict):
        return None
    login = user.get("login")
    return login if isinstance(login, str) else None


def _maybe_datetime(value: object) -> dt.datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return parse_github_datetime(value)
    except ValueError:
        return None


def _require(  # noqa: ANN401
    payload: dict[str, typ.Any], key: str, kind: type, *, field: str
) -> typ.Any:
    value = payload.get(key)
    if not isinstance(value, kind):
        raise GitHubResponseShapeError.missing(field)
    return value


def _pull_request_from_payload(payload: object) -> PullRequestRef:
    """Convert a REST pull request object into a :class:`PullRequestRef`."""
    if not isinstance(payload, dict):
        raise GitHubResponseShapeError.missing("pull_request")

    number = _require(payload, "number", int, field="pull_request.number")
    head = _require(payload, "head", dict, field="pull_request.head")
    head_ref = _require(head, "ref", str, field="pull_request.head.ref")
    head_sha = _require(head, "sha", str, field="pull_request.head.sha")

    title = payload.get("title")
    url = payload.get("html_url")
    state = payload.get("mergeable_state")
    return PullRequestRef(
        number=number,
        title=title if isinstance(title, str) else "",
        url=url if isinstance(url, str) else "",
        head_ref=head_ref,
        head_sha=head_sha,
        author=_maybe_login(payload.get("user")),
        mergeable_state=state if isinstance(state, str) else None,
        created_at=_maybe_datetime(payload.get("created_at")),
        updated_at=_maybe_datetime(payload.get("updated_at")),
    )


def _check_runs_from_payload(payload: object) -> list[CheckRun]:
    if not isinstance(payload, dict):
        raise GitHubResponseShapeError.missing("response")
    runs = payload.get("check_runs")
    if not isinstance(runs, list):
        raise GitHubResponseShapeError.missing("check_runs")

    check_runs: list[CheckRun] = []
    for run in runs:
        if not isinstance(run, dict):
            raise GitHubResponseShapeError.missing("check_runs")
        name = _require(run, "name", str, field="check_runs.name")
        conclusion = run.get("conclusion")
        check_runs.append(
            CheckRun(
                name=name,
                conclusion=conclusion if isinstance(conclusion, str) else None,
            )
        )
    return check_runs


class GitHubRestClient:
    """GitHub REST v3 implementation of :class:`PullRequestGateway`."""

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def list_open_pull_requests(
        self,
        repo: RepoRef,
        *,
        sort_by: SortBy,
        sort_direction: SortDirection,
        base: str | None = None,
    ) -> list[PullRequestRef]:
        """Return the first page of open pull requests for ``repo``."""
        params: dict[str, str | int] = {
            "state": "open",
            "sort": sort_by.value,
            "direction": sort_direction.value,
            "per_page": self._config.page_size,
        }
        if base is not None:
            params["base"] = base

        payload = await self._request(
            "GET",
            f"/repos/{repo.owner}/{repo.name}/pulls",
            operation="get PRs",
            params=params,
        )
        if not isinstance(payload, list):
            raise GitHubResponseShapeError.missing("pulls")
        return [_pull_request_from_payload(item) for item in payload]

    async def get_pull_request(self, repo: RepoRef, number: int) -> PullRequestRef:
        """Return full pull request detail."""
        payload = await self._request(
            "GET",
            f"/repos/{repo.owner}/{repo.name}/pulls/{number}",
            operation="get details",
        )
        return _pull_request_from_payload(payload)

    async def list_check_runs(self, repo: RepoRef, sha: str) -> list[CheckRun]:
        """Return check runs for ``sha``."""
        payload = await self._request(
            "GET",
            f"/repos/{repo.owner}/{repo.name}/commits/{sha}/check-runs",
            operation="get pr checks",
            params={"per_page": self._config.page_size},
        )
        return _check_runs_from_payload(payload)

    async def merge_pull_request(
        self, repo: RepoRef, number: int, merge_type: MergeType
    ) -> None:
        """Merge pull request ``number`` with the configured merge method."""
        await self._request(
            "PUT",
            f"/repos/{repo.owner}/{repo.name}/pulls/{number}/merge",
            operation="merge PR",
            json={"merge_method": merge_type.value},
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        params: dict[str, str | int] | None = None,
        json: dict[str, typ.Any] | None = None,
    ) -> object:
        """Send a request and return the decoded JSON body."""
        try:
            response = await self._client.request(
                method,
                f"{self._config.api_url}{path}",
                params=params,
                json=json,
            )
        except httpx.HTTPError as exc:
            raise GitHubAPIError.transport_error(operation, exc) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(response.status_code, operation)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubResponseShapeError.missing("body") from exc
