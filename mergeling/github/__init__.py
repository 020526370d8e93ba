"""GitHub gateway: the pull request API surface the merge pipeline calls."""

from __future__ import annotations

from .client import GitHubRestClient, GitHubRestConfig, PullRequestGateway
from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubError,
    GitHubResponseShapeError,
)
from .models import CheckRun, MergeableState, PullRequestRef

__all__ = [
    "CheckRun",
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubError",
    "GitHubResponseShapeError",
    "GitHubRestClient",
    "GitHubRestConfig",
    "MergeableState",
    "PullRequestGateway",
    "PullRequestRef",
]
