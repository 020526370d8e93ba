"""GitHub gateway errors."""

from __future__ import annotations


class GitHubError(RuntimeError):
    """Base class for failures talking to GitHub.

    The merge pipeline treats every subclass as a recoverable gateway error
    and records it against the pull request or repository being processed.
    """


class GitHubAPIError(GitHubError):
    """Raised when GitHub returns an error response or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, operation: str) -> GitHubAPIError:
        """Return an error for a non-2xx HTTP response."""
        return cls(
            f"couldn't {operation}: GitHub REST HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def transport_error(cls, operation: str, exc: BaseException) -> GitHubAPIError:
        """Return an error for network failures and timeouts."""
        return cls(f"couldn't {operation}: {type(exc).__name__}: {exc}")


class GitHubResponseShapeError(GitHubError):
    """Raised when GitHub responses are missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"GitHub REST response missing expected field: {field}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("MERGELING_GITHUB_TOKEN is required for GitHub API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")
