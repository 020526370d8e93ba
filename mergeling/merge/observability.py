"""Structured log events for merge runs.

Events are emitted through femtologging as ``[event] key=value`` lines so a
log aggregator can parse them. Successes log at INFO, disqualifications at
INFO, and failures at WARNING (per pull request) or ERROR (per repository).
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from mergeling.config.errors import ConfigValidationError
from mergeling.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)
from mergeling.logging import get_logger, log_error, log_info, log_warning

from .errors import RepositoryTaskError
from .outcomes import PrDisqualified, PrErrored, PrQualified

if typ.TYPE_CHECKING:
    import datetime as dt

    from mergeling.config.models import MergeConfig

    from .outcomes import PrOutcome
    from .summary import RepoReport, RunSummary

logger = get_logger(__name__)

# HTTP status code threshold for server errors (5xx)
_HTTP_SERVER_ERROR_THRESHOLD = 500


class MergeEventType(enum.StrEnum):
    """Structured log event types for merge runs."""

    RUN_STARTED = "merge.run.started"
    RUN_COMPLETED = "merge.run.completed"
    REPO_COMPLETED = "merge.repo.completed"
    REPO_FAILED = "merge.repo.failed"
    PR_QUALIFIED = "merge.pr.qualified"
    PR_MERGED = "merge.pr.merged"
    PR_DISQUALIFIED = "merge.pr.disqualified"
    PR_ERRORED = "merge.pr.errored"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    TASK_FAILURE = "task_failure"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (GitHubResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (GitHubConfigError, ErrorCategory.CONFIGURATION),
    (ConfigValidationError, ErrorCategory.CONFIGURATION),
    (RepositoryTaskError, ErrorCategory.TASK_FAILURE),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes.

    GitHub API errors without a status code are transport failures (network
    errors and timeouts) and count as transient, like 5xx responses.
    """
    if isinstance(exc, GitHubAPIError):
        if (
            exc.status_code is None
            or exc.status_code >= _HTTP_SERVER_ERROR_THRESHOLD
        ):
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


@dataclasses.dataclass(frozen=True, slots=True)
class MergeRunContext:
    """Shared context for one merge run."""

    started_at: dt.datetime
    execute: bool
    num_repos: int


class MergeEventLogger:
    """Emit structured merge run events via femtologging."""

    def log_run_started(self, context: MergeRunContext, config: MergeConfig) -> None:
        """Log run start together with the settings that shape it."""
        log_info(
            logger,
            "[%s] started_at=%s execute=%s repos=%d base_branch=%s "
            "head_pattern=%s merge_if_blocked=%s merge_if_checks_skipped=%s "
            "merge_type=%s sort_by=%s sort_direction=%s",
            MergeEventType.RUN_STARTED,
            context.started_at.isoformat(),
            context.execute,
            context.num_repos,
            config.base_branch,
            config.head_pattern.pattern if config.head_pattern else None,
            config.merge_if_blocked,
            config.merge_if_checks_skipped,
            config.merge_type,
            config.sort_by,
            config.sort_direction,
        )

    def log_repo_report(self, report: RepoReport, *, execute: bool) -> None:
        """Log a finished repository and each of its visible pull requests.

        Elided repositories (nothing relevant to show) are not logged.
        """
        if report.elided:
            return
        for outcome in report.outcomes:
            self.log_pr_outcome(report.slug, outcome, execute=execute)

        log_info(
            logger,
            "[%s] repo_slug=%s prs_shown=%d",
            MergeEventType.REPO_COMPLETED,
            report.slug,
            len(report.outcomes),
        )

    def log_repo_failed(self, repo_slug: str, error: BaseException) -> None:
        """Log a repository-level failure with its error category."""
        log_error(
            logger,
            "[%s] repo_slug=%s error_type=%s error_category=%s error_message=%s",
            MergeEventType.REPO_FAILED,
            repo_slug,
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )

    def log_pr_outcome(
        self, repo_slug: str, outcome: PrOutcome, *, execute: bool
    ) -> None:
        """Log a single pull request outcome."""
        match outcome:
            case PrQualified():
                event = (
                    MergeEventType.PR_MERGED if execute else MergeEventType.PR_QUALIFIED
                )
                log_info(
                    logger,
                    "[%s] repo_slug=%s pr=%d url=%s qualifications=%d",
                    event,
                    repo_slug,
                    outcome.number,
                    outcome.url,
                    len(outcome.qualifications),
                )
            case PrDisqualified():
                log_info(
                    logger,
                    "[%s] repo_slug=%s pr=%d url=%s reason=%s",
                    MergeEventType.PR_DISQUALIFIED,
                    repo_slug,
                    outcome.number,
                    outcome.url,
                    outcome.reason.describe(),
                )
            case PrErrored():
                log_warning(
                    logger,
                    "[%s] repo_slug=%s pr=%d url=%s error_type=%s "
                    "error_category=%s error_message=%s",
                    MergeEventType.PR_ERRORED,
                    repo_slug,
                    outcome.number,
                    outcome.url,
                    type(outcome.error).__name__,
                    categorize_error(outcome.error),
                    outcome.message,
                )

    def log_run_completed(
        self, context: MergeRunContext, summary: RunSummary, duration: dt.timedelta
    ) -> None:
        """Log run completion with summary counts."""
        log_info(
            logger,
            "[%s] duration_seconds=%.3f repos=%d repos_with_no_prs=%d "
            "qualified=%d merged=%d disqualified=%d errors=%d",
            MergeEventType.RUN_COMPLETED,
            duration.total_seconds(),
            summary.num_repos,
            summary.num_repos_with_no_prs,
            summary.num_qualified,
            summary.num_merges,
            summary.num_disqualifications,
            summary.num_errors,
        )
