"""Pull request qualification, repository fan-out, and run aggregation."""

from __future__ import annotations

from .coordinator import DEFAULT_MAX_CONCURRENCY, iter_repository_outcomes
from .errors import MergeRunError, RepositoryTaskError, SummaryFinalizedError
from .observability import (
    ErrorCategory,
    MergeEventLogger,
    MergeEventType,
    MergeRunContext,
    categorize_error,
)
from .outcomes import (
    CheckPassed,
    CheckRejected,
    Disqualification,
    HeadMatched,
    HeadMismatch,
    PrDisqualified,
    PrErrored,
    PrOutcome,
    PrQualified,
    Qualification,
    RepoErrored,
    RepoFinished,
    RepoOutcome,
    StateAccepted,
    StateRejected,
    TrustedAuthor,
    UntrustedAuthor,
)
from .processor import process_repository
from .qualify import evaluate_pull_request
from .service import run_merge
from .summary import (
    MergedPullRequest,
    RepoReport,
    RunAggregator,
    RunBehaviours,
    RunSummary,
)

__all__ = [
    "DEFAULT_MAX_CONCURRENCY",
    "CheckPassed",
    "CheckRejected",
    "Disqualification",
    "ErrorCategory",
    "HeadMatched",
    "HeadMismatch",
    "MergeEventLogger",
    "MergeEventType",
    "MergeRunContext",
    "MergeRunError",
    "MergedPullRequest",
    "PrDisqualified",
    "PrErrored",
    "PrOutcome",
    "PrQualified",
    "Qualification",
    "RepoErrored",
    "RepoFinished",
    "RepoOutcome",
    "RepoReport",
    "RepositoryTaskError",
    "RunAggregator",
    "RunBehaviours",
    "RunSummary",
    "StateAccepted",
    "StateRejected",
    "SummaryFinalizedError",
    "TrustedAuthor",
    "UntrustedAuthor",
    "categorize_error",
    "evaluate_pull_request",
    "iter_repository_outcomes",
    "process_repository",
    "run_merge",
]
