"""Unit tests for merge run observability."""

from __future__ import annotations

import datetime as dt

import pytest

from mergeling.config import ConfigValidationError
from mergeling.github import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)
from mergeling.merge import (
    ErrorCategory,
    MergeEventLogger,
    MergeEventType,
    MergeRunContext,
    PrDisqualified,
    PrErrored,
    PrQualified,
    RepoReport,
    RepositoryTaskError,
    RunSummary,
    StateRejected,
    categorize_error,
)
from tests.helpers.femtologging_capture import capture_femto_logs
from tests.unit.merge_test_helpers import make_config

_LOGGER = "mergeling.merge.observability"
_URL = "https://github.com/octo/reef/pull/4"


class TestCategorizeError:
    """Tests for error categorization."""

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (GitHubAPIError.http_error(502, "get PRs"), ErrorCategory.TRANSIENT),
            (GitHubAPIError.http_error(404, "get PRs"), ErrorCategory.CLIENT_ERROR),
            (
                GitHubAPIError.transport_error("get PRs", TimeoutError("slow")),
                ErrorCategory.TRANSIENT,
            ),
            (GitHubResponseShapeError.missing("head"), ErrorCategory.SCHEMA_DRIFT),
            (GitHubConfigError.missing_token(), ErrorCategory.CONFIGURATION),
            (ConfigValidationError.no_repositories(), ErrorCategory.CONFIGURATION),
            (RepositoryTaskError.cancelled(), ErrorCategory.TASK_FAILURE),
            (ValueError("odd"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_categories(self, exc: BaseException, expected: ErrorCategory) -> None:
        """Each error family maps onto its alerting category."""
        assert categorize_error(exc) == expected


class TestMergeEventLogger:
    """Tests for MergeEventLogger."""

    @pytest.fixture
    def context(self) -> MergeRunContext:
        """Return a sample run context."""
        return MergeRunContext(
            started_at=dt.datetime(2025, 1, 15, 12, 0, tzinfo=dt.UTC),
            execute=True,
            num_repos=2,
        )

    def test_run_started(self, context: MergeRunContext) -> None:
        """Run start logs the settings at INFO."""
        with capture_femto_logs(_LOGGER) as capture:
            MergeEventLogger().log_run_started(
                context, make_config(head_pattern="^dependabot/")
            )
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level == "INFO"
        assert MergeEventType.RUN_STARTED in record.message
        assert "execute=True" in record.message
        assert "head_pattern=^dependabot/" in record.message
        assert "merge_type=squash" in record.message

    def test_pr_events(self) -> None:
        """Qualified PRs log at INFO and errored PRs at WARN."""
        qualified = PrQualified(
            number=4,
            title="Bump",
            url=_URL,
            created_at=None,
            updated_at=None,
            qualifications=(),
        )
        disqualified = PrDisqualified(
            number=5,
            title="Bump",
            url=_URL,
            created_at=None,
            updated_at=None,
            qualifications=(),
            reason=StateRejected("dirty"),
        )
        errored = PrErrored(
            number=6,
            title="Bump",
            url=_URL,
            created_at=None,
            updated_at=None,
            qualifications=(),
            error=GitHubAPIError.http_error(503, "get details"),
        )
        report = RepoReport(
            slug="octo/reef", outcomes=(qualified, disqualified, errored)
        )

        with capture_femto_logs(_LOGGER) as capture:
            MergeEventLogger().log_repo_report(report, execute=False)
            capture.wait_for_count(4)

        levels = [record.level for record in capture.records]
        messages = [record.message for record in capture.records]
        assert levels == ["INFO", "INFO", "WARN", "INFO"]
        assert messages[0].startswith(f"[{MergeEventType.PR_QUALIFIED}]")
        assert "reason=state: dirty" in messages[1]
        assert "error_category=transient" in messages[2]
        assert messages[3].startswith(f"[{MergeEventType.REPO_COMPLETED}]")
        assert "prs_shown=3" in messages[3]

    def test_repo_failed(self) -> None:
        """Repository failures log at ERROR with the exception attached."""
        error = GitHubAPIError.http_error(404, "get PRs")

        with capture_femto_logs(_LOGGER) as capture:
            MergeEventLogger().log_repo_failed("octo/reef", error)
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level == "ERROR"
        assert "error_category=client_error" in record.message
        assert "error_type=GitHubAPIError" in record.message
        assert record.exc_info is not None

    def test_run_completed(self, context: MergeRunContext) -> None:
        """Run completion logs the summary counts."""
        summary = RunSummary(
            num_repos=2, num_qualified=1, num_disqualifications=3, num_errors=1
        )

        with capture_femto_logs(_LOGGER) as capture:
            MergeEventLogger().log_run_completed(
                context, summary, dt.timedelta(seconds=1.5)
            )
            capture.wait_for_count(1)

        message = capture.records[0].message
        assert "duration_seconds=1.500" in message
        assert "qualified=1 merged=0 disqualified=3 errors=1" in message

    def test_elided_repo_is_not_logged(self, context: MergeRunContext) -> None:
        """An elided report emits no repository event."""
        with capture_femto_logs(_LOGGER) as capture:
            events = MergeEventLogger()
            events.log_repo_report(
                RepoReport(slug="octo/kelp", elided=True), execute=False
            )
            events.log_run_completed(context, RunSummary(), dt.timedelta(0))
            capture.wait_for_count(1)

        assert [r.message.split("]")[0] for r in capture.records] == [
            f"[{MergeEventType.RUN_COMPLETED}"
        ]
