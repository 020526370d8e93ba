"""Errors specific to the merge pipeline."""

from __future__ import annotations


class MergeRunError(Exception):
    """Base class for merge pipeline errors."""


class RepositoryTaskError(MergeRunError):
    """Raised when a repository task crashes or is cancelled.

    The coordinator never lets this escape; it is stored on a
    :class:`~mergeling.merge.outcomes.RepoErrored` so the run carries on.
    """

    @classmethod
    def crashed(cls, exc: BaseException) -> RepositoryTaskError:
        """Return an error wrapping an exception raised inside the task."""
        error = cls(f"couldn't join merge task: {type(exc).__name__}: {exc}")
        error.__cause__ = exc
        return error

    @classmethod
    def cancelled(cls) -> RepositoryTaskError:
        """Return an error for a task that was cancelled before finishing."""
        return cls("couldn't join merge task: task was cancelled")


class SummaryFinalizedError(MergeRunError):
    """Raised when a run summary is used after it has been finalized."""

    def __init__(self) -> None:
        """Initialise with a fixed message."""
        super().__init__("run summary has already been finalized")
