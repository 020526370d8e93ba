"""Errors raised while loading or validating run configuration."""

from __future__ import annotations


class ConfigValidationError(ValueError):
    """Raised when a configuration document fails validation.

    All problems found in one pass are collected into ``issues`` so users can
    fix a config file in a single edit.
    """

    def __init__(self, issues: list[str]) -> None:
        """Capture validation issues whilst preserving the aggregated message."""
        super().__init__("\n".join(issues))
        self.issues = issues

    @classmethod
    def no_repositories(cls) -> ConfigValidationError:
        """Return an error for a run with nothing to process."""
        return cls(["no repos to run for"])
