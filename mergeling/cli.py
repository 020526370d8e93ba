"""Command-line interface for mergeling.

Usage:
    mergeling run --config mergeling.yaml            # dry run
    mergeling run --config mergeling.yaml --execute  # merge qualifying PRs
    mergeling config validate --path mergeling.yaml
    mergeling config sample

Environment variables:
    MERGELING_GITHUB_TOKEN   - GitHub token used by ``run`` (required)
    MERGELING_GITHUB_API_URL - GitHub API base URL (default: api.github.com)
    MERGELING_LOG_LEVEL      - Log level (default: INFO)
"""

from __future__ import annotations

import asyncio
import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from mergeling import __version__
from mergeling.config import (
    DEFAULT_CONFIG_PATH,
    SAMPLE_CONFIG,
    ConfigValidationError,
    load_config,
    parse_repo_list,
    resolve_repositories,
)
from mergeling.github import GitHubConfigError, GitHubRestClient, GitHubRestConfig
from mergeling.logging import (
    LOG_LEVEL_ENV_VAR,
    configure_logging,
    get_logger,
    log_warning,
)
from mergeling.merge import RunBehaviours, run_merge

if typ.TYPE_CHECKING:
    from mergeling.config import MergeConfig
    from mergeling.merge import RunSummary

logger = get_logger(__name__)

app = App(
    name="mergeling",
    help="mergeling merges your open PRs",
    version=__version__,
)
config_app = App(name="config", help="Interact with mergeling's config")
app.command(config_app)


def _build_gateway(gateway_config: GitHubRestConfig) -> GitHubRestClient:
    return GitHubRestClient(gateway_config)


def _split_repos(raw: str | None) -> list[str]:
    if raw is None:
        return []
    return [part for part in (item.strip() for item in raw.split(",")) if part]


def _print_config_issues(source: str, exc: ConfigValidationError) -> None:
    print(f"{source} is invalid:", file=sys.stderr)
    for issue in exc.issues:
        print(f"  - {issue}", file=sys.stderr)


def format_summary(summary: RunSummary, behaviours: RunBehaviours) -> str:
    """Render the end-of-run statistics block."""
    lines = [
        "===========================",
        "",
        "  Stats",
        "",
        f"  #repos checked            : {summary.num_repos}",
        f"  #repos with no PRs        : {summary.num_repos_with_no_prs}",
        f"  #PRs qualified            : {summary.num_qualified}",
        f"  #PRs merged               : {summary.num_merges}",
        f"  #PRs disqualified         : {summary.num_disqualifications}",
        f"  #errors encountered       : {summary.num_errors}",
    ]
    if summary.prs_merged:
        lines += ["", "  PRs merged:"]
        lines += [f"    - {pr.repo}: {pr.title}" for pr in summary.prs_merged]
    if summary.disqualifications and not behaviours.skip_disqualifications_in_summary:
        lines += ["", "  Disqualifications:"]
        lines += [f"    - {url}: {reason}" for url, reason in summary.disqualifications]
    if summary.errors:
        lines += ["", "  Errors:"]
        lines += [f"    - {source}: {message}" for source, message in summary.errors]
    lines += ["", "==========================="]
    return "\n".join(lines)


async def _run_with_gateway(
    config: MergeConfig,
    gateway_config: GitHubRestConfig,
    behaviours: RunBehaviours,
) -> RunSummary:
    gateway = _build_gateway(gateway_config)
    try:
        return await run_merge(config, gateway, behaviours=behaviours)
    finally:
        await gateway.aclose()


@app.command
def run(  # noqa: PLR0913
    *,
    config: typ.Annotated[
        Path, Parameter(name=["--config", "-c"])
    ] = DEFAULT_CONFIG_PATH,
    execute: typ.Annotated[bool, Parameter(name=["--execute", "-e"])] = False,
    repos: str | None = None,
    show_repos_with_no_prs: bool = False,
    show_prs_from_untrusted_authors: bool = False,
    show_prs_with_unmatched_head: bool = False,
    skip_disqualifications_in_summary: bool = False,
    log_level: typ.Annotated[str | None, Parameter(env_var=LOG_LEVEL_ENV_VAR)] = None,
) -> int:
    """Check for open PRs and merge the ones that qualify.

    Without ``--execute`` this is a dry run: PRs are classified but never
    merged.

    Args:
        config: Path to mergeling's config file.
        execute: Merge qualifying PRs instead of only reporting them.
        repos: Comma-separated ``owner/name`` list overriding the config file.
        show_repos_with_no_prs: Report repositories with no relevant PRs.
        show_prs_from_untrusted_authors: Report PRs from untrusted authors.
        show_prs_with_unmatched_head: Report PRs whose head doesn't match.
        skip_disqualifications_in_summary: Leave disqualifications out of
            the summary.
        log_level: Log level for structured run events.

    Returns:
        Exit code: 0 when the run completed, 1 on configuration errors.

    """
    normalized_level, invalid_level = configure_logging(log_level, force=True)
    if invalid_level and log_level is not None:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            log_level,
            normalized_level,
        )

    try:
        overrides = parse_repo_list(_split_repos(repos))
    except ConfigValidationError as exc:
        _print_config_issues("--repos", exc)
        return 1

    try:
        merge_config = resolve_repositories(load_config(config), overrides)
        gateway_config = GitHubRestConfig.from_env()
    except ConfigValidationError as exc:
        _print_config_issues(f"config {config}", exc)
        return 1
    except GitHubConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    behaviours = RunBehaviours(
        execute=execute,
        show_repos_with_no_prs=show_repos_with_no_prs,
        show_prs_from_untrusted_authors=show_prs_from_untrusted_authors,
        show_prs_with_unmatched_head=show_prs_with_unmatched_head,
        skip_disqualifications_in_summary=skip_disqualifications_in_summary,
    )
    summary = asyncio.run(_run_with_gateway(merge_config, gateway_config, behaviours))
    print(format_summary(summary, behaviours))
    return 0


@config_app.command
def validate(
    *,
    path: typ.Annotated[
        Path, Parameter(name=["--path", "-p"])
    ] = DEFAULT_CONFIG_PATH,
) -> int:
    """Validate mergeling's config.

    Args:
        path: Path to mergeling's config file.

    Returns:
        Exit code: 0 when the config is valid, 1 otherwise.

    """
    try:
        load_config(path)
    except ConfigValidationError as exc:
        _print_config_issues(f"config {path}", exc)
        return 1
    print("config looks good")
    return 0


@config_app.command
def sample() -> int:
    """Print out a sample config."""
    print(SAMPLE_CONFIG, end="")
    return 0


def main() -> int:
    """Entry point for the CLI."""
    return app()


if __name__ == "__main__":
    sys.exit(main())
