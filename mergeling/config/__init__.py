"""Run configuration: typed models and the YAML loader."""

from __future__ import annotations

from .errors import ConfigValidationError
from .loader import (
    DEFAULT_CONFIG_PATH,
    SAMPLE_CONFIG,
    build_config,
    load_config,
    parse_config,
    parse_repo_list,
    resolve_repositories,
)
from .models import (
    ConfigDocument,
    MergeConfig,
    MergeType,
    RepoRef,
    SortBy,
    SortDirection,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SAMPLE_CONFIG",
    "ConfigDocument",
    "ConfigValidationError",
    "MergeConfig",
    "MergeType",
    "RepoRef",
    "SortBy",
    "SortDirection",
    "build_config",
    "load_config",
    "parse_config",
    "parse_repo_list",
    "resolve_repositories",
]
