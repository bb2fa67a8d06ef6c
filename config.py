#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Configuration and Data Models for Delete GitHub Branches

Contains:
- BranchRecord dataclass for fetched branch snapshots
- DecisionResult dataclass for per-branch outcomes
- RunOptions dataclass for one cleanup run
- Config file loading and flag > file > default settings resolution
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, TypeAlias

from api_client import DEFAULT_BASE_URL
from exceptions import ConfigurationError
from retention import (
    DEFAULT_EXCLUDES_BRANCH_PATTERNS,
    DEFAULT_INCLUDES_BRANCH_PATTERNS,
    DEFAULT_STALLED_DAYS,
    RetentionOptions,
)

# Type aliases for clarity
Settings: TypeAlias = dict[str, Any]


class OutputFormat(Enum):
    """Enumeration of supported output formats."""
    JSON = "json"
    MARKDOWN = "markdown"


# Config file key -> RunOptions setting name.
# camelCase keys match the CLI flags; snake_case spellings are accepted too.
CONFIG_KEYS = {
    'owner': 'owner',
    'repo': 'repo',
    'token': 'token',
    'baseUrl': 'base_url',
    'base_url': 'base_url',
    'dryRun': 'dry_run',
    'dry_run': 'dry_run',
    'includesBranchPatterns': 'includes_branch_patterns',
    'includes_branch_patterns': 'includes_branch_patterns',
    'excludesBranchPatterns': 'excludes_branch_patterns',
    'excludes_branch_patterns': 'excludes_branch_patterns',
    'stalledDays': 'stalled_days',
    'stalled_days': 'stalled_days',
}

SETTING_TYPES: dict[str, type] = {
    'owner': str,
    'repo': str,
    'token': str,
    'base_url': str,
    'dry_run': bool,
    'includes_branch_patterns': list,
    'excludes_branch_patterns': list,
    'stalled_days': int,
}

DEFAULT_SETTINGS: Settings = {
    'base_url': DEFAULT_BASE_URL,
    'dry_run': False,
    'includes_branch_patterns': list(DEFAULT_INCLUDES_BRANCH_PATTERNS),
    'excludes_branch_patterns': list(DEFAULT_EXCLUDES_BRANCH_PATTERNS),
    'stalled_days': DEFAULT_STALLED_DAYS,
}


@dataclass(frozen=True)
class BranchRecord:
    """
    Snapshot of one remote branch, fetched once per run.

    Attributes:
        name: Branch name without the ``refs/heads/`` prefix
        last_pushed_at: Push (or commit) time of the branch tip, None if unknown
        open_pull_request_count: Number of open pull requests whose head is this branch
    """
    name: str
    last_pushed_at: datetime | None = None
    open_pull_request_count: int = 0


@dataclass(frozen=True)
class DecisionResult:
    """
    Outcome for one branch of a cleanup run.

    ``deleted`` is True when the branch was deleted, or in dry-run mode when
    it would have been. ``error`` is only set when the delete call failed.
    """
    branch_name: str
    deleted: bool
    reason: str | None = None
    error: Exception | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serializable form using the camelCase keys of the JSON report."""
        data: dict[str, Any] = {'branchName': self.branch_name, 'deleted': self.deleted}
        if self.reason is not None:
            data['reason'] = self.reason
        if self.error is not None:
            data['error'] = str(self.error)
        return data


@dataclass
class RunOptions:
    """
    Configuration settings for one cleanup run.

    Attributes:
        owner: Repository owner (user or organization)
        repo: Repository name
        token: GitHub token used as a bearer credential
        base_url: GitHub REST API base URL (GitHub Enterprise: https://host/api/v3)
        dry_run: Compute decisions without deleting anything
        retention: Include/exclude patterns and staleness threshold

    Example:
        >>> options = RunOptions(owner="azu", repo="delete-github-branches-test", token="ghp_...")
    """
    owner: str
    repo: str
    token: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    dry_run: bool = False
    retention: RetentionOptions = field(default_factory=RetentionOptions)

    def validate(self) -> None:
        """
        Check the required fields before any network call is made.

        Raises:
            ConfigurationError: If owner, repo, or token is missing
        """
        missing = [name for name in ('owner', 'repo', 'token') if not getattr(self, name)]
        if missing:
            raise ConfigurationError(f"Missing required option(s): {', '.join(missing)}")


def load_config_file(file_path: str | Path) -> Settings:
    """
    Load a JSON config file into a partial settings dict.

    Args:
        file_path: Path to the JSON config file

    Returns:
        Settings keyed by RunOptions setting name; only keys present in the file

    Raises:
        ConfigurationError: If the file cannot be read or parsed, is not a JSON
            object, or contains unknown keys or wrongly typed values

    Example:
        >>> load_config_file("delete-github-branches.json")
        {'owner': 'azu', 'excludes_branch_patterns': ['master', '/feature/.*/']}
    """
    path = Path(file_path)
    try:
        document = json.loads(path.read_text(encoding='utf-8'))
    except OSError as e:
        raise ConfigurationError(f"Can not load config file {path}: {e}") from e
    except ValueError as e:
        raise ConfigurationError(f"Can not parse config file {path}: {e}") from e

    if not isinstance(document, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")

    settings: Settings = {}
    for key, value in document.items():
        name = CONFIG_KEYS.get(key)
        if name is None:
            raise ConfigurationError(f"Unknown key '{key}' in config file {path}")
        settings[name] = _check_setting_type(name, value, source=str(path))
    return settings


def _check_setting_type(name: str, value: Any, source: str) -> Any:
    expected = SETTING_TYPES[name]
    # bool is a subclass of int; reject it for stalled_days
    if expected is int and isinstance(value, bool):
        raise ConfigurationError(f"'{name}' in {source} must be an integer, got {value!r}")
    if not isinstance(value, expected):
        raise ConfigurationError(
            f"'{name}' in {source} must be of type {expected.__name__}, got {type(value).__name__}"
        )
    if expected is list and not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"'{name}' in {source} must be a list of strings")
    return value


def split_by_comma(value: str) -> list[str]:
    """
    Split a comma-separated command-line pattern list.

    Example:
        >>> split_by_comma("master, develop,/^feature-.*/")
        ['master', 'develop', '/^feature-.*/']
    """
    return [item.strip() for item in value.split(',') if item.strip()]


def resolve_settings(flags: Settings, file_settings: Settings, defaults: Settings | None = None) -> Settings:
    """
    Merge settings from three tiers: command-line flags > config file > defaults.

    A tier only contributes keys whose value is not None, so an omitted flag
    never masks a config file value.

    Example:
        >>> resolve_settings({'dry_run': True, 'owner': None}, {'owner': 'azu'})['owner']
        'azu'
    """
    resolved: Settings = dict(DEFAULT_SETTINGS if defaults is None else defaults)
    for tier in (file_settings, flags):
        resolved.update({key: value for key, value in tier.items() if value is not None})
    return resolved


def build_run_options(settings: Settings) -> RunOptions:
    """
    Construct RunOptions from resolved settings.

    Raises:
        ConfigurationError: If a pattern or the staleness threshold is invalid
    """
    retention = RetentionOptions(
        includes_branch_patterns=settings.get('includes_branch_patterns', DEFAULT_INCLUDES_BRANCH_PATTERNS),
        excludes_branch_patterns=settings.get('excludes_branch_patterns', DEFAULT_EXCLUDES_BRANCH_PATTERNS),
        stalled_days=settings.get('stalled_days', DEFAULT_STALLED_DAYS),
    )
    return RunOptions(
        owner=settings.get('owner') or '',
        repo=settings.get('repo') or '',
        token=settings.get('token') or '',
        base_url=(settings.get('base_url') or DEFAULT_BASE_URL).rstrip('/'),
        dry_run=bool(settings.get('dry_run', False)),
        retention=retention,
    )
