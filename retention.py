#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Branch Retention Policy Module

Decides, for one branch at a time, whether it is kept or deleted. The
decision is a pure function of the branch snapshot, the retention options,
and the evaluation time; no network access happens here.

Evaluation order (first matching rule wins):
1. name matches an exclude pattern       -> Keep
2. name matches no include pattern       -> Keep
3. branch has open pull requests         -> Keep
4. pushed within ``stalled_days`` days   -> Keep
5. otherwise                             -> Delete
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, TypeAlias

from exceptions import ConfigurationError
from patterns import matches, validate_patterns

if TYPE_CHECKING:
    from config import BranchRecord


DEFAULT_INCLUDES_BRANCH_PATTERNS: tuple[str, ...] = ("/^.*$/",)
DEFAULT_EXCLUDES_BRANCH_PATTERNS: tuple[str, ...] = ("master", "develop", "dev", "gh-pages")
DEFAULT_STALLED_DAYS = 30

SECONDS_PER_DAY = 24 * 60 * 60

IGNORED_BY_PATTERNS_REASON = "It is ignored by include/exclude patterns"


@dataclass(frozen=True)
class RetentionOptions:
    """
    Include/exclude patterns and staleness threshold for one run.

    Patterns are validated on construction so an unusable pattern fails
    before any branch is fetched.

    Attributes:
        includes_branch_patterns: Allow list; a branch must match one of these
        excludes_branch_patterns: Deny list; always wins over the allow list
        stalled_days: Branches pushed this many days ago or fewer are kept;
            0 deletes anything pushed at least one whole day ago
    """
    includes_branch_patterns: tuple[str, ...] = DEFAULT_INCLUDES_BRANCH_PATTERNS
    excludes_branch_patterns: tuple[str, ...] = DEFAULT_EXCLUDES_BRANCH_PATTERNS
    stalled_days: int = DEFAULT_STALLED_DAYS

    def __post_init__(self) -> None:
        self._freeze_patterns('includes_branch_patterns', "includesBranchPatterns")
        self._freeze_patterns('excludes_branch_patterns', "excludesBranchPatterns")
        if isinstance(self.stalled_days, bool) or not isinstance(self.stalled_days, int) or self.stalled_days < 0:
            raise ConfigurationError(
                f"stalledDays must be a non-negative integer, got {self.stalled_days!r}"
            )

    def _freeze_patterns(self, attr: str, label: str) -> None:
        value = getattr(self, attr)
        if isinstance(value, str) or value is None:
            raise ConfigurationError(f"{label} must be a list of patterns, got {value!r}")
        value = tuple(value)
        validate_patterns(value, label)
        object.__setattr__(self, attr, value)


@dataclass(frozen=True)
class Keep:
    """Decision to leave the branch alone."""
    reason: str


@dataclass(frozen=True)
class Delete:
    """Decision to delete the branch."""


Decision: TypeAlias = Keep | Delete


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def whole_days_between(now: datetime, then: datetime) -> int:
    """
    Number of complete days elapsed from ``then`` to ``now``.

    Partial days are truncated and a ``then`` in the future counts as 0.
    Naive datetimes are treated as UTC.
    """
    elapsed = (_as_utc(now) - _as_utc(then)).total_seconds()
    if elapsed <= 0:
        return 0
    return int(elapsed // SECONDS_PER_DAY)


def should_delete(branch_name: str, options: RetentionOptions) -> bool:
    """Return True if ``branch_name`` is selected by the include/exclude patterns alone."""
    if matches(branch_name, options.excludes_branch_patterns):
        return False
    return matches(branch_name, options.includes_branch_patterns)


def decide(branch: "BranchRecord", options: RetentionOptions, now: datetime) -> Decision:
    """
    Classify a single branch as Keep or Delete.

    Args:
        branch: Snapshot of the branch (name, last push time, open PR count)
        options: Retention options for this run
        now: Evaluation time

    Returns:
        Keep(reason) or Delete()

    Example:
        >>> decide(BranchRecord("master", None, 0), RetentionOptions(), now)
        Keep(reason='It is ignored by include/exclude patterns')
    """
    if not should_delete(branch.name, options):
        return Keep(IGNORED_BY_PATTERNS_REASON)

    if branch.open_pull_request_count > 0:
        return Keep(f"It has associated pull requests: {branch.open_pull_request_count}")

    if branch.last_pushed_at is None:
        return Keep("Its last push date is unknown")

    diff_days = whole_days_between(now, branch.last_pushed_at)
    if diff_days <= options.stalled_days:
        return Keep(
            f"It was last pushed {diff_days} days ago (stalled threshold: {options.stalled_days} days)"
        )

    return Delete()
