#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Main Business Logic Module for Delete GitHub Branches

Contains:
- BranchCleaner class driving one cleanup run
- Per-branch failure isolation for deletions
- Cooperative cancellation between branches
"""

import threading
from datetime import datetime, timezone
from typing import Callable

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from api_client import APIClient, GitHubAPIClient
from config import BranchRecord, DecisionResult, RunOptions
from exceptions import DeletionError
from logger_config import get_logger
from repository import delete_branch, fetch_all_branches
from retention import Keep, decide

logger = get_logger(__name__)

# Progress goes to stderr so stdout stays clean for the report
console = Console(stderr=True, legacy_windows=False)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BranchCleaner:
    """Orchestrates fetching, classifying, and deleting the branches of one repository."""

    def __init__(
        self,
        options: RunOptions,
        api_client: APIClient | None = None,
        now_func: Callable[[], datetime] = utc_now,
        show_progress: bool = True,
    ) -> None:
        """
        Initialize the branch cleaner.

        Args:
            options: Run options (repository, token, dry-run flag, retention options)
            api_client: GitHub API client; built from ``options`` when omitted
            now_func: Clock used to evaluate staleness, read once per run
            show_progress: Whether to render a Rich progress bar while processing
        """
        self.options = options
        self.api = api_client
        self.now_func = now_func
        self.show_progress = show_progress

    def run(self, cancel_event: threading.Event | None = None) -> list[DecisionResult]:
        """
        Run the cleanup.

        1. Validates the options (no network call on failure)
        2. Fetches every branch; a fetch failure fails the whole run
        3. Classifies each branch in fetch order and deletes it unless dry-run
        4. Returns one DecisionResult per processed branch, in fetch order

        Args:
            cancel_event: When set, the run stops before the next branch and
                returns the results gathered so far

        Raises:
            ConfigurationError: If owner, repo, or token is missing
            FetchError: If the branch listing cannot be fetched
        """
        self.options.validate()
        if self.api is None:
            self.api = GitHubAPIClient(self.options.token, self.options.base_url)

        owner, repo = self.options.owner, self.options.repo
        mode = "dry-run" if self.options.dry_run else "delete"
        logger.info(f"Cleaning up branches of {owner}/{repo} ({mode} mode)")

        branches = fetch_all_branches(self.api, owner, repo)
        now = self.now_func()

        results: list[DecisionResult] = []
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(complete_style="green", finished_style="bold green"),
            TaskProgressColumn(),
            console=console,
            transient=True,
            disable=not self.show_progress,
        ) as progress:
            task = progress.add_task("🌿 Processing branches", total=len(branches))
            for branch in branches:
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(
                        f"Cancelled after {len(results)} of {len(branches)} branches; "
                        f"returning partial results"
                    )
                    break
                progress.update(task, description=f"🌿 {branch.name}")
                results.append(self._process_branch(branch, now))
                progress.advance(task)

        deleted = sum(1 for result in results if result.deleted)
        failed = sum(1 for result in results if result.error is not None)
        logger.info(
            f"{'Would delete' if self.options.dry_run else 'Deleted'} {deleted} of {len(results)} branches"
            + (f", {failed} deletion(s) failed" if failed else "")
        )
        return results

    def _process_branch(self, branch: BranchRecord, now: datetime) -> DecisionResult:
        """Decide on one branch and act on the decision; deletion errors become data."""
        decision = decide(branch, self.options.retention, now)

        if isinstance(decision, Keep):
            logger.info(f"Keep {branch.name}: {decision.reason}")
            return DecisionResult(branch_name=branch.name, deleted=False, reason=decision.reason)

        if self.options.dry_run:
            logger.info(f"Would delete {branch.name}")
            return DecisionResult(branch_name=branch.name, deleted=True)

        try:
            delete_branch(self.api, self.options.owner, self.options.repo, branch.name)
        except DeletionError as e:
            logger.warning(f"❌ Failed to delete {branch.name}: {e}")
            return DecisionResult(branch_name=branch.name, deleted=False, reason=str(e), error=e)

        logger.info(f"✅ Deleted {branch.name}")
        return DecisionResult(branch_name=branch.name, deleted=True)
