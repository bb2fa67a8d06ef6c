#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Repository Branch Access Module

Contains:
- Paginated branch listing over the GitHub GraphQL API (reader)
- Single branch ref deletion over the GitHub REST API (deleter)
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from api_client import APIClient
from config import BranchRecord
from exceptions import APIError, DeletionError, FetchError
from logger_config import get_logger

logger = get_logger(__name__)

PAGE_SIZE = 100

BRANCHES_QUERY = """
query getExistingRepoBranches($owner: String!, $repo: String!, $first: Int!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    refs(refPrefix: "refs/heads/", first: $first, after: $cursor) {
      edges {
        node {
          name
          target {
            ... on Commit {
              pushedDate
              committedDate
            }
          }
          associatedPullRequests(states: OPEN) {
            totalCount
          }
        }
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
"""


@dataclass(frozen=True)
class BranchPage:
    """One page of the branch listing."""
    items: list[BranchRecord]
    has_next_page: bool
    end_cursor: str | None


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse a GitHub ISO-8601 timestamp into an aware datetime.

    Returns:
        The timestamp in UTC, or None when absent or unparseable
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        logger.warning(f"Ignoring unparseable timestamp {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _branch_from_node(node: dict[str, Any]) -> BranchRecord:
    target = node.get('target') or {}
    # pushedDate is null on most current GitHub commits; fall back to the commit date
    last_pushed_at = parse_timestamp(target.get('pushedDate')) or parse_timestamp(target.get('committedDate'))
    pull_requests = node.get('associatedPullRequests') or {}
    return BranchRecord(
        name=node['name'],
        last_pushed_at=last_pushed_at,
        open_pull_request_count=int(pull_requests.get('totalCount') or 0),
    )


def fetch_branch_page(client: APIClient, owner: str, repo: str, cursor: str | None = None) -> BranchPage:
    """
    Fetch one page (up to 100) of branches.

    Args:
        client: GitHub API client
        owner: Repository owner
        repo: Repository name
        cursor: ``endCursor`` of the previous page, None for the first page

    Returns:
        BranchPage with the branches and pagination info

    Raises:
        FetchError: If the request fails or the response is malformed
    """
    variables = {'owner': owner, 'repo': repo, 'first': PAGE_SIZE, 'cursor': cursor}
    try:
        data = client.graphql(BRANCHES_QUERY, variables)
    except APIError as e:
        raise FetchError(f"Can not fetch branches of {owner}/{repo}: {e}", status_code=e.status_code) from e

    repository = data.get('repository')
    if not repository:
        raise FetchError(f"Can not fetch branches of {owner}/{repo}: repository not found")

    try:
        refs = repository['refs']
        items = [_branch_from_node(edge['node']) for edge in refs['edges'] if edge and edge.get('node')]
        page_info = refs['pageInfo']
    except (KeyError, TypeError, ValueError) as e:
        raise FetchError(f"Unexpected branch listing response for {owner}/{repo}: {e}") from e

    return BranchPage(
        items=items,
        has_next_page=bool(page_info.get('hasNextPage')),
        end_cursor=page_info.get('endCursor'),
    )


def fetch_all_branches(client: APIClient, owner: str, repo: str) -> list[BranchRecord]:
    """
    Fetch every branch of a repository, following pagination to the end.

    Any failing page aborts the whole fetch; no partial list is returned.

    Raises:
        FetchError: If any page cannot be fetched
    """
    branches: list[BranchRecord] = []
    cursor = None
    page_number = 0

    while True:
        page_number += 1
        page = fetch_branch_page(client, owner, repo, cursor)
        branches.extend(page.items)
        logger.debug(f"Fetched page {page_number} of {owner}/{repo}: {len(page.items)} branches")

        if not page.has_next_page:
            break
        if not page.end_cursor:
            raise FetchError(f"Branch listing of {owner}/{repo} reported another page without a cursor")
        cursor = page.end_cursor

    logger.info(f"Fetched {len(branches)} branches from {owner}/{repo}")
    return branches


def delete_branch(client: APIClient, owner: str, repo: str, branch_name: str) -> None:
    """
    Delete the ``heads/<branch_name>`` ref of a repository.

    Raises:
        DeletionError: If GitHub refuses or the request fails
    """
    endpoint = f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/git/refs/heads/{quote(branch_name, safe='/')}"
    try:
        client.delete(endpoint)
    except APIError as e:
        raise DeletionError(f"Can not delete branch {branch_name}: {e}", status_code=e.status_code) from e
    logger.debug(f"Deleted ref heads/{branch_name} in {owner}/{repo}")
