#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Unit tests for repository.py module.

Tests cover:
- Parsing of branch listing pages
- Following pagination cursors
- Whole-fetch failure when any page fails
- Branch ref deletion and its error wrapping
"""

import unittest
from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock, patch

from api_client import GitHubAPIClient
from config import BranchRecord
from exceptions import APIError, AuthenticationError, DeletionError, FetchError
from repository import PAGE_SIZE, delete_branch, fetch_all_branches, fetch_branch_page, parse_timestamp


def node(name: str, pushed: str | None = None, committed: str | None = None, prs: int = 0) -> dict[str, Any]:
    return {
        'node': {
            'name': name,
            'target': {'pushedDate': pushed, 'committedDate': committed},
            'associatedPullRequests': {'totalCount': prs},
        }
    }


def page(edges: list[dict[str, Any]], has_next: bool = False, cursor: str | None = None) -> dict[str, Any]:
    return {
        'repository': {
            'refs': {
                'edges': edges,
                'pageInfo': {'hasNextPage': has_next, 'endCursor': cursor},
            }
        }
    }


class DummyAPIClient:
    """API client stub serving pre-seeded GraphQL pages keyed by cursor."""

    def __init__(self, pages: dict[str | None, Any]) -> None:
        self._pages = pages
        self.calls: list[dict[str, Any]] = []
        self.deleted: list[str] = []

    def graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(variables)
        response = self._pages[variables['cursor']]
        if isinstance(response, Exception):
            raise response
        return response

    def delete(self, endpoint: str) -> None:
        self.deleted.append(endpoint)


class TestParseTimestamp(unittest.TestCase):
    def test_z_suffix(self):
        self.assertEqual(
            parse_timestamp('2024-06-01T10:20:30Z'),
            datetime(2024, 6, 1, 10, 20, 30, tzinfo=timezone.utc),
        )

    def test_offset_converted_to_utc(self):
        self.assertEqual(
            parse_timestamp('2024-06-01T19:00:00+09:00'),
            datetime(2024, 6, 1, 10, 0, 0, tzinfo=timezone.utc),
        )

    def test_missing_or_invalid(self):
        self.assertIsNone(parse_timestamp(None))
        self.assertIsNone(parse_timestamp(''))
        self.assertIsNone(parse_timestamp('yesterday'))


class TestFetchBranchPage(unittest.TestCase):
    """Tests for fetch_branch_page."""

    def test_parses_branches(self):
        client = DummyAPIClient({None: page([
            node('master', pushed='2024-01-01T00:00:00Z', prs=0),
            node('feature/a', pushed=None, committed='2024-02-01T00:00:00Z', prs=2),
            node('orphan'),
        ], has_next=True, cursor='abc')})

        result = fetch_branch_page(client, 'azu', 'test')

        self.assertEqual(result.items, [
            BranchRecord('master', datetime(2024, 1, 1, tzinfo=timezone.utc), 0),
            BranchRecord('feature/a', datetime(2024, 2, 1, tzinfo=timezone.utc), 2),
            BranchRecord('orphan', None, 0),
        ])
        self.assertTrue(result.has_next_page)
        self.assertEqual(result.end_cursor, 'abc')
        self.assertEqual(client.calls, [{'owner': 'azu', 'repo': 'test', 'first': PAGE_SIZE, 'cursor': None}])

    def test_pushed_date_preferred_over_committed_date(self):
        client = DummyAPIClient({None: page([
            node('x', pushed='2024-03-01T00:00:00Z', committed='2024-01-01T00:00:00Z'),
        ])})

        result = fetch_branch_page(client, 'o', 'r')

        self.assertEqual(result.items[0].last_pushed_at, datetime(2024, 3, 1, tzinfo=timezone.utc))

    def test_target_without_commit_fields(self):
        client = DummyAPIClient({None: page([{'node': {'name': 'tagish', 'target': {}}}])})

        result = fetch_branch_page(client, 'o', 'r')

        self.assertEqual(result.items, [BranchRecord('tagish', None, 0)])

    def test_api_error_becomes_fetch_error(self):
        client = DummyAPIClient({None: APIError('HTTP 502: Bad Gateway', status_code=502)})

        with self.assertRaises(FetchError) as context:
            fetch_branch_page(client, 'o', 'r')

        self.assertIn('o/r', str(context.exception))
        self.assertEqual(context.exception.status_code, 502)

    def test_missing_repository(self):
        client = DummyAPIClient({None: {'repository': None}})

        with self.assertRaises(FetchError):
            fetch_branch_page(client, 'o', 'missing')

    def test_malformed_response(self):
        client = DummyAPIClient({None: {'repository': {'refs': {'edges': []}}}})

        with self.assertRaises(FetchError):
            fetch_branch_page(client, 'o', 'r')


class TestFetchAllBranches(unittest.TestCase):
    """Tests for fetch_all_branches pagination."""

    def test_follows_cursors_in_order(self):
        client = DummyAPIClient({
            None: page([node('a'), node('b')], has_next=True, cursor='c1'),
            'c1': page([node('c')], has_next=True, cursor='c2'),
            'c2': page([node('d')], has_next=False, cursor='c3'),
        })

        branches = fetch_all_branches(client, 'o', 'r')

        self.assertEqual([b.name for b in branches], ['a', 'b', 'c', 'd'])
        self.assertEqual([call['cursor'] for call in client.calls], [None, 'c1', 'c2'])

    def test_empty_repository(self):
        client = DummyAPIClient({None: page([])})

        self.assertEqual(fetch_all_branches(client, 'o', 'r'), [])

    def test_failure_on_second_page_fails_whole_fetch(self):
        client = DummyAPIClient({
            None: page([node('a')], has_next=True, cursor='c1'),
            'c1': APIError('HTTP 502: Bad Gateway', status_code=502),
            'c2': page([node('z')]),
        })

        with self.assertRaises(FetchError):
            fetch_all_branches(client, 'o', 'r')

        self.assertEqual(len(client.calls), 2)

    @patch('api_client.requests.request')
    def test_malformed_graphql_payload_becomes_fetch_error(self, mock_request):
        for body in (None, {'errors': ['rate limited']}):
            with self.subTest(body=body):
                response = MagicMock(status_code=200, ok=True)
                response.json.return_value = body
                mock_request.return_value = response

                with self.assertRaises(FetchError):
                    fetch_all_branches(GitHubAPIClient('ghp_test'), 'o', 'r')

    def test_next_page_without_cursor(self):
        client = DummyAPIClient({None: page([node('a')], has_next=True, cursor=None)})

        with self.assertRaises(FetchError):
            fetch_all_branches(client, 'o', 'r')


class TestDeleteBranch(unittest.TestCase):
    """Tests for delete_branch."""

    def test_deletes_heads_ref(self):
        client = DummyAPIClient({})

        delete_branch(client, 'azu', 'test', 'feature/a')

        self.assertEqual(client.deleted, ['/repos/azu/test/git/refs/heads/feature/a'])

    def test_branch_name_is_url_quoted(self):
        client = DummyAPIClient({})

        delete_branch(client, 'azu', 'test', 'fix#1')

        self.assertEqual(client.deleted, ['/repos/azu/test/git/refs/heads/fix%231'])

    def test_api_error_becomes_deletion_error(self):
        client = MagicMock()
        client.delete.side_effect = APIError('HTTP 422: Reference does not exist', status_code=422)

        with self.assertRaises(DeletionError) as context:
            delete_branch(client, 'o', 'r', 'gone')

        self.assertIn('gone', str(context.exception))
        self.assertEqual(context.exception.status_code, 422)

    def test_authentication_error_becomes_deletion_error(self):
        client = MagicMock()
        client.delete.side_effect = AuthenticationError('GitHub authentication failed.', status_code=401)

        with self.assertRaises(DeletionError):
            delete_branch(client, 'o', 'r', 'x')


if __name__ == '__main__':
    unittest.main()
