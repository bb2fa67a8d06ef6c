#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
GitHub API Client Module

Contains:
- APIClient protocol for structural typing
- GitHubAPIClient class for GraphQL queries and REST deletions
- Error handling and debugging for API requests
- Retry logic with exponential backoff for transient errors
"""

import requests
import time
import random
from typing import Any, Protocol

from exceptions import APIError, AuthenticationError
from logger_config import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = 'https://api.github.com'


class APIClient(Protocol):
    """Protocol defining the interface for GitHub API clients."""

    def graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object."""
        ...

    def delete(self, endpoint: str) -> None:
        """Make a DELETE request to a REST endpoint."""
        ...


def graphql_url(base_url: str) -> str:
    """
    Derive the GraphQL endpoint from a REST base URL.

    Example:
        >>> graphql_url('https://api.github.com')
        'https://api.github.com/graphql'
        >>> graphql_url('https://github.example.com/api/v3')
        'https://github.example.com/api/graphql'
    """
    base = base_url.rstrip('/')
    if base.endswith('/api/v3'):
        base = base[:-len('/v3')]
    return f"{base}/graphql"


class GitHubAPIClient:
    """HTTP client for the GitHub GraphQL and REST APIs with error handling and retry logic."""

    # Retry configuration
    MAX_RETRIES = 3
    INITIAL_BACKOFF = 1  # seconds
    MAX_BACKOFF = 30  # seconds
    RETRYABLE_STATUS_CODES = {502, 503, 504, 429}  # Bad Gateway, Service Unavailable, Gateway Timeout, Rate Limit
    TIMEOUT = 30  # seconds

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL) -> None:
        """
        Initialize the GitHub API client.

        Args:
            token: GitHub token, sent as a bearer credential
            base_url: REST API base URL (GitHub Enterprise: https://host/api/v3)
        """
        self.base_url = base_url.rstrip('/')
        self.headers = {
            'Authorization': f'bearer {token}',
            'Accept': 'application/vnd.github+json',
            'Content-Type': 'application/json'
        }

    def _exponential_backoff_with_jitter(self, attempt: int) -> float:
        """
        Calculate exponential backoff time with jitter.

        Args:
            attempt: Current retry attempt (0-indexed)

        Returns:
            Time to wait in seconds
        """
        backoff = min(self.INITIAL_BACKOFF * (2 ** attempt), self.MAX_BACKOFF)
        jitter = random.uniform(0, backoff * 0.1)  # Add up to 10% jitter
        return backoff + jitter

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Send a request, retrying transient failures.

        Raises:
            AuthenticationError: If GitHub rejects the token
            APIError: On network errors, timeouts, or non-2xx responses
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                resp = requests.request(method, url, headers=self.headers, timeout=self.TIMEOUT, **kwargs)

                if resp.status_code == 401:
                    raise AuthenticationError(
                        "GitHub authentication failed. Please check your GitHub token.",
                        status_code=401,
                    )

                if resp.status_code in self.RETRYABLE_STATUS_CODES and attempt < self.MAX_RETRIES - 1:
                    wait_time = self._exponential_backoff_with_jitter(attempt)
                    logger.warning(
                        f"🔄 GitHub returned {resp.status_code}. "
                        f"Retrying in {wait_time:.2f}s (attempt {attempt + 1}/{self.MAX_RETRIES})..."
                    )
                    time.sleep(wait_time)
                    continue

                break

            except requests.exceptions.Timeout:
                if attempt < self.MAX_RETRIES - 1:
                    wait_time = self._exponential_backoff_with_jitter(attempt)
                    logger.warning(
                        f"⏱️  Request timeout. Retrying in {wait_time:.2f}s "
                        f"(attempt {attempt + 1}/{self.MAX_RETRIES})..."
                    )
                    time.sleep(wait_time)
                    continue
                raise APIError(f"Network timeout while accessing {url}") from None
            except requests.exceptions.ConnectionError as e:
                if attempt < self.MAX_RETRIES - 1:
                    wait_time = self._exponential_backoff_with_jitter(attempt)
                    logger.warning(
                        f"🌐 Connection error. Retrying in {wait_time:.2f}s "
                        f"(attempt {attempt + 1}/{self.MAX_RETRIES})..."
                    )
                    time.sleep(wait_time)
                    continue
                raise APIError(f"Network error while accessing {url}: {e}") from e
            except requests.exceptions.RequestException as e:
                raise APIError(f"Network error while accessing {url}: {e}") from e

        if not resp.ok:
            error_msg = f"API Request failed:\n  {method} {url}\n  Status: {resp.status_code}"
            try:
                error_detail = resp.json().get('message', resp.text)
                error_msg += f"\n  Error: {error_detail}"
            except Exception:
                error_detail = resp.text
                error_msg += f"\n  Response: {resp.text}"

            logger.debug(error_msg)
            raise APIError(f"HTTP {resp.status_code}: {error_detail}", status_code=resp.status_code)

        return resp

    def graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """
        Run a GraphQL query.

        Args:
            query: GraphQL document
            variables: Query variables

        Returns:
            The ``data`` object of the response

        Raises:
            AuthenticationError: If the token is rejected
            APIError: If the request fails or the response carries GraphQL errors
        """
        url = graphql_url(self.base_url)
        resp = self._request('POST', url, json={'query': query, 'variables': variables})

        try:
            payload = resp.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON response from {url}: {e}") from e

        if not isinstance(payload, dict):
            raise APIError(f"Unexpected GraphQL response from {url}: expected a JSON object, got {type(payload).__name__}")

        errors = payload.get('errors')
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            messages = '; '.join(
                str(error.get('message', error) if isinstance(error, dict) else error) for error in errors
            )
            raise APIError(f"GraphQL query failed: {messages}")

        data = payload.get('data')
        if not isinstance(data, dict):
            raise APIError(f"GraphQL response from {url} has no data")
        return data

    def delete(self, endpoint: str) -> None:
        """
        Make a DELETE request to a REST endpoint.

        Args:
            endpoint: API endpoint (without base URL), e.g. ``/repos/o/r/git/refs/heads/x``

        Raises:
            AuthenticationError: If the token is rejected
            APIError: If the request fails
        """
        self._request('DELETE', f"{self.base_url}{endpoint}")
