#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Exception Hierarchy for Delete GitHub Branches

Contains:
- BranchCleanupError base class
- ConfigurationError for invalid options, patterns, and config files
- APIError family for GitHub API failures (fetch and delete)
"""


class BranchCleanupError(Exception):
    """Base exception for all branch cleanup errors."""
    pass


class ConfigurationError(BranchCleanupError):
    """Raised when options, patterns, or the config file are invalid."""
    pass


class APIError(BranchCleanupError):
    """Base exception for GitHub API-related errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Raised when GitHub rejects the token (HTTP 401)."""
    pass


class FetchError(APIError):
    """Raised when any page of the branch listing cannot be fetched."""
    pass


class DeletionError(APIError):
    """Raised when a single branch ref cannot be deleted."""
    pass
