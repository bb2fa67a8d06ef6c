#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Branch Name Pattern Matching Module

Patterns are "RegExp-like strings":
- ``/body/flags`` is a regular expression, searched anywhere in the name
- anything else is a literal branch name, matched exactly

Contains:
- BranchPattern compiled pattern type
- parse_pattern / compile_patterns / validate_patterns
- matches() helper used by the retention policy
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, TypeAlias

from exceptions import ConfigurationError


# Supported trailing regex flags; 'g' and 'u' are accepted for compatibility and ignored
REGEX_FLAGS = {
    'i': re.IGNORECASE,
    'm': re.MULTILINE,
    's': re.DOTALL,
    'u': 0,
    'g': 0,
}

_REGEX_LIKE = re.compile(r'^/(?P<body>.+)/(?P<flags>[a-z]*)$', re.DOTALL)


@dataclass(frozen=True)
class BranchPattern:
    """A single parsed include/exclude rule."""
    source: str
    regex: re.Pattern | None = None

    @property
    def is_regex(self) -> bool:
        return self.regex is not None

    def matches(self, name: str) -> bool:
        if self.regex is not None:
            return self.regex.search(name) is not None
        return name == self.source


PatternLike: TypeAlias = str | BranchPattern


@lru_cache(maxsize=256)
def parse_pattern(pattern: str) -> BranchPattern:
    """
    Parse a RegExp-like string into a BranchPattern.

    Args:
        pattern: Literal branch name or ``/regex/flags`` string

    Returns:
        Compiled BranchPattern

    Raises:
        ConfigurationError: If the pattern is empty, has an unknown flag,
            is missing its closing delimiter, or does not compile

    Example:
        >>> parse_pattern('/^feature\\/.*/i').matches('Feature/login')
        True
        >>> parse_pattern('master').matches('master-old')
        False
    """
    if not isinstance(pattern, str) or not pattern.strip():
        raise ConfigurationError(f"Invalid branch pattern {pattern!r}: pattern must be a non-empty string")

    if not pattern.startswith('/'):
        return BranchPattern(source=pattern)

    match = _REGEX_LIKE.match(pattern)
    if not match:
        raise ConfigurationError(
            f"Invalid branch pattern {pattern!r}: regular expressions must be written as /pattern/flags"
        )

    flags = 0
    for flag in match.group('flags'):
        if flag not in REGEX_FLAGS:
            raise ConfigurationError(
                f"Invalid branch pattern {pattern!r}: unsupported flag '{flag}' "
                f"(supported: {', '.join(sorted(REGEX_FLAGS))})"
            )
        flags |= REGEX_FLAGS[flag]

    try:
        regex = re.compile(match.group('body'), flags)
    except re.error as e:
        raise ConfigurationError(f"Invalid branch pattern {pattern!r}: {e}") from e

    return BranchPattern(source=pattern, regex=regex)


def compile_patterns(patterns: Iterable[PatternLike]) -> tuple[BranchPattern, ...]:
    """Parse every pattern, failing on the first invalid one."""
    compiled = []
    for pattern in patterns:
        if isinstance(pattern, BranchPattern):
            compiled.append(pattern)
        elif isinstance(pattern, str):
            compiled.append(parse_pattern(pattern))
        else:
            raise ConfigurationError(f"Invalid branch pattern {pattern!r}: pattern must be a non-empty string")
    return tuple(compiled)


def validate_patterns(patterns: Iterable[PatternLike], label: str = "patterns") -> None:
    """
    Fail fast on any unusable pattern.

    Raises:
        ConfigurationError: Naming the offending option and pattern
    """
    if isinstance(patterns, str):
        raise ConfigurationError(f"{label} must be a list of patterns, not a single string")
    try:
        compile_patterns(patterns)
    except ConfigurationError as e:
        raise ConfigurationError(f"{label}: {e}") from e


def matches(name: str, patterns: Iterable[PatternLike]) -> bool:
    """Return True if ``name`` matches at least one of ``patterns``."""
    return any(pattern.matches(name) for pattern in compile_patterns(patterns))
