#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Result Formatting Module for Delete GitHub Branches

Contains:
- JSON formatter (verbatim dump of the decision results)
- Markdown formatter ("Deleted Branches" / "Active Branches" report)
- Dispatch by OutputFormat
"""

import json
from urllib.parse import quote

from config import DecisionResult, OutputFormat

DEFAULT_WEB_URL = 'https://github.com'


def web_url_for(base_url: str) -> str:
    """
    Derive the web UI root from an API base URL.

    Example:
        >>> web_url_for('https://api.github.com')
        'https://github.com'
        >>> web_url_for('https://github.example.com/api/v3')
        'https://github.example.com'
    """
    base = base_url.rstrip('/')
    if base.endswith('/api/v3'):
        return base[:-len('/api/v3')]
    return DEFAULT_WEB_URL


def format_json(owner: str, repo: str, results: list[DecisionResult]) -> str:
    """Render the results as an indented JSON array."""
    return json.dumps([result.to_dict() for result in results], indent=4, ensure_ascii=False)


def _quote_reason(reason: str | None) -> str:
    if not reason:
        return "> No reason"
    return "\n".join(f"> {line}" for line in reason.split("\n"))


def format_markdown(owner: str, repo: str, results: list[DecisionResult], web_url: str = DEFAULT_WEB_URL) -> str:
    """
    Render the results as a two-section Markdown report.

    Each entry links to the branch on the web UI, followed by its reason as
    a block quote ("No reason" when there is none).
    """
    def format_result(result: DecisionResult) -> str:
        link = f"{web_url}/{owner}/{repo}/tree/{quote(result.branch_name, safe='/')}"
        return f"- [{result.branch_name}]({link})\n{_quote_reason(result.reason)}"

    deleted = [format_result(result) for result in results if result.deleted]
    active = [format_result(result) for result in results if not result.deleted]

    sections = [
        "# Deleted Branches",
        "\n".join(deleted),
        "# Active Branches",
        "\n".join(active),
    ]
    return "\n\n".join(sections).rstrip() + "\n"


def format_results(
    output_format: OutputFormat,
    owner: str,
    repo: str,
    results: list[DecisionResult],
    web_url: str = DEFAULT_WEB_URL,
) -> str:
    """Render ``results`` in the requested format."""
    if output_format is OutputFormat.MARKDOWN:
        return format_markdown(owner, repo, results, web_url=web_url)
    return format_json(owner, repo, results)
