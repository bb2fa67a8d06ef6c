#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Entry Point and CLI Module for Delete GitHub Branches

Contains:
- main() function with CLI argument parsing
- Settings resolution (flags > config file > defaults) and token lookup
- Error reporting and exit status
"""

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from config import OutputFormat, build_run_options, load_config_file, resolve_settings, split_by_comma
from auth import resolve_token
from cleaner import BranchCleaner
from exceptions import BranchCleanupError, ConfigurationError, FetchError
from formatters import format_results, web_url_for
from logger_config import setup_logging, get_logger
from version import __version__

logger = get_logger(__name__)

# Diagnostics go to stderr; stdout carries the report
console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='delete-github-branches',
        description="Delete stale branches of a GitHub repository. Branches matched by the include "
                    "patterns and not by the exclude patterns are deleted when they have no open pull "
                    "request and were last pushed more than --stalledDays days ago.",
        epilog="Example: delete-github-branches --owner azu --repo delete-github-branches-test "
               "--includesBranchPatterns \"/feature\\/.*/\" --dryRun",
    )
    parser.add_argument('--owner', type=str, help='Owner name for repository: **owner**/repo')
    parser.add_argument('--repo', type=str, help='Repo name for repository: owner/**repo**')
    parser.add_argument('--token', type=str, help='GitHub token (or set GITHUB_TOKEN env)')
    parser.add_argument('--token-ref', type=str, help='1Password secret reference for the GitHub token, e.g. "op://Vault/GitHub/credential"')
    parser.add_argument('--includesBranchPatterns', '--includes-branch-patterns', dest='includes_branch_patterns',
                        type=split_by_comma, help='Include branch patterns split by comma. Default: "/^.*$/" (all)')
    parser.add_argument('--excludesBranchPatterns', '--excludes-branch-patterns', dest='excludes_branch_patterns',
                        type=split_by_comma, help='Exclude branch patterns split by comma. Default: "master,develop,dev,gh-pages"')
    parser.add_argument('--stalledDays', '--stalled-days', dest='stalled_days', type=int,
                        help='Only delete branches last pushed more than this many days ago. Default: 30')
    parser.add_argument('--baseUrl', '--base-url', dest='base_url', type=str,
                        help='GitHub API base URL. Default: https://api.github.com')
    parser.add_argument('--dryRun', '--dry-run', dest='dry_run', action='store_true', default=None,
                        help='Report what would be deleted without deleting anything')
    parser.add_argument('--config', type=str, help='Path to a JSON config file')
    parser.add_argument('--format', type=str, choices=[f.value for f in OutputFormat], default=OutputFormat.JSON.value,
                        help='Output format (default: json)')
    parser.add_argument('--output', type=str, help='Write the report to this file instead of stdout')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', type=str, help='Also write logs to this file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def _error_panel(title: str, message: str, hint: str) -> None:
    console.print(Panel(
        f"[bold red]{message}[/bold red]\n\n[dim]{hint}[/dim]",
        title=f"❌ {title}",
        style="red",
    ))


def main(argv: list[str] | None = None) -> int:
    """
    Entrypoint for the cleanup run.

    Returns:
        0 when the run completed (even if some deletions failed), 1 on a fatal error
        or when interrupted before any branch was processed
    """
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    try:
        file_settings = load_config_file(Path(args.config).resolve()) if args.config else {}
        flags = {
            'owner': args.owner,
            'repo': args.repo,
            'token': args.token,
            'base_url': args.base_url,
            'dry_run': args.dry_run,
            'includes_branch_patterns': args.includes_branch_patterns,
            'excludes_branch_patterns': args.excludes_branch_patterns,
            'stalled_days': args.stalled_days,
        }
        settings = resolve_settings(flags, file_settings)
        settings['token'] = resolve_token(settings.get('token'), args.token_ref)
        options = build_run_options(settings)

        cancel_event = threading.Event()

        def _request_stop(signum, frame) -> None:
            logger.warning("Interrupt received; stopping after the current branch")
            cancel_event.set()

        previous_handler = signal.signal(signal.SIGINT, _request_stop)
        try:
            results = BranchCleaner(options).run(cancel_event)
        finally:
            signal.signal(signal.SIGINT, previous_handler)

    except ConfigurationError as e:
        _error_panel("Configuration Error", str(e), "Check the command line options and the config file.")
        return 1
    except FetchError as e:
        _error_panel("Fetch Error", str(e), "Check the repository name, the token permissions, and your connection.")
        return 1
    except BranchCleanupError as e:
        _error_panel("Error", str(e), "The run was aborted.")
        return 1

    # Interrupted during the fetch; an empty report would read as "no branches"
    if cancel_event.is_set() and not results:
        _error_panel("Cancelled", "The run was interrupted before any branch was processed.", "No branch was deleted.")
        return 1

    report = format_results(
        OutputFormat(args.format), options.owner, options.repo, results, web_url=web_url_for(options.base_url)
    )
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report, encoding='utf-8')
        logger.info(f"Report written to {output_path}")
    else:
        sys.stdout.write(report if report.endswith('\n') else report + '\n')
    return 0


if __name__ == '__main__':
    sys.exit(main())
