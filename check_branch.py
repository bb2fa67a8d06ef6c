#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Branch Name Check CLI for Delete GitHub Branches

Tells whether branch names would be selected for deletion by the include /
exclude patterns alone (no GitHub access). Exit status 1 means at least one
name is matched and would be deleted, 0 means none is. Configuration errors
exit with 2.

USAGE:
    delete-github-branches-check-branch-name "feature/009"   # exit 0
    delete-github-branches-check-branch-name "patch-101"     # exit 1
"""

import argparse
import json
import sys
from pathlib import Path

from config import load_config_file, resolve_settings, split_by_comma
from exceptions import ConfigurationError
from retention import RetentionOptions, should_delete


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='delete-github-branches-check-branch-name',
        description="Exit with 1 if a branch name is matched by the delete patterns, 0 otherwise.",
    )
    parser.add_argument('branch_names', nargs='+', metavar='branchName', help='Branch name(s) to check')
    parser.add_argument('--includesBranchPatterns', '--includes-branch-patterns', dest='includes_branch_patterns',
                        type=split_by_comma, help='Include branch patterns split by comma. Default: "/^.*$/" (all)')
    parser.add_argument('--excludesBranchPatterns', '--excludes-branch-patterns', dest='excludes_branch_patterns',
                        type=split_by_comma, help='Exclude branch patterns split by comma. Default: "master,develop,dev,gh-pages"')
    parser.add_argument('--config', type=str, help='Path to a JSON config file')
    return parser


def check_branch_names(branch_names: list[str], options: RetentionOptions) -> tuple[int, str]:
    """
    Check names against the patterns.

    Returns:
        (exit status, message); status 1 if any name would be deleted
    """
    patterns = json.dumps(
        {
            'includesBranchPatterns': list(options.includes_branch_patterns),
            'excludesBranchPatterns': list(options.excludes_branch_patterns),
        },
        indent=4,
    )
    deleted = [name for name in branch_names if should_delete(name, options)]
    if deleted:
        return 1, f"{','.join(deleted)} is matched by delete-github-branches's patterns:\n{patterns}"
    return 0, f"{','.join(branch_names)} is not matched by delete-github-branches's patterns:\n{patterns}"


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        file_settings = load_config_file(Path(args.config).resolve()) if args.config else {}
        settings = resolve_settings(
            {
                'includes_branch_patterns': args.includes_branch_patterns,
                'excludes_branch_patterns': args.excludes_branch_patterns,
            },
            file_settings,
        )
        options = RetentionOptions(
            includes_branch_patterns=settings['includes_branch_patterns'],
            excludes_branch_patterns=settings['excludes_branch_patterns'],
        )
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    status, message = check_branch_names(args.branch_names, options)
    print(message)
    return status


if __name__ == '__main__':
    sys.exit(main())
