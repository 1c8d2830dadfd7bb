#!/usr/bin/env python3
"""Jira issue import CLI.

Fetches Jira issues and writes the converted issues to stdout as JSON Lines.

Usage:
    import_issues.py                          # Import using JIRA_* settings
    import_issues.py --state open             # Only open issues of JIRA_PROJECT
    import_issues.py --jql "project = PROJ"   # Explicit JQL
    import_issues.py --check                  # Test connection and exit
"""

import argparse
import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from jira_import.client import JiraClient
from jira_import.config import get_config
from jira_import.converter import Converter
from jira_import.errors import JiraImportError
from jira_import.logging_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import Jira issues as normalized JSON Lines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                             # Import with settings from .env
  %(prog)s --state open                # Open issues of JIRA_PROJECT only
  %(prog)s --jql "project = PROJ"      # Explicit JQL
  %(prog)s --check                     # Verify credentials

Configuration (.env or environment):
    JIRA_URL=https://company.atlassian.net
    JIRA_USERNAME=user@example.com
    JIRA_API_TOKEN=your_api_token
    JIRA_PROJECT=PROJ
        """,
    )
    parser.add_argument("--jql", type=str, help="JQL query (overrides JIRA_JQL)")
    parser.add_argument(
        "--state",
        choices=["open", "closed", "all"],
        help="Status filter when no JQL is given (overrides JIRA_STATE)",
    )
    parser.add_argument(
        "--project",
        type=str,
        metavar="KEY",
        help="Project key (overrides JIRA_PROJECT)",
    )
    parser.add_argument(
        "--prefix",
        type=str,
        help="Prefix for generated issue IDs (overrides JIRA_ID_PREFIX)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Test connection and exit (no import performed)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = get_config()
    except Exception as e:
        print(f"Error: Failed to load configuration: {e}", file=sys.stderr)
        return 1

    overrides = {
        name: value
        for name, value in (
            ("jql", args.jql),
            ("state", args.state),
            ("project", args.project.upper() if args.project else None),
            ("id_prefix", args.prefix),
        )
        if value
    }
    if overrides:
        config = config.model_copy(update=overrides)

    configure_logging(config.log_level, config.log_format)

    try:
        with JiraClient(config.connection_config()) as client:
            if args.check:
                return _check(client)

            raw_issues = client.search_issues(config.jql, config.state)

        issues = Converter(config.converter_config()).convert(raw_issues)
    except KeyboardInterrupt:
        print("\nImport interrupted by user", file=sys.stderr)
        return 130
    except JiraImportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for issue in issues:
        sys.stdout.write(json.dumps(issue.to_dict()) + "\n")
    print(f"Imported {len(issues)} issues", file=sys.stderr)
    return 0


def _check(client: JiraClient) -> int:
    result = client.test_connection()
    if result["success"]:
        kind = "Jira Cloud" if client.is_cloud else "Jira Server/DC"
        print(f"Connected to {kind} at {client.base_url} as {result['user']}")
        return 0
    print(f"Error: Connection failed: {result['error']}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
