"""Command-line argument parsing for CalendarHub."""

import argparse
from pathlib import Path

from .. import __version__

LOG_LEVEL_CHOICES = ["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"]


def create_parser() -> argparse.ArgumentParser:
    """Create the command line argument parser.

    Returns:
        argparse.ArgumentParser: Parser with global options and the
            ``refresh``, ``cached`` and ``status`` commands

    Example:
        >>> parser = create_parser()
        >>> args = parser.parse_args(["--verbose", "refresh", "--json"])
        >>> args.command
        'refresh'
    """
    parser = argparse.ArgumentParser(
        prog="calendarhub",
        description="CalendarHub - aggregate ICS calendar feeds into one colored event list",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s refresh                   # Fetch every feed and print the merged list
  %(prog)s refresh --json            # Same, as JSON
  %(prog)s cached                    # Print the occurrences stored by the last refresh
  %(prog)s status                    # Show the last sync status of every feed
  %(prog)s --config my.yaml refresh  # Use an explicit configuration file
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show version information"
    )

    parser.add_argument(
        "--config", type=Path, dest="config_path", help="Path to a YAML configuration file"
    )

    # Logging arguments
    logging_group = parser.add_argument_group("logging", "Logging configuration options")

    logging_group.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        help="Set both console and file log levels",
    )

    logging_group.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging and detailed output"
    )

    logging_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only show errors on console (sets console level to ERROR)",
    )

    logging_group.add_argument("--log-dir", type=Path, help="Write log files to this directory")

    logging_group.add_argument(
        "--no-log-colors", action="store_true", help="Disable colored console output"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    refresh_parser = subparsers.add_parser(
        "refresh", help="Fetch, expand and categorize every enabled feed"
    )
    refresh_parser.add_argument("--json", action="store_true", help="Print occurrences as JSON")
    refresh_parser.add_argument(
        "--no-cache", action="store_true", help="Do not write the result to the cache"
    )

    cached_parser = subparsers.add_parser(
        "cached", help="Print the occurrences stored by the last refresh"
    )
    cached_parser.add_argument("--json", action="store_true", help="Print occurrences as JSON")

    subparsers.add_parser("status", help="Show the last sync status of every feed")

    return parser
