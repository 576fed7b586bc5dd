"""Command line entry point.

``list`` prints every file of a folder matching the given filters as one
JSON object per line; ``query`` prints only the Drive query string.
"""

import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

from .client.drive_api import GoogleDriveAPIClient
from .config import Settings
from .filtering import build_filter, resolve_date_range
from .listing import DirectoryLister
from .utils.errors import ConnectorError
from .utils.logging import configure_logging
from .utils.retry import RetryConfig, RetryExecutor


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m google_drive_connector",
        description="List Google Drive folder contents through the retry layer.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("list", "List matching files as JSON lines"),
        ("query", "Print the Drive query string"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--directory", required=True, help="Folder ID")
        sub.add_argument(
            "--types",
            default="",
            help="Comma separated file types, e.g. binary,documents",
        )
        sub.add_argument("--filter", default=None, help="Extra Drive query clause")
        sub.add_argument("--date-range", default="none", help="Modification date range")
        sub.add_argument("--start-date", default=None, help="Start of a custom range")
        sub.add_argument("--end-date", default=None, help="End of a custom range")

    return parser


async def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = build_parser().parse_args(argv)
    settings = settings or Settings()
    logger = configure_logging(settings.logging, settings.service_name)

    try:
        date_range = resolve_date_range(args.date_range, None, args.start_date, args.end_date)
        expression = build_filter(args.directory, args.types, args.filter, date_range)
    except ConnectorError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        return 2

    if args.command == "query":
        print(expression.render())
        return 0

    executor = RetryExecutor(RetryConfig.from_settings(settings.retry))
    try:
        async with GoogleDriveAPIClient(settings.auth, settings.google_api) as drive_client:
            lister = DirectoryLister(drive_client, executor)
            files = await lister.list_by_types(expression)
    except ConnectorError as e:
        logger.error("Listing failed", **e.to_dict())
        print(f"Listing failed: {e}", file=sys.stderr)
        return 1

    for item in files:
        print(json.dumps(item))
    return 0


def run() -> None:
    """Run the CLI with proper async context."""
    with asyncio.Runner() as runner:
        sys.exit(runner.run(main()))


if __name__ == "__main__":
    run()
